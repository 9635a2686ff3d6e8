"""Repository for Squad model."""

import logging
from typing import Optional, List
from sqlalchemy import delete, func, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from rugby_club.models import (
    Squad, Player, Game, GameStats, Training, TrainingAttendance, coach_squad
)
from rugby_club.repositories.base_repository import BaseRepository
from rugby_club.repositories.coach_repository import CoachRepository
from rugby_club.repositories.player_repository import PlayerRepository

logger = logging.getLogger(__name__)


class SquadRepository(BaseRepository[Squad]):
    """Repository for Squad operations.

    A squad owns its player assignments, coach links, games and training
    sessions. Deleting it unassigns the players and removes the rest.
    """

    def __init__(self, db: AsyncSession):
        super().__init__(db, Squad)

    async def find_by_name(self, name: str) -> List[Squad]:
        """Find squads whose name contains the text, ignoring case."""
        stmt = select(Squad).where(Squad.name.icontains(name, autoescape=True)).order_by(Squad.name, Squad.id)
        return await self._scalars(stmt)

    async def find_by_age_grade(self, age_grade: str) -> List[Squad]:
        stmt = select(Squad).where(Squad.age_grade == age_grade).order_by(Squad.name, Squad.id)
        return await self._scalars(stmt)

    async def find_by_coach(self, coach_id: int) -> List[Squad]:
        """List squads a coach is assigned to."""
        stmt = (
            select(Squad)
            .join(coach_squad, coach_squad.c.squad_id == Squad.id)
            .where(coach_squad.c.coach_id == coach_id)
            .order_by(Squad.name, Squad.id)
        )
        return await self._scalars(stmt)

    async def find_by_player(self, player_id: int) -> Optional[Squad]:
        """Get the squad a player currently belongs to."""
        stmt = select(Squad).join(Player, Player.squad_id == Squad.id).where(Player.id == player_id)
        return await self._one_or_none(stmt)

    async def add_player(self, squad_id: int, player_id: int) -> bool:
        """Assign a player to this squad, moving them out of any other."""
        return await PlayerRepository(self.db).assign_to_squad(player_id, squad_id)

    async def remove_player(self, squad_id: int, player_id: int) -> bool:
        """Unassign a player. False unless the player is currently in this squad."""
        player = await self.db.get(Player, player_id)
        if player is None or player.squad_id != squad_id:
            return False
        return await PlayerRepository(self.db).remove_from_squad(player_id)

    async def add_coach(self, squad_id: int, coach_id: int) -> bool:
        return await CoachRepository(self.db).assign_to_squad(coach_id, squad_id)

    async def remove_coach(self, squad_id: int, coach_id: int) -> bool:
        return await CoachRepository(self.db).remove_from_squad(coach_id, squad_id)

    async def get_player_count(self, squad_id: int) -> int:
        result = await self.execute(select(func.count(Player.id)).where(Player.squad_id == squad_id))
        return result.scalar_one()

    async def get_coach_count(self, squad_id: int) -> int:
        result = await self.execute(
            select(func.count()).select_from(coach_squad).where(coach_squad.c.squad_id == squad_id)
        )
        return result.scalar_one()

    async def _delete_dependents(self, entity: Squad) -> None:
        game_ids = select(Game.id).where(Game.squad_id == entity.id)
        training_ids = select(Training.id).where(Training.squad_id == entity.id)

        await self.execute(
            update(Player).where(Player.squad_id == entity.id).values(squad_id=None)
        )
        await self.execute(delete(coach_squad).where(coach_squad.c.squad_id == entity.id))
        await self.execute(delete(GameStats).where(GameStats.game_id.in_(game_ids)))
        await self.execute(delete(Game).where(Game.squad_id == entity.id))
        await self.execute(
            delete(TrainingAttendance).where(TrainingAttendance.training_id.in_(training_ids))
        )
        await self.execute(delete(Training).where(Training.squad_id == entity.id))
        logger.debug(f"Cleared players, coaches, games and training for squad {entity.id}")
