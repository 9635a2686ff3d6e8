"""Repository for Player model."""

import logging
from typing import Optional, List
from sqlalchemy import and_, delete, or_
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from sqlalchemy.orm import contains_eager
from rugby_club.models import Player, Member, Squad, GameStats, TrainingAttendance
from rugby_club.repositories.base_repository import BaseRepository

logger = logging.getLogger(__name__)


class PlayerRepository(BaseRepository[Player]):
    """Repository for Player operations."""

    def __init__(self, db: AsyncSession):
        super().__init__(db, Player)

    async def find_by_member_id(self, member_id: int) -> Optional[Player]:
        """Get the player record backed by a member."""
        stmt = select(Player).where(Player.member_id == member_id)
        return await self._one_or_none(stmt)

    async def find_by_name(self, name: str) -> List[Player]:
        """Find players whose name contains the text, ignoring case."""
        stmt = select(Player).where(Player.name.icontains(name, autoescape=True)).order_by(Player.name, Player.id)
        return await self._scalars(stmt)

    async def find_by_squad(self, squad_id: int) -> List[Player]:
        """List players currently assigned to a squad."""
        stmt = select(Player).where(Player.squad_id == squad_id).order_by(Player.name, Player.id)
        return await self._scalars(stmt)

    async def find_by_position(self, position: str) -> List[Player]:
        """List players with the exact position."""
        stmt = select(Player).where(Player.position == position).order_by(Player.name, Player.id)
        return await self._scalars(stmt)

    async def find_by_age_grade(self, age_grade: str) -> List[Player]:
        """List players in an age grade.

        A player without their own age grade falls back to their squad's.
        """
        stmt = (
            select(Player)
            .outerjoin(Squad, Player.squad_id == Squad.id)
            .where(or_(
                Player.age_grade == age_grade,
                and_(Player.age_grade.is_(None), Squad.age_grade == age_grade),
            ))
            .order_by(Player.name, Player.id)
        )
        return await self._scalars(stmt)

    async def assign_to_squad(self, player_id: int, squad_id: int) -> bool:
        """Move a player into a squad, replacing any previous assignment."""
        player = await self.find_by_id(player_id)
        if player is None or await self.db.get(Squad, squad_id) is None:
            return False
        player.squad_id = squad_id
        await self._commit(f"assign Player {player_id} to Squad {squad_id}")
        logger.info(f"Player {player_id} assigned to squad {squad_id}")
        return True

    async def remove_from_squad(self, player_id: int) -> bool:
        """Clear a player's squad. False if the player has none."""
        player = await self.find_by_id(player_id)
        if player is None or player.squad_id is None:
            return False
        previous = player.squad_id
        player.squad_id = None
        await self._commit(f"remove Player {player_id} from squad")
        logger.info(f"Player {player_id} removed from squad {previous}")
        return True

    async def set_emergency_contact(self, player_id: int, emergency_contact_id: int) -> bool:
        """Point a player's emergency contact at a member."""
        player = await self.find_by_id(player_id)
        if player is None or await self.db.get(Member, emergency_contact_id) is None:
            return False
        player.emergency_contact_id = emergency_contact_id
        await self._commit(f"set emergency contact for Player {player_id}")
        return True

    async def find_players_with_stats_by_game(self, game_id: int) -> List[Player]:
        """Players with a stats row in the game; ``game_stats`` holds only that row."""
        stmt = (
            select(Player)
            .join(GameStats, GameStats.player_id == Player.id)
            .where(GameStats.game_id == game_id)
            .options(contains_eager(Player.game_stats))
            .order_by(Player.name, Player.id)
            .execution_options(populate_existing=True)
        )
        result = await self.execute(stmt)
        return result.unique().scalars().all()

    async def find_players_with_attendance_by_training(self, training_id: int) -> List[Player]:
        """Players with an attendance row for the session; ``attendance_records`` holds only that row."""
        stmt = (
            select(Player)
            .join(TrainingAttendance, TrainingAttendance.player_id == Player.id)
            .where(TrainingAttendance.training_id == training_id)
            .options(contains_eager(Player.attendance_records))
            .order_by(Player.name, Player.id)
            .execution_options(populate_existing=True)
        )
        result = await self.execute(stmt)
        return result.unique().scalars().all()

    async def _delete_dependents(self, entity: Player) -> None:
        await self.execute(delete(GameStats).where(GameStats.player_id == entity.id))
        await self.execute(delete(TrainingAttendance).where(TrainingAttendance.player_id == entity.id))
