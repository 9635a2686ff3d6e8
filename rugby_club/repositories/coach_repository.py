"""Repository for Coach model."""

import logging
from typing import Optional, List
from sqlalchemy import delete, insert
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from rugby_club.models import Coach, Squad, coach_squad
from rugby_club.repositories.base_repository import BaseRepository

logger = logging.getLogger(__name__)


class CoachRepository(BaseRepository[Coach]):
    """Repository for Coach operations."""

    def __init__(self, db: AsyncSession):
        super().__init__(db, Coach)

    async def find_by_member_id(self, member_id: int) -> Optional[Coach]:
        """Get the coach record backed by a member."""
        stmt = select(Coach).where(Coach.member_id == member_id)
        return await self._one_or_none(stmt)

    async def find_by_name(self, name: str) -> List[Coach]:
        """Find coaches whose name contains the text, ignoring case."""
        stmt = select(Coach).where(Coach.name.icontains(name, autoescape=True)).order_by(Coach.name, Coach.id)
        return await self._scalars(stmt)

    async def find_by_squad(self, squad_id: int) -> List[Coach]:
        """List coaches assigned to a squad."""
        stmt = (
            select(Coach)
            .join(coach_squad, coach_squad.c.coach_id == Coach.id)
            .where(coach_squad.c.squad_id == squad_id)
            .order_by(Coach.name, Coach.id)
        )
        return await self._scalars(stmt)

    async def find_by_qualification(self, qualification: str) -> List[Coach]:
        """Find coaches whose qualifications mention the text, ignoring case."""
        stmt = (
            select(Coach)
            .where(Coach.qualifications.icontains(qualification, autoescape=True))
            .order_by(Coach.name, Coach.id)
        )
        return await self._scalars(stmt)

    async def is_assigned(self, coach_id: int, squad_id: int) -> bool:
        stmt = select(coach_squad.c.coach_id).where(
            coach_squad.c.coach_id == coach_id,
            coach_squad.c.squad_id == squad_id,
        )
        result = await self.execute(stmt)
        return result.first() is not None

    async def assign_to_squad(self, coach_id: int, squad_id: int) -> bool:
        """Link a coach to a squad. False if either is missing or already linked."""
        if await self.find_by_id(coach_id) is None or await self.db.get(Squad, squad_id) is None:
            return False
        if await self.is_assigned(coach_id, squad_id):
            return False
        await self.execute(insert(coach_squad).values(coach_id=coach_id, squad_id=squad_id))
        await self._commit(f"assign Coach {coach_id} to Squad {squad_id}")
        logger.info(f"Coach {coach_id} assigned to squad {squad_id}")
        return True

    async def remove_from_squad(self, coach_id: int, squad_id: int) -> bool:
        """Unlink a coach from a squad. False if they were not linked."""
        result = await self.execute(
            delete(coach_squad).where(
                coach_squad.c.coach_id == coach_id,
                coach_squad.c.squad_id == squad_id,
            )
        )
        if not result.rowcount:
            return False
        await self._commit(f"remove Coach {coach_id} from Squad {squad_id}")
        logger.info(f"Coach {coach_id} removed from squad {squad_id}")
        return True

    async def _delete_dependents(self, entity: Coach) -> None:
        await self.execute(delete(coach_squad).where(coach_squad.c.coach_id == entity.id))
