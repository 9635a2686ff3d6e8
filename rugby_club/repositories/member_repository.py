"""Repository for Member model."""

from typing import Optional, List
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from rugby_club.models import Member
from rugby_club.repositories.base_repository import BaseRepository
from rugby_club.utils.validators import FieldValidators


class MemberRepository(BaseRepository[Member]):
    """Repository for Member operations."""

    def __init__(self, db: AsyncSession):
        super().__init__(db, Member)

    async def find_by_name(self, name: str) -> List[Member]:
        """Find members whose name contains the text, ignoring case."""
        stmt = select(Member).where(Member.name.icontains(name, autoescape=True)).order_by(Member.name, Member.id)
        return await self._scalars(stmt)

    async def find_by_email(self, email: str) -> Optional[Member]:
        """Get member by exact email."""
        stmt = select(Member).where(Member.email == email)
        return await self._one_or_none(stmt)

    async def find_by_phone(self, phone: str) -> Optional[Member]:
        """Get member by exact phone number (first match if shared)."""
        stmt = select(Member).where(Member.phone == phone).order_by(Member.id)
        return await self._first(stmt)

    def _field_errors(self, entity: Member) -> dict[str, str]:
        errors = {}
        if entity.email and not FieldValidators.validate_email(entity.email):
            errors['email'] = "Invalid email format"
        return errors
