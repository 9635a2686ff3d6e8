"""Repository for Announcement model."""

from datetime import date, datetime
from typing import Optional, List
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from rugby_club.models import Announcement
from rugby_club.repositories.base_repository import BaseRepository
from rugby_club.utils.validators import FieldValidators


class AnnouncementRepository(BaseRepository[Announcement]):
    """Repository for Announcement operations. Lists are newest first."""

    def __init__(self, db: AsyncSession):
        super().__init__(db, Announcement)

    def _default_order(self) -> list:
        return [Announcement.sent_date.desc(), Announcement.id.desc()]

    async def find_by_title(self, title: str) -> List[Announcement]:
        """Find announcements whose title contains the text, ignoring case."""
        stmt = (
            select(Announcement)
            .where(Announcement.title.icontains(title, autoescape=True))
            .order_by(*self._default_order())
        )
        return await self._scalars(stmt)

    async def find_by_sent_by(self, sent_by: str) -> List[Announcement]:
        """List announcements sent by a username."""
        stmt = select(Announcement).where(Announcement.sent_by == sent_by).order_by(*self._default_order())
        return await self._scalars(stmt)

    async def find_by_recipient(self, recipient: str) -> List[Announcement]:
        stmt = (
            select(Announcement)
            .where(Announcement.recipient == recipient)
            .order_by(*self._default_order())
        )
        return await self._scalars(stmt)

    async def find_important_announcements(self) -> List[Announcement]:
        stmt = (
            select(Announcement)
            .where(Announcement.is_important == True)
            .order_by(*self._default_order())
        )
        return await self._scalars(stmt)

    async def find_announcements_after_date(self, on_or_after: date) -> List[Announcement]:
        """Announcements sent on or after the date (a date covers the whole day)."""
        return await self._find_in_date_range(Announcement.sent_date, start=on_or_after, descending=True)

    async def find_announcements_before_date(self, on_or_before: date) -> List[Announcement]:
        """Announcements sent on or before the date (a date covers the whole day)."""
        return await self._find_in_date_range(Announcement.sent_date, end=on_or_before, descending=True)

    async def find_announcements_between_dates(self, start_date: date, end_date: date) -> List[Announcement]:
        if not FieldValidators.validate_date_range(start_date, end_date):
            return []
        return await self._find_in_date_range(
            Announcement.sent_date, start=start_date, end=end_date, descending=True
        )

    async def find_recent_announcements(self, limit: Optional[int] = None) -> List[Announcement]:
        """Announcements already sent, newest first."""
        stmt = (
            select(Announcement)
            .where(Announcement.sent_date <= datetime.utcnow())
            .order_by(*self._default_order())
        )
        if limit is not None:
            stmt = stmt.limit(limit)
        return await self._scalars(stmt)
