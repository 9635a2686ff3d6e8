import pytest
from datetime import date, datetime, timedelta
from sqlalchemy.ext.asyncio import AsyncSession
from rugby_club.exceptions import ValidationError
from rugby_club.repositories import AnnouncementRepository


class TestAnnouncementRepository:
    """Test AnnouncementRepository specialized methods"""

    @pytest.fixture
    async def announcement_repo(self, db_session: AsyncSession):
        return AnnouncementRepository(db_session)

    @pytest.mark.asyncio
    async def test_sent_date_defaults_to_now(self, announcement_repo):
        """Test an announcement without a sent date is stamped on save"""
        from rugby_club.models import Announcement

        before = datetime.utcnow()
        announcement_id = await announcement_repo.save(Announcement(title="Kit day", sent_by="admin"))

        saved = await announcement_repo.find_by_id(announcement_id)
        assert saved.sent_date >= before
        assert saved.is_important is False

    @pytest.mark.asyncio
    async def test_save_requires_sender(self, announcement_repo, announcement_factory):
        """Test sender is required"""
        with pytest.raises(ValidationError):
            await announcement_repo.save(announcement_factory(sent_by=None))

    @pytest.mark.asyncio
    async def test_lookups(self, announcement_repo, announcement_factory):
        """Test title, sender, recipient and importance lookups"""
        cancelled = await announcement_repo.save(announcement_factory(
            title="Training cancelled", sent_by="coach", recipient="Under 18s",
            sent_date=datetime(2024, 10, 1, 18, 0)
        ))
        agm = await announcement_repo.save(announcement_factory(
            title="AGM reminder", sent_by="admin", is_important=True,
            sent_date=datetime(2024, 10, 3, 9, 0)
        ))

        assert [a.id for a in await announcement_repo.find_by_title("cancel")] == [cancelled]
        assert [a.id for a in await announcement_repo.find_by_sent_by("admin")] == [agm]
        assert [a.id for a in await announcement_repo.find_by_recipient("Under 18s")] == [cancelled]
        assert [a.id for a in await announcement_repo.find_important_announcements()] == [agm]
        assert [a.id for a in await announcement_repo.find_all()] == [agm, cancelled]

    @pytest.mark.asyncio
    async def test_date_queries_cover_whole_day(self, announcement_repo, announcement_factory):
        """Test a plain date matches announcements at any time that day"""
        morning = await announcement_repo.save(announcement_factory(sent_date=datetime(2024, 10, 1, 8, 30)))
        evening = await announcement_repo.save(announcement_factory(sent_date=datetime(2024, 10, 1, 21, 15)))
        next_day = await announcement_repo.save(announcement_factory(sent_date=datetime(2024, 10, 2, 7, 0)))

        on_first = await announcement_repo.find_announcements_between_dates(date(2024, 10, 1), date(2024, 10, 1))
        assert [a.id for a in on_first] == [evening, morning]
        before = await announcement_repo.find_announcements_before_date(date(2024, 10, 1))
        assert [a.id for a in before] == [evening, morning]
        after = await announcement_repo.find_announcements_after_date(date(2024, 10, 2))
        assert [a.id for a in after] == [next_day]
        assert await announcement_repo.find_announcements_between_dates(date(2024, 10, 2), date(2024, 10, 1)) == []

    @pytest.mark.asyncio
    async def test_recent_excludes_scheduled(self, announcement_repo, announcement_factory):
        """Test recent announcements are already sent and newest first"""
        now = datetime.utcnow()
        older = await announcement_repo.save(announcement_factory(sent_date=now - timedelta(days=2)))
        newer = await announcement_repo.save(announcement_factory(sent_date=now - timedelta(hours=1)))
        await announcement_repo.save(announcement_factory(sent_date=now + timedelta(days=1)))

        assert [a.id for a in await announcement_repo.find_recent_announcements()] == [newer, older]
        assert [a.id for a in await announcement_repo.find_recent_announcements(limit=1)] == [newer]
