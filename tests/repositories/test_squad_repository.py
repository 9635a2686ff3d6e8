import pytest
from sqlalchemy.ext.asyncio import AsyncSession
from rugby_club.exceptions import ValidationError
from rugby_club.models import GameStats, TrainingAttendance
from rugby_club.repositories import (
    CoachRepository, GameRepository, PlayerRepository, SquadRepository, TrainingRepository
)


class TestSquadRepository:
    """Test SquadRepository specialized methods"""

    @pytest.fixture
    async def squad_repo(self, db_session: AsyncSession):
        return SquadRepository(db_session)

    @pytest.mark.asyncio
    async def test_save_requires_age_grade(self, squad_repo, squad_factory):
        """Test age grade is required"""
        with pytest.raises(ValidationError) as exc_info:
            await squad_repo.save(squad_factory(age_grade=None))
        assert exc_info.value.details["missing"] == ["age_grade"]

    @pytest.mark.asyncio
    async def test_find_by_name_and_age_grade(self, squad_repo, squad_factory):
        """Test squad lookups by name and age grade"""
        u16 = await squad_repo.save(squad_factory(name="Under 16s", age_grade="U16"))
        u18 = await squad_repo.save(squad_factory(name="Under 18s", age_grade="U18"))

        assert [s.id for s in await squad_repo.find_by_name("under")] == [u16, u18]
        assert [s.id for s in await squad_repo.find_by_age_grade("U18")] == [u18]
        assert await squad_repo.find_by_age_grade("Senior") == []

    @pytest.mark.asyncio
    async def test_player_membership(self, db_session: AsyncSession, squad_repo, squad_factory, player_factory):
        """Test adding and removing players through the squad"""
        squad_id = await squad_repo.save(squad_factory())
        other_id = await squad_repo.save(squad_factory(name="Seniors", age_grade="Senior"))
        player_id = await PlayerRepository(db_session).save(player_factory())

        assert await squad_repo.add_player(squad_id, player_id) is True
        assert await squad_repo.get_player_count(squad_id) == 1
        assert (await squad_repo.find_by_player(player_id)).id == squad_id

        assert await squad_repo.remove_player(other_id, player_id) is False
        assert await squad_repo.remove_player(squad_id, player_id) is True
        assert await squad_repo.get_player_count(squad_id) == 0
        assert await squad_repo.find_by_player(player_id) is None

    @pytest.mark.asyncio
    async def test_coach_membership(self, db_session: AsyncSession, squad_repo, squad_factory, coach_factory):
        """Test adding and removing coaches through the squad"""
        squad_id = await squad_repo.save(squad_factory())
        coach_id = await CoachRepository(db_session).save(coach_factory())

        assert await squad_repo.add_coach(squad_id, coach_id) is True
        assert await squad_repo.get_coach_count(squad_id) == 1
        assert [s.id for s in await squad_repo.find_by_coach(coach_id)] == [squad_id]

        assert await squad_repo.remove_coach(squad_id, coach_id) is True
        assert await squad_repo.get_coach_count(squad_id) == 0
        assert await squad_repo.remove_coach(squad_id, coach_id) is False

    @pytest.mark.asyncio
    async def test_counts_for_empty_squad(self, squad_repo, squad_factory):
        """Test counts are zero for a squad with nobody in it"""
        squad_id = await squad_repo.save(squad_factory())
        assert await squad_repo.get_player_count(squad_id) == 0
        assert await squad_repo.get_coach_count(squad_id) == 0

    @pytest.mark.asyncio
    async def test_delete_cascades(
        self, db_session: AsyncSession, squad_repo, squad_factory, player_factory,
        coach_factory, game_factory, training_factory
    ):
        """Test deleting a squad unassigns players and removes what it owns"""
        player_repo = PlayerRepository(db_session)
        coach_repo = CoachRepository(db_session)
        game_repo = GameRepository(db_session)
        training_repo = TrainingRepository(db_session)

        squad_id = await squad_repo.save(squad_factory())
        player_id = await player_repo.save(player_factory(squad_id=squad_id))
        coach_id = await coach_repo.save(coach_factory())
        await squad_repo.add_coach(squad_id, coach_id)
        game_id = await game_repo.save(game_factory(squad_id=squad_id))
        training_id = await training_repo.save(training_factory(squad_id=squad_id))
        await game_repo.add_game_stats(GameStats(game_id=game_id, player_id=player_id, tackles=9))
        await training_repo.add_attendance(
            TrainingAttendance(training_id=training_id, player_id=player_id, present=True)
        )

        assert await squad_repo.delete(squad_id) is True

        assert await squad_repo.find_by_id(squad_id) is None
        player = await player_repo.find_by_id(player_id)
        assert player is not None
        assert player.squad_id is None
        assert await coach_repo.find_by_id(coach_id) is not None
        assert await coach_repo.find_by_squad(squad_id) == []
        assert await game_repo.find_by_id(game_id) is None
        assert await game_repo.get_stats_by_player(player_id) == []
        assert await training_repo.find_by_id(training_id) is None
        assert await training_repo.get_attendance_by_player(player_id) == []
