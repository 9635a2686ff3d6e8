import pytest
import os
from typing import AsyncGenerator
from datetime import date, datetime
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.pool import StaticPool

# Test settings must be in place before rugby_club reads its configuration
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.setdefault("SEED_DEFAULT_USERS", "false")

# Import models and base
from rugby_club.database import Base, enable_sqlite_foreign_keys
from rugby_club.models import (
    Member, Player, Coach, Squad, Game, GameStats, Training,
    TrainingAttendance, Announcement, User, UserRole
)


@pytest.fixture
async def test_engine():
    """Create a test database engine using in-memory SQLite"""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        echo=False,
        future=True,
        poolclass=StaticPool,
        connect_args={"timeout": 30}
    )
    enable_sqlite_foreign_keys(engine)

    # Create all tables
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    # Clean up
    await engine.dispose()


@pytest.fixture
async def db_session(test_engine) -> AsyncGenerator[AsyncSession, None]:
    """Create a test database session"""
    async_session = async_sessionmaker(
        test_engine,
        class_=AsyncSession,
        expire_on_commit=False
    )

    async with async_session() as session:
        yield session
        await session.rollback()


@pytest.fixture
def session_factory(test_engine):
    """Independent sessions on the same database, for concurrent-writer tests"""
    return async_sessionmaker(test_engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
def member_factory():
    """Factory for creating member objects"""
    def create(
        name: str = "Test Member",
        email: str = None,
        phone: str = None,
        date_of_birth: date = None,
        address: str = None
    ) -> Member:
        return Member(
            name=name,
            email=email,
            phone=phone,
            date_of_birth=date_of_birth,
            address=address
        )
    return create


@pytest.fixture
def player_factory():
    """Factory for creating player objects"""
    def create(
        name: str = "Test Player",
        position: str = "Hooker",
        age_grade: str = "U18",
        member_id: int = None,
        squad_id: int = None
    ) -> Player:
        return Player(
            name=name,
            position=position,
            age_grade=age_grade,
            member_id=member_id,
            squad_id=squad_id
        )
    return create


@pytest.fixture
def coach_factory():
    """Factory for creating coach objects"""
    def create(
        name: str = "Test Coach",
        qualifications: str = "Level 2 Rugby Coaching Certificate",
        member_id: int = None
    ) -> Coach:
        return Coach(name=name, qualifications=qualifications, member_id=member_id)
    return create


@pytest.fixture
def squad_factory():
    """Factory for creating squad objects"""
    def create(name: str = "Under 18s", age_grade: str = "U18") -> Squad:
        return Squad(name=name, age_grade=age_grade)
    return create


@pytest.fixture
def game_factory():
    """Factory for creating game objects"""
    def create(
        squad_id: int = 1,
        opponent: str = "Harlequins Juniors",
        game_date: date = None,
        final_score: str = None,
        venue: str = "Home"
    ) -> Game:
        if game_date is None:
            game_date = date.today()
        return Game(
            squad_id=squad_id,
            opponent=opponent,
            date=game_date,
            final_score=final_score,
            venue=venue
        )
    return create


@pytest.fixture
def training_factory():
    """Factory for creating training objects"""
    def create(
        squad_id: int = 1,
        training_date: date = None,
        focus_area: str = "Scrummaging",
        coach_notes: str = None
    ) -> Training:
        if training_date is None:
            training_date = date.today()
        return Training(
            squad_id=squad_id,
            date=training_date,
            focus_area=focus_area,
            coach_notes=coach_notes
        )
    return create


@pytest.fixture
def announcement_factory():
    """Factory for creating announcement objects"""
    def create(
        title: str = "Training cancelled",
        content: str = "Pitch is waterlogged",
        sent_by: str = "admin",
        recipient: str = "All Members",
        is_important: bool = False,
        sent_date: datetime = None
    ) -> Announcement:
        if sent_date is None:
            sent_date = datetime.utcnow()
        return Announcement(
            title=title,
            content=content,
            sent_by=sent_by,
            recipient=recipient,
            is_important=is_important,
            sent_date=sent_date
        )
    return create


@pytest.fixture
def user_factory():
    """Factory for creating user objects"""
    def create(
        username: str = "testuser",
        password: str = "s3cret-pass",
        role: str = UserRole.COACH.value,
        member_id: int = None
    ) -> User:
        return User(username=username, password=password, role=role, member_id=member_id)
    return create


# Fixtures for configuration
@pytest.fixture
def test_settings():
    """Test settings fixture"""
    from rugby_club.config import Settings

    return Settings(
        database_url="sqlite+aiosqlite:///:memory:",
        bcrypt_rounds=4,
        seed_default_users=False,
        log_level="DEBUG",
    )
