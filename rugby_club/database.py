from sqlalchemy.ext.asyncio import create_async_engine, AsyncEngine, AsyncSession, async_sessionmaker
from sqlalchemy.orm import declarative_base
from sqlalchemy import event, select, func
from rugby_club.config import get_settings
import logging

logger = logging.getLogger(__name__)
settings = get_settings()


def _engine_options(database_url: str) -> dict:
    """Pool options for the configured backend.

    SQLite drivers pick their own pool class and reject sizing arguments.
    """
    if database_url.startswith("sqlite"):
        return {}
    return {
        "pool_pre_ping": True,  # Validate connections before use
        "pool_recycle": 3600,   # Recycle connections every hour
        "pool_size": 10,
        "max_overflow": 10,
    }


def enable_sqlite_foreign_keys(async_engine: AsyncEngine) -> None:
    """Turn on foreign key enforcement for every new SQLite connection"""

    @event.listens_for(async_engine.sync_engine, "connect")
    def _set_sqlite_pragma(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


engine = create_async_engine(
    settings.database_url,
    echo=settings.db_echo,
    future=True,
    **_engine_options(settings.database_url),
)
if settings.is_sqlite():
    enable_sqlite_foreign_keys(engine)

AsyncSessionLocal = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

Base = declarative_base()


async def get_db():
    """Yield a database session"""
    async with AsyncSessionLocal() as session:
        yield session


async def seed_default_users(session: AsyncSession) -> int:
    """Create the default Secretary and Coach accounts on an empty user table.

    Returns the number of accounts created. An account whose password is not
    configured is skipped.
    """
    from rugby_club.models import Member, Coach, User, UserRole
    from rugby_club.repositories import MemberRepository, CoachRepository, UserRepository

    user_count = (await session.execute(select(func.count(User.id)))).scalar_one()
    if user_count:
        logger.debug(f"User table holds {user_count} rows, skipping default accounts")
        return 0

    member_repo = MemberRepository(session)
    coach_repo = CoachRepository(session)
    user_repo = UserRepository(session)
    created = 0

    if settings.default_admin_password:
        admin_member_id = await member_repo.save(Member(
            name="Admin User",
            email="admin@simplyrugby.org",
            phone="12345678901",
            address="Simply Rugby Club, Main Street",
        ))
        await user_repo.save(User(
            username="admin",
            password=settings.default_admin_password,
            role=UserRole.SECRETARY.value,
            member_id=admin_member_id,
        ))
        created += 1
    else:
        logger.warning("DEFAULT_ADMIN_PASSWORD is not set, default secretary account not created")

    if settings.default_coach_password:
        coach_member_id = await member_repo.save(Member(
            name="Coach User",
            email="coach@simplyrugby.org",
            phone="12345678902",
            address="Simply Rugby Club, Main Street",
        ))
        await coach_repo.save(Coach(
            name="Coach User",
            member_id=coach_member_id,
            qualifications="Level 2 Rugby Coaching Certificate",
        ))
        await user_repo.save(User(
            username="coach",
            password=settings.default_coach_password,
            role=UserRole.COACH.value,
            member_id=coach_member_id,
        ))
        created += 1
    else:
        logger.warning("DEFAULT_COACH_PASSWORD is not set, default coach account not created")

    if created:
        logger.info(f"Created {created} default account(s)")
    return created


async def init_db():
    """Initialize database tables"""
    # Register models on Base.metadata
    import rugby_club.models  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    if settings.seed_default_users:
        async with get_db_with_retry() as session:
            await seed_default_users(session)

    logger.info("Database initialized successfully")


async def close_db():
    """Close database connection"""
    await engine.dispose()


class AsyncSessionWithRetry:
    """
    Async context manager that wraps AsyncSessionLocal with retry logic
    for handling transient connection errors.
    """

    def __init__(self, max_retries=3, initial_delay=0.1, backoff_factor=2.0, session_factory=None):
        self.session_factory = session_factory or AsyncSessionLocal
        self.max_retries = max_retries
        self.initial_delay = initial_delay
        self.backoff_factor = backoff_factor
        self.session = None

    async def __aenter__(self):
        from rugby_club.utils import retry_on_connection_error

        async def open_session():
            session = self.session_factory()
            try:
                # Touch the connection so a dead backend fails here, inside the retry
                await session.connection()
            except Exception:
                await session.close()
                raise
            return session

        self.session = await retry_on_connection_error(
            open_session,
            max_retries=self.max_retries,
            initial_delay=self.initial_delay,
            backoff_factor=self.backoff_factor,
        )
        return self.session

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        if self.session is not None:
            await self.session.close()


def get_db_with_retry(max_retries=None, initial_delay=0.1, backoff_factor=2.0):
    """
    Get a database session with automatic retry on connection errors.

    Args:
        max_retries: Number of retries for connection errors (defaults to DB_MAX_RETRIES)
        initial_delay: Initial delay in seconds before retry
        backoff_factor: Multiply delay by this factor for each retry

    Usage:
        async with get_db_with_retry() as session:
            players = await PlayerRepository(session).find_all()
    """
    if max_retries is None:
        max_retries = settings.db_max_retries
    return AsyncSessionWithRetry(
        max_retries=max_retries,
        initial_delay=initial_delay,
        backoff_factor=backoff_factor,
    )
