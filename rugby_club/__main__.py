"""Create the schema and default accounts: ``python -m rugby_club``."""
import asyncio
import logging

from rugby_club.config import get_settings
from rugby_club.database import init_db, close_db

settings = get_settings()
logging.basicConfig(level=settings.log_level.upper())
logger = logging.getLogger(__name__)


async def main():
    logger.info(f"Initializing database at {settings.database_url}")
    try:
        await init_db()
    finally:
        await close_db()


if __name__ == "__main__":
    asyncio.run(main())
