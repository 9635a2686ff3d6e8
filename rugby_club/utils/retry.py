"""Retry for opening database sessions when the backend is briefly unreachable"""
import asyncio
import logging
from typing import Awaitable, Callable, TypeVar
from sqlalchemy.exc import OperationalError, InterfaceError
import asyncpg

from rugby_club.exceptions import StorageError

logger = logging.getLogger(__name__)

T = TypeVar('T')

# IntegrityError is absent: constraint failures never heal on retry
RETRYABLE_ERRORS = (
    asyncpg.exceptions.InterfaceError,
    OperationalError,
    InterfaceError,
    StorageError,
    ConnectionError,
)


def is_connection_error(exc: BaseException) -> bool:
    """Whether an exception looks like a transient connectivity failure"""
    if isinstance(exc, RETRYABLE_ERRORS):
        return True
    message = str(exc).lower()
    return "connection is closed" in message or "connection refused" in message


async def retry_on_connection_error(
    func: Callable[[], Awaitable[T]],
    max_retries: int = 3,
    initial_delay: float = 0.1,
    backoff_factor: float = 2.0,
) -> T:
    """Await ``func()``, calling it again after connection errors.

    Waits ``initial_delay`` seconds before the first retry and multiplies the
    wait by ``backoff_factor`` each time. Other errors, and the connection
    error of the last attempt, propagate unchanged.
    """
    attempts = max_retries + 1
    delay = initial_delay
    for attempt in range(1, attempts + 1):
        try:
            return await func()
        except Exception as e:
            if attempt == attempts or not is_connection_error(e):
                raise
            logger.warning(f"Database unreachable (attempt {attempt}/{attempts}): {e}; retrying in {delay}s")
            await asyncio.sleep(delay)
            delay *= backoff_factor
