"""Password hashing for stored user credentials.

Hashes are bcrypt, produced and checked through a passlib ``CryptContext``.
bcrypt is CPU bound, so the async helpers run it in a worker thread.
"""

import asyncio
import logging
from functools import lru_cache
from typing import Optional

from passlib.context import CryptContext

from rugby_club.config import get_settings

logger = logging.getLogger(__name__)


@lru_cache()
def get_pwd_context() -> CryptContext:
    return CryptContext(
        schemes=["bcrypt"],
        deprecated="auto",
        bcrypt__rounds=get_settings().bcrypt_rounds,
    )


def is_password_hash(value: Optional[str]) -> bool:
    """Whether a value is a hash the context recognises"""
    if not value:
        return False
    return get_pwd_context().identify(value) is not None


def _verify(password: str, stored_hash: Optional[str]) -> bool:
    if not is_password_hash(stored_hash):
        if stored_hash:
            logger.warning("Stored password hash is not in a recognised format")
        get_pwd_context().dummy_verify()
        return False
    return get_pwd_context().verify(password, stored_hash)


async def hash_password(password: str) -> str:
    """Hash a plain password for storage."""
    return await asyncio.to_thread(get_pwd_context().hash, password)


async def verify_password(password: str, stored_hash: Optional[str]) -> bool:
    """Check a plain password against a stored hash."""
    return await asyncio.to_thread(_verify, password, stored_hash)


async def dummy_verify() -> None:
    """Spend the time of a real verification, for usernames that do not exist."""
    await asyncio.to_thread(get_pwd_context().dummy_verify)
