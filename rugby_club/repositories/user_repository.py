"""Repository for User model."""

import logging
from typing import Optional, List
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from rugby_club.exceptions import AuthenticationError
from rugby_club.models import User, UserRole
from rugby_club.repositories.base_repository import BaseRepository
from rugby_club.schemas import CredentialCheck, CredentialStatus
from rugby_club.security import dummy_verify, hash_password, is_password_hash, verify_password
from rugby_club.utils.validators import FieldValidators

logger = logging.getLogger(__name__)


class UserRepository(BaseRepository[User]):
    """Repository for login accounts.

    Plain passwords are accepted through ``User.password`` and stored only as
    salted hashes in ``password_hash``.
    """

    def __init__(self, db: AsyncSession):
        super().__init__(db, User)

    async def find_by_username(self, username: str) -> Optional[User]:
        stmt = select(User).where(User.username == username)
        return await self._one_or_none(stmt)

    async def find_by_role(self, role: str) -> List[User]:
        stmt = select(User).where(User.role == role).order_by(User.username)
        return await self._scalars(stmt)

    async def find_by_member_id(self, member_id: int) -> Optional[User]:
        stmt = select(User).where(User.member_id == member_id)
        return await self._one_or_none(stmt)

    async def is_username_taken(self, username: str) -> bool:
        result = await self.execute(select(User.id).where(User.username == username))
        return result.first() is not None

    async def verify_credentials(self, username: str, password: str) -> CredentialCheck:
        """Check a username/password pair and say why it failed, if it did."""
        user = await self.find_by_username(username)
        if user is None:
            await dummy_verify()
            logger.info(f"Login rejected for unknown user {username!r}")
            return CredentialCheck(status=CredentialStatus.UNKNOWN_USER)

        if not await verify_password(password, user.password_hash):
            logger.info(f"Login rejected for {username!r}: wrong password")
            return CredentialCheck(status=CredentialStatus.WRONG_PASSWORD, user_id=user.id)

        if not user.is_active:
            logger.info(f"Login rejected for {username!r}: account disabled")
            return CredentialCheck(status=CredentialStatus.DISABLED, user_id=user.id)

        return CredentialCheck(status=CredentialStatus.OK, user_id=user.id)

    async def get_role(self, username: str) -> Optional[str]:
        """Role of an account, without checking credentials."""
        result = await self.execute(select(User.role).where(User.username == username))
        return result.scalar_one_or_none()

    async def authenticate(self, username: str, password: str) -> Optional[str]:
        """Return the user's role if the credentials are valid, None otherwise."""
        check = await self.verify_credentials(username, password)
        if not check.is_valid:
            return None
        return await self.get_role(username)

    async def login(self, username: str, password: str) -> User:
        """Return the account for valid credentials.

        Raises AuthenticationError otherwise, with the failure status in ``details``.
        """
        check = await self.verify_credentials(username, password)
        if not check.is_valid:
            raise AuthenticationError(details={"status": check.status.value})
        return await self.find_by_id(check.user_id)

    async def change_password(self, user_id: int, new_password: str) -> bool:
        """Replace a user's password. False if the user does not exist."""
        user = await self.find_by_id(user_id)
        if user is None:
            return False
        user.password = new_password
        return await self.update(user)

    async def set_active(self, user_id: int, is_active: bool) -> bool:
        """Enable or disable an account."""
        user = await self.find_by_id(user_id)
        if user is None:
            return False
        user.is_active = is_active
        return await self.update(user)

    async def _before_write(self, entity: User, source: Optional[User] = None) -> None:
        plain = (source or entity).password
        if plain:
            entity.password_hash = await hash_password(plain)
            (source or entity).password = None
            entity.password = None
        elif entity.password_hash and not is_password_hash(entity.password_hash):
            # Never let a plaintext value land in the hash column
            entity.password_hash = await hash_password(entity.password_hash)

    def _field_errors(self, entity: User) -> dict[str, str]:
        errors = {}
        if entity.username and not FieldValidators.validate_username(entity.username):
            errors['username'] = "Username must be 3-32 letters, digits, '.', '_' or '-'"
        if entity.role and not FieldValidators.validate_choice(entity.role, [r.value for r in UserRole]):
            errors['role'] = f"Unknown role {entity.role!r}"
        return errors
