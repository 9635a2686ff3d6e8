"""Base repository with standard CRUD operations."""

import logging
from datetime import date, datetime, time
from typing import Generic, TypeVar, Optional, List, Any
from sqlalchemy import DateTime, inspect
from sqlalchemy.exc import DBAPIError, IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from sqlalchemy.orm.exc import StaleDataError

from rugby_club.database import Base
from rugby_club.exceptions import ConflictError, StorageError, ValidationError

logger = logging.getLogger(__name__)

ModelT = TypeVar('ModelT', bound=Base)

# Columns the repository owns; never copied from caller input on update
_MANAGED_COLUMNS = {'id', 'version', 'created_at'}


class BaseRepository(Generic[ModelT]):
    """Generic repository providing standard CRUD operations.

    Lookups return None or an empty list on a miss. ``update`` and ``delete``
    return False when no row matches. Constraint failures raise
    ValidationError or ConflictError, store failures raise StorageError.
    """

    def __init__(self, db: AsyncSession, model_class: type[ModelT]):
        self.db = db
        self.model_class = model_class

    @property
    def entity_name(self) -> str:
        return self.model_class.__name__

    def _default_order(self) -> list:
        return [self.model_class.id]

    async def find_by_id(self, entity_id: int) -> Optional[ModelT]:
        """Get entity by primary key ID."""
        try:
            return await self.db.get(self.model_class, entity_id)
        except DBAPIError as e:
            raise await self._translate_error(e, f"find {self.entity_name} {entity_id}") from e

    async def find_all(self) -> List[ModelT]:
        """List every entity."""
        stmt = select(self.model_class).order_by(*self._default_order())
        return await self._scalars(stmt)

    async def list_all(self, skip: int = 0, limit: int = 100) -> List[ModelT]:
        """List all entities with pagination."""
        stmt = select(self.model_class).order_by(*self._default_order()).offset(skip).limit(limit)
        return await self._scalars(stmt)

    async def save(self, entity: ModelT) -> int:
        """Insert a new entity and return its generated ID."""
        state = inspect(entity)
        if not state.transient:
            raise ValidationError(
                f"{self.entity_name} is already persisted, use update()",
                details={"id": entity.id},
            )

        entity.id = None
        await self._before_write(entity)
        self._validate(entity)

        self.db.add(entity)
        await self._commit(f"save {self.entity_name}")
        await self.db.refresh(entity)
        logger.info(f"Saved {self.entity_name} {entity.id}")
        return entity.id

    async def update(self, entity: ModelT) -> bool:
        """Write an entity's fields over the stored row with the same ID.

        A detached or freshly built entity carrying an older ``version`` than
        the stored row is rejected with ConflictError.
        """
        if entity.id is None:
            return False
        row = await self.find_by_id(entity.id)
        if row is None:
            logger.debug(f"Update skipped, {self.entity_name} {entity.id} not found")
            return False

        if row is not entity:
            expected_version = entity.version
            if expected_version is not None and expected_version != row.version:
                logger.warning(
                    f"Stale update for {self.entity_name} {entity.id}: "
                    f"version {expected_version}, stored {row.version}"
                )
                raise ConflictError(
                    f"{self.entity_name} {entity.id} was modified by someone else",
                    details={"expected_version": expected_version, "stored_version": row.version},
                )
            self._copy_columns(entity, row)

        try:
            await self._before_write(row, source=entity)
            self._validate(row)
        except ValidationError:
            # Discard the rejected changes so a later commit cannot flush them
            self.db.expire(row)
            await self.db.refresh(row)
            raise

        await self._commit(f"update {self.entity_name} {row.id}")
        logger.debug(f"Updated {self.entity_name} {row.id} to version {row.version}")
        return True

    async def delete(self, entity_id: int) -> bool:
        """Delete entity by ID, together with the rows it owns."""
        row = await self.find_by_id(entity_id)
        if not row:
            return False

        await self._delete_dependents(row)
        await self.db.delete(row)
        await self._commit(f"delete {self.entity_name} {entity_id}")
        logger.info(f"Deleted {self.entity_name} {entity_id}")
        return True

    async def execute(self, stmt: Any) -> Any:
        """Execute raw SQLAlchemy statement."""
        try:
            return await self.db.execute(stmt)
        except DBAPIError as e:
            raise await self._translate_error(e, "execute statement") from e

    # Hooks for subclasses

    async def _before_write(self, entity: ModelT, source: Optional[ModelT] = None) -> None:
        """Adjust an entity before it is validated and written."""

    async def _delete_dependents(self, entity: ModelT) -> None:
        """Remove or detach rows that reference the entity being deleted."""

    def _field_errors(self, entity: ModelT) -> dict[str, str]:
        """Entity-specific format checks, field -> message."""
        return {}

    # Helpers

    def _required_fields(self) -> list[str]:
        required = []
        for prop in inspect(self.model_class).column_attrs:
            column = prop.columns[0]
            if column.primary_key or column.nullable:
                continue
            if column.default is not None or column.server_default is not None:
                continue
            required.append(prop.key)
        return required

    def _validate(self, entity: ModelT) -> None:
        missing = []
        for key in self._required_fields():
            value = getattr(entity, key)
            if value is None or (isinstance(value, str) and not value.strip()):
                missing.append(key)

        invalid = self._field_errors(entity)
        if missing or invalid:
            logger.warning(f"Rejected {self.entity_name}: missing={missing} invalid={list(invalid)}")
            message = f"Invalid {self.entity_name}"
            if missing:
                message += f": missing {', '.join(missing)}"
            raise ValidationError(message, details={"missing": missing, "invalid": invalid})

    def _copy_columns(self, source: ModelT, target: ModelT) -> None:
        """Copy the column values set on ``source`` onto ``target``."""
        provided = inspect(source).dict
        for prop in inspect(self.model_class).column_attrs:
            if prop.key in _MANAGED_COLUMNS or prop.key not in provided:
                continue
            setattr(target, prop.key, provided[prop.key])

    async def _scalars(self, stmt: Any) -> List[ModelT]:
        result = await self.execute(stmt)
        return result.scalars().all()

    async def _first(self, stmt: Any) -> Any:
        result = await self.execute(stmt)
        return result.scalars().first()

    async def _one_or_none(self, stmt: Any) -> Any:
        """Single result for a lookup on unique columns; more than one row is an error."""
        result = await self.execute(stmt)
        return result.scalar_one_or_none()

    async def _commit(self, action: str) -> None:
        try:
            await self.db.commit()
        except StaleDataError as e:
            await self.db.rollback()
            logger.warning(f"Concurrent modification during {action}: {e}")
            raise ConflictError(
                f"{self.entity_name} was modified or removed concurrently",
                details={"action": action},
            ) from e
        except DBAPIError as e:
            raise await self._translate_error(e, action) from e

    async def _translate_error(self, error: DBAPIError, action: str) -> Exception:
        """Roll back and map a driver error onto the application taxonomy."""
        await self.db.rollback()
        reason = str(error.orig) if error.orig is not None else str(error)

        if isinstance(error, IntegrityError):
            lowered = reason.lower()
            if "unique" in lowered or "duplicate" in lowered:
                logger.warning(f"Uniqueness conflict during {action}: {reason}")
                return ConflictError(
                    f"Cannot {action}: a matching record already exists",
                    details={"action": action, "reason": reason},
                )
            logger.warning(f"Integrity violation during {action}: {reason}")
            return ValidationError(
                f"Cannot {action}: a required field or reference is invalid",
                details={"action": action, "reason": reason},
            )

        logger.error(f"Storage failure during {action}: {reason}")
        return StorageError(
            f"Storage failure during {action}",
            details={"action": action, "reason": reason},
        )

    # Date range helpers, inclusive on both ends

    @staticmethod
    def _lower_bound(column: Any, value: date) -> Any:
        if _is_datetime_column(column) and not isinstance(value, datetime):
            value = datetime.combine(value, time.min)
        return value

    @staticmethod
    def _upper_bound(column: Any, value: date) -> Any:
        if _is_datetime_column(column) and not isinstance(value, datetime):
            value = datetime.combine(value, time.max)
        return value

    async def _find_in_date_range(
        self,
        column: Any,
        start: Optional[date] = None,
        end: Optional[date] = None,
        descending: bool = False,
    ) -> List[ModelT]:
        stmt = select(self.model_class)
        if start is not None:
            stmt = stmt.where(column >= self._lower_bound(column, start))
        if end is not None:
            stmt = stmt.where(column <= self._upper_bound(column, end))
        stmt = stmt.order_by(column.desc() if descending else column, self.model_class.id)
        return await self._scalars(stmt)


def _is_datetime_column(column: Any) -> bool:
    return isinstance(column.type, DateTime)
