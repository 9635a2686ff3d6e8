"""Repository for Training and TrainingAttendance models."""

import logging
from datetime import date
from typing import Optional, List
from sqlalchemy import case, delete, func
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from rugby_club.exceptions import ValidationError
from rugby_club.models import Training, TrainingAttendance
from rugby_club.repositories.base_repository import BaseRepository
from rugby_club.utils.validators import FieldValidators

logger = logging.getLogger(__name__)


class TrainingRepository(BaseRepository[Training]):
    """Repository for training sessions and per-player attendance."""

    def __init__(self, db: AsyncSession):
        super().__init__(db, Training)

    def _default_order(self) -> list:
        return [Training.date, Training.id]

    async def find_by_squad(self, squad_id: int) -> List[Training]:
        stmt = select(Training).where(Training.squad_id == squad_id).order_by(Training.date, Training.id)
        return await self._scalars(stmt)

    async def find_by_focus_area(self, focus_area: str) -> List[Training]:
        """Find sessions whose focus area contains the text, ignoring case."""
        stmt = (
            select(Training)
            .where(Training.focus_area.icontains(focus_area, autoescape=True))
            .order_by(Training.date, Training.id)
        )
        return await self._scalars(stmt)

    async def find_training_after_date(self, on_or_after: date) -> List[Training]:
        return await self._find_in_date_range(Training.date, start=on_or_after)

    async def find_training_before_date(self, on_or_before: date) -> List[Training]:
        return await self._find_in_date_range(Training.date, end=on_or_before)

    async def find_training_between_dates(self, start_date: date, end_date: date) -> List[Training]:
        if not FieldValidators.validate_date_range(start_date, end_date):
            return []
        return await self._find_in_date_range(Training.date, start=start_date, end=end_date)

    async def find_upcoming_training(self) -> List[Training]:
        """Sessions from today onwards, soonest first."""
        return await self._find_in_date_range(Training.date, start=date.today())

    async def find_recent_training(self, limit: Optional[int] = None) -> List[Training]:
        """Sessions before today, most recent first."""
        stmt = (
            select(Training)
            .where(Training.date < date.today())
            .order_by(Training.date.desc(), Training.id.desc())
        )
        if limit is not None:
            stmt = stmt.limit(limit)
        return await self._scalars(stmt)

    # Attendance

    async def add_attendance(self, attendance: TrainingAttendance) -> bool:
        """Record a player's attendance for a session.

        Raises ConflictError if the player already has a record for it.
        """
        missing = [key for key in ('training_id', 'player_id') if getattr(attendance, key) is None]
        if missing:
            raise ValidationError(
                f"Invalid TrainingAttendance: missing {', '.join(missing)}",
                details={"missing": missing, "invalid": {}},
            )
        attendance.id = None
        self.db.add(attendance)
        await self._commit(
            f"add attendance for Player {attendance.player_id} in Training {attendance.training_id}"
        )
        return True

    async def update_attendance(self, attendance: TrainingAttendance) -> bool:
        """Overwrite the record for (training, player). False if none exists."""
        row = await self.get_player_attendance(attendance.training_id, attendance.player_id)
        if row is None:
            return False
        if row is not attendance:
            if attendance.present is not None:
                row.present = attendance.present
            if attendance.player_notes is not None:
                row.player_notes = attendance.player_notes
        await self._commit(
            f"update attendance for Player {attendance.player_id} in Training {attendance.training_id}"
        )
        return True

    async def get_attendance_records(self, training_id: int) -> List[TrainingAttendance]:
        stmt = (
            select(TrainingAttendance)
            .where(TrainingAttendance.training_id == training_id)
            .order_by(TrainingAttendance.player_id)
        )
        return await self._scalars(stmt)

    async def get_attendance_by_player(self, player_id: int) -> List[TrainingAttendance]:
        stmt = (
            select(TrainingAttendance)
            .join(Training, Training.id == TrainingAttendance.training_id)
            .where(TrainingAttendance.player_id == player_id)
            .order_by(Training.date, Training.id)
        )
        return await self._scalars(stmt)

    async def get_player_attendance(self, training_id: int, player_id: int) -> Optional[TrainingAttendance]:
        stmt = select(TrainingAttendance).where(
            TrainingAttendance.training_id == training_id,
            TrainingAttendance.player_id == player_id,
        )
        return await self._one_or_none(stmt)

    async def get_attendance_rate(self, training_id: int) -> float:
        """Percentage of recorded players present at a session, 0.0 with no records."""
        return await self._attendance_rate(TrainingAttendance.training_id == training_id)

    async def get_player_attendance_rate(self, player_id: int) -> float:
        """Percentage of a player's recorded sessions attended, 0.0 with no records."""
        return await self._attendance_rate(TrainingAttendance.player_id == player_id)

    async def _attendance_rate(self, condition) -> float:
        stmt = select(
            func.count(TrainingAttendance.id),
            func.sum(case((TrainingAttendance.present == True, 1), else_=0)),
        ).where(condition)
        result = await self.execute(stmt)
        total, present = result.one()
        if not total:
            return 0.0
        return round((present or 0) / total * 100.0, 2)

    async def _delete_dependents(self, entity: Training) -> None:
        await self.execute(delete(TrainingAttendance).where(TrainingAttendance.training_id == entity.id))
