from __future__ import annotations

from datetime import date
from typing import Optional, Protocol, Sequence

from ..core.enums import AttendanceStatus
from .model import AttendanceFilter, AttendanceRecord, AttendanceUpdate, NewAttendance


class AttendanceRepository(Protocol):
    """Storage interface for attendance rows.

    Dates passed in are already calendar dates. Listings are ordered by
    work date, then creation time, newest first.
    """

    def get_by_id(self, attendance_id: int) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def list_all(self, filters: AttendanceFilter) -> Sequence[AttendanceRecord]:
        """Rows joined with the owner's display fields."""

        raise NotImplementedError

    def list_for_user(
        self,
        user_id: int,
        *,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> Sequence[AttendanceRecord]:
        raise NotImplementedError

    def exists_for_user_on_date(self, user_id: int, work_date: date) -> bool:
        raise NotImplementedError

    def get_for_user_and_date(self, user_id: int, work_date: date) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def insert(self, new: NewAttendance) -> AttendanceRecord:
        """Raises ConstraintViolation if (user_id, work_date) is already taken."""

        raise NotImplementedError

    def update(self, attendance_id: int, changes: AttendanceUpdate) -> Optional[AttendanceRecord]:
        """Merge supplied fields; None when the row no longer exists."""

        raise NotImplementedError

    def delete(self, attendance_id: int) -> Optional[int]:
        raise NotImplementedError

    def count_by_status(
        self,
        user_id: int,
        *,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> dict[AttendanceStatus, int]:
        raise NotImplementedError
