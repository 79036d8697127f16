from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Optional, Union

from ..core.enums import AttendanceStatus
from ..users.model import UserSummary


class _Unset:
    """Marker for fields an update leaves untouched."""

    _instance: Optional["_Unset"] = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "UNSET"

    def __bool__(self) -> bool:
        return False


UNSET: Any = _Unset()


@dataclass(frozen=True)
class AttendanceRecord:
    """Domain entity: one attendance row."""

    attendance_id: int
    user_id: int
    work_date: date
    status: AttendanceStatus
    marked_by: Optional[int] = None
    clock_in: Optional[datetime] = None
    clock_out: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    user: Optional[UserSummary] = None


@dataclass(frozen=True)
class AttendanceFilter:
    user_id: Optional[int] = None
    start_date: Union[date, str, None] = None
    end_date: Union[date, str, None] = None
    status: Optional[str] = None


@dataclass(frozen=True)
class NewAttendance:
    user_id: int
    work_date: date
    status: AttendanceStatus
    marked_by: Optional[int] = None
    clock_in: Optional[datetime] = None
    clock_out: Optional[datetime] = None


@dataclass(frozen=True)
class AttendanceUpdate:
    """Partial update: UNSET keeps the stored value, None clears a clock time."""

    status: Union[str, AttendanceStatus, None, _Unset] = UNSET
    work_date: Union[date, str, None, _Unset] = UNSET
    clock_in: Union[datetime, str, None, _Unset] = UNSET
    clock_out: Union[datetime, str, None, _Unset] = UNSET

    def supplied(self) -> dict[str, Any]:
        """Fields that were explicitly set, in column order."""
        return {
            name: value
            for name, value in (
                ("status", self.status),
                ("work_date", self.work_date),
                ("clock_in", self.clock_in),
                ("clock_out", self.clock_out),
            )
            if value is not UNSET
        }
