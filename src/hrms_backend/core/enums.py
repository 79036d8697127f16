from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """User role used for authorization checks."""

    ADMIN = "admin"
    EMPLOYEE = "employee"


class AttendanceStatus(str, Enum):
    """Attendance status as stored in the database."""

    ABSENT = "absent"
    PRESENT = "present"
    ON_LEAVE = "on_leave"
    LATE = "late"

    @classmethod
    def values(cls) -> list[str]:
        return [s.value for s in cls]
