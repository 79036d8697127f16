from __future__ import annotations

import threading
from dataclasses import replace
from datetime import date, datetime, timedelta
from typing import Optional

import pytest

from hrms_backend.attendance.model import AttendanceFilter, AttendanceRecord, AttendanceUpdate, NewAttendance
from hrms_backend.attendance.service import AttendanceService
from hrms_backend.core.enums import AttendanceStatus, Role
from hrms_backend.core.exceptions import ConstraintViolation
from hrms_backend.users.model import UserSummary


class InMemoryUsers:
    def __init__(self, users: list[UserSummary]):
        self.users_by_id = {u.user_id: u for u in users}

    def find_user(self, user_id: int) -> Optional[UserSummary]:
        return self.users_by_id.get(user_id)


class InMemoryAttendance:
    """Mirrors the MySQL repository, including the (user_id, date) unique index."""

    def __init__(self, users: Optional[InMemoryUsers] = None):
        self._rows: dict[int, AttendanceRecord] = {}
        self._id = 0
        self._tick = 0
        self._users = users
        self._lock = threading.Lock()

    def _stamp(self) -> datetime:
        self._tick += 1
        return datetime(2026, 1, 1) + timedelta(seconds=self._tick)

    @staticmethod
    def _in_range(r: AttendanceRecord, start_date: Optional[date], end_date: Optional[date]) -> bool:
        if start_date is not None and r.work_date < start_date:
            return False
        if end_date is not None and r.work_date > end_date:
            return False
        return True

    @staticmethod
    def _sorted(rows):
        return sorted(rows, key=lambda r: (r.work_date, r.created_at, r.attendance_id), reverse=True)

    def _taken(self, user_id: int, work_date: date, *, exclude_id: Optional[int] = None) -> bool:
        return any(
            r.user_id == user_id and r.work_date == work_date and r.attendance_id != exclude_id
            for r in self._rows.values()
        )

    def get_by_id(self, attendance_id: int) -> Optional[AttendanceRecord]:
        return self._rows.get(attendance_id)

    def list_all(self, filters: AttendanceFilter):
        rows = [
            r
            for r in self._rows.values()
            if (filters.user_id is None or r.user_id == filters.user_id)
            and self._in_range(r, filters.start_date, filters.end_date)
            and (filters.status is None or r.status.value == filters.status)
        ]
        out = []
        for r in self._sorted(rows):
            user = self._users.find_user(r.user_id) if self._users else None
            out.append(replace(r, user=user))
        return out

    def list_for_user(self, user_id: int, *, start_date=None, end_date=None):
        rows = [r for r in self._rows.values() if r.user_id == user_id and self._in_range(r, start_date, end_date)]
        return self._sorted(rows)

    def exists_for_user_on_date(self, user_id: int, work_date: date) -> bool:
        return self._taken(user_id, work_date)

    def get_for_user_and_date(self, user_id: int, work_date: date) -> Optional[AttendanceRecord]:
        for r in self._rows.values():
            if r.user_id == user_id and r.work_date == work_date:
                return r
        return None

    def insert(self, new: NewAttendance) -> AttendanceRecord:
        with self._lock:
            if self._taken(new.user_id, new.work_date):
                raise ConstraintViolation("duplicate entry")
            self._id += 1
            stamp = self._stamp()
            rec = AttendanceRecord(
                attendance_id=self._id,
                user_id=new.user_id,
                work_date=new.work_date,
                status=AttendanceStatus(new.status),
                marked_by=new.marked_by,
                clock_in=new.clock_in,
                clock_out=new.clock_out,
                created_at=stamp,
                updated_at=stamp,
            )
            self._rows[rec.attendance_id] = rec
            return rec

    def update(self, attendance_id: int, changes: AttendanceUpdate) -> Optional[AttendanceRecord]:
        with self._lock:
            current = self._rows.get(attendance_id)
            if not current:
                return None
            fields = changes.supplied()
            if "work_date" in fields and self._taken(current.user_id, fields["work_date"], exclude_id=attendance_id):
                raise ConstraintViolation("duplicate entry")
            rec = replace(current, updated_at=self._stamp(), **fields)
            self._rows[attendance_id] = rec
            return rec

    def delete(self, attendance_id: int) -> Optional[int]:
        with self._lock:
            return attendance_id if self._rows.pop(attendance_id, None) else None

    def count_by_status(self, user_id: int, *, start_date=None, end_date=None):
        counts: dict[AttendanceStatus, int] = {}
        for r in self.list_for_user(user_id, start_date=start_date, end_date=end_date):
            counts[r.status] = counts.get(r.status, 0) + 1
        return counts


ADMIN = UserSummary(user_id=1, first_name="Ada", last_name="Admin", email="ada@example.com", emp_id="EMP001", role=Role.ADMIN)
ALICE = UserSummary(user_id=2, first_name="Alice", last_name="Nguyen", email="alice@example.com", emp_id="EMP002")
BOB = UserSummary(user_id=3, first_name="Bob", last_name="Tran", email="bob@example.com", emp_id="EMP003")
INACTIVE = UserSummary(
    user_id=4, first_name="Ivy", last_name="Old", email="ivy@example.com", emp_id="EMP004", is_active=False
)


@pytest.fixture
def fixed_now() -> datetime:
    return datetime(2026, 2, 2, 8, 25, 0)


@pytest.fixture
def directory() -> InMemoryUsers:
    return InMemoryUsers([ADMIN, ALICE, BOB, INACTIVE])


@pytest.fixture
def attendance_repo(directory) -> InMemoryAttendance:
    return InMemoryAttendance(directory)


@pytest.fixture
def service(attendance_repo, directory) -> AttendanceService:
    return AttendanceService(attendance_repo, directory)
