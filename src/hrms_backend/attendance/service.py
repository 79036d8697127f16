from __future__ import annotations

import logging
from dataclasses import replace
from datetime import datetime
from typing import Any, Optional, Union

from ..common.datetime_utils import (
    DateLike,
    hours_between,
    isoformat_or_none,
    optional_calendar_date,
    parse_timestamp,
    to_calendar_date,
)
from ..common.validators import require_one_of
from ..core.enums import AttendanceStatus
from ..core.exceptions import (
    ConflictError,
    ConstraintViolation,
    InternalError,
    NotFoundError,
    ValidationError,
)
from ..users.repository import UserDirectory
from .model import UNSET, AttendanceFilter, AttendanceRecord, AttendanceUpdate, NewAttendance
from .repository import AttendanceRepository

logger = logging.getLogger(__name__)

INVALID_STATUS_MESSAGE = "Invalid status. Must be: absent, present, on_leave, or late"
ALREADY_MARKED_MESSAGE = "Attendance already marked for this date"
RECORD_NOT_FOUND_MESSAGE = "Attendance record not found"
USER_NOT_FOUND_MESSAGE = "User not found"

TimestampLike = Union[datetime, str]


def validate_status(value: Union[str, AttendanceStatus]) -> AttendanceStatus:
    if isinstance(value, AttendanceStatus):
        return value
    if not isinstance(value, str):
        raise ValidationError(INVALID_STATUS_MESSAGE)
    require_one_of(value, AttendanceStatus.values(), INVALID_STATUS_MESSAGE)
    return AttendanceStatus(value)


def format_attendance(record: AttendanceRecord) -> dict[str, Any]:
    """Response shape shared by every read path.

    totalHours is only derived when both clock times are present.
    """
    total_hours = None
    if record.clock_in is not None and record.clock_out is not None:
        total_hours = hours_between(record.clock_in, record.clock_out)

    out: dict[str, Any] = {
        "id": record.attendance_id,
        "userId": record.user_id,
        "date": isoformat_or_none(record.work_date),
        "status": record.status.value,
        "markedBy": record.marked_by,
        "clockIn": isoformat_or_none(record.clock_in),
        "clockOut": isoformat_or_none(record.clock_out),
        "createdAt": isoformat_or_none(record.created_at),
        "updatedAt": isoformat_or_none(record.updated_at),
        "totalHours": total_hours,
    }
    if record.user is not None:
        out["user"] = record.user.to_display()
    return out


def _optional_timestamp(value: Optional[TimestampLike], field_name: str) -> Optional[datetime]:
    if value is None:
        return None
    return parse_timestamp(value, field_name)


class AttendanceService:
    """Use cases over attendance records.

    Collaborators are injected so tests can pass in-memory doubles.
    """

    def __init__(self, attendance: AttendanceRepository, users: UserDirectory):
        self._attendance = attendance
        self._users = users

    def _require_user(self, user_id: int):
        user = self._users.find_user(int(user_id))
        if not user:
            raise NotFoundError(USER_NOT_FOUND_MESSAGE)
        return user

    def _require_record(self, attendance_id: int) -> AttendanceRecord:
        record = self._attendance.get_by_id(int(attendance_id))
        if not record:
            raise NotFoundError(RECORD_NOT_FOUND_MESSAGE)
        return record

    def list_attendances(self, filters: Optional[AttendanceFilter] = None) -> list[dict[str, Any]]:
        filters = filters or AttendanceFilter()
        status = validate_status(filters.status).value if filters.status else None

        filters = replace(
            filters,
            start_date=optional_calendar_date(filters.start_date, "startDate"),
            end_date=optional_calendar_date(filters.end_date, "endDate"),
            status=status,
        )
        return [format_attendance(r) for r in self._attendance.list_all(filters)]

    def get_by_id(self, attendance_id: int) -> dict[str, Any]:
        return format_attendance(self._require_record(attendance_id))

    def list_for_user(
        self,
        user_id: int,
        *,
        start_date: Optional[DateLike] = None,
        end_date: Optional[DateLike] = None,
    ) -> list[dict[str, Any]]:
        self._require_user(user_id)
        rows = self._attendance.list_for_user(
            int(user_id),
            start_date=optional_calendar_date(start_date, "startDate"),
            end_date=optional_calendar_date(end_date, "endDate"),
        )
        return [format_attendance(r) for r in rows]

    def mark_attendance(
        self,
        *,
        user_id: Optional[int],
        work_date: Optional[DateLike],
        status: Optional[Union[str, AttendanceStatus]],
        clock_in: Optional[TimestampLike] = None,
        clock_out: Optional[TimestampLike] = None,
        marked_by: Optional[int] = None,
    ) -> dict[str, Any]:
        if not user_id or work_date is None or work_date == "" or not status:
            raise ValidationError("User ID, date, and status are required")

        checked_status = validate_status(status)
        day = to_calendar_date(work_date)
        clock_in_at = _optional_timestamp(clock_in, "clockIn")
        clock_out_at = _optional_timestamp(clock_out, "clockOut")

        self._require_user(user_id)

        # Friendly pre-check; the unique index decides under concurrency.
        if self._attendance.exists_for_user_on_date(int(user_id), day):
            raise ConflictError(ALREADY_MARKED_MESSAGE)

        try:
            record = self._attendance.insert(
                NewAttendance(
                    user_id=int(user_id),
                    work_date=day,
                    status=checked_status,
                    marked_by=marked_by,
                    clock_in=clock_in_at,
                    clock_out=clock_out_at,
                )
            )
        except ConstraintViolation:
            logger.info("Concurrent attendance insert lost for user=%s date=%s", user_id, day)
            raise ConflictError(ALREADY_MARKED_MESSAGE)

        logger.info("Attendance %s marked for user=%s date=%s status=%s", record.attendance_id, user_id, day, checked_status.value)
        return format_attendance(record)

    def _normalize_update(self, changes: AttendanceUpdate) -> AttendanceUpdate:
        status = changes.status
        if status is not UNSET:
            if status is None or status == "":
                raise ValidationError(INVALID_STATUS_MESSAGE)
            status = validate_status(status)

        work_date = changes.work_date
        if work_date is not UNSET:
            if work_date is None or work_date == "":
                raise ValidationError("Date cannot be empty")
            work_date = to_calendar_date(work_date)

        clock_in = changes.clock_in
        if clock_in is not UNSET:
            clock_in = _optional_timestamp(clock_in, "clockIn")

        clock_out = changes.clock_out
        if clock_out is not UNSET:
            clock_out = _optional_timestamp(clock_out, "clockOut")

        return AttendanceUpdate(status=status, work_date=work_date, clock_in=clock_in, clock_out=clock_out)

    def update_attendance(self, attendance_id: int, changes: AttendanceUpdate) -> dict[str, Any]:
        current = self._require_record(attendance_id)
        changes = self._normalize_update(changes)

        new_date = changes.work_date
        if new_date is not UNSET and new_date != current.work_date:
            occupant = self._attendance.get_for_user_and_date(current.user_id, new_date)
            if occupant and occupant.attendance_id != current.attendance_id:
                raise ConflictError(ALREADY_MARKED_MESSAGE)

        try:
            updated = self._attendance.update(current.attendance_id, changes)
        except ConstraintViolation:
            raise ConflictError(ALREADY_MARKED_MESSAGE)

        if not updated:
            logger.error("Attendance %s vanished during update", current.attendance_id)
            raise InternalError("Failed to update attendance")

        logger.info("Attendance %s updated fields=%s", current.attendance_id, sorted(changes.supplied()))
        return format_attendance(updated)

    def delete_attendance(self, attendance_id: int) -> None:
        current = self._require_record(attendance_id)

        if self._attendance.delete(current.attendance_id) is None:
            logger.error("Attendance %s vanished before delete", current.attendance_id)
            raise InternalError("Failed to delete attendance")

        logger.info("Attendance %s deleted", current.attendance_id)

    def get_stats(
        self,
        user_id: int,
        *,
        start_date: Optional[DateLike] = None,
        end_date: Optional[DateLike] = None,
    ) -> dict[str, int]:
        self._require_user(user_id)
        counts = self._attendance.count_by_status(
            int(user_id),
            start_date=optional_calendar_date(start_date, "startDate"),
            end_date=optional_calendar_date(end_date, "endDate"),
        )

        stats: dict[str, int] = {"userId": int(user_id)}
        for status in AttendanceStatus:
            stats[status.value] = int(counts.get(status, 0))
        stats["total"] = sum(stats[s.value] for s in AttendanceStatus)
        return stats
