from __future__ import annotations

from datetime import date
from typing import Any, Dict, Optional, Sequence

from ..core.enums import AttendanceStatus, Role
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from ..users.model import UserSummary
from .model import AttendanceFilter, AttendanceRecord, AttendanceUpdate, NewAttendance
from .repository import AttendanceRepository

_COLUMNS = "a.id, a.user_id, a.date, a.status, a.marked_by, a.clock_in, a.clock_out, a.created_at, a.updated_at"
_ORDER = "ORDER BY a.date DESC, a.created_at DESC, a.id DESC"

_UPDATE_COLUMNS = {
    "status": "status",
    "work_date": "date",
    "clock_in": "clock_in",
    "clock_out": "clock_out",
}


def _date_bounds(
    clauses: list[str],
    params: list[object],
    start_date: Optional[date],
    end_date: Optional[date],
) -> None:
    if start_date is not None:
        clauses.append("a.date >= %s")
        params.append(start_date)
    if end_date is not None:
        clauses.append("a.date <= %s")
        params.append(end_date)


def _to_record(r: Dict[str, Any]) -> AttendanceRecord:
    user = None
    if r.get("first_name") is not None:
        user = UserSummary(
            user_id=int(r["user_id"]),
            first_name=r["first_name"],
            last_name=r["last_name"],
            email=r["email"],
            emp_id=r.get("emp_id"),
            role=Role.EMPLOYEE,
        )
    return AttendanceRecord(
        attendance_id=int(r["id"]),
        user_id=int(r["user_id"]),
        work_date=r["date"],
        status=AttendanceStatus(r["status"]),
        marked_by=int(r["marked_by"]) if r.get("marked_by") is not None else None,
        clock_in=r.get("clock_in"),
        clock_out=r.get("clock_out"),
        created_at=r.get("created_at"),
        updated_at=r.get("updated_at"),
        user=user,
    )


class MySQLAttendanceRepository(AttendanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    @staticmethod
    def _select_by_id(cur, attendance_id: int) -> Optional[AttendanceRecord]:
        cur.execute(f"SELECT {_COLUMNS} FROM attendances a WHERE a.id=%s", (int(attendance_id),))
        r = fetchone(cur)
        return _to_record(r) if r else None

    def get_by_id(self, attendance_id: int) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            return self._select_by_id(cur, attendance_id)

    def list_all(self, filters: AttendanceFilter) -> Sequence[AttendanceRecord]:
        clauses = ["1=1"]
        params: list[object] = []

        if filters.user_id is not None:
            clauses.append("a.user_id=%s")
            params.append(int(filters.user_id))
        _date_bounds(clauses, params, filters.start_date, filters.end_date)
        if filters.status is not None:
            clauses.append("a.status=%s")
            params.append(AttendanceStatus(filters.status).value)

        where = " AND ".join(clauses)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS},
                       u.first_name, u.last_name, u.email, u.emp_id
                FROM attendances a
                JOIN users u ON u.id = a.user_id
                WHERE {where}
                {_ORDER}
                """,
                tuple(params),
            )
            return [_to_record(r) for r in fetchall(cur)]

    def list_for_user(
        self,
        user_id: int,
        *,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> Sequence[AttendanceRecord]:
        clauses = ["a.user_id=%s"]
        params: list[object] = [int(user_id)]
        _date_bounds(clauses, params, start_date, end_date)
        where = " AND ".join(clauses)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM attendances a WHERE {where} {_ORDER}",
                tuple(params),
            )
            return [_to_record(r) for r in fetchall(cur)]

    def exists_for_user_on_date(self, user_id: int, work_date: date) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT id FROM attendances WHERE user_id=%s AND date=%s LIMIT 1",
                (int(user_id), work_date),
            )
            return fetchone(cur) is not None

    def get_for_user_and_date(self, user_id: int, work_date: date) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM attendances a WHERE a.user_id=%s AND a.date=%s",
                (int(user_id), work_date),
            )
            r = fetchone(cur)
            return _to_record(r) if r else None

    def insert(self, new: NewAttendance) -> AttendanceRecord:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO attendances(user_id, date, status, marked_by, clock_in, clock_out)
                VALUES(%s,%s,%s,%s,%s,%s)
                """,
                (
                    int(new.user_id),
                    new.work_date,
                    AttendanceStatus(new.status).value,
                    new.marked_by,
                    new.clock_in,
                    new.clock_out,
                ),
            )
            record = self._select_by_id(cur, int(cur.lastrowid))
            if record is None:
                raise RuntimeError("Inserted attendance row could not be read back")
            return record

    def update(self, attendance_id: int, changes: AttendanceUpdate) -> Optional[AttendanceRecord]:
        assignments: list[str] = []
        params: list[object] = []
        for field, value in changes.supplied().items():
            if field == "status" and value is not None:
                value = AttendanceStatus(value).value
            assignments.append(f"{_UPDATE_COLUMNS[field]}=%s")
            params.append(value)
        assignments.append("updated_at=CURRENT_TIMESTAMP(6)")
        params.append(int(attendance_id))

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"UPDATE attendances SET {', '.join(assignments)} WHERE id=%s",
                tuple(params),
            )
            # rowcount is unreliable for no-op updates on MySQL; read the row back.
            return self._select_by_id(cur, attendance_id)

    def delete(self, attendance_id: int) -> Optional[int]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM attendances WHERE id=%s", (int(attendance_id),))
            return int(attendance_id) if cur.rowcount > 0 else None

    def count_by_status(
        self,
        user_id: int,
        *,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> dict[AttendanceStatus, int]:
        clauses = ["a.user_id=%s"]
        params: list[object] = [int(user_id)]
        _date_bounds(clauses, params, start_date, end_date)
        where = " AND ".join(clauses)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT a.status, COUNT(*) AS count
                FROM attendances a
                WHERE {where}
                GROUP BY a.status
                """,
                tuple(params),
            )
            return {AttendanceStatus(r["status"]): int(r["count"]) for r in fetchall(cur)}
