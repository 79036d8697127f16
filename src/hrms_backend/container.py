from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping

from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.repository import AttendanceRepository
from .attendance.service import AttendanceService
from .database.connection import DBConfig, DatabaseConnection
from .users.mysql_user_repository import MySQLUserRepository
from .users.repository import UserDirectory


@dataclass(frozen=True)
class Container:
    conn: DatabaseConnection | None

    users_repo: UserDirectory
    attendance_repo: AttendanceRepository

    attendance_service: AttendanceService


def build_container(*, db_config: Mapping[str, Any]) -> Container:
    conn = DatabaseConnection(DBConfig.from_mapping(db_config))

    users_repo = MySQLUserRepository(conn)
    attendance_repo = MySQLAttendanceRepository(conn)

    attendance_service = AttendanceService(attendance_repo, users_repo)

    return Container(
        conn=conn,
        users_repo=users_repo,
        attendance_repo=attendance_repo,
        attendance_service=attendance_service,
    )
