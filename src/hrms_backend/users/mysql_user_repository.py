from __future__ import annotations

from typing import Optional

from ..core.enums import Role
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchone
from .model import UserSummary
from .repository import UserDirectory


class MySQLUserRepository(UserDirectory):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def find_user(self, user_id: int) -> Optional[UserSummary]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT id, first_name, last_name, email, emp_id, admin, active
                FROM users
                WHERE id=%s AND is_deleted=0
                """,
                (int(user_id),),
            )
            row = fetchone(cur)
            if not row:
                return None
            return UserSummary(
                user_id=int(row["id"]),
                first_name=row["first_name"],
                last_name=row["last_name"],
                email=row["email"],
                emp_id=row.get("emp_id"),
                role=Role.ADMIN if row.get("admin") else Role.EMPLOYEE,
                is_active=bool(row.get("active", True)),
            )
