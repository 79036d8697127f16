from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Any, Dict, List, Optional

from mysql.connector import errors as mysql_errors

from ..core.constants import MYSQL_DUPLICATE_ENTRY
from ..core.exceptions import ConstraintViolation
from .connection import DatabaseConnection

logger = logging.getLogger(__name__)


@contextmanager
def db_cursor(conn_factory: DatabaseConnection, *, dictionary: bool = True):
    """Yield (conn, cursor) for one unit of work; commit on success, rollback on error.

    Duplicate-key failures surface as ConstraintViolation so callers never
    depend on connector error classes.
    """
    conn = conn_factory.connect()
    try:
        cur = conn.cursor(dictionary=dictionary)
        try:
            yield conn, cur
            conn.commit()
        finally:
            cur.close()
    except mysql_errors.IntegrityError as e:
        conn.rollback()
        if getattr(e, "errno", None) == MYSQL_DUPLICATE_ENTRY:
            logger.info("Unique constraint rejected write: %s", e.msg)
            raise ConstraintViolation("duplicate entry") from e
        raise
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()


def fetchone(cur) -> Optional[Dict[str, Any]]:
    row = cur.fetchone()
    return row if row else None


def fetchall(cur) -> List[Dict[str, Any]]:
    rows = cur.fetchall()
    return list(rows or [])
