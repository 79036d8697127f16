from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping

import mysql.connector

from ..core.constants import DEFAULT_CONNECTION_TIMEOUT_SECONDS, DEFAULT_STATEMENT_TIMEOUT_MS


@dataclass(frozen=True)
class DBConfig:
    host: str
    port: int
    user: str
    password: str
    database: str
    connection_timeout: int = DEFAULT_CONNECTION_TIMEOUT_SECONDS
    statement_timeout_ms: int = DEFAULT_STATEMENT_TIMEOUT_MS

    @classmethod
    def from_mapping(cls, db_config: Mapping[str, Any]) -> "DBConfig":
        return cls(
            host=str(db_config.get("host", "localhost")),
            port=int(db_config.get("port", 3306)),
            user=str(db_config.get("user", "root")),
            password=str(db_config.get("password", "")),
            database=str(db_config.get("database", "hrms_db")),
            connection_timeout=int(db_config.get("connection_timeout", DEFAULT_CONNECTION_TIMEOUT_SECONDS)),
            statement_timeout_ms=int(db_config.get("statement_timeout_ms", DEFAULT_STATEMENT_TIMEOUT_MS)),
        )


class DatabaseConnection:
    """DB connection factory.

    Note: We create short-lived connections per operation, so the MySQL
    server is the only shared resource between requests.
    """

    def __init__(self, config: DBConfig):
        self._config = config

    @property
    def config(self) -> DBConfig:
        return self._config

    def connect(self):
        conn = mysql.connector.connect(
            host=self._config.host,
            port=int(self._config.port),
            user=self._config.user,
            password=self._config.password,
            database=self._config.database,
            connection_timeout=int(self._config.connection_timeout),
        )
        if self._config.statement_timeout_ms:
            cur = conn.cursor()
            try:
                # Bounds every SELECT on this connection.
                cur.execute("SET SESSION max_execution_time=%s", (int(self._config.statement_timeout_ms),))
            finally:
                cur.close()
        return conn
