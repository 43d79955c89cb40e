from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Mapping

import mysql.connector

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DBConfig:
    host: str
    port: int
    user: str
    password: str
    database: str
    # Scan times and payslip timestamps are stored as shop-local wall clock.
    time_zone: str = "+07:00"

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "DBConfig":
        return cls(
            host=str(data["host"]),
            port=int(data.get("port", 3306)),
            user=str(data["user"]),
            password=str(data.get("password") or ""),
            database=str(data["database"]),
            time_zone=str(data.get("time_zone") or "+07:00"),
        )


class DatabaseConnection:
    """Connection factory for the payroll database.

    Every repository call opens a short-lived connection with autocommit off, so
    the read-back after an INSERT IGNORE on the SSO lock sees the committed winner.
    """

    def __init__(self, config: DBConfig):
        self._config = config

    @property
    def database(self) -> str:
        return self._config.database

    def connect(self):
        conn = mysql.connector.connect(
            host=self._config.host,
            port=self._config.port,
            user=self._config.user,
            password=self._config.password,
            database=self._config.database,
            autocommit=False,
        )
        cur = conn.cursor()
        try:
            cur.execute("SET time_zone = %s", (self._config.time_zone,))
        finally:
            cur.close()
        return conn

    def ping(self) -> bool:
        """True when the database answers; used at startup for a clear log line."""
        try:
            conn = self.connect()
        except mysql.connector.Error as e:
            logger.error("Cannot reach MySQL %s:%s/%s: %s", self._config.host, self._config.port, self.database, e)
            return False
        conn.close()
        return True
