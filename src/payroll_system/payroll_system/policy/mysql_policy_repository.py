from __future__ import annotations

from typing import Optional

from ..core.constants import HR_SETTINGS_KEY
from ..core.exceptions import ConfigurationError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchone, load_json_column
from .model import CompensationPolicy
from .repository import PolicyRepository


class MySQLPolicyRepository(PolicyRepository):
    """Reads the HR settings document stored under one key of the settings table."""

    def __init__(self, conn_factory: DatabaseConnection, *, key: str = HR_SETTINGS_KEY):
        self._conn_factory = conn_factory
        self._key = key

    def get_current(self) -> Optional[CompensationPolicy]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT document FROM settings WHERE setting_key=%s", (self._key,))
            row = fetchone(cur)
        if not row:
            return None
        try:
            return CompensationPolicy.from_document(load_json_column(row["document"]))
        except (ValueError, KeyError) as e:
            raise ConfigurationError(f"HR settings document {self._key!r} is malformed: {e}") from e
