from __future__ import annotations

from typing import Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall
from .model import HolidayRecord
from .repository import HolidayRepository


class MySQLHolidayRepository(HolidayRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def list_all(self) -> Sequence[HolidayRecord]:
        # holiday_date is VARCHAR: rows are staff-entered and validated on read.
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT holiday_id, holiday_date, name FROM holidays ORDER BY holiday_date ASC")
            return [
                HolidayRecord(
                    holiday_id=int(r["holiday_id"]),
                    holiday_date=r.get("holiday_date"),
                    name=r.get("name") or "",
                )
                for r in fetchall(cur)
            ]
