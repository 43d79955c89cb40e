from __future__ import annotations

from datetime import date
from typing import Optional, Protocol, Sequence

from .model import AttendanceAdjustment, AttendanceEvent


class AttendanceRepository(Protocol):
    def list_events(self, *, employee_id: int, start_date: date, end_date: date) -> Sequence[AttendanceEvent]:
        """Raw scans whose timestamp falls on a date in [start_date, end_date]."""

        raise NotImplementedError

    def list_adjustments(
        self, *, employee_id: int, start_date: date, end_date: date
    ) -> Sequence[AttendanceAdjustment]:
        raise NotImplementedError

    def get_adjustment(self, *, employee_id: int, work_date: date) -> Optional[AttendanceAdjustment]:
        raise NotImplementedError

    def upsert_adjustment(self, adjustment: AttendanceAdjustment) -> None:
        """Insert or replace the single adjustment for (employee_id, work_date)."""

        raise NotImplementedError
