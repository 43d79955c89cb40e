from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional


@dataclass(frozen=True)
class HolidayRecord:
    """Raw holiday row as curated by staff.

    `holiday_date` is kept as stored (date, datetime or text) because staff-entered
    data may be malformed; the resolver decides what is usable.
    """

    holiday_date: Any
    name: str
    holiday_id: Optional[int] = None


@dataclass(frozen=True)
class DayInfo:
    is_holiday: bool
    is_weekend: bool
    holiday_name: Optional[str] = None
