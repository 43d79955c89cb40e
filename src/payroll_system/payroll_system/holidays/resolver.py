"""Calendar resolution: holidays, weekends and the start-time rule for a date."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from typing import Iterable, Mapping, Optional

from ..common.datetime_utils import date_key
from ..core.enums import WeekendMode
from .model import DayInfo, HolidayRecord

logger = logging.getLogger(__name__)

_SATURDAY = 5
_SUNDAY = 6


@dataclass(frozen=True)
class HolidayCalendar:
    """Holiday names keyed by normalized YYYY-MM-DD."""

    names: Mapping[str, str] = field(default_factory=dict)

    @classmethod
    def from_records(cls, records: Iterable[HolidayRecord]) -> "HolidayCalendar":
        names: dict[str, str] = {}
        for rec in records:
            key = date_key(rec.holiday_date)
            if key is None:
                logger.debug("Skipping holiday %r with unreadable date %r", rec.name, rec.holiday_date)
                continue
            names[key] = rec.name
        return cls(names=names)

    def name_for(self, day: date) -> Optional[str]:
        return self.names.get(day.isoformat())


def is_weekend(day: date, mode: WeekendMode) -> bool:
    weekday = day.weekday()
    if mode == WeekendMode.SUN_ONLY:
        return weekday == _SUNDAY
    return weekday in (_SATURDAY, _SUNDAY)


def resolve_day(day: date, calendar: HolidayCalendar, weekend_mode: WeekendMode) -> DayInfo:
    name = calendar.name_for(day)
    return DayInfo(
        is_holiday=name is not None,
        holiday_name=name,
        is_weekend=is_weekend(day, weekend_mode),
    )


def late_threshold(day: date, work_start, grace_minutes: int) -> datetime:
    """Latest clock-in on `day` that is not late."""
    return datetime.combine(day, work_start) + timedelta(minutes=int(grace_minutes))
