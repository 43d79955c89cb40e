from __future__ import annotations

from datetime import date, datetime, time, timedelta, timezone
from typing import Any, Iterator, Optional

# Shop-local wall clock; matches the default MySQL session time_zone.
SHOP_TZ = timezone(timedelta(hours=7))


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    return datetime.strptime(value, "%Y-%m-%d").date()


def parse_hhmm(value: str) -> time:
    """Parse HH:MM (or HH:MM:SS) string into time."""
    v = value.strip()
    fmt = "%H:%M:%S" if v.count(":") == 2 else "%H:%M"
    return datetime.strptime(v, fmt).time()


def now_local() -> datetime:
    """Current local time.

    Note: Wrapped so tests can patch/mocked easier.
    """
    return datetime.now()


def date_key(value: Any) -> Optional[str]:
    """Normalize a date-ish value to a YYYY-MM-DD key, or None if it cannot be read."""
    if isinstance(value, datetime):
        return value.date().isoformat()
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, str):
        try:
            return parse_iso_date(value.strip()[:10]).isoformat()
        except ValueError:
            return None
    return None


def coerce_timestamp(value: Any) -> Optional[datetime]:
    """Read a scan timestamp as naive shop-local time; unreadable values yield None.

    Offset-bearing values are converted to SHOP_TZ so they compare with naive ones.
    """
    if isinstance(value, str):
        try:
            value = datetime.fromisoformat(value.strip())
        except ValueError:
            return None
    if not isinstance(value, datetime):
        return None
    if value.tzinfo is not None:
        value = value.astimezone(SHOP_TZ).replace(tzinfo=None)
    return value


def iter_days(start: date, end: date) -> Iterator[date]:
    day = start
    while day <= end:
        yield day
        day += timedelta(days=1)


def whole_minutes(delta: timedelta) -> int:
    return int(delta.total_seconds() // 60)


def month_end(year: int, month: int) -> date:
    if month == 12:
        return date(year, 12, 31)
    return date(year, month + 1, 1) - timedelta(days=1)
