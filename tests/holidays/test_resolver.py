from __future__ import annotations

import logging
from datetime import date, datetime, time

from src.payroll_system.payroll_system.core.enums import WeekendMode
from src.payroll_system.payroll_system.holidays.model import HolidayRecord
from src.payroll_system.payroll_system.holidays.resolver import (
    HolidayCalendar,
    is_weekend,
    late_threshold,
    resolve_day,
)


def test_calendar_skips_unreadable_dates(caplog):
    records = [
        HolidayRecord(holiday_date="2025-04-13", name="Songkran"),
        HolidayRecord(holiday_date=datetime(2025, 12, 5, 0, 0), name="Father's Day"),
        HolidayRecord(holiday_date="13/04/2025??", name="Typo"),
        HolidayRecord(holiday_date=None, name="Blank"),
    ]

    with caplog.at_level(logging.DEBUG):
        calendar = HolidayCalendar.from_records(records)

    assert calendar.name_for(date(2025, 4, 13)) == "Songkran"
    assert calendar.name_for(date(2025, 12, 5)) == "Father's Day"
    assert len(calendar.names) == 2
    assert "Typo" in caplog.text


def test_weekend_modes():
    saturday, sunday, monday = date(2025, 3, 1), date(2025, 3, 2), date(2025, 3, 3)

    assert is_weekend(saturday, WeekendMode.SAT_SUN)
    assert is_weekend(sunday, WeekendMode.SAT_SUN)
    assert not is_weekend(monday, WeekendMode.SAT_SUN)

    assert not is_weekend(saturday, WeekendMode.SUN_ONLY)
    assert is_weekend(sunday, WeekendMode.SUN_ONLY)


def test_resolve_day_reports_holiday_and_weekend():
    calendar = HolidayCalendar.from_records([HolidayRecord(holiday_date="2025-04-13", name="Songkran")])

    info = resolve_day(date(2025, 4, 13), calendar, WeekendMode.SAT_SUN)  # a Sunday

    assert info.is_holiday
    assert info.is_weekend
    assert info.holiday_name == "Songkran"

    plain = resolve_day(date(2025, 4, 16), calendar, WeekendMode.SAT_SUN)
    assert not plain.is_holiday and not plain.is_weekend and plain.holiday_name is None


def test_late_threshold_adds_grace():
    assert late_threshold(date(2025, 3, 3), time(8, 0), 15) == datetime(2025, 3, 3, 8, 15)
