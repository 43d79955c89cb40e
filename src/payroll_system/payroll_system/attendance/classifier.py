"""Daily attendance classification.

One pure function decides the status of an employee-day. The order of the
checks in `classify_day` is the business rule: the first match wins.
"""
from __future__ import annotations

from datetime import date, datetime, time
from typing import Iterable, Mapping, Optional, Sequence

from ..common.datetime_utils import coerce_timestamp, iter_days, whole_minutes
from ..core.enums import AdjustmentType, DayStatus, EmploymentStatus, LeaveStatus, ScanDirection
from ..employees.model import Employee
from ..holidays.model import DayInfo
from ..holidays.resolver import HolidayCalendar, late_threshold, resolve_day
from ..leave.model import LeaveRequest
from ..policy.model import CompensationPolicy
from .model import AttendanceAdjustment, AttendanceEvent, DayRecord, WorkDuration


def _scan_times(events: Iterable[AttendanceEvent], direction: ScanDirection, work_date: date) -> list[datetime]:
    out: list[datetime] = []
    for ev in events:
        if ev.direction != direction:
            continue
        ts = coerce_timestamp(ev.timestamp)
        if ts is None or ts.date() != work_date:
            continue
        out.append(ts)
    return out


def _on_day(value: Optional[datetime], work_date: date) -> Optional[datetime]:
    value = coerce_timestamp(value)
    if value is None or value.date() != work_date:
        return None
    return value


def classify_day(
    employee: Employee,
    work_date: date,
    events: Sequence[AttendanceEvent],
    *,
    leave: Optional[LeaveRequest],
    day_info: DayInfo,
    adjustment: Optional[AttendanceAdjustment],
    reference_today: date,
    work_start: time,
    grace_minutes: int,
) -> DayRecord:
    """Classify one employee-day from every record source.

    `leave` must be an APPROVED request covering `work_date` (or None).
    """
    base = dict(employee_id=employee.employee_id, work_date=work_date)

    if work_date > reference_today:
        return DayRecord(status=DayStatus.FUTURE, **base)
    if employee.start_date and work_date < employee.start_date:
        return DayRecord(status=DayStatus.NOT_STARTED, **base)
    if employee.end_date and work_date > employee.end_date:
        return DayRecord(status=DayStatus.ENDED, **base)
    if employee.status == EmploymentStatus.SUSPENDED:
        return DayRecord(status=DayStatus.SUSPENDED, **base)
    if day_info.is_holiday:
        return DayRecord(status=DayStatus.HOLIDAY, holiday_name=day_info.holiday_name, **base)
    if day_info.is_weekend:
        return DayRecord(status=DayStatus.WEEKEND, **base)
    if leave is not None and leave.contains(work_date):
        return DayRecord(status=DayStatus.LEAVE, leave_type=leave.leave_type, **base)

    ins = _scan_times(events, ScanDirection.IN, work_date)
    outs = _scan_times(events, ScanDirection.OUT, work_date)
    first_in = min(ins) if ins else None
    last_out = max(outs) if outs else None

    adj_type = adjustment.adjustment_type if adjustment else None
    if adjustment and adj_type == AdjustmentType.ADD_RECORD:
        first_in = _on_day(adjustment.adjusted_in, work_date) or first_in
        last_out = _on_day(adjustment.adjusted_out, work_date) or last_out

    if first_in is None:
        return DayRecord(status=DayStatus.ABSENT, adjustment_type=adj_type, **base)

    # An OUT before the first IN does not close the shift.
    if last_out is None or last_out < first_in:
        return DayRecord(
            status=DayStatus.NO_DATA,
            first_in=first_in,
            adjustment_type=adj_type,
            review_needed=True,
            **base,
        )

    late_minutes = max(0, whole_minutes(first_in - late_threshold(work_date, work_start, grace_minutes)))
    if adj_type == AdjustmentType.FORGIVE_LATE:
        late_minutes = 0

    return DayRecord(
        status=DayStatus.LATE if late_minutes > 0 else DayStatus.PRESENT,
        first_in=first_in,
        last_out=last_out,
        late_minutes=late_minutes,
        work_duration=WorkDuration.from_minutes(whole_minutes(last_out - first_in)),
        adjustment_type=adj_type,
        **base,
    )


def find_leave_for(day: date, leaves: Iterable[LeaveRequest]) -> Optional[LeaveRequest]:
    for leave in leaves:
        if leave.status == LeaveStatus.APPROVED and leave.contains(day):
            return leave
    return None


def classify_period(
    employee: Employee,
    start: date,
    end: date,
    *,
    events: Iterable[AttendanceEvent],
    approved_leaves: Sequence[LeaveRequest],
    calendar: HolidayCalendar,
    adjustments: Iterable[AttendanceAdjustment],
    policy: CompensationPolicy,
    reference_today: date,
) -> list[DayRecord]:
    """Classify every date in [start, end] for one employee."""
    events_by_day: dict[date, list[AttendanceEvent]] = {}
    for ev in events:
        ts = coerce_timestamp(ev.timestamp)
        if ts is None:
            continue
        events_by_day.setdefault(ts.date(), []).append(ev)

    # Keyed by date: a later adjustment for the same day replaces the earlier one.
    adjustment_by_day: Mapping[date, AttendanceAdjustment] = {a.work_date: a for a in adjustments}

    return [
        classify_day(
            employee,
            day,
            events_by_day.get(day, []),
            leave=find_leave_for(day, approved_leaves),
            day_info=resolve_day(day, calendar, policy.weekend_mode),
            adjustment=adjustment_by_day.get(day),
            reference_today=reference_today,
            work_start=policy.work_start,
            grace_minutes=policy.grace_minutes,
        )
        for day in iter_days(start, end)
    ]
