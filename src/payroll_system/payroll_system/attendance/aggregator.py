from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Optional, Sequence

from ..core.enums import CompensationPlan, DayStatus, LeaveType
from ..employees.model import Employee
from .model import DayRecord

_SCAN_STATUSES = frozenset({DayStatus.PRESENT, DayStatus.LATE, DayStatus.ABSENT, DayStatus.NO_DATA})


@dataclass(frozen=True)
class PeriodMetrics:
    """Attendance totals over one window (a pay period or year-to-date)."""

    start: Optional[date] = None
    end: Optional[date] = None
    scheduled_work_days: int = 0
    present_days: int = 0
    late_days: int = 0
    absent_days: int = 0
    no_data_days: int = 0
    leave_days: int = 0
    late_minutes: int = 0
    payable_units: int = 0
    sick_days: int = 0
    business_days: int = 0
    vacation_days: int = 0
    warnings: tuple[str, ...] = ()
    review_needed: bool = False

    def to_dict(self) -> dict:
        return {
            "start": self.start.isoformat() if self.start else None,
            "end": self.end.isoformat() if self.end else None,
            "scheduled_work_days": self.scheduled_work_days,
            "present_days": self.present_days,
            "late_days": self.late_days,
            "absent_days": self.absent_days,
            "no_data_days": self.no_data_days,
            "leave_days": self.leave_days,
            "late_minutes": self.late_minutes,
            "payable_units": self.payable_units,
            "sick_days": self.sick_days,
            "business_days": self.business_days,
            "vacation_days": self.vacation_days,
            "warnings": list(self.warnings),
            "review_needed": self.review_needed,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "PeriodMetrics":
        return cls(
            start=date.fromisoformat(data["start"]) if data.get("start") else None,
            end=date.fromisoformat(data["end"]) if data.get("end") else None,
            scheduled_work_days=int(data.get("scheduled_work_days", 0)),
            present_days=int(data.get("present_days", 0)),
            late_days=int(data.get("late_days", 0)),
            absent_days=int(data.get("absent_days", 0)),
            no_data_days=int(data.get("no_data_days", 0)),
            leave_days=int(data.get("leave_days", 0)),
            late_minutes=int(data.get("late_minutes", 0)),
            payable_units=int(data.get("payable_units", 0)),
            sick_days=int(data.get("sick_days", 0)),
            business_days=int(data.get("business_days", 0)),
            vacation_days=int(data.get("vacation_days", 0)),
            warnings=tuple(data.get("warnings") or ()),
            review_needed=bool(data.get("review_needed", False)),
        )


def aggregate_period(
    employee: Employee,
    day_records: Sequence[DayRecord],
    plan: CompensationPlan,
    *,
    leave_is_payable: bool = False,
) -> PeriodMetrics:
    """Fold classified days into period totals.

    Pure: builds fresh counters on each call, so the period and YTD runs never
    share state. Employees on MONTHLY_NO_SCAN are not expected to scan, so every
    scheduled day that is not leave counts as present for them.
    """
    no_scan = plan == CompensationPlan.MONTHLY_NO_SCAN
    counts = dict.fromkeys(DayStatus, 0)
    leave_by_type = dict.fromkeys(LeaveType, 0)
    late_minutes = 0
    warnings: list[str] = []

    for rec in day_records:
        if rec.employee_id != employee.employee_id:
            continue
        status = rec.status
        if no_scan and status in _SCAN_STATUSES:
            status = DayStatus.PRESENT
        counts[status] += 1

        if status == DayStatus.LEAVE and rec.leave_type is not None:
            leave_by_type[rec.leave_type] += 1
        if status == DayStatus.LATE:
            late_minutes += rec.late_minutes or 0
        if status == DayStatus.NO_DATA:
            warnings.append(f"{rec.work_date.isoformat()}: clock-in without clock-out, please review")

    scheduled = sum(n for s, n in counts.items() if not s.is_non_working)
    payable = counts[DayStatus.PRESENT] + counts[DayStatus.LATE] + counts[DayStatus.NO_DATA]
    if leave_is_payable:
        payable += counts[DayStatus.LEAVE]

    dates = [r.work_date for r in day_records]
    return PeriodMetrics(
        start=min(dates) if dates else None,
        end=max(dates) if dates else None,
        scheduled_work_days=scheduled,
        present_days=counts[DayStatus.PRESENT],
        late_days=counts[DayStatus.LATE],
        absent_days=counts[DayStatus.ABSENT],
        no_data_days=counts[DayStatus.NO_DATA],
        leave_days=counts[DayStatus.LEAVE],
        late_minutes=late_minutes,
        payable_units=payable,
        sick_days=leave_by_type[LeaveType.SICK],
        business_days=leave_by_type[LeaveType.BUSINESS],
        vacation_days=leave_by_type[LeaveType.VACATION],
        warnings=tuple(warnings),
        review_needed=bool(warnings),
    )
