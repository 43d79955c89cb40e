from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Optional

from ..core.enums import AdjustmentType, DayStatus, LeaveType, ScanDirection


@dataclass(frozen=True)
class AttendanceEvent:
    """Domain entity: one raw clock scan (append-only).

    `timestamp` is whatever the scanner stored; garbled values are dropped by the
    classifier rather than rejected here.
    """

    employee_id: int
    direction: ScanDirection
    timestamp: Any
    event_id: Optional[int] = None


@dataclass(frozen=True)
class AttendanceAdjustment:
    """Manual correction for one (employee, date). Last write wins."""

    employee_id: int
    work_date: date
    adjustment_type: AdjustmentType
    note: str
    created_by: str
    adjusted_in: Optional[datetime] = None
    adjusted_out: Optional[datetime] = None
    created_at: Optional[datetime] = None


@dataclass(frozen=True)
class WorkDuration:
    hours: int
    minutes: int

    @classmethod
    def from_minutes(cls, total: int) -> "WorkDuration":
        return cls(hours=total // 60, minutes=total % 60)

    @property
    def total_minutes(self) -> int:
        return self.hours * 60 + self.minutes

    def __str__(self) -> str:
        return f"{self.hours:02d}:{self.minutes:02d}"


@dataclass(frozen=True)
class DayRecord:
    """Classification of one employee-day.

    `late_minutes` and `work_duration` are only set for days computed from scans
    (PRESENT / LATE); every other status leaves them None.
    """

    employee_id: int
    work_date: date
    status: DayStatus
    first_in: Optional[datetime] = None
    last_out: Optional[datetime] = None
    late_minutes: Optional[int] = None
    work_duration: Optional[WorkDuration] = None
    leave_type: Optional[LeaveType] = None
    holiday_name: Optional[str] = None
    adjustment_type: Optional[AdjustmentType] = None
    review_needed: bool = False

    def to_dict(self) -> dict:
        return {
            "employee_id": self.employee_id,
            "date": self.work_date.isoformat(),
            "status": self.status.value,
            "first_in": self.first_in.strftime("%H:%M") if self.first_in else None,
            "last_out": self.last_out.strftime("%H:%M") if self.last_out else None,
            "late_minutes": self.late_minutes,
            "work_duration": str(self.work_duration) if self.work_duration else None,
            "leave_type": self.leave_type.value if self.leave_type else None,
            "holiday_name": self.holiday_name,
            "adjustment_type": self.adjustment_type.value if self.adjustment_type else None,
            "review_needed": self.review_needed,
        }
