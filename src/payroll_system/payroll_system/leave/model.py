from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from typing import Iterator, Optional

from ..common.datetime_utils import iter_days
from ..core.enums import LeaveStatus, LeaveType, OverLimitMode


@dataclass(frozen=True)
class LeaveRequest:
    request_id: int
    employee_id: int
    leave_type: LeaveType
    start_date: date
    end_date: date
    day_count: int
    status: LeaveStatus
    fiscal_year: int
    reason: str = ""
    created_at: Optional[datetime] = None
    decided_by: Optional[str] = None
    decided_at: Optional[datetime] = None

    def contains(self, day: date) -> bool:
        return self.start_date <= day <= self.end_date

    def dates(self) -> Iterator[date]:
        return iter_days(self.start_date, self.end_date)


@dataclass(frozen=True)
class LeaveOverage:
    """Result of checking leave consumption against the annual entitlement."""

    leave_type: LeaveType
    exceeds: bool
    over_days: Decimal
    penalty: Decimal
    mode: Optional[OverLimitMode] = None
    fiscal_year: Optional[int] = None

    def to_dict(self) -> dict:
        return {
            "leave_type": self.leave_type.value,
            "fiscal_year": self.fiscal_year,
            "exceeds": self.exceeds,
            "over_days": str(self.over_days),
            "penalty": str(self.penalty),
            "mode": self.mode.value if self.mode else None,
        }
