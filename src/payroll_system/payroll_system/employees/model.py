from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Optional

from ..core.enums import CompensationPlan, EmploymentStatus


@dataclass(frozen=True)
class Employee:
    """Domain entity: an employee as seen by attendance and payroll.

    Pure data object (no DB access). Payslips keep their own snapshot, so later
    HR edits to this record never rewrite an issued payslip.
    """

    employee_id: int
    full_name: str
    plan: CompensationPlan
    salary_monthly: Optional[Decimal] = None
    salary_daily: Optional[Decimal] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    status: EmploymentStatus = EmploymentStatus.ACTIVE

    def is_employed_on(self, day: date) -> bool:
        if self.start_date and day < self.start_date:
            return False
        if self.end_date and day > self.end_date:
            return False
        return True

    def is_employed_between(self, start: date, end: date) -> bool:
        """True when at least one day of [start, end] falls inside the employment window."""
        first = max(start, self.start_date) if self.start_date else start
        return first <= end and self.is_employed_on(first)

    def unpayable_reason(self, start: date, end: date) -> Optional[str]:
        """Why this employee gets no payslip for [start, end], or None when they do."""
        if self.plan == CompensationPlan.NO_PAY:
            return "NO_PAY plan"
        if self.status == EmploymentStatus.SUSPENDED:
            return "suspended"
        if not self.is_employed_between(start, end):
            return "not employed in period"
        return None
