"""Leave entitlement and over-limit penalty calculation.

`evaluate_overage` is the advisory check used when a request is approved.
`period_overage` recomputes against the final approved set when a payslip is
built and is the authoritative figure.
"""
from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Any, Iterable

from ..common.money import ZERO, round2, to_decimal
from ..core.enums import LeaveStatus, LeaveType, OverLimitMode
from ..employees.model import Employee
from ..policy.model import CompensationPolicy
from .model import LeaveOverage, LeaveRequest


def _penalty(employee: Employee, leave_type: LeaveType, over_days: Decimal, mode: OverLimitMode, policy: CompensationPolicy) -> Decimal:
    if mode != OverLimitMode.DEDUCT_SALARY or over_days <= 0 or not employee.salary_monthly:
        return ZERO
    base_days = policy.deduction_base_days_for(leave_type)
    return round2(employee.salary_monthly / Decimal(base_days) * over_days)


def evaluate_overage(
    employee: Employee,
    leave_type: LeaveType,
    fiscal_year: int,
    days_taken: Any,
    requested_days: Any,
    policy: CompensationPolicy,
) -> LeaveOverage:
    """Check `days_taken + requested_days` against the annual entitlement.

    Only the part of the request that goes past the entitlement is counted, so
    days that were already over the limit are not charged again.
    """
    lp = policy.leave_policy(leave_type)
    if lp is None or lp.annual_entitlement is None:
        return LeaveOverage(leave_type=leave_type, exceeds=False, over_days=ZERO, penalty=ZERO, fiscal_year=fiscal_year)

    taken = to_decimal(days_taken)
    requested = to_decimal(requested_days)
    total = taken + requested
    if total <= lp.annual_entitlement:
        return LeaveOverage(
            leave_type=leave_type,
            exceeds=False,
            over_days=ZERO,
            penalty=ZERO,
            mode=lp.over_limit_mode,
            fiscal_year=fiscal_year,
        )

    over_days = min(requested, total - lp.annual_entitlement)
    return LeaveOverage(
        leave_type=leave_type,
        exceeds=True,
        over_days=over_days,
        penalty=_penalty(employee, leave_type, over_days, lp.over_limit_mode, policy),
        mode=lp.over_limit_mode,
        fiscal_year=fiscal_year,
    )


def approved_days(leaves: Iterable[LeaveRequest], leave_type: LeaveType, *, fiscal_year: int) -> int:
    return sum(
        l.day_count
        for l in leaves
        if l.status == LeaveStatus.APPROVED and l.leave_type == leave_type and l.fiscal_year == fiscal_year
    )


def period_overage(
    employee: Employee,
    leaves: Iterable[LeaveRequest],
    leave_type: LeaveType,
    start: date,
    end: date,
    policy: CompensationPolicy,
) -> LeaveOverage:
    """Over-limit days of one leave type that fall inside [start, end].

    Walks the year's approved leave day by day in date order; once the running
    total passes the entitlement, every further day inside the window is over.
    """
    lp = policy.leave_policy(leave_type)
    if lp is None or lp.annual_entitlement is None:
        return LeaveOverage(leave_type=leave_type, exceeds=False, over_days=ZERO, penalty=ZERO, fiscal_year=start.year)

    approved = sorted(
        (l for l in leaves if l.status == LeaveStatus.APPROVED and l.leave_type == leave_type),
        key=lambda l: (l.start_date, l.request_id),
    )
    taken = ZERO
    over_days = ZERO
    for leave in approved:
        for day in leave.dates():
            taken += 1
            if taken > lp.annual_entitlement and start <= day <= end:
                over_days += 1

    return LeaveOverage(
        leave_type=leave_type,
        exceeds=over_days > 0,
        over_days=over_days,
        penalty=_penalty(employee, leave_type, over_days, lp.over_limit_mode, policy),
        mode=lp.over_limit_mode,
        fiscal_year=start.year,
    )
