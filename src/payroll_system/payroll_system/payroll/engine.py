"""Payslip computation.

`build_payslip` is pure: every input (metrics, policy, the month's locked SSO
decision, what period 1 already deducted) is passed in, and the result is an
immutable snapshot. Running it twice on the same inputs yields the same
snapshot, which is what makes DRAFT regeneration safe.
"""
from __future__ import annotations

from decimal import Decimal
from typing import Iterable, Optional

from ..attendance.aggregator import PeriodMetrics
from ..common.money import ZERO, round2
from ..core import constants
from ..core.enums import CompensationPlan, LeaveType, OverLimitMode
from ..employees.model import Employee
from ..leave.model import LeaveRequest
from ..leave.overage import period_overage
from ..policy.model import CompensationPolicy
from .calculator.factory import calculator_for
from .model import LineItem, PayPeriod, PayslipSnapshot, SsoDecision
from .sso import sso_amount_for_period, sso_lines


def compute_net_pay(base_pay: Decimal, additions: Iterable[LineItem], deductions: Iterable[LineItem]) -> Decimal:
    return round2(
        base_pay
        + sum((l.amount for l in additions), ZERO)
        - sum((l.amount for l in deductions), ZERO)
    )


def _attendance_deductions(
    employee: Employee, metrics: PeriodMetrics, policy: CompensationPolicy
) -> list[LineItem]:
    settings = policy.payroll
    if employee.plan != CompensationPlan.MONTHLY or not employee.salary_monthly:
        return []

    rate_per_day = employee.salary_monthly / Decimal(settings.deduction_base_days)
    lines: list[LineItem] = []
    if settings.deduct_absence and metrics.absent_days > 0:
        lines.append(
            LineItem(
                name=constants.ABSENCE_LINE_NAME,
                amount=round2(rate_per_day * metrics.absent_days),
                notes=f"{metrics.absent_days} day(s)",
            )
        )
    if settings.deduct_late and metrics.late_minutes > 0:
        rate_per_minute = rate_per_day / Decimal(settings.work_hours_per_day) / Decimal(60)
        lines.append(
            LineItem(
                name=constants.LATE_LINE_NAME,
                amount=round2(rate_per_minute * metrics.late_minutes),
                notes=f"{metrics.late_minutes} minute(s)",
            )
        )
    return lines


def build_payslip(
    employee: Employee,
    pay_period: PayPeriod,
    period_metrics: PeriodMetrics,
    ytd_metrics: PeriodMetrics,
    policy: CompensationPolicy,
    sso_decision: SsoDecision,
    *,
    approved_leaves: Iterable[LeaveRequest] = (),
    prior_period_sso_deducted: Decimal = ZERO,
    prior_period_base_pay: Optional[Decimal] = None,
    existing: Optional[PayslipSnapshot] = None,
) -> PayslipSnapshot:
    """Compute one employee's payslip for one pay period.

    Automatic lines are rebuilt from scratch in a fixed order (leave overage
    per type, absence, late, SSO); manual lines from `existing` are kept as they
    are. Raises ConfigurationError for NO_PAY employees or a missing rate.
    """
    base_pay = calculator_for(employee.plan).base_pay(employee, period_metrics)
    leaves = list(approved_leaves)
    notes: list[str] = []

    auto_deductions: list[LineItem] = []
    auto_additions: list[LineItem] = []
    over_limit_days = ZERO

    for leave_type in LeaveType:
        overage = period_overage(employee, leaves, leave_type, pay_period.start, pay_period.end, policy)
        if not overage.exceeds:
            continue
        over_limit_days += overage.over_days
        if overage.mode == OverLimitMode.DEDUCT_SALARY and overage.penalty > 0:
            auto_deductions.append(
                LineItem(
                    name=constants.LEAVE_OVERAGE_LINE_TEMPLATE.format(leave_type=leave_type.value),
                    amount=overage.penalty,
                    notes=f"{overage.over_days} day(s)",
                )
            )
        else:
            notes.append(
                f"{leave_type.value} leave over entitlement by {overage.over_days} day(s) "
                f"({overage.mode.value if overage.mode else 'no mode'}); handle manually"
            )

    auto_deductions.extend(_attendance_deductions(employee, period_metrics, policy))

    sso_amount = sso_amount_for_period(
        employee,
        pay_period.period_no,
        sso_decision,
        base_pay=base_pay,
        prior_period_sso_deducted=prior_period_sso_deducted,
        prior_period_base_pay=prior_period_base_pay,
    )
    sso_deduction, sso_refund = sso_lines(sso_amount, sso_decision)
    if sso_deduction:
        auto_deductions.append(sso_deduction)
    if sso_refund:
        auto_additions.append(sso_refund)

    for warning in period_metrics.warnings:
        notes.append(warning)

    manual_additions = tuple(l for l in (existing.additions if existing else ()) if not l.is_auto)
    manual_deductions = tuple(l for l in (existing.deductions if existing else ()) if not l.is_auto)
    additions = manual_additions + tuple(auto_additions)
    deductions = manual_deductions + tuple(auto_deductions)

    net_pay = compute_net_pay(base_pay, additions, deductions)
    if net_pay < 0:
        notes.append(f"Net pay is negative ({net_pay}); review before sending")

    return PayslipSnapshot(
        base_pay=base_pay,
        additions=additions,
        deductions=deductions,
        attendance_summary=period_metrics,
        attendance_summary_ytd=ytd_metrics,
        net_pay=net_pay,
        over_limit_leave_days=over_limit_days,
        calc_notes=tuple(notes),
    )


def with_manual_lines(
    snapshot: PayslipSnapshot,
    *,
    additions: tuple[LineItem, ...],
    deductions: tuple[LineItem, ...],
) -> PayslipSnapshot:
    """Replace the snapshot's lines and recompute net pay; totals stay consistent."""
    return PayslipSnapshot(
        base_pay=snapshot.base_pay,
        additions=additions,
        deductions=deductions,
        attendance_summary=snapshot.attendance_summary,
        attendance_summary_ytd=snapshot.attendance_summary_ytd,
        net_pay=compute_net_pay(snapshot.base_pay, additions, deductions),
        over_limit_leave_days=snapshot.over_limit_leave_days,
        calc_notes=snapshot.calc_notes,
    )
