"""Statutory social-security (SSO) contribution arithmetic.

The monthly contribution is split over the two pay periods so that the two
halves always add up to the monthly figure to the cent. Period 2 trues up
against whatever period 1 actually deducted.
"""
from __future__ import annotations

from decimal import Decimal
from typing import Iterable, Optional

from ..common.money import ZERO, money_str, round2
from ..core.constants import SSO_LINE_NAME, SSO_REFUND_LINE_NAME
from ..core.enums import CompensationPlan
from ..employees.model import Employee
from .model import LineItem, SsoDecision

_HUNDRED = Decimal("100")


def clamp_sso_base(salary_monthly: Decimal, min_base: Decimal, cap: Optional[Decimal]) -> Decimal:
    upper = salary_monthly if cap is None else min(salary_monthly, cap)
    return max(min_base, upper)


def calc_sso_monthly(
    salary_monthly: Decimal,
    percent: Decimal,
    min_base: Decimal,
    cap: Optional[Decimal],
) -> Decimal:
    if salary_monthly <= 0 or percent <= 0:
        return ZERO
    return round2(clamp_sso_base(salary_monthly, min_base, cap) * percent / _HUNDRED)


def split_sso_half(sso_monthly: Decimal) -> tuple[Decimal, Decimal]:
    """Return (p1, p2) with p1 + p2 == sso_monthly exactly."""
    p1 = round2(sso_monthly / 2)
    return p1, sso_monthly - p1


def sso_deducted(deductions: Iterable[LineItem], additions: Iterable[LineItem] = ()) -> Decimal:
    """Net SSO a payslip collected (deduction minus any refund)."""
    taken = sum((l.amount for l in deductions if l.name == SSO_LINE_NAME), ZERO)
    refunded = sum((l.amount for l in additions if l.name == SSO_REFUND_LINE_NAME), ZERO)
    return taken - refunded


def sso_amount_for_period(
    employee: Employee,
    period_no: int,
    decision: SsoDecision,
    *,
    base_pay: Decimal,
    prior_period_sso_deducted: Decimal = ZERO,
    prior_period_base_pay: Optional[Decimal] = None,
) -> Decimal:
    """Signed SSO for this period: positive is a deduction, negative a refund.

    Monthly-rate plans contribute on the monthly salary. Daily-rate plans
    contribute on actual earnings: period 1 on its own income, period 2 on the
    whole month's income less what period 1 took.
    """
    pct = decision.employee_percent
    if employee.plan == CompensationPlan.DAILY:
        if period_no == 1:
            return round2(base_pay * pct / _HUNDRED) if base_pay > 0 and pct > 0 else ZERO
        month_income = (prior_period_base_pay or ZERO) + base_pay
        monthly = calc_sso_monthly(month_income, pct, decision.monthly_min_base, decision.monthly_cap)
        return monthly - prior_period_sso_deducted

    salary = employee.salary_monthly or ZERO
    monthly = calc_sso_monthly(salary, pct, decision.monthly_min_base, decision.monthly_cap)
    p1, _ = split_sso_half(monthly)
    if period_no == 1:
        return p1
    return monthly - prior_period_sso_deducted


def sso_lines(amount: Decimal, decision: SsoDecision) -> tuple[Optional[LineItem], Optional[LineItem]]:
    """Turn a signed period amount into (deduction, refund addition)."""
    note = f"rate {money_str(decision.employee_percent)}%"
    if amount > 0:
        return LineItem(name=SSO_LINE_NAME, amount=amount, notes=note), None
    if amount < 0:
        return None, LineItem(name=SSO_REFUND_LINE_NAME, amount=-amount, notes=f"over-collected in period 1, {note}")
    return None, None
