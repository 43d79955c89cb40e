from __future__ import annotations

from decimal import Decimal

import pytest

from src.payroll_system.payroll_system.core.constants import SSO_LINE_NAME, SSO_REFUND_LINE_NAME
from src.payroll_system.payroll_system.core.enums import CompensationPlan, SsoDecisionSource
from src.payroll_system.payroll_system.employees.model import Employee
from src.payroll_system.payroll_system.payroll.model import LineItem, SsoDecision
from src.payroll_system.payroll_system.payroll.sso import (
    calc_sso_monthly,
    clamp_sso_base,
    split_sso_half,
    sso_amount_for_period,
    sso_deducted,
    sso_lines,
)
from src.payroll_system.payroll_system.policy.model import SsoSettings

D = Decimal


def _decision(percent="5", min_base="1650", cap="15000") -> SsoDecision:
    settings = SsoSettings.from_document({"employee_percent": percent, "monthly_min_base": min_base, "monthly_cap": cap})
    return SsoDecision.from_settings(settings, source=SsoDecisionSource.AUTO_LOCK, decided_by="system")


def test_clamp_applies_min_base_and_cap():
    assert clamp_sso_base(D("1000"), D("1650"), D("15000")) == D("1650")
    assert clamp_sso_base(D("20000"), D("1650"), D("15000")) == D("15000")
    assert clamp_sso_base(D("20000"), D("1650"), None) == D("20000")


def test_monthly_contribution():
    assert calc_sso_monthly(D("12000"), D("5"), D("1650"), D("15000")) == D("600.00")
    assert calc_sso_monthly(D("40000"), D("5"), D("1650"), D("15000")) == D("750.00")
    assert calc_sso_monthly(D("0"), D("5"), D("1650"), D("15000")) == D("0")
    assert calc_sso_monthly(D("12000"), D("0"), D("1650"), D("15000")) == D("0")


@pytest.mark.parametrize("monthly", ["600.00", "750.01", "82.51", "0.01", "0"])
def test_split_has_no_leftover_cent(monthly):
    p1, p2 = split_sso_half(D(monthly))

    assert p1 + p2 == D(monthly)
    assert abs(p1 - p2) <= D("0.01")


def test_monthly_plan_takes_half_then_trues_up():
    employee = Employee(employee_id=1, full_name="A", plan=CompensationPlan.MONTHLY, salary_monthly=D("12345"))
    decision = _decision()

    p1 = sso_amount_for_period(employee, 1, decision, base_pay=D("6172.50"))
    p2 = sso_amount_for_period(employee, 2, decision, base_pay=D("6172.50"), prior_period_sso_deducted=p1)

    assert p1 + p2 == calc_sso_monthly(D("12345"), D("5"), D("1650"), D("15000"))


def test_over_collection_in_period_one_becomes_negative():
    employee = Employee(employee_id=1, full_name="A", plan=CompensationPlan.MONTHLY, salary_monthly=D("12000"))

    amount = sso_amount_for_period(employee, 2, _decision("2"), base_pay=D("6000"), prior_period_sso_deducted=D("300"))

    assert amount == D("-60.00")
    deduction, refund = sso_lines(amount, _decision("2"))
    assert deduction is None
    assert refund.name == SSO_REFUND_LINE_NAME
    assert refund.amount == D("60.00")


def test_daily_plan_contributes_on_earnings():
    employee = Employee(employee_id=2, full_name="B", plan=CompensationPlan.DAILY, salary_daily=D("450"))
    decision = _decision()

    p1 = sso_amount_for_period(employee, 1, decision, base_pay=D("4950"))
    p2 = sso_amount_for_period(
        employee, 2, decision, base_pay=D("5400"), prior_period_sso_deducted=p1, prior_period_base_pay=D("4950")
    )

    assert p1 == D("247.50")
    assert p1 + p2 == D("517.50")


def test_sso_deducted_nets_refunds():
    deductions = [LineItem(SSO_LINE_NAME, D("300")), LineItem("Uniform", D("200"))]
    additions = [LineItem(SSO_REFUND_LINE_NAME, D("20"))]

    assert sso_deducted(deductions, additions) == D("280")
