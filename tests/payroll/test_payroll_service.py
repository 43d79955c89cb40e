from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from datetime import date, datetime
from decimal import Decimal

import pytest

from conftest import (
    FakeAttendanceRepo,
    FakeEmployeeRepo,
    FakeHolidayRepo,
    FakeLeaveRepo,
    FakePayrollRepo,
    FakePolicyRepo,
)
from src.payroll_system.payroll_system.attendance.model import AttendanceEvent
from src.payroll_system.payroll_system.core.constants import SSO_LINE_NAME
from src.payroll_system.payroll_system.core.enums import (
    CompensationPlan,
    EmploymentStatus,
    PayslipStatus,
    ScanDirection,
    SsoDecisionSource,
    SsoReconcileChoice,
)
from src.payroll_system.payroll_system.core.exceptions import (
    ConfigurationError,
    PayslipStateError,
    SsoReconciliationRequired,
    ValidationError,
)
from src.payroll_system.payroll_system.employees.model import Employee
from src.payroll_system.payroll_system.payroll.service import PayrollService
from src.payroll_system.payroll_system.policy.model import CompensationPolicy

D = Decimal
TODAY = date(2025, 3, 31)
NOW = datetime(2025, 3, 31, 18, 0)

MONTHLY = Employee(
    employee_id=1, full_name="Somchai", plan=CompensationPlan.MONTHLY, salary_monthly=D("12000"), start_date=date(2024, 1, 1)
)
DAILY = Employee(
    employee_id=2, full_name="Malee", plan=CompensationPlan.DAILY, salary_daily=D("450"), start_date=date(2024, 1, 1)
)
NO_RATE = Employee(employee_id=3, full_name="Anan", plan=CompensationPlan.DAILY, start_date=date(2024, 1, 1))
OWNER = Employee(employee_id=4, full_name="Owner", plan=CompensationPlan.NO_PAY)
LEFT = Employee(
    employee_id=7,
    full_name="Preecha",
    plan=CompensationPlan.MONTHLY,
    salary_monthly=D("12000"),
    start_date=date(2023, 1, 1),
    end_date=date(2024, 6, 30),
)
SUSPENDED = Employee(
    employee_id=8,
    full_name="Wanna",
    plan=CompensationPlan.MONTHLY,
    salary_monthly=D("12000"),
    start_date=date(2024, 1, 1),
    status=EmploymentStatus.SUSPENDED,
)
NOT_STARTED = Employee(
    employee_id=9, full_name="Kittipong", plan=CompensationPlan.MONTHLY, salary_monthly=D("12000"), start_date=date(2025, 9, 1)
)
LAST_DAY = Employee(
    employee_id=10,
    full_name="Suda",
    plan=CompensationPlan.MONTHLY,
    salary_monthly=D("12000"),
    start_date=date(2024, 1, 1),
    end_date=date(2025, 3, 16),
)


class Harness:
    def __init__(self, policy, employees=(MONTHLY,), events=()):
        self.payroll = FakePayrollRepo()
        self.policies = FakePolicyRepo(policy)
        self.service = PayrollService(
            self.payroll,
            FakeEmployeeRepo(employees),
            FakeAttendanceRepo(events=events),
            FakeHolidayRepo(),
            FakeLeaveRepo(),
            self.policies,
        )

    def set_sso_percent(self, hr_document, percent):
        hr_document["sso"]["employee_percent"] = percent
        self.policies.policy = CompensationPolicy.from_document(hr_document)

    def generate(self, period_no, employee_id=1):
        return self.service.generate_payslip(
            year=2025, month=3, period_no=period_no, employee_id=employee_id, today=TODAY, now=NOW
        )


def _sso(payslip):
    return sum((l.amount for l in payslip.snapshot.deductions if l.name == SSO_LINE_NAME), D("0"))


def test_first_generation_locks_the_month(policy):
    h = Harness(policy)

    payslip = h.generate(1)

    decision = h.payroll.get_sso_decision(year=2025, month=3)
    assert decision.source == SsoDecisionSource.AUTO_LOCK
    assert decision.policy_hash == policy.sso.policy_hash()
    assert _sso(payslip) == D("300.00")
    assert payslip.status == PayslipStatus.DRAFT
    assert payslip.batch_id == "2025-03-1"


def test_sso_change_before_period_two_blocks_generation(policy, hr_document):
    h = Harness(policy)
    h.generate(1)
    h.set_sso_percent(hr_document, "6")

    with pytest.raises(SsoReconciliationRequired) as exc:
        h.generate(2)

    assert exc.value.locked.employee_percent == D("5")
    assert exc.value.current.employee_percent == D("6")
    assert h.payroll.get_payslip(batch_id="2025-03-2", employee_id=1) is None
    with pytest.raises(SsoReconciliationRequired):
        h.service.generate_batch(year=2025, month=3, period_no=2, today=TODAY, now=NOW)


def test_keep_locked_acknowledges_the_live_settings(policy, hr_document):
    h = Harness(policy)
    h.generate(1)
    h.set_sso_percent(hr_document, "6")

    decision = h.service.reconcile_sso(2025, 3, SsoReconcileChoice.KEEP_LOCKED, decided_by="hr", now=NOW)
    payslip = h.generate(2)

    assert decision.employee_percent == D("5")
    assert decision.source == SsoDecisionSource.AUTO_LOCK
    assert _sso(payslip) == D("300.00")


def test_adopt_current_trues_up_in_period_two(policy, hr_document):
    h = Harness(policy)
    h.generate(1)
    h.set_sso_percent(hr_document, "6")

    decision = h.service.reconcile_sso(2025, 3, SsoReconcileChoice.ADOPT_CURRENT, decided_by="hr", now=NOW)
    payslip = h.generate(2)

    assert decision.source == SsoDecisionSource.HR_OVERRIDE
    assert _sso(payslip) == D("420.00")


def test_custom_values(policy, hr_document):
    h = Harness(policy)
    h.generate(1)
    h.set_sso_percent(hr_document, "6")

    h.service.reconcile_sso(
        2025,
        3,
        SsoReconcileChoice.CUSTOM,
        decided_by="hr",
        custom={"employee_percent": "4", "employer_percent": "4", "monthly_min_base": "1650", "monthly_cap": "15000"},
        now=NOW,
    )

    assert _sso(h.generate(2)) == D("180.00")


def test_custom_needs_values(policy):
    h = Harness(policy)
    h.generate(1)

    with pytest.raises(ValidationError):
        h.service.reconcile_sso(2025, 3, SsoReconcileChoice.CUSTOM, decided_by="hr")


def test_concurrent_first_runs_agree_on_one_lock(policy):
    h = Harness(policy)

    with ThreadPoolExecutor(max_workers=8) as pool:
        batches = list(pool.map(lambda _: h.service.prepare_batch(2025, 3, 1), range(16)))

    assert len({b.sso_decision for b in batches}) == 1
    assert len(h.payroll.sso) == 1


def test_period_two_sums_to_the_monthly_contribution(policy):
    h = Harness(policy)

    p1 = h.generate(1)
    p2 = h.generate(2)

    assert _sso(p1) + _sso(p2) == D("600.00")


def test_period_two_without_period_one_carries_the_whole_month(policy):
    h = Harness(policy)

    assert _sso(h.generate(2)) == D("600.00")


def test_daily_employee_is_paid_for_scanned_days(policy):
    events = [
        AttendanceEvent(employee_id=2, direction=ScanDirection.IN, timestamp=datetime(2025, 3, 3, 8, 0)),
        AttendanceEvent(employee_id=2, direction=ScanDirection.OUT, timestamp=datetime(2025, 3, 3, 17, 0)),
        AttendanceEvent(employee_id=2, direction=ScanDirection.IN, timestamp=datetime(2025, 3, 4, 8, 30)),
        AttendanceEvent(employee_id=2, direction=ScanDirection.OUT, timestamp=datetime(2025, 3, 4, 17, 0)),
        AttendanceEvent(employee_id=2, direction=ScanDirection.IN, timestamp=datetime(2025, 3, 5, 8, 0)),
    ]
    h = Harness(policy, employees=(DAILY,), events=events)

    payslip = h.generate(1, employee_id=2)

    summary = payslip.snapshot.attendance_summary
    assert (summary.present_days, summary.late_days, summary.no_data_days) == (1, 1, 1)
    assert summary.late_minutes == 15
    assert summary.review_needed
    assert payslip.snapshot.base_pay == D("1350.00")
    assert payslip.snapshot.attendance_summary_ytd.start == date(2025, 1, 1)


def test_batch_collects_failures_and_skips(policy):
    h = Harness(policy, employees=(MONTHLY, NO_RATE, OWNER))

    result = h.service.generate_batch(year=2025, month=3, period_no=1, today=TODAY, now=NOW)

    assert [p.employee_id for p in result.generated] == [1]
    assert set(result.failures) == {3}
    assert result.skipped == {4: "NO_PAY plan"}


def test_batch_without_hr_settings_fails_every_employee():
    h = Harness(None, employees=(MONTHLY, DAILY))

    result = h.service.generate_batch(year=2025, month=3, period_no=1, today=TODAY, now=NOW)

    assert result.generated == []
    assert set(result.failures) == {1, 2}


def test_lifecycle_to_paid(policy):
    h = Harness(policy)
    h.generate(1)
    key = dict(batch_id="2025-03-1", employee_id=1)

    sent = h.service.send(**key, now=NOW)
    assert (sent.status, sent.revision_no) == (PayslipStatus.SENT_TO_EMPLOYEE, 1)

    with pytest.raises(ValidationError):
        h.service.request_revision(**key, reason=" ")
    revised = h.service.request_revision(**key, reason="Overtime on the 12th is missing", now=NOW)
    assert revised.employee_note == "Overtime on the 12th is missing"

    h.service.add_line(**key, kind="addition", name="Overtime", amount="800", now=NOW)
    assert h.service.send(**key, now=NOW).revision_no == 2

    h.service.accept(**key, now=NOW)
    paid = h.service.mark_paid(**key, paid_by="owner", account_id="KBANK-001", now=NOW)

    assert paid.status == PayslipStatus.PAID
    assert (paid.paid_by, paid.paid_account_id, paid.paid_at) == ("owner", "KBANK-001", NOW)
    assert paid.snapshot.net_pay == D("6000.00") + D("800") - D("300.00")


def test_paid_payslip_is_immutable(policy):
    h = Harness(policy)
    h.generate(1)
    key = dict(batch_id="2025-03-1", employee_id=1)
    h.service.send(**key)
    h.service.accept(**key)
    h.service.mark_paid(**key, paid_by="owner", account_id="cash")

    with pytest.raises(PayslipStateError):
        h.generate(1)
    with pytest.raises(PayslipStateError):
        h.service.add_line(**key, kind="deduction", name="Fine", amount="10")
    with pytest.raises(PayslipStateError):
        h.service.send(**key)

    result = h.service.generate_batch(year=2025, month=3, period_no=1, today=TODAY, now=NOW)
    assert result.skipped == {1: "already paid"}


def test_illegal_transitions(policy):
    h = Harness(policy)
    h.generate(1)
    key = dict(batch_id="2025-03-1", employee_id=1)

    with pytest.raises(PayslipStateError):
        h.service.accept(**key)
    with pytest.raises(PayslipStateError):
        h.service.mark_paid(**key, paid_by="owner", account_id="cash")


def test_regeneration_keeps_manual_lines_and_revision(policy):
    h = Harness(policy)
    h.generate(1)
    key = dict(batch_id="2025-03-1", employee_id=1)
    h.service.add_line(**key, kind="deduction", name="Uniform", amount="250", notes="2 shirts")
    h.service.send(**key)

    again = h.generate(1)

    assert again.status == PayslipStatus.DRAFT
    assert again.revision_no == 1
    assert [l.name for l in again.snapshot.deductions] == ["Uniform", SSO_LINE_NAME]


def test_manual_lines_cannot_use_the_auto_prefix(policy):
    h = Harness(policy)
    h.generate(1)

    with pytest.raises(ValidationError):
        h.service.add_line(batch_id="2025-03-1", employee_id=1, kind="deduction", name="[AUTO] Social security", amount="1")
    with pytest.raises(ValidationError):
        h.service.remove_line(batch_id="2025-03-1", employee_id=1, kind="deduction", name="[AUTO] Social security")


def test_remove_line_recomputes_net_pay(policy):
    h = Harness(policy)
    h.generate(1)
    key = dict(batch_id="2025-03-1", employee_id=1)
    h.service.add_line(**key, kind="addition", name="Bonus", amount="1000")

    payslip = h.service.remove_line(**key, kind="addition", name="Bonus")

    assert payslip.snapshot.additions == ()
    assert payslip.snapshot.net_pay == D("5700.00")


def test_batch_skips_staff_outside_their_employment(policy):
    h = Harness(policy, employees=(MONTHLY, LEFT, SUSPENDED, NOT_STARTED))

    result = h.service.generate_batch(year=2025, month=3, period_no=1, today=TODAY, now=NOW)

    assert [p.employee_id for p in result.generated] == [1]
    assert result.skipped == {7: "not employed in period", 8: "suspended", 9: "not employed in period"}
    assert result.failures == {}
    for employee_id in (7, 8, 9):
        assert h.payroll.get_payslip(batch_id="2025-03-1", employee_id=employee_id) is None


@pytest.mark.parametrize("employee", [LEFT, SUSPENDED, NOT_STARTED], ids=["ended", "suspended", "not-started"])
def test_single_payslip_refused_outside_employment(policy, employee):
    h = Harness(policy, employees=(employee,))

    with pytest.raises(ConfigurationError) as exc:
        h.generate(1, employee_id=employee.employee_id)

    assert exc.value.employee_id == employee.employee_id
    assert h.payroll.get_payslip(batch_id="2025-03-1", employee_id=employee.employee_id) is None


def test_one_employed_day_in_the_period_is_enough(policy):
    h = Harness(policy, employees=(LAST_DAY,))

    assert h.generate(2, employee_id=10).batch_id == "2025-03-2"
    result = h.service.generate_batch(year=2025, month=4, period_no=1, today=date(2025, 4, 30), now=NOW)
    assert result.skipped == {10: "not employed in period"}
