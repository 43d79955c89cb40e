from __future__ import annotations

import copy
import dataclasses
import threading
from datetime import datetime, time, timedelta

import pytest

from src.payroll_system.payroll_system.core.enums import LeaveStatus
from src.payroll_system.payroll_system.leave.model import LeaveRequest
from src.payroll_system.payroll_system.policy.model import CompensationPolicy


HR_DOCUMENT = {
    "work_start": "08:00",
    "grace_minutes": 15,
    "weekend_mode": "SAT_SUN",
    "payroll": {"period1_start": 1, "period1_end": 15, "period2_start": 16, "deduction_base_days": 26},
    "sso": {"employee_percent": "5", "employer_percent": "5", "monthly_min_base": "1650", "monthly_cap": "15000"},
    "leave_types": {
        "SICK": {"annual_entitlement": 10, "over_limit_mode": "DEDUCT_SALARY"},
        "BUSINESS": {"annual_entitlement": 3, "over_limit_mode": "UNPAID"},
        "VACATION": {"annual_entitlement": 6, "over_limit_mode": "DISALLOW"},
    },
}


class FakeEmployeeRepo:
    def __init__(self, employees=()):
        self.employees = {e.employee_id: e for e in employees}

    def get_by_id(self, employee_id):
        return self.employees.get(int(employee_id))

    def list_all(self):
        return [self.employees[k] for k in sorted(self.employees)]


class FakeAttendanceRepo:
    def __init__(self, events=(), adjustments=()):
        self.events = list(events)
        self.adjustments = {(a.employee_id, a.work_date): a for a in adjustments}

    def list_events(self, *, employee_id, start_date, end_date):
        start = datetime.combine(start_date, time.min)
        end = datetime.combine(end_date + timedelta(days=1), time.min)
        return [
            e
            for e in self.events
            if e.employee_id == employee_id and (not isinstance(e.timestamp, datetime) or start <= e.timestamp < end)
        ]

    def list_adjustments(self, *, employee_id, start_date, end_date):
        return [
            a
            for (eid, d), a in sorted(self.adjustments.items())
            if eid == employee_id and start_date <= d <= end_date
        ]

    def get_adjustment(self, *, employee_id, work_date):
        return self.adjustments.get((employee_id, work_date))

    def upsert_adjustment(self, adjustment):
        self.adjustments[(adjustment.employee_id, adjustment.work_date)] = adjustment


class FakeHolidayRepo:
    def __init__(self, records=()):
        self.records = list(records)

    def list_all(self):
        return list(self.records)


class FakeLeaveRepo:
    def __init__(self, leaves=()):
        self.leaves = {l.request_id: l for l in leaves}
        self._next_id = max(self.leaves, default=0) + 1

    def get_by_id(self, request_id):
        return self.leaves.get(int(request_id))

    def create(self, *, employee_id, leave_type, start_date, end_date, day_count, fiscal_year, reason, created_at):
        rid = self._next_id
        self._next_id += 1
        self.leaves[rid] = LeaveRequest(
            request_id=rid,
            employee_id=employee_id,
            leave_type=leave_type,
            start_date=start_date,
            end_date=end_date,
            day_count=day_count,
            status=LeaveStatus.SUBMITTED,
            fiscal_year=fiscal_year,
            reason=reason,
            created_at=created_at,
        )
        return rid

    def set_status(self, *, request_id, status, decided_by, decided_at):
        leave = self.leaves.get(int(request_id))
        if not leave:
            return False
        self.leaves[leave.request_id] = dataclasses.replace(
            leave, status=status, decided_by=decided_by, decided_at=decided_at
        )
        return True

    def list_for_employee(self, *, employee_id, fiscal_year=None, status=None):
        return [
            l
            for l in sorted(self.leaves.values(), key=lambda l: (l.start_date, l.request_id))
            if l.employee_id == employee_id
            and (fiscal_year is None or l.fiscal_year == fiscal_year)
            and (status is None or l.status == status)
        ]

    def list_approved_overlapping(self, *, employee_id, start_date, end_date):
        return [
            l
            for l in self.list_for_employee(employee_id=employee_id, status=LeaveStatus.APPROVED)
            if l.start_date <= end_date and l.end_date >= start_date
        ]


class FakePolicyRepo:
    def __init__(self, policy=None):
        self.policy = policy

    def get_current(self):
        return self.policy


class FakePayrollRepo:
    def __init__(self):
        self._lock = threading.Lock()
        self.sso = {}
        self.payslips = {}
        self.create_calls = 0

    def get_sso_decision(self, *, year, month):
        return self.sso.get((year, month))

    def create_sso_decision_if_absent(self, *, year, month, decision):
        with self._lock:
            self.create_calls += 1
            return self.sso.setdefault((year, month), decision)

    def replace_sso_decision(self, *, year, month, decision):
        self.sso[(year, month)] = decision

    def get_payslip(self, *, batch_id, employee_id):
        return self.payslips.get((batch_id, employee_id))

    def list_payslips(self, *, batch_id):
        return [p for (b, _), p in sorted(self.payslips.items()) if b == batch_id]

    def save_payslip(self, payslip):
        self.payslips[(payslip.batch_id, payslip.employee_id)] = payslip


@pytest.fixture
def hr_document():
    return copy.deepcopy(HR_DOCUMENT)


@pytest.fixture
def policy(hr_document):
    return CompensationPolicy.from_document(hr_document)


@pytest.fixture
def at():
    """Build a datetime: at(2025, 3, 3, "08:20")."""

    def _at(year, month, day, hhmm):
        h, m = (int(p) for p in hhmm.split(":"))
        return datetime(year, month, day, h, m)

    return _at


@pytest.fixture
def approved_leave():
    def _leave(request_id, employee_id, leave_type, start, end):
        return LeaveRequest(
            request_id=request_id,
            employee_id=employee_id,
            leave_type=leave_type,
            start_date=start,
            end_date=end,
            day_count=(end - start).days + 1,
            status=LeaveStatus.APPROVED,
            fiscal_year=start.year,
            reason="test",
        )

    return _leave

