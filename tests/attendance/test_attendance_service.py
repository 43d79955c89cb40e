from __future__ import annotations

from datetime import date, datetime

import pytest

from conftest import FakeAttendanceRepo, FakeEmployeeRepo, FakeHolidayRepo, FakeLeaveRepo, FakePolicyRepo
from src.payroll_system.payroll_system.attendance.model import AttendanceEvent
from src.payroll_system.payroll_system.attendance.service import AttendanceService
from src.payroll_system.payroll_system.core.enums import AdjustmentType, CompensationPlan, DayStatus, ScanDirection
from src.payroll_system.payroll_system.core.exceptions import ConfigurationError, NotFoundError, ValidationError
from src.payroll_system.payroll_system.employees.model import Employee

EMPLOYEE = Employee(
    employee_id=1, full_name="Somchai", plan=CompensationPlan.MONTHLY, salary_monthly=30000, start_date=date(2024, 1, 1)
)


def _service(policy, events=()):
    attendance = FakeAttendanceRepo(events=events)
    service = AttendanceService(
        attendance,
        FakeEmployeeRepo([EMPLOYEE]),
        FakeHolidayRepo(),
        FakeLeaveRepo(),
        FakePolicyRepo(policy),
    )
    return service, attendance


def test_adjustment_requires_a_note(policy):
    service, _ = _service(policy)

    with pytest.raises(ValidationError):
        service.record_adjustment(
            employee_id=1,
            work_date=date(2025, 3, 3),
            adjustment_type=AdjustmentType.FORGIVE_LATE,
            note="   ",
            created_by="hr",
        )


def test_add_record_needs_a_time(policy):
    service, _ = _service(policy)

    with pytest.raises(ValidationError):
        service.record_adjustment(
            employee_id=1,
            work_date=date(2025, 3, 3),
            adjustment_type=AdjustmentType.ADD_RECORD,
            note="scanner offline",
            created_by="hr",
        )


def test_adjustment_for_unknown_employee(policy):
    service, _ = _service(policy)

    with pytest.raises(NotFoundError):
        service.record_adjustment(
            employee_id=99,
            work_date=date(2025, 3, 3),
            adjustment_type=AdjustmentType.FORGIVE_LATE,
            note="ok",
            created_by="hr",
        )


def test_last_adjustment_for_a_day_wins(policy):
    events = [AttendanceEvent(employee_id=1, direction=ScanDirection.IN, timestamp=datetime(2025, 3, 3, 9, 0))]
    service, attendance = _service(policy, events)

    service.record_adjustment(
        employee_id=1,
        work_date=date(2025, 3, 3),
        adjustment_type=AdjustmentType.FORGIVE_LATE,
        note="traffic",
        created_by="hr",
    )
    service.record_adjustment(
        employee_id=1,
        work_date=date(2025, 3, 3),
        adjustment_type=AdjustmentType.ADD_RECORD,
        note="forgot to scan out",
        created_by="hr",
        adjusted_out="17:30",
    )

    assert len(attendance.adjustments) == 1
    (rec,) = service.day_records(employee_id=1, start=date(2025, 3, 3), end=date(2025, 3, 3), today=date(2025, 3, 31))
    assert rec.status == DayStatus.LATE
    assert rec.late_minutes == 45
    assert rec.last_out == datetime(2025, 3, 3, 17, 30)


def test_summarize_needs_hr_settings():
    service, _ = _service(None)

    with pytest.raises(ConfigurationError):
        service.summarize(employee_id=1, start=date(2025, 3, 1), end=date(2025, 3, 15))


def test_summarize_counts_missing_days_as_absent(policy):
    events = [
        AttendanceEvent(employee_id=1, direction=ScanDirection.IN, timestamp=datetime(2025, 3, 3, 8, 0)),
        AttendanceEvent(employee_id=1, direction=ScanDirection.OUT, timestamp=datetime(2025, 3, 3, 17, 0)),
    ]
    service, _ = _service(policy, events)

    m = service.summarize(employee_id=1, start=date(2025, 3, 3), end=date(2025, 3, 7), today=date(2025, 3, 31))

    assert m.present_days == 1
    assert m.absent_days == 4
    assert m.payable_units == 1
