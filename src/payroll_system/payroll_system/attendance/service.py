from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Optional

from ..common.datetime_utils import parse_hhmm
from ..common.validators import require_non_empty
from ..core.enums import AdjustmentType
from ..core.exceptions import ConfigurationError, NotFoundError, ValidationError
from ..employees.model import Employee
from ..employees.repository import EmployeeRepository
from ..holidays.repository import HolidayRepository
from ..holidays.resolver import HolidayCalendar
from ..leave.repository import LeaveRepository
from ..policy.model import CompensationPolicy
from ..policy.repository import PolicyRepository
from .aggregator import PeriodMetrics, aggregate_period
from .classifier import classify_period
from .model import AttendanceAdjustment, DayRecord
from .repository import AttendanceRepository

logger = logging.getLogger(__name__)


class AttendanceService:
    def __init__(
        self,
        attendance: AttendanceRepository,
        employees: EmployeeRepository,
        holidays: HolidayRepository,
        leaves: LeaveRepository,
        policies: PolicyRepository,
    ):
        self._attendance = attendance
        self._employees = employees
        self._holidays = holidays
        self._leaves = leaves
        self._policies = policies

    def _require_employee(self, employee_id: int) -> Employee:
        employee = self._employees.get_by_id(int(employee_id))
        if not employee:
            raise NotFoundError(f"Employee {employee_id} not found")
        return employee

    def _require_policy(self) -> CompensationPolicy:
        policy = self._policies.get_current()
        if policy is None:
            raise ConfigurationError("HR settings document is missing")
        return policy

    @staticmethod
    def _parse_time(work_date: date, value: Optional[str]) -> Optional[datetime]:
        v = (value or "").strip()
        if not v:
            return None
        try:
            return datetime.combine(work_date, parse_hhmm(v))
        except ValueError:
            raise ValidationError("Invalid time (HH:MM)")

    def record_adjustment(
        self,
        *,
        employee_id: int,
        work_date: date,
        adjustment_type: AdjustmentType,
        note: str,
        created_by: str,
        adjusted_in: str = "",
        adjusted_out: str = "",
        now: Optional[datetime] = None,
    ) -> AttendanceAdjustment:
        """Store the single correction for (employee, date), replacing any earlier one."""
        self._require_employee(employee_id)
        note = require_non_empty(note, "Justification note")
        created_by = require_non_empty(created_by, "Created by")

        in_dt = out_dt = None
        if adjustment_type == AdjustmentType.ADD_RECORD:
            in_dt = self._parse_time(work_date, adjusted_in)
            out_dt = self._parse_time(work_date, adjusted_out)
            if not in_dt and not out_dt:
                raise ValidationError("ADD_RECORD needs a clock-in or clock-out time")
            if in_dt and out_dt and out_dt < in_dt:
                raise ValidationError("Clock-out cannot be before clock-in")

        adjustment = AttendanceAdjustment(
            employee_id=int(employee_id),
            work_date=work_date,
            adjustment_type=adjustment_type,
            adjusted_in=in_dt,
            adjusted_out=out_dt,
            note=note,
            created_by=created_by,
            created_at=now or datetime.now(),
        )
        previous = self._attendance.get_adjustment(employee_id=int(employee_id), work_date=work_date)
        self._attendance.upsert_adjustment(adjustment)
        if previous:
            logger.info(
                "Adjustment for employee=%s date=%s replaced (%s -> %s) by %s",
                employee_id, work_date, previous.adjustment_type.value, adjustment_type.value, created_by,
            )
        return adjustment

    def day_records(self, *, employee_id: int, start: date, end: date, today: Optional[date] = None) -> list[DayRecord]:
        if end < start:
            raise ValidationError("End date cannot be before start date")
        employee = self._require_employee(employee_id)
        policy = self._require_policy()

        return classify_period(
            employee,
            start,
            end,
            events=self._attendance.list_events(employee_id=employee.employee_id, start_date=start, end_date=end),
            approved_leaves=self._leaves.list_approved_overlapping(
                employee_id=employee.employee_id, start_date=start, end_date=end
            ),
            calendar=HolidayCalendar.from_records(self._holidays.list_all()),
            adjustments=self._attendance.list_adjustments(
                employee_id=employee.employee_id, start_date=start, end_date=end
            ),
            policy=policy,
            reference_today=today or date.today(),
        )

    def summarize(self, *, employee_id: int, start: date, end: date, today: Optional[date] = None) -> PeriodMetrics:
        employee = self._require_employee(employee_id)
        policy = self._require_policy()
        records = self.day_records(employee_id=employee_id, start=start, end=end, today=today)
        return aggregate_period(
            employee,
            records,
            employee.plan,
            leave_is_payable=policy.payroll.leave_is_payable,
        )
