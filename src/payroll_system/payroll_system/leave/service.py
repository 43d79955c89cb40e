from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Optional, Sequence

from ..common.validators import require_non_empty
from ..core.enums import LeaveStatus, LeaveType, OverLimitMode
from ..core.exceptions import ConfigurationError, LeaveEntitlementError, NotFoundError, ValidationError
from ..employees.repository import EmployeeRepository
from ..policy.repository import PolicyRepository
from .model import LeaveOverage, LeaveRequest
from .overage import approved_days, evaluate_overage
from .repository import LeaveRepository

logger = logging.getLogger(__name__)


class LeaveService:
    def __init__(self, leaves: LeaveRepository, employees: EmployeeRepository, policies: PolicyRepository):
        self._leaves = leaves
        self._employees = employees
        self._policies = policies

    def _require_employee(self, employee_id: int):
        employee = self._employees.get_by_id(int(employee_id))
        if not employee:
            raise NotFoundError(f"Employee {employee_id} not found")
        return employee

    def _require_leave(self, request_id: int) -> LeaveRequest:
        leave = self._leaves.get_by_id(int(request_id))
        if not leave:
            raise NotFoundError(f"Leave request {request_id} not found")
        return leave

    def submit(
        self,
        *,
        employee_id: int,
        leave_type: LeaveType,
        start_date: date,
        end_date: date,
        reason: str,
        now: Optional[datetime] = None,
    ) -> int:
        self._require_employee(employee_id)
        if end_date < start_date:
            raise ValidationError("Leave end date cannot be before its start date")
        if start_date.year != end_date.year:
            raise ValidationError("A leave request cannot span two fiscal years")

        return self._leaves.create(
            employee_id=int(employee_id),
            leave_type=leave_type,
            start_date=start_date,
            end_date=end_date,
            day_count=(end_date - start_date).days + 1,
            fiscal_year=start_date.year,
            reason=require_non_empty(reason, "Reason"),
            created_at=now or datetime.now(),
        )

    def check_overage(self, *, employee_id: int, leave_type: LeaveType, fiscal_year: int, requested_days: int) -> LeaveOverage:
        """Advisory entitlement check against the currently approved requests."""
        employee = self._require_employee(employee_id)
        policy = self._policies.get_current()
        if policy is None:
            raise ConfigurationError("HR settings document is missing")

        taken = approved_days(
            self._leaves.list_for_employee(employee_id=employee.employee_id, fiscal_year=fiscal_year),
            leave_type,
            fiscal_year=fiscal_year,
        )
        return evaluate_overage(employee, leave_type, fiscal_year, taken, requested_days, policy)

    def approve(self, *, request_id: int, decided_by: str, now: Optional[datetime] = None) -> LeaveOverage:
        leave = self._require_leave(request_id)
        if leave.status != LeaveStatus.SUBMITTED:
            raise ValidationError("Only submitted leave requests can be approved")

        overage = self.check_overage(
            employee_id=leave.employee_id,
            leave_type=leave.leave_type,
            fiscal_year=leave.fiscal_year,
            requested_days=leave.day_count,
        )
        if overage.exceeds and overage.mode == OverLimitMode.DISALLOW:
            raise LeaveEntitlementError(
                f"{leave.leave_type.value} leave would exceed the annual entitlement by {overage.over_days} day(s)"
            )

        self._decide(leave, LeaveStatus.APPROVED, decided_by=decided_by, now=now)
        if overage.exceeds:
            logger.info(
                "Leave %s approved over entitlement: employee=%s type=%s over_days=%s mode=%s",
                leave.request_id, leave.employee_id, leave.leave_type.value, overage.over_days, overage.mode,
            )
        return overage

    def reject(self, *, request_id: int, decided_by: str, now: Optional[datetime] = None) -> None:
        leave = self._require_leave(request_id)
        if leave.status != LeaveStatus.SUBMITTED:
            raise ValidationError("Only submitted leave requests can be rejected")
        self._decide(leave, LeaveStatus.REJECTED, decided_by=decided_by, now=now)

    def cancel(self, *, request_id: int, decided_by: str, now: Optional[datetime] = None) -> None:
        leave = self._require_leave(request_id)
        if leave.status not in (LeaveStatus.SUBMITTED, LeaveStatus.APPROVED):
            raise ValidationError("Leave request is already closed")
        self._decide(leave, LeaveStatus.CANCELLED, decided_by=decided_by, now=now)

    def list_for_employee(self, *, employee_id: int, fiscal_year: Optional[int] = None) -> Sequence[LeaveRequest]:
        return self._leaves.list_for_employee(employee_id=int(employee_id), fiscal_year=fiscal_year)

    def _decide(self, leave: LeaveRequest, status: LeaveStatus, *, decided_by: str, now: Optional[datetime]) -> None:
        ok = self._leaves.set_status(
            request_id=leave.request_id,
            status=status,
            decided_by=require_non_empty(decided_by, "Decided by"),
            decided_at=now or datetime.now(),
        )
        if not ok:
            raise ValidationError("Updating the leave request failed")
