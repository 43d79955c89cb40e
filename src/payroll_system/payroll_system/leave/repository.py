from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Protocol, Sequence

from ..core.enums import LeaveStatus, LeaveType
from .model import LeaveRequest


class LeaveRepository(Protocol):
    def get_by_id(self, request_id: int) -> Optional[LeaveRequest]:
        raise NotImplementedError

    def create(
        self,
        *,
        employee_id: int,
        leave_type: LeaveType,
        start_date: date,
        end_date: date,
        day_count: int,
        fiscal_year: int,
        reason: str,
        created_at: datetime,
    ) -> int:
        raise NotImplementedError

    def set_status(
        self,
        *,
        request_id: int,
        status: LeaveStatus,
        decided_by: str,
        decided_at: datetime,
    ) -> bool:
        raise NotImplementedError

    def list_for_employee(
        self,
        *,
        employee_id: int,
        fiscal_year: Optional[int] = None,
        status: Optional[LeaveStatus] = None,
    ) -> Sequence[LeaveRequest]:
        raise NotImplementedError

    def list_approved_overlapping(self, *, employee_id: int, start_date: date, end_date: date) -> Sequence[LeaveRequest]:
        raise NotImplementedError
