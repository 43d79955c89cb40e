from __future__ import annotations

from enum import Enum


class CompensationPlan(str, Enum):
    """How an employee is paid."""

    MONTHLY = "MONTHLY"
    DAILY = "DAILY"
    MONTHLY_NO_SCAN = "MONTHLY_NO_SCAN"
    NO_PAY = "NO_PAY"

    @property
    def is_monthly_rate(self) -> bool:
        return self in (CompensationPlan.MONTHLY, CompensationPlan.MONTHLY_NO_SCAN)


class EmploymentStatus(str, Enum):
    ACTIVE = "ACTIVE"
    SUSPENDED = "SUSPENDED"


class ScanDirection(str, Enum):
    IN = "IN"
    OUT = "OUT"


class LeaveType(str, Enum):
    SICK = "SICK"
    BUSINESS = "BUSINESS"
    VACATION = "VACATION"


class LeaveStatus(str, Enum):
    """Leave request workflow. Only APPROVED affects attendance and payroll."""

    SUBMITTED = "SUBMITTED"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"
    CANCELLED = "CANCELLED"


class AdjustmentType(str, Enum):
    ADD_RECORD = "ADD_RECORD"
    FORGIVE_LATE = "FORGIVE_LATE"


class WeekendMode(str, Enum):
    SAT_SUN = "SAT_SUN"
    SUN_ONLY = "SUN_ONLY"


class OverLimitMode(str, Enum):
    """What happens when approved leave goes past the annual entitlement."""

    DEDUCT_SALARY = "DEDUCT_SALARY"
    UNPAID = "UNPAID"
    DISALLOW = "DISALLOW"


class DayStatus(str, Enum):
    """Exactly one of these is assigned to every (employee, date)."""

    FUTURE = "FUTURE"
    NOT_STARTED = "NOT_STARTED"
    ENDED = "ENDED"
    SUSPENDED = "SUSPENDED"
    HOLIDAY = "HOLIDAY"
    WEEKEND = "WEEKEND"
    LEAVE = "LEAVE"
    ABSENT = "ABSENT"
    NO_DATA = "NO_DATA"
    LATE = "LATE"
    PRESENT = "PRESENT"

    @property
    def is_non_working(self) -> bool:
        return self in NON_WORKING_STATUSES


NON_WORKING_STATUSES = frozenset(
    {
        DayStatus.FUTURE,
        DayStatus.NOT_STARTED,
        DayStatus.ENDED,
        DayStatus.SUSPENDED,
        DayStatus.HOLIDAY,
        DayStatus.WEEKEND,
    }
)


class PayslipStatus(str, Enum):
    DRAFT = "DRAFT"
    SENT_TO_EMPLOYEE = "SENT_TO_EMPLOYEE"
    REVISION_REQUESTED = "REVISION_REQUESTED"
    READY_TO_PAY = "READY_TO_PAY"
    PAID = "PAID"


class SsoDecisionSource(str, Enum):
    AUTO_LOCK = "AUTO_LOCK"
    HR_OVERRIDE = "HR_OVERRIDE"


class SsoReconcileChoice(str, Enum):
    """Operator answer when SSO settings changed after the month was locked."""

    KEEP_LOCKED = "KEEP_LOCKED"
    ADOPT_CURRENT = "ADOPT_CURRENT"
    CUSTOM = "CUSTOM"
