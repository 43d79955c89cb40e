from __future__ import annotations

from typing import Any, Optional


class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class NotFoundError(DomainError):
    """Raised when a referenced record does not exist."""


class ConfigurationError(DomainError):
    """Raised when an employee or the HR settings cannot be paid as configured.

    Fatal for one employee's payslip, never for the whole batch.
    """

    def __init__(self, message: str, *, employee_id: Optional[int] = None):
        super().__init__(message)
        self.employee_id = employee_id


class SsoReconciliationRequired(DomainError):
    """SSO settings changed after the month's contribution rate was locked."""

    def __init__(self, *, year: int, month: int, locked: Any, current: Any):
        super().__init__(
            f"SSO settings changed since {year:04d}-{month:02d} was locked; reconciliation required"
        )
        self.year = year
        self.month = month
        self.locked = locked
        self.current = current


class PayslipStateError(DomainError):
    """Raised for an illegal payslip lifecycle transition or a change to a PAID payslip."""


class LeaveEntitlementError(DomainError):
    """Raised when approving leave would exceed an entitlement whose policy is DISALLOW."""
