from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import Payslip, SsoDecision


class PayrollRepository(Protocol):
    def get_sso_decision(self, *, year: int, month: int) -> Optional[SsoDecision]:
        raise NotImplementedError

    def create_sso_decision_if_absent(self, *, year: int, month: int, decision: SsoDecision) -> SsoDecision:
        """Atomically store `decision` unless the month is already locked; return the stored one."""
        raise NotImplementedError

    def replace_sso_decision(self, *, year: int, month: int, decision: SsoDecision) -> None:
        raise NotImplementedError

    def get_payslip(self, *, batch_id: str, employee_id: int) -> Optional[Payslip]:
        raise NotImplementedError

    def list_payslips(self, *, batch_id: str) -> Sequence[Payslip]:
        raise NotImplementedError

    def save_payslip(self, payslip: Payslip) -> None:
        raise NotImplementedError
