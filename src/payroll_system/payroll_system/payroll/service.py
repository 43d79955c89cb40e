from __future__ import annotations

import dataclasses
import logging
from datetime import date, datetime
from typing import Any, Mapping, Optional, Sequence, Union

from ..attendance.aggregator import aggregate_period
from ..attendance.classifier import classify_period
from ..attendance.repository import AttendanceRepository
from ..common.datetime_utils import now_local
from ..common.money import ZERO
from ..common.validators import require_non_empty, require_positive_amount
from ..core.constants import AUTO_LINE_PREFIX
from ..core.enums import LeaveStatus, PayslipStatus, SsoDecisionSource, SsoReconcileChoice
from ..core.exceptions import (
    ConfigurationError,
    DomainError,
    NotFoundError,
    PayslipStateError,
    SsoReconciliationRequired,
    ValidationError,
)
from ..employees.model import Employee
from ..employees.repository import EmployeeRepository
from ..holidays.repository import HolidayRepository
from ..holidays.resolver import HolidayCalendar
from ..leave.repository import LeaveRepository
from ..policy.model import CompensationPolicy, SsoSettings
from ..policy.repository import PolicyRepository
from .engine import build_payslip, with_manual_lines
from .model import (
    ALLOWED_TRANSITIONS,
    LineItem,
    PayPeriodBatch,
    Payslip,
    PayrollRunResult,
    SsoDecision,
    format_batch_id,
    parse_batch_id,
)
from .periods import resolve_pay_period
from .repository import PayrollRepository
from .sso import sso_deducted

logger = logging.getLogger(__name__)

_LINE_KINDS = ("addition", "deduction")


class PayrollService:
    """Runs pay periods: SSO lock, payslip generation and the payslip lifecycle."""

    def __init__(
        self,
        payroll: PayrollRepository,
        employees: EmployeeRepository,
        attendance: AttendanceRepository,
        holidays: HolidayRepository,
        leaves: LeaveRepository,
        policies: PolicyRepository,
    ):
        self._payroll = payroll
        self._employees = employees
        self._attendance = attendance
        self._holidays = holidays
        self._leaves = leaves
        self._policies = policies

    # ---- SSO lock ----

    def _require_policy(self) -> CompensationPolicy:
        policy = self._policies.get_current()
        if policy is None:
            raise ConfigurationError("HR settings document is missing")
        return policy

    def prepare_batch(
        self,
        year: int,
        month: int,
        period_no: int,
        *,
        policy: Optional[CompensationPolicy] = None,
        decided_by: str = "system",
        now: Optional[datetime] = None,
    ) -> PayPeriodBatch:
        """Resolve the pay period and the month's SSO decision.

        The first run of a month locks the live SSO settings, whichever period it
        is for: running period 2 before period 1 also locks the month. Any later run whose
        live settings differ from the lock (and were not acknowledged) raises
        SsoReconciliationRequired before anything is computed.
        """
        policy = policy or self._require_policy()
        period = resolve_pay_period(year, month, period_no, policy.payroll)
        live = policy.sso
        live_hash = live.policy_hash()

        decision = self._payroll.get_sso_decision(year=period.year, month=period.month)
        if decision is None:
            candidate = SsoDecision.from_settings(
                live,
                source=SsoDecisionSource.AUTO_LOCK,
                decided_by=decided_by,
                decided_at=now or now_local(),
            )
            decision = self._payroll.create_sso_decision_if_absent(
                year=period.year, month=period.month, decision=candidate
            )
            if decision == candidate:
                logger.info(
                    "SSO locked for %04d-%02d at employee=%s%% (hash=%s)",
                    period.year, period.month, decision.employee_percent, decision.policy_hash[:12],
                )

        if not decision.accepts(live_hash):
            logger.warning(
                "SSO settings changed after %04d-%02d was locked (locked=%s live=%s)",
                period.year, period.month, decision.policy_hash[:12], live_hash[:12],
            )
            raise SsoReconciliationRequired(year=period.year, month=period.month, locked=decision, current=live)

        return PayPeriodBatch(period=period, sso_decision=decision)

    def reconcile_sso(
        self,
        year: int,
        month: int,
        choice: SsoReconcileChoice,
        *,
        decided_by: str,
        custom: Optional[Union[SsoSettings, Mapping[str, Any]]] = None,
        now: Optional[datetime] = None,
    ) -> SsoDecision:
        """Resolve a blocked month.

        KEEP_LOCKED keeps the locked rate and acknowledges the live settings;
        ADOPT_CURRENT locks the live settings; CUSTOM locks operator-supplied
        values. Period 2 trues up against whatever period 1 actually deducted.
        """
        decided_by = require_non_empty(decided_by, "Decided by")
        policy = self._require_policy()
        live = policy.sso
        live_hash = live.policy_hash()
        decided_at = now or now_local()

        locked = self._payroll.get_sso_decision(year=int(year), month=int(month))
        if locked is None:
            raise NotFoundError(f"No SSO decision locked for {int(year):04d}-{int(month):02d}")

        if choice == SsoReconcileChoice.KEEP_LOCKED:
            decision = dataclasses.replace(
                locked, acknowledged_policy_hash=live_hash, decided_by=decided_by, decided_at=decided_at
            )
        elif choice == SsoReconcileChoice.ADOPT_CURRENT:
            decision = SsoDecision.from_settings(
                live, source=SsoDecisionSource.HR_OVERRIDE, decided_by=decided_by, decided_at=decided_at
            )
        elif choice == SsoReconcileChoice.CUSTOM:
            if custom is None:
                raise ValidationError("Custom SSO values are required")
            try:
                settings = custom if isinstance(custom, SsoSettings) else SsoSettings.from_document(custom)
            except ValueError as e:
                raise ValidationError(f"Invalid custom SSO values: {e}") from e
            if settings.employee_percent < 0 or settings.employer_percent < 0 or settings.monthly_min_base < 0:
                raise ValidationError("Custom SSO values cannot be negative")
            decision = SsoDecision.from_settings(
                settings,
                source=SsoDecisionSource.HR_OVERRIDE,
                decided_by=decided_by,
                decided_at=decided_at,
                acknowledged_policy_hash=live_hash,
            )
        else:
            raise ValidationError(f"Unknown reconcile choice: {choice}")

        self._payroll.replace_sso_decision(year=int(year), month=int(month), decision=decision)
        logger.info(
            "SSO for %04d-%02d reconciled with %s by %s: employee=%s%%",
            int(year), int(month), choice.value, decided_by, decision.employee_percent,
        )
        return decision

    # ---- generation ----

    def _require_employee(self, employee_id: int) -> Employee:
        employee = self._employees.get_by_id(int(employee_id))
        if not employee:
            raise NotFoundError(f"Employee {employee_id} not found")
        return employee

    def _build(
        self,
        employee: Employee,
        batch: PayPeriodBatch,
        policy: CompensationPolicy,
        calendar: HolidayCalendar,
        *,
        today: date,
        now: datetime,
    ) -> Payslip:
        period = batch.period
        reason = employee.unpayable_reason(period.start, period.end)
        if reason:
            raise ConfigurationError(
                f"Employee {employee.employee_id} is not payable for {period.batch_id}: {reason}",
                employee_id=employee.employee_id,
            )

        existing = self._payroll.get_payslip(batch_id=period.batch_id, employee_id=employee.employee_id)
        if existing:
            _check_transition(existing, PayslipStatus.DRAFT)

        # One classification pass over the YTD window; the pay period is a slice of it.
        ytd_records = classify_period(
            employee,
            period.ytd_start,
            period.end,
            events=self._attendance.list_events(
                employee_id=employee.employee_id, start_date=period.ytd_start, end_date=period.end
            ),
            approved_leaves=self._leaves.list_approved_overlapping(
                employee_id=employee.employee_id, start_date=period.ytd_start, end_date=period.end
            ),
            calendar=calendar,
            adjustments=self._attendance.list_adjustments(
                employee_id=employee.employee_id, start_date=period.ytd_start, end_date=period.end
            ),
            policy=policy,
            reference_today=today,
        )
        period_records = [r for r in ytd_records if period.start <= r.work_date <= period.end]
        leave_is_payable = policy.payroll.leave_is_payable
        period_metrics = aggregate_period(employee, period_records, employee.plan, leave_is_payable=leave_is_payable)
        ytd_metrics = aggregate_period(employee, ytd_records, employee.plan, leave_is_payable=leave_is_payable)

        prior_sso = ZERO
        prior_base_pay = None
        if period.period_no == 2:
            first = self._payroll.get_payslip(
                batch_id=format_batch_id(period.year, period.month, 1), employee_id=employee.employee_id
            )
            if first:
                prior_sso = sso_deducted(first.snapshot.deductions, first.snapshot.additions)
                prior_base_pay = first.snapshot.base_pay
            else:
                logger.info(
                    "No period-1 payslip for employee=%s in %s; period 2 carries the full month's SSO",
                    employee.employee_id, period.batch_id,
                )

        snapshot = build_payslip(
            employee,
            period,
            period_metrics,
            ytd_metrics,
            policy,
            batch.sso_decision,
            approved_leaves=self._leaves.list_for_employee(
                employee_id=employee.employee_id, fiscal_year=period.year, status=LeaveStatus.APPROVED
            ),
            prior_period_sso_deducted=prior_sso,
            prior_period_base_pay=prior_base_pay,
            existing=existing.snapshot if existing else None,
        )

        payslip = Payslip(
            batch_id=period.batch_id,
            employee_id=employee.employee_id,
            employee_name=employee.full_name,
            status=PayslipStatus.DRAFT,
            snapshot=snapshot,
            revision_no=existing.revision_no if existing else 0,
            employee_note=existing.employee_note if existing else None,
            sent_at=existing.sent_at if existing else None,
            updated_at=now,
        )
        self._payroll.save_payslip(payslip)
        return payslip

    def generate_payslip(
        self,
        *,
        year: int,
        month: int,
        period_no: int,
        employee_id: int,
        today: Optional[date] = None,
        now: Optional[datetime] = None,
    ) -> Payslip:
        now = now or now_local()
        policy = self._require_policy()
        employee = self._require_employee(employee_id)
        batch = self.prepare_batch(year, month, period_no, policy=policy, now=now)
        payslip = self._build(
            employee,
            batch,
            policy,
            HolidayCalendar.from_records(self._holidays.list_all()),
            today=today or now.date(),
            now=now,
        )
        logger.info("Payslip %s/%s generated: net=%s", payslip.batch_id, employee.employee_id, payslip.snapshot.net_pay)
        return payslip

    def generate_batch(
        self,
        *,
        year: int,
        month: int,
        period_no: int,
        today: Optional[date] = None,
        now: Optional[datetime] = None,
    ) -> PayrollRunResult:
        """Generate every employee's payslip; one employee's failure never stops the others.

        SsoReconciliationRequired still aborts the run since it blocks every payslip.
        """
        now = now or now_local()
        employees = self._employees.list_all()
        result = PayrollRunResult(batch_id=format_batch_id(year, month, period_no))

        policy = self._policies.get_current()
        if policy is None:
            logger.warning("Payroll %s not run: HR settings document is missing", result.batch_id)
            for e in employees:
                result.failures[e.employee_id] = "HR settings document is missing"
            return result

        batch = self.prepare_batch(year, month, period_no, policy=policy, now=now)
        calendar = HolidayCalendar.from_records(self._holidays.list_all())

        for employee in employees:
            reason = employee.unpayable_reason(batch.period.start, batch.period.end)
            if reason:
                result.skipped[employee.employee_id] = reason
                continue
            existing = self._payroll.get_payslip(batch_id=batch.batch_id, employee_id=employee.employee_id)
            if existing and existing.status == PayslipStatus.PAID:
                result.skipped[employee.employee_id] = "already paid"
                continue
            try:
                payslip = self._build(employee, batch, policy, calendar, today=today or now.date(), now=now)
            except DomainError as e:
                logger.warning("Payslip %s/%s failed: %s", batch.batch_id, employee.employee_id, e)
                result.failures[employee.employee_id] = str(e)
                continue
            result.generated.append(payslip)

        logger.info(
            "Payroll %s: generated=%d failed=%d skipped=%d",
            batch.batch_id, len(result.generated), len(result.failures), len(result.skipped),
        )
        return result

    # ---- payslip edits and lifecycle ----

    def get_payslip(self, *, batch_id: str, employee_id: int) -> Payslip:
        parse_batch_id(batch_id)
        payslip = self._payroll.get_payslip(batch_id=batch_id, employee_id=int(employee_id))
        if not payslip:
            raise NotFoundError(f"Payslip {batch_id}/{employee_id} not found")
        return payslip

    def list_batch(self, *, batch_id: str) -> Sequence[Payslip]:
        parse_batch_id(batch_id)
        return self._payroll.list_payslips(batch_id=batch_id)

    def add_line(
        self,
        *,
        batch_id: str,
        employee_id: int,
        kind: str,
        name: str,
        amount: Any,
        notes: str = "",
        now: Optional[datetime] = None,
    ) -> Payslip:
        payslip = self.get_payslip(batch_id=batch_id, employee_id=employee_id)
        _check_transition(payslip, PayslipStatus.DRAFT)
        kind = _require_kind(kind)
        line = LineItem(
            name=_require_manual_name(name),
            amount=require_positive_amount(amount, "Amount"),
            notes=(notes or "").strip(),
        )

        additions, deductions = payslip.snapshot.additions, payslip.snapshot.deductions
        if kind == "addition":
            additions = additions + (line,)
        else:
            deductions = deductions + (line,)
        return self._save_edit(payslip, additions, deductions, now)

    def remove_line(
        self,
        *,
        batch_id: str,
        employee_id: int,
        kind: str,
        name: str,
        now: Optional[datetime] = None,
    ) -> Payslip:
        payslip = self.get_payslip(batch_id=batch_id, employee_id=employee_id)
        _check_transition(payslip, PayslipStatus.DRAFT)
        kind = _require_kind(kind)
        name = _require_manual_name(name)

        lines = payslip.snapshot.additions if kind == "addition" else payslip.snapshot.deductions
        kept = tuple(l for l in lines if l.name != name)
        if len(kept) == len(lines):
            raise NotFoundError(f"No manual {kind} named {name!r} on payslip {batch_id}/{employee_id}")

        if kind == "addition":
            return self._save_edit(payslip, kept, payslip.snapshot.deductions, now)
        return self._save_edit(payslip, payslip.snapshot.additions, kept, now)

    def _save_edit(self, payslip: Payslip, additions, deductions, now: Optional[datetime]) -> Payslip:
        updated = dataclasses.replace(
            payslip,
            status=PayslipStatus.DRAFT,
            snapshot=with_manual_lines(payslip.snapshot, additions=tuple(additions), deductions=tuple(deductions)),
            updated_at=now or now_local(),
        )
        self._payroll.save_payslip(updated)
        return updated

    def send(self, *, batch_id: str, employee_id: int, now: Optional[datetime] = None) -> Payslip:
        payslip = self.get_payslip(batch_id=batch_id, employee_id=employee_id)
        now = now or now_local()
        return self._move(
            payslip,
            PayslipStatus.SENT_TO_EMPLOYEE,
            revision_no=payslip.revision_no + 1,
            sent_at=now,
            updated_at=now,
        )

    def accept(self, *, batch_id: str, employee_id: int, now: Optional[datetime] = None) -> Payslip:
        payslip = self.get_payslip(batch_id=batch_id, employee_id=employee_id)
        return self._move(payslip, PayslipStatus.READY_TO_PAY, updated_at=now or now_local())

    def request_revision(
        self, *, batch_id: str, employee_id: int, reason: str, now: Optional[datetime] = None
    ) -> Payslip:
        payslip = self.get_payslip(batch_id=batch_id, employee_id=employee_id)
        reason = require_non_empty(reason, "Revision reason")
        return self._move(
            payslip, PayslipStatus.REVISION_REQUESTED, employee_note=reason, updated_at=now or now_local()
        )

    def mark_paid(
        self,
        *,
        batch_id: str,
        employee_id: int,
        paid_by: str,
        account_id: str,
        now: Optional[datetime] = None,
    ) -> Payslip:
        payslip = self.get_payslip(batch_id=batch_id, employee_id=employee_id)
        now = now or now_local()
        return self._move(
            payslip,
            PayslipStatus.PAID,
            paid_by=require_non_empty(paid_by, "Paid by"),
            paid_account_id=require_non_empty(account_id, "Settlement account"),
            paid_at=now,
            updated_at=now,
        )

    def _move(self, payslip: Payslip, target: PayslipStatus, **changes) -> Payslip:
        _check_transition(payslip, target)
        updated = dataclasses.replace(payslip, status=target, **changes)
        self._payroll.save_payslip(updated)
        logger.info(
            "Payslip %s/%s: %s -> %s (revision %s)",
            payslip.batch_id, payslip.employee_id, payslip.status.value, target.value, updated.revision_no,
        )
        return updated


def _check_transition(payslip: Payslip, target: PayslipStatus) -> None:
    if payslip.status == PayslipStatus.PAID:
        raise PayslipStateError(f"Payslip {payslip.batch_id}/{payslip.employee_id} is paid and cannot change")
    if target not in ALLOWED_TRANSITIONS[payslip.status]:
        raise PayslipStateError(f"Cannot move payslip from {payslip.status.value} to {target.value}")


def _require_kind(kind: str) -> str:
    k = (kind or "").strip().lower()
    if k not in _LINE_KINDS:
        raise ValidationError("Line kind must be 'addition' or 'deduction'")
    return k


def _require_manual_name(name: str) -> str:
    name = require_non_empty(name, "Line name")
    if name.startswith(AUTO_LINE_PREFIX.strip()):
        raise ValidationError(f"Names starting with {AUTO_LINE_PREFIX.strip()} are reserved for automatic lines")
    return name
