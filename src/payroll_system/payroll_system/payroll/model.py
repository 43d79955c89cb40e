from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Optional

from ..attendance.aggregator import PeriodMetrics
from ..common.money import ZERO, money_str, to_decimal
from ..core.constants import AUTO_LINE_PREFIX
from ..core.enums import PayslipStatus, SsoDecisionSource
from ..core.exceptions import ValidationError
from ..policy.model import SsoSettings


@dataclass(frozen=True)
class PayPeriod:
    """One bi-monthly pay run of a month."""

    year: int
    month: int
    period_no: int
    start: date
    end: date

    @property
    def batch_id(self) -> str:
        return format_batch_id(self.year, self.month, self.period_no)

    @property
    def ytd_start(self) -> date:
        return date(self.year, 1, 1)


def format_batch_id(year: int, month: int, period_no: int) -> str:
    return f"{int(year):04d}-{int(month):02d}-{int(period_no)}"


def parse_batch_id(batch_id: str) -> tuple[int, int, int]:
    try:
        year, month, period_no = (int(p) for p in batch_id.split("-"))
    except ValueError:
        raise ValidationError(f"Invalid batch id: {batch_id!r}")
    return year, month, period_no


@dataclass(frozen=True)
class LineItem:
    """One addition or deduction. Automatic lines carry the [AUTO] name prefix."""

    name: str
    amount: Decimal
    notes: str = ""

    @property
    def is_auto(self) -> bool:
        return self.name.startswith(AUTO_LINE_PREFIX)

    def to_dict(self) -> dict:
        return {"name": self.name, "amount": money_str(self.amount), "notes": self.notes}

    @classmethod
    def from_dict(cls, data: dict) -> "LineItem":
        return cls(name=data["name"], amount=to_decimal(data["amount"]), notes=data.get("notes") or "")


@dataclass(frozen=True)
class PayslipSnapshot:
    """Everything printed on a payslip, frozen at generation time."""

    base_pay: Decimal
    additions: tuple[LineItem, ...]
    deductions: tuple[LineItem, ...]
    attendance_summary: PeriodMetrics
    attendance_summary_ytd: PeriodMetrics
    net_pay: Decimal
    over_limit_leave_days: Decimal = ZERO
    calc_notes: tuple[str, ...] = ()

    @property
    def total_additions(self) -> Decimal:
        return sum((l.amount for l in self.additions), ZERO)

    @property
    def total_deductions(self) -> Decimal:
        return sum((l.amount for l in self.deductions), ZERO)

    def to_dict(self) -> dict:
        return {
            "base_pay": money_str(self.base_pay),
            "additions": [l.to_dict() for l in self.additions],
            "deductions": [l.to_dict() for l in self.deductions],
            "attendance_summary": self.attendance_summary.to_dict(),
            "attendance_summary_ytd": self.attendance_summary_ytd.to_dict(),
            "over_limit_leave_days": str(self.over_limit_leave_days),
            "calc_notes": list(self.calc_notes),
            "net_pay": money_str(self.net_pay),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "PayslipSnapshot":
        return cls(
            base_pay=to_decimal(data["base_pay"]),
            additions=tuple(LineItem.from_dict(l) for l in data.get("additions") or ()),
            deductions=tuple(LineItem.from_dict(l) for l in data.get("deductions") or ()),
            attendance_summary=PeriodMetrics.from_dict(data.get("attendance_summary") or {}),
            attendance_summary_ytd=PeriodMetrics.from_dict(data.get("attendance_summary_ytd") or {}),
            over_limit_leave_days=to_decimal(data.get("over_limit_leave_days") or 0),
            calc_notes=tuple(data.get("calc_notes") or ()),
            net_pay=to_decimal(data["net_pay"]),
        )


@dataclass(frozen=True)
class SsoDecision:
    """The contribution parameters locked for one month.

    `policy_hash` fingerprints the parameters in this decision;
    `acknowledged_policy_hash` records live settings an operator chose not to adopt.
    """

    employee_percent: Decimal
    employer_percent: Decimal
    monthly_min_base: Decimal
    monthly_cap: Optional[Decimal]
    source: SsoDecisionSource
    policy_hash: str
    decided_by: str
    decided_at: Optional[datetime] = None
    acknowledged_policy_hash: Optional[str] = None

    @classmethod
    def from_settings(
        cls,
        settings: SsoSettings,
        *,
        source: SsoDecisionSource,
        decided_by: str,
        decided_at: Optional[datetime] = None,
        acknowledged_policy_hash: Optional[str] = None,
    ) -> "SsoDecision":
        return cls(
            employee_percent=settings.employee_percent,
            employer_percent=settings.employer_percent,
            monthly_min_base=settings.monthly_min_base,
            monthly_cap=settings.monthly_cap,
            source=source,
            policy_hash=settings.policy_hash(),
            decided_by=decided_by,
            decided_at=decided_at,
            acknowledged_policy_hash=acknowledged_policy_hash,
        )

    def to_settings(self) -> SsoSettings:
        return SsoSettings(
            employee_percent=self.employee_percent,
            employer_percent=self.employer_percent,
            monthly_min_base=self.monthly_min_base,
            monthly_cap=self.monthly_cap,
        )

    def accepts(self, live_policy_hash: str) -> bool:
        return live_policy_hash in (self.policy_hash, self.acknowledged_policy_hash)

    def to_dict(self) -> dict:
        doc = self.to_settings().to_document()
        doc.update(
            {
                "source": self.source.value,
                "policy_hash": self.policy_hash,
                "decided_by": self.decided_by,
                "decided_at": self.decided_at.isoformat() if self.decided_at else None,
                "acknowledged_policy_hash": self.acknowledged_policy_hash,
            }
        )
        return doc

    @classmethod
    def from_dict(cls, data: dict) -> "SsoDecision":
        settings = SsoSettings.from_document(data)
        decided_at = data.get("decided_at")
        return cls(
            employee_percent=settings.employee_percent,
            employer_percent=settings.employer_percent,
            monthly_min_base=settings.monthly_min_base,
            monthly_cap=settings.monthly_cap,
            source=SsoDecisionSource(data["source"]),
            policy_hash=data["policy_hash"],
            decided_by=data.get("decided_by") or "",
            decided_at=datetime.fromisoformat(decided_at) if isinstance(decided_at, str) else decided_at,
            acknowledged_policy_hash=data.get("acknowledged_policy_hash"),
        )


@dataclass(frozen=True)
class PayPeriodBatch:
    period: PayPeriod
    sso_decision: SsoDecision

    @property
    def batch_id(self) -> str:
        return self.period.batch_id


# Regeneration or manual edits move a payslip back to DRAFT.
ALLOWED_TRANSITIONS: dict[PayslipStatus, frozenset[PayslipStatus]] = {
    PayslipStatus.DRAFT: frozenset({PayslipStatus.DRAFT, PayslipStatus.SENT_TO_EMPLOYEE}),
    PayslipStatus.SENT_TO_EMPLOYEE: frozenset(
        {
            PayslipStatus.DRAFT,
            PayslipStatus.SENT_TO_EMPLOYEE,
            PayslipStatus.READY_TO_PAY,
            PayslipStatus.REVISION_REQUESTED,
        }
    ),
    PayslipStatus.REVISION_REQUESTED: frozenset({PayslipStatus.DRAFT, PayslipStatus.SENT_TO_EMPLOYEE}),
    PayslipStatus.READY_TO_PAY: frozenset({PayslipStatus.DRAFT, PayslipStatus.PAID}),
    PayslipStatus.PAID: frozenset(),
}


@dataclass(frozen=True)
class Payslip:
    batch_id: str
    employee_id: int
    employee_name: str
    status: PayslipStatus
    snapshot: PayslipSnapshot
    revision_no: int = 0
    employee_note: Optional[str] = None
    paid_by: Optional[str] = None
    paid_account_id: Optional[str] = None
    paid_at: Optional[datetime] = None
    sent_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def to_dict(self) -> dict:
        return {
            "batch_id": self.batch_id,
            "employee_id": self.employee_id,
            "employee_name": self.employee_name,
            "status": self.status.value,
            "revision_no": self.revision_no,
            "employee_note": self.employee_note,
            "paid_by": self.paid_by,
            "paid_account_id": self.paid_account_id,
            "paid_at": self.paid_at.isoformat() if self.paid_at else None,
            "sent_at": self.sent_at.isoformat() if self.sent_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
            "snapshot": self.snapshot.to_dict(),
        }


@dataclass
class PayrollRunResult:
    """Outcome of generating one batch; per-employee problems never abort the run."""

    batch_id: str
    generated: list[Payslip] = field(default_factory=list)
    failures: dict[int, str] = field(default_factory=dict)
    skipped: dict[int, str] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "batch_id": self.batch_id,
            "generated": [p.employee_id for p in self.generated],
            "failures": {str(k): v for k, v in self.failures.items()},
            "skipped": {str(k): v for k, v in self.skipped.items()},
        }
