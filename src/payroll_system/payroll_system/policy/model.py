"""Compensation policy (the HR settings document) and its defaults.

The policy is always passed explicitly into the engine functions; nothing in
the engine reads it from global state.
"""
from __future__ import annotations

import hashlib
import json
from dataclasses import dataclass, field
from datetime import time
from decimal import Decimal
from typing import Any, Mapping, Optional

from ..common.datetime_utils import parse_hhmm
from ..common.money import money_str, optional_decimal, to_decimal
from ..core import constants
from ..core.enums import LeaveType, OverLimitMode, WeekendMode
from ..core.exceptions import ConfigurationError


@dataclass(frozen=True)
class SsoSettings:
    employee_percent: Decimal = Decimal("0")
    employer_percent: Decimal = Decimal("0")
    monthly_min_base: Decimal = Decimal("0")
    # None (or 0 in the document) means uncapped.
    monthly_cap: Optional[Decimal] = None

    @classmethod
    def from_document(cls, doc: Mapping[str, Any]) -> "SsoSettings":
        cap = optional_decimal(doc.get("monthly_cap"))
        return cls(
            employee_percent=to_decimal(doc.get("employee_percent", 0)),
            employer_percent=to_decimal(doc.get("employer_percent", 0)),
            monthly_min_base=to_decimal(doc.get("monthly_min_base", 0)),
            monthly_cap=cap if cap else None,
        )

    def to_document(self) -> dict:
        return {
            "employee_percent": money_str(self.employee_percent),
            "employer_percent": money_str(self.employer_percent),
            "monthly_min_base": money_str(self.monthly_min_base),
            "monthly_cap": money_str(self.monthly_cap) if self.monthly_cap is not None else None,
        }

    def policy_hash(self) -> str:
        """Stable fingerprint of the contribution parameters (values compared to the cent)."""
        canonical = json.dumps(self.to_document(), sort_keys=True, separators=(",", ":"))
        return hashlib.sha256(canonical.encode("utf-8")).hexdigest()


@dataclass(frozen=True)
class LeaveTypePolicy:
    annual_entitlement: Optional[Decimal] = None
    over_limit_mode: OverLimitMode = OverLimitMode.DEDUCT_SALARY
    deduction_base_days: Optional[int] = None

    @classmethod
    def from_document(cls, doc: Mapping[str, Any]) -> "LeaveTypePolicy":
        base_days = doc.get("deduction_base_days")
        return cls(
            annual_entitlement=optional_decimal(doc.get("annual_entitlement")),
            over_limit_mode=OverLimitMode(doc.get("over_limit_mode") or OverLimitMode.DEDUCT_SALARY.value),
            deduction_base_days=int(base_days) if base_days else None,
        )


@dataclass(frozen=True)
class PayrollSettings:
    period1_start: int = constants.DEFAULT_PERIOD1_START
    period1_end: int = constants.DEFAULT_PERIOD1_END
    period2_start: int = constants.DEFAULT_PERIOD2_START
    deduction_base_days: int = constants.DEFAULT_DEDUCTION_BASE_DAYS
    work_hours_per_day: int = constants.DEFAULT_WORK_HOURS_PER_DAY
    leave_is_payable: bool = False
    deduct_absence: bool = False
    deduct_late: bool = False

    @classmethod
    def from_document(cls, doc: Mapping[str, Any]) -> "PayrollSettings":
        settings = cls(
            period1_start=int(doc.get("period1_start") or constants.DEFAULT_PERIOD1_START),
            period1_end=int(doc.get("period1_end") or constants.DEFAULT_PERIOD1_END),
            period2_start=int(doc.get("period2_start") or constants.DEFAULT_PERIOD2_START),
            deduction_base_days=int(doc.get("deduction_base_days") or constants.DEFAULT_DEDUCTION_BASE_DAYS),
            work_hours_per_day=int(doc.get("work_hours_per_day") or constants.DEFAULT_WORK_HOURS_PER_DAY),
            leave_is_payable=bool(doc.get("leave_is_payable", False)),
            deduct_absence=bool(doc.get("deduct_absence", False)),
            deduct_late=bool(doc.get("deduct_late", False)),
        )
        if not 1 <= settings.period1_start <= settings.period1_end < settings.period2_start <= 28:
            raise ConfigurationError(
                "Pay period boundaries must satisfy 1 <= period1_start <= period1_end < period2_start <= 28"
            )
        return settings


@dataclass(frozen=True)
class CompensationPolicy:
    work_start: time = constants.DEFAULT_WORK_START
    grace_minutes: int = constants.DEFAULT_GRACE_MINUTES
    weekend_mode: WeekendMode = WeekendMode.SAT_SUN
    payroll: PayrollSettings = field(default_factory=PayrollSettings)
    sso: SsoSettings = field(default_factory=SsoSettings)
    leave_types: Mapping[LeaveType, LeaveTypePolicy] = field(default_factory=dict)

    @classmethod
    def from_document(cls, doc: Optional[Mapping[str, Any]]) -> "CompensationPolicy":
        if doc is None:
            raise ConfigurationError("HR settings document is missing")
        try:
            leave_docs = doc.get("leave_types") or {}
            return cls(
                work_start=parse_hhmm(doc["work_start"]) if doc.get("work_start") else constants.DEFAULT_WORK_START,
                grace_minutes=int(doc.get("grace_minutes") or 0),
                weekend_mode=WeekendMode(doc.get("weekend_mode") or WeekendMode.SAT_SUN.value),
                payroll=PayrollSettings.from_document(doc.get("payroll") or {}),
                sso=SsoSettings.from_document(doc.get("sso") or {}),
                leave_types={LeaveType(k): LeaveTypePolicy.from_document(v or {}) for k, v in leave_docs.items()},
            )
        except (ValueError, TypeError) as e:
            raise ConfigurationError(f"HR settings document is invalid: {e}") from e

    def leave_policy(self, leave_type: LeaveType) -> Optional[LeaveTypePolicy]:
        return self.leave_types.get(leave_type)

    def deduction_base_days_for(self, leave_type: LeaveType) -> int:
        lp = self.leave_policy(leave_type)
        if lp and lp.deduction_base_days:
            return lp.deduction_base_days
        return self.payroll.deduction_base_days or constants.DEFAULT_DEDUCTION_BASE_DAYS
