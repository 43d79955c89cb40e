from __future__ import annotations

from ...core.enums import CompensationPlan
from ...core.exceptions import ConfigurationError
from .base import BasePayCalculator
from .daily_calculator import DailyPayCalculator
from .monthly_calculator import MonthlyPayCalculator


def calculator_for(plan: CompensationPlan) -> BasePayCalculator:
    """Factory Pattern: choose the base-pay strategy for a compensation plan."""
    if plan.is_monthly_rate:
        return MonthlyPayCalculator()
    if plan == CompensationPlan.DAILY:
        return DailyPayCalculator()
    raise ConfigurationError(f"Compensation plan {plan.value} is not paid through payroll")
