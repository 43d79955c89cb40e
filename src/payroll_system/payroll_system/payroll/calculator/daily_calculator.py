from __future__ import annotations

from decimal import Decimal

from ...attendance.aggregator import PeriodMetrics
from ...common.money import round2
from ...core.exceptions import ConfigurationError
from ...employees.model import Employee
from .base import BasePayCalculator


class DailyPayCalculator(BasePayCalculator):
    """Daily rate times payable units."""

    def base_pay(self, employee: Employee, metrics: PeriodMetrics) -> Decimal:
        if employee.salary_daily is None or employee.salary_daily <= 0:
            raise ConfigurationError(
                f"Employee {employee.employee_id} has no daily rate configured",
                employee_id=employee.employee_id,
            )
        return round2(employee.salary_daily * metrics.payable_units)
