from __future__ import annotations

from decimal import Decimal

from ...attendance.aggregator import PeriodMetrics
from ...common.money import round2
from ...core.exceptions import ConfigurationError
from ...employees.model import Employee
from .base import BasePayCalculator


class MonthlyPayCalculator(BasePayCalculator):
    """Half of the monthly salary per pay period, regardless of attendance."""

    def base_pay(self, employee: Employee, metrics: PeriodMetrics) -> Decimal:
        if employee.salary_monthly is None or employee.salary_monthly <= 0:
            raise ConfigurationError(
                f"Employee {employee.employee_id} has no monthly salary configured",
                employee_id=employee.employee_id,
            )
        return round2(employee.salary_monthly / 2)
