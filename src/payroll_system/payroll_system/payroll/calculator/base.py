from __future__ import annotations

from abc import ABC, abstractmethod
from decimal import Decimal

from ...attendance.aggregator import PeriodMetrics
from ...employees.model import Employee


class BasePayCalculator(ABC):
    """Calculator interface (Strategy Pattern for base pay)."""

    @abstractmethod
    def base_pay(self, employee: Employee, metrics: PeriodMetrics) -> Decimal:
        raise NotImplementedError
