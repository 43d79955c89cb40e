from __future__ import annotations

from decimal import Decimal
from typing import Any, Optional

from ..core.exceptions import ValidationError
from .money import to_decimal


def require_non_empty(value: Optional[str], field_name: str) -> str:
    if not value or not value.strip():
        raise ValidationError(f"{field_name} is required")
    return value.strip()


def require_positive_amount(value: Any, field_name: str) -> Decimal:
    try:
        amount = to_decimal(value)
    except ValueError:
        raise ValidationError(f"{field_name} is not a valid amount")
    if amount <= 0:
        raise ValidationError(f"{field_name} must be greater than 0")
    return amount


def require_enum(enum_cls, value: Any, field_name: str):
    try:
        return enum_cls(value)
    except ValueError:
        allowed = ", ".join(m.value for m in enum_cls)
        raise ValidationError(f"{field_name} must be one of: {allowed}")
