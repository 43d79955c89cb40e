from __future__ import annotations

import logging
from datetime import date
from typing import Any, Optional

from flask import Flask, jsonify, request

from ..core.enums import SsoReconcileChoice
from ..core.exceptions import (
    ConfigurationError,
    DomainError,
    LeaveEntitlementError,
    NotFoundError,
    PayslipStateError,
    SsoReconciliationRequired,
    ValidationError,
)
from .datetime_utils import parse_iso_date

logger = logging.getLogger(__name__)

_STATUS_BY_ERROR: tuple[tuple[type, int], ...] = (
    (ValidationError, 400),
    (NotFoundError, 404),
    (ConfigurationError, 422),
    (SsoReconciliationRequired, 409),
    (PayslipStateError, 409),
    (LeaveEntitlementError, 409),
)


def ok(data: Any = None, status: int = 200):
    return jsonify({"success": True, "data": data}), status


def fail(message: str, status: int, **extra: Any):
    body = {"success": False, "message": message}
    body.update(extra)
    return jsonify(body), status


def register_error_handlers(app: Flask) -> None:
    @app.errorhandler(DomainError)
    def _domain_error(e: DomainError):
        status = next((code for cls, code in _STATUS_BY_ERROR if isinstance(e, cls)), 400)
        if isinstance(e, SsoReconciliationRequired):
            return fail(
                str(e),
                status,
                locked=e.locked.to_dict(),
                current=e.current.to_document(),
                choices=[c.value for c in SsoReconcileChoice],
            )
        logger.debug("Request failed with %s: %s", type(e).__name__, e)
        return fail(str(e), status)


def json_body() -> dict:
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object")
    return data


def date_arg(value: Optional[str], field_name: str) -> date:
    if not value:
        raise ValidationError(f"{field_name} is required (YYYY-MM-DD)")
    try:
        return parse_iso_date(value)
    except ValueError:
        raise ValidationError(f"{field_name} must be a date (YYYY-MM-DD)")


def int_arg(value: Any, field_name: str) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} must be an integer")
