from __future__ import annotations

from datetime import date

import pytest

from src.payroll_system.payroll_system.core.exceptions import ValidationError
from src.payroll_system.payroll_system.payroll.model import format_batch_id, parse_batch_id
from src.payroll_system.payroll_system.payroll.periods import resolve_pay_period


def test_period_windows(policy):
    p1 = resolve_pay_period(2024, 2, 1, policy.payroll)
    p2 = resolve_pay_period(2024, 2, 2, policy.payroll)

    assert (p1.start, p1.end) == (date(2024, 2, 1), date(2024, 2, 15))
    assert (p2.start, p2.end) == (date(2024, 2, 16), date(2024, 2, 29))
    assert p2.batch_id == "2024-02-2"
    assert p2.ytd_start == date(2024, 1, 1)


@pytest.mark.parametrize("month, period_no", [(0, 1), (13, 1), (5, 3)])
def test_invalid_periods(policy, month, period_no):
    with pytest.raises(ValidationError):
        resolve_pay_period(2025, month, period_no, policy.payroll)


def test_batch_id_format():
    assert format_batch_id(2025, 3, 1) == "2025-03-1"
    assert parse_batch_id("2025-03-1") == (2025, 3, 1)
    with pytest.raises(ValidationError):
        parse_batch_id("March")
