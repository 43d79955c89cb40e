from __future__ import annotations

from datetime import date

from ..common.datetime_utils import month_end
from ..core.exceptions import ValidationError
from ..policy.model import PayrollSettings
from .model import PayPeriod


def resolve_pay_period(year: int, month: int, period_no: int, settings: PayrollSettings) -> PayPeriod:
    """Period 1 runs period1_start..period1_end; period 2 runs period2_start..month end."""
    if not 1 <= int(month) <= 12:
        raise ValidationError("Month must be between 1 and 12")
    if int(period_no) not in (1, 2):
        raise ValidationError("Pay period must be 1 or 2")

    year, month, period_no = int(year), int(month), int(period_no)
    if period_no == 1:
        start = date(year, month, settings.period1_start)
        end = date(year, month, settings.period1_end)
    else:
        start = date(year, month, settings.period2_start)
        end = month_end(year, month)
    return PayPeriod(year=year, month=month, period_no=period_no, start=start, end=end)
