from __future__ import annotations

import calendar
import re
from datetime import datetime, time
from typing import NamedTuple

from rentbill.constants import LOCAL_TZ

_PERIOD_RE = re.compile(r"^(\d{4})-(\d{2})$")


class InvalidBillingPeriodError(ValueError):
    pass


class PeriodDates(NamedTuple):
    start: datetime
    end: datetime


def parse_billing_period(period: str) -> tuple[int, int]:
    """'2025-03' -> (2025, 3). Raises InvalidBillingPeriodError on anything else."""
    match = _PERIOD_RE.match(period or "")
    if not match:
        raise InvalidBillingPeriodError(f"Invalid billing period {period!r}, expected YYYY-MM")
    year, month = int(match.group(1)), int(match.group(2))
    if not 1 <= month <= 12:
        raise InvalidBillingPeriodError(f"Invalid month in billing period {period!r}")
    return year, month


def get_current_billing_period(now: datetime | None = None) -> str:
    now = now or datetime.now(LOCAL_TZ)
    return f"{now.year:04d}-{now.month:02d}"


def get_period_dates(period: str) -> PeriodDates:
    """First and last instant of the billing period's calendar month."""
    year, month = parse_billing_period(period)
    last_day = calendar.monthrange(year, month)[1]
    start = datetime(year, month, 1)
    end = datetime.combine(datetime(year, month, last_day).date(), time.max)
    return PeriodDates(start=start, end=end)


def format_billing_period(period: str) -> str:
    """'2025-01' -> 'Tháng 1/2025'"""
    year, month = parse_billing_period(period)
    return f"Tháng {month}/{year}"


def build_period_fields(period: str) -> dict:
    """Period fields shared by the generate, create and preview requests."""
    year, month = parse_billing_period(period)
    dates = get_period_dates(period)
    return {
        "billing_period": period,
        "billing_month": month,
        "billing_year": year,
        "period_start": dates.start.date().isoformat(),
        "period_end": dates.end.date().isoformat(),
    }
