from __future__ import annotations

import math
from collections.abc import Iterable
from datetime import date, datetime
from decimal import Decimal

from rentbill.constants import DUE_SOON_DAYS, LOCAL_TZ, STATUS_COLORS, STATUS_LABELS
from rentbill.models import format_vnd
from rentbill.models.base import to_local_date
from rentbill.models.bill import Bill, BillItem
from rentbill.models.enums import BillItemType, BillStatus, DisplayState


def _today() -> date:
    return datetime.now(LOCAL_TZ).date()


def is_bill_overdue(bill: Bill, today: date | None = None) -> bool:
    if bill.status != BillStatus.PENDING or bill.due_date is None:
        return False
    return (today or _today()) > bill.due_date


def get_days_until_due(due_date: date | datetime | str, today: date | None = None) -> int:
    """Whole days from today to the due date; negative once overdue."""
    return (to_local_date(due_date) - (today or _today())).days


def is_bill_due_soon(bill: Bill, today: date | None = None) -> bool:
    if bill.status != BillStatus.PENDING or bill.due_date is None:
        return False
    return 0 < get_days_until_due(bill.due_date, today) <= DUE_SOON_DAYS


def get_bill_status_label(status: BillStatus | str) -> str:
    try:
        return STATUS_LABELS[BillStatus(status)]
    except ValueError:
        return str(status)


def get_bill_status_color(status: BillStatus | str) -> str:
    try:
        return STATUS_COLORS[BillStatus(status)]
    except ValueError:
        return "default"


def get_bill_display_state(bill: Bill, today: date | None = None) -> DisplayState:
    """Collapse a bill's fields into the single state a dashboard badge shows."""
    if bill.status == BillStatus.PAID:
        return DisplayState.PAID
    if bill.status == BillStatus.CANCELLED:
        return DisplayState.CANCELLED
    if bill.requires_meter_data:
        return DisplayState.REQUIRES_METER_DATA
    if bill.status == BillStatus.OVERDUE or is_bill_overdue(bill, today):
        return DisplayState.OVERDUE
    if is_bill_due_soon(bill, today):
        return DisplayState.DUE_SOON
    if bill.status == BillStatus.DRAFT:
        return DisplayState.DRAFT
    return DisplayState.PENDING


def decompose_bill_items(bill: Bill) -> dict[str, list[BillItem]]:
    """Group line items into rent / electricity / water / other, keeping order."""
    groups: dict[str, list[BillItem]] = {"rent": [], "electric": [], "water": [], "other": []}
    for item in bill.bill_items:
        key = str(getattr(item.item_type, "value", item.item_type))
        if key in (BillItemType.RENT.value, BillItemType.ELECTRIC.value, BillItemType.WATER.value):
            groups[key].append(item)
        else:
            groups["other"].append(item)
    return groups


def calculate_bill_total(items: Iterable[BillItem]) -> Decimal:
    return sum((item.amount for item in items), Decimal("0"))


def calculate_proration_percentage(
    rental_start: date | str | None,
    rental_end: date | str | None,
    period_start: date | str,
    period_end: date | str,
) -> float:
    """Share of the billing period covered by the rental, in percent."""
    if not rental_start or not rental_end:
        return 100.0
    total_days = (to_local_date(period_end) - to_local_date(period_start)).days + 1
    rental_days = (to_local_date(rental_end) - to_local_date(rental_start)).days + 1
    return rental_days / total_days * 100


def get_bill_summary(bills: list[Bill], today: date | None = None) -> dict:
    return {
        "total": len(bills),
        "paid": sum(1 for b in bills if b.status == BillStatus.PAID),
        "pending": sum(1 for b in bills if b.status == BillStatus.PENDING),
        "overdue": sum(1 for b in bills if is_bill_overdue(b, today)),
        "requires_meter_data": sum(1 for b in bills if b.requires_meter_data),
        "total_amount": sum((b.total_amount for b in bills), Decimal("0")),
        "paid_amount": sum((b.paid_amount for b in bills), Decimal("0")),
        "remaining_amount": sum((b.remaining_amount for b in bills), Decimal("0")),
    }


def format_currency(amount: Decimal | int | float, currency: str = "VND") -> str:
    if currency == "VND":
        return format_vnd(amount)
    return f"{Decimal(str(amount)):,.2f} {currency}"


def format_currency_compact(amount: Decimal | int | float) -> str:
    """5000000 -> '5.0tr', 500000 -> '500k'"""
    value = float(amount)
    if value >= 1_000_000:
        return f"{value / 1_000_000:.1f}tr"
    if value >= 1_000:
        return f"{math.floor(value / 1_000 + 0.5)}k"
    return str(amount)
