"""Shared factories for bills, in model form and as the backend sends them."""

from __future__ import annotations

from unittest.mock import AsyncMock

import pytest

from rentbill.api.base import BillApi
from rentbill.models.bill import Bill, BillItem, MeteredCost, PaginatedBills, PaginationMeta
from rentbill.models.enums import BillItemType, BillStatus
from rentbill.models.result import ApiSuccess


def _bill_payload(**overrides) -> dict:
    """A bill as the backend sends it, money columns as wire decimals."""
    defaults = {
        "id": "bill-1",
        "rentalId": "rental-1",
        "roomInstanceId": "ri-101",
        "billingPeriod": "2025-03",
        "billingMonth": 3,
        "billingYear": 2025,
        "periodStart": "2025-03-01",
        "periodEnd": "2025-03-31",
        "subtotal": {"s": 1, "e": 6, "d": [3, 2, 5]},
        "discountAmount": 0,
        "taxAmount": 0,
        "totalAmount": {"s": 1, "e": 6, "d": [3, 2, 5]},
        "paidAmount": 0,
        "remainingAmount": {"s": 1, "e": 6, "d": [3, 2, 5]},
        "status": "draft",
        "dueDate": "2025-04-10",
        "requiresMeterData": True,
        "meteredCostsToInput": [
            {"roomCostId": "rc-elec", "name": "Điện", "unit": "kWh"},
            {"roomCostId": "rc-water", "name": "Nước", "unit": "m3"},
        ],
        "occupancyCount": 2,
        "billItems": [
            {"id": "it-1", "itemType": "rent", "itemName": "Tiền phòng", "amount": 3000000},
            {"id": "it-2", "itemType": "service", "itemName": "Internet", "amount": 100000},
            {"id": "it-3", "itemType": "service", "itemName": "Rác", "amount": 150000},
        ],
        "rental": {
            "id": "rental-1",
            "monthlyRent": {"s": 1, "e": 6, "d": [3]},
            "depositPaid": {"s": 1, "e": 6, "d": [3]},
            "roomInstance": {"id": "ri-101", "roomNumber": "101", "room": {"id": "room-a", "name": "Phòng A"}},
        },
    }
    defaults.update(overrides)
    return defaults


def _sample_bill(**overrides) -> Bill:
    defaults = dict(
        id="bill-1",
        billing_period="2025-03",
        status=BillStatus.PENDING,
        total_amount=3250000,
        remaining_amount=3250000,
        due_date="2025-04-10",
        requires_meter_data=False,
        metered_costs_to_input=[],
        occupancy_count=1,
        bill_items=[
            BillItem(item_type=BillItemType.RENT, item_name="Tiền phòng", amount=3000000),
            BillItem(item_type=BillItemType.ELECTRIC, item_name="Điện", amount=175000, quantity=50),
            BillItem(item_type=BillItemType.WATER, item_name="Nước", amount=75000, quantity=5),
        ],
    )
    defaults.update(overrides)
    return Bill(**defaults)


def _metered_bill(**overrides) -> Bill:
    defaults = dict(
        status=BillStatus.DRAFT,
        requires_meter_data=True,
        metered_costs_to_input=[
            MeteredCost(room_cost_id="rc-elec", name="Điện", unit="kWh"),
            MeteredCost(room_cost_id="rc-water", name="Nước", unit="m3"),
        ],
    )
    defaults.update(overrides)
    return _sample_bill(**defaults)


def _page(bills: list[Bill]) -> ApiSuccess:
    return ApiSuccess(
        PaginatedBills(
            data=bills,
            meta=PaginationMeta(page=1, limit=20, total=len(bills), total_pages=1),
        )
    )


@pytest.fixture()
def bill_payload():
    return _bill_payload


@pytest.fixture()
def sample_bill():
    return _sample_bill


@pytest.fixture()
def metered_bill():
    return _metered_bill


@pytest.fixture()
def page():
    return _page


@pytest.fixture()
def mock_api() -> AsyncMock:
    api = AsyncMock(spec=BillApi)
    api.get_bills.return_value = _page([])
    api.get_landlord_bills_by_month.return_value = _page([])
    api.get_tenant_bills.return_value = _page([])
    return api
