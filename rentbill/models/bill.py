from __future__ import annotations

from datetime import datetime
from decimal import Decimal

from pydantic import Field

from rentbill.models.base import CamelModel, LocalDate, Money
from rentbill.models.enums import BillItemType, BillStatus
from rentbill.models.rental import Rental


class BillItem(CamelModel):
    id: str | None = None
    bill_id: str | None = None
    item_type: BillItemType | str = Field(union_mode="left_to_right")
    item_name: str
    amount: Money = Decimal("0")
    quantity: float | None = None
    unit_price: Money | None = None
    description: str | None = None
    currency: str = "VND"
    notes: str | None = None


class MeteredCost(CamelModel):
    room_cost_id: str
    name: str
    unit: str = ""


class MeterReading(CamelModel):
    room_cost_id: str
    current_reading: float
    last_reading: float

    @property
    def consumption(self) -> float:
        return self.current_reading - self.last_reading


class Bill(CamelModel):
    id: str
    rental_id: str | None = None
    room_instance_id: str | None = None
    billing_period: str  # 'YYYY-MM'
    billing_month: int | None = None
    billing_year: int | None = None
    period_start: LocalDate | None = None
    period_end: LocalDate | None = None
    subtotal: Money = Decimal("0")
    discount_amount: Money = Decimal("0")
    tax_amount: Money = Decimal("0")
    total_amount: Money = Decimal("0")
    paid_amount: Money = Decimal("0")
    remaining_amount: Money = Decimal("0")
    # statuses added on the backend later are kept as plain strings
    status: BillStatus | str = Field(default=BillStatus.DRAFT, union_mode="left_to_right")
    due_date: LocalDate | None = None
    paid_date: LocalDate | None = None
    requires_meter_data: bool = False
    metered_costs_to_input: list[MeteredCost] = []
    occupancy_count: int = Field(default=1, ge=1)
    bill_items: list[BillItem] = []
    rental: Rental | None = None
    notes: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def room_label(self) -> str:
        instance = self.rental.room_instance if self.rental else None
        if instance is None:
            return self.room_instance_id or "-"
        if instance.room and instance.room.name:
            return f"{instance.room.name} - {instance.room_number}"
        return instance.room_number or instance.id


class PaginationMeta(CamelModel):
    page: int = 1
    limit: int = 20
    total: int = 0
    total_pages: int = 0


class PaginatedBills(CamelModel):
    data: list[Bill] = []
    meta: PaginationMeta | None = None


# --- requests ---


class BillQueryParams(CamelModel):
    page: int | None = None
    limit: int | None = None
    status: BillStatus | None = None
    search: str | None = None
    billing_month: int | None = None
    billing_year: int | None = None


class LandlordBillQueryParams(BillQueryParams):
    building_id: str | None = None
    room_instance_id: str | None = None
    billing_period: str | None = None
    sort_by: str | None = None
    sort_order: str | None = None


class TenantBillQueryParams(CamelModel):
    page: int | None = None
    limit: int | None = None
    rental_id: str | None = None
    room_instance_id: str | None = None
    status: BillStatus | None = None
    from_date: str | None = None
    to_date: str | None = None
    billing_period: str | None = None


class CreateBillRequest(CamelModel):
    room_instance_id: str
    billing_period: str
    billing_month: int
    billing_year: int
    period_start: str
    period_end: str
    occupancy_count: int = Field(default=1, ge=1)
    meter_readings: list[MeterReading] = []
    notes: str | None = None


class PreviewBillForBuildingRequest(CamelModel):
    building_id: str
    billing_period: str
    billing_month: int
    billing_year: int
    period_start: str
    period_end: str
    occupancy_count: int = Field(default=1, ge=1)
    meter_readings: list[MeterReading] = []
    notes: str | None = None


class UpdateBillRequest(CamelModel):
    due_date: str | None = None
    notes: str | None = None
    status: BillStatus | None = None


class UpdateBillWithMeterDataRequest(CamelModel):
    bill_id: str
    occupancy_count: int = Field(default=1, ge=1)
    meter_data: list[MeterReading] = []


class GenerateMonthlyBillsRequest(CamelModel):
    building_id: str
    billing_period: str
    billing_month: int
    billing_year: int
    period_start: str | None = None
    period_end: str | None = None


class GenerateMonthlyBillsResponse(CamelModel):
    message: str = ""
    bills_created: int = 0
    bills_existed: int = 0
