from abc import ABC, abstractmethod
from typing import Any

from rentbill.models.bill import (
    Bill,
    BillQueryParams,
    CreateBillRequest,
    GenerateMonthlyBillsRequest,
    GenerateMonthlyBillsResponse,
    LandlordBillQueryParams,
    PaginatedBills,
    PreviewBillForBuildingRequest,
    TenantBillQueryParams,
    UpdateBillRequest,
    UpdateBillWithMeterDataRequest,
)
from rentbill.models.result import ApiResult


class BillApi(ABC):
    """Bill endpoints. Every call returns a result; none raise for API failures.

    Update, mark-paid and meter-data succeed with ``data=None`` when the
    backend acknowledges the write without sending the bill back.
    """

    @abstractmethod
    async def create_bill_for_room(self, data: CreateBillRequest, token: str | None = None) -> ApiResult[Bill]: ...

    @abstractmethod
    async def preview_bills_for_building(
        self, data: PreviewBillForBuildingRequest, token: str | None = None
    ) -> ApiResult[Any]: ...

    @abstractmethod
    async def get_bills(
        self, params: BillQueryParams | None = None, token: str | None = None
    ) -> ApiResult[PaginatedBills]: ...

    @abstractmethod
    async def get_landlord_bills_by_month(
        self, params: LandlordBillQueryParams | None = None, token: str | None = None
    ) -> ApiResult[PaginatedBills]: ...

    @abstractmethod
    async def get_tenant_bills(
        self, params: TenantBillQueryParams | None = None, token: str | None = None
    ) -> ApiResult[PaginatedBills]: ...

    @abstractmethod
    async def get_bill_by_id(self, bill_id: str, token: str | None = None) -> ApiResult[Bill]: ...

    @abstractmethod
    async def update_bill(
        self, bill_id: str, data: UpdateBillRequest, token: str | None = None
    ) -> ApiResult[Bill | None]: ...

    @abstractmethod
    async def delete_bill(self, bill_id: str, token: str | None = None) -> ApiResult[dict]: ...

    @abstractmethod
    async def mark_bill_as_paid(self, bill_id: str, token: str | None = None) -> ApiResult[Bill | None]: ...

    @abstractmethod
    async def update_bill_with_meter_data(
        self, bill_id: str, data: UpdateBillWithMeterDataRequest, token: str | None = None
    ) -> ApiResult[Bill | None]: ...

    @abstractmethod
    async def generate_monthly_bills_for_building(
        self, data: GenerateMonthlyBillsRequest, token: str | None = None
    ) -> ApiResult[GenerateMonthlyBillsResponse]: ...
