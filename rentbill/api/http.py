from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from typing import Any

from pydantic import ValidationError

from rentbill.api.base import BillApi
from rentbill.api.client import ApiClient
from rentbill.api.errors import ApiError, extract_error_message
from rentbill.constants import (
    ERR_CREATE_BILL,
    ERR_DELETE_BILL,
    ERR_GENERATE_BILLS,
    ERR_GET_BILL,
    ERR_LIST_BILLS,
    ERR_MARK_PAID,
    ERR_METER_DATA,
    ERR_PREVIEW_BILLS,
    ERR_UPDATE_BILL,
)
from rentbill.models.base import CamelModel
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
from rentbill.models.result import ApiFailure, ApiResult, ApiSuccess
from rentbill.normalize import normalize_entity_response, parse_decimal_fields

logger = logging.getLogger(__name__)


def _parse_bill(response: Any) -> Bill:
    return Bill.model_validate(normalize_entity_response(response)["data"])


def _parse_written_bill(response: Any) -> Bill | None:
    """Writes may answer with the bill, an empty body or just a message."""
    data = normalize_entity_response(response)["data"]
    if not isinstance(data, Mapping) or "id" not in data:
        return None
    return Bill.model_validate(data)


def _parse_generate_result(response: Any) -> GenerateMonthlyBillsResponse:
    return GenerateMonthlyBillsResponse.model_validate(normalize_entity_response(response)["data"])


def _parse_bill_page(response: Any) -> PaginatedBills:
    return PaginatedBills.model_validate(parse_decimal_fields(response))


def _query(params: CamelModel | None) -> dict[str, Any] | None:
    if params is None:
        return None
    return params.to_wire() or None


class HttpBillApi(BillApi):
    def __init__(self, client: ApiClient) -> None:
        self.client = client

    async def _call(
        self,
        fallback: str,
        method: str,
        path: str,
        parse: Callable[[Any], Any],
        *,
        json: Any = None,
        params: dict[str, Any] | None = None,
        token: str | None = None,
    ) -> ApiResult:
        try:
            response = await self.client.request(method, path, json=json, params=params, token=token)
        except ApiError as e:
            error = extract_error_message(e, fallback)
            logger.warning("%s %s failed: status=%s error=%s", method, path, e.status, error)
            return ApiFailure(error=error, status=e.status)

        try:
            return ApiSuccess(parse(response))
        except ValidationError as e:
            logger.warning("%s %s returned an unreadable body: %s", method, path, e)
            return ApiFailure(error=fallback)

    async def create_bill_for_room(self, data: CreateBillRequest, token: str | None = None) -> ApiResult[Bill]:
        return await self._call(
            ERR_CREATE_BILL, "POST", "/api/bills/create-for-room", _parse_bill, json=data.to_wire(), token=token
        )

    async def preview_bills_for_building(
        self, data: PreviewBillForBuildingRequest, token: str | None = None
    ) -> ApiResult[Any]:
        # preview payload is handed to the caller as-is
        return await self._call(
            ERR_PREVIEW_BILLS,
            "POST",
            "/api/bills/preview-for-building",
            lambda response: response,
            json=data.to_wire(),
            token=token,
        )

    async def get_bills(
        self, params: BillQueryParams | None = None, token: str | None = None
    ) -> ApiResult[PaginatedBills]:
        return await self._call(ERR_LIST_BILLS, "GET", "/api/bills", _parse_bill_page, params=_query(params), token=token)

    async def get_landlord_bills_by_month(
        self, params: LandlordBillQueryParams | None = None, token: str | None = None
    ) -> ApiResult[PaginatedBills]:
        return await self._call(
            ERR_LIST_BILLS, "GET", "/api/bills/landlord/by-month", _parse_bill_page, params=_query(params), token=token
        )

    async def get_tenant_bills(
        self, params: TenantBillQueryParams | None = None, token: str | None = None
    ) -> ApiResult[PaginatedBills]:
        return await self._call(
            ERR_LIST_BILLS, "GET", "/api/bills/tenant/my-bills", _parse_bill_page, params=_query(params), token=token
        )

    async def get_bill_by_id(self, bill_id: str, token: str | None = None) -> ApiResult[Bill]:
        return await self._call(ERR_GET_BILL, "GET", f"/api/bills/{bill_id}", _parse_bill, token=token)

    async def update_bill(
        self, bill_id: str, data: UpdateBillRequest, token: str | None = None
    ) -> ApiResult[Bill | None]:
        return await self._call(
            ERR_UPDATE_BILL, "PATCH", f"/api/bills/{bill_id}", _parse_written_bill, json=data.to_wire(), token=token
        )

    async def delete_bill(self, bill_id: str, token: str | None = None) -> ApiResult[dict]:
        return await self._call(
            ERR_DELETE_BILL, "DELETE", f"/api/bills/{bill_id}", lambda response: response or {}, token=token
        )

    async def mark_bill_as_paid(self, bill_id: str, token: str | None = None) -> ApiResult[Bill | None]:
        return await self._call(
            ERR_MARK_PAID, "POST", f"/api/bills/{bill_id}/mark-paid", _parse_written_bill, token=token
        )

    async def update_bill_with_meter_data(
        self, bill_id: str, data: UpdateBillWithMeterDataRequest, token: str | None = None
    ) -> ApiResult[Bill | None]:
        return await self._call(
            ERR_METER_DATA,
            "POST",
            f"/api/bills/{bill_id}/meter-data",
            _parse_written_bill,
            json=data.to_wire(),
            token=token,
        )

    async def generate_monthly_bills_for_building(
        self, data: GenerateMonthlyBillsRequest, token: str | None = None
    ) -> ApiResult[GenerateMonthlyBillsResponse]:
        return await self._call(
            ERR_GENERATE_BILLS,
            "POST",
            "/api/bills/generate-monthly-bills-for-building",
            _parse_generate_result,
            json=data.to_wire(),
            token=token,
        )
