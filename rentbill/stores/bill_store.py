from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from typing import Any

from rentbill.api.base import BillApi
from rentbill.constants import GENERIC_ERROR_MESSAGE
from rentbill.models.bill import (
    Bill,
    BillQueryParams,
    CreateBillRequest,
    GenerateMonthlyBillsRequest,
    GenerateMonthlyBillsResponse,
    LandlordBillQueryParams,
    PaginatedBills,
    PaginationMeta,
    PreviewBillForBuildingRequest,
    TenantBillQueryParams,
    UpdateBillRequest,
    UpdateBillWithMeterDataRequest,
)
from rentbill.models.result import ApiResult

logger = logging.getLogger(__name__)

ERROR_SLOTS = (
    "error",
    "error_current",
    "submit_error",
    "delete_error",
    "mark_paid_error",
    "meter_error",
    "preview_error",
    "generate_error",
)


class BillStore:
    """Client-side cache of bills with one loading flag and error slot per operation.

    Build one per session and hand it to whoever needs bill data. Operations
    never raise for API failures; callers read the boolean they return and the
    matching error slot. Writes are not queued: when two responses race, the
    last one to arrive wins.
    """

    def __init__(self, api: BillApi) -> None:
        self.api = api

        self.bills: list[Bill] = []
        self.meta: PaginationMeta | None = None
        self.current: Bill | None = None
        self.preview_data: Any = None
        self.generate_result: GenerateMonthlyBillsResponse | None = None

        self.loading = False
        self.loading_current = False
        self.submitting = False
        self.deleting = False
        self.marking_paid = False
        self.updating_meter = False
        self.previewing = False
        self.generating = False

        self.error: str | None = None
        self.error_current: str | None = None
        self.submit_error: str | None = None
        self.delete_error: str | None = None
        self.mark_paid_error: str | None = None
        self.meter_error: str | None = None
        self.preview_error: str | None = None
        self.generate_error: str | None = None

        self._list_loader: Callable[[Any], Awaitable[ApiResult[PaginatedBills]]] = self.api.get_bills
        self._list_params: Any = None

    @property
    def bills_requiring_meter_data(self) -> list[Bill]:
        return [b for b in self.bills if b.requires_meter_data]

    async def _run(self, flag: str, error_slot: str, call: Callable[[], Awaitable[ApiResult]]) -> ApiResult | None:
        """Run one API call under its own flag. Returns the success result or None."""
        setattr(self, flag, True)
        setattr(self, error_slot, None)
        try:
            result = await call()
        except Exception:
            logger.exception("Bill store operation failed unexpectedly (flag=%s)", flag)
            setattr(self, error_slot, GENERIC_ERROR_MESSAGE)
            return None
        finally:
            setattr(self, flag, False)

        if not result.success:
            setattr(self, error_slot, result.error)
            logger.debug("Bill store %s failed: %s", flag, result.error)
            return None
        return result

    # --- lists ---

    async def _load_list(self, loader, params) -> None:
        self._list_loader = loader
        self._list_params = params
        result = await self._run("loading", "error", lambda: loader(params))
        if result is not None:
            self.bills = result.data.data
            self.meta = result.data.meta
            logger.debug("Loaded %d bills", len(self.bills))

    async def load_bills(self, params: BillQueryParams | None = None) -> None:
        await self._load_list(self.api.get_bills, params)

    async def load_all(self) -> None:
        await self.load_bills()

    async def load_landlord_bills(self, params: LandlordBillQueryParams | None = None) -> None:
        await self._load_list(self.api.get_landlord_bills_by_month, params)

    async def load_tenant_bills(self, params: TenantBillQueryParams | None = None) -> None:
        await self._load_list(self.api.get_tenant_bills, params)

    async def reload(self) -> None:
        """Repeat the last list query so filters and paging survive a write."""
        await self._load_list(self._list_loader, self._list_params)

    # --- single bill ---

    async def load_by_id(self, bill_id: str) -> None:
        result = await self._run("loading_current", "error_current", lambda: self.api.get_bill_by_id(bill_id))
        if result is not None:
            self.current = result.data

    async def load_bill_by_id(self, bill_id: str) -> Bill | None:
        """Fetch a bill without caching it in ``current``."""
        result = await self._run("loading_current", "error_current", lambda: self.api.get_bill_by_id(bill_id))
        return result.data if result is not None else None

    # --- writes ---

    def _set_current(self, bill: Bill | None) -> None:
        # a write acknowledged without a body leaves current as it was
        if bill is not None:
            self.current = bill

    async def create(self, data: CreateBillRequest) -> bool:
        result = await self._run("submitting", "submit_error", lambda: self.api.create_bill_for_room(data))
        if result is None:
            return False
        self.current = result.data
        logger.info("Bill created: id=%s, period=%s", result.data.id, result.data.billing_period)
        await self.reload()
        return True

    async def update(self, bill_id: str, data: UpdateBillRequest) -> bool:
        result = await self._run("submitting", "submit_error", lambda: self.api.update_bill(bill_id, data))
        if result is None:
            return False
        self._set_current(result.data)
        logger.info("Bill updated: id=%s", bill_id)
        await self.reload()
        return True

    async def remove(self, bill_id: str) -> bool:
        result = await self._run("deleting", "delete_error", lambda: self.api.delete_bill(bill_id))
        if result is None:
            return False
        if self.current is not None and self.current.id == bill_id:
            self.current = None
        logger.info("Bill deleted: id=%s", bill_id)
        await self.reload()
        return True

    async def mark_paid(self, bill_id: str) -> bool:
        result = await self._run("marking_paid", "mark_paid_error", lambda: self.api.mark_bill_as_paid(bill_id))
        if result is None:
            return False
        self._set_current(result.data)
        logger.info("Bill %s marked as paid", bill_id)
        await self.reload()
        return True

    async def update_meter(self, bill_id: str, data: UpdateBillWithMeterDataRequest) -> bool:
        result = await self._run(
            "updating_meter",
            "meter_error",
            lambda: self.api.update_bill_with_meter_data(bill_id, data),
        )
        if result is None:
            return False
        self._set_current(result.data)
        logger.info("Meter data saved for bill %s", bill_id)
        await self.reload()
        return True

    # --- building-wide ---

    async def preview(self, data: PreviewBillForBuildingRequest) -> bool:
        result = await self._run("previewing", "preview_error", lambda: self.api.preview_bills_for_building(data))
        if result is None:
            return False
        self.preview_data = result.data
        return True

    async def generate_monthly_bills(self, data: GenerateMonthlyBillsRequest) -> GenerateMonthlyBillsResponse | None:
        self.generate_result = None
        result = await self._run(
            "generating",
            "generate_error",
            lambda: self.api.generate_monthly_bills_for_building(data),
        )
        if result is None:
            return None
        self.generate_result = result.data
        logger.info(
            "Monthly bills generated: building=%s, period=%s, created=%d, existed=%d",
            data.building_id,
            data.billing_period,
            result.data.bills_created,
            result.data.bills_existed,
        )
        await self.reload()
        return result.data

    # --- resets ---

    def clear_current(self) -> None:
        self.current = None
        self.error_current = None
        self.preview_data = None

    def clear_errors(self) -> None:
        for slot in ERROR_SLOTS:
            setattr(self, slot, None)
