import asyncio

import pytest

from rentbill.constants import GENERIC_ERROR_MESSAGE
from rentbill.models.bill import (
    CreateBillRequest,
    GenerateMonthlyBillsRequest,
    GenerateMonthlyBillsResponse,
    LandlordBillQueryParams,
    PreviewBillForBuildingRequest,
    UpdateBillRequest,
    UpdateBillWithMeterDataRequest,
)
from rentbill.models.enums import BillStatus
from rentbill.models.result import ApiFailure, ApiSuccess
from rentbill.periods import build_period_fields
from rentbill.services.meter_service import MeterReadingForm
from rentbill.stores.bill_store import ERROR_SLOTS, BillStore


class TestLoadBills:
    @pytest.mark.asyncio
    async def test_success(self, mock_api, sample_bill, page):
        mock_api.get_bills.return_value = page([sample_bill(id="b1"), sample_bill(id="b2")])
        store = BillStore(mock_api)

        await store.load_bills()

        assert [b.id for b in store.bills] == ["b1", "b2"]
        assert store.meta.total == 2
        assert store.loading is False
        assert store.error is None

    @pytest.mark.asyncio
    async def test_failure_keeps_previous_list(self, mock_api, sample_bill, page):
        mock_api.get_bills.return_value = page([sample_bill()])
        store = BillStore(mock_api)
        await store.load_bills()

        mock_api.get_bills.return_value = ApiFailure(error="Không thể tải danh sách hóa đơn", status=500)
        await store.load_bills()

        assert store.error == "Không thể tải danh sách hóa đơn"
        assert len(store.bills) == 1
        assert store.loading is False

    @pytest.mark.asyncio
    async def test_unexpected_exception(self, mock_api):
        mock_api.get_bills.side_effect = RuntimeError("boom")
        store = BillStore(mock_api)

        await store.load_bills()

        assert store.error == GENERIC_ERROR_MESSAGE
        assert store.loading is False

    @pytest.mark.asyncio
    async def test_load_all_has_no_filters(self, mock_api):
        store = BillStore(mock_api)
        await store.load_all()
        mock_api.get_bills.assert_awaited_once_with(None)

    @pytest.mark.asyncio
    async def test_tenant_bills(self, mock_api, sample_bill, page):
        mock_api.get_tenant_bills.return_value = page([sample_bill(id="t1")])
        store = BillStore(mock_api)
        await store.load_tenant_bills()
        assert [b.id for b in store.bills] == ["t1"]

    @pytest.mark.asyncio
    async def test_requiring_meter_data(self, mock_api, sample_bill, metered_bill, page):
        mock_api.get_bills.return_value = page([sample_bill(id="b1"), metered_bill(id="b2")])
        store = BillStore(mock_api)
        await store.load_bills()
        assert [b.id for b in store.bills_requiring_meter_data] == ["b2"]


class TestReload:
    @pytest.mark.asyncio
    async def test_repeats_last_query(self, mock_api):
        store = BillStore(mock_api)
        params = LandlordBillQueryParams(building_id="bld-1", billing_period="2025-03")
        await store.load_landlord_bills(params)

        await store.reload()

        assert mock_api.get_landlord_bills_by_month.await_count == 2
        mock_api.get_landlord_bills_by_month.assert_awaited_with(params)
        mock_api.get_bills.assert_not_called()

    @pytest.mark.asyncio
    async def test_defaults_to_all_bills(self, mock_api):
        store = BillStore(mock_api)
        await store.reload()
        mock_api.get_bills.assert_awaited_once_with(None)


class TestSingleBill:
    @pytest.mark.asyncio
    async def test_load_by_id(self, mock_api, sample_bill):
        mock_api.get_bill_by_id.return_value = ApiSuccess(sample_bill(id="b7"))
        store = BillStore(mock_api)

        await store.load_by_id("b7")

        assert store.current.id == "b7"
        assert store.loading_current is False
        assert store.error_current is None

    @pytest.mark.asyncio
    async def test_load_by_id_failure(self, mock_api):
        mock_api.get_bill_by_id.return_value = ApiFailure(error="Không thể tải chi tiết hóa đơn", status=404)
        store = BillStore(mock_api)

        await store.load_by_id("missing")

        assert store.current is None
        assert store.error_current == "Không thể tải chi tiết hóa đơn"
        assert store.error is None

    @pytest.mark.asyncio
    async def test_load_bill_by_id_failure_uses_single_bill_slot(self, mock_api):
        mock_api.get_bill_by_id.return_value = ApiFailure(error="Không thể tải chi tiết hóa đơn", status=404)
        store = BillStore(mock_api)

        assert await store.load_bill_by_id("missing") is None
        assert store.error_current == "Không thể tải chi tiết hóa đơn"
        assert store.loading_current is False
        assert store.error is None
        assert store.loading is False

    @pytest.mark.asyncio
    async def test_load_bill_by_id_does_not_cache(self, mock_api, sample_bill):
        mock_api.get_bill_by_id.return_value = ApiSuccess(sample_bill(id="b7"))
        store = BillStore(mock_api)

        bill = await store.load_bill_by_id("b7")

        assert bill.id == "b7"
        assert store.current is None


class TestWrites:
    @pytest.mark.asyncio
    async def test_create(self, mock_api, sample_bill):
        mock_api.create_bill_for_room.return_value = ApiSuccess(sample_bill(id="new"))
        store = BillStore(mock_api)
        data = CreateBillRequest(room_instance_id="ri-101", **build_period_fields("2025-03"))

        assert await store.create(data) is True
        assert store.current.id == "new"
        assert store.submitting is False
        mock_api.get_bills.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_create_failure(self, mock_api):
        mock_api.create_bill_for_room.return_value = ApiFailure(error="Dữ liệu đã tồn tại", status=409)
        store = BillStore(mock_api)
        data = CreateBillRequest(room_instance_id="ri-101", **build_period_fields("2025-03"))

        assert await store.create(data) is False
        assert store.submit_error == "Dữ liệu đã tồn tại"
        mock_api.get_bills.assert_not_called()

    @pytest.mark.asyncio
    async def test_update(self, mock_api, sample_bill):
        mock_api.update_bill.return_value = ApiSuccess(sample_bill(notes="x"))
        store = BillStore(mock_api)

        assert await store.update("bill-1", UpdateBillRequest(notes="x")) is True
        assert store.current.notes == "x"

    @pytest.mark.asyncio
    async def test_remove_clears_current(self, mock_api, sample_bill):
        mock_api.delete_bill.return_value = ApiSuccess({})
        store = BillStore(mock_api)
        store.current = sample_bill(id="bill-1")

        assert await store.remove("bill-1") is True
        assert store.current is None
        assert store.deleting is False

    @pytest.mark.asyncio
    async def test_remove_other_keeps_current(self, mock_api, sample_bill):
        mock_api.delete_bill.return_value = ApiSuccess({})
        store = BillStore(mock_api)
        store.current = sample_bill(id="bill-1")

        await store.remove("bill-2")
        assert store.current.id == "bill-1"

    @pytest.mark.asyncio
    async def test_remove_failure(self, mock_api):
        mock_api.delete_bill.return_value = ApiFailure(error="Không thể xóa hóa đơn", status=403)
        store = BillStore(mock_api)

        assert await store.remove("bill-1") is False
        assert store.delete_error == "Không thể xóa hóa đơn"

    @pytest.mark.asyncio
    async def test_mark_paid(self, mock_api, sample_bill):
        mock_api.mark_bill_as_paid.return_value = ApiSuccess(sample_bill(status=BillStatus.PAID))
        store = BillStore(mock_api)

        assert await store.mark_paid("bill-1") is True
        assert store.current.status == BillStatus.PAID
        assert store.marking_paid is False

    @pytest.mark.asyncio
    async def test_mark_paid_acknowledged_without_bill(self, mock_api, sample_bill, page):
        mock_api.mark_bill_as_paid.return_value = ApiSuccess(None)
        mock_api.get_bills.return_value = page([sample_bill(id="bill-1", status=BillStatus.PAID)])
        store = BillStore(mock_api)
        store.current = sample_bill(id="bill-1")

        assert await store.mark_paid("bill-1") is True
        assert store.mark_paid_error is None
        assert store.current.id == "bill-1"
        assert store.bills[0].status == BillStatus.PAID
        mock_api.get_bills.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_update_meter_acknowledged_without_bill(self, mock_api):
        mock_api.update_bill_with_meter_data.return_value = ApiSuccess(None)
        store = BillStore(mock_api)

        assert await store.update_meter("bill-1", UpdateBillWithMeterDataRequest(bill_id="bill-1")) is True
        assert store.current is None
        assert store.meter_error is None

    @pytest.mark.asyncio
    async def test_update_meter_failure(self, mock_api):
        mock_api.update_bill_with_meter_data.return_value = ApiFailure(error="Chỉ số không hợp lệ", status=400)
        store = BillStore(mock_api)

        ok = await store.update_meter("bill-1", UpdateBillWithMeterDataRequest(bill_id="bill-1"))

        assert ok is False
        assert store.meter_error == "Chỉ số không hợp lệ"
        assert store.updating_meter is False


class TestBuildingWide:
    @pytest.mark.asyncio
    async def test_preview(self, mock_api):
        mock_api.preview_bills_for_building.return_value = ApiSuccess({"rooms": []})
        store = BillStore(mock_api)
        data = PreviewBillForBuildingRequest(building_id="bld-1", **build_period_fields("2025-03"))

        assert await store.preview(data) is True
        assert store.preview_data == {"rooms": []}
        mock_api.get_bills.assert_not_called()

    @pytest.mark.asyncio
    async def test_generate_failure_resets_previous_result(self, mock_api):
        mock_api.generate_monthly_bills_for_building.return_value = ApiFailure(error="Không tìm thấy toà nhà", status=404)
        store = BillStore(mock_api)
        store.generate_result = GenerateMonthlyBillsResponse(bills_created=1)
        data = GenerateMonthlyBillsRequest(building_id="nope", **build_period_fields("2025-01"))

        assert await store.generate_monthly_bills(data) is None
        assert store.generate_result is None
        assert store.generate_error == "Không tìm thấy toà nhà"
        assert store.generating is False


class TestFlagIsolation:
    @pytest.mark.asyncio
    async def test_concurrent_operations_keep_their_own_flags(self, mock_api, page):
        gate = asyncio.Event()

        async def slow_list(params):
            await gate.wait()
            return page([])

        mock_api.get_bills.side_effect = slow_list
        mock_api.mark_bill_as_paid.return_value = ApiFailure(error="Không thể đánh dấu đã thanh toán", status=403)
        store = BillStore(mock_api)

        listing = asyncio.create_task(store.load_bills())
        await asyncio.sleep(0)
        assert store.loading is True
        assert store.marking_paid is False

        assert await store.mark_paid("bill-1") is False
        assert store.mark_paid_error == "Không thể đánh dấu đã thanh toán"
        assert store.loading is True
        assert store.error is None

        gate.set()
        await listing
        assert store.loading is False
        assert store.mark_paid_error == "Không thể đánh dấu đã thanh toán"


class TestResets:
    def test_clear_errors(self, mock_api):
        store = BillStore(mock_api)
        for slot in ERROR_SLOTS:
            setattr(store, slot, "x")
        store.clear_errors()
        assert all(getattr(store, slot) is None for slot in ERROR_SLOTS)

    def test_clear_current(self, mock_api, sample_bill):
        store = BillStore(mock_api)
        store.current = sample_bill()
        store.error_current = "x"
        store.preview_data = {"rooms": []}
        store.submit_error = "kept"

        store.clear_current()

        assert store.current is None
        assert store.error_current is None
        assert store.preview_data is None
        assert store.submit_error == "kept"


class TestMonthlyCycle:
    @pytest.mark.asyncio
    async def test_generate_then_enter_meter_readings(self, mock_api, metered_bill, page):
        drafts = [metered_bill(id=f"b{i}") for i in range(1, 6)]
        mock_api.generate_monthly_bills_for_building.return_value = ApiSuccess(
            GenerateMonthlyBillsResponse(message="Đã tạo 5 hóa đơn", bills_created=5, bills_existed=0)
        )
        mock_api.get_bills.return_value = page(drafts)
        store = BillStore(mock_api)

        result = await store.generate_monthly_bills(
            GenerateMonthlyBillsRequest(building_id="bld-1", **build_period_fields("2025-01"))
        )
        assert result.bills_created == 5
        assert store.generate_result.bills_created == 5
        assert len(store.bills_requiring_meter_data) == 5

        done = drafts[0].model_copy(update={"status": BillStatus.PENDING, "requires_meter_data": False})
        mock_api.update_bill_with_meter_data.return_value = ApiSuccess(done)
        mock_api.get_bills.return_value = page([done] + drafts[1:])

        form = MeterReadingForm()
        form.open_for(store.bills_requiring_meter_data[0])
        form.set_reading("rc-elec", "last", 100)
        form.set_reading("rc-elec", "current", 150)
        form.set_reading("rc-water", "last", 10)
        form.set_reading("rc-water", "current", 15)

        assert await form.submit(store) is True
        assert store.current.status == BillStatus.PENDING
        assert [b.id for b in store.bills_requiring_meter_data] == ["b2", "b3", "b4", "b5"]
        assert mock_api.get_bills.await_count == 2
