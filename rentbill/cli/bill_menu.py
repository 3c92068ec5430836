from __future__ import annotations

import json

import questionary
from rich.console import Console
from rich.table import Table

from rentbill.constants import ITEM_TYPE_LABELS, STATUS_STYLES
from rentbill.models.bill import (
    Bill,
    GenerateMonthlyBillsRequest,
    LandlordBillQueryParams,
    PreviewBillForBuildingRequest,
    UpdateBillRequest,
)
from rentbill.models.enums import BillStatus, DisplayState
from rentbill.periods import (
    InvalidBillingPeriodError,
    build_period_fields,
    format_billing_period,
    get_current_billing_period,
    parse_billing_period,
)
from rentbill.services.display_service import (
    decompose_bill_items,
    format_currency,
    get_bill_display_state,
    get_bill_status_label,
    get_bill_summary,
    get_days_until_due,
)
from rentbill.services.meter_service import MeterReadingForm
from rentbill.settings import settings
from rentbill.stores.bill_store import BillStore

console = Console()

BACK = "Quay lại"
ALL_STATUSES = "Tất cả"

GROUP_LABELS = {
    "rent": ITEM_TYPE_LABELS["rent"],
    "electric": ITEM_TYPE_LABELS["electric"],
    "water": ITEM_TYPE_LABELS["water"],
    "other": "Khác",
}


def _parse_number(text: str | None) -> float | None:
    """'1.234,5' or '1234.5' -> 1234.5; None when the text is not a number."""
    if text is None:
        return None
    text = text.strip()
    if not text:
        return None
    if "," in text:
        text = text.replace(".", "").replace(",", ".")
    try:
        return float(text)
    except ValueError:
        return None


def _format_reading_input(value: float) -> str:
    """Default value for a reading prompt: 0 -> '', 120.0 -> '120'"""
    if not value:
        return ""
    return f"{value:g}"


async def _ask_period(default: str | None = None) -> str | None:
    default = default or get_current_billing_period()
    while True:
        period = await questionary.text("Kỳ hóa đơn (YYYY-MM):", default=default).ask_async()
        if period is None:
            return None
        try:
            parse_billing_period(period)
            return period
        except InvalidBillingPeriodError:
            console.print("[red]Định dạng không hợp lệ. Dùng YYYY-MM (vd: 2025-03).[/red]")


def _status_cell(bill: Bill) -> str:
    state = get_bill_display_state(bill)
    label = get_bill_status_label(bill.status)
    style = STATUS_STYLES.get(bill.status, "")
    if state == DisplayState.OVERDUE:
        return f"[red]{get_bill_status_label(BillStatus.OVERDUE)}[/red]"
    if state == DisplayState.REQUIRES_METER_DATA:
        return f"[yellow]{label} - cần số đồng hồ[/yellow]"
    if state == DisplayState.DUE_SOON:
        return f"[yellow]{label} - sắp đến hạn[/yellow]"
    return f"[{style}]{label}[/{style}]" if style else label


def _show_bill_detail(bill: Bill) -> None:
    console.print(f"  Phòng: {bill.room_label}")
    console.print(f"  Trạng thái: {_status_cell(bill)}")

    detail_table = Table()
    detail_table.add_column("Khoản mục")
    detail_table.add_column("Loại", justify="center")
    detail_table.add_column("Số lượng", justify="right")
    detail_table.add_column("Thành tiền", justify="right")

    for group, items in decompose_bill_items(bill).items():
        for item in items:
            quantity = f"{item.quantity:g}" if item.quantity is not None else "-"
            detail_table.add_row(item.item_name, GROUP_LABELS[group], quantity, format_currency(item.amount))

    console.print(detail_table)
    if bill.discount_amount:
        console.print(f"  Giảm giá: -{format_currency(bill.discount_amount)}")
    if bill.tax_amount:
        console.print(f"  Thuế: {format_currency(bill.tax_amount)}")
    console.print(f"  [bold]Tổng cộng: {format_currency(bill.total_amount)}[/bold]")
    if bill.paid_amount:
        console.print(f"  Đã trả: {format_currency(bill.paid_amount)}")
        console.print(f"  Còn lại: {format_currency(bill.remaining_amount)}")

    if bill.due_date and bill.status == BillStatus.PENDING:
        days = get_days_until_due(bill.due_date)
        if days < 0:
            console.print(f"  [red]Hạn thanh toán: {bill.due_date:%d/%m/%Y} (quá hạn {-days} ngày)[/red]")
        else:
            console.print(f"  Hạn thanh toán: {bill.due_date:%d/%m/%Y} (còn {days} ngày)")
    elif bill.due_date:
        console.print(f"  Hạn thanh toán: {bill.due_date:%d/%m/%Y}")
    if bill.paid_date:
        console.print(f"  [green]Thanh toán ngày: {bill.paid_date:%d/%m/%Y}[/green]")
    if bill.notes:
        console.print(f"  Ghi chú: {bill.notes}")


async def meter_data_menu(bill: Bill, store: BillStore) -> bool:
    """Collect readings for a bill and submit them. Returns True once saved."""
    form = MeterReadingForm()
    form.open_for(bill)

    console.print()
    console.print("[bold]Cập nhật số đồng hồ[/bold]", style="cyan")
    if not form.has_metered_costs:
        console.print("[yellow]Hóa đơn này chỉ có chi phí cố định. Chỉ cần xác nhận số người ở.[/yellow]")

    while form.open:
        while True:
            val = await questionary.text("Số người ở:", default=str(form.occupancy_count)).ask_async()
            if val is None:
                return False
            parsed = _parse_number(val)
            if parsed is not None and parsed >= 1:
                form.set_occupancy_count(int(parsed))
                break
            console.print("[red]Số người ở phải lớn hơn 0.[/red]")

        for cost in bill.metered_costs_to_input:
            console.print(f"  [bold]{cost.name}[/bold] ({cost.unit})")
            for field, label in (("last", "Chỉ số cũ"), ("current", "Chỉ số mới")):
                pair = form.readings[cost.room_cost_id]
                while True:
                    val = await questionary.text(
                        f"    {label}:", default=_format_reading_input(getattr(pair, field))
                    ).ask_async()
                    if val is None:
                        return False
                    parsed = _parse_number(val)
                    if parsed is not None and parsed >= 0:
                        form.set_reading(cost.room_cost_id, field, parsed)
                        break
                    console.print("[red]Giá trị không hợp lệ. Thử lại.[/red]")

            state = form.consumption_state(cost.room_cost_id)
            consumption = form.compute_consumption(cost.room_cost_id)
            if state == "ok":
                console.print(f"    [green]Tiêu thụ: {consumption:.2f} {cost.unit}[/green]")
            elif state == "warning":
                console.print("    [yellow]Chỉ số mới phải lớn hơn chỉ số cũ[/yellow]")

        if await form.submit(store):
            console.print("[green]Đã cập nhật số đồng hồ thành công[/green]")
            return True

        console.print(f"[red]{form.error}[/red]")
        retry = await questionary.confirm("Sửa lại và gửi lại?", default=True).ask_async()
        if not retry:
            return False
    return False


async def edit_bill_menu(bill: Bill, store: BillStore) -> Bill:
    console.print()
    console.print("[bold]Sửa hóa đơn[/bold]", style="cyan")

    current_due = bill.due_date.isoformat() if bill.due_date else ""
    due_date = await questionary.text("Hạn thanh toán (YYYY-MM-DD):", default=current_due).ask_async()
    notes = await questionary.text("Ghi chú:", default=bill.notes or "").ask_async()
    if due_date is None or notes is None:
        return bill

    ok = await store.update(bill.id, UpdateBillRequest(due_date=due_date or None, notes=notes or None))
    if not ok:
        console.print(f"[red]{store.submit_error}[/red]")
        return bill
    console.print("[green]Đã cập nhật hóa đơn[/green]")
    return store.current or bill


async def _bill_detail_menu(bill: Bill, store: BillStore) -> None:
    while True:
        console.print()
        console.print(f"[bold cyan]Hóa đơn {format_billing_period(bill.billing_period)}[/bold cyan]")
        _show_bill_detail(bill)
        console.print()

        choices = []
        if bill.requires_meter_data or bill.status == BillStatus.DRAFT:
            choices.append("Nhập số đồng hồ")
        if bill.status in (BillStatus.PENDING, BillStatus.OVERDUE):
            choices.append("Đánh dấu đã thanh toán")
        choices += ["Sửa hóa đơn", "Xóa hóa đơn", BACK]

        action = await questionary.select("Thao tác:", choices=choices).ask_async()

        if action is None or action == BACK:
            break
        elif action == "Nhập số đồng hồ":
            if await meter_data_menu(bill, store):
                bill = store.current or bill
        elif action == "Đánh dấu đã thanh toán":
            if await store.mark_paid(bill.id):
                console.print("[green]Đã đánh dấu hóa đơn là đã thanh toán[/green]")
                bill = store.current or bill
            else:
                console.print(f"[red]{store.mark_paid_error}[/red]")
        elif action == "Sửa hóa đơn":
            bill = await edit_bill_menu(bill, store)
        elif action == "Xóa hóa đơn":
            confirm = await questionary.confirm("Bạn có chắc muốn xóa hóa đơn này?", default=False).ask_async()
            if confirm:
                if await store.remove(bill.id):
                    console.print("[green]Đã xóa hóa đơn[/green]")
                    break
                console.print(f"[red]{store.delete_error}[/red]")


async def list_bills_menu(store: BillStore) -> None:
    period = await _ask_period()
    if period is None:
        return

    status_choices = [ALL_STATUSES] + [get_bill_status_label(s) for s in BillStatus]
    status_label = await questionary.select("Trạng thái:", choices=status_choices).ask_async()
    if status_label is None:
        return
    status = next((s for s in BillStatus if get_bill_status_label(s) == status_label), None)

    params = LandlordBillQueryParams(billing_period=period, status=status, limit=settings.default_page_size)
    await store.load_landlord_bills(params)
    if store.error:
        console.print(f"[red]{store.error}[/red]")
        return

    if not store.bills:
        console.print(f"[yellow]Không có hóa đơn nào cho {format_billing_period(period)}.[/yellow]")
        return

    table = Table(title=f"Hóa đơn - {format_billing_period(period)}")
    table.add_column("#", style="dim")
    table.add_column("Phòng")
    table.add_column("Trạng thái")
    table.add_column("Tổng cộng", justify="right")
    table.add_column("Hạn thanh toán")

    for i, b in enumerate(store.bills, start=1):
        table.add_row(
            str(i),
            b.room_label,
            _status_cell(b),
            format_currency(b.total_amount),
            f"{b.due_date:%d/%m/%Y}" if b.due_date else "-",
        )

    console.print()
    console.print(table)
    summary = get_bill_summary(store.bills)
    console.print(
        f"  Đã thanh toán {summary['paid']}/{summary['total']} - "
        f"Còn phải thu: {format_currency(summary['remaining_amount'])}"
    )
    if summary["overdue"]:
        console.print(f"  [red]{summary['overdue']} hóa đơn quá hạn[/red]")
    if store.meta:
        console.print(f"  [dim]Trang {store.meta.page}/{store.meta.total_pages} - {store.meta.total} hóa đơn[/dim]")

    bill_choices = {f"{i} - {b.room_label}": b for i, b in enumerate(store.bills, start=1)}
    choice = await questionary.select("Chọn hóa đơn:", choices=list(bill_choices.keys()) + [BACK]).ask_async()

    if choice is None or choice == BACK:
        return

    selected = bill_choices[choice]
    await store.load_by_id(selected.id)
    if store.error_current or store.current is None:
        console.print(f"[red]{store.error_current or 'Không tìm thấy hóa đơn.'}[/red]")
        return

    await _bill_detail_menu(store.current, store)


async def generate_bills_menu(store: BillStore) -> None:
    console.print()
    console.print("[bold]Tạo hóa đơn hàng tháng cho toà nhà[/bold]", style="cyan")

    building_id = await questionary.text("Mã toà nhà:").ask_async()
    if not building_id:
        return
    period = await _ask_period()
    if period is None:
        return

    request = GenerateMonthlyBillsRequest(building_id=building_id, **build_period_fields(period))
    result = await store.generate_monthly_bills(request)
    if result is None:
        console.print(f"[red]{store.generate_error}[/red]")
        return

    console.print()
    console.print(f"[green bold]{result.message or 'Đã tạo hóa đơn'}[/green bold]")
    console.print(f"  Tạo mới: [bold]{result.bills_created}[/bold]")
    console.print(f"  Đã tồn tại: {result.bills_existed}")
    pending_meter = len(store.bills_requiring_meter_data)
    if pending_meter:
        console.print(f"  [yellow]{pending_meter} hóa đơn cần nhập số đồng hồ[/yellow]")


async def preview_bills_menu(store: BillStore) -> None:
    console.print()
    console.print("[bold]Xem trước hóa đơn toà nhà[/bold]", style="cyan")

    building_id = await questionary.text("Mã toà nhà:").ask_async()
    if not building_id:
        return
    period = await _ask_period()
    if period is None:
        return

    request = PreviewBillForBuildingRequest(building_id=building_id, **build_period_fields(period))
    if not await store.preview(request):
        console.print(f"[red]{store.preview_error}[/red]")
        return

    console.print_json(json.dumps(store.preview_data, ensure_ascii=False, default=str))
