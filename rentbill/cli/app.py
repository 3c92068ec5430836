import questionary
from rich.console import Console

from rentbill.api.factory import get_api_client, get_bill_api
from rentbill.cli.bill_menu import generate_bills_menu, list_bills_menu, preview_bills_menu
from rentbill.stores.bill_store import BillStore

console = Console()


async def main_menu() -> None:
    async with get_api_client() as client:
        store = BillStore(get_bill_api(client))

        console.print()
        console.print("[bold]Quản lý hóa đơn[/bold]", style="cyan")
        console.print()

        while True:
            choice = await questionary.select(
                "Menu chính",
                choices=[
                    "Danh sách hóa đơn",
                    "Tạo hóa đơn hàng tháng",
                    "Xem trước hóa đơn toà nhà",
                    "Thoát",
                ],
            ).ask_async()

            if choice is None or choice == "Thoát":
                console.print("[bold]Tạm biệt![/bold]")
                break
            elif choice == "Danh sách hóa đơn":
                await list_bills_menu(store)
            elif choice == "Tạo hóa đơn hàng tháng":
                await generate_bills_menu(store)
            elif choice == "Xem trước hóa đơn toà nhà":
                await preview_bills_menu(store)
