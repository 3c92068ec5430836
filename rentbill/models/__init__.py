from decimal import Decimal


def format_vnd(amount: Decimal | int | float) -> str:
    """Format an amount as VND: 1500000 -> '1.500.000 ₫'"""
    rounded = Decimal(str(amount)).quantize(Decimal("1"))
    formatted = f"{rounded:,}".replace(",", ".")
    return f"{formatted} ₫"
