"""Currency formatting for quotes (MXN, es-MX style: $1,234.56)."""

from decimal import ROUND_HALF_UP, Decimal

CENTS = Decimal("0.01")


def format_amount(amount: Decimal | int | str) -> str:
    """Two fraction digits with thousands separators, no symbol."""
    value = Decimal(str(amount)).quantize(CENTS, rounding=ROUND_HALF_UP)
    return f"{value:,.2f}"


def format_currency(amount: Decimal | int | str, symbol: str = "$") -> str:
    """Format an amount as currency: Decimal("1234.5") -> "$1,234.50"."""
    text = format_amount(amount)
    if text.startswith("-"):
        return f"-{symbol}{text[1:]}"
    return f"{symbol}{text}"
