# pos/utils/formatting.py
from datetime import datetime, tzinfo
from decimal import Decimal


def format_money(n: Decimal, symbol: str = "₱") -> str:
    """
    Format an amount with thousands separators and two decimals.
    Example: Decimal("1234567.5") -> "₱1,234,567.50"
    """
    return f"{symbol}{n:,.2f}"


def format_discount(pct: int) -> str:
    return f"{pct}%" if pct else "-"


def format_timestamp(ts: datetime, tz: tzinfo) -> str:
    """Receipt time as the cashier reads it, in the store's local zone."""
    return ts.astimezone(tz).strftime("%d/%m/%Y %H:%M")
