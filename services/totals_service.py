# services/totals_service.py
"""
Cart arithmetic. Everything here is pure: same cart in, same numbers out.

Business rule in force: per-line discounts change what each line shows, but
the aggregate discount and tax stay 0 and total == subtotal (pre-discount).
Do not change that without sign-off from the shop owner.
"""

from decimal import Decimal
from typing import Iterable

from domain.models import CartLine, Totals, to_money

ZERO = Decimal("0.00")


def line_subtotal(line: CartLine) -> Decimal:
    return line.price * line.quantity


def line_total(line: CartLine) -> Decimal:
    """
    price * qty minus the line's discount percentage, rounded half-up to cents.
    """
    gross = line_subtotal(line)
    discount_amount = gross * line.discount / 100 if line.discount else ZERO
    return to_money(gross - discount_amount)


def cart_totals(lines: Iterable[CartLine]) -> Totals:
    subtotal = to_money(sum((line_subtotal(line) for line in lines), ZERO))
    return Totals(subtotal=subtotal, discount=ZERO, tax=ZERO, total=subtotal)


def display_total(lines: Iterable[CartLine]) -> Decimal:
    """
    Sum of the per-line totals as the cashier screen shows them.
    Not what gets stored on the receipt (see cart_totals).
    """
    return to_money(sum((line_total(line) for line in lines), ZERO))
