# services/cart_service.py
import logging
from decimal import Decimal, InvalidOperation
from typing import Dict, Iterator, Optional, Tuple

from domain.errors import InvalidDiscount, InvalidQuantity
from domain.models import CartLine, Product

logger = logging.getLogger(__name__)


def _is_positive_int(value) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and value > 0


def clamp_discount(pct) -> int:
    if isinstance(pct, bool):
        raise InvalidDiscount(pct)
    try:
        value = Decimal(str(pct).strip())
    except InvalidOperation as e:
        raise InvalidDiscount(pct) from e
    if not value.is_finite():
        raise InvalidDiscount(pct)
    return int(max(0, min(100, value)))


class Cart:
    """
    The lines of the sale currently being rung up.

    At most one line per product id, kept in the order products were first
    added. Quantities are always >= 1 and discounts always within 0..100.
    Unknown ids are ignored by the mutators since UI events can be stale.
    """

    def __init__(self):
        self._lines: Dict[str, CartLine] = {}

    def add_line(self, product: Product, qty: int = 1) -> CartLine:
        if not _is_positive_int(qty):
            raise InvalidQuantity(qty)

        existing = self._lines.get(product.id)
        if existing is not None:
            line = existing.with_quantity(existing.quantity + qty)
        else:
            line = CartLine(product=product, quantity=qty)

        self._lines[product.id] = line
        logger.debug("Cart line %s now has quantity %d", product.id, line.quantity)
        return line

    def set_quantity(self, product_id: str, qty: int) -> None:
        if product_id not in self._lines:
            return
        if isinstance(qty, bool) or not isinstance(qty, int):
            raise InvalidQuantity(qty)
        if qty <= 0:
            self.remove_line(product_id)
            return
        self._lines[product_id] = self._lines[product_id].with_quantity(qty)

    def set_discount(self, product_id: str, pct) -> None:
        if product_id not in self._lines:
            return
        self._lines[product_id] = self._lines[product_id].with_discount(clamp_discount(pct))

    def remove_line(self, product_id: str) -> None:
        self._lines.pop(product_id, None)

    def clear(self) -> None:
        self._lines.clear()

    # read side

    @property
    def lines(self) -> Tuple[CartLine, ...]:
        return tuple(self._lines.values())

    def get(self, product_id: str) -> Optional[CartLine]:
        return self._lines.get(product_id)

    @property
    def is_empty(self) -> bool:
        return not self._lines

    @property
    def item_count(self) -> int:
        return sum(line.quantity for line in self._lines.values())

    def __len__(self) -> int:
        return len(self._lines)

    def __iter__(self) -> Iterator[CartLine]:
        return iter(self.lines)

    def __contains__(self, product_id) -> bool:
        return product_id in self._lines

    def __eq__(self, other) -> bool:
        if not isinstance(other, Cart):
            return NotImplemented
        return self.lines == other.lines

    def __repr__(self) -> str:
        return f"Cart({list(self._lines.values())!r})"
