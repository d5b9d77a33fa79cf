# pos/domain/models.py

from dataclasses import InitVar, dataclass, field, replace
from datetime import datetime
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Optional, Tuple

CENT = Decimal("0.01")

CATEGORIES = (
    "Writing Materials",
    "Paper Products",
    "School Bags",
    "Art Supplies",
    "Office Supplies",
    "Electronics",
    "Books & References",
)

PAYMENT_METHODS = {
    "cash": "Cash",
    "gcash": "GCash",
}


def to_money(value) -> Decimal:
    """
    Coerce int / float / str / Decimal to a 2-place Decimal, rounding half-up.
    Floats go through str() so 0.1 stays 0.10 instead of 0.1000000000000000055.
    """
    if isinstance(value, bool):
        raise ValueError(f"Invalid money value: {value!r}")
    try:
        if not isinstance(value, Decimal):
            value = Decimal(str(value).strip())
        if not value.is_finite():
            raise InvalidOperation
        return value.quantize(CENT, rounding=ROUND_HALF_UP)
    except InvalidOperation as e:
        raise ValueError(f"Invalid money value: {value!r}") from e


@dataclass(frozen=True)
class Product:
    """
    One catalog row. Owned by the Store; the app only holds copies.
    """
    id: str
    name: str
    price: Decimal
    category: str
    stock: int
    description: Optional[str] = None
    barcode: Optional[str] = None
    image: Optional[str] = None
    # rows already in the store may carry categories this app no longer offers
    check_category: InitVar[bool] = True

    def __post_init__(self, check_category):
        object.__setattr__(self, "price", to_money(self.price))
        object.__setattr__(self, "stock", int(self.stock))
        if self.price < 0:
            raise ValueError(f"Price cannot be negative: {self.price}")
        if self.stock < 0:
            raise ValueError(f"Stock cannot be negative: {self.stock}")
        if check_category and self.category not in CATEGORIES:
            raise ValueError(f"Unknown category: {self.category!r}")


@dataclass(frozen=True)
class CartLine:
    """
    A product snapshot taken when it was put in the cart, plus quantity and
    a per-line discount percentage.
    """
    product: Product
    quantity: int = 1
    discount: int = 0  # percentage, 0..100

    @property
    def id(self) -> str:
        return self.product.id

    @property
    def name(self) -> str:
        return self.product.name

    @property
    def price(self) -> Decimal:
        return self.product.price

    @property
    def stock(self) -> int:
        # stock as known when the line was created
        return self.product.stock

    def with_quantity(self, quantity: int) -> "CartLine":
        return replace(self, quantity=quantity)

    def with_discount(self, discount: int) -> "CartLine":
        return replace(self, discount=discount)


@dataclass(frozen=True)
class Totals:
    subtotal: Decimal
    discount: Decimal
    tax: Decimal
    total: Decimal


@dataclass(frozen=True)
class Receipt:
    """
    A completed sale. Never changes after it is created.
    """
    id: str
    items: Tuple[CartLine, ...]
    subtotal: Decimal
    discount: Decimal
    tax: Decimal
    total: Decimal
    payment_method: str
    timestamp: datetime
    cashier: Optional[str] = None

    @property
    def item_count(self) -> int:
        return sum(line.quantity for line in self.items)


@dataclass
class StockUpdateResult:
    """
    Outcome of the stock-decrement phase of one checkout.
    """
    succeeded: list = field(default_factory=list)  # product ids
    failed: dict = field(default_factory=dict)  # product id -> exception

    @property
    def ok(self) -> bool:
        return not self.failed
