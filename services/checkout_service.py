# services/checkout_service.py
"""
Turning a cart into a saved receipt plus stock decrements.

One CheckoutCoordinator per attempt:

    IDLE -> VALIDATING -> PERSISTING_RECEIPT -> DECREMENTING_STOCK -> COMPLETE
                 \\               \\                     \\
                  +---------------+---------------------+--> FAILED

The receipt insert and the stock writes are separate Store calls with no
transaction around them. If a stock write fails after the receipt is saved,
the receipt stays and the decrements already applied stay too; the caller
gets PartialStockUpdateFailure and has to reconcile by hand.
"""

import logging
import secrets
import string
import threading
import time
from datetime import datetime, timezone
from enum import Enum
from typing import Callable, List, Optional, Sequence

from domain.errors import (
    EmptyCart,
    InsufficientStock,
    InvalidPaymentMethod,
    PartialStockUpdateFailure,
    PosError,
    ReceiptPersistFailure,
    StoreError,
)
from domain.models import PAYMENT_METHODS, CartLine, Receipt, StockUpdateResult
from services.store import Store
from services.totals_service import cart_totals
from utils.row_mapping import receipt_to_row

logger = logging.getLogger(__name__)

STRICT = "strict"
OVERWRITE = "overwrite"

_BASE36 = string.digits + string.ascii_lowercase


class CheckoutState(str, Enum):
    IDLE = "idle"
    VALIDATING = "validating"
    PERSISTING_RECEIPT = "persisting_receipt"
    DECREMENTING_STOCK = "decrementing_stock"
    COMPLETE = "complete"
    FAILED = "failed"


class ReceiptIdGenerator:
    """
    RCP-<epoch millis>-<6 random base36 chars>.

    The millisecond part never goes backwards for one generator, even if the
    wall clock does. Two processes can still collide; only the Store could
    hand out truly unique ids.
    """

    def __init__(self, clock: Callable[[], float] = time.time, suffix_length: int = 6):
        self._clock = clock
        self._suffix_length = suffix_length
        self._last_ms = 0
        self._lock = threading.Lock()

    def __call__(self) -> str:
        with self._lock:
            ms = max(int(self._clock() * 1000), self._last_ms)
            self._last_ms = ms
        suffix = "".join(secrets.choice(_BASE36) for _ in range(self._suffix_length))
        return f"RCP-{ms}-{suffix}"


default_id_generator = ReceiptIdGenerator()


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class CheckoutCoordinator:

    def __init__(
            self,
            store: Store,
            *,
            stock_mode: str = STRICT,
            id_generator: Callable[[], str] = None,
            clock: Callable[[], datetime] = None,
            default_cashier: Optional[str] = "System User",
    ):
        if stock_mode not in (STRICT, OVERWRITE):
            raise ValueError(f"Unknown stock mode: {stock_mode!r}")

        self.store = store
        self.stock_mode = stock_mode
        self.id_generator = id_generator or default_id_generator
        self.clock = clock or _utcnow
        self.default_cashier = default_cashier

        self.state = CheckoutState.IDLE
        self.history: List[CheckoutState] = [CheckoutState.IDLE]
        self.receipt: Optional[Receipt] = None
        self.error: Optional[PosError] = None
        self.stock_result: Optional[StockUpdateResult] = None

    def _transition(self, state: CheckoutState) -> None:
        logger.debug("Checkout %s -> %s", self.state.value, state.value)
        self.state = state
        self.history.append(state)

    def _fail(self, error: PosError) -> None:
        self.error = error
        self._transition(CheckoutState.FAILED)

    def commit(self, cart: Sequence[CartLine], payment_method: str, cashier: Optional[str] = None) -> Receipt:
        if self.state is not CheckoutState.IDLE:
            raise RuntimeError("This checkout attempt already ran, start a new CheckoutCoordinator")

        self._transition(CheckoutState.VALIDATING)
        try:
            lines = self._validate(cart, payment_method)
        except PosError as e:
            logger.info("Checkout rejected: %s", e)
            self._fail(e)
            raise

        receipt = self._build_receipt(lines, payment_method, cashier)
        self.receipt = receipt

        self._transition(CheckoutState.PERSISTING_RECEIPT)
        try:
            self.store.insert_receipt(receipt_to_row(receipt))
        except StoreError as e:
            err = ReceiptPersistFailure(receipt.id, e)
            logger.error('Receipt "%s" was not saved: %s', receipt.id, e)
            self._fail(err)
            raise err from e

        logger.info('Receipt "%s" saved (%d lines, total %s)', receipt.id, len(receipt.items), receipt.total)

        self._transition(CheckoutState.DECREMENTING_STOCK)
        result = self._decrement_stock(receipt)
        self.stock_result = result

        if not result.ok:
            err = PartialStockUpdateFailure(receipt, result.succeeded, result.failed)
            logger.error(
                'Receipt "%s" saved but stock not updated for %s; stock needs manual correction',
                receipt.id,
                ", ".join(result.failed),
            )
            self._fail(err)
            raise err

        self._transition(CheckoutState.COMPLETE)
        return receipt

    def _validate(self, cart: Sequence[CartLine], payment_method: str) -> List[CartLine]:
        lines = list(cart)
        if not lines:
            raise EmptyCart()
        if payment_method not in PAYMENT_METHODS:
            raise InvalidPaymentMethod(payment_method)

        if self.stock_mode == STRICT:
            for line in lines:
                if line.quantity > line.stock:
                    raise InsufficientStock(line.id, line.quantity, line.stock)
        return lines

    def _build_receipt(self, lines: List[CartLine], payment_method: str, cashier: Optional[str]) -> Receipt:
        totals = cart_totals(lines)
        return Receipt(
            id=self.id_generator(),
            items=tuple(lines),
            subtotal=totals.subtotal,
            discount=totals.discount,
            tax=totals.tax,
            total=totals.total,
            payment_method=payment_method,
            timestamp=self.clock(),
            cashier=cashier or self.default_cashier,
        )

    def _decrement_stock(self, receipt: Receipt) -> StockUpdateResult:
        result = StockUpdateResult()

        for line in receipt.items:
            try:
                if self.stock_mode == STRICT:
                    new_stock = self.store.decrement_stock(line.id, line.quantity)
                    if new_stock is None:
                        raise InsufficientStock(line.id, line.quantity)
                else:
                    # read-then-subtract against the stock captured in the cart line
                    self.store.update_product(line.id, {"stock": line.stock - line.quantity})
            except (StoreError, InsufficientStock) as e:
                logger.warning("Stock update failed for product %s: %s", line.id, e)
                result.failed[line.id] = e
                continue

            result.succeeded.append(line.id)

        return result


def commit_checkout(
        store: Store,
        cart: Sequence[CartLine],
        payment_method: str,
        cashier: Optional[str] = None,
        **kwargs,
) -> Receipt:
    """
    Run one checkout attempt and return the receipt, or raise the PosError
    that stopped it. Keyword arguments go to CheckoutCoordinator.
    """
    return CheckoutCoordinator(store, **kwargs).commit(cart, payment_method, cashier)
