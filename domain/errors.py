# pos/domain/errors.py

from typing import Dict, List, Optional


class PosError(Exception):
    """Base class for every error the POS core raises."""


class InvalidQuantity(PosError, ValueError):
    def __init__(self, quantity):
        super().__init__(f"Quantity must be a positive integer, got {quantity!r}")
        self.quantity = quantity


class InvalidDiscount(PosError, ValueError):
    def __init__(self, discount):
        super().__init__(f"Discount must be a number between 0 and 100, got {discount!r}")
        self.discount = discount


class InvalidPaymentMethod(PosError, ValueError):
    def __init__(self, method):
        super().__init__(f"Unsupported payment method: {method!r}")
        self.method = method


class EmptyCart(PosError):
    def __init__(self):
        super().__init__("Cart is empty, add items before checkout")


class InsufficientStock(PosError):
    def __init__(self, product_id: str, requested: int, available: Optional[int] = None):
        if available is None:
            msg = f"Not enough stock for product {product_id} (requested {requested})"
        else:
            msg = f"Not enough stock for product {product_id} (requested {requested}, available {available})"
        super().__init__(msg)
        self.product_id = product_id
        self.requested = requested
        self.available = available


# ---------------------------------------------------------------------------
# Store errors
# ---------------------------------------------------------------------------

class StoreError(PosError):
    """Any failed call to the Store."""


class StoreUnavailable(StoreError):
    """Transport-level failure: the Store could not be reached."""


class StoreWriteRejected(StoreError):
    """The Store answered but refused the request."""


# ---------------------------------------------------------------------------
# Checkout errors
# ---------------------------------------------------------------------------

class CheckoutError(PosError):
    pass


class ReceiptPersistFailure(CheckoutError):
    """
    The receipt insert failed. Nothing was written, the cart is untouched and
    the whole checkout can be retried.
    """

    def __init__(self, receipt_id: str, cause: Exception):
        super().__init__(f"Saving receipt {receipt_id} failed: {cause}")
        self.receipt_id = receipt_id
        self.cause = cause


class PartialStockUpdateFailure(CheckoutError):
    """
    The receipt was saved but at least one stock decrement failed.

    Decrements that went through are not rolled back, so stock and receipts
    disagree until someone reconciles them by hand.
    """

    def __init__(self, receipt, succeeded: List[str], failed: Dict[str, Exception]):
        names = ", ".join(failed)
        super().__init__(
            f"Receipt {receipt.id} saved but stock update failed for: {names}"
        )
        self.receipt = receipt
        self.succeeded = list(succeeded)
        self.failed = dict(failed)

    @property
    def failed_ids(self) -> List[str]:
        return list(self.failed)
