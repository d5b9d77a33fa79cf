# services/session.py
import logging
from typing import Any, Dict, Optional

from config import PosSettings
from domain.errors import PartialStockUpdateFailure, StoreError
from domain.models import CartLine, Product, Receipt, Totals
from services.cart_service import Cart
from services.catalog_service import CatalogCache
from services.checkout_service import CheckoutCoordinator
from services.receipt_service import ReceiptProjection
from services.store import Store
from services.totals_service import cart_totals, display_total

logger = logging.getLogger(__name__)


class PosSession:
    """
    Everything one register needs: its cart, its copy of the catalog and
    the Store they talk to. Nothing here is shared between sessions.
    """

    def __init__(self, store: Store, settings: Optional[PosSettings] = None, cashier: Optional[str] = None):
        self.store = store
        self.settings = settings or PosSettings()
        self.cashier = cashier or self.settings.default_cashier
        self.cart = Cart()
        self.catalog = CatalogCache(store)
        self.receipts = ReceiptProjection(store, tz=self.settings.tz)
        self.last_checkout: Optional[CheckoutCoordinator] = None

    # ------------------------------------------------------------------
    # Cart
    # ------------------------------------------------------------------

    def add_to_cart(self, product: Product, qty: int = 1) -> CartLine:
        return self.cart.add_line(product, qty)

    def set_quantity(self, product_id: str, qty: int) -> None:
        self.cart.set_quantity(product_id, qty)

    def set_discount(self, product_id: str, pct) -> None:
        self.cart.set_discount(product_id, pct)

    def remove_from_cart(self, product_id: str) -> None:
        self.cart.remove_line(product_id)

    def clear_cart(self) -> None:
        self.cart.clear()

    def totals(self) -> Totals:
        return cart_totals(self.cart)

    def display_total(self):
        return display_total(self.cart)

    # ------------------------------------------------------------------
    # Checkout
    # ------------------------------------------------------------------

    def checkout(self, payment_method: str) -> Receipt:
        """
        Commit the cart. On success the cart is cleared and the catalog
        reloaded so the grid shows the new stock.

        If only the stock writes failed the sale did happen: the cart is
        cleared and the catalog reloaded anyway before the error is re-raised.
        Any other failure leaves the cart as it was so the cashier can retry.
        """
        coordinator = CheckoutCoordinator(
            self.store,
            stock_mode=self.settings.stock_mode,
            default_cashier=self.settings.default_cashier,
        )
        self.last_checkout = coordinator

        try:
            receipt = coordinator.commit(self.cart, payment_method, self.cashier)
        except PartialStockUpdateFailure:
            self.cart.clear()
            self._refresh_after_sale()
            raise

        self.cart.clear()
        self._refresh_after_sale()
        return receipt

    def _refresh_after_sale(self) -> None:
        try:
            self.catalog.refresh()
        except (StoreError, ValueError) as e:
            # sale is already saved; a stale grid is fixed by the next refresh
            logger.warning("Catalog refresh after checkout failed: %s", e)

    # ------------------------------------------------------------------
    # Catalog
    # ------------------------------------------------------------------

    def refresh_catalog(self):
        return self.catalog.refresh()

    def create_product(self, fields: Dict[str, Any]) -> Product:
        return self.catalog.create(fields)

    def update_product(self, product_id: str, fields: Dict[str, Any]) -> Product:
        return self.catalog.update(product_id, fields)

    def delete_product(self, product_id: str) -> None:
        self.catalog.delete(product_id)
        self.cart.remove_line(product_id)
