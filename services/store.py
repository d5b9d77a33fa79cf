# services/store.py
from typing import Any, Dict, List, Optional, Protocol

from domain.models import Product


class Store(Protocol):
    """
    What the POS core needs from the backend. SupabaseStore in
    data_integrator.py is the real one; tests use an in-memory fake.

    Every method raises StoreUnavailable or StoreWriteRejected on failure.
    """

    def list_products(self) -> List[Product]:
        ...

    def insert_product(self, fields: Dict[str, Any]) -> Product:
        ...

    def update_product(self, product_id: str, fields: Dict[str, Any]) -> Product:
        ...

    def delete_product(self, product_id: str) -> None:
        ...

    def decrement_stock(self, product_id: str, quantity: int) -> Optional[int]:
        """
        stock = stock - quantity where stock >= quantity.
        Returns the new stock, or None when no row matched.
        """
        ...

    def insert_receipt(self, row: Dict[str, Any]) -> None:
        ...

    def list_receipts(self) -> List[Dict[str, Any]]:
        """Receipt rows, newest created_at first."""
        ...
