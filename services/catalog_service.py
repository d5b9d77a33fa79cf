# services/catalog_service.py
import logging
from typing import Any, Dict, List, Optional, Tuple

from domain.models import CATEGORIES, Product, to_money
from services.store import Store

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = ("name", "price", "category", "stock")


def validate_product_fields(fields: Dict[str, Any], partial: bool = False) -> None:
    """
    Raise ValueError if the fields cannot describe a valid product.
    With partial=True (updates) only the keys present are checked.
    """
    if not partial:
        missing = [k for k in REQUIRED_FIELDS if fields.get(k) in (None, "")]
        if missing:
            raise ValueError(f"Missing required field(s): {', '.join(missing)}")

    if "name" in fields and not str(fields["name"] or "").strip():
        raise ValueError("Product name cannot be empty")

    if "price" in fields:
        if to_money(fields["price"]) < 0:
            raise ValueError("Price cannot be negative")

    if "stock" in fields:
        stock = fields["stock"]
        if isinstance(stock, bool) or (isinstance(stock, float) and not stock.is_integer()):
            raise ValueError(f"Stock must be a whole number, got {stock!r}")
        try:
            stock_int = int(stock)
        except (TypeError, ValueError) as e:
            raise ValueError(f"Stock must be a whole number, got {stock!r}") from e
        if stock_int < 0:
            raise ValueError("Stock cannot be negative")

    if "category" in fields and fields["category"] not in CATEGORIES:
        raise ValueError(f"Unknown category: {fields['category']!r}")


class CatalogCache:
    """
    Local copy of the products table.

    Mutators call the Store first and only touch the local copy when that
    call succeeded. Store errors propagate unchanged.
    """

    def __init__(self, store: Store):
        self.store = store
        self._products: List[Product] = []

    def refresh(self) -> Tuple[Product, ...]:
        products = self.store.list_products()
        self._products = list(products)
        logger.info("Catalog refreshed: %d products", len(self._products))
        return self.products

    def create(self, fields: Dict[str, Any]) -> Product:
        validate_product_fields(fields)
        product = self.store.insert_product(fields)
        self._products.append(product)
        logger.info('Product "%s" created (id=%s)', product.name, product.id)
        return product

    def update(self, product_id: str, fields: Dict[str, Any]) -> Product:
        validate_product_fields(fields, partial=True)
        product = self.store.update_product(product_id, fields)
        self._products = [product if p.id == product_id else p for p in self._products]
        logger.info('Product "%s" updated (id=%s)', product.name, product_id)
        return product

    def delete(self, product_id: str) -> None:
        self.store.delete_product(product_id)
        self._products = [p for p in self._products if p.id != product_id]
        logger.info("Product %s deleted", product_id)

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    @property
    def products(self) -> Tuple[Product, ...]:
        return tuple(self._products)

    def get(self, product_id: str) -> Optional[Product]:
        return next((p for p in self._products if p.id == product_id), None)

    def find_by_barcode(self, barcode: str) -> Optional[Product]:
        if not barcode:
            return None
        return next((p for p in self._products if p.barcode == barcode), None)

    def search(self, text: str = "", category: Optional[str] = None) -> List[Product]:
        needle = (text or "").strip().lower()
        result = []
        for p in self._products:
            if category and category != "all" and p.category != category:
                continue
            if needle and not (
                    needle in p.name.lower()
                    or needle in (p.description or "").lower()
                    or needle in (p.barcode or "").lower()
            ):
                continue
            result.append(p)
        return result

    def available(self, text: str = "", category: Optional[str] = None) -> List[Product]:
        """Products the cashier can sell right now."""
        return [p for p in self.search(text, category) if p.stock > 0]

    def low_stock(self, threshold: int = 10) -> List[Product]:
        return [p for p in self._products if 0 < p.stock < threshold]

    def out_of_stock(self) -> List[Product]:
        return [p for p in self._products if p.stock == 0]

    def total_units(self) -> int:
        return sum(p.stock for p in self._products)

    def __len__(self) -> int:
        return len(self._products)
