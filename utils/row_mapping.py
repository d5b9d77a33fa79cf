# pos/utils/row_mapping.py
"""
Conversion between domain objects and the rows stored in Supabase.

products columns:
    id, name, price, category, stock, description, barcode, image

receipts columns:
    id, items (jsonb), subtotal, discount, tax, total,
    payment_method, cashier, created_at
"""

import logging
import re
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Dict, Iterable, List

from domain.models import CATEGORIES, CartLine, Product, Receipt, to_money

logger = logging.getLogger(__name__)

PRODUCT_FIELDS = ("name", "price", "category", "stock", "description", "barcode", "image")

_FRACTION_RE = re.compile(r"\.(\d+)")


def _money_out(value: Decimal) -> float:
    # PostgREST sends JSON; numeric columns accept plain numbers
    return float(to_money(value))


def parse_timestamp(value) -> datetime:
    """
    Parse a created_at value into an aware UTC datetime.
    Naive values are taken to be UTC.
    """
    if isinstance(value, datetime):
        dt = value
    else:
        text = str(value).strip().replace("Z", "+00:00")
        # Postgres trims trailing zeros from microseconds ("...:05.12+00:00")
        text = _FRACTION_RE.sub(lambda m: "." + m.group(1)[:6].ljust(6, "0"), text, count=1)
        dt = datetime.fromisoformat(text)

    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def product_from_row(row: Dict[str, Any]) -> Product:
    stock = int(row.get("stock") or 0)
    if stock < 0:
        logger.warning("Product %s has negative stock %d in the store, showing 0", row.get("id"), stock)
        stock = 0

    category = row.get("category") or ""
    if category not in CATEGORIES:
        logger.warning("Product %s has unknown category %r in the store, keeping it", row.get("id"), category)

    return Product(
        id=str(row["id"]),
        name=row["name"],
        price=to_money(row.get("price") or 0),
        category=category,
        stock=stock,
        description=row.get("description"),
        barcode=row.get("barcode"),
        image=row.get("image"),
        check_category=False,
    )


def product_to_fields(fields: Dict[str, Any]) -> Dict[str, Any]:
    """
    Build an insert/update payload from user supplied fields.
    Unknown keys are dropped, empty strings become NULL.
    """
    payload: Dict[str, Any] = {}
    for key in PRODUCT_FIELDS:
        if key not in fields:
            continue
        val = fields[key]
        if isinstance(val, str) and val.strip() == "" and key in ("description", "barcode", "image"):
            val = None
        if key == "price" and val is not None:
            val = _money_out(val)
        if key == "stock" and val is not None:
            val = int(val)
        payload[key] = val
    return payload


def cart_line_to_item(line: CartLine) -> Dict[str, Any]:
    """
    A cart line as stored inside receipts.items: the product fields flattened
    next to quantity and discount.
    """
    p = line.product
    return {
        "id": p.id,
        "name": p.name,
        "price": _money_out(p.price),
        "category": p.category,
        "stock": p.stock,
        "description": p.description,
        "barcode": p.barcode,
        "image": p.image,
        "quantity": line.quantity,
        "discount": line.discount,
    }


def cart_line_from_item(item: Dict[str, Any]) -> CartLine:
    return CartLine(
        product=product_from_row(item),
        quantity=int(item.get("quantity") or 1),
        discount=int(item.get("discount") or 0),
    )


def receipt_to_row(receipt: Receipt) -> Dict[str, Any]:
    return {
        "id": receipt.id,
        "items": [cart_line_to_item(line) for line in receipt.items],
        "subtotal": _money_out(receipt.subtotal),
        "discount": _money_out(receipt.discount),
        "tax": _money_out(receipt.tax),
        "total": _money_out(receipt.total),
        "payment_method": receipt.payment_method,
        "cashier": receipt.cashier,
        "created_at": receipt.timestamp.isoformat(),
    }


def receipt_from_row(row: Dict[str, Any]) -> Receipt:
    items = row.get("items") or []
    return Receipt(
        id=str(row["id"]),
        items=tuple(cart_line_from_item(item) for item in items),
        subtotal=to_money(row.get("subtotal") or 0),
        discount=to_money(row.get("discount") or 0),
        tax=to_money(row.get("tax") or 0),
        total=to_money(row.get("total") or 0),
        payment_method=row.get("payment_method"),
        timestamp=parse_timestamp(row["created_at"]),
        cashier=row.get("cashier"),
    )


def products_from_rows(rows: Iterable[Dict[str, Any]]) -> List[Product]:
    """
    Map product rows, skipping (and logging) any row that cannot be read
    so one broken row does not hide the rest of the catalog.
    """
    products = []
    for row in rows:
        try:
            products.append(product_from_row(row))
        except (KeyError, TypeError, ValueError) as e:
            logger.warning("Skipping unreadable product row %s: %s", row.get("id"), e)
    return products


def receipts_from_rows(rows: Iterable[Dict[str, Any]]) -> List[Receipt]:
    receipts = []
    for row in rows:
        try:
            receipts.append(receipt_from_row(row))
        except (KeyError, TypeError, ValueError) as e:
            logger.warning("Skipping unreadable receipt row %s: %s", row.get("id"), e)
    return receipts
