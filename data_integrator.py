import logging
from typing import Any, Dict, List, Optional

import httpx
from postgrest.exceptions import APIError
from supabase import Client

from config import PosSettings
from domain.errors import StoreUnavailable, StoreWriteRejected
from domain.models import Product
from utils.row_mapping import product_from_row, product_to_fields, products_from_rows

logger = logging.getLogger(__name__)


class SupabaseStore:
    """
    Store backed by two Supabase tables (products, receipts) and the
    decrement_stock database function from sql/schema.sql.
    """

    def __init__(self, client: Client, settings: PosSettings):
        self.client = client
        self.schema = settings.schema
        self.products_table = settings.products_table
        self.receipts_table = settings.receipts_table

    def _table(self, name: str):
        return self.client.schema(self.schema).table(name)

    def _execute(self, query, action: str):
        try:
            resp = query.execute()
        except APIError as e:
            logger.error("%s rejected: %s", action, e.message)
            raise StoreWriteRejected(f"{action} failed: {e.message}") from e
        except (httpx.HTTPError, ConnectionError, TimeoutError) as e:
            logger.error("%s failed, store unreachable: %s", action, e)
            raise StoreUnavailable(f"{action} failed: {e}") from e

        if getattr(resp, "error", None):
            logger.error("%s rejected: %s", action, resp.error)
            raise StoreWriteRejected(f"{action} failed: {resp.error}")

        return resp

    # ------------------------------------------------------------------
    # Products
    # ------------------------------------------------------------------

    def list_products(self) -> List[Product]:
        resp = self._execute(
            self._table(self.products_table).select("*").order("name"),
            "Fetch products",
        )
        return products_from_rows(resp.data or [])

    def insert_product(self, fields: Dict[str, Any]) -> Product:
        resp = self._execute(
            self._table(self.products_table).insert(product_to_fields(fields)),
            "Insert product",
        )
        if not resp.data:
            raise StoreWriteRejected("Insert product failed: no data returned")
        return product_from_row(resp.data[0])

    def update_product(self, product_id: str, fields: Dict[str, Any]) -> Product:
        resp = self._execute(
            self._table(self.products_table)
            .update(product_to_fields(fields))
            .eq("id", product_id),
            f"Update product {product_id}",
        )
        if not resp.data:
            raise StoreWriteRejected(f"Update product failed: product {product_id} not found")
        return product_from_row(resp.data[0])

    def delete_product(self, product_id: str) -> None:
        resp = self._execute(
            self._table(self.products_table).delete().eq("id", product_id),
            f"Delete product {product_id}",
        )
        if not resp.data:
            raise StoreWriteRejected(f"Delete product failed: product {product_id} not found")

    def decrement_stock(self, product_id: str, quantity: int) -> Optional[int]:
        resp = self._execute(
            self.client.schema(self.schema).rpc(
                "decrement_stock",  # function name in Postgres
                {
                    "p_product_id": product_id,
                    "p_quantity": quantity,
                },
            ),
            f"Decrement stock for {product_id}",
        )
        data = resp.data
        # scalar functions may come back wrapped in a list
        if isinstance(data, list):
            data = data[0] if data else None
        if isinstance(data, dict):
            data = next(iter(data.values()), None)
        return None if data is None else int(data)

    # ------------------------------------------------------------------
    # Receipts
    # ------------------------------------------------------------------

    def insert_receipt(self, row: Dict[str, Any]) -> None:
        self._execute(
            self._table(self.receipts_table).insert(row),
            f"Insert receipt {row.get('id')}",
        )

    def list_receipts(self) -> List[Dict[str, Any]]:
        resp = self._execute(
            self._table(self.receipts_table)
            .select("*")
            .order("created_at", desc=True),
            "Fetch receipts",
        )
        return list(resp.data or [])
