"""Shared fixtures: an in-memory Store with call recording and failure injection."""

import itertools
from datetime import datetime, timezone
from decimal import Decimal

import pytest

from domain.errors import StoreUnavailable, StoreWriteRejected
from domain.models import Product
from utils.row_mapping import product_from_row, product_to_fields, products_from_rows

NOW = datetime(2026, 3, 14, 9, 30, 0, tzinfo=timezone.utc)


class FakeStore:
    """
    Implements the Store protocol over dicts.

    fail_on maps an operation name to an exception, or to a callable
    (args) -> exception-or-None for failing selectively.
    """

    def __init__(self, products=()):
        self.rows = {}
        self.receipt_rows = []
        self.calls = []
        self.fail_on = {}
        self._ids = itertools.count(1)
        for p in products:
            self.rows[p.id] = self._row_from_product(p)

    @staticmethod
    def _row_from_product(p: Product) -> dict:
        return {
            "id": p.id,
            "name": p.name,
            "price": float(p.price),
            "category": p.category,
            "stock": p.stock,
            "description": p.description,
            "barcode": p.barcode,
            "image": p.image,
        }

    def _record(self, op, *args):
        self.calls.append((op, args))
        failure = self.fail_on.get(op)
        if callable(failure) and not isinstance(failure, Exception):
            failure = failure(*args)
        if failure is not None:
            raise failure

    @property
    def call_names(self):
        return [name for name, _ in self.calls]

    def stock_of(self, product_id):
        return self.rows[product_id]["stock"]

    def list_products(self):
        self._record("list_products")
        return products_from_rows(self.rows.values())

    def insert_product(self, fields):
        self._record("insert_product", fields)
        row = {"id": f"p-new-{next(self._ids)}", "description": None, "barcode": None, "image": None}
        row.update(product_to_fields(fields))
        self.rows[row["id"]] = row
        return product_from_row(row)

    def update_product(self, product_id, fields):
        self._record("update_product", product_id, fields)
        if product_id not in self.rows:
            raise StoreWriteRejected(f"Update product failed: product {product_id} not found")
        payload = product_to_fields(fields)
        if payload.get("stock", 0) < 0:
            raise StoreWriteRejected("new row violates check constraint products_stock_check")
        self.rows[product_id].update(payload)
        return product_from_row(self.rows[product_id])

    def delete_product(self, product_id):
        self._record("delete_product", product_id)
        if product_id not in self.rows:
            raise StoreWriteRejected(f"Delete product failed: product {product_id} not found")
        del self.rows[product_id]

    def decrement_stock(self, product_id, quantity):
        self._record("decrement_stock", product_id, quantity)
        row = self.rows.get(product_id)
        if row is None or row["stock"] < quantity:
            return None
        row["stock"] -= quantity
        return row["stock"]

    def insert_receipt(self, row):
        self._record("insert_receipt", row)
        self.receipt_rows.append(row)

    def list_receipts(self):
        self._record("list_receipts")
        return sorted(self.receipt_rows, key=lambda r: r["created_at"], reverse=True)


def make_product(pid="p1", name="Pen", price="10.00", stock=50, category="Writing Materials", **kw):
    return Product(id=pid, name=name, price=Decimal(price), category=category, stock=stock, **kw)


@pytest.fixture
def pen():
    return make_product("p1", "Pen", "10.00", stock=50, barcode="4800001")


@pytest.fixture
def notebook():
    return make_product("p2", "Notebook", "45.50", stock=20, category="Paper Products")


@pytest.fixture
def store(pen, notebook):
    return FakeStore([pen, notebook])


@pytest.fixture
def fixed_clock():
    return lambda: NOW


@pytest.fixture
def unavailable():
    return StoreUnavailable("connection refused")
