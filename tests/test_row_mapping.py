"""Row mapping and settings loading."""

from datetime import datetime, timezone
from decimal import Decimal
from zoneinfo import ZoneInfo

import pytest

from config import PosSettings, load_settings
from conftest import NOW, make_product
from domain.models import CartLine, Product, Receipt, to_money
from utils.formatting import format_money, format_timestamp
from utils.row_mapping import (
    parse_timestamp,
    product_from_row,
    products_from_rows,
    receipt_from_row,
    receipt_to_row,
)


class TestToMoney:
    @pytest.mark.parametrize(
        "value, expected",
        [(10, "10.00"), (0.1, "0.10"), ("2.345", "2.35"), ("2.344", "2.34"), (Decimal("1.005"), "1.01")],
    )
    def test_rounds_half_up(self, value, expected):
        assert to_money(value) == Decimal(expected)

    @pytest.mark.parametrize("value", ["abc", True, "NaN"])
    def test_rejects_garbage(self, value):
        with pytest.raises(ValueError):
            to_money(value)


class TestProduct:
    def test_rejects_negative_price(self):
        with pytest.raises(ValueError):
            make_product(price="-1")

    def test_rejects_unknown_category(self):
        with pytest.raises(ValueError):
            make_product(category="Groceries")

    def test_negative_stock_from_store_shown_as_zero(self):
        p = product_from_row({"id": 7, "name": "Glue", "price": "5", "category": "Art Supplies", "stock": -2})
        assert p.stock == 0
        assert p.id == "7"

    def test_unknown_category_from_store_kept(self):
        p = product_from_row({"id": "s1", "name": "Chips", "price": 20, "category": "Snacks", "stock": 5})
        assert p.category == "Snacks"
        assert p.price == Decimal("20.00")

    def test_unreadable_rows_skipped(self):
        rows = [
            {"id": "a", "name": "Glue", "price": "5", "category": "Art Supplies", "stock": 3},
            {"id": "b", "name": "Tape", "price": "abc", "category": "Office Supplies", "stock": 1},
            {"id": "c", "price": "1", "category": "Office Supplies", "stock": 1},
        ]
        assert [p.id for p in products_from_rows(rows)] == ["a"]


class TestReceiptRow:
    def test_columns(self):
        line = CartLine(product=make_product("p1", description="blue ink"), quantity=3, discount=50)
        receipt = Receipt(
            id="RCP-1",
            items=(line,),
            subtotal=Decimal("30.00"),
            discount=Decimal("0.00"),
            tax=Decimal("0.00"),
            total=Decimal("30.00"),
            payment_method="cash",
            timestamp=NOW,
            cashier="Ana",
        )
        row = receipt_to_row(receipt)

        assert row["payment_method"] == "cash"
        assert row["cashier"] == "Ana"
        assert row["created_at"] == "2026-03-14T09:30:00+00:00"
        assert row["total"] == 30.0
        assert row["items"][0]["quantity"] == 3
        assert row["items"][0]["discount"] == 50
        assert row["items"][0]["description"] == "blue ink"
        assert receipt_from_row(row) == receipt


class TestParseTimestamp:
    def test_naive_taken_as_utc(self):
        assert parse_timestamp("2026-03-14T09:30:00") == NOW

    def test_offset_converted_to_utc(self):
        assert parse_timestamp("2026-03-14T17:30:00+08:00") == NOW
        assert parse_timestamp("2026-03-14T17:30:00+08:00").tzinfo == timezone.utc

    def test_datetime_passthrough(self):
        assert parse_timestamp(datetime(2026, 3, 14, 9, 30)) == NOW


class TestSettings:
    def test_defaults(self, monkeypatch, tmp_path):
        for name in ("STOCK_MODE", "SCHEMA", "POS_TIMEZONE", "LOW_STOCK_THRESHOLD", "DEFAULT_CASHIER"):
            monkeypatch.delenv(name, raising=False)
        settings = load_settings(str(tmp_path / "missing.env"))
        assert settings.stock_mode == "strict"
        assert settings.schema == "public"
        assert settings.default_cashier == "System User"
        assert settings.low_stock_threshold == 10

    def test_reads_env(self, monkeypatch, tmp_path):
        monkeypatch.setenv("STOCK_MODE", "OVERWRITE")
        monkeypatch.setenv("POS_TIMEZONE", "Asia/Manila")
        monkeypatch.setenv("LOW_STOCK_THRESHOLD", "5")
        settings = load_settings(str(tmp_path / "missing.env"))
        assert settings.stock_mode == "overwrite"
        assert settings.tz.key == "Asia/Manila"
        assert settings.low_stock_threshold == 5

    @pytest.mark.parametrize(
        "name, value",
        [("STOCK_MODE", "sometimes"), ("POS_TIMEZONE", "Mars/Olympus"), ("LOW_STOCK_THRESHOLD", "ten")],
    )
    def test_invalid_values(self, monkeypatch, tmp_path, name, value):
        monkeypatch.setenv(name, value)
        with pytest.raises(ValueError):
            load_settings(str(tmp_path / "missing.env"))

    def test_format_money(self):
        assert format_money(Decimal("1234567.5")) == "₱1,234,567.50"
        assert format_money(Decimal("3"), symbol="$") == "$3.00"

    def test_format_timestamp_in_local_zone(self):
        # 2026-03-13 16:30 UTC is already the 14th in Manila
        ts = datetime(2026, 3, 13, 16, 30, tzinfo=timezone.utc)
        assert format_timestamp(ts, ZoneInfo("Asia/Manila")) == "14/03/2026 00:30"
        assert format_timestamp(ts, timezone.utc) == "13/03/2026 16:30"


def test_product_is_frozen():
    p = make_product()
    with pytest.raises(Exception):
        p.price = Decimal("1")
    assert isinstance(p, Product)
