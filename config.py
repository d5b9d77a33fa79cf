# config.py
import os
from dataclasses import dataclass
from typing import Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from dotenv import load_dotenv

STOCK_MODES = ("strict", "overwrite")


@dataclass(frozen=True)
class PosSettings:
    supabase_url: Optional[str] = None
    supabase_key: Optional[str] = None
    schema: str = "public"
    products_table: str = "products"
    receipts_table: str = "receipts"
    stock_mode: str = "strict"
    default_cashier: str = "System User"
    timezone: str = "UTC"
    low_stock_threshold: int = 10
    currency_symbol: str = "₱"

    def __post_init__(self):
        if self.stock_mode not in STOCK_MODES:
            raise ValueError(
                f"STOCK_MODE must be one of {', '.join(STOCK_MODES)}, got {self.stock_mode!r}"
            )
        if self.low_stock_threshold < 0:
            raise ValueError("LOW_STOCK_THRESHOLD cannot be negative")
        try:
            ZoneInfo(self.timezone)
        except (ZoneInfoNotFoundError, ValueError) as e:
            raise ValueError(f"Unknown POS_TIMEZONE: {self.timezone!r}") from e

    @property
    def tz(self) -> ZoneInfo:
        return ZoneInfo(self.timezone)


def load_settings(env_file: Optional[str] = None) -> PosSettings:
    """
    Read settings from the environment (and .env, if present).
    """
    load_dotenv(env_file)

    threshold = os.getenv("LOW_STOCK_THRESHOLD", "10")
    try:
        low_stock_threshold = int(threshold)
    except ValueError as e:
        raise ValueError(f"LOW_STOCK_THRESHOLD must be an integer, got {threshold!r}") from e

    return PosSettings(
        supabase_url=os.getenv("SUPABASE_URL"),
        supabase_key=os.getenv("SUPABASE_KEY"),
        schema=os.getenv("SCHEMA", "public"),
        products_table=os.getenv("PRODUCTS_TABLE", "products"),
        receipts_table=os.getenv("RECEIPTS_TABLE", "receipts"),
        stock_mode=os.getenv("STOCK_MODE", "strict").lower(),
        default_cashier=os.getenv("DEFAULT_CASHIER", "System User"),
        timezone=os.getenv("POS_TIMEZONE", "UTC"),
        low_stock_threshold=low_stock_threshold,
        currency_symbol=os.getenv("CURRENCY_SYMBOL", "₱"),
    )
