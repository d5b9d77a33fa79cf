# services/receipt_service.py
import logging
from collections import OrderedDict
from datetime import date, datetime, timezone, tzinfo
from decimal import Decimal
from typing import Dict, List, Optional, Sequence

from domain.models import Receipt, to_money
from services.store import Store
from utils.row_mapping import receipts_from_rows

logger = logging.getLogger(__name__)


class ReceiptProjection:
    """
    Read side for saved receipts: history list, lookup and daily sales.
    Aggregates are computed here from the fetched rows, not in the database.
    """

    def __init__(self, store: Store, tz: tzinfo = timezone.utc):
        self.store = store
        self.tz = tz

    def list_receipts(self) -> List[Receipt]:
        """All receipts, newest first."""
        rows = self.store.list_receipts()
        receipts = receipts_from_rows(rows)
        # don't rely on the backend for ordering
        receipts.sort(key=lambda r: r.timestamp, reverse=True)
        logger.debug("Loaded %d receipts", len(receipts))
        return receipts

    def get_receipt(self, receipt_id: str, receipts: Optional[Sequence[Receipt]] = None) -> Optional[Receipt]:
        if receipts is None:
            receipts = self.list_receipts()
        return next((r for r in receipts if r.id == receipt_id), None)

    def local_date(self, receipt: Receipt) -> date:
        return receipt.timestamp.astimezone(self.tz).date()

    def sales_today(
            self,
            receipts: Optional[Sequence[Receipt]] = None,
            *,
            today: Optional[date] = None,
    ) -> Decimal:
        """
        Sum of receipt totals whose local date is `today` (default: now in
        the projection's time zone).
        """
        if receipts is None:
            receipts = self.list_receipts()
        if today is None:
            today = datetime.now(self.tz).date()

        total = sum(
            (r.total for r in receipts if self.local_date(r) == today),
            Decimal("0"),
        )
        return to_money(total)

    def sales_by_day(self, receipts: Optional[Sequence[Receipt]] = None) -> Dict[date, Decimal]:
        """Local date -> total sales, oldest day first."""
        if receipts is None:
            receipts = self.list_receipts()

        per_day: Dict[date, Decimal] = {}
        for r in receipts:
            day = self.local_date(r)
            per_day[day] = per_day.get(day, Decimal("0")) + r.total

        return OrderedDict((day, to_money(per_day[day])) for day in sorted(per_day))
