"""Home-screen widget export of upcoming expenses."""

import json
import logging
from datetime import datetime
from typing import Iterable

from spendcycle import config
from spendcycle.domain.entities import ExpenseRecord
from spendcycle.domain.recurrence import upcoming_expenses

logger = logging.getLogger(__name__)


class WidgetExporter:
    """Writes a short JSON summary of upcoming expenses to a key-value surface.

    ``store`` is anything with ``set_value(key, value)``, normally the
    record store.
    """

    def __init__(self, store, key: str = config.WIDGET_EXPENSES_KEY, max_items: int = config.WIDGET_MAX_ITEMS):
        self.store = store
        self.key = key
        self.max_items = max_items

    def build_payload(self, expenses: Iterable[ExpenseRecord], now: datetime, days: int) -> list[dict]:
        upcoming = [e for e in upcoming_expenses(expenses, now, days) if not e.is_income]
        return [
            {
                "id": e.id,
                "title": e.title,
                "amount": str(e.amount),
                "currency": e.currency.value,
                "date": e.date.isoformat(),
            }
            for e in upcoming[: self.max_items]
        ]

    def export(self, expenses: Iterable[ExpenseRecord], now: datetime, days: int = config.HORIZON_DAYS) -> list[dict]:
        """Store the payload and return it."""
        payload = self.build_payload(expenses, now, days)
        self.store.set_value(self.key, json.dumps(payload, ensure_ascii=False))
        logger.debug("Exported %d upcoming expense(s) to widget", len(payload))
        return payload
