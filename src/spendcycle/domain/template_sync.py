"""Propagation of template edits to generated expenses, with one level of undo."""

import json
import logging
from datetime import datetime
from decimal import Decimal
from typing import Callable, Optional

from spendcycle import config
from spendcycle.database.base import Database
from spendcycle.domain.entities import (
    Currency,
    ExpenseCategory,
    ExpenseRecord,
    ExpenseSnapshot,
    PaymentMethod,
    RecurringTemplate,
    SyncResult,
)
from spendcycle.domain.errors import DomainError
from spendcycle.integrations.sync import DownstreamSync

logger = logging.getLogger(__name__)

SNAPSHOT_KEY_PREFIX = "templateUndo."
SNAPSHOT_INDEX_KEY = "templateUndo.index"


def snapshot_expense(expense: ExpenseRecord) -> ExpenseSnapshot:
    """Capture the template-driven fields of an expense."""
    return ExpenseSnapshot(
        expense_id=expense.id,
        title=expense.title,
        amount=expense.amount,
        merchant=expense.merchant,
        notes=expense.notes,
        payment_method=expense.payment_method,
        currency=expense.currency,
        is_income=expense.is_income,
        template_snapshot_hash=expense.template_snapshot_hash,
        categories=tuple(expense.categories),
    )


def apply_template(expense: ExpenseRecord, template: RecurringTemplate) -> None:
    """Overwrite an expense's template-driven fields from the template."""
    expense.title = template.title
    expense.amount = template.amount
    expense.merchant = template.merchant
    expense.notes = template.notes
    expense.payment_method = template.payment_method
    expense.currency = template.currency
    expense.categories = list(template.categories)
    expense.template_snapshot_hash = template.snapshot_marker


def restore_snapshot(expense: ExpenseRecord, snapshot: ExpenseSnapshot) -> None:
    """Put snapshotted values back; categories only when the snapshot has them."""
    expense.title = snapshot.title
    expense.amount = snapshot.amount
    expense.merchant = snapshot.merchant
    expense.notes = snapshot.notes
    expense.payment_method = snapshot.payment_method
    expense.currency = snapshot.currency
    expense.is_income = snapshot.is_income
    expense.template_snapshot_hash = snapshot.template_snapshot_hash
    if snapshot.categories is not None:
        expense.categories = list(snapshot.categories)


def snapshot_to_dict(snapshot: ExpenseSnapshot) -> dict:
    return {
        "expense_id": snapshot.expense_id,
        "title": snapshot.title,
        "amount": str(snapshot.amount),
        "merchant": snapshot.merchant,
        "notes": snapshot.notes,
        "payment_method": snapshot.payment_method.value,
        "currency": snapshot.currency.value,
        "is_income": snapshot.is_income,
        "template_snapshot_hash": snapshot.template_snapshot_hash,
        "categories": None if snapshot.categories is None else [c.value for c in snapshot.categories],
    }


def snapshot_from_dict(data: dict) -> ExpenseSnapshot:
    """Read a stored snapshot entry; entries without ``categories`` restore no categories."""
    categories = data.get("categories")
    return ExpenseSnapshot(
        expense_id=data["expense_id"],
        title=data["title"],
        amount=Decimal(data["amount"]),
        merchant=data.get("merchant"),
        notes=data.get("notes"),
        payment_method=PaymentMethod(data.get("payment_method", PaymentMethod.CARD.value)),
        currency=Currency(data.get("currency", Currency.UAH.value)),
        is_income=bool(data.get("is_income", False)),
        template_snapshot_hash=data.get("template_snapshot_hash"),
        categories=None if categories is None else tuple(ExpenseCategory(c) for c in categories),
    )


class UndoSnapshotStore:
    """Bounded map of template id to the snapshot list of its last sync.

    Each template has a single slot: saving a new snapshot replaces the old
    one. At most ``max_slots`` templates are kept; saving beyond that evicts
    the template whose snapshot was saved longest ago.
    """

    def __init__(self, store, max_slots: int = config.UNDO_SLOTS):
        self.store = store
        self.max_slots = max_slots

    def _key(self, template_id: str) -> str:
        return f"{SNAPSHOT_KEY_PREFIX}{template_id}"

    def _index(self) -> list[str]:
        raw = self.store.get_value(SNAPSHOT_INDEX_KEY)
        return json.loads(raw) if raw else []

    def _write_index(self, index: list[str]) -> None:
        self.store.set_value(SNAPSHOT_INDEX_KEY, json.dumps(index))

    def save(self, template_id: str, snapshots: list[ExpenseSnapshot]) -> None:
        index = [tid for tid in self._index() if tid != template_id]
        index.append(template_id)
        while len(index) > self.max_slots:
            evicted = index.pop(0)
            self.store.delete_value(self._key(evicted))
        self.store.set_value(self._key(template_id), json.dumps([snapshot_to_dict(s) for s in snapshots]))
        self._write_index(index)

    def load(self, template_id: str) -> Optional[list[ExpenseSnapshot]]:
        raw = self.store.get_value(self._key(template_id))
        if raw is None:
            return None
        return [snapshot_from_dict(entry) for entry in json.loads(raw)]

    def clear(self, template_id: str) -> None:
        self.store.delete_value(self._key(template_id))
        index = self._index()
        if template_id in index:
            index.remove(template_id)
            self._write_index(index)

    def template_ids(self) -> list[str]:
        """Templates that currently have an undo slot, oldest first."""
        return self._index()


def _log_error(error: Exception) -> None:
    logger.error("Undo failed: %s", error)


class TemplateSyncService:
    """Keeps generated expenses in step with template edits."""

    def __init__(
        self,
        db: Database,
        downstream: Optional[DownstreamSync] = None,
        snapshots: Optional[UndoSnapshotStore] = None,
        on_error: Callable[[Exception], None] = _log_error,
    ):
        """Initialize template sync service.

        Args:
            db: Database instance
            downstream: Widget/reminder refresh run after every save
            snapshots: Undo snapshot store (defaults to one over ``db``)
            on_error: Receives undo failures, which are reported rather than raised
        """
        self.db = db
        self.downstream = downstream
        self.snapshots = snapshots or UndoSnapshotStore(db)
        self.on_error = on_error

    def update_generated_expenses(
        self, template: RecurringTemplate, apply_from: datetime, now: Optional[datetime] = None
    ) -> SyncResult:
        """Overwrite generated expenses dated on or after ``apply_from`` with the template's values.

        Manually edited expenses are skipped. The previous values of every
        overwritten expense are kept as the template's undo snapshot.

        Raises:
            PersistenceError: If the updated expenses could not be saved
        """
        expenses = self.db.list_expenses(template_id=template.id, start_date=apply_from, generated_only=True)

        snapshots = []
        updated = []
        skipped_manual = 0
        for expense in expenses:
            if expense.is_manually_edited:
                skipped_manual += 1
                continue
            snapshots.append(snapshot_expense(expense))
            apply_template(expense, template)
            updated.append(expense)

        self.snapshots.save(template.id, snapshots)
        self.db.save_changes(updated_expenses=updated)
        logger.info(
            "Synced template %s: %d updated, %d manually edited skipped",
            template.id,
            len(updated),
            skipped_manual,
        )

        if self.downstream is not None:
            self.downstream.refresh(now or datetime.now())
        return SyncResult(updated_count=len(updated), skipped_manual_count=skipped_manual)

    def undo_last_template_update(self, template_id: str, now: Optional[datetime] = None) -> bool:
        """Restore the expenses changed by the template's last sync.

        Returns False when there is nothing to undo or the restore could not
        be saved; failures go to ``on_error``. A successful undo consumes the
        snapshot.
        """
        # DomainError covers store failures; ValueError/KeyError cover unreadable snapshots
        try:
            snapshots = self.snapshots.load(template_id)
            if snapshots is None:
                return False

            restored = []
            for snapshot in snapshots:
                expense = self.db.get_expense(snapshot.expense_id)
                if expense is None:
                    logger.warning("Expense %s from undo snapshot no longer exists", snapshot.expense_id)
                    continue
                restore_snapshot(expense, snapshot)
                restored.append(expense)

            self.db.save_changes(updated_expenses=restored)
            self.snapshots.clear(template_id)
        except (DomainError, ValueError, KeyError) as e:
            self.on_error(e)
            return False

        logger.info("Undid last sync of template %s (%d expense(s) restored)", template_id, len(restored))
        if self.downstream is not None:
            self.downstream.refresh(now or datetime.now())
        return True
