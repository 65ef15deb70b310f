"""Duplicate detection between imported transactions and recorded expenses."""

from decimal import Decimal
from typing import Iterable, Sequence

from spendcycle.domain.entities import ExpenseRecord, TransactionRecord
from spendcycle.utils.merchant import normalize_merchant

DUPLICATE_AMOUNT_TOLERANCE = Decimal("0.10")


def is_duplicate(
    transaction: TransactionRecord,
    existing_expenses: Iterable[ExpenseRecord],
    tolerance: Decimal = DUPLICATE_AMOUNT_TOLERANCE,
) -> bool:
    """Check whether ``transaction`` is already on record.

    A match needs the same calendar day, an absolute amount within
    ``tolerance`` of the expense amount and the same normalized merchant.
    The first match wins.
    """
    merchant = normalize_merchant(transaction.merchant)
    amount = transaction.absolute_amount
    day = transaction.date.date()

    for expense in existing_expenses:
        if expense.date.date() != day:
            continue
        if abs(amount - expense.amount) > expense.amount * tolerance:
            continue
        if normalize_merchant(expense.merchant or expense.title) != merchant:
            continue
        return True
    return False


def filter_duplicates(
    transactions: Sequence[TransactionRecord], existing_expenses: Sequence[ExpenseRecord]
) -> tuple[list[TransactionRecord], list[TransactionRecord]]:
    """Split transactions into (unique, duplicates), preserving order."""
    unique = []
    duplicates = []
    for transaction in transactions:
        if is_duplicate(transaction, existing_expenses):
            duplicates.append(transaction)
        else:
            unique.append(transaction)
    return unique, duplicates
