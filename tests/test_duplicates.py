"""Tests for duplicate detection."""

from datetime import datetime
from decimal import Decimal

from spendcycle.domain.duplicates import filter_duplicates, is_duplicate
from spendcycle.domain.entities import ExpenseRecord, TransactionRecord


def _expense(title="Starbucks", amount="149.00", day=datetime(2024, 1, 31, 18, 0), merchant=None):
    return ExpenseRecord(title=title, amount=Decimal(amount), date=day, merchant=merchant)


def _txn(merchant="STARBUCKS KYIV #4521", amount="-149.00", day=datetime(2024, 1, 31, 10, 0)):
    return TransactionRecord(date=day, merchant=merchant, amount=Decimal(amount))


def test_same_day_amount_and_merchant_is_duplicate():
    """Test a plain duplicate match."""
    assert is_duplicate(_txn(), [_expense()])


def test_amount_within_tolerance():
    """Test the 10% amount tolerance."""
    assert is_duplicate(_txn(amount="-160.00"), [_expense()])
    assert not is_duplicate(_txn(amount="-170.00"), [_expense()])


def test_different_day_is_not_duplicate():
    """Test that a different calendar day never matches."""
    assert not is_duplicate(_txn(day=datetime(2024, 2, 1, 0, 5)), [_expense()])


def test_merchant_takes_precedence_over_title():
    """Test matching against the expense merchant before its title."""
    expense = _expense(title="Coffee", merchant="Starbucks Lviv")
    assert is_duplicate(_txn(), [expense])


def test_different_merchant_is_not_duplicate():
    """Test that a different merchant never matches."""
    assert not is_duplicate(_txn(merchant="Aroma Kava"), [_expense()])


def test_filter_duplicates_preserves_order():
    """Test splitting transactions into unique and duplicates."""
    transactions = [_txn(merchant="Aroma"), _txn(), _txn(merchant="Lviv Croissants")]

    unique, duplicates = filter_duplicates(transactions, [_expense()])

    assert [t.merchant for t in unique] == ["Aroma", "Lviv Croissants"]
    assert duplicates == [_txn()]
