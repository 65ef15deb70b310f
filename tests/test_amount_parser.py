"""Tests for amount parsing."""

from decimal import Decimal

import pytest

from spendcycle.utils.amount_parser import parse_amount


def test_parse_amount_plain():
    """Test parsing plain dot-decimal amounts."""
    assert parse_amount("123.45") == Decimal("123.45")
    assert parse_amount("-20") == Decimal("-20")


def test_parse_amount_decimal_comma():
    """Test parsing a bank amount with a decimal comma."""
    assert parse_amount("-149,00") == Decimal("-149.00")


def test_parse_amount_thousands_separators():
    """Test that the rightmost separator is treated as the decimal one."""
    assert parse_amount("1,234.56") == Decimal("1234.56")
    assert parse_amount("1.234,56") == Decimal("1234.56")
    assert parse_amount("1 234,56") == Decimal("1234.56")
    assert parse_amount("1,234,567") == Decimal("1234567")


def test_parse_amount_currency():
    """Test stripping currency symbols and codes."""
    assert parse_amount("₴149,00") == Decimal("149.00")
    assert parse_amount("$10.50") == Decimal("10.50")
    assert parse_amount("250 грн") == Decimal("250")


def test_parse_amount_parentheses_negative():
    """Test parentheses notation for negative amounts."""
    assert parse_amount("(123.45)") == Decimal("-123.45")


@pytest.mark.parametrize("value", ["", "   ", "abc", "12abc", "NaN", "Infinity"])
def test_parse_amount_invalid(value):
    """Test that unparsable and non-finite amounts are rejected."""
    with pytest.raises(ValueError):
        parse_amount(value)
