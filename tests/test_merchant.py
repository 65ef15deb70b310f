"""Tests for merchant normalization."""

import pytest

from spendcycle.utils.merchant import normalize_merchant


def test_normalize_strips_location_and_reference():
    """Test stripping the city and reference number."""
    assert normalize_merchant("STARBUCKS KYIV #4521") == "starbucks"


def test_normalize_strips_long_digit_runs():
    """Test removing standalone runs of four or more digits."""
    assert normalize_merchant("ATB 12345 Market") == "atb market"


def test_normalize_keeps_short_numbers():
    """Test that short numbers are kept."""
    assert normalize_merchant("Cafe 24") == "cafe 24"


def test_normalize_keeps_location_inside_word():
    """Test that location tokens only match whole words."""
    # "ua" is a location token only as a whole word
    assert normalize_merchant("Guarana Bar") == "guarana bar"


def test_normalize_collapses_whitespace():
    """Test whitespace collapsing."""
    assert normalize_merchant("  Silpo   Lviv  ") == "silpo"


def test_normalize_empty():
    """Test inputs that normalize to an empty string."""
    assert normalize_merchant("") == ""
    assert normalize_merchant("KYIV #12") == ""


@pytest.mark.parametrize(
    "merchant",
    ["STARBUCKS KYIV #4521", "Netflix.com", "Сільпо Київ 0012345", "kyiv kyiv ua", "A  #1 #2 1234 5678"],
)
def test_normalize_is_idempotent(merchant):
    """Test that normalizing twice changes nothing."""
    once = normalize_merchant(merchant)
    assert normalize_merchant(once) == once
