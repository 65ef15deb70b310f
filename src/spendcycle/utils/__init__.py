"""Utility functions for spendcycle."""

from spendcycle.utils.date_parser import parse_date, parse_bank_datetime
from spendcycle.utils.amount_parser import parse_amount
from spendcycle.utils.merchant import normalize_merchant

__all__ = ["parse_date", "parse_bank_datetime", "parse_amount", "normalize_merchant"]
