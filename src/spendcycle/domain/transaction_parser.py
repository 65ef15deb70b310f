"""Transaction parser: bank export text into transaction records."""

import csv
import logging
import re
from decimal import Decimal
from typing import Optional

from spendcycle.domain.entities import Currency, TransactionRecord
from spendcycle.utils.amount_parser import parse_amount
from spendcycle.utils.date_parser import parse_bank_datetime

logger = logging.getLogger(__name__)

# Header fragments per column, most specific first. Matching is by
# case-insensitive substring so "Дата i час операції" finds "дата".
DATE_HEADER_FRAGMENTS = ("дата", "date")
MERCHANT_HEADER_FRAGMENTS = ("деталі", "опис", "merchant", "description", "details", "payee")
AMOUNT_HEADER_FRAGMENTS = ("сума в валюті картки", "сума", "amount", "sum")

DEFAULT_DATE_INDEX = 0
DEFAULT_MERCHANT_INDEX = 1
DEFAULT_AMOUNT_INDEX = 4

_CURRENCY_IN_HEADER_RE = re.compile(r"\((usd|uah|eur)\)", re.IGNORECASE)


def split_csv_line(line: str) -> list[str]:
    """Split one delimited line on commas, honoring double-quoted fields.

    Fields are stripped of surrounding whitespace.
    """
    row = next(csv.reader([line], delimiter=",", quotechar='"', skipinitialspace=True), [])
    return [column.strip() for column in row]


def find_column(headers: list[str], fragments: tuple[str, ...], default: int) -> int:
    """Return the index of the first header containing one of ``fragments``."""
    lowered = [header.lower() for header in headers]
    for fragment in fragments:
        for index, header in enumerate(lowered):
            if fragment in header:
                return index
    return default


def detect_currency(amount_header: Optional[str]) -> Currency:
    """Read a currency code such as "(UAH)" from the amount column header."""
    if amount_header:
        match = _CURRENCY_IN_HEADER_RE.search(amount_header)
        if match:
            return Currency(match.group(1).lower())
    return Currency.UAH


def parse_transactions(content: str) -> list[TransactionRecord]:
    """Parse bank export text into transaction records.

    The first non-empty line is the header. Rows with an unparsable date,
    an empty merchant, an unparsable amount or a zero amount are skipped;
    a bad row never fails the whole file. Output order matches input order.

    Args:
        content: Decoded file content

    Returns:
        List of transaction records, possibly empty
    """
    lines = content.splitlines()

    header_position = next((i for i, line in enumerate(lines) if line.strip()), None)
    if header_position is None:
        return []

    headers = split_csv_line(lines[header_position])
    date_index = find_column(headers, DATE_HEADER_FRAGMENTS, DEFAULT_DATE_INDEX)
    merchant_index = find_column(headers, MERCHANT_HEADER_FRAGMENTS, DEFAULT_MERCHANT_INDEX)
    amount_index = find_column(headers, AMOUNT_HEADER_FRAGMENTS, DEFAULT_AMOUNT_INDEX)
    currency = detect_currency(headers[amount_index] if amount_index < len(headers) else None)
    required_width = max(date_index, merchant_index, amount_index) + 1

    transactions = []
    for line_num, line in enumerate(lines[header_position + 1 :], start=header_position + 2):
        if not line.strip():
            continue

        columns = split_csv_line(line)
        if len(columns) < required_width:
            logger.debug("Line %d: expected %d columns, got %d", line_num, required_width, len(columns))
            continue

        try:
            txn_date = parse_bank_datetime(columns[date_index])
        except ValueError:
            logger.debug("Line %d: unparsable date '%s'", line_num, columns[date_index])
            continue

        merchant = columns[merchant_index].strip()
        if not merchant:
            logger.debug("Line %d: empty merchant", line_num)
            continue

        try:
            amount = parse_amount(columns[amount_index])
        except ValueError:
            logger.debug("Line %d: unparsable amount '%s'", line_num, columns[amount_index])
            continue
        if amount == Decimal("0"):
            continue

        raw = {header: columns[index] for index, header in enumerate(headers) if index < len(columns)}
        transactions.append(
            TransactionRecord(
                date=txn_date,
                merchant=merchant,
                amount=amount,
                currency=currency,
                raw=raw,
            )
        )

    return transactions
