"""Merchant name normalization shared by duplicate and pattern detection."""

import re

# Location tokens bank exports append to merchant names
LOCATION_TOKENS = (
    "kyiv",
    "kiev",
    "київ",
    "lviv",
    "львів",
    "odesa",
    "odessa",
    "одеса",
    "kharkiv",
    "харків",
    "dnipro",
    "дніпро",
    "vinnytsia",
    "вінниця",
    "ukraine",
    "ua",
)

_REFERENCE_RE = re.compile(r"#\d+")
_DIGIT_RUN_RE = re.compile(r"(?<!\d)\d{4,}(?!\d)")
_LOCATION_RE = re.compile(r"\b(?:" + "|".join(LOCATION_TOKENS) + r")\b")
_WHITESPACE_RE = re.compile(r"\s+")


def _normalize_once(merchant: str) -> str:
    normalized = merchant.lower()
    normalized = _REFERENCE_RE.sub(" ", normalized)
    normalized = _DIGIT_RUN_RE.sub(" ", normalized)
    normalized = _LOCATION_RE.sub(" ", normalized)
    return _WHITESPACE_RE.sub(" ", normalized).strip()


def normalize_merchant(merchant: str) -> str:
    """Canonicalize a merchant string for fuzzy grouping.

    Lower-cases, strips reference numbers ("#4521" and standalone runs of
    four or more digits) and known location tokens, then collapses
    whitespace. The result is a fixed point: normalizing it again returns
    the same string.

    Example:
        >>> normalize_merchant("STARBUCKS KYIV #4521")
        'starbucks'
    """
    if not merchant:
        return ""
    current = _normalize_once(merchant)
    while True:
        again = _normalize_once(current)
        if again == current:
            return current
        current = again
