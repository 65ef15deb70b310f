"""Date parsing utilities."""

from datetime import date, datetime, time, timedelta
from dateutil import parser as date_parser
from dateutil.relativedelta import relativedelta

BANK_DATETIME_FORMAT = "%d.%m.%Y %H:%M:%S"


def parse_bank_datetime(value: str) -> datetime:
    """Parse a bank export timestamp in ``DD.MM.YYYY HH:MM:SS`` form.

    Raises:
        ValueError: If the value does not match the pattern exactly
    """
    return datetime.strptime(value.strip(), BANK_DATETIME_FORMAT)


def parse_date(date_str: str) -> date:
    """Parse a date string into a date object.

    Supports various formats including relative dates:
    - Absolute dates: "2024-01-15", "January 15, 2024", etc.
    - Relative dates: "today", "yesterday", "tomorrow", "next month", etc.

    Args:
        date_str: Date string in various formats

    Returns:
        Date object

    Raises:
        ValueError: If date string cannot be parsed
    """
    date_str = date_str.strip().lower()
    today = date.today()

    relative_dates = {
        "today": today,
        "yesterday": today - timedelta(days=1),
        "tomorrow": today + timedelta(days=1),
    }

    if date_str in relative_dates:
        return relative_dates[date_str]

    if date_str.startswith("this "):
        period = date_str[5:]
        if period == "month":
            return today.replace(day=1)
        elif period == "year":
            return today.replace(month=1, day=1)
        elif period == "week":
            return today - timedelta(days=today.weekday())

    elif date_str.startswith("next "):
        period = date_str[5:]
        if period == "month":
            return (today + relativedelta(months=1)).replace(day=1)
        elif period == "year":
            return today.replace(month=1, day=1) + relativedelta(years=1)
        elif period == "week":
            return today + timedelta(days=(7 - today.weekday()))

    # Try parsing as absolute date
    try:
        dt = date_parser.parse(date_str)
        return dt.date()
    except (ValueError, TypeError, OverflowError) as e:
        raise ValueError(f"Could not parse date '{date_str}': {e}")


def parse_datetime(date_str: str) -> datetime:
    """Parse a date or date-time string for use as a point in time.

    Plain and relative dates resolve to midnight; strings carrying a time
    keep it.
    """
    stripped = date_str.strip()
    try:
        parsed = date_parser.parse(stripped)
    except (ValueError, TypeError, OverflowError):
        return datetime.combine(parse_date(stripped), time.min)
    return parsed.replace(tzinfo=None)


def start_of_day(moment: datetime) -> datetime:
    """Return midnight of the calendar day containing ``moment``."""
    return datetime.combine(moment.date(), time.min)
