"""Pure date and state helpers over templates and expenses."""

from datetime import datetime, timedelta
from decimal import Decimal
from typing import Iterable, Optional

from dateutil.relativedelta import relativedelta

from spendcycle.domain.entities import ExpenseRecord, Frequency, RecurringTemplate
from spendcycle.utils.date_parser import start_of_day


def period_delta(frequency: Frequency, multiplier: int = 1) -> relativedelta:
    """Return ``multiplier`` whole periods of ``frequency``."""
    if frequency == Frequency.WEEKLY:
        return relativedelta(weeks=multiplier)
    if frequency == Frequency.MONTHLY:
        return relativedelta(months=multiplier)
    if frequency == Frequency.YEARLY:
        return relativedelta(years=multiplier)
    return relativedelta()


def add_periods(start: datetime, frequency: Frequency, multiplier: int) -> datetime:
    """Return the occurrence ``multiplier`` periods after ``start``.

    Always computed from the original start so a template started on the
    31st lands on the last valid day of shorter months and returns to the
    31st afterwards.
    """
    return start + period_delta(frequency, multiplier)


def next_due_date(template: RecurringTemplate, from_date: Optional[datetime] = None) -> Optional[datetime]:
    """First occurrence strictly after ``from_date`` (default: last generated or start date).

    Occurrences are the same ``start_date + n periods`` series the generator
    walks, so a template started on the 31st is due on Mar 31 after Feb 29.
    One-time templates have no next occurrence.
    """
    if template.frequency == Frequency.ONE_TIME:
        return None
    base = from_date or template.last_generated_date or template.start_date
    multiplier = 1
    candidate = add_periods(template.start_date, template.frequency, multiplier)
    while candidate <= base:
        multiplier += 1
        candidate = add_periods(template.start_date, template.frequency, multiplier)
    return candidate


def is_currently_paused(template: RecurringTemplate, now: datetime) -> bool:
    """True iff the template is paused and the pause has not yet run out."""
    if not template.is_paused:
        return False
    if template.paused_until is None:
        return True
    return template.paused_until > now


def is_generating(template: RecurringTemplate, now: datetime) -> bool:
    """Whether the generator should materialize expenses for this template."""
    return (
        template.is_active
        and template.frequency != Frequency.ONE_TIME
        and not is_currently_paused(template, now)
    )


def is_amount_matching(template: RecurringTemplate, amount: Decimal) -> bool:
    """Check whether ``amount`` lies within the template's tolerance band."""
    tolerance = Decimal(str(template.amount_tolerance))
    lower = template.amount * (1 - tolerance)
    upper = template.amount * (1 + tolerance)
    return lower <= abs(amount) <= upper


def same_day(first: datetime, second: datetime) -> bool:
    return first.date() == second.date()


def has_expense_on(expenses: Iterable[ExpenseRecord], template_id: str, day: datetime) -> bool:
    """Whether any expense generated from ``template_id`` falls on ``day``'s calendar day."""
    return any(e.template_id == template_id and same_day(e.date, day) for e in expenses)


def upcoming_expenses(expenses: Iterable[ExpenseRecord], now: datetime, days: int) -> list[ExpenseRecord]:
    """Expenses dated from the start of today up to ``days`` days from now, soonest first."""
    window_start = start_of_day(now)
    window_end = now + timedelta(days=days)
    upcoming = [e for e in expenses if window_start <= e.date <= window_end]
    return sorted(upcoming, key=lambda e: e.date)
