"""Payment reminder planning.

Reminders fire at a fixed hour on the day before payments are due, one
reminder per due day. Delivery belongs to a notification scheduler.
"""

from collections import defaultdict
from datetime import datetime, time, timedelta
from decimal import Decimal
from typing import Iterable

from spendcycle import config
from spendcycle.domain.entities import ExpenseRecord, Reminder
from spendcycle.domain.recurrence import upcoming_expenses

MAX_NAMED_PAYMENTS = 3


def format_money(amount: Decimal, expense: ExpenseRecord) -> str:
    return f"{expense.currency.symbol}{amount:.2f}"


def plan_payment_reminders(
    expenses: Iterable[ExpenseRecord],
    now: datetime,
    days: int = config.REMINDER_DAYS,
    hour: int = config.REMINDER_HOUR,
) -> list[Reminder]:
    """Build reminders for generated expenses due within ``days`` of ``now``.

    Reminders whose firing time has already passed are left out.
    """
    due = [e for e in upcoming_expenses(expenses, now, days) if e.template_id and not e.is_income]

    by_day: dict = defaultdict(list)
    for expense in due:
        by_day[expense.date.date()].append(expense)

    reminders = []
    for day in sorted(by_day):
        group = by_day[day]
        fire_at = datetime.combine(day - timedelta(days=1), time(hour=hour))
        if fire_at <= now:
            continue

        if len(group) == 1:
            expense = group[0]
            title = "Upcoming Payment"
            body = f"{expense.title} - {format_money(expense.amount, expense)} due tomorrow"
        else:
            total = sum((e.amount for e in group), Decimal("0"))
            names = ", ".join(e.title for e in group[:MAX_NAMED_PAYMENTS])
            more = f" and {len(group) - MAX_NAMED_PAYMENTS} more" if len(group) > MAX_NAMED_PAYMENTS else ""
            title = f"{len(group)} Payments Due Tomorrow"
            body = f"Total: {format_money(total, group[0])} - {names}{more}"

        reminders.append(
            Reminder(
                identifier=f"{config.REMINDER_ID_PREFIX}{day.isoformat()}",
                fire_at=fire_at,
                due_date=datetime.combine(day, time.min),
                title=title,
                body=body,
                expense_ids=tuple(e.id for e in group),
            )
        )
    return reminders
