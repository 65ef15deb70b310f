"""Recurring expense generation and missed-payment detection."""

import logging
from datetime import date, datetime, timedelta
from decimal import Decimal
from typing import Iterable, Optional, Sequence

from spendcycle import config
from spendcycle.database.base import Database
from spendcycle.domain.entities import ExpenseCategory, ExpenseRecord, RecurringTemplate
from spendcycle.domain.errors import NotFoundError, ValidationError, expense_not_found
from spendcycle.domain.recurrence import add_periods, has_expense_on, is_generating, next_due_date
from spendcycle.integrations.sync import DownstreamSync
from spendcycle.utils.date_parser import start_of_day

logger = logging.getLogger(__name__)


def expense_from_template(template: RecurringTemplate, on: datetime) -> ExpenseRecord:
    """Build a generated expense for ``template`` dated ``on``."""
    return ExpenseRecord(
        title=template.title,
        amount=template.amount,
        date=on,
        categories=list(template.categories),
        payment_method=template.payment_method,
        currency=template.currency,
        merchant=template.merchant,
        notes=template.notes,
        template_id=template.id,
        is_generated=True,
        template_snapshot_hash=template.snapshot_marker,
    )


def generate_for_template(
    template: RecurringTemplate,
    existing_days: set[date],
    now: datetime,
    horizon_days: int = config.HORIZON_DAYS,
    max_iterations: int = config.MAX_ITERATIONS,
) -> list[ExpenseRecord]:
    """Materialize the missing occurrences of one template up to the horizon.

    Candidates are ``start_date + n periods`` for n = 0, 1, 2, ... The first
    candidate is skipped when it lies before the start of today. A candidate
    whose calendar day is in ``existing_days`` is left alone; created days are
    added to the set. ``last_generated_date`` moves forward to the latest
    candidate not after ``now`` and never backwards.

    Args:
        template: Template to walk; its ``last_generated_date`` may be updated
        existing_days: Calendar days already covered for this template
        now: Reference time
        horizon_days: How far past ``now`` to generate
        max_iterations: Hard cap on walked periods

    Returns:
        Newly created expenses, oldest first
    """
    horizon = now + timedelta(days=horizon_days)
    today = start_of_day(now)

    created = []
    latest_occurred: Optional[datetime] = None
    for multiplier in range(max_iterations):
        candidate = add_periods(template.start_date, template.frequency, multiplier)
        if candidate > horizon:
            break
        if candidate <= now:
            latest_occurred = candidate
        if multiplier == 0 and candidate < today:
            continue
        if candidate.date() in existing_days:
            continue
        created.append(expense_from_template(template, candidate))
        existing_days.add(candidate.date())
    else:
        logger.warning(
            "Template %s hit the %d iteration cap before reaching the horizon", template.id, max_iterations
        )

    if latest_occurred is not None and (
        template.last_generated_date is None or latest_occurred > template.last_generated_date
    ):
        template.last_generated_date = latest_occurred

    return created


def generate(
    templates: Iterable[RecurringTemplate],
    existing_expenses: Sequence[ExpenseRecord],
    now: datetime,
    horizon_days: int = config.HORIZON_DAYS,
    max_iterations: int = config.MAX_ITERATIONS,
) -> list[ExpenseRecord]:
    """Create the expenses that active, unpaused, repeating templates still owe.

    Calling it again with the created expenses added to ``existing_expenses``
    creates nothing.
    """
    created = []
    for template in templates:
        if not is_generating(template, now):
            continue
        existing_days = {e.date.date() for e in existing_expenses if e.template_id == template.id}
        created.extend(generate_for_template(template, existing_days, now, horizon_days, max_iterations))
    return created


def find_missed_payments(
    templates: Iterable[RecurringTemplate],
    expenses: Sequence[ExpenseRecord],
    now: datetime,
    grace_days: int = config.MISSED_GRACE_DAYS,
) -> list[RecurringTemplate]:
    """Templates whose next due date is over ``grace_days`` past with no expense on that day."""
    threshold = now - timedelta(days=grace_days)
    missed = []
    for template in templates:
        if not is_generating(template, now):
            continue
        due = next_due_date(template)
        if due is None or due >= threshold:
            continue
        if not has_expense_on(expenses, template.id, due):
            missed.append(template)
    return missed


class RecurringExpenseService:
    """Service for generating expenses from recurring templates."""

    def __init__(
        self,
        db: Database,
        downstream: Optional[DownstreamSync] = None,
        horizon_days: int = config.HORIZON_DAYS,
        max_iterations: int = config.MAX_ITERATIONS,
    ):
        """Initialize recurring expense service.

        Args:
            db: Database instance
            downstream: Widget/reminder refresh run after every save
            horizon_days: How far ahead to generate
            max_iterations: Hard cap on periods walked per template
        """
        self.db = db
        self.downstream = downstream
        self.horizon_days = horizon_days
        self.max_iterations = max_iterations

    def generate_recurring_expenses(self, now: Optional[datetime] = None) -> list[ExpenseRecord]:
        """Generate, persist and announce missing expenses for every template.

        Safe to call repeatedly, e.g. on start-up and whenever budgets are
        viewed.

        Returns:
            Newly created expenses

        Raises:
            PersistenceError: If the batch could not be saved
        """
        now = now or datetime.now()
        templates = self.db.list_templates(active_only=True)
        existing = self.db.list_expenses()

        before = {t.id: t.last_generated_date for t in templates}
        created = generate(templates, existing, now, self.horizon_days, self.max_iterations)
        changed = [t for t in templates if t.last_generated_date != before[t.id]]

        self.db.save_changes(templates=changed, new_expenses=created)
        logger.info("Generated %d expense(s) from %d template(s)", len(created), len(templates))

        if self.downstream is not None:
            self.downstream.refresh(now)
        return created

    def check_missed_payments(self, now: Optional[datetime] = None) -> list[RecurringTemplate]:
        """Templates whose last due payment never materialized."""
        now = now or datetime.now()
        templates = self.db.list_templates(active_only=True)
        expenses = self.db.list_expenses()
        return find_missed_payments(templates, expenses, now)

    def edit_expense(
        self,
        expense_id: str,
        title: Optional[str] = None,
        amount: Optional[Decimal] = None,
        date: Optional[datetime] = None,
        categories: Optional[list[ExpenseCategory]] = None,
        notes: Optional[str] = None,
    ) -> ExpenseRecord:
        """Apply a user edit to an expense.

        A generated expense that is edited here is flagged as manually
        edited and no longer follows its template.

        Raises:
            NotFoundError: If the expense doesn't exist
            ValidationError: If the amount is not positive
        """
        expense = self.db.get_expense(expense_id)
        if expense is None:
            raise NotFoundError(expense_not_found(expense_id))
        if amount is not None and amount <= 0:
            raise ValidationError(f"Expense amount must be greater than zero (got {amount})")

        if title is not None:
            expense.title = title
        if amount is not None:
            expense.amount = amount
        if date is not None:
            expense.date = date
        if categories is not None:
            expense.categories = list(categories)
        if notes is not None:
            expense.notes = notes
        if expense.is_generated:
            expense.is_manually_edited = True

        self.db.update_expense(expense)
        if self.downstream is not None:
            self.downstream.refresh(datetime.now())
        return expense
