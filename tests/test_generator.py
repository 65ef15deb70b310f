"""Tests for recurring expense generation."""

import logging
from datetime import datetime
from decimal import Decimal

import pytest

from spendcycle.domain.entities import ExpenseRecord, Frequency, RecurringTemplate
from spendcycle.domain.errors import NotFoundError, ValidationError
from spendcycle.domain.generator import find_missed_payments, generate, generate_for_template

NOW = datetime(2024, 3, 20, 12, 0)


def _template(**overrides) -> RecurringTemplate:
    values = dict(
        title="Gym",
        amount=Decimal("30"),
        merchant="gym",
        frequency=Frequency.MONTHLY,
        start_date=datetime(2024, 1, 15),
    )
    values.update(overrides)
    return RecurringTemplate(**values)


def test_gym_scenario():
    """Test generating a monthly template mid-way through its life."""
    template = _template()

    created = generate([template], [], NOW)

    assert [e.date for e in created] == [
        datetime(2024, 2, 15),
        datetime(2024, 3, 15),
        datetime(2024, 4, 15),
        datetime(2024, 5, 15),
    ]
    assert template.last_generated_date == datetime(2024, 3, 15)
    expense = created[0]
    assert expense.template_id == template.id
    assert expense.is_generated
    assert not expense.is_manually_edited
    assert expense.amount == Decimal("30")
    assert expense.template_snapshot_hash == template.snapshot_marker


def test_generation_is_idempotent():
    """Test that a second run creates nothing."""
    template = _template()
    first = generate([template], [], NOW)

    second = generate([template], first, NOW)

    assert second == []


def test_first_occurrence_today_is_created():
    """Test that a start date equal to now is generated."""
    template = _template(start_date=NOW)

    created = generate_for_template(template, set(), NOW, horizon_days=10)

    assert [e.date for e in created] == [NOW]
    assert template.last_generated_date == NOW


def test_first_occurrence_earlier_today_is_created():
    """Test that a start earlier today is generated."""
    template = _template(start_date=datetime(2024, 3, 20, 8, 0))

    created = generate_for_template(template, set(), NOW, horizon_days=10)

    assert [e.date for e in created] == [datetime(2024, 3, 20, 8, 0)]


def test_existing_day_is_not_duplicated():
    """Test that a day already covered is skipped."""
    template = _template()
    existing = ExpenseRecord(
        title="Gym", amount=Decimal("35"), date=datetime(2024, 3, 15, 19, 0), template_id=template.id
    )

    created = generate([template], [existing], NOW)

    assert datetime(2024, 3, 15) not in [e.date for e in created]
    assert len(created) == 3


def test_last_generated_date_never_moves_backwards():
    """Test that last_generated_date only moves forward."""
    template = _template(last_generated_date=datetime(2024, 4, 15))

    generate([template], [], NOW)

    assert template.last_generated_date == datetime(2024, 4, 15)


def test_paused_inactive_and_one_time_templates_are_skipped():
    """Test templates that must not generate."""
    templates = [
        _template(is_paused=True),
        _template(is_active=False),
        _template(frequency=Frequency.ONE_TIME),
    ]
    assert generate(templates, [], NOW) == []


def test_pause_that_has_expired_generates():
    """Test that an expired pause no longer blocks generation."""
    template = _template(is_paused=True, paused_until=datetime(2024, 3, 1))
    assert generate([template], [], NOW)


def test_iteration_cap(caplog):
    """Test the iteration cap warning."""
    template = _template(frequency=Frequency.WEEKLY, start_date=datetime(2020, 1, 1))

    with caplog.at_level(logging.WARNING):
        created = generate_for_template(template, set(), NOW, max_iterations=3)

    assert len(created) == 2
    assert "iteration cap" in caplog.text


def test_missed_payment_detected():
    """Test flagging an overdue payment with no expense."""
    template = _template()
    now = datetime(2024, 2, 20)
    assert find_missed_payments([template], [], now) == [template]


def test_missed_payment_within_grace_period():
    """Test that the grace period defers the flag."""
    template = _template()
    now = datetime(2024, 2, 17)
    assert find_missed_payments([template], [], now) == []


def test_month_end_template_is_not_missed():
    """Test that a month-end template paid on Mar 31 is not missed."""
    template = _template(title="Rent", start_date=datetime(2024, 1, 31))
    created = generate([template], [], datetime(2024, 3, 5))

    assert [e.date for e in created] == [datetime(2024, 2, 29), datetime(2024, 3, 31), datetime(2024, 4, 30)]
    assert template.last_generated_date == datetime(2024, 2, 29)
    assert find_missed_payments([template], created, datetime(2024, 4, 5)) == []


def test_recorded_payment_is_not_missed():
    """Test that a recorded payment is not missed."""
    template = _template()
    paid = ExpenseRecord(title="Gym", amount=Decimal("30"), date=datetime(2024, 2, 15, 7, 0), template_id=template.id)
    assert find_missed_payments([template], [paid], datetime(2024, 2, 20)) == []


def test_service_persists_and_is_idempotent(temp_db, expense_service, gym_template):
    """Test generating through the service twice."""
    created = expense_service.generate_recurring_expenses(now=NOW)

    assert len(created) == 4
    assert temp_db.count_expenses(template_id=gym_template.id) == 4
    stored = temp_db.get_template(gym_template.id)
    assert stored.last_generated_date == datetime(2024, 3, 15)

    assert expense_service.generate_recurring_expenses(now=NOW) == []
    assert temp_db.count_expenses(template_id=gym_template.id) == 4


def test_service_refreshes_downstream(temp_db, expense_service, scheduler, gym_template):
    """Test that generation refreshes the widget and reminders."""
    expense_service.generate_recurring_expenses(now=datetime(2024, 4, 10, 8, 0))

    assert temp_db.get_value("widgetUpcomingExpenses") is not None
    assert "recurring-expense-2024-04-15" in scheduler.pending


def test_service_check_missed_payments(expense_service, gym_template):
    """Test missed payments through the service."""
    missed = expense_service.check_missed_payments(now=datetime(2024, 2, 20))
    assert [t.id for t in missed] == [gym_template.id]


def test_edit_generated_expense_marks_manual(temp_db, expense_service, gym_template):
    """Test that editing a generated expense marks it manual."""
    created = expense_service.generate_recurring_expenses(now=NOW)

    edited = expense_service.edit_expense(created[0].id, amount=Decimal("45"))

    assert edited.is_manually_edited
    stored = temp_db.get_expense(created[0].id)
    assert stored.amount == Decimal("45")
    assert stored.is_manually_edited


def test_edit_imported_expense_is_not_marked(temp_db, expense_service):
    """Test that editing an imported expense leaves the flag alone."""
    expense = ExpenseRecord(title="Coffee", amount=Decimal("80"), date=NOW)
    temp_db.add_expense(expense)

    edited = expense_service.edit_expense(expense.id, title="Coffee beans")

    assert edited.title == "Coffee beans"
    assert not edited.is_manually_edited


def test_edit_expense_errors(expense_service, temp_db):
    """Test editing an unknown expense and a zero amount."""
    with pytest.raises(NotFoundError):
        expense_service.edit_expense("missing", title="x")

    expense = ExpenseRecord(title="Coffee", amount=Decimal("80"), date=NOW)
    temp_db.add_expense(expense)
    with pytest.raises(ValidationError):
        expense_service.edit_expense(expense.id, amount=Decimal("0"))
