"""Tests for template management."""

from datetime import datetime
from decimal import Decimal

import pytest

from spendcycle.domain.entities import ExpenseCategory, Frequency
from spendcycle.domain.errors import NotFoundError, ValidationError


def test_create_template_defaults(template_service):
    """Test creating a template with defaults."""
    template = template_service.create_template(title="Internet", amount=Decimal("250"))

    assert template.merchant == "Internet"
    assert template.frequency == Frequency.MONTHLY
    assert template.categories == [ExpenseCategory.OTHER]

    stored = template_service.get_template(template.id)
    assert stored.title == "Internet"
    assert stored.amount == Decimal("250")


@pytest.mark.parametrize(
    "kwargs",
    [
        {"title": "Internet", "amount": Decimal("0")},
        {"title": "Internet", "amount": Decimal("-5")},
        {"title": "  ", "amount": Decimal("5")},
        {"title": "Internet", "amount": Decimal("5"), "amount_tolerance": 1.5},
    ],
)
def test_create_template_validation(template_service, kwargs):
    """Test rejected template values."""
    with pytest.raises(ValidationError):
        template_service.create_template(**kwargs)


def test_list_templates(template_service):
    """Test listing all and only active templates."""
    template_service.create_template(title="Water", amount=Decimal("80"))
    inactive = template_service.create_template(title="Electricity", amount=Decimal("400"))
    template_service.set_active(inactive.id, False)

    assert [t.title for t in template_service.list_templates()] == ["Electricity", "Water"]
    assert [t.title for t in template_service.list_templates(active_only=True)] == ["Water"]


def test_update_template_fields(template_service, gym_template):
    """Test editing template fields."""
    template, _ = template_service.update_template(
        gym_template.id, now=datetime(2024, 5, 1), notes="Annual card", frequency=Frequency.YEARLY
    )

    assert template.notes == "Annual card"
    assert template.updated_at == datetime(2024, 5, 1)
    stored = template_service.require_template(gym_template.id)
    assert stored.frequency == Frequency.YEARLY


def test_update_template_clears_notes(template_service, gym_template):
    """Test clearing template notes."""
    template_service.update_template(gym_template.id, notes="Family plan")

    template, _ = template_service.update_template(gym_template.id, notes=None)

    assert template.notes is None
    assert template_service.require_template(gym_template.id).notes is None


def test_update_template_leaves_unpassed_fields(template_service, gym_template):
    """Test that fields not passed are left alone."""
    template_service.update_template(gym_template.id, notes="Family plan")

    template, _ = template_service.update_template(gym_template.id, amount=Decimal("35"))

    assert template.notes == "Family plan"
    assert template.amount == Decimal("35")


def test_update_template_rejects_clearing_required_field(template_service, gym_template):
    """Test that required fields cannot be cleared."""
    with pytest.raises(ValidationError):
        template_service.update_template(gym_template.id, title=None)


def test_update_template_rejects_unknown_fields(template_service, gym_template):
    """Test that non-editable fields are rejected."""
    with pytest.raises(ValidationError):
        template_service.update_template(gym_template.id, is_income=True)


def test_update_template_rejects_bad_amount(template_service, gym_template):
    """Test that an edit cannot make the amount negative."""
    with pytest.raises(ValidationError):
        template_service.update_template(gym_template.id, amount=Decimal("-1"))


def test_missing_template(template_service):
    """Test lookups of an unknown template."""
    with pytest.raises(NotFoundError):
        template_service.require_template("missing")
    with pytest.raises(NotFoundError):
        template_service.pause_template("missing")
    assert template_service.get_template("missing") is None


def test_pause_and_resume(template_service, gym_template):
    """Test pausing until a date and resuming."""
    until = datetime(2024, 6, 1)

    paused = template_service.pause_template(gym_template.id, until=until)
    assert paused.is_paused
    assert template_service.require_template(gym_template.id).paused_until == until

    resumed = template_service.resume_template(gym_template.id)
    assert not resumed.is_paused
    assert resumed.paused_until is None


def test_paused_template_is_not_generated(template_service, expense_service, gym_template):
    """Test that a paused template generates nothing."""
    template_service.pause_template(gym_template.id)
    assert expense_service.generate_recurring_expenses(now=datetime(2024, 3, 20)) == []


def test_delete_template_keeps_expenses(temp_db, template_service, expense_service, gym_template):
    """Test that deleting a template keeps its expenses."""
    created = expense_service.generate_recurring_expenses(now=datetime(2024, 3, 20))

    kept = template_service.delete_template(gym_template.id)

    assert kept == len(created)
    assert template_service.get_template(gym_template.id) is None
    assert temp_db.get_expense(created[0].id).template_id == gym_template.id
