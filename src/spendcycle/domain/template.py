"""Recurring template domain service."""

from datetime import datetime
from decimal import Decimal
from typing import Optional

from spendcycle.database.base import Database
from spendcycle.domain.entities import (
    Currency,
    ExpenseCategory,
    Frequency,
    PaymentMethod,
    RecurringTemplate,
    SyncResult,
)
from spendcycle.domain.errors import NotFoundError, ValidationError, invalid_template_amount, template_not_found
from spendcycle.domain.template_sync import TemplateSyncService

EDITABLE_FIELDS = (
    "title",
    "amount",
    "amount_tolerance",
    "categories",
    "payment_method",
    "currency",
    "merchant",
    "notes",
    "frequency",
    "start_date",
)

# Fields that an edit may set to None
NULLABLE_FIELDS = ("notes",)


def _validate(template: RecurringTemplate) -> None:
    if template.amount is None or template.amount <= 0:
        raise ValidationError(invalid_template_amount(template.amount))
    if not template.title or not template.title.strip():
        raise ValidationError("Template title cannot be empty")
    if not 0 <= template.amount_tolerance < 1:
        raise ValidationError(f"Amount tolerance must be between 0 and 1 (got {template.amount_tolerance})")


class TemplateService:
    """Service for managing recurring templates."""

    def __init__(self, db: Database, sync_service: Optional[TemplateSyncService] = None):
        """Initialize template service.

        Args:
            db: Database instance
            sync_service: Used to push edits to generated expenses
        """
        self.db = db
        self.sync_service = sync_service or TemplateSyncService(db)

    def create_template(
        self,
        title: str,
        amount: Decimal,
        merchant: Optional[str] = None,
        frequency: Frequency = Frequency.MONTHLY,
        start_date: Optional[datetime] = None,
        categories: Optional[list[ExpenseCategory]] = None,
        payment_method: PaymentMethod = PaymentMethod.CARD,
        currency: Currency = Currency.UAH,
        notes: Optional[str] = None,
        amount_tolerance: float = 0.05,
        occurrence_count: int = 1,
    ) -> RecurringTemplate:
        """Create a template.

        Args:
            title: Display title
            amount: Expected payment amount, must be positive
            merchant: Merchant text used for matching (defaults to title)
            frequency: Repeat frequency
            start_date: First occurrence (defaults to now)
            categories: Category tags (defaults to "other")
            payment_method: Payment method
            currency: Currency
            notes: Optional notes
            amount_tolerance: Fraction an actual payment may differ by
            occurrence_count: How many occurrences backed this template

        Returns:
            The stored template

        Raises:
            ValidationError: If amount, title or tolerance are invalid
        """
        now = datetime.now()
        template = RecurringTemplate(
            title=title,
            amount=amount,
            merchant=merchant or title,
            frequency=frequency,
            start_date=start_date or now,
            amount_tolerance=amount_tolerance,
            categories=list(categories) if categories else [ExpenseCategory.OTHER],
            payment_method=payment_method,
            currency=currency,
            notes=notes,
            occurrence_count=occurrence_count,
            created_at=now,
            updated_at=now,
        )
        _validate(template)
        self.db.create_template(template)
        return template

    def get_template(self, template_id: str) -> Optional[RecurringTemplate]:
        """Get template by ID, or None."""
        return self.db.get_template(template_id)

    def require_template(self, template_id: str) -> RecurringTemplate:
        """Get template by ID.

        Raises:
            NotFoundError: If the template doesn't exist
        """
        template = self.db.get_template(template_id)
        if template is None:
            raise NotFoundError(template_not_found(template_id))
        return template

    def list_templates(self, active_only: bool = False) -> list[RecurringTemplate]:
        """List templates ordered by title."""
        return self.db.list_templates(active_only=active_only)

    def update_template(
        self,
        template_id: str,
        apply_from: Optional[datetime] = None,
        now: Optional[datetime] = None,
        **changes,
    ) -> tuple[RecurringTemplate, Optional[SyncResult]]:
        """Edit template fields and optionally push the edit to generated expenses.

        Args:
            template_id: Template to edit
            apply_from: If given, generated expenses dated on or after this are
                updated to match (manually edited ones are left alone)
            now: Edit time, stamped as ``updated_at``
            **changes: Field values, see ``EDITABLE_FIELDS``. Only fields passed
                are changed; passing ``notes=None`` clears the notes

        Returns:
            Tuple of (updated template, sync result or None)

        Raises:
            NotFoundError: If the template doesn't exist
            ValidationError: If a field is unknown or the result is invalid
        """
        unknown = set(changes) - set(EDITABLE_FIELDS)
        if unknown:
            raise ValidationError(f"Cannot edit template field(s): {', '.join(sorted(unknown))}")

        template = self.require_template(template_id)
        for name, value in changes.items():
            if value is None and name not in NULLABLE_FIELDS:
                raise ValidationError(f"Template field {name} cannot be cleared")
            setattr(template, name, list(value) if name == "categories" else value)
        template.updated_at = now or datetime.now()
        _validate(template)
        self.db.update_template(template)

        result = None
        if apply_from is not None:
            result = self.sync_service.update_generated_expenses(template, apply_from, now=now)
        return template, result

    def pause_template(self, template_id: str, until: Optional[datetime] = None) -> RecurringTemplate:
        """Pause generation, indefinitely or until ``until``."""
        template = self.require_template(template_id)
        template.is_paused = True
        template.paused_until = until
        template.updated_at = datetime.now()
        self.db.update_template(template)
        return template

    def resume_template(self, template_id: str) -> RecurringTemplate:
        """Lift a pause."""
        template = self.require_template(template_id)
        template.is_paused = False
        template.paused_until = None
        template.updated_at = datetime.now()
        self.db.update_template(template)
        return template

    def set_active(self, template_id: str, active: bool) -> RecurringTemplate:
        """Activate or deactivate a template."""
        template = self.require_template(template_id)
        template.is_active = active
        template.updated_at = datetime.now()
        self.db.update_template(template)
        return template

    def delete_template(self, template_id: str) -> int:
        """Delete a template, keeping every expense generated from it.

        Returns:
            Number of expenses that still reference the deleted template

        Raises:
            NotFoundError: If the template doesn't exist
        """
        self.require_template(template_id)
        self.db.delete_template(template_id)
        return self.db.count_expenses(template_id=template_id)
