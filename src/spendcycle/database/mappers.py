"""Mapper functions to convert between domain models and SQLAlchemy models.

This layer isolates the conversion logic: enums are stored by value and
category lists as JSON arrays of values.
"""

from decimal import Decimal
from typing import Optional

from spendcycle.domain import entities as domain
from spendcycle.database.models import (
    RecurringTemplate as ORMTemplate,
    Expense as ORMExpense,
    ImportSession as ORMImportSession,
)


def _categories_to_domain(values) -> list[domain.ExpenseCategory]:
    categories = []
    for value in values or []:
        try:
            categories.append(domain.ExpenseCategory(value))
        except ValueError:
            continue
    return categories or [domain.ExpenseCategory.OTHER]


def _categories_to_orm(categories) -> list[str]:
    return [domain.ExpenseCategory(c).value for c in categories]


def template_to_domain(orm_template: ORMTemplate) -> domain.RecurringTemplate:
    """Convert SQLAlchemy RecurringTemplate model to domain entity."""
    return domain.RecurringTemplate(
        id=orm_template.id,
        title=orm_template.title,
        amount=Decimal(orm_template.amount),
        amount_tolerance=orm_template.amount_tolerance,
        categories=_categories_to_domain(orm_template.categories),
        payment_method=domain.PaymentMethod(orm_template.payment_method),
        currency=domain.Currency(orm_template.currency),
        merchant=orm_template.merchant,
        notes=orm_template.notes,
        frequency=domain.Frequency(orm_template.frequency),
        start_date=orm_template.start_date,
        last_generated_date=orm_template.last_generated_date,
        is_active=orm_template.is_active,
        is_paused=orm_template.is_paused,
        paused_until=orm_template.paused_until,
        occurrence_count=orm_template.occurrence_count,
        created_at=orm_template.created_at,
        updated_at=orm_template.updated_at,
    )


def template_to_orm(
    template: domain.RecurringTemplate, orm_template: Optional[ORMTemplate] = None
) -> ORMTemplate:
    """Copy a domain template onto a (new or existing) SQLAlchemy model."""
    if orm_template is None:
        orm_template = ORMTemplate(id=template.id)
    orm_template.title = template.title
    orm_template.amount = template.amount
    orm_template.amount_tolerance = template.amount_tolerance
    orm_template.categories = _categories_to_orm(template.categories)
    orm_template.payment_method = template.payment_method.value
    orm_template.currency = template.currency.value
    orm_template.merchant = template.merchant
    orm_template.notes = template.notes
    orm_template.frequency = template.frequency.value
    orm_template.start_date = template.start_date
    orm_template.last_generated_date = template.last_generated_date
    orm_template.is_active = template.is_active
    orm_template.is_paused = template.is_paused
    orm_template.paused_until = template.paused_until
    orm_template.occurrence_count = template.occurrence_count
    orm_template.created_at = template.created_at
    orm_template.updated_at = template.updated_at
    return orm_template


def expense_to_domain(orm_expense: ORMExpense) -> domain.ExpenseRecord:
    """Convert SQLAlchemy Expense model to domain entity."""
    return domain.ExpenseRecord(
        id=orm_expense.id,
        title=orm_expense.title,
        amount=Decimal(orm_expense.amount),
        date=orm_expense.date,
        categories=_categories_to_domain(orm_expense.categories),
        payment_method=domain.PaymentMethod(orm_expense.payment_method),
        currency=domain.Currency(orm_expense.currency),
        merchant=orm_expense.merchant,
        notes=orm_expense.notes,
        template_id=orm_expense.template_id,
        is_generated=orm_expense.is_generated,
        is_manually_edited=orm_expense.is_manually_edited,
        is_income=orm_expense.is_income,
        template_snapshot_hash=orm_expense.template_snapshot_hash,
        created_at=orm_expense.created_at,
    )


def expense_to_orm(expense: domain.ExpenseRecord, orm_expense: Optional[ORMExpense] = None) -> ORMExpense:
    """Copy a domain expense onto a (new or existing) SQLAlchemy model."""
    if orm_expense is None:
        orm_expense = ORMExpense(id=expense.id)
    orm_expense.title = expense.title
    orm_expense.amount = expense.amount
    orm_expense.date = expense.date
    orm_expense.categories = _categories_to_orm(expense.categories)
    orm_expense.payment_method = expense.payment_method.value
    orm_expense.currency = expense.currency.value
    orm_expense.merchant = expense.merchant
    orm_expense.notes = expense.notes
    orm_expense.template_id = expense.template_id
    orm_expense.is_generated = expense.is_generated
    orm_expense.is_manually_edited = expense.is_manually_edited
    orm_expense.is_income = expense.is_income
    orm_expense.template_snapshot_hash = expense.template_snapshot_hash
    orm_expense.created_at = expense.created_at
    return orm_expense


def import_session_to_domain(orm_session: ORMImportSession) -> domain.ImportSession:
    """Convert SQLAlchemy ImportSession model to domain entity."""
    return domain.ImportSession(
        id=orm_session.id,
        import_date=orm_session.import_date,
        file_name=orm_session.file_name,
        transaction_count=orm_session.transaction_count,
        templates_suggested=orm_session.templates_suggested,
        templates_created=orm_session.templates_created,
        duplicate_count=orm_session.duplicate_count,
        is_deleted=orm_session.is_deleted,
    )


def import_session_to_orm(
    session: domain.ImportSession, orm_session: Optional[ORMImportSession] = None
) -> ORMImportSession:
    """Copy a domain import session onto a (new or existing) SQLAlchemy model."""
    if orm_session is None:
        orm_session = ORMImportSession(id=session.id)
    orm_session.import_date = session.import_date
    orm_session.file_name = session.file_name
    orm_session.transaction_count = session.transaction_count
    orm_session.templates_suggested = session.templates_suggested
    orm_session.templates_created = session.templates_created
    orm_session.duplicate_count = session.duplicate_count
    orm_session.is_deleted = session.is_deleted
    return orm_session
