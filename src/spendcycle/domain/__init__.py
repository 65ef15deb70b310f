"""Domain layer for spendcycle.

Services live in their own modules (``spendcycle.domain.generator`` and
friends) and are imported from there; this package only re-exports the
leaf entity and error types so the database layer can import them without
pulling in the services.
"""

from spendcycle.domain.entities import (
    Currency,
    ExpenseCategory,
    ExpenseRecord,
    Frequency,
    ImportSession,
    PaymentMethod,
    RecurringTemplate,
    TemplateSuggestion,
    TransactionRecord,
)
from spendcycle.domain.errors import DomainError, ImportFailedError, NotFoundError, PersistenceError, ValidationError

__all__ = [
    "Currency",
    "ExpenseCategory",
    "ExpenseRecord",
    "Frequency",
    "ImportSession",
    "PaymentMethod",
    "RecurringTemplate",
    "TemplateSuggestion",
    "TransactionRecord",
    "DomainError",
    "ImportFailedError",
    "NotFoundError",
    "PersistenceError",
    "ValidationError",
]
