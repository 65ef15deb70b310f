"""Abstract record store interface."""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Iterable, Optional

# Import entities directly so the store never pulls in domain services
from spendcycle.domain.entities import (
    ExpenseRecord,
    ImportSession,
    RecurringTemplate,
)


class Database(ABC):
    """Abstract record store for spendcycle.

    Reads return detached domain entities. Services mutate those in memory
    and hand them back through ``save_changes``, which is the atomicity
    boundary: either the whole batch is stored or ``PersistenceError`` is
    raised and nothing is.
    """

    @abstractmethod
    def connect(self) -> None:
        """Connect to the database."""
        pass

    @abstractmethod
    def disconnect(self) -> None:
        """Disconnect from the database."""
        pass

    @abstractmethod
    def initialize_schema(self) -> None:
        """Initialize database schema (create tables)."""
        pass

    # Template operations
    @abstractmethod
    def create_template(self, template: RecurringTemplate) -> str:
        """Insert a template. Returns template ID."""
        pass

    @abstractmethod
    def get_template(self, template_id: str) -> Optional[RecurringTemplate]:
        """Get template by ID."""
        pass

    @abstractmethod
    def list_templates(self, active_only: bool = False) -> list[RecurringTemplate]:
        """List templates ordered by title."""
        pass

    @abstractmethod
    def update_template(self, template: RecurringTemplate) -> None:
        """Store all fields of an existing template."""
        pass

    @abstractmethod
    def delete_template(self, template_id: str) -> None:
        """Delete a template. Expenses generated from it are kept."""
        pass

    # Expense operations
    @abstractmethod
    def add_expense(self, expense: ExpenseRecord) -> str:
        """Insert an expense. Returns expense ID."""
        pass

    @abstractmethod
    def get_expense(self, expense_id: str) -> Optional[ExpenseRecord]:
        """Get expense by ID."""
        pass

    @abstractmethod
    def list_expenses(
        self,
        template_id: Optional[str] = None,
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None,
        generated_only: bool = False,
    ) -> list[ExpenseRecord]:
        """List expenses ordered by date with optional filters.

        Args:
            template_id: Only expenses generated from this template
            start_date: Inclusive lower bound on expense date
            end_date: Inclusive upper bound on expense date
            generated_only: If True, only template-generated expenses
        """
        pass

    @abstractmethod
    def count_expenses(self, template_id: Optional[str] = None) -> int:
        """Count expenses, optionally only those linked to a template."""
        pass

    @abstractmethod
    def update_expense(self, expense: ExpenseRecord) -> None:
        """Store all fields of an existing expense."""
        pass

    @abstractmethod
    def delete_expense(self, expense_id: str) -> None:
        """Delete an expense."""
        pass

    # Batch save
    @abstractmethod
    def save_changes(
        self,
        templates: Iterable[RecurringTemplate] = (),
        new_expenses: Iterable[ExpenseRecord] = (),
        updated_expenses: Iterable[ExpenseRecord] = (),
    ) -> None:
        """Store a batch of template updates and expense inserts/updates in one transaction.

        Raises:
            PersistenceError: If the batch could not be stored
        """
        pass

    # Import session operations
    @abstractmethod
    def create_import_session(self, session: ImportSession) -> str:
        """Insert an import session. Returns session ID."""
        pass

    @abstractmethod
    def get_import_session(self, session_id: str) -> Optional[ImportSession]:
        """Get import session by ID."""
        pass

    @abstractmethod
    def list_import_sessions(self, include_deleted: bool = False) -> list[ImportSession]:
        """List import sessions, oldest first."""
        pass

    @abstractmethod
    def update_import_session(self, session: ImportSession) -> None:
        """Store all fields of an existing import session."""
        pass

    @abstractmethod
    def delete_import_session(self, session_id: str) -> None:
        """Hard-delete an import session."""
        pass

    # Key-value surface
    @abstractmethod
    def get_value(self, key: str) -> Optional[str]:
        """Get a stored value, or None."""
        pass

    @abstractmethod
    def set_value(self, key: str, value: str) -> None:
        """Store a value, replacing any previous one."""
        pass

    @abstractmethod
    def delete_value(self, key: str) -> None:
        """Remove a value if present."""
        pass
