"""Shared domain error messages and error types."""


class DomainError(ValueError):
    """Base class for domain-level errors.

    Subclasses provide semantic categories while preserving ValueError
    compatibility for existing error handling.
    """


class ValidationError(DomainError):
    """Invalid input or failed validation in domain logic."""


class NotFoundError(DomainError):
    """Requested domain entity does not exist."""


class PersistenceError(DomainError):
    """The record store failed to save a batch of changes."""


class ImportFailedError(DomainError):
    """A whole import failed before any row could be used.

    Attributes:
        reason: Machine readable reason, one of ``INVALID_ENCODING`` or
            ``PARSE_ERROR``.
    """

    INVALID_ENCODING = "invalid_encoding"
    PARSE_ERROR = "parse_error"

    def __init__(self, reason: str, message: str | None = None):
        self.reason = reason
        super().__init__(message or _IMPORT_MESSAGES.get(reason, reason))


_IMPORT_MESSAGES = {
    ImportFailedError.INVALID_ENCODING: "Invalid file encoding. Please ensure the file is UTF-8 encoded.",
    ImportFailedError.PARSE_ERROR: "Unable to parse CSV file. Please check the file format.",
}


def template_not_found(template_id: str) -> str:
    """Return message for missing template."""
    return f"Template {template_id} not found"


def expense_not_found(expense_id: str) -> str:
    """Return message for missing expense."""
    return f"Expense {expense_id} not found"


def import_session_not_found(session_id: str) -> str:
    """Return message for missing import session."""
    return f"Import session {session_id} not found"


def invalid_template_amount(amount) -> str:
    """Return message for a non-positive template amount."""
    return f"Template amount must be greater than zero (got {amount})"
