"""CSV import domain service."""

import logging
from datetime import datetime, timedelta
from typing import Optional, Sequence

from spendcycle import config
from spendcycle.database.base import Database
from spendcycle.domain.duplicates import filter_duplicates
from spendcycle.domain.entities import (
    Currency,
    ExpenseCategory,
    ExpenseRecord,
    ImportResult,
    ImportSession,
    PaymentMethod,
    RecurringTemplate,
    TemplateSuggestion,
    TransactionRecord,
)
from spendcycle.domain.errors import ImportFailedError, NotFoundError, import_session_not_found
from spendcycle.domain.pattern_detection import PatternDetector
from spendcycle.domain.transaction_parser import parse_transactions

logger = logging.getLogger(__name__)

DEFAULT_TOLERANCE = 0.05
SUBSCRIPTION_TOLERANCE = 0.15


def decode_content(content: bytes | str) -> str:
    """Decode raw file bytes as UTF-8 (a leading BOM is dropped).

    Raises:
        ImportFailedError: With reason ``invalid_encoding`` if the bytes are not UTF-8
    """
    if isinstance(content, str):
        return content.lstrip("\ufeff")
    try:
        return content.decode("utf-8-sig")
    except UnicodeDecodeError as e:
        raise ImportFailedError(ImportFailedError.INVALID_ENCODING) from e


class CSVImportService:
    """Service for importing bank exports and turning them into templates."""

    def __init__(self, db: Database, detector: Optional[PatternDetector] = None):
        """Initialize CSV import service.

        Args:
            db: Database instance
            detector: Pattern detector (defaults to standard thresholds)
        """
        self.db = db
        self.detector = detector or PatternDetector()

    def import_content(
        self, content: bytes | str, file_name: str, now: Optional[datetime] = None
    ) -> ImportResult:
        """Import one bank export.

        Parses the content, drops rows already on record, detects recurring
        patterns and records an import session. Nothing else is stored;
        templates and expenses are created by separate calls.

        Args:
            content: Raw file content
            file_name: Name of the imported file, for the import history
            now: Reference time (defaults to now)

        Returns:
            ImportResult with the session, unique transactions, duplicates
            and suggestions

        Raises:
            ImportFailedError: If the content is not UTF-8 or has no header
        """
        now = now or datetime.now()
        text = decode_content(content)
        if not text.strip():
            raise ImportFailedError(ImportFailedError.PARSE_ERROR)

        transactions = parse_transactions(text)
        unique, duplicates = filter_duplicates(transactions, self.db.list_expenses())
        suggestions = self.detector.detect_patterns(unique, now=now)

        session = ImportSession(
            file_name=file_name,
            import_date=now,
            transaction_count=len(transactions),
            templates_suggested=len(suggestions),
            duplicate_count=len(duplicates),
        )
        self.db.create_import_session(session)
        self.cleanup_old_sessions(now)

        logger.info(
            "Imported %s: %d transaction(s), %d duplicate(s), %d suggestion(s)",
            file_name,
            len(transactions),
            len(duplicates),
            len(suggestions),
        )
        return ImportResult(session=session, transactions=unique, duplicates=duplicates, suggestions=suggestions)

    def cleanup_old_sessions(self, now: Optional[datetime] = None) -> None:
        """Apply the import history retention policy.

        Only the most recent non-deleted sessions are kept visible; older ones
        are soft-deleted. Any session older than the maximum age is removed.
        """
        now = now or datetime.now()
        sessions = self.db.list_import_sessions()
        for session in sessions[: -config.IMPORT_SESSIONS_KEPT]:
            session.is_deleted = True
            self.db.update_import_session(session)

        cutoff = now - timedelta(days=config.IMPORT_SESSION_MAX_AGE_DAYS)
        for session in self.db.list_import_sessions(include_deleted=True):
            if session.import_date < cutoff:
                self.db.delete_import_session(session.id)

    def get_import_history(self) -> list[ImportSession]:
        """Non-deleted import sessions, newest first."""
        return list(reversed(self.db.list_import_sessions()))

    def create_templates(
        self, suggestions: Sequence[TemplateSuggestion], session_id: Optional[str] = None
    ) -> list[RecurringTemplate]:
        """Turn accepted suggestions into templates.

        Args:
            suggestions: Suggestions the user accepted
            session_id: Import session to credit with the created templates

        Returns:
            Created templates
        """
        session = None
        if session_id is not None:
            session = self.db.get_import_session(session_id)
            if session is None:
                raise NotFoundError(import_session_not_found(session_id))

        now = datetime.now()
        created = []
        for suggestion in suggestions:
            template = RecurringTemplate(
                title=suggestion.merchant,
                amount=suggestion.suggested_amount,
                amount_tolerance=SUBSCRIPTION_TOLERANCE if suggestion.is_subscription else DEFAULT_TOLERANCE,
                categories=list(suggestion.categories),
                payment_method=PaymentMethod.CARD,
                currency=Currency.UAH,
                merchant=suggestion.merchant,
                frequency=suggestion.frequency,
                start_date=suggestion.occurrences[0] if suggestion.occurrences else now,
                occurrence_count=suggestion.occurrence_count,
                created_at=now,
                updated_at=now,
            )
            created.append(template)

        self.db.save_changes(templates=created)
        if session is not None:
            session.templates_created += len(created)
            self.db.update_import_session(session)
        return created

    def create_expense(
        self, transaction: TransactionRecord, template: Optional[RecurringTemplate] = None
    ) -> ExpenseRecord:
        """Record an imported transaction as a (non-generated) expense."""
        expense = ExpenseRecord(
            title=transaction.merchant,
            amount=transaction.absolute_amount,
            date=transaction.date,
            categories=list(template.categories) if template else [ExpenseCategory.OTHER],
            payment_method=template.payment_method if template else PaymentMethod.CARD,
            currency=transaction.currency,
            merchant=transaction.merchant,
            template_id=template.id if template else None,
            is_generated=False,
            is_income=transaction.is_income,
        )
        self.db.add_expense(expense)
        return expense
