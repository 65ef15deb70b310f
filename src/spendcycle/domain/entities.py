"""Domain model entities for spendcycle.

These are plain data classes representing business concepts, independent of
database schema. Persistent records (templates, expenses, import sessions)
are mutable so services can change them in memory and hand the whole batch
to the store in a single save. Values produced by parsing and detection are
frozen.
"""

import uuid
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Optional


def new_id() -> str:
    """Return a fresh record identifier."""
    return str(uuid.uuid4())


class Frequency(str, Enum):
    """How often a recurring template repeats."""

    ONE_TIME = "one_time"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    YEARLY = "yearly"

    @property
    def days_interval(self) -> int:
        """Approximate days between occurrences."""
        return _DAYS_INTERVAL[self]


_DAYS_INTERVAL = {
    Frequency.ONE_TIME: 0,
    Frequency.WEEKLY: 7,
    Frequency.MONTHLY: 30,
    Frequency.YEARLY: 365,
}


class ExpenseCategory(str, Enum):
    """Category tags attached to expenses and templates."""

    GROCERIES = "groceries"
    HOUSING = "housing"
    TRANSPORTATION = "transportation"
    SUBSCRIPTIONS = "subscriptions"
    HEALTHCARE = "healthcare"
    FITNESS = "fitness"
    DEBT = "debt"
    ENTERTAINMENT = "entertainment"
    DINING = "dining"
    SHOPPING = "shopping"
    OTHER = "other"


class PaymentMethod(str, Enum):
    CASH = "cash"
    CARD = "card"


class Currency(str, Enum):
    USD = "usd"
    UAH = "uah"
    EUR = "eur"

    @property
    def symbol(self) -> str:
        return {"usd": "$", "uah": "₴", "eur": "€"}[self.value]


@dataclass(frozen=True)
class TransactionRecord:
    """One row of a bank export.

    Negative amounts are expenses, positive amounts are income. Identity is
    structural (date, merchant, amount); ``raw`` keeps the original columns.
    """

    date: datetime
    merchant: str
    amount: Decimal
    currency: Currency = Currency.UAH
    raw: dict[str, str] = field(default_factory=dict, compare=False, hash=False)

    @property
    def is_expense(self) -> bool:
        return self.amount < 0

    @property
    def is_income(self) -> bool:
        return self.amount > 0

    @property
    def absolute_amount(self) -> Decimal:
        return abs(self.amount)


@dataclass
class RecurringTemplate:
    """User-confirmed definition of a recurring payment."""

    title: str
    amount: Decimal
    merchant: str
    frequency: Frequency = Frequency.MONTHLY
    start_date: datetime = field(default_factory=datetime.now)
    amount_tolerance: float = 0.05
    categories: list[ExpenseCategory] = field(default_factory=lambda: [ExpenseCategory.OTHER])
    payment_method: PaymentMethod = PaymentMethod.CARD
    currency: Currency = Currency.UAH
    notes: Optional[str] = None
    last_generated_date: Optional[datetime] = None
    is_active: bool = True
    is_paused: bool = False
    paused_until: Optional[datetime] = None
    occurrence_count: int = 1
    id: str = field(default_factory=new_id)
    created_at: datetime = field(default_factory=datetime.now)
    updated_at: datetime = field(default_factory=datetime.now)

    @property
    def primary_category(self) -> ExpenseCategory:
        return self.categories[0] if self.categories else ExpenseCategory.OTHER

    @property
    def snapshot_marker(self) -> str:
        """Marker stamped on generated expenses to tell which edit they reflect."""
        return self.updated_at.isoformat()


@dataclass
class ExpenseRecord:
    """A concrete expense.

    ``template_id`` only records which template generated the expense; it is
    a lookup key, and deleting the template leaves the expense in place.
    """

    title: str
    amount: Decimal
    date: datetime
    categories: list[ExpenseCategory] = field(default_factory=lambda: [ExpenseCategory.OTHER])
    payment_method: PaymentMethod = PaymentMethod.CARD
    currency: Currency = Currency.UAH
    merchant: Optional[str] = None
    notes: Optional[str] = None
    template_id: Optional[str] = None
    is_generated: bool = False
    is_manually_edited: bool = False
    is_income: bool = False
    template_snapshot_hash: Optional[str] = None
    id: str = field(default_factory=new_id)
    created_at: datetime = field(default_factory=datetime.now)


@dataclass(frozen=True)
class TemplateSuggestion:
    """A system-inferred candidate template derived from transaction history."""

    merchant: str
    amount: Decimal
    frequency: Frequency
    occurrences: tuple[datetime, ...]
    categories: tuple[ExpenseCategory, ...]
    suggested_amount: Decimal
    confidence: float
    is_subscription: bool = False

    @property
    def occurrence_count(self) -> int:
        return len(self.occurrences)


@dataclass
class ImportSession:
    """Audit record for one file import."""

    file_name: str
    import_date: datetime = field(default_factory=datetime.now)
    transaction_count: int = 0
    templates_suggested: int = 0
    templates_created: int = 0
    duplicate_count: int = 0
    is_deleted: bool = False
    id: str = field(default_factory=new_id)


@dataclass(frozen=True)
class ExpenseSnapshot:
    """Pre-update field values of one generated expense.

    ``categories`` is None when the snapshot was written by a format that
    did not capture categories; restoring such an entry leaves categories
    alone.
    """

    expense_id: str
    title: str
    amount: Decimal
    merchant: Optional[str]
    notes: Optional[str]
    payment_method: PaymentMethod
    currency: Currency
    is_income: bool
    template_snapshot_hash: Optional[str]
    categories: Optional[tuple[ExpenseCategory, ...]] = None


@dataclass(frozen=True)
class SyncResult:
    """Outcome of propagating a template edit to its generated expenses."""

    updated_count: int
    skipped_manual_count: int


@dataclass(frozen=True)
class Reminder:
    """A payment reminder to hand to the notification scheduler."""

    identifier: str
    fire_at: datetime
    due_date: datetime
    title: str
    body: str
    expense_ids: tuple[str, ...]


@dataclass(frozen=True)
class ImportResult:
    """Outcome of importing one bank export file."""

    session: ImportSession
    transactions: list[TransactionRecord]
    duplicates: list[TransactionRecord]
    suggestions: list[TemplateSuggestion]
