"""Recurring payment detection over imported transactions."""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable, Optional, Sequence

from dateutil.relativedelta import relativedelta

from spendcycle.domain.entities import ExpenseCategory, Frequency, TemplateSuggestion, TransactionRecord
from spendcycle.utils.merchant import normalize_merchant

logger = logging.getLogger(__name__)

SUBSCRIPTION_KEYWORDS = (
    "netflix",
    "spotify",
    "apple",
    "icloud",
    "google",
    "youtube",
    "disney",
    "hbo",
    "amazon prime",
    "adobe",
    "dropbox",
    "microsoft",
    "openai",
    "chatgpt",
    "megogo",
    "subscription",
    "premium",
    "підписка",
)

# Ordered keyword groups; the first group with a keyword contained in the
# normalized merchant decides the category.
CATEGORY_KEYWORDS: tuple[tuple[tuple[str, ...], ExpenseCategory], ...] = (
    (("пекарня", "булочна", "хліб", "coffee", "starbucks", "cafe", "кафе", "restaurant"), ExpenseCategory.DINING),
    (("сільпо", "атб", "варус", "маркет", "groceries", "supermarket", "silpo", "novus"), ExpenseCategory.GROCERIES),
    (("заправка", "wog", "окко", "okko", "автодор", "shell", "uber", "bolt"), ExpenseCategory.TRANSPORTATION),
    (("аптека", "pharmacy", "medical", "лікарня", "clinic"), ExpenseCategory.HEALTHCARE),
    (("кіно", "cinema", "theatre", "theater", "concert", "entertainment"), ExpenseCategory.ENTERTAINMENT),
    (SUBSCRIPTION_KEYWORDS, ExpenseCategory.SUBSCRIPTIONS),
    (("спортзал", "gym", "fitness", "sport"), ExpenseCategory.FITNESS),
    (("одяг", "clothes", "fashion", "zara", "h&m"), ExpenseCategory.SHOPPING),
    (("оренда", "rent", "комунальні", "utilities"), ExpenseCategory.HOUSING),
    (("кредит", "loan", "credit"), ExpenseCategory.DEBT),
)

DAY_SECONDS = 24 * 60 * 60


@dataclass(frozen=True)
class FrequencyBands:
    """Inclusive mean-gap ranges, in days, for each frequency class."""

    weekly: tuple[float, float]
    monthly: tuple[float, float]
    yearly: tuple[float, float]

    def classify(self, mean_gap_days: float) -> Optional[Frequency]:
        for frequency, (low, high) in (
            (Frequency.WEEKLY, self.weekly),
            (Frequency.MONTHLY, self.monthly),
            (Frequency.YEARLY, self.yearly),
        ):
            if low <= mean_gap_days <= high:
                return frequency
        return None


STRICT_BANDS = FrequencyBands(weekly=(6, 8), monthly=(28, 32), yearly=(360, 370))
SUBSCRIPTION_BANDS = FrequencyBands(weekly=(5, 10), monthly=(25, 35), yearly=(350, 380))


@dataclass(frozen=True)
class DetectionConfig:
    """Thresholds for pattern detection.

    Subscription-like merchants get the looser amount tolerance and
    frequency bands, plus a flat confidence bonus.
    """

    window_months: int = 3
    min_occurrences: int = 2
    min_occurrences_subscription: int = 2
    amount_tolerance: Decimal = Decimal("0.10")
    amount_tolerance_subscription: Decimal = Decimal("0.15")
    subscription_bonus: float = 0.10
    bands: FrequencyBands = field(default=STRICT_BANDS)
    subscription_bands: FrequencyBands = field(default=SUBSCRIPTION_BANDS)


def is_subscription_merchant(normalized_merchant: str) -> bool:
    """Keyword heuristic for subscription-like merchants."""
    return any(keyword in normalized_merchant for keyword in SUBSCRIPTION_KEYWORDS)


def suggest_categories(normalized_merchant: str) -> tuple[ExpenseCategory, ...]:
    """Infer a category from the merchant name; first matching group wins."""
    merchant = normalized_merchant.lower()
    for keywords, category in CATEGORY_KEYWORDS:
        if any(keyword in merchant for keyword in keywords):
            return (category,)
    return (ExpenseCategory.OTHER,)


def gaps_in_days(dates: Sequence[datetime]) -> list[float]:
    """Consecutive gaps between ascending dates, in fractional days."""
    return [(dates[i] - dates[i - 1]).total_seconds() / DAY_SECONDS for i in range(1, len(dates))]


class PatternDetector:
    """Detects recurring payments and proposes templates for them."""

    def __init__(self, config: Optional[DetectionConfig] = None):
        self.config = config or DetectionConfig()

    def detect_patterns(
        self, transactions: Iterable[TransactionRecord], now: Optional[datetime] = None
    ) -> list[TemplateSuggestion]:
        """Produce template suggestions from a transaction set.

        Args:
            transactions: Parsed transactions, in file order
            now: Reference time for the detection window (defaults to now)

        Returns:
            Suggestions sorted by descending confidence
        """
        now = now or datetime.now()
        cutoff = now - relativedelta(months=self.config.window_months)

        grouped: dict[str, list[TransactionRecord]] = {}
        for txn in transactions:
            if txn.date < cutoff:
                continue
            key = normalize_merchant(txn.merchant)
            if not key:
                continue
            grouped.setdefault(key, []).append(txn)

        suggestions = []
        for merchant, merchant_transactions in grouped.items():
            expenses = [t for t in merchant_transactions if t.is_expense]
            if len(expenses) < 2:
                continue

            subscription = is_subscription_merchant(merchant)
            min_occurrences = (
                self.config.min_occurrences_subscription if subscription else self.config.min_occurrences
            )
            tolerance = (
                self.config.amount_tolerance_subscription if subscription else self.config.amount_tolerance
            )

            for cluster in self.group_by_amount(expenses, tolerance):
                if len(cluster) < min_occurrences:
                    continue
                suggestion = self._suggest(merchant, cluster, subscription)
                if suggestion is not None:
                    suggestions.append(suggestion)

        suggestions.sort(key=lambda s: s.confidence, reverse=True)
        logger.info(
            "Detected %d recurring pattern(s) across %d merchant(s)", len(suggestions), len(grouped)
        )
        return suggestions

    def group_by_amount(
        self, transactions: Sequence[TransactionRecord], tolerance: Decimal
    ) -> list[list[TransactionRecord]]:
        """Greedy first-seed-wins grouping by absolute amount.

        Each unused transaction, in input order, seeds a cluster and pulls in
        every later unused transaction within ``tolerance`` of the seed.
        """
        clusters = []
        used: set[int] = set()
        for seed_index, seed in enumerate(transactions):
            if seed_index in used:
                continue
            used.add(seed_index)
            cluster = [seed]
            base = seed.absolute_amount
            limit = base * tolerance
            for other_index in range(seed_index + 1, len(transactions)):
                if other_index in used:
                    continue
                other = transactions[other_index]
                if abs(base - other.absolute_amount) <= limit:
                    cluster.append(other)
                    used.add(other_index)
            clusters.append(cluster)
        return clusters

    def detect_frequency(self, dates: Sequence[datetime], subscription: bool = False) -> Optional[Frequency]:
        """Classify the mean gap of ascending ``dates`` into a frequency class."""
        gaps = gaps_in_days(dates)
        if not gaps:
            return None
        mean_gap = sum(gaps) / len(gaps)
        bands = self.config.subscription_bands if subscription else self.config.bands
        return bands.classify(mean_gap)

    def calculate_confidence(
        self, dates: Sequence[datetime], frequency: Frequency, subscription: bool = False
    ) -> float:
        """Score regularity as one minus the mean relative gap deviation."""
        gaps = gaps_in_days(dates)
        if not gaps:
            return 0.0
        expected = frequency.days_interval
        average_deviation = sum(abs(gap - expected) / expected for gap in gaps) / len(gaps)
        confidence = min(1.0, max(0.0, 1 - average_deviation))
        if subscription:
            confidence = min(1.0, confidence + self.config.subscription_bonus)
        return confidence

    def _suggest(
        self, merchant: str, cluster: list[TransactionRecord], subscription: bool
    ) -> Optional[TemplateSuggestion]:
        ordered = sorted(cluster, key=lambda t: t.date)
        dates = [t.date for t in ordered]

        frequency = self.detect_frequency(dates, subscription)
        if frequency is None:
            return None

        amounts = [t.absolute_amount for t in ordered]
        average = (sum(amounts) / len(amounts)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)

        return TemplateSuggestion(
            merchant=merchant,
            amount=average,
            frequency=frequency,
            occurrences=tuple(dates),
            categories=suggest_categories(merchant),
            suggested_amount=average,
            confidence=self.calculate_confidence(dates, frequency, subscription),
            is_subscription=subscription,
        )
