"""Notification scheduler interface and a local implementation."""

import logging
from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any, Iterable

from spendcycle import config
from spendcycle.domain.entities import Reminder

logger = logging.getLogger(__name__)


class NotificationScheduler(ABC):
    """Delivers notifications at a point in time."""

    @abstractmethod
    def cancel_pending(self, id_prefix: str) -> int:
        """Cancel pending notifications whose identifier starts with ``id_prefix``.

        Returns the number cancelled.
        """
        pass

    @abstractmethod
    def schedule_at(self, fire_at: datetime, payload: dict[str, Any], identifier: str) -> None:
        """Schedule a notification, replacing any pending one with the same identifier."""
        pass


class InMemoryNotificationScheduler(NotificationScheduler):
    """Keeps pending notifications in a dict and logs what it schedules."""

    def __init__(self):
        self.pending: dict[str, tuple[datetime, dict[str, Any]]] = {}

    def cancel_pending(self, id_prefix: str) -> int:
        doomed = [identifier for identifier in self.pending if identifier.startswith(id_prefix)]
        for identifier in doomed:
            del self.pending[identifier]
        return len(doomed)

    def schedule_at(self, fire_at: datetime, payload: dict[str, Any], identifier: str) -> None:
        self.pending[identifier] = (fire_at, payload)
        logger.info("Scheduled '%s' at %s: %s", identifier, fire_at.isoformat(), payload.get("body", ""))


def schedule_reminders(scheduler: NotificationScheduler, reminders: Iterable[Reminder]) -> int:
    """Replace all pending payment reminders with ``reminders``. Returns how many were scheduled."""
    cancelled = scheduler.cancel_pending(config.REMINDER_ID_PREFIX)
    count = 0
    for reminder in reminders:
        scheduler.schedule_at(
            reminder.fire_at,
            {
                "title": reminder.title,
                "body": reminder.body,
                "due_date": reminder.due_date.isoformat(),
                "expense_ids": list(reminder.expense_ids),
            },
            reminder.identifier,
        )
        count += 1
    logger.debug("Cancelled %d pending reminder(s), scheduled %d", cancelled, count)
    return count
