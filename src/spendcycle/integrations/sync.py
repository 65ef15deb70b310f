"""Refresh of everything derived from future expenses."""

from datetime import datetime, timedelta
from typing import Optional

from spendcycle import config
from spendcycle.database.base import Database
from spendcycle.domain.reminders import plan_payment_reminders
from spendcycle.integrations.notifications import NotificationScheduler, schedule_reminders
from spendcycle.integrations.widget import WidgetExporter
from spendcycle.utils.date_parser import start_of_day


class DownstreamSync:
    """Re-exports the widget summary and reschedules payment reminders."""

    def __init__(
        self,
        db: Database,
        scheduler: Optional[NotificationScheduler] = None,
        widget: Optional[WidgetExporter] = None,
    ):
        self.db = db
        self.scheduler = scheduler
        self.widget = widget

    def _upcoming(self, now: datetime, days: int):
        return self.db.list_expenses(start_date=start_of_day(now), end_date=now + timedelta(days=days))

    def reschedule_reminders(self, now: datetime) -> int:
        if self.scheduler is None:
            return 0
        expenses = self._upcoming(now, config.REMINDER_DAYS)
        return schedule_reminders(self.scheduler, plan_payment_reminders(expenses, now))

    def export_widget(self, now: datetime) -> None:
        if self.widget is None:
            return
        self.widget.export(self._upcoming(now, config.HORIZON_DAYS), now)

    def refresh(self, now: datetime) -> None:
        self.export_widget(now)
        self.reschedule_reminders(now)
