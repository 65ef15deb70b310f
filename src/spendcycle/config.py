"""Engine settings with environment overrides."""

import os


def _int_env(name: str, default: int) -> int:
    value = os.environ.get(name)
    if value is None or not value.strip():
        return default
    try:
        return int(value)
    except ValueError:
        raise ValueError(f"Environment variable {name} must be an integer, got '{value}'")


DB_PATH_ENV = "SPENDCYCLE_DB_PATH"

# Recurrence generation
HORIZON_DAYS: int = _int_env("SPENDCYCLE_HORIZON_DAYS", 60)
MAX_ITERATIONS: int = _int_env("SPENDCYCLE_MAX_ITERATIONS", 500)
MISSED_GRACE_DAYS: int = _int_env("SPENDCYCLE_MISSED_GRACE_DAYS", 3)

# Reminders
REMINDER_DAYS: int = _int_env("SPENDCYCLE_REMINDER_DAYS", 7)
REMINDER_HOUR: int = _int_env("SPENDCYCLE_REMINDER_HOUR", 9)
REMINDER_ID_PREFIX = "recurring-expense-"

# Undo and widget surfaces
UNDO_SLOTS: int = _int_env("SPENDCYCLE_UNDO_SLOTS", 50)
WIDGET_EXPENSES_KEY = "widgetUpcomingExpenses"
WIDGET_MAX_ITEMS = 2

# Import history retention
IMPORT_SESSIONS_KEPT = 2
IMPORT_SESSION_MAX_AGE_DAYS = 30
