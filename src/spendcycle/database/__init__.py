"""Database layer for spendcycle."""

from spendcycle.database.base import Database
from spendcycle.database.factories import create_sqlite_database

__all__ = ["Database", "create_sqlite_database"]
