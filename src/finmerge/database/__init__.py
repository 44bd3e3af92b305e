"""Database layer for finmerge application."""

from finmerge.database.base import Database
from finmerge.database.factories import create_sqlite_database

__all__ = ["Database", "create_sqlite_database"]
