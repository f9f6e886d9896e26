"""Database layer for myfinance application."""

from myfinance.database.base import Database
from myfinance.database.factories import create_database, create_sqlite_database

__all__ = ["Database", "create_database", "create_sqlite_database"]
