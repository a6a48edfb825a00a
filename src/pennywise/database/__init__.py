"""Database layer for pennywise."""

from pennywise.database.base import Database
from pennywise.database.memory import InMemoryDatabase
from pennywise.database.factories import create_database, create_sqlite_database

__all__ = ["Database", "InMemoryDatabase", "create_database", "create_sqlite_database"]
