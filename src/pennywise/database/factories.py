"""Database factory functions for creating record store instances."""

import logging
import os
from pathlib import Path
from typing import Optional

from pennywise.database.base import Database
from pennywise.database.memory import InMemoryDatabase
from pennywise.database.remote import RemoteDatabase
from pennywise.database.sqlalchemy_db import SQLAlchemyDatabase

logger = logging.getLogger(__name__)

BACKENDS = ("memory", "sqlite", "remote")


def create_sqlite_database(database_path: Optional[str] = None) -> SQLAlchemyDatabase:
    """Create a SQLite database instance.

    Args:
        database_path: Path to SQLite database file. If None, checks PENNYWISE_DB_PATH
            environment variable, then defaults to ~/.pennywise/pennywise.db

    Returns:
        SQLAlchemyDatabase instance configured for SQLite
    """
    if database_path is None:
        database_path = os.environ.get("PENNYWISE_DB_PATH")

    if database_path is None:
        home = Path.home()
        db_dir = home / ".pennywise"
        db_dir.mkdir(exist_ok=True)
        database_path = str(db_dir / "pennywise.db")

    database_url = f"sqlite:///{database_path}"
    return SQLAlchemyDatabase(database_url)


def create_remote_database(
    api_url: Optional[str] = None,
    api_key: Optional[str] = None,
    timeout_seconds: Optional[float] = None,
) -> RemoteDatabase:
    """Create a client for the hosted record store.

    Falls back to PENNYWISE_API_URL, PENNYWISE_API_KEY and
    PENNYWISE_API_TIMEOUT for unset arguments.

    Raises:
        ValueError: If no API URL is configured
    """
    api_url = api_url or os.environ.get("PENNYWISE_API_URL")
    if not api_url:
        raise ValueError("Remote backend requires an API URL (set PENNYWISE_API_URL)")
    api_key = api_key or os.environ.get("PENNYWISE_API_KEY")
    if timeout_seconds is None:
        timeout_seconds = float(os.environ.get("PENNYWISE_API_TIMEOUT", "10"))
    return RemoteDatabase(api_url, api_key=api_key, timeout_seconds=timeout_seconds)


def create_database(
    backend: Optional[str] = None,
    database_path: Optional[str] = None,
    api_url: Optional[str] = None,
    api_key: Optional[str] = None,
) -> Database:
    """Create the record store selected by ``backend``.

    Args:
        backend: One of "memory", "sqlite" or "remote". If None, checks the
            PENNYWISE_BACKEND environment variable, then defaults to "sqlite".
        database_path: SQLite file path (sqlite backend only)
        api_url: Record store URL (remote backend only)
        api_key: Record store API key (remote backend only)

    Raises:
        ValueError: If the backend name is unknown
    """
    backend = (backend or os.environ.get("PENNYWISE_BACKEND") or "sqlite").lower()
    logger.info("Using %s record store", backend)
    if backend == "memory":
        return InMemoryDatabase()
    if backend == "sqlite":
        return create_sqlite_database(database_path=database_path)
    if backend == "remote":
        return create_remote_database(api_url=api_url, api_key=api_key)
    raise ValueError(f"Unknown backend '{backend}'. Supported backends: {', '.join(BACKENDS)}")
