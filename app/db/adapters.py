"""
Database adapter selection.

Picks the DatabaseAdapter implementation from the scheme of the
configured DATABASE_URL. No other code needs to know which backend runs.
"""

from typing import Optional

from sqlalchemy.engine import make_url

from app.core.setting import settings
from app.db.interface import DatabaseAdapter
from app.db.postgres_adapter import PostgreSQLAdapter
from app.db.sqlite_adapter import SQLiteAdapter


def get_database_adapter(database_url: Optional[str] = None) -> DatabaseAdapter:
    """
    Factory function to get the database adapter.

    Args:
        database_url: Connection string (defaults to settings.DATABASE_URL)

    Returns:
        DatabaseAdapter instance for the URL's backend

    Raises:
        ValueError: If the backend is not supported
    """
    url = make_url(database_url or settings.DATABASE_URL)
    backend = url.get_backend_name()

    if backend == "sqlite":
        return SQLiteAdapter(busy_timeout=settings.SQLITE_BUSY_TIMEOUT)
    if backend == "postgresql":
        return PostgreSQLAdapter()

    raise ValueError(f"Unsupported database backend: {backend}")
