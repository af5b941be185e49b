"""
SQLite Database Adapter

This module implements the DatabaseAdapter interface for SQLite.
All SQLite-specific configuration and behavior is encapsulated here.

SQLite is a file-based database that's perfect for:
- Local development
- Testing
- Single-instance deployments

Key characteristics:
- File-based (single .db file)
- No server required
- Single writer at a time (file locking); concurrent writers wait on the
  busy timeout instead of failing
"""

from typing import Any
from sqlalchemy.exc import IntegrityError
from sqlalchemy.pool import NullPool

from app.db.interface import DatabaseAdapter

UNIQUE_VIOLATION_MESSAGE = "UNIQUE constraint failed"
UNIQUE_VIOLATION_ERRORNAMES = {"SQLITE_CONSTRAINT_UNIQUE", "SQLITE_CONSTRAINT_PRIMARYKEY"}


class SQLiteAdapter(DatabaseAdapter):
    """
    SQLite database adapter implementation.

    This adapter handles all SQLite-specific configuration and operations.
    SQLite uses file-based storage and has different characteristics than
    server-based databases like PostgreSQL.
    """

    def __init__(self, busy_timeout: float = 30.0):
        """
        Args:
            busy_timeout: Seconds to wait for another connection's write lock
        """
        self.busy_timeout = busy_timeout

    def get_pool_class(self) -> type[NullPool]:
        """
        Get the connection pool class for SQLite.

        SQLite uses NullPool because the file-based database doesn't benefit
        from connection pooling.

        Returns:
            NullPool class
        """
        return NullPool

    def get_connect_args(self) -> dict[str, Any]:
        """
        Get SQLite-specific connection arguments.

        - check_same_thread=False: Required for async SQLite operations
        - timeout: busy timeout so concurrent writers queue on the file lock

        Returns:
            Dictionary with SQLite connection arguments
        """
        return {
            "check_same_thread": False,
            "timeout": self.busy_timeout,
        }

    def get_engine_kwargs(self) -> dict[str, Any]:
        """
        Get SQLite-specific engine configuration.

        Returns:
            Dictionary with SQLite engine options
        """
        return {
            "echo": False  # Set to True only for SQL debugging in development
        }

    def is_unique_violation(self, error: IntegrityError) -> bool:
        """
        SQLite reports unique violations as 'UNIQUE constraint failed: table.column'.
        Python 3.11+ also exposes the extended error name on the exception.
        """
        original = error.orig
        if getattr(original, "sqlite_errorname", None) in UNIQUE_VIOLATION_ERRORNAMES:
            return True
        return UNIQUE_VIOLATION_MESSAGE in str(original)
