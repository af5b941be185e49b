"""
PostgreSQL Database Adapter

This module implements the DatabaseAdapter interface for PostgreSQL
(asyncpg driver). Recommended for multi-instance deployments: every
service instance shares one database and its unique index on links.code.
"""

from typing import Any, Optional
from sqlalchemy.exc import IntegrityError
from sqlalchemy.pool import Pool

from app.db.interface import DatabaseAdapter

UNIQUE_VIOLATION_SQLSTATE = "23505"


class PostgreSQLAdapter(DatabaseAdapter):
    """PostgreSQL adapter using SQLAlchemy's default QueuePool."""

    def __init__(self, pool_size: int = 10, max_overflow: int = 20):
        self.pool_size = pool_size
        self.max_overflow = max_overflow

    def get_pool_class(self) -> Optional[type[Pool]]:
        # Default AsyncAdaptedQueuePool
        return None

    def get_connect_args(self) -> dict[str, Any]:
        return {}

    def get_engine_kwargs(self) -> dict[str, Any]:
        return {
            "echo": False,
            "pool_size": self.pool_size,
            "max_overflow": self.max_overflow,
            "pool_pre_ping": True,
        }

    def is_unique_violation(self, error: IntegrityError) -> bool:
        """
        Check the SQLSTATE of the failed statement.

        The asyncpg adaptation exposes it as ``sqlstate`` (and the native
        asyncpg exception is chained as ``__cause__``); psycopg2 uses ``pgcode``.
        """
        original = error.orig
        candidates = (original, getattr(original, "__cause__", None))
        for candidate in candidates:
            if candidate is None:
                continue
            sqlstate = getattr(candidate, "sqlstate", None) or getattr(candidate, "pgcode", None)
            if sqlstate == UNIQUE_VIOLATION_SQLSTATE:
                return True
        return False
