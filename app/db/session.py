"""
Database Session Management with Connection Pooling

This module handles async database connections using SQLAlchemy's async engine.
Uses a database abstraction layer to support different database backends.

Key Features:
- Database abstraction: SQLite or PostgreSQL, picked from DATABASE_URL
- Connection pooling: Configured per database type
- Async session management: Proper async context management
- Error handling: Automatic rollback on exceptions
"""

from typing import AsyncGenerator

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker
from sqlmodel import SQLModel
from sqlmodel.ext.asyncio.session import AsyncSession as SQLModelAsyncSession

from app.core.setting import settings
from app.db.adapters import get_database_adapter

# Get the database adapter matching DATABASE_URL
db_adapter = get_database_adapter(settings.DATABASE_URL)

# Create async engine using the adapter
# The adapter handles all database-specific configuration
engine = db_adapter.create_engine(
    settings.DATABASE_URL
)


def create_session_maker(bind: AsyncEngine) -> async_sessionmaker:
    """
    Build a session factory for an engine.

    Sessions keep loaded objects usable after commit, so a Link can be
    returned to the caller once its transaction has closed.
    """
    return async_sessionmaker(
        bind,
        class_=SQLModelAsyncSession,
        expire_on_commit=False,  # Prevents SQLAlchemy from expiring objects after commit
        autoflush=False,
    )


async_session_maker = create_session_maker(engine)


async def create_schema(bind: AsyncEngine = engine) -> None:
    """
    Create all tables that do not exist yet.

    Development convenience; production deployments run Alembic migrations.
    """
    from app.db import models  # noqa: F401  (registers tables on SQLModel.metadata)

    async with bind.begin() as connection:
        await connection.run_sync(SQLModel.metadata.create_all)


async def get_session() -> AsyncGenerator[AsyncSession, None]:
    """
    Dependency function for FastAPI to get database session.

    This function:
    - Creates a new async session from the pool
    - Yields it to the endpoint
    - Rolls back on exception
    - Closes session automatically (context manager handles it)

    The link registry commits its own transactions, one per store
    operation, so nothing is committed here.

    Usage in FastAPI:
        @router.get("/endpoint")
        async def endpoint(session: AsyncSession = Depends(get_session)):
            # Use session here
            pass
    """
    async with async_session_maker() as session:
        try:
            yield session
        except Exception:
            await session.rollback()  # Rollback on any exception
            raise
        # Session is automatically closed by the context manager
