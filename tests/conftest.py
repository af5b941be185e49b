"""
Shared fixtures.

Every test gets its own SQLite file database so tests never see each
other's links, and so concurrent sessions really contend for the same file.
"""

from typing import AsyncGenerator

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from app.db.session import create_schema, create_session_maker, get_session
from app.db.sqlite_adapter import SQLiteAdapter
from app.main import app
from app.services.link_registry import LinkRegistry


@pytest.fixture
def adapter() -> SQLiteAdapter:
    return SQLiteAdapter(busy_timeout=30.0)


@pytest.fixture
async def engine(tmp_path, adapter) -> AsyncGenerator[AsyncEngine, None]:
    engine = adapter.create_engine(f"sqlite+aiosqlite:///{tmp_path / 'links.db'}")
    await create_schema(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_maker(engine) -> async_sessionmaker:
    return create_session_maker(engine)


@pytest.fixture
async def session(session_maker) -> AsyncGenerator[AsyncSession, None]:
    async with session_maker() as session:
        yield session


@pytest.fixture
def registry(session, adapter) -> LinkRegistry:
    return LinkRegistry(session, adapter=adapter)


@pytest.fixture
def make_registry(adapter):
    """Build registries over other sessions (e.g. one per concurrent task)."""
    def factory(session: AsyncSession, **kwargs) -> LinkRegistry:
        return LinkRegistry(session, adapter=adapter, **kwargs)
    return factory


@pytest.fixture
async def client(session_maker) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client bound to the app, with sessions from the test database."""
    async def override_get_session() -> AsyncGenerator[AsyncSession, None]:
        async with session_maker() as session:
            yield session

    app.dependency_overrides[get_session] = override_get_session
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as c:
        yield c
    app.dependency_overrides.clear()
