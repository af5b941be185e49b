"""
Concurrency tests.

Each task runs in its own session (its own SQLite connection), the way
concurrent requests do, so uniqueness and counting are decided by the
database rather than by anything in process.
"""

import asyncio

import pytest

from app.core.exceptions import CodeConflictError
from app.db.models import Link


async def allocate_in_own_session(session_maker, make_registry, destination, code=None):
    async with session_maker() as session:
        return await make_registry(session).allocate(destination, code)


async def resolve_in_own_session(session_maker, make_registry, code):
    async with session_maker() as session:
        return await make_registry(session).resolve(code)


class TestConcurrentAllocation:
    """Concurrent allocators racing for codes."""

    async def test_same_explicit_code_twice(self, session_maker, make_registry):
        results = await asyncio.gather(
            allocate_in_own_session(session_maker, make_registry, "https://a.example.com", "abcdef"),
            allocate_in_own_session(session_maker, make_registry, "https://b.example.com", "abcdef"),
            return_exceptions=True,
        )

        winners = [r for r in results if isinstance(r, Link)]
        conflicts = [r for r in results if isinstance(r, CodeConflictError)]
        assert len(winners) == 1
        assert len(conflicts) == 1

        async with session_maker() as session:
            stored = await make_registry(session).get("abcdef")
        assert stored.id == winners[0].id
        assert stored.destination == winners[0].destination

    async def test_many_allocators_one_code(self, session_maker, make_registry):
        contenders = 10
        results = await asyncio.gather(
            *[
                allocate_in_own_session(
                    session_maker, make_registry, f"https://example.com/{i}", "Shared1"
                )
                for i in range(contenders)
            ],
            return_exceptions=True,
        )

        assert sum(isinstance(r, Link) for r in results) == 1
        assert sum(isinstance(r, CodeConflictError) for r in results) == contenders - 1

        async with session_maker() as session:
            assert len(await make_registry(session).list_links()) == 1

    async def test_generated_codes_are_unique(self, session_maker, make_registry):
        results = await asyncio.gather(
            *[
                allocate_in_own_session(session_maker, make_registry, f"https://example.com/{i}")
                for i in range(30)
            ]
        )

        codes = [link.code for link in results]
        assert len(set(codes)) == 30

        async with session_maker() as session:
            stored = await make_registry(session).list_links()
        assert {link.code for link in stored} == set(codes)


class TestConcurrentResolution:
    """Concurrent visits to one link."""

    @pytest.mark.parametrize("visits", [2, 25])
    async def test_no_lost_increments(self, session_maker, make_registry, visits):
        await allocate_in_own_session(
            session_maker, make_registry, "https://example.com/hot", "hotlnk"
        )

        results = await asyncio.gather(
            *[resolve_in_own_session(session_maker, make_registry, "hotlnk") for _ in range(visits)]
        )

        assert all(link.destination == "https://example.com/hot" for link in results)
        # Each caller sees the counter its own visit produced
        assert sorted(link.visit_count for link in results) == list(range(1, visits + 1))

        async with session_maker() as session:
            stored = await make_registry(session).get("hotlnk")
        assert stored.visit_count == visits
        assert stored.last_visited_at is not None
