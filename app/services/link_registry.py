"""
Link Registry

This service is the only component that reads or writes Link records.
It handles:
- Allocating links under an explicit or a generated short code
- Resolving a code to its destination and counting the visit
- Listing, fetching and deleting links

Design Decisions:
- The insert is the uniqueness check: there is no separate "does this code
  exist?" query, so two concurrent allocators can never both win. The unique
  index on links.code rejects the loser and the registry reports a conflict.
- Generated codes are retried on conflict, explicit codes are not.
- Visits are counted with a single UPDATE scoped by the link's id, so
  concurrent visits are never lost and a link recreated under the same code
  never receives another link's visit.
- No in-process state: every instance of the service can share one database.
"""

import logging
from typing import Callable, List, Optional

from sqlalchemy import delete, select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import (
    AllocationExhaustedError,
    CodeConflictError,
    InvalidCodeError,
    InvalidURLError,
    LinkNotFoundError,
    StoreUnavailableError,
)
from app.core.validators import is_valid_code, is_valid_url
from app.db.interface import DatabaseAdapter
from app.db.models import Link, utcnow
from app.services.code_generator import MIN_CODE_LENGTH, generate_code

logger = logging.getLogger(__name__)


class LinkRegistry:
    """
    Authoritative store of links.

    Every public method is one or two self-contained transactions against
    the database; nothing is locked or cached between calls.

    Returned links are detached from the session: they are snapshots that a
    later rollback on the same session cannot expire.
    """

    def __init__(
        self,
        session: AsyncSession,
        adapter: Optional[DatabaseAdapter] = None,
        code_generator: Callable[[int], str] = generate_code,
        code_length: int = MIN_CODE_LENGTH,
        max_attempts: Optional[int] = None,
    ):
        """
        Initialize the link registry.

        Args:
            session: Database session
            adapter: Database adapter used to recognise unique violations
                (defaults to the adapter of the configured DATABASE_URL)
            code_generator: Callable producing a candidate code of a given length
            code_length: Length of generated codes
            max_attempts: Bound on generated-code attempts; None retries until
                an insert commits
        """
        if adapter is None:
            from app.db.session import db_adapter
            adapter = db_adapter

        self.session = session
        self.adapter = adapter
        self.code_generator = code_generator
        self.code_length = code_length
        self.max_attempts = max_attempts

    async def allocate(self, destination: str, requested_code: Optional[str] = None) -> Link:
        """
        Create a link for a destination.

        Args:
            destination: Absolute URL the code should redirect to
            requested_code: Caller-chosen code; None to generate one

        Returns:
            The persisted Link with all fields populated

        Raises:
            InvalidURLError: If the destination is not an absolute URL
            InvalidCodeError: If requested_code does not match [A-Za-z0-9]{6,8}
            CodeConflictError: If requested_code is already taken
            AllocationExhaustedError: If max_attempts generated codes all collided
            StoreUnavailableError: If the database fails
        """
        if not is_valid_url(destination):
            raise InvalidURLError(destination)
        destination = destination.strip()

        if requested_code is not None:
            if not is_valid_code(requested_code):
                raise InvalidCodeError(requested_code)
            link = await self._insert(destination, requested_code)
            logger.info(f"Allocated requested code {link.code} -> {link.destination}")
            return link

        attempts = 0
        while True:
            attempts += 1
            candidate = self.code_generator(self.code_length)
            try:
                link = await self._insert(destination, candidate)
            except CodeConflictError:
                logger.debug(f"Generated code {candidate} already taken (attempt {attempts})")
                if self.max_attempts is not None and attempts >= self.max_attempts:
                    logger.error(f"Gave up generating a free code after {attempts} attempts")
                    raise AllocationExhaustedError(attempts)
                continue

            logger.info(
                f"Allocated generated code {link.code} -> {link.destination} "
                f"after {attempts} attempt(s)"
            )
            return link

    async def _insert(self, destination: str, code: str) -> Link:
        """
        Insert one link in its own transaction.

        Raises:
            CodeConflictError: If the unique index on code rejects the row
            StoreUnavailableError: On any other database failure
        """
        link = Link(code=code, destination=destination)
        self.session.add(link)

        try:
            await self.session.flush()
            await self.session.commit()
        except IntegrityError as e:
            await self.session.rollback()
            if self.adapter.is_unique_violation(e):
                raise CodeConflictError(code) from e
            raise StoreUnavailableError(
                "Failed to create link: database constraint violation",
                original_error=e
            ) from e
        except SQLAlchemyError as e:
            await self.session.rollback()
            logger.error(f"Failed to create link {code}: {e}", exc_info=True)
            raise StoreUnavailableError(f"Failed to create link: {e}", original_error=e) from e

        self.session.expunge(link)
        return link

    async def get(self, code: str) -> Link:
        """
        Look up a link without recording a visit.

        Raises:
            InvalidCodeError: If the code is malformed (no database access)
            LinkNotFoundError: If no link has this code
            StoreUnavailableError: If the database fails
        """
        if not is_valid_code(code):
            raise InvalidCodeError(code)

        statement = select(Link).where(Link.code == code)
        try:
            result = await self.session.execute(statement)
        except SQLAlchemyError as e:
            await self.session.rollback()
            raise StoreUnavailableError(f"Failed to look up link: {e}", original_error=e) from e

        link = result.scalar_one_or_none()
        if link is None:
            raise LinkNotFoundError(code)

        self.session.expunge(link)
        return link

    async def resolve(self, code: str) -> Link:
        """
        Resolve a code to its link and record the visit.

        A failure to record the visit is logged and does not withhold the
        destination. When recording succeeds the returned link carries the
        updated counter.

        Raises:
            InvalidCodeError: If the code is malformed (no database access)
            LinkNotFoundError: If no link has this code
            StoreUnavailableError: If the lookup itself fails
        """
        link = await self.get(code)
        await self._record_visit(link)
        return link

    async def _record_visit(self, link: Link) -> None:
        """
        Increment the visit counter of exactly this link (by id).

        The new counter is read back inside the same transaction, while the
        row is still write-locked, so it is the value this visit produced.
        """
        increment = (
            update(Link)
            .where(Link.id == link.id)
            .values(visit_count=Link.visit_count + 1, last_visited_at=utcnow())
            .execution_options(synchronize_session=False)
        )
        counters = select(Link.visit_count, Link.last_visited_at).where(Link.id == link.id)

        try:
            result = await self.session.execute(increment)
            if result.rowcount == 0:
                # Deleted between lookup and update
                await self.session.commit()
                logger.info(f"Link {link.code} disappeared before its visit was recorded")
                return
            row = (await self.session.execute(counters)).one()
            await self.session.commit()
        except SQLAlchemyError:
            await self.session.rollback()
            logger.warning(f"Failed to record visit for {link.code}", exc_info=True)
            return

        link.visit_count, link.last_visited_at = row

    async def list_links(self) -> List[Link]:
        """
        Return all links, newest first.

        Raises:
            StoreUnavailableError: If the database fails
        """
        statement = select(Link).order_by(Link.created_at.desc())
        try:
            result = await self.session.execute(statement)
        except SQLAlchemyError as e:
            await self.session.rollback()
            raise StoreUnavailableError(f"Failed to list links: {e}", original_error=e) from e

        links = list(result.scalars().all())
        for link in links:
            self.session.expunge(link)
        return links

    async def delete(self, code: str) -> bool:
        """
        Delete the link with this code.

        Returns:
            True if a link existed and was removed, False otherwise

        Raises:
            InvalidCodeError: If the code is malformed (no database access)
            StoreUnavailableError: If the database fails
        """
        if not is_valid_code(code):
            raise InvalidCodeError(code)

        statement = delete(Link).where(Link.code == code)
        try:
            result = await self.session.execute(statement)
            await self.session.commit()
        except SQLAlchemyError as e:
            await self.session.rollback()
            raise StoreUnavailableError(f"Failed to delete link: {e}", original_error=e) from e

        deleted = result.rowcount > 0
        if deleted:
            logger.info(f"Deleted link {code}")
        return deleted
