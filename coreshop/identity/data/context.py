"""
Unit of work over the identity database.

A :class:`IdentityContext` wraps one request-scoped
:class:`sqlalchemy.ext.asyncio.AsyncSession`. Stores register new, changed
and removed entities with it, and :meth:`IdentityContext.save_changes`
commits them in a single transaction. A context is not meant to be shared
between concurrent requests.
"""

import asyncio
import logging
from typing import Any, Iterable, List, Optional

from sqlalchemy import ScalarResult, Select, inspect
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession
from sqlalchemy.orm import make_transient
from sqlalchemy.orm.exc import StaleDataError

from ..exceptions import ConcurrencyConflict
from .util import session_factory

logger = logging.getLogger(__name__)


class IdentityContext(object):
    """Tracks identity entities and persists them through one session."""

    def __init__(self, session: AsyncSession) -> None:
        self._session: Optional[AsyncSession] = session

    @classmethod
    def from_engine(cls, engine: AsyncEngine) -> 'IdentityContext':
        """Create a context on a new session bound to ``engine``."""
        return cls(session_factory(engine)())

    @property
    def session(self) -> AsyncSession:
        """The underlying session."""
        if self._session is None:
            raise RuntimeError('Context is closed')
        return self._session

    @property
    def closed(self) -> bool:
        """Whether :meth:`close` has been called."""
        return self._session is None

    def add(self, entity: Any) -> None:
        """Register a new entity, to be inserted on the next save."""
        self.session.add(entity)

    def add_all(self, entities: Iterable[Any]) -> None:
        """Register several new entities."""
        self.session.add_all(entities)

    def attach(self, entity: Any) -> None:
        """Start tracking an entity that was loaded elsewhere."""
        self.session.add(entity)

    async def remove(self, entity: Any) -> None:
        """Mark an entity for deletion on the next save."""
        await self.session.delete(entity)

    async def first(self, statement: Select) -> Optional[Any]:
        """Run ``statement`` and return the first entity, or ``None``."""
        result = await self._scalars(statement)
        return result.first()

    async def all(self, statement: Select) -> List[Any]:
        """Run ``statement`` and return all entities."""
        result = await self._scalars(statement)
        return list(result.all())

    async def _scalars(self, statement: Select) -> ScalarResult:
        # Queries autoflush pending changes first, which can also find that
        # a tracked row went stale.
        try:
            return await self.session.scalars(statement)
        except StaleDataError as e:
            logger.warning('Concurrency conflict during flush: %s', e)
            await self.session.rollback()
            raise ConcurrencyConflict(str(e)) from e

    async def save_changes(self) -> None:
        """
        Commit all pending changes in one transaction.

        Raises
        ------
        :class:`.ConcurrencyConflict`
            If an updated or deleted row no longer carries the concurrency
            stamp it had when it was loaded. The transaction is rolled back.

        Any other error from the database is rolled back and re-raised as-is.
        """
        try:
            await self.session.commit()
        except StaleDataError as e:
            logger.warning('Concurrency conflict, rolling back: %s', e)
            await self.session.rollback()
            raise ConcurrencyConflict(str(e)) from e
        except (Exception, asyncio.CancelledError) as e:
            logger.error('Commit failed, rolling back: %s', str(e))
            await self.session.rollback()
            raise

    async def reload(self, entity: Any, *options: Any) -> bool:
        """
        Read ``entity`` back from the database, discarding unsaved changes.

        A rollback expires every tracked entity, and an expired entity cannot
        be read without going back to the database. Reloading lets the caller
        keep using the object after a failed save.

        Returns
        -------
        bool
            ``False`` if the row no longer exists. The entity is then detached
            from the session, keeping only its primary key.

        """
        state = inspect(entity)
        identity = state.identity
        if identity is None:
            return False
        found = await self.session.get(state.mapper.class_, identity,
                                       options=list(options),
                                       populate_existing=True)
        if found is not None:
            return True

        logger.debug('%s %s no longer exists', state.mapper.class_.__name__,
                     identity)
        self.session.expunge(entity)
        make_transient(entity)
        for column, value in zip(state.mapper.primary_key, identity):
            prop = state.mapper.get_property_by_column(column)
            setattr(entity, prop.key, value)
        return False

    async def close(self) -> None:
        """Release the session. Safe to call more than once."""
        if self._session is not None:
            await self._session.close()
            self._session = None
