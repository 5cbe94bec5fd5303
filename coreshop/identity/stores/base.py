"""Validation, cancellation and lifecycle shared by the identity stores."""

import asyncio
import logging
from typing import Any, Optional

from ..data.context import IdentityContext
from ..domain import ErrorDescriber, IdentityResult, SUCCESS
from ..exceptions import ConcurrencyConflict, InvalidArgument, \
    OperationCancelled, StoreDisposed

logger = logging.getLogger(__name__)


def require(value: Any, name: str) -> None:
    """Raise :class:`.InvalidArgument` if ``value`` is ``None``."""
    if value is None:
        raise InvalidArgument(name, f'{name} cannot be None')


def require_text(value: Optional[str], name: str) -> None:
    """Raise :class:`.InvalidArgument` if ``value`` is None, empty or blank."""
    if value is None or not value.strip():
        raise InvalidArgument(name)


def raise_if_cancelled(cancel: Optional[asyncio.Event]) -> None:
    """Raise :class:`.OperationCancelled` if ``cancel`` has been set."""
    if cancel is not None and cancel.is_set():
        raise OperationCancelled()


class StoreBase(object):
    """
    Owns an :class:`.IdentityContext` on behalf of a store.

    Every public store operation follows the same order: the store must not
    be closed, then its arguments are validated, then the cancellation event
    is checked. Only then is the context touched.
    """

    def __init__(self, context: IdentityContext,
                 describer: Optional[ErrorDescriber] = None) -> None:
        require(context, 'context')
        self._context: Optional[IdentityContext] = context
        self.describer = describer or ErrorDescriber()

    @property
    def context(self) -> IdentityContext:
        """The context owned by this store."""
        if self._context is None:
            raise StoreDisposed(f'{type(self).__name__} has been closed')
        return self._context

    def _ensure_open(self) -> None:
        if self._context is None:
            raise StoreDisposed(f'{type(self).__name__} has been closed')

    async def _save(self, entity: Any) -> IdentityResult:
        """
        Save pending changes, reporting a conflict as a failed result.

        After a conflict the entity is reloaded, so that it carries the
        stored values and stamp and can be changed and saved again.
        """
        try:
            await self.context.save_changes()
        except ConcurrencyConflict as e:
            if not await self._reload(entity):
                logger.warning('%r was deleted elsewhere', entity)
            logger.warning('Could not save %r: %s', entity, e)
            return IdentityResult.failed(self.describer.concurrency_failure())
        return SUCCESS

    async def _reload(self, entity: Any) -> bool:
        return await self.context.reload(entity)

    async def close(self) -> None:
        """Close the owned context. Later calls raise `StoreDisposed`."""
        if self._context is not None:
            context, self._context = self._context, None
            await context.close()

    async def __aenter__(self) -> 'StoreBase':
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()
