"""Persistence of roles for the identity engine."""

import logging
import uuid
from asyncio import Event
from typing import Optional

from sqlalchemy import select

from ..data.models import Role
from ..domain import IdentityResult, SUCCESS
from .base import StoreBase, raise_if_cancelled, require, require_text

logger = logging.getLogger(__name__)


class RoleStore(StoreBase):
    """
    Stores :class:`.Role` rows through an :class:`.IdentityContext`.

    The store owns its context: closing the store closes the context.

    .. code-block:: python

       async with RoleStore(IdentityContext.from_engine(engine)) as store:
           role = Role('Admin', normalized_name='ADMIN')
           result = await store.create(role)

    """

    async def create(self, role: Role,
                     cancel: Optional[Event] = None) -> IdentityResult:
        """Insert a new role."""
        self._ensure_open()
        require(role, 'role')
        raise_if_cancelled(cancel)

        self.context.add(role)
        await self.context.save_changes()
        logger.debug('Created role %s', role.id)
        return SUCCESS

    async def delete(self, role: Role,
                     cancel: Optional[Event] = None) -> IdentityResult:
        """
        Delete a role, along with its memberships and claims.

        Returns
        -------
        :class:`.IdentityResult`
            Failed with a ``ConcurrencyFailure`` error if the role was changed
            by someone else since it was loaded.

        """
        self._ensure_open()
        require(role, 'role')
        raise_if_cancelled(cancel)

        await self.context.remove(role)
        result = await self._save(role)
        if result.succeeded:
            logger.debug('Deleted role %s', role.id)
        return result

    async def update(self, role: Role,
                     cancel: Optional[Event] = None) -> IdentityResult:
        """
        Save changes to a role, issuing it a new concurrency stamp.

        Returns
        -------
        :class:`.IdentityResult`
            Failed with a ``ConcurrencyFailure`` error if the role was changed
            by someone else since it was loaded.

        """
        self._ensure_open()
        require(role, 'role')
        raise_if_cancelled(cancel)

        self.context.attach(role)
        role.concurrency_stamp = str(uuid.uuid4())
        return await self._save(role)

    async def find_by_id(self, role_id: str,
                         cancel: Optional[Event] = None) -> Optional[Role]:
        """Get the role with id ``role_id``, or ``None``."""
        self._ensure_open()
        require_text(role_id, 'role_id')
        raise_if_cancelled(cancel)

        return await self.context.first(select(Role).where(Role.id == role_id))

    async def find_by_name(self, normalized_role_name: str,
                           cancel: Optional[Event] = None) -> Optional[Role]:
        """Get the role with the given normalized name, or ``None``."""
        self._ensure_open()
        require_text(normalized_role_name, 'normalized_role_name')
        raise_if_cancelled(cancel)

        return await self.context.first(
            select(Role).where(Role.normalized_name == normalized_role_name)
        )

    async def get_role_id(self, role: Role,
                          cancel: Optional[Event] = None) -> str:
        self._ensure_open()
        require(role, 'role')
        raise_if_cancelled(cancel)
        return str(role.id)

    async def get_role_name(self, role: Role,
                            cancel: Optional[Event] = None) -> Optional[str]:
        self._ensure_open()
        require(role, 'role')
        raise_if_cancelled(cancel)
        return role.name

    async def set_role_name(self, role: Role, role_name: str,
                            cancel: Optional[Event] = None) -> None:
        self._ensure_open()
        require(role, 'role')
        require_text(role_name, 'role_name')
        raise_if_cancelled(cancel)
        role.name = role_name

    async def get_normalized_role_name(self, role: Role,
                                       cancel: Optional[Event] = None) \
            -> Optional[str]:
        self._ensure_open()
        require(role, 'role')
        raise_if_cancelled(cancel)
        return role.normalized_name

    async def set_normalized_role_name(self, role: Role, normalized_name: str,
                                       cancel: Optional[Event] = None) \
            -> None:
        self._ensure_open()
        require(role, 'role')
        require_text(normalized_name, 'normalized_name')
        raise_if_cancelled(cancel)
        role.normalized_name = normalized_name
