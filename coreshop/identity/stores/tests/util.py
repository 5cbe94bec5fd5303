"""Testing helpers."""

from typing import Optional
from unittest import IsolatedAsyncioTestCase
from unittest.mock import MagicMock

from mimesis import Locale, Person

from ...data.context import IdentityContext
from ...data.models import Account, Role
from ...data.tests.util import temporary_db
from ...domain import ErrorDescriber
from ..roles import RoleStore
from ..users import UserStore


def mock_context() -> MagicMock:
    """A context double that finds nothing and records every call."""
    context = MagicMock(spec=IdentityContext)
    context.first.return_value = None
    context.all.return_value = []
    return context


class StoreTestCase(IsolatedAsyncioTestCase):
    """Provides a fresh database, and stores over it."""

    async def asyncSetUp(self) -> None:
        self.engine = await self.enterAsyncContext(temporary_db())
        self.person = Person(Locale.EN)
        self._serial = 0

    def user_store(self, describer: Optional[ErrorDescriber] = None) \
            -> UserStore:
        """Get a user store with its own context."""
        store = UserStore(IdentityContext.from_engine(self.engine), describer)
        self.addAsyncCleanup(store.close)
        return store

    def role_store(self) -> RoleStore:
        """Get a role store with its own context."""
        store = RoleStore(IdentityContext.from_engine(self.engine))
        self.addAsyncCleanup(store.close)
        return store

    def new_account(self, user_name: Optional[str] = None) -> Account:
        """Build an unsaved account with synthetic details."""
        self._serial += 1
        user_name = user_name or f'{self.person.username()}{self._serial}'
        email = f'{self._serial}.{self.person.email()}'
        return Account(user_name,
                       normalized_user_name=user_name.upper(),
                       email=email,
                       normalized_email=email.upper())

    async def create_account(self, store: Optional[UserStore] = None,
                             user_name: Optional[str] = None) -> Account:
        """Save a new account, through a separate store unless given one."""
        account = self.new_account(user_name)
        result = await (store or self.user_store()).create(account)
        self.assertTrue(result.succeeded)
        return account

    async def create_role(self, name: str) -> Role:
        """Save a new role through a separate store."""
        role = Role(name, normalized_name=name.upper())
        result = await self.role_store().create(role)
        self.assertTrue(result.succeeded)
        return role
