"""Tests for :mod:`coreshop.identity.data.models`."""

from unittest import IsolatedAsyncioTestCase, TestCase

from sqlalchemy import func, select

from .. import models
from ..context import IdentityContext
from ..models import Account, AccountClaim, AccountLogin, AccountRole, \
    AccountToken, Role, RoleClaim
from .util import temporary_db


class TestSchema(TestCase):
    """The tables live in the identity schema namespace."""

    def test_tables_are_namespaced(self) -> None:
        for table in models.Base.metadata.tables.values():
            self.assertEqual(table.schema, models.SCHEMA)
        self.assertEqual(models.SCHEMA, 'CoreShopping')

    def test_named_indexes(self) -> None:
        """Lookup indexes carry their conventional names."""
        def indexes(model):
            return {ix.name: ix for ix in model.__table__.indexes}

        self.assertTrue(indexes(Account)['UserNameIndex'].unique)
        self.assertFalse(indexes(Account)['EmailIndex'].unique)
        self.assertTrue(indexes(Role)['RoleNameIndex'].unique)

    def test_composite_keys(self) -> None:
        def key(model):
            return [c.name for c in model.__table__.primary_key.columns]

        self.assertEqual(key(AccountLogin), ['login_provider', 'provider_key'])
        self.assertEqual(key(AccountToken),
                         ['account_id', 'login_provider', 'name'])
        self.assertEqual(key(AccountRole), ['account_id', 'role_id'])


class TestDefaults(TestCase):
    """New entities are ready to save."""

    def test_new_account(self) -> None:
        account = Account('jane')
        self.assertEqual(len(account.id), 36)
        self.assertEqual(len(account.concurrency_stamp), 36)
        self.assertEqual(account.access_failed_count, 0)
        self.assertFalse(account.email_confirmed)
        self.assertFalse(account.phone_number_confirmed)
        self.assertFalse(account.two_factor_enabled)
        self.assertFalse(account.lockout_enabled)
        self.assertIsNone(account.password_hash)
        self.assertEqual(str(account), 'jane')

    def test_new_accounts_get_distinct_ids(self) -> None:
        self.assertNotEqual(Account().id, Account().id)

    def test_explicit_values_win(self) -> None:
        account = Account(id='fixed', concurrency_stamp='stamp',
                          lockout_enabled=True)
        self.assertEqual(account.id, 'fixed')
        self.assertEqual(account.concurrency_stamp, 'stamp')
        self.assertTrue(account.lockout_enabled)

    def test_new_role(self) -> None:
        role = Role('Admin', normalized_name='ADMIN')
        self.assertEqual(len(role.id), 36)
        self.assertEqual(len(role.concurrency_stamp), 36)
        self.assertEqual(str(role), 'Admin')


class TestCascades(IsolatedAsyncioTestCase):
    """Dependent rows are deleted by the database with their owner."""

    async def asyncSetUp(self) -> None:
        self.engine = await self.enterAsyncContext(temporary_db())
        context = self.new_context()
        self.role = Role('Admin', normalized_name='ADMIN')
        self.role.claims.append(RoleClaim(claim_type='perm',
                                          claim_value='all'))
        self.account = Account('jane', normalized_user_name='JANE')
        self.account.claims.append(AccountClaim(claim_type='email',
                                                claim_value='j@x.org'))
        self.account.logins.append(AccountLogin(login_provider='Google',
                                                provider_key='123'))
        self.account.tokens.append(AccountToken(login_provider='Google',
                                                name='access', value='t'))
        self.account.roles.append(AccountRole(role=self.role))
        context.add_all([self.role, self.account])
        await context.save_changes()

    def new_context(self) -> IdentityContext:
        context = IdentityContext.from_engine(self.engine)
        self.addAsyncCleanup(context.close)
        return context

    async def count(self, model) -> int:
        context = self.new_context()
        return await context.first(select(func.count()).select_from(model))

    async def test_deleting_account_deletes_dependents(self) -> None:
        context = self.new_context()
        account = await context.first(
            select(Account).where(Account.id == self.account.id)
        )
        await context.remove(account)
        await context.save_changes()

        for model in (AccountClaim, AccountLogin, AccountToken, AccountRole):
            self.assertEqual(await self.count(model), 0, model.__name__)
        self.assertEqual(await self.count(Role), 1)

    async def test_deleting_role_deletes_memberships(self) -> None:
        context = self.new_context()
        role = await context.first(select(Role).where(Role.id == self.role.id))
        await context.remove(role)
        await context.save_changes()

        self.assertEqual(await self.count(AccountRole), 0)
        self.assertEqual(await self.count(RoleClaim), 0)
        self.assertEqual(await self.count(Account), 1)
