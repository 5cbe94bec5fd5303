"""Tests for tokens, authenticator keys and recovery codes."""

import asyncio
import string
from unittest import TestCase

from hypothesis import given, settings
from hypothesis import strategies as st
from sqlalchemy import func, select

from ...data.models import Account, AccountToken
from ...domain import SUCCESS
from ..users import AUTHENTICATOR_KEY_TOKEN_NAME, INTERNAL_LOGIN_PROVIDER, \
    RECOVERY_CODE_TOKEN_NAME, UserStore
from .util import StoreTestCase, mock_context


class TestTokens(StoreTestCase):
    """Named tokens are kept per account, provider and name."""

    async def asyncSetUp(self) -> None:
        await super().asyncSetUp()
        self.store = self.user_store()
        self.account = await self.create_account(self.store)

    async def count_rows(self) -> int:
        return await self.store.context.first(
            select(func.count()).select_from(AccountToken)
        )

    async def test_missing_token(self) -> None:
        self.assertIsNone(
            await self.store.get_token(self.account, 'Google', 'access')
        )

    async def test_set_token_twice_keeps_one_row(self) -> None:
        """Setting a token again overwrites it."""
        await self.store.set_token(self.account, 'Google', 'access', 'one')
        await self.store.update(self.account)
        await self.store.set_token(self.account, 'Google', 'access', 'two')
        await self.store.update(self.account)

        self.assertEqual(await self.count_rows(), 1)
        reloaded = await self.user_store().find_by_id(self.account.id)
        self.assertEqual(
            await self.store.get_token(reloaded, 'Google', 'access'), 'two'
        )

    async def test_set_unsaved_token_twice(self) -> None:
        await self.store.set_token(self.account, 'Google', 'access', 'one')
        await self.store.set_token(self.account, 'Google', 'access', 'two')
        self.assertEqual(await self.store.update(self.account), SUCCESS)
        self.assertEqual(await self.count_rows(), 1)
        self.assertEqual(
            await self.store.get_token(self.account, 'Google', 'access'), 'two'
        )

    async def test_tokens_are_keyed_by_provider_and_name(self) -> None:
        await self.store.set_token(self.account, 'Google', 'access', 'g')
        await self.store.set_token(self.account, 'Google', 'refresh', 'r')
        await self.store.set_token(self.account, 'GitHub', 'access', 'h')
        await self.store.update(self.account)

        self.assertEqual(await self.count_rows(), 3)
        get = self.store.get_token
        self.assertEqual(await get(self.account, 'Google', 'access'), 'g')
        self.assertEqual(await get(self.account, 'Google', 'refresh'), 'r')
        self.assertEqual(await get(self.account, 'GitHub', 'access'), 'h')

    async def test_remove_token(self) -> None:
        await self.store.set_token(self.account, 'Google', 'access', 'one')
        await self.store.update(self.account)

        await self.store.remove_token(self.account, 'Google', 'access')
        await self.store.update(self.account)
        self.assertEqual(await self.count_rows(), 0)
        self.assertIsNone(
            await self.store.get_token(self.account, 'Google', 'access')
        )

    async def test_remove_missing_token(self) -> None:
        await self.store.remove_token(self.account, 'Google', 'access')
        self.assertEqual(await self.count_rows(), 0)

    async def test_authenticator_key(self) -> None:
        """The authenticator key is an internal token."""
        self.assertIsNone(
            await self.store.get_authenticator_key(self.account)
        )
        await self.store.set_authenticator_key(self.account, 'JBSWY3DP')
        await self.store.update(self.account)

        self.assertEqual(
            await self.store.get_authenticator_key(self.account), 'JBSWY3DP'
        )
        self.assertEqual(
            await self.store.get_token(self.account, INTERNAL_LOGIN_PROVIDER,
                                       AUTHENTICATOR_KEY_TOKEN_NAME),
            'JBSWY3DP'
        )


class TestRecoveryCodes(StoreTestCase):
    """Recovery codes are redeemed one at a time."""

    async def asyncSetUp(self) -> None:
        await super().asyncSetUp()
        self.store = self.user_store()
        self.account = await self.create_account(self.store)

    async def test_no_codes(self) -> None:
        self.assertEqual(await self.store.count_codes(self.account), 0)
        self.assertFalse(await self.store.redeem_code(self.account, 'a'))

    async def test_redeem(self) -> None:
        await self.store.replace_codes(self.account, ['a', 'b', 'c'])
        self.assertEqual(await self.store.count_codes(self.account), 3)

        self.assertTrue(await self.store.redeem_code(self.account, 'b'))
        self.assertEqual(await self.store.count_codes(self.account), 2)
        self.assertFalse(await self.store.redeem_code(self.account, 'b'))
        self.assertEqual(await self.store.count_codes(self.account), 2)

    async def test_codes_are_saved_by_update(self) -> None:
        await self.store.replace_codes(self.account, ['a', 'b', 'c'])
        await self.store.update(self.account)
        await self.store.redeem_code(self.account, 'a')
        await self.store.update(self.account)

        store = self.user_store()
        reloaded = await store.find_by_id(self.account.id)
        self.assertEqual(await store.count_codes(reloaded), 2)
        self.assertEqual(
            await store.get_token(reloaded, INTERNAL_LOGIN_PROVIDER,
                                  RECOVERY_CODE_TOKEN_NAME),
            'b;c'
        )

    async def test_replace_discards_old_codes(self) -> None:
        await self.store.replace_codes(self.account, ['a', 'b'])
        await self.store.replace_codes(self.account, ['x'])
        self.assertFalse(await self.store.redeem_code(self.account, 'a'))
        self.assertTrue(await self.store.redeem_code(self.account, 'x'))
        self.assertEqual(await self.store.count_codes(self.account), 0)

    async def test_count_stored_codes(self) -> None:
        """Empty segments of the stored value are not counted."""
        for merged, expected in [('', 0), ('one', 1), ('one;two', 2),
                                 ('one;two;three', 3)]:
            with self.subTest(merged=merged):
                await self.store.set_token(self.account,
                                           INTERNAL_LOGIN_PROVIDER,
                                           RECOVERY_CODE_TOKEN_NAME, merged)
                self.assertEqual(await self.store.count_codes(self.account),
                                 expected)


codes = st.lists(st.text(alphabet=string.ascii_letters + string.digits,
                         min_size=1, max_size=12),
                 max_size=20, unique=True)


class TestRecoveryCodeProperties(TestCase):
    """Recovery codes behave like a set of single-use values."""

    @given(codes)
    @settings(max_examples=200)
    def test_count_matches_codes_given(self, recovery_codes) -> None:
        async def count() -> int:
            store, account = UserStore(mock_context()), Account('jane')
            await store.replace_codes(account, recovery_codes)
            return await store.count_codes(account)

        self.assertEqual(asyncio.run(count()), len(recovery_codes))

    @given(codes)
    @settings(max_examples=200)
    def test_each_code_redeems_once(self, recovery_codes) -> None:
        async def redeem_all() -> None:
            store, account = UserStore(mock_context()), Account('jane')
            await store.replace_codes(account, recovery_codes)
            for i, code in enumerate(recovery_codes):
                self.assertTrue(await store.redeem_code(account, code))
                self.assertFalse(await store.redeem_code(account, code))
                self.assertEqual(await store.count_codes(account),
                                 len(recovery_codes) - i - 1)

        asyncio.run(redeem_all())
