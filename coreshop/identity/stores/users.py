"""
Persistence of accounts for the identity engine.

:class:`UserStore` implements every user capability in
:mod:`.protocols` on top of one :class:`.IdentityContext`. Changes to an
account's own fields stay in memory until :meth:`UserStore.update`; claims,
logins, role memberships and tokens are registered with the context as they
are added or removed, and written by the next save.
"""

import logging
import uuid
from asyncio import Event
from datetime import datetime
from typing import Any, Iterable, List, Optional

from pytz import UTC
from sqlalchemy import Select, and_, inspect, or_, select
from sqlalchemy.orm import selectinload

from ..data.models import Account, AccountClaim, AccountLogin, \
    AccountRole, AccountToken, Role
from ..domain import Claim, IdentityResult, LoginInfo, SUCCESS
from ..exceptions import NoSuchRole
from .base import StoreBase, raise_if_cancelled, require, require_text

logger = logging.getLogger(__name__)

INTERNAL_LOGIN_PROVIDER = '[CoreShopUserStore]'
"""Login provider under which the store keeps its own secrets."""

AUTHENTICATOR_KEY_TOKEN_NAME = 'AuthenticatorKey'
RECOVERY_CODE_TOKEN_NAME = 'RecoveryCodes'

_RECOVERY_CODE_SEPARATOR = ';'


NAVIGATION = (
    selectinload(Account.roles).selectinload(AccountRole.role),
    selectinload(Account.claims),
    selectinload(Account.logins),
    selectinload(Account.tokens)
)
"""Loader options for an account's roles (with their role), claims, logins
and tokens."""


def with_navigation(statement: Select) -> Select:
    """Eagerly load an account's navigation collections."""
    return statement.options(*NAVIGATION)


def _utc(moment: Optional[datetime]) -> Optional[datetime]:
    if moment is None:
        return None
    if moment.tzinfo is None:
        return UTC.localize(moment)
    return moment.astimezone(UTC)


class UserStore(StoreBase):
    """
    Stores :class:`.Account` rows and everything hanging off them.

    The store owns its context: closing the store closes the context.

    .. code-block:: python

       async with UserStore(IdentityContext.from_engine(engine)) as store:
           account = Account('jane', normalized_user_name='JANE')
           await store.create(account)
           await store.add_to_role(account, 'ADMIN')
           await store.update(account)

    """

    # User

    async def create(self, user: Account,
                     cancel: Optional[Event] = None) -> IdentityResult:
        """
        Insert a new account, along with any claims, logins, roles or tokens
        already attached to it.

        Constraint violations (e.g. a duplicate normalized user name) are
        raised as-is.
        """
        self._ensure_open()
        require(user, 'user')
        raise_if_cancelled(cancel)

        self.context.add(user)
        await self.context.save_changes()
        logger.debug('Created account %s', user.id)
        return SUCCESS

    async def update(self, user: Account,
                     cancel: Optional[Event] = None) -> IdentityResult:
        """
        Save changes to an account, issuing it a new concurrency stamp.

        Returns
        -------
        :class:`.IdentityResult`
            Failed with a ``ConcurrencyFailure`` error if the account was
            changed by someone else since it was loaded.

        """
        self._ensure_open()
        require(user, 'user')
        raise_if_cancelled(cancel)

        self.context.attach(user)
        user.concurrency_stamp = str(uuid.uuid4())
        return await self._save(user)

    async def delete(self, user: Account,
                     cancel: Optional[Event] = None) -> IdentityResult:
        """
        Delete an account. Its claims, logins, role memberships and tokens
        go with it.

        Returns
        -------
        :class:`.IdentityResult`
            Failed with a ``ConcurrencyFailure`` error if the account was
            changed by someone else since it was loaded.

        """
        self._ensure_open()
        require(user, 'user')
        raise_if_cancelled(cancel)

        await self.context.remove(user)
        result = await self._save(user)
        if result.succeeded:
            logger.debug('Deleted account %s', user.id)
        return result

    async def _reload(self, user: Account) -> bool:
        return await self.context.reload(user, *NAVIGATION)

    async def find_by_id(self, user_id: str,
                         cancel: Optional[Event] = None) -> Optional[Account]:
        """Get the account with id ``user_id``, or ``None``."""
        self._ensure_open()
        require_text(user_id, 'user_id')
        raise_if_cancelled(cancel)

        return await self.context.first(
            with_navigation(select(Account).where(Account.id == user_id))
        )

    async def find_by_name(self, normalized_user_name: str,
                           cancel: Optional[Event] = None) \
            -> Optional[Account]:
        """Get the account with the given normalized user name, or ``None``."""
        self._ensure_open()
        require_text(normalized_user_name, 'normalized_user_name')
        raise_if_cancelled(cancel)

        return await self.context.first(with_navigation(
            select(Account)
            .where(Account.normalized_user_name == normalized_user_name)
        ))

    async def get_user_id(self, user: Account,
                          cancel: Optional[Event] = None) -> str:
        self._ensure_open()
        require(user, 'user')
        raise_if_cancelled(cancel)
        return str(user.id)

    async def get_user_name(self, user: Account,
                            cancel: Optional[Event] = None) -> Optional[str]:
        self._ensure_open()
        require(user, 'user')
        raise_if_cancelled(cancel)
        return user.user_name

    async def set_user_name(self, user: Account, user_name: str,
                            cancel: Optional[Event] = None) -> None:
        self._ensure_open()
        require(user, 'user')
        require_text(user_name, 'user_name')
        raise_if_cancelled(cancel)
        user.user_name = user_name

    async def get_normalized_user_name(self, user: Account,
                                       cancel: Optional[Event] = None) \
            -> Optional[str]:
        self._ensure_open()
        require(user, 'user')
        raise_if_cancelled(cancel)
        return user.normalized_user_name

    async def set_normalized_user_name(self, user: Account,
                                       normalized_name: str,
                                       cancel: Optional[Event] = None) \
            -> None:
        self._ensure_open()
        require(user, 'user')
        require_text(normalized_name, 'normalized_name')
        raise_if_cancelled(cancel)
        user.normalized_user_name = normalized_name

    # Email

    async def find_by_email(self, normalized_email: str,
                            cancel: Optional[Event] = None) \
            -> Optional[Account]:
        """Get the first account with the given normalized email address."""
        self._ensure_open()
        require_text(normalized_email, 'normalized_email')
        raise_if_cancelled(cancel)

        return await self.context.first(with_navigation(
            select(Account).where(Account.normalized_email == normalized_email)
        ))

    async def get_email(self, user: Account,
                        cancel: Optional[Event] = None) -> Optional[str]:
        self._ensure_open()
        require(user, 'user')
        raise_if_cancelled(cancel)
        return user.email

    async def set_email(self, user: Account, email: str,
                        cancel: Optional[Event] = None) -> None:
        self._ensure_open()
        require(user, 'user')
        require_text(email, 'email')
        raise_if_cancelled(cancel)
        user.email = email

    async def get_email_confirmed(self, user: Account,
                                  cancel: Optional[Event] = None) -> bool:
        self._ensure_open()
        require(user, 'user')
        raise_if_cancelled(cancel)
        return bool(user.email_confirmed)

    async def set_email_confirmed(self, user: Account, confirmed: bool,
                                  cancel: Optional[Event] = None) -> None:
        self._ensure_open()
        require(user, 'user')
        raise_if_cancelled(cancel)
        user.email_confirmed = confirmed

    async def get_normalized_email(self, user: Account,
                                   cancel: Optional[Event] = None) \
            -> Optional[str]:
        self._ensure_open()
        require(user, 'user')
        raise_if_cancelled(cancel)
        return user.normalized_email

    async def set_normalized_email(self, user: Account, normalized_email: str,
                                   cancel: Optional[Event] = None) -> None:
        self._ensure_open()
        require(user, 'user')
        require_text(normalized_email, 'normalized_email')
        raise_if_cancelled(cancel)
        user.normalized_email = normalized_email

    # Claims

    async def get_claims(self, user: Account,
                         cancel: Optional[Event] = None) -> List[Claim]:
        """Get the claims held by ``user``."""
        self._ensure_open()
        require(user, 'user')
        raise_if_cancelled(cancel)

        return [Claim(row.claim_type, row.claim_value) for row in user.claims]

    async def add_claims(self, user: Account, claims: Iterable[Claim],
                         cancel: Optional[Event] = None) -> None:
        """Attach ``claims`` to ``user``. Written by the next save."""
        self._ensure_open()
        require(user, 'user')
        require(claims, 'claims')
        raise_if_cancelled(cancel)

        for claim in claims:
            require(claim, 'claim')
            user.claims.append(AccountClaim(claim_type=claim.type,
                                            claim_value=claim.value))

    async def replace_claim(self, user: Account, claim: Claim,
                            new_claim: Claim,
                            cancel: Optional[Event] = None) -> None:
        """
        Replace every occurrence of ``claim`` on ``user`` with ``new_claim``.

        The new claim is added before the old one is removed, so replacing a
        claim with an equal claim removes it.
        """
        self._ensure_open()
        require(user, 'user')
        require(claim, 'claim')
        require(new_claim, 'new_claim')
        raise_if_cancelled(cancel)

        await self.add_claims(user, [new_claim])
        await self.remove_claims(user, [claim])

    async def remove_claims(self, user: Account, claims: Iterable[Claim],
                            cancel: Optional[Event] = None) -> None:
        """Detach every row matching one of ``claims`` from ``user``."""
        self._ensure_open()
        require(user, 'user')
        require(claims, 'claims')
        raise_if_cancelled(cancel)

        for claim in claims:
            require(claim, 'claim')
            matches = [row for row in user.claims
                       if row.claim_type == claim.type
                       and row.claim_value == claim.value]
            if user.id is not None:
                matches += await self.context.all(
                    select(AccountClaim).where(
                        AccountClaim.account_id == user.id,
                        AccountClaim.claim_type == claim.type,
                        AccountClaim.claim_value == claim.value
                    )
                )
            for row in _unique(matches):
                await self._remove_row(user.claims, row)

    async def get_users_for_claim(self, claim: Claim,
                                  cancel: Optional[Event] = None) \
            -> List[Account]:
        """Get all accounts holding ``claim``."""
        self._ensure_open()
        require(claim, 'claim')
        raise_if_cancelled(cancel)

        return await self.context.all(with_navigation(
            select(Account).where(Account.claims.any(and_(
                AccountClaim.claim_type == claim.type,
                AccountClaim.claim_value == claim.value
            )))
        ))

    # Logins

    async def add_login(self, user: Account, login: LoginInfo,
                        cancel: Optional[Event] = None) -> None:
        """Link an external identity to ``user``. Written by the next save."""
        self._ensure_open()
        require(user, 'user')
        require(login, 'login')
        require_text(login.login_provider, 'login_provider')
        require_text(login.provider_key, 'provider_key')
        raise_if_cancelled(cancel)

        user.logins.append(AccountLogin(
            login_provider=login.login_provider,
            provider_key=login.provider_key,
            provider_display_name=login.provider_display_name
        ))

    async def remove_login(self, user: Account, login_provider: str,
                           provider_key: str,
                           cancel: Optional[Event] = None) -> None:
        """Unlink an external identity from ``user``, if it is linked."""
        self._ensure_open()
        require(user, 'user')
        require_text(login_provider, 'login_provider')
        require_text(provider_key, 'provider_key')
        raise_if_cancelled(cancel)

        login = next((row for row in user.logins
                      if row.login_provider == login_provider
                      and row.provider_key == provider_key), None)
        if login is None:
            login = await self.context.first(
                select(AccountLogin).where(
                    AccountLogin.account_id == user.id,
                    AccountLogin.login_provider == login_provider,
                    AccountLogin.provider_key == provider_key
                )
            )
        if login is not None:
            await self._remove_row(user.logins, login)

    async def get_logins(self, user: Account,
                         cancel: Optional[Event] = None) -> List[LoginInfo]:
        """Get the external identities linked to ``user``."""
        self._ensure_open()
        require(user, 'user')
        raise_if_cancelled(cancel)

        rows = await self.context.all(
            select(AccountLogin).where(AccountLogin.account_id == user.id)
        )
        return [LoginInfo(row.login_provider, row.provider_key,
                          row.provider_display_name) for row in rows]

    async def find_by_login(self, login_provider: str, provider_key: str,
                            cancel: Optional[Event] = None) \
            -> Optional[Account]:
        """Get the account an external identity is linked to, or ``None``."""
        self._ensure_open()
        require_text(login_provider, 'login_provider')
        require_text(provider_key, 'provider_key')
        raise_if_cancelled(cancel)

        login = await self.context.first(
            select(AccountLogin).where(
                AccountLogin.login_provider == login_provider,
                AccountLogin.provider_key == provider_key
            )
        )
        if login is None:
            return None
        return await self.context.first(with_navigation(
            select(Account).where(Account.id == login.account_id)
        ))

    # Roles

    async def add_to_role(self, user: Account, role_name: str,
                          cancel: Optional[Event] = None) -> None:
        """
        Make ``user`` a member of the role named ``role_name``.

        Raises
        ------
        :class:`.NoSuchRole`
            If there is no such role.

        """
        self._ensure_open()
        require(user, 'user')
        require_text(role_name, 'role_name')
        raise_if_cancelled(cancel)

        role = await self._find_role(role_name)
        if role is None:
            error = self.describer.invalid_role_name(role_name)
            raise NoSuchRole(error.description)
        if self._membership(user, role) is None:
            user.roles.append(AccountRole(role=role))

    async def remove_from_role(self, user: Account, role_name: str,
                               cancel: Optional[Event] = None) -> None:
        """Drop ``user`` from the role named ``role_name``, if a member."""
        self._ensure_open()
        require(user, 'user')
        require_text(role_name, 'role_name')
        raise_if_cancelled(cancel)

        role = await self._find_role(role_name)
        if role is None:
            return
        link = self._membership(user, role) \
            or await self._stored_membership(user, role)
        if link is not None:
            await self._remove_row(user.roles, link)

    async def get_roles(self, user: Account,
                        cancel: Optional[Event] = None) -> List[str]:
        """Get the names of the roles ``user`` is a member of."""
        self._ensure_open()
        require(user, 'user')
        raise_if_cancelled(cancel)

        return [link.role.name for link in user.roles]

    async def is_in_role(self, user: Account, role_name: str,
                         cancel: Optional[Event] = None) -> bool:
        self._ensure_open()
        require(user, 'user')
        require_text(role_name, 'role_name')
        raise_if_cancelled(cancel)

        role = await self._find_role(role_name)
        if role is None:
            return False
        if self._membership(user, role) is not None:
            return True
        return await self._stored_membership(user, role) is not None

    async def get_users_in_role(self, role_name: str,
                                cancel: Optional[Event] = None) \
            -> List[Account]:
        """Get all members of the role named ``role_name``."""
        self._ensure_open()
        require_text(role_name, 'role_name')
        raise_if_cancelled(cancel)

        role = await self._find_role(role_name)
        if role is None:
            return []
        return await self.context.all(with_navigation(
            select(Account)
            .where(Account.roles.any(AccountRole.role_id == role.id))
        ))

    # Password

    async def get_password_hash(self, user: Account,
                                cancel: Optional[Event] = None) \
            -> Optional[str]:
        self._ensure_open()
        require(user, 'user')
        raise_if_cancelled(cancel)
        return user.password_hash

    async def set_password_hash(self, user: Account,
                                password_hash: Optional[str],
                                cancel: Optional[Event] = None) -> None:
        """Set the password hash. ``None`` removes the password."""
        self._ensure_open()
        require(user, 'user')
        raise_if_cancelled(cancel)
        user.password_hash = password_hash

    async def has_password(self, user: Account,
                           cancel: Optional[Event] = None) -> bool:
        self._ensure_open()
        require(user, 'user')
        raise_if_cancelled(cancel)
        return bool(user.password_hash)

    # Security stamp

    async def get_security_stamp(self, user: Account,
                                 cancel: Optional[Event] = None) \
            -> Optional[str]:
        self._ensure_open()
        require(user, 'user')
        raise_if_cancelled(cancel)
        return user.security_stamp

    async def set_security_stamp(self, user: Account, stamp: str,
                                 cancel: Optional[Event] = None) -> None:
        self._ensure_open()
        require(user, 'user')
        require_text(stamp, 'stamp')
        raise_if_cancelled(cancel)
        user.security_stamp = stamp

    # Phone number

    async def get_phone_number(self, user: Account,
                               cancel: Optional[Event] = None) \
            -> Optional[str]:
        self._ensure_open()
        require(user, 'user')
        raise_if_cancelled(cancel)
        return user.phone_number

    async def set_phone_number(self, user: Account,
                               phone_number: Optional[str],
                               cancel: Optional[Event] = None) -> None:
        self._ensure_open()
        require(user, 'user')
        raise_if_cancelled(cancel)
        user.phone_number = phone_number

    async def get_phone_number_confirmed(self, user: Account,
                                         cancel: Optional[Event] = None) \
            -> bool:
        self._ensure_open()
        require(user, 'user')
        raise_if_cancelled(cancel)
        return bool(user.phone_number_confirmed)

    async def set_phone_number_confirmed(self, user: Account, confirmed: bool,
                                         cancel: Optional[Event] = None) \
            -> None:
        self._ensure_open()
        require(user, 'user')
        raise_if_cancelled(cancel)
        user.phone_number_confirmed = confirmed

    # Two-factor

    async def get_two_factor_enabled(self, user: Account,
                                     cancel: Optional[Event] = None) -> bool:
        self._ensure_open()
        require(user, 'user')
        raise_if_cancelled(cancel)
        return bool(user.two_factor_enabled)

    async def set_two_factor_enabled(self, user: Account, enabled: bool,
                                     cancel: Optional[Event] = None) -> None:
        self._ensure_open()
        require(user, 'user')
        raise_if_cancelled(cancel)
        user.two_factor_enabled = enabled

    # Lockout

    async def get_lockout_enabled(self, user: Account,
                                  cancel: Optional[Event] = None) -> bool:
        self._ensure_open()
        require(user, 'user')
        raise_if_cancelled(cancel)
        return bool(user.lockout_enabled)

    async def set_lockout_enabled(self, user: Account, enabled: bool,
                                  cancel: Optional[Event] = None) -> None:
        self._ensure_open()
        require(user, 'user')
        raise_if_cancelled(cancel)
        user.lockout_enabled = enabled

    async def get_lockout_end_date(self, user: Account,
                                   cancel: Optional[Event] = None) \
            -> Optional[datetime]:
        """Get the end of the lockout, as an aware UTC datetime."""
        self._ensure_open()
        require(user, 'user')
        raise_if_cancelled(cancel)
        return _utc(user.lockout_end)

    async def set_lockout_end_date(self, user: Account,
                                   lockout_end: Optional[datetime],
                                   cancel: Optional[Event] = None) -> None:
        """
        Lock ``user`` out until ``lockout_end``.

        Naive datetimes are taken to be in UTC. ``None`` lifts the lockout.
        """
        self._ensure_open()
        require(user, 'user')
        raise_if_cancelled(cancel)
        user.lockout_end = _utc(lockout_end)

    async def get_access_failed_count(self, user: Account,
                                      cancel: Optional[Event] = None) -> int:
        self._ensure_open()
        require(user, 'user')
        raise_if_cancelled(cancel)
        return user.access_failed_count or 0

    async def increment_access_failed_count(self, user: Account,
                                            cancel: Optional[Event] = None) \
            -> int:
        """Record a failed access attempt and return the new count."""
        self._ensure_open()
        require(user, 'user')
        raise_if_cancelled(cancel)
        user.access_failed_count = (user.access_failed_count or 0) + 1
        return user.access_failed_count

    async def reset_access_failed_count(self, user: Account,
                                        cancel: Optional[Event] = None) \
            -> None:
        self._ensure_open()
        require(user, 'user')
        raise_if_cancelled(cancel)
        user.access_failed_count = 0

    # Tokens

    async def get_token(self, user: Account, login_provider: str, name: str,
                        cancel: Optional[Event] = None) -> Optional[str]:
        """Get the value of a token, or ``None`` if there is no such token."""
        self._ensure_open()
        require(user, 'user')
        require_text(login_provider, 'login_provider')
        require_text(name, 'name')
        raise_if_cancelled(cancel)

        token = await self._find_token(user, login_provider, name)
        return token.value if token is not None else None

    async def set_token(self, user: Account, login_provider: str, name: str,
                        value: Optional[str],
                        cancel: Optional[Event] = None) -> None:
        """Set the value of a token, creating it if it does not exist."""
        self._ensure_open()
        require(user, 'user')
        require_text(login_provider, 'login_provider')
        require_text(name, 'name')
        raise_if_cancelled(cancel)

        token = await self._find_token(user, login_provider, name)
        if token is None:
            user.tokens.append(AccountToken(login_provider=login_provider,
                                            name=name, value=value))
        else:
            token.value = value

    async def remove_token(self, user: Account, login_provider: str,
                           name: str, cancel: Optional[Event] = None) -> None:
        self._ensure_open()
        require(user, 'user')
        require_text(login_provider, 'login_provider')
        require_text(name, 'name')
        raise_if_cancelled(cancel)

        token = await self._find_token(user, login_provider, name)
        if token is not None:
            await self._remove_row(user.tokens, token)

    # Authenticator key

    async def get_authenticator_key(self, user: Account,
                                    cancel: Optional[Event] = None) \
            -> Optional[str]:
        self._ensure_open()
        require(user, 'user')
        raise_if_cancelled(cancel)
        return await self.get_token(user, INTERNAL_LOGIN_PROVIDER,
                                    AUTHENTICATOR_KEY_TOKEN_NAME)

    async def set_authenticator_key(self, user: Account, key: str,
                                    cancel: Optional[Event] = None) -> None:
        self._ensure_open()
        require(user, 'user')
        raise_if_cancelled(cancel)
        await self.set_token(user, INTERNAL_LOGIN_PROVIDER,
                             AUTHENTICATOR_KEY_TOKEN_NAME, key)

    # Recovery codes

    async def replace_codes(self, user: Account, recovery_codes: Iterable[str],
                            cancel: Optional[Event] = None) -> None:
        """Replace all of the recovery codes of ``user``."""
        self._ensure_open()
        require(user, 'user')
        require(recovery_codes, 'recovery_codes')
        raise_if_cancelled(cancel)

        merged = _RECOVERY_CODE_SEPARATOR.join(recovery_codes)
        await self.set_token(user, INTERNAL_LOGIN_PROVIDER,
                             RECOVERY_CODE_TOKEN_NAME, merged)

    async def redeem_code(self, user: Account, code: str,
                          cancel: Optional[Event] = None) -> bool:
        """
        Use up a recovery code.

        Returns
        -------
        bool
            ``True`` if ``code`` was one of the recovery codes of ``user``;
            it is removed. ``False`` otherwise.

        """
        self._ensure_open()
        require(user, 'user')
        require_text(code, 'code')
        raise_if_cancelled(cancel)

        codes = (await self._recovery_codes(user)) or ''
        remaining = codes.split(_RECOVERY_CODE_SEPARATOR)
        if code not in remaining:
            return False
        remaining.remove(code)
        await self.replace_codes(user, remaining)
        return True

    async def count_codes(self, user: Account,
                          cancel: Optional[Event] = None) -> int:
        """Count the recovery codes ``user`` has left."""
        self._ensure_open()
        require(user, 'user')
        raise_if_cancelled(cancel)

        codes = await self._recovery_codes(user)
        if not codes:
            return 0
        return len([c for c in codes.split(_RECOVERY_CODE_SEPARATOR) if c])

    # Queries

    @property
    def users(self) -> Select:
        """
        A statement selecting every account, with navigation loaded.

        Refine it with ``.where()``, ``.order_by()`` and so on, and run it
        with :meth:`query`.
        """
        self._ensure_open()
        return with_navigation(select(Account))

    async def query(self, statement: Select,
                    cancel: Optional[Event] = None) -> List[Account]:
        """Run a statement built from :attr:`users`."""
        self._ensure_open()
        require(statement, 'statement')
        raise_if_cancelled(cancel)

        return await self.context.all(statement)

    # Helpers

    async def _find_role(self, role_name: str) -> Optional[Role]:
        return await self.context.first(
            select(Role)
            .where(or_(Role.normalized_name == role_name,
                       Role.name == role_name))
            .order_by(Role.normalized_name != role_name)
        )

    def _membership(self, user: Account, role: Role) -> Optional[AccountRole]:
        for link in user.roles:
            if link.role is role or \
                    (link.role_id is not None and link.role_id == role.id):
                return link
        return None

    async def _stored_membership(self, user: Account, role: Role) \
            -> Optional[AccountRole]:
        return await self.context.first(
            select(AccountRole).where(AccountRole.account_id == user.id,
                                      AccountRole.role_id == role.id)
        )

    async def _find_token(self, user: Account, login_provider: str,
                          name: str) -> Optional[AccountToken]:
        for token in user.tokens:
            if token.login_provider == login_provider and token.name == name:
                return token
        return await self.context.first(
            select(AccountToken).where(
                AccountToken.account_id == user.id,
                AccountToken.login_provider == login_provider,
                AccountToken.name == name
            )
        )

    async def _recovery_codes(self, user: Account) -> Optional[str]:
        token = await self._find_token(user, INTERNAL_LOGIN_PROVIDER,
                                       RECOVERY_CODE_TOKEN_NAME)
        return token.value if token is not None else None

    async def _remove_row(self, collection: List[Any], row: Any) -> None:
        """Detach ``row`` from ``collection`` and delete it if it is stored."""
        if row in collection:
            collection.remove(row)
        if inspect(row).persistent:
            await self.context.remove(row)


def _unique(rows: List[Any]) -> List[Any]:
    seen = set()
    unique = []
    for row in rows:
        if id(row) not in seen:
            seen.add(id(row))
            unique.append(row)
    return unique
