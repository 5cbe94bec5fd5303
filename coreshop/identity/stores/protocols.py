"""
Narrow storage contracts consumed by the identity engine.

Each protocol covers one concern, so that a consumer can depend on exactly
the capabilities it uses. :class:`.users.UserStore` satisfies every user
protocol; :class:`.roles.RoleStore` satisfies :class:`RoleStoreContract`.

Every operation is a coroutine and takes an optional ``cancel`` event as its
last argument. If the event is already set, the operation raises
:class:`.OperationCancelled` without touching the database.
"""

from asyncio import Event
from datetime import datetime
from typing import Iterable, List, Optional, Protocol, runtime_checkable

from sqlalchemy import Select

from ..data.models import Account, Role
from ..domain import Claim, IdentityResult, LoginInfo


@runtime_checkable
class UserStoreContract(Protocol):
    """Create, update, delete and look up accounts."""

    async def create(self, user: Account,
                     cancel: Optional[Event] = None) -> IdentityResult: ...

    async def update(self, user: Account,
                     cancel: Optional[Event] = None) -> IdentityResult: ...

    async def delete(self, user: Account,
                     cancel: Optional[Event] = None) -> IdentityResult: ...

    async def find_by_id(self, user_id: str,
                         cancel: Optional[Event] = None) -> Optional[Account]:
        ...

    async def find_by_name(self, normalized_user_name: str,
                           cancel: Optional[Event] = None) \
            -> Optional[Account]: ...

    async def get_user_id(self, user: Account,
                          cancel: Optional[Event] = None) -> str: ...

    async def get_user_name(self, user: Account,
                            cancel: Optional[Event] = None) -> Optional[str]:
        ...

    async def set_user_name(self, user: Account, user_name: str,
                            cancel: Optional[Event] = None) -> None: ...

    async def get_normalized_user_name(self, user: Account,
                                       cancel: Optional[Event] = None) \
            -> Optional[str]: ...

    async def set_normalized_user_name(self, user: Account,
                                       normalized_name: str,
                                       cancel: Optional[Event] = None) \
            -> None: ...


@runtime_checkable
class UserEmailStore(Protocol):
    """Email addresses and their confirmation."""

    async def find_by_email(self, normalized_email: str,
                            cancel: Optional[Event] = None) \
            -> Optional[Account]: ...

    async def get_email(self, user: Account,
                        cancel: Optional[Event] = None) -> Optional[str]: ...

    async def set_email(self, user: Account, email: str,
                        cancel: Optional[Event] = None) -> None: ...

    async def get_email_confirmed(self, user: Account,
                                  cancel: Optional[Event] = None) -> bool: ...

    async def set_email_confirmed(self, user: Account, confirmed: bool,
                                  cancel: Optional[Event] = None) -> None: ...

    async def get_normalized_email(self, user: Account,
                                   cancel: Optional[Event] = None) \
            -> Optional[str]: ...

    async def set_normalized_email(self, user: Account, normalized_email: str,
                                   cancel: Optional[Event] = None) -> None:
        ...


@runtime_checkable
class UserClaimStore(Protocol):
    """Claims held by accounts."""

    async def get_claims(self, user: Account,
                         cancel: Optional[Event] = None) -> List[Claim]: ...

    async def add_claims(self, user: Account, claims: Iterable[Claim],
                         cancel: Optional[Event] = None) -> None: ...

    async def replace_claim(self, user: Account, claim: Claim,
                            new_claim: Claim,
                            cancel: Optional[Event] = None) -> None: ...

    async def remove_claims(self, user: Account, claims: Iterable[Claim],
                            cancel: Optional[Event] = None) -> None: ...

    async def get_users_for_claim(self, claim: Claim,
                                  cancel: Optional[Event] = None) \
            -> List[Account]: ...


@runtime_checkable
class UserLoginStore(Protocol):
    """External identities linked to accounts."""

    async def add_login(self, user: Account, login: LoginInfo,
                        cancel: Optional[Event] = None) -> None: ...

    async def remove_login(self, user: Account, login_provider: str,
                           provider_key: str,
                           cancel: Optional[Event] = None) -> None: ...

    async def get_logins(self, user: Account,
                         cancel: Optional[Event] = None) -> List[LoginInfo]:
        ...

    async def find_by_login(self, login_provider: str, provider_key: str,
                            cancel: Optional[Event] = None) \
            -> Optional[Account]: ...


@runtime_checkable
class UserRoleStore(Protocol):
    """Role membership of accounts."""

    async def add_to_role(self, user: Account, role_name: str,
                          cancel: Optional[Event] = None) -> None: ...

    async def remove_from_role(self, user: Account, role_name: str,
                               cancel: Optional[Event] = None) -> None: ...

    async def get_roles(self, user: Account,
                        cancel: Optional[Event] = None) -> List[str]: ...

    async def is_in_role(self, user: Account, role_name: str,
                         cancel: Optional[Event] = None) -> bool: ...

    async def get_users_in_role(self, role_name: str,
                                cancel: Optional[Event] = None) \
            -> List[Account]: ...


@runtime_checkable
class UserPasswordStore(Protocol):
    """Password hashes. Hashing itself is the caller's business."""

    async def get_password_hash(self, user: Account,
                                cancel: Optional[Event] = None) \
            -> Optional[str]: ...

    async def set_password_hash(self, user: Account,
                                password_hash: Optional[str],
                                cancel: Optional[Event] = None) -> None: ...

    async def has_password(self, user: Account,
                           cancel: Optional[Event] = None) -> bool: ...


@runtime_checkable
class UserSecurityStampStore(Protocol):
    """The stamp that changes whenever credentials change."""

    async def get_security_stamp(self, user: Account,
                                 cancel: Optional[Event] = None) \
            -> Optional[str]: ...

    async def set_security_stamp(self, user: Account, stamp: str,
                                 cancel: Optional[Event] = None) -> None: ...


@runtime_checkable
class UserPhoneNumberStore(Protocol):
    """Phone numbers and their confirmation."""

    async def get_phone_number(self, user: Account,
                               cancel: Optional[Event] = None) \
            -> Optional[str]: ...

    async def set_phone_number(self, user: Account,
                               phone_number: Optional[str],
                               cancel: Optional[Event] = None) -> None: ...

    async def get_phone_number_confirmed(self, user: Account,
                                         cancel: Optional[Event] = None) \
            -> bool: ...

    async def set_phone_number_confirmed(self, user: Account, confirmed: bool,
                                         cancel: Optional[Event] = None) \
            -> None: ...


@runtime_checkable
class UserTwoFactorStore(Protocol):
    """Whether two-factor authentication is on for an account."""

    async def get_two_factor_enabled(self, user: Account,
                                     cancel: Optional[Event] = None) -> bool:
        ...

    async def set_two_factor_enabled(self, user: Account, enabled: bool,
                                     cancel: Optional[Event] = None) -> None:
        ...


@runtime_checkable
class UserLockoutStore(Protocol):
    """Failed-attempt counting and lockout windows."""

    async def get_lockout_enabled(self, user: Account,
                                  cancel: Optional[Event] = None) -> bool: ...

    async def set_lockout_enabled(self, user: Account, enabled: bool,
                                  cancel: Optional[Event] = None) -> None: ...

    async def get_lockout_end_date(self, user: Account,
                                   cancel: Optional[Event] = None) \
            -> Optional[datetime]: ...

    async def set_lockout_end_date(self, user: Account,
                                   lockout_end: Optional[datetime],
                                   cancel: Optional[Event] = None) -> None:
        ...

    async def get_access_failed_count(self, user: Account,
                                      cancel: Optional[Event] = None) -> int:
        ...

    async def increment_access_failed_count(self, user: Account,
                                            cancel: Optional[Event] = None) \
            -> int: ...

    async def reset_access_failed_count(self, user: Account,
                                        cancel: Optional[Event] = None) \
            -> None: ...


@runtime_checkable
class UserAuthenticationTokenStore(Protocol):
    """Named per-account secrets, keyed by provider and name."""

    async def get_token(self, user: Account, login_provider: str, name: str,
                        cancel: Optional[Event] = None) -> Optional[str]: ...

    async def set_token(self, user: Account, login_provider: str, name: str,
                        value: Optional[str],
                        cancel: Optional[Event] = None) -> None: ...

    async def remove_token(self, user: Account, login_provider: str,
                           name: str, cancel: Optional[Event] = None) -> None:
        ...


@runtime_checkable
class UserAuthenticatorKeyStore(Protocol):
    """The shared secret of an authenticator app."""

    async def get_authenticator_key(self, user: Account,
                                    cancel: Optional[Event] = None) \
            -> Optional[str]: ...

    async def set_authenticator_key(self, user: Account, key: str,
                                    cancel: Optional[Event] = None) -> None:
        ...


@runtime_checkable
class UserTwoFactorRecoveryCodeStore(Protocol):
    """Single-use recovery codes for two-factor sign-in."""

    async def replace_codes(self, user: Account, recovery_codes: Iterable[str],
                            cancel: Optional[Event] = None) -> None: ...

    async def redeem_code(self, user: Account, code: str,
                          cancel: Optional[Event] = None) -> bool: ...

    async def count_codes(self, user: Account,
                          cancel: Optional[Event] = None) -> int: ...


@runtime_checkable
class QueryableUserStore(Protocol):
    """Ad hoc queries over all accounts."""

    @property
    def users(self) -> Select: ...

    async def query(self, statement: Select,
                    cancel: Optional[Event] = None) -> List[Account]: ...


@runtime_checkable
class RoleStoreContract(Protocol):
    """Create, update, delete and look up roles."""

    async def create(self, role: Role,
                     cancel: Optional[Event] = None) -> IdentityResult: ...

    async def update(self, role: Role,
                     cancel: Optional[Event] = None) -> IdentityResult: ...

    async def delete(self, role: Role,
                     cancel: Optional[Event] = None) -> IdentityResult: ...

    async def find_by_id(self, role_id: str,
                         cancel: Optional[Event] = None) -> Optional[Role]: ...

    async def find_by_name(self, normalized_role_name: str,
                           cancel: Optional[Event] = None) -> Optional[Role]:
        ...

    async def get_role_id(self, role: Role,
                          cancel: Optional[Event] = None) -> str: ...

    async def get_role_name(self, role: Role,
                            cancel: Optional[Event] = None) -> Optional[str]:
        ...

    async def set_role_name(self, role: Role, role_name: str,
                            cancel: Optional[Event] = None) -> None: ...

    async def get_normalized_role_name(self, role: Role,
                                       cancel: Optional[Event] = None) \
            -> Optional[str]: ...

    async def set_normalized_role_name(self, role: Role, normalized_name: str,
                                       cancel: Optional[Event] = None) \
            -> None: ...
