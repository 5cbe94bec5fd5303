"""
Account and role stores.

:class:`.users.UserStore` and :class:`.roles.RoleStore` implement the
capability contracts in :mod:`.protocols` over an :class:`.IdentityContext`.
"""

from . import protocols
from .roles import RoleStore
from .users import UserStore, INTERNAL_LOGIN_PROVIDER, \
    AUTHENTICATOR_KEY_TOKEN_NAME, RECOVERY_CODE_TOKEN_NAME
