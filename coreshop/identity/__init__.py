"""
CoreShop identity store.

This package persists the user and role data of the CoreShop identity
engine: accounts, their claims, external logins, role memberships and
authentication tokens, and the roles themselves. Password hashing, token
generation and sign-in flows belong to the engine; this package only stores
and retrieves what the engine hands it.

The stores speak to the database through an
:class:`.data.context.IdentityContext`, a unit of work over one SQLAlchemy
asyncio session. Every operation is a coroutine, takes an optional
cancellation event, and validates its arguments before doing any work.
Updates and deletes are checked against the row's concurrency stamp, and
report a conflicting change as a failed :class:`.domain.IdentityResult`
rather than overwriting it.

Quick start
-----------

1. Install this package into your virtual environment.
2. Point ``IDENTITY_DATABASE_URI`` at your database (any asyncio driver
   SQLAlchemy supports; SQLite via ``aiosqlite`` is the default).
3. Create the tables, and open one store per request:

.. code-block:: python

   from coreshop.identity import data
   from coreshop.identity.data.models import Account
   from coreshop.identity.stores import UserStore

   engine = data.create_engine()
   await data.create_all(engine)

   async with UserStore(data.IdentityContext.from_engine(engine)) as users:
       account = Account('jane', normalized_user_name='JANE')
       result = await users.create(account)
       await users.add_to_role(account, 'ADMIN')
       result = await users.update(account)

"""

from .domain import Claim, LoginInfo, IdentityError, IdentityResult, \
    ErrorDescriber, SUCCESS
from .exceptions import InvalidArgument, OperationCancelled, \
    InvalidOperation, NoSuchRole, ConcurrencyConflict, StoreDisposed
