"""Special pytest fixture configuration file.

This file automatically provides all fixtures defined in it to all
pytest tests in this directory and sub directories.
"""
import itertools

import pytest
import pytest_asyncio
from mimesis import Locale, Person

from coreshop.identity.data import IdentityContext
from coreshop.identity.data.models import Account, Role
from coreshop.identity.data.tests.util import temporary_db
from coreshop.identity.stores import RoleStore, UserStore


@pytest_asyncio.fixture
async def engine():
    async with temporary_db() as engine:
        yield engine


@pytest_asyncio.fixture
async def user_store(engine):
    store = UserStore(IdentityContext.from_engine(engine))
    yield store
    await store.close()


@pytest_asyncio.fixture
async def role_store(engine):
    store = RoleStore(IdentityContext.from_engine(engine))
    yield store
    await store.close()


@pytest.fixture
def person():
    return Person(Locale.EN)


@pytest.fixture
def make_account(person):
    """Build unsaved accounts with synthetic names and addresses."""
    serial = itertools.count()

    def _make_account(**kwargs) -> Account:
        user_name = kwargs.pop('user_name',
                               f'{person.username()}{next(serial)}')
        email = kwargs.pop('email', person.email())
        return Account(user_name,
                       normalized_user_name=user_name.upper(),
                       email=email,
                       normalized_email=email.upper(),
                       **kwargs)
    return _make_account


@pytest.fixture
def make_role():
    def _make_role(name: str) -> Role:
        return Role(name, normalized_name=name.upper())
    return _make_role
