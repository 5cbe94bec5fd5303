"""Generate synthetic data for testing and development purposes."""

import asyncio
import hashlib
import logging
import random
import uuid

from mimesis import Datetime, Locale, Person, Text
from pytz import UTC

from coreshop.identity import data
from coreshop.identity.app_logging import setup_logger
from coreshop.identity.data.models import Account, Role
from coreshop.identity.domain import Claim, LoginInfo
from coreshop.identity.stores import RoleStore, UserStore

logger = logging.getLogger(__name__)

LOCALES = list(Locale)
COUNT = 500
ROLES = ['Admin', 'Manager', 'Customer', 'Support']
PROVIDERS = ['Google', 'Microsoft', 'GitHub']


def _get_locale() -> Locale:
    return LOCALES[random.randint(0, len(LOCALES) - 1)]


async def _create_roles(engine) -> None:
    async with RoleStore(data.IdentityContext.from_engine(engine)) as roles:
        for name in ROLES:
            await roles.create(Role(name, normalized_name=name.upper()))


async def _create_account(users: UserStore, i: int) -> str:
    locale = _get_locale()
    person = Person(locale)
    user_name = f'{person.username()}{i}'
    email = f'{i}.{person.email()}'
    password = person.password()

    account = Account(user_name,
                      normalized_user_name=user_name.upper(),
                      email=email,
                      normalized_email=email.upper(),
                      email_confirmed=random.randint(0, 100) < 90,
                      phone_number=person.phone_number(),
                      security_stamp=uuid.uuid4().hex.upper(),
                      lockout_enabled=True)
    await users.set_password_hash(
        account, hashlib.sha256(password.encode('utf-8')).hexdigest()
    )
    if random.randint(0, 100) < 2:
        end = Datetime(locale).datetime(start=2030, end=2031)
        await users.set_lockout_end_date(account, end.replace(tzinfo=UTC))

    await users.add_claims(account, [
        Claim('locale', locale.value),
        Claim('interest', Text(locale).word())
    ])
    if random.randint(0, 100) < 30:
        provider = random.choice(PROVIDERS)
        await users.add_login(account, LoginInfo(provider, uuid.uuid4().hex,
                                                 provider))
    if random.randint(0, 100) < 10:
        await users.set_two_factor_enabled(account, True)
        await users.set_authenticator_key(account, uuid.uuid4().hex.upper())
        await users.replace_codes(account, [uuid.uuid4().hex[:8]
                                            for _ in range(10)])
    await users.create(account)

    await users.add_to_role(account, random.choice(ROLES).upper())
    await users.update(account)
    return '\t'.join([email, user_name, password])


async def main() -> None:
    setup_logger()
    engine = data.create_engine()
    await data.create_all(engine)
    await _create_roles(engine)

    async with UserStore(data.IdentityContext.from_engine(engine)) as users:
        for i in range(COUNT):
            print(await _create_account(users, i))
    await engine.dispose()
    logger.info('Generated %i accounts', COUNT)


if __name__ == '__main__':
    asyncio.run(main())
