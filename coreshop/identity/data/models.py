"""Identity database models."""

import uuid
from typing import Any, Optional

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Index, \
    Integer, String, Text
from sqlalchemy.orm import declarative_base, relationship

SCHEMA = 'CoreShopping'
"""Schema namespace of every identity table.

Engines may translate it to another name (or to none, for SQLite); see
:func:`.util.create_engine`.
"""

Base = declarative_base()


def _new_id() -> str:
    return str(uuid.uuid4())


class Account(Base):  # type: ignore
    """
    A registered user identity.

    +------------------------+---------------+------+-----+---------------+
    | Field                  | Type          | Null | Key | Index         |
    +------------------------+---------------+------+-----+---------------+
    | id                     | varchar(36)   | NO   | PRI |               |
    | user_name              | varchar(256)  | YES  |     |               |
    | normalized_user_name   | varchar(256)  | YES  | UNI | UserNameIndex |
    | email                  | varchar(256)  | YES  |     |               |
    | normalized_email       | varchar(256)  | YES  | MUL | EmailIndex    |
    | concurrency_stamp      | varchar(36)   | NO   |     |               |
    +------------------------+---------------+------+-----+---------------+

    The concurrency stamp is the optimistic concurrency token: updates and
    deletes only match the row if the stamp is unchanged since it was loaded.
    """

    __tablename__ = 'accounts'
    __table_args__ = (
        Index('UserNameIndex', 'normalized_user_name', unique=True),
        Index('EmailIndex', 'normalized_email'),
        {'schema': SCHEMA},
    )

    id = Column(String(36), primary_key=True, default=_new_id)
    user_name = Column(String(256))
    normalized_user_name = Column(String(256))
    email = Column(String(256))
    normalized_email = Column(String(256))
    email_confirmed = Column(Boolean, nullable=False, default=False)
    password_hash = Column(Text, nullable=True)
    security_stamp = Column(Text)
    concurrency_stamp = Column(String(36), nullable=False, default=_new_id)
    phone_number = Column(Text)
    phone_number_confirmed = Column(Boolean, nullable=False, default=False)
    two_factor_enabled = Column(Boolean, nullable=False, default=False)
    lockout_end = Column(DateTime(timezone=True), nullable=True)
    """End of the lockout period, in UTC. Not locked out if in the past."""
    lockout_enabled = Column(Boolean, nullable=False, default=False)
    access_failed_count = Column(Integer, nullable=False, default=0)

    claims = relationship('AccountClaim', back_populates='account',
                          cascade='all, delete-orphan', passive_deletes=True)
    logins = relationship('AccountLogin', back_populates='account',
                          cascade='all, delete-orphan', passive_deletes=True)
    tokens = relationship('AccountToken', back_populates='account',
                          cascade='all, delete-orphan', passive_deletes=True)
    roles = relationship('AccountRole', back_populates='account',
                         cascade='all, delete-orphan', passive_deletes=True)

    __mapper_args__ = {
        'version_id_col': concurrency_stamp,
        'version_id_generator': False
    }

    def __init__(self, user_name: Optional[str] = None, **kwargs: Any) -> None:
        kwargs.setdefault('id', _new_id())
        kwargs.setdefault('concurrency_stamp', _new_id())
        kwargs.setdefault('access_failed_count', 0)
        for flag in ('email_confirmed', 'phone_number_confirmed',
                     'two_factor_enabled', 'lockout_enabled'):
            kwargs.setdefault(flag, False)
        for collection in ('claims', 'logins', 'tokens', 'roles'):
            kwargs.setdefault(collection, [])
        super().__init__(user_name=user_name, **kwargs)

    def __str__(self) -> str:
        return str(self.user_name)

    def __repr__(self) -> str:
        return f'<Account id={self.id} user_name={self.user_name!r}>'


class AccountClaim(Base):  # type: ignore
    """A claim held by an :class:`Account`."""

    __tablename__ = 'account_claims'
    __table_args__ = {'schema': SCHEMA}

    id = Column(Integer, primary_key=True, autoincrement=True)
    account_id = Column(
        ForeignKey(f'{SCHEMA}.accounts.id', ondelete='CASCADE'),
        nullable=False, index=True
    )
    claim_type = Column(Text)
    claim_value = Column(Text)

    account = relationship('Account', back_populates='claims')


class AccountLogin(Base):  # type: ignore
    """
    An external identity linked to an :class:`Account`.

    ``(login_provider, provider_key)`` identifies the external identity
    system-wide, so one external identity links to at most one account.
    """

    __tablename__ = 'account_logins'
    __table_args__ = {'schema': SCHEMA}

    login_provider = Column(String(128), primary_key=True)
    provider_key = Column(String(128), primary_key=True)
    provider_display_name = Column(Text)
    account_id = Column(
        ForeignKey(f'{SCHEMA}.accounts.id', ondelete='CASCADE'),
        nullable=False, index=True
    )

    account = relationship('Account', back_populates='logins')


class AccountToken(Base):  # type: ignore
    """
    A named secret held for an :class:`Account`.

    Holds OAuth tokens from external providers, as well as internal secrets
    such as the authenticator key and the two-factor recovery codes.
    """

    __tablename__ = 'account_tokens'
    __table_args__ = {'schema': SCHEMA}

    account_id = Column(
        ForeignKey(f'{SCHEMA}.accounts.id', ondelete='CASCADE'),
        primary_key=True
    )
    login_provider = Column(String(128), primary_key=True)
    name = Column(String(128), primary_key=True)
    value = Column(Text)

    account = relationship('Account', back_populates='tokens')


class AccountRole(Base):  # type: ignore
    """Membership of an :class:`Account` in a :class:`Role`."""

    __tablename__ = 'account_roles'
    __table_args__ = {'schema': SCHEMA}

    account_id = Column(
        ForeignKey(f'{SCHEMA}.accounts.id', ondelete='CASCADE'),
        primary_key=True
    )
    role_id = Column(
        ForeignKey(f'{SCHEMA}.roles.id', ondelete='CASCADE'),
        primary_key=True, index=True
    )

    account = relationship('Account', back_populates='roles')
    role = relationship('Role', back_populates='users')


class Role(Base):  # type: ignore
    """A named authorization group."""

    __tablename__ = 'roles'
    __table_args__ = (
        Index('RoleNameIndex', 'normalized_name', unique=True),
        {'schema': SCHEMA},
    )

    id = Column(String(36), primary_key=True, default=_new_id)
    name = Column(String(256))
    normalized_name = Column(String(256))
    concurrency_stamp = Column(String(36), nullable=False, default=_new_id)

    users = relationship('AccountRole', back_populates='role',
                         cascade='all, delete-orphan', passive_deletes=True)
    claims = relationship('RoleClaim', back_populates='role',
                          cascade='all, delete-orphan', passive_deletes=True)

    __mapper_args__ = {
        'version_id_col': concurrency_stamp,
        'version_id_generator': False
    }

    def __init__(self, name: Optional[str] = None, **kwargs: Any) -> None:
        kwargs.setdefault('id', _new_id())
        kwargs.setdefault('concurrency_stamp', _new_id())
        kwargs.setdefault('users', [])
        kwargs.setdefault('claims', [])
        super().__init__(name=name, **kwargs)

    def __str__(self) -> str:
        return str(self.name)

    def __repr__(self) -> str:
        return f'<Role id={self.id} name={self.name!r}>'


class RoleClaim(Base):  # type: ignore
    """A claim granted to every member of a :class:`Role`."""

    __tablename__ = 'role_claims'
    __table_args__ = {'schema': SCHEMA}

    id = Column(Integer, primary_key=True, autoincrement=True)
    role_id = Column(
        ForeignKey(f'{SCHEMA}.roles.id', ondelete='CASCADE'),
        nullable=False, index=True
    )
    claim_type = Column(Text)
    claim_value = Column(Text)

    role = relationship('Role', back_populates='claims')
