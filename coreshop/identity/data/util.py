"""Engine setup and schema helpers for the identity database."""

import logging
from typing import Any, Optional

from sqlalchemy import event, text
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, \
    async_sessionmaker, create_async_engine

from .. import config
from .models import Base, SCHEMA

logger = logging.getLogger(__name__)


def _enable_sqlite_foreign_keys(dbapi_connection: Any,
                                connection_record: Any) -> None:
    # SQLite ignores ON DELETE CASCADE unless asked per connection.
    cursor = dbapi_connection.cursor()
    cursor.execute('PRAGMA foreign_keys=ON')
    cursor.close()


def create_engine(uri: Optional[str] = None, echo: Optional[bool] = None,
                  schema: Optional[str] = None) -> AsyncEngine:
    """
    Create an async engine for the identity database.

    Parameters
    ----------
    uri : str
        SQLAlchemy URI with an asyncio driver. Defaults to
        :data:`.config.DATABASE_URI`.
    echo : bool
        Log emitted SQL. Defaults to :data:`.config.ECHO_SQL`.
    schema : str
        Schema that holds the identity tables. Defaults to
        :data:`.config.SCHEMA`; always dropped for SQLite.

    Returns
    -------
    :class:`AsyncEngine`

    """
    uri = uri or config.DATABASE_URI
    echo = config.ECHO_SQL if echo is None else echo
    is_sqlite = uri.startswith('sqlite')
    if is_sqlite:
        target_schema = None
    else:
        target_schema = schema or config.SCHEMA

    kwargs: dict = {
        'echo': echo,
        'execution_options': {'schema_translate_map': {SCHEMA: target_schema}}
    }
    if not is_sqlite:
        kwargs['pool_pre_ping'] = config.POOL_PRE_PING
    engine = create_async_engine(uri, **kwargs)
    if is_sqlite:
        event.listen(engine.sync_engine, 'connect',
                     _enable_sqlite_foreign_keys)
    logger.debug('New identity engine for %s', engine.url.render_as_string())
    return engine


def session_factory(engine: AsyncEngine) -> async_sessionmaker:
    """
    Get a factory for request-scoped sessions bound to ``engine``.

    Loaded entities are not expired on commit, so that they remain usable
    after a save without another round-trip.
    """
    return async_sessionmaker(bind=engine, class_=AsyncSession,
                              expire_on_commit=False)


async def create_all(engine: AsyncEngine) -> None:
    """Create all identity tables in the database."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def drop_all(engine: AsyncEngine) -> None:
    """Drop all identity tables in the database."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


async def is_available(engine: AsyncEngine) -> bool:
    """Check our connection to the database."""
    try:
        async with engine.connect() as conn:
            await conn.execute(text('SELECT 1'))
    except Exception as e:
        logger.error('Encountered an error talking to database: %s', e)
        return False
    return True
