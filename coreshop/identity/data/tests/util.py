"""Testing helpers."""

import os
import shutil
import tempfile
from contextlib import asynccontextmanager
from typing import AsyncIterator

from sqlalchemy.ext.asyncio import AsyncEngine

from .. import util


@asynccontextmanager
async def temporary_db(create: bool = True) -> AsyncIterator[AsyncEngine]:
    """Provide a throwaway sqlite database file for testing purposes."""
    db_path = tempfile.mkdtemp()
    engine = util.create_engine(
        f'sqlite+aiosqlite:///{os.path.join(db_path, "identity.db")}',
        echo=False
    )
    try:
        if create:
            await util.create_all(engine)
        yield engine
    finally:
        await engine.dispose()
        shutil.rmtree(db_path)
