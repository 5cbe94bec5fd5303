"""
Relational persistence for accounts and roles.

The schema lives in :mod:`.models`; :class:`.context.IdentityContext` is the
unit of work the stores read and write through.
"""

from . import models, util, context
from .context import IdentityContext
from .util import create_engine, session_factory, create_all, drop_all, \
    is_available
