"""Exceptions."""

import asyncio
from typing import Optional


class InvalidArgument(ValueError):
    """A required argument was missing, empty or blank."""

    def __init__(self, param: str, message: Optional[str] = None) -> None:
        self.param = param
        super().__init__(message or f'{param} cannot be None or empty')


class OperationCancelled(asyncio.CancelledError):
    """The caller cancelled the operation before any work was done."""


class InvalidOperation(RuntimeError):
    """The operation is not valid given the current state of the store."""


class NoSuchRole(InvalidOperation):
    """Role does not exist."""


class ConcurrencyConflict(RuntimeError):
    """A row was changed by someone else since it was loaded."""


class StoreDisposed(RuntimeError):
    """The store has been closed and can no longer be used."""
