"""Value types exchanged between the identity stores and their callers."""

from typing import NamedTuple, Optional, Sequence


class Claim(NamedTuple):
    """A (type, value) attribute attached to an account or role."""

    type: str
    """Claim type, e.g. a URI such as ``http://schemas/role``."""

    value: str
    """Claim value."""


class LoginInfo(NamedTuple):
    """An external identity linked to an account."""

    login_provider: str
    """Name of the external provider, e.g. ``Google``."""

    provider_key: str
    """Identifier of the user at the external provider."""

    provider_display_name: Optional[str] = None
    """Display name of the provider, for the UI."""


class IdentityError(NamedTuple):
    """A coded error carried by a failed :class:`IdentityResult`."""

    code: str
    description: str


class IdentityResult(NamedTuple):
    """Outcome of a persisting store operation."""

    succeeded: bool
    errors: Sequence[IdentityError] = ()

    @classmethod
    def failed(cls, *errors: IdentityError) -> 'IdentityResult':
        """Build a failed result carrying ``errors``."""
        return cls(succeeded=False, errors=tuple(errors))

    def __str__(self) -> str:
        """Return ``Succeeded`` or ``Failed : <codes>``."""
        if self.succeeded:
            return 'Succeeded'
        return 'Failed : ' + ','.join([err.code for err in self.errors])


SUCCESS = IdentityResult(succeeded=True)
"""The success sentinel returned by create, update and delete."""


class ErrorDescriber(object):
    """
    Builds the :class:`IdentityError` values reported by the stores.

    One describer is shared by all operations of a store instance, so that
    error codes and messages are formatted in a single place. Subclass and
    pass an instance to the store to localize the descriptions.
    """

    def concurrency_failure(self) -> IdentityError:
        """The row was modified since it was loaded."""
        return IdentityError(
            code='ConcurrencyFailure',
            description='Optimistic concurrency failure, object has been '
                        'modified.'
        )

    def invalid_role_name(self, role: Optional[str]) -> IdentityError:
        """A role name was not recognized."""
        return IdentityError(code='InvalidRoleName',
                             description=f"Role name '{role}' is invalid.")
