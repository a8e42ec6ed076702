"""Owner-only mutation guard shared by every manager."""

from __future__ import annotations

from libregistry.errors import NotOwner
from libregistry.registry.models import Library


def is_owner(library: Library, caller: str) -> bool:
    """Check whether ``caller`` is the registered owner of ``library``.

    Parameters
    ----------
    library:
        The library record being acted on.
    caller:
        Address of the party invoking the operation.

    Returns
    -------
    bool
        True if the caller registered the library.
    """
    return caller == library.owner


def require_owner(library: Library, caller: str) -> None:
    """Validate that ``caller`` owns ``library``.

    Raises ``NotOwner`` otherwise.

    Usage in a manager::

        library = self._store.require_library(name)
        require_owner(library, caller)
        ...
    """
    if not is_owner(library, caller):
        raise NotOwner(library.name, caller, library.owner)
