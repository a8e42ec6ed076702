"""Access control evaluator — read-only access decisions."""

from __future__ import annotations

from libregistry.registry.permissions import is_owner
from libregistry.registry.store import RegistryStore


class AccessControlEvaluator:
    """Decides whether an address may use a library.

    1. The owner always has access.
    2. Private libraries: only addresses in the authorization set.
    3. Public libraries: everyone, unless a license is required, in which
       case only addresses that purchased one.
    """

    def __init__(self, store: RegistryStore) -> None:
        self._store = store

    def has_access(self, name: str, address: str) -> bool:
        library = self._store.require_library(name)
        if is_owner(library, address):
            return True
        if library.is_private:
            return self._store.is_authorized(name, address)
        if not library.license_required:
            return True
        return self._store.has_license(name, address)
