"""Authorization list manager — per private library allow-lists."""

from __future__ import annotations

import logging

from libregistry.errors import InvalidAddress, NotPrivate
from libregistry.events import AuthorizationGranted, AuthorizationRevoked
from libregistry.registry.models import ZERO_ADDRESS, Library
from libregistry.registry.permissions import require_owner
from libregistry.registry.store import RegistryStore

logger = logging.getLogger(__name__)


class AuthorizationListManager:
    """Grants and revokes access to private libraries."""

    def __init__(self, store: RegistryStore) -> None:
        self._store = store

    def _require_private(self, caller: str, name: str) -> Library:
        library = self._store.require_library(name)
        require_owner(library, caller)
        if not library.is_private:
            raise NotPrivate(name)
        return library

    def authorize(self, caller: str, name: str, address: str) -> AuthorizationGranted:
        self._require_private(caller, name)
        if not address or address == ZERO_ADDRESS:
            raise InvalidAddress(address)

        self._store.add_authorization(name, address)
        logger.info("Authorized %s for %s", address, name)
        return AuthorizationGranted(library=name, address=address)

    def revoke(self, caller: str, name: str, address: str) -> AuthorizationRevoked:
        """Remove ``address`` from the allow-list; revoking a non-member is fine."""
        self._require_private(caller, name)

        self._store.remove_authorization(name, address)
        logger.info("Revoked %s for %s", address, name)
        return AuthorizationRevoked(library=name, address=address)
