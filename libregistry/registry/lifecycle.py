"""Lifecycle manager — create-only registration and deletion of empty libraries."""

from __future__ import annotations

import logging
from typing import Sequence

from libregistry.errors import HasVersions, NameConflict
from libregistry.events import LibraryDeleted, LibraryRegistered
from libregistry.registry.models import Library
from libregistry.registry.permissions import require_owner
from libregistry.registry.store import RegistryStore

logger = logging.getLogger(__name__)


class LifecycleManager:
    """Registers new libraries and deletes ones that never published."""

    def __init__(self, store: RegistryStore) -> None:
        self._store = store

    def register(
        self,
        caller: str,
        name: str,
        description: str = "",
        tags: Sequence[str] = (),
        is_private: bool = False,
        language: str = "",
    ) -> LibraryRegistered:
        """Create a library owned by ``caller``.

        The name must not belong to an existing library. A deleted library's
        name is free again.
        """
        if self._store.get_library(name) is not None:
            raise NameConflict(name)

        library = Library(
            name=name,
            owner=caller,
            description=description,
            tags=list(tags),
            language=language,
            is_private=is_private,
        )
        self._store.add_library(library)
        logger.info("Registered library %s (owner=%s, private=%s)", name, caller, is_private)
        return LibraryRegistered(
            library=name, owner=caller, is_private=is_private, language=language
        )

    def delete(self, caller: str, name: str) -> LibraryDeleted:
        """Remove a library that has no published versions."""
        library = self._store.require_library(name)
        require_owner(library, caller)
        if library.has_versions:
            raise HasVersions(name, len(library.version_numbers))

        self._store.remove_library(name)
        logger.info("Deleted library %s", name)
        return LibraryDeleted(library=name)
