"""Version manager — immutable version records and the deprecation flag."""

from __future__ import annotations

import logging
import time
from typing import Callable, Optional, Sequence

from libregistry.errors import EmptyContentPointer, VersionExists, VersionNotFound
from libregistry.events import VersionDeprecated, VersionPublished
from libregistry.registry.models import Version
from libregistry.registry.permissions import require_owner
from libregistry.registry.store import RegistryStore

logger = logging.getLogger(__name__)


def _now() -> int:
    return int(time.time())


class VersionManager:
    """Publishes versions and marks them deprecated."""

    def __init__(
        self, store: RegistryStore, clock: Optional[Callable[[], int]] = None
    ) -> None:
        self._store = store
        self._clock = clock or _now

    def publish(
        self,
        caller: str,
        name: str,
        version: str,
        content_pointer: str,
        dependencies: Sequence[str] = (),
    ) -> VersionPublished:
        """Record a new version of ``name``.

        Dependencies are stored verbatim and never interpreted.
        """
        library = self._store.require_library(name)
        require_owner(library, caller)
        if self._store.get_version(name, version) is not None:
            raise VersionExists(name, version)
        if not content_pointer:
            raise EmptyContentPointer(name, version)

        record = Version(
            library=name,
            version=version,
            content_pointer=content_pointer,
            publisher=caller,
            timestamp=self._clock(),
            dependencies=list(dependencies),
        )
        self._store.add_version(record)
        logger.info("Published %s (%s)", record.qualified_id, content_pointer)
        return VersionPublished(
            library=name,
            version=version,
            content_pointer=content_pointer,
            publisher=caller,
        )

    def deprecate(self, caller: str, name: str, version: str) -> VersionDeprecated:
        """Mark a version deprecated. Repeating the call is a no-op that still emits."""
        library = self._store.require_library(name)
        require_owner(library, caller)
        record = self._store.get_version(name, version)
        if record is None:
            raise VersionNotFound(name, version)

        self._store.mark_deprecated(name, version)
        logger.info("Deprecated %s", record.qualified_id)
        return VersionDeprecated(library=name, version=version)
