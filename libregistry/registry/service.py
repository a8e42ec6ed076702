"""LibraryRegistry — the public surface of the registry.

Composes the lifecycle, version, licensing and authorization managers over
one injected ``RegistryStore``, one ``Treasury`` and one ``EventBus``, and
owns the transaction boundary around every mutating call:

- calls are serialized by a re-entrant lock, so a treasury hook can call
  back into the registry while a purchase is settling;
- events are buffered and dispatched only once the outermost call commits;
- store and treasury journal every change, so a failed call (a rejected
  transfer, a failed save) undoes exactly what it changed, nested calls
  included, and discards the events buffered since it started.

Usage::

    registry = LibraryRegistry()
    registry.register_library("fastjson", "JSON codec", ["json"], caller=alice)
    registry.publish_version("fastjson", "1.0.0", "ipfs://Qm...", caller=alice)
    registry.has_access("fastjson", bob)
"""

from __future__ import annotations

import logging
import threading
from contextlib import contextmanager
from typing import Callable, Iterator, Optional, Sequence

from libregistry.config import RegistryConfig
from libregistry.errors import RegistryError, TransferFailed, VersionNotFound
from libregistry.events import EventBus, RegistryEvent
from libregistry.registry.access import AccessControlEvaluator
from libregistry.registry.authorization import AuthorizationListManager
from libregistry.registry.licensing import LicensingLedger
from libregistry.registry.lifecycle import LifecycleManager
from libregistry.registry.models import LibraryInfo, VersionInfo
from libregistry.registry.store import RegistryStore
from libregistry.registry.versions import VersionManager
from libregistry.security.audit_log import AuditLogger
from libregistry.treasury import Treasury

logger = logging.getLogger(__name__)

DEFAULT_OPERATOR = "operator"


class LibraryRegistry:
    """Registry of libraries, versions, authorizations and licenses."""

    def __init__(
        self,
        store: Optional[RegistryStore] = None,
        treasury: Optional[Treasury] = None,
        events: Optional[EventBus] = None,
        owner: str = DEFAULT_OPERATOR,
        clock: Optional[Callable[[], int]] = None,
    ) -> None:
        # Identity that deployed/operates this registry instance.
        self.owner = owner
        self.store = store if store is not None else RegistryStore()
        self.treasury = treasury if treasury is not None else Treasury()
        self.events = events if events is not None else EventBus()

        self.lifecycle = LifecycleManager(self.store)
        self.versions = VersionManager(self.store, clock=clock)
        self.licensing = LicensingLedger(self.store, self.treasury)
        self.authorizations = AuthorizationListManager(self.store)
        self.access = AccessControlEvaluator(self.store)

        self._lock = threading.RLock()
        self._depth = 0
        self._pending: list[tuple[RegistryEvent, str]] = []

    # ------------------------------------------------------------------
    # Transaction boundary
    # ------------------------------------------------------------------

    @contextmanager
    def _atomic(self, operation: str, caller: str) -> Iterator[None]:
        with self._lock:
            outermost = self._depth == 0
            store_mark = self.store.begin()
            treasury_mark = self.treasury.begin()
            event_mark = len(self._pending)
            self._depth += 1
            try:
                yield
                if outermost:
                    self._persist()
            except BaseException as exc:
                self.store.rollback(store_mark)
                self.treasury.rollback(treasury_mark)
                del self._pending[event_mark:]
                if isinstance(exc, TransferFailed):
                    logger.warning("%s by %s rolled back: %s", operation, caller, exc)
                elif isinstance(exc, RegistryError):
                    logger.debug("%s by %s rejected: %s", operation, caller, exc.code)
                else:
                    logger.error("%s by %s rolled back: %r", operation, caller, exc)
                raise
            finally:
                self._depth -= 1
                if outermost:
                    self.store.release()
                    self.treasury.release()

            if outermost:
                self._dispatch()

    def _emit(self, event: RegistryEvent, caller: str) -> None:
        self._pending.append((event, caller))

    def _persist(self) -> None:
        """Save store then treasury; a failed save leaves both files as they were."""
        written = []
        try:
            for part in (self.store, self.treasury):
                part.save()
                written.append(part)
        except BaseException:
            # Outermost transaction marks are zero.
            self.store.rollback(0)
            self.treasury.rollback(0)
            for part in written:
                part.save()
            raise

    def _dispatch(self) -> None:
        # Subscribers may start new transactions of their own.
        pending, self._pending = self._pending, []
        for event, caller in pending:
            self.events.publish(event, caller)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def register_library(
        self,
        name: str,
        description: str = "",
        tags: Sequence[str] = (),
        is_private: bool = False,
        language: str = "",
        *,
        caller: str,
    ) -> None:
        with self._atomic("register_library", caller):
            self._emit(
                self.lifecycle.register(caller, name, description, tags, is_private, language),
                caller,
            )

    def delete_library(self, name: str, *, caller: str) -> None:
        with self._atomic("delete_library", caller):
            self._emit(self.lifecycle.delete(caller, name), caller)

    # ------------------------------------------------------------------
    # Versions
    # ------------------------------------------------------------------

    def publish_version(
        self,
        name: str,
        version: str,
        content_pointer: str,
        dependencies: Sequence[str] = (),
        *,
        caller: str,
    ) -> None:
        with self._atomic("publish_version", caller):
            self._emit(
                self.versions.publish(caller, name, version, content_pointer, dependencies),
                caller,
            )

    def deprecate_version(self, name: str, version: str, *, caller: str) -> None:
        with self._atomic("deprecate_version", caller):
            self._emit(self.versions.deprecate(caller, name, version), caller)

    # ------------------------------------------------------------------
    # Licensing
    # ------------------------------------------------------------------

    def set_library_license(
        self, name: str, fee: int, required: bool, *, caller: str
    ) -> None:
        with self._atomic("set_library_license", caller):
            self._emit(self.licensing.set_license(caller, name, fee, required), caller)

    def purchase_library_license(self, name: str, payment: int, *, caller: str) -> None:
        with self._atomic("purchase_library_license", caller):
            self._emit(self.licensing.purchase(caller, name, payment), caller)

    # ------------------------------------------------------------------
    # Authorization
    # ------------------------------------------------------------------

    def authorize_user(self, name: str, address: str, *, caller: str) -> None:
        with self._atomic("authorize_user", caller):
            self._emit(self.authorizations.authorize(caller, name, address), caller)

    def revoke_authorization(self, name: str, address: str, *, caller: str) -> None:
        with self._atomic("revoke_authorization", caller):
            self._emit(self.authorizations.revoke(caller, name, address), caller)

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def get_library_info(self, name: str) -> LibraryInfo:
        with self._lock:
            library = self.store.require_library(name)
            return LibraryInfo(
                owner=library.owner,
                description=library.description,
                tags=list(library.tags),
                is_private=library.is_private,
                language=library.language,
                license_fee=library.license_fee,
                license_required=library.license_required,
            )

    def get_version_info(self, name: str, version: str) -> VersionInfo:
        with self._lock:
            self.store.require_library(name)
            record = self.store.get_version(name, version)
            if record is None:
                raise VersionNotFound(name, version)
            return VersionInfo(
                content_pointer=record.content_pointer,
                publisher=record.publisher,
                timestamp=record.timestamp,
                deprecated=record.deprecated,
                dependencies=list(record.dependencies),
            )

    def get_version_numbers(self, name: str) -> list[str]:
        with self._lock:
            return list(self.store.require_library(name).version_numbers)

    def get_all_library_names(self) -> list[str]:
        with self._lock:
            return self.store.names()

    def has_access(self, name: str, address: str) -> bool:
        with self._lock:
            return self.access.has_access(name, address)

    def has_user_license(self, name: str, address: str) -> bool:
        with self._lock:
            return self.licensing.has_user_license(name, address)


def open_registry(config: RegistryConfig) -> LibraryRegistry:
    """Build a file-backed registry from configuration, with auditing if enabled."""
    registry = LibraryRegistry(
        store=RegistryStore(config.state_dir),
        treasury=Treasury(config.state_dir),
        owner=config.operator,
    )
    if config.audit_enabled:
        registry.events.subscribe(AuditLogger(config.audit_dir).subscriber())
    return registry
