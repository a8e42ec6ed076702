"""Registry notifications and the in-process event bus.

Every successful mutating operation emits exactly one event. Consumers such
as the audit log subscribe to the bus and can rebuild registry state from the
event stream without re-querying.
"""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass
from typing import Any, Callable

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RegistryEvent:
    """Base class for registry notifications."""

    library: str

    @property
    def event_type(self) -> str:
        return type(self).__name__

    def to_dict(self) -> dict[str, Any]:
        return {"event": self.event_type, **asdict(self)}


@dataclass(frozen=True)
class LibraryRegistered(RegistryEvent):
    owner: str
    is_private: bool
    language: str


@dataclass(frozen=True)
class LibraryDeleted(RegistryEvent):
    pass


@dataclass(frozen=True)
class VersionPublished(RegistryEvent):
    version: str
    content_pointer: str
    publisher: str


@dataclass(frozen=True)
class VersionDeprecated(RegistryEvent):
    version: str


@dataclass(frozen=True)
class LicenseConfigSet(RegistryEvent):
    fee: int
    required: bool


@dataclass(frozen=True)
class LicensePurchased(RegistryEvent):
    buyer: str
    owner: str
    fee: int


@dataclass(frozen=True)
class AuthorizationGranted(RegistryEvent):
    address: str


@dataclass(frozen=True)
class AuthorizationRevoked(RegistryEvent):
    address: str


# Handlers receive the event and the address of the caller that caused it.
EventHandler = Callable[[RegistryEvent, str], None]


class EventBus:
    """Fan-out of committed registry events to subscribers."""

    def __init__(self) -> None:
        self._handlers: list[EventHandler] = []

    def subscribe(self, handler: EventHandler) -> Callable[[], None]:
        """Register a handler; returns a callable that unsubscribes it."""
        self._handlers.append(handler)

        def unsubscribe() -> None:
            if handler in self._handlers:
                self._handlers.remove(handler)

        return unsubscribe

    def publish(self, event: RegistryEvent, caller: str) -> None:
        for handler in list(self._handlers):
            try:
                handler(event, caller)
            except Exception:
                # The operation is already committed; a broken subscriber
                # must not turn it into a reported failure.
                logger.exception(
                    "Event handler %r failed for %s", handler, event.event_type
                )


class EventRecorder:
    """Subscriber that keeps every event in memory, in emission order."""

    def __init__(self) -> None:
        self.events: list[RegistryEvent] = []

    def __call__(self, event: RegistryEvent, caller: str) -> None:
        self.events.append(event)

    def of_type(self, event_cls: type[RegistryEvent]) -> list[RegistryEvent]:
        return [e for e in self.events if isinstance(e, event_cls)]

    def clear(self) -> None:
        self.events.clear()
