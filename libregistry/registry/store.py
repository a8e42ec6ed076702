"""Registry store — the single source of truth shared by every manager.

Holds libraries, versions, the global name index, per-library authorization
sets and the license ledger. In-memory by default; given a state directory it
loads and saves everything as JSON in ``registry.json``.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Callable, Optional

from libregistry.errors import NotFound
from libregistry.registry.models import Library, Version

logger = logging.getLogger(__name__)


class RegistryStore:
    """Authoritative storage for the library registry."""

    STATE_FILE = "registry.json"

    def __init__(self, state_dir: Optional[str | Path] = None) -> None:
        self._libraries: dict[str, Library] = {}
        self._versions: dict[tuple[str, str], Version] = {}
        # Name index: ordered list plus name -> position for O(1) removal.
        self._names: list[str] = []
        self._positions: dict[str, int] = {}
        self._authorized: dict[str, set[str]] = {}
        self._licenses: dict[str, set[str]] = {}
        # Undo callbacks for the open transaction; None outside one.
        self._journal: Optional[list[Callable[[], None]]] = None

        self.state_dir = Path(state_dir) if state_dir is not None else None
        if self.state_dir is not None:
            self.state_dir.mkdir(parents=True, exist_ok=True)
            self.state_path = self.state_dir / self.STATE_FILE
            self._load()

    # ------------------------------------------------------------------
    # Libraries and the name index
    # ------------------------------------------------------------------

    def get_library(self, name: str) -> Optional[Library]:
        library = self._libraries.get(name)
        if library is None or not library.exists:
            return None
        return library

    def require_library(self, name: str) -> Library:
        """Return the library or raise ``NotFound``."""
        library = self.get_library(name)
        if library is None:
            raise NotFound(name)
        return library

    def add_library(self, library: Library) -> None:
        name = library.name
        self._libraries[name] = library
        self._positions[name] = len(self._names)
        self._names.append(name)

        def undo() -> None:
            # Later entries are undone first, so the name is last again.
            self._names.pop()
            del self._positions[name]
            del self._libraries[name]

        self._record(undo)

    def remove_library(self, name: str) -> None:
        """Drop a library record, its index slot, authorizations and ledger."""
        library = self._libraries.pop(name)
        position = self._positions.pop(name)
        last = self._names.pop()
        if last != name:
            # Swap the former last name into the vacated slot.
            self._names[position] = last
            self._positions[last] = position
        authorized = self._authorized.pop(name, None)
        licenses = self._licenses.pop(name, None)

        def undo() -> None:
            if last != name:
                self._names[position] = name
                self._positions[last] = len(self._names)
                self._names.append(last)
            else:
                self._names.append(name)
            self._positions[name] = position
            self._libraries[name] = library
            if authorized is not None:
                self._authorized[name] = authorized
            if licenses is not None:
                self._licenses[name] = licenses

        self._record(undo)

    def set_license_terms(self, name: str, fee: int, required: bool) -> None:
        library = self._libraries[name]
        previous = (library.license_fee, library.license_required)
        library.license_fee = fee
        library.license_required = required

        def undo() -> None:
            library.license_fee, library.license_required = previous

        self._record(undo)

    def names(self) -> list[str]:
        return list(self._names)

    # ------------------------------------------------------------------
    # Versions
    # ------------------------------------------------------------------

    def get_version(self, name: str, version: str) -> Optional[Version]:
        return self._versions.get((name, version))

    def add_version(self, record: Version) -> None:
        key = (record.library, record.version)
        library = self._libraries[record.library]
        self._versions[key] = record
        library.version_numbers.append(record.version)

        def undo() -> None:
            library.version_numbers.pop()
            del self._versions[key]

        self._record(undo)

    def mark_deprecated(self, name: str, version: str) -> None:
        record = self._versions[(name, version)]
        if record.deprecated:
            return
        record.deprecated = True
        self._record(lambda: setattr(record, "deprecated", False))

    # ------------------------------------------------------------------
    # Authorization sets
    # ------------------------------------------------------------------

    def is_authorized(self, name: str, address: str) -> bool:
        return address in self._authorized.get(name, ())

    def add_authorization(self, name: str, address: str) -> None:
        members = self._authorized.setdefault(name, set())
        if address in members:
            return
        members.add(address)
        self._record(lambda: members.discard(address))

    def remove_authorization(self, name: str, address: str) -> None:
        members = self._authorized.get(name)
        if not members or address not in members:
            return
        members.discard(address)
        self._record(lambda: members.add(address))

    def authorized_addresses(self, name: str) -> list[str]:
        return sorted(self._authorized.get(name, ()))

    # ------------------------------------------------------------------
    # License ledger
    # ------------------------------------------------------------------

    def has_license(self, name: str, address: str) -> bool:
        return address in self._licenses.get(name, ())

    def record_license(self, name: str, address: str) -> None:
        holders = self._licenses.setdefault(name, set())
        if address in holders:
            return
        holders.add(address)
        self._record(lambda: holders.discard(address))

    # ------------------------------------------------------------------
    # Transactions
    # ------------------------------------------------------------------

    def begin(self) -> int:
        """Start (or nest into) a transaction and return its undo mark.

        While a transaction is open every mutation records how to reverse
        itself, so rolling back costs time proportional to what changed.
        """
        if self._journal is None:
            self._journal = []
        return len(self._journal)

    def rollback(self, mark: int) -> None:
        """Undo every mutation recorded after ``mark``, newest first."""
        if self._journal is None:
            return
        while len(self._journal) > mark:
            self._journal.pop()()

    def release(self) -> None:
        """Close the outermost transaction, keeping its changes."""
        self._journal = None

    def _record(self, undo: Callable[[], None]) -> None:
        if self._journal is not None:
            self._journal.append(undo)

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def save(self) -> None:
        if self.state_dir is None:
            return
        data = {
            "names": self._names,
            "libraries": [_library_to_dict(lib) for lib in self._libraries.values()],
            "versions": [_version_to_dict(v) for v in self._versions.values()],
            "authorized": {k: sorted(v) for k, v in self._authorized.items() if v},
            "licenses": {k: sorted(v) for k, v in self._licenses.items() if v},
        }
        self.state_path.write_text(json.dumps(data, indent=2), encoding="utf-8")

    def _load(self) -> None:
        if not self.state_path.exists():
            return
        data = json.loads(self.state_path.read_text(encoding="utf-8"))
        self._libraries = {
            d["name"]: _dict_to_library(d) for d in data.get("libraries", [])
        }
        self._versions = {}
        for d in data.get("versions", []):
            record = _dict_to_version(d)
            self._versions[(record.library, record.version)] = record
        self._names = list(data.get("names", []))
        self._positions = {name: i for i, name in enumerate(self._names)}
        self._authorized = {k: set(v) for k, v in data.get("authorized", {}).items()}
        self._licenses = {k: set(v) for k, v in data.get("licenses", {}).items()}
        logger.debug(
            "Loaded %d libraries from %s", len(self._libraries), self.state_path
        )


def _library_to_dict(library: Library) -> dict:
    return {
        "name": library.name,
        "owner": library.owner,
        "description": library.description,
        "tags": library.tags,
        "language": library.language,
        "is_private": library.is_private,
        "license_fee": library.license_fee,
        "license_required": library.license_required,
        "version_numbers": library.version_numbers,
    }


def _dict_to_library(data: dict) -> Library:
    return Library(
        name=data["name"],
        owner=data["owner"],
        description=data.get("description", ""),
        tags=data.get("tags", []),
        language=data.get("language", ""),
        is_private=data.get("is_private", False),
        license_fee=data.get("license_fee", 0),
        license_required=data.get("license_required", False),
        version_numbers=data.get("version_numbers", []),
    )


def _version_to_dict(record: Version) -> dict:
    return {
        "library": record.library,
        "version": record.version,
        "content_pointer": record.content_pointer,
        "publisher": record.publisher,
        "timestamp": record.timestamp,
        "dependencies": record.dependencies,
        "deprecated": record.deprecated,
    }


def _dict_to_version(data: dict) -> Version:
    return Version(
        library=data["library"],
        version=data["version"],
        content_pointer=data["content_pointer"],
        publisher=data["publisher"],
        timestamp=data.get("timestamp", 0),
        dependencies=data.get("dependencies", []),
        deprecated=data.get("deprecated", False),
    )
