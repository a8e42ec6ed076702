"""Registry data models — libraries, versions, and their read views."""

from __future__ import annotations

from dataclasses import dataclass, field

# The null identity; never a valid grantee.
ZERO_ADDRESS = "0x0000000000000000000000000000000000000000"


@dataclass
class Library:
    """A single library record in the registry."""

    # Identity
    name: str
    owner: str

    # Metadata (create-only)
    description: str = ""
    tags: list[str] = field(default_factory=list)
    language: str = ""
    is_private: bool = False

    # Licensing
    license_fee: int = 0
    license_required: bool = False

    # Versions, in publish order
    version_numbers: list[str] = field(default_factory=list)

    exists: bool = True

    @property
    def has_versions(self) -> bool:
        return bool(self.version_numbers)


@dataclass
class Version:
    """An immutable published release; only ``deprecated`` ever changes."""

    library: str
    version: str
    content_pointer: str
    publisher: str
    timestamp: int
    dependencies: list[str] = field(default_factory=list)
    deprecated: bool = False

    @property
    def qualified_id(self) -> str:
        return f"{self.library}@{self.version}"


@dataclass(frozen=True)
class LibraryInfo:
    """Single-read view of a library, as returned by ``get_library_info``."""

    owner: str
    description: str
    tags: list[str]
    is_private: bool
    language: str
    license_fee: int
    license_required: bool


@dataclass(frozen=True)
class VersionInfo:
    """Single-read view of a version, as returned by ``get_version_info``."""

    content_pointer: str
    publisher: str
    timestamp: int
    deprecated: bool
    dependencies: list[str]
