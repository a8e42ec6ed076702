"""Registry — libraries, versions, access control and licensing.

The registry provides:
- Lifecycle: create-only registration, deletion of libraries without versions
- Versions: immutable records pointing at off-system content, deprecation
- Authorization: allow-lists for private libraries
- Licensing: fee configuration and atomic pay-and-refund purchases
- Access: a read-only decision combining all of the above
"""

from libregistry.registry.models import ZERO_ADDRESS, LibraryInfo, VersionInfo
from libregistry.registry.service import LibraryRegistry, open_registry
from libregistry.registry.store import RegistryStore

__all__ = [
    "LibraryInfo",
    "LibraryRegistry",
    "RegistryStore",
    "VersionInfo",
    "ZERO_ADDRESS",
    "open_registry",
]
