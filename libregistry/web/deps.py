"""FastAPI dependencies — the shared registry and the caller identity.

The caller is identified by the ``X-Caller-Address`` header. Read-only
endpoints do not need it; every mutating endpoint does.
"""

from __future__ import annotations

from typing import Optional

from fastapi import Header, HTTPException, status

from libregistry.config import load_config
from libregistry.registry.service import LibraryRegistry, open_registry

# Shared registry instance
_registry: Optional[LibraryRegistry] = None


def get_registry() -> LibraryRegistry:
    """Return the singleton registry, built from configuration on first use."""
    global _registry
    if _registry is None:
        _registry = open_registry(load_config())
    return _registry


def set_registry(registry: Optional[LibraryRegistry]) -> None:
    """Replace the shared registry (``None`` rebuilds it from configuration)."""
    global _registry
    _registry = registry


async def get_caller(
    x_caller_address: Optional[str] = Header(None, alias="X-Caller-Address"),
) -> str:
    """FastAPI dependency that extracts the calling address.

    Raises ``401 Unauthorized`` if the header is missing or blank.
    """
    if not x_caller_address or not x_caller_address.strip():
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing X-Caller-Address header",
        )
    return x_caller_address.strip()
