"""Libraries router -- lifecycle, versions, authorization, licensing and access."""

from __future__ import annotations

from fastapi import APIRouter, Depends, status

from libregistry.registry.service import LibraryRegistry
from libregistry.web.deps import get_caller, get_registry
from libregistry.web.models import (
    AccessResponse,
    AuthorizationRequest,
    ErrorResponse,
    LibraryInfoResponse,
    LicenseConfigRequest,
    PublishVersionRequest,
    PurchaseRequest,
    RegisterLibraryRequest,
    VersionInfoResponse,
)

router = APIRouter(
    prefix="/api/libraries",
    tags=["libraries"],
    responses={
        status.HTTP_400_BAD_REQUEST: {"model": ErrorResponse},
        status.HTTP_402_PAYMENT_REQUIRED: {"model": ErrorResponse},
        status.HTTP_403_FORBIDDEN: {"model": ErrorResponse},
        status.HTTP_404_NOT_FOUND: {"model": ErrorResponse},
        status.HTTP_409_CONFLICT: {"model": ErrorResponse},
    },
)


def _library_response(registry: LibraryRegistry, name: str) -> LibraryInfoResponse:
    info = registry.get_library_info(name)
    return LibraryInfoResponse(
        name=name,
        owner=info.owner,
        description=info.description,
        tags=info.tags,
        is_private=info.is_private,
        language=info.language,
        license_fee=info.license_fee,
        license_required=info.license_required,
        version_numbers=registry.get_version_numbers(name),
    )


def _version_response(
    registry: LibraryRegistry, name: str, version: str
) -> VersionInfoResponse:
    v = registry.get_version_info(name, version)
    return VersionInfoResponse(
        name=name,
        version=version,
        content_pointer=v.content_pointer,
        publisher=v.publisher,
        timestamp=v.timestamp,
        deprecated=v.deprecated,
        dependencies=v.dependencies,
    )


def _access_response(
    registry: LibraryRegistry, name: str, address: str
) -> AccessResponse:
    return AccessResponse(
        name=name,
        address=address,
        has_access=registry.has_access(name, address),
        has_license=registry.has_user_license(name, address),
    )


# ---------------------------------------------------------------------------
# Lifecycle
# ---------------------------------------------------------------------------


@router.get("", response_model=list[str], summary="List library names")
def list_libraries(registry: LibraryRegistry = Depends(get_registry)):
    """List the names of every registered library."""
    return registry.get_all_library_names()


@router.post(
    "",
    response_model=LibraryInfoResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Register a library",
)
def register_library(
    body: RegisterLibraryRequest,
    caller: str = Depends(get_caller),
    registry: LibraryRegistry = Depends(get_registry),
):
    """Register a library owned by the caller."""
    registry.register_library(
        body.name,
        body.description,
        body.tags,
        body.is_private,
        body.language,
        caller=caller,
    )
    return _library_response(registry, body.name)


@router.get("/{name}", response_model=LibraryInfoResponse, summary="Get a library")
def get_library(name: str, registry: LibraryRegistry = Depends(get_registry)):
    return _library_response(registry, name)


@router.delete(
    "/{name}", status_code=status.HTTP_204_NO_CONTENT, summary="Delete a library"
)
def delete_library(
    name: str,
    caller: str = Depends(get_caller),
    registry: LibraryRegistry = Depends(get_registry),
):
    """Delete a library that has no published versions."""
    registry.delete_library(name, caller=caller)


# ---------------------------------------------------------------------------
# Versions
# ---------------------------------------------------------------------------


@router.get("/{name}/versions", response_model=list[str], summary="List versions")
def list_versions(name: str, registry: LibraryRegistry = Depends(get_registry)):
    """Version numbers in publish order."""
    return registry.get_version_numbers(name)


@router.post(
    "/{name}/versions",
    response_model=VersionInfoResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Publish a version",
)
def publish_version(
    name: str,
    body: PublishVersionRequest,
    caller: str = Depends(get_caller),
    registry: LibraryRegistry = Depends(get_registry),
):
    registry.publish_version(
        name, body.version, body.content_pointer, body.dependencies, caller=caller
    )
    return _version_response(registry, name, body.version)


@router.get(
    "/{name}/versions/{version}",
    response_model=VersionInfoResponse,
    summary="Get a version",
)
def get_version(
    name: str, version: str, registry: LibraryRegistry = Depends(get_registry)
):
    return _version_response(registry, name, version)


@router.post(
    "/{name}/versions/{version}/deprecate",
    response_model=VersionInfoResponse,
    summary="Deprecate a version",
)
def deprecate_version(
    name: str,
    version: str,
    caller: str = Depends(get_caller),
    registry: LibraryRegistry = Depends(get_registry),
):
    registry.deprecate_version(name, version, caller=caller)
    return _version_response(registry, name, version)


# ---------------------------------------------------------------------------
# Licensing
# ---------------------------------------------------------------------------


@router.put(
    "/{name}/license",
    response_model=LibraryInfoResponse,
    summary="Configure the license",
)
def set_license(
    name: str,
    body: LicenseConfigRequest,
    caller: str = Depends(get_caller),
    registry: LibraryRegistry = Depends(get_registry),
):
    registry.set_library_license(name, body.fee, body.required, caller=caller)
    return _library_response(registry, name)


@router.post(
    "/{name}/license/purchase",
    response_model=AccessResponse,
    summary="Purchase a license",
)
def purchase_license(
    name: str,
    body: PurchaseRequest,
    caller: str = Depends(get_caller),
    registry: LibraryRegistry = Depends(get_registry),
):
    """Buy a license for the caller; overpayment is refunded."""
    registry.purchase_library_license(name, body.payment, caller=caller)
    return _access_response(registry, name, caller)


# ---------------------------------------------------------------------------
# Authorization and access
# ---------------------------------------------------------------------------


@router.post(
    "/{name}/authorizations",
    response_model=AccessResponse,
    summary="Authorize an address",
)
def authorize(
    name: str,
    body: AuthorizationRequest,
    caller: str = Depends(get_caller),
    registry: LibraryRegistry = Depends(get_registry),
):
    registry.authorize_user(name, body.address, caller=caller)
    return _access_response(registry, name, body.address)


@router.delete(
    "/{name}/authorizations/{address}",
    response_model=AccessResponse,
    summary="Revoke an address",
)
def revoke(
    name: str,
    address: str,
    caller: str = Depends(get_caller),
    registry: LibraryRegistry = Depends(get_registry),
):
    registry.revoke_authorization(name, address, caller=caller)
    return _access_response(registry, name, address)


@router.get(
    "/{name}/access/{address}",
    response_model=AccessResponse,
    summary="Check access",
)
def check_access(
    name: str, address: str, registry: LibraryRegistry = Depends(get_registry)
):
    return _access_response(registry, name, address)
