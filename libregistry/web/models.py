"""Pydantic models for API request/response serialization.

These models mirror the registry dataclasses and provide JSON
serialization for the FastAPI endpoints.
"""

from __future__ import annotations

from pydantic import BaseModel, Field


# ---------------------------------------------------------------------------
# Requests
# ---------------------------------------------------------------------------


class RegisterLibraryRequest(BaseModel):
    name: str = Field(..., min_length=1)
    description: str = ""
    tags: list[str] = Field(default_factory=list)
    is_private: bool = False
    language: str = ""


class PublishVersionRequest(BaseModel):
    version: str = Field(..., min_length=1)
    content_pointer: str
    dependencies: list[str] = Field(default_factory=list)


class LicenseConfigRequest(BaseModel):
    fee: int
    required: bool


class PurchaseRequest(BaseModel):
    payment: int


class AuthorizationRequest(BaseModel):
    address: str


# ---------------------------------------------------------------------------
# Responses
# ---------------------------------------------------------------------------


class LibraryInfoResponse(BaseModel):
    """Mirrors libregistry.registry.models.LibraryInfo."""

    name: str
    owner: str
    description: str = ""
    tags: list[str] = Field(default_factory=list)
    is_private: bool = False
    language: str = ""
    license_fee: int = 0
    license_required: bool = False
    version_numbers: list[str] = Field(default_factory=list)


class VersionInfoResponse(BaseModel):
    """Mirrors libregistry.registry.models.VersionInfo."""

    name: str
    version: str
    content_pointer: str
    publisher: str
    timestamp: int
    deprecated: bool = False
    dependencies: list[str] = Field(default_factory=list)


class AccessResponse(BaseModel):
    name: str
    address: str
    has_access: bool
    has_license: bool


class ErrorResponse(BaseModel):
    code: str
    detail: str
