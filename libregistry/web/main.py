"""FastAPI application for the library registry.

Provides REST endpoints wrapping ``LibraryRegistry``:
- Library lifecycle (register, delete, list, info)
- Version publishing and deprecation
- Private allow-lists
- License configuration and purchase
- Access checks
"""

from __future__ import annotations

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from libregistry import __version__
from libregistry import errors
from libregistry.web.models import ErrorResponse
from libregistry.web.routers import libraries

app = FastAPI(
    title="libregistry API",
    description=(
        "REST API for the library registry: registration, versions, "
        "private authorization and license purchase."
    ),
    version=__version__,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(libraries.router)


# ---------------------------------------------------------------------------
# Registry errors -> HTTP
# ---------------------------------------------------------------------------

_STATUS_BY_ERROR: dict[type[errors.RegistryError], int] = {
    errors.NotFound: 404,
    errors.VersionNotFound: 404,
    errors.NotOwner: 403,
    errors.NameConflict: 409,
    errors.VersionExists: 409,
    errors.HasVersions: 409,
    errors.AlreadyOwned: 409,
    errors.TransferFailed: 409,
    errors.InsufficientPayment: 402,
}


@app.exception_handler(errors.RegistryError)
async def registry_error_handler(request: Request, exc: errors.RegistryError):
    return JSONResponse(
        status_code=_STATUS_BY_ERROR.get(type(exc), 400),
        content=ErrorResponse(code=exc.code, detail=exc.message).model_dump(),
    )


@app.get("/", tags=["meta"])
async def root():
    """Return basic API information."""
    return {
        "name": "libregistry API",
        "version": __version__,
        "docs": "/docs",
        "openapi": "/openapi.json",
    }


@app.get("/health", tags=["meta"])
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy"}
