"""
Registry Errors — Domain-specific error types.

Error hierarchy:
    RegistryError (base)
    ├── NotFound
    ├── NameConflict
    ├── NotOwner
    ├── HasVersions
    ├── VersionExists
    ├── VersionNotFound
    ├── EmptyContentPointer
    ├── PrivateCannotRequireLicense
    ├── LicenseNotRequired
    ├── AlreadyOwned
    ├── InsufficientPayment
    ├── NotPrivate
    ├── InvalidAddress
    ├── InvalidAmount
    ├── TransferFailed
    └── ConfigError

Every error is a caller error raised before any state is mutated, except
``TransferFailed``, which aborts a purchase mid-flight and triggers rollback.
"""

from __future__ import annotations

from typing import Any


class RegistryError(Exception):
    """Base error for all registry-related errors."""

    code = "REGISTRY_ERROR"

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class NotFound(RegistryError):
    code = "NOT_FOUND"

    def __init__(self, name: str):
        super().__init__("Library does not exist", {"name": name})
        self.name = name


class NameConflict(RegistryError):
    code = "NAME_CONFLICT"

    def __init__(self, name: str):
        super().__init__("Library name already exists", {"name": name})
        self.name = name


class NotOwner(RegistryError):
    """
    Raised when a caller other than the library owner attempts a mutation.
    """

    code = "NOT_OWNER"

    def __init__(self, name: str, caller: str, owner: str):
        super().__init__(
            "Caller is not the owner",
            {"name": name, "caller": caller, "owner": owner},
        )
        self.name = name
        self.caller = caller
        self.owner = owner


class HasVersions(RegistryError):
    code = "HAS_VERSIONS"

    def __init__(self, name: str, version_count: int):
        super().__init__(
            "Cannot delete library with published versions",
            {"name": name, "version_count": version_count},
        )
        self.name = name
        self.version_count = version_count


class VersionExists(RegistryError):
    code = "VERSION_EXISTS"

    def __init__(self, name: str, version: str):
        super().__init__("Version already exists", {"name": name, "version": version})
        self.name = name
        self.version = version


class VersionNotFound(RegistryError):
    code = "VERSION_NOT_FOUND"

    def __init__(self, name: str, version: str):
        super().__init__("Version does not exist", {"name": name, "version": version})
        self.name = name
        self.version = version


class EmptyContentPointer(RegistryError):
    code = "EMPTY_CONTENT_POINTER"

    def __init__(self, name: str, version: str):
        super().__init__(
            "Content pointer cannot be empty", {"name": name, "version": version}
        )
        self.name = name
        self.version = version


class PrivateCannotRequireLicense(RegistryError):
    """
    Raised when an owner tries to put a private library on the purchase model.

    Private libraries are gated exclusively by their authorization set.
    """

    code = "PRIVATE_CANNOT_REQUIRE_LICENSE"

    def __init__(self, name: str):
        super().__init__(
            "Private libraries cannot require a license for access via purchase; "
            "use direct authorization",
            {"name": name},
        )
        self.name = name


class LicenseNotRequired(RegistryError):
    code = "LICENSE_NOT_REQUIRED"

    def __init__(self, name: str):
        super().__init__("License not required for this library", {"name": name})
        self.name = name


class AlreadyOwned(RegistryError):
    code = "ALREADY_OWNED"

    def __init__(self, name: str, buyer: str):
        super().__init__(
            "License already owned by this address", {"name": name, "buyer": buyer}
        )
        self.name = name
        self.buyer = buyer


class InsufficientPayment(RegistryError):
    code = "INSUFFICIENT_PAYMENT"

    def __init__(self, name: str, payment: int, fee: int):
        super().__init__(
            "Insufficient payment sent. Required exact fee or more",
            {"name": name, "payment": payment, "fee": fee},
        )
        self.name = name
        self.payment = payment
        self.fee = fee


class NotPrivate(RegistryError):
    code = "NOT_PRIVATE"

    def __init__(self, name: str):
        super().__init__("Library is not private", {"name": name})
        self.name = name


class InvalidAddress(RegistryError):
    code = "INVALID_ADDRESS"

    def __init__(self, address: str):
        super().__init__("Invalid user address", {"address": address})
        self.address = address


class InvalidAmount(RegistryError):
    code = "INVALID_AMOUNT"

    def __init__(self, amount: int):
        super().__init__("Amount must be a non-negative integer", {"amount": amount})
        self.amount = amount


class TransferFailed(RegistryError):
    """
    Raised by the treasury when a value transfer cannot be completed.

    Examples:
    - The sender's balance does not cover the amount
    - The recipient's hook rejects the incoming transfer
    """

    code = "TRANSFER_FAILED"

    def __init__(
        self,
        sender: str,
        recipient: str,
        amount: int,
        reason: str,
    ):
        super().__init__(
            f"Transfer failed: {reason}",
            {"sender": sender, "recipient": recipient, "amount": amount},
        )
        self.sender = sender
        self.recipient = recipient
        self.amount = amount
        self.reason = reason


class ConfigError(RegistryError):
    code = "CONFIG_ERROR"

    def __init__(self, path: str, reason: str):
        super().__init__(f"Invalid configuration in {path}: {reason}", {"path": path})
        self.path = path
        self.reason = reason
