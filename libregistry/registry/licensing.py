"""Licensing ledger — fee configuration and the pay-and-refund purchase flow.

A purchase is two-phase: the buyer's ledger entry is committed first, and
only then does value move (payment into escrow, fee to the owner, excess back
to the buyer). A recipient hook that re-enters the registry during a transfer
therefore already sees the license as owned. The caller must run ``purchase``
inside a transaction boundary that restores store and treasury when a
transfer fails; ``LibraryRegistry`` does this.
"""

from __future__ import annotations

import logging

from libregistry.errors import (
    AlreadyOwned,
    InsufficientPayment,
    InvalidAmount,
    LicenseNotRequired,
    PrivateCannotRequireLicense,
)
from libregistry.events import LicenseConfigSet, LicensePurchased
from libregistry.registry.permissions import require_owner
from libregistry.registry.store import RegistryStore
from libregistry.treasury import ESCROW_ACCOUNT, Treasury

logger = logging.getLogger(__name__)


def _is_amount(value: int) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and value >= 0


class LicensingLedger:
    """Per-library license configuration and per-buyer purchase records."""

    def __init__(self, store: RegistryStore, treasury: Treasury) -> None:
        self._store = store
        self._treasury = treasury

    def set_license(
        self, caller: str, name: str, fee: int, required: bool
    ) -> LicenseConfigSet:
        """Configure the fee and whether a license is required.

        A private library may carry a fee, but never ``required=True``.
        """
        library = self._store.require_library(name)
        require_owner(library, caller)
        if not _is_amount(fee):
            raise InvalidAmount(fee)
        if library.is_private and required:
            raise PrivateCannotRequireLicense(name)

        self._store.set_license_terms(name, fee, required)
        logger.info("License for %s set: fee=%d required=%s", name, fee, required)
        return LicenseConfigSet(library=name, fee=fee, required=required)

    def purchase(self, caller: str, name: str, payment: int) -> LicensePurchased:
        """Buy a license for ``caller``; any overpayment is refunded."""
        library = self._store.require_library(name)
        if not _is_amount(payment):
            raise InvalidAmount(payment)
        if not library.license_required:
            raise LicenseNotRequired(name)
        if self._store.has_license(name, caller):
            raise AlreadyOwned(name, caller)
        fee = library.license_fee
        if payment < fee:
            raise InsufficientPayment(name, payment, fee)

        # Bookkeeping before any value moves.
        self._store.record_license(name, caller)

        self._treasury.transfer(caller, ESCROW_ACCOUNT, payment)
        self._treasury.transfer(ESCROW_ACCOUNT, library.owner, fee)
        excess = payment - fee
        if excess > 0:
            self._treasury.transfer(ESCROW_ACCOUNT, caller, excess)

        logger.info(
            "License for %s purchased by %s (fee=%d, refunded=%d)",
            name, caller, fee, excess,
        )
        return LicensePurchased(library=name, buyer=caller, owner=library.owner, fee=fee)

    def has_user_license(self, name: str, address: str) -> bool:
        self._store.require_library(name)
        return self._store.has_license(name, address)
