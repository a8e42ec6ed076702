"""Treasury — balances and value transfers behind license purchases.

Stands in for the payment rail: every address has an integer balance, and a
transfer either moves the full amount or raises ``TransferFailed``. An address
may register a receive hook that runs after funds arrive; the hook may call
back into the registry, and raising from it rejects the transfer.

Storage is in memory unless a state directory is given, in which case
balances are kept in ``treasury.json``. Hooks are never persisted.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Callable, Optional

from libregistry.errors import InvalidAmount, TransferFailed

logger = logging.getLogger(__name__)

# Account that holds a buyer's payment while a purchase settles.
ESCROW_ACCOUNT = "libregistry:escrow"

# (sender, amount) -> None
ReceiveHook = Callable[[str, int], None]


class Treasury:
    """Address balances with all-or-nothing transfers."""

    STATE_FILE = "treasury.json"

    def __init__(self, state_dir: Optional[str | Path] = None) -> None:
        self._balances: dict[str, int] = {}
        self._hooks: dict[str, ReceiveHook] = {}
        # (address, previous balance) per change in the open transaction.
        self._journal: Optional[list[tuple[str, Optional[int]]]] = None
        self.state_dir = Path(state_dir) if state_dir is not None else None
        if self.state_dir is not None:
            self.state_dir.mkdir(parents=True, exist_ok=True)
            self.state_path = self.state_dir / self.STATE_FILE
            if self.state_path.exists():
                self._balances = json.loads(self.state_path.read_text(encoding="utf-8"))

    def balance_of(self, address: str) -> int:
        return self._balances.get(address, 0)

    def deposit(self, address: str, amount: int) -> int:
        """Credit new funds to ``address`` and return its balance."""
        _check_amount(amount)
        self._set_balance(address, self.balance_of(address) + amount)
        return self._balances[address]

    def transfer(self, sender: str, recipient: str, amount: int) -> None:
        """Move ``amount`` from sender to recipient, then run the recipient hook."""
        _check_amount(amount)
        available = self.balance_of(sender)
        if available < amount:
            raise TransferFailed(
                sender, recipient, amount, f"insufficient funds ({available} < {amount})"
            )
        self._set_balance(sender, available - amount)
        self._set_balance(recipient, self.balance_of(recipient) + amount)
        logger.debug("Transferred %d from %s to %s", amount, sender, recipient)

        hook = self._hooks.get(recipient)
        if hook is None:
            return
        try:
            hook(sender, amount)
        except TransferFailed:
            raise
        except Exception as exc:
            raise TransferFailed(
                sender, recipient, amount, f"recipient rejected transfer: {exc}"
            ) from exc

    def on_receive(self, address: str, hook: ReceiveHook) -> None:
        self._hooks[address] = hook

    def remove_hook(self, address: str) -> None:
        self._hooks.pop(address, None)

    def _set_balance(self, address: str, value: int) -> None:
        if self._journal is not None:
            self._journal.append((address, self._balances.get(address)))
        self._balances[address] = value

    # ------------------------------------------------------------------
    # Transactions and persistence
    # ------------------------------------------------------------------

    def begin(self) -> int:
        """Start (or nest into) a transaction and return its undo mark."""
        if self._journal is None:
            self._journal = []
        return len(self._journal)

    def rollback(self, mark: int) -> None:
        """Restore every balance changed after ``mark``."""
        if self._journal is None:
            return
        while len(self._journal) > mark:
            address, previous = self._journal.pop()
            if previous is None:
                self._balances.pop(address, None)
            else:
                self._balances[address] = previous

    def release(self) -> None:
        self._journal = None

    def save(self) -> None:
        if self.state_dir is None:
            return
        self.state_path.write_text(json.dumps(self._balances, indent=2), encoding="utf-8")


def _check_amount(amount: int) -> None:
    if not isinstance(amount, int) or isinstance(amount, bool) or amount < 0:
        raise InvalidAmount(amount)
