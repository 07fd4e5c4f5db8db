"""
Asset ledger capability.

The pool never touches balances directly; it moves assets through the two
operations below. Any object providing them can back a pool: the
in-memory :class:`~duopool.tokens.token.Token`, a test double, or an
adapter to an external ledger.
"""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class AssetLedger(Protocol):
    """Fungible asset ledger with ERC-20 style transfer semantics."""

    symbol: str

    def transfer(self, sender: str, recipient: str, amount: int) -> bool:
        """Move *amount* from *sender* to *recipient*; True on success."""
        ...

    def transfer_from(self, spender: str, sender: str, recipient: str, amount: int) -> bool:
        """Move *amount* from *sender* to *recipient* using *spender*'s allowance."""
        ...


@runtime_checkable
class Snapshottable(Protocol):
    """Ledger whose state can be captured and restored for rollback."""

    def take_snapshot(self) -> Any:
        ...

    def restore_snapshot(self, snapshot: Any) -> None:
        ...
