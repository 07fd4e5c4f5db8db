"""
In-memory fungible token.

Implements the :class:`~duopool.tokens.ledger.AssetLedger` capability with:
  - ERC-20 style interface (transfer, approve, transfer_from, balance_of)
  - Integer amounts in the token's smallest unit
  - Minting by the deployer (funding accounts in simulations and tests)
  - Freeze switch that makes every transfer fail
  - Snapshot / restore so a pool operation can roll the ledger back
"""

import time
from dataclasses import dataclass, field
from typing import Any, Dict, List, Tuple

from ..logger import get_logger
from ..constants import TOKEN_DEFAULT_DECIMALS, TOKEN_MAX_SUPPLY

logger = get_logger(__name__)


# ══════════════════════════════════════════════════════════════════════
#  EXCEPTIONS
# ══════════════════════════════════════════════════════════════════════

class TokenError(Exception):
    """Base exception for token operations."""


class InsufficientBalanceError(TokenError):
    """Raised when sender balance is too low."""


class InsufficientAllowanceError(TokenError):
    """Raised when spender allowance is too low."""


class TokenFrozenError(TokenError):
    """Raised when the token is frozen."""


# ══════════════════════════════════════════════════════════════════════
#  EVENTS
# ══════════════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class TransferEvent:
    """Emitted on every successful transfer or mint."""
    token_symbol: str
    sender: str
    recipient: str
    amount: int
    timestamp: float = field(default_factory=time.time)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "event": "Transfer",
            "token": self.token_symbol,
            "from": self.sender,
            "to": self.recipient,
            "amount": self.amount,
            "timestamp": self.timestamp,
        }


@dataclass(frozen=True)
class ApprovalEvent:
    """Emitted on every successful approve."""
    token_symbol: str
    owner: str
    spender: str
    amount: int
    timestamp: float = field(default_factory=time.time)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "event": "Approval",
            "token": self.token_symbol,
            "owner": self.owner,
            "spender": self.spender,
            "amount": self.amount,
            "timestamp": self.timestamp,
        }


# ══════════════════════════════════════════════════════════════════════
#  TOKEN
# ══════════════════════════════════════════════════════════════════════

class Token:
    """
    Fungible token with ERC-20 semantics.

        - balance_of(address) → int
        - transfer(sender, recipient, amount) → True
        - approve(owner, spender, amount)
        - transfer_from(spender, sender, recipient, amount) → True
        - total_supply → int

    Failed transfers raise a :class:`TokenError` subclass; the pool treats
    that the same as a ``False`` return.
    """

    def __init__(
        self,
        name: str,
        symbol: str,
        decimals: int = TOKEN_DEFAULT_DECIMALS,
        total_supply: int = 0,
        deployer: str = "",
    ):
        if not name:
            raise TokenError("Token name cannot be empty")
        if not symbol:
            raise TokenError("Token symbol cannot be empty")
        if decimals < 0 or decimals > 18:
            raise TokenError(f"Decimals must be 0-18, got {decimals}")
        if total_supply < 0:
            raise TokenError("Total supply cannot be negative")
        if total_supply > TOKEN_MAX_SUPPLY:
            raise TokenError(f"Total supply {total_supply} exceeds max {TOKEN_MAX_SUPPLY}")

        self.name = name
        self.symbol = symbol
        self.decimals = decimals
        self.deployer = deployer
        self._total_supply = total_supply
        self._frozen = False

        self._balances: Dict[str, int] = {}
        self._allowances: Dict[Tuple[str, str], int] = {}  # (owner, spender)
        self._events: List[Any] = []

        if total_supply > 0 and deployer:
            self._balances[deployer] = total_supply

        logger.debug(f"Token deployed: {symbol} ({name}), supply={total_supply}")

    # ── Read-only views ───────────────────────────────────────────────

    @property
    def total_supply(self) -> int:
        return self._total_supply

    def balance_of(self, address: str) -> int:
        return self._balances.get(address, 0)

    def allowance(self, owner: str, spender: str) -> int:
        return self._allowances.get((owner, spender), 0)

    @property
    def is_frozen(self) -> bool:
        return self._frozen

    @property
    def events(self) -> List[Any]:
        return list(self._events)

    # ── State guards ──────────────────────────────────────────────────

    def _require_not_frozen(self):
        if self._frozen:
            raise TokenFrozenError(f"Token {self.symbol} is frozen")

    # ── Core ERC-20 operations ────────────────────────────────────────

    def transfer(self, sender: str, recipient: str, amount: int) -> bool:
        self._require_not_frozen()

        if amount <= 0:
            raise TokenError("Transfer amount must be positive")
        if sender == recipient:
            raise TokenError("Cannot transfer to self")

        bal = self.balance_of(sender)
        if bal < amount:
            raise InsufficientBalanceError(
                f"{sender} balance {bal} < transfer amount {amount}"
            )

        self._balances[sender] = bal - amount
        self._balances[recipient] = self.balance_of(recipient) + amount

        self._events.append(TransferEvent(self.symbol, sender, recipient, amount))
        logger.debug(f"Transfer: {sender} → {recipient} {amount} {self.symbol}")
        return True

    def approve(self, owner: str, spender: str, amount: int) -> ApprovalEvent:
        """Set *spender*'s allowance over *owner*'s balance."""
        self._require_not_frozen()

        if amount < 0:
            raise TokenError("Allowance amount cannot be negative")

        self._allowances[(owner, spender)] = amount

        event = ApprovalEvent(self.symbol, owner, spender, amount)
        self._events.append(event)
        logger.debug(f"Approve: {owner} → {spender} allowance={amount} {self.symbol}")
        return event

    def transfer_from(self, spender: str, sender: str, recipient: str, amount: int) -> bool:
        """
        Transfer on behalf of *sender* using *spender*'s allowance.
        """
        self._require_not_frozen()

        if amount <= 0:
            raise TokenError("Transfer amount must be positive")

        bal = self.balance_of(sender)
        if bal < amount:
            raise InsufficientBalanceError(
                f"{sender} balance {bal} < transfer amount {amount}"
            )

        allow = self.allowance(sender, spender)
        if allow < amount:
            raise InsufficientAllowanceError(
                f"Allowance {allow} < transfer amount {amount}"
            )

        self._balances[sender] = bal - amount
        self._balances[recipient] = self.balance_of(recipient) + amount
        self._allowances[(sender, spender)] = allow - amount

        self._events.append(TransferEvent(self.symbol, sender, recipient, amount))
        logger.debug(
            f"transfer_from: spender={spender} {sender} → {recipient} {amount} {self.symbol}"
        )
        return True

    # ── Supply ────────────────────────────────────────────────────────

    def mint(self, operator: str, recipient: str, amount: int) -> TransferEvent:
        """Mint new units to *recipient*. Only the deployer may mint."""
        self._require_not_frozen()

        if operator != self.deployer:
            raise TokenError(f"{operator} is not allowed to mint {self.symbol}")
        if amount <= 0:
            raise TokenError("Mint amount must be positive")

        new_supply = self._total_supply + amount
        if new_supply > TOKEN_MAX_SUPPLY:
            raise TokenError(f"Minting {amount} would exceed max supply")

        self._total_supply = new_supply
        self._balances[recipient] = self.balance_of(recipient) + amount

        event = TransferEvent(self.symbol, "", recipient, amount)
        self._events.append(event)
        return event

    # ── Freeze / unfreeze ─────────────────────────────────────────────

    def freeze(self):
        self._frozen = True
        logger.warning(f"Token {self.symbol} FROZEN")

    def unfreeze(self):
        self._frozen = False
        logger.info(f"Token {self.symbol} unfrozen")

    # ── Snapshot / restore (for rollback) ─────────────────────────────

    def take_snapshot(self) -> Dict[str, Any]:
        """Capture balances, allowances and supply."""
        return {
            "balances": dict(self._balances),
            "allowances": dict(self._allowances),
            "total_supply": self._total_supply,
            "event_count": len(self._events),
        }

    def restore_snapshot(self, snapshot: Dict[str, Any]) -> None:
        self._balances = dict(snapshot["balances"])
        self._allowances = dict(snapshot["allowances"])
        self._total_supply = snapshot["total_supply"]
        del self._events[snapshot["event_count"]:]

    # ── Serialization ─────────────────────────────────────────────────

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "symbol": self.symbol,
            "decimals": self.decimals,
            "totalSupply": self._total_supply,
            "deployer": self.deployer,
            "frozen": self._frozen,
            "holders": len([b for b in self._balances.values() if b > 0]),
        }

    def __repr__(self) -> str:
        return f"<Token {self.symbol} supply={self._total_supply}>"
