"""Events recorded by a pool when an operation commits.

The pool stamps each event with its own clock; the wall-clock default
only applies to events built directly.
"""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import Any, Dict


@dataclass(frozen=True)
class MintEvent:
    """Liquidity added."""
    sender: str
    recipient: str
    amount_a: int
    amount_b: int
    liquidity: int
    timestamp: float = field(default_factory=time.time)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "event": "Mint",
            "sender": self.sender,
            "to": self.recipient,
            "amountA": self.amount_a,
            "amountB": self.amount_b,
            "liquidity": self.liquidity,
            "timestamp": self.timestamp,
        }


@dataclass(frozen=True)
class BurnEvent:
    """Liquidity removed."""
    sender: str
    recipient: str
    amount_a: int
    amount_b: int
    liquidity: int
    timestamp: float = field(default_factory=time.time)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "event": "Burn",
            "sender": self.sender,
            "to": self.recipient,
            "amountA": self.amount_a,
            "amountB": self.amount_b,
            "liquidity": self.liquidity,
            "timestamp": self.timestamp,
        }


@dataclass(frozen=True)
class SwapEvent:
    sender: str
    recipient: str
    token_in: str
    token_out: str
    amount_in: int
    amount_out: int
    timestamp: float = field(default_factory=time.time)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "event": "Swap",
            "sender": self.sender,
            "to": self.recipient,
            "tokenIn": self.token_in,
            "tokenOut": self.token_out,
            "amountIn": self.amount_in,
            "amountOut": self.amount_out,
            "timestamp": self.timestamp,
        }


@dataclass(frozen=True)
class SyncEvent:
    """Reserves after a committed operation."""
    reserve_a: int
    reserve_b: int
    timestamp: float = field(default_factory=time.time)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "event": "Sync",
            "reserveA": self.reserve_a,
            "reserveB": self.reserve_b,
            "timestamp": self.timestamp,
        }
