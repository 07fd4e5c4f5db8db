"""
Asset ledgers

Provides:
  - AssetLedger   : capability the pool moves assets through
  - Snapshottable : ledgers the pool can roll back on failure
  - Token         : in-memory fungible token implementing both
"""

from .ledger import (
    AssetLedger,
    Snapshottable,
)
from .token import (
    Token,
    TransferEvent,
    ApprovalEvent,
    TokenError,
    InsufficientBalanceError,
    InsufficientAllowanceError,
    TokenFrozenError,
)

__all__ = [
    "AssetLedger",
    "Snapshottable",
    "Token",
    "TransferEvent",
    "ApprovalEvent",
    "TokenError",
    "InsufficientBalanceError",
    "InsufficientAllowanceError",
    "TokenFrozenError",
]
