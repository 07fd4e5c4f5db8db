"""
Constant-product pool engine.

Components:
  - PoolState            : reserves, total liquidity, per-owner shares
  - ConstantProductPool  : add / remove liquidity, exact-input swap, quotes
  - atomic               : snapshot / restore wrapper around each operation
  - isqrt, get_amount_out, quote, spot_price : integer math
"""

from .state import PoolState
from .math import (
    isqrt,
    get_amount_out,
    quote,
    spot_price,
)
from .events import (
    MintEvent,
    BurnEvent,
    SwapEvent,
    SyncEvent,
)
from .transaction import atomic
from .pool import (
    AddLiquidityResult,
    RemoveLiquidityResult,
    ConstantProductPool,
    system_clock,
)

__all__ = [
    # State
    "PoolState",
    # Math
    "isqrt", "get_amount_out", "quote", "spot_price",
    # Events
    "MintEvent", "BurnEvent", "SwapEvent", "SyncEvent",
    # Engine
    "atomic", "AddLiquidityResult", "RemoveLiquidityResult",
    "ConstantProductPool", "system_clock",
]
