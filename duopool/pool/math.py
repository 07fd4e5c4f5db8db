"""
Integer math for the constant-product pool.

All functions are pure and work on non-negative integers in the assets'
smallest units. Divisions floor, which always rounds in the pool's favour:
  - amount_out = floor(amount_in * reserve_out / (reserve_in + amount_in))
  - quote      = floor(amount_a * reserve_b / reserve_a)
  - price      = floor(reserve_y * PRICE_SCALE / reserve_x)
"""

from __future__ import annotations

from ..constants import PRICE_SCALE
from ..exceptions import (
    InsufficientLiquidityError,
    InvalidAmountError,
    NoLiquidityError,
)


def require_int(value, name: str, error=InvalidAmountError) -> None:
    """Raise *error* unless *value* is an int (bools are rejected)."""
    if isinstance(value, bool) or not isinstance(value, int):
        raise error(f"{name} must be an integer, got {type(value).__name__}: {value!r}")


def isqrt(y: int) -> int:
    """
    Floor square root by the Babylonian method.

    Deterministic integer iteration, no floating point. Equals
    ``math.isqrt`` for every non-negative input.
    """
    require_int(y, "isqrt argument")
    if y < 0:
        raise ValueError(f"isqrt of negative number: {y}")
    if y > 3:
        z = y
        x = y // 2 + 1
        while x < z:
            z = x
            x = (y // x + x) // 2
        return z
    if y != 0:
        return 1
    return 0


def get_amount_out(amount_in: int, reserve_in: int, reserve_out: int) -> int:
    """
    Output of an exact-input swap against the given reserves.

    Raises:
        InvalidAmountError: an argument is not an int, or amount_in is not positive
        InsufficientLiquidityError: either reserve is zero
    """
    require_int(amount_in, "Swap amount")
    require_int(reserve_in, "Reserve in")
    require_int(reserve_out, "Reserve out")
    if amount_in <= 0:
        raise InvalidAmountError(f"Swap amount must be positive: {amount_in}")
    if reserve_in <= 0 or reserve_out <= 0:
        raise InsufficientLiquidityError(
            f"Insufficient liquidity: reserves ({reserve_in}, {reserve_out})"
        )
    return amount_in * reserve_out // (reserve_in + amount_in)


def quote(amount_a: int, reserve_a: int, reserve_b: int) -> int:
    """Amount of B worth *amount_a* of A at the current reserve ratio."""
    require_int(amount_a, "Quote amount")
    require_int(reserve_a, "Reserve A")
    require_int(reserve_b, "Reserve B")
    if amount_a <= 0:
        raise InvalidAmountError(f"Quote amount must be positive: {amount_a}")
    if reserve_a <= 0 or reserve_b <= 0:
        raise InsufficientLiquidityError(
            f"Insufficient liquidity: reserves ({reserve_a}, {reserve_b})"
        )
    return amount_a * reserve_b // reserve_a


def spot_price(reserve_x: int, reserve_y: int) -> int:
    """Price of X in units of Y, scaled by PRICE_SCALE (10**18)."""
    if reserve_x <= 0:
        raise NoLiquidityError("No liquidity: base reserve is zero")
    return reserve_y * PRICE_SCALE // reserve_x
