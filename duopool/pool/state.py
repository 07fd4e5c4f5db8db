"""
Pool state and invariant checks.

A single ``PoolState`` holds everything a pool persists: the two reserves,
the total liquidity and the per-owner share map. It is owned by one
:class:`~duopool.pool.pool.ConstantProductPool` and mutated only by its
operations, always inside an atomic transaction.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Tuple

from ..exceptions import (
    InsufficientShareError,
    InvalidPairError,
    InvariantViolationError,
)


@dataclass
class PoolState:
    """
    Reserves and liquidity-share bookkeeping of a two-asset pool.

    token_a / token_b are fixed at creation. Owners with a zero share are
    dropped from ``liquidity_balance``.
    """
    token_a: str
    token_b: str
    reserve_a: int = 0
    reserve_b: int = 0
    total_liquidity: int = 0
    liquidity_balance: Dict[str, int] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if not self.token_a or not self.token_b:
            raise ValueError("Pool assets must be named")
        if self.token_a == self.token_b:
            raise ValueError(f"Pool assets must differ: {self.token_a}")

    # -- Views ----------------------------------------------------------------

    def current_ratio(self) -> Tuple[int, int]:
        return self.reserve_a, self.reserve_b

    def balance_of(self, owner: str) -> int:
        return self.liquidity_balance.get(owner, 0)

    def is_pair(self, token_x: str, token_y: str) -> bool:
        """True if (x, y) names the pool pair in either direction."""
        return (token_x, token_y) in (
            (self.token_a, self.token_b),
            (self.token_b, self.token_a),
        )

    def reserves_for(self, token_in: str, token_out: str) -> Tuple[int, int]:
        """(reserve_in, reserve_out) for a trade direction."""
        if (token_in, token_out) == (self.token_a, self.token_b):
            return self.reserve_a, self.reserve_b
        if (token_in, token_out) == (self.token_b, self.token_a):
            return self.reserve_b, self.reserve_a
        raise InvalidPairError(f"Invalid pair: {token_in}/{token_out}")

    @property
    def k(self) -> int:
        return self.reserve_a * self.reserve_b

    # -- Raw mutators (called by the pool under its transaction) ----------

    def set_reserves(self, reserve_a: int, reserve_b: int) -> None:
        if reserve_a < 0 or reserve_b < 0:
            raise InvariantViolationError(
                f"Reserves cannot go negative: ({reserve_a}, {reserve_b})"
            )
        self.reserve_a = reserve_a
        self.reserve_b = reserve_b

    def set_reserves_for(self, token_in: str, reserve_in: int, reserve_out: int) -> None:
        """Write back reserves returned by :meth:`reserves_for`."""
        if token_in == self.token_a:
            self.set_reserves(reserve_in, reserve_out)
        else:
            self.set_reserves(reserve_out, reserve_in)

    def mint(self, owner: str, amount: int) -> None:
        if amount <= 0:
            raise InvariantViolationError(f"Mint amount must be positive: {amount}")
        self.liquidity_balance[owner] = self.balance_of(owner) + amount
        self.total_liquidity += amount

    def burn(self, owner: str, amount: int) -> None:
        held = self.balance_of(owner)
        if amount > held:
            raise InsufficientShareError(
                f"Insufficient share: {owner} holds {held}, requested {amount}"
            )
        remaining = held - amount
        if remaining:
            self.liquidity_balance[owner] = remaining
        else:
            self.liquidity_balance.pop(owner, None)
        self.total_liquidity -= amount

    # -- Invariants -----------------------------------------------------------

    def check_invariants(self) -> None:
        """Raise InvariantViolationError if the bookkeeping is inconsistent."""
        if self.reserve_a < 0 or self.reserve_b < 0 or self.total_liquidity < 0:
            raise InvariantViolationError(
                f"Negative pool value: reserves ({self.reserve_a}, {self.reserve_b}), "
                f"total {self.total_liquidity}"
            )
        if any(v < 0 for v in self.liquidity_balance.values()):
            raise InvariantViolationError("Negative liquidity share")
        shares = sum(self.liquidity_balance.values())
        if shares != self.total_liquidity:
            raise InvariantViolationError(
                f"Share sum {shares} != total liquidity {self.total_liquidity}"
            )
        if self.total_liquidity == 0 and (self.reserve_a or self.reserve_b):
            raise InvariantViolationError(
                f"Reserves ({self.reserve_a}, {self.reserve_b}) without liquidity"
            )

    # -- Snapshot / restore (for rollback) ---------------------------------

    def take_snapshot(self) -> Dict[str, Any]:
        return {
            "reserve_a": self.reserve_a,
            "reserve_b": self.reserve_b,
            "total_liquidity": self.total_liquidity,
            "liquidity_balance": dict(self.liquidity_balance),
        }

    def restore_snapshot(self, snapshot: Dict[str, Any]) -> None:
        self.reserve_a = snapshot["reserve_a"]
        self.reserve_b = snapshot["reserve_b"]
        self.total_liquidity = snapshot["total_liquidity"]
        self.liquidity_balance = dict(snapshot["liquidity_balance"])

    # -- Serialisation ------------------------------------------------------

    def to_dict(self) -> Dict[str, Any]:
        return {
            "tokenA": self.token_a,
            "tokenB": self.token_b,
            "reserveA": self.reserve_a,
            "reserveB": self.reserve_b,
            "totalLiquidity": self.total_liquidity,
            "liquidityBalance": dict(sorted(self.liquidity_balance.items())),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PoolState":
        state = cls(
            token_a=data["tokenA"],
            token_b=data["tokenB"],
            reserve_a=int(data.get("reserveA", 0)),
            reserve_b=int(data.get("reserveB", 0)),
            total_liquidity=int(data.get("totalLiquidity", 0)),
            liquidity_balance={
                owner: int(v)
                for owner, v in data.get("liquidityBalance", {}).items()
                if int(v)
            },
        )
        state.check_invariants()
        return state
