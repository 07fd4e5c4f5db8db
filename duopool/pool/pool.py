"""
Two-asset constant-product pool.

Operations:
  - add_liquidity: deposit both assets at the current ratio for a share
  - remove_liquidity: burn a share for a proportional amount of both assets
  - swap_exact_tokens_for_tokens: exact-input trade on the x * y = k curve
  - get_price / get_amount_out / quote: read-only quotes

Execution model:
  - Reentrancy lock around every mutating operation
  - Each operation runs inside ``atomic()``: pool state and snapshottable
    ledgers are restored if any step fails
  - Assets are pulled before state is updated (add, swap); state is
    updated before assets are pushed (remove)
  - Deadlines are checked against an injected clock
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Sequence

from ..constants import DEFAULT_POOL_ADDRESS
from ..exceptions import (
    ConfigurationError,
    ExpiredError,
    InsufficientAAmountError,
    InsufficientBAmountError,
    InsufficientOutputError,
    InsufficientShareError,
    InvalidAmountError,
    InvalidLiquidityError,
    InvalidPairError,
    InvalidTokensError,
    InvariantViolationError,
    NoLiquidityMintedError,
    ReentrancyError,
    TransferFailedError,
    UnsupportedPathError,
)
from ..logger import get_logger
from ..tokens.ledger import AssetLedger
from ..tokens.token import TokenError
from . import math as pool_math
from .events import BurnEvent, MintEvent, SwapEvent, SyncEvent
from .state import PoolState
from .transaction import atomic

logger = get_logger(__name__)

Clock = Callable[[], int]


def system_clock() -> int:
    """Wall-clock time in whole seconds."""
    return int(time.time())


@dataclass(frozen=True)
class AddLiquidityResult:
    amount_a: int
    amount_b: int
    liquidity: int


@dataclass(frozen=True)
class RemoveLiquidityResult:
    amount_a: int
    amount_b: int


class ConstantProductPool:
    """
    Constant-product pool over two asset ledgers.

    The pool holds its reserves on each ledger under ``address`` and pulls
    deposits with ``transfer_from`` (callers approve the pool beforehand).
    """

    def __init__(
        self,
        ledger_a: AssetLedger,
        ledger_b: AssetLedger,
        *,
        address: str = DEFAULT_POOL_ADDRESS,
        clock: Optional[Clock] = None,
        strict_swap_pull: bool = True,
        state: Optional[PoolState] = None,
    ) -> None:
        for ledger in (ledger_a, ledger_b):
            if not isinstance(ledger, AssetLedger):
                raise TypeError(f"{ledger!r} does not implement transfer / transfer_from")
        if ledger_a.symbol == ledger_b.symbol:
            raise ValueError(f"Pool assets must differ: {ledger_a.symbol}")

        if state is None:
            state = PoolState(token_a=ledger_a.symbol, token_b=ledger_b.symbol)
        elif (state.token_a, state.token_b) != (ledger_a.symbol, ledger_b.symbol):
            raise ValueError(
                f"State pair {state.token_a}/{state.token_b} does not match ledgers "
                f"{ledger_a.symbol}/{ledger_b.symbol}"
            )

        self.state = state
        self.address = address
        self.strict_swap_pull = strict_swap_pull
        self._clock: Clock = clock or system_clock
        self._ledgers: Dict[str, AssetLedger] = {
            ledger_a.symbol: ledger_a,
            ledger_b.symbol: ledger_b,
        }
        self._events: List[Any] = []
        self._locked: bool = False   # reentrancy guard

    @classmethod
    def from_config(
        cls,
        config,
        ledger_a: AssetLedger,
        ledger_b: AssetLedger,
        clock: Optional[Clock] = None,
    ) -> "ConstantProductPool":
        """Build a pool from a :class:`~duopool.config.PoolConfig`."""
        expected = (config.pool.token_a, config.pool.token_b)
        if (ledger_a.symbol, ledger_b.symbol) != expected:
            raise ConfigurationError(
                f"Ledgers {ledger_a.symbol}/{ledger_b.symbol} do not match configured "
                f"pair {expected[0]}/{expected[1]}"
            )
        return cls(
            ledger_a,
            ledger_b,
            address=config.pool.address,
            clock=clock,
            strict_swap_pull=config.pool.strict_swap_pull,
        )

    # -- Read-only views ----------------------------------------------------

    @property
    def token_a(self) -> str:
        return self.state.token_a

    @property
    def token_b(self) -> str:
        return self.state.token_b

    @property
    def reserve_a(self) -> int:
        return self.state.reserve_a

    @property
    def reserve_b(self) -> int:
        return self.state.reserve_b

    @property
    def total_liquidity(self) -> int:
        return self.state.total_liquidity

    @property
    def liquidity_balance(self) -> Dict[str, int]:
        return dict(self.state.liquidity_balance)

    def balance_of(self, owner: str) -> int:
        return self.state.balance_of(owner)

    def current_ratio(self):
        return self.state.current_ratio()

    @property
    def events(self) -> List[Any]:
        return list(self._events)

    @property
    def is_locked(self) -> bool:
        return self._locked

    def to_dict(self) -> Dict[str, Any]:
        data = self.state.to_dict()
        data["address"] = self.address
        return data

    # -- Reentrancy guard ---------------------------------------------------

    def _acquire_lock(self) -> None:
        if self._locked:
            raise ReentrancyError("Reentrancy detected: pool is locked")
        self._locked = True

    def _release_lock(self) -> None:
        self._locked = False

    def _atomic(self, label: str):
        return atomic(self.state, *self._ledgers.values(), label=label)

    # -- Preconditions ------------------------------------------------------

    def _ensure(self, deadline: int) -> None:
        now = self._clock()
        if now > deadline:
            raise ExpiredError(f"Expired: now {now} > deadline {deadline}")

    def _require_pool_order(self, token_a: str, token_b: str) -> None:
        if (token_a, token_b) != (self.token_a, self.token_b):
            raise InvalidTokensError(
                f"Invalid tokens: {token_a}/{token_b}, pool is {self.token_a}/{self.token_b}"
            )

    # -- Asset movement -----------------------------------------------------

    def _pull(self, token: str, sender: str, amount: int, required: bool = True) -> bool:
        """Move *amount* of *token* from *sender* into pool custody."""
        ledger = self._ledgers[token]
        try:
            ok = ledger.transfer_from(self.address, sender, self.address, amount)
        except TokenError as exc:
            if required:
                raise TransferFailedError(token, f"Transfer of {token} from {sender} failed: {exc}") from exc
            logger.warning("Ignoring failed pull of %s %s from %s: %s", amount, token, sender, exc)
            return False
        if not ok:
            if required:
                raise TransferFailedError(token, f"Transfer of {token} from {sender} failed")
            logger.warning("Ignoring failed pull of %s %s from %s", amount, token, sender)
        return bool(ok)

    def _push(self, token: str, recipient: str, amount: int) -> None:
        """Move *amount* of *token* out of pool custody to *recipient*."""
        ledger = self._ledgers[token]
        try:
            ok = ledger.transfer(self.address, recipient, amount)
        except TokenError as exc:
            raise TransferFailedError(token, f"Transfer of {token} to {recipient} failed: {exc}") from exc
        if not ok:
            raise TransferFailedError(token, f"Transfer of {token} to {recipient} failed")

    # -- Add liquidity ------------------------------------------------------

    def add_liquidity(
        self,
        sender: str,
        token_a: str,
        token_b: str,
        amount_a_desired: int,
        amount_b_desired: int,
        amount_a_min: int,
        amount_b_min: int,
        recipient: str,
        deadline: int,
    ) -> AddLiquidityResult:
        """
        Deposit both assets and mint a liquidity share to *recipient*.

        The first deposit sets the price: both desired amounts are taken and
        ``isqrt(a * b)`` is minted. Later deposits are trimmed to the current
        reserve ratio and mint the smaller of the two proportional shares.

        Raises:
            InvalidTokensError, ExpiredError, InvalidAmountError, InsufficientAAmountError,
            InsufficientBAmountError, NoLiquidityMintedError,
            TransferFailedError, ReentrancyError
        """
        self._require_pool_order(token_a, token_b)
        self._ensure(deadline)
        for name, value in (
            ("amount_a_desired", amount_a_desired),
            ("amount_b_desired", amount_b_desired),
            ("amount_a_min", amount_a_min),
            ("amount_b_min", amount_b_min),
        ):
            pool_math.require_int(value, name)

        self._acquire_lock()
        try:
            with self._atomic("add_liquidity"):
                return self._execute_add_liquidity(
                    sender, amount_a_desired, amount_b_desired,
                    amount_a_min, amount_b_min, recipient,
                )
        finally:
            self._release_lock()

    def _execute_add_liquidity(
        self,
        sender: str,
        amount_a_desired: int,
        amount_b_desired: int,
        amount_a_min: int,
        amount_b_min: int,
        recipient: str,
    ) -> AddLiquidityResult:
        """Core add-liquidity logic, called under reentrancy lock."""
        state = self.state
        if amount_a_desired <= 0 or amount_b_desired <= 0:
            raise NoLiquidityMintedError(
                f"No liquidity minted: desired ({amount_a_desired}, {amount_b_desired})"
            )

        if state.total_liquidity == 0:
            amount_a, amount_b = amount_a_desired, amount_b_desired
            liquidity = pool_math.isqrt(amount_a * amount_b)
        else:
            reserve_a, reserve_b = state.current_ratio()
            amount_b_optimal = pool_math.quote(amount_a_desired, reserve_a, reserve_b)
            if amount_b_optimal <= amount_b_desired:
                if amount_b_optimal < amount_b_min:
                    raise InsufficientBAmountError(
                        f"Insufficient B amount: {amount_b_optimal} < minimum {amount_b_min}"
                    )
                amount_a, amount_b = amount_a_desired, amount_b_optimal
            else:
                amount_a_optimal = pool_math.quote(amount_b_desired, reserve_b, reserve_a)
                if amount_a_optimal < amount_a_min:
                    raise InsufficientAAmountError(
                        f"Insufficient A amount: {amount_a_optimal} < minimum {amount_a_min}"
                    )
                amount_a, amount_b = amount_a_optimal, amount_b_desired
            liquidity = min(
                amount_a * state.total_liquidity // reserve_a,
                amount_b * state.total_liquidity // reserve_b,
            )

        if liquidity <= 0 or amount_a <= 0 or amount_b <= 0:
            raise NoLiquidityMintedError(
                f"No liquidity minted: accepted ({amount_a}, {amount_b}), liquidity {liquidity}"
            )
        logger.debug(
            "add_liquidity %s: accepted (%s, %s) → %s shares", sender, amount_a, amount_b, liquidity
        )

        self._pull(self.token_a, sender, amount_a)
        self._pull(self.token_b, sender, amount_b)

        state.set_reserves(state.reserve_a + amount_a, state.reserve_b + amount_b)
        state.mint(recipient, liquidity)
        state.check_invariants()

        now = self._clock()
        self._events.append(MintEvent(sender, recipient, amount_a, amount_b, liquidity, now))
        self._events.append(SyncEvent(state.reserve_a, state.reserve_b, now))
        logger.info(
            "add_liquidity: %s deposited %s %s + %s %s, minted %s to %s",
            sender, amount_a, self.token_a, amount_b, self.token_b, liquidity, recipient,
        )
        return AddLiquidityResult(amount_a, amount_b, liquidity)

    # -- Remove liquidity ---------------------------------------------------

    def remove_liquidity(
        self,
        sender: str,
        token_a: str,
        token_b: str,
        liquidity: int,
        amount_a_min: int,
        amount_b_min: int,
        recipient: str,
        deadline: int,
    ) -> RemoveLiquidityResult:
        """
        Burn *liquidity* of the sender's share and pay out both assets.

        State is updated before the payout so that a ledger calling back
        into the pool sees the share already burned.
        """
        self._require_pool_order(token_a, token_b)
        self._ensure(deadline)
        pool_math.require_int(liquidity, "liquidity", InvalidLiquidityError)
        pool_math.require_int(amount_a_min, "amount_a_min")
        pool_math.require_int(amount_b_min, "amount_b_min")
        if liquidity <= 0:
            raise InvalidLiquidityError(f"Invalid liquidity: {liquidity}")

        self._acquire_lock()
        try:
            with self._atomic("remove_liquidity"):
                return self._execute_remove_liquidity(
                    sender, liquidity, amount_a_min, amount_b_min, recipient,
                )
        finally:
            self._release_lock()

    def _execute_remove_liquidity(
        self,
        sender: str,
        liquidity: int,
        amount_a_min: int,
        amount_b_min: int,
        recipient: str,
    ) -> RemoveLiquidityResult:
        state = self.state
        held = state.balance_of(sender)
        if liquidity > held:
            raise InsufficientShareError(
                f"Insufficient share: {sender} holds {held}, requested {liquidity}"
            )

        amount_a = liquidity * state.reserve_a // state.total_liquidity
        amount_b = liquidity * state.reserve_b // state.total_liquidity
        if amount_a < amount_a_min:
            raise InsufficientAAmountError(
                f"Insufficient A amount: {amount_a} < minimum {amount_a_min}"
            )
        if amount_b < amount_b_min:
            raise InsufficientBAmountError(
                f"Insufficient B amount: {amount_b} < minimum {amount_b_min}"
            )

        state.burn(sender, liquidity)
        state.set_reserves(state.reserve_a - amount_a, state.reserve_b - amount_b)
        state.check_invariants()

        if amount_a:
            self._push(self.token_a, recipient, amount_a)
        if amount_b:
            self._push(self.token_b, recipient, amount_b)

        now = self._clock()
        self._events.append(BurnEvent(sender, recipient, amount_a, amount_b, liquidity, now))
        self._events.append(SyncEvent(state.reserve_a, state.reserve_b, now))
        logger.info(
            "remove_liquidity: %s burned %s, paid %s %s + %s %s to %s",
            sender, liquidity, amount_a, self.token_a, amount_b, self.token_b, recipient,
        )
        return RemoveLiquidityResult(amount_a, amount_b)

    # -- Swap ---------------------------------------------------------------

    def swap_exact_tokens_for_tokens(
        self,
        sender: str,
        amount_in: int,
        amount_out_min: int,
        path: Sequence[str],
        recipient: str,
        deadline: int,
    ) -> List[int]:
        """
        Trade exactly *amount_in* of ``path[0]`` for ``path[1]``.

        Returns:
            [amount_in, amount_out]

        Raises:
            UnsupportedPathError, ExpiredError, InvalidPairError,
            InvalidAmountError, InsufficientLiquidityError,
            InsufficientOutputError, TransferFailedError, ReentrancyError
        """
        if len(path) != 2:
            raise UnsupportedPathError(f"Unsupported path of length {len(path)}")
        self._ensure(deadline)
        token_in, token_out = path[0], path[1]
        if not self.state.is_pair(token_in, token_out):
            raise InvalidPairError(f"Invalid pair: {token_in}/{token_out}")
        pool_math.require_int(amount_in, "amount_in")
        pool_math.require_int(amount_out_min, "amount_out_min")
        if amount_in <= 0:
            raise InvalidAmountError(f"Swap amount must be positive: {amount_in}")

        self._acquire_lock()
        try:
            with self._atomic("swap"):
                return self._execute_swap(
                    sender, amount_in, amount_out_min, token_in, token_out, recipient,
                )
        finally:
            self._release_lock()

    def _execute_swap(
        self,
        sender: str,
        amount_in: int,
        amount_out_min: int,
        token_in: str,
        token_out: str,
        recipient: str,
    ) -> List[int]:
        """Core swap logic, called under reentrancy lock."""
        state = self.state
        k_before = state.k

        self._pull(token_in, sender, amount_in, required=self.strict_swap_pull)

        reserve_in, reserve_out = state.reserves_for(token_in, token_out)
        amount_out = pool_math.get_amount_out(amount_in, reserve_in, reserve_out)
        if amount_out < amount_out_min:
            raise InsufficientOutputError(
                f"Insufficient output: {amount_out} < minimum {amount_out_min}"
            )
        logger.debug("swap %s: %s %s → %s %s", sender, amount_in, token_in, amount_out, token_out)

        if amount_out:
            self._push(token_out, recipient, amount_out)

        state.set_reserves_for(token_in, reserve_in + amount_in, reserve_out - amount_out)
        if state.k < k_before:
            raise InvariantViolationError(f"Invariant violation: k {state.k} < {k_before}")
        state.check_invariants()

        now = self._clock()
        self._events.append(SwapEvent(sender, recipient, token_in, token_out, amount_in, amount_out, now))
        self._events.append(SyncEvent(state.reserve_a, state.reserve_b, now))
        logger.info(
            "swap: %s sold %s %s for %s %s to %s",
            sender, amount_in, token_in, amount_out, token_out, recipient,
        )
        return [amount_in, amount_out]

    # -- Quotes -------------------------------------------------------------

    def get_price(self, token_x: str, token_y: str) -> int:
        """Price of *token_x* in units of *token_y*, scaled by 10**18."""
        if not self.state.is_pair(token_x, token_y):
            raise InvalidPairError(f"Invalid pair: {token_x}/{token_y}")
        reserve_x, reserve_y = self.state.reserves_for(token_x, token_y)
        return pool_math.spot_price(reserve_x, reserve_y)

    @staticmethod
    def get_amount_out(amount_in: int, reserve_in: int, reserve_out: int) -> int:
        return pool_math.get_amount_out(amount_in, reserve_in, reserve_out)

    @staticmethod
    def quote(amount_a: int, reserve_a: int, reserve_b: int) -> int:
        return pool_math.quote(amount_a, reserve_a, reserve_b)

    def __repr__(self) -> str:
        return (
            f"<ConstantProductPool {self.token_a}/{self.token_b} "
            f"reserves=({self.reserve_a}, {self.reserve_b}) liquidity={self.total_liquidity}>"
        )
