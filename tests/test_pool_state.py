"""
Test suite for PoolState bookkeeping

Covers share minting / burning, reserve access by trade direction,
invariant checks, snapshot / restore and the persisted layout.
"""

import pytest

from duopool.exceptions import (
    InsufficientShareError,
    InvalidPairError,
    InvariantViolationError,
)
from duopool.pool.state import PoolState
from duopool.pool.transaction import atomic

ALICE = "0xA11CE"
BOB = "0xB0B"


def make_state(**kwargs) -> PoolState:
    return PoolState(token_a="TKA", token_b="TKB", **kwargs)


class TestPoolStateBasics:

    def test_starts_empty(self):
        state = make_state()
        assert state.current_ratio() == (0, 0)
        assert state.total_liquidity == 0
        assert state.liquidity_balance == {}
        assert state.balance_of(ALICE) == 0

    def test_same_asset_rejected(self):
        with pytest.raises(ValueError, match="differ"):
            PoolState(token_a="TKA", token_b="TKA")

    def test_unnamed_asset_rejected(self):
        with pytest.raises(ValueError):
            PoolState(token_a="", token_b="TKB")

    def test_is_pair_either_direction(self):
        state = make_state()
        assert state.is_pair("TKA", "TKB")
        assert state.is_pair("TKB", "TKA")
        assert not state.is_pair("TKA", "TKA")
        assert not state.is_pair("TKA", "XYZ")

    def test_reserves_for_direction(self):
        state = make_state(reserve_a=1000, reserve_b=4000)
        assert state.reserves_for("TKA", "TKB") == (1000, 4000)
        assert state.reserves_for("TKB", "TKA") == (4000, 1000)

    def test_reserves_for_unknown_pair(self):
        with pytest.raises(InvalidPairError):
            make_state().reserves_for("TKA", "XYZ")

    def test_set_reserves_for_b_to_a(self):
        state = make_state(reserve_a=1000, reserve_b=4000)
        state.set_reserves_for("TKB", 4400, 910)
        assert state.current_ratio() == (910, 4400)

    def test_negative_reserve_rejected(self):
        state = make_state()
        with pytest.raises(InvariantViolationError):
            state.set_reserves(-1, 0)


class TestMintBurn:

    def test_mint_credits_owner_and_total(self):
        state = make_state()
        state.mint(ALICE, 2000)
        state.mint(BOB, 500)
        assert state.balance_of(ALICE) == 2000
        assert state.total_liquidity == 2500

    def test_mint_non_positive_rejected(self):
        with pytest.raises(InvariantViolationError):
            make_state().mint(ALICE, 0)

    def test_burn_debits_owner_and_total(self):
        state = make_state()
        state.mint(ALICE, 2000)
        state.burn(ALICE, 500)
        assert state.balance_of(ALICE) == 1500
        assert state.total_liquidity == 1500

    def test_burn_all_drops_entry(self):
        state = make_state()
        state.mint(ALICE, 10)
        state.burn(ALICE, 10)
        assert ALICE not in state.liquidity_balance

    def test_burn_more_than_held(self):
        state = make_state()
        state.mint(ALICE, 10)
        with pytest.raises(InsufficientShareError, match="holds 10"):
            state.burn(ALICE, 11)
        assert state.balance_of(ALICE) == 10
        assert state.total_liquidity == 10

    def test_burn_unknown_owner(self):
        with pytest.raises(InsufficientShareError):
            make_state().burn(BOB, 1)


class TestInvariants:

    def test_consistent_state_passes(self):
        state = make_state(reserve_a=1000, reserve_b=4000)
        state.mint(ALICE, 2000)
        state.check_invariants()

    def test_share_sum_mismatch(self):
        state = make_state(reserve_a=1, reserve_b=1, total_liquidity=5,
                           liquidity_balance={ALICE: 4})
        with pytest.raises(InvariantViolationError, match="Share sum"):
            state.check_invariants()

    def test_reserves_without_liquidity(self):
        state = make_state(reserve_a=10)
        with pytest.raises(InvariantViolationError, match="without liquidity"):
            state.check_invariants()

    def test_negative_share(self):
        state = make_state(reserve_a=1, reserve_b=1, total_liquidity=0,
                           liquidity_balance={ALICE: 1, BOB: -1})
        with pytest.raises(InvariantViolationError):
            state.check_invariants()


class TestSnapshotAndSerialisation:

    def test_restore_snapshot(self):
        state = make_state(reserve_a=1000, reserve_b=4000)
        state.mint(ALICE, 2000)
        snap = state.take_snapshot()

        state.mint(BOB, 100)
        state.set_reserves(5, 5)
        state.restore_snapshot(snap)

        assert state.current_ratio() == (1000, 4000)
        assert state.liquidity_balance == {ALICE: 2000}
        assert state.total_liquidity == 2000

    def test_snapshot_is_a_copy(self):
        state = make_state()
        state.mint(ALICE, 1)
        snap = state.take_snapshot()
        state.mint(ALICE, 1)
        assert snap["liquidity_balance"] == {ALICE: 1}

    def test_to_dict_layout(self):
        state = make_state(reserve_a=1000, reserve_b=4000)
        state.mint(ALICE, 2000)
        d = state.to_dict()
        assert d == {
            "tokenA": "TKA",
            "tokenB": "TKB",
            "reserveA": 1000,
            "reserveB": 4000,
            "totalLiquidity": 2000,
            "liquidityBalance": {ALICE: 2000},
        }

    def test_from_dict(self):
        state = PoolState.from_dict({
            "tokenA": "TKA",
            "tokenB": "TKB",
            "reserveA": 1000,
            "reserveB": 4000,
            "totalLiquidity": 2000,
            "liquidityBalance": {ALICE: 1500, BOB: 500, "0xZERO": 0},
        })
        assert state.balance_of(BOB) == 500
        assert "0xZERO" not in state.liquidity_balance

    def test_from_dict_rejects_inconsistent(self):
        with pytest.raises(InvariantViolationError):
            PoolState.from_dict({
                "tokenA": "TKA",
                "tokenB": "TKB",
                "reserveA": 1000,
                "reserveB": 4000,
                "totalLiquidity": 2000,
                "liquidityBalance": {ALICE: 1},
            })


class TestAtomic:

    def test_commit_keeps_changes(self):
        state = make_state()
        with atomic(state, label="mint"):
            state.mint(ALICE, 5)
        assert state.balance_of(ALICE) == 5

    def test_failure_restores_every_participant(self):
        state = make_state()
        other = make_state()
        with pytest.raises(RuntimeError, match="boom"):
            with atomic(state, other, label="mint"):
                state.mint(ALICE, 5)
                other.set_reserves(3, 3)
                raise RuntimeError("boom")
        assert state.liquidity_balance == {}
        assert other.current_ratio() == (0, 0)

    def test_non_snapshottable_participants_ignored(self):
        state = make_state()
        with pytest.raises(ValueError):
            with atomic(state, object()):
                state.mint(BOB, 1)
                raise ValueError("abort")
        assert state.total_liquidity == 0
