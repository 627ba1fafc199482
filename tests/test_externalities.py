"""Tests for the in-memory collaborators used by the ledgers and the simulation.

These tests verify:
- Token transfers conserve value and respect allowances and minter gates
- The rebasing receipt stores index-adjusted balances
- Staking and unstaking round-trip through the receipt
- Treasury minting is restricted to approved callers
"""

import pytest
import sys
import os

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from vestidx.engine.clock import ManualClock
from vestidx.engine.units import SCALE
from vestidx.externalities import RebasingToken, StakingPool, StaticToken, TransferError, Treasury


class TestStaticToken:
    """Plain fungible token."""

    def test_transfer_conserves_supply(self):
        token = StaticToken("T", minters=["m"])
        token.mint("m", "a", 100)
        token.transfer("a", "b", 40)
        assert token.balance_of("a") == 60
        assert token.balance_of("b") == 40
        assert token.total_supply() == 100

    def test_overdraft_rejected(self):
        token = StaticToken("T", minters=["m"])
        token.mint("m", "a", 10)
        with pytest.raises(TransferError):
            token.transfer("a", "b", 11)
        assert token.balance_of("a") == 10

    def test_transfer_from_spends_allowance(self):
        token = StaticToken("T", minters=["m"])
        token.mint("m", "owner", 100)
        token.approve("owner", "spender", 50)
        token.transfer_from("spender", "owner", "dest", 30)
        assert token.allowance("owner", "spender") == 20
        with pytest.raises(TransferError):
            token.transfer_from("spender", "owner", "dest", 21)

    def test_mint_requires_minter(self):
        token = StaticToken("T")
        with pytest.raises(TransferError):
            token.mint("anyone", "a", 1)
        token.add_minter("anyone")
        token.mint("anyone", "a", 1)
        assert token.total_supply() == 1


class TestRebasingToken:
    """Index-adjusted receipt balances."""

    def test_balance_grows_with_index(self):
        receipt = RebasingToken("sT", minter="pool")
        receipt.mint_static("pool", "a", 1000)
        receipt.rebase_to(2 * SCALE)
        assert receipt.index_adjusted_balance_of("a") == 1000
        assert receipt.balance_of("a") == 2000
        assert receipt.total_supply() == 2000

    def test_rebase_is_monotonic(self):
        receipt = RebasingToken("sT", minter="pool", initial_index=2 * SCALE)
        with pytest.raises(ValueError):
            receipt.rebase_to(SCALE)

    def test_mint_floors_to_index_adjusted(self):
        receipt = RebasingToken("sT", minter="pool", initial_index=3 * SCALE)
        assert receipt.mint_static("pool", "a", 100) == 33
        assert receipt.balance_of("a") == 99

    def test_transfer_debits_index_adjusted(self):
        receipt = RebasingToken("sT", minter="pool", initial_index=2 * SCALE)
        receipt.mint_static("pool", "a", 1000)
        receipt.transfer("a", "b", 400)
        assert receipt.index_adjusted_balance_of("a") == 300
        assert receipt.index_adjusted_balance_of("b") == 200
        with pytest.raises(TransferError):
            receipt.transfer("a", "b", 602)


class TestStakingPool:
    """Static token in, rebasing receipt out, and back."""

    def test_stake_then_unstake_with_growth(self):
        static = StaticToken("T", minters=["m", "staking"])
        receipt = RebasingToken("sT", minter="staking")
        pool = StakingPool(static, receipt)
        static.mint("m", "alice", 100)

        pool.stake("alice", "alice", 100)
        assert static.balance_of("alice") == 0
        assert receipt.balance_of("alice") == 100

        receipt.rebase_to(SCALE * 11 // 10)
        assert pool.index() == SCALE * 11 // 10
        pool.unstake("alice", "alice", 110)
        assert static.balance_of("alice") == 110
        assert receipt.balance_of("alice") == 0

    def test_stake_rejects_non_positive(self):
        static = StaticToken("T")
        pool = StakingPool(static, RebasingToken("sT", minter="staking"))
        with pytest.raises(ValueError):
            pool.stake("alice", "alice", 0)


class TestTreasury:
    """Mint transform gate."""

    def test_mint_requires_approval(self):
        claim_token = StaticToken("C")
        treasury = Treasury(StaticToken("P"), claim_token)
        claim_token.add_minter(treasury.address)
        with pytest.raises(TransferError):
            treasury.mint("ledger", "alice", 5)
        treasury.approve_minter("ledger")
        treasury.mint("ledger", "alice", 5)
        assert claim_token.balance_of("alice") == 5

    def test_backing_ratio_positive(self):
        treasury = Treasury(StaticToken("P"), StaticToken("C"))
        with pytest.raises(ValueError):
            treasury.set_backing_ratio(0)
        with pytest.raises(ValueError):
            Treasury(StaticToken("P"), StaticToken("C"), backing_ratio=0)

    def test_reserves_track_payments(self):
        payment = StaticToken("P", minters=["m"])
        treasury = Treasury(payment, StaticToken("C"))
        payment.mint("m", treasury.address, 42)
        assert treasury.reserves() == 42

    def test_burn_and_refund_require_approval(self):
        payment = StaticToken("P", minters=["m"])
        claim_token = StaticToken("C")
        treasury = Treasury(payment, claim_token)
        claim_token.add_minter(treasury.address)
        treasury.approve_minter("ledger")
        treasury.mint("ledger", "alice", 5)
        payment.mint("m", treasury.address, 7)

        with pytest.raises(TransferError):
            treasury.burn("stranger", "alice", 5)
        with pytest.raises(TransferError):
            treasury.refund("stranger", "alice", 7)

        treasury.burn("ledger", "alice", 5)
        treasury.refund("ledger", "alice", 7)
        assert claim_token.total_supply() == 0
        assert payment.balance_of("alice") == 7
        assert treasury.reserves() == 0


class TestManualClock:
    """Deterministic clock."""

    def test_advance_and_set(self):
        clock = ManualClock(10)
        assert clock() == 10
        assert clock.advance(5) == 15
        assert clock.set(20) == 20

    def test_never_moves_backwards(self):
        clock = ManualClock(10)
        with pytest.raises(ValueError):
            clock.advance(-1)
        with pytest.raises(ValueError):
            clock.set(9)
