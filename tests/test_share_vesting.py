"""Tests for percent-of-supply terms on a shared window.

These tests verify:
- The allocation ceiling admits grants summing exactly to it and rejects one unit more
- Rejected grants leave the term map and the allocation counter unchanged
- Redeemable amounts follow the live claim-token supply
- The minted amount is validated before any payment is pulled or token minted
"""

import pytest
import sys
import os

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from vestidx.engine.clock import ManualClock
from vestidx.engine.errors import (
    AllocationCeilingExceeded,
    DuplicateGrant,
    InsufficientVested,
    ReentrantCall,
    Unauthorized,
)
from vestidx.engine.share_vesting import ShareVesting
from vestidx.engine.terms import ShareTerm
from vestidx.engine.units import SCALE
from vestidx.externalities.rebasing import RebasingToken, StakingPool
from vestidx.externalities.token import StaticToken
from vestidx.externalities.treasury import Treasury

ISSUER = "issuer"
SUPPLY = 1_000_000


class Economy:
    """Claim token, payment token, receipt, staking and treasury wired together."""

    def __init__(self, ceiling=100_000, backing_ratio=SCALE, supply=SUPPLY, claim_token_cls=StaticToken):
        self.clock = ManualClock(0)
        self.claim_token = claim_token_cls("CLAIM", minters=["mint"])
        self.payment_token = StaticToken("PAY", minters=["mint"])
        self.receipt = RebasingToken("sCLAIM", minter="staking")
        self.staking = StakingPool(self.claim_token, self.receipt, address="staking")
        self.claim_token.add_minter("staking")
        self.treasury = Treasury(self.payment_token, self.claim_token, backing_ratio=backing_ratio)
        self.claim_token.add_minter(self.treasury.address)
        self.claim_token.mint("mint", "market", supply)
        self.ledger = self.make_ledger(ceiling)

    def make_ledger(self, ceiling, address="share-vesting", staking=None, approve=True):
        ledger = ShareVesting(
            ISSUER,
            claim_token=self.claim_token,
            payment_token=self.payment_token,
            treasury=self.treasury,
            index_source=self.receipt,
            vest_start=0,
            full_vest=1000,
            max_allocated_percent=ceiling,
            staking=staking or self.staking,
            clock=self.clock,
            address=address,
        )
        if approve:
            self.treasury.approve_minter(ledger.address)
        return ledger

    def fund(self, account, payment, ledger=None):
        self.payment_token.mint("mint", account, payment)
        self.payment_token.approve(account, (ledger or self.ledger).address, payment)


@pytest.fixture
def economy():
    return Economy()


class TestAllocationCeiling:
    """Tests for the global allocation ceiling."""

    def test_grants_summing_to_ceiling_succeed(self, economy):
        ledger = economy.ledger
        ledger.set_terms(ISSUER, "a", 60_000)
        ledger.set_terms(ISSUER, "b", 40_000)
        assert ledger.total_allocated == 100_000

    def test_one_unit_past_ceiling_fails_without_side_effects(self, economy):
        ledger = economy.ledger
        ledger.set_terms(ISSUER, "a", 60_000)
        ledger.set_terms(ISSUER, "b", 40_000)
        with pytest.raises(AllocationCeilingExceeded) as e:
            ledger.set_terms(ISSUER, "c", 1)
        assert e.value.code == "allocation_ceiling_exceeded"
        assert not ledger.has_term("c")
        assert ledger.total_allocated == 100_000
        assert len(ledger.terms) == 2

    def test_duplicate_terms_rejected(self, economy):
        ledger = economy.ledger
        ledger.set_terms(ISSUER, "a", 10_000)
        with pytest.raises(DuplicateGrant):
            ledger.set_terms(ISSUER, "a", 10_000)
        assert ledger.total_allocated == 10_000

    def test_non_authority_rejected(self, economy):
        with pytest.raises(Unauthorized):
            economy.ledger.set_terms("mallory", "mallory", 10_000)
        assert economy.ledger.total_allocated == 0

    def test_ceiling_above_full_supply_rejected(self, economy):
        with pytest.raises(ValueError):
            economy.make_ledger(ceiling=1_000_001, address="other")

    def test_window_must_be_ordered(self, economy):
        with pytest.raises(ValueError):
            ShareVesting(
                ISSUER, economy.claim_token, economy.payment_token, economy.treasury,
                economy.receipt, vest_start=100, full_vest=100, max_allocated_percent=10,
            )


class TestRedeemable:
    """Redeemable amounts recomputed from live supply and index."""

    def test_half_window(self, economy):
        ledger = economy.ledger
        ledger.set_terms(ISSUER, "a", 10_000)  # 1% of 1_000_000
        economy.clock.set(500)
        assert ledger.entitlement_static("a") == 10_000
        assert ledger.redeemable_for("a") == 5_000

    def test_full_at_deadline(self, economy):
        ledger = economy.ledger
        ledger.set_terms(ISSUER, "a", 10_000)
        economy.clock.set(1000)
        assert ledger.redeemable_for("a") == 10_000

    def test_follows_supply_growth(self, economy):
        ledger = economy.ledger
        ledger.set_terms(ISSUER, "a", 10_000)
        economy.clock.set(1000)
        economy.claim_token.mint("mint", "market", SUPPLY)
        assert ledger.redeemable_for("a") == 20_000

    def test_seeded_claimed_amount(self, economy):
        ledger = economy.ledger
        ledger.set_terms(ISSUER, "a", 10_000, claimed=2_000)
        economy.clock.set(1000)
        assert ledger.redeemable_for("a") == 8_000

    def test_max_claim_caps_redeemable(self, economy):
        ledger = economy.ledger
        ledger.set_terms(ISSUER, "a", 10_000, max_claim=300)
        economy.clock.set(1000)
        assert ledger.redeemable_for("a") == 300
        economy.fund("a", 300)
        ledger.claim("a", "a", 300)
        assert ledger.redeemable_for("a") == 0


class TestClaims:
    """Claims pay the payment asset and mint the claim token."""

    def test_claim_mints_after_payment(self, economy):
        ledger = economy.ledger
        ledger.set_terms(ISSUER, "a", 10_000)
        economy.clock.set(500)
        economy.fund("a", 5_000)

        minted = ledger.claim("a", "a", 5_000)
        assert minted == 5_000
        assert economy.claim_token.balance_of("a") == 5_000
        assert economy.payment_token.balance_of(economy.treasury.address) == 5_000
        assert ledger.term_of("a") == ShareTerm(percent=10_000, index_adjusted_claimed=5_000)

    def test_redeemable_after_claim_reflects_minted_supply(self, economy):
        """Minting grows supply, so a sliver becomes redeemable again."""
        ledger = economy.ledger
        ledger.set_terms(ISSUER, "a", 10_000)
        economy.clock.set(500)
        economy.fund("a", 5_000)
        ledger.claim("a", "a", 5_000)
        assert ledger.redeemable_for("a") == 25  # 1% of 1_005_000, half vested, minus 5_000

    def test_rejected_claim_mints_nothing(self, economy):
        """Validation happens before the payment is pulled or anything is minted."""
        ledger = economy.ledger
        ledger.set_terms(ISSUER, "a", 10_000)
        economy.clock.set(100)
        economy.fund("a", 2_000)
        supply = economy.claim_token.total_supply()

        with pytest.raises(InsufficientVested):
            ledger.claim("a", "a", 2_000)
        assert economy.claim_token.total_supply() == supply
        assert economy.payment_token.balance_of("a") == 2_000
        assert ledger.term_of("a").index_adjusted_claimed == 0

    def test_backing_ratio_converts_payment(self, economy):
        ledger = economy.ledger
        economy.treasury.set_backing_ratio(2 * SCALE)
        ledger.set_terms(ISSUER, "a", 10_000)
        economy.clock.set(1000)
        economy.fund("a", 1_000)
        assert ledger.claim("a", "a", 1_000) == 500
        assert economy.claim_token.balance_of("a") == 500

    def test_claim_and_stake(self, economy):
        ledger = economy.ledger
        ledger.set_terms(ISSUER, "a", 10_000)
        economy.clock.set(1000)
        economy.fund("a", 4_000)
        ledger.claim("a", "a", 4_000, stake=True)
        assert economy.receipt.balance_of("a") == 4_000
        assert economy.claim_token.balance_of("a") == 0

    def test_claim_recorded_index_adjusted(self, economy):
        ledger = economy.ledger
        ledger.set_terms(ISSUER, "a", 10_000)
        economy.receipt.rebase_to(2 * SCALE)
        economy.clock.set(1000)
        economy.fund("a", 1_000)
        ledger.claim("a", "a", 1_000)
        assert ledger.term_of("a").index_adjusted_claimed == 500
        assert ledger.claimed("a") == 1_000


class ReentrantClaimToken(StaticToken):
    """Claim token that calls back into a ledger when minted."""

    callback = None

    def mint(self, caller, to, amount):
        if self.callback is not None:
            self.callback()
        return super().mint(caller, to, amount)


class TestClaimFailures:
    """A claim that fails partway leaves balances, supply and terms as they were."""

    def test_unapproved_ledger_takes_no_payment(self, economy):
        ledger = economy.make_ledger(100_000, address="unapproved", approve=False)
        ledger.set_terms(ISSUER, "a", 10_000)
        economy.clock.set(1000)
        economy.fund("a", 1_000, ledger=ledger)

        with pytest.raises(ValueError):
            ledger.claim("a", "a", 1_000)
        assert economy.payment_token.balance_of("a") == 1_000
        assert economy.treasury.reserves() == 0
        assert economy.claim_token.total_supply() == SUPPLY
        assert ledger.term_of("a").index_adjusted_claimed == 0

    def test_failed_stake_burns_and_refunds(self, economy):
        """Staking into a pool backed by another token fails after the mint."""
        other_pool = StakingPool(StaticToken("OTHER"), economy.receipt, address="other-staking")
        ledger = economy.make_ledger(100_000, address="misconfigured", staking=other_pool)
        ledger.set_terms(ISSUER, "a", 10_000)
        economy.clock.set(1000)
        economy.fund("a", 1_000, ledger=ledger)

        with pytest.raises(ValueError):
            ledger.claim("a", "a", 1_000, stake=True)
        assert economy.payment_token.balance_of("a") == 1_000
        assert economy.treasury.reserves() == 0
        assert economy.claim_token.total_supply() == SUPPLY
        assert economy.claim_token.balance_of(ledger.address) == 0
        assert economy.receipt.balance_of("a") == 0
        assert ledger.term_of("a").index_adjusted_claimed == 0

    def test_claim_succeeds_once_approved(self, economy):
        ledger = economy.make_ledger(100_000, address="late-approval", approve=False)
        ledger.set_terms(ISSUER, "a", 10_000)
        economy.clock.set(1000)
        economy.fund("a", 1_000, ledger=ledger)
        with pytest.raises(ValueError):
            ledger.claim("a", "a", 1_000)

        economy.treasury.approve_minter(ledger.address)
        assert ledger.claim("a", "a", 1_000) == 1_000
        assert economy.claim_token.balance_of("a") == 1_000


class TestReentrancy:
    """A mint that re-enters the ledger is rejected and fully unwound."""

    @pytest.fixture
    def reentrant(self):
        economy = Economy(claim_token_cls=ReentrantClaimToken)
        economy.ledger.set_terms(ISSUER, "a", 10_000)
        economy.clock.set(1000)
        economy.fund("a", 1_000)
        return economy

    def test_reentrant_claim_rejected(self, reentrant):
        ledger = reentrant.ledger
        reentrant.claim_token.callback = lambda: ledger.claim("a", "a", 1)

        with pytest.raises(ReentrantCall) as e:
            ledger.claim("a", "a", 1_000)
        assert e.value.code == "reentrancy"
        assert reentrant.payment_token.balance_of("a") == 1_000
        assert reentrant.treasury.reserves() == 0
        assert reentrant.claim_token.total_supply() == SUPPLY
        assert ledger.term_of("a").index_adjusted_claimed == 0

        reentrant.claim_token.callback = None
        assert ledger.claim("a", "a", 1_000) == 1_000

    def test_reentrant_set_terms_rejected(self, reentrant):
        ledger = reentrant.ledger
        reentrant.claim_token.callback = lambda: ledger.set_terms(ISSUER, "b", 1_000)

        with pytest.raises(ReentrantCall):
            ledger.claim("a", "a", 1_000)
        assert not ledger.has_term("b")
        assert ledger.total_allocated == 10_000
        assert reentrant.payment_token.balance_of("a") == 1_000
        assert reentrant.claim_token.total_supply() == SUPPLY
        assert ledger.term_of("a").index_adjusted_claimed == 0


class TestMigrateFrom:
    """Bulk import of terms from a predecessor ledger."""

    def test_imports_terms(self, economy):
        old = economy.make_ledger(100_000, address="old")
        old.set_terms(ISSUER, "a", 30_000, claimed=70)
        old.set_terms(ISSUER, "b", 20_000)
        new = economy.ledger

        assert new.migrate_from(ISSUER, old, ["a", "b"]) == 50_000
        assert new.term_of("a") == old.term_of("a")
        assert new.total_allocated == 50_000

    def test_all_or_nothing_on_ceiling(self, economy):
        old = economy.make_ledger(100_000, address="old")
        old.set_terms(ISSUER, "a", 60_000)
        old.set_terms(ISSUER, "b", 40_000)
        new = economy.make_ledger(90_000, address="new")

        with pytest.raises(AllocationCeilingExceeded):
            new.migrate_from(ISSUER, old, ["a", "b"])
        assert len(new.terms) == 0
        assert new.total_allocated == 0

    def test_all_or_nothing_on_duplicate(self, economy):
        old = economy.make_ledger(100_000, address="old")
        old.set_terms(ISSUER, "a", 10_000)
        old.set_terms(ISSUER, "b", 10_000)
        new = economy.ledger
        new.set_terms(ISSUER, "b", 5_000)

        with pytest.raises(DuplicateGrant):
            new.migrate_from(ISSUER, old, ["a", "b"])
        assert not new.has_term("a")
        assert new.total_allocated == 5_000

    def test_requires_authority(self, economy):
        old = economy.make_ledger(100_000, address="old")
        old.set_terms(ISSUER, "a", 10_000)
        with pytest.raises(Unauthorized):
            economy.ledger.migrate_from("mallory", old, ["a"])
