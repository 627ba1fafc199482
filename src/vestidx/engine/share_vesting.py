"""Variant B: percent-of-supply shares on a shared vesting window.

Key Concepts:
- Each term is a share of the claim token's live total supply (PERCENT_SCALE fixed point)
- All beneficiaries vest over one window held as explicit configuration
- The sum of shares is capped by a global allocation ceiling
- Claims pay a payment asset; the treasury mints claim tokens at the backing ratio
- The minted amount is computed and validated before anything is pulled or minted
"""

import logging
from typing import Callable, Iterable, Optional

from ..externalities.interfaces import FungibleToken, IndexSource, MintTransform, YieldTransform
from .base import IndexVestingLedger, nonreentrant
from .curve import vested_fraction_until
from .errors import AllocationCeilingExceeded, DuplicateGrant
from .terms import AllocationLedger, ShareTerm
from .units import PERCENT_SCALE, SCALE, IndexAdjusted, Static

logger = logging.getLogger(__name__)


class ShareVesting(IndexVestingLedger):
    """Supply-share terms on a shared window, capped by an allocation ceiling."""

    term_type = ShareTerm

    def __init__(
        self,
        authority: str,
        claim_token: FungibleToken,
        payment_token: FungibleToken,
        treasury: MintTransform,
        index_source: IndexSource,
        vest_start: int,
        full_vest: int,
        max_allocated_percent: int,
        staking: Optional[YieldTransform] = None,
        clock: Optional[Callable[[], int]] = None,
        address: str = "share-vesting",
    ):
        """
        Initialize share ledger.

        Args:
            authority: Address allowed to set terms
            claim_token: Asset minted on claim; its total supply sizes every share
            payment_token: Asset paid by beneficiaries on claim
            treasury: Mint transform (reserve_backing_ratio, mint)
            index_source: Object exposing index()
            vest_start: Shared window start timestamp
            full_vest: Shared window deadline timestamp
            max_allocated_percent: Allocation ceiling (PERCENT_SCALE fixed point)
            staking: Optional yield transform for claim-and-stake
            clock: Timestamp source
            address: Ledger address on the token collaborators
        """
        super().__init__(authority, index_source, clock=clock, address=address)
        if full_vest <= vest_start:
            raise ValueError(f"full_vest ({full_vest}) must be after vest_start ({vest_start})")
        if max_allocated_percent > PERCENT_SCALE:
            raise ValueError(f"Allocation ceiling {max_allocated_percent} exceeds 100%")
        self.claim_token = claim_token
        self.payment_token = payment_token
        self.treasury = treasury
        self.staking = staking
        self.vest_start = vest_start
        self.full_vest = full_vest
        self.allocation = AllocationLedger(max_allocated_percent)

    @property
    def total_allocated(self) -> int:
        return self.allocation.total

    @property
    def max_allocated_percent(self) -> int:
        return self.allocation.ceiling

    def entitlement_static(self, address: str) -> Static:
        """Static size of `address`'s share of the current supply."""
        term = self.terms.get(address)
        return Static(self.claim_token.total_supply() * term.percent // PERCENT_SCALE)

    def _vested_index_adjusted(self, term: ShareTerm, now: int) -> IndexAdjusted:
        total_static = Static(self.claim_token.total_supply() * term.percent // PERCENT_SCALE)
        fraction = vested_fraction_until(now, self.vest_start, self.full_vest)
        return IndexAdjusted(self.converter.to_index_adjusted(total_static) * fraction // SCALE)

    def _cap_redeemable(self, term: ShareTerm, redeemable: Static) -> Static:
        if term.max_claim == 0:
            return redeemable
        already = self.converter.from_index_adjusted(IndexAdjusted(term.index_adjusted_claimed))
        return Static(min(redeemable, max(0, term.max_claim - already)))

    def _check_new_term(self, account: str, percent: int) -> None:
        if not account:
            raise ValueError("Account must be non-empty")
        if percent <= 0:
            raise ValueError(f"Percent must be positive, got {percent}")
        if self.terms.has_term(account):
            logger.debug("Rejected terms for %s: term exists", account)
            raise DuplicateGrant(details={"account": account})

    def _require_headroom(self, percent: int) -> None:
        if not self.allocation.fits(percent):
            logger.debug(
                "Rejected allocation of %d: total %d, ceiling %d",
                percent, self.allocation.total, self.allocation.ceiling,
            )
            raise AllocationCeilingExceeded(details={
                "requested": percent,
                "allocated": self.allocation.total,
                "ceiling": self.allocation.ceiling,
            })

    @nonreentrant
    def set_terms(
        self,
        caller: str,
        account: str,
        percent: int,
        claimed: int = 0,
        max_claim: int = 0,
    ) -> ShareTerm:
        """
        Record a supply share for `account`.

        Args:
            caller: Must be the authority
            account: Beneficiary address
            percent: Share of supply, PERCENT_SCALE fixed point
            claimed: Index-adjusted amount already claimed elsewhere
            max_claim: Lifetime cap in static units (0 = uncapped)

        Raises:
            Unauthorized, DuplicateGrant, AllocationCeilingExceeded
        """
        self.authority.require(caller, "set_terms")
        self._check_new_term(account, percent)
        if claimed < 0 or max_claim < 0:
            raise ValueError("claimed and max_claim must be non-negative")
        self._require_headroom(percent)

        self.terms.put(account, ShareTerm(
            percent=percent,
            index_adjusted_claimed=claimed,
            max_claim=max_claim,
        ))
        self.allocation.allocate(percent)
        self._emit("grant", account, 0, percent=percent, claimed=claimed, max_claim=max_claim)
        logger.info(
            "Terms: %s receives %d/%d of supply (allocated %d/%d)",
            account, percent, PERCENT_SCALE, self.allocation.total, self.allocation.ceiling,
        )
        return self.terms.get(account)

    @nonreentrant
    def migrate_from(self, caller: str, source: "ShareVesting", accounts: Iterable[str]) -> int:
        """
        Import terms for `accounts` from a predecessor ledger, all or nothing.

        Returns:
            Total percent imported
        """
        self.authority.require(caller, "migrate_from")
        accounts = list(accounts)
        if len(set(accounts)) != len(accounts):
            raise ValueError("Duplicate accounts in migration batch")

        imported = []
        for account in accounts:
            if not source.has_term(account):
                raise ValueError(f"Source ledger holds no term for {account}")
            term = source.term_of(account)
            self._check_new_term(account, term.percent)
            imported.append((account, term))
        self._require_headroom(sum(term.percent for _, term in imported))

        for account, term in imported:
            self.terms.put(account, term)
            self.allocation.allocate(term.percent)
            self._emit("terms_imported", account, 0, percent=term.percent)
        total = sum(term.percent for _, term in imported)
        logger.info("Imported %d terms (%d percent units)", len(imported), total)
        return total

    def claim_amount_for(self, payment: int) -> int:
        """Claim tokens bought by `payment` at the treasury's backing ratio."""
        return payment * SCALE // self.treasury.reserve_backing_ratio()

    @nonreentrant
    def claim(self, caller: str, to: str, payment: int, stake: bool = False) -> int:
        """
        Pay `payment` of the payment asset and receive the claim tokens it buys.

        A failure after the payment is taken burns whatever was minted and
        refunds the payment before the error propagates.

        Returns:
            Claim tokens minted

        Raises:
            InsufficientVested: If the minted amount exceeds redeemable_for(caller)
            ValueError: If the treasury has not approved this ledger as a minter
        """
        if not to:
            raise ValueError("Recipient must be non-empty")
        if payment <= 0:
            raise ValueError(f"Payment must be positive, got {payment}")
        if stake and self.staking is None:
            raise ValueError("Staking transform not configured")
        if not self.treasury.is_approved_minter(self.address):
            raise ValueError(f"Treasury has not approved {self.address} as a minter")

        amount = self.claim_amount_for(payment)
        self._require_redeemable(caller, amount)

        self.payment_token.transfer_from(self.address, caller, self.treasury.address, payment)
        try:
            self._deliver(to, amount, stake)
        except Exception:
            logger.warning("Claim by %s failed after payment; refunding %d", caller, payment)
            self.treasury.refund(self.address, caller, payment)
            raise
        self._record_claim(caller, to, amount)
        return amount

    def _deliver(self, to: str, amount: int, stake: bool) -> None:
        holder = self.address if stake else to
        self.treasury.mint(self.address, holder, amount)
        if not stake:
            return
        try:
            self.staking.stake(self.address, to, amount)
        except Exception:
            self.treasury.burn(self.address, holder, amount)
            raise
