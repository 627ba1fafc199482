"""Variant A: fixed-total grants on individual linear schedules.

Key Concepts:
- Each grant pulls static tokens from the issuer and stakes them into the rebasing receipt
- Entitlement is fixed at grant time in index-adjusted units
- Each beneficiary vests linearly from its own grant timestamp over its own length
- Claims pay out the receipt token, whose static value tracks the index
"""

import logging
from typing import Callable, Optional

from ..externalities.interfaces import FungibleToken, YieldTransform
from .base import IndexVestingLedger, nonreentrant
from .curve import vested_fraction
from .errors import DuplicateGrant
from .terms import FixedTerm
from .units import SCALE, IndexAdjusted, Static

logger = logging.getLogger(__name__)

DEFAULT_VEST_LENGTH = 365 * 24 * 3600


class FixedGrantVesting(IndexVestingLedger):
    """Per-beneficiary fixed grants, vested linearly and tracked index-adjusted."""

    term_type = FixedTerm

    def __init__(
        self,
        authority: str,
        static_token: FungibleToken,
        receipt_token,
        staking: YieldTransform,
        clock: Optional[Callable[[], int]] = None,
        default_vest_length: int = DEFAULT_VEST_LENGTH,
        address: str = "fixed-vesting",
    ):
        """
        Initialize fixed-grant ledger.

        Args:
            authority: Address allowed to issue grants
            static_token: Token pulled from the issuer at grant time
            receipt_token: Rebasing receipt held in custody; also the index source
            staking: Converts static tokens into the receipt
            clock: Timestamp source
            default_vest_length: Schedule length when a grant does not specify one
            address: Custody address
        """
        super().__init__(authority, receipt_token, clock=clock, address=address)
        if default_vest_length <= 0:
            raise ValueError(f"Vest length must be positive, got {default_vest_length}")
        self.static_token = static_token
        self.receipt_token = receipt_token
        self.staking = staking
        self.default_vest_length = default_vest_length

    def _vested_index_adjusted(self, term: FixedTerm, now: int) -> IndexAdjusted:
        fraction = vested_fraction(now, term.start_vest, term.vest_length)
        return IndexAdjusted(term.total_index_adjusted_can_claim * fraction // SCALE)

    def total_entitlement(self, address: str) -> Static:
        """Static value of the full grant at today's index."""
        term = self.terms.get(address)
        return self.converter.from_index_adjusted(IndexAdjusted(term.total_index_adjusted_can_claim))

    @nonreentrant
    def grant(
        self,
        caller: str,
        beneficiary: str,
        amount: int,
        vest_length: Optional[int] = None,
    ) -> FixedTerm:
        """
        Issue a fixed grant of `amount` static tokens to `beneficiary`.

        The issuer must have approved this ledger for `amount` on the static token.

        Raises:
            Unauthorized: If caller is not the authority
            DuplicateGrant: If beneficiary already holds a term
            ValueError: On empty beneficiary, non-positive amount or length
        """
        self.authority.require(caller, "grant")
        if not beneficiary:
            raise ValueError("Beneficiary must be non-empty")
        if amount <= 0:
            raise ValueError(f"Grant amount must be positive, got {amount}")
        length = self.default_vest_length if vest_length is None else int(vest_length)
        if length <= 0:
            raise ValueError(f"Vest length must be positive, got {length}")
        if self.terms.has_term(beneficiary):
            logger.debug("Rejected grant to %s: term exists", beneficiary)
            raise DuplicateGrant(details={"beneficiary": beneficiary})

        entitlement = self.converter.to_index_adjusted(Static(amount))
        if entitlement == 0:
            raise ValueError(f"Grant amount {amount} rounds to zero at index {self.converter.index()}")

        self.static_token.transfer_from(self.address, caller, self.address, amount)
        self.staking.stake(self.address, self.address, amount)

        now = self.now()
        term = FixedTerm(
            index_adjusted_claimed=0,
            total_index_adjusted_can_claim=entitlement,
            start_vest=now,
            end_vest=now + length,
            vest_length=length,
        )
        self.terms.put(beneficiary, term)
        self._emit("grant", beneficiary, amount, index_adjusted=entitlement, vest_length=length)
        logger.info(
            "Grant: %s receives %d (index-adjusted %d) vesting over %ds",
            beneficiary, amount, entitlement, length,
        )
        return self.terms.get(beneficiary)

    @nonreentrant
    def claim(self, caller: str, to: str, amount: int) -> int:
        """
        Claim `amount` static units of the receipt token, paid to `to`.

        Raises:
            InsufficientVested: If amount exceeds redeemable_for(caller)
        """
        if not to:
            raise ValueError("Recipient must be non-empty")
        self._require_redeemable(caller, amount)
        self.receipt_token.transfer(self.address, to, amount)
        self._record_claim(caller, to, amount)
        return amount
