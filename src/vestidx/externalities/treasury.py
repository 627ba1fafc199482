"""Treasury mint transform: payment asset in, claim asset minted out."""

import logging
from typing import Set

from ..engine.units import SCALE
from .token import StaticToken, TransferError

logger = logging.getLogger(__name__)


class Treasury:
    """Holds payment reserves and mints the claim asset for approved callers."""

    def __init__(
        self,
        payment_token: StaticToken,
        claim_token: StaticToken,
        backing_ratio: int = SCALE,
        address: str = "treasury",
    ):
        """
        Initialize treasury.

        Args:
            payment_token: Asset accepted as payment
            claim_token: Asset minted on claim (treasury must be one of its minters)
            backing_ratio: Payment units per claim unit, 1e18-scaled
            address: Treasury address on the token collaborators
        """
        if backing_ratio <= 0:
            raise ValueError(f"Backing ratio must be positive, got {backing_ratio}")
        self.payment_token = payment_token
        self.claim_token = claim_token
        self.address = address
        self._backing_ratio = backing_ratio
        self.approved_minters: Set[str] = set()

    def reserve_backing_ratio(self) -> int:
        return self._backing_ratio

    def set_backing_ratio(self, ratio: int) -> None:
        if ratio <= 0:
            raise ValueError(f"Backing ratio must be positive, got {ratio}")
        self._backing_ratio = ratio

    def is_approved_minter(self, address: str) -> bool:
        return address in self.approved_minters

    def approve_minter(self, address: str) -> None:
        self.approved_minters.add(address)

    def reserves(self) -> int:
        return self.payment_token.balance_of(self.address)

    def _require_approved(self, caller: str) -> None:
        if caller not in self.approved_minters:
            raise TransferError(f"Treasury: {caller} is not an approved minter")

    def mint(self, caller: str, recipient: str, amount: int) -> int:
        self._require_approved(caller)
        logger.debug("Treasury mint %d to %s for %s", amount, recipient, caller)
        return self.claim_token.mint(self.address, recipient, amount)

    def burn(self, caller: str, owner: str, amount: int) -> int:
        """Reverse a mint made for an approved caller."""
        self._require_approved(caller)
        logger.debug("Treasury burn %d from %s for %s", amount, owner, caller)
        return self.claim_token.burn(self.address, owner, amount)

    def refund(self, caller: str, recipient: str, amount: int) -> int:
        """Return a payment taken on behalf of an approved caller."""
        self._require_approved(caller)
        logger.debug("Treasury refund %d to %s for %s", amount, recipient, caller)
        self.payment_token.transfer(self.address, recipient, amount)
        return amount
