"""Beneficiary Migration Protocol - Two-phase push/pull wallet change.

State per old address: NoProposal -> Proposed -> Consumed. A push can only be
superseded by another push from the same old address. There is no cancel.
"""

import logging
from typing import Dict, Optional

from .errors import MigrationViolation, NoPendingMigration
from .terms import TermLedger

logger = logging.getLogger(__name__)


class WalletMigration:
    """Pending wallet-change proposals over a term ledger."""

    def __init__(self, terms: TermLedger):
        self.terms = terms
        self._wallet_change: Dict[str, str] = {}

    def pending(self, old_address: str) -> Optional[str]:
        """Address proposed by `old_address`, if any."""
        return self._wallet_change.get(old_address)

    def push(self, caller: str, new_address: str) -> None:
        """
        Propose moving caller's term to `new_address`.

        Raises:
            NoPendingMigration: If caller holds no term
            ValueError: If new_address is empty or equals caller
        """
        if not new_address:
            raise ValueError("New address must be non-empty")
        if new_address == caller:
            raise ValueError("New address must differ from the current address")
        if not self.terms.has_term(caller):
            logger.debug("Rejected wallet change push from %s: no term", caller)
            raise NoPendingMigration("no_term_to_migrate", {"address": caller})

        self._wallet_change[caller] = new_address
        logger.info("Wallet change proposed: %s -> %s", caller, new_address)

    def pull(self, caller: str, old_address: str):
        """
        Accept a proposal, moving the full term from `old_address` to caller.

        Returns:
            The migrated term (identical to the source record)

        Raises:
            NoPendingMigration: If old_address has no pending proposal
            MigrationViolation: If caller is not the proposed address or already holds a term
        """
        proposed = self._wallet_change.get(old_address)
        if proposed is None:
            logger.debug("Rejected wallet change pull by %s: nothing pending for %s", caller, old_address)
            raise NoPendingMigration("no_proposal", {"old_address": old_address})
        if proposed != caller:
            logger.debug("Rejected wallet change pull by %s: proposal names %s", caller, proposed)
            raise MigrationViolation(
                "caller_not_proposed",
                {"old_address": old_address, "caller": caller},
            )
        if self.terms.has_term(caller):
            raise MigrationViolation("destination_has_term", {"caller": caller})
        if not self.terms.has_term(old_address):
            raise NoPendingMigration("source_term_missing", {"old_address": old_address})

        del self._wallet_change[old_address]
        term = self.terms.move(old_address, caller)
        logger.info("Wallet changed: %s -> %s", old_address, caller)
        return term
