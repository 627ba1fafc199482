"""Claim Engine - Shared index-adjusted accounting for both schedule variants.

Key Concepts:
- Claims are stored in index-adjusted units so they stay meaningful as the index moves
- redeemable = from_ia(vested_ia - claimed_ia), clamped at zero, recomputed on every call
- Claims increment by to_ia(requested amount), never by the redeemable amount
- Every mutating call is serialized and rejects re-entry from collaborators
"""

import functools
import logging
import threading
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional

from .authority import Authority
from .clock import system_clock
from .errors import InsufficientVested, ReentrantCall
from .migration import WalletMigration
from .terms import TermLedger
from .units import IndexAdjusted, IndexConverter, Static

logger = logging.getLogger(__name__)


@dataclass
class LedgerEvent:
    """Journal entry for a committed ledger operation."""
    t: int  # Timestamp (seconds)
    kind: str  # "grant", "claim", "wallet_change_pushed", "wallet_changed", "terms_imported"
    address: str
    amount: int = 0  # Static units where applicable
    details: Dict[str, Any] = field(default_factory=dict)


def nonreentrant(method: Callable) -> Callable:
    """Serialize a ledger operation and reject nested entry."""

    @functools.wraps(method)
    def wrapper(self, *args, **kwargs):
        with self._lock:
            if self._entered:
                logger.debug("Rejected re-entrant call to %s", method.__name__)
                raise ReentrantCall(details={"operation": method.__name__})
            self._entered = True
            try:
                return method(self, *args, **kwargs)
            finally:
                self._entered = False

    return wrapper


class IndexVestingLedger:
    """Base ledger: term storage, redeemable math, claim bookkeeping, migration."""

    term_type: type = None

    def __init__(
        self,
        authority: str,
        index_source,
        clock: Optional[Callable[[], int]] = None,
        address: str = "vesting",
    ):
        """
        Initialize ledger.

        Args:
            authority: Address allowed to issue terms
            index_source: Object exposing index() (or zero-arg callable)
            clock: Zero-arg callable returning the current timestamp
            address: Custody address of this ledger on the token collaborators
        """
        self.authority = Authority(authority)
        self.converter = IndexConverter(index_source)
        self.clock = clock or system_clock
        self.address = address
        self.terms: TermLedger = TermLedger(self.term_type)
        self.migration = WalletMigration(self.terms)
        self.events: List[LedgerEvent] = []
        self._lock = threading.RLock()
        self._entered = False

    # Hooks for schedule variants

    def _vested_index_adjusted(self, term, now: int) -> IndexAdjusted:
        """Index-adjusted amount vested so far for `term`."""
        raise NotImplementedError

    def _cap_redeemable(self, term, redeemable: Static) -> Static:
        """Further bound redeemable; variants without caps return it unchanged."""
        return redeemable

    # Views

    def now(self) -> int:
        return int(self.clock())

    def term_of(self, address: str):
        """Copy of the stored term (empty term when none exists)."""
        return self.terms.get(address)

    def has_term(self, address: str) -> bool:
        return self.terms.has_term(address)

    def redeemable_for(self, address: str) -> Static:
        """Static amount `address` can claim right now."""
        term = self.terms.get(address)
        if term.is_empty:
            return Static(0)
        vested = self._vested_index_adjusted(term, self.now())
        remaining = IndexAdjusted(max(0, vested - term.index_adjusted_claimed))
        redeemable = self.converter.from_index_adjusted(remaining)
        return self._cap_redeemable(term, redeemable)

    def claimed(self, address: str) -> Static:
        """Static value of what `address` has already claimed, at today's index."""
        term = self.terms.get(address)
        return self.converter.from_index_adjusted(IndexAdjusted(term.index_adjusted_claimed))

    def pending_wallet_change(self, old_address: str) -> Optional[str]:
        return self.migration.pending(old_address)

    # Claim bookkeeping

    def _require_redeemable(self, caller: str, amount: int) -> None:
        """Raise InsufficientVested unless `amount` is currently redeemable by caller."""
        if amount <= 0:
            raise ValueError(f"Claim amount must be positive, got {amount}")
        redeemable = self.redeemable_for(caller)
        if amount > redeemable:
            logger.debug("Rejected claim by %s: %d > redeemable %d", caller, amount, redeemable)
            raise InsufficientVested(details={
                "address": caller,
                "amount": amount,
                "redeemable": redeemable,
            })

    def _record_claim(self, caller: str, to: str, amount: int) -> IndexAdjusted:
        """Increment caller's claimed total by to_ia(amount)."""
        increment = self.converter.to_index_adjusted(Static(amount))
        term = self.terms.get(caller)
        term.index_adjusted_claimed += increment
        self.terms.put(caller, term)
        self._emit("claim", caller, amount, to=to, index_adjusted=increment)
        logger.info("Claim: %s claimed %d to %s (index-adjusted %d)", caller, amount, to, increment)
        return increment

    def _emit(self, kind: str, address: str, amount: int = 0, **details: Any) -> LedgerEvent:
        event = LedgerEvent(t=self.now(), kind=kind, address=address, amount=amount, details=details)
        self.events.append(event)
        return event

    # Migration

    @nonreentrant
    def push_wallet_change(self, caller: str, new_address: str) -> None:
        """Propose moving caller's term to `new_address`."""
        self.migration.push(caller, new_address)
        self._emit("wallet_change_pushed", caller, new_address=new_address)

    @nonreentrant
    def pull_wallet_change(self, caller: str, old_address: str):
        """Accept a proposal from `old_address`; returns the migrated term."""
        term = self.migration.pull(caller, old_address)
        self._emit("wallet_changed", caller, old_address=old_address)
        return term
