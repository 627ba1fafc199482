"""Term Ledger & Allocation Ledger - Per-beneficiary vesting records.

A term exists for an address iff its entitlement field is non-zero. The
ledger hands out copies so callers cannot mutate stored records in place;
all writes go through put/move.
"""

from dataclasses import dataclass, replace
from typing import Dict, Generic, Iterator, Tuple, Type, TypeVar


@dataclass
class FixedTerm:
    """Fixed-total grant with an individual schedule window."""
    index_adjusted_claimed: int = 0
    total_index_adjusted_can_claim: int = 0
    start_vest: int = 0  # Timestamp (seconds)
    end_vest: int = 0
    vest_length: int = 0

    @property
    def entitlement(self) -> int:
        return self.total_index_adjusted_can_claim

    @property
    def is_empty(self) -> bool:
        return self.total_index_adjusted_can_claim == 0


@dataclass
class ShareTerm:
    """Percent-of-supply share on the shared vesting window."""
    percent: int = 0  # PERCENT_SCALE fixed point, 10_000 = 1%
    index_adjusted_claimed: int = 0
    max_claim: int = 0  # Lifetime cap in static units, 0 = uncapped

    @property
    def entitlement(self) -> int:
        return self.percent

    @property
    def is_empty(self) -> bool:
        return self.percent == 0


T = TypeVar("T", FixedTerm, ShareTerm)


class TermLedger(Generic[T]):
    """Address-keyed storage of terms."""

    def __init__(self, term_type: Type[T]):
        self.term_type = term_type
        self._terms: Dict[str, T] = {}

    def get(self, address: str) -> T:
        """Return a copy of the term, or an empty term if none exists."""
        term = self._terms.get(address)
        if term is None:
            return self.term_type()
        return replace(term)

    def has_term(self, address: str) -> bool:
        term = self._terms.get(address)
        return term is not None and not term.is_empty

    def put(self, address: str, term: T) -> None:
        if term.is_empty:
            self._terms.pop(address, None)
        else:
            self._terms[address] = replace(term)

    def move(self, old_address: str, new_address: str) -> T:
        """Relocate a whole record. Returns the moved term."""
        term = self._terms.pop(old_address)
        self._terms[new_address] = term
        return replace(term)

    def items(self) -> Iterator[Tuple[str, T]]:
        for address, term in list(self._terms.items()):
            yield address, replace(term)

    def __len__(self) -> int:
        return len(self._terms)

    def __contains__(self, address: object) -> bool:
        return isinstance(address, str) and self.has_term(address)


class AllocationLedger:
    """Running total of percent allocated, bounded by a ceiling."""

    def __init__(self, ceiling: int, total: int = 0):
        """
        Initialize allocation ledger.

        Args:
            ceiling: Maximum total percent (PERCENT_SCALE fixed point)
            total: Already-allocated percent
        """
        if ceiling < 0:
            raise ValueError(f"Allocation ceiling must be non-negative, got {ceiling}")
        self.ceiling = ceiling
        self.total = total

    def headroom(self) -> int:
        return max(0, self.ceiling - self.total)

    def fits(self, percent: int) -> bool:
        """Whether adding `percent` keeps the total within the ceiling."""
        return self.total + percent <= self.ceiling

    def allocate(self, percent: int) -> int:
        """Increase the running total. Callers check fits() first."""
        if percent < 0:
            raise ValueError("Allocation only increases")
        if not self.fits(percent):
            raise ValueError(
                f"Allocation {percent} exceeds headroom {self.headroom()} "
                f"(total={self.total}, ceiling={self.ceiling})"
            )
        self.total += percent
        return self.total

