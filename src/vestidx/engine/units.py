"""Index Converter - Static vs index-adjusted units for rebasing assets.

Key Concepts:
- Static amount: denominated in the underlying (non-rebasing) unit
- Index-adjusted amount: static amount divided by the current index
- index() starts at SCALE and only increases as the yield asset rebases
- Both conversions floor, so the ledger under-credits and never over-credits
"""

from typing import Callable, NewType, Union

SCALE = 10 ** 18
PERCENT_SCALE = 1_000_000  # 10_000 = 1%

Static = NewType("Static", int)
IndexAdjusted = NewType("IndexAdjusted", int)


class IndexConverter:
    """Convert between static and index-adjusted amounts using a live index."""

    def __init__(self, index_source: Union[Callable[[], int], object], scale: int = SCALE):
        """
        Initialize converter.

        Args:
            index_source: Object exposing index() or a zero-arg callable
            scale: Fixed-point scale of the index (1e18)
        """
        if callable(index_source) and not hasattr(index_source, "index"):
            self._read_index = index_source
        else:
            self._read_index = index_source.index
        self.scale = scale

    def index(self) -> int:
        """Read the current index. Never cached."""
        value = int(self._read_index())
        if value <= 0:
            raise ValueError(f"Index source returned non-positive index: {value}")
        return value

    def to_index_adjusted(self, amount: Static) -> IndexAdjusted:
        """amount * SCALE / index, floored."""
        if amount < 0:
            raise ValueError(f"Amount must be non-negative, got {amount}")
        return IndexAdjusted(amount * self.scale // self.index())

    def from_index_adjusted(self, amount: IndexAdjusted) -> Static:
        """amount * index / SCALE, floored."""
        if amount < 0:
            raise ValueError(f"Amount must be non-negative, got {amount}")
        return Static(amount * self.index() // self.scale)
