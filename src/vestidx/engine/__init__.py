"""Index-adjusted vesting ledgers."""

from .errors import (
    AllocationCeilingExceeded,
    DuplicateGrant,
    InsufficientVested,
    MigrationViolation,
    NoPendingMigration,
    ReentrantCall,
    Unauthorized,
    VestingError,
)
from .units import PERCENT_SCALE, SCALE, IndexAdjusted, IndexConverter, Static

__all__ = [
    "AllocationCeilingExceeded",
    "DuplicateGrant",
    "IndexAdjusted",
    "IndexConverter",
    "InsufficientVested",
    "MigrationViolation",
    "NoPendingMigration",
    "PERCENT_SCALE",
    "ReentrantCall",
    "SCALE",
    "Static",
    "Unauthorized",
    "VestingError",
]
