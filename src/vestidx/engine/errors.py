"""Error taxonomy for vesting ledger operations.

Every failure is a local validation failure: the operation is rejected
outright and no ledger state is mutated.
"""

from dataclasses import dataclass
from typing import Any, Optional


@dataclass
class VestingError(Exception):
    """Canonical error type for rejected ledger operations."""

    code: str
    reason: str
    details: Optional[Any] = None

    def __str__(self) -> str:
        if self.details is None:
            return f"{self.code}:{self.reason}"
        return f"{self.code}:{self.reason}:{self.details}"


class InsufficientVested(VestingError):
    """Claim amount exceeds the currently redeemable amount."""

    def __init__(self, reason: str = "claim_exceeds_vested", details: Optional[Any] = None):
        super().__init__("insufficient_vested", reason, details)


class DuplicateGrant(VestingError):
    """Target address already holds a term."""

    def __init__(self, reason: str = "term_exists", details: Optional[Any] = None):
        super().__init__("duplicate_grant", reason, details)


class MigrationViolation(VestingError):
    """Pull without a matching push, or pull into an address that holds a term."""

    def __init__(self, reason: str, details: Optional[Any] = None):
        super().__init__("migration_violation", reason, details)


class NoPendingMigration(VestingError):
    """Nothing to migrate: no term to push, or no proposal to pull."""

    def __init__(self, reason: str, details: Optional[Any] = None):
        super().__init__("no_pending_migration", reason, details)


class AllocationCeilingExceeded(VestingError):
    """Share grant would push total allocation past the ceiling."""

    def __init__(self, reason: str = "ceiling_exceeded", details: Optional[Any] = None):
        super().__init__("allocation_ceiling_exceeded", reason, details)


class Unauthorized(VestingError):
    """Caller is not the configured authority."""

    def __init__(self, reason: str = "authority_required", details: Optional[Any] = None):
        super().__init__("unauthorized", reason, details)


class ReentrantCall(VestingError):
    """A collaborator re-entered the ledger during an operation."""

    def __init__(self, reason: str = "ledger_busy", details: Optional[Any] = None):
        super().__init__("reentrancy", reason, details)
