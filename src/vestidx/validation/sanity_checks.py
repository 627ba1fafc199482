"""Sanity checks and validation for vesting configuration and ledger state."""

from dataclasses import dataclass
from typing import TYPE_CHECKING, List, Optional

from ..config.schema import DAY, Config
from ..engine.fixed_vesting import FixedGrantVesting
from ..engine.share_vesting import ShareVesting
from ..engine.units import PERCENT_SCALE, IndexAdjusted

if TYPE_CHECKING:
    from ..simulation.runner import SimulationResult


@dataclass
class ValidationWarning:
    """A validation warning with severity and message."""
    severity: str  # "warning" or "error"
    category: str  # e.g., "input", "entitlement", "allocation", "solvency"
    message: str
    details: Optional[str] = None


class SanityChecker:
    """Run sanity checks on configuration and ledger state."""

    def __init__(self, config: Config):
        """Initialize with configuration."""
        self.config = config

    def check_config_inputs(self) -> List[ValidationWarning]:
        """
        Check configuration inputs for implausible values.

        Returns:
            List of validation warnings
        """
        warnings = []
        sim = self.config.simulation
        step_seconds = sim.timestep_days * DAY

        if not self.config.grants and not self.config.share_terms:
            warnings.append(ValidationWarning(
                severity="warning",
                category="input",
                message="No grants or share terms configured",
                details="The simulation will only move the index and supply"
            ))

        for grant in self.config.grants:
            length = grant.vest_length or self.config.fixed_schedule.default_vest_length
            if length < step_seconds:
                warnings.append(ValidationWarning(
                    severity="warning",
                    category="input",
                    message=f"Grant to {grant.beneficiary} vests within a single timestep",
                    details=f"Vest length: {length / DAY:.1f} days, timestep: {sim.timestep_days} days"
                ))

        window = self.config.share_schedule.full_vest - self.config.share_schedule.vest_start
        if self.config.share_terms and window < step_seconds:
            warnings.append(ValidationWarning(
                severity="warning",
                category="input",
                message="Shared vesting window is shorter than one timestep",
                details=f"Window: {window / DAY:.1f} days"
            ))

        if sim.index_growth_per_step > 0.05:
            warnings.append(ValidationWarning(
                severity="warning",
                category="bounds",
                message="Index growth >5% per timestep is unusually high",
                details=f"Current value: {sim.index_growth_per_step*100:.2f}%"
            ))

        ceiling = self.config.share_schedule.max_allocated_percent
        if ceiling > PERCENT_SCALE // 2:
            warnings.append(ValidationWarning(
                severity="warning",
                category="allocation",
                message=f"Allocation ceiling of {ceiling / PERCENT_SCALE * 100:.1f}% of supply is unusually high"
            ))

        allocated = sum(t.percent for t in self.config.share_terms)
        if allocated > ceiling:
            warnings.append(ValidationWarning(
                severity="error",
                category="allocation",
                message="Share terms exceed the allocation ceiling",
                details=f"Allocated: {allocated}, ceiling: {ceiling}"
            ))

        return warnings

    def check_fixed_ledger(self, ledger: FixedGrantVesting) -> List[ValidationWarning]:
        """Claimed never exceeds entitlement; custody covers every unclaimed entitlement."""
        warnings = []
        outstanding = 0
        for address, term in ledger.terms.items():
            if term.index_adjusted_claimed > term.total_index_adjusted_can_claim:
                warnings.append(ValidationWarning(
                    severity="error",
                    category="entitlement",
                    message=f"Over-claim by {address}",
                    details=(
                        f"Claimed {term.index_adjusted_claimed} > entitlement "
                        f"{term.total_index_adjusted_can_claim} (index-adjusted)"
                    )
                ))
            outstanding += max(0, term.total_index_adjusted_can_claim - term.index_adjusted_claimed)

        custody = ledger.receipt_token.index_adjusted_balance_of(ledger.address)
        if custody < outstanding:
            warnings.append(ValidationWarning(
                severity="error",
                category="solvency",
                message="Custody below outstanding entitlement",
                details=f"Custody {custody} < outstanding {outstanding} (index-adjusted)"
            ))
        return warnings

    def check_share_ledger(self, ledger: ShareVesting) -> List[ValidationWarning]:
        """Allocation counter matches terms and stays within the ceiling; caps hold."""
        warnings = []
        percent_sum = 0
        for address, term in ledger.terms.items():
            percent_sum += term.percent
            if term.max_claim:
                # Claimed value drifts with the index; only the remaining headroom is binding
                claimed = ledger.converter.from_index_adjusted(IndexAdjusted(term.index_adjusted_claimed))
                headroom = max(0, term.max_claim - claimed)
                redeemable = ledger.redeemable_for(address)
                if redeemable > headroom:
                    warnings.append(ValidationWarning(
                        severity="error",
                        category="entitlement",
                        message=f"Claim cap not enforced for {address}",
                        details=f"Redeemable {redeemable} > remaining cap {headroom}"
                    ))

        if percent_sum != ledger.total_allocated:
            warnings.append(ValidationWarning(
                severity="error",
                category="allocation",
                message="Allocation counter disagrees with stored terms",
                details=f"Counter {ledger.total_allocated}, terms sum {percent_sum}"
            ))
        if ledger.total_allocated > ledger.max_allocated_percent:
            warnings.append(ValidationWarning(
                severity="error",
                category="allocation",
                message="Allocation ceiling exceeded",
                details=f"Allocated {ledger.total_allocated} > ceiling {ledger.max_allocated_percent}"
            ))
        return warnings


def validate_simulation_results(result: "SimulationResult") -> List[ValidationWarning]:
    """
    Validate complete simulation results.

    Args:
        result: Output of SimulationRunner.run()

    Returns:
        List of all validation warnings
    """
    checker = SanityChecker(result.config)
    warnings = checker.check_config_inputs()

    for message in result.conservation_errors:
        warnings.append(ValidationWarning(
            severity="error",
            category="invariant",
            message=message
        ))

    snapshots = result.snapshots
    for prev, curr in zip(snapshots, snapshots[1:]):
        if curr.index < prev.index:
            warnings.append(ValidationWarning(
                severity="error",
                category="index",
                message=f"Index decreased at t={curr.t_days:.0f}d",
                details=f"{prev.index} -> {curr.index}"
            ))

    if result.rejected_claims:
        warnings.append(ValidationWarning(
            severity="warning",
            category="claims",
            message=f"{len(result.rejected_claims)} claims were rejected",
            details=result.rejected_claims[0]
        ))

    if snapshots:
        final = snapshots[-1]
        if final.fixed_entitlement and final.fixed_claimed > final.fixed_entitlement:
            warnings.append(ValidationWarning(
                severity="error",
                category="entitlement",
                message="Fixed grants over-claimed",
                details=f"Claimed {final.fixed_claimed:,} > entitlement {final.fixed_entitlement:,}"
            ))

    return warnings
