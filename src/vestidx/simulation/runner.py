"""Simulation runner - Replay a vesting scenario against both ledgers.

Key Features:
- Builds the token economy (static token, rebasing receipt, staking, treasury)
- Issues configured fixed grants and supply-share terms at t=0
- Steps a fixed time grid, growing the index and the claim-token supply
- Beneficiaries claim a fraction of their redeemable amount at random steps
- Ledger invariants are checked after every step
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List

import numpy as np

from ..config.schema import DAY, Config
from ..engine.base import LedgerEvent
from ..engine.clock import ManualClock
from ..engine.errors import VestingError
from ..engine.fixed_vesting import FixedGrantVesting
from ..engine.share_vesting import ShareVesting
from ..engine.units import SCALE
from ..externalities.rebasing import RebasingToken, StakingPool
from ..externalities.token import StaticToken
from ..externalities.treasury import Treasury
from ..validation.sanity_checks import SanityChecker

logger = logging.getLogger(__name__)

SIMULATION_MINTER = "simulation"
MARKET = "market"


@dataclass
class LedgerSnapshot:
    """Both ledgers at a point in time. Amounts are static units at that step's index."""
    t: int  # Seconds since start
    index: int
    claim_supply: int
    fixed_entitlement: int
    fixed_claimed: int
    fixed_redeemable: int
    fixed_custody: int
    share_allocated: int
    share_entitlement: int
    share_claimed: int
    share_redeemable: int
    treasury_reserves: int
    claims: int  # Claims committed during this step

    @property
    def t_days(self) -> float:
        return self.t / DAY


@dataclass
class SimulationResult:
    """Complete simulation result."""
    config: Config
    snapshots: List[LedgerSnapshot]
    events: List[LedgerEvent]
    final_metrics: Dict[str, Any]
    conservation_errors: List[str] = field(default_factory=list)
    rejected_claims: List[str] = field(default_factory=list)


def build_index_path(initial_index: int, growth_per_step: float, num_steps: int) -> List[int]:
    """Monotonic integer index path: initial * (1 + growth)^k."""
    factors = (1.0 + growth_per_step) ** np.arange(num_steps)
    path = [initial_index]
    for factor in factors[1:]:
        path.append(max(path[-1], int(initial_index * float(factor))))
    return path[:num_steps]


def _portion(amount: int, fraction: float) -> int:
    """Integer share of `amount`, exact for amounts beyond float precision."""
    return amount * int(round(fraction * 10_000)) // 10_000


class SimulationRunner:
    """Drives both vesting ledgers through a configured scenario."""

    def __init__(self, config: Config):
        """
        Initialize simulation runner.

        Args:
            config: Simulation configuration
        """
        self.config = config
        self.clock = ManualClock(0)

        self.static_token = StaticToken("STATIC", minters=[SIMULATION_MINTER])
        self.receipt = RebasingToken("sSTATIC", minter="staking", initial_index=config.index.initial_index)
        self.staking = StakingPool(self.static_token, self.receipt, address="staking")
        self.static_token.add_minter(self.staking.address)

        self.payment_token = StaticToken("PAY", minters=[SIMULATION_MINTER])
        self.treasury = Treasury(
            self.payment_token,
            self.static_token,
            backing_ratio=config.treasury.backing_ratio,
        )
        self.static_token.add_minter(self.treasury.address)

        self.fixed = FixedGrantVesting(
            config.authority,
            self.static_token,
            self.receipt,
            self.staking,
            clock=self.clock,
            default_vest_length=config.fixed_schedule.default_vest_length,
        )
        self.share = ShareVesting(
            config.authority,
            claim_token=self.static_token,
            payment_token=self.payment_token,
            treasury=self.treasury,
            index_source=self.receipt,
            vest_start=config.share_schedule.vest_start,
            full_vest=config.share_schedule.full_vest,
            max_allocated_percent=config.share_schedule.max_allocated_percent,
            staking=self.staking,
            clock=self.clock,
        )
        self.treasury.approve_minter(self.share.address)

    def _issue_terms(self) -> None:
        authority = self.config.authority
        self.static_token.mint(SIMULATION_MINTER, authority, self.config.fixed_schedule.issuer_balance)
        self.static_token.mint(SIMULATION_MINTER, MARKET, self.config.treasury.initial_claim_supply)
        self.static_token.approve(authority, self.fixed.address, self.config.fixed_schedule.issuer_balance)

        for grant in self.config.grants:
            self.fixed.grant(authority, grant.beneficiary, grant.amount, grant.vest_length)
        for term in self.config.share_terms:
            self.share.set_terms(authority, term.account, term.percent, max_claim=term.max_claim)

    def _claim_fixed(self, beneficiary: str, fraction: float) -> bool:
        amount = _portion(self.fixed.redeemable_for(beneficiary), fraction)
        if amount <= 0:
            return False
        self.fixed.claim(beneficiary, beneficiary, amount)
        return True

    def _claim_share(self, account: str, fraction: float) -> bool:
        wanted = _portion(self.share.redeemable_for(account), fraction)
        payment = wanted * self.treasury.reserve_backing_ratio() // SCALE
        if payment <= 0 or self.share.claim_amount_for(payment) <= 0:
            return False
        self.payment_token.mint(SIMULATION_MINTER, account, payment)
        self.payment_token.approve(account, self.share.address, payment)
        self.share.claim(account, account, payment)
        return True

    def snapshot(self, claims: int = 0) -> LedgerSnapshot:
        """Capture both ledgers at the current clock."""
        fixed_addresses = [address for address, _ in self.fixed.terms.items()]
        share_addresses = [address for address, _ in self.share.terms.items()]
        return LedgerSnapshot(
            t=self.clock(),
            index=self.receipt.index(),
            claim_supply=self.static_token.total_supply(),
            fixed_entitlement=sum(self.fixed.total_entitlement(a) for a in fixed_addresses),
            fixed_claimed=sum(self.fixed.claimed(a) for a in fixed_addresses),
            fixed_redeemable=sum(self.fixed.redeemable_for(a) for a in fixed_addresses),
            fixed_custody=self.receipt.balance_of(self.fixed.address),
            share_allocated=self.share.total_allocated,
            share_entitlement=sum(self.share.entitlement_static(a) for a in share_addresses),
            share_claimed=sum(self.share.claimed(a) for a in share_addresses),
            share_redeemable=sum(self.share.redeemable_for(a) for a in share_addresses),
            treasury_reserves=self.treasury.reserves(),
            claims=claims,
        )

    def run(self, random_seed: int = None) -> SimulationResult:
        """
        Run the simulation.

        Args:
            random_seed: Random seed for reproducibility

        Returns:
            Simulation result
        """
        sim = self.config.simulation
        rng = np.random.default_rng(sim.random_seed if random_seed is None else random_seed)
        checker = SanityChecker(self.config)

        times = np.arange(0, sim.horizon_days + 1, sim.timestep_days, dtype=np.int64) * DAY
        index_path = build_index_path(self.config.index.initial_index, sim.index_growth_per_step, len(times))

        self._issue_terms()
        snapshots = [self.snapshot()]
        conservation_errors: List[str] = []
        rejected: List[str] = []

        for step in range(1, len(times)):
            self.clock.set(int(times[step]))
            self.receipt.rebase_to(index_path[step])
            growth = int(self.static_token.total_supply() * sim.supply_growth_per_step)
            if growth > 0:
                self.static_token.mint(SIMULATION_MINTER, MARKET, growth)

            claims = 0
            for ledger, claim in ((self.fixed, self._claim_fixed), (self.share, self._claim_share)):
                for address, _ in ledger.terms.items():
                    if rng.random() >= sim.claim_probability:
                        continue
                    try:
                        claims += int(claim(address, sim.claim_fraction))
                    except VestingError as exc:
                        rejected.append(f"t={self.clock()}: {address}: {exc}")
                        logger.warning("Claim rejected during simulation: %s", exc)

            for warning in checker.check_fixed_ledger(self.fixed) + checker.check_share_ledger(self.share):
                if warning.severity == "error":
                    conservation_errors.append(f"t={self.clock()}: {warning.message}")
            snapshots.append(self.snapshot(claims))

        final = snapshots[-1]
        final_metrics = {
            "final_index": final.index,
            "index_growth": final.index / snapshots[0].index - 1.0,
            "fixed_entitlement": final.fixed_entitlement,
            "fixed_claimed": final.fixed_claimed,
            "fixed_claimed_fraction": final.fixed_claimed / final.fixed_entitlement if final.fixed_entitlement else 0.0,
            "share_entitlement": final.share_entitlement,
            "share_claimed": final.share_claimed,
            "share_claimed_fraction": final.share_claimed / final.share_entitlement if final.share_entitlement else 0.0,
            "treasury_reserves": final.treasury_reserves,
            "total_claims": sum(s.claims for s in snapshots),
            "num_events": len(self.fixed.events) + len(self.share.events),
        }
        logger.info(
            "Simulation finished: %d steps, %d claims, %d invariant errors",
            len(snapshots), final_metrics["total_claims"], len(conservation_errors),
        )

        return SimulationResult(
            config=self.config,
            snapshots=snapshots,
            events=sorted(self.fixed.events + self.share.events, key=lambda e: e.t),
            final_metrics=final_metrics,
            conservation_errors=conservation_errors,
            rejected_claims=rejected,
        )
