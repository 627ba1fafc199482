"""Pydantic schema for configuration validation."""

import hashlib
import json
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from ..engine.units import PERCENT_SCALE, SCALE

DAY = 24 * 3600


class IndexSettings(BaseModel):
    """Yield-bearing asset index."""
    initial_index: int = Field(default=SCALE, ge=SCALE, description="Starting index (1e18 = 1.0)")


class FixedSchedule(BaseModel):
    """Fixed-grant ledger parameters."""
    default_vest_length: int = Field(default=365 * DAY, gt=0, description="Default schedule length in seconds")
    issuer_balance: int = Field(default=0, ge=0, description="Static tokens minted to the issuer for funding grants")


class ShareSchedule(BaseModel):
    """Share ledger parameters: one window and one ceiling for every term."""
    vest_start: int = Field(default=0, ge=0, description="Shared window start timestamp")
    full_vest: int = Field(default=730 * DAY, gt=0, description="Shared window deadline timestamp")
    max_allocated_percent: int = Field(
        default=PERCENT_SCALE // 10, ge=0, le=PERCENT_SCALE,
        description="Allocation ceiling (1_000_000 = 100%)"
    )

    @field_validator('full_vest')
    @classmethod
    def validate_window(cls, v, info):
        """Ensure the deadline follows the start."""
        if 'vest_start' in info.data and v <= info.data['vest_start']:
            raise ValueError("full_vest must be after vest_start")
        return v


class TreasurySettings(BaseModel):
    """Mint transform parameters."""
    backing_ratio: int = Field(default=SCALE, gt=0, description="Payment units per claim unit, 1e18-scaled")
    initial_claim_supply: int = Field(default=0, ge=0, description="Claim-token supply before any claims")


class FixedGrant(BaseModel):
    """A fixed grant issued at simulation start."""
    beneficiary: str = Field(min_length=1)
    amount: int = Field(gt=0, description="Static tokens granted")
    vest_length: Optional[int] = Field(default=None, gt=0, description="Schedule length in seconds")


class ShareGrant(BaseModel):
    """A supply share set at simulation start."""
    account: str = Field(min_length=1)
    percent: int = Field(gt=0, le=PERCENT_SCALE, description="Share of supply (10_000 = 1%)")
    max_claim: int = Field(default=0, ge=0, description="Lifetime cap in static units, 0 = uncapped")


class Simulation(BaseModel):
    """Simulation parameters."""
    horizon_days: int = Field(default=730, gt=0, description="Simulated time span")
    timestep_days: int = Field(default=30, gt=0, description="Timestep in days")
    index_growth_per_step: float = Field(default=0.004, ge=0, le=1, description="Index growth per timestep")
    supply_growth_per_step: float = Field(default=0.01, ge=0, le=1, description="Claim-token supply growth per timestep")
    claim_probability: float = Field(default=0.6, ge=0, le=1, description="Chance a beneficiary claims in a timestep")
    claim_fraction: float = Field(default=1.0, gt=0, le=1, description="Fraction of redeemable claimed when claiming")
    random_seed: int = Field(default=42, description="Random seed for reproducibility")


class Config(BaseModel):
    """Complete configuration for the vesting workbench."""
    authority: str = Field(default="issuer", min_length=1, description="Issuer identity")
    index: IndexSettings = Field(default_factory=IndexSettings)
    fixed_schedule: FixedSchedule = Field(default_factory=FixedSchedule)
    share_schedule: ShareSchedule = Field(default_factory=ShareSchedule)
    treasury: TreasurySettings = Field(default_factory=TreasurySettings)
    simulation: Simulation = Field(default_factory=Simulation)
    grants: List[FixedGrant] = Field(default_factory=list)
    share_terms: List[ShareGrant] = Field(default_factory=list)

    @model_validator(mode='after')
    def validate_allocations(self):
        """Grants fit the issuer balance, shares fit the ceiling, no address is granted twice."""
        total_percent = sum(t.percent for t in self.share_terms)
        if total_percent > self.share_schedule.max_allocated_percent:
            raise ValueError(
                f"Share terms allocate {total_percent}, above ceiling "
                f"{self.share_schedule.max_allocated_percent}"
            )
        granted = sum(g.amount for g in self.grants)
        if granted > self.fixed_schedule.issuer_balance:
            raise ValueError(
                f"Grants total {granted}, above issuer balance {self.fixed_schedule.issuer_balance}"
            )
        for label, names in (
            ("grants", [g.beneficiary for g in self.grants]),
            ("share_terms", [t.account for t in self.share_terms]),
        ):
            if len(set(names)) != len(names):
                raise ValueError(f"Duplicate addresses in {label}")
        return self

    def compute_hash(self) -> str:
        """Compute config hash for reproducibility."""
        config_dict = self.model_dump()
        config_str = json.dumps(config_dict, sort_keys=True)
        return hashlib.sha256(config_str.encode()).hexdigest()[:16]

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Config':
        """Create config from dictionary."""
        return cls(**data)

    def to_dict(self) -> Dict[str, Any]:
        """Convert config to dictionary."""
        return self.model_dump()
