"""Scenario simulation over both vesting ledgers."""

from .runner import LedgerSnapshot, SimulationResult, SimulationRunner

__all__ = ["LedgerSnapshot", "SimulationResult", "SimulationRunner"]
