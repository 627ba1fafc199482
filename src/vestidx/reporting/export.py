"""Export functionality for CSV and JSON."""

import json
from dataclasses import asdict
from typing import Any, Dict, List

import pandas as pd

from ..simulation.runner import SimulationResult


def snapshots_frame(result: SimulationResult) -> pd.DataFrame:
    """Snapshots as a DataFrame, one row per timestep."""
    data = []
    for snapshot in result.snapshots:
        row = asdict(snapshot)
        row['t_days'] = snapshot.t_days
        data.append(row)
    return pd.DataFrame(data)


def events_frame(result: SimulationResult) -> pd.DataFrame:
    """Ledger event journal as a DataFrame."""
    return pd.DataFrame([
        {'t': e.t, 'kind': e.kind, 'address': e.address, 'amount': e.amount, **e.details}
        for e in result.events
    ])


def export_csv(result: SimulationResult, filepath: str):
    """Export snapshots to CSV."""
    snapshots_frame(result).to_csv(filepath, index=False)


def _export_payload(result: SimulationResult) -> Dict[str, Any]:
    events: List[Dict[str, Any]] = [asdict(e) for e in result.events]
    return {
        'config': result.config.to_dict(),
        'config_hash': result.config.compute_hash(),
        'snapshots': [asdict(s) for s in result.snapshots],
        'events': events,
        'final_metrics': result.final_metrics,
        'conservation_errors': result.conservation_errors,
        'rejected_claims': result.rejected_claims,
    }


def export_json(result: SimulationResult, filepath: str):
    """Export simulation results to JSON."""
    with open(filepath, 'w') as f:
        json.dump(_export_payload(result), f, indent=2)
