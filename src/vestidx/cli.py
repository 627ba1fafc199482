"""Command-line entry point: run a vesting scenario and export results."""

import argparse
import logging
import sys
from typing import List, Optional

from .config.loader import load_config
from .engine.units import SCALE
from .reporting.export import export_csv, export_json
from .simulation.runner import SimulationRunner
from .validation.sanity_checks import validate_simulation_results

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="vestidx-workbench",
        description="Simulate index-adjusted vesting ledgers",
    )
    parser.add_argument("--config", default=None, help="YAML config (defaults to packaged defaults.yaml)")
    parser.add_argument("--seed", type=int, default=None, help="Override the random seed")
    parser.add_argument("--csv", default=None, help="Write snapshots to this CSV path")
    parser.add_argument("--json", default=None, help="Write full results to this JSON path")
    parser.add_argument("--log-level", default="WARNING", help="Logging level (DEBUG, INFO, ...)")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, args.log_level.upper(), logging.WARNING),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    config = load_config(args.config)
    result = SimulationRunner(config).run(random_seed=args.seed)
    warnings = validate_simulation_results(result)

    metrics = result.final_metrics
    print(f"config hash      {config.compute_hash()}")
    print(f"final index      {metrics['final_index'] / SCALE:.6f}")
    print(f"fixed claimed    {metrics['fixed_claimed'] / SCALE:,.2f} / {metrics['fixed_entitlement'] / SCALE:,.2f}")
    print(f"share claimed    {metrics['share_claimed'] / SCALE:,.2f} / {metrics['share_entitlement'] / SCALE:,.2f}")
    print(f"claims           {metrics['total_claims']}")
    for warning in warnings:
        print(f"[{warning.severity}] {warning.category}: {warning.message}")

    if args.csv:
        export_csv(result, args.csv)
        logger.info("Wrote %s", args.csv)
    if args.json:
        export_json(result, args.json)
        logger.info("Wrote %s", args.json)

    return 1 if any(w.severity == "error" for w in warnings) else 0


if __name__ == "__main__":
    sys.exit(main())
