"""Command-line entry point: replay scenarios and run invariant sweeps."""

import argparse
import logging
import sys

from pydantic import ValidationError

from .config.loader import load_config
from .config.schema import Config
from .engine.errors import StakingError
from .reporting.export import export_csv, export_json
from .simulation.monte_carlo import MonteCarloRunner
from .simulation.runner import ScenarioRunner
from .validation.sanity_checks import validate_simulation_results


def setup_logging(config: Config, verbose: bool = False):
    level = logging.DEBUG if verbose else getattr(logging, config.logging.level)
    logging.basicConfig(level=level, format=config.logging.format)


def _load(args) -> Config:
    try:
        return load_config(args.config)
    except (OSError, ValueError, ValidationError) as e:
        print(f"Error: could not load config: {e}")
        sys.exit(1)


def cmd_schedule(args):
    config = _load(args)
    staking = config.staking
    print(f"Reward token:  {staking.reward_token}")
    print(f"Staking token: {staking.staking_token}")
    print(f"Owner:         {staking.owner}")
    print(f"Start height:  {staking.start_height}")
    print()
    print(f"{'Start':>10} {'End':>10} {'Amount':>24} {'Per block':>20}")
    print("-" * 67)
    total = 0
    for start, end, amount in staking.distribution_schedule:
        total += amount
        print(f"{start:>10} {end:>10} {amount:>24,} {amount // (end - start):>20,}")
    print("-" * 67)
    print(f"{'Total':>21} {total:>24,}")


def cmd_run(args):
    config = _load(args)
    setup_logging(config, args.verbose)

    if not config.scenario:
        print("Error: config has no scenario operations")
        sys.exit(1)

    try:
        result = ScenarioRunner(config).run()
    except StakingError as e:
        print(f"Error: could not initialize contract: {e}")
        sys.exit(1)

    final = result.final_snapshot
    print(f"Operations:     {len(result.snapshots)} ({len(result.rejections)} rejected)")
    print(f"Last height:    {final.last_distributed}")
    print(f"Total bonded:   {final.total_bond_amount:,}")
    print(f"Reward index:   {final.global_reward_index}")
    print(f"Emitted:        {final.emitted_cumulative:,} (forfeited {final.forfeited_cumulative:,})")
    print(f"Withdrawn:      {final.withdrawn_cumulative:,}")
    print(f"Migrated:       {result.migrated_total:,}")
    for rejection in result.rejections:
        print(f"  step {rejection.step} {rejection.op}@{rejection.height}: "
              f"{rejection.error}: {rejection.message}")

    if args.csv:
        export_csv(result, args.csv)
        print(f"Snapshots written to {args.csv}")
    if args.json:
        export_json(result, args.json)
        print(f"Report written to {args.json}")

    errors = [w for w in validate_simulation_results(result) if w.severity == "error"]
    for warning in errors:
        print(f"INVARIANT: {warning.message} {warning.details or ''}")
    if errors:
        sys.exit(2)


def cmd_montecarlo(args):
    config = _load(args)
    setup_logging(config, args.verbose)

    runner = MonteCarloRunner(config)
    results = runner.run(num_runs=args.runs, random_seed=args.seed)

    failed = 0
    for run_idx, result in enumerate(results):
        errors = [w for w in validate_simulation_results(result) if w.severity == "error"]
        final = result.final_snapshot
        status = "OK" if not errors else f"{len(errors)} violations"
        print(f"run {run_idx:>3}: ops={len(result.snapshots)} rejected={len(result.rejections)} "
              f"emitted={final.emitted_cumulative:,} withdrawn={final.withdrawn_cumulative:,} {status}")
        for warning in errors:
            print(f"    {warning.category}: {warning.message} {warning.details or ''}")
        if errors:
            failed += 1

    print(f"{len(results) - failed}/{len(results)} runs passed all invariants")
    if failed:
        sys.exit(2)


def main(argv=None):
    parser = argparse.ArgumentParser(prog="xstake", description="Scheduled staking reward engine")
    parser.add_argument("--config", help="YAML config file (defaults to the packaged defaults)")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    subparsers = parser.add_subparsers(dest="command", required=True)

    p_schedule = subparsers.add_parser("schedule", help="Show the configured distribution schedule")
    p_schedule.set_defaults(func=cmd_schedule)

    p_run = subparsers.add_parser("run", help="Replay the scenario in the config")
    p_run.add_argument("--csv", help="Write per-operation snapshots to CSV")
    p_run.add_argument("--json", help="Write a full JSON report")
    p_run.set_defaults(func=cmd_run)

    p_mc = subparsers.add_parser("montecarlo", help="Check invariants over random scenarios")
    p_mc.add_argument("--runs", type=int, help="Number of runs (defaults to config)")
    p_mc.add_argument("--seed", type=int, help="Random seed (defaults to config)")
    p_mc.set_defaults(func=cmd_montecarlo)

    args = parser.parse_args(argv)
    args.func(args)


if __name__ == "__main__":
    main()
