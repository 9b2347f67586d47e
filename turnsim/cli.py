#!/usr/bin/env python3
"""
turnsim - Command Line Interface

Run one battle or a batch of seeded battles from a JSON run config.

Usage:
    turnsim run --config battle.json --seed ABC123
    turnsim run --config battle.json --json
    turnsim batch --config battle.json --iterations 1000 --workers 8
"""

import argparse
import json
import logging
import sys

from .errors import EngineError
from .simulation import BatchConfig, BatchSimulator, Simulation, load_config
from .state.rng import seed_to_long


# =============================================================================
# OUTPUT FORMATTING
# =============================================================================

def format_stats(name: str, stats: dict) -> str:
    return (f"{name}: mean {stats['mean']:.1f} (std {stats['std']:.1f}, "
            f"p5 {stats['p5']:.1f}, p50 {stats['p50']:.1f}, p95 {stats['p95']:.1f})")


# =============================================================================
# COMMANDS
# =============================================================================

def cmd_run(args) -> int:
    """Run a single battle."""
    config = load_config(args.config)
    if args.seed is not None:
        config = config.with_seed(seed_to_long(args.seed))

    result = Simulation(config).run()

    if args.json:
        print(json.dumps(result.to_dict(), indent=2))
        return 0

    print(f"Seed: {result.seed}")
    print(f"Result: {'VICTORY' if result.victory else 'DEFEAT'}")
    print(f"Turns: {result.turns}  Cycles: {result.cycles}  AV: {result.total_av:.1f}")
    print()
    print("Damage dealt:")
    for key, damage in sorted(result.damage_dealt.items(), key=lambda kv: -kv[1]):
        print(f"  {key:<20} {damage:>12.1f}")
    return 0


def cmd_batch(args) -> int:
    """Run many seeds and print aggregate statistics."""
    config = load_config(args.config)
    if args.seed is not None:
        config = config.with_seed(seed_to_long(args.seed))

    batch = BatchConfig(
        iterations=args.iterations,
        n_workers=args.workers,
        chunk_size=args.chunk_size,
    )
    result = BatchSimulator(config, batch).run()

    if args.json:
        print(json.dumps(result.summary(), indent=2))
        return 0 if not result.errors else 1

    print(f"Iterations: {result.completed_tasks}/{result.total_tasks} "
          f"({result.tasks_per_second:.1f}/s)")
    print(f"Win rate: {result.win_rate() * 100:.1f}%")
    print(format_stats("Total damage", result.damage_stats()))
    print(format_stats("Turns", result.turn_stats()))
    if result.errors:
        print(f"\n{len(result.errors)} iteration(s) failed:")
        for seed, msg in result.errors[:10]:
            print(f"  seed {seed}: {msg}")
        return 1
    return 0


# =============================================================================
# MAIN
# =============================================================================

def main(argv=None):
    parser = argparse.ArgumentParser(
        prog="turnsim",
        description="turnsim - turn-based combat simulator",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s run --config battle.json --seed ABC123
  %(prog)s batch --config battle.json --iterations 1000 --workers 8
        """
    )
    parser.add_argument("--log-level", default="WARNING",
                        choices=["DEBUG", "INFO", "WARNING", "ERROR"], help="Logging level")

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # Run command
    run_parser = subparsers.add_parser("run", help="Run one battle")
    run_parser.add_argument("--config", "-c", required=True, help="Path to JSON run config")
    run_parser.add_argument("--seed", "-s", help="Override the config seed")
    run_parser.add_argument("--json", "-j", action="store_true", help="Output in JSON format")

    # Batch command
    batch_parser = subparsers.add_parser("batch", help="Run many seeded battles")
    batch_parser.add_argument("--config", "-c", required=True, help="Path to JSON run config")
    batch_parser.add_argument("--seed", "-s", help="Override the base seed")
    batch_parser.add_argument("--iterations", "-n", type=int, default=100, help="Number of battles")
    batch_parser.add_argument("--workers", "-w", type=int, default=0, help="Worker processes (0 = auto)")
    batch_parser.add_argument("--chunk-size", type=int, default=25, help="Battles per worker task")
    batch_parser.add_argument("--json", "-j", action="store_true", help="Output in JSON format")

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if not args.command:
        parser.print_help()
        return 1

    # Dispatch to command handler
    commands = {
        "run": cmd_run,
        "batch": cmd_batch,
    }

    handler = commands.get(args.command)
    try:
        return handler(args)
    except EngineError as e:
        print(f"error: {e}", file=sys.stderr)
        return 2


if __name__ == "__main__":
    sys.exit(main())
