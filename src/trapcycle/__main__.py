"""
CLI entry point for trapcycle.

This module provides the command-line interface for the trapcycle package.
It serves as the entry point when the package is invoked via:
- `trapcycle <command>` (installed script)
- `python -m trapcycle <command>` (module execution)

Architecture Role:
    A thin dispatcher. It parses arguments, configures logging, and hands off
    to the config loader, the hunter wiring and the simulated world.

    User Input → __main__.py → config / hunter / sim → tasks → placement, state

Available Commands:
    info: Show version, placement strategies and known trap types
    simulate: Run a hunting config against the in-memory world

Command Structure:
    trapcycle [-v] <command> [arguments] [options]

    Examples:
        trapcycle info
        trapcycle simulate configs/bird_snares.yaml
        trapcycle simulate configs/bird_snares.yaml --cycles 500 --seed 7
        trapcycle -v simulate configs/bird_snares.yaml --catch-chance 0.5

Design Decisions:
    - Uses argparse subparsers for clean command separation
    - Returns exit codes (0=success, 1=error) for shell scripting
    - Simulations do not sleep unless --realtime is given

Dependencies:
    - argparse: Command-line argument parsing
    - logging: Handler setup for every trapcycle module
    - trapcycle.config, trapcycle.hunter, trapcycle.sim
"""

from __future__ import annotations

import argparse
import logging
import sys
import time

logger = logging.getLogger(__name__)

# =============================================================================
# COMMAND HANDLERS
# =============================================================================


def _run_info() -> int:
    from trapcycle import __version__
    from trapcycle.config import TRAP_TYPES
    from trapcycle.geometry import Coordinate
    from trapcycle.placement import STRATEGIES, create_strategy

    print(f"trapcycle v{__version__}")
    print()

    print("Placement Strategies:")
    for name in STRATEGIES:
        strategy = create_strategy(name, max_traps=3, anchor=Coordinate(0, 0, 0))
        print(f"  {name}: {strategy.description}")
    print()

    print("Trap Types:")
    for key, trap in TRAP_TYPES.items():
        drops = ", ".join(str(i) for i in trap.drop_items) or "-"
        print(f"  {key}: item {trap.item_id} (drops: {drops})")
    return 0


def _run_simulate(args: argparse.Namespace) -> int:
    from trapcycle.collaborators import Collaborators
    from trapcycle.config import HuntingConfig
    from trapcycle.geometry import make_rng
    from trapcycle.hunter import build_hunter
    from trapcycle.sim import SimulatedWorld
    from trapcycle.tasks import run_polling_loop

    try:
        config = HuntingConfig.from_yaml(args.config)
    except (FileNotFoundError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    seed = args.seed if args.seed is not None else config.seed
    rng = make_rng(seed)
    trap = config.trap()

    world = SimulatedWorld(
        config.zone_list(),
        trap_item_id=trap.item_id,
        supplies=args.supplies if args.supplies is not None else config.max_traps,
        loot=trap.drop_items,
        catch_chance=args.catch_chance,
        rng=make_rng(None if seed is None else seed + 1),
    )
    hunter = build_hunter(config, Collaborators.from_host(world), rng=rng)

    def on_cycle(cycle: int, delay_ms: int) -> None:
        world.tick(delay_ms)
        logger.debug("Cycle %d: %s, next in %d ms", cycle, hunter.trap_task.state.summary(), delay_ms)

    sleep = time.sleep if args.realtime else (lambda _seconds: None)
    total_ms = run_polling_loop(hunter.manager, args.cycles, sleep=sleep, on_cycle=on_cycle)

    stats = hunter.trap_task.stats
    print(f"Strategy: {hunter.trap_task.strategy.name}")
    print(f"Cycles: {args.cycles}")
    print(f"Simulated time: {total_ms / 1000:.1f}s")
    print(f"Traps placed: {stats.placed}")
    print(f"Catches: {world.counters.catches}")
    print(f"Traps collected: {stats.collected}")
    print(f"Collapsed traps reset: {stats.reset}")
    print(f"Traps lost: {stats.lost}")
    print(f"Failed steps: {stats.failures}")
    print(f"Items dropped: {world.counters.items_dropped}")
    print(f"Traps still out: {len(hunter.trap_task.state)}")
    return 0


# =============================================================================
# MAIN CLI FUNCTION
# =============================================================================


def main(argv: list[str] | None = None) -> int:
    """
    Main CLI entry point for trapcycle.

    Args:
        argv: Argument list; None reads sys.argv.

    Returns:
        Exit code: 0 for success, 1 for errors or unknown commands.
    """
    parser = argparse.ArgumentParser(
        prog="trapcycle",
        description="trapcycle - trap placement and servicing task engine",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable debug logging",
    )
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # -------------------------------------------------------------------------
    # Info Command
    # -------------------------------------------------------------------------
    subparsers.add_parser(
        "info",
        help="Show strategies and trap types",
    )

    # -------------------------------------------------------------------------
    # Simulate Command
    # -------------------------------------------------------------------------
    simulate_parser = subparsers.add_parser(
        "simulate",
        help="Run a hunting config against the simulated world",
    )
    simulate_parser.add_argument(
        "config",
        help="Path to hunting config YAML",
    )
    simulate_parser.add_argument(
        "--cycles",
        type=int,
        default=200,
        help="Number of scheduler polls (default: 200)",
    )
    simulate_parser.add_argument(
        "--seed",
        type=int,
        default=None,
        help="Random seed (default: the config's seed)",
    )
    simulate_parser.add_argument(
        "--catch-chance",
        type=float,
        default=0.2,
        help="Per-poll probability that a waiting trap catches something (default: 0.2)",
    )
    simulate_parser.add_argument(
        "--supplies",
        type=int,
        default=None,
        help="Trap items in the starting inventory (default: max_traps)",
    )
    simulate_parser.add_argument(
        "--realtime",
        action="store_true",
        help="Actually sleep for each returned delay",
    )

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.command == "info":
        return _run_info()

    elif args.command == "simulate":
        if args.cycles < 0:
            print("Error: --cycles must be >= 0", file=sys.stderr)
            return 1
        if not (0.0 <= args.catch_chance <= 1.0):
            print("Error: --catch-chance must be in [0, 1]", file=sys.stderr)
            return 1
        return _run_simulate(args)

    else:
        parser.print_help()
        return 1


# =============================================================================
# MODULE EXECUTION
# =============================================================================

# Allow execution via: python -m trapcycle
if __name__ == "__main__":
    sys.exit(main())
