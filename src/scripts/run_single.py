#!/usr/bin/env python3
"""
Single Reachability Query Runner

Counts the cells reachable in exactly N steps from the start of a grid
file, either on the infinite tiling (default) or inside the grid itself.
"""

import argparse
import json
import logging
import sys
import time
from pathlib import Path

# Add src/ to path
SRC = Path(__file__).resolve().parents[1]
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from periodic_reach import ReachConfig, load_config, solve_bounded, solve_detailed, utils
from periodic_reach.solver import FINITE_BUDGET, PERIODIC_BUDGET


def main():
    parser = argparse.ArgumentParser(
        description="Count cells reachable in exactly N steps",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("grid", type=str, help="Grid file ('.', '#', one 'S')")
    parser.add_argument(
        "--steps",
        type=int,
        default=None,
        help=f"Step budget (default: {PERIODIC_BUDGET}, or {FINITE_BUDGET} with --bounded)",
    )
    parser.add_argument(
        "--bounded",
        action="store_true",
        help="Count inside the grid only instead of on the infinite tiling",
    )
    parser.add_argument(
        "--strategy",
        choices=["auto", "exact", "quadratic", "border", "cross"],
        default=None,
        help="Force a strategy (overrides --config)",
    )
    parser.add_argument("--config", type=str, default=None, help="JSON/TOML config file")
    parser.add_argument("--out", type=str, default=None, help="Write the result as JSON")
    parser.add_argument("--verbose", action="store_true", help="Log strategy decisions")

    args = parser.parse_args()
    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(name)s: %(message)s")

    lattice = utils.read_grid(args.grid)
    print(f"Loaded {lattice.height}x{lattice.width} grid, start at {lattice.start}")
    start_time = time.time()

    if args.bounded:
        steps = FINITE_BUDGET if args.steps is None else args.steps
        count = solve_bounded(lattice, steps)
        summary = {"grid": args.grid, "steps": steps, "bounded": True, "count": count}
    else:
        steps = PERIODIC_BUDGET if args.steps is None else args.steps
        config = load_config(args.config) if args.config else ReachConfig()
        if args.strategy is not None:
            config = ReachConfig(
                exact_threshold=config.exact_threshold,
                strategy=args.strategy,
                verify_quadratic=config.verify_quadratic,
                cache_fields=config.cache_fields,
            )
        result = solve_detailed(lattice, steps, config)
        count = result.count
        summary = {
            "grid": args.grid,
            "steps": steps,
            "bounded": False,
            "count": count,
            "strategy": result.strategy.value,
            "meta": result.meta,
        }

    elapsed_time = time.time() - start_time

    if args.out is not None:
        out = Path(args.out)
        out.parent.mkdir(parents=True, exist_ok=True)
        out.write_text(json.dumps(summary, indent=2))

    print(f"\nReachable cells after {steps} steps: {count}")
    if not args.bounded:
        print(f"   Strategy: {summary['strategy']}")
    print(f"   Time elapsed: {elapsed_time:.3f} seconds")
    if args.out is not None:
        print(f"   Result saved to: {args.out}")

    return 0


if __name__ == "__main__":
    sys.exit(main())
