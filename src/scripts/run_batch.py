#!/usr/bin/env python3
"""
Batch Reachability Runner

Solves one grid for many step budgets in parallel and writes a JSON summary.
"""

import argparse
import json
import sys
import time
from concurrent.futures import ProcessPoolExecutor, as_completed
from pathlib import Path
from typing import Any, Dict

# Add src/ to path
SRC = Path(__file__).resolve().parents[1]
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from periodic_reach import ReachConfig, StrategyAssumptionError, solve_detailed, utils


def run_single_query(grid_path: str, steps: int, strategy: str) -> Dict[str, Any]:
    """
    Solve one budget.

    Must live at module level so ProcessPoolExecutor can pickle it.
    """
    lattice = utils.read_grid(grid_path)
    start = time.time()
    try:
        result = solve_detailed(lattice, steps, ReachConfig(strategy=strategy))
    except StrategyAssumptionError as exc:
        return {"steps": steps, "error": str(exc), "elapsed": time.time() - start}
    return {
        "steps": steps,
        "count": result.count,
        "strategy": result.strategy.value,
        "elapsed": time.time() - start,
    }


def main():
    parser = argparse.ArgumentParser(description="Solve a grid for many step budgets")
    parser.add_argument("grid", type=str, help="Grid file")
    parser.add_argument(
        "--steps",
        type=int,
        nargs="+",
        required=True,
        help="Step budgets to evaluate",
    )
    parser.add_argument(
        "--strategy",
        choices=["auto", "exact", "quadratic", "border", "cross"],
        default="auto",
        help="Strategy for every budget (default: auto)",
    )
    parser.add_argument("--workers", type=int, default=4, help="Parallel worker processes")
    parser.add_argument(
        "--out",
        type=str,
        default=None,
        help="Summary JSON path (auto-generated if not provided)",
    )
    args = parser.parse_args()

    # Parse once up front so a bad grid fails before workers start
    utils.read_grid(args.grid)

    if args.out is None:
        output_dir = Path("results")
        output_dir.mkdir(exist_ok=True)
        args.out = str(output_dir / f"batch_{Path(args.grid).stem}_{utils.now_str()}.json")

    print(f"Solving {args.grid} for {len(args.steps)} budgets with {args.workers} workers")
    start_time = time.time()

    results = []
    with ProcessPoolExecutor(max_workers=args.workers) as executor:
        futures = {
            executor.submit(run_single_query, args.grid, steps, args.strategy): steps
            for steps in args.steps
        }
        for future in as_completed(futures):
            outcome = future.result()
            results.append(outcome)
            if "error" in outcome:
                print(f"  steps={outcome['steps']}: FAILED ({outcome['error']})")
            else:
                print(
                    f"  steps={outcome['steps']}: {outcome['count']} "
                    f"[{outcome['strategy']}, {outcome['elapsed']:.3f}s]"
                )

    results.sort(key=lambda r: r["steps"])
    summary = {
        "grid": args.grid,
        "strategy": args.strategy,
        "elapsed": time.time() - start_time,
        "results": results,
    }
    Path(args.out).parent.mkdir(parents=True, exist_ok=True)
    with open(args.out, "w") as fh:
        json.dump(summary, fh, indent=2)

    failed = sum(1 for r in results if "error" in r)
    print(f"\nDone in {summary['elapsed']:.2f}s, {failed} failed")
    print(f"Summary saved to: {args.out}")
    return 1 if failed else 0


if __name__ == "__main__":
    sys.exit(main())
