"""
Growth Analysis for Tiled Lattices.

Two checks on how the reachable-cell count grows with the step budget:
1. Power law - log-log fit of count against budget (slope ~2 for 2D spread)
2. Per-tile differences - second differences of samples one tile-width
   apart, which must settle to a constant for quadratic extrapolation
"""
from __future__ import annotations

import argparse
import sys
from pathlib import Path

import numpy as np
from matplotlib import pyplot as plt
from scipy.stats import linregress

SRC = Path(__file__).resolve().parents[1]
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from periodic_reach import utils  # type: ignore[import]
from periodic_reach.counting import count_windowed


def growth_exponent(budgets: np.ndarray, counts: np.ndarray) -> tuple[float, float, float]:
    """
    Fit count ~ budget^k on log-log axes.

    Returns:
        Tuple of (exponent, r_squared, intercept)
    """
    mask = (budgets > 0) & (counts > 0)
    if mask.sum() < 3:
        raise ValueError("Too few positive samples for a power-law fit.")
    slope, intercept, r_value, p_value, std_err = linregress(
        np.log(budgets[mask]), np.log(counts[mask])
    )
    return slope, r_value**2, intercept


def tile_differences(lattice, remainder: int, n_tiles: int) -> tuple[np.ndarray, np.ndarray]:
    """
    Exact counts at remainder + k*N for k = 0..n_tiles-1 and their second differences.
    """
    n = lattice.width
    samples = np.array(
        [count_windowed(lattice, remainder + k * n) for k in range(n_tiles)],
        dtype=np.int64,
    )
    return samples, np.diff(samples, n=2)


def main():
    parser = argparse.ArgumentParser(description="Reachable-count growth analysis")
    parser.add_argument("grid", help="Grid file")
    parser.add_argument("--max-steps", type=int, default=200, help="Largest budget sampled")
    parser.add_argument("--stride", type=int, default=1, help="Budget spacing for the power-law fit")
    parser.add_argument("--remainder", type=int, default=None,
                        help="Remainder r for the per-tile samples (default: max-steps mod N)")
    parser.add_argument("--tiles", type=int, default=6, help="Number of per-tile samples")
    parser.add_argument("--plot", default=None, help="Save a log-log plot to this path")
    args = parser.parse_args()

    lattice = utils.read_grid(args.grid)
    if not lattice.is_square:
        raise ValueError(f"Per-tile analysis needs a square grid, got {lattice.shape}")
    n = lattice.width

    budgets = np.arange(args.stride, args.max_steps + 1, args.stride, dtype=np.int64)
    counts = np.array([count_windowed(lattice, int(b)) for b in budgets], dtype=np.int64)
    exponent, r_squared, intercept = growth_exponent(budgets, counts)
    print(f"Power law: count ~ budget^{exponent:.4f} (R^2 = {r_squared:.5f})")

    remainder = args.max_steps % n if args.remainder is None else args.remainder
    samples, second = tile_differences(lattice, remainder, args.tiles)
    print(f"\nSamples at {remainder} + k*{n}:")
    for k, v in enumerate(samples):
        print(f"  k={k}: {v}")
    print(f"Second differences: {second.tolist()}")
    settled = second.size >= 2 and np.all(second[1:] == second[-1])
    print(f"Quadratic growth {'settled' if settled else 'NOT settled'} over these samples")

    if args.plot:
        fig, ax = plt.subplots(figsize=(6, 5))
        ax.loglog(budgets, counts, ".", markersize=3, label="exact")
        ax.loglog(budgets, np.exp(intercept) * budgets**exponent, "-", label=f"slope {exponent:.3f}")
        ax.set_xlabel("step budget")
        ax.set_ylabel("reachable cells")
        ax.legend()
        plt.savefig(args.plot, dpi=200, bbox_inches="tight")
        plt.close(fig)
        print(f"Plot saved to {args.plot}")


if __name__ == "__main__":
    main()
