from __future__ import annotations

import numpy as np

from .distance import UNREACHED, DistanceField, bfs, windowed_field
from .lattice import Coord, Lattice, Window


def parity_mask(window: Window, start_coord: Coord, parity: int) -> np.ndarray:
    """Window cells whose Manhattan offset from ``start_coord`` has the given parity."""
    rows = np.arange(window.height, dtype=np.int64) + (window.top - start_coord[0])
    cols = np.arange(window.width, dtype=np.int64) + (window.left - start_coord[1])
    manhattan = np.abs(rows)[:, None] + np.abs(cols)[None, :]
    return (manhattan % 2) == parity


def count_within(field: DistanceField, start_coord: Coord, budget: int) -> int:
    """
    Count cells reachable in exactly ``budget`` steps.

    A cell at distance d <= budget qualifies when d has the parity of the
    budget: the walk can burn the spare steps by stepping back and forth.
    Since every move flips the Manhattan parity, the parity test is done on
    the cell's offset from ``start_coord`` rather than on d itself.
    """
    if budget < 0:
        raise ValueError(f"budget must be non-negative, got {budget}")
    limit = min(budget, UNREACHED - 1)
    within = field.distances <= limit
    matching = parity_mask(field.window, start_coord, budget % 2)
    return int(np.count_nonzero(within & matching))


def count_bounded(lattice: Lattice, budget: int) -> int:
    """Exact count on the finite lattice, no tiling."""
    field = bfs(lattice, lattice.start)
    return count_within(field, lattice.start, budget)


def count_windowed(lattice: Lattice, budget: int) -> int:
    """
    Exact count on the infinite tiling by brute force.

    Nothing further than ``budget`` steps can be reached, so a toroidal
    window of side ``2 * budget + 1`` around the start is sufficient.
    """
    if budget < 0:
        raise ValueError(f"budget must be non-negative, got {budget}")
    field = windowed_field(lattice, budget)
    return count_within(field, lattice.start, budget)


__all__ = ["parity_mask", "count_within", "count_bounded", "count_windowed"]
