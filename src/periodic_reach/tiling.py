"""
Closed-form reachable-cell counts for lattices with open lines.

When the lattice border (and possibly the start's row and column) is fully
open, the cheapest way to reach any copy of a cell p in a distant tile is
to leave the start tile through a fixed boundary cell, cross whole tiles at
N steps each, and enter the target tile through the matching boundary cell.
So for each cell p only a handful of entry offsets matter:

    d(start, p in tile k) = offset(p) + (k - 1) * N

The tiles around the start tile split into 4 axis rays and 4 diagonal
quadrants. Along a ray the tiles are a line, in a quadrant the k-th ring
holds k tiles, and with N odd the parity of p flips with every tile step.
Both sums have closed forms, so the cost is a few BFS passes over the
finite lattice however large the budget gets.

Near the start tile a path through the blocked interior of neighbouring
tiles can still undercut these routes. Such a path costs at least N per
tile crossed, the same as the open lines, so once the boundary routes win
on a ring of tiles they win on every ring beyond it. The tiles inside that
ring are counted from an exact toroidal BFS instead, and the closed form
only covers the rest. If no such ring is found within MAX_VERIFY_RADIUS
tiles the count is refused.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, Optional, Tuple

import numpy as np

from .classify import border_applies, cross_applies
from .counting import parity_mask
from .distance import UNREACHED, DistanceCache, DistanceField, bfs, finite_field
from .errors import StrategyAssumptionError
from .lattice import Lattice, Window

logger = logging.getLogger(__name__)

VERIFY_RADIUS = 3
MAX_VERIFY_RADIUS = 32
MAX_WINDOW_CELLS = 25_000_000

Direction = Tuple[int, int]


@dataclass
class TileRoutes:
    """Entry offsets of every reachable cell into the axis and diagonal tiles.

    ``axis[(di, dj)]`` and ``diagonal[(di, dj)]`` are lattice-shaped arrays,
    keyed by the tile step direction, and only meaningful where ``reached``.
    """

    reached: np.ndarray
    axis: Dict[Direction, np.ndarray]
    diagonal: Dict[Direction, np.ndarray]


def ray_copies(budget: int, offset: int, width: int, correct_parity: bool) -> int:
    """
    Matching-parity copies of one cell along an axis ray of tiles.

    Tile k >= 1 on the ray is reached at ``offset + (k - 1) * width``. Odd
    tiles flip the cell's parity, even tiles keep it.
    """
    if budget < offset:
        return 0
    n = 1 + (budget - offset) // width
    result = n // 2
    if n % 2 == 1 and not correct_parity:
        result += 1
    return result


def quadrant_copies(budget: int, offset: int, width: int, correct_parity: bool) -> int:
    """
    Matching-parity copies of one cell in a diagonal quadrant of tiles.

    Ring j >= 0 of the quadrant holds j + 1 tiles at ``offset + j * width``
    and keeps the parity when j is even. Summing the odd ring sizes
    1 + 3 + 5 + ... gives a square, the even sizes 2 + 4 + ... a pronic number.
    """
    if budget < offset:
        return 0
    m = 1 + (budget - offset) // width
    if correct_parity:
        odd = (m + 1) // 2
        return odd * odd
    even = m // 2
    return even * (even + 1)


def _sum_copies(budget, width, offsets: np.ndarray, correct: np.ndarray, copies) -> int:
    # contributions only depend on (offset, parity); group cells by that pair
    pairs = np.stack([offsets, correct.astype(np.int64)], axis=1)
    unique, counts = np.unique(pairs, axis=0, return_counts=True)
    total = 0
    for (offset, parity), k in zip(unique.tolist(), counts.tolist()):
        total += k * copies(budget, int(offset), width, bool(parity))
    return total


def _check_common(lattice: Lattice, budget: int) -> None:
    if not lattice.is_square:
        raise StrategyAssumptionError(
            f"tile decomposition needs a square lattice, got {lattice.shape}"
        )
    if lattice.width % 2 == 0:
        raise StrategyAssumptionError(
            f"tile decomposition needs an odd side, got {lattice.width}"
        )
    if budget <= 2 * lattice.width:
        raise StrategyAssumptionError(
            f"budget {budget} must exceed two tile-widths ({2 * lattice.width})"
        )


def _start_distance(field: DistanceField, lattice: Lattice) -> int:
    d = field[lattice.start]
    if d == UNREACHED:
        raise StrategyAssumptionError(
            f"start {lattice.start} is not connected to boundary cell {field.source}"
        )
    return d


def _closed_form(lattice: Lattice, budget: int, routes: TileRoutes) -> int:
    """Sum of copies over every tile, taking the boundary routes as exact."""
    n = lattice.width
    reached = routes.reached
    rows, cols = np.nonzero(reached)
    si, sj = lattice.start
    correct = ((np.abs(rows - si) + np.abs(cols - sj)) % 2) == (budget % 2)

    direct = int(np.count_nonzero(correct))
    axis = sum(
        _sum_copies(budget, n, offsets[reached], correct, ray_copies)
        for offsets in routes.axis.values()
    )
    diagonal = sum(
        _sum_copies(budget, n, offsets[reached], correct, quadrant_copies)
        for offsets in routes.diagonal.values()
    )
    logger.debug("tile copies: direct=%d axis=%d diagonal=%d", direct, axis, diagonal)
    return direct + axis + diagonal


def _route_field(routes: TileRoutes, n: int, radius: int) -> np.ndarray:
    """
    Boundary-route distances over the tiles within ``radius`` of the start tile.

    The start tile holds 0 for every reached cell, matching the closed form,
    which counts it without a distance check.
    """
    tiles = 2 * radius + 1
    field = np.full((tiles, n, tiles, n), UNREACHED, dtype=np.int64)
    for a in range(tiles):
        ti = a - radius
        for b in range(tiles):
            tj = b - radius
            key = (int(np.sign(ti)), int(np.sign(tj)))
            steps = abs(ti) + abs(tj)
            if key == (0, 0):
                values = 0
            elif 0 in key:
                values = routes.axis[key] + (steps - 1) * n
            else:
                values = routes.diagonal[key] + (steps - 2) * n
            field[a, :, b, :] = np.where(routes.reached, values, UNREACHED)
    return field.reshape(tiles * n, tiles * n)


def _worst_ring(exact: np.ndarray, routed: np.ndarray, n: int, radius: int) -> int:
    """Outermost ring of tiles (Chebyshev, start tile excluded) where the routes are off."""
    tiles = 2 * radius + 1
    wrong = (exact != routed).reshape(tiles, n, tiles, n).any(axis=(1, 3))
    offsets = np.abs(np.arange(tiles) - radius)
    rings = np.maximum(offsets[:, None], offsets[None, :])
    wrong &= rings > 0
    return int(rings[wrong].max()) if wrong.any() else 0


def _count_tiles(
    lattice: Lattice, budget: int, routes: TileRoutes, max_radius: int = MAX_VERIFY_RADIUS
) -> int:
    """
    Closed-form total, corrected on the tiles where the routes are not yet exact.

    The exact BFS covers ``radius`` rings of tiles; its outermost ring only
    pads the window, so rings up to ``radius - 1`` are compared. The routes
    must agree with it on the last two of those for the rest to be trusted.
    """
    n = lattice.width
    limit = min(budget, UNREACHED - 1)
    total = _closed_form(lattice, budget, routes)
    radius = VERIFY_RADIUS
    while True:
        tiles = 2 * radius + 1
        window = Window(-radius * n, -radius * n, tiles * n, tiles * n)
        exact = bfs(lattice, lattice.start, window, toroidal=True).distances
        inner = slice(n, (tiles - 1) * n)
        exact = exact[inner, inner]
        matching = parity_mask(window, lattice.start, budget % 2)[inner, inner]
        exact_count = int(np.count_nonzero((exact <= limit) & matching))
        # nothing outside ring radius - 1 lies within (radius - 1) * n steps
        if budget <= (radius - 1) * n:
            logger.debug("budget %d within %d exact rings", budget, radius - 1)
            return exact_count

        routed = _route_field(routes, n, radius - 1)
        worst = _worst_ring(exact, routed, n, radius - 1)
        if worst <= radius - 3:
            routed_count = int(np.count_nonzero((routed <= limit) & matching))
            logger.debug(
                "routes exact beyond ring %d; correcting %d -> %d inside ring %d",
                worst, routed_count, exact_count, radius - 1,
            )
            return total - routed_count + exact_count

        grown = min(2 * radius, max_radius)
        if grown == radius or ((2 * grown + 1) * n) ** 2 > MAX_WINDOW_CELLS:
            raise StrategyAssumptionError(
                f"boundary routes still undercut at tile ring {worst} of {radius - 1}; "
                "interior paths compete too far out for the tile decomposition"
            )
        logger.debug("routes undercut at ring %d, widening to %d rings", worst, grown)
        radius = grown


def _corner_fields(lattice: Lattice, cache: Optional[DistanceCache]):
    last = lattice.width - 1
    return (
        finite_field(lattice, (0, 0), cache),
        finite_field(lattice, (0, last), cache),
        finite_field(lattice, (last, 0), cache),
        finite_field(lattice, (last, last), cache),
    )


def _diagonal_routes(corners, starts) -> Dict[Direction, np.ndarray]:
    # leave through one corner, enter the diagonal tile through the opposite one
    ul, ur, bl, br = corners
    ul_s, ur_s, bl_s, br_s = starts
    return {
        (1, 1): br_s + ul + 2,
        (-1, 1): ur_s + bl + 2,
        (1, -1): bl_s + ur + 2,
        (-1, -1): ul_s + br + 2,
    }


def _prepare(lattice: Lattice, fields):
    # zero out unreached cells so the offset sums cannot overflow
    reached = np.logical_and.reduce([f.reached for f in fields])
    distances = [np.where(reached, f.distances, 0) for f in fields]
    starts = [_start_distance(f, lattice) for f in fields]
    return reached, distances, starts


def border_routes(lattice: Lattice, cache: Optional[DistanceCache] = None) -> TileRoutes:
    """Entry offsets when tiles are only crossed along the border lines."""
    fields = _corner_fields(lattice, cache)
    reached, corners, starts = _prepare(lattice, fields)
    ul, ur, bl, br = corners
    ul_s, ur_s, bl_s, br_s = starts
    axis = {
        (1, 0): np.minimum(bl_s + ul, br_s + ur) + 1,
        (-1, 0): np.minimum(ul_s + bl, ur_s + br) + 1,
        (0, 1): np.minimum(ur_s + ul, br_s + bl) + 1,
        (0, -1): np.minimum(ul_s + ur, bl_s + br) + 1,
    }
    return TileRoutes(reached, axis, _diagonal_routes(corners, starts))


def cross_routes(lattice: Lattice, cache: Optional[DistanceCache] = None) -> TileRoutes:
    """Entry offsets when straight crossings run along the start's row and column."""
    si, sj = lattice.start
    last = lattice.width - 1
    fields = _corner_fields(lattice, cache) + (
        finite_field(lattice, (0, sj), cache),
        finite_field(lattice, (last, sj), cache),
        finite_field(lattice, (si, 0), cache),
        finite_field(lattice, (si, last), cache),
    )
    reached, distances, starts = _prepare(lattice, fields)
    top, bottom, west, east = distances[4:]
    top_s, bottom_s, west_s, east_s = starts[4:]
    axis = {
        (1, 0): bottom_s + top + 1,
        (-1, 0): top_s + bottom + 1,
        (0, 1): east_s + west + 1,
        (0, -1): west_s + east + 1,
    }
    return TileRoutes(reached, axis, _diagonal_routes(distances[:4], starts[:4]))


def count_border(
    lattice: Lattice,
    budget: int,
    cache: Optional[DistanceCache] = None,
    max_radius: int = MAX_VERIFY_RADIUS,
) -> int:
    """
    Count for a lattice whose only fully open rows and columns are its border.

    Crossing between tiles happens along the border lines, so every route
    leaves and enters tiles through a corner.
    """
    _check_common(lattice, budget)
    if not border_applies(lattice):
        raise StrategyAssumptionError(
            "border decomposition needs exactly the border rows/columns open, got "
            f"rows {lattice.open_rows()} and columns {lattice.open_cols()}"
        )
    return _count_tiles(lattice, budget, border_routes(lattice, cache), max_radius)


def count_cross(
    lattice: Lattice,
    budget: int,
    cache: Optional[DistanceCache] = None,
    max_radius: int = MAX_VERIFY_RADIUS,
) -> int:
    """
    Count for a lattice whose border and start row/column are fully open.

    Straight crossings go through the edge midpoints on the start's row
    and column, diagonal ones through the corners.
    """
    _check_common(lattice, budget)
    if not cross_applies(lattice):
        raise StrategyAssumptionError(
            "cross decomposition needs the start row, start column and border open"
        )
    return _count_tiles(lattice, budget, cross_routes(lattice, cache), max_radius)


__all__ = [
    "TileRoutes",
    "ray_copies",
    "quadrant_copies",
    "border_routes",
    "cross_routes",
    "count_border",
    "count_cross",
]
