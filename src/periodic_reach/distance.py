"""
Breadth-first distance fields over a lattice or over its periodic tiling.

The flood fill runs in a Numba kernel over a flat worklist: every window
cell enters the queue at most once, so a query costs O(window area)
regardless of the lattice layout. Toroidal windows map plane coordinates
back onto the lattice with floor-modulo, which lets one finite lattice
stand in for an unbounded tiling.
"""

from __future__ import annotations

import logging
from collections import OrderedDict
from dataclasses import dataclass
from typing import Optional, Tuple

import numpy as np
from numba import njit

from .errors import BlockedSourceError
from .lattice import MOVES, Coord, Lattice, Window

logger = logging.getLogger(__name__)

UNREACHED: int = int(np.iinfo(np.int64).max)  # sentinel, never a real distance


@njit(cache=True)
def _bfs_kernel(
    cells: np.ndarray,
    top: int,
    left: int,
    height: int,
    width: int,
    src_i: int,
    src_j: int,
    toroidal: bool,
) -> np.ndarray:
    """
    Frontier-by-frontier flood fill from window index (src_i, src_j).

    A neighbour is accepted once, when first seen, so distances are final
    as soon as they are written.
    """
    n_rows, n_cols = cells.shape
    dist = np.empty((height, width), dtype=np.int64)
    dist[:, :] = UNREACHED

    queue_i = np.empty(height * width, dtype=np.int64)
    queue_j = np.empty(height * width, dtype=np.int64)
    dist[src_i, src_j] = 0
    queue_i[0] = src_i
    queue_j[0] = src_j
    head = 0
    tail = 1

    while head < tail:
        i = queue_i[head]
        j = queue_j[head]
        head += 1
        d = dist[i, j] + 1
        for k in range(MOVES.shape[0]):
            ni = i + MOVES[k, 0]
            nj = j + MOVES[k, 1]
            if ni < 0 or nj < 0 or ni >= height or nj >= width:
                continue
            if dist[ni, nj] != UNREACHED:
                continue
            if toroidal:
                ci = (ni + top) % n_rows
                cj = (nj + left) % n_cols
            else:
                ci = ni + top
                cj = nj + left
            if not cells[ci, cj]:
                continue
            dist[ni, nj] = d
            queue_i[tail] = ni
            queue_j[tail] = nj
            tail += 1

    return dist


@dataclass
class DistanceField:
    """Shortest open-path distances from ``source`` to every window cell.

    ``distances`` holds UNREACHED for blocked cells and for cells the BFS
    could not reach inside the window.
    """

    distances: np.ndarray
    window: Window
    source: Coord
    toroidal: bool = False

    @property
    def reached(self) -> np.ndarray:
        return self.distances != UNREACHED

    def at(self, coord: Coord) -> Optional[int]:
        """Distance to a plane coordinate, or None if unreached/outside the window."""
        if not self.window.contains(coord):
            return None
        d = int(self.distances[self.window.to_index(coord)])
        return None if d == UNREACHED else d

    def __getitem__(self, coord: Coord) -> int:
        """Distance to a plane coordinate, UNREACHED when it has none."""
        d = self.at(coord)
        return UNREACHED if d is None else d

    def max_distance(self) -> int:
        reached = self.distances[self.reached]
        return int(reached.max()) if reached.size else 0


def bfs(
    lattice: Lattice,
    source: Coord,
    window: Optional[Window] = None,
    toroidal: bool = False,
) -> DistanceField:
    """
    Build the distance field from ``source`` over ``window``.

    Args:
        lattice: Lattice supplying open/blocked states.
        source: Plane coordinate to start from; must lie inside the window.
        window: Region to explore. Defaults to the lattice's own extent.
        toroidal: Address the lattice with floor-modulo, so the window may
            extend past the lattice in any direction.

    Raises:
        BlockedSourceError: if the source is blocked or outside the window.
        ValueError: if a non-toroidal window leaves the lattice.
    """
    window = window or Window.of_lattice(lattice)
    if not toroidal and (
        window.top < 0
        or window.left < 0
        or window.top + window.height > lattice.height
        or window.left + window.width > lattice.width
    ):
        raise ValueError(f"window {window} extends past lattice of shape {lattice.shape}")
    if not window.contains(source):
        raise BlockedSourceError(f"source {source} lies outside window {window}")

    if toroidal:
        cell = (source[0] % lattice.height, source[1] % lattice.width)
    else:
        cell = source
    if not lattice.is_open(cell):
        raise BlockedSourceError(f"source {source} is a blocked cell")

    src_i, src_j = window.to_index(source)
    logger.debug(
        "bfs from %s over %dx%d window (toroidal=%s)",
        source, window.height, window.width, toroidal,
    )
    distances = _bfs_kernel(
        lattice.cells,
        window.top,
        window.left,
        window.height,
        window.width,
        src_i,
        src_j,
        toroidal,
    )
    return DistanceField(distances=distances, window=window, source=tuple(source), toroidal=toroidal)


def windowed_field(lattice: Lattice, radius: int) -> DistanceField:
    """Toroidal field from the start over the square of side ``2 * radius + 1`` around it."""
    window = Window.centered(lattice.start, radius)
    return bfs(lattice, lattice.start, window, toroidal=True)


class DistanceCache:
    """
    Finite-lattice distance fields keyed by lattice content and source.

    Lattices are immutable, so cached fields never need invalidating. At
    most ``maxsize`` fields are kept; the least recently used one is dropped
    first. ``maxsize=None`` keeps everything.
    """

    def __init__(self, maxsize: Optional[int] = 64) -> None:
        if maxsize is not None and maxsize < 1:
            raise ValueError(f"maxsize must be positive or None, got {maxsize}")
        self.maxsize = maxsize
        self._fields: OrderedDict[Tuple[bytes, Coord], DistanceField] = OrderedDict()
        self.hits = 0
        self.misses = 0

    def __len__(self) -> int:
        return len(self._fields)

    def __contains__(self, item) -> bool:
        lattice, source = item
        return (lattice.key, (int(source[0]), int(source[1]))) in self._fields

    def get(self, lattice: Lattice, source: Coord) -> DistanceField:
        key = (lattice.key, (int(source[0]), int(source[1])))
        cached = self._fields.get(key)
        if cached is not None:
            self.hits += 1
            self._fields.move_to_end(key)
            return cached
        self.misses += 1
        field = bfs(lattice, source)
        field.distances.setflags(write=False)
        self._fields[key] = field
        if self.maxsize is not None and len(self._fields) > self.maxsize:
            self._fields.popitem(last=False)
        return field

    def clear(self) -> None:
        self._fields.clear()


def finite_field(
    lattice: Lattice, source: Coord, cache: Optional[DistanceCache] = None
) -> DistanceField:
    """Non-toroidal field over the lattice itself, served from ``cache`` when given."""
    if cache is None:
        return bfs(lattice, source)
    return cache.get(lattice, source)


__all__ = [
    "UNREACHED",
    "DistanceField",
    "DistanceCache",
    "bfs",
    "windowed_field",
    "finite_field",
]
