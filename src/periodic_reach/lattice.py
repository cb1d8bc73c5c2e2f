from __future__ import annotations

from dataclasses import dataclass, field
from typing import Tuple

import numpy as np

from .errors import AmbiguousStartError, MalformedGridError, MissingStartError

# row, col
Coord = Tuple[int, int]

OPEN = "."
BLOCKED = "#"
START = "S"

# 4-neighbour moves (up, down, left, right)
MOVES = np.array(
    [
        [-1, 0],
        [1, 0],
        [0, -1],
        [0, 1],
    ],
    dtype=np.int64,
)


@dataclass(frozen=True, eq=False)
class Lattice:
    """Finite grid of open/blocked cells plus the start coordinate.

    ``cells[row, col]`` is True for an open cell. The array is made
    read-only on construction so a lattice can be shared between queries
    and used as a cache key.
    """

    cells: np.ndarray
    start: Coord
    key: bytes = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        cells = np.array(self.cells, dtype=bool)
        if cells.ndim != 2 or cells.size == 0:
            raise MalformedGridError(f"expected a non-empty 2D grid, got shape {cells.shape}")
        row, col = self.start
        if not (0 <= row < cells.shape[0] and 0 <= col < cells.shape[1]):
            raise MalformedGridError(f"start {self.start} lies outside the grid {cells.shape}")
        cells[row, col] = True
        cells.setflags(write=False)
        object.__setattr__(self, "cells", cells)
        object.__setattr__(self, "start", (int(row), int(col)))
        header = np.array([*cells.shape, row, col], dtype=np.int64).tobytes()
        object.__setattr__(self, "key", header + np.packbits(cells).tobytes())

    def __hash__(self) -> int:
        return hash(self.key)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Lattice):
            return NotImplemented
        return self.key == other.key

    @property
    def height(self) -> int:
        return self.cells.shape[0]

    @property
    def width(self) -> int:
        return self.cells.shape[1]

    @property
    def shape(self) -> Tuple[int, int]:
        return self.cells.shape

    @property
    def is_square(self) -> bool:
        return self.height == self.width

    def is_open(self, coord: Coord) -> bool:
        return bool(self.cells[coord])

    def open_rows(self) -> list[int]:
        """Indices of rows with no blocked cell."""
        return [int(i) for i in np.flatnonzero(self.cells.all(axis=1))]

    def open_cols(self) -> list[int]:
        """Indices of columns with no blocked cell."""
        return [int(j) for j in np.flatnonzero(self.cells.all(axis=0))]

    def has_open_border(self) -> bool:
        rows = set(self.open_rows())
        cols = set(self.open_cols())
        return {0, self.height - 1} <= rows and {0, self.width - 1} <= cols

    def has_open_cross(self) -> bool:
        row, col = self.start
        return bool(self.cells[row, :].all() and self.cells[:, col].all())

    def to_text(self) -> str:
        rows = []
        for i in range(self.height):
            chars = [OPEN if c else BLOCKED for c in self.cells[i]]
            if i == self.start[0]:
                chars[self.start[1]] = START
            rows.append("".join(chars))
        return "\n".join(rows)


def parse_grid(text: str) -> Lattice:
    """Build a Lattice from text using ``.`` open, ``#`` blocked, ``S`` start."""
    lines = [line.rstrip("\r") for line in text.splitlines()]
    while lines and not lines[-1].strip():
        lines.pop()
    while lines and not lines[0].strip():
        lines.pop(0)
    if not lines:
        raise MalformedGridError("grid is empty")

    width = len(lines[0])
    cells = np.zeros((len(lines), width), dtype=bool)
    starts: list[Coord] = []
    for i, line in enumerate(lines):
        if len(line) != width:
            raise MalformedGridError(
                f"row {i} has width {len(line)}, expected {width}"
            )
        for j, ch in enumerate(line):
            if ch == OPEN:
                cells[i, j] = True
            elif ch == START:
                cells[i, j] = True
                starts.append((i, j))
            elif ch != BLOCKED:
                raise MalformedGridError(f"unexpected character {ch!r} at row {i}, col {j}")

    if not starts:
        raise MissingStartError("grid has no start marker 'S'")
    if len(starts) > 1:
        raise AmbiguousStartError(starts)
    return Lattice(cells=cells, start=starts[0])


@dataclass(frozen=True)
class Window:
    """Rectangular region of the unbounded plane explored by a BFS.

    Plane coordinate ``(top + i, left + j)`` is stored at index ``(i, j)``
    of the distance array. Plane coordinates coincide with lattice indices
    inside the lattice's own extent.
    """

    top: int
    left: int
    height: int
    width: int

    @classmethod
    def of_lattice(cls, lattice: Lattice) -> "Window":
        return cls(0, 0, lattice.height, lattice.width)

    @classmethod
    def centered(cls, center: Coord, radius: int) -> "Window":
        """Odd-sided square of side ``2 * radius + 1`` around ``center``."""
        if radius < 0:
            raise ValueError(f"radius must be non-negative, got {radius}")
        side = 2 * radius + 1
        return cls(center[0] - radius, center[1] - radius, side, side)

    @property
    def shape(self) -> Tuple[int, int]:
        return self.height, self.width

    def contains(self, coord: Coord) -> bool:
        i, j = coord[0] - self.top, coord[1] - self.left
        return 0 <= i < self.height and 0 <= j < self.width

    def to_index(self, coord: Coord) -> Coord:
        return coord[0] - self.top, coord[1] - self.left

    def to_plane(self, index: Coord) -> Coord:
        return index[0] + self.top, index[1] + self.left


__all__ = [
    "Coord",
    "Lattice",
    "Window",
    "MOVES",
    "parse_grid",
]
