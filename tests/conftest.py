import numpy as np
import pytest

from periodic_reach import parse_grid

EXAMPLE = """\
...........
.....###.#.
.###.##..#.
..#.#...#..
....#.#....
.##..S####.
.##..#...#.
.......##..
.##.#.####.
.##..##.##.
...........
"""


def open_grid(size: int) -> str:
    """Square grid with no blocked cells and the start in the middle."""
    rows = ["." * size for _ in range(size)]
    mid = size // 2
    rows[mid] = "." * mid + "S" + "." * (size - mid - 1)
    return "\n".join(rows)


@pytest.fixture
def example_text():
    return EXAMPLE


@pytest.fixture
def example():
    return parse_grid(EXAMPLE)


@pytest.fixture
def open5():
    return parse_grid(open_grid(5))


@pytest.fixture
def open11():
    return parse_grid(open_grid(11))


@pytest.fixture
def make_open():
    return open_grid


def bordered_grid(seed: int, size: int = 21, density: float = 0.25) -> str:
    """
    Random grid whose only fully open lines are its border.

    A corridor along the start row joins the start to the left border, and
    interior lines that come out fully open get one blocked cell.
    """
    rng = np.random.default_rng(seed)
    cells = rng.random((size, size)) >= density
    cells[0, :] = cells[-1, :] = True
    cells[:, 0] = cells[:, -1] = True
    mid = size // 2
    cells[mid, : mid + 1] = True
    cells[mid, mid + 2] = False
    for i in range(1, size - 1):
        if cells[i, 1:-1].all():
            cells[i, 1 + (7 * i) % (size - 2)] = False
    for j in range(1, size - 1):
        if cells[1:-1, j].all():
            row = 1 + (5 * j) % (size - 2)
            cells[mid + 1 if row == mid else row, j] = False
    rows = ["".join("." if c else "#" for c in line) for line in cells]
    rows[mid] = rows[mid][:mid] + "S" + rows[mid][mid + 1:]
    return "\n".join(rows)


@pytest.fixture
def make_bordered():
    return bordered_grid
