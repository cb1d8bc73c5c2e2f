import numpy as np
import pytest

from periodic_reach import (
    UNREACHED,
    BlockedSourceError,
    DistanceCache,
    Window,
    bfs,
    parse_grid,
)
from periodic_reach import solver
from periodic_reach.distance import finite_field, windowed_field

SMALL = """\
S.#
.##
...
"""


def test_finite_bfs_distances():
    lattice = parse_grid(SMALL)
    field = bfs(lattice, lattice.start)
    expected = np.array(
        [
            [0, 1, UNREACHED],
            [1, UNREACHED, UNREACHED],
            [2, 3, 4],
        ]
    )
    np.testing.assert_array_equal(field.distances, expected)
    assert field.at((2, 2)) == 4
    assert field.at((0, 2)) is None
    assert field[(0, 2)] == UNREACHED
    assert field.max_distance() == 4


def test_toroidal_window_wraps_negative_offsets():
    lattice = parse_grid(SMALL)
    field = bfs(lattice, (0, 0), Window.centered((0, 0), 1), toroidal=True)
    assert field.at((0, 0)) == 0
    assert field.at((-1, 0)) == 1
    assert field.at((0, 1)) == 1
    assert field.at((1, 0)) == 1
    assert field.at((-1, -1)) == 2
    assert field.at((-1, 1)) == 2
    # plane (0, -1) is lattice (0, 2), plane (1, 1) is lattice (1, 1)
    assert field.at((0, -1)) is None
    assert field.at((1, 1)) is None
    assert field.at((5, 5)) is None


def test_bfs_layering_invariant(example):
    field = windowed_field(example, 30)
    d = field.distances
    reached = field.reached
    moves = [(-1, 0), (1, 0), (0, -1), (0, 1)]
    src = field.window.to_index(field.source)
    for i, j in zip(*np.nonzero(reached)):
        if (i, j) == src:
            assert d[i, j] == 0
            continue
        best = min(
            d[i + di, j + dj]
            for di, dj in moves
            if 0 <= i + di < d.shape[0] and 0 <= j + dj < d.shape[1]
        )
        assert d[i, j] == best + 1


def test_open_lattice_distance_is_manhattan(open5):
    field = windowed_field(open5, 12)
    rows, cols = np.indices(field.distances.shape)
    manhattan = np.abs(rows - 12) + np.abs(cols - 12)
    np.testing.assert_array_equal(field.distances, manhattan)


def test_blocked_source_rejected():
    lattice = parse_grid(SMALL)
    with pytest.raises(BlockedSourceError):
        bfs(lattice, (1, 1))
    with pytest.raises(BlockedSourceError):
        bfs(lattice, (3, 2), Window.centered((0, 0), 4), toroidal=True)


def test_source_outside_window_rejected():
    lattice = parse_grid(SMALL)
    with pytest.raises(BlockedSourceError, match="outside"):
        bfs(lattice, (5, 5), Window.centered((0, 0), 1), toroidal=True)


def test_non_toroidal_window_must_fit_lattice():
    lattice = parse_grid(SMALL)
    with pytest.raises(ValueError, match="extends past"):
        bfs(lattice, (0, 0), Window.centered((0, 0), 1))


def test_cache_reuses_fields(example):
    cache = DistanceCache()
    first = finite_field(example, (0, 0), cache)
    second = finite_field(example, (0, 0), cache)
    assert first is second
    assert (cache.hits, cache.misses) == (1, 1)
    assert len(cache) == 1
    with pytest.raises(ValueError):
        first.distances[0, 0] = 7
    cache.clear()
    assert len(cache) == 0


def test_cache_keys_on_content(example_text):
    cache = DistanceCache()
    finite_field(parse_grid(example_text), (0, 0), cache)
    finite_field(parse_grid(example_text), (0, 0), cache)
    assert cache.hits == 1


def test_cache_evicts_least_recently_used(example):
    cache = DistanceCache(maxsize=2)
    finite_field(example, (0, 0), cache)
    finite_field(example, (0, 10), cache)
    # touching (0, 0) leaves (0, 10) as the oldest entry
    finite_field(example, (0, 0), cache)
    finite_field(example, (10, 0), cache)
    assert len(cache) == 2
    assert (example, (0, 0)) in cache
    assert (example, (10, 0)) in cache
    assert (example, (0, 10)) not in cache
    finite_field(example, (0, 10), cache)
    assert cache.misses == 4


def test_cache_size_must_be_positive():
    with pytest.raises(ValueError, match="maxsize"):
        DistanceCache(maxsize=0)
    assert DistanceCache(maxsize=None).maxsize is None


def test_solver_cache_is_bounded(make_open):
    solver.clear_cache()
    for size in (5, 7, 9, 11, 13, 15, 17, 19, 21):
        lattice = parse_grid(make_open(size))
        solver.solve(lattice, 10 * size + 1, solver.ReachConfig(strategy="cross"))
    assert len(solver._FIELD_CACHE) == solver.FIELD_CACHE_SIZE
    solver.clear_cache()
