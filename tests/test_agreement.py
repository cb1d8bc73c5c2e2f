"""Independent strategies must produce the same counts where both apply."""

import pytest

from periodic_reach import (
    ReachConfig,
    Strategy,
    count_border,
    count_cross,
    extrapolate,
    parse_grid,
    solve,
    solve_detailed,
)
from periodic_reach.classify import border_applies
from periodic_reach.counting import count_windowed

GENERATED_SEEDS = [0, 1, 2, 3]


@pytest.mark.parametrize("budget", [16, 17, 101, 1234, 26501365])
def test_cross_and_quadratic_agree(open5, budget):
    assert count_cross(open5, budget) == extrapolate(open5, budget)


@pytest.mark.parametrize("budget", [29, 57, 131])
def test_cross_agrees_with_brute_force(make_open, budget):
    lattice = parse_grid(make_open(9))
    assert count_cross(lattice, budget) == count_windowed(lattice, budget)


@pytest.mark.parametrize("budget", [100, 150, 500])
def test_border_agrees_with_brute_force(example, budget):
    assert count_border(example, budget) == count_windowed(example, budget)


@pytest.mark.parametrize("seed", GENERATED_SEEDS)
def test_generated_lattices_have_open_border_only(make_bordered, seed):
    lattice = parse_grid(make_bordered(seed))
    assert border_applies(lattice)
    assert lattice.is_open(lattice.start)


# 21 x 21 lattices, budgets from just past 2N to 12N
@pytest.mark.parametrize("budget", [43, 64, 100, 150, 219, 252])
@pytest.mark.parametrize("seed", GENERATED_SEEDS)
def test_border_agrees_with_brute_force_on_generated(make_bordered, seed, budget):
    lattice = parse_grid(make_bordered(seed))
    assert count_border(lattice, budget) == count_windowed(lattice, budget)


@pytest.mark.parametrize("budget", [100, 150, 219])
@pytest.mark.parametrize("seed", GENERATED_SEEDS)
def test_solve_on_generated_border_lattice(make_bordered, seed, budget):
    grid = make_bordered(seed)
    result = solve_detailed(grid, budget)
    assert result.strategy is Strategy.BORDER
    assert result.count == count_windowed(parse_grid(grid), budget)


def test_every_strategy_agrees_on_open_lattice(make_open):
    grid = make_open(7)
    budget = 121
    counts = {
        name: solve(grid, budget, ReachConfig(strategy=name))
        for name in ("exact", "quadratic", "cross")
    }
    assert set(counts.values()) == {(budget + 1) ** 2}
