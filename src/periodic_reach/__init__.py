"""
Periodic Reach - step-bounded reachability on infinitely tiled lattices

This package counts the cells reachable in exactly S four-directional steps
when a finite grid is repeated without bound. Three strategies:
- Exact windowed BFS for small budgets
- Quadratic extrapolation from per-tile samples
- Closed-form tile decomposition for lattices with open borders/crosses
"""

from .errors import (
    AmbiguousStartError,
    BlockedSourceError,
    GridError,
    MalformedGridError,
    MissingStartError,
    ReachError,
    StrategyAssumptionError,
)
from .lattice import Lattice, Window, parse_grid
from .distance import UNREACHED, DistanceCache, DistanceField, bfs
from .counting import count_within
from .classify import Strategy, classify
from .quadratic import extrapolate
from .tiling import count_border, count_cross
from .solver import (
    ReachConfig,
    ReachResult,
    load_config,
    solve,
    solve_bounded,
    solve_detailed,
)
from . import utils

__all__ = [
    # Entry points
    "solve",
    "solve_bounded",
    "solve_detailed",
    # Configuration and results
    "ReachConfig",
    "ReachResult",
    "load_config",
    # Building blocks
    "Lattice",
    "Window",
    "parse_grid",
    "DistanceField",
    "DistanceCache",
    "UNREACHED",
    "bfs",
    "count_within",
    "Strategy",
    "classify",
    "extrapolate",
    "count_border",
    "count_cross",
    # Errors
    "ReachError",
    "GridError",
    "MalformedGridError",
    "MissingStartError",
    "AmbiguousStartError",
    "BlockedSourceError",
    "StrategyAssumptionError",
    # Utilities
    "utils",
]
