from __future__ import annotations

import logging
import os
from dataclasses import dataclass, fields
from typing import Any, Dict, Mapping, Optional

from . import utils
from .classify import EXACT_THRESHOLD, Strategy, classify
from .counting import count_bounded, count_windowed
from .distance import DistanceCache
from .lattice import Lattice, parse_grid
from .quadratic import extrapolate_detailed
from .tiling import count_border, count_cross

logger = logging.getLogger(__name__)

FINITE_BUDGET = 64
PERIODIC_BUDGET = 26_501_365

FIELD_CACHE_SIZE = 64  # eight fields per lattice for the cross decomposition

_FIELD_CACHE = DistanceCache(maxsize=FIELD_CACHE_SIZE)


@dataclass
class ReachConfig:
    """Knobs for strategy selection."""

    exact_threshold: int = EXACT_THRESHOLD
    strategy: str = "auto"
    verify_quadratic: bool = True
    cache_fields: bool = True

    def __post_init__(self) -> None:
        if self.strategy != "auto":
            self.strategy = Strategy.parse(self.strategy).value
        if self.exact_threshold < 0:
            raise ValueError(f"exact_threshold must be non-negative, got {self.exact_threshold}")

    @classmethod
    def from_dict(cls, params: Mapping[str, Any]) -> "ReachConfig":
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(params) - known)
        if unknown:
            raise ValueError(f"Unknown config keys: {', '.join(unknown)}")
        return cls(**dict(params))


def load_config(path: str | os.PathLike[str]) -> ReachConfig:
    """Read a ReachConfig from a JSON or TOML file."""
    return ReachConfig.from_dict(utils.load_params(path))


@dataclass
class ReachResult:
    """Count plus how it was obtained."""

    count: int
    budget: int
    strategy: Strategy
    meta: Optional[Dict[str, Any]] = None

    def ensure_meta(self) -> Dict[str, Any]:
        if self.meta is None:
            self.meta = {}
        return self.meta


def _as_lattice(grid: str | Lattice) -> Lattice:
    return grid if isinstance(grid, Lattice) else parse_grid(grid)


def solve_lattice(lattice: Lattice, budget: int, config: ReachConfig | None = None) -> ReachResult:
    """Count cells reachable in exactly ``budget`` steps on the tiled lattice."""
    config = config or ReachConfig()
    if budget < 0:
        raise ValueError(f"budget must be non-negative, got {budget}")

    if config.strategy == "auto":
        strategy = classify(lattice, budget, config.exact_threshold)
    else:
        strategy = Strategy(config.strategy)
        logger.info("strategy %s forced for budget %d", strategy.value, budget)

    cache = _FIELD_CACHE if config.cache_fields else None
    result = ReachResult(count=0, budget=budget, strategy=strategy)
    meta = result.ensure_meta()
    meta["shape"] = list(lattice.shape)
    if lattice.is_square:
        meta["tiles"], meta["remainder"] = divmod(budget, lattice.width)

    if strategy is Strategy.EXACT:
        result.count = count_windowed(lattice, budget)
    elif strategy is Strategy.QUADRATIC:
        extrapolation = extrapolate_detailed(lattice, budget, verify=config.verify_quadratic)
        if extrapolation.fit is not None:
            meta["samples"] = list(extrapolation.fit.samples)
            meta["coefficients"] = list(extrapolation.fit.coefficients)
        result.count = extrapolation.count
    elif strategy is Strategy.BORDER:
        result.count = count_border(lattice, budget, cache)
    else:
        result.count = count_cross(lattice, budget, cache)

    logger.debug("budget %d -> %d cells via %s", budget, result.count, strategy.value)
    return result


def solve_detailed(grid_text: str | Lattice, budget: int, config: ReachConfig | None = None) -> ReachResult:
    return solve_lattice(_as_lattice(grid_text), budget, config)


def solve(grid_text: str | Lattice, budget: int, config: ReachConfig | None = None) -> int:
    """
    Number of cells reachable in exactly ``budget`` steps on the infinite tiling.

    Raises the grid errors for malformed input, and StrategyAssumptionError
    when a fast strategy finds the lattice lacks the regularity it needs.
    """
    return solve_detailed(grid_text, budget, config).count


def solve_bounded(grid_text: str | Lattice, budget: int = FINITE_BUDGET) -> int:
    """Number of cells reachable in exactly ``budget`` steps without leaving the lattice."""
    return count_bounded(_as_lattice(grid_text), budget)


def clear_cache() -> None:
    _FIELD_CACHE.clear()


__all__ = [
    "FINITE_BUDGET",
    "PERIODIC_BUDGET",
    "ReachConfig",
    "ReachResult",
    "load_config",
    "solve",
    "solve_bounded",
    "solve_detailed",
    "solve_lattice",
    "clear_cache",
]
