"""
Quadratic extrapolation of reachable-cell counts on a periodic lattice.

Writing the budget as S = q*N + r, the count at budgets r, r + N, r + 2N, ...
grows quadratically in the tile index once the wavefront has crossed a few
tiles. Three exact samples pin down the Newton forward-difference form

    P(x) = a0 + a1*x + a2*x*(x - 1)

which is then evaluated at x = q. Optionally a fourth sample at r + 3N is
checked against P(3) before the fit is trusted.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Optional, Tuple

from .counting import count_windowed
from .errors import StrategyAssumptionError
from .lattice import Lattice

logger = logging.getLogger(__name__)

DIRECT_TILES = 3  # budgets up to this many tile-widths are counted directly


@dataclass
class QuadraticFit:
    """Newton coefficients through samples taken one tile-width apart."""

    remainder: int
    period: int
    samples: Tuple[int, ...]
    coefficients: Tuple[int, int, int] = field(init=False)

    def __post_init__(self) -> None:
        self.coefficients = newton_coefficients(self.samples[:3])

    def __call__(self, x: int) -> int:
        a0, a1, a2 = self.coefficients
        return a0 + a1 * x + a2 * x * (x - 1)


def newton_coefficients(samples) -> Tuple[int, int, int]:
    """
    Forward-difference coefficients through values at x = 0, 1, 2.

    Raises:
        StrategyAssumptionError: if the second difference is odd, i.e. the
            samples cannot come from an integer-valued quadratic in this form.
    """
    v0, v1, v2 = (int(v) for v in samples)
    second = (v2 - v1) - (v1 - v0)
    if second % 2:
        raise StrategyAssumptionError(
            f"samples {v0}, {v1}, {v2} have odd second difference {second}; "
            "growth is not quadratic per tile"
        )
    return v0, v1 - v0, second // 2


def fit_quadratic(lattice: Lattice, budget: int, verify: bool = True) -> QuadraticFit:
    """Measure the samples for ``budget`` and fit the polynomial."""
    if not lattice.is_square:
        raise StrategyAssumptionError(
            f"quadratic extrapolation needs a square lattice, got {lattice.shape}"
        )
    n = lattice.width
    r = budget % n
    n_samples = 4 if verify else 3
    samples = tuple(count_windowed(lattice, r + k * n) for k in range(n_samples))
    logger.debug("samples at %d + k*%d: %s", r, n, samples)

    fit = QuadraticFit(remainder=r, period=n, samples=samples)
    logger.debug("newton coefficients %s", fit.coefficients)
    if verify and fit(3) != samples[3]:
        raise StrategyAssumptionError(
            f"verification sample at budget {r + 3 * n} is {samples[3]}, "
            f"fitted polynomial predicts {fit(3)}"
        )
    return fit


@dataclass
class Extrapolation:
    """Count for one budget, with the fit behind it when one was needed."""

    count: int
    fit: Optional[QuadraticFit] = None


def extrapolate_detailed(lattice: Lattice, budget: int, verify: bool = True) -> Extrapolation:
    """
    Count cells reachable in exactly ``budget`` steps on the infinite tiling.

    Budgets up to three tile-widths are small enough to count directly, and
    come back without a fit. Correctness beyond that rests on per-tile
    quadratic growth, which holds for lattices with open borders but is not
    guaranteed in general; with ``verify`` a failed check is reported
    instead of trusted.
    """
    if budget < 0:
        raise ValueError(f"budget must be non-negative, got {budget}")
    if not lattice.is_square:
        raise StrategyAssumptionError(
            f"quadratic extrapolation needs a square lattice, got {lattice.shape}"
        )
    n = lattice.width
    if budget <= DIRECT_TILES * n:
        return Extrapolation(count=count_windowed(lattice, budget))
    fit = fit_quadratic(lattice, budget, verify=verify)
    return Extrapolation(count=fit(budget // n), fit=fit)


def extrapolate(lattice: Lattice, budget: int, verify: bool = True) -> int:
    return extrapolate_detailed(lattice, budget, verify=verify).count


__all__ = [
    "DIRECT_TILES",
    "QuadraticFit",
    "Extrapolation",
    "newton_coefficients",
    "fit_quadratic",
    "extrapolate_detailed",
    "extrapolate",
]
