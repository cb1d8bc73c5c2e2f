from __future__ import annotations

import logging
from enum import Enum

from .lattice import Lattice

logger = logging.getLogger(__name__)

EXACT_THRESHOLD = 100


class Strategy(str, Enum):
    EXACT = "exact"
    QUADRATIC = "quadratic"
    BORDER = "border"
    CROSS = "cross"

    @classmethod
    def parse(cls, name: str) -> "Strategy":
        try:
            return cls(name.lower())
        except ValueError:
            choices = ", ".join(s.value for s in cls)
            raise ValueError(f"Unknown strategy {name!r} (choose from {choices})") from None


def cross_applies(lattice: Lattice) -> bool:
    """Open start row/column and open border on an odd square lattice."""
    return (
        lattice.is_square
        and lattice.width % 2 == 1
        and lattice.has_open_border()
        and lattice.has_open_cross()
    )


def border_applies(lattice: Lattice) -> bool:
    """
    Open border on an odd square lattice with no other fully open line.

    Any other open row or column would give straight routes across tiles
    that bypass the corners, and the corner-based distances would be too long.
    """
    if not (lattice.is_square and lattice.width % 2 == 1):
        return False
    edges = [0, lattice.width - 1]
    return lattice.open_rows() == edges and lattice.open_cols() == edges


def classify(lattice: Lattice, budget: int, exact_threshold: int = EXACT_THRESHOLD) -> Strategy:
    """Pick the cheapest strategy that is valid for this lattice and budget."""
    if budget < exact_threshold:
        strategy, reason = Strategy.EXACT, f"budget {budget} < {exact_threshold}"
    elif budget <= 2 * lattice.width:
        strategy, reason = Strategy.QUADRATIC, "budget within two tile-widths"
    elif cross_applies(lattice):
        strategy, reason = Strategy.CROSS, "open cross and border"
    elif border_applies(lattice):
        strategy, reason = Strategy.BORDER, "open border only"
    else:
        strategy, reason = Strategy.QUADRATIC, "no open border/cross regularity"
    logger.info("strategy %s for budget %d (%s)", strategy.value, budget, reason)
    return strategy


__all__ = ["EXACT_THRESHOLD", "Strategy", "classify", "cross_applies", "border_applies"]
