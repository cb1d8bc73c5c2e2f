"""Exception hierarchy for lattice parsing and reachability strategies."""

from __future__ import annotations


class ReachError(ValueError):
    """Base class for every error raised by periodic_reach."""


class GridError(ReachError):
    """Input text could not be turned into a Lattice."""


class MalformedGridError(GridError):
    """Rows differ in width, the grid is empty, or a character is unknown."""


class MissingStartError(GridError):
    """No start marker in the grid."""


class AmbiguousStartError(GridError):
    """More than one start marker in the grid."""

    def __init__(self, positions):
        self.positions = list(positions)
        super().__init__(
            f"expected exactly one start marker, found {len(self.positions)} "
            f"at {self.positions}"
        )


class BlockedSourceError(ReachError):
    """A BFS was asked to start on a blocked cell or outside its window."""


class StrategyAssumptionError(ReachError):
    """The lattice does not have the regularity a fast strategy relies on.

    Callers can recover by retrying with the exact windowed BFS, which is
    always correct but scales with the square of the budget.
    """


__all__ = [
    "ReachError",
    "GridError",
    "MalformedGridError",
    "MissingStartError",
    "AmbiguousStartError",
    "BlockedSourceError",
    "StrategyAssumptionError",
]
