"""
L pattern: three traps forming a right angle with the anchor at the corner.
"""

from __future__ import annotations

from collections.abc import Sequence

import numpy as np

from trapcycle.geometry import Coordinate, Zone
from trapcycle.placement.base import PatternStrategy, shuffled

L_PATTERN_TRAPS = 3


class LPatternStrategy(PatternStrategy):
    """
    Corner at the anchor, one tile north and one tile east.

    The pattern is always exactly three tiles; larger trap counts are
    capped. The two arm tiles are served in random order after the corner.
    """

    label = "L-Pattern"

    def __init__(
        self,
        anchor: Coordinate | None = None,
        max_traps: int = L_PATTERN_TRAPS,
        rng: np.random.Generator | None = None,
    ) -> None:
        super().__init__(anchor, L_PATTERN_TRAPS, rng)

    @property
    def description(self) -> str:
        return (
            "Places traps in a fixed L shape with anchor at corner. "
            "Vertical leg extends north, horizontal leg extends east."
        )

    def _build_pattern(self, anchor: Coordinate, zones: Sequence[Zone]) -> list[Coordinate]:
        arms = [anchor.offset(0, 1), anchor.offset(1, 0)]
        return [anchor, *shuffled(arms, self._rng)]
