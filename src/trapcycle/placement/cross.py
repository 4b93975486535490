"""
Cross pattern: the four cardinal neighbours of the anchor.
"""

from __future__ import annotations

from collections.abc import Sequence

import numpy as np

from trapcycle.geometry import Coordinate, Zone
from trapcycle.placement.base import PatternStrategy, shuffled

CROSS_TRAPS = 4

# North, south, east, west
_CARDINALS = ((0, 1), (0, -1), (1, 0), (-1, 0))


class CrossPatternStrategy(PatternStrategy):
    """Places up to four traps N/S/E/W of the anchor; the anchor itself stays free."""

    label = "Cross"

    def __init__(
        self,
        anchor: Coordinate | None = None,
        max_traps: int = CROSS_TRAPS,
        rng: np.random.Generator | None = None,
    ) -> None:
        super().__init__(anchor, min(CROSS_TRAPS, max(1, max_traps)), rng)

    @property
    def description(self) -> str:
        return "Places traps on cardinal directions only (N, S, E, W). Center is not used."

    def _build_pattern(self, anchor: Coordinate, zones: Sequence[Zone]) -> list[Coordinate]:
        cardinals = [anchor.offset(dx, dy) for dx, dy in _CARDINALS]
        return shuffled(cardinals, self._rng)[: self.max_traps]
