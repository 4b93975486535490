"""
Line pattern: traps in a straight row or column centred on the anchor.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from enum import Enum

import numpy as np

from trapcycle.geometry import Coordinate, Zone
from trapcycle.placement.base import PatternStrategy, shuffled

logger = logging.getLogger(__name__)

MAX_LINE_TRAPS = 5


class LineOrientation(Enum):
    HORIZONTAL = "horizontal"
    VERTICAL = "vertical"
    RANDOM = "random"


class LinePatternStrategy(PatternStrategy):
    """
    Places 1 to 5 traps on a line through the anchor.

    The anchor tile always comes first. With an even count the extra tile
    goes east (horizontal) or north (vertical). RANDOM orientation is
    resolved once at construction, so one strategy instance keeps the same
    line for its whole lifetime.
    """

    label = "Line"

    def __init__(
        self,
        anchor: Coordinate | None = None,
        max_traps: int = 2,
        orientation: LineOrientation | str = LineOrientation.RANDOM,
        rng: np.random.Generator | None = None,
    ) -> None:
        super().__init__(anchor, min(MAX_LINE_TRAPS, max(1, max_traps)), rng)
        orientation = LineOrientation(orientation)
        if orientation is LineOrientation.RANDOM:
            orientation = (
                LineOrientation.HORIZONTAL
                if int(self._rng.integers(2)) == 0
                else LineOrientation.VERTICAL
            )
            logger.debug("Line pattern randomly selected orientation: %s", orientation.value)
        self.orientation = orientation

    @property
    def description(self) -> str:
        return (
            f"Places traps in a {self.orientation.value} line with anchor at centre. "
            f"Scales from 1 to {self.max_traps} traps."
        )

    def _build_pattern(self, anchor: Coordinate, zones: Sequence[Zone]) -> list[Coordinate]:
        per_side = (self.max_traps - 1) // 2
        extra = (self.max_traps - 1) % 2

        if self.orientation is LineOrientation.HORIZONTAL:
            dx, dy = 1, 0
        else:
            dx, dy = 0, 1

        arms = [anchor.offset(-dx * i, -dy * i) for i in range(1, per_side + 1)]
        arms += [anchor.offset(dx * i, dy * i) for i in range(1, per_side + extra + 1)]
        return [anchor, *shuffled(arms, self._rng)]
