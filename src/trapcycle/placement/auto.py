"""
Auto strategy: choose a pattern from the trap count, then delegate.

    1-2 traps → Line (random orientation)
    3 traps   → L-Pattern
    4 traps   → Cross
    5+ traps  → X-Pattern (fixed centre)

The choice is made once in the constructor and never revisited.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

import numpy as np

from trapcycle.geometry import Coordinate, Zone, make_rng
from trapcycle.placement.base import PlacementStrategy
from trapcycle.placement.cross import CrossPatternStrategy
from trapcycle.placement.l_pattern import LPatternStrategy
from trapcycle.placement.line import LineOrientation, LinePatternStrategy
from trapcycle.placement.x_pattern import XPatternStrategy

logger = logging.getLogger(__name__)


def select_pattern(
    max_traps: int,
    anchor: Coordinate | None = None,
    rng: np.random.Generator | None = None,
) -> PlacementStrategy:
    """
    Build the pattern strategy best suited to `max_traps`.

    Raises:
        ValueError: If max_traps < 1.
    """
    if max_traps < 1:
        raise ValueError(f"max_traps must be >= 1, got {max_traps}")
    if max_traps <= 2:
        return LinePatternStrategy(anchor, max_traps, LineOrientation.RANDOM, rng=rng)
    if max_traps == 3:
        return LPatternStrategy(anchor, max_traps, rng=rng)
    if max_traps == 4:
        return CrossPatternStrategy(anchor, max_traps, rng=rng)
    return XPatternStrategy(anchor, recenter_on_empty=False, max_drift=0, rng=rng)


class AutoPatternStrategy:
    """Composition wrapper around the pattern chosen by select_pattern()."""

    def __init__(
        self,
        max_traps: int,
        anchor: Coordinate | None = None,
        rng: np.random.Generator | None = None,
    ) -> None:
        self.max_traps = max_traps
        self.delegate = select_pattern(
            max_traps, anchor, rng if rng is not None else make_rng()
        )
        logger.info(
            "Auto pattern selected: %s for %d traps", self.delegate.name, max_traps
        )

    @property
    def name(self) -> str:
        return f"Auto ({self.delegate.name})"

    @property
    def description(self) -> str:
        return (
            f"Automatically selected {self.delegate.name} pattern for "
            f"{self.max_traps} traps. {self.delegate.description}"
        )

    def find_next_trap_position(
        self,
        player_position: Coordinate | None,
        zones: Sequence[Zone],
        existing_traps: frozenset[Coordinate],
    ) -> Coordinate | None:
        return self.delegate.find_next_trap_position(player_position, zones, existing_traps)

    def is_valid_position(
        self, candidate: Coordinate | None, existing_traps: frozenset[Coordinate]
    ) -> bool:
        return self.delegate.is_valid_position(candidate, existing_traps)
