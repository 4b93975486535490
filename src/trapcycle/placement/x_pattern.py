"""
X pattern: a centre tile plus its four diagonals.

Unlike the other pattern strategies, the X pattern can move. With
`recenter_on_empty` enabled, whenever no traps are tracked it re-anchors on
the player's tile, but never further than `max_drift` tiles (Chebyshev) from
its base anchor, and never outside the primary zone. This avoids walking
back to a stale centre after every trap has been collected.

Corner order is randomised per pattern: a random first corner, then one of
its two adjacent corners, then the remaining two.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

import numpy as np

from trapcycle.geometry import Coordinate, Zone
from trapcycle.placement.base import PatternStrategy, nearest_free

logger = logging.getLogger(__name__)

X_PATTERN_TRAPS = 5

# NE, NW, SW, SE
_CORNERS = ((1, 1), (-1, 1), (-1, -1), (1, -1))
_CORNER_NAMES = ("NE", "NW", "SW", "SE")
_ADJACENT_CORNERS = ((1, 3), (0, 2), (1, 3), (0, 2))


class XPatternStrategy(PatternStrategy):
    """
    Centre plus diagonals, with optional bounded recentring.

    Attributes:
        recenter_on_empty: Re-anchor on the player when no traps are out.
        max_drift: Maximum Chebyshev distance of a recentred anchor from the
                   base anchor (the fixed anchor or the primary zone centre).
    """

    label = "X-Pattern"

    def __init__(
        self,
        anchor: Coordinate | None = None,
        max_traps: int = X_PATTERN_TRAPS,
        recenter_on_empty: bool = False,
        max_drift: int = 3,
        rng: np.random.Generator | None = None,
    ) -> None:
        if max_drift < 0:
            raise ValueError(f"max_drift must be >= 0, got {max_drift}")
        super().__init__(anchor, X_PATTERN_TRAPS, rng)
        self.recenter_on_empty = recenter_on_empty
        self.max_drift = max_drift
        self._center: Coordinate | None = None

    @property
    def description(self) -> str:
        text = (
            "Places traps in an X-shaped diagonal pattern around a centre tile. "
            "Traps are placed at the nearest available position."
        )
        if self.recenter_on_empty:
            text += (
                f" Re-centres on the player (within {self.max_drift} tiles) "
                "when no traps are out."
            )
        return text

    @property
    def current_center(self) -> Coordinate | None:
        return self._center

    def force_recenter(self) -> None:
        """Discard the current centre; the next call rebuilds the pattern."""
        self._center = None
        self._pattern = []

    def _base_anchor(self, primary: Zone) -> Coordinate:
        return self.anchor if self.anchor is not None else primary.center()

    def _drifted_center(self, player_position: Coordinate, primary: Zone) -> Coordinate:
        base = self._base_anchor(primary)
        center = Coordinate(
            max(base.x - self.max_drift, min(base.x + self.max_drift, player_position.x)),
            max(base.y - self.max_drift, min(base.y + self.max_drift, player_position.y)),
            base.plane,
        )
        if primary.contains(base):
            center = primary.clamp(center)
        return center

    def _build_pattern(self, anchor: Coordinate, zones: Sequence[Zone]) -> list[Coordinate]:
        primary = zones[0] if zones else None

        first = int(self._rng.integers(4))
        options = _ADJACENT_CORNERS[first]
        second = options[int(self._rng.integers(len(options)))]
        order = [first, second] + [i for i in range(4) if i not in (first, second)]

        pattern = [anchor]
        for index in order:
            dx, dy = _CORNERS[index]
            diagonal = anchor.offset(dx, dy)
            if primary is not None and not primary.contains(diagonal):
                logger.debug(
                    "X-pattern %s tile %s is outside the hunting zone, skipping",
                    _CORNER_NAMES[index],
                    diagonal,
                )
                continue
            pattern.append(diagonal)
        return pattern

    def _apply_center(self, center: Coordinate, zones: Sequence[Zone]) -> None:
        self._center = center
        self._pattern = self._build_pattern(center, zones)
        logger.info(
            "X-pattern centred at %s with %d tile(s)", center, len(self._pattern)
        )

    def recenter(self, player_position: Coordinate, zones: Sequence[Zone]) -> bool:
        """
        Re-anchor on the player, within max_drift of the base anchor.

        The owner calls this whenever its ledger is empty, even while it
        still excludes some tiles from placement.

        Returns:
            True if the centre moved and the pattern was rebuilt.
        """
        if not self.recenter_on_empty or self._center is None or not zones:
            return False
        center = self._drifted_center(player_position, zones[0])
        if center == self._center:
            return False
        self._apply_center(center, zones)
        return True

    def find_next_trap_position(
        self,
        player_position: Coordinate | None,
        zones: Sequence[Zone],
        existing_traps: frozenset[Coordinate],
    ) -> Coordinate | None:
        if not zones:
            return None

        if self._center is None:
            self._apply_center(self._base_anchor(zones[0]), zones)
        elif not existing_traps and player_position is not None:
            self.recenter(player_position, zones)

        position = nearest_free(self._pattern, player_position, existing_traps, self._rng)
        if position is None:
            logger.debug("All X-pattern positions occupied")
        return position

    def is_valid_position(
        self, candidate: Coordinate | None, existing_traps: frozenset[Coordinate]
    ) -> bool:
        if candidate is None or candidate in existing_traps:
            return False
        return candidate in self._pattern
