"""
No-cardinal strategy: random zone tiles that never line up with a nearby trap.

Traps on the same row or column as a neighbouring trap block each other's
line of sight, so this strategy only accepts tiles that are diagonal to (or
far from) every existing trap. It samples the zones a bounded number of times
and gives up with None rather than looping.
"""

from __future__ import annotations

from collections.abc import Sequence

import numpy as np

from trapcycle.geometry import Coordinate, Zone, make_rng

# Existing traps further away than this are ignored by the cardinal rule
MAX_DISTANCE_FROM_EXISTING = 4

# Stop sampling once this many valid tiles have been found
_MAX_CANDIDATES = 5


def _is_cardinal(a: Coordinate, b: Coordinate) -> bool:
    dx = a.x - b.x
    dy = a.y - b.y
    return (dx == 0) != (dy == 0)


class NoCardinalStrategy:
    """
    Sample tiles from the zones, rejecting cardinal neighbours of nearby traps.

    Attributes:
        max_attempts: Sampling attempts per phase before giving up.
    """

    def __init__(
        self,
        max_attempts: int = 10,
        rng: np.random.Generator | None = None,
    ) -> None:
        if max_attempts < 1:
            raise ValueError(f"max_attempts must be >= 1, got {max_attempts}")
        self.max_attempts = max_attempts
        self._rng = rng if rng is not None else make_rng()

    @property
    def name(self) -> str:
        return "No Cardinal"

    @property
    def description(self) -> str:
        return (
            "Avoids placing traps in cardinal directions (N/S/E/W) from existing traps. "
            f"Allows diagonal placement and keeps traps within {MAX_DISTANCE_FROM_EXISTING} tiles."
        )

    def _sample(self, zones: Sequence[Zone]) -> Coordinate:
        zone = zones[int(self._rng.integers(len(zones)))]
        return zone.random_position(self._rng)

    def is_valid_position(
        self, candidate: Coordinate | None, existing_traps: frozenset[Coordinate]
    ) -> bool:
        if candidate is None or candidate in existing_traps:
            return False
        for existing in existing_traps:
            if existing.plane != candidate.plane:
                continue
            if candidate.distance_to(existing) > MAX_DISTANCE_FROM_EXISTING:
                continue
            if _is_cardinal(candidate, existing):
                return False
        return True

    def find_next_trap_position(
        self,
        player_position: Coordinate | None,
        zones: Sequence[Zone],
        existing_traps: frozenset[Coordinate],
    ) -> Coordinate | None:
        if not zones:
            return None
        if not existing_traps:
            return self._sample(zones)

        candidates: list[Coordinate] = []
        for _ in range(self.max_attempts):
            candidate = self._sample(zones)
            if self.is_valid_position(candidate, existing_traps):
                candidates.append(candidate)
                if len(candidates) >= _MAX_CANDIDATES:
                    break

        if candidates:
            if player_position is None:
                return candidates[0]
            return min(candidates, key=player_position.distance_to)

        # Fallback: any tile that is at least not already taken
        for _ in range(self.max_attempts):
            candidate = self._sample(zones)
            if candidate not in existing_traps:
                return candidate
        return None
