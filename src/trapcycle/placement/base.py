"""
Placement strategy contract and the shared fixed-pattern machinery.

Every strategy answers one question: given where the player stands, the
hunting zones, and the traps already out, which tile should the next trap go
on? Pattern strategies (Line, L, Cross, X) answer it by precomputing a small
set of tiles around an anchor and handing out the nearest free one.

Design Decisions:
    - Structural typing: PlacementStrategy is a Protocol. The task only needs
      find_next_trap_position / is_valid_position / name / description.
    - Snapshots in, tiles out: existing traps arrive as a frozenset so a
      strategy cannot mutate the ledger it was shown.
    - Lazy pattern: when no fixed anchor is configured the anchor is the
      primary zone's centre, which is only known on the first call.
    - Human-like choice: nearest free tile to the player, with exact ties
      broken by the random source.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Protocol, runtime_checkable

import numpy as np

from trapcycle.geometry import Coordinate, Zone, make_rng

logger = logging.getLogger(__name__)

# Distances closer than this are treated as equal when ranking tiles
_TIE_EPSILON = 1e-3


@runtime_checkable
class PlacementStrategy(Protocol):
    """Structural interface every placement strategy implements."""

    @property
    def name(self) -> str: ...

    @property
    def description(self) -> str: ...

    def find_next_trap_position(
        self,
        player_position: Coordinate | None,
        zones: Sequence[Zone],
        existing_traps: frozenset[Coordinate],
    ) -> Coordinate | None:
        """Next tile to service, never a member of existing_traps."""
        ...

    def is_valid_position(
        self, candidate: Coordinate | None, existing_traps: frozenset[Coordinate]
    ) -> bool:
        """Re-check a proposed tile just before acting on it."""
        ...


@runtime_checkable
class RecenteringStrategy(Protocol):
    """Strategy whose anchor can follow the player once the field is empty."""

    def recenter(self, player_position: Coordinate, zones: Sequence[Zone]) -> bool:
        """Move the anchor toward the player. True if the pattern changed."""
        ...


def nearest_free(
    pattern: Sequence[Coordinate],
    player_position: Coordinate | None,
    existing_traps: frozenset[Coordinate],
    rng: np.random.Generator,
) -> Coordinate | None:
    """
    Pick the free pattern tile closest to the player.

    Args:
        pattern: Candidate tiles in priority order.
        player_position: Player tile; None returns the first free tile.
        existing_traps: Tiles that must not be returned.
        rng: Tie breaker between equally distant tiles.

    Returns:
        A tile from `pattern` not in `existing_traps`, or None if all are taken.
    """
    free = [p for p in pattern if p not in existing_traps]
    if not free:
        return None
    if player_position is None:
        return free[0]

    distances = [player_position.distance_to(p) for p in free]
    best = min(distances)
    ties = [p for p, d in zip(free, distances) if abs(d - best) < _TIE_EPSILON]
    if len(ties) == 1:
        return ties[0]
    return ties[int(rng.integers(len(ties)))]


def shuffled(items: Sequence[Coordinate], rng: np.random.Generator) -> list[Coordinate]:
    """Return a new list with the items in random order."""
    order = rng.permutation(len(items))
    return [items[int(i)] for i in order]


# =============================================================================
# PATTERN STRATEGY BASE
# =============================================================================


class PatternStrategy:
    """
    Base for strategies that place traps on a fixed tile pattern.

    Subclasses implement `_build_pattern(anchor, zones)` and set `label`.

    Attributes:
        anchor: Fixed anchor tile, or None to use the primary zone's centre.
        max_traps: Upper bound on pattern size after subclass clamping.
    """

    label = "Pattern"

    def __init__(
        self,
        anchor: Coordinate | None = None,
        max_traps: int = 5,
        rng: np.random.Generator | None = None,
    ) -> None:
        self.anchor = anchor
        self.max_traps = max_traps
        self._rng = rng if rng is not None else make_rng()
        self._pattern: list[Coordinate] = []

    @property
    def name(self) -> str:
        return self.label

    @property
    def description(self) -> str:
        return f"Trap placement strategy: {self.name}"

    @property
    def pattern(self) -> tuple[Coordinate, ...]:
        """Tiles of the current pattern (empty until first generated)."""
        return tuple(self._pattern)

    def _build_pattern(self, anchor: Coordinate, zones: Sequence[Zone]) -> list[Coordinate]:
        raise NotImplementedError

    def _ensure_pattern(self, zones: Sequence[Zone]) -> bool:
        if self._pattern:
            return True
        anchor = self.anchor
        if anchor is None:
            if not zones:
                logger.warning("%s: no anchor and no zones, cannot build pattern", self.name)
                return False
            anchor = zones[0].center()
        self._pattern = self._build_pattern(anchor, zones)
        logger.debug(
            "%s pattern around %s: %s",
            self.name,
            anchor,
            ", ".join(str(p) for p in self._pattern),
        )
        return bool(self._pattern)

    def find_next_trap_position(
        self,
        player_position: Coordinate | None,
        zones: Sequence[Zone],
        existing_traps: frozenset[Coordinate],
    ) -> Coordinate | None:
        if not self._ensure_pattern(zones):
            return None
        return nearest_free(self._pattern, player_position, existing_traps, self._rng)

    def is_valid_position(
        self, candidate: Coordinate | None, existing_traps: frozenset[Coordinate]
    ) -> bool:
        if candidate is None:
            return False
        if not self._pattern and not self._ensure_pattern(()):
            return False
        return candidate in self._pattern and candidate not in existing_traps
