"""
Trap placement strategies for trapcycle.

A placement strategy decides which tile the next trap goes on. Strategies are
stateless with respect to the world: they see the player position, the
hunting zones and an immutable snapshot of the tiles already holding traps,
and return a free tile or None.

Available Strategies:
    - line: 1 to 5 traps in a row or column through the anchor
    - l_pattern: anchor corner plus one tile north and one east
    - cross: the four cardinal neighbours of the anchor
    - x_pattern: anchor plus diagonals, optionally re-centred on the player
    - no_cardinal: random zone tiles never in line with a nearby trap
    - auto: picks line / l_pattern / cross / x_pattern from the trap count

Example Usage:
    >>> from trapcycle.placement import create_strategy
    >>> strategy = create_strategy("auto", max_traps=3)
    >>> strategy.name
    'Auto (L-Pattern)'
"""

from __future__ import annotations

import numpy as np

from trapcycle.geometry import Coordinate
from trapcycle.placement.auto import AutoPatternStrategy, select_pattern
from trapcycle.placement.base import (
    PatternStrategy,
    PlacementStrategy,
    RecenteringStrategy,
    nearest_free,
)
from trapcycle.placement.cross import CrossPatternStrategy
from trapcycle.placement.l_pattern import LPatternStrategy
from trapcycle.placement.line import LineOrientation, LinePatternStrategy
from trapcycle.placement.no_cardinal import NoCardinalStrategy
from trapcycle.placement.x_pattern import XPatternStrategy

# =============================================================================
# STRATEGY FACTORY
# =============================================================================

# Registry of available strategies, keyed by configuration name
STRATEGIES = {
    "line": LinePatternStrategy,
    "l_pattern": LPatternStrategy,
    "cross": CrossPatternStrategy,
    "x_pattern": XPatternStrategy,
    "no_cardinal": NoCardinalStrategy,
    "auto": AutoPatternStrategy,
}


def create_strategy(
    name: str,
    *,
    max_traps: int,
    anchor: Coordinate | None = None,
    orientation: LineOrientation | str = LineOrientation.RANDOM,
    recenter_on_empty: bool = False,
    max_drift: int = 3,
    max_attempts: int = 10,
    rng: np.random.Generator | None = None,
) -> PlacementStrategy:
    """
    Create a placement strategy by name.

    Args:
        name: Key in STRATEGIES.
        max_traps: Trap budget of the owning task.
        anchor: Fixed pattern anchor; None uses the primary zone's centre.
        orientation: Line orientation (line only).
        recenter_on_empty: Follow the player when no traps are out (x_pattern only).
        max_drift: Recentring bound in tiles (x_pattern only).
        max_attempts: Sampling attempts (no_cardinal only).
        rng: Random source shared with the task.

    Returns:
        A strategy implementing the PlacementStrategy protocol.

    Raises:
        ValueError: If the name is not registered or max_traps < 1.
    """
    if name not in STRATEGIES:
        available = list(STRATEGIES.keys())
        raise ValueError(f"Unknown strategy: {name}. Available: {available}")
    if max_traps < 1:
        raise ValueError(f"max_traps must be >= 1, got {max_traps}")

    if name == "line":
        return LinePatternStrategy(anchor, max_traps, orientation, rng=rng)
    if name == "l_pattern":
        return LPatternStrategy(anchor, max_traps, rng=rng)
    if name == "cross":
        return CrossPatternStrategy(anchor, max_traps, rng=rng)
    if name == "x_pattern":
        return XPatternStrategy(
            anchor,
            recenter_on_empty=recenter_on_empty,
            max_drift=max_drift,
            rng=rng,
        )
    if name == "no_cardinal":
        return NoCardinalStrategy(max_attempts=max_attempts, rng=rng)
    return AutoPatternStrategy(max_traps, anchor, rng=rng)


__all__ = [
    "STRATEGIES",
    "AutoPatternStrategy",
    "CrossPatternStrategy",
    "LPatternStrategy",
    "LineOrientation",
    "LinePatternStrategy",
    "NoCardinalStrategy",
    "PatternStrategy",
    "PlacementStrategy",
    "RecenteringStrategy",
    "XPatternStrategy",
    "create_strategy",
    "nearest_free",
    "select_pattern",
]
