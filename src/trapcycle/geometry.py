"""
Tile geometry for trapcycle: coordinates and rectangular hunting zones.

This module is the foundation every other part of the package builds on.
Placement strategies generate coordinates, the state manager keys its ledger
by coordinate, and hunting tasks read the zone list to decide where the
character is allowed to work.

Architecture Role:
    Coordinate and Zone are plain immutable values. Nothing in this module
    talks to the host; randomness is injected as a numpy Generator so that
    zone sampling is reproducible in tests and simulations.

    HuntingConfig.zones → Zone → random_position / center / edge_anchor
                                         ↓
                              PlacementStrategy → Coordinate

Design Decisions:
    - Frozen dataclasses: value equality and hashing come for free, which is
      exactly what a ledger keyed by tile needs.
    - Inclusive bounds: a zone at (x, y) with width w covers x .. x + w - 1.
    - Euclidean distance on the tile grid (plane ignored). Strategies only use
      it to rank candidates, never as a hard reachability test.

Dependencies:
    - numpy: Random source for uniform zone sampling
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any

import numpy as np

# =============================================================================
# RANDOM SOURCE
# =============================================================================


def make_rng(seed: int | None = None) -> np.random.Generator:
    """
    Create the random source used for zone sampling and pattern shuffles.

    Args:
        seed: Seed for reproducible runs. None draws fresh OS entropy.

    Returns:
        A numpy Generator (PCG64).
    """
    return np.random.default_rng(seed)


# =============================================================================
# COORDINATE
# =============================================================================


@dataclass(frozen=True)
class Coordinate:
    """
    An immutable world tile.

    Attributes:
        x: Tile column.
        y: Tile row (grows northward).
        plane: Height level. Tiles on different planes never compare equal.
    """

    x: int
    y: int
    plane: int = 0

    def distance_to(self, other: Coordinate) -> float:
        """Euclidean distance on the x/y grid."""
        return math.hypot(self.x - other.x, self.y - other.y)

    def offset(self, dx: int, dy: int) -> Coordinate:
        """Return the tile shifted by (dx, dy) on the same plane."""
        return Coordinate(self.x + dx, self.y + dy, self.plane)

    def to_dict(self) -> dict[str, int]:
        return {"x": self.x, "y": self.y, "plane": self.plane}

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> Coordinate:
        """
        Build a Coordinate from a mapping.

        Accepts "plane" or the short "p" key used by hand-written tile lists.
        """
        plane = d.get("plane", d.get("p", 0))
        return cls(int(d["x"]), int(d["y"]), int(plane))

    def __str__(self) -> str:
        return f"({self.x}, {self.y}, {self.plane})"


# =============================================================================
# ZONE
# =============================================================================


@dataclass(frozen=True)
class Zone:
    """
    Axis-aligned rectangle of tiles where traps may be placed.

    A hunting task owns an ordered list of zones. The first one is the
    primary zone used for anchor and centre computations.

    Attributes:
        x: Column of the south-west corner.
        y: Row of the south-west corner.
        width: Number of columns (> 0).
        height: Number of rows (> 0).
        plane: Plane every tile of the zone lies on.

    Raises:
        ValueError: If width or height is not positive.
    """

    x: int
    y: int
    width: int
    height: int
    plane: int = 0

    def __post_init__(self) -> None:
        if self.width <= 0 or self.height <= 0:
            raise ValueError(
                f"Zone dimensions must be positive, got {self.width}x{self.height}"
            )

    @property
    def max_x(self) -> int:
        return self.x + self.width - 1

    @property
    def max_y(self) -> int:
        return self.y + self.height - 1

    def contains(self, position: Coordinate) -> bool:
        """True if the tile lies inside the rectangle and on the zone's plane."""
        return (
            position.plane == self.plane
            and self.x <= position.x <= self.max_x
            and self.y <= position.y <= self.max_y
        )

    def random_position(self, rng: np.random.Generator) -> Coordinate:
        """
        Sample a tile uniformly from the zone's interior.

        Args:
            rng: Random source. Only integer draws are taken from it, so the
                 same seed always yields the same sequence of tiles.

        Returns:
            Coordinate with x in [x, x + width - 1] and y in [y, y + height - 1].
        """
        # integers() has an exclusive upper bound
        dx = int(rng.integers(0, self.width))
        dy = int(rng.integers(0, self.height))
        return Coordinate(self.x + dx, self.y + dy, self.plane)

    def center(self) -> Coordinate:
        """Integer centre of the zone (floor division of width and height)."""
        return Coordinate(
            self.x + self.width // 2,
            self.y + self.height // 2,
            self.plane,
        )

    def edge_anchor(self, player_position: Coordinate | None) -> Coordinate:
        """
        Tile on the zone's east edge in the player's current row.

        Parking on a fixed edge keeps every trap tile in view from a
        predictable spot. The row is clamped into the zone; without a player
        position the vertical centre is used.

        Args:
            player_position: Current player tile, or None when unknown.

        Returns:
            Coordinate at x = x + width - 1.
        """
        if player_position is None:
            row = self.y + self.height // 2
        else:
            row = max(self.y, min(self.max_y, player_position.y))
        return Coordinate(self.max_x, row, self.plane)

    def clamp(self, position: Coordinate) -> Coordinate:
        """Project a tile onto the nearest tile inside the zone."""
        return Coordinate(
            max(self.x, min(self.max_x, position.x)),
            max(self.y, min(self.max_y, position.y)),
            self.plane,
        )

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> Zone:
        """Build a Zone from a mapping with x, y, width, height and optional plane."""
        plane = d.get("plane", d.get("p", 0))
        return cls(
            x=int(d["x"]),
            y=int(d["y"]),
            width=int(d["width"]),
            height=int(d["height"]),
            plane=int(plane),
        )
