"""
Host collaborator contracts consumed by trapcycle tasks.

The engine never reads the screen, clicks, or walks by itself. A host
environment (a bot client, a test double, or trapcycle.sim.SimulatedWorld)
supplies these services, and every query exposes presence or absence
explicitly instead of raising.

Architecture Role:
    Tasks hold a Collaborators bundle and call through it:

    AbstractHuntingTask → Collaborators.inventory   (supplies)
                        → Collaborators.position    (where am I?)
                        → Collaborators.movement    (walk to tile)
                        → Collaborators.interaction (place / collect / inspect)

Design Decisions:
    - Protocols, not base classes: any object with the right methods works,
      including MagicMock in tests.
    - Outcomes are values. Ordinary failures (blocked tile, trap gone,
      movement timeout) come back as enum members or False, never as
      exceptions, so a cycle can always return a delay.

Dependencies:
    - trapcycle.geometry: Coordinate
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Protocol, runtime_checkable

from trapcycle.geometry import Coordinate

# =============================================================================
# VALUE TYPES
# =============================================================================


@dataclass(frozen=True)
class MovementConfig:
    """
    How closely and how long the movement collaborator may try.

    Attributes:
        tolerance: Tiles from the target that still count as arrived.
        timeout_ms: Give up after this many milliseconds.
    """

    tolerance: int
    timeout_ms: int


@dataclass(frozen=True)
class InventorySlot:
    """Result of an inventory scan for one item id."""

    item_id: int
    count: int


class InteractionAction(Enum):
    """What the interaction collaborator is asked to do at a tile."""

    PLACE = "place"
    COLLECT = "collect"
    INSPECT = "inspect"


class InteractionOutcome(Enum):
    """
    Reported result of an interaction.

    SUCCEEDED: The action completed (for INSPECT: trap present, still waiting).
    TRIGGERED: INSPECT found the trap has caught something.
    COLLAPSED: INSPECT found the trap fell over empty and must be picked up.
    TARGET_MISSING: No trap at the tile although one was expected.
    OCCUPIED_BY_OTHER: The tile is taken by something that is not ours.
    FAILED: Anything else; the caller retries next cycle.
    """

    SUCCEEDED = "succeeded"
    TRIGGERED = "triggered"
    COLLAPSED = "collapsed"
    TARGET_MISSING = "target_missing"
    OCCUPIED_BY_OTHER = "occupied_by_other"
    FAILED = "failed"


# =============================================================================
# PROTOCOLS
# =============================================================================


@runtime_checkable
class InventoryQuery(Protocol):
    """Inventory reader supplied by the host."""

    def scan(self, item_id: int) -> InventorySlot | None:
        """Slot holding item_id, or None if absent or unreadable."""
        ...

    def free_slots(self) -> int | None:
        """Number of empty slots, or None if the inventory cannot be read."""
        ...

    def drop(self, item_id: int) -> int:
        """Drop every unit of item_id; returns how many were dropped."""
        ...


@runtime_checkable
class Movement(Protocol):
    def walk_to(self, target: Coordinate, config: MovementConfig) -> bool:
        """Blocking walk; False on timeout or unreachable target."""
        ...


@runtime_checkable
class Interaction(Protocol):
    def interact(
        self, position: Coordinate, action: InteractionAction
    ) -> InteractionOutcome:
        ...


@runtime_checkable
class PositionQuery(Protocol):
    def current_position(self) -> Coordinate | None:
        """Player tile, or None before the world has loaded."""
        ...


# =============================================================================
# BUNDLE
# =============================================================================


@dataclass
class Collaborators:
    """
    The four host services a hunting task needs.

    A single object implementing every protocol can be passed for all four
    via Collaborators.from_host().
    """

    inventory: InventoryQuery
    movement: Movement
    interaction: Interaction
    position: PositionQuery

    @classmethod
    def from_host(cls, host: object) -> Collaborators:
        """Use one host object for every role."""
        return cls(
            inventory=host,  # type: ignore[arg-type]
            movement=host,  # type: ignore[arg-type]
            interaction=host,  # type: ignore[arg-type]
            position=host,  # type: ignore[arg-type]
        )
