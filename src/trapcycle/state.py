"""
Per-tile trap ledger for trapcycle.

This module tracks every trap a hunting task has placed and what each one is
currently doing. It is the single source of truth for "existing traps", the
set placement strategies must never propose again.

Architecture Role:
    The state manager is a passive ledger. It never decides anything; the
    owning hunting task mutates it after each interaction and hands
    snapshots of it to the placement strategy.

    Lifecycle of one tile:

        (absent) --register_placed--> PLACED --mark_occupied--> OCCUPIED
            ^                            |
            |                            +--mark_collapsed--> COLLAPSED
            |                                                     |
            +---------------- remove ----- (from any state) ------+

    Absence from the map is the "empty" state, so collecting a trap and
    never having placed one look identical to the rest of the system.

Design Decisions:
    - Immutable records: TrapRecord is frozen; transitions replace the record.
    - Capacity guard: the ledger refuses to track more than its capacity,
      backing up the task's own max-traps check.
    - Injectable clock: timestamps come from a callable so tests can freeze
      time.

Dependencies:
    - trapcycle.geometry: Coordinate keys
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable, Iterable
from dataclasses import dataclass, replace
from enum import Enum

from trapcycle.geometry import Coordinate

logger = logging.getLogger(__name__)

# =============================================================================
# TRAP STATE
# =============================================================================


class TrapState(Enum):
    """
    Lifecycle state of a tracked trap.

    PLACED: Set successfully, waiting for an outcome.
    OCCUPIED: Something triggered it; needs collecting.
    COLLAPSED: Fell over without a catch; needs picking up before it can
        be reset.
    """

    PLACED = "placed"
    OCCUPIED = "occupied"
    COLLAPSED = "collapsed"


@dataclass(frozen=True)
class TrapRecord:
    """
    Immutable snapshot of one tracked trap.

    Attributes:
        position: Tile the trap stands on.
        state: Current lifecycle state.
        placed_at: Clock value when the trap was registered.
        last_checked_at: Clock value of the last state-changing check.
        state_changed_at: Clock value when `state` last changed.
    """

    position: Coordinate
    state: TrapState
    placed_at: float
    last_checked_at: float
    state_changed_at: float

    def with_state(self, state: TrapState, now: float) -> TrapRecord:
        changed_at = now if state != self.state else self.state_changed_at
        return replace(
            self, state=state, last_checked_at=now, state_changed_at=changed_at
        )

    def age(self, now: float) -> float:
        return now - self.placed_at

    def time_in_state(self, now: float) -> float:
        return now - self.state_changed_at


# =============================================================================
# TRAP STATE MANAGER
# =============================================================================


class TrapStateManager:
    """
    Ledger mapping Coordinate → TrapRecord for one trap type.

    Attributes:
        trap_type: Name of the trap type tracked (for logging).
        capacity: Maximum number of tracked traps, or None for unbounded.
    """

    def __init__(
        self,
        trap_type: str = "trap",
        capacity: int | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.trap_type = trap_type
        self.capacity = capacity
        self._clock = clock
        self._traps: dict[Coordinate, TrapRecord] = {}

    # -------------------------------------------------------------------------
    # Transitions
    # -------------------------------------------------------------------------

    def register_placed(self, position: Coordinate) -> bool:
        """
        Start tracking a freshly placed trap.

        Returns:
            True if registered. False (ledger unchanged) when the tile is
            already tracked or the ledger is at capacity.
        """
        if position in self._traps:
            logger.warning(
                "Refusing to register %s at %s twice", self.trap_type, position
            )
            return False
        if self.capacity is not None and len(self._traps) >= self.capacity:
            logger.warning(
                "Refusing to register %s at %s: ledger full (%d/%d)",
                self.trap_type,
                position,
                len(self._traps),
                self.capacity,
            )
            return False

        now = self._clock()
        self._traps[position] = TrapRecord(
            position=position,
            state=TrapState.PLACED,
            placed_at=now,
            last_checked_at=now,
            state_changed_at=now,
        )
        logger.info(
            "Registered %s at %s (%d tracked)",
            self.trap_type,
            position,
            len(self._traps),
        )
        return True

    def mark_occupied(self, position: Coordinate) -> bool:
        """Move a tracked trap to OCCUPIED. False if the tile is not tracked."""
        record = self._traps.get(position)
        if record is None:
            return False
        if record.state != TrapState.OCCUPIED:
            logger.info("%s at %s triggered", self.trap_type, position)
        self._traps[position] = record.with_state(TrapState.OCCUPIED, self._clock())
        return True

    def mark_collapsed(self, position: Coordinate) -> bool:
        """Move a tracked trap to COLLAPSED. False if the tile is not tracked."""
        record = self._traps.get(position)
        if record is None:
            return False
        if record.state != TrapState.COLLAPSED:
            logger.info("%s at %s collapsed", self.trap_type, position)
        self._traps[position] = record.with_state(TrapState.COLLAPSED, self._clock())
        return True

    def remove(self, position: Coordinate) -> bool:
        """Stop tracking a tile. False if it was not tracked."""
        if self._traps.pop(position, None) is None:
            return False
        logger.info(
            "Removed %s at %s (%d tracked)", self.trap_type, position, len(self._traps)
        )
        return True

    def clear_all_traps(self) -> None:
        """Forget every tracked trap."""
        if self._traps:
            logger.info("Clearing %d tracked %s record(s)", len(self._traps), self.trap_type)
        self._traps.clear()

    def reconcile(self, present_positions: Iterable[Coordinate]) -> list[Coordinate]:
        """
        Drop records the world no longer reports.

        Args:
            present_positions: Tiles where the host currently sees our traps.

        Returns:
            The coordinates that were dropped from the ledger.
        """
        present = set(present_positions)
        stale = [pos for pos in self._traps if pos not in present]
        for pos in stale:
            del self._traps[pos]
        if stale:
            logger.warning(
                "Dropped %d stale %s record(s): %s",
                len(stale),
                self.trap_type,
                ", ".join(str(p) for p in stale),
            )
        return stale

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    def tracked_positions(self) -> frozenset[Coordinate]:
        """Every tracked tile, whatever its state."""
        return frozenset(self._traps)

    def placed_positions(self) -> list[Coordinate]:
        return [r.position for r in self._traps.values() if r.state == TrapState.PLACED]

    def occupied_positions(self) -> list[Coordinate]:
        return [
            r.position for r in self._traps.values() if r.state == TrapState.OCCUPIED
        ]

    def collapsed_positions(self) -> list[Coordinate]:
        return [
            r.position for r in self._traps.values() if r.state == TrapState.COLLAPSED
        ]

    def actionable_positions(self) -> list[Coordinate]:
        """
        Tiles that need picking up, in the order they should be handled.

        Collapsed traps come first, then occupied ones. Within each group the
        trap that has waited longest in its state comes first.
        """
        actionable = [
            r
            for r in self._traps.values()
            if r.state in (TrapState.COLLAPSED, TrapState.OCCUPIED)
        ]
        actionable.sort(
            key=lambda r: (r.state != TrapState.COLLAPSED, r.state_changed_at)
        )
        return [r.position for r in actionable]

    def get(self, position: Coordinate) -> TrapRecord | None:
        return self._traps.get(position)

    def records(self) -> list[TrapRecord]:
        return list(self._traps.values())

    def is_full(self) -> bool:
        return self.capacity is not None and len(self._traps) >= self.capacity

    def summary(self) -> dict[str, int]:
        """Counts per state, for logging."""
        return {
            "tracked": len(self._traps),
            "placed": len(self.placed_positions()),
            "occupied": len(self.occupied_positions()),
            "collapsed": len(self.collapsed_positions()),
        }

    def __len__(self) -> int:
        return len(self._traps)

    def __contains__(self, position: object) -> bool:
        return position in self._traps
