"""
In-memory host for trapcycle.

SimulatedWorld implements every collaborator protocol against a tiny model
of the game: an inventory of non-stacking items, a player who teleports on
walk, traps that catch something or collapse with fixed probabilities on each
tick, and tiles that are blocked or taken by other players' traps. It exists for the
`trapcycle simulate` command and for integration tests, and is fully
deterministic for a given seed.

Example Usage:
    >>> world = SimulatedWorld([Zone(3200, 3400, 6, 6)], supplies=3, rng=make_rng(7))
    >>> hunter = build_hunter(config, Collaborators.from_host(world))
    >>> for _ in range(100):
    ...     world.tick(hunter.manager.execute_next_task())
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass

import numpy as np

from trapcycle.collaborators import (
    InteractionAction,
    InteractionOutcome,
    InventorySlot,
    MovementConfig,
)
from trapcycle.geometry import Coordinate, Zone, make_rng
from trapcycle.state import TrapState

logger = logging.getLogger(__name__)

# Standard inventory size
INVENTORY_SLOTS = 28


@dataclass
class WorldCounters:
    """What happened in the world, for summaries."""

    placements: int = 0
    catches: int = 0
    collections: int = 0
    collapses: int = 0
    vanished: int = 0
    items_dropped: int = 0
    failed_walks: int = 0
    elapsed_ms: int = 0


class SimulatedWorld:
    """
    Seeded in-memory world implementing the collaborator protocols.

    Args:
        zones: Hunting zones; the player starts at the primary zone's centre
            unless `start` is given.
        trap_item_id: Item consumed by PLACE and returned by COLLECT.
        supplies: Trap items in the inventory at the start.
        loot: Items added to the inventory for each catch.
        catch_chance: Per-tick probability that a waiting trap catches something.
        collapse_chance: Per-tick probability that a waiting trap falls over.
            It stays on its tile until picked up, which returns the supply.
        vanish_chance: Per-tick probability that a waiting trap disappears
            outright (the supply is lost).
        blocked: Tiles the player can never walk to.
        foreign_traps: Tiles already holding somebody else's trap.
        start: Initial player tile; None starts at the primary zone's centre.
        rng: Random source.
    """

    def __init__(
        self,
        zones: Sequence[Zone],
        trap_item_id: int = 10006,
        supplies: int = 3,
        loot: Iterable[int] = (526, 9978),
        catch_chance: float = 0.2,
        collapse_chance: float = 0.0,
        vanish_chance: float = 0.0,
        blocked: Iterable[Coordinate] = (),
        foreign_traps: Iterable[Coordinate] = (),
        start: Coordinate | None = None,
        inventory_slots: int = INVENTORY_SLOTS,
        rng: np.random.Generator | None = None,
    ) -> None:
        if not zones:
            raise ValueError("At least one zone is required")
        if not (0.0 <= catch_chance <= 1.0):
            raise ValueError(f"catch_chance must be in [0, 1], got {catch_chance}")
        if not (0.0 <= collapse_chance <= 1.0):
            raise ValueError(f"collapse_chance must be in [0, 1], got {collapse_chance}")
        if not (0.0 <= vanish_chance <= 1.0):
            raise ValueError(f"vanish_chance must be in [0, 1], got {vanish_chance}")

        self.zones = tuple(zones)
        self.trap_item_id = trap_item_id
        self.loot = tuple(loot)
        self.catch_chance = catch_chance
        self.collapse_chance = collapse_chance
        self.vanish_chance = vanish_chance
        self.blocked = set(blocked)
        self.foreign_traps = set(foreign_traps)
        self.inventory_slots = inventory_slots
        self.loaded = True
        self.counters = WorldCounters()

        self._rng = rng if rng is not None else make_rng()
        self._player = start if start is not None else self.zones[0].center()
        self._inventory: dict[int, int] = {trap_item_id: supplies} if supplies else {}
        self._traps: dict[Coordinate, TrapState] = {}

    # -------------------------------------------------------------------------
    # World model
    # -------------------------------------------------------------------------

    @property
    def player(self) -> Coordinate:
        return self._player

    @property
    def inventory(self) -> dict[int, int]:
        return dict(self._inventory)

    def trap_positions(self) -> frozenset[Coordinate]:
        return frozenset(self._traps)

    def triggered_positions(self) -> frozenset[Coordinate]:
        return frozenset(p for p, s in self._traps.items() if s is TrapState.OCCUPIED)

    def collapsed_positions(self) -> frozenset[Coordinate]:
        return frozenset(p for p, s in self._traps.items() if s is TrapState.COLLAPSED)

    def add_items(self, item_id: int, count: int = 1) -> None:
        self._inventory[item_id] = self._inventory.get(item_id, 0) + count

    def trigger(self, position: Coordinate) -> None:
        """Force the trap at `position` to have caught something."""
        if position not in self._traps:
            raise KeyError(f"No trap at {position}")
        self._traps[position] = TrapState.OCCUPIED

    def collapse(self, position: Coordinate) -> None:
        """Force the trap at `position` to fall over."""
        if position not in self._traps:
            raise KeyError(f"No trap at {position}")
        self._traps[position] = TrapState.COLLAPSED

    def remove_trap(self, position: Coordinate) -> None:
        """Make a trap vanish without the task's involvement."""
        self._traps.pop(position, None)

    def tick(self, elapsed_ms: int = 0) -> None:
        """Advance time; each waiting trap may vanish, collapse or catch."""
        self.counters.elapsed_ms += elapsed_ms
        for position, state in list(self._traps.items()):
            if state is not TrapState.PLACED:
                continue
            roll = float(self._rng.random())
            if roll < self.vanish_chance:
                del self._traps[position]
                self.counters.vanished += 1
                logger.debug("Trap at %s vanished", position)
            elif roll < self.vanish_chance + self.collapse_chance:
                self._traps[position] = TrapState.COLLAPSED
                self.counters.collapses += 1
                logger.debug("Trap at %s collapsed", position)
            elif roll < self.vanish_chance + self.collapse_chance + self.catch_chance:
                self._traps[position] = TrapState.OCCUPIED
                self.counters.catches += 1
                logger.debug("Trap at %s caught something", position)

    def _used_slots(self) -> int:
        return sum(self._inventory.values())

    # -------------------------------------------------------------------------
    # InventoryQuery
    # -------------------------------------------------------------------------

    def scan(self, item_id: int) -> InventorySlot | None:
        count = self._inventory.get(item_id, 0)
        return InventorySlot(item_id, count) if count > 0 else None

    def free_slots(self) -> int | None:
        if not self.loaded:
            return None
        return max(0, self.inventory_slots - self._used_slots())

    def drop(self, item_id: int) -> int:
        count = self._inventory.pop(item_id, 0)
        self.counters.items_dropped += count
        return count

    # -------------------------------------------------------------------------
    # Movement / PositionQuery
    # -------------------------------------------------------------------------

    def walk_to(self, target: Coordinate, config: MovementConfig) -> bool:
        if target in self.blocked:
            self.counters.failed_walks += 1
            return False
        self._player = target
        return True

    def current_position(self) -> Coordinate | None:
        return self._player if self.loaded else None

    # -------------------------------------------------------------------------
    # Interaction
    # -------------------------------------------------------------------------

    def interact(self, position: Coordinate, action: InteractionAction) -> InteractionOutcome:
        if action is InteractionAction.PLACE:
            return self._place(position)
        if action is InteractionAction.INSPECT:
            if position not in self._traps:
                return InteractionOutcome.TARGET_MISSING
            state = self._traps[position]
            if state is TrapState.OCCUPIED:
                return InteractionOutcome.TRIGGERED
            if state is TrapState.COLLAPSED:
                return InteractionOutcome.COLLAPSED
            return InteractionOutcome.SUCCEEDED
        return self._collect(position)

    def _place(self, position: Coordinate) -> InteractionOutcome:
        if self._inventory.get(self.trap_item_id, 0) < 1:
            return InteractionOutcome.FAILED
        if position in self._traps or position in self.foreign_traps:
            return InteractionOutcome.OCCUPIED_BY_OTHER

        self._inventory[self.trap_item_id] -= 1
        if self._inventory[self.trap_item_id] == 0:
            del self._inventory[self.trap_item_id]
        self._traps[position] = TrapState.PLACED
        self.counters.placements += 1
        return InteractionOutcome.SUCCEEDED

    def _collect(self, position: Coordinate) -> InteractionOutcome:
        if position not in self._traps:
            return InteractionOutcome.TARGET_MISSING

        triggered = self._traps[position] is TrapState.OCCUPIED
        needed = 1 + (len(self.loot) if triggered else 0)
        if self.inventory_slots - self._used_slots() < needed:
            return InteractionOutcome.FAILED

        del self._traps[position]
        self.add_items(self.trap_item_id)
        if triggered:
            for item_id in self.loot:
                self.add_items(item_id)
        self.counters.collections += 1
        return InteractionOutcome.SUCCEEDED
