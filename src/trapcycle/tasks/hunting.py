"""
Hunting tasks: the place / inspect / collect work cycle.

A hunting task owns a trap ledger (TrapStateManager) and a placement
strategy, and drives the host collaborators through one bounded cycle per
poll. It never loops or sleeps itself; every path through execute() ends by
returning a delay.

Architecture Role:
    TaskManager → AbstractHuntingTask.execute()
        1. player position unknown        → failure delay
        2. out of supplies, under capacity → handle_supplies_depleted()
        3. under capacity                  → strategy proposes a tile → PLACE
        4. otherwise (maintenance)         → INSPECT placed traps,
                                             COLLECT one collapsed or
                                             occupied trap

    Placement strategy ← tracked_positions() snapshot ← TrapStateManager
    Interaction outcome → register_placed / mark_occupied / mark_collapsed / remove

Design Decisions:
    - Template method: the cycle lives in the abstract base; subclasses only
      supply delays and the depleted-supplies policy.
    - Two movement profiles: placing needs the exact tile, collecting only
      needs to be close enough to click.
    - Ledger mutations only follow confirmed outcomes. An inspection that
      reports nothing new leaves the ledger untouched, so a full, quiet
      cycle is side-effect free.
    - Persistent failures are bounded: a tile where PLACE is refused
      max_placement_attempts times in a row is skipped for the rest of the
      run. Walk timeouts say nothing about the tile and are not counted.
    - Collapsed traps are picked up before occupied ones, and within each
      group the trap that has waited longest goes first.

Dependencies:
    - trapcycle.collaborators: host protocols and outcome enums
    - trapcycle.placement: strategy protocol and factory
    - trapcycle.state: the ledger
    - numpy: random delays
"""

from __future__ import annotations

import logging
import time
from abc import ABC, abstractmethod
from collections import Counter
from collections.abc import Callable, Sequence
from dataclasses import dataclass

import numpy as np

from trapcycle.collaborators import (
    Collaborators,
    InteractionAction,
    InteractionOutcome,
    MovementConfig,
)
from trapcycle.config import HuntingConfig
from trapcycle.geometry import Coordinate, Zone, make_rng
from trapcycle.placement import PlacementStrategy, RecenteringStrategy, create_strategy
from trapcycle.state import TrapState, TrapStateManager

logger = logging.getLogger(__name__)

# Default movement timeout when the caller does not configure one
DEFAULT_WALK_TIMEOUT_MS = 10_000

# Tiles from the target that count as "close enough" when collecting
DEFAULT_APPROX_TOLERANCE = 2


@dataclass
class HuntingStats:
    """Running counters for one hunting task."""

    placed: int = 0
    collected: int = 0
    reset: int = 0
    lost: int = 0
    failures: int = 0


# =============================================================================
# ABSTRACT HUNTING TASK
# =============================================================================


class AbstractHuntingTask(ABC):
    """
    Base class for tasks that place and service traps.

    Attributes:
        collaborators: Host services used every cycle.
        strategy: Placement strategy proposing new tiles.
        zones: Hunting zones; the first one is the primary zone.
        max_traps: Trap budget; also the ledger's capacity.
        trap_item_id: Inventory item consumed by each placement.
        state: The trap ledger.
        walk_config_exact: Movement profile for placing (tolerance 0).
        walk_config_approx: Movement profile for collecting.
        stats: Counters for summaries.
    """

    def __init__(
        self,
        collaborators: Collaborators,
        strategy: PlacementStrategy,
        zones: Sequence[Zone],
        max_traps: int,
        trap_item_id: int,
        trap_name: str = "trap",
        walk_timeout_ms: int = DEFAULT_WALK_TIMEOUT_MS,
        approx_tolerance: int = DEFAULT_APPROX_TOLERANCE,
        max_placement_attempts: int = 3,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if not zones:
            raise ValueError("At least one hunting zone is required")
        if max_traps < 1:
            raise ValueError(f"max_traps must be >= 1, got {max_traps}")
        if walk_timeout_ms < 1:
            raise ValueError(f"walk_timeout_ms must be >= 1, got {walk_timeout_ms}")
        if max_placement_attempts < 1:
            raise ValueError(
                f"max_placement_attempts must be >= 1, got {max_placement_attempts}"
            )

        self.collaborators = collaborators
        self.strategy = strategy
        self.zones = tuple(zones)
        self.max_traps = max_traps
        self.trap_item_id = trap_item_id
        self.trap_name = trap_name
        self.max_placement_attempts = max_placement_attempts

        self.walk_config_exact = MovementConfig(tolerance=0, timeout_ms=walk_timeout_ms)
        self.walk_config_approx = MovementConfig(
            tolerance=approx_tolerance, timeout_ms=walk_timeout_ms
        )

        self.state = TrapStateManager(trap_name, capacity=max_traps, clock=clock)
        self.state.clear_all_traps()
        self.stats = HuntingStats()

        self._placement_failures: Counter[Coordinate] = Counter()
        self._blocked_tiles: set[Coordinate] = set()

        logger.info(
            "%s ready: %s, up to %d %s(s) in %d zone(s)",
            type(self).__name__,
            strategy.name,
            max_traps,
            trap_name,
            len(self.zones),
        )

    # -------------------------------------------------------------------------
    # Subclass hooks
    # -------------------------------------------------------------------------

    @abstractmethod
    def placement_delay(self) -> int:
        """Delay after a successful placement."""

    @abstractmethod
    def maintenance_delay(self) -> int:
        """Delay after a collection attempt that changed the ledger."""

    @abstractmethod
    def idle_delay(self) -> int:
        """Delay when there was nothing to do."""

    @abstractmethod
    def failure_delay(self) -> int:
        """Delay after a failed step (unknown position, walk timeout, blocked tile)."""

    @abstractmethod
    def handle_supplies_depleted(self) -> int | None:
        """
        Policy for running out of trap supplies while under capacity.

        Returns:
            A delay to end the cycle, or None to continue with maintenance.
        """

    def accepting_placements(self) -> bool:
        """Whether new traps may be placed this cycle."""
        return True

    def collection_targets(self) -> list[Coordinate]:
        """Tracked traps to collect: collapsed first, then occupied, oldest first."""
        return self.state.actionable_positions()

    # -------------------------------------------------------------------------
    # Task protocol
    # -------------------------------------------------------------------------

    def can_execute(self) -> bool:
        return True

    def has_supplies(self) -> bool:
        slot = self.collaborators.inventory.scan(self.trap_item_id)
        return slot is not None and slot.count > 0

    @property
    def blocked_tiles(self) -> frozenset[Coordinate]:
        return frozenset(self._blocked_tiles)

    def clear_blocked_tiles(self) -> None:
        self._blocked_tiles.clear()
        self._placement_failures.clear()

    def execute(self) -> int:
        player = self.collaborators.position.current_position()
        if player is None:
            logger.warning("Player position unknown, retrying later")
            return self._fail()

        under_capacity = len(self.state) < self.max_traps
        supplied = self.has_supplies()

        if under_capacity and not supplied:
            delay = self.handle_supplies_depleted()
            if delay is not None:
                return delay

        if under_capacity and supplied and self.accepting_placements():
            if len(self.state) == 0 and isinstance(self.strategy, RecenteringStrategy):
                self.strategy.recenter(player, self.zones)
            existing = self.state.tracked_positions() | self._blocked_tiles
            candidate = self.strategy.find_next_trap_position(player, self.zones, existing)
            if candidate is not None:
                return self._place(candidate)
            logger.debug("%s has no free tile, falling through to maintenance", self.strategy.name)

        return self._maintain()

    def reconcile(self, present_positions: Sequence[Coordinate]) -> list[Coordinate]:
        """Drop ledger entries the host no longer sees in the world."""
        stale = self.state.reconcile(present_positions)
        self.stats.lost += len(stale)
        return stale

    # -------------------------------------------------------------------------
    # Cycle steps
    # -------------------------------------------------------------------------

    def _fail(self) -> int:
        self.stats.failures += 1
        return self.failure_delay()

    def _record_placement_failure(self, position: Coordinate) -> None:
        self._placement_failures[position] += 1
        if self._placement_failures[position] >= self.max_placement_attempts:
            self._blocked_tiles.add(position)
            logger.warning(
                "Giving up on %s after %d failed placement(s)",
                position,
                self._placement_failures[position],
            )

    def _place(self, candidate: Coordinate) -> int:
        existing = self.state.tracked_positions() | self._blocked_tiles
        if not self.strategy.is_valid_position(candidate, existing):
            logger.warning("Proposed tile %s failed re-validation", candidate)
            return self._fail()

        if not self.collaborators.movement.walk_to(candidate, self.walk_config_exact):
            logger.warning("Could not reach %s to place a %s", candidate, self.trap_name)
            return self._fail()

        outcome = self.collaborators.interaction.interact(candidate, InteractionAction.PLACE)
        if outcome is InteractionOutcome.SUCCEEDED:
            self._placement_failures.pop(candidate, None)
            if self.state.register_placed(candidate):
                self.stats.placed += 1
            return self.placement_delay()

        if outcome is InteractionOutcome.OCCUPIED_BY_OTHER:
            logger.info("Tile %s is occupied by something else", candidate)
        else:
            logger.warning("Placing %s at %s failed: %s", self.trap_name, candidate, outcome.value)
        self._record_placement_failure(candidate)
        return self._fail()

    def _inspect_placed(self) -> None:
        for position in self.state.placed_positions():
            outcome = self.collaborators.interaction.interact(
                position, InteractionAction.INSPECT
            )
            if outcome is InteractionOutcome.TRIGGERED:
                self.state.mark_occupied(position)
            elif outcome is InteractionOutcome.COLLAPSED:
                self.state.mark_collapsed(position)
            elif outcome is InteractionOutcome.TARGET_MISSING:
                logger.warning("%s at %s has disappeared", self.trap_name, position)
                self.state.remove(position)
                self.stats.lost += 1

    def _maintain(self) -> int:
        self._inspect_placed()

        targets = self.collection_targets()
        if not targets:
            return self.idle_delay()
        return self._collect(targets[0])

    def _collect(self, position: Coordinate) -> int:
        if not self.collaborators.movement.walk_to(position, self.walk_config_approx):
            logger.warning("Could not reach %s to collect", position)
            return self._fail()

        outcome = self.collaborators.interaction.interact(position, InteractionAction.COLLECT)
        if outcome is InteractionOutcome.SUCCEEDED:
            record = self.state.get(position)
            if record is not None and record.state is TrapState.COLLAPSED:
                self.stats.reset += 1
            else:
                self.stats.collected += 1
            self.state.remove(position)
            return self.maintenance_delay()
        if outcome is InteractionOutcome.TARGET_MISSING:
            self.state.remove(position)
            self.stats.lost += 1
            return self.maintenance_delay()

        logger.warning("Collecting %s at %s failed: %s", self.trap_name, position, outcome.value)
        return self._fail()


# =============================================================================
# TRAP TASK
# =============================================================================


class TrapTask(AbstractHuntingTask):
    """
    Concrete hunting task driven by a HuntingConfig.

    Adds randomised delays, the depleted-supplies policy and drain mode.
    While draining, no new traps are placed and every tracked trap is
    collected whether or not it has triggered, which empties the field
    before a break.

    Example:
        >>> task = TrapTask(Collaborators.from_host(world), config)
        >>> manager = TaskManager([task])
    """

    def __init__(
        self,
        collaborators: Collaborators,
        config: HuntingConfig,
        strategy: PlacementStrategy | None = None,
        rng: np.random.Generator | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.config = config
        self._rng = rng if rng is not None else make_rng(config.seed)
        if strategy is None:
            strategy = create_strategy(
                config.strategy,
                max_traps=config.max_traps,
                anchor=config.anchor_coordinate(),
                orientation=config.line_orientation,
                recenter_on_empty=config.recenter_on_empty,
                max_drift=config.max_drift,
                rng=self._rng,
            )
        trap_type = config.trap()
        super().__init__(
            collaborators,
            strategy,
            config.zone_list(),
            config.max_traps,
            trap_item_id=trap_type.item_id,
            trap_name=trap_type.name,
            walk_timeout_ms=config.walk_timeout_ms,
            approx_tolerance=config.approx_tolerance,
            max_placement_attempts=config.max_placement_attempts,
            clock=clock,
        )
        self._draining = False

    def _random_delay(self, bounds: tuple[int, int]) -> int:
        low, high = bounds
        return int(self._rng.integers(low, high + 1))

    def placement_delay(self) -> int:
        return self._random_delay(self.config.placement_delay_ms)

    def maintenance_delay(self) -> int:
        return self._random_delay(self.config.maintenance_delay_ms)

    def idle_delay(self) -> int:
        return self._random_delay(self.config.idle_delay_ms)

    def failure_delay(self) -> int:
        return self._random_delay(self.config.failure_delay_ms)

    def can_execute(self) -> bool:
        return len(self.state) > 0 or self.has_supplies()

    def handle_supplies_depleted(self) -> int | None:
        if len(self.state) > 0:
            logger.debug(
                "Out of %s supplies, servicing %d tracked trap(s)",
                self.trap_name,
                len(self.state),
            )
            return None
        logger.info("Out of %s supplies and no traps out, idling", self.trap_name)
        return self.idle_delay()

    # -------------------------------------------------------------------------
    # Drain mode
    # -------------------------------------------------------------------------

    @property
    def draining(self) -> bool:
        return self._draining

    @property
    def drained(self) -> bool:
        """True once draining and no trap is tracked."""
        return self._draining and len(self.state) == 0

    def start_draining(self) -> None:
        """Stop placing and collect every tracked trap."""
        if not self._draining:
            logger.info("Draining %d %s(s) for a break", len(self.state), self.trap_name)
        self._draining = True

    def stop_draining(self) -> None:
        if self._draining:
            logger.info("Drain mode ended, resuming placements")
        self._draining = False

    def accepting_placements(self) -> bool:
        return not self._draining

    def collection_targets(self) -> list[Coordinate]:
        actionable = self.state.actionable_positions()
        if not self._draining:
            return actionable
        return actionable + self.state.placed_positions()
