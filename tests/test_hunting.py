"""
Tests for the hunting task cycle.

Tests:
- Construction validation and ledger reset
- Placement path: walk, PLACE, register
- Failure paths: unknown position, blocked walk, tile taken by another
- Maintenance: INSPECT transitions and single collection per cycle
- Collection order: collapsed traps first, then oldest catch first
- X-pattern recentring when the ledger is empty
- Idempotence at full capacity
- Depleted supplies and drain mode
"""

from dataclasses import replace
from unittest.mock import MagicMock

import pytest

from trapcycle.collaborators import InteractionAction, InteractionOutcome
from trapcycle.geometry import Coordinate
from trapcycle.state import TrapState
from trapcycle.tasks import AbstractHuntingTask, TrapTask

# L pattern around the zone centre (103, 103, 0)
CORNER = Coordinate(103, 103, 0)
NORTH = Coordinate(103, 104, 0)
EAST = Coordinate(104, 103, 0)

PLACEMENT_DELAY = 150
MAINTENANCE_DELAY = 1000
IDLE_DELAY = 2400
FAILURE_DELAY = 600


class FixedDelayTask(AbstractHuntingTask):
    """Minimal concrete hunting task."""

    def placement_delay(self):
        return 1

    def maintenance_delay(self):
        return 2

    def idle_delay(self):
        return 3

    def failure_delay(self):
        return 4

    def handle_supplies_depleted(self):
        return None


def outcomes(**by_action):
    """interact() side effect returning per-action outcomes (default SUCCEEDED)."""

    def interact(position, action):
        value = by_action.get(action.name, InteractionOutcome.SUCCEEDED)
        if isinstance(value, dict):
            return value.get(position, InteractionOutcome.SUCCEEDED)
        return value

    return interact


def actions_called(collaborators, action):
    return [
        c.args[0]
        for c in collaborators.interaction.interact.call_args_list
        if c.args[1] is action
    ]


@pytest.fixture
def task(mock_collaborators, default_config):
    return TrapTask(mock_collaborators, default_config)


@pytest.fixture
def full_task(task, mock_collaborators):
    """TrapTask with all three traps placed and the mock call log reset."""
    for _ in range(3):
        assert task.execute() == PLACEMENT_DELAY
    assert task.state.tracked_positions() == frozenset({CORNER, NORTH, EAST})
    mock_collaborators.interaction.interact.reset_mock()
    mock_collaborators.movement.walk_to.reset_mock()
    return task


class TestConstruction:
    """Tests for AbstractHuntingTask.__init__."""

    def test_requires_zones(self, mock_collaborators):
        with pytest.raises(ValueError):
            FixedDelayTask(mock_collaborators, MagicMock(), [], 3, 10006)

    def test_requires_positive_budget(self, mock_collaborators, zone):
        with pytest.raises(ValueError):
            FixedDelayTask(mock_collaborators, MagicMock(), [zone], 0, 10006)

    def test_starts_with_empty_ledger(self, task):
        assert len(task.state) == 0
        assert task.state.capacity == 3

    def test_movement_profiles(self, task):
        assert task.walk_config_exact.tolerance == 0
        assert task.walk_config_approx.tolerance == 2
        assert task.walk_config_exact.timeout_ms == 10_000

    def test_strategy_from_config(self, task):
        assert task.strategy.name == "Auto (L-Pattern)"


class TestPlacement:
    """Tests for the placement path."""

    def test_places_nearest_pattern_tile(self, task, mock_collaborators):
        assert task.execute() == PLACEMENT_DELAY
        mock_collaborators.movement.walk_to.assert_called_once_with(
            CORNER, task.walk_config_exact
        )
        mock_collaborators.interaction.interact.assert_called_once_with(
            CORNER, InteractionAction.PLACE
        )
        assert task.state.get(CORNER).state == TrapState.PLACED
        assert task.stats.placed == 1

    def test_never_exceeds_budget(self, task, mock_collaborators):
        for _ in range(10):
            task.execute()
            assert len(task.state) <= 3
        assert len(actions_called(mock_collaborators, InteractionAction.PLACE)) == 3

    def test_unknown_position(self, task, mock_collaborators):
        mock_collaborators.position.current_position.return_value = None
        assert task.execute() == FAILURE_DELAY
        mock_collaborators.interaction.interact.assert_not_called()
        assert task.stats.failures == 1

    def test_walk_failure(self, task, mock_collaborators):
        mock_collaborators.movement.walk_to.return_value = False
        assert task.execute() == FAILURE_DELAY
        mock_collaborators.interaction.interact.assert_not_called()
        assert len(task.state) == 0

    def test_walk_timeouts_do_not_block_tile(self, task, mock_collaborators):
        mock_collaborators.movement.walk_to.side_effect = [False, False, False] + [True] * 3
        for _ in range(3):
            assert task.execute() == FAILURE_DELAY
        assert task.blocked_tiles == frozenset()

        for _ in range(3):
            assert task.execute() == PLACEMENT_DELAY
        assert task.state.tracked_positions() == frozenset({CORNER, NORTH, EAST})
        assert task.stats.failures == 3

    def test_occupied_by_other(self, task, mock_collaborators):
        mock_collaborators.interaction.interact.side_effect = outcomes(
            PLACE=InteractionOutcome.OCCUPIED_BY_OTHER
        )
        assert task.execute() == FAILURE_DELAY
        assert len(task.state) == 0

    def test_tile_skipped_after_repeated_failures(self, task, mock_collaborators):
        mock_collaborators.interaction.interact.side_effect = outcomes(
            PLACE={CORNER: InteractionOutcome.OCCUPIED_BY_OTHER}
        )
        for _ in range(3):
            assert task.execute() == FAILURE_DELAY
        assert CORNER in task.blocked_tiles

        assert task.execute() == PLACEMENT_DELAY
        placed = task.state.tracked_positions()
        assert len(placed) == 1
        assert CORNER not in placed

        task.clear_blocked_tiles()
        assert task.blocked_tiles == frozenset()

    def test_revalidation_failure(self, mock_collaborators, zone):
        strategy = MagicMock()
        strategy.find_next_trap_position.return_value = CORNER
        strategy.is_valid_position.return_value = False
        task = FixedDelayTask(mock_collaborators, strategy, [zone], 3, 10006)

        assert task.execute() == 4
        mock_collaborators.movement.walk_to.assert_not_called()

    def test_exhausted_strategy_falls_through(self, mock_collaborators, zone):
        strategy = MagicMock()
        strategy.find_next_trap_position.return_value = None
        task = FixedDelayTask(mock_collaborators, strategy, [zone], 3, 10006)

        assert task.execute() == 3
        mock_collaborators.interaction.interact.assert_not_called()


class TestMaintenance:
    """Tests for inspection and collection."""

    def test_full_and_quiet_cycle_is_idempotent(self, full_task, mock_collaborators):
        """At capacity with nothing triggered: no PLACE, no ledger change."""
        before = {r.position: r for r in full_task.state.records()}

        assert full_task.execute() == IDLE_DELAY

        after = {r.position: r for r in full_task.state.records()}
        assert after.keys() == before.keys()
        for pos, record in after.items():
            assert record is before[pos]
        assert actions_called(mock_collaborators, InteractionAction.PLACE) == []
        assert actions_called(mock_collaborators, InteractionAction.COLLECT) == []

    def test_triggered_trap_is_collected(self, full_task, mock_collaborators):
        mock_collaborators.interaction.interact.side_effect = outcomes(
            INSPECT={NORTH: InteractionOutcome.TRIGGERED}
        )

        assert full_task.execute() == MAINTENANCE_DELAY
        assert NORTH not in full_task.state
        assert len(full_task.state) == 2
        assert actions_called(mock_collaborators, InteractionAction.COLLECT) == [NORTH]
        mock_collaborators.movement.walk_to.assert_called_once_with(
            NORTH, full_task.walk_config_approx
        )
        assert full_task.stats.collected == 1

    def test_one_collection_per_cycle(self, full_task, mock_collaborators):
        mock_collaborators.interaction.interact.side_effect = outcomes(
            INSPECT=InteractionOutcome.TRIGGERED
        )
        full_task.execute()
        assert len(actions_called(mock_collaborators, InteractionAction.COLLECT)) == 1
        assert len(full_task.state) == 2
        assert len(full_task.state.occupied_positions()) == 2

    def test_missing_trap_removed(self, full_task, mock_collaborators):
        mock_collaborators.interaction.interact.side_effect = outcomes(
            INSPECT={EAST: InteractionOutcome.TARGET_MISSING}
        )
        assert full_task.execute() == IDLE_DELAY
        assert EAST not in full_task.state
        assert full_task.stats.lost == 1

    def test_failed_collection_keeps_record(self, full_task, mock_collaborators):
        mock_collaborators.interaction.interact.side_effect = outcomes(
            INSPECT={CORNER: InteractionOutcome.TRIGGERED},
            COLLECT=InteractionOutcome.FAILED,
        )
        assert full_task.execute() == FAILURE_DELAY
        assert full_task.state.get(CORNER).state == TrapState.OCCUPIED

    def test_freed_capacity_is_reused(self, full_task, mock_collaborators):
        mock_collaborators.interaction.interact.side_effect = outcomes(
            INSPECT={CORNER: InteractionOutcome.TRIGGERED}
        )
        full_task.execute()
        mock_collaborators.interaction.interact.side_effect = None

        assert full_task.execute() == PLACEMENT_DELAY
        assert CORNER in full_task.state

    def test_collapsed_trap_reset_before_catch(self, full_task, mock_collaborators):
        mock_collaborators.interaction.interact.side_effect = outcomes(
            INSPECT={
                CORNER: InteractionOutcome.TRIGGERED,
                EAST: InteractionOutcome.COLLAPSED,
            }
        )

        assert full_task.execute() == MAINTENANCE_DELAY
        assert actions_called(mock_collaborators, InteractionAction.COLLECT) == [EAST]
        assert EAST not in full_task.state
        assert full_task.state.get(CORNER).state == TrapState.OCCUPIED
        assert full_task.stats.reset == 1
        assert full_task.stats.collected == 0

    def test_oldest_catch_collected_first(self, mock_collaborators, default_config):
        now = [0.0]
        task = TrapTask(mock_collaborators, default_config, clock=lambda: now[0])
        for _ in range(3):
            task.execute()

        now[0] = 1.0
        mock_collaborators.interaction.interact.side_effect = outcomes(
            INSPECT={EAST: InteractionOutcome.TRIGGERED},
            COLLECT=InteractionOutcome.FAILED,
        )
        assert task.execute() == FAILURE_DELAY

        now[0] = 2.0
        mock_collaborators.interaction.interact.reset_mock()
        mock_collaborators.interaction.interact.side_effect = outcomes(
            INSPECT={CORNER: InteractionOutcome.TRIGGERED}
        )
        assert task.execute() == MAINTENANCE_DELAY
        assert actions_called(mock_collaborators, InteractionAction.COLLECT) == [EAST]
        assert task.state.get(CORNER).state == TrapState.OCCUPIED

    def test_reconcile(self, full_task):
        assert full_task.reconcile([CORNER, NORTH]) == [EAST]
        assert full_task.stats.lost == 1


class TestSupplies:
    """Tests for the depleted-supplies policy."""

    def test_idle_without_supplies_or_traps(self, task, mock_collaborators):
        mock_collaborators.inventory.scan.return_value = None
        assert not task.can_execute()
        assert task.execute() == IDLE_DELAY
        mock_collaborators.interaction.interact.assert_not_called()

    def test_maintenance_continues_with_traps_out(self, task, mock_collaborators):
        task.execute()
        mock_collaborators.inventory.scan.return_value = None
        mock_collaborators.interaction.interact.reset_mock()
        mock_collaborators.interaction.interact.side_effect = outcomes(
            INSPECT=InteractionOutcome.TRIGGERED
        )

        assert task.can_execute()
        assert task.execute() == MAINTENANCE_DELAY
        assert actions_called(mock_collaborators, InteractionAction.PLACE) == []
        assert actions_called(mock_collaborators, InteractionAction.COLLECT) == [CORNER]


class TestDrainMode:
    """Tests for TrapTask drain mode."""

    def test_collects_everything_then_stops(self, full_task, mock_collaborators):
        full_task.start_draining()
        assert full_task.draining
        assert not full_task.drained

        for _ in range(3):
            assert full_task.execute() == MAINTENANCE_DELAY
        assert full_task.drained
        assert len(actions_called(mock_collaborators, InteractionAction.COLLECT)) == 3

        assert full_task.execute() == IDLE_DELAY
        assert actions_called(mock_collaborators, InteractionAction.PLACE) == []

    def test_stop_draining_resumes_placement(self, task):
        task.start_draining()
        assert task.execute() == IDLE_DELAY
        task.stop_draining()
        assert task.execute() == PLACEMENT_DELAY


class TestRecentring:
    """Tests for X-pattern recentring driven by the task."""

    def test_recentres_with_empty_ledger_despite_blocked_tile(
        self, mock_collaborators, default_config
    ):
        config = replace(
            default_config, strategy="x_pattern", max_traps=5, recenter_on_empty=True
        )
        task = TrapTask(mock_collaborators, config)
        mock_collaborators.interaction.interact.side_effect = outcomes(
            PLACE={CORNER: InteractionOutcome.OCCUPIED_BY_OTHER}
        )
        for _ in range(3):
            assert task.execute() == FAILURE_DELAY
        assert task.blocked_tiles == frozenset({CORNER})
        assert len(task.state) == 0

        player = Coordinate(101, 101, 0)
        mock_collaborators.position.current_position.return_value = player

        assert task.execute() == PLACEMENT_DELAY
        assert task.strategy.current_center == player
        assert player in task.state

    def test_no_recentre_while_traps_tracked(self, mock_collaborators, default_config):
        config = replace(
            default_config, strategy="x_pattern", max_traps=5, recenter_on_empty=True
        )
        task = TrapTask(mock_collaborators, config)
        assert task.execute() == PLACEMENT_DELAY

        mock_collaborators.position.current_position.return_value = Coordinate(101, 101, 0)
        task.execute()
        assert task.strategy.current_center == CORNER
