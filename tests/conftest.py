"""
Shared pytest fixtures for the trapcycle test suite.

This module provides common test fixtures used across all test modules,
including mocked host collaborators, default configurations, and a seeded
simulated world.

Fixtures:
    random_seed: Fixed seed for reproducible tests
    rng: numpy Generator seeded with random_seed
    zone: 6x6 hunting zone used by most tests
    default_config: HuntingConfig over `zone`
    mock_collaborators: Collaborators bundle of MagicMocks
    world: SimulatedWorld over `zone`
"""
import pytest
from unittest.mock import MagicMock

from trapcycle.collaborators import (
    Collaborators,
    InteractionOutcome,
    InventorySlot,
)
from trapcycle.config import HuntingConfig
from trapcycle.geometry import Coordinate, Zone, make_rng
from trapcycle.sim import SimulatedWorld


# =============================================================================
# RANDOMNESS
# =============================================================================

@pytest.fixture
def random_seed() -> int:
    """
    Provide a fixed random seed for reproducible tests.

    Returns:
        Fixed seed value (42) for the numpy Generator.
    """
    return 42


@pytest.fixture
def rng(random_seed: int):
    """numpy Generator seeded with random_seed."""
    return make_rng(random_seed)


# =============================================================================
# GEOMETRY / CONFIGURATION FIXTURES
# =============================================================================

@pytest.fixture
def zone() -> Zone:
    """
    A 6x6 zone at (100, 100) on plane 0.

    Covers x 100..105 and y 100..105; its centre is (103, 103, 0).
    """
    return Zone(100, 100, 6, 6, 0)


@pytest.fixture
def default_config(zone: Zone, random_seed: int) -> HuntingConfig:
    """
    Create a HuntingConfig over the shared zone.

    Returns:
        HuntingConfig with three bird snares, the auto strategy, and
        single-value delay ranges so delays are predictable.

    Example:
        >>> def test_budget(default_config):
        ...     assert default_config.max_traps == 3
    """
    return HuntingConfig(
        trap_type="bird_snare",
        max_traps=3,
        zones=[zone],
        placement_delay_ms=(150, 150),
        maintenance_delay_ms=(1000, 1000),
        idle_delay_ms=(2400, 2400),
        failure_delay_ms=(600, 600),
        seed=random_seed,
    )


# =============================================================================
# COLLABORATOR FIXTURES
# =============================================================================

@pytest.fixture
def mock_collaborators() -> Collaborators:
    """
    Create a Collaborators bundle made of MagicMocks.

    Returns:
        Collaborators configured so that:
        - inventory.scan() reports 3 bird snares
        - inventory.free_slots() reports 20
        - position.current_position() is (103, 103, 0)
        - movement.walk_to() always arrives
        - interaction.interact() always succeeds

    Example:
        >>> def test_walk_fails(mock_collaborators):
        ...     mock_collaborators.movement.walk_to.return_value = False
    """
    inventory = MagicMock()
    inventory.scan.return_value = InventorySlot(10006, 3)
    inventory.free_slots.return_value = 20
    inventory.drop.return_value = 0

    movement = MagicMock()
    movement.walk_to.return_value = True

    interaction = MagicMock()
    interaction.interact.return_value = InteractionOutcome.SUCCEEDED

    position = MagicMock()
    position.current_position.return_value = Coordinate(103, 103, 0)

    return Collaborators(
        inventory=inventory,
        movement=movement,
        interaction=interaction,
        position=position,
    )


@pytest.fixture
def world(zone: Zone, random_seed: int) -> SimulatedWorld:
    """
    Create a seeded SimulatedWorld over the shared zone.

    Returns:
        SimulatedWorld with three bird snares, bird-snare loot, and no
        random catches (tests trigger traps explicitly).
    """
    return SimulatedWorld(
        [zone],
        trap_item_id=10006,
        supplies=3,
        loot=(526, 9978),
        catch_chance=0.0,
        rng=make_rng(random_seed),
    )
