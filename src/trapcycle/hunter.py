"""
Wiring: turn a HuntingConfig and a host into a ready TaskManager.

Task order is the priority order. Dropping loot comes first so the
inventory always has room for the traps the hunting task collects.

Example Usage:
    >>> config = HuntingConfig.from_yaml("configs/bird_snares.yaml")
    >>> hunter = build_hunter(config, Collaborators.from_host(world))
    >>> delay_ms = hunter.manager.execute_next_task()
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass

import numpy as np

from trapcycle.collaborators import Collaborators
from trapcycle.config import HuntingConfig
from trapcycle.geometry import make_rng
from trapcycle.tasks import DropTask, TaskManager, TrapTask

logger = logging.getLogger(__name__)


@dataclass
class Hunter:
    """The scheduler plus direct handles on the tasks it runs."""

    manager: TaskManager
    trap_task: TrapTask
    drop_task: DropTask


def build_hunter(
    config: HuntingConfig,
    collaborators: Collaborators,
    rng: np.random.Generator | None = None,
    clock: Callable[[], float] = time.monotonic,
) -> Hunter:
    """
    Build the drop and trap tasks for a run and register them in order.

    Args:
        config: Validated run configuration.
        collaborators: Host services.
        rng: Shared random source; defaults to one seeded from config.seed.
        clock: Timestamp source for the trap ledger.
    """
    rng = rng if rng is not None else make_rng(config.seed)

    drop_task = DropTask(
        collaborators.inventory,
        config.droppable_items(),
        config.drop_free_slot_threshold,
        rng=rng,
    )
    trap_task = TrapTask(collaborators, config, rng=rng, clock=clock)

    manager = TaskManager()
    manager.add_tasks(drop_task, trap_task)
    logger.info(
        "Hunter ready: %s x%d using %s",
        config.trap().name,
        config.max_traps,
        trap_task.strategy.name,
    )
    return Hunter(manager=manager, trap_task=trap_task, drop_task=drop_task)


def build_task_manager(
    config: HuntingConfig,
    collaborators: Collaborators,
    rng: np.random.Generator | None = None,
) -> TaskManager:
    """Shorthand for build_hunter(...).manager."""
    return build_hunter(config, collaborators, rng).manager
