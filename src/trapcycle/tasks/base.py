"""
Task contract and the first-eligible task scheduler.

Architecture Role:
    The host polls the TaskManager; the manager walks its tasks in
    registration order and runs the first one that reports it can execute.
    Whatever delay that task returns is handed back to the host, which sleeps
    before polling again.

        host loop → TaskManager.execute_next_task() → Task.execute() → delay_ms
            ↑                                                            |
            +------------------------- sleep(delay_ms) ------------------+

Design Decisions:
    - Priority by position: earlier tasks win. Registration order is the
      whole scheduling policy.
    - Exactly one task per poll, so a slow task never starves the host.
    - No eligible task is not an error; the manager returns DEFAULT_DELAY_MS.
    - Delays are integer milliseconds; the sleep function is injectable so
      simulations can run without wall-clock waits.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable, Iterable
from typing import Protocol, runtime_checkable

logger = logging.getLogger(__name__)

# Delay returned when no task is eligible
DEFAULT_DELAY_MS = 1000


@runtime_checkable
class Task(Protocol):
    """A unit of work the TaskManager can schedule."""

    def can_execute(self) -> bool:
        """Cheap eligibility check, called every poll."""
        ...

    def execute(self) -> int:
        """Run one cycle and return the delay in milliseconds before the next poll."""
        ...


class TaskManager:
    """
    Ordered task list with first-eligible dispatch.

    Example:
        >>> manager = TaskManager()
        >>> manager.execute_next_task()
        1000
    """

    def __init__(self, tasks: Iterable[Task] = ()) -> None:
        self._tasks: list[Task] = list(tasks)

    @property
    def tasks(self) -> tuple[Task, ...]:
        return tuple(self._tasks)

    def add_tasks(self, *tasks: Task) -> None:
        """Append tasks; they rank below every task already registered."""
        self._tasks.extend(tasks)

    def clear_tasks(self) -> None:
        self._tasks.clear()

    def execute_next_task(self) -> int:
        """
        Run the first task whose can_execute() is True.

        Returns:
            That task's delay, or DEFAULT_DELAY_MS when none is eligible.
        """
        for task in self._tasks:
            if task.can_execute():
                delay = task.execute()
                logger.debug("%s finished, next poll in %d ms", type(task).__name__, delay)
                return delay
        logger.debug("No eligible task, next poll in %d ms", DEFAULT_DELAY_MS)
        return DEFAULT_DELAY_MS


def run_polling_loop(
    manager: TaskManager,
    cycles: int,
    sleep: Callable[[float], None] = time.sleep,
    on_cycle: Callable[[int, int], None] | None = None,
) -> int:
    """
    Drive the manager for a fixed number of polls.

    Args:
        manager: Scheduler to poll.
        cycles: Number of polls.
        sleep: Called with each delay in seconds.
        on_cycle: Optional callback receiving (cycle_index, delay_ms).

    Returns:
        Total requested delay in milliseconds.
    """
    if cycles < 0:
        raise ValueError(f"cycles must be >= 0, got {cycles}")

    total_ms = 0
    for cycle in range(cycles):
        delay = manager.execute_next_task()
        total_ms += delay
        if on_cycle is not None:
            on_cycle(cycle, delay)
        sleep(delay / 1000.0)
    return total_ms
