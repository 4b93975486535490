"""
Schedulable tasks for trapcycle.

Modules:
    - base: Task protocol, TaskManager, run_polling_loop
    - hunting: AbstractHuntingTask and the config-driven TrapTask
    - drop: DropTask, inventory housekeeping
"""

from trapcycle.tasks.base import DEFAULT_DELAY_MS, Task, TaskManager, run_polling_loop
from trapcycle.tasks.drop import DropTask
from trapcycle.tasks.hunting import AbstractHuntingTask, HuntingStats, TrapTask

__all__ = [
    "DEFAULT_DELAY_MS",
    "AbstractHuntingTask",
    "DropTask",
    "HuntingStats",
    "Task",
    "TaskManager",
    "TrapTask",
    "run_polling_loop",
]
