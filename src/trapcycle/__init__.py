"""trapcycle - place, watch and re-service traps inside hunting zones.

A small task engine: a placement strategy picks tiles, a ledger tracks each
trap's state, and a scheduler runs one bounded work cycle per poll.
"""

__version__ = "0.1.0"

from trapcycle.config import HuntingConfig
from trapcycle.geometry import Coordinate, Zone
from trapcycle.hunter import build_hunter, build_task_manager
from trapcycle.tasks import TaskManager, TrapTask

__all__ = [
    "Coordinate",
    "HuntingConfig",
    "TaskManager",
    "TrapTask",
    "Zone",
    "__version__",
    "build_hunter",
    "build_task_manager",
]
