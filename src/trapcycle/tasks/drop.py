"""
Inventory housekeeping: drop loot before the inventory fills up.

Collected traps return loot (bones, meat, feathers). Left alone it fills the
inventory and the next collection fails, so DropTask runs ahead of the
hunting task whenever free slots fall to a threshold.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable

import numpy as np

from trapcycle.collaborators import InventoryQuery
from trapcycle.geometry import make_rng

logger = logging.getLogger(__name__)

# Delay range after a drop pass, milliseconds (inclusive)
DROP_DELAY_MS = (600, 1200)


class DropTask:
    """
    Drops every held unit of the configured items.

    Attributes:
        items_to_drop: Item ids that may be discarded.
        free_slot_threshold: Runs once free slots are at or below this.
    """

    def __init__(
        self,
        inventory: InventoryQuery,
        items_to_drop: Iterable[int],
        free_slot_threshold: int = 4,
        rng: np.random.Generator | None = None,
    ) -> None:
        self.inventory = inventory
        self.items_to_drop = tuple(items_to_drop)
        self.free_slot_threshold = free_slot_threshold
        self._rng = rng if rng is not None else make_rng()

    def _held_items(self) -> list[int]:
        held = []
        for item_id in self.items_to_drop:
            slot = self.inventory.scan(item_id)
            if slot is not None and slot.count > 0:
                held.append(item_id)
        return held

    def can_execute(self) -> bool:
        if not self.items_to_drop:
            return False
        free = self.inventory.free_slots()
        if free is None or free > self.free_slot_threshold:
            return False
        return bool(self._held_items())

    def execute(self) -> int:
        dropped = 0
        for item_id in self._held_items():
            dropped += self.inventory.drop(item_id)
        logger.info("Dropped %d item(s) to free inventory space", dropped)
        low, high = DROP_DELAY_MS
        return int(self._rng.integers(low, high + 1))
