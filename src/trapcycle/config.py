"""
Configuration dataclass for trapcycle.

This module provides the configuration system for a hunting run. Every
tunable (trap type, budget, zones, placement strategy, movement and delay
ranges, inventory housekeeping) lives in a single HuntingConfig dataclass,
validated on construction.

Key Features:
    - Type-safe configuration using Python dataclasses
    - Automatic validation of parameters in __post_init__
    - Serialization from plain dicts via from_dict() and YAML via from_yaml()
    - A small catalogue of known trap types (TRAP_TYPES)

Architecture Role:
    HuntingConfig is used by:
    - tasks.hunting.TrapTask: budget, zones, strategy, delays
    - tasks.drop.DropTask: droppable items and free-slot threshold
    - hunter.build_task_manager: wiring everything together
    - __main__: the `simulate` command loads it from YAML

Example Usage:
    >>> config = HuntingConfig(zones=[{"x": 3200, "y": 3400, "width": 6, "height": 6}])
    >>> config.max_traps
    3
    >>> config = HuntingConfig.from_yaml("configs/bird_snares.yaml")

Dependencies:
    - dataclasses: For the dataclass decorator and field function
    - pyyaml: For config file parsing (optional, imported lazily)
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from trapcycle.geometry import Coordinate, Zone
from trapcycle.placement import STRATEGIES
from trapcycle.placement.line import LineOrientation

# =============================================================================
# TRAP TYPES
# =============================================================================


@dataclass(frozen=True)
class TrapType:
    """
    Static data for one kind of trap.

    Attributes:
        key: Configuration name.
        name: Human-readable name used in logs.
        item_id: Inventory item placed by the task.
        drop_items: Loot item ids worth dropping to keep the inventory clear.
    """

    key: str
    name: str
    item_id: int
    drop_items: tuple[int, ...] = ()


# Known trap types, keyed by configuration name
TRAP_TYPES: dict[str, TrapType] = {
    "bird_snare": TrapType("bird_snare", "bird snare", 10006, (526, 9978)),  # bones, raw bird meat
    "box_trap": TrapType("box_trap", "box trap", 10008),
}


def get_trap_type(key: str) -> TrapType:
    """
    Look up a trap type by configuration name.

    Raises:
        ValueError: If the key is not in TRAP_TYPES.
    """
    if key not in TRAP_TYPES:
        available = list(TRAP_TYPES.keys())
        raise ValueError(f"Unknown trap type: {key}. Available: {available}")
    return TRAP_TYPES[key]


def _default_zones() -> list[dict[str, int]]:
    return []


def _to_zone(entry: Zone | dict[str, int]) -> Zone:
    """Convert one `zones` entry, raising ValueError for malformed ones."""
    if isinstance(entry, Zone):
        return entry
    if not isinstance(entry, dict):
        raise ValueError(f"Each zone must be a mapping, got {entry!r}")
    missing = [key for key in ("x", "y", "width", "height") if key not in entry]
    if missing:
        raise ValueError(f"Zone {entry!r} is missing {', '.join(missing)}")
    return Zone.from_dict(entry)


# =============================================================================
# HUNTING CONFIG
# =============================================================================


@dataclass
class HuntingConfig:
    """
    Configuration for one hunting run.

    Attributes:
        trap_type (str): Key into TRAP_TYPES, e.g. "bird_snare".
        max_traps (int): Trap budget, 1 to 5 (the in-game hunter limit).
        zones (list): Hunting zones as dicts ({x, y, width, height, plane})
            or Zone objects. The first zone is the primary zone used for
            pattern anchors. At least one is required.

        strategy (str): Placement strategy name (see trapcycle.placement.STRATEGIES).
            "auto" chooses from max_traps.
        anchor (dict | None): Fixed pattern anchor {x, y, plane}. None uses
            the primary zone's centre.
        line_orientation (str): "horizontal", "vertical" or "random" (line only).
        recenter_on_empty (bool): Let the X pattern follow the player when no
            traps are out.
        max_drift (int): How far (tiles, Chebyshev) a re-centred X pattern may
            move from its base anchor.

        max_placement_attempts (int): Consecutive failures on one tile before
            the tile is skipped for the rest of the run.
        walk_timeout_ms (int): Movement timeout for every walk.
        approx_tolerance (int): Arrival tolerance in tiles when collecting.

        placement_delay_ms (tuple[int, int]): Inclusive delay range after placing.
        maintenance_delay_ms (tuple[int, int]): Delay range after collecting.
        idle_delay_ms (tuple[int, int]): Delay range when nothing needed doing.
        failure_delay_ms (tuple[int, int]): Delay range after a failed step.

        drop_items (list[int] | None): Items the drop task discards. None uses
            the trap type's loot list.
        drop_free_slot_threshold (int): Drop once free slots fall to this.
        seed (int | None): Seed for the shared random source.

    Notes:
        - The config is validated in __post_init__ to catch invalid values early
        - Use from_dict() or from_yaml() to create configs from files
    """

    # -------------------------------------------------------------------------
    # What and where
    # -------------------------------------------------------------------------
    trap_type: str = "bird_snare"
    max_traps: int = 3
    zones: list[Any] = field(default_factory=_default_zones)

    # -------------------------------------------------------------------------
    # Placement
    # -------------------------------------------------------------------------
    strategy: str = "auto"
    anchor: dict[str, int] | None = None
    line_orientation: str = "random"
    recenter_on_empty: bool = False
    max_drift: int = 3

    # -------------------------------------------------------------------------
    # Movement
    # -------------------------------------------------------------------------
    max_placement_attempts: int = 3
    walk_timeout_ms: int = 10_000
    approx_tolerance: int = 2

    # -------------------------------------------------------------------------
    # Delays (milliseconds, inclusive ranges)
    # -------------------------------------------------------------------------
    placement_delay_ms: tuple[int, int] = (100, 200)
    maintenance_delay_ms: tuple[int, int] = (800, 1400)
    idle_delay_ms: tuple[int, int] = (2000, 2800)
    failure_delay_ms: tuple[int, int] = (500, 800)

    # -------------------------------------------------------------------------
    # Inventory housekeeping
    # -------------------------------------------------------------------------
    drop_items: list[int] | None = None
    drop_free_slot_threshold: int = 4

    seed: int | None = None

    def __post_init__(self) -> None:
        """
        Validate configuration after initialization.

        Raises:
            ValueError: If any field is out of range or names something unknown.

        Notes:
            - Zone dicts are converted to Zone objects
            - Delay ranges given as lists (YAML) are converted to tuples
        """
        get_trap_type(self.trap_type)

        if not (1 <= self.max_traps <= 5):
            raise ValueError(
                f"max_traps must be in [1, 5], got {self.max_traps}. "
                "A hunter can never have more than five traps out."
            )

        # An empty `zones:` key in YAML arrives as None
        if self.zones is None:
            self.zones = []
        if not isinstance(self.zones, (list, tuple)):
            raise ValueError(
                f"zones must be a list of {{x, y, width, height}} mappings, "
                f"got {type(self.zones).__name__}"
            )
        self.zones = [_to_zone(z) for z in self.zones]
        if not self.zones:
            raise ValueError("At least one hunting zone is required")

        if self.anchor is not None:
            if not isinstance(self.anchor, dict) or not {"x", "y"} <= self.anchor.keys():
                raise ValueError(f"anchor must be a mapping with x and y, got {self.anchor!r}")

        if self.strategy not in STRATEGIES:
            available = list(STRATEGIES.keys())
            raise ValueError(f"Unknown strategy: {self.strategy}. Available: {available}")

        try:
            LineOrientation(self.line_orientation)
        except ValueError:
            options = [o.value for o in LineOrientation]
            raise ValueError(
                f"line_orientation must be one of {options}, got {self.line_orientation!r}"
            ) from None

        if self.max_drift < 0:
            raise ValueError(f"max_drift must be >= 0, got {self.max_drift}")
        if self.max_placement_attempts < 1:
            raise ValueError(
                f"max_placement_attempts must be >= 1, got {self.max_placement_attempts}"
            )
        if self.walk_timeout_ms < 1:
            raise ValueError(f"walk_timeout_ms must be >= 1, got {self.walk_timeout_ms}")
        if self.approx_tolerance < 0:
            raise ValueError(f"approx_tolerance must be >= 0, got {self.approx_tolerance}")

        for name in (
            "placement_delay_ms",
            "maintenance_delay_ms",
            "idle_delay_ms",
            "failure_delay_ms",
        ):
            bounds = tuple(getattr(self, name))
            if len(bounds) != 2 or not (0 <= bounds[0] <= bounds[1]):
                raise ValueError(
                    f"{name} must be a (low, high) pair with 0 <= low <= high, got {bounds}"
                )
            setattr(self, name, (int(bounds[0]), int(bounds[1])))

        if self.drop_free_slot_threshold < 0:
            raise ValueError(
                f"drop_free_slot_threshold must be >= 0, got {self.drop_free_slot_threshold}"
            )

    # -------------------------------------------------------------------------
    # Derived values
    # -------------------------------------------------------------------------

    def trap(self) -> TrapType:
        return get_trap_type(self.trap_type)

    def zone_list(self) -> list[Zone]:
        return list(self.zones)

    def anchor_coordinate(self) -> Coordinate | None:
        return Coordinate.from_dict(self.anchor) if self.anchor is not None else None

    def droppable_items(self) -> tuple[int, ...]:
        """Configured drop list, falling back to the trap type's loot."""
        if self.drop_items is not None:
            return tuple(self.drop_items)
        return self.trap().drop_items

    # -------------------------------------------------------------------------
    # Loading
    # -------------------------------------------------------------------------

    @classmethod
    def from_dict(cls, d: dict) -> HuntingConfig:
        """
        Create a HuntingConfig from a dictionary, ignoring unknown keys.

        Args:
            d: Dictionary containing configuration values. Unknown keys are ignored.

        Returns:
            A new HuntingConfig. Missing keys use their default values.
        """
        valid_keys = {f.name for f in cls.__dataclass_fields__.values()}
        filtered = {k: v for k, v in d.items() if k in valid_keys}
        return cls(**filtered)

    @classmethod
    def from_yaml(cls, path: str | Path) -> HuntingConfig:
        """
        Load a HuntingConfig from a YAML file.

        The file may hold the fields at top level or under a `hunting:` key.

        Raises:
            ImportError: If PyYAML is not installed.
            FileNotFoundError: If the file does not exist.
            ValueError: If the file does not contain a mapping.
        """
        try:
            import yaml
        except ImportError:
            raise ImportError(
                "PyYAML is required for config file loading. "
                "Install it with: pip install pyyaml"
            )

        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {path}")

        with open(path) as f:
            data = yaml.safe_load(f)

        if not isinstance(data, dict):
            raise ValueError(f"Config file {path} must contain a mapping")
        if isinstance(data.get("hunting"), dict):
            data = data["hunting"]
        return cls.from_dict(data)
