"""
Tests for HuntingConfig and the trap type catalogue.

Tests:
- Defaults and derived values
- Validation in __post_init__
- from_dict / from_yaml loading
"""

import pytest

from trapcycle.config import TRAP_TYPES, HuntingConfig, get_trap_type
from trapcycle.geometry import Coordinate, Zone

ZONE = {"x": 100, "y": 100, "width": 6, "height": 6}


class TestTrapTypes:
    """Tests for the trap catalogue."""

    def test_bird_snare(self):
        snare = get_trap_type("bird_snare")
        assert snare.item_id == 10006
        assert snare.drop_items == (526, 9978)

    def test_box_trap(self):
        assert TRAP_TYPES["box_trap"].item_id == 10008

    def test_unknown(self):
        with pytest.raises(ValueError, match="Available"):
            get_trap_type("deadfall")


class TestHuntingConfig:
    """Tests for HuntingConfig construction."""

    def test_defaults(self):
        config = HuntingConfig(zones=[ZONE])
        assert config.max_traps == 3
        assert config.strategy == "auto"
        assert config.zones == [Zone(100, 100, 6, 6, 0)]
        assert config.anchor_coordinate() is None
        assert config.droppable_items() == (526, 9978)

    def test_anchor_and_drop_override(self):
        config = HuntingConfig(
            zones=[ZONE], anchor={"x": 101, "y": 102, "plane": 0}, drop_items=[1, 2]
        )
        assert config.anchor_coordinate() == Coordinate(101, 102, 0)
        assert config.droppable_items() == (1, 2)

    def test_delay_lists_become_tuples(self):
        config = HuntingConfig(zones=[ZONE], idle_delay_ms=[100, 200])
        assert config.idle_delay_ms == (100, 200)

    @pytest.mark.parametrize(
        "overrides",
        [
            {"zones": []},
            {"max_traps": 0},
            {"max_traps": 6},
            {"trap_type": "deadfall"},
            {"strategy": "spiral"},
            {"line_orientation": "diagonal"},
            {"max_drift": -1},
            {"max_placement_attempts": 0},
            {"walk_timeout_ms": 0},
            {"failure_delay_ms": (800, 500)},
            {"placement_delay_ms": (-1, 5)},
            {"drop_free_slot_threshold": -1},
            {"zones": None},
            {"zones": "100,100,6,6"},
            {"zones": [[100, 100, 6, 6]]},
            {"zones": [{"x": 100, "y": 100}]},
            {"anchor": [101, 102]},
            {"anchor": {"x": 101}},
        ],
    )
    def test_invalid_values(self, overrides):
        values = {"zones": [ZONE], **overrides}
        with pytest.raises(ValueError):
            HuntingConfig(**values)

    def test_from_dict_ignores_unknown_keys(self):
        config = HuntingConfig.from_dict(
            {"zones": [ZONE], "max_traps": 5, "strategy": "x_pattern", "colour": "red"}
        )
        assert config.max_traps == 5
        assert config.strategy == "x_pattern"


class TestFromYaml:
    """Tests for HuntingConfig.from_yaml."""

    def test_nested_under_hunting(self, tmp_path):
        path = tmp_path / "hunt.yaml"
        path.write_text(
            "hunting:\n"
            "  max_traps: 4\n"
            "  strategy: cross\n"
            "  zones:\n"
            "    - {x: 10, y: 20, width: 3, height: 3}\n"
            "  idle_delay_ms: [1000, 1500]\n"
        )
        config = HuntingConfig.from_yaml(path)
        assert config.max_traps == 4
        assert config.strategy == "cross"
        assert config.zones == [Zone(10, 20, 3, 3)]
        assert config.idle_delay_ms == (1000, 1500)

    def test_top_level(self, tmp_path):
        path = tmp_path / "hunt.yaml"
        path.write_text("max_traps: 2\nzones:\n  - {x: 0, y: 0, width: 2, height: 2}\n")
        assert HuntingConfig.from_yaml(str(path)).max_traps == 2

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            HuntingConfig.from_yaml(tmp_path / "nope.yaml")

    def test_empty_zones_key(self, tmp_path):
        path = tmp_path / "hunt.yaml"
        path.write_text("hunting:\n  max_traps: 2\n  zones:\n")
        with pytest.raises(ValueError, match="zone"):
            HuntingConfig.from_yaml(path)

    def test_not_a_mapping(self, tmp_path):
        path = tmp_path / "list.yaml"
        path.write_text("- 1\n- 2\n")
        with pytest.raises(ValueError):
            HuntingConfig.from_yaml(path)
