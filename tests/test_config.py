"""
Tests for configuration loading and validation.
"""

import pytest
import yaml

from merry_flappy.flappy_core.config_loader import get_config, load_config, reload_config


@pytest.fixture
def raw_config():
    """The packaged YAML as a plain dict."""
    import os
    import merry_flappy
    path = os.path.join(os.path.dirname(merry_flappy.__file__), "game_config.yaml")
    with open(path, "r") as f:
        return yaml.safe_load(f)


def write_config(tmp_path, raw):
    path = tmp_path / "game_config.yaml"
    path.write_text(yaml.safe_dump(raw))
    return str(path)


class TestLoadConfig:
    """Test YAML loading."""

    def test_default_values(self, config):
        """Packaged config carries the original game's constants."""
        assert config.world.width == 800
        assert config.world.height == 600
        assert config.character.size == 35
        assert config.obstacles.width == 60
        assert config.obstacles.gap_height == 160
        assert config.scoring.max_lives == 5
        assert config.power_ups.slow_mo.active_seconds == 4.0
        assert config.power_ups.slow_mo.cooldown_seconds == 10.0
        assert config.power_ups.score_boost.active_seconds == 7.0
        assert config.power_ups.score_boost.cooldown_seconds == 15.0
        assert config.leaderboard.max_entries == 5
        assert config.leaderboard.default_name == "Anon"

    def test_gap_bounds(self, config):
        """Gap range is height minus gap minus margins."""
        assert config.min_gap_top == 100
        assert config.max_gap_top == 600 - 160 - 100

    def test_obstacle_positions(self, config):
        assert config.spawn_x == 800.0
        assert config.initial_obstacle_x == 1000.0

    def test_config_is_immutable(self, config):
        with pytest.raises(Exception):
            config.world.width = 10

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_config(str(tmp_path / "nope.yaml"))

    def test_cached_config(self):
        assert get_config() is get_config()
        fresh = reload_config()
        assert get_config() is fresh


class TestValidation:
    """Test rejection of inconsistent configs."""

    def test_gap_too_large_for_margins(self, tmp_path, raw_config):
        raw_config["obstacles"]["gap_margin_top"] = 300
        raw_config["obstacles"]["gap_margin_bottom"] = 300
        with pytest.raises(ValueError, match="gap margins"):
            load_config(write_config(tmp_path, raw_config))

    def test_starting_lives_above_cap(self, tmp_path, raw_config):
        raw_config["scoring"]["starting_lives"] = 6
        with pytest.raises(ValueError, match="starting_lives"):
            load_config(write_config(tmp_path, raw_config))

    def test_non_positive_duration(self, tmp_path, raw_config):
        raw_config["power_ups"]["score_boost"]["cooldown_seconds"] = 0
        with pytest.raises(ValueError, match="score_boost"):
            load_config(write_config(tmp_path, raw_config))

    def test_gap_smaller_than_character(self, tmp_path, raw_config):
        raw_config["obstacles"]["gap_height"] = 20
        with pytest.raises(ValueError, match="gap_height"):
            load_config(write_config(tmp_path, raw_config))

    def test_leaderboard_section_optional(self, tmp_path, raw_config):
        del raw_config["leaderboard"]
        config = load_config(write_config(tmp_path, raw_config))
        assert config.leaderboard.max_entries == 5
        assert config.leaderboard.path is None
