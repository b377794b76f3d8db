"""
Configuration Loader
====================

Loads and validates game_config.yaml, providing typed access to all parameters.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import yaml


@dataclass(frozen=True)
class WorldConfig:
    """Viewport geometry."""
    width: int
    height: int
    respawn_offset: int          # Extra distance beyond the right edge on (re)start


@dataclass(frozen=True)
class CharacterConfig:
    """Character box and starting point."""
    size: float
    slot_x: float                # Left edge of the fixed horizontal slot
    start_y: float


@dataclass(frozen=True)
class PhysicsConfig:
    """Fixed-step integrator parameters."""
    gravity: float
    max_fall: float
    jump_strength: float
    speed_adjustment: float
    tick_seconds: float
    max_ticks_per_advance: int


@dataclass(frozen=True)
class ObstacleConfig:
    """Obstacle pair geometry and scroll speed."""
    width: float
    gap_height: float
    base_speed: float
    gap_margin_top: int
    gap_margin_bottom: int


@dataclass(frozen=True)
class ScoringConfig:
    """Scoring, lives and speed ramp."""
    points_per_pass: int
    boosted_points_per_pass: int
    life_award_interval: int
    starting_lives: int
    max_lives: int
    speed_step: float
    max_speed_multiplier: float
    slow_mo_factor: float


@dataclass(frozen=True)
class PowerUpTiming:
    """Durations for a single power-up kind."""
    active_seconds: float
    cooldown_seconds: float


@dataclass(frozen=True)
class PowerUpConfig:
    """Power-up timer parameters."""
    timer_step_seconds: float
    epsilon: float
    slow_mo: PowerUpTiming
    score_boost: PowerUpTiming


@dataclass(frozen=True)
class LeaderboardConfig:
    """Leaderboard persistence settings."""
    max_entries: int
    storage_key: str
    default_name: str
    path: Optional[str]


@dataclass(frozen=True)
class GameConfig:
    """
    Complete game configuration loaded from YAML.

    All values are immutable to prevent accidental modification during runtime.
    """
    world: WorldConfig
    character: CharacterConfig
    physics: PhysicsConfig
    obstacles: ObstacleConfig
    scoring: ScoringConfig
    power_ups: PowerUpConfig
    leaderboard: LeaderboardConfig

    @property
    def min_gap_top(self) -> int:
        """Smallest gap top the obstacle stream may draw."""
        return self.obstacles.gap_margin_top

    @property
    def max_gap_top(self) -> int:
        """Largest gap top the obstacle stream may draw."""
        return int(
            self.world.height
            - self.obstacles.gap_height
            - self.obstacles.gap_margin_bottom
        )

    @property
    def spawn_x(self) -> float:
        """Obstacle X after a pass (right edge of the viewport)."""
        return float(self.world.width)

    @property
    def initial_obstacle_x(self) -> float:
        """Obstacle X at session start and after a lost life."""
        return float(self.world.width + self.world.respawn_offset)


def _parse_timing(data: dict, name: str) -> PowerUpTiming:
    """Parse active/cooldown durations for one power-up."""
    if data is None:
        raise ValueError(f"Missing power_ups.{name} section")
    return PowerUpTiming(
        active_seconds=float(data["active_seconds"]),
        cooldown_seconds=float(data["cooldown_seconds"])
    )


def _validate_config(config: GameConfig) -> None:
    """Validate configuration consistency."""
    world = config.world
    obstacles = config.obstacles

    if world.width <= 0 or world.height <= 0:
        raise ValueError(f"world size must be positive, got {world.width}x{world.height}")

    if config.character.size <= 0 or config.character.size >= world.height:
        raise ValueError(f"character.size must be in (0, {world.height}), got {config.character.size}")

    if not (0 < config.character.start_y < world.height - config.character.size):
        raise ValueError(f"character.start_y ({config.character.start_y}) must lie inside the world")

    if obstacles.width <= 0:
        raise ValueError(f"obstacles.width must be positive, got {obstacles.width}")

    if not (config.character.size < obstacles.gap_height < world.height):
        raise ValueError(
            f"obstacles.gap_height ({obstacles.gap_height}) must exceed the character size "
            f"and fit inside the world height ({world.height})"
        )

    # Gap range must be non-empty
    if config.min_gap_top > config.max_gap_top:
        raise ValueError(
            f"gap margins leave no room for the gap: min_gap_top={config.min_gap_top}, "
            f"max_gap_top={config.max_gap_top}"
        )

    if config.physics.tick_seconds <= 0:
        raise ValueError(f"physics.tick_seconds must be positive, got {config.physics.tick_seconds}")

    if config.physics.max_ticks_per_advance < 1:
        raise ValueError("physics.max_ticks_per_advance must be at least 1")

    scoring = config.scoring
    if not (0 <= scoring.starting_lives <= scoring.max_lives):
        raise ValueError(
            f"scoring.starting_lives ({scoring.starting_lives}) must be within "
            f"[0, max_lives={scoring.max_lives}]"
        )

    if scoring.life_award_interval <= 0:
        raise ValueError("scoring.life_award_interval must be positive")

    if config.power_ups.timer_step_seconds <= 0:
        raise ValueError("power_ups.timer_step_seconds must be positive")

    for name in ("slow_mo", "score_boost"):
        timing = getattr(config.power_ups, name)
        if timing.active_seconds <= 0 or timing.cooldown_seconds <= 0:
            raise ValueError(f"power_ups.{name} durations must be positive, got {timing}")

    if config.leaderboard.max_entries < 1:
        raise ValueError("leaderboard.max_entries must be at least 1")


def load_config(config_path: Optional[str] = None) -> GameConfig:
    """
    Load and validate game configuration from YAML.

    Args:
        config_path: Path to game_config.yaml. If None, uses default location.

    Returns:
        Validated GameConfig instance.

    Raises:
        FileNotFoundError: If config file doesn't exist.
        ValueError: If config validation fails.
    """
    if config_path is None:
        config_path = os.path.join(
            os.path.dirname(os.path.dirname(__file__)),
            "game_config.yaml"
        )

    config_path = Path(config_path)
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(config_path, "r") as f:
        raw = yaml.safe_load(f)

    world_data = raw["world"]
    world = WorldConfig(
        width=int(world_data["width"]),
        height=int(world_data["height"]),
        respawn_offset=int(world_data.get("respawn_offset", 200))
    )

    char_data = raw["character"]
    character = CharacterConfig(
        size=float(char_data["size"]),
        slot_x=float(char_data["slot_x"]),
        start_y=float(char_data["start_y"])
    )

    physics_data = raw["physics"]
    physics = PhysicsConfig(
        gravity=float(physics_data["gravity"]),
        max_fall=float(physics_data["max_fall"]),
        jump_strength=float(physics_data["jump_strength"]),
        speed_adjustment=float(physics_data.get("speed_adjustment", 1.0)),
        tick_seconds=float(physics_data["tick_seconds"]),
        max_ticks_per_advance=int(physics_data.get("max_ticks_per_advance", 10))
    )

    obstacle_data = raw["obstacles"]
    obstacles = ObstacleConfig(
        width=float(obstacle_data["width"]),
        gap_height=float(obstacle_data["gap_height"]),
        base_speed=float(obstacle_data["base_speed"]),
        gap_margin_top=int(obstacle_data.get("gap_margin_top", 100)),
        gap_margin_bottom=int(obstacle_data.get("gap_margin_bottom", 100))
    )

    scoring_data = raw["scoring"]
    scoring = ScoringConfig(
        points_per_pass=int(scoring_data.get("points_per_pass", 1)),
        boosted_points_per_pass=int(scoring_data.get("boosted_points_per_pass", 2)),
        life_award_interval=int(scoring_data.get("life_award_interval", 10)),
        starting_lives=int(scoring_data.get("starting_lives", 0)),
        max_lives=int(scoring_data.get("max_lives", 5)),
        speed_step=float(scoring_data.get("speed_step", 0.2)),
        max_speed_multiplier=float(scoring_data.get("max_speed_multiplier", 2.0)),
        slow_mo_factor=float(scoring_data.get("slow_mo_factor", 0.5))
    )

    power_data = raw["power_ups"]
    power_ups = PowerUpConfig(
        timer_step_seconds=float(power_data.get("timer_step_seconds", 0.1)),
        epsilon=float(power_data.get("epsilon", 1e-6)),
        slow_mo=_parse_timing(power_data.get("slow_mo"), "slow_mo"),
        score_boost=_parse_timing(power_data.get("score_boost"), "score_boost")
    )

    # Leaderboard section is optional
    lb_data = raw.get("leaderboard", {}) or {}
    path = lb_data.get("path")
    leaderboard = LeaderboardConfig(
        max_entries=int(lb_data.get("max_entries", 5)),
        storage_key=str(lb_data.get("storage_key", "leaderboard")),
        default_name=str(lb_data.get("default_name", "Anon")),
        path=str(path) if path is not None else None
    )

    config = GameConfig(
        world=world,
        character=character,
        physics=physics,
        obstacles=obstacles,
        scoring=scoring,
        power_ups=power_ups,
        leaderboard=leaderboard
    )

    _validate_config(config)
    return config


# Module-level singleton for convenience
_cached_config: Optional[GameConfig] = None


def get_config() -> GameConfig:
    """Get the cached game configuration, loading if necessary."""
    global _cached_config
    if _cached_config is None:
        _cached_config = load_config()
    return _cached_config


def reload_config(config_path: Optional[str] = None) -> GameConfig:
    """Reload the configuration (useful for testing)."""
    global _cached_config
    _cached_config = load_config(config_path)
    return _cached_config
