"""
Obstacle Stream
===============

A single obstacle pair that scrolls left and is recycled in place once it
has left the screen.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from merry_flappy.flappy_core.config_loader import GameConfig, get_config
from merry_flappy.flappy_core.rng import GapGenerator


@dataclass
class ObstaclePair:
    """Top and bottom obstacle separated by a vertical gap."""
    x: float
    gap_top: float
    gap_height: float
    width: float

    @property
    def gap_bottom(self) -> float:
        return self.gap_top + self.gap_height

    @property
    def right(self) -> float:
        return self.x + self.width


class ObstacleStream:
    """
    Owns the one live ObstaclePair.

    advance() scrolls the pair and, when it is fully off-screen, draws a new
    gap and moves it back to the spawn edge in the same call. The caller gets
    a pass count back and decides how many points it is worth.
    """

    def __init__(
        self,
        config: Optional[GameConfig] = None,
        generator: Optional[GapGenerator] = None
    ):
        """
        Initialize obstacle stream.

        Args:
            config: Game configuration. Uses default if None.
            generator: Gap generator. A fresh unseeded one if None.
        """
        if config is None:
            config = get_config()

        self._config = config
        self._generator = generator if generator is not None else GapGenerator(config)
        self._spawn_x = config.spawn_x
        self._initial_x = config.initial_obstacle_x

        self._pair = ObstaclePair(
            x=self._initial_x,
            gap_top=float((config.min_gap_top + config.max_gap_top) // 2),
            gap_height=config.obstacles.gap_height,
            width=config.obstacles.width
        )
        self._passes: int = 0

    @property
    def pair(self) -> ObstaclePair:
        """The live obstacle slot."""
        return self._pair

    @property
    def generator(self) -> GapGenerator:
        return self._generator

    @property
    def passes(self) -> int:
        """Number of recycles since the last reset."""
        return self._passes

    def advance(self, speed: float) -> int:
        """
        Scroll the obstacle by `speed` units.

        Returns:
            1 if the obstacle left the screen and was recycled, else 0.
        """
        pair = self._pair
        pair.x -= speed
        if pair.x <= -pair.width:
            pair.gap_top = float(self._generator.next_gap_top())
            pair.x = self._spawn_x
            self._passes += 1
            return 1
        return 0

    def reset_position(self) -> None:
        """Move the obstacle back to its in-run starting point (gap unchanged)."""
        self._pair.x = self._initial_x

    def reset(self) -> None:
        """Start-of-session reset: starting point and a fresh gap."""
        self._pair.x = self._initial_x
        self._pair.gap_top = float(self._generator.next_gap_top())
        self._passes = 0
