"""
RNG - Gap Generator
===================

Draws obstacle gap positions from a seedable generator so that runs are
reproducible for replays and tests.
"""

from __future__ import annotations

import random
from typing import Optional, Tuple

from merry_flappy.flappy_core.config_loader import GameConfig, get_config


class GapGenerator:
    """
    Uniform integer gap-top generator.

    Draws are uniform over [min_gap_top, max_gap_top] and are clamped to
    [0, world_height - gap_height] so the gap never leaves the viewport.
    """

    def __init__(
        self,
        config: Optional[GameConfig] = None,
        seed: Optional[int] = None
    ):
        """
        Initialize gap generator.

        Args:
            config: Game configuration. Uses default if None.
            seed: Random seed for reproducibility. Random if None.
        """
        if config is None:
            config = get_config()

        self._config = config
        self._seed = seed
        self._rng = random.Random(seed)

        self._min_gap_top = config.min_gap_top
        self._max_gap_top = config.max_gap_top
        self._ceiling = int(config.world.height - config.obstacles.gap_height)

    @property
    def bounds(self) -> Tuple[int, int]:
        """(min_gap_top, max_gap_top) draw range."""
        return (self._min_gap_top, self._max_gap_top)

    @property
    def seed(self) -> Optional[int]:
        return self._seed

    def next_gap_top(self) -> int:
        """Draw the next gap top."""
        gap_top = self._rng.randint(self._min_gap_top, self._max_gap_top)
        return max(0, min(gap_top, self._ceiling))

    def reset(self, seed: Optional[int] = None) -> None:
        """
        Reset the generator.

        Args:
            seed: New random seed. Keeps current if None.
        """
        if seed is not None:
            self._seed = seed
        self._rng = random.Random(self._seed)
