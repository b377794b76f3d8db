"""
Physics Integrator
==================

Fixed-step vertical integrator for the character. Gravity accumulates into
velocity up to a terminal speed, and a jump overwrites velocity outright.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple

from merry_flappy.flappy_core.config_loader import GameConfig, get_config


@dataclass
class Character:
    """The falling character. Y grows downward (screen coordinates)."""
    y: float
    velocity: float = 0.0

    def reset(self, y: float) -> None:
        self.y = y
        self.velocity = 0.0


def integrate(
    position: float,
    velocity: float,
    gravity: float,
    max_fall: float,
    adjustment: float = 1.0
) -> Tuple[float, float]:
    """
    Advance one tick.

    Args:
        position: Current vertical position.
        velocity: Current vertical velocity (units/tick).
        gravity: Gravity per tick.
        max_fall: Terminal velocity.
        adjustment: Per-platform speed factor applied to gravity and the cap.

    Returns:
        (next_position, next_velocity)
    """
    next_velocity = min(velocity + gravity * adjustment, max_fall * adjustment)
    return position + next_velocity, next_velocity


class PhysicsIntegrator:
    """Applies gravity and jump impulses to a Character."""

    def __init__(self, config: Optional[GameConfig] = None):
        """
        Initialize integrator.

        Args:
            config: Game configuration. Uses default if None.
        """
        if config is None:
            config = get_config()

        self._gravity = config.physics.gravity
        self._max_fall = config.physics.max_fall
        self._jump_strength = config.physics.jump_strength
        self._adjustment = config.physics.speed_adjustment

    @property
    def jump_velocity(self) -> float:
        """Velocity set by a jump (negative is upward)."""
        return -self._jump_strength * self._adjustment

    def step(self, character: Character) -> None:
        """Advance the character by one tick."""
        character.y, character.velocity = integrate(
            character.y,
            character.velocity,
            self._gravity,
            self._max_fall,
            self._adjustment
        )

    def jump(self, character: Character) -> None:
        """Overwrite velocity with the jump impulse."""
        character.velocity = self.jump_velocity
