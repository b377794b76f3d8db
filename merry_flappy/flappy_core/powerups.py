"""
Power-Ups
=========

Timed abilities sharing one state machine: Idle -> Active -> Cooldown -> Idle.

- SlowMo halves the obstacle scroll speed while Active.
- ScoreBoost doubles the points for each obstacle pass while Active.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, Iterator, Optional, Tuple, Union

from merry_flappy.flappy_core.config_loader import GameConfig, PowerUpTiming, get_config


class PowerUpKind(str, Enum):
    SLOW_MO = "slow_mo"
    SCORE_BOOST = "score_boost"

    @classmethod
    def parse(cls, value: Union[str, "PowerUpKind"]) -> "PowerUpKind":
        """Accept an enum member or its string value."""
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            raise ValueError(f"Unknown power-up kind: {value!r}") from None


class PowerUpPhase(str, Enum):
    IDLE = "idle"
    ACTIVE = "active"
    COOLDOWN = "cooldown"


@dataclass(frozen=True)
class PowerUpSnapshot:
    """Read-only view of one power-up."""
    kind: PowerUpKind
    phase: PowerUpPhase
    remaining: float


# (kind, old_phase, new_phase)
TransitionCallback = Callable[[PowerUpKind, PowerUpPhase, PowerUpPhase], None]


class PowerUp:
    """
    One timed ability.

    Durations come from configuration; the kind only decides what the effect
    means to the session.
    """

    def __init__(
        self,
        kind: PowerUpKind,
        timing: PowerUpTiming,
        epsilon: float = 1e-6,
        on_transition: Optional[TransitionCallback] = None
    ):
        self.kind = kind
        self._active_seconds = timing.active_seconds
        self._cooldown_seconds = timing.cooldown_seconds
        self._epsilon = epsilon
        self._on_transition = on_transition

        self._phase = PowerUpPhase.IDLE
        self._remaining: float = 0.0

    @property
    def phase(self) -> PowerUpPhase:
        return self._phase

    @property
    def remaining(self) -> float:
        """Seconds left in the current phase (0 when Idle)."""
        return self._remaining

    @property
    def is_active(self) -> bool:
        return self._phase is PowerUpPhase.ACTIVE

    @property
    def is_ready(self) -> bool:
        return self._phase is PowerUpPhase.IDLE

    def _set_phase(self, phase: PowerUpPhase, remaining: float) -> None:
        old = self._phase
        self._phase = phase
        self._remaining = remaining
        if old is not phase and self._on_transition is not None:
            self._on_transition(self.kind, old, phase)

    def trigger(self) -> bool:
        """
        Activate if Idle.

        Returns:
            True if the power-up became Active, False if rejected.
        """
        if self._phase is not PowerUpPhase.IDLE:
            return False
        self._set_phase(PowerUpPhase.ACTIVE, self._active_seconds)
        return True

    def tick(self, seconds: float) -> None:
        """
        Count down the current phase.

        Expiry zeroes the leftover; Active flips to a full Cooldown and
        Cooldown flips to Idle.
        """
        if self._phase is PowerUpPhase.IDLE:
            return

        self._remaining -= seconds
        if self._remaining > self._epsilon:
            return

        if self._phase is PowerUpPhase.ACTIVE:
            self._set_phase(PowerUpPhase.COOLDOWN, self._cooldown_seconds)
        else:
            self._set_phase(PowerUpPhase.IDLE, 0.0)

    def reset(self) -> None:
        """Force back to Idle, discarding any remaining time."""
        self._set_phase(PowerUpPhase.IDLE, 0.0)

    def snapshot(self) -> PowerUpSnapshot:
        return PowerUpSnapshot(self.kind, self._phase, self._remaining)


class PowerUpManager:
    """Holds one PowerUp per kind."""

    def __init__(
        self,
        config: Optional[GameConfig] = None,
        on_transition: Optional[TransitionCallback] = None
    ):
        """
        Initialize power-ups.

        Args:
            config: Game configuration. Uses default if None.
            on_transition: Called on every phase change.
        """
        if config is None:
            config = get_config()

        power = config.power_ups
        self._power_ups: Dict[PowerUpKind, PowerUp] = {
            PowerUpKind.SLOW_MO: PowerUp(
                PowerUpKind.SLOW_MO, power.slow_mo, power.epsilon, on_transition
            ),
            PowerUpKind.SCORE_BOOST: PowerUp(
                PowerUpKind.SCORE_BOOST, power.score_boost, power.epsilon, on_transition
            ),
        }

    def __getitem__(self, kind: Union[str, PowerUpKind]) -> PowerUp:
        return self._power_ups[PowerUpKind.parse(kind)]

    def __iter__(self) -> Iterator[PowerUp]:
        return iter(self._power_ups.values())

    @property
    def slow_mo_active(self) -> bool:
        return self._power_ups[PowerUpKind.SLOW_MO].is_active

    @property
    def score_boost_active(self) -> bool:
        return self._power_ups[PowerUpKind.SCORE_BOOST].is_active

    def trigger(self, kind: Union[str, PowerUpKind]) -> bool:
        return self[kind].trigger()

    def tick(self, seconds: float) -> None:
        for power_up in self._power_ups.values():
            power_up.tick(seconds)

    def reset_all(self) -> None:
        for power_up in self._power_ups.values():
            power_up.reset()

    def snapshot(self) -> Tuple[PowerUpSnapshot, ...]:
        return tuple(p.snapshot() for p in self._power_ups.values())
