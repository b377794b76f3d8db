"""
Tick Scheduler
==============

One delta-time accumulator feeding two fixed cadences: the fast physics tick
and the slow power-up timer step.
"""

from __future__ import annotations

from typing import List, Optional, Tuple

from merry_flappy.flappy_core.config_loader import GameConfig, get_config

PHYSICS_TICK = "tick"
TIMER_STEP = "timer"


class TickScheduler:
    """
    Converts elapsed wall-clock time into whole physics ticks and timer steps.

    Leftover time stays in the accumulators, so the timer channel decays at
    exactly one second per second no matter how the frames are sliced.
    Physics ticks past `max_ticks_per_advance` are dropped to avoid a
    catch-up spiral after a long stall; timer steps are never dropped.
    """

    def __init__(
        self,
        tick_seconds: float,
        timer_step_seconds: float,
        max_ticks_per_advance: int = 10
    ):
        if tick_seconds <= 0 or timer_step_seconds <= 0:
            raise ValueError("Scheduler cadences must be positive")
        self._tick_seconds = tick_seconds
        self._timer_step_seconds = timer_step_seconds
        self._max_ticks = max_ticks_per_advance

        self._physics_acc: float = 0.0
        self._timer_acc: float = 0.0
        self._running: bool = False
        self._dropped_ticks: int = 0

    @classmethod
    def from_config(cls, config: Optional[GameConfig] = None) -> "TickScheduler":
        if config is None:
            config = get_config()
        return cls(
            tick_seconds=config.physics.tick_seconds,
            timer_step_seconds=config.power_ups.timer_step_seconds,
            max_ticks_per_advance=config.physics.max_ticks_per_advance
        )

    @property
    def running(self) -> bool:
        return self._running

    @property
    def tick_seconds(self) -> float:
        return self._tick_seconds

    @property
    def timer_step_seconds(self) -> float:
        return self._timer_step_seconds

    @property
    def dropped_ticks(self) -> int:
        """Physics ticks discarded by the catch-up cap since construction."""
        return self._dropped_ticks

    def advance(self, dt: float) -> Tuple[int, int]:
        """
        Accumulate `dt` seconds.

        Returns:
            (physics_ticks, timer_steps) due now.
        """
        if dt < 0:
            raise ValueError(f"dt must be non-negative, got {dt}")
        if not self._running:
            return 0, 0

        self._physics_acc += dt
        self._timer_acc += dt

        # Small tolerance so 0.1 + 0.1 + 0.1 counts as three steps of 0.1
        ticks = int((self._physics_acc + 1e-9) // self._tick_seconds)
        self._physics_acc = max(0.0, self._physics_acc - ticks * self._tick_seconds)
        steps = int((self._timer_acc + 1e-9) // self._timer_step_seconds)
        self._timer_acc = max(0.0, self._timer_acc - steps * self._timer_step_seconds)

        if ticks > self._max_ticks:
            self._dropped_ticks += ticks - self._max_ticks
            ticks = self._max_ticks

        return ticks, steps

    def advance_ordered(self, dt: float) -> List[str]:
        """
        Accumulate `dt` seconds and list the due events in time order.

        Each event is PHYSICS_TICK or TIMER_STEP, placed at the moment its
        cadence fires inside the frame. A tick and a timer step due at the
        same moment keep the tick first.
        """
        physics_start = self._physics_acc
        timer_start = self._timer_acc
        ticks, steps = self.advance(dt)

        events = [(i * self._tick_seconds - physics_start, 0, PHYSICS_TICK) for i in range(1, ticks + 1)]
        events += [(j * self._timer_step_seconds - timer_start, 1, TIMER_STEP) for j in range(1, steps + 1)]
        events.sort()
        return [kind for _, _, kind in events]

    def cancel(self) -> None:
        """Stop both cadences and discard pending time."""
        self._running = False
        self._physics_acc = 0.0
        self._timer_acc = 0.0

    def resume(self) -> None:
        """Restart from empty accumulators."""
        self._physics_acc = 0.0
        self._timer_acc = 0.0
        self._running = True
