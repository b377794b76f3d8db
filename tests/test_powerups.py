"""
Tests for power-up state machines.
"""

import pytest

from merry_flappy.flappy_core.powerups import PowerUpKind, PowerUpManager, PowerUpPhase


@pytest.fixture
def manager(config):
    return PowerUpManager(config)


def tick_seconds(manager, seconds, step=0.1):
    for _ in range(int(round(seconds / step))):
        manager.tick(step)


class TestLifecycle:
    """Idle -> Active -> Cooldown -> Idle."""

    def test_trigger_activates(self, manager):
        assert manager.trigger(PowerUpKind.SLOW_MO)
        slow = manager[PowerUpKind.SLOW_MO]
        assert slow.phase is PowerUpPhase.ACTIVE
        assert slow.remaining == 4.0

    def test_active_expires_into_cooldown(self, manager):
        manager.trigger(PowerUpKind.SLOW_MO)
        slow = manager[PowerUpKind.SLOW_MO]

        tick_seconds(manager, 3.9)
        assert slow.phase is PowerUpPhase.ACTIVE

        manager.tick(0.1)
        assert slow.phase is PowerUpPhase.COOLDOWN
        assert slow.remaining == 10.0

    def test_trigger_rejected_while_active_or_cooling(self, manager):
        manager.trigger(PowerUpKind.SLOW_MO)
        assert not manager.trigger(PowerUpKind.SLOW_MO)

        tick_seconds(manager, 4.0)
        assert not manager.trigger(PowerUpKind.SLOW_MO)
        assert manager[PowerUpKind.SLOW_MO].phase is PowerUpPhase.COOLDOWN

    def test_cooldown_returns_to_idle(self, manager):
        manager.trigger(PowerUpKind.SLOW_MO)
        tick_seconds(manager, 4.0)
        tick_seconds(manager, 9.9)
        assert manager[PowerUpKind.SLOW_MO].phase is PowerUpPhase.COOLDOWN

        manager.tick(0.1)
        slow = manager[PowerUpKind.SLOW_MO]
        assert slow.phase is PowerUpPhase.IDLE
        assert slow.remaining == 0.0
        assert manager.trigger(PowerUpKind.SLOW_MO)

    def test_score_boost_durations(self, manager):
        manager.trigger(PowerUpKind.SCORE_BOOST)
        boost = manager[PowerUpKind.SCORE_BOOST]
        assert boost.remaining == 7.0
        tick_seconds(manager, 7.0)
        assert boost.phase is PowerUpPhase.COOLDOWN
        assert boost.remaining == 15.0

    def test_kinds_are_independent(self, manager):
        manager.trigger(PowerUpKind.SLOW_MO)
        assert manager[PowerUpKind.SCORE_BOOST].phase is PowerUpPhase.IDLE
        assert manager.trigger(PowerUpKind.SCORE_BOOST)
        assert manager.slow_mo_active
        assert manager.score_boost_active

    def test_idle_tick_is_noop(self, manager):
        manager.tick(5.0)
        assert all(p.phase is PowerUpPhase.IDLE for p in manager)


class TestReset:
    """Forced reset discards remaining time."""

    def test_reset_from_active(self, manager):
        manager.trigger(PowerUpKind.SLOW_MO)
        manager.reset_all()
        assert manager[PowerUpKind.SLOW_MO].phase is PowerUpPhase.IDLE
        assert manager[PowerUpKind.SLOW_MO].remaining == 0.0

    def test_reset_from_cooldown_allows_trigger(self, manager):
        manager.trigger(PowerUpKind.SCORE_BOOST)
        tick_seconds(manager, 7.0)
        manager.reset_all()
        assert manager.trigger(PowerUpKind.SCORE_BOOST)


class TestCallbacksAndParsing:

    def test_transition_callback(self, config):
        seen = []
        manager = PowerUpManager(config, on_transition=lambda k, o, n: seen.append((k, o, n)))
        manager.trigger("slow_mo")
        tick_seconds(manager, 4.0)
        assert seen == [
            (PowerUpKind.SLOW_MO, PowerUpPhase.IDLE, PowerUpPhase.ACTIVE),
            (PowerUpKind.SLOW_MO, PowerUpPhase.ACTIVE, PowerUpPhase.COOLDOWN),
        ]

    def test_reset_of_idle_is_silent(self, config):
        seen = []
        manager = PowerUpManager(config, on_transition=lambda *args: seen.append(args))
        manager.reset_all()
        assert seen == []

    def test_unknown_kind(self, manager):
        with pytest.raises(ValueError, match="Unknown power-up"):
            manager.trigger("turbo")

    def test_snapshot(self, manager):
        manager.trigger(PowerUpKind.SCORE_BOOST)
        snaps = {s.kind: s for s in manager.snapshot()}
        assert snaps[PowerUpKind.SCORE_BOOST].phase is PowerUpPhase.ACTIVE
        assert snaps[PowerUpKind.SLOW_MO].remaining == 0.0
