"""
Tests for the session state machine and per-tick orchestration.
"""

import dataclasses

import pytest

from conftest import with_physics, with_scoring
from merry_flappy.flappy_core.game import FlappySession, TickEvent
from merry_flappy.flappy_core.leaderboard import LeaderboardStore, MemoryStore
from merry_flappy.flappy_core.powerups import PowerUpKind, PowerUpPhase
from merry_flappy.flappy_core.state_machine import GameState


class BrokenStore(MemoryStore):
    def set(self, key, value):
        raise OSError("read-only filesystem")


def make_session(config, **kwargs):
    kwargs.setdefault("leaderboard", LeaderboardStore(MemoryStore(), config))
    return FlappySession(config=config, seed=11, **kwargs)


def run_until(session, predicate, limit=2000):
    for _ in range(limit):
        result = session.tick()
        if predicate(result):
            return result
    raise AssertionError("condition never reached")


def force_pass(session):
    """Jump, put the obstacle right at the recycle edge and tick once."""
    session.jump()
    session.obstacles.pair.x = -session.obstacles.pair.width + 1
    return session.tick()


class TestMenuAndReady:
    """Inert states."""

    def test_initial_state(self, session):
        assert session.game_state is GameState.MENU
        assert not session.started

    def test_inputs_ignored_in_menu(self, session):
        assert not session.jump()
        assert not session.trigger_power_up(PowerUpKind.SLOW_MO)
        result = session.tick()
        assert result.event is TickEvent.NONE
        assert result.snapshot.tick == 0

    def test_start(self, session, config):
        snapshot = session.start(player_name="Elf")
        assert snapshot.game_state is GameState.PLAYING
        assert snapshot.is_ready
        assert snapshot.character_y == config.character.start_y
        assert snapshot.velocity == 0.0
        assert snapshot.obstacle_x == config.initial_obstacle_x
        assert snapshot.score == 0
        assert snapshot.lives == config.scoring.starting_lives
        assert session.state.player_name == "Elf"

    def test_no_jump_stays_frozen(self, session, config):
        session.start()
        for _ in range(50):
            snapshot = session.advance(0.5)
        assert snapshot.character_y == config.character.start_y
        assert snapshot.obstacle_x == config.initial_obstacle_x
        assert snapshot.tick == 0
        assert snapshot.is_ready

    def test_power_up_rejected_while_ready(self, session):
        session.start()
        assert not session.trigger_power_up(PowerUpKind.SCORE_BOOST)

    def test_first_jump_starts_motion(self, session, config):
        session.start()
        assert session.jump()
        assert session.started
        assert session.character.velocity == -config.physics.jump_strength

        result = session.tick()
        assert result.snapshot.velocity == pytest.approx(-9.2)
        assert result.snapshot.character_y == pytest.approx(290.8)
        assert result.snapshot.obstacle_x == config.initial_obstacle_x - 4.0


class TestScoring:

    def test_pass_scores_one(self, session):
        session.start()
        result = force_pass(session)
        assert result.event is TickEvent.PASSED
        assert result.delta_score == 1
        assert session.obstacles.pair.x == session.config.spawn_x

    def test_score_boost_doubles(self, session):
        session.start()
        session.jump()
        assert session.trigger_power_up(PowerUpKind.SCORE_BOOST)
        assert force_pass(session).delta_score == 2

    def test_life_every_ten_points(self, session):
        session.start()
        for _ in range(10):
            force_pass(session)
        assert session.score == 10
        assert session.lives == 1

        # Same score evaluated again
        session.jump()
        session.tick()
        assert session.lives == 1
        assert session.state.last_life_award_score == 10

    def test_lives_capped(self, config):
        session = make_session(with_scoring(config, starting_lives=5))
        session.start()
        for _ in range(10):
            force_pass(session)
        assert session.lives == 5

    def test_speed_ramps_with_score(self, session):
        session.start()
        session.jump()
        assert session.current_speed == pytest.approx(4.0)
        for _ in range(10):
            force_pass(session)
        assert session.speed_multiplier == pytest.approx(1.2)
        assert session.current_speed == pytest.approx(4.8)

    def test_slow_mo_halves_scroll(self, session):
        session.start()
        session.jump()
        assert session.trigger_power_up(PowerUpKind.SLOW_MO)
        x = session.obstacles.pair.x
        session.tick()
        assert session.obstacles.pair.x == pytest.approx(x - 2.0)
        assert session.snapshot().speed_multiplier == pytest.approx(0.5)


class TestCollisions:

    def test_last_life_ends_game(self, session):
        session.start(player_name="Elf")
        session.jump()
        result = run_until(session, lambda r: r.event is TickEvent.GAME_OVER)
        assert result.collision.reason == "floor"
        assert session.game_state is GameState.GAMEOVER

        entries = session.leaderboard_entries()
        assert len(entries) == 1
        assert entries[0].name == "Elf"
        assert entries[0].score == 0
        assert session.last_entry == entries[0]

    def test_exactly_one_entry_per_game_over(self, session):
        session.start()
        session.jump()
        run_until(session, lambda r: r.event is TickEvent.GAME_OVER)
        for _ in range(20):
            session.tick()
            session.advance(0.1)
        assert len(session.leaderboard_entries()) == 1
        assert session.leaderboard_entries()[0].name == "Anon"

    def test_life_lost_resets_positions_keeps_score(self, config):
        session = make_session(with_scoring(config, starting_lives=2))
        session.start()
        force_pass(session)
        session.trigger_power_up(PowerUpKind.SLOW_MO)

        result = run_until(session, lambda r: r.event is TickEvent.LIFE_LOST)
        snapshot = result.snapshot
        assert snapshot.lives == 1
        assert snapshot.score == 1
        assert snapshot.is_ready
        assert snapshot.character_y == config.character.start_y
        assert snapshot.velocity == 0.0
        assert snapshot.obstacle_x == config.initial_obstacle_x
        assert all(p.phase is PowerUpPhase.IDLE for p in snapshot.power_ups)

    def test_obstacle_hit(self, session):
        session.start()
        session.jump()
        pair = session.obstacles.pair
        pair.x = 100.0
        pair.gap_top = 300.0
        result = session.tick()
        assert result.event is TickEvent.GAME_OVER
        assert result.collision.reason == "obstacle_top"

    def test_write_failure_does_not_crash(self, config):
        session = make_session(config, leaderboard=LeaderboardStore(BrokenStore(), config))
        session.start()
        session.jump()
        run_until(session, lambda r: r.event is TickEvent.GAME_OVER)
        assert session.game_state is GameState.GAMEOVER
        assert "read-only" in session.last_error
        assert session.get_info()["leaderboard_error"] == session.last_error


class TestGameOverAndMenu:

    @pytest.fixture
    def finished(self, session):
        session.start(player_name="Elf")
        session.jump()
        run_until(session, lambda r: r.event is TickEvent.GAME_OVER)
        return session

    def test_game_over_is_inert(self, finished):
        snapshot = finished.snapshot()
        assert not finished.jump()
        assert finished.tick().snapshot == snapshot
        assert not finished.scheduler.running

    def test_retry_resets(self, finished, config):
        snapshot = finished.retry()
        assert snapshot.game_state is GameState.PLAYING
        assert snapshot.is_ready
        assert snapshot.score == 0
        assert snapshot.tick == 0
        assert finished.state.player_name == "Elf"
        assert finished.scheduler.running

    def test_menu(self, finished):
        snapshot = finished.to_menu()
        assert snapshot.game_state is GameState.MENU
        assert finished.set_player_name("Rudolph")
        assert finished.start().game_state is GameState.PLAYING
        assert finished.state.player_name == "Rudolph"

    def test_rename_rejected_while_playing(self, session):
        session.start(player_name="Elf")
        assert not session.set_player_name("Grinch")
        assert session.state.player_name == "Elf"

    def test_menu_stops_timers(self, session):
        session.start()
        session.jump()
        session.trigger_power_up(PowerUpKind.SLOW_MO)
        session.to_menu()
        assert not session.scheduler.running
        snapshot = session.advance(10.0)
        assert snapshot.game_state is GameState.MENU
        assert all(p.phase is PowerUpPhase.IDLE for p in snapshot.power_ups)


class TestAdvance:
    """Wall-clock driven updates through the scheduler."""

    @pytest.fixture
    def floating(self, config):
        """Session with gravity off, so the character holds its height."""
        session = make_session(with_physics(config, gravity=0.0))
        session.start()
        session.jump()
        session.character.velocity = 0.0
        return session

    def test_power_up_lifecycle_on_wall_clock(self, floating):
        pair = floating.obstacles.pair
        assert floating.trigger_power_up(PowerUpKind.SLOW_MO)
        for _ in range(40):
            pair.gap_top = 250.0
            floating.advance(0.1)
        slow = floating.snapshot().power_up(PowerUpKind.SLOW_MO)
        assert slow.phase is PowerUpPhase.COOLDOWN
        assert slow.remaining == pytest.approx(10.0)
        assert not floating.trigger_power_up(PowerUpKind.SLOW_MO)

        for _ in range(100):
            pair.gap_top = 250.0
            floating.advance(0.1)
        assert floating.snapshot().power_up(PowerUpKind.SLOW_MO).phase is PowerUpPhase.IDLE
        assert floating.trigger_power_up(PowerUpKind.SLOW_MO)

    def test_slow_mo_expiry_mid_frame(self, floating):
        """Ticks after the expiry inside one long frame scroll at full speed."""
        assert floating.trigger_power_up(PowerUpKind.SLOW_MO)
        for _ in range(39):
            floating.advance(0.1)
        assert floating.snapshot().power_up(PowerUpKind.SLOW_MO).phase is PowerUpPhase.ACTIVE

        # 10 ticks in the next 0.24 s: 4 before the expiry at +0.1 s, 6 after
        x = floating.obstacles.pair.x
        snapshot = floating.advance(0.24)
        assert snapshot.power_up(PowerUpKind.SLOW_MO).phase is PowerUpPhase.COOLDOWN
        assert x - snapshot.obstacle_x == pytest.approx(4 * 2.0 + 6 * 4.0)

    def test_advance_runs_physics_ticks(self, floating, config):
        x = floating.obstacles.pair.x
        snapshot = floating.advance(0.096)
        assert snapshot.tick == 4
        assert snapshot.obstacle_x == pytest.approx(x - 16.0)
        assert snapshot.character_y == pytest.approx(config.character.start_y)


class TestSnapshot:

    def test_snapshot_is_frozen(self, session):
        snapshot = session.start()
        with pytest.raises(dataclasses.FrozenInstanceError):
            snapshot.score = 10

    def test_obs_dict(self, session):
        session.start()
        obs = session.snapshot().to_obs_dict()
        assert obs["game_state"] == 1
        assert obs["started"] == 0
        assert obs["score"].dtype.name == "int64"
        assert obs["slow_mo_phase"] == 0
