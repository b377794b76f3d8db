"""
Core Game
=========

Session orchestrator combining physics, the obstacle stream, collision,
power-ups, scoring and the leaderboard.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Optional, Union

from merry_flappy.flappy_core.collision import CollisionResult, check_collision
from merry_flappy.flappy_core.config_loader import GameConfig, get_config
from merry_flappy.flappy_core.leaderboard import (
    LeaderboardEntry,
    LeaderboardStore,
    LeaderboardWriteError,
)
from merry_flappy.flappy_core.obstacles import ObstacleStream
from merry_flappy.flappy_core.physics import Character, PhysicsIntegrator
from merry_flappy.flappy_core.powerups import PowerUpKind, PowerUpManager, PowerUpPhase
from merry_flappy.flappy_core.rng import GapGenerator
from merry_flappy.flappy_core.scheduler import PHYSICS_TICK, TickScheduler
from merry_flappy.flappy_core.scoring import ScoreTracker
from merry_flappy.flappy_core import state_machine as sm
from merry_flappy.flappy_core.state_machine import CollisionOutcome, GameState, SessionState
from merry_flappy.flappy_core.state_snapshot import GameSnapshot


class TickEvent(str, Enum):
    NONE = "none"
    PASSED = "passed"
    LIFE_LOST = "life_lost"
    GAME_OVER = "game_over"


@dataclass
class TickResult:
    """Result of a single physics tick."""
    snapshot: GameSnapshot
    event: TickEvent
    delta_score: int
    collision: CollisionResult


class FlappySession:
    """
    Main game simulation class.

    Orchestrates, once per physics tick:
    - Physics integration (only once the first jump has happened)
    - Obstacle scroll and recycle, with scoring for each pass
    - Collision against the post-motion state
    - Life loss / game over
    Power-up timers run on their own slower cadence via advance().

    States: MENU -> PLAYING (READY until the first jump) -> GAMEOVER,
    then back to MENU or straight into a retry.
    """

    def __init__(
        self,
        config: Optional[GameConfig] = None,
        seed: Optional[int] = None,
        leaderboard: Optional[LeaderboardStore] = None,
        debug: bool = False
    ):
        """
        Initialize session.

        Args:
            config: Game configuration. Uses default if None.
            seed: Random seed for gap generation.
            leaderboard: Leaderboard store. Built from config if None.
            debug: If True, prints [DEBUG] lines for state transitions.
        """
        if config is None:
            config = get_config()

        self._config = config
        self._debug = debug

        # Subsystems
        self._physics = PhysicsIntegrator(config)
        self._obstacles = ObstacleStream(config, GapGenerator(config, seed))
        self._scorer = ScoreTracker(config)
        self._power_ups = PowerUpManager(config, on_transition=self._on_power_up_transition)
        self._scheduler = TickScheduler.from_config(config)
        self._leaderboard = leaderboard if leaderboard is not None else LeaderboardStore(config=config)

        # Session state
        self._state = SessionState(lives=config.scoring.starting_lives)
        self._character = Character(y=config.character.start_y)
        self._tick: int = 0
        self._last_entry: Optional[LeaderboardEntry] = None
        self._last_board: List[LeaderboardEntry] = []
        self._last_error: str = ""

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------

    @property
    def config(self) -> GameConfig:
        return self._config

    @property
    def state(self) -> SessionState:
        """Current immutable session state."""
        return self._state

    @property
    def character(self) -> Character:
        return self._character

    @property
    def obstacles(self) -> ObstacleStream:
        return self._obstacles

    @property
    def power_ups(self) -> PowerUpManager:
        return self._power_ups

    @property
    def scheduler(self) -> TickScheduler:
        return self._scheduler

    @property
    def leaderboard(self) -> LeaderboardStore:
        return self._leaderboard

    @property
    def score(self) -> int:
        return self._state.score

    @property
    def lives(self) -> int:
        return self._state.lives

    @property
    def game_state(self) -> GameState:
        return self._state.game_state

    @property
    def started(self) -> bool:
        return self._state.started

    @property
    def speed_multiplier(self) -> float:
        return self._scorer.speed_multiplier(self._state.score, self._power_ups.slow_mo_active)

    @property
    def current_speed(self) -> float:
        """Obstacle scroll distance per tick right now."""
        return self._scorer.current_speed(self._state.score, self._power_ups.slow_mo_active)

    @property
    def last_entry(self) -> Optional[LeaderboardEntry]:
        """Leaderboard entry written at the last game over."""
        return self._last_entry

    @property
    def last_error(self) -> str:
        """Message of the last leaderboard write failure, or empty string."""
        return self._last_error

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    def _reset_positions(self) -> None:
        self._character.reset(self._config.character.start_y)
        self._obstacles.reset_position()

    def start(self, player_name: Optional[str] = None, seed: Optional[int] = None) -> GameSnapshot:
        """
        Start (or restart) a run in the READY state.

        Args:
            player_name: Name for the leaderboard. Keeps the current one if None.
            seed: Reseed the gap generator. Keeps the current stream if None.

        Returns:
            Initial snapshot.
        """
        if seed is not None:
            self._obstacles.generator.reset(seed)

        self._state = sm.start_session(self._state, self._config.scoring, player_name)
        self._character.reset(self._config.character.start_y)
        self._obstacles.reset()
        self._power_ups.reset_all()
        self._scheduler.resume()
        self._tick = 0
        self._last_entry = None
        self._last_error = ""

        if self._debug:
            print(f"[DEBUG] Session started for {self._state.player_name or '<anon>'}, "
                  f"lives={self._state.lives}, gap_top={self._obstacles.pair.gap_top:.0f}")
        return self.snapshot()

    def retry(self) -> GameSnapshot:
        """Full reset into a new run, same player."""
        return self.start()

    def to_menu(self) -> GameSnapshot:
        """Leave the run (or the game-over screen) for the menu."""
        self._scheduler.cancel()
        self._power_ups.reset_all()
        self._state = sm.return_to_menu(self._state)
        return self.snapshot()

    def set_player_name(self, name: str) -> bool:
        """
        Rename the player. Ignored during a run.

        Returns:
            True if accepted.
        """
        new_state = sm.set_player_name(self._state, name)
        accepted = new_state is not self._state
        self._state = new_state
        return accepted

    def jump(self) -> bool:
        """
        Jump input.

        The first jump after READY starts the simulation. Every accepted jump
        overwrites the character's velocity with the jump impulse.

        Returns:
            True if applied, False outside PLAYING.
        """
        if not self._state.is_playing:
            return False
        if not self._state.started:
            self._state = sm.begin_run(self._state)
            if self._debug:
                print("[DEBUG] First jump, simulation running")
        self._physics.jump(self._character)
        return True

    def trigger_power_up(self, kind: Union[str, PowerUpKind]) -> bool:
        """
        Power-up input.

        Returns:
            True if the power-up became Active; False when not running, already
            Active, or cooling down.
        """
        kind = PowerUpKind.parse(kind)
        if not self._state.is_running:
            return False
        return self._power_ups.trigger(kind)

    def _on_power_up_transition(
        self,
        kind: PowerUpKind,
        old: PowerUpPhase,
        new: PowerUpPhase
    ) -> None:
        if self._debug:
            print(f"[DEBUG] Power-up {kind.value}: {old.value} -> {new.value}")

    # ------------------------------------------------------------------
    # Simulation
    # ------------------------------------------------------------------

    def tick(self) -> TickResult:
        """
        Advance one physics tick.

        Inert outside PLAYING and while READY.
        """
        if not self._state.is_running:
            return TickResult(self.snapshot(), TickEvent.NONE, 0, CollisionResult.none())

        score_before = self._state.score
        event = TickEvent.NONE

        # Physics
        self._physics.step(self._character)

        # Obstacle stream: scroll, recycle, score
        passes = self._obstacles.advance(self.current_speed)
        if passes:
            points = self._scorer.points_for_pass(self._power_ups.score_boost_active)
            self._state = sm.apply_pass(self._state, points * passes, self._config.scoring)
            event = TickEvent.PASSED

        # Collision against post-motion state
        pair = self._obstacles.pair
        collision = check_collision(
            self._character.y,
            pair.x,
            pair.gap_top,
            pair.gap_height,
            slot_x=self._config.character.slot_x,
            character_size=self._config.character.size,
            obstacle_width=pair.width,
            world_height=self._config.world.height
        )
        if collision.hit:
            event = self._resolve_collision(collision)

        self._tick += 1
        return TickResult(
            snapshot=self.snapshot(),
            event=event,
            delta_score=self._state.score - score_before,
            collision=collision
        )

    def _resolve_collision(self, collision: CollisionResult) -> TickEvent:
        """Apply a life loss or end the run."""
        self._state, outcome = sm.apply_collision(self._state)

        if outcome is CollisionOutcome.LIFE_LOST:
            self._reset_positions()
            self._power_ups.reset_all()
            if self._debug:
                print(f"[DEBUG] Hit ({collision.reason}), life lost, lives={self._state.lives}")
            return TickEvent.LIFE_LOST

        if outcome is CollisionOutcome.GAME_OVER:
            self._scheduler.cancel()
            self._power_ups.reset_all()
            self._record_score()
            if self._debug:
                print(f"[DEBUG] GAME OVER ({collision.reason}), score={self._state.score}")
            return TickEvent.GAME_OVER

        return TickEvent.NONE

    def _record_score(self) -> None:
        """Write the finished run to the leaderboard. A write failure does not stop the session."""
        entry = self._leaderboard.make_entry(self._state.player_name, self._state.score)
        self._last_entry = entry
        try:
            self._last_board = self._leaderboard.submit(entry)
        except LeaderboardWriteError as exc:
            self._last_error = str(exc)
            if self._debug:
                print(f"[DEBUG] {exc}")
            return
        if self._debug:
            rank = self._leaderboard.rank_of(entry, self._last_board)
            print(f"[DEBUG] Leaderboard rank: {rank if rank is not None else 'unranked'}")

    def tick_timers(self, seconds: float) -> None:
        """Count down power-ups by `seconds`. Only while PLAYING."""
        if not self._state.is_playing:
            return
        self._power_ups.tick(seconds)

    def advance(self, dt: float) -> GameSnapshot:
        """
        Advance by `dt` seconds of wall-clock time.

        The scheduler turns dt into physics ticks and power-up timer steps,
        run in the order they fall due, so a power-up that expires mid-frame
        stops affecting the ticks after it. Ticks are skipped once the run
        drops back to READY or ends.

        Returns:
            Snapshot after the update.
        """
        step_seconds = self._scheduler.timer_step_seconds
        for event in self._scheduler.advance_ordered(dt):
            if event == PHYSICS_TICK:
                if self._state.is_running:
                    self.tick()
            else:
                self.tick_timers(step_seconds)
        return self.snapshot()

    # ------------------------------------------------------------------
    # Output
    # ------------------------------------------------------------------

    def snapshot(self) -> GameSnapshot:
        """Build the current read-only snapshot."""
        pair = self._obstacles.pair
        return GameSnapshot(
            character_y=self._character.y,
            velocity=self._character.velocity,
            obstacle_x=pair.x,
            gap_top=pair.gap_top,
            gap_height=pair.gap_height,
            score=self._state.score,
            lives=self._state.lives,
            game_state=self._state.game_state,
            started=self._state.started,
            speed_multiplier=self.speed_multiplier,
            power_ups=self._power_ups.snapshot(),
            tick=self._tick
        )

    def get_info(self) -> Dict[str, Any]:
        """Get additional info dict for Gymnasium."""
        return {
            "score": self._state.score,
            "lives": self._state.lives,
            "game_state": self._state.game_state.value,
            "started": self._state.started,
            "speed_multiplier": self.speed_multiplier,
            "tick": self._tick,
            "leaderboard_error": self._last_error,
        }

    def leaderboard_entries(self) -> List[LeaderboardEntry]:
        """Current persisted leaderboard (best first)."""
        return self._leaderboard.load()
