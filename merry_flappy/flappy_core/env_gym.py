"""
Gymnasium Environment Wrapper
=============================

Provides a standard Gymnasium interface to a Merry Flappy session.
Reward is always 0.0 - agents compute their own from info.
"""

from __future__ import annotations

from typing import Any, Dict, Optional, Tuple, Union

import numpy as np

import gymnasium as gym
from gymnasium import spaces

from merry_flappy.flappy_core.config_loader import GameConfig, load_config
from merry_flappy.flappy_core.game import FlappySession, TickEvent
from merry_flappy.flappy_core.leaderboard import LeaderboardStore, MemoryStore
from merry_flappy.flappy_core.powerups import PowerUpKind
from merry_flappy.flappy_core.state_machine import GameState

ACTION_NOOP = 0
ACTION_JUMP = 1
ACTION_SLOW_MO = 2
ACTION_SCORE_BOOST = 3


class FlappyEnv(gym.Env):
    """
    Merry Flappy as a Gymnasium environment.

    Action Space:
        Discrete(4): 0 = no-op, 1 = jump, 2 = SlowMo, 3 = ScoreBoost.
        Each step applies the action, then advances one physics tick of time.

    Observation Space:
        Dict matching GameSnapshot.to_obs_dict().

    Reward:
        Always 0.0. Agents compute their own reward from the info dict.

    Info:
        score, delta_score, lives, event, game_state, ...
    """

    metadata = {
        "render_modes": [],
    }

    def __init__(
        self,
        config_path: Optional[str] = None,
        config: Optional[GameConfig] = None,
        leaderboard: Optional[LeaderboardStore] = None,
        player_name: str = "agent",
        max_steps: int = 20000,
        debug: bool = False,
    ):
        """
        Initialize environment.

        Args:
            config_path: Path to game_config.yaml. Uses default if None.
            config: Already-loaded configuration; overrides config_path.
            leaderboard: Leaderboard store. In-memory if None.
            player_name: Name recorded on the leaderboard at game over.
            max_steps: Steps before the episode is truncated.
            debug: If True, enables verbose debug output.
        """
        super().__init__()

        self._config = config if config is not None else load_config(config_path)
        self._debug = debug
        self._player_name = player_name
        self._max_steps = max_steps
        self._steps = 0

        if leaderboard is None:
            leaderboard = LeaderboardStore(MemoryStore(), self._config)

        self._session = FlappySession(
            config=self._config,
            leaderboard=leaderboard,
            debug=debug
        )

        self.action_space = spaces.Discrete(4)
        self.observation_space = self._build_observation_space()

        if self._debug:
            print(f"[DEBUG] FlappyEnv initialized")
            print(f"[DEBUG]   World: {self._config.world.width}x{self._config.world.height}")
            print(f"[DEBUG]   Tick: {self._config.physics.tick_seconds}s")

    def _build_observation_space(self) -> spaces.Dict:
        """Build the observation space definition."""
        world = self._config.world
        scoring = self._config.scoring
        max_timer = max(
            self._config.power_ups.slow_mo.active_seconds,
            self._config.power_ups.slow_mo.cooldown_seconds,
            self._config.power_ups.score_boost.active_seconds,
            self._config.power_ups.score_boost.cooldown_seconds,
        )

        def scalar(low, high, dtype):
            return spaces.Box(low=low, high=high, shape=(), dtype=dtype)

        return spaces.Dict({
            # Character
            "character_y": scalar(-np.inf, np.inf, np.float32),
            "velocity": scalar(-np.inf, np.inf, np.float32),

            # Obstacle
            "obstacle_x": scalar(-np.inf, np.inf, np.float32),
            "gap_top": scalar(0, world.height, np.float32),
            "gap_height": scalar(0, world.height, np.float32),

            # Bookkeeping
            "score": scalar(0, np.iinfo(np.int64).max, np.int64),
            "lives": scalar(0, scoring.max_lives, np.int32),
            "game_state": scalar(0, 2, np.int32),
            "started": scalar(0, 1, np.int32),
            "speed_multiplier": scalar(0, scoring.max_speed_multiplier, np.float32),

            # Power-ups
            "slow_mo_phase": scalar(0, 2, np.int32),
            "slow_mo_remaining": scalar(0, max_timer, np.float32),
            "score_boost_phase": scalar(0, 2, np.int32),
            "score_boost_remaining": scalar(0, max_timer, np.float32),
        })

    def reset(
        self,
        *,
        seed: Optional[int] = None,
        options: Optional[Dict[str, Any]] = None
    ) -> Tuple[Dict[str, np.ndarray], Dict[str, Any]]:
        """
        Start a new run.

        Args:
            seed: Random seed for gap generation.
            options: Additional options (unused).

        Returns:
            (observation, info) tuple.
        """
        super().reset(seed=seed)

        self._steps = 0
        snapshot = self._session.start(player_name=self._player_name, seed=seed)

        info = self._session.get_info()
        info["delta_score"] = 0
        info["event"] = TickEvent.NONE.value

        return snapshot.to_obs_dict(), info

    def _apply_action(self, action: int) -> bool:
        if action == ACTION_JUMP:
            return self._session.jump()
        if action == ACTION_SLOW_MO:
            return self._session.trigger_power_up(PowerUpKind.SLOW_MO)
        if action == ACTION_SCORE_BOOST:
            return self._session.trigger_power_up(PowerUpKind.SCORE_BOOST)
        return False

    def step(
        self,
        action: Union[int, np.ndarray]
    ) -> Tuple[Dict[str, np.ndarray], float, bool, bool, Dict[str, Any]]:
        """
        Execute one step.

        Args:
            action: One of the ACTION_* values.

        Returns:
            (observation, reward, terminated, truncated, info) tuple.
            Reward is always 0.0.
        """
        if isinstance(action, np.ndarray):
            action = int(action.item())
        action = int(action)
        if not self.action_space.contains(action):
            raise ValueError(f"Invalid action: {action}")

        score_before = self._session.score

        accepted = self._apply_action(action)
        running_before = self._session.state.is_running
        snapshot = self._session.advance(self._config.physics.tick_seconds)
        self._steps += 1

        terminated = snapshot.game_state is GameState.GAMEOVER
        truncated = not terminated and self._steps >= self._max_steps

        if terminated:
            event = TickEvent.GAME_OVER
        elif running_before and snapshot.is_ready:
            event = TickEvent.LIFE_LOST
        elif snapshot.score > score_before:
            event = TickEvent.PASSED
        else:
            event = TickEvent.NONE

        info = self._session.get_info()
        info["delta_score"] = snapshot.score - score_before
        info["event"] = event.value
        info["action_accepted"] = accepted

        if self._debug:
            print(f"[DEBUG] Step {self._steps}: action={action}, y={snapshot.character_y:.1f}, "
                  f"score={snapshot.score}, event={event.value}")

        return snapshot.to_obs_dict(), 0.0, terminated, truncated, info

    def close(self) -> None:
        """Stop the session's timers."""
        self._session.to_menu()

    @property
    def session(self) -> FlappySession:
        """Access to underlying session (for debugging/tools)."""
        return self._session

    @property
    def config(self) -> GameConfig:
        """Game configuration."""
        return self._config
