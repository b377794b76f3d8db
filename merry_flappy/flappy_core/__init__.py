"""
Flappy Core - The simulation engine.

This module provides the session state machine, the fixed-step physics,
the obstacle stream, collision detection, power-ups and the leaderboard,
plus a Gymnasium wrapper for agents and headless tools.

Main exports:
- FlappySession: The game session (start/jump/power-ups/advance/snapshot)
- FlappyEnv: Gymnasium environment around a session
- LeaderboardStore: Persisted top-N leaderboard
- GameConfig: Configuration loaded from game_config.yaml
"""

from merry_flappy.flappy_core.config_loader import GameConfig, load_config
from merry_flappy.flappy_core.collision import CollisionResult, check_collision
from merry_flappy.flappy_core.game import FlappySession, TickEvent, TickResult
from merry_flappy.flappy_core.leaderboard import (
    JsonFileStore,
    LeaderboardEntry,
    LeaderboardStore,
    LeaderboardWriteError,
    MemoryStore,
)
from merry_flappy.flappy_core.powerups import PowerUpKind, PowerUpPhase
from merry_flappy.flappy_core.state_machine import GameState, SessionState
from merry_flappy.flappy_core.state_snapshot import GameSnapshot
from merry_flappy.flappy_core.env_gym import FlappyEnv
from merry_flappy.flappy_core.replay_recorder import (
    ReplayRecorder,
    record_episode,
    replay_episode,
    load_replay,
    generate_replay_filename,
)

__all__ = [
    "GameConfig",
    "load_config",
    "CollisionResult",
    "check_collision",
    "FlappySession",
    "TickEvent",
    "TickResult",
    "JsonFileStore",
    "LeaderboardEntry",
    "LeaderboardStore",
    "LeaderboardWriteError",
    "MemoryStore",
    "PowerUpKind",
    "PowerUpPhase",
    "GameState",
    "SessionState",
    "GameSnapshot",
    "FlappyEnv",
    "ReplayRecorder",
    "record_episode",
    "replay_episode",
    "load_replay",
    "generate_replay_filename",
]
