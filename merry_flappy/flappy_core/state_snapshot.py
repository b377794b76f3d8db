"""
State Snapshot
==============

Read-only per-tick view of the session for presentation layers, plus a numpy
packing for Gymnasium observations.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Tuple

import numpy as np

from merry_flappy.flappy_core.powerups import PowerUpKind, PowerUpPhase, PowerUpSnapshot
from merry_flappy.flappy_core.state_machine import GameState

# Stable integer codes for observation arrays
GAME_STATE_CODES = {GameState.MENU: 0, GameState.PLAYING: 1, GameState.GAMEOVER: 2}
PHASE_CODES = {PowerUpPhase.IDLE: 0, PowerUpPhase.ACTIVE: 1, PowerUpPhase.COOLDOWN: 2}


@dataclass(frozen=True)
class GameSnapshot:
    """Everything a renderer needs for one frame."""
    character_y: float
    velocity: float
    obstacle_x: float
    gap_top: float
    gap_height: float
    score: int
    lives: int
    game_state: GameState
    started: bool
    speed_multiplier: float
    power_ups: Tuple[PowerUpSnapshot, ...]
    tick: int

    @property
    def is_ready(self) -> bool:
        """True while the READY prompt should be shown."""
        return self.game_state is GameState.PLAYING and not self.started

    def power_up(self, kind: PowerUpKind) -> PowerUpSnapshot:
        for p in self.power_ups:
            if p.kind is kind:
                return p
        raise KeyError(kind)

    def to_obs_dict(self) -> Dict[str, np.ndarray]:
        """Convert to Gymnasium observation dictionary."""
        slow = self.power_up(PowerUpKind.SLOW_MO)
        boost = self.power_up(PowerUpKind.SCORE_BOOST)
        return {
            # Character
            "character_y": np.array(self.character_y, dtype=np.float32),
            "velocity": np.array(self.velocity, dtype=np.float32),

            # Obstacle
            "obstacle_x": np.array(self.obstacle_x, dtype=np.float32),
            "gap_top": np.array(self.gap_top, dtype=np.float32),
            "gap_height": np.array(self.gap_height, dtype=np.float32),

            # Bookkeeping
            "score": np.array(self.score, dtype=np.int64),
            "lives": np.array(self.lives, dtype=np.int32),
            "game_state": np.array(GAME_STATE_CODES[self.game_state], dtype=np.int32),
            "started": np.array(int(self.started), dtype=np.int32),
            "speed_multiplier": np.array(self.speed_multiplier, dtype=np.float32),

            # Power-ups
            "slow_mo_phase": np.array(PHASE_CODES[slow.phase], dtype=np.int32),
            "slow_mo_remaining": np.array(slow.remaining, dtype=np.float32),
            "score_boost_phase": np.array(PHASE_CODES[boost.phase], dtype=np.int32),
            "score_boost_remaining": np.array(boost.remaining, dtype=np.float32),
        }
