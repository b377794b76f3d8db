"""
Session State Machine
=====================

Immutable session bookkeeping and the pure transitions between
MENU, PLAYING (READY while not started) and GAMEOVER.

Each transition takes a SessionState and returns a new one. Side effects
(moving the character, recycling the obstacle, resetting power-ups,
writing the leaderboard) belong to the caller.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum
from typing import Optional, Tuple

from merry_flappy.flappy_core.config_loader import ScoringConfig
from merry_flappy.flappy_core.scoring import life_award


class GameState(str, Enum):
    MENU = "MENU"
    PLAYING = "PLAYING"
    GAMEOVER = "GAMEOVER"


class CollisionOutcome(str, Enum):
    IGNORED = "ignored"
    LIFE_LOST = "life_lost"
    GAME_OVER = "game_over"


@dataclass(frozen=True)
class SessionState:
    """Score and life bookkeeping for one session."""
    score: int = 0
    lives: int = 0
    game_state: GameState = GameState.MENU
    started: bool = False
    last_life_award_score: int = 0
    player_name: str = ""

    @property
    def is_playing(self) -> bool:
        return self.game_state is GameState.PLAYING

    @property
    def is_running(self) -> bool:
        """PLAYING and past the READY prompt."""
        return self.game_state is GameState.PLAYING and self.started

    @property
    def is_ready(self) -> bool:
        return self.game_state is GameState.PLAYING and not self.started


def start_session(
    state: SessionState,
    scoring: ScoringConfig,
    player_name: Optional[str] = None
) -> SessionState:
    """Fresh run in READY. Keeps only the player name unless a new one is given."""
    return SessionState(
        score=0,
        lives=scoring.starting_lives,
        game_state=GameState.PLAYING,
        started=False,
        last_life_award_score=0,
        player_name=state.player_name if player_name is None else player_name
    )


def begin_run(state: SessionState) -> SessionState:
    """First jump while READY. No-op in any other state."""
    if not state.is_ready:
        return state
    return replace(state, started=True)


def award_lives(state: SessionState, scoring: ScoringConfig) -> SessionState:
    """Apply the life-award guard to the current score."""
    lives, last = life_award(state.score, state.lives, state.last_life_award_score, scoring)
    if lives == state.lives and last == state.last_life_award_score:
        return state
    return replace(state, lives=lives, last_life_award_score=last)


def apply_pass(state: SessionState, points: int, scoring: ScoringConfig) -> SessionState:
    """Add points for an obstacle pass, then check for a life award."""
    if not state.is_running:
        return state
    return award_lives(replace(state, score=state.score + points), scoring)


def apply_collision(state: SessionState) -> Tuple[SessionState, CollisionOutcome]:
    """
    Resolve a hit.

    With lives left: one life is spent and the run drops back to READY with
    the score kept. Without: the session ends.
    """
    if not state.is_running:
        return state, CollisionOutcome.IGNORED
    if state.lives > 0:
        return replace(state, lives=state.lives - 1, started=False), CollisionOutcome.LIFE_LOST
    return replace(state, game_state=GameState.GAMEOVER, started=False), CollisionOutcome.GAME_OVER


def return_to_menu(state: SessionState) -> SessionState:
    """Back to MENU. Score stays visible until the next start."""
    return replace(state, game_state=GameState.MENU, started=False)


def set_player_name(state: SessionState, name: str) -> SessionState:
    """Rename the player. Only allowed outside of a run."""
    if state.is_playing:
        return state
    return replace(state, player_name=name)
