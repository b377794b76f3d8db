"""
Scoring System
==============

Points per obstacle pass, the life-award milestone rule and the speed ramp.
All functions are pure; the session state machine threads their results.
"""

from __future__ import annotations

import math
from typing import Optional, Tuple

from merry_flappy.flappy_core.config_loader import GameConfig, ScoringConfig, get_config


def speed_multiplier(score: int, scoring: ScoringConfig, slow_mo_active: bool = False) -> float:
    """
    Scroll speed multiplier for a score.

    min(1 + floor(score / interval) * step, max), scaled by the SlowMo factor
    while SlowMo is Active.
    """
    ramp = 1.0 + math.floor(score / scoring.life_award_interval) * scoring.speed_step
    multiplier = min(ramp, scoring.max_speed_multiplier)
    if slow_mo_active:
        multiplier *= scoring.slow_mo_factor
    return multiplier


def points_for_pass(scoring: ScoringConfig, score_boost_active: bool = False) -> int:
    """Points awarded for one obstacle pass."""
    if score_boost_active:
        return scoring.boosted_points_per_pass
    return scoring.points_per_pass


def life_award(
    score: int,
    lives: int,
    last_award_score: int,
    scoring: ScoringConfig
) -> Tuple[int, int]:
    """
    Apply the life-award rule.

    The milestone is the largest multiple of the interval not above `score`.
    A positive milestone beyond `last_award_score` grants one life (capped)
    and becomes the new guard value, so re-evaluating the same score is a
    no-op and a boosted pass that skips over a multiple still pays once.

    Returns:
        (lives, last_award_score)
    """
    interval = scoring.life_award_interval
    milestone = (score // interval) * interval
    if milestone <= 0 or milestone <= last_award_score:
        return lives, last_award_score
    return min(lives + 1, scoring.max_lives), milestone


class ScoreTracker:
    """Convenience wrapper binding the pure rules to one configuration."""

    def __init__(self, config: Optional[GameConfig] = None):
        """
        Initialize score tracker.

        Args:
            config: Game configuration. Uses default if None.
        """
        if config is None:
            config = get_config()

        self._scoring = config.scoring
        self._base_speed = config.obstacles.base_speed
        self._adjustment = config.physics.speed_adjustment

    @property
    def scoring(self) -> ScoringConfig:
        return self._scoring

    def speed_multiplier(self, score: int, slow_mo_active: bool = False) -> float:
        return speed_multiplier(score, self._scoring, slow_mo_active)

    def current_speed(self, score: int, slow_mo_active: bool = False) -> float:
        """Obstacle scroll distance per tick."""
        return self._base_speed * self.speed_multiplier(score, slow_mo_active) * self._adjustment

    def points_for_pass(self, score_boost_active: bool = False) -> int:
        return points_for_pass(self._scoring, score_boost_active)
