"""
Shared fixtures.
"""

import dataclasses

import pytest

from merry_flappy.flappy_core.config_loader import load_config
from merry_flappy.flappy_core.game import FlappySession
from merry_flappy.flappy_core.leaderboard import LeaderboardStore, MemoryStore


@pytest.fixture
def config():
    return load_config()


@pytest.fixture
def store(config):
    return LeaderboardStore(MemoryStore(), config)


@pytest.fixture
def session(config, store):
    return FlappySession(config=config, seed=7, leaderboard=store)


def with_scoring(config, **changes):
    """Copy of config with scoring fields replaced."""
    return dataclasses.replace(config, scoring=dataclasses.replace(config.scoring, **changes))


def with_physics(config, **changes):
    """Copy of config with physics fields replaced."""
    return dataclasses.replace(config, physics=dataclasses.replace(config.physics, **changes))
