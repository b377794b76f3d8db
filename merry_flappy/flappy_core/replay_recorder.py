"""
Replay Recorder
===============

Records FlappyEnv episodes (seed + actions) to JSON and re-simulates them.

Usage:
    from merry_flappy.flappy_core import FlappyEnv, ReplayRecorder

    env = FlappyEnv()
    recorder = ReplayRecorder(env, agent_name="my_agent")

    obs, info = recorder.reset(seed=42)
    done = False
    while not done:
        action = your_agent(obs)
        obs, reward, terminated, truncated, info = recorder.step(action)
        done = terminated or truncated

    recorder.save("my_replay.json")

Runs are deterministic given the seed, so replay_episode() reproduces the
final score exactly.
"""

from __future__ import annotations

import dataclasses
import hashlib
import json
from datetime import datetime
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Tuple, Union

import numpy as np

from merry_flappy.flappy_core.config_loader import GameConfig, get_config
from merry_flappy.flappy_core.env_gym import FlappyEnv


def generate_replay_filename(
    agent_name: str = "replay",
    seed: Optional[int] = None,
    directory: Optional[Union[str, Path]] = None
) -> Path:
    """
    Generate a timestamped replay filename.

    Format: {agent_name}_{YYYYMMDD_HHMMSS}_s{seed}.json
    """
    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")

    if seed is not None:
        filename = f"{agent_name}_{timestamp}_s{seed}.json"
    else:
        filename = f"{agent_name}_{timestamp}.json"

    if directory:
        return Path(directory) / filename
    return Path(filename)


def compute_config_hash(config: Optional[GameConfig] = None) -> str:
    """Hash every gameplay parameter so replays can be checked against the running config."""
    if config is None:
        config = get_config()
    hash_data = dataclasses.asdict(config)
    # Storage location does not affect gameplay
    hash_data.pop("leaderboard", None)
    return hashlib.md5(json.dumps(hash_data, sort_keys=True).encode()).hexdigest()[:8]


class ReplayRecorder:
    """
    Wrapper that records environment interactions for replay.

    Attributes:
        env: The wrapped FlappyEnv.
    """

    def __init__(
        self,
        env: FlappyEnv,
        agent_name: str = "unknown",
        auto_save_path: Optional[str] = None
    ):
        """
        Initialize the replay recorder.

        Args:
            env: The environment to wrap.
            agent_name: Name of the agent (stored in replay metadata).
            auto_save_path: If provided, automatically save replay on episode end.
        """
        self.env = env
        self.agent_name = agent_name
        self.auto_save_path = auto_save_path

        self._recording = False
        self._seed: Optional[int] = None
        self._actions: List[int] = []
        self._scores: List[int] = []
        self._end_event: str = ""
        self._config_hash = compute_config_hash(env.config)

    @property
    def recording(self) -> bool:
        return self._recording

    @property
    def observation_space(self):
        return self.env.observation_space

    @property
    def action_space(self):
        return self.env.action_space

    def reset(
        self,
        *,
        seed: Optional[int] = None,
        options: Optional[Dict] = None
    ) -> Tuple[Any, Dict]:
        """Reset the environment and start recording."""
        self._actions = []
        self._scores = []
        self._end_event = ""
        self._seed = seed
        self._recording = True

        return self.env.reset(seed=seed, options=options)

    def step(self, action: Union[int, np.ndarray]) -> Tuple[Any, float, bool, bool, Dict]:
        """Take a step and record it."""
        if isinstance(action, np.ndarray):
            action = int(action.item())
        action = int(action)

        obs, reward, terminated, truncated, info = self.env.step(action)

        if self._recording:
            self._actions.append(action)
            self._scores.append(int(info.get("score", 0)))
            if terminated or truncated:
                self._end_event = "truncated" if truncated else info.get("event", "unknown")

        if (terminated or truncated) and self.auto_save_path:
            self.save(self.auto_save_path)

        return obs, reward, terminated, truncated, info

    def get_replay_data(self) -> Dict[str, Any]:
        """Get the current replay data as a dictionary."""
        return {
            "seed": self._seed,
            "agent": self.agent_name,
            "config_hash": self._config_hash,
            "actions": self._actions.copy(),
            "scores": self._scores.copy(),
            "final_score": self._scores[-1] if self._scores else 0,
            "total_steps": len(self._actions),
            "end_event": self._end_event,
        }

    def save(
        self,
        path: Optional[Union[str, Path]] = None,
        overwrite: bool = True,
        directory: Optional[Union[str, Path]] = None
    ) -> Path:
        """
        Save the replay to a JSON file.

        Args:
            path: Path to save the replay. If None, auto-generates a timestamped name.
            overwrite: If True, overwrite existing file.
            directory: Directory for auto-generated filename (only used if path is None).

        Returns:
            Path where the replay was saved.
        """
        if path is None:
            path = generate_replay_filename(
                agent_name=self.agent_name,
                seed=self._seed,
                directory=directory
            )
        else:
            path = Path(path)

        if path.exists() and not overwrite:
            raise FileExistsError(f"Replay file already exists: {path}")

        path.parent.mkdir(parents=True, exist_ok=True)

        replay_data = self.get_replay_data()
        with open(path, "w") as f:
            json.dump(replay_data, f, indent=2)

        print(f"Replay saved: {path}")
        print(f"  Seed: {self._seed}")
        print(f"  Steps: {len(self._actions)}")
        print(f"  Final score: {replay_data['final_score']}")

        return path

    def close(self) -> None:
        self.env.close()

    def __enter__(self):
        return self

    def __exit__(self, *args):
        self.close()


def load_replay(path: Union[str, Path]) -> Dict[str, Any]:
    """
    Read a replay file.

    Raises:
        ValueError: If required fields are missing.
    """
    with open(path, "r") as f:
        replay = json.load(f)
    for key in ("seed", "actions", "final_score"):
        if key not in replay:
            raise ValueError(f"Replay is missing '{key}': {path}")
    return replay


def replay_episode(
    replay: Dict[str, Any],
    config: Optional[GameConfig] = None,
    strict: bool = True
) -> int:
    """
    Re-simulate a recorded episode.

    Args:
        replay: Replay data (from get_replay_data() or load_replay()).
        config: Configuration to simulate with. Uses default if None.
        strict: If True, refuse replays recorded under a different config.

    Returns:
        Final score of the re-simulation.
    """
    if config is None:
        config = get_config()

    if strict and replay.get("config_hash") not in (None, compute_config_hash(config)):
        raise ValueError(
            f"Replay config hash {replay.get('config_hash')} does not match "
            f"current config {compute_config_hash(config)}"
        )

    env = FlappyEnv(config=config, max_steps=max(1, len(replay["actions"])))
    try:
        env.reset(seed=replay["seed"])
        score = 0
        for action in replay["actions"]:
            _, _, terminated, truncated, info = env.step(int(action))
            score = int(info["score"])
            if terminated:
                break
        return score
    finally:
        env.close()


def record_episode(
    env: FlappyEnv,
    agent_fn: Callable[[Dict[str, np.ndarray]], int],
    seed: int,
    save_path: Optional[str] = None,
    agent_name: str = "unknown"
) -> Dict[str, Any]:
    """
    Convenience function to record a single episode.

    Args:
        env: The environment.
        agent_fn: Function that takes observation and returns action.
        seed: Random seed for the episode.
        save_path: If provided, save replay to this path.
        agent_name: Name of the agent.

    Returns:
        Replay data dictionary.
    """
    recorder = ReplayRecorder(env, agent_name=agent_name)

    obs, info = recorder.reset(seed=seed)

    done = False
    while not done:
        action = agent_fn(obs)
        obs, reward, terminated, truncated, info = recorder.step(action)
        done = terminated or truncated

    replay_data = recorder.get_replay_data()

    if save_path:
        recorder.save(save_path)

    return replay_data
