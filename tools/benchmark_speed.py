"""
Performance Benchmark
=====================

Measures headless simulation throughput for performance tuning.

Usage:
    python -m tools.benchmark_speed [--steps S] [--seed N] [--quick]
"""

from __future__ import annotations

import argparse
import sys
import time
from typing import Callable, Dict

import numpy as np

from merry_flappy.flappy_core.config_loader import load_config
from merry_flappy.flappy_core.env_gym import ACTION_JUMP, ACTION_NOOP, FlappyEnv
from merry_flappy.flappy_core.game import FlappySession
from merry_flappy.flappy_core.leaderboard import LeaderboardStore, MemoryStore
from merry_flappy.flappy_core.state_machine import GameState


def make_autopilot(character_size: float) -> Callable[[Dict[str, np.ndarray]], int]:
    """Jump whenever the character sinks below the lower part of the gap."""
    def act(obs: Dict[str, np.ndarray]) -> int:
        if not int(obs["started"]):
            return ACTION_JUMP
        center = float(obs["character_y"]) + character_size / 2
        target = float(obs["gap_top"]) + float(obs["gap_height"]) * 0.6
        if center > target and float(obs["velocity"]) >= 0:
            return ACTION_JUMP
        return ACTION_NOOP
    return act


def make_random_policy(seed: int, jump_prob: float = 0.08) -> Callable[[Dict[str, np.ndarray]], int]:
    rng = np.random.default_rng(seed)

    def act(obs: Dict[str, np.ndarray]) -> int:
        if not int(obs["started"]) or rng.random() < jump_prob:
            return ACTION_JUMP
        return ACTION_NOOP
    return act


def benchmark_env(
    num_steps: int = 10000,
    seed: int = 42,
    policy: str = "autopilot"
) -> dict:
    """
    Benchmark FlappyEnv step throughput.

    Args:
        num_steps: Number of steps to run.
        seed: Random seed.
        policy: "autopilot" or "random".

    Returns:
        Dict with timing results.
    """
    env = FlappyEnv()
    if policy == "autopilot":
        act = make_autopilot(env.config.character.size)
    else:
        act = make_random_policy(seed)

    obs, _ = env.reset(seed=seed)
    episodes = 0
    best_score = 0
    start = time.perf_counter()

    for _ in range(num_steps):
        obs, _, terminated, truncated, info = env.step(act(obs))
        best_score = max(best_score, int(info["score"]))
        if terminated or truncated:
            episodes += 1
            obs, _ = env.reset()

    elapsed = time.perf_counter() - start
    env.close()

    return {
        "mode": f"env/{policy}",
        "num_steps": num_steps,
        "episodes": episodes,
        "best_score": best_score,
        "elapsed_seconds": elapsed,
        "steps_per_second": num_steps / elapsed,
        "ms_per_step": (elapsed * 1000) / num_steps
    }


def benchmark_session(
    num_steps: int = 10000,
    seed: int = 42
) -> dict:
    """
    Benchmark raw FlappySession ticks without Gym overhead.

    The character jumps every 18 ticks, which keeps it roughly level.
    """
    config = load_config()
    session = FlappySession(
        config=config,
        seed=seed,
        leaderboard=LeaderboardStore(MemoryStore(), config)
    )
    session.start(player_name="bench")

    episodes = 0
    start = time.perf_counter()

    for i in range(num_steps):
        if not session.started or i % 18 == 0:
            session.jump()
        session.tick()
        if session.game_state is GameState.GAMEOVER:
            episodes += 1
            session.retry()

    elapsed = time.perf_counter() - start

    return {
        "mode": "session",
        "num_steps": num_steps,
        "episodes": episodes,
        "best_score": max([e.score for e in session.leaderboard_entries()], default=0),
        "elapsed_seconds": elapsed,
        "steps_per_second": num_steps / elapsed,
        "ms_per_step": (elapsed * 1000) / num_steps
    }


def run_all_benchmarks(steps: int = 10000, seed: int = 42) -> list:
    """Run comprehensive benchmarks."""
    results = []

    print("=" * 60)
    print("MERRY FLAPPY SIMULATION BENCHMARK")
    print("=" * 60)
    print()

    print("Benchmarking FlappySession (raw)...")
    results.append(benchmark_session(num_steps=steps, seed=seed))

    for policy in ("autopilot", "random"):
        print(f"Benchmarking FlappyEnv ({policy})...")
        results.append(benchmark_env(num_steps=steps, seed=seed, policy=policy))

    print()
    print(f"{'Mode':<20} {'Steps/s':>12} {'ms/step':>10} {'Episodes':>9} {'Best':>6}")
    print("-" * 60)

    for r in results:
        print(f"{r['mode']:<20} {r['steps_per_second']:>12.1f} {r['ms_per_step']:>10.4f} "
              f"{r['episodes']:>9} {r['best_score']:>6}")

    return results


def main():
    parser = argparse.ArgumentParser(description="Benchmark Merry Flappy simulation performance")
    parser.add_argument("--steps", type=int, default=10000, help="Steps per benchmark")
    parser.add_argument("--seed", type=int, default=42, help="Random seed")
    parser.add_argument("--quick", action="store_true", help="Quick benchmark (fewer steps)")

    args = parser.parse_args()

    steps = 1000 if args.quick else args.steps

    run_all_benchmarks(steps=steps, seed=args.seed)

    return 0


if __name__ == "__main__":
    sys.exit(main())
