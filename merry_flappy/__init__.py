"""
Merry Flappy
============

Simulation core of a tick-driven, single-player arcade game: a character
falls under gravity and must pass through a stream of gapped obstacles,
earning score and lives, with two timed power-ups (SlowMo and ScoreBoost)
and a persisted top-5 leaderboard.

Rendering, input capture and menus belong to the host application; this
package only consumes input signals and produces per-tick snapshots.

All tunable parameters are in game_config.yaml.
"""
