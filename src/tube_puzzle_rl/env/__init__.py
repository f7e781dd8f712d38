"""Gymnasium environments for Tube Puzzle RL."""

from __future__ import annotations

from gymnasium.envs.registration import register

# Default 16-segment, 20-ring tube
register(
    id="TubePuzzle-16x20-v0",
    entry_point="tube_puzzle_rl.env.tube_puzzle_env:TubePuzzleEnv",
)

__all__ = ["TubePuzzle-16x20-v0"]
