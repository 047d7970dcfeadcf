"""Gymnasium environments for the tetris engine."""

from __future__ import annotations

from gymnasium.envs.registration import register

ENV_ID = "Tetris-10x20-v0"

# Register default Tetris environment
register(
    id=ENV_ID,
    entry_point="tetris_engine.env.tetris_env:TetrisEnv",
)

__all__ = ["ENV_ID"]
