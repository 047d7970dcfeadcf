from __future__ import annotations

from typing import Any, Dict, Optional, Tuple

import numpy as np
import gymnasium as gym
from gymnasium import spaces

from tetris_engine.game import Action, GameConfig, GameSession, ManualScheduler
from tetris_engine.game.analysis import board_features


def _color_for_value(v: int) -> Tuple[int, int, int]:
    palette = {
        -1: (70, 70, 84),  # shadow
        0: (20, 20, 26),
        1: (0, 240, 240),  # I
        2: (240, 240, 0),  # O
        3: (160, 0, 240),  # T
        4: (0, 240, 0),    # S
        5: (240, 0, 0),    # Z
        6: (0, 0, 240),    # J
        7: (240, 160, 0),  # L
    }
    return palette.get(v, (200, 200, 200))


class TetrisEnv(gym.Env):
    """Single-player falling-block game driven one frame per step.

    Each step applies one `Action` and then advances the session clock by
    `frame_ms`, so gravity runs at the configured drop interval.
    """

    metadata = {"render_modes": ["rgb_array"], "render_fps": 30}

    def __init__(self, config: Optional[GameConfig] = None, render_mode: Optional[str] = None,
                 reward_weights: Optional[Dict[str, float]] = None,
                 frame_ms: Optional[float] = None,
                 terminal_penalty: float = 0.0,
                 max_episode_steps: int = 10000) -> None:
        super().__init__()
        self.config = config or GameConfig()
        self.scheduler = ManualScheduler()
        self.session = GameSession(self.config, scheduler=self.scheduler)
        self.render_mode = render_mode

        self.frame_seconds = float(frame_ms if frame_ms is not None else self.config.base_drop_interval_ms) / 1000.0
        self.terminal_penalty = float(terminal_penalty)
        self.max_episode_steps = int(max_episode_steps)
        self.reward_weights: Dict[str, float] = {
            "score": 1.0,        # engine score gained this step
            # Negative components (penalize increases)
            "holes": 0.0,
            "bumpiness": 0.0,
            "height": 0.0,
        }
        if reward_weights:
            self.reward_weights.update({k: float(v) for k, v in reward_weights.items()})

        h, w = self.config.board_height, self.config.board_width
        self.observation_space = spaces.Dict(
            {
                "grid": spaces.Box(low=-1, high=7, shape=(h, w), dtype=np.int8),
                "next_piece": spaces.Discrete(8),
                "level": spaces.Box(low=1, high=np.iinfo(np.int32).max, shape=(1,), dtype=np.int32),
            }
        )
        self.action_space = spaces.Discrete(len(Action))

        self._steps = 0

    def _get_obs(self) -> Dict[str, Any]:
        state = self.session.snapshot()
        grid = self.session.render_grid(include_ghost=True).astype(np.int8)
        return {
            "grid": grid,
            "next_piece": int(state.next_piece) if state.next_piece is not None else 0,
            "level": np.array([state.level], dtype=np.int32),
        }

    def _get_info(self) -> Dict[str, Any]:
        state = self.session.snapshot()
        return {
            "score": state.score,
            "lines_cleared": state.lines_cleared,
            "level": state.level,
            "combo": state.combo,
            "pieces_dropped": state.pieces_dropped,
            "steps": self._steps,
            "features": board_features(state.board),
        }

    def reset(self, *, seed: Optional[int] = None, options: Optional[dict] = None) -> Tuple[Dict[str, Any], Dict[str, Any]]:
        super().reset(seed=seed)
        self.session.restart(seed=seed)
        self.session.start()
        self._steps = 0
        return self._get_obs(), self._get_info()

    def step(self, action):
        state = self.session.snapshot()
        if state.is_game_over:
            return self._get_obs(), 0.0, True, False, self._get_info()

        features_before = board_features(state.board)
        score_before = state.score

        self.session.dispatch(Action(int(action)))
        self.scheduler.advance(self.frame_seconds)
        self._steps += 1

        after = self.session.snapshot()
        features_after = board_features(after.board)
        reward_components: Dict[str, float] = {
            "score": self.reward_weights["score"] * float(after.score - score_before),
            "holes": -self.reward_weights["holes"] * float(
                max(0, features_after["holes"] - features_before["holes"])),
            "bumpiness": -self.reward_weights["bumpiness"] * float(
                max(0, features_after["bumpiness"] - features_before["bumpiness"])),
            "height": -self.reward_weights["height"] * float(
                max(0, features_after["max_height"] - features_before["max_height"])),
        }
        terminated = bool(after.is_game_over)
        truncated = not terminated and self._steps >= self.max_episode_steps
        if terminated:
            reward_components["terminal"] = -self.terminal_penalty

        reward = float(sum(reward_components.values()))
        info = self._get_info()
        info["reward_components"] = reward_components
        return self._get_obs(), reward, terminated, truncated, info

    def render(self) -> Optional[np.ndarray]:
        if self.render_mode != "rgb_array":
            return None
        grid = self.session.render_grid(include_ghost=True)
        cell = 12
        h, w = grid.shape
        img = np.zeros((h * cell, w * cell, 3), dtype=np.uint8)
        for y in range(h):
            for x in range(w):
                img[y * cell : (y + 1) * cell, x * cell : (x + 1) * cell, :] = _color_for_value(int(grid[y, x]))
        return img

    def close(self) -> None:
        self.session.destroy()
