import gymnasium as gym
import numpy as np
import pytest

from tetris_engine.env import ENV_ID
from tetris_engine.env.tetris_env import TetrisEnv
from tetris_engine.game import Action, GameConfig, SessionPhase
from tetris_engine.rl.random_agent import build_parser, run_random


@pytest.fixture
def env():
    env = TetrisEnv(render_mode="rgb_array")
    yield env
    env.close()


def test_reset_observation_shapes(env):
    obs, info = env.reset(seed=3)
    assert obs["grid"].shape == (20, 10)
    assert obs["grid"].dtype == np.int8
    assert obs["level"].tolist() == [1]
    assert 1 <= obs["next_piece"] <= 7
    assert env.observation_space.contains(obs)
    assert info["score"] == 0
    assert info["pieces_dropped"] == 1
    assert env.session.phase == SessionPhase.PLAYING


def test_same_seed_same_pieces(env):
    first, _ = env.reset(seed=8)
    second, _ = env.reset(seed=8)
    np.testing.assert_array_equal(first["grid"], second["grid"])
    assert first["next_piece"] == second["next_piece"]


def test_hard_drop_step_rewards_score(env):
    env.reset(seed=1)
    obs, reward, terminated, truncated, info = env.step(int(Action.HARD_DROP))
    assert reward == info["score"] > 0
    assert not terminated and not truncated
    assert info["pieces_dropped"] == 2
    assert set(info["reward_components"]) == {"score", "holes", "bumpiness", "height"}


def test_gravity_runs_once_per_frame(env):
    env.reset(seed=1)
    y = env.session.current_piece.y
    env.step(int(Action.NONE))
    assert env.session.current_piece.y == y + 1


def test_episode_terminates_on_game_over():
    env = TetrisEnv(terminal_penalty=5.0)
    env.reset(seed=0)
    terminated = False
    for _ in range(200):
        _, reward, terminated, _, info = env.step(int(Action.HARD_DROP))
        if terminated:
            break
    assert terminated
    assert info["reward_components"]["terminal"] == -5.0
    # further steps stay terminal
    _, reward, terminated, _, _ = env.step(int(Action.MOVE_LEFT))
    assert terminated and reward == 0.0
    env.close()


def test_truncation_after_step_limit():
    env = TetrisEnv(max_episode_steps=3)
    env.reset(seed=0)
    results = [env.step(int(Action.NONE)) for _ in range(3)]
    assert [r[3] for r in results] == [False, False, True]
    env.close()


def test_render_rgb_array(env):
    env.reset(seed=2)
    frame = env.render()
    assert frame.shape == (20 * 12, 10 * 12, 3)
    assert frame.dtype == np.uint8
    assert TetrisEnv().render() is None


def test_custom_board_size():
    env = TetrisEnv(config=GameConfig(board_width=8, board_height=16))
    obs, _ = env.reset()
    assert obs["grid"].shape == (16, 8)
    env.close()


def test_registered_env_and_random_agent():
    env = gym.make(ENV_ID)
    env.reset(seed=0)
    env.close()
    assert isinstance(run_random(steps=50, seed=0), float)
    args = build_parser().parse_args(["--steps", "5", "-v"])
    assert args.steps == 5 and args.verbose
