from __future__ import annotations

import argparse
import logging
from typing import Optional

import gymnasium as gym

from tetris_engine.env import ENV_ID  # ensure registration

logger = logging.getLogger(__name__)


def run_random(steps: int = 200, seed: Optional[int] = None) -> float:
    env = gym.make(ENV_ID)
    obs, info = env.reset(seed=seed)
    env.action_space.seed(seed)
    total_reward = 0.0
    games = 0
    for _ in range(steps):
        action = env.action_space.sample()
        obs, reward, terminated, truncated, info = env.step(action)
        total_reward += float(reward)
        if terminated or truncated:
            games += 1
            logger.info("game %d ended: score %d, lines %d", games, info["score"], info["lines_cleared"])
            obs, info = env.reset()
    env.close()
    logger.info("random agent total reward: %.2f over %d steps", total_reward, steps)
    return total_reward


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser()
    p.add_argument("--steps", type=int, default=200)
    p.add_argument("--seed", type=int, default=None)
    p.add_argument("-v", "--verbose", action="store_true")
    return p


def main() -> None:
    args = build_parser().parse_args()
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    run_random(args.steps, args.seed)


if __name__ == "__main__":  # pragma: no cover
    main()
