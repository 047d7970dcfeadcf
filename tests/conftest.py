from __future__ import annotations

import pytest

from tetris_engine.game import (
    BagRandomizer,
    Board,
    CollisionResolver,
    GameConfig,
    GameSession,
    ManualScheduler,
    TetrominoType,
)


def seed_with_draws(*kinds: TetrominoType) -> int:
    """Smallest seed whose first bag draws are `kinds`, in order."""
    for seed in range(20000):
        randomizer = BagRandomizer(seed)
        if all(randomizer.next() == kind for kind in kinds):
            return seed
    raise LookupError(f"no seed starts with {kinds}")


def seed_with_first(kind: TetrominoType) -> int:
    return seed_with_draws(kind)


@pytest.fixture
def board() -> Board:
    return Board(10, 20)


@pytest.fixture
def resolver(board: Board) -> CollisionResolver:
    return CollisionResolver(board)


@pytest.fixture
def scheduler() -> ManualScheduler:
    return ManualScheduler()


@pytest.fixture
def make_session(scheduler: ManualScheduler):
    def _make(*draws: TetrominoType, t_spin_detector=None, **kwargs) -> GameSession:
        kwargs.setdefault("random_seed", seed_with_draws(*(draws or (TetrominoType.I,))))
        return GameSession(GameConfig(**kwargs), scheduler=scheduler, t_spin_detector=t_spin_detector)

    return _make
