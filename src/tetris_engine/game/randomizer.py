from __future__ import annotations

import random
from typing import List, Optional, Tuple

from .pieces import TetrominoType


class BagRandomizer:
    """7-bag piece generator.

    Each refill is a uniformly shuffled copy of all seven tetrominoes, so no
    type is skipped or repeated within one bag. Every session owns its own
    instance; pass `seed` for a reproducible sequence.
    """

    def __init__(self, seed: Optional[int] = None, rng: Optional[random.Random] = None) -> None:
        self.rng = rng or random.Random(seed)
        self._bag: List[TetrominoType] = []

    def seed(self, seed: Optional[int]) -> None:
        self.rng.seed(seed)
        self._bag = []

    def reset(self) -> None:
        self._bag = []

    def _refill(self) -> None:
        bag = list(TetrominoType)
        self.rng.shuffle(bag)  # Fisher-Yates
        self._bag = bag

    def next(self) -> TetrominoType:
        if not self._bag:
            self._refill()
        return self._bag.pop()

    @property
    def remaining(self) -> Tuple[TetrominoType, ...]:
        """Types still in the current bag, in draw order."""
        return tuple(reversed(self._bag))
