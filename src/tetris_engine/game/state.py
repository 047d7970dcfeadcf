from __future__ import annotations

from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any, Dict, Optional

import numpy as np

from .pieces import Piece, TetrominoType


class SessionPhase(Enum):
    IDLE = "idle"
    PLAYING = "playing"
    PAUSED = "paused"
    GAME_OVER = "game_over"
    DESTROYED = "destroyed"


@dataclass(frozen=True)
class GameResult:
    """End-of-game summary handed to persistence and ranking collaborators."""

    score: int
    level: int
    lines_cleared: int
    duration_seconds: int
    pieces_dropped: int

    def as_dict(self) -> Dict[str, Any]:
        return asdict(self)


def _empty_board() -> np.ndarray:
    board = np.zeros((0, 0), dtype=np.int8)
    board.setflags(write=False)
    return board


@dataclass(frozen=True, eq=False)
class GameState:
    """Immutable view of a session. Only `GameSession` produces new ones."""

    board: np.ndarray = field(default_factory=_empty_board)
    current_piece: Optional[Piece] = None
    next_piece: Optional[TetrominoType] = None
    score: int = 0
    level: int = 1
    lines_cleared: int = 0
    combo: int = 0
    is_playing: bool = False
    is_paused: bool = False
    is_game_over: bool = False
    playtime: float = 0.0
    pieces_dropped: int = 0
    soft_drop_points: int = 0
    hard_drop_points: int = 0

    @property
    def phase(self) -> SessionPhase:
        if self.is_game_over:
            return SessionPhase.GAME_OVER
        if self.is_paused:
            return SessionPhase.PAUSED
        if self.is_playing:
            return SessionPhase.PLAYING
        return SessionPhase.IDLE

    def result(self) -> GameResult:
        return GameResult(
            score=self.score,
            level=self.level,
            lines_cleared=self.lines_cleared,
            duration_seconds=int(self.playtime),
            pieces_dropped=self.pieces_dropped,
        )
