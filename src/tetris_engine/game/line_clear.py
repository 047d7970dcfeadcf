from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import IntEnum
from typing import Any, Callable, Dict, List, Optional, Tuple

from .analysis import board_features, most_complete_lines
from .board import Board
from .pieces import Piece

logger = logging.getLogger(__name__)


class ClearType(IntEnum):
    NONE = 0
    SINGLE = 1
    DOUBLE = 2
    TRIPLE = 3
    TETRIS = 4

    @property
    def label(self) -> str:
        return self.name.lower()

    @classmethod
    def for_lines(cls, lines: int) -> "ClearType":
        if lines <= 0:
            return cls.NONE
        return cls(min(lines, 4))


TSpinDetector = Callable[[Board, Optional[Piece], bool], bool]


def no_t_spin(board: Board, piece: Optional[Piece], last_action_was_rotation: bool) -> bool:
    """Default T-spin hook: never reports a T-spin.

    Corner-fill analysis is not implemented. Pass a detector with the same
    signature to `LineClearEngine` to enable T-spin scoring.
    """
    return False


@dataclass(frozen=True)
class LineClearResult:
    lines_cleared: int = 0
    cleared_rows: Tuple[int, ...] = ()
    clear_type: ClearType = ClearType.NONE
    combo: int = 0
    is_combo: bool = False
    is_tetris: bool = False
    is_perfect_clear: bool = False
    is_t_spin: bool = False


class LineClearEngine:
    """Finds, clears and classifies full rows.

    The combo streak is passed in and handed back in the result; the engine
    keeps no game state of its own.
    """

    def __init__(self, t_spin_detector: Optional[TSpinDetector] = None, t_spin_enabled: bool = True) -> None:
        self.t_spin_detector = t_spin_detector or no_t_spin
        self.t_spin_enabled = t_spin_enabled

    def preview(self, board: Board) -> List[int]:
        return board.full_rows()

    def check_and_clear(
        self,
        board: Board,
        combo: int = 0,
        last_action_was_rotation: bool = False,
        piece: Optional[Piece] = None,
    ) -> LineClearResult:
        # all full rows are collected before any is removed
        full_rows = board.full_rows()
        if not full_rows:
            return LineClearResult(combo=0)

        # the hook sees the board with the locked piece and its full rows intact
        is_t_spin = False
        if self.t_spin_enabled and last_action_was_rotation:
            is_t_spin = bool(self.t_spin_detector(board, piece, last_action_was_rotation))

        lines = board.clear_rows(full_rows)
        combo += 1
        clear_type = ClearType.for_lines(lines)
        is_perfect_clear = board.is_empty()

        logger.debug(
            "cleared rows %s (%s), combo %d, perfect=%s, t-spin=%s",
            full_rows, clear_type.label, combo, is_perfect_clear, is_t_spin,
        )
        return LineClearResult(
            lines_cleared=lines,
            cleared_rows=tuple(full_rows),
            clear_type=clear_type,
            combo=combo,
            is_combo=combo > 1,
            is_tetris=lines == 4,
            is_perfect_clear=is_perfect_clear,
            is_t_spin=is_t_spin,
        )

    def field_analysis(self, board: Board, combo: int = 0) -> Dict[str, Any]:
        features = board_features(board.grid)
        features["combo"] = combo
        features["most_complete_lines"] = most_complete_lines(board.grid)
        return features
