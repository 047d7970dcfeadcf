from __future__ import annotations

from enum import IntEnum
from typing import Iterable, List, Sequence, Tuple

import numpy as np


Coordinate = Tuple[int, int]


class Cell(IntEnum):
    SHADOW = -1
    EMPTY = 0
    I = 1
    O = 2
    T = 3
    S = 4
    Z = 5
    J = 6
    L = 7


class Board:
    """Fixed-size playfield, row 0 at the top.

    The grid uses 0 for empty cells and the tetromino index (1..7) for locked
    blocks. Cells with a negative row index sit above the visible field and
    never collide with anything except the side walls.
    """

    def __init__(self, width: int = 10, height: int = 20) -> None:
        if width <= 0 or height <= 0:
            raise ValueError(f"board dimensions must be positive, got {width}x{height}")
        self.width = int(width)
        self.height = int(height)
        self.grid = np.zeros((self.height, self.width), dtype=np.int8)

    def reset(self) -> None:
        self.grid = np.zeros((self.height, self.width), dtype=np.int8)

    def is_inside(self, x: int, y: int) -> bool:
        return 0 <= x < self.width and 0 <= y < self.height

    def _check_bounds(self, x: int, y: int) -> None:
        if not self.is_inside(x, y):
            raise IndexError(f"cell ({x}, {y}) outside {self.width}x{self.height} board")

    def get(self, x: int, y: int) -> Cell:
        self._check_bounds(x, y)
        return Cell(int(self.grid[y, x]))

    def set(self, x: int, y: int, cell: int) -> None:
        self._check_bounds(x, y)
        self.grid[y, x] = int(cell)

    def is_row_full(self, y: int) -> bool:
        if not 0 <= y < self.height:
            raise IndexError(f"row {y} outside board of height {self.height}")
        return bool(np.all(self.grid[y] != Cell.EMPTY))

    def full_rows(self) -> List[int]:
        """Indices of completely filled rows, top to bottom."""
        return [int(y) for y in np.where(np.all(self.grid != Cell.EMPTY, axis=1))[0]]

    def clear_row(self, y: int) -> None:
        self.clear_rows([y])

    def clear_rows(self, rows: Sequence[int]) -> int:
        """Remove `rows` in one pass and insert as many empty rows at the top."""
        rows = sorted(set(int(y) for y in rows))
        if not rows:
            return 0
        for y in rows:
            if not 0 <= y < self.height:
                raise IndexError(f"row {y} outside board of height {self.height}")
        num = len(rows)
        remaining = np.delete(self.grid, rows, axis=0)
        new_rows = np.zeros((num, self.width), dtype=np.int8)
        self.grid = np.vstack((new_rows, remaining))
        return num

    def can_place(self, cells: Iterable[Coordinate]) -> bool:
        for x, y in cells:
            if x < 0 or x >= self.width or y >= self.height:
                return False
            if y >= 0 and self.grid[y, x] != Cell.EMPTY:
                return False
        return True

    def place(self, cells: Iterable[Coordinate], value: int) -> int:
        """Write `value` into every visible cell; returns how many were written.

        Cells above row 0 are dropped, everything else must be inside the board.
        """
        placed = 0
        for x, y in cells:
            if y < 0:
                continue
            self.set(x, y, value)
            placed += 1
        return placed

    def is_empty(self) -> bool:
        return not bool(np.any(self.grid != Cell.EMPTY))

    def snapshot(self) -> np.ndarray:
        state = self.grid.copy()
        state.setflags(write=False)
        return state

    def overlay(
        self,
        cells: Iterable[Coordinate] = (),
        value: int = 0,
        ghost_cells: Iterable[Coordinate] = (),
    ) -> np.ndarray:
        """Copy of the grid with a falling piece and its shadow drawn in.

        Shadow cells only mark empty squares; the piece is drawn last so it
        wins where the two overlap.
        """
        state = self.grid.copy()
        for x, y in ghost_cells:
            if self.is_inside(x, y) and state[y, x] == Cell.EMPTY:
                state[y, x] = Cell.SHADOW
        for x, y in cells:
            if self.is_inside(x, y):
                state[y, x] = value
        return state
