from __future__ import annotations

from dataclasses import dataclass, replace
from enum import IntEnum
from typing import Dict, List, Tuple

import numpy as np

from .board import Board, Cell, Coordinate


class TetrominoType(IntEnum):
    I = 1
    O = 2
    T = 3
    S = 4
    Z = 5
    J = 6
    L = 7

    @property
    def cell(self) -> Cell:
        return Cell(int(self))


Shape = np.ndarray

CW = 1
CCW = -1


def _rot90(shape: Shape, k: int) -> Shape:
    k = k % 4
    if k == 0:
        return shape
    return np.rot90(shape, k, axes=(1, 0))  # rotate clockwise when k>0


# Square bounding boxes so a 90 degree turn keeps the piece centred in place.
BASE_SHAPES = {
    TetrominoType.I: np.array([[0, 0, 0, 0], [1, 1, 1, 1], [0, 0, 0, 0], [0, 0, 0, 0]], dtype=np.int8),
    TetrominoType.O: np.array([[1, 1], [1, 1]], dtype=np.int8),
    TetrominoType.T: np.array([[0, 1, 0], [1, 1, 1], [0, 0, 0]], dtype=np.int8),
    TetrominoType.S: np.array([[0, 1, 1], [1, 1, 0], [0, 0, 0]], dtype=np.int8),
    TetrominoType.Z: np.array([[1, 1, 0], [0, 1, 1], [0, 0, 0]], dtype=np.int8),
    TetrominoType.J: np.array([[1, 0, 0], [1, 1, 1], [0, 0, 0]], dtype=np.int8),
    TetrominoType.L: np.array([[0, 0, 1], [1, 1, 1], [0, 0, 0]], dtype=np.int8),
}


def _rotation_states(base: Shape) -> Tuple[Shape, ...]:
    states: List[Shape] = []
    for k in range(4):
        shape = np.ascontiguousarray(_rot90(base, k)).copy()
        if any(np.array_equal(shape, existing) for existing in states):
            break
        shape.setflags(write=False)
        states.append(shape)
    return tuple(states)


ROTATIONS: Dict[TetrominoType, Tuple[Shape, ...]] = {
    kind: _rotation_states(base) for kind, base in BASE_SHAPES.items()
}


@dataclass(frozen=True)
class Piece:
    kind: TetrominoType
    rotation: int = 0
    x: int = 0
    y: int = 0

    @property
    def position(self) -> Coordinate:
        return self.x, self.y

    def shape(self) -> Shape:
        return PieceCatalog.shape(self.kind, self.rotation)

    def cells(self) -> List[Coordinate]:
        s = self.shape()
        h, w = s.shape
        cells: List[Coordinate] = []
        for dy in range(h):
            for dx in range(w):
                if s[dy, dx]:
                    cells.append((self.x + dx, self.y + dy))
        return cells

    def moved(self, dx: int, dy: int) -> "Piece":
        return replace(self, x=self.x + dx, y=self.y + dy)

    def rotated(self, direction: int = CW) -> "Piece":
        count = PieceCatalog.rotation_count(self.kind)
        return replace(self, rotation=(self.rotation + direction) % count)


class PieceCatalog:
    """Rotation states, spawn placement and ghost projection for tetrominoes."""

    @staticmethod
    def shape(kind: TetrominoType, rotation: int = 0) -> Shape:
        states = ROTATIONS[TetrominoType(kind)]
        return states[rotation % len(states)]

    @staticmethod
    def rotation_count(kind: TetrominoType) -> int:
        return len(ROTATIONS[TetrominoType(kind)])

    @staticmethod
    def rotations(kind: TetrominoType) -> Tuple[Shape, ...]:
        return ROTATIONS[TetrominoType(kind)]

    @staticmethod
    def rotate(piece: Piece, direction: int = CW) -> Piece:
        """Next rotation state at the same anchor, without any kick."""
        return piece.rotated(direction)

    @staticmethod
    def spawn_position(kind: TetrominoType, board_width: int, spawn_y: int = -1) -> Coordinate:
        w = PieceCatalog.shape(kind).shape[1]
        return (board_width - w) // 2, spawn_y

    @staticmethod
    def spawn(kind: TetrominoType, board_width: int, spawn_y: int = -1) -> Piece:
        x, y = PieceCatalog.spawn_position(kind, board_width, spawn_y)
        return Piece(kind=TetrominoType(kind), rotation=0, x=x, y=y)

    @staticmethod
    def ghost_position(piece: Piece, board: Board) -> Coordinate:
        ghost = piece
        while board.can_place(ghost.moved(0, 1).cells()):
            ghost = ghost.moved(0, 1)
        return ghost.position
