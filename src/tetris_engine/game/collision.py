from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Sequence, Tuple

from .board import Board, Cell, Coordinate
from .pieces import CW, Piece


# Tried in order; the first offset that fits wins.
KICK_OFFSETS: Tuple[Coordinate, ...] = (
    (0, 0),
    (-1, 0),
    (1, 0),
    (0, -1),
    (-1, -1),
    (1, -1),
)


@dataclass(frozen=True)
class MoveCheck:
    can_move: bool
    hit_wall: bool = False
    hit_floor: bool = False
    hit_piece: bool = False


@dataclass(frozen=True)
class KickResult:
    success: bool
    offset: Coordinate = (0, 0)
    piece: Optional[Piece] = None


class CollisionResolver:
    """Move, rotation and drop checks of a piece against one board."""

    def __init__(self, board: Board, kick_offsets: Sequence[Coordinate] = KICK_OFFSETS) -> None:
        self.board = board
        self.kick_offsets = tuple(kick_offsets)

    def check_piece(self, piece: Piece) -> MoveCheck:
        hit_wall = hit_floor = hit_piece = False
        width, height = self.board.width, self.board.height
        grid = self.board.grid
        for x, y in piece.cells():
            if x < 0 or x >= width:
                hit_wall = True
            if y >= height:
                hit_floor = True
            if 0 <= x < width and 0 <= y < height and grid[y, x] != Cell.EMPTY:
                hit_piece = True
        return MoveCheck(
            can_move=not (hit_wall or hit_floor or hit_piece),
            hit_wall=hit_wall,
            hit_floor=hit_floor,
            hit_piece=hit_piece,
        )

    def is_valid(self, piece: Piece) -> bool:
        return self.check_piece(piece).can_move

    def check_move(self, piece: Piece, dx: int, dy: int) -> MoveCheck:
        return self.check_piece(piece.moved(dx, dy))

    def check_rotation(self, piece: Piece, direction: int = CW) -> MoveCheck:
        return self.check_piece(piece.rotated(direction))

    def try_wall_kick(self, piece: Piece, direction: int = CW) -> KickResult:
        rotated = piece.rotated(direction)
        for dx, dy in self.kick_offsets:
            candidate = rotated.moved(dx, dy)
            if self.is_valid(candidate):
                return KickResult(success=True, offset=(dx, dy), piece=candidate)
        return KickResult(success=False)

    def drop_distance(self, piece: Piece) -> int:
        distance = 0
        while self.check_move(piece, 0, distance + 1).can_move:
            distance += 1
        return distance

    def drop_position(self, piece: Piece) -> Coordinate:
        return piece.x, piece.y + self.drop_distance(piece)

    def is_game_over(self, piece: Piece) -> bool:
        return not self.is_valid(piece)
