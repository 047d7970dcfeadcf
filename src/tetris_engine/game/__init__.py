"""Game module for the tetris engine.

Exports the core engine and supporting classes:
- Board / Cell: playfield grid and row mutation
- Piece, PieceCatalog, TetrominoType: tetromino shapes and rotation states
- BagRandomizer: per-session 7-bag piece generator
- CollisionResolver: move, rotation, wall-kick and drop checks
- LineClearEngine: row clearing, combos and clear classification
- ScoringRules: score tables and level progression
- GameSession: the state machine tying it all together
"""

from .board import Board, Cell
from .pieces import Piece, PieceCatalog, TetrominoType
from .randomizer import BagRandomizer
from .collision import CollisionResolver, KickResult, MoveCheck
from .line_clear import ClearType, LineClearEngine, LineClearResult, no_t_spin
from .rules import ConfigError, ScoringRules
from .state import GameResult, GameState, SessionPhase
from .timer import ManualScheduler
from .core import Action, GameConfig, GameSession

__all__ = [
    "Board",
    "Cell",
    "Piece",
    "PieceCatalog",
    "TetrominoType",
    "BagRandomizer",
    "CollisionResolver",
    "KickResult",
    "MoveCheck",
    "ClearType",
    "LineClearEngine",
    "LineClearResult",
    "no_t_spin",
    "ConfigError",
    "ScoringRules",
    "GameResult",
    "GameState",
    "SessionPhase",
    "ManualScheduler",
    "Action",
    "GameConfig",
    "GameSession",
]
