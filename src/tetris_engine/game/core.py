from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from enum import IntEnum
from typing import Any, Callable, List, Optional

import numpy as np

from .board import Board, Coordinate
from .collision import CollisionResolver
from .events import GAME_OVER, LINES_CLEARED, STATE_CHANGE, EventEmitter
from .line_clear import LineClearEngine, LineClearResult, TSpinDetector
from .pieces import CCW, CW, Piece, PieceCatalog
from .randomizer import BagRandomizer
from .rules import ConfigError, ScoringRules
from .state import GameResult, GameState, SessionPhase
from .timer import ManualScheduler

logger = logging.getLogger(__name__)


class Action(IntEnum):
    MOVE_LEFT = 0
    MOVE_RIGHT = 1
    MOVE_DOWN = 2
    SOFT_DROP = 3
    ROTATE_CW = 4
    ROTATE_CCW = 5
    HARD_DROP = 6
    NONE = 7


@dataclass
class GameConfig:
    board_width: int = 10
    board_height: int = 20
    base_drop_interval_ms: float = 1000.0
    level_speed_multiplier: float = 0.85
    spawn_y: int = -1
    random_seed: Optional[int] = None
    wall_kicks: bool = True
    t_spin_detection: bool = True
    rules: ScoringRules = field(default_factory=ScoringRules)

    def __post_init__(self) -> None:
        if self.board_width <= 0 or self.board_height <= 0:
            raise ConfigError(
                f"board dimensions must be positive, got {self.board_width}x{self.board_height}"
            )
        if self.base_drop_interval_ms <= 0:
            raise ConfigError("base_drop_interval_ms must be positive")
        if self.level_speed_multiplier <= 0:
            raise ConfigError("level_speed_multiplier must be positive")

    def drop_interval_ms(self, level: int) -> float:
        return self.base_drop_interval_ms * self.level_speed_multiplier ** (level - 1)


class GameSession:
    """One game: owns the board, the randomizer and the tick timer.

    All mutation goes through `start`, `pause`, `restart`, `destroy`,
    `dispatch` and the tick callback. The host must call them from a single
    thread or event loop. `scheduler` needs `time()` and
    `call_later(delay, callback, *args)` returning a cancellable handle; an
    asyncio loop qualifies, and a `ManualScheduler` is used when none is
    given.
    """

    def __init__(
        self,
        config: Optional[GameConfig] = None,
        scheduler: Any = None,
        t_spin_detector: Optional[TSpinDetector] = None,
    ) -> None:
        self.config = config or GameConfig()
        self.rules = self.config.rules
        self.scheduler = scheduler if scheduler is not None else ManualScheduler()
        self.randomizer = BagRandomizer(self.config.random_seed)
        self.board = Board(self.config.board_width, self.config.board_height)
        self.collision = CollisionResolver(self.board)
        self.line_clear = LineClearEngine(t_spin_detector, t_spin_enabled=self.config.t_spin_detection)
        self._events = EventEmitter()
        self._tick_handle = None
        self._tick_generation = 0
        self._destroyed = False
        self._game_over_pending = False
        self._last_action_rotation = False
        self._last_clear: Optional[LineClearResult] = None
        self._play_started_at: Optional[float] = None
        self._playtime = 0.0
        self._state = self._initial_state()

    def _initial_state(self) -> GameState:
        return GameState(board=self.board.snapshot(), next_piece=self.randomizer.next())

    # Queries

    @property
    def phase(self) -> SessionPhase:
        if self._destroyed:
            return SessionPhase.DESTROYED
        return self._state.phase

    @property
    def current_piece(self) -> Optional[Piece]:
        return self._state.current_piece

    @property
    def last_clear(self) -> Optional[LineClearResult]:
        """Outcome of the most recent lock, None before the first one."""
        return self._last_clear

    @property
    def drop_interval_ms(self) -> float:
        return self.config.drop_interval_ms(self._state.level)

    def snapshot(self) -> GameState:
        return replace(self._state, board=self.board.snapshot(), playtime=self._elapsed())

    def result(self) -> GameResult:
        return self.snapshot().result()

    def ghost_position(self) -> Optional[Coordinate]:
        piece = self._state.current_piece
        if piece is None:
            return None
        return self.collision.drop_position(piece)

    def render_grid(self, include_ghost: bool = True) -> np.ndarray:
        """Board with the falling piece (and optionally its shadow) drawn in."""
        piece = self._state.current_piece
        if piece is None:
            return self.board.overlay()
        ghost_cells: List[Coordinate] = []
        if include_ghost:
            ghost_cells = piece.moved(0, self.collision.drop_distance(piece)).cells()
        return self.board.overlay(piece.cells(), int(piece.kind), ghost_cells)

    def field_analysis(self) -> dict:
        return self.line_clear.field_analysis(self.board, self._state.combo)

    # Listeners

    def on_state_change(self, callback: Callable[[GameState], None]) -> Callable[[], None]:
        return self._events.on(STATE_CHANGE, callback)

    def on_lines_cleared(self, callback: Callable[[int, GameState], None]) -> Callable[[], None]:
        return self._events.on(LINES_CLEARED, callback)

    def on_game_over(self, callback: Callable[[GameState], None]) -> Callable[[], None]:
        return self._events.on(GAME_OVER, callback)

    # Lifecycle

    def start(self) -> bool:
        if self.phase != SessionPhase.IDLE:
            return False
        self._state = replace(self._state, is_playing=True, is_paused=False)
        self._play_started_at = self.scheduler.time()
        logger.info("session started (%dx%d)", self.board.width, self.board.height)
        self._spawn_next()
        if self._is_running():
            self._schedule_tick()
        self._publish()
        return True

    def pause(self) -> bool:
        """Toggle between playing and paused."""
        phase = self.phase
        if phase == SessionPhase.PLAYING:
            self._stop_clock()
            self._cancel_tick()
            self._state = replace(self._state, is_paused=True)
        elif phase == SessionPhase.PAUSED:
            self._play_started_at = self.scheduler.time()
            self._state = replace(self._state, is_paused=False)
            self._schedule_tick()
        else:
            return False
        self._publish()
        return True

    def restart(self, seed: Optional[int] = None) -> None:
        if self._destroyed:
            return
        self._cancel_tick()
        self.board.reset()
        if seed is not None:
            self.randomizer.seed(seed)
        else:
            self.randomizer.reset()
        self._play_started_at = None
        self._playtime = 0.0
        self._last_action_rotation = False
        self._last_clear = None
        self._game_over_pending = False
        self._state = self._initial_state()
        logger.info("session restarted")
        self._publish()

    def destroy(self) -> None:
        if self._destroyed:
            return
        self._cancel_tick()
        self._stop_clock()
        self._events.clear()
        self._destroyed = True

    # Actions

    def dispatch(self, action: Action) -> bool:
        """Apply a player action; returns True when it changed the game.

        Anything other than an active, unpaused game makes this a no-op.
        """
        action = Action(action)
        if self.phase != SessionPhase.PLAYING or self._state.current_piece is None:
            return False

        if action == Action.MOVE_LEFT:
            changed = self._shift(-1)
        elif action == Action.MOVE_RIGHT:
            changed = self._shift(1)
        elif action in (Action.MOVE_DOWN, Action.SOFT_DROP):
            changed = self._step_down(scored=True)
        elif action == Action.ROTATE_CW:
            changed = self._rotate(CW)
        elif action == Action.ROTATE_CCW:
            changed = self._rotate(CCW)
        elif action == Action.HARD_DROP:
            changed = self._hard_drop()
        else:
            changed = False

        if changed:
            self._publish()
        return changed

    def _shift(self, dx: int) -> bool:
        piece = self._state.current_piece
        if not self.collision.check_move(piece, dx, 0).can_move:
            return False
        self._state = replace(self._state, current_piece=piece.moved(dx, 0))
        self._last_action_rotation = False
        return True

    def _step_down(self, scored: bool) -> bool:
        piece = self._state.current_piece
        if self.collision.check_move(piece, 0, 1).can_move:
            self._state = replace(self._state, current_piece=piece.moved(0, 1))
            if scored:
                self._state = self.rules.apply_soft_drop(self._state, 1)
            self._last_action_rotation = False
        else:
            self._lock_piece()
        return True

    def _rotate(self, direction: int) -> bool:
        piece = self._state.current_piece
        if self.collision.check_rotation(piece, direction).can_move:
            rotated = piece.rotated(direction)
        elif self.config.wall_kicks:
            kick = self.collision.try_wall_kick(piece, direction)
            if not kick.success:
                return False
            rotated = kick.piece
        else:
            return False
        self._state = replace(self._state, current_piece=rotated)
        self._last_action_rotation = True
        return True

    def _hard_drop(self) -> bool:
        piece = self._state.current_piece
        distance = self.collision.drop_distance(piece)
        if distance > 0:
            self._last_action_rotation = False
        self._state = replace(self._state, current_piece=piece.moved(0, distance))
        self._state = self.rules.apply_hard_drop(self._state, distance)
        self._lock_piece()
        return True

    # Locking

    def _lock_piece(self) -> None:
        piece = self._state.current_piece
        cells = piece.cells()
        locked_out = any(y < 0 for _, y in cells)
        self.board.place(cells, int(piece.kind))
        result = self.line_clear.check_and_clear(
            self.board,
            combo=self._state.combo,
            last_action_was_rotation=self._last_action_rotation,
            piece=piece,
        )
        self._last_clear = result
        self._state = replace(self._state, current_piece=None, combo=result.combo)
        if result.lines_cleared:
            self._apply_clear(result)
        if locked_out:
            # part of the piece never entered the field
            logger.info("lock out: %s locked above row 0", piece.kind.name)
            self._end_game()
        else:
            self._spawn_next()
        if result.lines_cleared:
            self._events.emit(LINES_CLEARED, result.lines_cleared, self.snapshot())

    def _apply_clear(self, result: LineClearResult) -> None:
        old_level = self._state.level
        self._state, leveled_up = self.rules.apply_line_score(self._state, result.lines_cleared)
        level = self._state.level
        bonus = 0
        if result.is_combo:
            bonus += self.rules.combo_bonus(level, result.combo)
        if result.is_t_spin:
            bonus += self.rules.t_spin_bonus(result.lines_cleared, level)
        if result.is_perfect_clear:
            bonus += self.rules.perfect_clear_bonus(level)
        if bonus:
            self._state = replace(self._state, score=self._state.score + bonus)
        logger.debug(
            "%s: +%d lines, combo %d, bonus %d, score %d",
            result.clear_type.label, result.lines_cleared, result.combo, bonus, self._state.score,
        )
        if leveled_up:
            logger.info("level up %d -> %d", old_level, level)
            self._reschedule_tick()

    def _spawn_next(self) -> None:
        piece = PieceCatalog.spawn(self._state.next_piece, self.board.width, self.config.spawn_y)
        self._state = replace(
            self._state,
            current_piece=piece,
            next_piece=self.randomizer.next(),
            pieces_dropped=self._state.pieces_dropped + 1,
        )
        self._last_action_rotation = False
        if self.collision.is_game_over(piece):
            self._end_game()

    def _end_game(self) -> None:
        self._cancel_tick()
        self._stop_clock()
        self._state = replace(self._state, is_game_over=True, is_playing=False, is_paused=False)
        self._game_over_pending = True
        logger.info(
            "game over: score %d, level %d, lines %d",
            self._state.score, self._state.level, self._state.lines_cleared,
        )

    def _publish(self) -> None:
        snapshot = self.snapshot()
        self._events.emit(STATE_CHANGE, snapshot)
        if self._game_over_pending:
            self._game_over_pending = False
            self._events.emit(GAME_OVER, snapshot)

    # Timer

    def _is_running(self) -> bool:
        return not self._destroyed and self._state.phase == SessionPhase.PLAYING

    def _schedule_tick(self) -> None:
        self._cancel_tick()
        generation = self._tick_generation
        delay = self.drop_interval_ms / 1000.0
        self._tick_handle = self.scheduler.call_later(delay, self._on_tick, generation)

    def _cancel_tick(self) -> None:
        if self._tick_handle is not None:
            self._tick_handle.cancel()
            self._tick_handle = None
        self._tick_generation += 1

    def _reschedule_tick(self) -> None:
        self._cancel_tick()
        if self._is_running():
            self._schedule_tick()

    def _on_tick(self, generation: int) -> None:
        if generation != self._tick_generation or not self._is_running():
            return
        self._tick_handle = None
        if self._state.current_piece is not None:
            self._step_down(scored=False)
            self._publish()
        if self._tick_handle is None and self._is_running():
            self._schedule_tick()

    def _stop_clock(self) -> None:
        if self._play_started_at is not None:
            self._playtime += self.scheduler.time() - self._play_started_at
            self._play_started_at = None

    def _elapsed(self) -> float:
        if self._play_started_at is None:
            return self._playtime
        return self._playtime + (self.scheduler.time() - self._play_started_at)
