from __future__ import annotations

from dataclasses import dataclass, replace
from typing import NamedTuple, Tuple

from .state import GameState


class ConfigError(ValueError):
    """Raised when a game or scoring configuration cannot be used."""


class LineScore(NamedTuple):
    base: int
    level_bonus: int
    speed_bonus: int

    @property
    def total(self) -> int:
        return self.base + self.level_bonus + self.speed_bonus


@dataclass
class ScoringRules:
    """Score tables and level progression.

    Every method is a pure function of its arguments: the same inputs always
    give the same outputs, and states are returned as new objects.
    """

    line_clear_scores: tuple[int, int, int, int] = (40, 100, 300, 1200)
    soft_drop_per_cell: int = 1
    hard_drop_per_cell: int = 2
    combo_step: int = 50
    combo_cap: int = 1000
    t_spin_scores: tuple[int, int, int, int] = (400, 800, 1200, 1600)
    perfect_clear_points: int = 2000
    lines_per_level: int = 10
    speed_bonus_level: int = 5

    def __post_init__(self) -> None:
        self.line_clear_scores = tuple(int(v) for v in self.line_clear_scores)
        self.t_spin_scores = tuple(int(v) for v in self.t_spin_scores)
        if len(self.line_clear_scores) != 4:
            raise ConfigError("line_clear_scores needs one entry per 1..4 lines")
        if len(self.t_spin_scores) != 4:
            raise ConfigError("t_spin_scores needs one entry per 0..3 lines")
        if self.lines_per_level <= 0:
            raise ConfigError("lines_per_level must be positive")
        if min(self.line_clear_scores + self.t_spin_scores) < 0:
            raise ConfigError("score tables cannot hold negative values")

    # Line clears

    def line_score_breakdown(self, lines: int, level: int) -> LineScore:
        if not 1 <= lines <= 4:
            return LineScore(0, 0, 0)
        base = self.line_clear_scores[lines - 1]
        # floor(base * level * 0.1) in integer arithmetic
        level_bonus = base * level // 10
        speed_bonus = 0
        if level >= self.speed_bonus_level:
            speed_bonus = lines * 10 * ((level - self.speed_bonus_level + 1) // 2)
        return LineScore(base, level_bonus, speed_bonus)

    def line_score(self, lines: int, level: int) -> int:
        return self.line_score_breakdown(lines, level).total

    def level_for_lines(self, total_lines: int) -> int:
        return total_lines // self.lines_per_level + 1

    def apply_line_score(self, state: GameState, lines: int) -> Tuple[GameState, bool]:
        """Score `lines` and recompute the level; second item flags a level up."""
        total_lines = state.lines_cleared + max(0, lines)
        new_level = self.level_for_lines(total_lines)
        new_state = replace(
            state,
            score=state.score + self.line_score(lines, state.level),
            lines_cleared=total_lines,
            level=new_level,
        )
        return new_state, new_level > state.level

    def lines_to_next_level(self, state: GameState) -> int:
        return state.level * self.lines_per_level - state.lines_cleared

    # Drops

    def soft_drop_score(self, cells: int) -> int:
        return max(0, cells) * self.soft_drop_per_cell

    def hard_drop_score(self, cells: int) -> int:
        return max(0, cells) * self.hard_drop_per_cell

    def apply_soft_drop(self, state: GameState, cells: int) -> GameState:
        points = self.soft_drop_score(cells)
        return replace(state, score=state.score + points, soft_drop_points=state.soft_drop_points + points)

    def apply_hard_drop(self, state: GameState, cells: int) -> GameState:
        points = self.hard_drop_score(cells)
        return replace(state, score=state.score + points, hard_drop_points=state.hard_drop_points + points)

    # Bonuses

    def combo_bonus(self, level: int, combo: int) -> int:
        if combo <= 0:
            return 0
        return min(combo * self.combo_step * level, self.combo_cap * level)

    def t_spin_bonus(self, lines: int, level: int) -> int:
        if not 0 <= lines <= 3:
            return 0
        return self.t_spin_scores[lines] * level

    def perfect_clear_bonus(self, level: int) -> int:
        return self.perfect_clear_points * level

    def max_score(self, level: int, lines: int) -> int:
        """Base points if `lines` were cleared as tetrises at `level`."""
        tetrises, remaining = divmod(lines, 4)
        score = tetrises * self.line_clear_scores[3] * level
        if remaining:
            score += self.line_clear_scores[remaining - 1] * level
        return score
