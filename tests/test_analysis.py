import numpy as np

from tetris_engine.game import Cell
from tetris_engine.game.analysis import (
    board_features,
    column_heights,
    line_completion,
    most_complete_lines,
)


def make_grid():
    grid = np.zeros((6, 4), dtype=np.int8)
    grid[5, :3] = 1
    grid[4, 0] = 2
    grid[3, 0] = 3
    grid[4, 2] = Cell.SHADOW
    grid[2, 3] = 4
    return grid


def test_column_heights_ignore_shadow():
    assert column_heights(make_grid()) == [3, 1, 1, 4]


def test_line_completion_fractions():
    completion = dict(line_completion(make_grid()))
    assert completion[5] == 0.75
    assert completion[4] == 0.25
    assert completion[0] == 0.0


def test_most_complete_lines_skips_empty_and_full():
    grid = make_grid()
    grid[1, :] = 5
    assert most_complete_lines(grid, count=2) == [5, 2]


def test_board_features():
    features = board_features(make_grid())
    assert features["max_height"] == 4
    assert features["avg_height"] == 2.25
    # column 3 has three empty cells under its block
    assert features["holes"] == 3
    assert features["bumpiness"] == 2 + 0 + 3
    assert features["filled_cells"] == 6
    assert features["fill_ratio"] == 6 / 24
    assert features["full_lines"] == 0
    assert features["almost_full_lines"] == 0
    assert features["empty_lines"] == 2
