import numpy as np

from tetris_engine.game import Board, ClearType, LineClearEngine, Piece, TetrominoType


def fill_rows(board: Board, *rows: int) -> None:
    for y in rows:
        for x in range(board.width):
            board.set(x, y, 1)


def test_no_full_rows_resets_combo(board):
    board.set(0, 19, 1)
    result = LineClearEngine().check_and_clear(board, combo=3)
    assert result.lines_cleared == 0
    assert result.combo == 0
    assert result.clear_type == ClearType.NONE
    assert board.get(0, 19) == 1


def test_single_clear_increments_combo(board):
    fill_rows(board, 19)
    board.set(3, 18, 2)
    result = LineClearEngine().check_and_clear(board, combo=0)
    assert result.lines_cleared == 1
    assert result.cleared_rows == (19,)
    assert result.clear_type.label == "single"
    assert result.combo == 1
    assert not result.is_combo
    assert not result.is_perfect_clear
    assert board.get(3, 19) == 2


def test_tetris_with_perfect_clear(board):
    fill_rows(board, 16, 17, 18, 19)
    result = LineClearEngine().check_and_clear(board, combo=1)
    assert result.lines_cleared == 4
    assert result.clear_type == ClearType.TETRIS
    assert result.clear_type.label == "tetris"
    assert result.is_tetris
    assert result.is_combo
    assert result.combo == 2
    assert result.is_perfect_clear
    assert board.is_empty()


def test_rows_found_before_removal(board):
    fill_rows(board, 15, 17, 19)
    board.set(1, 16, 3)
    board.set(1, 18, 4)
    result = LineClearEngine().check_and_clear(board)
    assert result.cleared_rows == (15, 17, 19)
    assert result.clear_type == ClearType.TRIPLE
    assert board.get(1, 19) == 4
    assert board.get(1, 18) == 3
    assert int(np.count_nonzero(board.grid)) == 2


def test_default_t_spin_hook_is_false(board):
    fill_rows(board, 19)
    result = LineClearEngine().check_and_clear(
        board, last_action_was_rotation=True, piece=Piece(TetrominoType.T)
    )
    assert not result.is_t_spin


def test_custom_t_spin_hook_needs_rotation(board):
    calls = []

    def detector(b, piece, rotated):
        calls.append(rotated)
        return True

    engine = LineClearEngine(t_spin_detector=detector)
    fill_rows(board, 19)
    assert not engine.check_and_clear(board, last_action_was_rotation=False).is_t_spin
    fill_rows(board, 19)
    assert engine.check_and_clear(board, last_action_was_rotation=True).is_t_spin
    assert calls == [True]

    disabled = LineClearEngine(t_spin_detector=detector, t_spin_enabled=False)
    fill_rows(board, 19)
    assert not disabled.check_and_clear(board, last_action_was_rotation=True).is_t_spin


def test_t_spin_hook_sees_rows_before_clearing(board):
    seen = []

    def detector(b, piece, rotated):
        seen.append((b.full_rows(), b.get(2, 18)))
        return True

    fill_rows(board, 19)
    board.set(2, 18, 3)
    result = LineClearEngine(t_spin_detector=detector).check_and_clear(
        board, last_action_was_rotation=True, piece=Piece(TetrominoType.T)
    )
    assert seen == [([19], 3)]
    assert result.is_t_spin
    assert board.get(2, 19) == 3


def test_preview_and_field_analysis(board):
    fill_rows(board, 19)
    for x in range(9):
        board.set(x, 18, 1)
    engine = LineClearEngine()
    assert engine.preview(board) == [19]
    analysis = engine.field_analysis(board, combo=2)
    assert analysis["full_lines"] == 1
    assert analysis["almost_full_lines"] == 2
    assert analysis["combo"] == 2
    assert analysis["most_complete_lines"] == [18]
