import pytest

from tarama.errors import InvalidEnclosure, ValidationError
from tarama.services.games.board import DISABLED, EMPTY, Board
from tarama.services.games.enclosure import (
    NO_OPPONENT_STONES,
    NOT_CLOSED,
    NOT_CONNECTED,
    REPEATED_POINT,
    TOO_FEW_POINTS,
    apply_enclosure,
    evaluate_enclosure,
)
from tarama.services.games.geometry import Point

DIAMOND = [(0, 2), (1, 1), (2, 2), (1, 3)]
RING = [
    (4, 4), (5, 4), (6, 4), (7, 4),
    (7, 5), (7, 6), (7, 7), (6, 7),
    (5, 7), (4, 7), (4, 6), (4, 5),
]


def _snapshot(board):
    return [list(row) for row in board.cells], dict(board.disabled)


@pytest.mark.parametrize('path, reason', [
    ([(0, 0), (1, 0), (1, 1)], TOO_FEW_POINTS),
    ([(0, 0), (1, 1), (2, 0), (9, 9)], NOT_CONNECTED),
    ([(0, 0), (1, 0), (2, 0), (3, 0)], NOT_CLOSED),
    ([(0, 2), (1, 1), (2, 2), (1, 1), (1, 3)], REPEATED_POINT),
])
def test_malformed_paths_reject_without_mutation(path, reason):
    board = Board(20)
    board.place(Point(1, 2), 1)
    before = _snapshot(board)
    with pytest.raises(InvalidEnclosure) as exc:
        evaluate_enclosure(board, path, 0)
    assert exc.value.message == reason
    assert _snapshot(board) == before


def test_unit_square_has_no_interior():
    board = Board(20)
    board.place(Point(10, 10), 1)
    with pytest.raises(InvalidEnclosure) as exc:
        evaluate_enclosure(board, [(2, 2), (2, 3), (3, 3), (3, 2)], 0)
    assert exc.value.message == NO_OPPONENT_STONES


def test_loop_around_own_stones_only_is_rejected():
    board = Board(20)
    board.place(Point(1, 2), 0)
    with pytest.raises(InvalidEnclosure) as exc:
        evaluate_enclosure(board, DIAMOND, 0)
    assert exc.value.message == NO_OPPONENT_STONES


def test_out_of_bounds_point_is_a_validation_error():
    board = Board(5)
    with pytest.raises(ValidationError):
        evaluate_enclosure(board, [(0, 2), (1, 1), (2, 2), (1, 5)], 0)


def test_diamond_captures_opponent_stone():
    board = Board(20)
    board.place(Point(1, 2), 1)
    result = evaluate_enclosure(board, DIAMOND, 0)
    assert result.score_delta == 1
    assert result.enclosed == [(Point(1, 2), 1)]
    # evaluation alone does not touch the board
    assert board.get(Point(1, 2)) == 1

    assert apply_enclosure(board, result) == 1
    assert board.get(Point(1, 2)) == DISABLED
    assert board.disabled_points() == [{'x': 1, 'y': 2, 'player': 1}]


def test_closing_point_repeated_at_the_end_is_accepted():
    board = Board(20)
    board.place(Point(1, 2), 1)
    result = evaluate_enclosure(board, DIAMOND + [DIAMOND[0]], 0)
    assert len(result.path) == 4
    assert result.score_delta == 1


def test_classification_of_enclosed_cells():
    board = Board(20)
    board.place(Point(5, 5), 1)   # opponent: captured and scored
    board.place(Point(6, 5), 0)   # own: sacrificed, no score
    board.disable(Point(6, 6), EMPTY)  # already out of play
    board.place(Point(4, 4), 1)   # opponent on the boundary: protected
    board.place(Point(7, 7), 0)   # own on the boundary: protected

    result = evaluate_enclosure(board, RING, 0)
    assert result.score_delta == 1
    assert result.enclosed == [
        (Point(5, 5), 1),
        (Point(6, 5), 0),
        (Point(5, 6), EMPTY),
    ]

    apply_enclosure(board, result)
    for cell in (Point(5, 5), Point(6, 5), Point(5, 6), Point(6, 6)):
        assert board.is_disabled(cell)
    assert board.get(Point(4, 4)) == 1
    assert board.get(Point(7, 7)) == 0
    assert all(not board.is_disabled(Point(x, y)) for x, y in RING)


def test_reapplying_a_capture_is_a_no_op():
    board = Board(20)
    board.place(Point(1, 2), 1)
    result = evaluate_enclosure(board, DIAMOND, 0)
    apply_enclosure(board, result)
    assert apply_enclosure(board, result) == 0
    assert len(board.disabled) == 1
