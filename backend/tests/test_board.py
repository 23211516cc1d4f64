import pytest

from tarama.errors import CellDisabled, CellOccupied, ValidationError
from tarama.services.games.board import DISABLED, EMPTY, Board
from tarama.services.games.geometry import Point


def test_place_and_reject():
    board = Board(10)
    board.place(Point(3, 4), 0)
    assert board.cells[4][3] == 0
    with pytest.raises(CellOccupied):
        board.place(Point(3, 4), 1)
    with pytest.raises(ValidationError):
        board.place(Point(10, 0), 1)
    board.disable(Point(5, 5), EMPTY)
    with pytest.raises(CellDisabled):
        board.place(Point(5, 5), 1)


def test_disable_is_idempotent():
    board = Board(10)
    board.place(Point(1, 1), 1)
    assert board.disable(Point(1, 1), 1) is True
    assert board.disable(Point(1, 1), 1) is False
    assert board.get(Point(1, 1)) == DISABLED
    assert board.disabled_points() == [{'x': 1, 'y': 1, 'player': 1}]


def test_winner_in_each_direction():
    horizontal = Board(20)
    for x in range(2, 7):
        horizontal.place(Point(x, 3), 1)
    assert horizontal.check_winner() == 1

    vertical = Board(20)
    for y in range(15, 20):
        vertical.place(Point(0, y), 0)
    assert vertical.check_winner() == 0

    diagonal = Board(20)
    for i in range(5):
        diagonal.place(Point(10 + i, 10 + i), 0)
    assert diagonal.check_winner() == 0

    anti_diagonal = Board(20)
    for i in range(5):
        anti_diagonal.place(Point(4 - i, i), 1)
    assert anti_diagonal.check_winner() == 1


def test_four_in_a_row_is_not_a_win():
    board = Board(20)
    for x in range(4):
        board.place(Point(x, 0), 0)
    assert board.check_winner() is None


def test_disabled_cell_breaks_a_run():
    board = Board(20)
    for x in range(5):
        board.place(Point(x, 0), 0)
    board.disable(Point(2, 0), 0)
    assert board.check_winner() is None


def test_winner_tie_break_is_row_major():
    board = Board(20)
    for x in range(5):
        board.place(Point(x, 8), 0)
        board.place(Point(x + 10, 2), 1)
    assert board.check_winner() == 1


def test_surround_capture_collects_run_up_to_own_stone():
    board = Board(20)
    board.place(Point(0, 0), 0)
    board.place(Point(1, 0), 1)
    board.place(Point(3, 0), 0)
    assert board.surround_capture(Point(3, 0), 0) == [Point(2, 0), Point(1, 0)]


def test_surround_capture_stops_at_disabled_cells_and_edges():
    board = Board(20)
    board.place(Point(0, 0), 0)
    board.disable(Point(1, 0), EMPTY)
    board.place(Point(3, 0), 0)
    assert board.surround_capture(Point(3, 0), 0) == []
