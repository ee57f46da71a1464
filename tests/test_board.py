from __future__ import annotations

import pytest

from caro.board import Board, Mark, candidate_moves
from caro.config import EMPTY_CELL


def test_empty_board_offers_only_center():
    assert candidate_moves(Board.empty()) == [(7, 7)]


def test_candidates_are_empty_and_near_stones(make_board):
    board = make_board(x=[(7, 7), (0, 0)], o=[(7, 8)])
    moves = candidate_moves(board)
    occupied = list(board.occupied_cells())

    assert len(moves) == len(set(moves))
    for move in moves:
        assert board.is_empty(move)
        assert any(max(abs(move[0] - r), abs(move[1] - c)) <= 2 for r, c in occupied)


def test_single_stone_has_full_neighbourhood(make_board):
    assert len(candidate_moves(make_board(x=[(7, 7)]))) == 24


def test_corner_stone_neighbourhood_is_clipped(make_board):
    assert sorted(candidate_moves(make_board(x=[(0, 0)]))) == [
        (0, 1), (0, 2), (1, 0), (1, 1), (1, 2), (2, 0), (2, 1), (2, 2),
    ]


def test_falls_back_to_every_empty_cell(make_board):
    board = make_board(x=[(2, 2)], size=5)
    moves = candidate_moves(board, radius=0)
    assert len(moves) == 24
    assert (2, 2) not in moves


def test_full_board_has_no_candidates(full_board):
    assert full_board.is_full()
    assert candidate_moves(full_board) == []


def test_place_returns_new_snapshot():
    board = Board.empty()
    after = board.place((3, 4), Mark.O)

    assert board.get((3, 4)) == EMPTY_CELL
    assert after.mark_at((3, 4)) is Mark.O
    assert after.stone_count() == 1


def test_place_rejects_occupied_and_out_of_range(make_board):
    board = make_board(x=[(7, 7)])
    with pytest.raises(ValueError):
        board.place((7, 7), Mark.O)
    with pytest.raises(ValueError):
        board.place((15, 0), Mark.O)


def test_key_round_trip(make_board):
    board = make_board(x=[(1, 2), (7, 7)], o=[(14, 14)])
    key = board.key()

    assert len(key) == 225
    assert Board.from_key(key) == board


def test_from_rows_accepts_dots_and_lowercase():
    board = Board.from_rows(["x.o", "...", "..X"])
    assert board.mark_at((0, 0)) is Mark.X
    assert board.mark_at((0, 2)) is Mark.O
    assert board.mark_at((1, 1)) is None


def test_from_rows_requires_square_grid():
    with pytest.raises(ValueError):
        Board.from_rows(["XO", "O"])


def test_from_moves_alternates_marks():
    board = Board.from_moves([(7, 7), (7, 8), (8, 8)])
    assert list(board.cells_of(Mark.X)) == [(7, 7), (8, 8)]
    assert list(board.cells_of(Mark.O)) == [(7, 8)]


def test_opponent_is_complement():
    assert Mark.X.opponent is Mark.O
    assert Mark.O.opponent is Mark.X
    assert Mark.parse(" o ") is Mark.O
    with pytest.raises(ValueError):
        Mark.parse("Z")


def test_forms_winning_sequence(make_board):
    board = make_board(x=[(3, 3), (4, 4), (5, 5), (6, 6), (7, 7)])
    assert board.forms_winning_sequence((5, 5))
    assert not board.forms_winning_sequence((0, 0))


def test_render_brackets_highlights(make_board):
    text = make_board(x=[(0, 0)], size=5).render([(0, 0)])
    assert "[X" in text.splitlines()[1]
