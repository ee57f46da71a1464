from __future__ import annotations

import pytest

from caro.ai.engine import CaroEngine
from caro.board import Mark
from caro.game import Game


def _play(game, moves):
    results = []
    for move in moves:
        results.append(game.place_stone(move))
    return results


def test_turns_alternate_starting_with_x():
    game = Game()
    first, second = _play(game, [(7, 7), (8, 8)])
    assert first.mark is Mark.X
    assert second.mark is Mark.O
    assert game.current_mark is Mark.X
    assert game.history == [(7, 7), (8, 8)]


def test_win_is_recorded_with_line():
    game = Game()
    results = _play(game, [(7, 3), (0, 0), (7, 4), (0, 1), (7, 5), (0, 2), (7, 6), (0, 4), (7, 7)])

    assert results[-1].produced_win
    assert game.winner is Mark.X
    assert game.winning_line == [(7, 3), (7, 4), (7, 5), (7, 6), (7, 7)]
    assert game.status_message() == "X wins!"
    with pytest.raises(ValueError):
        game.place_stone((9, 9))


def test_threat_lines_follow_every_ply():
    game = Game()
    _play(game, [(5, 3), (0, 0), (5, 4), (0, 1)])
    assert game.threat_lines == []

    result = game.place_stone((5, 5))
    assert result.threat_lines
    assert game.highlights == [(5, 3), (5, 4), (5, 5)]

    game.place_stone((0, 2))
    assert game.highlights == [(0, 0), (0, 1), (0, 2)]


def test_occupied_cell_is_rejected():
    game = Game()
    game.place_stone((7, 7))
    with pytest.raises(ValueError):
        game.place_stone((7, 7))
    assert game.current_mark is Mark.O


def test_draw_on_a_board_too_small_to_win():
    game = Game(size=3)
    results = _play(game, [(row, col) for row in range(3) for col in range(3)])
    assert results[-1].produced_draw
    assert game.draw
    assert game.is_finished
    assert game.status_message() == "Draw"


def test_undo_restores_previous_state():
    game = Game()
    _play(game, [(7, 3), (0, 0), (7, 4), (0, 1), (7, 5), (0, 2), (7, 6), (0, 4), (7, 7)])

    assert game.undo_last_move() == (7, 7)
    assert game.winner is None
    assert not game.is_finished
    assert game.current_mark is Mark.X
    assert game.board.is_empty((7, 7))


def test_undo_turn_removes_reply_and_own_move():
    game = Game()
    _play(game, [(7, 7), (8, 8), (7, 8), (8, 9)])
    undone = game.undo_turn(Mark.X)

    assert undone == [(8, 9), (7, 8)]
    assert game.history == [(7, 7), (8, 8)]
    assert game.current_mark is Mark.X


def test_undo_without_moves_fails():
    game = Game()
    with pytest.raises(ValueError):
        game.undo_last_move()
    with pytest.raises(ValueError):
        game.undo_turn(Mark.O)


def test_resign_hands_the_win_over():
    game = Game()
    game.place_stone((7, 7))
    game.resign(Mark.O)
    assert game.winner is Mark.X
    assert game.status_message() == "X wins by resignation!"


def test_engine_win_trains_book():
    game = Game()
    engine = CaroEngine(book_move_delay=0)
    _play(game, [(0, 0), (7, 3), (0, 14), (7, 4), (14, 0), (7, 5), (14, 14), (7, 6), (1, 7), (7, 7)])
    assert game.winner is Mark.O

    engine.train(game.history, game.winner)
    assert len(engine.book) == 4
    assert game.board.key() not in engine.book
