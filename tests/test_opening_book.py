from __future__ import annotations

import json
import logging

import pytest

from caro.ai.opening_book import BookFormatError, OpeningBook, canonical_key
from caro.board import Board, Mark

HISTORY = [(7, 7), (7, 8), (8, 7), (6, 8)]


def test_training_records_engine_plies():
    book = OpeningBook()
    written = book.train(HISTORY, Mark.O)

    assert written == 2
    assert book.lookup(Board.from_moves(HISTORY[:1])) == (7, 8)
    assert book.lookup(Board.from_moves(HISTORY[:3])) == (6, 8)
    assert book.lookup(Board.from_moves(HISTORY[:2])) is None


def test_training_for_first_mover_includes_empty_board():
    book = OpeningBook()
    book.train(HISTORY, Mark.X)
    assert book.lookup(Board.empty()) == (7, 7)
    assert book.lookup(Board.from_moves(HISTORY[:2])) == (8, 7)


def test_only_opening_plies_are_recorded():
    history = [(7, col) for col in range(2, 14)]
    book = OpeningBook()
    assert book.train(history, Mark.X) == 4
    assert len(book) == 4
    assert Board.from_moves(history[:8]) not in book


def test_later_games_overwrite_earlier_ones():
    book = OpeningBook()
    book.train([(7, 7), (7, 8)], Mark.O)
    book.train([(7, 7), (6, 6)], Mark.O)
    assert book.lookup(Board.from_moves([(7, 7)])) == (6, 6)
    assert len(book) == 1


def test_lookup_ignores_occupied_cells():
    board = Board.from_moves([(7, 7)])
    book = OpeningBook({canonical_key(board): (7, 7)})
    assert book.lookup(board) is None


def test_illegal_history_is_rejected():
    with pytest.raises(ValueError):
        OpeningBook().train([(7, 7), (7, 7)], Mark.O)


def test_rejected_history_leaves_book_unchanged(tmp_path):
    path = tmp_path / "book.json"
    book = OpeningBook(path=path)
    with pytest.raises(ValueError):
        book.train([(7, 7), (7, 8), (8, 7), (7, 7)], Mark.O)
    assert len(book) == 0
    assert not path.exists()

    book.train(HISTORY, Mark.O)
    with pytest.raises(ValueError):
        book.train([(3, 3), (4, 4), (3, 3)], Mark.O)
    assert len(book) == 2
    assert len(OpeningBook.load(path)) == 2


def test_json_round_trip():
    book = OpeningBook()
    book.train(HISTORY, Mark.O)
    data = json.loads(json.dumps(book.to_json()))

    restored = OpeningBook.from_json(data)
    assert dict(restored) == dict(book)
    assert data["version"] == 1


def test_bare_pair_list_is_accepted():
    key = canonical_key(Board.from_moves([(7, 7)]))
    book = OpeningBook.from_json([[key, {"row": 7, "col": 8}]])
    assert book.lookup(Board.from_moves([(7, 7)])) == (7, 8)


@pytest.mark.parametrize(
    "data",
    [
        {"version": 99, "entries": []},
        {"version": 1, "entries": "nope"},
        [["short-key", {"row": 1, "col": 1}]],
        [["?" * 225, {"row": 1, "col": 1}]],
        [["-" * 225, {"row": 15, "col": 1}]],
        [["-" * 225, {"row": "7", "col": 1}]],
        [["-" * 225]],
    ],
)
def test_malformed_data_is_rejected(data):
    with pytest.raises(BookFormatError):
        OpeningBook.from_json(data)


def test_train_saves_immediately(tmp_path):
    path = tmp_path / "book" / "opening.json"
    book = OpeningBook.load(path)
    assert len(book) == 0

    book.train(HISTORY, Mark.O)
    assert path.exists()

    reloaded = OpeningBook.load(path)
    assert dict(reloaded) == dict(book)
    assert reloaded.lookup(Board.from_moves(HISTORY[:1])) == (7, 8)


def test_corrupt_file_degrades_to_empty_book(tmp_path, caplog):
    path = tmp_path / "opening.json"
    path.write_text("{not json", encoding="utf-8")

    with caplog.at_level(logging.WARNING, logger="caro.ai.opening_book"):
        book = OpeningBook.load(path)

    assert len(book) == 0
    assert book.path == path
    assert "Ignoring unreadable opening book" in caplog.text


def test_missing_file_is_silent(tmp_path, caplog):
    with caplog.at_level(logging.WARNING, logger="caro.ai.opening_book"):
        book = OpeningBook.load(tmp_path / "absent.json")
    assert len(book) == 0
    assert caplog.text == ""


def test_save_without_path_fails():
    with pytest.raises(ValueError):
        OpeningBook().save()
