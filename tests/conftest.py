from __future__ import annotations

from typing import Iterable

import pytest

from caro.board import Board, Coordinate, Mark


def build_board(
    x: Iterable[Coordinate] = (),
    o: Iterable[Coordinate] = (),
    size: int = 15,
) -> Board:
    board = Board.empty(size)
    for coord in x:
        board = board.place(coord, Mark.X)
    for coord in o:
        board = board.place(coord, Mark.O)
    return board


@pytest.fixture
def make_board():
    return build_board


@pytest.fixture
def full_board() -> Board:
    # Rows shifted by two cells so that no line of five appears anywhere.
    rows = []
    for row in range(15):
        pattern = "XXOO"
        shift = (row * 2) % 4
        rows.append("".join(pattern[(col + shift) % 4] for col in range(15)))
    return Board.from_rows(rows)
