"""Exact win detection and threat-line highlighting."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, List, Optional, Tuple

from .board import DIRECTIONS, Board, Coordinate, Direction, Mark

_MIN_THREAT = 3
_MAX_THREAT = 4


@dataclass(frozen=True)
class ThreatLine:
    """Marks of one unblocked 5-cell window holding three or four stones."""

    mark: Mark
    cells: Tuple[Coordinate, ...]
    window: Tuple[Coordinate, ...]
    direction: Direction

    def __len__(self) -> int:
        return len(self.cells)

    def __iter__(self):
        return iter(self.cells)


def check_win(board: Board, player: Mark) -> Optional[List[Coordinate]]:
    """Return the first winning line of ``player`` or ``None``."""

    length = board.win_length
    symbol = player.symbol
    grid = board.grid
    for row, col in board.cells_of(player):
        for d_row, d_col in DIRECTIONS:
            line = []
            for step in range(length):
                r, c = row + step * d_row, col + step * d_col
                if not board.is_within_bounds((r, c)) or grid[r][c] != symbol:
                    break
                line.append((r, c))
            else:
                return line
    return None


def find_threat_lines(board: Board, last_move: Coordinate) -> List[ThreatLine]:
    """Return every unblocked window through ``last_move`` with 3-4 of its marks.

    Each direction contributes up to ``win_length`` windows (one per offset
    of ``last_move`` inside the window). Windows that run off the board or
    contain an opposing mark are skipped. Only raw counts are used.
    """

    mover = board.mark_at(last_move)
    if mover is None:
        return []

    row, col = last_move
    length = board.win_length
    symbol = mover.symbol
    opponent = mover.opponent.symbol
    lines: List[ThreatLine] = []
    for direction in DIRECTIONS:
        d_row, d_col = direction
        for offset in range(-(length - 1), 1):
            window = tuple(
                (row + (offset + step) * d_row, col + (offset + step) * d_col)
                for step in range(length)
            )
            if not all(board.is_within_bounds(cell) for cell in window):
                continue
            values = [board.grid[r][c] for r, c in window]
            if opponent in values:
                continue
            own = tuple(cell for cell, value in zip(window, values) if value == symbol)
            if _MIN_THREAT <= len(own) <= _MAX_THREAT:
                lines.append(ThreatLine(mark=mover, cells=own, window=window, direction=direction))
    return lines


def highlight_cells(lines: Iterable[ThreatLine]) -> List[Coordinate]:
    """Flatten threat lines into unique coordinates, keeping first-seen order."""

    seen: set[Coordinate] = set()
    cells: List[Coordinate] = []
    for line in lines:
        for cell in line.cells:
            if cell not in seen:
                seen.add(cell)
                cells.append(cell)
    return cells
