"""Heuristic position scoring over sliding 5-cell windows."""

from __future__ import annotations

from enum import IntEnum
from functools import lru_cache
from typing import Dict, List, Optional, Tuple

from ..board import DIRECTIONS, Board, Coordinate, Mark
from ..config import EMPTY_CELL

Line = Tuple[Coordinate, ...]

# Each tier outweighs every window on a 15x15 board (572) scoring one tier
# lower, and DEAD_ONE outweighs the full centrality bonus.
_TIER_BASE = 1 << 11
_TIER_STEP = 1 << 10


class Pattern(IntEnum):
    DEAD_ONE = _TIER_BASE
    LIVE_ONE = _TIER_BASE * _TIER_STEP
    DEAD_TWO = _TIER_BASE * _TIER_STEP ** 2
    LIVE_TWO = _TIER_BASE * _TIER_STEP ** 3
    DEAD_THREE = _TIER_BASE * _TIER_STEP ** 4
    LIVE_THREE = _TIER_BASE * _TIER_STEP ** 5
    DEAD_FOUR = _TIER_BASE * _TIER_STEP ** 6
    LIVE_FOUR = _TIER_BASE * _TIER_STEP ** 7
    FIVE = _TIER_BASE * _TIER_STEP ** 8


# (count, open_ends) -> pattern, for windows that are short of five.
_PATTERNS: Dict[Tuple[int, int], Pattern] = {
    (4, 2): Pattern.LIVE_FOUR,
    (4, 1): Pattern.DEAD_FOUR,
    (3, 2): Pattern.LIVE_THREE,
    (3, 1): Pattern.DEAD_THREE,
    (2, 2): Pattern.LIVE_TWO,
    (2, 1): Pattern.DEAD_TWO,
    (1, 2): Pattern.LIVE_ONE,
    (1, 1): Pattern.DEAD_ONE,
}


def classify_window(count: int, open_ends: int, win_length: int = 5) -> Optional[Pattern]:
    """Map a single-owner window to its pattern tier, or ``None`` if it is worthless."""

    if count >= win_length:
        return Pattern.FIVE
    return _PATTERNS.get((count, open_ends))


@lru_cache(maxsize=None)
def board_lines(size: int, win_length: int) -> Tuple[Line, ...]:
    """Every maximal straight line of the board that can hold a window."""

    lines: List[Line] = []
    for d_row, d_col in DIRECTIONS:
        for row in range(size):
            for col in range(size):
                prev_row, prev_col = row - d_row, col - d_col
                if 0 <= prev_row < size and 0 <= prev_col < size:
                    continue  # not the start of a line
                line = []
                r, c = row, col
                while 0 <= r < size and 0 <= c < size:
                    line.append((r, c))
                    r += d_row
                    c += d_col
                if len(line) >= win_length:
                    lines.append(tuple(line))
    return tuple(lines)


def centrality(board: Board, coord: Coordinate) -> int:
    center_row, center_col = board.center
    distance = abs(coord[0] - center_row) + abs(coord[1] - center_col)
    return center_row - distance // 2


def evaluate(board: Board, player: Mark) -> int:
    """Score ``board`` from ``player``'s point of view.

    Windows holding both marks are contested and worth nothing. Single-owner
    windows are weighted by :class:`Pattern` and added for ``player`` or
    subtracted for the opponent. A small centrality term per stone breaks
    ties toward the middle of the board.
    """

    grid = board.grid
    length = board.win_length
    own = player.symbol
    other = player.opponent.symbol
    score = 0

    for row_idx, row in enumerate(grid):
        for col_idx, cell in enumerate(row):
            if cell == own:
                score += centrality(board, (row_idx, col_idx))
            elif cell != EMPTY_CELL:
                score -= centrality(board, (row_idx, col_idx))

    for line in board_lines(board.size, length):
        values = [grid[r][c] for r, c in line]
        last = len(values) - length
        for start in range(last + 1):
            window = values[start:start + length]
            own_count = window.count(own)
            other_count = window.count(other)
            if own_count and other_count:
                continue
            count = own_count or other_count
            if not count:
                continue
            open_ends = 0
            if start > 0 and values[start - 1] == EMPTY_CELL:
                open_ends += 1
            if start < last and values[start + length] == EMPTY_CELL:
                open_ends += 1
            pattern = classify_window(count, open_ends, length)
            if pattern is None:
                continue
            score += pattern if own_count else -pattern
    return int(score)
