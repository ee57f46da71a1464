"""Board model and move generation for Caro."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Iterator, List, Optional, Sequence, Tuple

from .config import (
    BOARD_SIZE,
    CANDIDATE_RADIUS,
    EMPTY_CELL,
    O_SYMBOL,
    WIN_SEQUENCE_LENGTH,
    X_SYMBOL,
)

Coordinate = Tuple[int, int]
Direction = Tuple[int, int]
Grid = Tuple[Tuple[str, ...], ...]

DIRECTIONS: Tuple[Direction, ...] = ((0, 1), (1, 0), (1, 1), (1, -1))


class NoLegalMoveError(ValueError):
    """Raised when a move is requested on a board without empty cells."""


class Mark(Enum):
    X = X_SYMBOL
    O = O_SYMBOL

    @property
    def symbol(self) -> str:
        return self.value

    @property
    def opponent(self) -> "Mark":
        return Mark.O if self is Mark.X else Mark.X

    @classmethod
    def parse(cls, text: str) -> "Mark":
        try:
            return cls(text.strip().upper())
        except ValueError as exc:
            raise ValueError(f"Unknown mark: {text!r}") from exc


@dataclass(frozen=True)
class Board:
    """Immutable snapshot of a Caro board.

    Every mutation helper returns a new :class:`Board`; callers can share a
    snapshot freely without worrying about hypothetical moves leaking back.
    """

    grid: Grid
    win_length: int = WIN_SEQUENCE_LENGTH

    def __post_init__(self) -> None:
        size = len(self.grid)
        if size <= 0:
            raise ValueError("Board size must be positive")
        if any(len(row) != size for row in self.grid):
            raise ValueError("Board grid must be square")
        if self.win_length <= 1:
            raise ValueError("Winning sequence length must be greater than 1")

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------
    @classmethod
    def empty(cls, size: int = BOARD_SIZE) -> "Board":
        if size <= 0:
            raise ValueError("Board size must be positive")
        row = tuple(EMPTY_CELL for _ in range(size))
        return cls(grid=tuple(row for _ in range(size)))

    @classmethod
    def from_rows(cls, rows: Sequence[Sequence[Optional[str]]]) -> "Board":
        """Build a board from rows of symbols.

        Cells may be ``"X"``, ``"O"`` (any case), :data:`EMPTY_CELL`, ``"."``
        or ``None``.
        """

        grid: List[Tuple[str, ...]] = []
        for row in rows:
            cells = []
            for cell in row:
                if cell is None or cell in (EMPTY_CELL, ".", " "):
                    cells.append(EMPTY_CELL)
                elif isinstance(cell, Mark):
                    cells.append(cell.symbol)
                else:
                    cells.append(Mark.parse(cell).symbol)
            grid.append(tuple(cells))
        return cls(grid=tuple(grid))

    @classmethod
    def from_key(cls, key: str, size: int = BOARD_SIZE) -> "Board":
        """Rebuild a board from its row-major serialization."""

        if len(key) != size * size:
            raise ValueError(f"Key of length {len(key)} does not describe a {size}x{size} board")
        return cls.from_rows([key[row * size:(row + 1) * size] for row in range(size)])

    @classmethod
    def from_moves(
        cls,
        moves: Iterable[Coordinate],
        first: "Mark" = Mark.X,
        size: int = BOARD_SIZE,
    ) -> "Board":
        """Replay alternating moves starting with ``first`` onto an empty board."""

        board = cls.empty(size)
        mark = first
        for coord in moves:
            board = board.place(coord, mark)
            mark = mark.opponent
        return board

    # ------------------------------------------------------------------
    # Query helpers
    # ------------------------------------------------------------------
    @property
    def size(self) -> int:
        return len(self.grid)

    @property
    def center(self) -> Coordinate:
        middle = self.size // 2
        return (middle, middle)

    def is_within_bounds(self, coord: Coordinate) -> bool:
        """Return ``True`` if the coordinate lies inside the board."""

        row, col = coord
        return 0 <= row < self.size and 0 <= col < self.size

    def get(self, coord: Coordinate) -> Optional[str]:
        """Return the symbol at the coordinate or ``None`` when out of bounds."""

        if not self.is_within_bounds(coord):
            return None
        row, col = coord
        return self.grid[row][col]

    def mark_at(self, coord: Coordinate) -> Optional[Mark]:
        value = self.get(coord)
        if value is None or value == EMPTY_CELL:
            return None
        return Mark(value)

    def is_empty(self, coord: Coordinate) -> bool:
        """Return ``True`` when the cell is inside the board and empty."""

        return self.get(coord) == EMPTY_CELL

    def is_full(self) -> bool:
        return all(cell != EMPTY_CELL for row in self.grid for cell in row)

    def is_blank(self) -> bool:
        return all(cell == EMPTY_CELL for row in self.grid for cell in row)

    def occupied_cells(self) -> Iterator[Coordinate]:
        """Iterate over coordinates currently holding a mark."""

        for row_idx, row in enumerate(self.grid):
            for col_idx, cell in enumerate(row):
                if cell != EMPTY_CELL:
                    yield (row_idx, col_idx)

    def empty_cells(self) -> Iterator[Coordinate]:
        for row_idx, row in enumerate(self.grid):
            for col_idx, cell in enumerate(row):
                if cell == EMPTY_CELL:
                    yield (row_idx, col_idx)

    def cells_of(self, mark: Mark) -> Iterator[Coordinate]:
        symbol = mark.symbol
        for row_idx, row in enumerate(self.grid):
            for col_idx, cell in enumerate(row):
                if cell == symbol:
                    yield (row_idx, col_idx)

    def stone_count(self) -> int:
        return sum(1 for _ in self.occupied_cells())

    def key(self) -> str:
        """Row-major serialization, one symbol per cell."""

        return "".join("".join(row) for row in self.grid)

    # ------------------------------------------------------------------
    # Snapshot helpers
    # ------------------------------------------------------------------
    def place(self, coord: Coordinate, mark: Mark) -> "Board":
        """Return a copy of the board with ``mark`` placed at ``coord``.

        Raises :class:`ValueError` for out-of-range coordinates or when the
        cell is already taken.
        """

        if not self.is_within_bounds(coord):
            raise ValueError(f"Coordinate {coord} is outside the board")
        row, col = coord
        if self.grid[row][col] != EMPTY_CELL:
            raise ValueError(f"Coordinate {coord} is already occupied")
        updated = self.grid[row][:col] + (mark.symbol,) + self.grid[row][col + 1:]
        grid = self.grid[:row] + (updated,) + self.grid[row + 1:]
        return Board(grid=grid, win_length=self.win_length)

    def forms_winning_sequence(self, coord: Coordinate) -> bool:
        """Return ``True`` if the mark at ``coord`` is part of a winning run."""

        stone = self.get(coord)
        if stone is None or stone == EMPTY_CELL:
            return False
        return any(self._line_length(coord, stone, delta) >= self.win_length for delta in DIRECTIONS)

    def render(self, highlights: Iterable[Coordinate] = ()) -> str:
        """Plain text dump with row/column indices; highlighted cells are bracketed."""

        marked = set(highlights)
        header = "    " + " ".join(f"{col:2d}" for col in range(self.size))
        lines = [header]
        for row_idx, row in enumerate(self.grid):
            cells = []
            for col_idx, cell in enumerate(row):
                symbol = "." if cell == EMPTY_CELL else cell
                cells.append(f"[{symbol}" if (row_idx, col_idx) in marked else f" {symbol}")
            lines.append(f"{row_idx:2d}  " + " ".join(cells))
        return "\n".join(lines)

    def __str__(self) -> str:
        return self.render()

    def _line_length(self, coord: Coordinate, stone: str, delta: Direction) -> int:
        total = 1  # include the stone at coord
        total += self._count_in_direction(coord, stone, delta)
        total += self._count_in_direction(coord, stone, (-delta[0], -delta[1]))
        return total

    def _count_in_direction(self, coord: Coordinate, stone: str, delta: Direction) -> int:
        count = 0
        row, col = coord
        d_row, d_col = delta
        while True:
            row += d_row
            col += d_col
            if not self.is_within_bounds((row, col)):
                break
            if self.grid[row][col] != stone:
                break
            count += 1
        return count


def candidate_moves(board: Board, radius: int = CANDIDATE_RADIUS) -> List[Coordinate]:
    """Return the empty cells worth considering for the next move.

    An empty board yields only the center. Otherwise every empty cell within
    ``radius`` (Chebyshev distance) of an occupied cell is returned once, in
    discovery order. If nothing qualifies, all empty cells are returned.
    """

    size = board.size
    grid = board.grid
    occupied = list(board.occupied_cells())
    if not occupied:
        return [board.center]

    seen: set[Coordinate] = set()
    moves: List[Coordinate] = []
    for row, col in occupied:
        for d_row in range(-radius, radius + 1):
            for d_col in range(-radius, radius + 1):
                if d_row == 0 and d_col == 0:
                    continue
                nr, nc = row + d_row, col + d_col
                if 0 <= nr < size and 0 <= nc < size and grid[nr][nc] == EMPTY_CELL:
                    coord = (nr, nc)
                    if coord not in seen:
                        seen.add(coord)
                        moves.append(coord)

    if not moves:
        moves = list(board.empty_cells())
    return moves
