"""Opening book: early-game moves learned from games the engine won."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, Iterator, Optional, Sequence, Tuple

from ..board import Board, Coordinate, Mark
from ..config import BOARD_SIZE, EMPTY_CELL, OPENING_BOOK_MAX_PLIES, O_SYMBOL, X_SYMBOL

LOGGER = logging.getLogger(__name__)

BOOK_FORMAT_VERSION = 1
_VALID_SYMBOLS = frozenset((EMPTY_CELL, X_SYMBOL, O_SYMBOL))


class BookFormatError(ValueError):
    """Raised when serialized book data does not match the expected schema."""


def canonical_key(board: Board) -> str:
    """Row-major serialization of ``board``, one symbol per cell."""

    return board.key()


class OpeningBook:
    """Maps canonical board keys to the move the engine played there.

    The book is owned by one engine instance. When constructed with a
    ``path`` every :meth:`train` call writes the book back immediately.
    """

    def __init__(
        self,
        entries: Optional[Dict[str, Coordinate]] = None,
        *,
        path: Optional[Path] = None,
        size: int = BOARD_SIZE,
        max_plies: int = OPENING_BOOK_MAX_PLIES,
        first_mark: Mark = Mark.X,
    ) -> None:
        self.path = Path(path) if path is not None else None
        self.size = size
        self.max_plies = max_plies
        self.first_mark = first_mark
        self._entries: Dict[str, Coordinate] = dict(entries or {})

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------
    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, board: object) -> bool:
        if isinstance(board, Board):
            return canonical_key(board) in self._entries
        return board in self._entries

    def __iter__(self) -> Iterator[Tuple[str, Coordinate]]:
        return iter(self._entries.items())

    def lookup(self, board: Board) -> Optional[Coordinate]:
        """Return the recorded move for ``board`` if its cell is still free."""

        move = self._entries.get(canonical_key(board))
        if move is not None and board.is_empty(move):
            LOGGER.info("Opening book hit: %s", move)
            return move
        return None

    # ------------------------------------------------------------------
    # Training
    # ------------------------------------------------------------------
    def train(self, move_history: Sequence[Coordinate], engine_mark: Mark) -> int:
        """Record the engine's early moves from a game it won.

        Replays at most ``max_plies`` plies, ``first_mark`` moving first, and
        stores the position before each of ``engine_mark``'s plies together
        with the move played. Later games overwrite earlier entries for the
        same position. Returns the number of entries written. An illegal
        history raises ``ValueError`` and leaves the book unchanged.
        """

        board = Board.empty(self.size)
        mark = self.first_mark
        updates: Dict[str, Coordinate] = {}
        written = 0
        for ply, move in enumerate(move_history[: self.max_plies]):
            coord = (int(move[0]), int(move[1]))
            if not board.is_empty(coord):
                raise ValueError(f"Ply {ply} at {coord} is not a legal move")
            if mark is engine_mark:
                updates[canonical_key(board)] = coord
                written += 1
            board = board.place(coord, mark)
            mark = mark.opponent

        self._entries.update(updates)
        LOGGER.info("Opening book updated with %d moves; size is now %d", written, len(self))
        if self.path is not None:
            self.save()
        return written

    def clear(self) -> None:
        self._entries.clear()

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------
    def to_json(self) -> Dict[str, Any]:
        return {
            "version": BOOK_FORMAT_VERSION,
            "entries": [
                [key, {"row": row, "col": col}] for key, (row, col) in self._entries.items()
            ],
        }

    @classmethod
    def from_json(cls, data: Any, **kwargs: Any) -> "OpeningBook":
        """Build a book from :meth:`to_json` output.

        A bare list of ``[key, {"row", "col"}]`` pairs is accepted as well.
        Raises :class:`BookFormatError` when the data does not fit.
        """

        size = kwargs.get("size", BOARD_SIZE)
        if isinstance(data, dict):
            if data.get("version") != BOOK_FORMAT_VERSION:
                raise BookFormatError(f"Unsupported book version: {data.get('version')!r}")
            pairs = data.get("entries")
        else:
            pairs = data
        if not isinstance(pairs, list):
            raise BookFormatError("Book entries must be a list")

        entries: Dict[str, Coordinate] = {}
        for pair in pairs:
            key, move = _parse_entry(pair, size)
            entries[key] = move
        return cls(entries, **kwargs)

    @classmethod
    def load(cls, path: Path, **kwargs: Any) -> "OpeningBook":
        """Load the book at ``path``.

        A missing file gives an empty book. An unreadable or malformed file
        is logged and also gives an empty book.
        """

        path = Path(path)
        if not path.exists():
            return cls(path=path, **kwargs)
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
            book = cls.from_json(data, path=path, **kwargs)
        except (OSError, ValueError) as exc:
            LOGGER.warning("Ignoring unreadable opening book at %s: %s", path, exc)
            return cls(path=path, **kwargs)
        LOGGER.info("Loaded opening book with %d entries from %s", len(book), path)
        return book

    def save(self, path: Optional[Path] = None) -> None:
        target = Path(path) if path is not None else self.path
        if target is None:
            raise ValueError("Opening book has no path to save to")
        target.parent.mkdir(parents=True, exist_ok=True)
        tmp = target.with_name(target.name + ".tmp")
        tmp.write_text(json.dumps(self.to_json()), encoding="utf-8")
        tmp.replace(target)


def _parse_entry(pair: Any, size: int) -> Tuple[str, Coordinate]:
    if not isinstance(pair, (list, tuple)) or len(pair) != 2:
        raise BookFormatError(f"Malformed book entry: {pair!r}")
    key, move = pair
    if not isinstance(key, str) or len(key) != size * size:
        raise BookFormatError("Book key does not describe a full board")
    if not set(key) <= _VALID_SYMBOLS:
        raise BookFormatError("Book key contains unknown symbols")
    if not isinstance(move, dict):
        raise BookFormatError(f"Malformed book move: {move!r}")
    row, col = move.get("row"), move.get("col")
    if not all(isinstance(value, int) and not isinstance(value, bool) for value in (row, col)):
        raise BookFormatError(f"Book move must have integer row/col: {move!r}")
    if not (0 <= row < size and 0 <= col < size):
        raise BookFormatError(f"Book move {move!r} is outside the board")
    return key, (row, col)
