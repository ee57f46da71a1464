"""Match bookkeeping: turn order, history, results and threat highlights."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional

from .board import Board, Coordinate, Mark
from .config import BOARD_SIZE
from .threats import ThreatLine, check_win, find_threat_lines, highlight_cells


@dataclass
class MoveResult:
    coordinate: Coordinate
    mark: Mark
    produced_win: bool
    produced_draw: bool
    winning_line: Optional[List[Coordinate]] = None
    threat_lines: List[ThreatLine] = field(default_factory=list)


@dataclass
class Game:
    """State manager for a two-player Caro match.

    The board itself is an immutable snapshot that is replaced on every ply,
    so it can be handed to the engine without copying.
    """

    size: int = BOARD_SIZE
    first_mark: Mark = Mark.X
    board: Board = field(init=False)
    current_mark: Mark = field(init=False)
    history: List[Coordinate] = field(default_factory=list)
    winner: Optional[Mark] = None
    winning_line: Optional[List[Coordinate]] = None
    draw: bool = False
    resigned: bool = False
    threat_lines: List[ThreatLine] = field(default_factory=list)

    def __post_init__(self) -> None:
        self.board = Board.empty(self.size)
        self.current_mark = self.first_mark

    # ------------------------------------------------------------------
    # Move application
    # ------------------------------------------------------------------
    def place_stone(self, coord: Coordinate) -> MoveResult:
        if self.is_finished:
            raise ValueError("The game is already over")

        mark = self.current_mark
        self.board = self.board.place(coord, mark)
        self.history.append(coord)

        winning_line = check_win(self.board, mark) if self.board.forms_winning_sequence(coord) else None
        produced_win = winning_line is not None
        produced_draw = not produced_win and self.board.is_full()
        if produced_win:
            self.winner = mark
            self.winning_line = winning_line
        elif produced_draw:
            self.draw = True

        self.threat_lines = find_threat_lines(self.board, coord)
        if not self.is_finished:
            self.current_mark = mark.opponent

        return MoveResult(
            coordinate=coord,
            mark=mark,
            produced_win=produced_win,
            produced_draw=produced_draw,
            winning_line=winning_line,
            threat_lines=list(self.threat_lines),
        )

    def resign(self, mark: Mark) -> None:
        if self.is_finished:
            raise ValueError("The game is already over")
        self.winner = mark.opponent
        self.resigned = True

    def undo_last_move(self) -> Coordinate:
        """Take back the most recent ply and return its coordinate."""

        if not self.history:
            raise ValueError("There is no move to undo")
        coord = self.history.pop()
        self._replay()
        return coord

    def undo_turn(self, mark: Mark) -> List[Coordinate]:
        """Take back plies until it is ``mark``'s turn again on an earlier position.

        Used to undo a player's move together with the engine's reply.
        """

        if not any(self._mark_of_ply(index) is mark for index in range(len(self.history))):
            raise ValueError(f"{mark.symbol} has no move to undo")
        undone: List[Coordinate] = []
        while self.history:
            ply = len(self.history) - 1
            undone.append(self.undo_last_move())
            if self._mark_of_ply(ply) is mark:
                break
        return undone

    def reset(self) -> None:
        self.history.clear()
        self._replay()

    # ------------------------------------------------------------------
    # Status helpers
    # ------------------------------------------------------------------
    @property
    def is_finished(self) -> bool:
        return self.winner is not None or self.draw

    @property
    def last_move(self) -> Optional[Coordinate]:
        return self.history[-1] if self.history else None

    @property
    def highlights(self) -> List[Coordinate]:
        return highlight_cells(self.threat_lines)

    def status_message(self) -> str:
        if self.winner is not None:
            suffix = " by resignation" if self.resigned else ""
            return f"{self.winner.symbol} wins{suffix}!"
        if self.draw:
            return "Draw"
        return f"{self.current_mark.symbol} to move"

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    def _mark_of_ply(self, index: int) -> Mark:
        return self.first_mark if index % 2 == 0 else self.first_mark.opponent

    def _replay(self) -> None:
        moves = list(self.history)
        self.history.clear()
        self.board = Board.empty(self.size)
        self.current_mark = self.first_mark
        self.winner = None
        self.winning_line = None
        self.draw = False
        self.resigned = False
        self.threat_lines = []
        for coord in moves:
            self.place_stone(coord)
