"""Move selection for the Caro AI opponent."""

from __future__ import annotations

import asyncio
import logging
import random
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, List, Optional, Sequence

from ..board import Board, Coordinate, Mark, NoLegalMoveError, candidate_moves
from ..config import BOOK_MOVE_DELAY
from .evaluation import evaluate
from .opening_book import OpeningBook
from .search import YieldControl, order_moves, search_blocking, search_cooperative, yield_to_loop
from .tiers import SkillTier, TierProfile, get_tier

LOGGER = logging.getLogger(__name__)

ThinkingCallback = Callable[[Coordinate], None]


@dataclass(frozen=True)
class ThreatAnalysis:
    """Best one-ply moves for each side, scored from that side's view."""

    attack_move: Optional[Coordinate]
    attack_score: float
    threat_move: Optional[Coordinate]
    threat_score: float


def find_completing_move(board: Board, mark: Mark, moves: Sequence[Coordinate]) -> Optional[Coordinate]:
    """Return the first move that gives ``mark`` five in a row."""

    for move in moves:
        if board.place(move, mark).forms_winning_sequence(move):
            return move
    return None


def analyze_threats(board: Board, mover: Mark, moves: Sequence[Coordinate]) -> ThreatAnalysis:
    opponent = mover.opponent
    attack_move: Optional[Coordinate] = None
    threat_move: Optional[Coordinate] = None
    attack_score = threat_score = float("-inf")
    for move in moves:
        score = evaluate(board.place(move, opponent), opponent)
        if score > threat_score:
            threat_score, threat_move = score, move
        score = evaluate(board.place(move, mover), mover)
        if score > attack_score:
            attack_score, attack_move = score, move
    return ThreatAnalysis(attack_move, attack_score, threat_move, threat_score)


class CaroEngine:
    """Chooses moves for a given mark and tier, owning its opening book."""

    def __init__(
        self,
        book: Optional[OpeningBook] = None,
        *,
        pace: bool = False,
        book_move_delay: float = BOOK_MOVE_DELAY,
        rng: Optional[random.Random] = None,
        yield_control: YieldControl = yield_to_loop,
    ) -> None:
        self.book = book if book is not None else OpeningBook()
        self.pace = pace
        self.book_move_delay = book_move_delay
        self.rng = rng or random.Random()
        self.yield_control = yield_control

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------
    def preview_move(self, board: Board, mover: Mark, tier: SkillTier | str | int) -> Coordinate:
        """Cheap depth-1 guess used to show where the engine is looking."""

        profile = get_tier(tier)
        moves = self._legal_moves(board)
        move = self._tactical_move(board, mover, profile, moves)
        if move is None:
            move = search_blocking(board, mover, 1, moves).move
        if move is None:
            move = self._best_single_move(board, mover, moves)
        return self._checked(board, move)

    async def select_move(
        self,
        board: Board,
        mover: Mark,
        tier: SkillTier | str | int,
        on_thinking: Optional[ThinkingCallback] = None,
    ) -> Coordinate:
        """Return the move ``mover`` should play on ``board``.

        ``on_thinking`` is called exactly once, before the result resolves,
        with a provisional move. Raises :class:`NoLegalMoveError` when the
        board is full.
        """

        profile = get_tier(tier)
        moves = self._legal_moves(board)

        move = self._forced_move(board, mover, moves)
        if move is not None:
            if on_thinking is not None:
                on_thinking(move)
            return self._checked(board, move)

        book_move = self.book.lookup(board)
        if book_move is not None:
            if on_thinking is not None:
                on_thinking(book_move)
            await self._wait(self.book_move_delay)
            return self._checked(board, book_move)

        LOGGER.debug("Book miss; searching depth %d for %s", profile.search_depth, profile.key)
        if on_thinking is not None:
            on_thinking(self.preview_move(board, mover, profile.tier))

        if self.pace:
            await self._wait(profile.pick_delay(self.rng))

        move = self._threat_response(board, mover, profile, moves)
        if move is None and not profile.runs_search:
            move = self._best_single_move(board, mover, moves)
        if move is None:
            if profile.cooperative:
                ordered = order_moves(board, mover, moves, profile.branch_limit)
                result = await search_cooperative(
                    board, mover, profile.search_depth, ordered, yield_control=self.yield_control
                )
            else:
                result = search_blocking(board, mover, profile.search_depth, moves)
            move = result.move
            LOGGER.debug("Search picked %s score=%s nodes=%d", move, result.score, result.nodes)
        if move is None:
            LOGGER.warning("Search returned no move; falling back to one-ply choice")
            move = self._best_single_move(board, mover, moves)
        return self._checked(board, move)

    def train(self, move_history: Sequence[Coordinate], engine_mark: Mark) -> int:
        """Feed a game the engine won into the opening book."""

        return self.book.train(move_history, engine_mark)

    def flush(self) -> None:
        if self.book.path is not None:
            self.book.save()

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    async def _wait(self, seconds: float) -> None:
        if seconds > 0:
            await asyncio.sleep(seconds)

    def _legal_moves(self, board: Board) -> List[Coordinate]:
        moves = candidate_moves(board)
        if not moves:
            raise NoLegalMoveError("No legal moves available")
        return moves

    def _forced_move(self, board: Board, mover: Mark, moves: Sequence[Coordinate]) -> Optional[Coordinate]:
        move = find_completing_move(board, mover, moves)
        if move is not None:
            LOGGER.debug("Winning move for %s at %s", mover.symbol, move)
            return move
        move = find_completing_move(board, mover.opponent, moves)
        if move is not None:
            LOGGER.debug("Blocking %s's five at %s", mover.opponent.symbol, move)
        return move

    def _tactical_move(
        self,
        board: Board,
        mover: Mark,
        profile: TierProfile,
        moves: Sequence[Coordinate],
    ) -> Optional[Coordinate]:
        move = self._forced_move(board, mover, moves)
        if move is None:
            move = self._threat_response(board, mover, profile, moves)
        if move is None and not profile.runs_search:
            move = self._best_single_move(board, mover, moves)
        return move

    def _threat_response(
        self,
        board: Board,
        mover: Mark,
        profile: TierProfile,
        moves: Sequence[Coordinate],
    ) -> Optional[Coordinate]:
        analysis = analyze_threats(board, mover, moves)
        if analysis.threat_move is None or analysis.threat_score < profile.block_threshold:
            return None
        if profile.prefers_attack(analysis.attack_score, analysis.threat_score):
            if profile.runs_search:
                return None
            LOGGER.debug("%s: attacking at %s instead of blocking", profile.key, analysis.attack_move)
            return analysis.attack_move
        LOGGER.debug("%s: blocking threat at %s", profile.key, analysis.threat_move)
        return analysis.threat_move

    def _best_single_move(self, board: Board, mover: Mark, moves: Sequence[Coordinate]) -> Coordinate:
        return analyze_threats(board, mover, moves).attack_move or moves[0]

    def _checked(self, board: Board, move: Coordinate) -> Coordinate:
        if not board.is_empty(move):
            raise RuntimeError(f"Engine produced an illegal move {move}")
        return move


def create_engine(book_path: Optional[Path] = None, **kwargs: Any) -> CaroEngine:
    """Factory helper that loads the opening book once for a new engine."""

    book = OpeningBook.load(book_path) if book_path is not None else OpeningBook()
    return CaroEngine(book, **kwargs)
