"""Minimax search with alpha-beta pruning, in blocking and cooperative forms."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Awaitable, Callable, Generator, List, Optional, Sequence, Tuple

from ..board import Board, Coordinate, Mark, candidate_moves
from ..config import YIELD_EVERY_NODES
from ..threats import check_win
from .evaluation import Pattern, evaluate

LOGGER = logging.getLogger(__name__)

YieldControl = Callable[[], Awaitable[None]]
_Outcome = Tuple[int, Optional[Coordinate]]
_SearchSteps = Generator[None, None, _Outcome]

# Larger than any score evaluate() can return, so it works as an infinity.
_SCORE_BOUND = int(Pattern.FIVE) << 10


@dataclass(frozen=True)
class SearchResult:
    score: int
    move: Optional[Coordinate]
    nodes: int


@dataclass
class _NodeCounter:
    count: int = 0


async def yield_to_loop() -> None:
    """Default scheduler primitive: let other tasks on the event loop run."""

    await asyncio.sleep(0)


def search_blocking(
    board: Board,
    mover: Mark,
    depth: int,
    moves: Optional[Sequence[Coordinate]] = None,
) -> SearchResult:
    """Run the search to completion without ever suspending."""

    counter = _NodeCounter()
    steps = _alphabeta(board, depth, -_SCORE_BOUND, _SCORE_BOUND, True, mover, counter, None, moves)
    while True:
        try:
            next(steps)
        except StopIteration as stop:
            score, move = stop.value
            break
    LOGGER.debug("Blocking search depth=%d nodes=%d move=%s", depth, counter.count, move)
    return SearchResult(score=score, move=move, nodes=counter.count)


async def search_cooperative(
    board: Board,
    mover: Mark,
    depth: int,
    moves: Optional[Sequence[Coordinate]] = None,
    *,
    yield_every: int = YIELD_EVERY_NODES,
    yield_control: YieldControl = yield_to_loop,
) -> SearchResult:
    """Run the same search, handing control back every ``yield_every`` nodes.

    Cancelling the surrounding task stops the search at the next yield point.
    """

    if yield_every < 1:
        raise ValueError("yield_every must be at least 1")
    counter = _NodeCounter()
    steps = _alphabeta(board, depth, -_SCORE_BOUND, _SCORE_BOUND, True, mover, counter, yield_every, moves)
    while True:
        try:
            next(steps)
        except StopIteration as stop:
            score, move = stop.value
            break
        await yield_control()
    LOGGER.debug("Cooperative search depth=%d nodes=%d move=%s", depth, counter.count, move)
    return SearchResult(score=score, move=move, nodes=counter.count)


def order_moves(
    board: Board,
    mover: Mark,
    moves: Sequence[Coordinate],
    limit: Optional[int] = None,
) -> List[Coordinate]:
    """Rank moves by attacking value plus the threat they take away.

    ``offense`` scores the mover playing the cell; ``defense`` scores the
    opponent playing it instead, both from the mover's point of view.
    """

    opponent = mover.opponent
    scored = []
    for move in moves:
        offense = evaluate(board.place(move, mover), mover)
        defense = evaluate(board.place(move, opponent), mover)
        scored.append((offense - defense, move))
    scored.sort(key=lambda item: item[0], reverse=True)
    ranked = [move for _, move in scored]
    return ranked if limit is None else ranked[:limit]


def _alphabeta(
    board: Board,
    depth: int,
    alpha: int,
    beta: int,
    maximizing: bool,
    mover: Mark,
    counter: _NodeCounter,
    yield_every: Optional[int],
    moves: Optional[Sequence[Coordinate]] = None,
    last_move: Optional[Coordinate] = None,
) -> _SearchSteps:
    if depth <= 0 or _is_decided(board, last_move):
        return evaluate(board, mover), None

    possible = list(moves) if moves is not None else candidate_moves(board)
    if not possible:
        return evaluate(board, mover), None

    stone = mover if maximizing else mover.opponent
    best_move = possible[0]
    best = -_SCORE_BOUND if maximizing else _SCORE_BOUND
    for move in possible:
        counter.count += 1
        if yield_every and counter.count % yield_every == 0:
            yield
        child = board.place(move, stone)
        score, _ = yield from _alphabeta(
            child, depth - 1, alpha, beta, not maximizing, mover, counter, yield_every, last_move=move
        )
        if maximizing:
            if score > best:
                best, best_move = score, move
            alpha = max(alpha, score)
        else:
            if score < best:
                best, best_move = score, move
            beta = min(beta, score)
        if beta <= alpha:
            break
    return best, best_move


def _is_decided(board: Board, last_move: Optional[Coordinate]) -> bool:
    if last_move is not None:
        return board.forms_winning_sequence(last_move)
    return check_win(board, Mark.X) is not None or check_win(board, Mark.O) is not None
