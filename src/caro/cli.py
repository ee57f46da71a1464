"""Command-line entry point for playing against the Caro engine."""

from __future__ import annotations

import argparse
import asyncio
import logging
import os
import sys
from pathlib import Path
from typing import List, Optional, Sequence

from .ai import TIERS, CaroEngine, OpeningBook, create_engine
from .board import Board, Coordinate, Mark, NoLegalMoveError
from .config import DEFAULT_BOOK_PATH, OPENING_BOOK_ENV
from .game import Game

LOGGER = logging.getLogger("caro.cli")


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="caro", description="Five-in-a-row engine.")
    parser.add_argument("--book", type=Path, default=None, help="Opening book file")
    parser.add_argument("--log-level", type=str, default="WARNING", help="Python logging level")
    subparsers = parser.add_subparsers(dest="command", required=True)

    play = subparsers.add_parser("play", help="Play a game in the terminal")
    play.add_argument("--tier", choices=list(TIERS.keys()), default="medium")
    play.add_argument("--mark", choices=["X", "O"], default="X", help="Mark the human plays")
    play.add_argument("--no-threats", action="store_true", help="Do not highlight threat lines")

    suggest = subparsers.add_parser("suggest", help="Print the engine's move for a board file")
    suggest.add_argument("board", type=Path, help="Rows of X, O and - (or .), one row per line")
    suggest.add_argument("--tier", choices=list(TIERS.keys()), default="medium")
    suggest.add_argument("--mark", choices=["X", "O"], required=True, help="Mark to move")

    book = subparsers.add_parser("book", help="Inspect or clear the opening book")
    book.add_argument("--clear", action="store_true", help="Remove every entry")
    return parser.parse_args(argv)


def resolve_book_path(explicit: Optional[Path]) -> Path:
    if explicit is not None:
        return explicit
    env_value = os.environ.get(OPENING_BOOK_ENV)
    return Path(env_value) if env_value else DEFAULT_BOOK_PATH


def read_board(path: Path) -> Board:
    rows = [line.strip().replace(" ", "") for line in path.read_text(encoding="utf-8").splitlines()]
    return Board.from_rows([row for row in rows if row])


def parse_coordinate(text: str) -> Optional[Coordinate]:
    parts = text.replace(",", " ").split()
    if len(parts) != 2 or not all(part.lstrip("-").isdigit() for part in parts):
        return None
    return (int(parts[0]), int(parts[1]))


def run_suggest(args: argparse.Namespace, engine: CaroEngine) -> int:
    try:
        board = read_board(args.board)
        move = asyncio.run(engine.select_move(board, Mark.parse(args.mark), args.tier))
    except (OSError, ValueError) as exc:
        print(exc, file=sys.stderr)
        return 1
    print(f"{move[0]} {move[1]}")
    return 0


def run_book(args: argparse.Namespace, book_path: Path) -> int:
    book = OpeningBook.load(book_path)
    if args.clear:
        book.clear()
        book.save()
        print(f"Cleared opening book at {book_path}")
        return 0
    print(f"{len(book)} entries in {book_path}")
    return 0


def run_play(args: argparse.Namespace, engine: CaroEngine) -> int:  # pragma: no cover - interactive loop
    human = Mark.parse(args.mark)
    ai_mark = human.opponent
    game = Game()
    LOGGER.info("Starting game. Human=%s AI=%s tier=%s", human.symbol, ai_mark.symbol, args.tier)
    print("Enter moves as '<row> <col>'; 'undo' takes back a turn, 'quit' exits.")

    while not game.is_finished:
        highlights: List[Coordinate] = [] if args.no_threats else game.highlights
        print()
        print(game.board.render(highlights))
        print(game.status_message())

        if game.current_mark is ai_mark:
            try:
                move = asyncio.run(
                    engine.select_move(
                        game.board,
                        ai_mark,
                        args.tier,
                        on_thinking=lambda cell: print(f"Thinking about {cell[0]} {cell[1]}..."),
                    )
                )
            except NoLegalMoveError:
                break
            game.place_stone(move)
            print(f"AI plays {move[0]} {move[1]}")
            continue

        try:
            command = input("> ").strip().lower()
        except EOFError:
            return 0
        if command in ("q", "quit", "exit"):
            return 0
        if command == "undo":
            try:
                game.undo_turn(human)
            except ValueError as exc:
                print(exc)
            continue
        coord = parse_coordinate(command)
        if coord is None:
            print("Invalid input. Use '<row> <col>'.")
            continue
        try:
            game.place_stone(coord)
        except ValueError as exc:
            print(exc)

    print()
    print(game.board.render(game.winning_line or []))
    print(game.status_message())
    if game.winner is ai_mark and not game.resigned:
        engine.train(game.history, ai_mark)
    return 0


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(level=getattr(logging, args.log_level.upper(), logging.WARNING))
    book_path = resolve_book_path(args.book)

    if args.command == "book":
        return run_book(args, book_path)

    engine = create_engine(book_path, pace=args.command == "play")
    if args.command == "suggest":
        return run_suggest(args, engine)
    return run_play(args, engine)


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
