"""Configuration constants used across the Caro engine."""

from fractions import Fraction
from pathlib import Path

BOARD_SIZE: int = 15
WIN_SEQUENCE_LENGTH: int = 5
EMPTY_CELL: str = "-"
X_SYMBOL: str = "X"
O_SYMBOL: str = "O"

# Chebyshev distance around occupied cells considered for candidate moves.
CANDIDATE_RADIUS: int = 2

# Cooperative search hands control back to the event loop after this many nodes.
YIELD_EVERY_NODES: int = 25

# Root branching kept by move ordering before the cooperative search.
HARD_BRANCH_LIMIT: int = 8

# Only the first plies of a won game are recorded in the opening book.
OPENING_BOOK_MAX_PLIES: int = 8

# Seconds to wait before returning a book move so replies are not instantaneous.
BOOK_MOVE_DELAY: float = 0.15

# Easy tier prefers its own attack only when it beats the threat by this factor.
EASY_ATTACK_MARGIN: Fraction = Fraction(6, 5)

# Simulated thinking time ranges (seconds) applied when pacing is enabled.
THINK_DELAYS = {
    "easy": (0.4, 0.7),
    "medium": (0.8, 1.3),
    "hard": (0.0, 0.0),
}

OPENING_BOOK_ENV: str = "CARO_BOOK_PATH"
DEFAULT_BOOK_PATH: Path = Path.home() / ".caro" / "opening_book.json"
