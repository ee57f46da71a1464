"""Top-level package for the Caro move-selection engine."""

__all__ = [
    "config",
    "board",
    "threats",
    "game",
    "ai",
]
