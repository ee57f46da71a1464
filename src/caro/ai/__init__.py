"""AI opponent utilities for Caro."""

from .engine import CaroEngine, ThreatAnalysis, analyze_threats, create_engine, find_completing_move
from .evaluation import Pattern, classify_window, evaluate
from .opening_book import BookFormatError, OpeningBook, canonical_key
from .search import SearchResult, order_moves, search_blocking, search_cooperative
from .tiers import TIERS, SkillTier, TierProfile, get_tier

__all__ = [
    "CaroEngine",
    "ThreatAnalysis",
    "analyze_threats",
    "create_engine",
    "find_completing_move",
    "Pattern",
    "classify_window",
    "evaluate",
    "BookFormatError",
    "OpeningBook",
    "canonical_key",
    "SearchResult",
    "order_moves",
    "search_blocking",
    "search_cooperative",
    "TIERS",
    "SkillTier",
    "TierProfile",
    "get_tier",
]
