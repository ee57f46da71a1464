"""Skill tier definitions for the Caro AI opponent."""

from __future__ import annotations

import random
from dataclasses import dataclass, field
from enum import Enum
from fractions import Fraction
from typing import Dict, Optional, Tuple

from ..config import EASY_ATTACK_MARGIN, HARD_BRANCH_LIMIT, THINK_DELAYS
from .evaluation import Pattern


class SkillTier(Enum):
    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"

    @property
    def profile(self) -> "TierProfile":
        return TIERS.get(self.value)


@dataclass(frozen=True)
class TierProfile:
    """Configuration bundle describing how hard a tier plays."""

    tier: SkillTier
    level: int
    search_depth: int
    block_threshold: Pattern
    attack_margin: Fraction
    cooperative: bool = False
    branch_limit: Optional[int] = None
    runs_search: bool = True
    think_delay: Tuple[float, float] = (0.0, 0.0)
    description: Optional[str] = None

    @property
    def key(self) -> str:
        return self.tier.value

    def prefers_attack(self, attack_score: int, threat_score: int) -> bool:
        """Return ``True`` when the own best move outweighs the opponent's threat."""

        return attack_score > self.attack_margin * threat_score

    def pick_delay(self, rng: random.Random) -> float:
        low, high = self.think_delay
        if high <= 0:
            return 0.0
        return low + rng.random() * (high - low)


@dataclass(frozen=True)
class TierRegistry:
    """Collection of tier profiles with helper lookups."""

    profiles: tuple[TierProfile, ...] = field(default_factory=tuple)
    _by_key: Dict[str, TierProfile] = field(init=False, repr=False)
    _by_level: Dict[int, TierProfile] = field(init=False, repr=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "_by_key", {profile.key: profile for profile in self.profiles})
        object.__setattr__(self, "_by_level", {profile.level: profile for profile in self.profiles})

    def get(self, identifier: str | int | SkillTier) -> TierProfile:
        if isinstance(identifier, SkillTier):
            identifier = identifier.value
        if isinstance(identifier, int):
            profile = self._by_level.get(identifier)
        else:
            profile = self._by_key.get(identifier.strip().lower())
        if profile is None:
            raise KeyError(f"Unknown skill tier: {identifier}")
        return profile

    def __iter__(self):
        return iter(self.profiles)

    def keys(self):
        return self._by_key.keys()


_PROFILES: tuple[TierProfile, ...] = (
    TierProfile(
        tier=SkillTier.EASY,
        level=1,
        search_depth=1,
        block_threshold=Pattern.DEAD_THREE,
        attack_margin=EASY_ATTACK_MARGIN,
        runs_search=False,
        think_delay=THINK_DELAYS["easy"],
        description="Blocks obvious threats, otherwise grabs the best-looking cell.",
    ),
    TierProfile(
        tier=SkillTier.MEDIUM,
        level=2,
        search_depth=2,
        block_threshold=Pattern.LIVE_THREE,
        attack_margin=Fraction(1),
        think_delay=THINK_DELAYS["medium"],
        description="Two-ply search after the tactical checks.",
    ),
    TierProfile(
        tier=SkillTier.HARD,
        level=3,
        search_depth=3,
        block_threshold=Pattern.LIVE_THREE,
        attack_margin=Fraction(1),
        cooperative=True,
        branch_limit=HARD_BRANCH_LIMIT,
        think_delay=THINK_DELAYS["hard"],
        description="Three-ply search over the most promising replies.",
    ),
)

TIERS = TierRegistry(_PROFILES)


def get_tier(identifier: str | int | SkillTier) -> TierProfile:
    """Convenience wrapper returning the profile by key, level or enum."""

    return TIERS.get(identifier)
