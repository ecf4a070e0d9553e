from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Any, Callable, Dict

from kinnect_core.config import EngineSettings
from kinnect_core.types import InteractionProfile

from .lru import LRUCache


def pair_key(user_a: str, user_b: str) -> tuple[str, str]:
    """Order-independent key for a user pair."""
    return (user_a, user_b) if user_a <= user_b else (user_b, user_a)


@dataclass
class RecommendationCaches:
    """Engine-owned derived-data caches. Safe to drop at any time."""

    profiles: LRUCache[str, InteractionProfile]
    similarities: LRUCache[tuple[str, str], float]

    @classmethod
    def from_settings(
        cls,
        settings: EngineSettings,
        clock: Callable[[], float] = time.monotonic,
    ) -> "RecommendationCaches":
        return cls(
            profiles=LRUCache(
                max_size=settings.profile_cache_max,
                ttl_seconds=settings.profile_ttl_sec,
                name="interaction_profiles",
                clock=clock,
            ),
            # no TTL: a pair's similarity lives until evicted
            similarities=LRUCache(
                max_size=settings.similarity_cache_max_pairs,
                ttl_seconds=None,
                name="user_similarity",
                clock=clock,
            ),
        )

    def clear(self) -> None:
        self.profiles.clear()
        self.similarities.clear()

    def stats(self) -> Dict[str, Any]:
        return {
            "profiles": self.profiles.stats(),
            "similarities": self.similarities.stats(),
        }
