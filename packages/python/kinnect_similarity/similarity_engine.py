from __future__ import annotations

import logging

from kinnect_cache.caches import pair_key
from kinnect_cache.lru import LRUCache
from kinnect_core.concurrency import bounded_gather
from kinnect_core.config import EngineSettings
from kinnect_core.types import InteractionProfile, SimilarUser
from kinnect_interactions.profile_builder import InteractionProfileBuilder
from kinnect_signals.sets import jaccard
from kinnect_store.protocols import GroupRepo, PostRepo

from .weights import SIMILARITY_WEIGHTS

log = logging.getLogger(__name__)


def profile_similarity(a: InteractionProfile, b: InteractionProfile) -> float:
    """Weighted Jaccard over the scored interaction channels."""
    return sum(
        jaccard(getattr(a, channel), getattr(b, channel)) * weight
        for channel, weight in SIMILARITY_WEIGHTS.items()
    )


class SimilarityEngine:
    def __init__(
        self,
        *,
        profiles: InteractionProfileBuilder,
        posts: PostRepo,
        groups: GroupRepo,
        cache: LRUCache[tuple[str, str], float],
        settings: EngineSettings,
    ):
        self.profiles = profiles
        self.posts = posts
        self.groups = groups
        self.cache = cache
        self.settings = settings

    async def similarity(self, user_a: str, user_b: str) -> float:
        # self-pairs are computed like any other pair, just never memoized
        key = pair_key(user_a, user_b)
        if user_a != user_b:
            cached = self.cache.get(key)
            if cached is not None:
                return cached

        a = await self.profiles.build(user_a)
        b = await self.profiles.build(user_b)
        score = profile_similarity(a, b)

        if user_a != user_b and a.complete and b.complete:
            self.cache.put(key, score)
        return score

    async def candidate_pool(self, user_id: str) -> list[str]:
        """Users who liked the same posts or share a group with `user_id`."""
        profile = await self.profiles.build(user_id)
        cap = self.settings.similar_pool_per_source

        pool: list[str] = []
        if profile.likes:
            pool.extend(
                await self.posts.reactor_ids(
                    sorted(profile.likes), exclude_user_id=user_id, limit=cap
                )
            )
        if profile.joins:
            pool.extend(
                await self.groups.co_member_ids(
                    sorted(profile.joins), exclude_user_id=user_id, limit=cap
                )
            )
        return [uid for uid in dict.fromkeys(pool) if uid != user_id]

    async def similar_users(self, user_id: str, limit: int = 50) -> list[SimilarUser]:
        pool = await self.candidate_pool(user_id)
        if not pool or limit <= 0:
            return []

        async def _score(other: str) -> float:
            return await self.similarity(user_id, other)

        scores = await bounded_gather(_score, pool, limit=self.settings.max_concurrency)
        floor = self.settings.similar_user_floor
        found = [
            SimilarUser(user_id=uid, similarity=s)
            for uid, s in zip(pool, scores)
            if s > floor
        ]
        found.sort(key=lambda su: su.similarity, reverse=True)
        log.debug(
            "similar users for %s: pool=%d kept=%d", user_id, len(pool), len(found)
        )
        return found[:limit]
