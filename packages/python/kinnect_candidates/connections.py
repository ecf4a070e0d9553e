from __future__ import annotations

from kinnect_core.concurrency import bounded_gather
from kinnect_core.config import EngineSettings
from kinnect_core.types import RecommendationOptions
from kinnect_similarity.similarity_engine import SimilarityEngine
from kinnect_store.protocols import UserRepo
from kinnect_store.schemas import UserRecord

from .types import ConnectionCandidate


async def connection_candidates(
    subject: UserRecord,
    options: RecommendationOptions,
    *,
    users: UserRepo,
    similarity: SimilarityEngine,
    settings: EngineSettings,
) -> list[ConnectionCandidate]:
    # any connection record, pending or declined included, rules a user out
    excluded = await users.related_user_ids(subject.id)
    excluded |= set(options.exclude_ids)
    excluded.add(subject.id)

    similar = await similarity.similar_users(
        subject.id, limit=settings.connection_similar_users
    )
    cf = {su.user_id: su.similarity for su in similar}

    pool = await users.list_active(
        exclude_ids=sorted(excluded), limit=settings.connection_candidate_cap
    )
    pool = [u for u in pool if u.id not in excluded]
    if not pool:
        return []

    mine = await users.connection_ids(subject.id)

    async def _mutual(candidate: UserRecord) -> int:
        if not mine:
            return 0
        theirs = await users.connection_ids(candidate.id)
        return len(mine & theirs)

    mutual = await bounded_gather(_mutual, pool, limit=settings.max_concurrency)
    return [
        ConnectionCandidate(user=u, cf_score=cf.get(u.id, 0.0), mutual_count=n)
        for u, n in zip(pool, mutual)
    ]
