from __future__ import annotations

from datetime import datetime
from typing import AbstractSet, Mapping

from kinnect_candidates.types import ContentCandidate
from kinnect_ranking.types import BreakdownBuilder, ScoredRecommendation
from kinnect_signals.decay import CONTENT_HALF_LIFE_DAYS, time_decay
from kinnect_store.schemas import PostRecord

from .common import finalize

CF_PER_REACTION = 0.1
CF_CAP = 0.4
CONNECTION_BONUS = 0.30
POPULAR_BONUS = 0.10
POPULAR_MIN_ENGAGEMENT = 10
RECENCY_WEIGHT = 0.2


def score_post(
    candidate: ContentCandidate,
    *,
    follows: AbstractSet[str],
    now: datetime,
    boost_factors: Mapping[str, float] | None = None,
) -> ScoredRecommendation[PostRecord]:
    post = candidate.post
    b = BreakdownBuilder()
    reasons: list[str] = []

    n = candidate.similar_reactions
    per_cap = CF_CAP / CF_PER_REACTION
    b.add("collaborative", min(n, per_cap) / per_cap, CF_CAP)
    if n > 0:
        reasons.append("Liked by people like you")

    if b.flag("connection", post.author_id in follows, CONNECTION_BONUS):
        reasons.append("From a connection")

    if b.flag("popularity", candidate.engagement > POPULAR_MIN_ENGAGEMENT, POPULAR_BONUS):
        reasons.append("Popular post")

    recency = time_decay(post.created_at, now, CONTENT_HALF_LIFE_DAYS)
    b.add("recency", recency, RECENCY_WEIGHT)

    return finalize(
        post, b, reasons, primary_signal=recency, boost_factors=boost_factors
    )
