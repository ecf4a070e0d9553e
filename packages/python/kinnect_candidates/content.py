from __future__ import annotations

from datetime import datetime, timedelta

from kinnect_core.config import EngineSettings
from kinnect_core.types import RecommendationOptions
from kinnect_interactions.profile_builder import InteractionProfileBuilder
from kinnect_similarity.similarity_engine import SimilarityEngine
from kinnect_store.protocols import PostRepo

from .types import ContentCandidate


async def content_candidates(
    subject_id: str,
    options: RecommendationOptions,
    *,
    posts: PostRepo,
    profiles: InteractionProfileBuilder,
    similarity: SimilarityEngine,
    settings: EngineSettings,
    now: datetime,
) -> list[ContentCandidate]:
    """Recent public posts the subject hasn't engaged with yet, newest first."""
    profile = await profiles.build(subject_id)
    seen = profile.interacted_posts() | set(options.exclude_ids)

    recent = await posts.recent_public_posts(
        since=now - timedelta(days=settings.content_window_days),
        exclude_author_id=subject_id,
        exclude_post_ids=sorted(seen),
        limit=settings.content_candidate_cap,
    )
    recent = [p for p in recent if p.id not in seen and p.author_id != subject_id]
    if not recent:
        return []

    similar = await similarity.similar_users(
        subject_id, limit=settings.content_similar_users
    )
    post_ids = [p.id for p in recent]
    by_similar = (
        await posts.reaction_counts_by_users(post_ids, [su.user_id for su in similar])
        if similar
        else {}
    )
    engagement = await posts.engagement_counts(post_ids)

    return [
        ContentCandidate(
            post=p,
            similar_reactions=by_similar.get(p.id, 0),
            engagement=engagement.get(p.id, 0),
        )
        for p in recent
    ]
