from __future__ import annotations

from collections import defaultdict

from kinnect_core.config import EngineSettings
from kinnect_core.types import RecommendationOptions
from kinnect_interactions.profile_builder import InteractionProfileBuilder
from kinnect_similarity.similarity_engine import SimilarityEngine
from kinnect_store.protocols import GroupRepo
from kinnect_store.schemas import UserRecord

from .types import GroupCandidate


async def group_candidates(
    subject: UserRecord,
    options: RecommendationOptions,
    *,
    groups: GroupRepo,
    profiles: InteractionProfileBuilder,
    similarity: SimilarityEngine,
    settings: EngineSettings,
) -> list[GroupCandidate]:
    profile = await profiles.build(subject.id)
    joined = set(profile.joins)
    excluded = joined | set(options.exclude_ids)

    # collaborative: groups the subject's look-alikes belong to
    similar = await similarity.similar_users(
        subject.id, limit=settings.group_similar_users
    )
    members: dict[str, set[str]] = defaultdict(set)
    if similar:
        for m in await groups.memberships_for_users(
            [su.user_id for su in similar], exclude_group_ids=sorted(joined)
        ):
            if m.group_id not in excluded:
                members[m.group_id].add(m.user_id)

    out: dict[str, GroupCandidate] = {}
    if members:
        for g in await groups.get_many(list(members)):
            out[g.id] = GroupCandidate(
                group=g, cf_share=len(members[g.id]) / len(similar)
            )

    # content-based: topic overlap with the subject's skills, or same category
    for g in await groups.find_by_topics_or_category(
        topics=subject.skills,
        category=subject.industry,
        exclude_ids=sorted(excluded),
        limit=settings.group_topic_cap,
    ):
        if g.id not in excluded and g.id not in out:
            out[g.id] = GroupCandidate(group=g)

    return list(out.values())
