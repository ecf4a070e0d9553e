from __future__ import annotations

from typing import Mapping

from kinnect_candidates.types import GroupCandidate
from kinnect_ranking.types import BreakdownBuilder, ScoredRecommendation
from kinnect_signals.geo import extract_state, mentions_state
from kinnect_signals.sets import contained_matches
from kinnect_store.schemas import GroupRecord, UserRecord

from .common import finalize

CF_WEIGHT = 0.40
TOPIC_PER_MATCH = 0.15
TOPIC_CAP = 0.30
SIZE_BONUS = 0.10
COMMUNITY_BONUS = 0.15
LOCAL_BONUS = 0.05
ACTIVE_SIZE = (10, 500)


def score_group(
    subject: UserRecord,
    candidate: GroupCandidate,
    *,
    boost_factors: Mapping[str, float] | None = None,
) -> ScoredRecommendation[GroupRecord]:
    group = candidate.group
    b = BreakdownBuilder()
    reasons: list[str] = []

    cf = candidate.cf_share
    b.add("collaborative", cf, CF_WEIGHT)
    if cf > 0.2:
        reasons.append("Popular with people like you")

    matches = contained_matches(subject.skills, group.topics)
    per_cap = TOPIC_CAP / TOPIC_PER_MATCH
    b.add("topics", min(matches, per_cap) / per_cap, TOPIC_CAP)
    if matches > 0:
        reasons.append("Matches your interests")

    lo, hi = ACTIVE_SIZE
    if b.flag("size", lo <= group.member_count <= hi, SIZE_BONUS):
        reasons.append("Active community")

    if b.flag(
        "community",
        subject.is_indigenous and group.is_indigenous_focused,
        COMMUNITY_BONUS,
    ):
        reasons.append("Indigenous community")

    local = mentions_state(group.location, extract_state(subject.location))
    if b.flag("location", local, LOCAL_BONUS):
        reasons.append("Local community")

    return finalize(group, b, reasons, primary_signal=cf, boost_factors=boost_factors)
