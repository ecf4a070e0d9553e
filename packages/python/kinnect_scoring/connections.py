from __future__ import annotations

from typing import Mapping

from kinnect_candidates.types import ConnectionCandidate
from kinnect_ranking.types import BreakdownBuilder, ScoredRecommendation
from kinnect_signals.geo import same_location, same_state
from kinnect_signals.sets import jaccard, lower_set
from kinnect_store.schemas import UserRecord

from .common import finalize, plural

CF_WEIGHT = 0.35
SKILLS_WEIGHT = 0.25
INDUSTRY_BONUS = 0.15
LOCATION_BONUS = 0.10
REGION_BONUS = 0.05
COMMUNITY_BONUS = 0.10
MUTUAL_CAP = 0.10
MUTUAL_PER_CONNECTION = 0.02
DIVERSITY_WEIGHT = 0.1


def score_connection(
    subject: UserRecord,
    candidate: ConnectionCandidate,
    *,
    diversity: float = 0.0,
    boost_factors: Mapping[str, float] | None = None,
) -> ScoredRecommendation[UserRecord]:
    other = candidate.user
    b = BreakdownBuilder()
    reasons: list[str] = []

    cf = candidate.cf_score
    b.add("collaborative", cf, CF_WEIGHT)
    if cf > 0.3:
        reasons.append("People like you connected with them")

    skills = jaccard(lower_set(subject.skills), lower_set(other.skills))
    b.add("skills", skills, SKILLS_WEIGHT)
    if skills > 0.2:
        reasons.append("Similar skills")

    same_industry = bool(subject.industry and other.industry) and (
        subject.industry.lower() == other.industry.lower()
    )
    if b.flag("industry", same_industry, INDUSTRY_BONUS):
        reasons.append("Same industry")

    if b.flag("location", same_location(subject.location, other.location), LOCATION_BONUS):
        reasons.append("Same location")
    elif b.flag("region", same_state(subject.location, other.location), REGION_BONUS):
        reasons.append("Same region")

    if b.flag(
        "community", subject.is_indigenous and other.is_indigenous, COMMUNITY_BONUS
    ):
        reasons.append("Aboriginal/Torres Strait Islander community")

    mutual = candidate.mutual_count
    per_cap = MUTUAL_CAP / MUTUAL_PER_CONNECTION
    b.add("mutual", min(mutual, per_cap) / per_cap, MUTUAL_CAP)
    if mutual > 0:
        reasons.append(plural(mutual, "mutual connection"))

    if diversity > 0:
        # favours people outside the subject's skill bubble
        b.add("diversity", (1 - skills) * diversity, DIVERSITY_WEIGHT)

    return finalize(other, b, reasons, primary_signal=cf, boost_factors=boost_factors)
