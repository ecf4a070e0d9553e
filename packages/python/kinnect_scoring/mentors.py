from __future__ import annotations

from typing import Mapping

from kinnect_candidates.types import MentorCandidate
from kinnect_ranking.types import BreakdownBuilder, ScoredRecommendation
from kinnect_signals.sets import substring_matches
from kinnect_store.schemas import MentorRecord, UserRecord

from .common import finalize

GOALS_WEIGHT = 0.35
INDUSTRY_BONUS = 0.20
RATING_WEIGHT = 0.15
COMMUNITY_BONUS = 0.15
EXPERIENCE_BONUS = 0.10
RESPONSIVE_BONUS = 0.05

NEUTRAL_GOAL_SCORE = 0.5
DEFAULT_RATING = 3.0
DEFAULT_MENTOR_YEARS = 10
EXPERIENCE_GAP = (3, 15)


def score_mentor(
    subject: UserRecord,
    candidate: MentorCandidate,
    *,
    boost_factors: Mapping[str, float] | None = None,
) -> ScoredRecommendation[MentorRecord]:
    mentor = candidate.mentor
    b = BreakdownBuilder()
    reasons: list[str] = []

    goals = subject.learning_goals
    goal_score = (
        substring_matches(goals, mentor.specializations) / len(goals)
        if goals
        else NEUTRAL_GOAL_SCORE
    )
    b.add("goals", goal_score, GOALS_WEIGHT)
    if goal_score > 0.3:
        reasons.append("Expertise in your areas of interest")

    industry = bool(mentor.industry and subject.industry) and (
        subject.industry.lower() in mentor.industry.lower()
    )
    if b.flag("industry", industry, INDUSTRY_BONUS):
        reasons.append("Industry expertise")

    avg = mentor.average_rating
    if avg is None:
        avg = DEFAULT_RATING
    b.add("rating", avg / 5, RATING_WEIGHT)
    if avg >= 4.5:
        reasons.append("Highly rated mentor")

    if b.flag("community", subject.is_indigenous and mentor.is_indigenous, COMMUNITY_BONUS):
        reasons.append("Indigenous mentor")

    mentor_years = (
        mentor.years_experience
        if mentor.years_experience is not None
        else DEFAULT_MENTOR_YEARS
    )
    gap = mentor_years - (subject.years_experience or 0)
    lo, hi = EXPERIENCE_GAP
    if b.flag("experience", lo <= gap <= hi, EXPERIENCE_BONUS):
        reasons.append("Appropriate experience level")

    responsive = mentor.response_rate is not None and mentor.response_rate > 0.8
    if b.flag("responsiveness", responsive, RESPONSIVE_BONUS):
        reasons.append("Responsive mentor")

    return finalize(
        mentor, b, reasons, primary_signal=avg / 5, boost_factors=boost_factors
    )
