"""
Course scoring against a subject's skill gaps, career goal and target job.

Scores are fractions of 1.0 split across five factors (gap coverage 0.40,
career goal 0.25, job skills 0.20, popularity 0.10, duration fit 0.05).
Each scored course also carries the skills it addresses and a completion
likelihood estimate.
"""

from __future__ import annotations

import math
import re
from dataclasses import dataclass, field
from typing import List, Mapping

from kinnect_candidates.types import CourseContext
from kinnect_ranking.types import BreakdownBuilder, ScoredRecommendation
from kinnect_signals.sets import lower_set
from kinnect_store.schemas import CourseRecord

from .common import finalize, plural

SKILLS_GAP_WEIGHT = 0.40
CAREER_GOAL_WEIGHT = 0.25
JOB_MATCH_WEIGHT = 0.20
POPULARITY_WEIGHT = 0.10
DURATION_WEIGHT = 0.05

REQUIRED_SHARE = 0.7
PREFERRED_SHARE = 0.3
POPULAR_ENROLLMENTS = 100

_DURATION_PATTERNS = (
    (re.compile(r"(\d+)\s*week"), lambda n: n),
    (re.compile(r"(\d+)\s*month"), lambda n: n * 4),
    (re.compile(r"(\d+)\s*hour"), lambda n: math.ceil(n / 10)),  # ~10 h/week
    (re.compile(r"(\d+)\s*day"), lambda n: math.ceil(n / 5)),  # 5-day weeks
)


def duration_weeks(duration: str | None) -> int | None:
    """'4 weeks' -> 4, '2 months' -> 8, '30 hours' -> 3, '7 days' -> 2."""
    if not duration:
        return None
    lower = duration.lower()
    for pattern, to_weeks in _DURATION_PATTERNS:
        m = pattern.search(lower)
        if m:
            return to_weeks(int(m.group(1)))
    return None


@dataclass(frozen=True)
class CompletionPrediction:
    percentage: int
    factors: List[str] = field(default_factory=list)


def predict_completion(course: CourseRecord, context: CourseContext) -> CompletionPrediction:
    likelihood = 70
    factors: list[str] = []

    category = (course.category or "").lower()
    if category and any(s in category for s in lower_set(context.user_skills)):
        likelihood += 10
        factors.append("You have related skills")

    if course.is_online:
        likelihood += 5
        factors.append("Flexible online format")

    weeks = duration_weeks(course.duration)
    if weeks and weeks <= 4:
        likelihood += 10
        factors.append("Short duration")
    elif weeks and weeks > 12:
        likelihood -= 10
        factors.append("Extended commitment required")

    return CompletionPrediction(percentage=min(95, max(30, likelihood)), factors=factors)


@dataclass
class CourseMatch:
    course: CourseRecord
    skills_addressed: List[str] = field(default_factory=list)
    completion: CompletionPrediction | None = None


def score_course(
    course: CourseRecord,
    context: CourseContext,
    *,
    boost_factors: Mapping[str, float] | None = None,
) -> ScoredRecommendation[CourseMatch]:
    b = BreakdownBuilder()
    reasons: list[str] = []
    addressed: list[str] = []
    teaches = lower_set(course.skills)

    # 1. skill gaps
    gaps = context.skill_gaps
    gap_hits = [g for g in gaps if g.strip().lower() in teaches]
    gap_coverage = len(gap_hits) / len(gaps) if gaps else 0.0
    b.add("skills_gap", gap_coverage, SKILLS_GAP_WEIGHT)
    if gap_hits:
        addressed.extend(gap_hits)
        reasons.append(f"Addresses {plural(len(gap_hits), 'skill gap')}")

    # 2. career goal keywords
    goal = context.career_goal
    goal_score = 0.0
    if goal and goal.target_role:
        keywords = goal.target_role.lower().split()
        text = " ".join(
            filter(None, (course.title, course.description, course.category))
        ).lower()
        hits = [kw for kw in keywords if kw in text]
        if keywords and hits:
            goal_score = len(hits) / len(keywords)
            reasons.append(f"Aligns with career goal: {goal.title}")
    b.add("career_goal", goal_score, CAREER_GOAL_WEIGHT)

    # 3. target job skills, required ones count more
    job = context.job_skills
    matched = [js for js in job if js.name.strip().lower() in teaches]
    job_score = 0.0
    if matched:
        req_total = sum(1 for js in job if js.required)
        pref_total = len(job) - req_total
        req_hits = sum(1 for js in matched if js.required)
        pref_hits = len(matched) - req_hits
        job_score = (
            req_hits / max(1, req_total) * REQUIRED_SHARE
            + pref_hits / max(1, pref_total) * PREFERRED_SHARE
        )
        addressed.extend(js.name for js in matched)
        reasons.append(f"Teaches {plural(len(matched), 'job-relevant skill')}")
    b.add("job_match", job_score, JOB_MATCH_WEIGHT)

    # 4. popularity, log-scaled
    enrolled = course.enrollment_count
    b.add("popularity", min(1.0, math.log10(enrolled + 1) * 0.3), POPULARITY_WEIGHT)
    if enrolled > POPULAR_ENROLLMENTS:
        reasons.append("Highly popular course")

    # 5. duration fit; neutral half credit when the subject gave no ceiling
    if context.max_duration_weeks:
        weeks = duration_weeks(course.duration)
        fits = bool(weeks) and weeks <= context.max_duration_weeks
        if b.flag("duration", fits, DURATION_WEIGHT):
            reasons.append("Fits your available time")
    else:
        b.add("duration", 0.5, DURATION_WEIGHT)

    match = CourseMatch(
        course=course,
        skills_addressed=list(dict.fromkeys(addressed)),
        completion=predict_completion(course, context),
    )
    return finalize(
        match, b, reasons, primary_signal=gap_coverage, boost_factors=boost_factors
    )


def similar_course_score(reference: CourseRecord, other: CourseRecord) -> int:
    """Two points per shared skill, one for a shared category."""
    shared = len(lower_set(reference.skills) & lower_set(other.skills))
    same_category = int(
        bool(reference.category) and reference.category == other.category
    )
    return shared * 2 + same_category
