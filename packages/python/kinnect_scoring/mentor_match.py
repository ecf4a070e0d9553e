"""
Explicit-preference mentor matching.

Scores a mentor against what a mentee asked for on a 0-100 integer scale.
Cultural background (mob/nation) carries the most weight, then industry,
location, skills, availability and a small rating bonus. Every factor is
floored to whole points, and the per-factor points are returned alongside the
total so the UI can explain a match.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Dict, Iterable, List

from kinnect_core.types import MenteePreferences
from kinnect_signals.geo import is_metro, states_in
from kinnect_store.schemas import MentorRecord

COUNTRY_POINTS = 40
INDUSTRY_POINTS = 25
LOCATION_POINTS = 15
SKILLS_POINTS = 10
AVAILABILITY_POINTS = 5
RATING_POINTS = 5
MAX_SCORE = 100

NATIONS_BY_STATE: Dict[str, List[str]] = {
    "nsw": ["wiradjuri", "dharug", "gamilaroi", "bundjalung", "yuin"],
    "vic": ["wurundjeri", "boon wurrung", "gunditjmara", "yorta yorta"],
    "qld": ["yugambeh", "turrbal", "kalkadoon", "yidinji", "kuku yalanji"],
    "wa": ["noongar", "yamatji", "martu", "bardi"],
    "sa": ["kaurna", "ngarrindjeri", "adnyamathanha"],
    "nt": ["larrakia", "yolngu", "arrernte", "warlpiri"],
    "tas": ["palawa", "pakana"],
    "act": ["ngunnawal", "ngambri"],
}

RELATED_INDUSTRIES: Dict[str, List[str]] = {
    "technology": ["software", "it", "digital", "tech", "engineering"],
    "healthcare": ["health", "medical", "nursing", "aged care", "disability"],
    "construction": ["building", "trades", "mining", "infrastructure"],
    "education": ["training", "teaching", "academic", "childcare"],
    "government": ["public sector", "defense", "community services"],
    "hospitality": ["tourism", "food", "events", "accommodation"],
    "finance": ["banking", "accounting", "insurance"],
    "retail": ["sales", "customer service", "e-commerce"],
}

TIME_SLOTS = ("morning", "afternoon", "evening", "weekday", "weekend")

# factor scores in tenths so the floored points are exact
FULL, FLEXIBLE, CLOSE, MID, FAR, WEAK = 10, 8, 7, 4, 3, 2


def _points(weight: int, tenths: int) -> int:
    return weight * tenths // 10


def _words(text: str) -> set[str]:
    return set(text.replace(",", " ").split())


# whole-word match for single words, so "it" does not hit "hospitality"
def _mentions(text: str, term: str) -> bool:
    return term in text if " " in term else term in _words(text)


def _in_region(text: str, state: str, nations: Iterable[str]) -> bool:
    return state in _words(text) or any(n in text for n in nations)


def region_match(a: str, b: str) -> int:
    """Nation or state code in the same state's region: close, else far."""
    a, b = a.lower(), b.lower()
    for state, nations in NATIONS_BY_STATE.items():
        if _in_region(a, state, nations) and _in_region(b, state, nations):
            return CLOSE
    return FAR


def industry_match(a: str, b: str) -> int:
    a, b = a.lower(), b.lower()
    if a == b:
        return FULL
    for industry, related in RELATED_INDUSTRIES.items():
        a_rel = industry in a or any(_mentions(a, r) for r in related)
        b_rel = industry in b or any(_mentions(b, r) for r in related)
        if a_rel and b_rel:
            return CLOSE
    # different industry, transferable insight still counts a little
    return WEAK


def location_match(a: str, b: str) -> int:
    a, b = a.lower(), b.lower()
    if a == b:
        return FULL
    if states_in(a) & states_in(b):
        return CLOSE
    if is_metro(a) == is_metro(b):
        return MID
    # remote mentoring is always possible
    return FAR


def parse_skills(skills: List[str] | str | None) -> list[str]:
    if not skills:
        return []
    raw = skills.split(",") if isinstance(skills, str) else skills
    return [s.strip().lower() for s in raw if s and s.strip()]


def skills_match(wanted: List[str] | str | None, offered: List[str] | str | None) -> float:
    w, o = parse_skills(wanted), parse_skills(offered)
    if not w or not o:
        return 0.0
    hits = sum(1 for s in w if any(s in x or x in s for x in o))
    return min(1.0, hits / min(len(w), 3))


def availability_match(preferred: str, available: str) -> int:
    pref, avail = preferred.lower(), available.lower()
    if any(slot in pref and slot in avail for slot in TIME_SLOTS):
        return FULL
    if "flexible" in avail or _mentions(avail, "any"):
        return FLEXIBLE
    return FAR


@dataclass(frozen=True)
class MatchResult:
    score: int
    breakdown: Dict[str, int] = field(default_factory=dict)


def match_score(prefs: MenteePreferences, mentor: MentorRecord) -> MatchResult:
    breakdown: Dict[str, int] = {}

    if prefs.country and mentor.country:
        if prefs.country.strip().lower() == mentor.country.strip().lower():
            breakdown["country"] = COUNTRY_POINTS
        else:
            breakdown["country"] = _points(
                COUNTRY_POINTS, region_match(prefs.country, mentor.country)
            )

    if prefs.industry and mentor.industry:
        breakdown["industry"] = _points(
            INDUSTRY_POINTS, industry_match(prefs.industry, mentor.industry)
        )

    if prefs.location and mentor.location:
        breakdown["location"] = _points(
            LOCATION_POINTS, location_match(prefs.location, mentor.location)
        )

    offered = mentor.skills or mentor.specializations
    if prefs.skills and offered:
        breakdown["skills"] = math.floor(SKILLS_POINTS * skills_match(prefs.skills, offered))

    availability = mentor.availability or "Flexible"
    if prefs.preferred_times:
        breakdown["availability"] = _points(
            AVAILABILITY_POINTS, availability_match(prefs.preferred_times, availability)
        )

    rating = mentor.average_rating
    if rating is not None and rating >= 4.0:
        breakdown["rating"] = math.floor((rating - 4.0) * RATING_POINTS)

    return MatchResult(score=min(MAX_SCORE, sum(breakdown.values())), breakdown=breakdown)


@dataclass
class MentorMatch:
    mentor: MentorRecord
    score: int
    breakdown: Dict[str, int]
    active_sessions: int = 0


def resolve_preferences(
    prefs: MenteePreferences | None,
    *,
    industry: str | None,
    location: str | None,
    learning_goals: List[str],
) -> MenteePreferences:
    """Explicit preferences win; the mentee's profile fills the gaps."""
    prefs = prefs or MenteePreferences()
    return MenteePreferences(
        country=prefs.country,
        industry=prefs.industry or industry,
        location=prefs.location or location,
        skills=prefs.skills or learning_goals or None,
        preferred_times=prefs.preferred_times,
    )
