from __future__ import annotations

from typing import Any, Dict, List

from fastapi.encoders import jsonable_encoder
from pydantic import BaseModel, Field

from kinnect_core.types import CourseFilters, MenteePreferences, RecommendationOptions
from kinnect_ranking.types import ScoredRecommendation
from kinnect_recommendation.types import OutcomeStatus


class RecommendationItemOut(BaseModel):
    id: str
    score: float
    confidence: float
    reasons: List[str] = Field(default_factory=list)
    score_parts: Dict[str, float] = Field(default_factory=dict)
    item: Dict[str, Any]

    @classmethod
    def from_scored(cls, rec: ScoredRecommendation[Any]) -> "RecommendationItemOut":
        parts = (
            {name: round(fc.contribution, 4) for name, fc in rec.breakdown.features.items()}
            if rec.breakdown
            else {}
        )
        return cls(
            id=item_id(rec.item),
            score=rec.score,
            confidence=rec.confidence,
            reasons=list(rec.reasons),
            score_parts=parts,
            item=jsonable_encoder(rec.item),
        )


class RecommendationListOut(BaseModel):
    status: OutcomeStatus
    domain: str
    items: List[RecommendationItemOut] = Field(default_factory=list)
    detail: str | None = None


class CourseRecommendationRequest(BaseModel):
    options: RecommendationOptions = Field(default_factory=RecommendationOptions)
    filters: CourseFilters = Field(default_factory=CourseFilters)


class SimilarCourseOut(BaseModel):
    id: str
    title: str
    category: str | None = None
    provider: str | None = None
    duration: str | None = None
    enrollment_count: int = 0


class MentorMatchRequest(BaseModel):
    preferences: MenteePreferences = Field(default_factory=MenteePreferences)
    limit: int = Field(default=10, ge=1, le=50)


class MentorMatchOut(BaseModel):
    id: str
    user_id: str
    match_score: int
    match_breakdown: Dict[str, int] = Field(default_factory=dict)
    rating: float | None = None
    rating_count: int = 0
    active_matches: int = 0
    max_capacity: int
    availability: str | None = None


def item_id(item: Any) -> str:
    """Stable id of a recommended item; course matches wrap their course."""
    course = getattr(item, "course", None)
    return str(course.id if course is not None else item.id)
