from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Annotated, Dict, List

from pydantic import BaseModel, Field, ValidationError

from .errors import ValidationFailed

UserId = str


class Domain(str, Enum):
    CONNECTION = "connection"
    MENTOR = "mentor"
    GROUP = "group"
    CONTENT = "content"
    COURSE = "course"


BoostFactor = Annotated[float, Field(ge=0.0)]


class RecommendationOptions(BaseModel):
    limit: int | None = Field(default=None, ge=0)
    offset: int = Field(default=0, ge=0)
    min_score: float | None = Field(default=None, ge=0.0)
    diversity: float = Field(default=0.0, ge=0.0, le=1.0)
    exclude_ids: List[str] = Field(default_factory=list)
    boost_factors: Dict[str, BoostFactor] = Field(default_factory=dict)

    @classmethod
    def parse(cls, raw: dict | None) -> "RecommendationOptions":
        try:
            return cls.model_validate(raw or {})
        except ValidationError as e:
            raise ValidationFailed(f"invalid recommendation options: {e.errors()}")


class RecommendationRequest(BaseModel):
    subject_user_id: str = Field(min_length=1)
    domain: Domain
    options: RecommendationOptions = Field(default_factory=RecommendationOptions)


@dataclass
class InteractionProfile:
    """
    Sets of entity ids a user has touched, rebuilt wholesale from the store.

    `complete` is False when a store failure cut the build short.
    """

    user_id: UserId
    likes: set[str] = field(default_factory=set)
    comments: set[str] = field(default_factory=set)
    shares: set[str] = field(default_factory=set)
    views: set[str] = field(default_factory=set)
    follows: set[str] = field(default_factory=set)
    joins: set[str] = field(default_factory=set)
    timestamps: dict[str, datetime] = field(default_factory=dict)
    complete: bool = True

    def touch(self, entity_id: str, ts: datetime | None) -> None:
        if ts is None:
            return
        prev = self.timestamps.get(entity_id)
        if prev is None or ts > prev:
            self.timestamps[entity_id] = ts

    def interacted_posts(self) -> set[str]:
        return self.likes | self.comments


@dataclass(frozen=True)
class SimilarUser:
    user_id: UserId
    similarity: float


class CourseFilters(BaseModel):
    """Course-only knobs layered on top of the common options."""

    include_enrolled: bool = False
    target_job_id: str | None = None
    career_goal_id: str | None = None
    max_duration_weeks: int | None = Field(default=None, gt=0)
    price_max: int | None = Field(default=None, ge=0)  # cents


class MenteePreferences(BaseModel):
    """Explicit mentee preferences; unset fields fall back to the profile."""

    country: str | None = None  # nation / cultural background
    industry: str | None = None
    location: str | None = None
    skills: List[str] | str | None = None
    preferred_times: str | None = None
