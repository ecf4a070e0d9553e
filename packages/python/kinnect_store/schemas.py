from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field


class UserRecord(BaseModel):
    id: str
    name: str | None = None
    status: str = "active"
    industry: str | None = None
    location: str | None = None
    is_indigenous: bool = False
    years_experience: int | None = None
    skills: list[str] = Field(default_factory=list)
    learning_goals: list[str] = Field(default_factory=list)


class ConnectionRecord(BaseModel):
    sender_id: str
    receiver_id: str
    status: str
    updated_at: datetime | None = None

    def other(self, user_id: str) -> str:
        return self.receiver_id if self.sender_id == user_id else self.sender_id


class ReactionRecord(BaseModel):
    user_id: str
    post_id: str
    created_at: datetime | None = None


class CommentRecord(BaseModel):
    author_id: str
    post_id: str
    created_at: datetime | None = None


class MembershipRecord(BaseModel):
    user_id: str
    group_id: str
    joined_at: datetime | None = None


class MentorRecord(BaseModel):
    id: str
    user_id: str
    industry: str | None = None
    years_experience: int | None = None
    response_rate: float | None = None
    is_available: bool = True
    status: str = "approved"
    is_indigenous: bool = False
    specializations: list[str] = Field(default_factory=list)
    review_ratings: list[float] = Field(default_factory=list)

    # explicit-preference matching
    country: str | None = None
    location: str | None = None
    skills: list[str] = Field(default_factory=list)
    availability: str | None = None

    @property
    def average_rating(self) -> float | None:
        if not self.review_ratings:
            return None
        return sum(self.review_ratings) / len(self.review_ratings)


class GroupRecord(BaseModel):
    id: str
    name: str | None = None
    category: str | None = None
    topics: list[str] = Field(default_factory=list)
    location: str | None = None
    is_active: bool = True
    is_indigenous_focused: bool = False
    member_count: int = 0


class PostRecord(BaseModel):
    id: str
    author_id: str
    visibility: str = "public"
    created_at: datetime
    content: str | None = None


class CourseRecord(BaseModel):
    id: str
    title: str
    description: str | None = None
    category: str | None = None
    provider_name: str | None = None
    duration: str | None = None
    price_in_cents: int | None = None
    is_online: bool = False
    is_active: bool = True
    skills: list[str] = Field(default_factory=list)
    enrollment_count: int = 0


class CareerGoalRecord(BaseModel):
    id: str
    user_id: str
    title: str
    target_role: str | None = None
    status: str = "active"


class JobSkillRecord(BaseModel):
    name: str
    required: bool = False
