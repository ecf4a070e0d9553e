from __future__ import annotations

from dataclasses import dataclass, field

from kinnect_store.schemas import (
    CareerGoalRecord,
    CourseRecord,
    GroupRecord,
    JobSkillRecord,
    MentorRecord,
    PostRecord,
    UserRecord,
)


@dataclass
class ConnectionCandidate:
    user: UserRecord
    cf_score: float = 0.0
    mutual_count: int = 0


@dataclass
class MentorCandidate:
    mentor: MentorRecord
    active_sessions: int = 0


@dataclass
class GroupCandidate:
    group: GroupRecord
    cf_share: float = 0.0


@dataclass
class ContentCandidate:
    post: PostRecord
    similar_reactions: int = 0
    engagement: int = 0


@dataclass
class CourseContext:
    """Per-subject inputs shared by every course candidate."""

    user_skills: list[str] = field(default_factory=list)
    job_skills: list[JobSkillRecord] = field(default_factory=list)
    skill_gaps: list[str] = field(default_factory=list)
    career_goal: CareerGoalRecord | None = None
    max_duration_weeks: int | None = None


@dataclass
class CourseCandidates:
    context: CourseContext
    courses: list[CourseRecord] = field(default_factory=list)
