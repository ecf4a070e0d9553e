from __future__ import annotations

from kinnect_core.config import EngineSettings
from kinnect_core.types import CourseFilters
from kinnect_signals.sets import lower_set
from kinnect_store.protocols import CourseRepo
from kinnect_store.schemas import UserRecord

from .types import CourseCandidates, CourseContext


async def course_context(
    subject: UserRecord, filters: CourseFilters, *, courses: CourseRepo
) -> CourseContext:
    goal = await courses.career_goal(subject.id, filters.career_goal_id)
    job_skills = (
        await courses.job_skills(filters.target_job_id) if filters.target_job_id else []
    )
    have = lower_set(subject.skills)
    gaps = [js.name for js in job_skills if js.name.strip().lower() not in have]
    return CourseContext(
        user_skills=list(subject.skills),
        job_skills=job_skills,
        skill_gaps=gaps,
        career_goal=goal,
        max_duration_weeks=filters.max_duration_weeks,
    )


async def course_candidates(
    subject: UserRecord,
    filters: CourseFilters,
    exclude_ids: list[str],
    *,
    courses: CourseRepo,
    settings: EngineSettings,
) -> CourseCandidates:
    excluded = set(exclude_ids)
    if not filters.include_enrolled:
        excluded |= await courses.enrolled_course_ids(subject.id)

    context = await course_context(subject, filters, courses=courses)
    pool = await courses.list_active(
        exclude_ids=sorted(excluded),
        price_max=filters.price_max,
        limit=settings.course_candidate_cap,
    )
    return CourseCandidates(
        context=context, courses=[c for c in pool if c.id not in excluded]
    )
