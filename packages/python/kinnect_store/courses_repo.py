from __future__ import annotations

from collections import defaultdict
from typing import Collection

from ._common import MAX_ROWS, SupabaseRepo, chunks, compact, count_of, rows_of
from .schemas import CareerGoalRecord, CourseRecord, JobSkillRecord

TABLE_COURSES = "courses"
TABLE_COURSE_SKILLS = "course_skills"
TABLE_ENROLLMENTS = "enrollments"
TABLE_GOALS = "career_goals"
TABLE_JOB_SKILLS = "job_skills"
COURSE_COLS = (
    "id, title, description, category, provider_name, duration, price_in_cents, "
    "is_online, is_active"
)


class SupabaseCourseRepo(SupabaseRepo):
    # ---------- Async facade ----------
    async def get(self, course_id: str) -> CourseRecord | None:
        return await self._run(self._get_sync, course_id)

    async def list_active(
        self,
        *,
        exclude_ids: Collection[str],
        price_max: int | None,
        limit: int,
    ) -> list[CourseRecord]:
        return await self._run(self._list_active_sync, list(exclude_ids), price_max, limit)

    async def enrolled_course_ids(self, user_id: str) -> set[str]:
        return await self._run(self._enrolled_sync, user_id)

    async def career_goal(
        self, user_id: str, goal_id: str | None = None
    ) -> CareerGoalRecord | None:
        return await self._run(self._career_goal_sync, user_id, goal_id)

    async def job_skills(self, job_id: str) -> list[JobSkillRecord]:
        return await self._run(self._job_skills_sync, job_id)

    async def related_courses(
        self, course: CourseRecord, *, limit: int
    ) -> list[CourseRecord]:
        return await self._run(self._related_sync, course, limit)

    # ---------- Private sync impls ----------
    def _hydrate(self, rows: list[dict]) -> list[CourseRecord]:
        if not rows:
            return []
        ids = [r["id"] for r in rows]
        skills: dict[str, list[str]] = defaultdict(list)
        enrolled: dict[str, int] = {}
        for batch in chunks(ids):
            for row in rows_of(
                self.client.table(TABLE_COURSE_SKILLS)
                .select("course_id, name")
                .in_("course_id", batch)
                .execute()
            ):
                if row.get("name"):
                    skills[row["course_id"]].append(str(row["name"]))
        for cid in dict.fromkeys(ids):
            res = (
                self.client.table(TABLE_ENROLLMENTS)
                .select("course_id", count="exact", head=True)
                .eq("course_id", cid)
                .execute()
            )
            enrolled[cid] = count_of(res)
        return [
            CourseRecord(
                **compact(r),
                skills=skills.get(r["id"], []),
                enrollment_count=enrolled.get(r["id"], 0),
            )
            for r in rows
        ]

    def _get_sync(self, course_id: str) -> CourseRecord | None:
        res = (
            self.client.table(TABLE_COURSES)
            .select(COURSE_COLS)
            .eq("id", course_id)
            .limit(1)
            .execute()
        )
        courses = self._hydrate(rows_of(res))
        return courses[0] if courses else None

    def _list_active_sync(
        self, exclude_ids: list[str], price_max: int | None, limit: int
    ) -> list[CourseRecord]:
        if limit <= 0:
            return []
        q = self.client.table(TABLE_COURSES).select(COURSE_COLS).eq("is_active", True)
        if exclude_ids:
            q = q.not_.in_("id", exclude_ids)
        rows = rows_of(q.limit(limit).execute())
        if price_max is not None:
            # NULL price means free
            rows = [
                r
                for r in rows
                if r.get("price_in_cents") is None or r["price_in_cents"] <= price_max
            ]
        return self._hydrate(rows)

    def _enrolled_sync(self, user_id: str) -> set[str]:
        res = (
            self.client.table(TABLE_ENROLLMENTS)
            .select("course_id")
            .eq("user_id", user_id)
            .limit(MAX_ROWS)
            .execute()
        )
        return {row["course_id"] for row in rows_of(res)}

    def _career_goal_sync(
        self, user_id: str, goal_id: str | None
    ) -> CareerGoalRecord | None:
        q = (
            self.client.table(TABLE_GOALS)
            .select("id, user_id, title, target_role, status")
            .eq("user_id", user_id)
        )
        if goal_id:
            q = q.eq("id", goal_id)
        else:
            q = q.eq("status", "active").order("created_at", desc=True)
        rows = rows_of(q.limit(1).execute())
        return CareerGoalRecord(**compact(rows[0])) if rows else None

    def _job_skills_sync(self, job_id: str) -> list[JobSkillRecord]:
        res = (
            self.client.table(TABLE_JOB_SKILLS)
            .select("name, is_required")
            .eq("job_id", job_id)
            .execute()
        )
        return [
            JobSkillRecord(name=str(row["name"]), required=bool(row.get("is_required")))
            for row in rows_of(res)
            if row.get("name")
        ]

    def _related_sync(self, course: CourseRecord, limit: int) -> list[CourseRecord]:
        if limit <= 0:
            return []
        ids: list[str] = []
        if course.skills:
            res = (
                self.client.table(TABLE_COURSE_SKILLS)
                .select("course_id")
                .in_("name", course.skills)
                .neq("course_id", course.id)
                .limit(MAX_ROWS)
                .execute()
            )
            ids.extend(row["course_id"] for row in rows_of(res))
        rows: dict[str, dict] = {}
        if ids:
            for batch in chunks(list(dict.fromkeys(ids))):
                for row in rows_of(
                    self.client.table(TABLE_COURSES)
                    .select(COURSE_COLS)
                    .in_("id", batch)
                    .eq("is_active", True)
                    .execute()
                ):
                    rows.setdefault(row["id"], row)
        if course.category and len(rows) < limit:
            for row in rows_of(
                self.client.table(TABLE_COURSES)
                .select(COURSE_COLS)
                .eq("category", course.category)
                .eq("is_active", True)
                .neq("id", course.id)
                .limit(limit)
                .execute()
            ):
                rows.setdefault(row["id"], row)
        return self._hydrate(list(rows.values())[:limit])
