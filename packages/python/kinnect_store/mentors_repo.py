from __future__ import annotations

from collections import defaultdict
from typing import Collection

from ._common import MAX_ROWS, SupabaseRepo, chunks, compact, count_of, rows_of
from .schemas import MentorRecord

TABLE_MENTORS = "mentors"
TABLE_SPECIALIZATIONS = "mentor_specializations"
TABLE_REVIEWS = "mentor_reviews"
TABLE_SESSIONS = "mentor_sessions"
TABLE_USERS = "users"
MENTOR_COLS = (
    "id, user_id, industry, years_experience, response_rate, is_available, status, "
    "country, location, availability"
)
ACTIVE_SESSION_STATUSES = ["scheduled", "SCHEDULED"]


class SupabaseMentorRepo(SupabaseRepo):
    # ---------- Async facade ----------
    async def list_available(
        self, *, exclude_user_id: str | None, limit: int
    ) -> list[MentorRecord]:
        return await self._run(self._list_available_sync, exclude_user_id, limit)

    async def active_session_counts(
        self, mentor_ids: Collection[str]
    ) -> dict[str, int]:
        return await self._run(self._active_session_counts_sync, list(mentor_ids))

    # ---------- Private sync impls ----------
    def _list_available_sync(
        self, exclude_user_id: str | None, limit: int
    ) -> list[MentorRecord]:
        if limit <= 0:
            return []
        q = (
            self.client.table(TABLE_MENTORS)
            .select(MENTOR_COLS)
            .eq("is_available", True)
            .eq("status", "approved")
        )
        if exclude_user_id:
            q = q.neq("user_id", exclude_user_id)
        rows = rows_of(q.limit(limit).execute())
        if not rows:
            return []

        mentor_ids = [r["id"] for r in rows]
        user_ids = [r["user_id"] for r in rows]
        specs: dict[str, list[str]] = defaultdict(list)
        ratings: dict[str, list[float]] = defaultdict(list)
        indigenous: set[str] = set()

        for batch in chunks(mentor_ids):
            for row in rows_of(
                self.client.table(TABLE_SPECIALIZATIONS)
                .select("mentor_id, name")
                .in_("mentor_id", batch)
                .execute()
            ):
                if row.get("name"):
                    specs[row["mentor_id"]].append(str(row["name"]))
            for row in rows_of(
                self.client.table(TABLE_REVIEWS)
                .select("mentor_id, rating")
                .in_("mentor_id", batch)
                .limit(MAX_ROWS)
                .execute()
            ):
                if row.get("rating") is not None:
                    ratings[row["mentor_id"]].append(float(row["rating"]))
        for batch in chunks(user_ids):
            for row in rows_of(
                self.client.table(TABLE_USERS)
                .select("id, is_indigenous")
                .in_("id", batch)
                .execute()
            ):
                if row.get("is_indigenous"):
                    indigenous.add(row["id"])

        return [
            MentorRecord(
                **compact(r),
                specializations=specs.get(r["id"], []),
                skills=specs.get(r["id"], []),
                review_ratings=ratings.get(r["id"], []),
                is_indigenous=r["user_id"] in indigenous,
            )
            for r in rows
        ]

    def _active_session_counts_sync(self, mentor_ids: list[str]) -> dict[str, int]:
        counts: dict[str, int] = {}
        for mid in dict.fromkeys(mentor_ids):
            res = (
                self.client.table(TABLE_SESSIONS)
                .select("mentor_id", count="exact", head=True)
                .eq("mentor_id", mid)
                .in_("status", ACTIVE_SESSION_STATUSES)
                .execute()
            )
            counts[mid] = count_of(res)
        return counts
