from __future__ import annotations

from datetime import datetime
from typing import Collection

from ._common import (
    MAX_ROWS,
    SupabaseRepo,
    chunks,
    compact,
    count_of,
    distinct,
    ensure_ts,
    rows_of,
)
from .schemas import CommentRecord, PostRecord, ReactionRecord

TABLE_POSTS = "social_posts"
TABLE_REACTIONS = "post_reactions"
TABLE_COMMENTS = "post_comments"


class SupabasePostRepo(SupabaseRepo):
    # ---------- Async facade ----------
    async def reactions_by_user(self, user_id: str) -> list[ReactionRecord]:
        return await self._run(self._reactions_by_user_sync, user_id)

    async def comments_by_user(self, user_id: str) -> list[CommentRecord]:
        return await self._run(self._comments_by_user_sync, user_id)

    async def reactor_ids(
        self, post_ids: Collection[str], *, exclude_user_id: str, limit: int
    ) -> list[str]:
        return await self._run(
            self._reactor_ids_sync, list(post_ids), exclude_user_id, limit
        )

    async def recent_public_posts(
        self,
        *,
        since: datetime,
        exclude_author_id: str,
        exclude_post_ids: Collection[str],
        limit: int,
    ) -> list[PostRecord]:
        return await self._run(
            self._recent_public_posts_sync,
            since,
            exclude_author_id,
            list(exclude_post_ids),
            limit,
        )

    async def reaction_counts_by_users(
        self, post_ids: Collection[str], user_ids: Collection[str]
    ) -> dict[str, int]:
        return await self._run(
            self._reaction_counts_by_users_sync, list(post_ids), list(user_ids)
        )

    async def engagement_counts(self, post_ids: Collection[str]) -> dict[str, int]:
        return await self._run(self._engagement_counts_sync, list(post_ids))

    # ---------- Private sync impls ----------
    def _reactions_by_user_sync(self, user_id: str) -> list[ReactionRecord]:
        res = (
            self.client.table(TABLE_REACTIONS)
            .select("user_id, post_id, created_at")
            .eq("user_id", user_id)
            .limit(MAX_ROWS)
            .execute()
        )
        return [
            ReactionRecord(
                user_id=row["user_id"],
                post_id=row["post_id"],
                created_at=ensure_ts(row.get("created_at")),
            )
            for row in rows_of(res)
        ]

    def _comments_by_user_sync(self, user_id: str) -> list[CommentRecord]:
        res = (
            self.client.table(TABLE_COMMENTS)
            .select("author_id, post_id, created_at")
            .eq("author_id", user_id)
            .limit(MAX_ROWS)
            .execute()
        )
        return [
            CommentRecord(
                author_id=row["author_id"],
                post_id=row["post_id"],
                created_at=ensure_ts(row.get("created_at")),
            )
            for row in rows_of(res)
        ]

    def _reactor_ids_sync(
        self, post_ids: list[str], exclude_user_id: str, limit: int
    ) -> list[str]:
        found: list[str] = []
        for batch in chunks(post_ids):
            res = (
                self.client.table(TABLE_REACTIONS)
                .select("user_id")
                .in_("post_id", batch)
                .neq("user_id", exclude_user_id)
                .limit(MAX_ROWS)
                .execute()
            )
            found.extend(row["user_id"] for row in rows_of(res))
            found = distinct(found)
            if len(found) >= limit:
                break
        return found[:limit]

    def _recent_public_posts_sync(
        self,
        since: datetime,
        exclude_author_id: str,
        exclude_post_ids: list[str],
        limit: int,
    ) -> list[PostRecord]:
        if limit <= 0:
            return []
        q = (
            self.client.table(TABLE_POSTS)
            .select("id, author_id, visibility, created_at, content")
            .neq("author_id", exclude_author_id)
            .eq("visibility", "public")
            .gte("created_at", since.isoformat())
        )
        if exclude_post_ids:
            q = q.not_.in_("id", exclude_post_ids)
        res = q.order("created_at", desc=True).limit(limit).execute()
        out: list[PostRecord] = []
        for row in rows_of(res):
            ts = ensure_ts(row.get("created_at"))
            if ts is None:
                continue
            out.append(PostRecord(**{**compact(row), "created_at": ts}))
        return out

    def _count(self, table: str, post_id: str, user_ids: list[str] | None = None) -> int:
        q = (
            self.client.table(table)
            .select("post_id", count="exact", head=True)
            .eq("post_id", post_id)
        )
        if user_ids is not None:
            q = q.in_("user_id", user_ids)
        return count_of(q.execute())

    def _reaction_counts_by_users_sync(
        self, post_ids: list[str], user_ids: list[str]
    ) -> dict[str, int]:
        if not post_ids or not user_ids:
            return {}
        counts: dict[str, int] = {}
        for pid in distinct(post_ids):
            n = sum(
                self._count(TABLE_REACTIONS, pid, user_batch)
                for user_batch in chunks(user_ids)
            )
            if n:
                counts[pid] = n
        return counts

    def _engagement_counts_sync(self, post_ids: list[str]) -> dict[str, int]:
        # exact per-post counts; tallying fetched rows undercounts past the row cap
        counts: dict[str, int] = {}
        for pid in distinct(post_ids):
            n = self._count(TABLE_REACTIONS, pid) + self._count(TABLE_COMMENTS, pid)
            if n:
                counts[pid] = n
        return counts
