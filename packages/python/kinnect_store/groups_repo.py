from __future__ import annotations

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
from .schemas import GroupRecord, MembershipRecord

TABLE_GROUPS = "groups"
TABLE_MEMBERS = "group_members"
GROUP_COLS = "id, name, category, topics, location, is_active, is_indigenous_focused"


class SupabaseGroupRepo(SupabaseRepo):
    # ---------- Async facade ----------
    async def memberships_of(self, user_id: str) -> list[MembershipRecord]:
        return await self._run(self._memberships_of_sync, user_id)

    async def co_member_ids(
        self, group_ids: Collection[str], *, exclude_user_id: str, limit: int
    ) -> list[str]:
        return await self._run(
            self._co_member_ids_sync, list(group_ids), exclude_user_id, limit
        )

    async def memberships_for_users(
        self, user_ids: Collection[str], *, exclude_group_ids: Collection[str]
    ) -> list[MembershipRecord]:
        return await self._run(
            self._memberships_for_users_sync, list(user_ids), list(exclude_group_ids)
        )

    async def get_many(self, group_ids: Collection[str]) -> list[GroupRecord]:
        return await self._run(self._get_many_sync, list(group_ids))

    async def find_by_topics_or_category(
        self,
        *,
        topics: Collection[str],
        category: str | None,
        exclude_ids: Collection[str],
        limit: int,
    ) -> list[GroupRecord]:
        return await self._run(
            self._find_by_topics_or_category_sync,
            list(topics),
            category,
            list(exclude_ids),
            limit,
        )

    # ---------- Private sync impls ----------
    @staticmethod
    def _membership(row: dict) -> MembershipRecord:
        return MembershipRecord(
            user_id=row["user_id"],
            group_id=row["group_id"],
            joined_at=ensure_ts(row.get("joined_at")),
        )

    def _memberships_of_sync(self, user_id: str) -> list[MembershipRecord]:
        res = (
            self.client.table(TABLE_MEMBERS)
            .select("user_id, group_id, joined_at")
            .eq("user_id", user_id)
            .limit(MAX_ROWS)
            .execute()
        )
        return [self._membership(row) for row in rows_of(res)]

    def _co_member_ids_sync(
        self, group_ids: list[str], exclude_user_id: str, limit: int
    ) -> list[str]:
        found: list[str] = []
        for batch in chunks(group_ids):
            res = (
                self.client.table(TABLE_MEMBERS)
                .select("user_id")
                .in_("group_id", batch)
                .neq("user_id", exclude_user_id)
                .limit(MAX_ROWS)
                .execute()
            )
            found = distinct([*found, *(row["user_id"] for row in rows_of(res))])
            if len(found) >= limit:
                break
        return found[:limit]

    def _memberships_for_users_sync(
        self, user_ids: list[str], exclude_group_ids: list[str]
    ) -> list[MembershipRecord]:
        out: list[MembershipRecord] = []
        for batch in chunks(user_ids):
            q = (
                self.client.table(TABLE_MEMBERS)
                .select("user_id, group_id, joined_at")
                .in_("user_id", batch)
            )
            if exclude_group_ids:
                q = q.not_.in_("group_id", exclude_group_ids)
            out.extend(self._membership(row) for row in rows_of(q.limit(MAX_ROWS).execute()))
        return out

    def _member_counts(self, group_ids: list[str]) -> dict[str, int]:
        # one exact count per group; fetching member rows would hit the row cap
        counts: dict[str, int] = {}
        for gid in distinct(group_ids):
            res = (
                self.client.table(TABLE_MEMBERS)
                .select("group_id", count="exact", head=True)
                .eq("group_id", gid)
                .execute()
            )
            counts[gid] = count_of(res)
        return counts

    def _with_counts(self, rows: list[dict]) -> list[GroupRecord]:
        counts = self._member_counts([r["id"] for r in rows])
        return [
            GroupRecord(**compact(r), member_count=counts.get(r["id"], 0)) for r in rows
        ]

    def _get_many_sync(self, group_ids: list[str]) -> list[GroupRecord]:
        rows: list[dict] = []
        for batch in chunks(group_ids):
            res = self.client.table(TABLE_GROUPS).select(GROUP_COLS).in_("id", batch).execute()
            rows.extend(rows_of(res))
        return self._with_counts(rows)

    def _find_by_topics_or_category_sync(
        self,
        topics: list[str],
        category: str | None,
        exclude_ids: list[str],
        limit: int,
    ) -> list[GroupRecord]:
        if limit <= 0 or (not topics and not category):
            return []

        def _base():
            q = self.client.table(TABLE_GROUPS).select(GROUP_COLS).eq("is_active", True)
            if exclude_ids:
                q = q.not_.in_("id", exclude_ids)
            return q

        rows: dict[str, dict] = {}
        # topic overlap first, then category match
        if topics:
            for row in rows_of(_base().ov("topics", topics).limit(limit).execute()):
                rows.setdefault(row["id"], row)
        if category and len(rows) < limit:
            for row in rows_of(_base().eq("category", category).limit(limit).execute()):
                rows.setdefault(row["id"], row)
        return self._with_counts(list(rows.values())[:limit])
