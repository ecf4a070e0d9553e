from __future__ import annotations

from typing import Collection

from ._common import MAX_ROWS, SupabaseRepo, chunks, compact, ensure_ts, rows_of
from .schemas import ConnectionRecord, UserRecord

TABLE_USERS = "users"
TABLE_SKILLS = "user_skills"
TABLE_PREFS = "user_preferences"
TABLE_CONNECTIONS = "connections"
USER_COLS = "id, name, status, industry, location, is_indigenous, years_experience"


class SupabaseUserRepo(SupabaseRepo):
    # ---------- Async facade ----------
    async def get(self, user_id: str) -> UserRecord | None:
        return await self._run(self._get_sync, user_id)

    async def accepted_connections(self, user_id: str) -> list[ConnectionRecord]:
        return await self._run(self._connections_sync, user_id, "accepted")

    async def connection_ids(self, user_id: str) -> set[str]:
        conns = await self.accepted_connections(user_id)
        return {c.other(user_id) for c in conns}

    async def related_user_ids(self, user_id: str) -> set[str]:
        conns = await self._run(self._connections_sync, user_id, None)
        return {c.other(user_id) for c in conns}

    async def list_active(
        self, *, exclude_ids: Collection[str], limit: int
    ) -> list[UserRecord]:
        return await self._run(self._list_active_sync, list(exclude_ids), limit)

    # ---------- Private sync impls ----------
    def _skills_by_user(self, user_ids: list[str]) -> dict[str, list[str]]:
        out: dict[str, list[str]] = {uid: [] for uid in user_ids}
        for batch in chunks(user_ids):
            res = (
                self.client.table(TABLE_SKILLS)
                .select("user_id, name")
                .in_("user_id", batch)
                .execute()
            )
            for row in rows_of(res):
                if row.get("name"):
                    out.setdefault(row["user_id"], []).append(str(row["name"]))
        return out

    def _get_sync(self, user_id: str) -> UserRecord | None:
        res = (
            self.client.table(TABLE_USERS)
            .select(USER_COLS)
            .eq("id", user_id)
            .limit(1)
            .execute()
        )
        rows = rows_of(res)
        if not rows:
            return None

        prefs_res = (
            self.client.table(TABLE_PREFS)
            .select("learning_goals")
            .eq("user_id", user_id)
            .limit(1)
            .execute()
        )
        prefs = (rows_of(prefs_res) or [{}])[0]

        skills = self._skills_by_user([user_id])[user_id]
        return UserRecord(
            **compact(rows[0]),
            skills=skills,
            learning_goals=list(prefs.get("learning_goals") or []),
        )

    def _connections_sync(
        self, user_id: str, status: str | None
    ) -> list[ConnectionRecord]:
        out: list[ConnectionRecord] = []
        # sender side, then receiver side
        for col in ("sender_id", "receiver_id"):
            q = (
                self.client.table(TABLE_CONNECTIONS)
                .select("sender_id, receiver_id, status, updated_at")
                .eq(col, user_id)
            )
            if status is not None:
                q = q.eq("status", status)
            for row in rows_of(q.limit(MAX_ROWS).execute()):
                out.append(
                    ConnectionRecord(
                        sender_id=row["sender_id"],
                        receiver_id=row["receiver_id"],
                        status=row["status"],
                        updated_at=ensure_ts(row.get("updated_at")),
                    )
                )
        return out

    def _list_active_sync(self, exclude_ids: list[str], limit: int) -> list[UserRecord]:
        if limit <= 0:
            return []
        q = self.client.table(TABLE_USERS).select(USER_COLS).eq("status", "active")
        if exclude_ids:
            q = q.not_.in_("id", exclude_ids)
        rows = rows_of(q.limit(limit).execute())
        skills = self._skills_by_user([r["id"] for r in rows])
        return [UserRecord(**compact(r), skills=skills.get(r["id"], [])) for r in rows]
