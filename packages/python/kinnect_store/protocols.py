from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Collection, Protocol

from .schemas import (
    CareerGoalRecord,
    CommentRecord,
    ConnectionRecord,
    CourseRecord,
    GroupRecord,
    JobSkillRecord,
    MembershipRecord,
    MentorRecord,
    PostRecord,
    ReactionRecord,
    UserRecord,
)


class UserRepo(Protocol):
    async def get(self, user_id: str) -> UserRecord | None: ...

    async def accepted_connections(self, user_id: str) -> list[ConnectionRecord]: ...

    async def connection_ids(self, user_id: str) -> set[str]: ...

    async def related_user_ids(self, user_id: str) -> set[str]: ...

    async def list_active(
        self, *, exclude_ids: Collection[str], limit: int
    ) -> list[UserRecord]: ...


class PostRepo(Protocol):
    async def reactions_by_user(self, user_id: str) -> list[ReactionRecord]: ...

    async def comments_by_user(self, user_id: str) -> list[CommentRecord]: ...

    async def reactor_ids(
        self, post_ids: Collection[str], *, exclude_user_id: str, limit: int
    ) -> list[str]: ...

    async def recent_public_posts(
        self,
        *,
        since: datetime,
        exclude_author_id: str,
        exclude_post_ids: Collection[str],
        limit: int,
    ) -> list[PostRecord]: ...

    async def reaction_counts_by_users(
        self, post_ids: Collection[str], user_ids: Collection[str]
    ) -> dict[str, int]: ...

    async def engagement_counts(self, post_ids: Collection[str]) -> dict[str, int]: ...


class GroupRepo(Protocol):
    async def memberships_of(self, user_id: str) -> list[MembershipRecord]: ...

    async def co_member_ids(
        self, group_ids: Collection[str], *, exclude_user_id: str, limit: int
    ) -> list[str]: ...

    async def memberships_for_users(
        self, user_ids: Collection[str], *, exclude_group_ids: Collection[str]
    ) -> list[MembershipRecord]: ...

    async def get_many(self, group_ids: Collection[str]) -> list[GroupRecord]: ...

    async def find_by_topics_or_category(
        self,
        *,
        topics: Collection[str],
        category: str | None,
        exclude_ids: Collection[str],
        limit: int,
    ) -> list[GroupRecord]: ...


class MentorRepo(Protocol):
    async def list_available(
        self, *, exclude_user_id: str | None, limit: int
    ) -> list[MentorRecord]: ...

    async def active_session_counts(
        self, mentor_ids: Collection[str]
    ) -> dict[str, int]: ...


class CourseRepo(Protocol):
    async def get(self, course_id: str) -> CourseRecord | None: ...

    async def list_active(
        self,
        *,
        exclude_ids: Collection[str],
        price_max: int | None,
        limit: int,
    ) -> list[CourseRecord]: ...

    async def enrolled_course_ids(self, user_id: str) -> set[str]: ...

    async def career_goal(
        self, user_id: str, goal_id: str | None = None
    ) -> CareerGoalRecord | None: ...

    async def job_skills(self, job_id: str) -> list[JobSkillRecord]: ...

    async def related_courses(
        self, course: CourseRecord, *, limit: int
    ) -> list[CourseRecord]: ...


@dataclass(frozen=True)
class StoreRepos:
    users: UserRepo
    posts: PostRepo
    groups: GroupRepo
    mentors: MentorRepo
    courses: CourseRepo
