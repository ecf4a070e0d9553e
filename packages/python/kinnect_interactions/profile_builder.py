from __future__ import annotations

import logging

from kinnect_cache.lru import LRUCache
from kinnect_core.types import InteractionProfile
from kinnect_store.protocols import GroupRepo, PostRepo, UserRepo

log = logging.getLogger(__name__)


class InteractionProfileBuilder:
    """
    Rebuilds a user's interaction sets from the store.

    Profiles are cached for the cache's TTL and always replaced wholesale.
    A store failure leaves the profile partially filled (marked incomplete,
    not cached) instead of failing the caller.
    """

    def __init__(
        self,
        *,
        users: UserRepo,
        posts: PostRepo,
        groups: GroupRepo,
        cache: LRUCache[str, InteractionProfile],
    ):
        self.users = users
        self.posts = posts
        self.groups = groups
        self.cache = cache

    async def build(self, user_id: str) -> InteractionProfile:
        cached = self.cache.get(user_id)
        if cached is not None:
            return cached

        profile = InteractionProfile(user_id=user_id)
        try:
            for r in await self.posts.reactions_by_user(user_id):
                profile.likes.add(r.post_id)
                profile.touch(r.post_id, r.created_at)

            for c in await self.posts.comments_by_user(user_id):
                profile.comments.add(c.post_id)
                profile.touch(c.post_id, c.created_at)

            # bidirectional records -> the side that isn't the subject
            for conn in await self.users.accepted_connections(user_id):
                profile.follows.add(conn.other(user_id))

            for m in await self.groups.memberships_of(user_id):
                profile.joins.add(m.group_id)
        except Exception as e:
            log.warning("interaction profile for %s incomplete: %s", user_id, e)
            profile.complete = False
            return profile

        self.cache.put(user_id, profile)
        return profile
