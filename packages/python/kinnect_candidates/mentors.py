from __future__ import annotations

import logging

from kinnect_core.config import EngineSettings
from kinnect_core.types import RecommendationOptions
from kinnect_store.protocols import MentorRepo

from .types import MentorCandidate

log = logging.getLogger(__name__)


async def mentor_candidates(
    subject_id: str | None,
    options: RecommendationOptions,
    *,
    mentors: MentorRepo,
    settings: EngineSettings,
) -> list[MentorCandidate]:
    """Available, approved mentors with spare capacity."""
    pool = await mentors.list_available(
        exclude_user_id=subject_id, limit=settings.mentor_candidate_cap
    )
    excluded = set(options.exclude_ids)
    pool = [
        m
        for m in pool
        if m.user_id != subject_id
        and m.id not in excluded
        and m.user_id not in excluded
    ]
    if not pool:
        return []

    sessions = await mentors.active_session_counts([m.id for m in pool])
    cap = settings.mentor_max_active_sessions
    out = [
        MentorCandidate(mentor=m, active_sessions=sessions.get(m.id, 0))
        for m in pool
        if sessions.get(m.id, 0) < cap
    ]
    if len(out) < len(pool):
        log.debug("dropped %d mentors at capacity", len(pool) - len(out))
    return out
