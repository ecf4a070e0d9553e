from __future__ import annotations

import logging
from datetime import datetime, timezone
from functools import partial
from typing import Any, Awaitable, Callable, Dict, List

import anyio
from pydantic import ValidationError

from kinnect_cache.caches import RecommendationCaches
from kinnect_candidates.connections import connection_candidates
from kinnect_candidates.content import content_candidates
from kinnect_candidates.courses import course_candidates
from kinnect_candidates.groups import group_candidates
from kinnect_candidates.mentors import mentor_candidates
from kinnect_core.config import DEFAULT_LIMITS, DEFAULT_MIN_SCORES, EngineSettings
from kinnect_core.errors import NotFound, StoreError, ValidationFailed
from kinnect_core.types import (
    CourseFilters,
    Domain,
    InteractionProfile,
    MenteePreferences,
    RecommendationOptions,
    RecommendationRequest,
    SimilarUser,
)
from kinnect_interactions.profile_builder import InteractionProfileBuilder
from kinnect_ranking.ranker import rank_and_paginate
from kinnect_ranking.types import ScoredRecommendation
from kinnect_scoring.connections import score_connection
from kinnect_scoring.content import score_post
from kinnect_scoring.courses import CourseMatch, score_course, similar_course_score
from kinnect_scoring.groups import score_group
from kinnect_scoring.mentor_match import MentorMatch, match_score, resolve_preferences
from kinnect_scoring.mentors import score_mentor
from kinnect_similarity.similarity_engine import SimilarityEngine
from kinnect_store.protocols import StoreRepos
from kinnect_store.schemas import CourseRecord, GroupRecord, MentorRecord, PostRecord, UserRecord

from .types import RecommendationOutcome

log = logging.getLogger(__name__)

OptionsIn = RecommendationOptions | Dict[str, Any] | None


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class RecommendationEngine:
    """
    Read-only recommendation service over the platform store.

    Owns its caches (interaction profiles and pairwise similarities), so two
    engines never share derived state unless handed the same
    `RecommendationCaches`. `clock` returns the current tz-aware instant and
    drives recency decay and the content window.
    """

    def __init__(
        self,
        repos: StoreRepos,
        caches: RecommendationCaches | None = None,
        settings: EngineSettings | None = None,
        clock: Callable[[], datetime] | None = None,
    ):
        self.repos = repos
        self.settings = settings or EngineSettings()
        self.caches = caches or RecommendationCaches.from_settings(self.settings)
        self.clock = clock or _utcnow
        self.profiles = InteractionProfileBuilder(
            users=repos.users,
            posts=repos.posts,
            groups=repos.groups,
            cache=self.caches.profiles,
        )
        self.similarity_engine = SimilarityEngine(
            profiles=self.profiles,
            posts=repos.posts,
            groups=repos.groups,
            cache=self.caches.similarities,
            settings=self.settings,
        )
        self._handlers: Dict[Domain, Callable[[str, RecommendationOptions], Awaitable[list]]] = {
            Domain.CONNECTION: self.connections,
            Domain.MENTOR: self.mentors,
            Domain.GROUP: self.groups,
            Domain.CONTENT: self.content,
            Domain.COURSE: self.courses,
        }

    # ---------- Entry point ----------
    async def recommend(
        self,
        request: RecommendationRequest | Dict[str, Any],
        *,
        course_filters: CourseFilters | None = None,
    ) -> RecommendationOutcome:
        """
        Run one domain under the request deadline.

        Invalid input raises ValidationFailed. Everything else is folded into
        the outcome: a missing subject is `not_found`; a store failure, the
        deadline, or an unexpected error is `degraded` with no items.
        """
        req = self._parse_request(request)
        handler = self._handlers[req.domain]
        if req.domain is Domain.COURSE and course_filters is not None:
            handler = partial(self.courses, filters=course_filters)
        try:
            with anyio.fail_after(self.settings.request_timeout_sec):
                items = await handler(req.subject_user_id, req.options)
        except NotFound as e:
            return RecommendationOutcome.not_found(str(e))
        except ValidationFailed:
            raise
        except TimeoutError:
            log.warning(
                "%s recommendations for %s timed out after %.1fs",
                req.domain.value,
                req.subject_user_id,
                self.settings.request_timeout_sec,
            )
            return RecommendationOutcome.degraded("timeout")
        except StoreError as e:
            log.warning(
                "%s recommendations for %s degraded: %s (%s)",
                req.domain.value,
                req.subject_user_id,
                e,
                e.code,
            )
            return RecommendationOutcome.degraded(e.code)
        except Exception:
            log.exception(
                "%s recommendations for %s failed", req.domain.value, req.subject_user_id
            )
            return RecommendationOutcome.degraded("internal_error")
        return RecommendationOutcome.ok(items)

    # ---------- Domains ----------
    async def connections(
        self, user_id: str, options: OptionsIn = None
    ) -> List[ScoredRecommendation[UserRecord]]:
        opts = self._options(options)
        subject = await self._subject(user_id)
        candidates = await connection_candidates(
            subject,
            opts,
            users=self.repos.users,
            similarity=self.similarity_engine,
            settings=self.settings,
        )
        scored = [
            score_connection(
                subject, c, diversity=opts.diversity, boost_factors=opts.boost_factors
            )
            for c in candidates
        ]
        return self._rank(Domain.CONNECTION, scored, opts)

    async def mentors(
        self, user_id: str, options: OptionsIn = None
    ) -> List[ScoredRecommendation[MentorRecord]]:
        opts = self._options(options)
        subject = await self._subject(user_id)
        candidates = await mentor_candidates(
            subject.id, opts, mentors=self.repos.mentors, settings=self.settings
        )
        scored = [
            score_mentor(subject, c, boost_factors=opts.boost_factors) for c in candidates
        ]
        return self._rank(Domain.MENTOR, scored, opts)

    async def groups(
        self, user_id: str, options: OptionsIn = None
    ) -> List[ScoredRecommendation[GroupRecord]]:
        opts = self._options(options)
        subject = await self._subject(user_id)
        candidates = await group_candidates(
            subject,
            opts,
            groups=self.repos.groups,
            profiles=self.profiles,
            similarity=self.similarity_engine,
            settings=self.settings,
        )
        scored = [
            score_group(subject, c, boost_factors=opts.boost_factors) for c in candidates
        ]
        return self._rank(Domain.GROUP, scored, opts)

    async def content(
        self, user_id: str, options: OptionsIn = None
    ) -> List[ScoredRecommendation[PostRecord]]:
        opts = self._options(options)
        subject = await self._subject(user_id)
        now = self.clock()
        candidates = await content_candidates(
            subject.id,
            opts,
            posts=self.repos.posts,
            profiles=self.profiles,
            similarity=self.similarity_engine,
            settings=self.settings,
            now=now,
        )
        profile = await self.profiles.build(subject.id)
        scored = [
            score_post(c, follows=profile.follows, now=now, boost_factors=opts.boost_factors)
            for c in candidates
        ]
        return self._rank(Domain.CONTENT, scored, opts)

    async def courses(
        self,
        user_id: str,
        options: OptionsIn = None,
        filters: CourseFilters | None = None,
    ) -> List[ScoredRecommendation[CourseMatch]]:
        opts = self._options(options)
        subject = await self._subject(user_id)
        found = await course_candidates(
            subject,
            filters or CourseFilters(),
            opts.exclude_ids,
            courses=self.repos.courses,
            settings=self.settings,
        )
        scored = [
            score_course(c, found.context, boost_factors=opts.boost_factors)
            for c in found.courses
        ]
        return self._rank(Domain.COURSE, scored, opts)

    # ---------- Explicit-preference mentor matching ----------
    async def find_matching_mentors(
        self,
        mentee_id: str,
        preferences: MenteePreferences | None = None,
        limit: int = 10,
    ) -> List[MentorMatch]:
        mentee = await self._subject(mentee_id)
        prefs = resolve_preferences(
            preferences,
            industry=mentee.industry,
            location=mentee.location,
            learning_goals=mentee.learning_goals,
        )
        candidates = await mentor_candidates(
            mentee.id,
            RecommendationOptions(),
            mentors=self.repos.mentors,
            settings=self.settings,
        )
        matches = []
        for c in candidates:
            result = match_score(prefs, c.mentor)
            matches.append(
                MentorMatch(
                    mentor=c.mentor,
                    score=result.score,
                    breakdown=result.breakdown,
                    active_sessions=c.active_sessions,
                )
            )
        matches.sort(key=lambda m: m.score, reverse=True)
        return matches[: max(0, limit)]

    async def similar_courses(self, course_id: str, limit: int = 5) -> List[CourseRecord]:
        course = await self.repos.courses.get(course_id)
        if course is None:
            raise NotFound(f"course {course_id} not found")
        related = await self.repos.courses.related_courses(course, limit=limit * 2)
        related = [c for c in related if c.id != course.id]
        related.sort(key=lambda c: similar_course_score(course, c), reverse=True)
        return related[: max(0, limit)]

    # ---------- Building blocks ----------
    async def build_profile(self, user_id: str) -> InteractionProfile:
        return await self.profiles.build(user_id)

    async def similarity(self, user_a: str, user_b: str) -> float:
        return await self.similarity_engine.similarity(user_a, user_b)

    async def similar_users(self, user_id: str, limit: int = 50) -> List[SimilarUser]:
        return await self.similarity_engine.similar_users(user_id, limit)

    def clear_caches(self) -> None:
        self.caches.clear()
        log.info("recommendation caches cleared")

    # ---------- Helpers ----------
    @staticmethod
    def _parse_request(request: RecommendationRequest | Dict[str, Any]) -> RecommendationRequest:
        if isinstance(request, RecommendationRequest):
            return request
        try:
            return RecommendationRequest.model_validate(request)
        except ValidationError as e:
            raise ValidationFailed(f"invalid recommendation request: {e.errors()}")

    @staticmethod
    def _options(options: OptionsIn) -> RecommendationOptions:
        if isinstance(options, RecommendationOptions):
            return options
        return RecommendationOptions.parse(options)

    async def _subject(self, user_id: str) -> UserRecord:
        if not user_id:
            raise ValidationFailed("subject user id is required")
        user = await self.repos.users.get(user_id)
        if user is None:
            raise NotFound(f"user {user_id} not found")
        return user

    @staticmethod
    def _rank(
        domain: Domain, scored: list, opts: RecommendationOptions
    ) -> list:
        min_score = (
            opts.min_score if opts.min_score is not None else DEFAULT_MIN_SCORES[domain.value]
        )
        limit = opts.limit if opts.limit is not None else DEFAULT_LIMITS[domain.value]
        return rank_and_paginate(
            scored, min_score=min_score, offset=opts.offset, limit=limit
        )
