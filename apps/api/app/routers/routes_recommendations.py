import time
import uuid
from typing import List

from fastapi import APIRouter, BackgroundTasks, Depends, Query

from app.deps.deps import get_engine, get_logger
from app.deps.supabase_client import get_current_user_id, require_service_role
from app.schemas import (
    CourseRecommendationRequest,
    RecommendationItemOut,
    RecommendationListOut,
    SimilarCourseOut,
    item_id,
)
from kinnect_core.errors import ValidationFailed
from kinnect_core.types import Domain, RecommendationOptions, RecommendationRequest
from kinnect_logging.rec_logger import RecLogger
from kinnect_recommendation.engine import RecommendationEngine
from kinnect_recommendation.types import RecommendationOutcome

router = APIRouter(prefix="/recommendations", tags=["recommendations"])


def parse_boosts(raw: List[str]) -> dict[str, float]:
    """`feature:factor` pairs, e.g. `skills:1.5`."""
    boosts: dict[str, float] = {}
    for entry in raw:
        name, sep, value = entry.partition(":")
        try:
            if not sep or not name.strip():
                raise ValueError(entry)
            boosts[name.strip()] = float(value)
        except ValueError:
            raise ValidationFailed(f"invalid boost '{entry}', expected feature:factor")
    return boosts


def _respond(
    domain: Domain,
    outcome: RecommendationOutcome,
    *,
    background: BackgroundTasks,
    logger: RecLogger,
    user_id: str,
    options: RecommendationOptions,
    started: float,
) -> RecommendationListOut:
    outcome.raise_for_status()
    endpoint = f"recommendations/{domain.value}"
    query_id = str(uuid.uuid4())
    background.add_task(
        logger.log_query,
        endpoint=endpoint,
        query_id=query_id,
        user_id=logger.hash_user_id(user_id),
        options=options.model_dump(),
        status=outcome.status.value,
        result_count=len(outcome.items),
        duration_ms=int((time.perf_counter() - started) * 1000),
    )
    background.add_task(
        logger.log_results,
        endpoint=endpoint,
        query_id=query_id,
        results=list(outcome.items),
        item_id=item_id,
    )
    return RecommendationListOut(
        status=outcome.status,
        domain=domain.value,
        items=[RecommendationItemOut.from_scored(r) for r in outcome.items],
        detail=outcome.detail,
    )


@router.post("/courses", response_model=RecommendationListOut)
async def recommend_courses(
    req: CourseRecommendationRequest,
    background: BackgroundTasks,
    user_id: str = Depends(get_current_user_id),
    engine: RecommendationEngine = Depends(get_engine),
    logger: RecLogger = Depends(get_logger),
):
    started = time.perf_counter()
    outcome = await engine.recommend(
        RecommendationRequest(
            subject_user_id=user_id, domain=Domain.COURSE, options=req.options
        ),
        course_filters=req.filters,
    )
    return _respond(
        Domain.COURSE,
        outcome,
        background=background,
        logger=logger,
        user_id=user_id,
        options=req.options,
        started=started,
    )


@router.get("/courses/{course_id}/similar", response_model=List[SimilarCourseOut])
async def similar_courses(
    course_id: str,
    limit: int = Query(5, ge=1, le=50),
    _user_id: str = Depends(get_current_user_id),
    engine: RecommendationEngine = Depends(get_engine),
):
    courses = await engine.similar_courses(course_id, limit=limit)
    return [
        SimilarCourseOut(
            id=c.id,
            title=c.title,
            category=c.category,
            provider=c.provider_name,
            duration=c.duration,
            enrollment_count=c.enrollment_count,
        )
        for c in courses
    ]


@router.post("/cache/clear")
async def clear_cache(
    _admin: None = Depends(require_service_role),
    engine: RecommendationEngine = Depends(get_engine),
):
    engine.clear_caches()
    return {"status": "ok", "caches": engine.caches.stats()}


@router.get("/{domain}", response_model=RecommendationListOut)
async def recommend(
    domain: Domain,
    background: BackgroundTasks,
    limit: int | None = None,
    offset: int = 0,
    min_score: float | None = None,
    diversity: float = 0.0,
    exclude_ids: List[str] = Query([]),
    boost: List[str] = Query([]),
    user_id: str = Depends(get_current_user_id),
    engine: RecommendationEngine = Depends(get_engine),
    logger: RecLogger = Depends(get_logger),
):
    started = time.perf_counter()
    # range checks happen here so bad options share the domain error shape
    options = RecommendationOptions.parse(
        {
            "limit": limit,
            "offset": offset,
            "min_score": min_score,
            "diversity": diversity,
            "exclude_ids": exclude_ids,
            "boost_factors": parse_boosts(boost),
        }
    )
    outcome = await engine.recommend(
        RecommendationRequest(subject_user_id=user_id, domain=domain, options=options)
    )
    return _respond(
        domain,
        outcome,
        background=background,
        logger=logger,
        user_id=user_id,
        options=options,
        started=started,
    )
