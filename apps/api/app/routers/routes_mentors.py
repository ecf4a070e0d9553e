from typing import List

from fastapi import APIRouter, Depends

from app.deps.deps import get_engine
from app.deps.supabase_client import get_current_user_id
from app.schemas import MentorMatchOut, MentorMatchRequest
from kinnect_recommendation.engine import RecommendationEngine

router = APIRouter(prefix="/mentors", tags=["mentors"])


@router.post("/match", response_model=List[MentorMatchOut])
async def match_mentors(
    req: MentorMatchRequest,
    user_id: str = Depends(get_current_user_id),
    engine: RecommendationEngine = Depends(get_engine),
):
    matches = await engine.find_matching_mentors(user_id, req.preferences, limit=req.limit)
    cap = engine.settings.mentor_max_active_sessions
    out = []
    for m in matches:
        rating = m.mentor.average_rating
        out.append(
            MentorMatchOut(
                id=m.mentor.id,
                user_id=m.mentor.user_id,
                match_score=m.score,
                match_breakdown=m.breakdown,
                rating=round(rating, 1) if rating is not None else None,
                rating_count=len(m.mentor.review_ratings),
                active_matches=m.active_sessions,
                max_capacity=cap,
                availability=m.mentor.availability or "Flexible",
            )
        )
    return out
