from dataclasses import dataclass
from typing import Any, TYPE_CHECKING, cast

from fastapi import HTTPException, Request, status

if TYPE_CHECKING:
    from kinnect_logging.rec_logger import RecLogger
    from kinnect_recommendation.engine import RecommendationEngine
else:
    RecLogger = Any  # type: ignore
    RecommendationEngine = Any  # type: ignore


def _get_state_attr(request: Request, name: str, error_detail: str) -> Any:
    value = getattr(request.app.state, name, None)
    if value is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=error_detail,
        )
    return value


def get_settings(request: Request) -> Any:
    settings = getattr(request.app.state, "settings", None)
    if settings is None:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Settings not initialized",
        )
    return settings


def get_engine(request: Request) -> "RecommendationEngine":
    return cast(
        "RecommendationEngine",
        _get_state_attr(request, "engine", "Recommendation engine not initialized"),
    )


def get_logger(request: Request) -> "RecLogger":
    return cast(
        "RecLogger",
        _get_state_attr(request, "rec_logger", "Telemetry logger not initialized"),
    )


@dataclass(frozen=True)
class SupabaseCreds:
    url: str
    api_key: str


def get_supabase_creds(request: Request) -> SupabaseCreds:
    return SupabaseCreds(
        url=getattr(request.app.state, "supabase_url", ""),
        api_key=getattr(request.app.state, "supabase_api_key", ""),
    )
