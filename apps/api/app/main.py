import logging
import os
import time
from contextlib import asynccontextmanager

from dotenv import find_dotenv, load_dotenv
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.openapi.utils import get_openapi
from fastapi.responses import JSONResponse
from pydantic_settings import BaseSettings, SettingsConfigDict

from kinnect_core.config import EngineSettings
from kinnect_core.errors import DomainError
from kinnect_logging.rec_logger import RecLogger
from .routers import all_routers

log = logging.getLogger(__name__)


class Settings(BaseSettings):
    app_name: str = "Kinnect Recommendations API"
    # credentials
    supabase_url: str | None = None
    supabase_api_key: str | None = None
    supabase_service_role_key: str | None = None
    # telemetry
    rec_log_sample: float = 1.0
    rec_hash_secret: str | None = None
    # env config
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")


def _should_init_engine() -> bool:
    flag = os.getenv("KINNECT_SKIP_ENGINE_INIT", "")
    return flag.strip().lower() not in {"1", "true", "yes"}


def _init_engine(app: FastAPI) -> None:
    from supabase import create_client

    from kinnect_recommendation.engine import RecommendationEngine
    from kinnect_store.repos import supabase_repos

    startup_t0 = time.perf_counter()
    settings: Settings = app.state.settings

    required = {
        "SUPABASE_URL": settings.supabase_url,
        "SUPABASE_SERVICE_ROLE_KEY": settings.supabase_service_role_key,
    }
    missing = [name for name, value in required.items() if not (value and value.strip())]
    if missing:
        raise RuntimeError("Missing Supabase credentials: " + ", ".join(sorted(missing)))

    # engine reads across users, so it runs with the service role, not the caller's JWT
    client = create_client(settings.supabase_url, settings.supabase_service_role_key)
    app.state.engine = RecommendationEngine(
        supabase_repos(client), settings=EngineSettings()
    )
    log.info("recommendation engine ready in %.2fs", time.perf_counter() - startup_t0)


@asynccontextmanager
async def lifespan(app: FastAPI):
    load_dotenv(find_dotenv(), override=False)

    settings = Settings()
    app.state.settings = settings
    app.state.supabase_url = settings.supabase_url or ""
    app.state.supabase_api_key = settings.supabase_api_key or ""
    app.state.rec_logger = RecLogger(
        settings.supabase_url or "",
        settings.supabase_service_role_key or "",
        sample=settings.rec_log_sample,
        hash_secret=settings.rec_hash_secret,
    )

    if _should_init_engine():
        _init_engine(app)
    else:
        log.warning("Recommendation engine initialization skipped by KINNECT_SKIP_ENGINE_INIT")

    try:
        yield
    finally:
        app.state.engine = None


app = FastAPI(title="Kinnect Recommendations API", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(DomainError)
async def domain_error_handler(_request: Request, exc: DomainError):
    return JSONResponse(
        status_code=exc.status, content={"detail": str(exc), "code": exc.code}
    )


def _custom_openapi():
    if app.openapi_schema:
        return app.openapi_schema
    schema = get_openapi(
        title=app.title,
        version="0.1.0",
        description="Kinnect Recommendations API",
        routes=app.routes,
    )
    components = schema.setdefault("components", {})
    components.setdefault("securitySchemes", {})["BearerAuth"] = {
        "type": "http",
        "scheme": "bearer",
        "bearerFormat": "JWT",
    }
    for path_item in schema.get("paths", {}).values():
        for operation in path_item.values():
            operation.setdefault("security", []).append({"BearerAuth": []})
    app.openapi_schema = schema
    return app.openapi_schema


app.openapi = _custom_openapi


@app.get("/health")
def health():
    s = app.state.settings
    return {"status": "ok", "service": s.app_name}


@app.get("/")
def read_root():
    return {"status": "ok"}


for r in all_routers:
    app.include_router(r)
