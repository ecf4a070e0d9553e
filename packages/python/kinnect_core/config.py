from pydantic_settings import BaseSettings, SettingsConfigDict


# Per-domain defaults
DEFAULT_LIMITS = {"connection": 20, "mentor": 20, "group": 20, "content": 50, "course": 10}
DEFAULT_MIN_SCORES = {
    "connection": 0.3,
    "mentor": 0.3,
    "group": 0.2,
    "content": 0.1,
    "course": 0.2,
}

AU_STATES = ("nsw", "vic", "qld", "wa", "sa", "tas", "nt", "act")


class EngineSettings(BaseSettings):
    # caches
    profile_ttl_sec: float = 300.0
    profile_cache_max: int = 10_000
    similarity_cache_max_pairs: int = 50_000
    # fan-out / deadline
    max_concurrency: int = 8
    request_timeout_sec: float = 5.0
    # similarity
    similar_user_floor: float = 0.1
    similar_pool_per_source: int = 200
    connection_similar_users: int = 100
    # candidate caps
    connection_candidate_cap: int = 200
    mentor_candidate_cap: int = 100
    mentor_max_active_sessions: int = 5
    group_topic_cap: int = 50
    group_similar_users: int = 30
    content_candidate_cap: int = 200
    content_window_days: int = 7
    content_similar_users: int = 20
    course_candidate_cap: int = 100

    model_config = SettingsConfigDict(env_prefix="KINNECT_", extra="ignore")
