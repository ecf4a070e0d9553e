from typing import Any, Callable, Dict, Iterable, List
from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient

from kinnect_cache.caches import RecommendationCaches
from kinnect_core.config import EngineSettings
from kinnect_logging.rec_logger import RecLogger
from kinnect_recommendation.engine import RecommendationEngine
from kinnect_store.repos import supabase_repos

NOW = datetime(2026, 3, 2, 12, 0, tzinfo=timezone.utc)
SUBJECT_ID = "00000000-0000-0000-0000-000000000000"
SERVICE_KEY = "test-service-role-key"


def iso(days_ago: float = 0.0) -> str:
    return (NOW - timedelta(days=days_ago)).isoformat()


def _as_dt(value: Any) -> datetime:
    if isinstance(value, datetime):
        return value
    return datetime.fromisoformat(str(value).replace("Z", "+00:00"))


class _Resp:
    def __init__(self, data, count=None):
        self.data = data
        self.count = count


class _FakeQuery:
    """
    Just enough of the postgrest-py builder: column projection, the filters the
    repos use, order/limit, exact `count`/`head` selects, and `execute()`
    returning `.data`. `client.max_rows` mimics the server-side row cap.
    """

    def __init__(self, client: "FakeSupabaseClient", table: str):
        self._client = client
        self._table = table
        self._cols: List[str] | None = None
        self._filters: List[Callable[[Dict[str, Any]], bool]] = []
        self._negate_next = False
        self._order: tuple[str, bool] | None = None
        self._limit: int | None = None
        self._count: str | None = None
        self._head = False

    def select(self, cols: str = "*", count: str | None = None, head: bool | None = None):
        cols = cols.strip()
        self._cols = None if cols == "*" else [c.strip() for c in cols.split(",")]
        self._count = count
        self._head = bool(head)
        return self

    def _add(self, pred: Callable[[Dict[str, Any]], bool]):
        if self._negate_next:
            self._negate_next = False
            self._filters.append(lambda row: not pred(row))
        else:
            self._filters.append(pred)
        return self

    @property
    def not_(self):
        self._negate_next = True
        return self

    def eq(self, col: str, value: Any):
        return self._add(lambda row: row.get(col) == value)

    def neq(self, col: str, value: Any):
        return self._add(lambda row: row.get(col) != value)

    def in_(self, col: str, values: Iterable[Any]):
        allowed = list(values)
        return self._add(lambda row: row.get(col) in allowed)

    def gte(self, col: str, value: Any):
        return self._add(
            lambda row: row.get(col) is not None and _as_dt(row[col]) >= _as_dt(value)
        )

    def lte(self, col: str, value: Any):
        return self._add(
            lambda row: row.get(col) is not None and _as_dt(row[col]) <= _as_dt(value)
        )

    def ov(self, col: str, values: Iterable[Any]):
        wanted = set(values)
        return self._add(lambda row: bool(set(row.get(col) or []) & wanted))

    def order(self, col: str, desc: bool = False):
        self._order = (col, desc)
        return self

    def limit(self, n: int):
        self._limit = n
        return self

    def execute(self):
        self._client.calls.append(self._table)
        self._client.before_execute(self._table)
        rows = [r for r in self._client.tables.get(self._table, []) if all(f(r) for f in self._filters)]
        count = len(rows) if self._count == "exact" else None
        if self._head:
            return _Resp([], count)
        if self._order:
            col, desc = self._order
            rows.sort(key=lambda r: r.get(col) or "", reverse=desc)
        if self._limit is not None:
            rows = rows[: self._limit]
        # server-side max-rows setting, applied on top of any client limit
        if self._client.max_rows is not None:
            rows = rows[: self._client.max_rows]
        if self._cols is not None:
            rows = [{c: r.get(c) for c in self._cols} for r in rows]
        else:
            rows = [dict(r) for r in rows]
        return _Resp(rows, count)


class FakeSupabaseClient:
    def __init__(self, tables: Dict[str, List[Dict[str, Any]]] | None = None):
        self.tables: Dict[str, List[Dict[str, Any]]] = tables or {}
        self.calls: List[str] = []
        self.failures: Dict[str, Exception] = {}
        self.delay_s: float = 0.0
        self.max_rows: int | None = None

    def fail_on(self, table: str, exc: Exception) -> None:
        self.failures[table] = exc

    def before_execute(self, table: str) -> None:
        if self.delay_s:
            import time

            time.sleep(self.delay_s)
        exc = self.failures.get(table)
        if exc is not None:
            raise exc

    def add(self, table: str, *rows: Dict[str, Any]) -> None:
        self.tables.setdefault(table, []).extend(rows)

    def table(self, name: str):
        return _FakeQuery(self, name)


# ---------- data builders ----------
def user_row(uid: str, **kw) -> Dict[str, Any]:
    row = {
        "id": uid,
        "name": uid,
        "status": "active",
        "industry": None,
        "location": None,
        "is_indigenous": False,
        "years_experience": None,
    }
    row.update(kw)
    return row


def add_user(client: FakeSupabaseClient, uid: str, *, skills=(), learning_goals=None, **kw):
    client.add("users", user_row(uid, **kw))
    for s in skills:
        client.add("user_skills", {"user_id": uid, "name": s})
    if learning_goals is not None:
        client.add("user_preferences", {"user_id": uid, "learning_goals": list(learning_goals)})


def like(client: FakeSupabaseClient, uid: str, post_id: str, days_ago: float = 1.0):
    client.add("post_reactions", {"user_id": uid, "post_id": post_id, "created_at": iso(days_ago)})


def comment(client: FakeSupabaseClient, uid: str, post_id: str, days_ago: float = 1.0):
    client.add("post_comments", {"author_id": uid, "post_id": post_id, "created_at": iso(days_ago)})


def connect(client: FakeSupabaseClient, a: str, b: str, status: str = "accepted"):
    client.add(
        "connections",
        {"sender_id": a, "receiver_id": b, "status": status, "updated_at": iso(3)},
    )


def join(client: FakeSupabaseClient, uid: str, group_id: str):
    client.add("group_members", {"user_id": uid, "group_id": group_id, "joined_at": iso(10)})


def post_row(pid: str, author: str, days_ago: float = 1.0, visibility: str = "public"):
    return {
        "id": pid,
        "author_id": author,
        "visibility": visibility,
        "created_at": iso(days_ago),
        "content": f"post {pid}",
    }


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
def fake_client() -> FakeSupabaseClient:
    return FakeSupabaseClient()


@pytest.fixture
def settings() -> EngineSettings:
    return EngineSettings(request_timeout_sec=5.0, max_concurrency=4)


@pytest.fixture
def engine(fake_client, settings) -> RecommendationEngine:
    return RecommendationEngine(
        supabase_repos(fake_client),
        caches=RecommendationCaches.from_settings(settings),
        settings=settings,
        clock=lambda: NOW,
    )


@pytest.fixture()
def test_client(monkeypatch, engine):
    monkeypatch.setenv("KINNECT_SKIP_ENGINE_INIT", "1")
    monkeypatch.setenv("SUPABASE_SERVICE_ROLE_KEY", SERVICE_KEY)

    from app.main import app  # type: ignore
    from app.deps.deps import get_engine, get_logger  # type: ignore
    from app.deps.supabase_client import get_current_user_id  # type: ignore

    def _fake_user_id():
        return SUBJECT_ID

    app.dependency_overrides[get_engine] = lambda: engine
    app.dependency_overrides[get_logger] = lambda: RecLogger("", "")
    app.dependency_overrides[get_current_user_id] = _fake_user_id

    try:
        with TestClient(app) as client:
            yield client
    finally:
        app.dependency_overrides.clear()
