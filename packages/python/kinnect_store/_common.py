from __future__ import annotations

from datetime import datetime, timezone
from functools import partial
from typing import Any, Callable, Iterable, Iterator, Sequence, TypeVar

import httpx
from anyio import to_thread
from postgrest.exceptions import APIError as PostgrestAPIError

from kinnect_core.errors import StoreError

T = TypeVar("T")

MAX_IN = 200  # keep matches PostgREST URL/param safety
MAX_ROWS = 5000  # safety cap for unbounded fan-in reads


def ensure_ts(value) -> datetime | None:
    """Normalize timestamps coming from Postgres/Supabase into tz-aware datetimes."""
    if value is None:
        return None
    if isinstance(value, datetime):
        return value if value.tzinfo else value.replace(tzinfo=timezone.utc)
    if isinstance(value, str):
        raw = value.strip()
        if not raw:
            return None
        normalized = raw.replace("Z", "+00:00") if raw.endswith("Z") else raw
        try:
            parsed = datetime.fromisoformat(normalized)
        except ValueError:
            return None
        return parsed if parsed.tzinfo else parsed.replace(tzinfo=timezone.utc)
    return None


def rows_of(res) -> list[dict[str, Any]]:
    return list(getattr(res, "data", None) or [])


def count_of(res) -> int:
    """Exact count from a `select(..., count="exact", head=True)` response."""
    return int(getattr(res, "count", None) or 0)


def chunks(items: Sequence[T], size: int = MAX_IN) -> Iterator[list[T]]:
    for i in range(0, len(items), size):
        yield list(items[i : i + size])


def distinct(values: Iterable[T]) -> list[T]:
    # first-seen order
    return list(dict.fromkeys(values))


def _map_pgrest(e: PostgrestAPIError) -> StoreError:
    code = getattr(e, "code", None) or ""
    # 42501 insufficient_privilege (RLS), 57014 query_canceled (statement timeout)
    if code == "42501":
        return StoreError("permission denied", code="store_forbidden")
    if code == "57014":
        return StoreError("statement timeout", code="store_timeout")
    return StoreError(f"postgrest error {code}".strip())


class SupabaseRepo:
    """Base for read-only repos over a (sync) supabase-py client."""

    def __init__(self, client):
        self.client = client

    async def _run(self, fn: Callable[..., T], *args) -> T:
        return await to_thread.run_sync(
            partial(self._guarded, fn), *args, abandon_on_cancel=True
        )

    @staticmethod
    def _guarded(fn: Callable[..., T], *args) -> T:
        try:
            return fn(*args)
        except PostgrestAPIError as e:
            raise _map_pgrest(e) from e
        except httpx.HTTPError as e:
            raise StoreError(f"store transport error: {e}") from e


def compact(row: dict[str, Any]) -> dict[str, Any]:
    """Drop NULL columns so record defaults apply."""
    return {k: v for k, v in row.items() if v is not None}
