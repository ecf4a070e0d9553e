from __future__ import annotations

import hashlib
import hmac
import logging
import random
from typing import Any, Callable, Iterable, Literal

import httpx
from fastapi.encoders import jsonable_encoder

from kinnect_cache.lru import LRUCache
from kinnect_ranking.types import ScoredRecommendation

log = logging.getLogger(__name__)

Endpoint = Literal[
    "recommendations/connection",
    "recommendations/mentor",
    "recommendations/group",
    "recommendations/content",
    "recommendations/course",
    "recommendations/courses/similar",
    "mentors/match",
]


# ---------- Core logger ----------
class RecLogger:
    """
    Best-effort request telemetry over Supabase REST.

    - rec_queries: one row per request
    - rec_results: one row per returned item, in rank order

    Requests are sampled once per query id so a query's result rows are never
    written without its query row. Write failures are logged, never raised.
    """

    def __init__(
        self,
        supabase_url: str,
        api_key: str,
        client: httpx.AsyncClient | None = None,
        *,
        sample: float = 1.0,
        timeout_s: float = 5.0,
        rng: Callable[[], float] = random.random,
        hash_secret: str | None = None,
    ):
        self.supabase_url = (supabase_url or "").rstrip("/")
        self.api_key = api_key
        self.client = client
        self.sample = float(max(0.0, min(1.0, sample)))
        self.timeout_s = timeout_s
        self._rng = rng
        self._sampled: LRUCache[str, bool] = LRUCache(max_size=10_000, name="rec_sampling")
        self.hash_secret = hash_secret or None
        if self._enabled() and not self.hash_secret:
            log.warning("rec_logger: no hash secret configured, user ids will not be logged")

    def _enabled(self) -> bool:
        return bool(self.supabase_url and self.api_key and self.sample > 0)

    def _keep(self, query_id: str) -> bool:
        if not self._enabled():
            return False
        keep = self._sampled.get(query_id)
        if keep is None:
            keep = self.sample >= 1.0 or self._rng() < self.sample
            self._sampled.put(query_id, keep)
        return keep

    def _headers(self) -> dict[str, str]:
        return {
            "apikey": self.api_key,
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
            "Prefer": "resolution=merge-duplicates",
        }

    async def _post(self, path: str, payload: list[dict[str, Any]]) -> None:
        if not payload:
            return
        try:
            if self.client is not None:
                r = await self._send(self.client, path, payload)
            else:
                async with httpx.AsyncClient() as client:
                    r = await self._send(client, path, payload)
            if r.status_code not in (200, 201, 204):
                log.warning(
                    "rec_logger POST %s failed %s: %s", path, r.status_code, r.text[:300]
                )
        except httpx.HTTPError as e:
            log.warning("rec_logger POST %s error: %s", path, e)

    async def _send(
        self, client: httpx.AsyncClient, path: str, payload: list[dict[str, Any]]
    ) -> httpx.Response:
        return await client.post(
            f"{self.supabase_url}/rest/v1/{path}",
            headers=self._headers(),
            json=payload,
            timeout=self.timeout_s,
        )

    @staticmethod
    def to_jsonable(x):
        return jsonable_encoder(x, exclude_none=True)

    def hash_user_id(self, user_id: str | None) -> str | None:
        """Keyed hash of a user id; None when there is no secret to key it with."""
        if not user_id or not self.hash_secret:
            return None
        return self.hmac_hash(user_id, self.hash_secret)

    @staticmethod
    def hmac_hash(value: str, secret: str) -> str:
        return hmac.new(
            secret.encode("utf-8"), value.encode("utf-8"), hashlib.sha256
        ).hexdigest()

    # ---------- Public APIs ----------
    async def log_query(
        self,
        *,
        endpoint: Endpoint,
        query_id: str,
        user_id: str | None,
        options: dict[str, Any] | None = None,
        status: str = "ok",
        result_count: int = 0,
        duration_ms: int | None = None,
    ) -> None:
        """
        Insert into rec_queries (one row).
        """
        if not self._keep(query_id):
            return
        row = {
            "endpoint": endpoint,
            "query_id": query_id,
            "user_id": user_id,
            "status": status,
            "result_count": int(result_count),
            "duration_ms": duration_ms,
            "request_meta": self.to_jsonable(options or {}),
        }
        await self._post("rec_queries", [row])

    async def log_results(
        self,
        *,
        endpoint: Endpoint,
        query_id: str,
        results: Iterable[ScoredRecommendation[Any]],
        item_id: Callable[[Any], str],
    ) -> None:
        """
        Insert N rows into rec_results, ranked from 1.
        """
        if not self._keep(query_id):
            return
        rows = []
        for rank, rec in enumerate(results, start=1):
            parts = (
                {name: fc.contribution for name, fc in rec.breakdown.features.items()}
                if rec.breakdown
                else None
            )
            rows.append(
                {
                    "endpoint": endpoint,
                    "query_id": query_id,
                    "item_id": item_id(rec.item),
                    "rank": rank,
                    "score_final": rec.score,
                    "confidence": rec.confidence,
                    "reasons": list(rec.reasons),
                    "score_parts": parts,
                }
            )
        await self._post("rec_results", rows)

