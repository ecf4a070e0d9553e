"""
Size-bounded LRU cache with optional TTL.

Used for the engine's derived artifacts (interaction profiles, pairwise
similarities). Every entry can be rebuilt from the store, so eviction only
costs a recompute.

Not thread-safe: callers touch it from the event loop thread only.
"""

from __future__ import annotations

import time
from collections import OrderedDict
from typing import Any, Callable, Dict, Generic, Hashable, Optional, Tuple, TypeVar

K = TypeVar("K", bound=Hashable)
V = TypeVar("V")


class LRUCache(Generic[K, V]):
    def __init__(
        self,
        max_size: int = 10_000,
        ttl_seconds: Optional[float] = None,
        name: str = "cache",
        clock: Callable[[], float] = time.monotonic,
    ):
        if max_size <= 0:
            raise ValueError("max_size must be positive")
        self.max_size = max_size
        self.ttl_seconds = ttl_seconds
        self.name = name
        self._clock = clock
        self._cache: OrderedDict[K, Tuple[V, float]] = OrderedDict()

        # Statistics
        self.hits = 0
        self.misses = 0
        self.evictions = 0

    def _expired(self, stored_at: float) -> bool:
        return (
            self.ttl_seconds is not None
            and self._clock() - stored_at > self.ttl_seconds
        )

    def get(self, key: K) -> Optional[V]:
        entry = self._cache.get(key)
        if entry is None:
            self.misses += 1
            return None

        value, stored_at = entry
        if self._expired(stored_at):
            del self._cache[key]
            self.misses += 1
            return None

        self._cache.move_to_end(key)
        self.hits += 1
        return value

    def put(self, key: K, value: V) -> None:
        self._cache[key] = (value, self._clock())
        self._cache.move_to_end(key)
        while len(self._cache) > self.max_size:
            self._cache.popitem(last=False)
            self.evictions += 1

    def clear(self) -> None:
        self._cache.clear()

    def __contains__(self, key: object) -> bool:
        entry = self._cache.get(key)  # type: ignore[arg-type]
        return entry is not None and not self._expired(entry[1])

    def __len__(self) -> int:
        return len(self._cache)

    def stats(self) -> Dict[str, Any]:
        total = self.hits + self.misses
        return {
            "name": self.name,
            "size": len(self._cache),
            "max_size": self.max_size,
            "ttl_seconds": self.ttl_seconds,
            "hits": self.hits,
            "misses": self.misses,
            "evictions": self.evictions,
            "hit_rate": self.hits / total if total > 0 else 0.0,
        }
