from __future__ import annotations

from typing import Awaitable, Callable, Sequence, TypeVar

import anyio

T = TypeVar("T")
R = TypeVar("R")


async def bounded_gather(
    fn: Callable[[T], Awaitable[R]],
    items: Sequence[T],
    *,
    limit: int,
) -> list[R]:
    """
    Run `fn` over `items` with at most `limit` calls in flight.

    Results come back in input order. The first failure cancels the remaining
    calls and is re-raised as is, so callers see a plain StoreError rather
    than the task group's ExceptionGroup.
    """
    if not items:
        return []
    limiter = anyio.CapacityLimiter(max(1, int(limit)))
    results: list[R | None] = [None] * len(items)

    async def _run(idx: int, item: T) -> None:
        async with limiter:
            results[idx] = await fn(item)

    try:
        async with anyio.create_task_group() as tg:
            for idx, item in enumerate(items):
                tg.start_soon(_run, idx, item)
    except ExceptionGroup as eg:
        raise eg.exceptions[0] from eg

    return results  # type: ignore[return-value]
