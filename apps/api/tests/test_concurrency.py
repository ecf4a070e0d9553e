import anyio
import pytest

from kinnect_core.concurrency import bounded_gather
from kinnect_core.errors import StoreError


@pytest.mark.anyio
async def test_in_flight_calls_never_exceed_limit():
    in_flight = 0
    peak = 0

    async def _work(n: int) -> int:
        nonlocal in_flight, peak
        in_flight += 1
        peak = max(peak, in_flight)
        # later items finish first
        await anyio.sleep(0.001 * (10 - n))
        in_flight -= 1
        return n * n

    results = await bounded_gather(_work, list(range(10)), limit=3)

    assert results == [n * n for n in range(10)]
    assert peak == 3


@pytest.mark.anyio
async def test_limit_below_one_runs_serially():
    in_flight = 0
    peak = 0

    async def _work(n: int) -> int:
        nonlocal in_flight, peak
        in_flight += 1
        peak = max(peak, in_flight)
        await anyio.sleep(0)
        in_flight -= 1
        return n

    assert await bounded_gather(_work, [3, 1, 2], limit=0) == [3, 1, 2]
    assert peak == 1


@pytest.mark.anyio
async def test_empty_input():
    async def _work(n: int) -> int:
        raise AssertionError("not called")

    assert await bounded_gather(_work, [], limit=4) == []


@pytest.mark.anyio
async def test_first_failure_is_raised_unwrapped():
    async def _work(n: int) -> int:
        if n == 2:
            raise StoreError("statement timeout", code="store_timeout")
        await anyio.sleep(1)
        return n

    with pytest.raises(StoreError) as excinfo:
        await bounded_gather(_work, [1, 2, 3], limit=3)

    assert excinfo.value.code == "store_timeout"
    assert not isinstance(excinfo.value, BaseExceptionGroup)
