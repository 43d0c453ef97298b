import asyncio
from unittest.mock import AsyncMock, Mock

import pytest

from hive_detection.pipeline.rate_limiter import RateLimiter

pytestmark = pytest.mark.unit


@pytest.mark.asyncio
async def test_first_acquire_does_not_wait():
    sleep = AsyncMock()
    limiter = RateLimiter(1.0, clock=Mock(return_value=100.0), sleep=sleep)

    await limiter.acquire()

    sleep.assert_not_called()
    assert limiter.last_dispatch == 100.0


@pytest.mark.asyncio
async def test_second_acquire_waits_for_remaining_interval():
    # First dispatch at t=10.0, second arrives at t=10.25 -> wait 0.75s
    clock = Mock(side_effect=[10.0, 10.25, 11.0])
    sleep = AsyncMock()
    limiter = RateLimiter(1.0, clock=clock, sleep=sleep)

    await limiter.acquire()
    await limiter.acquire()

    sleep.assert_awaited_once()
    assert sleep.await_args.args[0] == pytest.approx(0.75)
    assert limiter.last_dispatch == 11.0


@pytest.mark.asyncio
async def test_no_wait_once_interval_has_elapsed():
    clock = Mock(side_effect=[0.0, 5.0, 5.0])
    sleep = AsyncMock()
    limiter = RateLimiter(1.0, clock=clock, sleep=sleep)

    await limiter.acquire()
    await limiter.acquire()

    sleep.assert_not_called()


@pytest.mark.asyncio
async def test_zero_interval_never_sleeps():
    sleep = AsyncMock()
    limiter = RateLimiter(0.0, sleep=sleep)
    for _ in range(3):
        await limiter.acquire()
    sleep.assert_not_called()


def test_negative_interval_rejected():
    with pytest.raises(ValueError, match="min_interval"):
        RateLimiter(-1.0)


@pytest.mark.asyncio
async def test_concurrent_acquires_are_spaced_by_interval():
    interval = 0.05
    limiter = RateLimiter(interval)
    loop = asyncio.get_running_loop()
    stamps: list[float] = []

    async def _grab() -> None:
        await limiter.acquire()
        stamps.append(loop.time())

    await asyncio.gather(*(_grab() for _ in range(3)))

    stamps.sort()
    gaps = [b - a for a, b in zip(stamps, stamps[1:], strict=False)]
    assert all(gap >= interval * 0.9 for gap in gaps)


@pytest.mark.asyncio
async def test_instances_do_not_share_state():
    sleep_a, sleep_b = AsyncMock(), AsyncMock()
    a = RateLimiter(10.0, sleep=sleep_a)
    b = RateLimiter(10.0, sleep=sleep_b)

    await a.acquire()
    await b.acquire()

    sleep_a.assert_not_called()
    sleep_b.assert_not_called()
