import asyncio
import pytest

from dircontacts.infrastructure.resilience.rate_limiter import BatchRateLimiter

def test_rejects_zero_concurrency():
    with pytest.raises(ValueError):
        BatchRateLimiter(max_concurrent=0)

@pytest.mark.asyncio
async def test_slot_caps_concurrency():
    limiter = BatchRateLimiter(max_concurrent=3)
    in_flight = 0
    peak = 0

    async def job():
        nonlocal in_flight, peak
        async with limiter.slot():
            in_flight += 1
            peak = max(peak, in_flight)
            await asyncio.sleep(0.01)
            in_flight -= 1

    await asyncio.gather(*(job() for _ in range(12)))
    assert peak == 3

@pytest.mark.asyncio
async def test_pacing_disabled_by_default():
    limiter = BatchRateLimiter()
    for _ in range(100):
        await limiter.wait_for_permission()
    assert not limiter.timestamps

@pytest.mark.asyncio
async def test_pacing_waits_when_window_is_full():
    limiter = BatchRateLimiter(max_requests=2, time_window=0.1)
    loop = asyncio.get_running_loop()
    start = loop.time()
    for _ in range(3):
        await limiter.wait_for_permission()
    assert loop.time() - start >= 0.09

def test_limiter_can_be_reused_across_event_loops():
    limiter = BatchRateLimiter(max_concurrent=1)

    async def use():
        async with limiter.slot():
            await asyncio.sleep(0)

    asyncio.run(use())
    asyncio.run(use())
