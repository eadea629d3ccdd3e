"""
Unit tests for the rolling-window request limiter.
"""

from __future__ import annotations

from typing import List

import pytest

from pagebrief.config.config import RateLimitConfig
from pagebrief.errors import RateLimitedError
from pagebrief.summarizer import RequestRateLimiter


class FakeTime:
    """Clock and sleep pair; sleeping advances the clock."""

    def __init__(self) -> None:
        self.now = 500.0
        self.sleeps: List[float] = []

    def clock(self) -> float:
        return self.now

    async def sleep(self, delay: float) -> None:
        self.sleeps.append(delay)
        self.now += delay


@pytest.fixture
def fake_time() -> FakeTime:
    return FakeTime()


def make_limiter(fake_time: FakeTime, **kwargs) -> RequestRateLimiter:
    return RequestRateLimiter(clock=fake_time.clock, sleep=fake_time.sleep, **kwargs)


@pytest.mark.unit
class TestRequestRateLimiter:
    @pytest.mark.asyncio
    async def test_first_request_is_immediate(self, fake_time):
        limiter = make_limiter(fake_time, max_requests=5, min_interval=1.0)

        assert await limiter.acquire() == 0.0
        assert fake_time.sleeps == []

    @pytest.mark.asyncio
    async def test_min_interval_between_requests(self, fake_time):
        limiter = make_limiter(fake_time, max_requests=5, min_interval=1.0)

        await limiter.acquire()
        fake_time.now += 0.25
        waited = await limiter.acquire()

        assert waited == pytest.approx(0.75)
        assert fake_time.sleeps == [pytest.approx(0.75)]

    @pytest.mark.asyncio
    async def test_no_wait_once_interval_elapsed(self, fake_time):
        limiter = make_limiter(fake_time, max_requests=5, min_interval=1.0)

        await limiter.acquire()
        fake_time.now += 5
        await limiter.acquire()

        assert fake_time.sleeps == []

    @pytest.mark.asyncio
    async def test_full_window_rejects(self, fake_time):
        limiter = make_limiter(fake_time, max_requests=2, min_interval=0.0)
        await limiter.acquire()
        await limiter.acquire()
        fake_time.now += 600

        with pytest.raises(RateLimitedError) as exc_info:
            await limiter.acquire()

        assert exc_info.value.retry_after == pytest.approx(3000)
        assert limiter.remaining() == 0
        assert limiter.get_stats()["rejections"] == 1

    @pytest.mark.asyncio
    async def test_window_rolls_over(self, fake_time):
        limiter = make_limiter(fake_time, max_requests=2, min_interval=0.0)
        await limiter.acquire()
        fake_time.now += 10
        await limiter.acquire()

        fake_time.now += 3590
        assert limiter.remaining() == 1
        await limiter.acquire()
        assert limiter.remaining() == 0

    @pytest.mark.asyncio
    async def test_waits_when_allowed(self, fake_time):
        limiter = make_limiter(fake_time, max_requests=1, min_interval=0.0, max_wait=60.0, window_seconds=30.0)
        await limiter.acquire()
        fake_time.now += 10

        waited = await limiter.acquire()

        assert waited == pytest.approx(20.0)
        assert limiter.get_stats()["total_wait"] == pytest.approx(20.0)

    def test_from_config(self):
        limiter = RequestRateLimiter.from_config(
            RateLimitConfig(max_requests_per_hour=7, min_interval_seconds=2.5, max_throttle_wait_seconds=9)
        )

        assert limiter.max_requests == 7
        assert limiter.min_interval == 2.5
        assert limiter.max_wait == 9
        assert limiter.remaining() == 7

    def test_invalid_bound(self):
        with pytest.raises(ValueError):
            RequestRateLimiter(max_requests=0)
