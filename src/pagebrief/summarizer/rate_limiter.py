"""
Rolling-window request limiter for provider calls.

Enforces two bounds:
- at most ``max_requests`` dispatches in any rolling window (one hour by default)
- at least ``min_interval`` seconds between consecutive dispatches

A request that would exceed the window waits when the wait is short
enough, and is rejected with ``RateLimitedError`` otherwise. Requests
are never silently dropped.
"""

from __future__ import annotations

import asyncio
import time
from collections import deque
from typing import Any, Awaitable, Callable, Deque, Dict, Optional

import structlog

from ..config.config import RateLimitConfig
from ..errors import RateLimitedError

logger = structlog.get_logger(__name__)

Clock = Callable[[], float]
Sleep = Callable[[float], Awaitable[Any]]


class RequestRateLimiter:
    """Shared limiter for every request sent to the summarization provider."""

    def __init__(
        self,
        max_requests: int = 100,
        min_interval: float = 1.0,
        *,
        window_seconds: float = 3600.0,
        max_wait: float = 0.0,
        clock: Clock = time.monotonic,
        sleep: Optional[Sleep] = None,
    ) -> None:
        if max_requests < 1:
            raise ValueError("max_requests must be at least 1")
        self.max_requests = max_requests
        self.min_interval = min_interval
        self.window_seconds = window_seconds
        self.max_wait = max_wait
        self.clock = clock
        self.sleep: Sleep = sleep or asyncio.sleep

        self._dispatches: Deque[float] = deque()
        self._lock = asyncio.Lock()
        self._total_wait = 0.0
        self._rejections = 0

    @classmethod
    def from_config(cls, config: RateLimitConfig, **kwargs: Any) -> RequestRateLimiter:
        return cls(
            max_requests=config.max_requests_per_hour,
            min_interval=config.min_interval_seconds,
            max_wait=config.max_throttle_wait_seconds,
            **kwargs,
        )

    def _prune(self, now: float) -> None:
        while self._dispatches and now - self._dispatches[0] >= self.window_seconds:
            self._dispatches.popleft()

    async def acquire(self) -> float:
        """
        Wait for permission to dispatch one request.

        Returns:
            Seconds spent waiting

        Raises:
            RateLimitedError: the window is full and freeing a slot would
                take longer than ``max_wait``
        """
        async with self._lock:
            now = self.clock()
            self._prune(now)

            delay = 0.0
            if len(self._dispatches) >= self.max_requests:
                delay = self._dispatches[0] + self.window_seconds - now
                if delay > self.max_wait:
                    self._rejections += 1
                    logger.warning(
                        "Hourly request limit reached",
                        max_requests=self.max_requests,
                        retry_after=round(delay, 1),
                    )
                    raise RateLimitedError(delay)

            if self._dispatches:
                delay = max(delay, self._dispatches[-1] + self.min_interval - now)

            if delay > 0:
                logger.debug("Throttling provider request", delay=round(delay, 3))
                await self.sleep(delay)
                self._total_wait += delay
                now = self.clock()
                self._prune(now)

            self._dispatches.append(now)
            return max(delay, 0.0)

    def remaining(self) -> int:
        """Dispatches still allowed in the current window."""
        self._prune(self.clock())
        return self.max_requests - len(self._dispatches)

    def get_stats(self) -> Dict[str, Any]:
        return {
            "max_requests": self.max_requests,
            "window_seconds": self.window_seconds,
            "remaining": self.remaining(),
            "total_wait": self._total_wait,
            "rejections": self._rejections,
        }
