"""
In-process sliding-window rate limiter for generations.

Counts live in process memory, so limits apply per worker.
"""

from __future__ import annotations

import asyncio
import time
from collections import deque
from dataclasses import dataclass
from typing import Callable, Deque, Dict

from character_figure.core.errors import RateLimitExceededError
from character_figure.core.models.domain import UserTier

WINDOW_SECONDS = 3600
PRUNE_EVERY = 256

GENERATION_LIMITS_PER_HOUR: Dict[UserTier, int] = {
    UserTier.free: 5,
    UserTier.pro: 20,
    UserTier.premium: 50,
}


@dataclass
class RateLimitResult:
    allowed: bool
    remaining: int
    limit: int
    reset_in: int


class SlidingWindowRateLimiter:
    def __init__(self, window_seconds: int = WINDOW_SECONDS, clock: Callable[[], float] = time.monotonic) -> None:
        self.window_seconds = window_seconds
        self._clock = clock
        self._hits: Dict[str, Deque[float]] = {}
        self._lock = asyncio.Lock()
        self._calls = 0

    async def hit(self, key: str, limit: int) -> RateLimitResult:
        """Record one request for ``key`` if it is within ``limit``."""
        async with self._lock:
            self._calls += 1
            if self._calls % PRUNE_EVERY == 0:
                self.prune()
            now = self._clock()
            hits = self._hits.get(key) or deque()
            while hits and hits[0] <= now - self.window_seconds:
                hits.popleft()
            if not hits:
                self._hits.pop(key, None)
            if len(hits) >= limit:
                reset_in = int(hits[0] + self.window_seconds - now) + 1
                return RateLimitResult(False, 0, limit, reset_in)
            hits.append(now)
            self._hits[key] = hits
            return RateLimitResult(True, limit - len(hits), limit, self.window_seconds)

    def prune(self) -> int:
        """Drop keys whose hits have all left the window; returns how many were dropped."""
        cutoff = self._clock() - self.window_seconds
        stale = [key for key, hits in self._hits.items() if not hits or hits[-1] <= cutoff]
        for key in stale:
            del self._hits[key]
        return len(stale)

    def reset(self) -> None:
        self._hits.clear()


generation_limiter = SlidingWindowRateLimiter()


async def check_generation_rate_limit(user_uuid: str, tier: UserTier) -> RateLimitResult:
    """Count a generation for ``user_uuid``.

    Raises:
        RateLimitExceededError: When the tier's hourly limit is reached
    """
    limit = GENERATION_LIMITS_PER_HOUR[tier]
    result = await generation_limiter.hit(f"generation:{user_uuid}", limit)
    if not result.allowed:
        raise RateLimitExceededError(
            "Rate limit exceeded. Please wait before generating more characters.",
            retry_after=result.reset_in,
        )
    return result
