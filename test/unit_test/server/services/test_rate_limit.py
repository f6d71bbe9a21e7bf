"""Unit tests for the sliding-window generation rate limiter."""

import pytest

from character_figure.core.errors import RateLimitExceededError
from character_figure.core.models.domain import UserTier
from character_figure.server.services.rate_limit import (
    GENERATION_LIMITS_PER_HOUR,
    PRUNE_EVERY,
    SlidingWindowRateLimiter,
    check_generation_rate_limit,
)


class FakeClock:
    def __init__(self, now: float = 1000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now


class TestSlidingWindowRateLimiter:
    async def test_allows_up_to_the_limit(self):
        limiter = SlidingWindowRateLimiter(window_seconds=60, clock=FakeClock())

        results = [await limiter.hit("k", 3) for _ in range(4)]

        assert [r.allowed for r in results] == [True, True, True, False]
        assert [r.remaining for r in results] == [2, 1, 0, 0]

    async def test_window_slides(self):
        clock = FakeClock()
        limiter = SlidingWindowRateLimiter(window_seconds=60, clock=clock)
        await limiter.hit("k", 2)
        clock.now += 30
        await limiter.hit("k", 2)

        blocked = await limiter.hit("k", 2)
        clock.now += 30
        freed = await limiter.hit("k", 2)

        assert blocked.allowed is False
        assert blocked.reset_in == 31
        assert freed.allowed is True

    async def test_keys_are_independent_and_reset_clears(self):
        limiter = SlidingWindowRateLimiter(window_seconds=60, clock=FakeClock())
        await limiter.hit("a", 1)

        assert (await limiter.hit("b", 1)).allowed is True
        assert (await limiter.hit("a", 1)).allowed is False
        limiter.reset()
        assert (await limiter.hit("a", 1)).allowed is True

    async def test_idle_keys_are_dropped(self):
        clock = FakeClock()
        limiter = SlidingWindowRateLimiter(window_seconds=60, clock=clock)
        await limiter.hit("a", 2)
        await limiter.hit("b", 2)
        clock.now += 61

        await limiter.hit("a", 2)
        assert limiter.prune() == 1

        assert set(limiter._hits) == {"a"}

    async def test_sweep_runs_during_hits(self):
        clock = FakeClock()
        limiter = SlidingWindowRateLimiter(window_seconds=60, clock=clock)
        for i in range(PRUNE_EVERY - 1):
            await limiter.hit(f"user-{i}", 1)
        clock.now += 61

        await limiter.hit("late", 1)

        assert set(limiter._hits) == {"late"}


class TestGenerationRateLimit:
    def test_tier_limits(self):
        assert GENERATION_LIMITS_PER_HOUR == {UserTier.free: 5, UserTier.pro: 20, UserTier.premium: 50}

    async def test_free_tier_is_blocked_after_five(self):
        for _ in range(5):
            await check_generation_rate_limit("u-1", UserTier.free)

        with pytest.raises(RateLimitExceededError) as exc_info:
            await check_generation_rate_limit("u-1", UserTier.free)

        assert exc_info.value.status_code == 429
        assert exc_info.value.details["retry_after"] > 0
        # Another user is unaffected
        assert (await check_generation_rate_limit("u-2", UserTier.free)).allowed is True
