# SPDX-FileCopyrightText: 2025 OmniNode.ai Inc.
# SPDX-License-Identifier: MIT

"""Token-bucket rate limiter shared by every provider call in the process."""

from __future__ import annotations

import asyncio
import time
from collections.abc import Awaitable, Callable


class AsyncRateLimiter:
    """Token bucket admitting ``rate_per_second`` calls with bursts up to ``burst``.

    ``wait`` suspends the calling task until a token is available. Waiting is
    a plain ``asyncio.sleep``, so cancelling the task interrupts the wait
    immediately and consumes no token.

    Args:
        rate_per_second: Sustained token refill rate.
        burst: Bucket capacity; the bucket starts full.
        clock: Monotonic clock, injectable for tests.
        sleep: Awaitable sleep, injectable for tests.
    """

    def __init__(
        self,
        rate_per_second: float,
        burst: int = 1,
        *,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        if rate_per_second <= 0:
            raise ValueError(f"rate_per_second must be positive, got {rate_per_second}")
        if burst < 1:
            raise ValueError(f"burst must be at least 1, got {burst}")
        self.rate_per_second = rate_per_second
        self.burst = burst
        self._clock = clock
        self._sleep = sleep
        self._tokens = float(burst)
        self._updated_at = clock()

    @property
    def available_tokens(self) -> float:
        self._refill()
        return self._tokens

    def try_acquire(self) -> bool:
        """Take a token if one is available, without waiting."""
        self._refill()
        if self._tokens >= 1.0:
            self._tokens -= 1.0
            return True
        return False

    async def wait(self) -> None:
        """Suspend until a token is available, then take it."""
        while not self.try_acquire():
            deficit = 1.0 - self._tokens
            await self._sleep(deficit / self.rate_per_second)

    def _refill(self) -> None:
        now = self._clock()
        elapsed = max(0.0, now - self._updated_at)
        self._updated_at = now
        self._tokens = min(float(self.burst), self._tokens + elapsed * self.rate_per_second)


__all__ = ["AsyncRateLimiter"]
