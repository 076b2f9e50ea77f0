# SPDX-FileCopyrightText: 2025 OmniNode.ai Inc.
# SPDX-License-Identifier: MIT
"""Unit tests for AsyncRateLimiter."""

from __future__ import annotations

import asyncio

import pytest

from omnitaxonomy.reliability.rate_limiter import AsyncRateLimiter

pytestmark = pytest.mark.unit


class TestAsyncRateLimiter:
    """Tests for the shared token bucket."""

    @pytest.mark.parametrize(
        ("rate", "burst"),
        [(0.0, 1), (-1.0, 1), (1.0, 0)],
    )
    def test_rejects_invalid_arguments(self, rate, burst):
        """Test non-positive rate or burst is rejected."""
        with pytest.raises(ValueError):
            AsyncRateLimiter(rate, burst)

    def test_bucket_starts_full(self, clock):
        """Test the first ``burst`` calls pass immediately."""
        limiter = AsyncRateLimiter(2.0, burst=3, clock=clock)

        assert [limiter.try_acquire() for _ in range(4)] == [True, True, True, False]

    def test_tokens_refill_over_time(self, clock):
        """Test tokens refill at the configured rate, capped at burst."""
        limiter = AsyncRateLimiter(2.0, burst=2, clock=clock)
        limiter.try_acquire()
        limiter.try_acquire()

        clock.advance(0.5)
        assert limiter.available_tokens == pytest.approx(1.0)

        clock.advance(10.0)
        assert limiter.available_tokens == pytest.approx(2.0)

    @pytest.mark.asyncio
    async def test_wait_sleeps_for_deficit(self, clock):
        """Test wait sleeps exactly until the next token is due."""
        sleeps: list[float] = []

        async def fake_sleep(seconds: float) -> None:
            sleeps.append(seconds)
            clock.advance(seconds)

        limiter = AsyncRateLimiter(4.0, burst=1, clock=clock, sleep=fake_sleep)

        await limiter.wait()
        await limiter.wait()

        assert sleeps == [pytest.approx(0.25)]

    @pytest.mark.asyncio
    async def test_wait_is_cancellable(self):
        """Test cancelling a waiting task interrupts the wait."""
        limiter = AsyncRateLimiter(0.01, burst=1)
        await limiter.wait()

        task = asyncio.create_task(limiter.wait())
        await asyncio.sleep(0.01)
        task.cancel()

        with pytest.raises(asyncio.CancelledError):
            await task
        assert limiter.available_tokens < 1.0
