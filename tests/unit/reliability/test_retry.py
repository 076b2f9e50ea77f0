# SPDX-FileCopyrightText: 2025 OmniNode.ai Inc.
# SPDX-License-Identifier: MIT
"""Unit tests for RetryPolicy, error classification and retry_async."""

from __future__ import annotations

import asyncio
from unittest.mock import AsyncMock, patch

import pytest

from omnitaxonomy.errors import (
    CircuitHalfOpenBusyError,
    CircuitOpenError,
    ProviderContentBlockedError,
    ProviderOutputTruncatedError,
    ProviderRateLimitedError,
    ProviderRequestError,
    ProviderResponseParseError,
    ProviderTransientError,
)
from omnitaxonomy.reliability.model_reliability_config import ModelRetryPolicyConfig
from omnitaxonomy.reliability.retry import (
    RetryPolicy,
    is_retryable,
    is_retryable_status_code,
    retry_async,
)

pytestmark = pytest.mark.unit


class TestRetryPolicy:
    """Tests for backoff computation."""

    def test_exponential_growth_is_capped(self):
        """Test delays double per attempt and stop at the cap."""
        policy = RetryPolicy(
            max_attempts=6,
            initial_backoff_seconds=2.0,
            max_backoff_seconds=10.0,
            jitter_factor=0.0,
        )
        assert [policy.compute_backoff(n) for n in range(1, 5)] == [2.0, 4.0, 8.0, 10.0]

    def test_jitter_bounds(self):
        """Test jitter scales the delay within +/- jitter_factor."""
        low = RetryPolicy(initial_backoff_seconds=2.0, jitter_factor=0.1, rng=lambda: 0.0)
        high = RetryPolicy(initial_backoff_seconds=2.0, jitter_factor=0.1, rng=lambda: 1.0)

        assert low.compute_backoff(1) == pytest.approx(1.8)
        assert high.compute_backoff(1) == pytest.approx(2.2)

    def test_from_config(self):
        """Test the policy mirrors its configuration model."""
        policy = RetryPolicy.from_config(
            ModelRetryPolicyConfig(max_attempts=2, initial_backoff_seconds=1.0)
        )
        assert policy.max_attempts == 2
        assert policy.initial_backoff_seconds == 1.0

    def test_rejects_zero_attempts(self):
        """Test at least one attempt is required."""
        with pytest.raises(ValueError):
            RetryPolicy(max_attempts=0)


class TestIsRetryable:
    """Tests for transient vs terminal error classification."""

    @pytest.mark.parametrize(
        "error",
        [
            ProviderTransientError("503"),
            ProviderRateLimitedError("slow down", retry_after=1.0),
            ProviderResponseParseError("bad json"),
            ConnectionError("connection reset by peer"),
            RuntimeError("Service Unavailable"),
            CircuitHalfOpenBusyError("recovering"),
        ],
    )
    def test_transient(self, error):
        """Test transient failures are retried."""
        assert is_retryable(error) is True

    @pytest.mark.parametrize(
        "error",
        [
            ProviderOutputTruncatedError("truncated"),
            ProviderContentBlockedError("blocked", finish_reason="content_filter"),
            ProviderRequestError("bad request", status_code=400),
            CircuitOpenError("open"),
            asyncio.CancelledError(),
            TimeoutError(),
            ValueError("invalid literal"),
        ],
    )
    def test_terminal(self, error):
        """Test terminal failures surface immediately."""
        assert is_retryable(error) is False

    @pytest.mark.parametrize(
        ("status", "expected"),
        [(429, True), (500, True), (502, True), (503, True), (504, True), (400, False), (404, False)],
    )
    def test_status_codes(self, status, expected):
        """Test retryable HTTP status classification."""
        assert is_retryable_status_code(status) is expected


class TestRetryAsync:
    """Tests for the retry loop."""

    @pytest.mark.asyncio
    async def test_returns_first_success(self):
        """Test a succeeding operation runs once."""
        operation = AsyncMock(return_value="ok")
        assert await retry_async(operation, RetryPolicy()) == "ok"
        assert operation.await_count == 1

    @pytest.mark.asyncio
    async def test_retries_transient_then_succeeds(self):
        """Test transient failures are retried with backoff."""
        operation = AsyncMock(side_effect=[ProviderTransientError("timeout"), "ok"])
        policy = RetryPolicy(max_attempts=3, initial_backoff_seconds=2.0, jitter_factor=0.0)

        with patch("asyncio.sleep", new_callable=AsyncMock) as mock_sleep:
            result = await retry_async(operation, policy, sleep=asyncio.sleep)

        assert result == "ok"
        assert operation.await_count == 2
        mock_sleep.assert_awaited_once_with(2.0)

    @pytest.mark.asyncio
    async def test_exhausted_attempts_raise_last_error(self):
        """Test the last error surfaces after max_attempts."""
        errors = [ProviderTransientError(f"failure {n}") for n in range(3)]
        operation = AsyncMock(side_effect=errors)
        sleep = AsyncMock()

        with pytest.raises(ProviderTransientError, match="failure 2"):
            await retry_async(operation, RetryPolicy(max_attempts=3), sleep=sleep)

        assert operation.await_count == 3
        assert sleep.await_count == 2

    @pytest.mark.asyncio
    async def test_terminal_error_is_not_retried(self):
        """Test terminal errors propagate on the first attempt."""
        operation = AsyncMock(side_effect=ProviderRequestError("bad", status_code=400))
        sleep = AsyncMock()

        with pytest.raises(ProviderRequestError):
            await retry_async(operation, RetryPolicy(max_attempts=5), sleep=sleep)

        assert operation.await_count == 1
        sleep.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_custom_classifier(self):
        """Test should_retry overrides the default classification."""
        operation = AsyncMock(side_effect=[KeyError("x"), "ok"])

        result = await retry_async(
            operation,
            RetryPolicy(max_attempts=2),
            sleep=AsyncMock(),
            should_retry=lambda e: isinstance(e, KeyError),
        )

        assert result == "ok"


class TestHalfOpenBusy:
    """Tests for the busy half-open rejection."""

    def test_is_a_circuit_open_error(self):
        """Test callers catching CircuitOpenError still see the busy rejection."""
        assert issubclass(CircuitHalfOpenBusyError, CircuitOpenError)

    @pytest.mark.asyncio
    async def test_retried_until_trial_call_settles(self):
        """Test retry_async backs off through busy rejections and then succeeds."""
        operation = AsyncMock(
            side_effect=[
                CircuitHalfOpenBusyError("recovering"),
                CircuitHalfOpenBusyError("recovering"),
                "ok",
            ]
        )
        sleeps: list[float] = []

        async def fake_sleep(seconds: float) -> None:
            sleeps.append(seconds)

        result = await retry_async(
            operation,
            RetryPolicy(max_attempts=3, initial_backoff_seconds=1.0, jitter_factor=0.0),
            sleep=fake_sleep,
        )

        assert result == "ok"
        assert sleeps == [1.0, 2.0]
