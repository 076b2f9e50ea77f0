# SPDX-FileCopyrightText: 2025 OmniNode.ai Inc.
# SPDX-License-Identifier: MIT

"""Retry with exponential backoff and jitter.

Retries on:
- ``ProviderTransientError`` and subclasses (network, 5xx, rate limit,
  malformed or empty response)
- ``CircuitHalfOpenBusyError`` (another call is testing the recovered service)
- Unknown exceptions whose message names a transient condition

Does NOT retry on:
- Task cancellation or the run deadline (``asyncio.CancelledError``,
  ``TimeoutError``)
- ``CircuitOpenError`` (the circuit is open)
- Output truncation and content blocks
- Malformed requests (``ProviderRequestError``)
"""

from __future__ import annotations

import asyncio
import logging
import random
from collections.abc import Awaitable, Callable
from typing import TypeVar

from omnitaxonomy.errors import (
    CircuitHalfOpenBusyError,
    CircuitOpenError,
    ProviderTransientError,
    TaxonomyClassificationError,
)
from omnitaxonomy.reliability.model_reliability_config import ModelRetryPolicyConfig

logger = logging.getLogger(__name__)

T = TypeVar("T")

RETRYABLE_STATUS_CODES = frozenset({429, 500, 502, 503, 504})

TRANSIENT_ERROR_PATTERNS = (
    "rate limit",
    "quota exceeded",
    "too many requests",
    "service unavailable",
    "internal server error",
    "timeout",
    "connection reset",
    "connection refused",
    "temporary failure",
)


class RetryPolicy:
    """Exponential backoff schedule.

    The delay before retry ``n`` (1-based) is
    ``initial * multiplier ** (n - 1)``, capped at ``max_backoff_seconds``,
    then scaled by a random factor in ``[1 - jitter, 1 + jitter]``.
    """

    def __init__(
        self,
        max_attempts: int = 3,
        initial_backoff_seconds: float = 2.0,
        max_backoff_seconds: float = 30.0,
        multiplier: float = 2.0,
        jitter_factor: float = 0.1,
        *,
        rng: Callable[[], float] = random.random,
    ):
        if max_attempts < 1:
            raise ValueError(f"max_attempts must be at least 1, got {max_attempts}")
        self.max_attempts = max_attempts
        self.initial_backoff_seconds = initial_backoff_seconds
        self.max_backoff_seconds = max_backoff_seconds
        self.multiplier = multiplier
        self.jitter_factor = jitter_factor
        self._rng = rng

    @classmethod
    def from_config(cls, config: ModelRetryPolicyConfig) -> RetryPolicy:
        return cls(
            max_attempts=config.max_attempts,
            initial_backoff_seconds=config.initial_backoff_seconds,
            max_backoff_seconds=config.max_backoff_seconds,
            multiplier=config.multiplier,
            jitter_factor=config.jitter_factor,
        )

    def compute_backoff(self, attempt: int) -> float:
        """Return the delay in seconds before retry number ``attempt`` (1-based)."""
        exponent = max(attempt - 1, 0)
        delay = min(
            self.initial_backoff_seconds * self.multiplier**exponent,
            self.max_backoff_seconds,
        )
        if self.jitter_factor > 0:
            delay *= 1.0 + self.jitter_factor * (2.0 * self._rng() - 1.0)
        return max(delay, 0.0)

    def __repr__(self) -> str:
        return (
            f"RetryPolicy(max_attempts={self.max_attempts}, "
            f"initial_backoff_seconds={self.initial_backoff_seconds}, "
            f"max_backoff_seconds={self.max_backoff_seconds})"
        )


def is_retryable_status_code(status_code: int) -> bool:
    return status_code in RETRYABLE_STATUS_CODES


def is_retryable(exc: BaseException) -> bool:
    """Classify an exception as transient (worth retrying) or terminal."""
    if isinstance(exc, (asyncio.CancelledError, TimeoutError)):
        return False
    if isinstance(exc, CircuitHalfOpenBusyError):
        return True
    if isinstance(exc, CircuitOpenError):
        return False
    if isinstance(exc, ProviderTransientError):
        return True
    if isinstance(exc, TaxonomyClassificationError):
        return False
    if not isinstance(exc, Exception):
        return False
    message = str(exc).lower()
    return any(pattern in message for pattern in TRANSIENT_ERROR_PATTERNS)


async def retry_async(
    operation: Callable[[], Awaitable[T]],
    policy: RetryPolicy,
    *,
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    should_retry: Callable[[BaseException], bool] = is_retryable,
    operation_name: str = "operation",
) -> T:
    """Run ``operation`` until it succeeds or attempts are exhausted.

    Args:
        operation: Zero-argument coroutine function, invoked once per attempt.
        policy: Attempt count and backoff schedule.
        sleep: Awaitable sleep used for backoff; cancellation propagates.
        should_retry: Classifier deciding whether an exception is transient.
        operation_name: Label used in log messages.

    Returns:
        The operation's result from the first successful attempt.

    Raises:
        The last exception raised by ``operation`` when it is not retryable
        or when all attempts fail.
    """
    for attempt in range(1, policy.max_attempts + 1):
        try:
            result = await operation()
        except Exception as e:
            if not should_retry(e):
                raise
            if attempt >= policy.max_attempts:
                logger.warning(
                    "%s failed after %d attempts: %s",
                    operation_name,
                    policy.max_attempts,
                    e,
                )
                raise
            delay = policy.compute_backoff(attempt)
            logger.warning(
                "%s failed (attempt %d/%d): %s. Retrying in %.2fs",
                operation_name,
                attempt,
                policy.max_attempts,
                e,
                delay,
            )
            await sleep(delay)
            continue

        if attempt > 1:
            logger.info("%s succeeded after %d retries", operation_name, attempt - 1)
        return result

    # max_attempts >= 1, so the loop always returns or raises
    raise AssertionError("unreachable")


__all__ = [
    "RETRYABLE_STATUS_CODES",
    "TRANSIENT_ERROR_PATTERNS",
    "RetryPolicy",
    "is_retryable",
    "is_retryable_status_code",
    "retry_async",
]
