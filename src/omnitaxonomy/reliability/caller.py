# SPDX-FileCopyrightText: 2025 OmniNode.ai Inc.
# SPDX-License-Identifier: MIT

"""Reliable provider invocation: breaker, rate limit, retry, response checks.

Each attempt runs, in order:

1. Circuit breaker check. An open circuit fails fast with
   ``CircuitOpenError`` and no network call. A half-open circuit admits a
   single trial call; concurrent attempts get ``CircuitHalfOpenBusyError``,
   which is retried with backoff until the trial call settles the state.
2. Rate limiter wait (cancellable).
3. ``provider.generate``. Transport failures record a breaker failure.
4. Finish reason checks. ``MAX_TOKENS`` raises ``ProviderOutputTruncatedError``
   and ``CONTENT_FILTER`` raises ``ProviderContentBlockedError``. Both record
   a breaker success because the provider itself is healthy.
5. Empty text raises ``ProviderResponseParseError`` and records a failure.
6. Success records a breaker success, then ``parse`` converts the text.
   Parse failures are retryable and do not affect the breaker.

Usage of every attempt that reached the provider is passed to the
optional ``on_usage`` hook, so callers can account for tokens billed by
attempts whose call ultimately failed.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import TypeVar

from omnitaxonomy.constants import LOG_RESPONSE_PREVIEW_CHARS
from omnitaxonomy.enums import EnumCircuitState, EnumFinishReason
from omnitaxonomy.errors import (
    CircuitHalfOpenBusyError,
    CircuitOpenError,
    ProviderContentBlockedError,
    ProviderOutputTruncatedError,
    ProviderResponseParseError,
)
from omnitaxonomy.models.model_token_usage import ModelTokenUsage
from omnitaxonomy.protocols import ProtocolClassificationProvider
from omnitaxonomy.reliability.circuit_breaker import CircuitBreaker
from omnitaxonomy.reliability.rate_limiter import AsyncRateLimiter
from omnitaxonomy.reliability.retry import RetryPolicy, retry_async

logger = logging.getLogger(__name__)

T = TypeVar("T")


class ReliableProviderCaller:
    """Wraps a provider with the shared reliability services of one phase.

    Args:
        provider: The AI provider adapter.
        rate_limiter: Process-wide rate limiter.
        circuit_breaker: Breaker for the calling phase.
        retry_policy: Retry schedule for the calling phase.
        model: Provider model id passed to every call.
        sleep: Backoff sleep, injectable for tests.
        on_usage: Called with the usage of every attempt that reported one,
            whether or not the call as a whole succeeds.
    """

    def __init__(
        self,
        provider: ProtocolClassificationProvider,
        *,
        rate_limiter: AsyncRateLimiter,
        circuit_breaker: CircuitBreaker,
        retry_policy: RetryPolicy,
        model: str,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        on_usage: Callable[[ModelTokenUsage], None] | None = None,
    ):
        self.provider = provider
        self.rate_limiter = rate_limiter
        self.circuit_breaker = circuit_breaker
        self.retry_policy = retry_policy
        self.model = model
        self._sleep = sleep
        self._on_usage = on_usage

    async def call(
        self,
        system_prompt: str,
        user_prompt: str,
        parse: Callable[[str], T],
    ) -> tuple[T, ModelTokenUsage | None]:
        """Generate and parse a response, retrying transient failures.

        Returns:
            The parsed value and the token usage summed over every attempt
            that reached the provider, or None if no attempt reported usage.
        """
        usages: list[ModelTokenUsage] = []

        async def attempt() -> T:
            text = await self._generate_once(system_prompt, user_prompt, usages)
            try:
                return parse(text)
            except ProviderResponseParseError:
                logger.warning(
                    "Failed to parse provider response: %s",
                    text[:LOG_RESPONSE_PREVIEW_CHARS],
                )
                raise

        parsed = await retry_async(
            attempt,
            self.retry_policy,
            sleep=self._sleep,
            operation_name=f"Provider call ({self.circuit_breaker.name})",
        )
        return parsed, (ModelTokenUsage.accumulate(usages) if usages else None)

    async def _generate_once(
        self, system_prompt: str, user_prompt: str, usages: list[ModelTokenUsage]
    ) -> str:
        breaker = self.circuit_breaker
        if not breaker.allow():
            if breaker.state is EnumCircuitState.HALF_OPEN:
                logger.debug(
                    "Circuit breaker %s is HALF_OPEN with a trial call out - deferring",
                    breaker.name,
                )
                raise CircuitHalfOpenBusyError(
                    "AI service recovering: waiting on the trial call",
                    details={
                        "breaker": breaker.name,
                        "state": EnumCircuitState.HALF_OPEN.value,
                    },
                )
            logger.warning("Circuit breaker %s is OPEN - rejecting call", breaker.name)
            raise CircuitOpenError(
                "AI service unavailable: circuit breaker is open",
                details={"breaker": breaker.name, "state": EnumCircuitState.OPEN.value},
            )

        try:
            await self.rate_limiter.wait()
            response = await self.provider.generate(
                model=self.model,
                system_prompt=system_prompt,
                user_prompt=user_prompt,
            )
        except asyncio.CancelledError:
            breaker.release()
            raise
        except Exception:
            breaker.record_failure()
            raise

        if response.usage is not None:
            usages.append(response.usage)
            if self._on_usage is not None:
                self._on_usage(response.usage)

        if response.finish_reason is EnumFinishReason.MAX_TOKENS:
            breaker.record_success()
            raise ProviderOutputTruncatedError(
                "Response truncated at output token limit; reduce input size",
                details={"model": self.model},
            )
        if response.finish_reason is EnumFinishReason.CONTENT_FILTER:
            breaker.record_success()
            raise ProviderContentBlockedError(
                "Response blocked by provider content policy",
                finish_reason=response.finish_reason.value,
                details={"model": self.model},
            )
        if not response.text.strip():
            breaker.record_failure()
            raise ProviderResponseParseError(
                "Provider returned an empty response",
                details={"model": self.model},
            )

        breaker.record_success()
        return response.text


__all__ = ["ReliableProviderCaller"]
