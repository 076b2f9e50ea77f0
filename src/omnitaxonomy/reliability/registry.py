# SPDX-FileCopyrightText: 2025 OmniNode.ai Inc.
# SPDX-License-Identifier: MIT

"""Process-wide reliability services.

All classification runs in a process share one rate limiter and one circuit
breaker per phase, so a provider outage observed by one run trips the
breaker for every run. Tests build their own ``ReliabilityRegistry`` instead
of touching the process singleton.
"""

from __future__ import annotations

import logging
from collections.abc import Callable

from omnitaxonomy.enums import EnumClassificationPhase
from omnitaxonomy.reliability.circuit_breaker import CircuitBreaker
from omnitaxonomy.reliability.model_reliability_config import ModelReliabilityConfig
from omnitaxonomy.reliability.rate_limiter import AsyncRateLimiter
from omnitaxonomy.reliability.retry import RetryPolicy

logger = logging.getLogger(__name__)


class ReliabilityRegistry:
    """Rate limiter, breakers and retry policies built from one config."""

    def __init__(
        self,
        config: ModelReliabilityConfig | None = None,
        *,
        clock: Callable[[], float] | None = None,
    ):
        self.config = config or ModelReliabilityConfig()
        clock_kwargs = {"clock": clock} if clock is not None else {}

        self.rate_limiter = AsyncRateLimiter(
            self.config.rate_limit_per_second,
            self.config.rate_limit_burst,
            **clock_kwargs,
        )
        self._breakers: dict[EnumClassificationPhase, CircuitBreaker] = {}
        self._policies: dict[EnumClassificationPhase, RetryPolicy] = {}
        for phase in EnumClassificationPhase:
            breaker_config = self.config.circuit_breaker_for(phase)
            self._breakers[phase] = CircuitBreaker(
                breaker_config.failure_threshold,
                breaker_config.recovery_timeout_seconds,
                name=phase.value,
                **clock_kwargs,
            )
            self._policies[phase] = RetryPolicy.from_config(
                self.config.retry_policy_for(phase)
            )

    def circuit_breaker(self, phase: EnumClassificationPhase) -> CircuitBreaker:
        return self._breakers[phase]

    def retry_policy(self, phase: EnumClassificationPhase) -> RetryPolicy:
        return self._policies[phase]


_default_registry: ReliabilityRegistry | None = None


def default_registry(
    config: ModelReliabilityConfig | None = None,
) -> ReliabilityRegistry:
    """Return the process-wide registry, creating it on first use.

    ``config`` only applies when the registry is created; later calls return
    the existing services unchanged.
    """
    global _default_registry
    if _default_registry is None:
        _default_registry = ReliabilityRegistry(config)
        logger.debug("Created default reliability registry")
    return _default_registry


def reset_default_registry() -> None:
    """Drop the process-wide registry so the next call rebuilds it."""
    global _default_registry
    _default_registry = None


__all__ = ["ReliabilityRegistry", "default_registry", "reset_default_registry"]
