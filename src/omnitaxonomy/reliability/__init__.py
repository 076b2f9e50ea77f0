# SPDX-FileCopyrightText: 2025 OmniNode.ai Inc.
# SPDX-License-Identifier: MIT

"""Resilience primitives for AI provider calls."""

from omnitaxonomy.reliability.caller import ReliableProviderCaller
from omnitaxonomy.reliability.circuit_breaker import CircuitBreaker
from omnitaxonomy.reliability.model_reliability_config import (
    ModelCircuitBreakerConfig,
    ModelReliabilityConfig,
    ModelRetryPolicyConfig,
)
from omnitaxonomy.reliability.rate_limiter import AsyncRateLimiter
from omnitaxonomy.reliability.registry import (
    ReliabilityRegistry,
    default_registry,
    reset_default_registry,
)
from omnitaxonomy.reliability.retry import (
    RetryPolicy,
    is_retryable,
    is_retryable_status_code,
    retry_async,
)

__all__ = [
    "AsyncRateLimiter",
    "CircuitBreaker",
    "ModelCircuitBreakerConfig",
    "ModelReliabilityConfig",
    "ModelRetryPolicyConfig",
    "ReliabilityRegistry",
    "ReliableProviderCaller",
    "RetryPolicy",
    "default_registry",
    "is_retryable",
    "is_retryable_status_code",
    "reset_default_registry",
    "retry_async",
]
