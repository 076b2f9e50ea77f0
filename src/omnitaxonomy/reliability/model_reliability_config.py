# SPDX-FileCopyrightText: 2025 OmniNode.ai Inc.
# SPDX-License-Identifier: MIT

"""Configuration for the shared reliability services.

Per-phase defaults:

    Phase           Attempts  Backoff        Breaker
    classification  3         2s -> 30s      5 failures / 60s cool-down
    conversion      2         1s -> 10s      5 failures / 30s cool-down
"""

from __future__ import annotations

from pydantic import BaseModel, Field

from omnitaxonomy.enums import EnumClassificationPhase


class ModelRetryPolicyConfig(BaseModel):
    """Exponential backoff parameters for one phase."""

    model_config = {"frozen": True, "extra": "forbid"}

    max_attempts: int = Field(default=3, ge=1, le=20, description="Total attempts")
    initial_backoff_seconds: float = Field(
        default=2.0, ge=0.0, description="Delay before the first retry"
    )
    max_backoff_seconds: float = Field(
        default=30.0, ge=0.0, description="Upper bound on a single delay"
    )
    multiplier: float = Field(default=2.0, ge=1.0, description="Backoff growth factor")
    jitter_factor: float = Field(
        default=0.1, ge=0.0, le=1.0, description="Relative +/- jitter"
    )


class ModelCircuitBreakerConfig(BaseModel):
    """Circuit breaker thresholds for one phase."""

    model_config = {"frozen": True, "extra": "forbid"}

    failure_threshold: int = Field(
        default=5, ge=1, description="Consecutive failures that open the circuit"
    )
    recovery_timeout_seconds: float = Field(
        default=60.0, ge=0.0, description="Cool-down before a half-open probe"
    )


def _default_retry_policies() -> dict[EnumClassificationPhase, ModelRetryPolicyConfig]:
    return {
        EnumClassificationPhase.CLASSIFICATION: ModelRetryPolicyConfig(),
        EnumClassificationPhase.CONVERSION: ModelRetryPolicyConfig(
            max_attempts=2, initial_backoff_seconds=1.0, max_backoff_seconds=10.0
        ),
    }


def _default_circuit_breakers() -> dict[
    EnumClassificationPhase, ModelCircuitBreakerConfig
]:
    return {
        EnumClassificationPhase.CLASSIFICATION: ModelCircuitBreakerConfig(),
        EnumClassificationPhase.CONVERSION: ModelCircuitBreakerConfig(
            recovery_timeout_seconds=30.0
        ),
    }


class ModelReliabilityConfig(BaseModel):
    """Rate limit, breakers and retry policies shared by all runs.

    Attributes:
        rate_limit_per_second: Sustained provider calls per second.
        rate_limit_burst: Calls admitted back-to-back from a full bucket.
        retry_policies: Retry policy per phase.
        circuit_breakers: Breaker thresholds per phase.
    """

    model_config = {"frozen": True, "extra": "forbid"}

    rate_limit_per_second: float = Field(
        default=10.0, gt=0.0, description="Sustained provider calls per second"
    )
    rate_limit_burst: int = Field(
        default=10, ge=1, description="Maximum back-to-back calls"
    )
    retry_policies: dict[EnumClassificationPhase, ModelRetryPolicyConfig] = Field(
        default_factory=_default_retry_policies
    )
    circuit_breakers: dict[EnumClassificationPhase, ModelCircuitBreakerConfig] = Field(
        default_factory=_default_circuit_breakers
    )

    def retry_policy_for(self, phase: EnumClassificationPhase) -> ModelRetryPolicyConfig:
        return self.retry_policies.get(phase) or _default_retry_policies()[phase]

    def circuit_breaker_for(
        self, phase: EnumClassificationPhase
    ) -> ModelCircuitBreakerConfig:
        return self.circuit_breakers.get(phase) or _default_circuit_breakers()[phase]


__all__ = [
    "ModelCircuitBreakerConfig",
    "ModelReliabilityConfig",
    "ModelRetryPolicyConfig",
]
