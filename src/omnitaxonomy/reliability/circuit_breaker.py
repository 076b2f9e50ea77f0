# SPDX-FileCopyrightText: 2025 OmniNode.ai Inc.
# SPDX-License-Identifier: MIT

"""Circuit breaker guarding calls to the AI provider.

State machine:

    CLOSED --(failure_threshold consecutive failures)--> OPEN
    OPEN --(recovery_timeout_seconds elapsed)--> HALF_OPEN
    HALF_OPEN --(probe succeeds)--> CLOSED
    HALF_OPEN --(probe fails)--> OPEN

While HALF_OPEN exactly one probe call is admitted. Other callers are
rejected until the probe records its outcome (or is released).

The breaker is not thread-safe. It is shared between asyncio tasks on one
event loop, and none of its methods await, so each transition is atomic with
respect to other tasks.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable

from omnitaxonomy.enums import EnumCircuitState

logger = logging.getLogger(__name__)


class CircuitBreaker:
    """Consecutive-failure circuit breaker with a single half-open probe."""

    def __init__(
        self,
        failure_threshold: int = 5,
        recovery_timeout_seconds: float = 60.0,
        *,
        clock: Callable[[], float] = time.monotonic,
        name: str = "default",
    ):
        self.failure_threshold = failure_threshold
        self.recovery_timeout_seconds = recovery_timeout_seconds
        self.name = name
        self._clock = clock
        self._state = EnumCircuitState.CLOSED
        self._failure_count = 0
        self._opened_at: float | None = None
        self._probe_in_flight = False

    @property
    def state(self) -> EnumCircuitState:
        """Current state, reporting HALF_OPEN once the cool-down has elapsed."""
        if self._state is EnumCircuitState.OPEN and self._cooldown_elapsed():
            return EnumCircuitState.HALF_OPEN
        return self._state

    @property
    def failure_count(self) -> int:
        return self._failure_count

    def allow(self) -> bool:
        """Return True if a call may proceed now.

        A True result in HALF_OPEN reserves the probe slot; the caller must
        follow up with ``record_success``, ``record_failure`` or ``release``.
        """
        if self._state is EnumCircuitState.CLOSED:
            return True

        if self._state is EnumCircuitState.OPEN:
            if not self._cooldown_elapsed():
                return False
            self._state = EnumCircuitState.HALF_OPEN
            self._probe_in_flight = False
            logger.info("Circuit breaker %s entering HALF_OPEN state", self.name)

        if self._probe_in_flight:
            return False
        self._probe_in_flight = True
        return True

    def record_success(self) -> None:
        if self._state is not EnumCircuitState.CLOSED:
            logger.info("Circuit breaker %s CLOSED after successful probe", self.name)
        self._state = EnumCircuitState.CLOSED
        self._failure_count = 0
        self._opened_at = None
        self._probe_in_flight = False

    def record_failure(self) -> None:
        self._failure_count += 1
        self._probe_in_flight = False

        if self._state is EnumCircuitState.HALF_OPEN:
            self._open()
            logger.warning(
                "Circuit breaker %s re-OPENED after failed probe", self.name
            )
            return

        if (
            self._state is EnumCircuitState.CLOSED
            and self._failure_count >= self.failure_threshold
        ):
            self._open()
            logger.warning(
                "Circuit breaker %s OPENED after %d failures",
                self.name,
                self._failure_count,
            )

    def release(self) -> None:
        """Give up a reserved half-open probe slot without an outcome.

        Used when the probing call is cancelled before reaching the provider.
        """
        self._probe_in_flight = False

    def reset(self) -> None:
        """Force the breaker back to CLOSED."""
        self._state = EnumCircuitState.CLOSED
        self._failure_count = 0
        self._opened_at = None
        self._probe_in_flight = False

    def _open(self) -> None:
        self._state = EnumCircuitState.OPEN
        self._opened_at = self._clock()

    def _cooldown_elapsed(self) -> bool:
        return (
            self._opened_at is not None
            and self._clock() - self._opened_at >= self.recovery_timeout_seconds
        )


__all__ = ["CircuitBreaker"]
