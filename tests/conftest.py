# SPDX-FileCopyrightText: 2025 OmniNode.ai Inc.
# SPDX-License-Identifier: MIT
"""
Pytest configuration and fixtures for omnitaxonomy tests.

Shared fixtures for the reliability, client, configuration and end-to-end
pipeline tests. Node-local fakes live in each node's ``node_tests/conftest.py``.
"""

from __future__ import annotations

from collections.abc import Iterator

import pytest

from omnitaxonomy.reliability.registry import reset_default_registry

# =========================================================================
# Clocks
# =========================================================================


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock() -> FakeClock:
    """Provide a manually advanced clock starting at t=1000."""
    return FakeClock()


# =========================================================================
# Process-wide state
# =========================================================================


@pytest.fixture(autouse=True)
def _isolate_default_registry() -> Iterator[None]:
    """Keep the process-wide reliability registry from leaking between tests."""
    reset_default_registry()
    yield
    reset_default_registry()
