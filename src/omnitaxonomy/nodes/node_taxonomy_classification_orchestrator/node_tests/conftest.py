# SPDX-FileCopyrightText: 2025 OmniNode.ai Inc.
# SPDX-License-Identifier: MIT
"""Fixtures and in-memory fakes for classification orchestrator tests.

``MockClassificationProvider`` answers every prompt with a well-formed
taxonomy derived from the file paths in the prompt: the parent directory
becomes the domain and the file stem the feature. Tests script deviations
per file path (errors, truncated or malformed responses) and inspect the
recorded calls afterwards.
"""

from __future__ import annotations

import asyncio
import json
import re
from collections import deque
from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import PurePosixPath

import pytest

from omnitaxonomy.enums import EnumClassificationPhase, EnumLanguage
from omnitaxonomy.models.model_provider_response import ModelProviderResponse
from omnitaxonomy.models.model_test_case import ModelFileGroup, ModelTestCase
from omnitaxonomy.models.model_token_usage import ModelTokenUsage
from omnitaxonomy.nodes.node_chunk_partition_compute.models.model_chunk_config import (
    ModelChunkConfig,
)
from omnitaxonomy.nodes.node_taxonomy_classification_orchestrator.handlers.store_chunk_progress import (
    InMemoryChunkProgressStore,
)
from omnitaxonomy.protocols import (
    ProtocolChunkProgressStore,
    ProtocolClassificationProvider,
)
from omnitaxonomy.reliability.model_reliability_config import (
    ModelCircuitBreakerConfig,
    ModelReliabilityConfig,
    ModelRetryPolicyConfig,
)
from omnitaxonomy.reliability.registry import ReliabilityRegistry
from omnitaxonomy.runtime.model_classification_config import ModelClassificationConfig

_FILE_HEADER = re.compile(r"^\[\d+\] (\S+)", re.MULTILINE)
_TEST_LINE = re.compile(r"^    (\d+)\|", re.MULTILINE)

ScriptedItem = BaseException | ModelProviderResponse | str


# =============================================================================
# Provider fake
# =============================================================================


@dataclass
class RecordedCall:
    """One ``generate`` invocation as seen by the mock provider."""

    model: str
    system_prompt: str
    user_prompt: str

    @property
    def file_paths(self) -> list[str]:
        return _FILE_HEADER.findall(self.user_prompt)

    @property
    def test_indices(self) -> list[int]:
        return [int(i) for i in _TEST_LINE.findall(self.user_prompt)]

    @property
    def has_anchors(self) -> bool:
        return "<anchor_domains>" in self.user_prompt


def default_domain_for_path(path: str) -> tuple[str, str]:
    """Parent directory as domain, file stem as feature."""
    parts = PurePosixPath(path)
    domain = parts.parent.name.replace("_", " ").title() or "Root"
    feature = parts.name.split(".")[0].replace("_", " ").title()
    return domain, feature


def build_taxonomy_json(
    user_prompt: str,
    domain_for_path: Callable[[str], tuple[str, str]] = default_domain_for_path,
) -> str:
    """Classify every test of a prompt by its file path."""
    domains: dict[str, dict[str, list[int]]] = {}
    blocks = re.split(r"^(?=\[\d+\] )", user_prompt, flags=re.MULTILINE)
    for block in blocks:
        header = _FILE_HEADER.match(block)
        if header is None:
            continue
        domain, feature = domain_for_path(header.group(1))
        indices = [int(i) for i in _TEST_LINE.findall(block)]
        domains.setdefault(domain, {}).setdefault(feature, []).extend(indices)

    return json.dumps(
        {
            "domains": [
                {
                    "name": domain,
                    "description": f"{domain} behavior",
                    "confidence": 0.9,
                    "features": [
                        {
                            "name": feature,
                            "description": f"{feature} flows",
                            "confidence": 0.8,
                            "test_indices": indices,
                        }
                        for feature, indices in features.items()
                    ],
                }
                for domain, features in domains.items()
            ]
        }
    )


class MockClassificationProvider:
    """Scriptable ``ProtocolClassificationProvider`` fake.

    Args:
        domain_for_path: Maps a file path to ``(domain, feature)``.
        usage_per_call: Tokens reported for every successful call.
    """

    def __init__(
        self,
        *,
        domain_for_path: Callable[[str], tuple[str, str]] = default_domain_for_path,
        usage_per_call: int = 100,
    ) -> None:
        self.domain_for_path = domain_for_path
        self.usage_per_call = usage_per_call
        self.calls: list[RecordedCall] = []
        self.in_flight = 0
        self.max_in_flight = 0
        self._scripts: dict[str, deque[ScriptedItem]] = {}
        self._delays: dict[str, float] = {}
        assert isinstance(self, ProtocolClassificationProvider)

    def script(self, path: str, *items: ScriptedItem) -> None:
        """Queue responses for the next calls whose prompt contains ``path``.

        Items are exceptions (raised), ``ModelProviderResponse`` (returned as
        is) or strings (returned as the response text).
        """
        self._scripts.setdefault(path, deque()).extend(items)

    def delay(self, path: str, seconds: float) -> None:
        """Hold calls containing ``path`` for ``seconds`` before answering."""
        self._delays[path] = seconds

    def calls_for(self, path: str) -> list[RecordedCall]:
        return [call for call in self.calls if path in call.file_paths]

    def classified_paths(self) -> list[str]:
        return [path for call in self.calls for path in call.file_paths]

    def _usage(self, model: str) -> ModelTokenUsage:
        return ModelTokenUsage(
            prompt_tokens=self.usage_per_call,
            candidates_tokens=self.usage_per_call // 2,
            total_tokens=self.usage_per_call + self.usage_per_call // 2,
            model=model,
        )

    async def generate(
        self,
        *,
        model: str,
        system_prompt: str,
        user_prompt: str,
    ) -> ModelProviderResponse:
        call = RecordedCall(model=model, system_prompt=system_prompt, user_prompt=user_prompt)
        self.calls.append(call)

        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            for path in call.file_paths:
                if path in self._delays:
                    await asyncio.sleep(self._delays[path])
                    break
        finally:
            self.in_flight -= 1

        for path in call.file_paths:
            queue = self._scripts.get(path)
            if queue:
                item = queue.popleft()
                if isinstance(item, BaseException):
                    raise item
                if isinstance(item, ModelProviderResponse):
                    return item
                return ModelProviderResponse(text=item, usage=self._usage(model))

        return ModelProviderResponse(
            text=build_taxonomy_json(user_prompt, self.domain_for_path),
            usage=self._usage(model),
        )


# =============================================================================
# Input builders
# =============================================================================


def make_files(
    paths: list[str], tests_per_file: int, *, start_index: int = 0
) -> list[ModelFileGroup]:
    """Files with ``tests_per_file`` tests each and consecutive global indices."""
    files = []
    index = start_index
    for path in paths:
        tests = []
        for n in range(tests_per_file):
            tests.append(
                ModelTestCase(
                    index=index,
                    name=f"test case {n}",
                    suite_path=PurePosixPath(path).stem,
                    file_path=path,
                )
            )
            index += 1
        files.append(ModelFileGroup(path=path, tests=tuple(tests), framework="jest"))
    return files


@dataclass
class OrchestratorHarness:
    """Collaborators wired for a deterministic, fast orchestrator run."""

    provider: MockClassificationProvider
    store: InMemoryChunkProgressStore
    registry: ReliabilityRegistry
    sleeps: list[float] = field(default_factory=list)

    async def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        await asyncio.sleep(0)


class ManualClock:
    """Monotonic clock that only moves when told to."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def fast_registry(
    max_attempts: int = 3,
    *,
    failure_threshold: int = 5,
    recovery_timeout_seconds: float = 60.0,
    clock: Callable[[], float] | None = None,
) -> ReliabilityRegistry:
    """Registry with a generous rate limit and zero-jitter retries."""
    phase = EnumClassificationPhase.CLASSIFICATION
    return ReliabilityRegistry(
        ModelReliabilityConfig(
            rate_limit_per_second=10_000.0,
            rate_limit_burst=10_000,
            retry_policies={
                phase: ModelRetryPolicyConfig(
                    max_attempts=max_attempts, jitter_factor=0.0
                ),
            },
            circuit_breakers={
                phase: ModelCircuitBreakerConfig(
                    failure_threshold=failure_threshold,
                    recovery_timeout_seconds=recovery_timeout_seconds,
                ),
            },
        ),
        clock=clock,
    )


def chunked_config(max_tests_per_chunk: int, **overrides: object) -> ModelClassificationConfig:
    return ModelClassificationConfig(
        chunking=ModelChunkConfig(max_tests_per_chunk=max_tests_per_chunk),
        **overrides,
    )


@pytest.fixture
def provider() -> MockClassificationProvider:
    return MockClassificationProvider()


@pytest.fixture
def progress_store() -> InMemoryChunkProgressStore:
    store = InMemoryChunkProgressStore()
    assert isinstance(store, ProtocolChunkProgressStore)
    return store


@pytest.fixture
def harness(
    provider: MockClassificationProvider, progress_store: InMemoryChunkProgressStore
) -> OrchestratorHarness:
    return OrchestratorHarness(
        provider=provider, store=progress_store, registry=fast_registry()
    )


@pytest.fixture
def language() -> EnumLanguage:
    return EnumLanguage.EN


__all__ = [
    "ManualClock",
    "MockClassificationProvider",
    "OrchestratorHarness",
    "RecordedCall",
    "build_taxonomy_json",
    "chunked_config",
    "default_domain_for_path",
    "fast_registry",
    "make_files",
]
