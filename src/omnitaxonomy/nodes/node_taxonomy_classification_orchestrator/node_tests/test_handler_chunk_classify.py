# SPDX-FileCopyrightText: 2025 OmniNode.ai Inc.
# SPDX-License-Identifier: MIT
"""Unit tests for chunk classification, prompt rendering and the progress store."""

from __future__ import annotations

import json
import logging

import pytest

from omnitaxonomy.enums import EnumClassificationPhase, EnumIndexViolationType, EnumLanguage
from omnitaxonomy.errors import ProviderResponseParseError
from omnitaxonomy.models.model_chunk import ModelChunk
from omnitaxonomy.models.model_chunk_progress import (
    ModelChunkProgress,
    ModelChunkProgressKey,
)
from omnitaxonomy.models.model_taxonomy import ModelDomainGroup, ModelFeatureGroup
from omnitaxonomy.models.model_test_case import (
    ModelDomainHints,
    ModelFileGroup,
    ModelTestCase,
)
from omnitaxonomy.nodes.node_taxonomy_classification_orchestrator.handlers.handler_chunk_classify import (
    handle_chunk_classify,
)
from omnitaxonomy.nodes.node_taxonomy_classification_orchestrator.handlers.prompt_taxonomy import (
    TAXONOMY_SYSTEM_PROMPT,
    build_taxonomy_user_prompt,
    parse_taxonomy_response,
)
from omnitaxonomy.nodes.node_taxonomy_classification_orchestrator.handlers.store_chunk_progress import (
    InMemoryChunkProgressStore,
)
from omnitaxonomy.nodes.node_taxonomy_classification_orchestrator.node_tests.conftest import (
    MockClassificationProvider,
    fast_registry,
    make_files,
)
from omnitaxonomy.reliability.caller import ReliableProviderCaller

AUTH = "src/auth/login.test.ts"
BILLING = "src/billing/invoice.test.ts"


def _caller(provider: MockClassificationProvider) -> ReliableProviderCaller:
    registry = fast_registry()
    phase = EnumClassificationPhase.CLASSIFICATION

    async def no_sleep(_: float) -> None:
        return None

    return ReliableProviderCaller(
        provider,
        rate_limiter=registry.rate_limiter,
        circuit_breaker=registry.circuit_breaker(phase),
        retry_policy=registry.retry_policy(phase),
        model="test-model",
        sleep=no_sleep,
    )


def _response(*features: tuple[str, str, list[int]]) -> str:
    domains: dict[str, list[dict[str, object]]] = {}
    for domain, feature, indices in features:
        domains.setdefault(domain, []).append(
            {"name": feature, "description": "", "confidence": 0.8, "test_indices": indices}
        )
    return json.dumps(
        {
            "domains": [
                {"name": name, "description": "", "confidence": 0.9, "features": feats}
                for name, feats in domains.items()
            ]
        }
    )


# =============================================================================
# Prompt rendering
# =============================================================================


@pytest.mark.unit
class TestBuildTaxonomyUserPrompt:
    def test_renders_files_tests_and_total(self) -> None:
        files = [
            ModelFileGroup(
                path=AUTH,
                framework="jest",
                tests=(
                    ModelTestCase(index=0, name="logs in", suite_path="LoginForm"),
                    ModelTestCase(index=1, name="rejects bad password"),
                ),
                domain_hints=ModelDomainHints(imports=("auth-client",), calls=("signIn",)),
            )
        ]

        prompt = build_taxonomy_user_prompt(files, EnumLanguage.EN)

        assert "Target Language: English (en)" in prompt
        assert f"[0] {AUTH} (jest)\n" in prompt
        assert "  imports: auth-client\n" in prompt
        assert "  calls: signIn\n" in prompt
        assert "    0|LoginForm|logs in\n" in prompt
        assert "    1|rejects bad password\n" in prompt
        assert prompt.endswith(
            "Total: 2 tests (indices 0-1). Assign ALL to exactly one feature."
        )
        assert "<anchor_domains>" not in prompt

    def test_renders_anchor_block(self) -> None:
        anchors = [
            ModelDomainGroup(
                name="Authentication",
                description="Sign-in flows",
                features=(ModelFeatureGroup(name="Login"), ModelFeatureGroup(name="Logout")),
            )
        ]

        prompt = build_taxonomy_user_prompt(
            make_files([BILLING], 1), EnumLanguage.KO, anchors=anchors
        )

        assert "Target Language: Korean (ko)" in prompt
        assert "## Existing Domains (MUST reuse if applicable)" in prompt
        assert "- **Authentication**: Sign-in flows" in prompt
        assert "  Features: Login, Logout" in prompt
        assert prompt.index("</anchor_domains>") < prompt.index("<files>")

    def test_system_prompt_describes_schema(self) -> None:
        assert '"test_indices"' in TAXONOMY_SYSTEM_PROMPT
        assert "exactly once" in TAXONOMY_SYSTEM_PROMPT


@pytest.mark.unit
class TestParseTaxonomyResponse:
    def test_parses_plain_json(self) -> None:
        taxonomy = parse_taxonomy_response(_response(("Auth", "Login", [0, 1])))
        assert taxonomy.domain_names() == ["Auth"]
        assert taxonomy.domains[0].features[0].test_indices == (0, 1)

    def test_strips_code_fences(self) -> None:
        raw = "```json\n" + _response(("Auth", "Login", [0])) + "\n```"
        assert parse_taxonomy_response(raw).domain_names() == ["Auth"]

    @pytest.mark.parametrize(
        "raw",
        [
            "not json at all",
            "[]",
            '{"taxonomy": []}',
            '{"domains": [{"name": "Auth", "features": [{"name": "x", "test_indices": "0"}]}]}',
        ],
    )
    def test_rejects_malformed_output(self, raw: str) -> None:
        with pytest.raises(ProviderResponseParseError):
            parse_taxonomy_response(raw)


# =============================================================================
# handle_chunk_classify
# =============================================================================


@pytest.mark.unit
class TestHandleChunkClassify:
    @pytest.mark.asyncio
    async def test_output_is_restored_to_global_indices(self) -> None:
        provider = MockClassificationProvider()
        chunk = ModelChunk(
            chunk_index=3, files=tuple(make_files([AUTH, BILLING], 2, start_index=40))
        )

        result = await handle_chunk_classify(
            chunk, caller=_caller(provider), language=EnumLanguage.EN
        )

        assert result.chunk_index == 3
        assert sorted(result.taxonomy.all_test_indices()) == [40, 41, 42, 43]
        assert result.violations == ()
        assert result.usage is not None
        assert result.usage.model == "test-model"
        assert provider.calls[0].test_indices == [0, 1, 2, 3]

    @pytest.mark.asyncio
    async def test_missing_and_unexpected_indices_are_repaired(
        self, caplog: pytest.LogCaptureFixture
    ) -> None:
        provider = MockClassificationProvider()
        provider.script(AUTH, _response(("Auth", "Login", [0, 2, 999])))
        chunk = ModelChunk(chunk_index=0, files=tuple(make_files([AUTH], 4, start_index=10)))

        with caplog.at_level(logging.WARNING):
            result = await handle_chunk_classify(
                chunk, caller=_caller(provider), language=EnumLanguage.EN
            )

        violation_types = {v.violation_type for v in result.violations}
        assert violation_types == {
            EnumIndexViolationType.UNEXPECTED_INDEX,
            EnumIndexViolationType.MISSING_INDEX,
        }
        assert sorted(result.taxonomy.all_test_indices()) == [10, 11, 12, 13]
        uncategorized = next(d for d in result.taxonomy.domains if d.name == "Uncategorized")
        assert uncategorized.features[0].test_indices == (11, 13)
        assert "Dropping 1 unexpected test indices" in caplog.text

    @pytest.mark.asyncio
    async def test_anchors_reach_the_prompt(self) -> None:
        provider = MockClassificationProvider()
        anchors = (ModelDomainGroup(name="Payments", description="Money movement"),)
        chunk = ModelChunk(chunk_index=1, files=tuple(make_files([BILLING], 1)))

        await handle_chunk_classify(
            chunk,
            caller=_caller(provider),
            language=EnumLanguage.EN,
            anchor_domains=anchors,
        )

        assert "- **Payments**: Money movement" in provider.calls[0].user_prompt


# =============================================================================
# InMemoryChunkProgressStore
# =============================================================================


@pytest.mark.unit
class TestInMemoryChunkProgressStore:
    @pytest.mark.asyncio
    async def test_save_get_delete(self) -> None:
        store = InMemoryChunkProgressStore()
        key = ModelChunkProgressKey(analysis_id="abc", language="en", model_id="m")
        progress = ModelChunkProgress(completed_chunks=1, total_chunks=3)

        assert await store.get(key) is None
        await store.save(key, progress)
        assert await store.get(key) == progress
        assert len(store) == 1

        await store.delete(key)
        await store.delete(key)
        assert await store.get(key) is None

    @pytest.mark.asyncio
    async def test_keys_differ_by_language_and_model(self) -> None:
        store = InMemoryChunkProgressStore()
        progress = ModelChunkProgress(completed_chunks=1, total_chunks=2)
        await store.save(
            ModelChunkProgressKey(analysis_id="abc", language="en", model_id="m"), progress
        )

        assert (
            await store.get(
                ModelChunkProgressKey(analysis_id="abc", language="ja", model_id="m")
            )
            is None
        )
        assert (
            await store.get(
                ModelChunkProgressKey(analysis_id="abc", language="en", model_id="other")
            )
            is None
        )

    def test_clear(self) -> None:
        store = InMemoryChunkProgressStore()
        store._entries[
            ModelChunkProgressKey(analysis_id="abc", language="en", model_id="m")
        ] = ModelChunkProgress(completed_chunks=1, total_chunks=1)
        store.clear()
        assert len(store) == 0
