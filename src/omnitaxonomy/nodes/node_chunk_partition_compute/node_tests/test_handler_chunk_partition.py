# SPDX-FileCopyrightText: 2025 OmniNode.ai Inc.
# SPDX-License-Identifier: MIT
"""Unit tests for handler_chunk_partition.

Test coverage:
    - Token estimation and chunking thresholds
    - Single-chunk fast path and empty input
    - Greedy partitioning never splits a file
    - Oversized single files become their own chunk
    - Reindex/restore bijection and untouched unmapped indices
"""

from __future__ import annotations

import pytest

from omnitaxonomy.models.model_chunk import ModelChunk
from omnitaxonomy.models.model_taxonomy import (
    ModelDomainGroup,
    ModelFeatureGroup,
    ModelTaxonomy,
)
from omnitaxonomy.models.model_test_case import ModelFileGroup, ModelTestCase
from omnitaxonomy.nodes.node_chunk_partition_compute.handlers.handler_chunk_partition import (
    count_tests,
    estimate_tokens,
    needs_chunking,
    partition_files,
    reindex_chunk,
    restore_indices,
)
from omnitaxonomy.nodes.node_chunk_partition_compute.models.model_chunk_config import (
    ModelChunkConfig,
)

pytestmark = pytest.mark.unit

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _make_files(file_count: int, tests_per_file: int) -> list[ModelFileGroup]:
    files = []
    next_index = 0
    for f in range(file_count):
        path = f"src/module_{f}/feature.test.ts"
        tests = []
        for t in range(tests_per_file):
            tests.append(
                ModelTestCase(index=next_index, name=f"test {t}", file_path=path)
            )
            next_index += 1
        files.append(ModelFileGroup(path=path, tests=tuple(tests), framework="jest"))
    return files


def _file_paths(chunks: list[ModelChunk]) -> list[list[str]]:
    return [[f.path for f in chunk.files] for chunk in chunks]


# ---------------------------------------------------------------------------
# Estimation
# ---------------------------------------------------------------------------


class TestEstimation:
    def test_estimate_tokens_uses_fixed_costs(self) -> None:
        files = _make_files(3, 10)
        assert estimate_tokens(files) == 2000 + 3 * 50 + 30 * 40

    def test_estimate_tokens_empty(self) -> None:
        assert estimate_tokens([]) == 2000

    def test_count_tests(self) -> None:
        assert count_tests(_make_files(4, 7)) == 28

    def test_needs_chunking_on_test_count(self) -> None:
        config = ModelChunkConfig(max_tests_per_chunk=20)
        assert needs_chunking(_make_files(3, 7), config)
        assert not needs_chunking(_make_files(2, 10), config)

    def test_needs_chunking_on_tokens(self) -> None:
        config = ModelChunkConfig(max_tokens_per_chunk=2500)
        # 2000 + 2*50 + 20*40 = 2900
        assert needs_chunking(_make_files(2, 10), config)

    def test_chunk_estimated_tokens_property(self) -> None:
        files = _make_files(2, 5)
        chunk = ModelChunk(chunk_index=0, files=tuple(files))
        assert chunk.test_count == 10
        assert chunk.estimated_tokens == estimate_tokens(files)


# ---------------------------------------------------------------------------
# Partitioning
# ---------------------------------------------------------------------------


class TestPartitionFiles:
    def test_empty_input_returns_no_chunks(self) -> None:
        assert partition_files([]) == []

    def test_below_threshold_returns_single_chunk(self) -> None:
        files = _make_files(5, 10)
        chunks = partition_files(files)

        assert len(chunks) == 1
        assert chunks[0].chunk_index == 0
        assert list(chunks[0].files) == files

    def test_three_hundred_tests_with_limit_250_yields_two_chunks(self) -> None:
        files = _make_files(10, 30)
        chunks = partition_files(files, ModelChunkConfig(max_tests_per_chunk=250))

        assert len(chunks) == 2
        assert [c.test_count for c in chunks] == [240, 60]
        assert [c.chunk_index for c in chunks] == [0, 1]

    def test_no_file_is_split(self) -> None:
        files = _make_files(17, 13)
        chunks = partition_files(files, ModelChunkConfig(max_tests_per_chunk=40))

        flattened = [path for paths in _file_paths(chunks) for path in paths]
        assert flattened == [f.path for f in files]
        for chunk in chunks:
            for file_group in chunk.files:
                original = next(f for f in files if f.path == file_group.path)
                assert file_group.tests == original.tests

    def test_chunks_respect_threshold_when_files_fit(self) -> None:
        chunks = partition_files(
            _make_files(20, 9), ModelChunkConfig(max_tests_per_chunk=30)
        )
        assert all(chunk.test_count <= 30 for chunk in chunks)

    def test_oversized_file_becomes_own_chunk(self) -> None:
        small = _make_files(1, 5)
        big = ModelFileGroup(
            path="src/huge/huge.test.ts",
            tests=tuple(
                ModelTestCase(index=100 + i, name=f"huge {i}") for i in range(50)
            ),
        )
        files = [small[0], big, *_make_files(1, 5)]
        chunks = partition_files(files, ModelChunkConfig(max_tests_per_chunk=20))

        assert _file_paths(chunks) == [
            ["src/module_0/feature.test.ts"],
            ["src/huge/huge.test.ts"],
            ["src/module_0/feature.test.ts"],
        ]
        assert chunks[1].test_count == 50

    def test_token_threshold_splits(self) -> None:
        # each file costs 50 + 10*40 = 450 tokens on top of the 2000 base
        config = ModelChunkConfig(max_tokens_per_chunk=3000)
        chunks = partition_files(_make_files(4, 10), config)

        assert [len(c.files) for c in chunks] == [2, 2]


# ---------------------------------------------------------------------------
# Index remapping
# ---------------------------------------------------------------------------


class TestReindex:
    def test_reindex_is_dense_in_file_then_test_order(self) -> None:
        files = _make_files(3, 4)
        chunks = partition_files(files, ModelChunkConfig(max_tests_per_chunk=8))
        second = chunks[1]

        local, index_map = reindex_chunk(second)

        local_indices = [t.index for f in local.files for t in f.tests]
        assert local_indices == list(range(second.test_count))
        assert index_map == {0: 8, 1: 9, 2: 10, 3: 11}
        assert local.chunk_index == second.chunk_index

    def test_reindex_preserves_test_metadata(self) -> None:
        chunk = ModelChunk(chunk_index=0, files=tuple(_make_files(1, 2)))
        local, _ = reindex_chunk(chunk)

        assert [t.name for t in local.files[0].tests] == ["test 0", "test 1"]
        assert local.files[0].framework == "jest"

    def test_restore_recovers_global_indices(self) -> None:
        files = _make_files(6, 5)
        for chunk in partition_files(files, ModelChunkConfig(max_tests_per_chunk=10)):
            local, index_map = reindex_chunk(chunk)
            local_taxonomy = ModelTaxonomy(
                domains=(
                    ModelDomainGroup(
                        name="Billing",
                        features=(
                            ModelFeatureGroup(
                                name="Invoices",
                                test_indices=tuple(
                                    t.index for f in local.files for t in f.tests
                                ),
                            ),
                        ),
                    ),
                )
            )

            restored = restore_indices(local_taxonomy, index_map)

            expected = [t.index for f in chunk.files for t in f.tests]
            assert restored.all_test_indices() == expected

    def test_restore_leaves_unmapped_indices_untouched(self) -> None:
        taxonomy = ModelTaxonomy(
            domains=(
                ModelDomainGroup(
                    name="Auth",
                    confidence=0.9,
                    features=(
                        ModelFeatureGroup(
                            name="Login", confidence=0.8, test_indices=(0, 1, 42)
                        ),
                    ),
                ),
            )
        )

        restored = restore_indices(taxonomy, {0: 100, 1: 101})

        assert restored.all_test_indices() == [100, 101, 42]
        assert restored.domains[0].confidence == 0.9
        assert restored.domains[0].features[0].name == "Login"
