# SPDX-FileCopyrightText: 2025 OmniNode.ai Inc.
# SPDX-License-Identifier: MIT
"""Handler for ChunkPartitionCompute: split files into size-bounded chunks.

Partitioning rules:

  - Below both thresholds the whole input is a single chunk.
  - Otherwise files are accumulated greedily in input order. A chunk is
    closed when adding the next file would exceed either threshold and the
    chunk already holds at least one file.
  - A file is never split. A single file larger than a threshold becomes its
    own oversized chunk.

Index remapping:

  Each chunk is sent to the provider with dense local indices ``0..N-1`` so
  the prompt never leaks global positions. ``reindex_chunk`` returns the
  local -> global map and ``restore_indices`` applies it to the provider's
  output. ``restore_indices(reindex_chunk(c))`` recovers the exact global
  indices of ``c``.

All functions are pure and perform no I/O.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence

from omnitaxonomy.models.model_chunk import ModelChunk
from omnitaxonomy.models.model_taxonomy import (
    ModelDomainGroup,
    ModelFeatureGroup,
    ModelTaxonomy,
)
from omnitaxonomy.models.model_test_case import ModelFileGroup
from omnitaxonomy.nodes.node_chunk_partition_compute.models.model_chunk_config import (
    ModelChunkConfig,
)

logger = logging.getLogger(__name__)

_DEFAULT_CONFIG = ModelChunkConfig()


def count_tests(files: Sequence[ModelFileGroup]) -> int:
    return sum(len(f.tests) for f in files)


def estimate_tokens(
    files: Sequence[ModelFileGroup], config: ModelChunkConfig = _DEFAULT_CONFIG
) -> int:
    """Estimate prompt tokens for classifying ``files`` in one call."""
    return config.base_prompt_tokens + sum(
        config.tokens_per_file + config.tokens_per_test * len(f.tests) for f in files
    )


def needs_chunking(
    files: Sequence[ModelFileGroup], config: ModelChunkConfig = _DEFAULT_CONFIG
) -> bool:
    """Return True when the input exceeds either chunk threshold."""
    return (
        count_tests(files) > config.max_tests_per_chunk
        or estimate_tokens(files, config) > config.max_tokens_per_chunk
    )


def partition_files(
    files: Sequence[ModelFileGroup], config: ModelChunkConfig = _DEFAULT_CONFIG
) -> list[ModelChunk]:
    """Split files into ordered chunks without splitting any file.

    Args:
        files: Input files in order.
        config: Chunk thresholds.

    Returns:
        Chunks with ``chunk_index`` 0..n-1. Empty input yields ``[]``.
    """
    if not files:
        return []

    if not needs_chunking(files, config):
        return [ModelChunk(chunk_index=0, files=tuple(files))]

    groups: list[list[ModelFileGroup]] = []
    current: list[ModelFileGroup] = []
    current_tests = 0
    current_tokens = config.base_prompt_tokens

    for file_group in files:
        file_tests = len(file_group.tests)
        file_tokens = config.tokens_per_file + config.tokens_per_test * file_tests

        exceeds = (
            current_tests + file_tests > config.max_tests_per_chunk
            or current_tokens + file_tokens > config.max_tokens_per_chunk
        )
        if exceeds and current:
            groups.append(current)
            current = []
            current_tests = 0
            current_tokens = config.base_prompt_tokens

        current.append(file_group)
        current_tests += file_tests
        current_tokens += file_tokens

    if current:
        groups.append(current)

    chunks = [
        ModelChunk(chunk_index=i, files=tuple(group)) for i, group in enumerate(groups)
    ]
    logger.info(
        "Partitioned %d files (%d tests) into %d chunks",
        len(files),
        count_tests(files),
        len(chunks),
    )
    return chunks


def reindex_chunk(chunk: ModelChunk) -> tuple[ModelChunk, dict[int, int]]:
    """Renumber a chunk's tests densely from 0 in file-then-test order.

    Returns:
        The reindexed chunk and the ``local -> global`` index map.
    """
    index_map: dict[int, int] = {}
    local_files: list[ModelFileGroup] = []
    local_index = 0

    for file_group in chunk.files:
        local_tests = []
        for test in file_group.tests:
            index_map[local_index] = test.index
            local_tests.append(test.model_copy(update={"index": local_index}))
            local_index += 1
        local_files.append(file_group.model_copy(update={"tests": tuple(local_tests)}))

    return chunk.model_copy(update={"files": tuple(local_files)}), index_map


def restore_indices(
    taxonomy: ModelTaxonomy, index_map: Mapping[int, int]
) -> ModelTaxonomy:
    """Map local test indices back to global ones.

    Indices absent from ``index_map`` are left unchanged.
    """
    domains = []
    for domain in taxonomy.domains:
        features = tuple(
            ModelFeatureGroup(
                name=feature.name,
                description=feature.description,
                confidence=feature.confidence,
                test_indices=tuple(index_map.get(i, i) for i in feature.test_indices),
            )
            for feature in domain.features
        )
        domains.append(
            ModelDomainGroup(
                name=domain.name,
                description=domain.description,
                confidence=domain.confidence,
                features=features,
            )
        )
    return ModelTaxonomy(domains=tuple(domains))


__all__ = [
    "count_tests",
    "estimate_tokens",
    "needs_chunking",
    "partition_files",
    "reindex_chunk",
    "restore_indices",
]
