# SPDX-FileCopyrightText: 2025 OmniNode.ai Inc.
# SPDX-License-Identifier: MIT
"""Handler for classifying one chunk through the reliable provider caller.

Flow:
    1. Reindex the chunk to dense local indices ``0..N-1``.
    2. Build the system and user prompts (with anchors, when present).
    3. Call the provider; malformed JSON is retried by the caller.
    4. Validate the output against the local index set, repairing
       unexpected, duplicate and missing indices.
    5. Restore global indices.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import TYPE_CHECKING

from omnitaxonomy.enums import EnumLanguage
from omnitaxonomy.models.model_chunk import ModelChunk
from omnitaxonomy.models.model_taxonomy import ModelDomainGroup
from omnitaxonomy.nodes.node_chunk_partition_compute.handlers.handler_chunk_partition import (
    reindex_chunk,
    restore_indices,
)
from omnitaxonomy.nodes.node_taxonomy_classification_orchestrator.handlers.prompt_taxonomy import (
    TAXONOMY_SYSTEM_PROMPT,
    build_taxonomy_user_prompt,
    parse_taxonomy_response,
)
from omnitaxonomy.nodes.node_taxonomy_classification_orchestrator.models.model_chunk_classify_result import (
    ModelChunkClassifyResult,
)
from omnitaxonomy.nodes.node_taxonomy_merge_compute.handlers.handler_taxonomy_validate import (
    DEFAULT_MISSING_WARNING_THRESHOLD,
    validate_taxonomy,
)

if TYPE_CHECKING:
    from omnitaxonomy.reliability.caller import ReliableProviderCaller

logger = logging.getLogger(__name__)


async def handle_chunk_classify(
    chunk: ModelChunk,
    *,
    caller: ReliableProviderCaller,
    language: EnumLanguage,
    anchor_domains: Sequence[ModelDomainGroup] = (),
    missing_warning_threshold: float = DEFAULT_MISSING_WARNING_THRESHOLD,
) -> ModelChunkClassifyResult:
    """Classify a chunk and return its validated output in global index space.

    Args:
        chunk: Chunk in global index space.
        caller: Provider caller bound to the classification phase.
        language: Target language for names and descriptions.
        anchor_domains: Vocabulary accumulated from earlier chunks.
        missing_warning_threshold: Missing ratio that escalates the recovery
            log to WARNING.

    Raises:
        ProviderError: When the provider call fails terminally or retries
            are exhausted.
        CircuitOpenError: When the classification breaker is open.
    """
    local_chunk, index_map = reindex_chunk(chunk)
    user_prompt = build_taxonomy_user_prompt(
        local_chunk.files, language, anchors=anchor_domains
    )

    logger.info(
        "Classifying chunk %d (%d files, %d tests, %d anchors)",
        chunk.chunk_index,
        len(chunk.files),
        len(index_map),
        len(anchor_domains),
    )

    taxonomy, usage = await caller.call(
        TAXONOMY_SYSTEM_PROMPT, user_prompt, parse_taxonomy_response
    )

    validation = validate_taxonomy(
        taxonomy,
        range(len(index_map)),
        missing_warning_threshold=missing_warning_threshold,
    )
    if not validation.is_clean:
        logger.warning(
            "Chunk %d output repaired: %d missing, %d unexpected, %d duplicate indices",
            chunk.chunk_index,
            len(validation.missing_indices),
            len(validation.unexpected_indices),
            len(validation.duplicate_indices),
        )

    restored = restore_indices(validation.taxonomy, index_map)
    logger.info(
        "Chunk %d classified into %d domains",
        chunk.chunk_index,
        len(restored.domains),
    )
    return ModelChunkClassifyResult(
        chunk_index=chunk.chunk_index,
        taxonomy=restored,
        usage=usage,
        violations=validation.violations,
    )


__all__ = ["handle_chunk_classify"]
