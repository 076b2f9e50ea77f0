# SPDX-FileCopyrightText: 2025 OmniNode.ai Inc.
# SPDX-License-Identifier: MIT
"""Handlers for node_taxonomy_classification_orchestrator."""

from __future__ import annotations

from omnitaxonomy.nodes.node_taxonomy_classification_orchestrator.handlers.handler_chunk_classify import (
    handle_chunk_classify,
)
from omnitaxonomy.nodes.node_taxonomy_classification_orchestrator.handlers.handler_classification_orchestrate import (
    TaxonomyClassificationOrchestrator,
    compute_content_hash,
    handle_taxonomy_classification,
)
from omnitaxonomy.nodes.node_taxonomy_classification_orchestrator.handlers.prompt_taxonomy import (
    TAXONOMY_SYSTEM_PROMPT,
    build_taxonomy_user_prompt,
    parse_taxonomy_response,
)
from omnitaxonomy.nodes.node_taxonomy_classification_orchestrator.handlers.store_chunk_progress import (
    InMemoryChunkProgressStore,
    default_progress_store,
)

__all__ = [
    "TAXONOMY_SYSTEM_PROMPT",
    "InMemoryChunkProgressStore",
    "TaxonomyClassificationOrchestrator",
    "build_taxonomy_user_prompt",
    "compute_content_hash",
    "default_progress_store",
    "handle_chunk_classify",
    "handle_taxonomy_classification",
    "parse_taxonomy_response",
]
