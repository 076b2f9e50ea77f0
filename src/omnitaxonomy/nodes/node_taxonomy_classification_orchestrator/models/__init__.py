# SPDX-FileCopyrightText: 2025 OmniNode.ai Inc.
# SPDX-License-Identifier: MIT
"""Models for node_taxonomy_classification_orchestrator."""

from __future__ import annotations

from omnitaxonomy.nodes.node_taxonomy_classification_orchestrator.models.model_chunk_classify_result import (
    ModelChunkClassifyResult,
)
from omnitaxonomy.nodes.node_taxonomy_classification_orchestrator.models.model_classify_input import (
    ModelClassifyInput,
)
from omnitaxonomy.nodes.node_taxonomy_classification_orchestrator.models.model_classify_output import (
    ModelClassifyOutput,
)

__all__ = [
    "ModelChunkClassifyResult",
    "ModelClassifyInput",
    "ModelClassifyOutput",
]
