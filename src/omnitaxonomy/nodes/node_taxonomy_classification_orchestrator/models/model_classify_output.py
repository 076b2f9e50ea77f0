# SPDX-FileCopyrightText: 2025 OmniNode.ai Inc.
# SPDX-License-Identifier: MIT
"""Output model for TaxonomyClassificationOrchestrator."""

from __future__ import annotations

from pydantic import BaseModel, Field

from omnitaxonomy.models.model_taxonomy import ModelTaxonomy
from omnitaxonomy.models.model_token_usage import ModelTokenUsage
from omnitaxonomy.nodes.node_taxonomy_merge_compute.models.model_validation_result import (
    ModelIndexViolation,
)
from omnitaxonomy.nodes.node_taxonomy_postprocess_compute.models.model_postprocess import (
    ModelQualityViolation,
)


class ModelClassifyOutput(BaseModel):
    """Result of a successful classification run.

    Attributes:
        taxonomy: Final taxonomy; covers every input test exactly once and
            contains no catch-all names.
        usage: Token usage of every chunk, including chunks completed by an
            earlier attempt of a resumed run.
        total_chunks: Number of chunks the input was split into.
        resumed_from_chunk: First chunk classified by this invocation
            (0 for a fresh run).
        violations: Quality violations repaired by the post-processor.
        index_violations: Index problems repaired while validating chunks
            classified by this invocation.
    """

    model_config = {"frozen": True, "extra": "ignore"}

    taxonomy: ModelTaxonomy = Field(description="Final taxonomy")
    usage: ModelTokenUsage = Field(description="Accumulated token usage")
    total_chunks: int = Field(ge=0, description="Chunk count")
    resumed_from_chunk: int = Field(default=0, ge=0, description="Resume position")
    violations: tuple[ModelQualityViolation, ...] = Field(default=())
    index_violations: tuple[ModelIndexViolation, ...] = Field(default=())


__all__ = ["ModelClassifyOutput"]
