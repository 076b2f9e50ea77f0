# SPDX-FileCopyrightText: 2025 OmniNode.ai Inc.
# SPDX-License-Identifier: MIT
"""Result of classifying a single chunk."""

from __future__ import annotations

from pydantic import BaseModel, Field

from omnitaxonomy.models.model_taxonomy import ModelTaxonomy
from omnitaxonomy.models.model_token_usage import ModelTokenUsage
from omnitaxonomy.nodes.node_taxonomy_merge_compute.models.model_validation_result import (
    ModelIndexViolation,
)


class ModelChunkClassifyResult(BaseModel):
    """Validated chunk output in global index space.

    Attributes:
        chunk_index: Chunk position in the run.
        taxonomy: Output covering every test of the chunk exactly once.
        usage: Token usage of the chunk's provider calls, if reported.
        violations: Index problems repaired during validation (local indices).
    """

    model_config = {"frozen": True, "extra": "ignore"}

    chunk_index: int = Field(ge=0)
    taxonomy: ModelTaxonomy
    usage: ModelTokenUsage | None = Field(default=None)
    violations: tuple[ModelIndexViolation, ...] = Field(default=())


__all__ = ["ModelChunkClassifyResult"]
