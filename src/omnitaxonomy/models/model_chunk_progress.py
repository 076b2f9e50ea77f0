# SPDX-FileCopyrightText: 2025 OmniNode.ai Inc.
# SPDX-License-Identifier: MIT

"""Checkpoint models for resumable chunked classification."""

from __future__ import annotations

from pydantic import BaseModel, Field

from omnitaxonomy.models.model_taxonomy import ModelDomainGroup, ModelTaxonomy
from omnitaxonomy.models.model_token_usage import ModelTokenUsage


class ModelChunkProgressKey(BaseModel):
    """Identity of a classification run for checkpoint lookup.

    Two requests with the same content, language and model share a key, so a
    retried job resumes where the previous attempt stopped.
    """

    model_config = {"frozen": True, "extra": "forbid"}

    analysis_id: str = Field(description="Analysis id or input content hash")
    language: str = Field(description="Output language code")
    model_id: str = Field(description="Classification model id")

    def short(self) -> str:
        """Truncated key for log lines."""
        return f"{self.analysis_id[:8]}/{self.language}/{self.model_id}"


class ModelChunkProgress(BaseModel):
    """Checkpoint of a partially completed run.

    Attributes:
        completed_chunks: Number of leading chunks whose output is preserved.
            Chunks ``0..completed_chunks-1`` are never re-classified on resume.
        completed_outputs: Validated, globally indexed output per completed
            chunk, in chunk order.
        anchor_domains: Vocabulary passed to the next chunk's prompt.
        total_chunks: Chunk count at checkpoint time; a resume is only valid
            when re-partitioning yields the same count.
        total_usage: Token usage accumulated by completed chunks.
    """

    model_config = {"frozen": True, "extra": "ignore"}

    completed_chunks: int = Field(ge=0, description="Completed leading chunks")
    completed_outputs: tuple[ModelTaxonomy, ...] = Field(
        default=(), description="Per-chunk outputs in chunk order"
    )
    anchor_domains: tuple[ModelDomainGroup, ...] = Field(
        default=(), description="Anchor vocabulary for remaining chunks"
    )
    total_chunks: int = Field(ge=0, description="Chunk count of the run")
    total_usage: ModelTokenUsage = Field(
        default_factory=ModelTokenUsage, description="Accumulated usage"
    )


__all__ = ["ModelChunkProgress", "ModelChunkProgressKey"]
