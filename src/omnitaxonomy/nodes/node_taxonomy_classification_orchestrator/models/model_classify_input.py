# SPDX-FileCopyrightText: 2025 OmniNode.ai Inc.
# SPDX-License-Identifier: MIT
"""Input model for TaxonomyClassificationOrchestrator."""

from __future__ import annotations

from pydantic import BaseModel, Field

from omnitaxonomy.enums import EnumLanguage
from omnitaxonomy.models.model_test_case import ModelFileGroup


class ModelClassifyInput(BaseModel):
    """Request to classify a repository's tests.

    Attributes:
        files: Discovered tests grouped by file; indices unique across files.
        language: Output language for names and descriptions.
        analysis_id: Identity of the analysis. Re-invoking with the same id,
            language and model resumes a failed run. When empty, a content
            hash of the input is used instead.
        timeout_seconds: Overall run deadline; None disables it.
    """

    model_config = {"frozen": True, "extra": "forbid"}

    files: tuple[ModelFileGroup, ...] = Field(description="Tests grouped by file")
    language: EnumLanguage = Field(default=EnumLanguage.EN, description="Output language")
    analysis_id: str = Field(default="", description="Analysis identity for resume")
    timeout_seconds: float | None = Field(
        default=None, gt=0.0, description="Overall run deadline in seconds"
    )


__all__ = ["ModelClassifyInput"]
