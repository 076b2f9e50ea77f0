# SPDX-FileCopyrightText: 2025 OmniNode.ai Inc.
# SPDX-License-Identifier: MIT
"""Configuration and result models for the taxonomy post-processor."""

from __future__ import annotations

from pydantic import BaseModel, Field

from omnitaxonomy.enums import EnumQualityViolationType
from omnitaxonomy.models.model_taxonomy import ModelTaxonomy


class ModelPostProcessConfig(BaseModel):
    """Post-processor behavior.

    Attributes:
        prohibit_uncategorized: Report catch-all assignments as violations.
            Catch-alls are replaced either way.
    """

    model_config = {"frozen": True, "extra": "forbid"}

    prohibit_uncategorized: bool = Field(
        default=True, description="Report catch-all assignments as violations"
    )


class ModelQualityViolation(BaseModel):
    """A quality problem found (and repaired) by the post-processor."""

    model_config = {"frozen": True, "extra": "ignore"}

    violation_type: EnumQualityViolationType
    test_index: int | None = Field(default=None, description="Affected test")
    details: str = Field(default="", description="Human-readable description")


class ModelPostProcessResult(BaseModel):
    """Final taxonomy plus the violations that were repaired."""

    model_config = {"frozen": True, "extra": "ignore"}

    taxonomy: ModelTaxonomy
    violations: tuple[ModelQualityViolation, ...] = Field(default=())


__all__ = [
    "ModelPostProcessConfig",
    "ModelPostProcessResult",
    "ModelQualityViolation",
]
