# SPDX-FileCopyrightText: 2025 OmniNode.ai Inc.
# SPDX-License-Identifier: MIT
"""Result model for taxonomy index validation."""

from __future__ import annotations

from pydantic import BaseModel, Field

from omnitaxonomy.enums import EnumIndexViolationType
from omnitaxonomy.models.model_taxonomy import ModelTaxonomy


class ModelIndexViolation(BaseModel):
    """A structural problem found and repaired during validation.

    One violation is reported per offending feature (or per run for missing
    indices), listing every affected index.

    Attributes:
        violation_type: Kind of problem.
        indices: Affected test indices (chunk-local or global, matching input).
        domain: Domain where the problem was found, if any.
        feature: Feature where the problem was found, if any.
        message: Human-readable summary.
    """

    model_config = {"frozen": True, "extra": "ignore"}

    violation_type: EnumIndexViolationType = Field(description="Kind of problem")
    indices: tuple[int, ...] = Field(default=(), description="Affected indices")
    domain: str = Field(default="", description="Offending domain name")
    feature: str = Field(default="", description="Offending feature name")
    message: str = Field(default="", description="Summary")


class ModelValidationResult(BaseModel):
    """Repaired taxonomy plus the problems that were repaired.

    Attributes:
        taxonomy: Taxonomy where every expected index appears exactly once.
        violations: Problems found, in discovery order.
        missing_indices: Expected indices the input did not assign, sorted.
        unexpected_indices: Indices outside the expected set that were dropped.
        duplicate_indices: Indices assigned more than once; later copies dropped.
    """

    model_config = {"frozen": True, "extra": "ignore"}

    taxonomy: ModelTaxonomy = Field(description="Validated taxonomy")
    violations: tuple[ModelIndexViolation, ...] = Field(default=())
    missing_indices: tuple[int, ...] = Field(default=())
    unexpected_indices: tuple[int, ...] = Field(default=())
    duplicate_indices: tuple[int, ...] = Field(default=())

    @property
    def is_clean(self) -> bool:
        return not self.violations


__all__ = ["ModelIndexViolation", "ModelValidationResult"]
