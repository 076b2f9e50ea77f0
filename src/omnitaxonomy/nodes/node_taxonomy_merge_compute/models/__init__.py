# SPDX-FileCopyrightText: 2025 OmniNode.ai Inc.
# SPDX-License-Identifier: MIT
"""Models for node_taxonomy_merge_compute."""

from __future__ import annotations

from omnitaxonomy.nodes.node_taxonomy_merge_compute.models.model_validation_result import (
    ModelIndexViolation,
    ModelValidationResult,
)

__all__ = ["ModelIndexViolation", "ModelValidationResult"]
