# SPDX-FileCopyrightText: 2025 OmniNode.ai Inc.
# SPDX-License-Identifier: MIT
"""Models for node_taxonomy_postprocess_compute."""

from __future__ import annotations

from omnitaxonomy.nodes.node_taxonomy_postprocess_compute.models.model_postprocess import (
    ModelPostProcessConfig,
    ModelPostProcessResult,
    ModelQualityViolation,
)
from omnitaxonomy.nodes.node_taxonomy_postprocess_compute.models.model_test_assignment import (
    ModelTestAssignment,
)

__all__ = [
    "ModelPostProcessConfig",
    "ModelPostProcessResult",
    "ModelQualityViolation",
    "ModelTestAssignment",
]
