# SPDX-FileCopyrightText: 2025 OmniNode.ai Inc.
# SPDX-License-Identifier: MIT
"""Per-test view of a taxonomy used by the post-processor."""

from __future__ import annotations

from pydantic import BaseModel, Field


class ModelTestAssignment(BaseModel):
    """One test's domain and feature, flattened out of a taxonomy.

    The post-processor rewrites assignments one test at a time and then
    reassembles them into a taxonomy.

    Attributes:
        test_index: Global test index.
        file_path: Path of the file containing the test.
        domain: Assigned domain name.
        domain_description: Description of the source domain.
        domain_confidence: Confidence of the source domain.
        feature: Assigned feature name.
        feature_description: Description of the source feature.
        feature_confidence: Confidence of the source feature.
        source_domain_id: Position of the source domain group, or -1 when the
            assignment was synthesized. Used to average confidence once per
            source group rather than once per test.
        source_feature_id: Position of the source feature group, or -1.
        orphaned: True when the test had no assignment in the taxonomy.
    """

    model_config = {"frozen": True, "extra": "ignore"}

    test_index: int = Field(ge=0, description="Global test index")
    file_path: str = Field(default="", description="Containing file path")
    domain: str = Field(description="Domain name")
    domain_description: str = Field(default="")
    domain_confidence: float = Field(default=0.0)
    feature: str = Field(description="Feature name")
    feature_description: str = Field(default="")
    feature_confidence: float = Field(default=0.0)
    source_domain_id: int = Field(default=-1)
    source_feature_id: int = Field(default=-1)
    orphaned: bool = Field(default=False)


__all__ = ["ModelTestAssignment"]
