# SPDX-FileCopyrightText: 2025 OmniNode.ai Inc.
# SPDX-License-Identifier: MIT

"""Taxonomy models: domain -> feature -> test indices.

These models double as the provider response schema. The AI provider returns
``{"domains": [...]}`` JSON that validates directly into ``ModelTaxonomy``.
"""

from __future__ import annotations

from pydantic import BaseModel, Field


class ModelFeatureGroup(BaseModel):
    """A feature within a domain and the tests assigned to it."""

    model_config = {"frozen": True, "extra": "ignore"}

    name: str = Field(description="Feature name")
    description: str = Field(default="", description="Feature description")
    confidence: float = Field(default=0.0, description="Classifier confidence")
    test_indices: tuple[int, ...] = Field(
        default=(), description="Indices of tests in this feature"
    )


class ModelDomainGroup(BaseModel):
    """A business domain and its features."""

    model_config = {"frozen": True, "extra": "ignore"}

    name: str = Field(description="Domain name")
    description: str = Field(default="", description="Domain description")
    confidence: float = Field(default=0.0, description="Classifier confidence")
    features: tuple[ModelFeatureGroup, ...] = Field(
        default=(), description="Features in this domain"
    )

    def test_indices(self) -> list[int]:
        """Return every test index in this domain, in feature order."""
        return [idx for feature in self.features for idx in feature.test_indices]


class ModelTaxonomy(BaseModel):
    """Complete classification output for a set of tests.

    Attributes:
        domains: Domains in presentation order.
    """

    model_config = {"frozen": True, "extra": "ignore"}

    domains: tuple[ModelDomainGroup, ...] = Field(
        default=(), description="Classified domains"
    )

    def all_test_indices(self) -> list[int]:
        """Return every assigned test index, duplicates included."""
        return [idx for domain in self.domains for idx in domain.test_indices()]

    def domain_names(self) -> list[str]:
        return [domain.name for domain in self.domains]


__all__ = ["ModelDomainGroup", "ModelFeatureGroup", "ModelTaxonomy"]
