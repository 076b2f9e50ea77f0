# SPDX-FileCopyrightText: 2025 OmniNode.ai Inc.
# SPDX-License-Identifier: MIT
"""Handler for TaxonomyMergeCompute: combine per-chunk taxonomies.

Merge rules:
  - Domains match by exact name and keep first-seen order.
  - Features of a matched domain are concatenated in input order; same-name
    features are coalesced later by the post-processor.
  - Domain confidence is the arithmetic mean over every occurrence.
  - Description is the first non-empty one seen.

Merging is a pure function of the ordered input, so feeding outputs in chunk
order always yields the same taxonomy regardless of completion order.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field

from omnitaxonomy.models.model_taxonomy import (
    ModelDomainGroup,
    ModelFeatureGroup,
    ModelTaxonomy,
)


@dataclass
class _DomainAccumulator:
    name: str
    description: str = ""
    confidence_sum: float = 0.0
    occurrences: int = 0
    features: list[ModelFeatureGroup] = field(default_factory=list)

    def add(self, domain: ModelDomainGroup) -> None:
        if not self.description and domain.description:
            self.description = domain.description
        self.confidence_sum += domain.confidence
        self.occurrences += 1
        self.features.extend(domain.features)

    def build(self) -> ModelDomainGroup:
        return ModelDomainGroup(
            name=self.name,
            description=self.description,
            confidence=self.confidence_sum / self.occurrences if self.occurrences else 0.0,
            features=tuple(self.features),
        )


def merge_taxonomies(outputs: Sequence[ModelTaxonomy]) -> ModelTaxonomy:
    """Merge taxonomies into one, matching domains by exact name.

    Args:
        outputs: Taxonomies in chunk order.

    Returns:
        The merged taxonomy; empty when ``outputs`` is empty.
    """
    accumulators: dict[str, _DomainAccumulator] = {}
    for output in outputs:
        for domain in output.domains:
            acc = accumulators.get(domain.name)
            if acc is None:
                acc = accumulators[domain.name] = _DomainAccumulator(name=domain.name)
            acc.add(domain)

    return ModelTaxonomy(domains=tuple(acc.build() for acc in accumulators.values()))


__all__ = ["merge_taxonomies"]
