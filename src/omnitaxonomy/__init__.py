# SPDX-FileCopyrightText: 2025 OmniNode.ai Inc.
# SPDX-License-Identifier: MIT

"""OmniTaxonomy - chunked, resumable AI classification of test suites.

Turns the flat list of tests discovered in a repository into a business
taxonomy (domain -> feature -> test) by classifying size-bounded chunks
through an external LLM, merging the partial results, and running a quality
gate that guarantees every test is classified exactly once.

Quick Start:
    >>> from omnitaxonomy import TaxonomyClassificationOrchestrator
    >>> orchestrator = TaxonomyClassificationOrchestrator(provider)
    >>> taxonomy, usage = await orchestrator.classify(
    ...     files, language="en", analysis_id="a1b2c3"
    ... )
"""

from omnitaxonomy.errors import (
    ChunkClassificationError,
    CircuitOpenError,
    InvalidClassificationInputError,
    ProviderContentBlockedError,
    ProviderError,
    ProviderOutputTruncatedError,
    ProviderRateLimitedError,
    ProviderRequestError,
    ProviderResponseParseError,
    ProviderTransientError,
    TaxonomyClassificationError,
)
from omnitaxonomy.models import (
    ModelDomainGroup,
    ModelFeatureGroup,
    ModelFileGroup,
    ModelTaxonomy,
    ModelTestCase,
    ModelTokenUsage,
)
from omnitaxonomy.nodes.node_taxonomy_classification_orchestrator.handlers.handler_classification_orchestrate import (
    TaxonomyClassificationOrchestrator,
    handle_taxonomy_classification,
)

__version__ = "0.3.0"

__all__ = [
    "ChunkClassificationError",
    "CircuitOpenError",
    "InvalidClassificationInputError",
    "ModelDomainGroup",
    "ModelFeatureGroup",
    "ModelFileGroup",
    "ModelTaxonomy",
    "ModelTestCase",
    "ModelTokenUsage",
    "ProviderContentBlockedError",
    "ProviderError",
    "ProviderOutputTruncatedError",
    "ProviderRateLimitedError",
    "ProviderRequestError",
    "ProviderResponseParseError",
    "ProviderTransientError",
    "TaxonomyClassificationError",
    "TaxonomyClassificationOrchestrator",
    "handle_taxonomy_classification",
]
