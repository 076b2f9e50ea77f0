# SPDX-FileCopyrightText: 2025 OmniNode.ai Inc.
# SPDX-License-Identifier: MIT

"""Shared models for omnitaxonomy."""

from omnitaxonomy.models.model_chunk import ModelChunk
from omnitaxonomy.models.model_chunk_progress import (
    ModelChunkProgress,
    ModelChunkProgressKey,
)
from omnitaxonomy.models.model_provider_response import ModelProviderResponse
from omnitaxonomy.models.model_taxonomy import (
    ModelDomainGroup,
    ModelFeatureGroup,
    ModelTaxonomy,
)
from omnitaxonomy.models.model_test_case import (
    ModelDomainHints,
    ModelFileGroup,
    ModelTestCase,
)
from omnitaxonomy.models.model_token_usage import ModelTokenUsage

__all__ = [
    "ModelChunk",
    "ModelChunkProgress",
    "ModelChunkProgressKey",
    "ModelDomainGroup",
    "ModelDomainHints",
    "ModelFeatureGroup",
    "ModelFileGroup",
    "ModelProviderResponse",
    "ModelTaxonomy",
    "ModelTestCase",
    "ModelTokenUsage",
]
