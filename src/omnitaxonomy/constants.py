# SPDX-FileCopyrightText: 2025 OmniNode.ai Inc.
# SPDX-License-Identifier: MIT

"""
Shared Constants for OmniTaxonomy.

Usage:
    from omnitaxonomy.constants import UNCATEGORIZED_DOMAIN_NAME
"""

from typing import Final

# =============================================================================
# Sentinel (catch-all) classification
# =============================================================================

UNCATEGORIZED_DOMAIN_NAME: Final[str] = "Uncategorized"
"""Domain that receives test indices the provider failed to assign."""

UNCATEGORIZED_FEATURE_NAME: Final[str] = "Uncategorized Tests"
"""Feature under UNCATEGORIZED_DOMAIN_NAME holding recovered indices."""

UNCATEGORIZED_DESCRIPTION: Final[str] = "Tests that could not be classified by AI"

UNCATEGORIZED_CONFIDENCE: Final[float] = 0.5

CATCH_ALL_NAMES: Final[frozenset[str]] = frozenset(
    {
        "uncategorized",
        "uncategorized tests",
        "general",
        "other",
        "misc",
        "miscellaneous",
    }
)
"""
Folded domain/feature names treated as catch-all buckets.

None of these may survive the post-processor; they are replaced by a
path-derived domain and feature.
"""

# =============================================================================
# Path-derived classification
# =============================================================================

PATH_DERIVED_DESCRIPTION: Final[str] = "Derived from file path"

PATH_DERIVED_CONFIDENCE: Final[float] = 0.5

PROJECT_ROOT_DOMAIN_NAME: Final[str] = "Project Root"

PROJECT_ROOT_FEATURE_NAME: Final[str] = "General Tests"

CORE_FEATURE_NAME: Final[str] = "Core"

# =============================================================================
# Provider decoding
# =============================================================================

DEFAULT_CLASSIFICATION_MODEL: Final[str] = "gemini-2.5-flash"

DEFAULT_CONVERSION_MODEL: Final[str] = "gemini-2.5-flash-lite"

DEFAULT_SEED: Final[int] = 42
"""Fixed sampling seed so identical prompts yield identical classifications."""

MAX_OUTPUT_TOKENS: Final[int] = 65_536
"""
Upper bound on generated tokens per call.

Large chunks emit thousands of test indices; responses that hit this limit
are reported as truncated rather than retried.
"""

LOG_RESPONSE_PREVIEW_CHARS: Final[int] = 500

# =============================================================================
# Chunking
# =============================================================================

DEFAULT_MAX_TESTS_PER_CHUNK: Final[int] = 10_000

DEFAULT_MAX_TOKENS_PER_CHUNK: Final[int] = 500_000

BASE_PROMPT_TOKENS: Final[int] = 2000
"""Fixed prompt overhead (instructions and schema) per provider call."""

TOKENS_PER_FILE: Final[int] = 50

TOKENS_PER_TEST: Final[int] = 40


__all__ = [
    "BASE_PROMPT_TOKENS",
    "CATCH_ALL_NAMES",
    "CORE_FEATURE_NAME",
    "DEFAULT_CLASSIFICATION_MODEL",
    "DEFAULT_CONVERSION_MODEL",
    "DEFAULT_MAX_TESTS_PER_CHUNK",
    "DEFAULT_MAX_TOKENS_PER_CHUNK",
    "DEFAULT_SEED",
    "LOG_RESPONSE_PREVIEW_CHARS",
    "MAX_OUTPUT_TOKENS",
    "PATH_DERIVED_CONFIDENCE",
    "PATH_DERIVED_DESCRIPTION",
    "PROJECT_ROOT_DOMAIN_NAME",
    "PROJECT_ROOT_FEATURE_NAME",
    "TOKENS_PER_FILE",
    "TOKENS_PER_TEST",
    "UNCATEGORIZED_CONFIDENCE",
    "UNCATEGORIZED_DESCRIPTION",
    "UNCATEGORIZED_DOMAIN_NAME",
    "UNCATEGORIZED_FEATURE_NAME",
]
