# SPDX-FileCopyrightText: 2025 OmniNode.ai Inc.
# SPDX-License-Identifier: MIT
"""
Shared enums for omnitaxonomy.

All enums used across nodes for consistency and type safety.
"""

from enum import Enum


class EnumLanguage(str, Enum):
    """Output language for generated domain and feature names."""
    EN = "en"
    JA = "ja"
    KO = "ko"


class EnumClassificationPhase(str, Enum):
    """Pipeline phase that owns a circuit breaker and retry policy."""
    CLASSIFICATION = "classification"
    CONVERSION = "conversion"


class EnumCircuitState(str, Enum):
    """Circuit breaker states."""
    CLOSED = "closed"
    OPEN = "open"
    HALF_OPEN = "half_open"


class EnumFinishReason(str, Enum):
    """Normalized completion state reported by the AI provider."""
    STOP = "stop"
    MAX_TOKENS = "max_tokens"
    CONTENT_FILTER = "content_filter"
    OTHER = "other"


class EnumIndexViolationType(str, Enum):
    """Structural problems found while validating a chunk's classification."""
    UNEXPECTED_INDEX = "unexpected_index"
    DUPLICATE_INDEX = "duplicate_index"
    MISSING_INDEX = "missing_index"
    BLANK_NAME = "blank_name"


class EnumQualityViolationType(str, Enum):
    """Quality problems found by the taxonomy post-processor."""
    ORPHANED_TEST = "orphaned_test"
    UNCATEGORIZED = "uncategorized"


class EnumRunStage(str, Enum):
    """Stages of one chunked classification run."""
    INIT = "init"
    ANCHOR_CHUNK = "anchor_chunk"
    WAVE_LOOP = "wave_loop"
    DONE = "done"
    FAILED = "failed"


__all__ = [
    "EnumCircuitState",
    "EnumClassificationPhase",
    "EnumFinishReason",
    "EnumIndexViolationType",
    "EnumLanguage",
    "EnumQualityViolationType",
    "EnumRunStage",
]
