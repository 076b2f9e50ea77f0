# SPDX-FileCopyrightText: 2025 OmniNode.ai Inc.
# SPDX-License-Identifier: MIT
"""Derive a domain and feature from a test file's directory.

Examples:

    src/auth/login.test.ts                  -> Auth / Core
    src/components/Button/Button.test.tsx   -> Components / Button
    packages/core/src/api/client.test.ts    -> Core / Api
    src/user-management/profile/x.test.ts   -> User Management / Profile
    login.test.ts                           -> Project Root / General Tests
"""

from __future__ import annotations

import posixpath
from collections.abc import Sequence

from omnitaxonomy.constants import (
    CORE_FEATURE_NAME,
    PATH_DERIVED_CONFIDENCE,
    PATH_DERIVED_DESCRIPTION,
    PROJECT_ROOT_DOMAIN_NAME,
    PROJECT_ROOT_FEATURE_NAME,
)
from omnitaxonomy.models.model_test_case import ModelTestCase
from omnitaxonomy.nodes.node_taxonomy_postprocess_compute.handlers.handler_domain_normalize import (
    is_catch_all,
)
from omnitaxonomy.nodes.node_taxonomy_postprocess_compute.models.model_test_assignment import (
    ModelTestAssignment,
)

# Directory names that carry no domain meaning
PATH_SKIP_SEGMENTS = frozenset(
    {"src", "test", "tests", "spec", "specs", "__tests__", "__test__", "lib", "packages"}
)


def _title_case(segment: str) -> str:
    words = segment.replace("-", " ").replace("_", " ").split()
    if not words:
        return "Unknown"
    return " ".join(word[:1].upper() + word[1:].lower() for word in words)


def derive_domain_from_path(file_path: str) -> tuple[str, str]:
    """Return ``(domain, feature)`` inferred from the file's directories."""
    clean = file_path.replace("\\", "/").lstrip("/")
    if clean.startswith("./"):
        clean = clean[2:]

    directory = posixpath.dirname(clean)
    parts = [p for p in directory.split("/") if p and p != "."]
    if not parts:
        return PROJECT_ROOT_DOMAIN_NAME, PROJECT_ROOT_FEATURE_NAME

    significant = [p for p in parts if p.lower() not in PATH_SKIP_SEGMENTS]

    if not significant:
        return _title_case(parts[-1]), CORE_FEATURE_NAME

    domain = _title_case(significant[0])
    feature = _title_case(significant[-1]) if len(significant) > 1 else CORE_FEATURE_NAME
    return domain, feature


def derive_classification_from_path(file_path: str) -> tuple[str, str]:
    """Like ``derive_domain_from_path`` but never returns a catch-all name.

    A directory literally named e.g. ``misc`` would otherwise reintroduce the
    bucket the post-processor is replacing.
    """
    domain, feature = derive_domain_from_path(file_path)
    if is_catch_all(domain, CORE_FEATURE_NAME):
        domain = PROJECT_ROOT_DOMAIN_NAME
    if is_catch_all(PROJECT_ROOT_DOMAIN_NAME, feature):
        feature = CORE_FEATURE_NAME
    return domain, feature


def create_domains_from_paths(
    tests: Sequence[ModelTestCase],
) -> list[ModelTestAssignment]:
    """Classify every test by its file path alone.

    Used when the AI classification produced nothing usable.
    """
    assignments = []
    for test in tests:
        domain, feature = derive_classification_from_path(test.file_path)
        assignments.append(
            ModelTestAssignment(
                test_index=test.index,
                file_path=test.file_path,
                domain=domain,
                domain_description=PATH_DERIVED_DESCRIPTION,
                domain_confidence=PATH_DERIVED_CONFIDENCE,
                feature=feature,
                feature_description=PATH_DERIVED_DESCRIPTION,
                feature_confidence=PATH_DERIVED_CONFIDENCE,
            )
        )
    return assignments


__all__ = [
    "PATH_SKIP_SEGMENTS",
    "create_domains_from_paths",
    "derive_classification_from_path",
    "derive_domain_from_path",
]
