# SPDX-FileCopyrightText: 2025 OmniNode.ai Inc.
# SPDX-License-Identifier: MIT
"""Handler for taxonomy index validation: every expected index exactly once.

Repairs, applied in taxonomy order:

  - Assignments under a blank domain or feature name are dropped.
  - Indices outside the expected set are dropped.
  - Repeated indices keep their first occurrence only.
  - Features left without indices (and domains left without features) are
    removed.
  - Expected indices that nothing covers are appended to the sentinel
    ``Uncategorized`` / ``Uncategorized Tests`` feature, which is created or
    extended.

Validation never raises on structural problems. Each repair is reported as a
``ModelIndexViolation`` and logged at WARNING, except the missing-index
summary, which is logged at INFO while the missing ratio stays within
``missing_warning_threshold``.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable

from omnitaxonomy.constants import (
    UNCATEGORIZED_CONFIDENCE,
    UNCATEGORIZED_DESCRIPTION,
    UNCATEGORIZED_DOMAIN_NAME,
    UNCATEGORIZED_FEATURE_NAME,
)
from omnitaxonomy.enums import EnumIndexViolationType
from omnitaxonomy.models.model_taxonomy import (
    ModelDomainGroup,
    ModelFeatureGroup,
    ModelTaxonomy,
)
from omnitaxonomy.nodes.node_taxonomy_merge_compute.models.model_validation_result import (
    ModelIndexViolation,
    ModelValidationResult,
)

logger = logging.getLogger(__name__)

DEFAULT_MISSING_WARNING_THRESHOLD = 0.05


def validate_taxonomy(
    taxonomy: ModelTaxonomy,
    expected_indices: Iterable[int],
    *,
    missing_warning_threshold: float = DEFAULT_MISSING_WARNING_THRESHOLD,
) -> ModelValidationResult:
    """Repair ``taxonomy`` so it covers ``expected_indices`` exactly once.

    Args:
        taxonomy: Provider output (in chunk-local or global index space).
        expected_indices: Indices the taxonomy must cover, in the same space.
        missing_warning_threshold: Missing ratio above which the missing
            summary is logged at WARNING instead of INFO.

    Returns:
        The repaired taxonomy and the list of repairs.
    """
    expected = set(expected_indices)
    seen: set[int] = set()
    violations: list[ModelIndexViolation] = []
    unexpected_all: list[int] = []
    duplicate_all: list[int] = []

    domains: list[ModelDomainGroup] = []
    for domain in taxonomy.domains:
        domain_name = domain.name.strip()
        if not domain_name:
            dropped = tuple(domain.test_indices())
            violations.append(
                _blank_name_violation(dropped, domain="", feature="")
            )
            continue

        features: list[ModelFeatureGroup] = []
        for feature in domain.features:
            feature_name = feature.name.strip()
            if not feature_name:
                violations.append(
                    _blank_name_violation(
                        feature.test_indices, domain=domain.name, feature=""
                    )
                )
                continue

            kept: list[int] = []
            unexpected: list[int] = []
            duplicates: list[int] = []
            for idx in feature.test_indices:
                if idx not in expected:
                    unexpected.append(idx)
                elif idx in seen:
                    duplicates.append(idx)
                else:
                    seen.add(idx)
                    kept.append(idx)

            if unexpected:
                unexpected_all.extend(unexpected)
                logger.warning(
                    "Dropping %d unexpected test indices from %s / %s: %s",
                    len(unexpected),
                    domain.name,
                    feature.name,
                    unexpected[:20],
                )
                violations.append(
                    ModelIndexViolation(
                        violation_type=EnumIndexViolationType.UNEXPECTED_INDEX,
                        indices=tuple(unexpected),
                        domain=domain.name,
                        feature=feature.name,
                        message=f"{len(unexpected)} indices outside the expected set",
                    )
                )
            if duplicates:
                duplicate_all.extend(duplicates)
                logger.warning(
                    "Dropping %d duplicate test indices from %s / %s: %s",
                    len(duplicates),
                    domain.name,
                    feature.name,
                    duplicates[:20],
                )
                violations.append(
                    ModelIndexViolation(
                        violation_type=EnumIndexViolationType.DUPLICATE_INDEX,
                        indices=tuple(duplicates),
                        domain=domain.name,
                        feature=feature.name,
                        message=f"{len(duplicates)} indices already assigned",
                    )
                )

            if kept:
                features.append(
                    feature.model_copy(update={"test_indices": tuple(kept)})
                )

        if features:
            domains.append(domain.model_copy(update={"features": tuple(features)}))

    missing = sorted(expected - seen)
    if missing:
        domains = _append_uncategorized(domains, missing)
        violations.append(
            ModelIndexViolation(
                violation_type=EnumIndexViolationType.MISSING_INDEX,
                indices=tuple(missing),
                domain=UNCATEGORIZED_DOMAIN_NAME,
                feature=UNCATEGORIZED_FEATURE_NAME,
                message=f"{len(missing)} of {len(expected)} tests were not classified",
            )
        )
        ratio = len(missing) / len(expected)
        level = logging.WARNING if ratio > missing_warning_threshold else logging.INFO
        logger.log(
            level,
            "Recovered %d unclassified tests of %d (%.1f%%) into %s",
            len(missing),
            len(expected),
            ratio * 100,
            UNCATEGORIZED_DOMAIN_NAME,
        )

    return ModelValidationResult(
        taxonomy=ModelTaxonomy(domains=tuple(domains)),
        violations=tuple(violations),
        missing_indices=tuple(missing),
        unexpected_indices=tuple(unexpected_all),
        duplicate_indices=tuple(duplicate_all),
    )


def _blank_name_violation(
    indices: Iterable[int], *, domain: str, feature: str
) -> ModelIndexViolation:
    dropped = tuple(indices)
    logger.warning(
        "Dropping %d test indices assigned to a blank %s name",
        len(dropped),
        "feature" if domain else "domain",
    )
    return ModelIndexViolation(
        violation_type=EnumIndexViolationType.BLANK_NAME,
        indices=dropped,
        domain=domain,
        feature=feature,
        message="Blank domain or feature name",
    )


def _append_uncategorized(
    domains: list[ModelDomainGroup], missing: list[int]
) -> list[ModelDomainGroup]:
    sentinel_feature = ModelFeatureGroup(
        name=UNCATEGORIZED_FEATURE_NAME,
        description=UNCATEGORIZED_DESCRIPTION,
        confidence=UNCATEGORIZED_CONFIDENCE,
        test_indices=tuple(missing),
    )

    for pos, domain in enumerate(domains):
        if domain.name != UNCATEGORIZED_DOMAIN_NAME:
            continue
        features = list(domain.features)
        for fpos, feature in enumerate(features):
            if feature.name == UNCATEGORIZED_FEATURE_NAME:
                features[fpos] = feature.model_copy(
                    update={"test_indices": (*feature.test_indices, *missing)}
                )
                break
        else:
            features.append(sentinel_feature)
        domains[pos] = domain.model_copy(update={"features": tuple(features)})
        return domains

    domains.append(
        ModelDomainGroup(
            name=UNCATEGORIZED_DOMAIN_NAME,
            description=UNCATEGORIZED_DESCRIPTION,
            confidence=UNCATEGORIZED_CONFIDENCE,
            features=(sentinel_feature,),
        )
    )
    return domains


__all__ = ["DEFAULT_MISSING_WARNING_THRESHOLD", "validate_taxonomy"]
