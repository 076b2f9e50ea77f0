# SPDX-FileCopyrightText: 2025 OmniNode.ai Inc.
# SPDX-License-Identifier: MIT
"""Handler for TaxonomyPostProcessCompute: the terminal quality gate.

Processing steps, applied to the flattened per-test assignments:

  1. Catch-all detection. Assignments whose domain or feature is a catch-all
     bucket ("Uncategorized", "General", "Other", "Misc", ...) are reported
     as UNCATEGORIZED violations when ``prohibit_uncategorized`` is set.
  2. Orphan detection. Tests with no assignment are reported as
     ORPHANED_TEST violations and given a sentinel assignment.
  3. Domain normalization. Similar domain names are renamed to one
     canonical spelling (see handler_domain_normalize).
  4. Catch-all replacement. Every remaining catch-all assignment is replaced
     by a domain and feature derived from the test's file path.

After step 4 no test is unassigned and no catch-all name remains.
Violations describe what was repaired; they never block the result.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field

from omnitaxonomy.constants import (
    PATH_DERIVED_CONFIDENCE,
    PATH_DERIVED_DESCRIPTION,
    UNCATEGORIZED_CONFIDENCE,
    UNCATEGORIZED_DESCRIPTION,
    UNCATEGORIZED_DOMAIN_NAME,
    UNCATEGORIZED_FEATURE_NAME,
)
from omnitaxonomy.enums import EnumQualityViolationType
from omnitaxonomy.models.model_taxonomy import (
    ModelDomainGroup,
    ModelFeatureGroup,
    ModelTaxonomy,
)
from omnitaxonomy.models.model_test_case import ModelFileGroup, ModelTestCase
from omnitaxonomy.nodes.node_taxonomy_postprocess_compute.handlers.handler_domain_normalize import (
    build_domain_normalization_map,
    is_catch_all,
)
from omnitaxonomy.nodes.node_taxonomy_postprocess_compute.handlers.handler_path_derivation import (
    create_domains_from_paths,
    derive_classification_from_path,
)
from omnitaxonomy.nodes.node_taxonomy_postprocess_compute.models.model_postprocess import (
    ModelPostProcessConfig,
    ModelPostProcessResult,
    ModelQualityViolation,
)
from omnitaxonomy.nodes.node_taxonomy_postprocess_compute.models.model_test_assignment import (
    ModelTestAssignment,
)

logger = logging.getLogger(__name__)


def _sentinel_assignment(test: ModelTestCase) -> ModelTestAssignment:
    return ModelTestAssignment(
        test_index=test.index,
        file_path=test.file_path,
        domain=UNCATEGORIZED_DOMAIN_NAME,
        domain_description=UNCATEGORIZED_DESCRIPTION,
        domain_confidence=UNCATEGORIZED_CONFIDENCE,
        feature=UNCATEGORIZED_FEATURE_NAME,
        feature_description=UNCATEGORIZED_DESCRIPTION,
        feature_confidence=UNCATEGORIZED_CONFIDENCE,
        orphaned=True,
    )


def flatten_taxonomy(
    taxonomy: ModelTaxonomy, tests: Sequence[ModelTestCase]
) -> list[ModelTestAssignment]:
    """Expand a taxonomy into one assignment per test, in taxonomy order.

    Indices not found in ``tests`` are skipped; a repeated index keeps its
    first assignment. Tests the taxonomy does not mention are appended as
    orphaned sentinel assignments.
    """
    tests_by_index = {t.index: t for t in tests}
    assigned: set[int] = set()
    assignments: list[ModelTestAssignment] = []
    feature_id = 0

    for domain_id, domain in enumerate(taxonomy.domains):
        for feature in domain.features:
            for idx in feature.test_indices:
                test = tests_by_index.get(idx)
                if test is None or idx in assigned:
                    continue
                assigned.add(idx)
                assignments.append(
                    ModelTestAssignment(
                        test_index=idx,
                        file_path=test.file_path,
                        domain=domain.name,
                        domain_description=domain.description,
                        domain_confidence=domain.confidence,
                        feature=feature.name,
                        feature_description=feature.description,
                        feature_confidence=feature.confidence,
                        source_domain_id=domain_id,
                        source_feature_id=feature_id,
                    )
                )
            feature_id += 1

    assignments.extend(
        _sentinel_assignment(test) for test in tests if test.index not in assigned
    )
    return assignments


class TaxonomyPostProcessor:
    """Validates and repairs flattened classification results."""

    def __init__(self, config: ModelPostProcessConfig | None = None):
        self.config = config or ModelPostProcessConfig()

    def process(
        self,
        assignments: Sequence[ModelTestAssignment],
        tests: Sequence[ModelTestCase],
    ) -> tuple[list[ModelTestAssignment], list[ModelQualityViolation]]:
        """Run the four repair steps.

        Returns:
            Repaired assignments (one per test in ``tests`` that was assigned
            or orphaned) and the violations found.
        """
        violations: list[ModelQualityViolation] = []

        # Step 1: catch-all detection
        if self.config.prohibit_uncategorized:
            for a in assignments:
                if not a.orphaned and is_catch_all(a.domain, a.feature):
                    violations.append(
                        ModelQualityViolation(
                            violation_type=EnumQualityViolationType.UNCATEGORIZED,
                            test_index=a.test_index,
                            details=f"index {a.test_index}: {a.domain}/{a.feature}",
                        )
                    )

        # Step 2: orphan detection
        results = list(assignments)
        assigned = {a.test_index for a in results}
        for test in tests:
            if test.index not in assigned:
                results.append(_sentinel_assignment(test))
                assigned.add(test.index)
        for a in results:
            if a.orphaned:
                violations.append(
                    ModelQualityViolation(
                        violation_type=EnumQualityViolationType.ORPHANED_TEST,
                        test_index=a.test_index,
                        details=f"index {a.test_index}: not classified ({a.file_path})",
                    )
                )

        # Step 3: domain normalization
        mapping = build_domain_normalization_map(a.domain for a in results)
        results = [
            a
            if mapping[a.domain] == a.domain
            else a.model_copy(update={"domain": mapping[a.domain]})
            for a in results
        ]

        # Step 4: catch-all replacement
        file_paths = {t.index: t.file_path for t in tests}
        replaced = 0
        for pos, a in enumerate(results):
            if not is_catch_all(a.domain, a.feature):
                continue
            file_path = file_paths.get(a.test_index, a.file_path)
            domain, feature = derive_classification_from_path(file_path)
            results[pos] = ModelTestAssignment(
                test_index=a.test_index,
                file_path=file_path,
                domain=domain,
                domain_description=PATH_DERIVED_DESCRIPTION,
                domain_confidence=PATH_DERIVED_CONFIDENCE,
                feature=feature,
                feature_description=PATH_DERIVED_DESCRIPTION,
                feature_confidence=PATH_DERIVED_CONFIDENCE,
            )
            replaced += 1

        if violations:
            logger.warning(
                "Post-processing repaired %d quality violations (%d catch-all assignments replaced)",
                len(violations),
                replaced,
            )
        return results, violations


@dataclass
class _FeatureAccumulator:
    name: str
    description: str = ""
    confidences: dict[tuple[int, float], float] = field(default_factory=dict)
    indices: list[int] = field(default_factory=list)


@dataclass
class _DomainAccumulator:
    name: str
    description: str = ""
    confidences: dict[tuple[int, float], float] = field(default_factory=dict)
    features: dict[str, _FeatureAccumulator] = field(default_factory=dict)


def _mean(values: dict[tuple[int, float], float]) -> float:
    return sum(values.values()) / len(values) if values else 0.0


def assemble_taxonomy(assignments: Sequence[ModelTestAssignment]) -> ModelTaxonomy:
    """Rebuild a taxonomy from per-test assignments.

    Domains and features appear in first-seen order; features with the same
    name in a domain are coalesced; indices are sorted. Confidence is the mean
    over distinct source groups, so a large group does not outweigh a small
    one by test count.
    """
    domains: dict[str, _DomainAccumulator] = {}
    for a in assignments:
        d = domains.get(a.domain)
        if d is None:
            d = domains[a.domain] = _DomainAccumulator(name=a.domain)
        if not d.description and a.domain_description:
            d.description = a.domain_description
        d.confidences[(a.source_domain_id, a.domain_confidence)] = a.domain_confidence

        f = d.features.get(a.feature)
        if f is None:
            f = d.features[a.feature] = _FeatureAccumulator(name=a.feature)
        if not f.description and a.feature_description:
            f.description = a.feature_description
        f.confidences[(a.source_feature_id, a.feature_confidence)] = a.feature_confidence
        f.indices.append(a.test_index)

    return ModelTaxonomy(
        domains=tuple(
            ModelDomainGroup(
                name=d.name,
                description=d.description,
                confidence=_mean(d.confidences),
                features=tuple(
                    ModelFeatureGroup(
                        name=f.name,
                        description=f.description,
                        confidence=_mean(f.confidences),
                        test_indices=tuple(sorted(f.indices)),
                    )
                    for f in d.features.values()
                ),
            )
            for d in domains.values()
        )
    )


def handle_taxonomy_postprocess(
    taxonomy: ModelTaxonomy,
    files: Sequence[ModelFileGroup],
    config: ModelPostProcessConfig | None = None,
) -> ModelPostProcessResult:
    """Apply the quality gate to a merged taxonomy.

    Args:
        taxonomy: Merged, index-validated taxonomy in global index space.
        files: The full classification input.
        config: Post-processor behavior.

    Returns:
        A taxonomy covering every input test exactly once with no catch-all
        names, plus the violations that were repaired.
    """
    tests = [
        test if test.file_path else test.model_copy(update={"file_path": f.path})
        for f in files
        for test in f.tests
    ]
    processor = TaxonomyPostProcessor(config)

    if not taxonomy.domains and tests:
        logger.warning(
            "Classification produced no domains; deriving %d tests from file paths",
            len(tests),
        )
        assignments, violations = processor.process(create_domains_from_paths(tests), tests)
    else:
        assignments, violations = processor.process(flatten_taxonomy(taxonomy, tests), tests)

    return ModelPostProcessResult(
        taxonomy=assemble_taxonomy(assignments), violations=tuple(violations)
    )


__all__ = [
    "TaxonomyPostProcessor",
    "assemble_taxonomy",
    "flatten_taxonomy",
    "handle_taxonomy_postprocess",
    "is_catch_all",
]
