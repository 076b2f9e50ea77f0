# SPDX-FileCopyrightText: 2025 OmniNode.ai Inc.
# SPDX-License-Identifier: MIT
"""Domain name normalization: merge spelling and abbreviation variants.

Two names are similar when their folded forms (lower case, trimmed,
whitespace collapsed) are equal, or equal after expanding a known
abbreviation. ``Auth``, ``auth`` and ``Authentication`` are similar;
``Auth`` and ``Authorization`` are not.

Canonical names prefer the longer (more specific) spelling, with ties broken
alphabetically so the mapping is deterministic.
"""

from __future__ import annotations

from collections.abc import Iterable

from omnitaxonomy.constants import CATCH_ALL_NAMES

DOMAIN_ABBREVIATIONS: dict[str, str] = {
    "auth": "authentication",
    "authn": "authentication",
    "authz": "authorization",
    "config": "configuration",
    "db": "database",
    "doc": "documentation",
    "docs": "documentation",
    "err": "error handling",
    "errors": "error handling",
    "nav": "navigation",
    "perf": "performance",
    "sec": "security",
    "test": "testing",
    "tests": "testing",
    "ui": "user interface",
    "util": "utilities",
    "utils": "utilities",
    "ux": "user experience",
    "valid": "validation",
    "validation": "validation",
}


def normalize_domain_name(name: str) -> str:
    return " ".join(name.lower().split())


def is_catch_all(domain: str, feature: str) -> bool:
    """Return True if either name is a catch-all bucket such as "General"."""
    return (
        normalize_domain_name(domain) in CATCH_ALL_NAMES
        or normalize_domain_name(feature) in CATCH_ALL_NAMES
    )


def expand_abbreviation(name: str) -> str:
    """Expand a folded name if it is a known abbreviation."""
    return DOMAIN_ABBREVIATIONS.get(name, name)


def are_similar_domains(a: str, b: str) -> bool:
    """Return True if two domain names should be merged."""
    folded_a = normalize_domain_name(a)
    folded_b = normalize_domain_name(b)
    if folded_a == folded_b:
        return True
    return expand_abbreviation(folded_a) == expand_abbreviation(folded_b)


def build_domain_normalization_map(names: Iterable[str]) -> dict[str, str]:
    """Map every distinct domain name to its canonical spelling.

    Args:
        names: Domain names, duplicates allowed.

    Returns:
        ``{name: canonical}`` for every distinct input name.
    """
    ordered = sorted(set(names), key=lambda n: (-len(n), n))

    mapping: dict[str, str] = {}
    for name in ordered:
        canonical = next(
            (
                mapped
                for original, mapped in mapping.items()
                if are_similar_domains(original, name)
            ),
            name,
        )
        mapping[name] = canonical
    return mapping


__all__ = [
    "DOMAIN_ABBREVIATIONS",
    "are_similar_domains",
    "build_domain_normalization_map",
    "expand_abbreviation",
    "is_catch_all",
    "normalize_domain_name",
]
