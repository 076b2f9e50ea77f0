# SPDX-FileCopyrightText: 2025 OmniNode.ai Inc.
# SPDX-License-Identifier: MIT
"""Prompt construction and response parsing for taxonomy classification.

The user prompt lists each file of a (reindexed) chunk with its tests as
``index|suite|name`` lines. When earlier chunks already produced domains,
an anchor block asks the model to reuse those names so the vocabulary stays
consistent across chunks.
"""

from __future__ import annotations

import json
from collections.abc import Sequence

from pydantic import ValidationError

from omnitaxonomy.enums import EnumLanguage
from omnitaxonomy.errors import ProviderResponseParseError
from omnitaxonomy.models.model_taxonomy import ModelDomainGroup, ModelTaxonomy
from omnitaxonomy.models.model_test_case import ModelFileGroup

_LANGUAGE_NAMES: dict[EnumLanguage, str] = {
    EnumLanguage.EN: "English",
    EnumLanguage.JA: "Japanese",
    EnumLanguage.KO: "Korean",
}

TAXONOMY_SYSTEM_PROMPT: str = """\
You are a software analyst who organizes automated tests into a business taxonomy.

Group every test into a business DOMAIN (a product area such as "Authentication"
or "Checkout") and, within it, a FEATURE (a specific capability such as
"Password Reset"). Name domains and features after what the product does, not
after technical layers or directory names.

Rules:
- Assign every test index exactly once. Do not skip or repeat indices.
- Only use indices listed in the input.
- Never use catch-all names such as "General", "Other", "Misc" or "Uncategorized".
- Write names and descriptions in the requested target language.
- confidence is a number between 0 and 1.

Return ONLY valid JSON matching this exact schema:
{
  "domains": [
    {
      "name": "Authentication",
      "description": "User sign-in and session management",
      "confidence": 0.9,
      "features": [
        {
          "name": "Login",
          "description": "Credential validation and sign-in flow",
          "confidence": 0.85,
          "test_indices": [0, 1, 2]
        }
      ]
    }
  ]
}
"""


def _language_label(language: EnumLanguage) -> str:
    return f"{_LANGUAGE_NAMES[language]} ({language.value})"


def _render_anchor_block(anchors: Sequence[ModelDomainGroup]) -> str:
    lines = [
        "## Existing Domains (MUST reuse if applicable)",
        "",
        "The following domains were identified from previous test batches. "
        "You MUST reuse these domain names exactly if the new tests belong to "
        "the same business area.",
        "",
        "<anchor_domains>",
    ]
    for domain in anchors:
        lines.append(f"- **{domain.name}**: {domain.description}")
        if domain.features:
            lines.append("  Features: " + ", ".join(f.name for f in domain.features))
    lines.extend(
        [
            "</anchor_domains>",
            "",
            "## Rules",
            "1. If a test matches an existing domain, you MUST use that exact domain name",
            "2. Only create a NEW domain if the test covers a completely new business area",
            "3. Feature names can be new even within existing domains",
            "",
        ]
    )
    return "\n".join(lines) + "\n"


def build_taxonomy_user_prompt(
    files: Sequence[ModelFileGroup],
    language: EnumLanguage,
    anchors: Sequence[ModelDomainGroup] = (),
) -> str:
    """Render the files and tests of one chunk for classification.

    Args:
        files: Reindexed files; test indices must be dense from 0.
        language: Target language for names and descriptions.
        anchors: Domains from earlier chunks to reuse.
    """
    parts = [
        "Classify the following tests into business domains and features.\n\n",
        f"Target Language: {_language_label(language)}\n\n",
    ]
    if anchors:
        parts.append(_render_anchor_block(anchors))

    parts.append("<files>\n")
    total = 0
    for file_idx, file_group in enumerate(files):
        header = f"[{file_idx}] {file_group.path}"
        if file_group.framework:
            header += f" ({file_group.framework})"
        parts.append(header + "\n")

        hints = file_group.domain_hints
        if hints is not None:
            if hints.imports:
                parts.append(f"  imports: {', '.join(hints.imports)}\n")
            if hints.calls:
                parts.append(f"  calls: {', '.join(hints.calls)}\n")

        parts.append("  tests:\n")
        for test in file_group.tests:
            if test.suite_path:
                parts.append(f"    {test.index}|{test.suite_path}|{test.name}\n")
            else:
                parts.append(f"    {test.index}|{test.name}\n")
            total += 1

    parts.append("</files>\n\n")
    parts.append(
        f"Total: {total} tests (indices 0-{total - 1}). "
        "Assign ALL to exactly one feature."
    )
    return "".join(parts)


def _strip_code_fences(raw: str) -> str:
    content = raw.strip()
    if content.startswith("```"):
        lines = content.splitlines()
        # Remove opening fence (```json or ```) and closing fence
        end = len(lines)
        for i in range(len(lines) - 1, 0, -1):
            if lines[i].strip() == "```":
                end = i
                break
        content = "\n".join(lines[1:end])
    return content


def parse_taxonomy_response(raw: str) -> ModelTaxonomy:
    """Parse provider JSON into a taxonomy.

    Raises:
        ProviderResponseParseError: If the text is not JSON or does not match
            the taxonomy schema.
    """
    content = _strip_code_fences(raw)
    try:
        data = json.loads(content)
    except json.JSONDecodeError as e:
        raise ProviderResponseParseError(
            f"Provider response is not valid JSON: {e}",
            details={"position": e.pos},
        ) from e

    if not isinstance(data, dict) or not isinstance(data.get("domains"), list):
        raise ProviderResponseParseError(
            "Provider response is missing the 'domains' array",
            details={"type": type(data).__name__},
        )

    try:
        return ModelTaxonomy.model_validate(data)
    except ValidationError as e:
        raise ProviderResponseParseError(
            f"Provider response does not match the taxonomy schema: {e.error_count()} errors",
            details={"errors": e.errors(include_url=False)[:5]},
        ) from e


__all__ = [
    "TAXONOMY_SYSTEM_PROMPT",
    "build_taxonomy_user_prompt",
    "parse_taxonomy_response",
]
