# SPDX-FileCopyrightText: 2025 OmniNode.ai Inc.
# SPDX-License-Identifier: MIT

"""Input models: discovered tests grouped by source file.

Test indices are global across a whole classification request. Every test
carries a unique non-negative index, and files are the unit of locality the
partitioner never splits.
"""

from __future__ import annotations

from pydantic import BaseModel, Field


class ModelTestCase(BaseModel):
    """A single discovered test.

    Attributes:
        index: Globally unique, non-negative test index within the request.
        name: Test name as written in source.
        suite_path: Enclosing describe/class chain, e.g. "LoginForm > submit".
        file_path: Path of the file containing the test.
    """

    model_config = {"frozen": True, "extra": "ignore"}

    index: int = Field(ge=0, description="Global test index")
    name: str = Field(description="Test name")
    suite_path: str = Field(default="", description="Enclosing suite chain")
    file_path: str = Field(default="", description="Containing file path")


class ModelDomainHints(BaseModel):
    """Static-analysis hints rendered next to a file in the prompt."""

    model_config = {"frozen": True, "extra": "ignore"}

    imports: tuple[str, ...] = Field(default=(), description="Imported modules")
    calls: tuple[str, ...] = Field(default=(), description="Called symbols")


class ModelFileGroup(BaseModel):
    """All tests discovered in one source file.

    Attributes:
        path: Repository-relative file path.
        tests: Tests in source order.
        framework: Detected test framework (e.g. "jest", "pytest").
        domain_hints: Optional import/call hints for the classifier.
    """

    model_config = {"frozen": True, "extra": "ignore"}

    path: str = Field(description="Repository-relative file path")
    tests: tuple[ModelTestCase, ...] = Field(default=(), description="Tests in this file")
    framework: str = Field(default="", description="Detected test framework")
    domain_hints: ModelDomainHints | None = Field(
        default=None, description="Optional static-analysis hints"
    )


__all__ = ["ModelDomainHints", "ModelFileGroup", "ModelTestCase"]
