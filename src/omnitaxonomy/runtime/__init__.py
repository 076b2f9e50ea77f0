# SPDX-FileCopyrightText: 2025 OmniNode.ai Inc.
# SPDX-License-Identifier: MIT
"""Runtime configuration for omnitaxonomy."""

from omnitaxonomy.runtime.model_classification_config import ModelClassificationConfig

__all__ = ["ModelClassificationConfig"]
