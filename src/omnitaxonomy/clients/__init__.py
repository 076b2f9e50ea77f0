# SPDX-FileCopyrightText: 2025 OmniNode.ai Inc.
# SPDX-License-Identifier: MIT
"""HTTP clients for external AI providers.

Clients live outside nodes/ so node business logic never imports a transport
library. The orchestrator receives a client through
``ProtocolClassificationProvider``.
"""

from __future__ import annotations

from omnitaxonomy.clients.classification_llm_client import ClassificationLlmClient
from omnitaxonomy.clients.model_llm_client_config import ModelLlmClientConfig

__all__ = ["ClassificationLlmClient", "ModelLlmClientConfig"]
