"""Model configurations and model routing.

This package defines model configurations, the collaborator protocols
for configuration stores, and in-memory store implementations. The
router itself lives in toolrelay.routing.router.
"""

from toolrelay.routing.stores import InMemoryModelConfigStore, InMemoryServerConfigStore
from toolrelay.routing.types import (
    ChatModel,
    ModelConfig,
    ModelConfigStore,
    ModelParameters,
    ModelResponse,
    ServerConfigStore,
)

__all__ = [
    "ChatModel",
    "ModelConfig",
    "ModelConfigStore",
    "ModelParameters",
    "ModelResponse",
    "ServerConfigStore",
    "InMemoryModelConfigStore",
    "InMemoryServerConfigStore",
]
