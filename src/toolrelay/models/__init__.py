"""Pydantic models for API request and response schemas.

This package contains all Pydantic models used for validating and
serializing API requests and responses across all endpoints.
"""

from toolrelay.models.chat import (
    ChatRequest,
    ChatResponse,
    MessageResponse,
    SetThreadRequest,
    ThreadResponse,
    ToolCallRecord,
)
from toolrelay.models.health import HealthResponse
from toolrelay.models.models import (
    CurrentModelResponse,
    ModelConfigListResponse,
    ModelConfigResponse,
)
from toolrelay.models.tools import CacheClearedResponse, ToolInfo, ToolListResponse

__all__ = [
    "ChatRequest",
    "ChatResponse",
    "MessageResponse",
    "SetThreadRequest",
    "ThreadResponse",
    "ToolCallRecord",
    "HealthResponse",
    "CurrentModelResponse",
    "ModelConfigListResponse",
    "ModelConfigResponse",
    "CacheClearedResponse",
    "ToolInfo",
    "ToolListResponse",
]
