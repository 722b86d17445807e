"""Tool manifests, argument handling, and tool execution.

This package turns tool manifests into validators and model-facing
descriptions, normalizes and validates model-supplied arguments, and
caches tool results. The registry and its builder live in
toolrelay.tools.registry.
"""

from toolrelay.tools.backends import LocalToolBackend
from toolrelay.tools.cache import ExecutionCache
from toolrelay.tools.normalizer import NormalizationResult, ParameterNormalizer
from toolrelay.tools.translator import SchemaTranslator, TranslatedSchema
from toolrelay.tools.types import (
    ParameterSpec,
    ParamType,
    ToolBackend,
    ToolCallRequest,
    ToolCallResult,
    ToolManifest,
)
from toolrelay.tools.validator import ArgumentValidator

__all__ = [
    # Data types
    "ParamType",
    "ParameterSpec",
    "ToolManifest",
    "ToolCallRequest",
    "ToolCallResult",
    "ToolBackend",
    # Pipeline stages
    "SchemaTranslator",
    "TranslatedSchema",
    "ParameterNormalizer",
    "NormalizationResult",
    "ArgumentValidator",
    "ExecutionCache",
    # Backends
    "LocalToolBackend",
]
