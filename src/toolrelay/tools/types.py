"""Type definitions for tool manifests and tool calls.

This module contains the dataclasses describing what a tool backend
declares (ToolManifest, ParameterSpec), what a model asks for
(ToolCallRequest), and what gets fed back into the conversation
(ToolCallResult), plus the ToolBackend capability protocol.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Protocol, runtime_checkable


class ParamType(str, Enum):
    """Parameter types understood by the schema translator."""

    STRING = "string"
    NUMBER = "number"
    INTEGER = "integer"
    BOOLEAN = "boolean"
    ARRAY = "array"
    OBJECT = "object"
    ANY = "any"


@dataclass(frozen=True)
class ParameterSpec:
    """A single declared parameter of a tool.

    Attributes:
        name: Canonical parameter name as declared by the tool
        type: Declared parameter type
        required: Whether the tool requires this parameter
        description: Human-readable description from the manifest
        enum: Allowed values, if the parameter is an enumeration
        minimum: Inclusive numeric lower bound
        maximum: Inclusive numeric upper bound
        item_type: Element type for arrays, if declared
        format: String format hint (e.g. "email", "uri", "date-time")
        default: Declared default value (only meaningful if has_default)
        has_default: Whether the manifest declared a default
        min_length: Minimum string length
        max_length: Maximum string length
        pattern: Regular expression the string must match
        properties: Nested parameters for object types
    """

    name: str
    type: ParamType = ParamType.ANY
    required: bool = False
    description: str = ""
    enum: tuple[Any, ...] | None = None
    minimum: float | None = None
    maximum: float | None = None
    item_type: ParamType | None = None
    format: str | None = None
    default: Any = None
    has_default: bool = False
    min_length: int | None = None
    max_length: int | None = None
    pattern: str | None = None
    properties: tuple["ParameterSpec", ...] = ()


@dataclass(frozen=True)
class ToolManifest:
    """Declared name, description and parameter schema of one tool.

    Immutable once built for a registry snapshot. The raw JSON Schema is
    kept as received; parameters() parses it on demand.
    """

    name: str
    description: str = ""
    input_schema: dict[str, Any] | None = None
    server_id: str = ""
    cacheable: bool = True

    def parameters(self) -> list[ParameterSpec]:
        """Parse the input schema into parameter specs.

        Raises:
            ManifestError: If the schema is absent or malformed
        """
        from toolrelay.tools.schema import parse_parameters

        return parse_parameters(self.input_schema, tool_name=self.name)


@dataclass(frozen=True)
class ToolCallRequest:
    """A model's request to invoke a named tool, scoped to one turn."""

    id: str
    tool_name: str
    raw_arguments: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class ToolCallResult:
    """Outcome of one tool call, appended to the history as a tool message.

    Attributes:
        request_id: Id of the ToolCallRequest this result answers
        tool_name: Name of the tool that was called
        result_text: Text fed back to the model
        model_used: Id of the model configuration active during execution
        served_from_cache: True if the backend was not invoked
        arguments: Normalized arguments the call was made with
        error: True if result_text describes a failure
        warnings: Normalization warnings recorded for this call
    """

    request_id: str
    tool_name: str
    result_text: str
    model_used: str | None = None
    served_from_cache: bool = False
    arguments: dict[str, Any] = field(default_factory=dict)
    error: bool = False
    warnings: tuple[str, ...] = ()


@runtime_checkable
class ToolBackend(Protocol):
    """Capability for discovering and invoking tools on one server.

    There is one implementation per transport; the registry only ever holds
    closures bound to a backend, so callers never switch on backend type.
    """

    server_id: str

    @property
    def connected(self) -> bool: ...

    async def list_manifests(self) -> list[ToolManifest]: ...

    async def invoke(self, tool_name: str, arguments: dict[str, Any]) -> Any: ...
