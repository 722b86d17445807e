"""Error taxonomy for the tool-calling orchestration engine.

Every error below is recovered at the boundary where it occurs and turned
into conversation content (or a registry/cache no-op). Only
ModelNotConfiguredError is allowed to escape ConversationController.process_message.
"""

from dataclasses import dataclass
from typing import Any


class ToolRelayError(Exception):
    """Base class for all toolrelay errors."""


class ManifestError(ToolRelayError):
    """A tool's declared parameter schema is missing or malformed."""

    def __init__(self, message: str, tool_name: str | None = None) -> None:
        super().__init__(message)
        self.tool_name = tool_name


class NormalizationWarning(UserWarning):
    """An argument key could not be confidently mapped onto a canonical name.

    Recorded on the tool call result and logged; never raised.
    """

    def __init__(self, raw_key: str, reason: str) -> None:
        super().__init__(f"Argument '{raw_key}': {reason}")
        self.raw_key = raw_key
        self.reason = reason


@dataclass(frozen=True)
class FieldViolation:
    """One field that failed validation.

    Attributes:
        path: Dotted path of the offending field (e.g. "options.limit")
        expected: The constraint the value had to satisfy
        received: The value actually supplied
        missing: True if no value was supplied at all
    """

    path: str
    expected: str
    received: Any = None
    missing: bool = False

    def describe(self) -> str:
        received = "nothing" if self.missing else repr(self.received)
        return f"{self.path}: expected {self.expected}, received {received}"


class ValidationError(ToolRelayError):
    """Arguments still failed the tool schema after one repair attempt."""

    def __init__(self, tool_name: str, violations: list[FieldViolation]) -> None:
        self.tool_name = tool_name
        self.violations = violations
        details = "; ".join(v.describe() for v in violations) or "unknown violation"
        super().__init__(f"Invalid arguments for tool '{tool_name}': {details}")


class BackendError(ToolRelayError):
    """The tool invocation itself failed (transport, remote exception, timeout)."""

    def __init__(self, tool_name: str, server_id: str, message: str) -> None:
        super().__init__(message)
        self.tool_name = tool_name
        self.server_id = server_id


class ModelError(ToolRelayError):
    """The chat model call failed."""


class RouterError(ToolRelayError):
    """Switching to a preferred model configuration failed."""

    def __init__(self, model_id: str, message: str) -> None:
        super().__init__(message)
        self.model_id = model_id


class ModelNotConfiguredError(ToolRelayError):
    """No model configuration is available at all."""
