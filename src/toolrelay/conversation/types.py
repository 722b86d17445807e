"""Data types for conversation threads.

This module defines the message dataclasses that make up a thread's
history, the controller's state enum, and the objects a turn produces.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any

from toolrelay.tools.types import ToolCallRequest, ToolCallResult


def utc_timestamp() -> str:
    """Current UTC time as an ISO 8601 string ending in Z."""
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


@dataclass
class UserMessage:
    """A message from the user."""

    role: str = "user"
    content: str = ""
    message_id: str = ""
    timestamp: str = ""

    def __post_init__(self) -> None:
        """Validate role is always 'user'."""
        self.role = "user"


@dataclass
class SystemMessage:
    """An instruction message for the model."""

    role: str = "system"
    content: str = ""
    message_id: str = ""
    timestamp: str = ""

    def __post_init__(self) -> None:
        """Validate role is always 'system'."""
        self.role = "system"


@dataclass
class AssistantMessage:
    """A response from the model, possibly requesting tool calls."""

    role: str = "assistant"
    content: str = ""
    model: str = ""
    message_id: str = ""
    timestamp: str = ""
    eval_count: int | None = None
    prompt_eval_count: int | None = None
    tool_calls: list[ToolCallRequest] = field(default_factory=list)

    def __post_init__(self) -> None:
        """Validate role is always 'assistant'."""
        self.role = "assistant"


@dataclass
class ToolMessage:
    """A synthetic message carrying one tool call's result."""

    role: str = "tool"
    tool_call_id: str = ""
    tool_name: str = ""
    content: str = ""
    model_used: str | None = None
    served_from_cache: bool = False
    message_id: str = ""
    timestamp: str = ""

    def __post_init__(self) -> None:
        """Validate role is always 'tool'."""
        self.role = "tool"

    @classmethod
    def from_result(cls, result: ToolCallResult, message_id: str) -> "ToolMessage":
        return cls(
            tool_call_id=result.request_id,
            tool_name=result.tool_name,
            content=result.result_text,
            model_used=result.model_used,
            served_from_cache=result.served_from_cache,
            message_id=message_id,
            timestamp=utc_timestamp(),
        )


# Union type for all message types
Message = UserMessage | SystemMessage | AssistantMessage | ToolMessage


class ConversationState(str, Enum):
    """States of the conversation controller's turn loop."""

    AWAITING_USER = "awaiting_user"
    CALLING_MODEL = "calling_model"
    EXECUTING_TOOLS = "executing_tools"
    DONE = "done"


@dataclass
class TurnEvent:
    """Progress notification emitted while a turn runs.

    Types: state, tool_call, tool_result, warning, message_complete.
    """

    type: str
    data: dict[str, Any] = field(default_factory=dict)


@dataclass
class TurnResult:
    """Final outcome of one user turn.

    Attributes:
        thread_id: Thread the turn ran on
        message: The final assistant message
        tool_calls: Tool calls executed during this turn, in order
        state: Terminal controller state
        iterations: Number of tool-execution passes
        iteration_limit_reached: True if the loop was cut off
        cancelled: True if the caller cancelled the turn
        degraded: True if no tools were available (model-only mode)
    """

    thread_id: str
    message: AssistantMessage
    tool_calls: list[ToolCallResult] = field(default_factory=list)
    state: ConversationState = ConversationState.DONE
    iterations: int = 0
    iteration_limit_reached: bool = False
    cancelled: bool = False
    degraded: bool = False
