"""Pydantic models for chat API requests and responses.

This module defines the request and response schemas for the chat endpoints,
including the SSE event payloads emitted by the streaming endpoint.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from toolrelay.conversation.types import AssistantMessage, TurnResult
from toolrelay.tools.types import ToolCallResult


class ChatRequest(BaseModel):
    """Request body for chat endpoints.

    Used by both POST /api/v1/chat (non-streaming)
    and POST /api/v1/chat/stream (streaming).
    """

    message: str = Field(..., description="The user message to send.")
    model_id: str | None = Field(
        default=None,
        description="Model configuration to switch to before this turn. The switch persists.",
    )

    model_config = ConfigDict(
        json_schema_extra={
            "examples": [
                {"message": "What's the weather in Paris?", "model_id": None},
                {"message": "Show me the git log", "model_id": "coder"},
            ]
        }
    )


class ToolCallRecord(BaseModel):
    """One tool call executed during a turn."""

    id: str = Field(description="Tool call id")
    tool_name: str = Field(description="Name of the tool that was called")
    arguments: dict[str, Any] = Field(default_factory=dict, description="Normalized arguments")
    result: str = Field(description="Result text fed back to the model")
    model_used: str | None = Field(default=None, description="Model configuration active during execution")
    served_from_cache: bool = Field(default=False, description="True if the tool was not invoked")
    error: bool = Field(default=False, description="True if the result describes a failure")
    warnings: list[str] = Field(default_factory=list, description="Argument normalization warnings")

    @classmethod
    def from_result(cls, result: ToolCallResult) -> "ToolCallRecord":
        return cls(
            id=result.request_id,
            tool_name=result.tool_name,
            arguments=result.arguments,
            result=result.result_text,
            model_used=result.model_used,
            served_from_cache=result.served_from_cache,
            error=result.error,
            warnings=list(result.warnings),
        )


class MessageResponse(BaseModel):
    """Response schema for the final assistant message of a turn."""

    role: str = Field(description="Message role (assistant)")
    content: str = Field(description="Message content")
    model: str = Field(description="Model that generated this message")
    message_id: str = Field(description="Unique message identifier")
    timestamp: str = Field(description="ISO 8601 timestamp")
    eval_count: int | None = Field(
        default=None, description="Number of tokens generated"
    )
    prompt_eval_count: int | None = Field(
        default=None, description="Number of tokens in the prompt"
    )

    @classmethod
    def from_message(cls, message: AssistantMessage) -> "MessageResponse":
        return cls(
            role=message.role,
            content=message.content,
            model=message.model,
            message_id=message.message_id,
            timestamp=message.timestamp,
            eval_count=message.eval_count,
            prompt_eval_count=message.prompt_eval_count,
        )


class ChatResponse(BaseModel):
    """Response body for the non-streaming chat endpoint."""

    thread_id: str = Field(description="Thread identifier")
    message: MessageResponse = Field(description="The assistant's final message")
    tool_calls_executed: list[ToolCallRecord] = Field(
        default_factory=list,
        description="Tool calls executed during this turn, in order",
    )
    state: str = Field(description="Terminal controller state")
    iterations: int = Field(default=0, description="Number of tool-execution passes")
    iteration_limit_reached: bool = Field(
        default=False, description="True if the tool loop was cut off"
    )
    cancelled: bool = Field(default=False, description="True if the turn was cancelled")
    degraded: bool = Field(
        default=False, description="True if no tools were available for this turn"
    )

    @classmethod
    def from_result(cls, result: TurnResult) -> "ChatResponse":
        return cls(
            thread_id=result.thread_id,
            message=MessageResponse.from_message(result.message),
            tool_calls_executed=[ToolCallRecord.from_result(r) for r in result.tool_calls],
            state=result.state.value,
            iterations=result.iterations,
            iteration_limit_reached=result.iteration_limit_reached,
            cancelled=result.cancelled,
            degraded=result.degraded,
        )

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "thread_id": "a1b2c3d4e5",
                "message": {
                    "role": "assistant",
                    "content": "It is 18°C and sunny in Paris.",
                    "model": "llama3.2:latest",
                    "message_id": "f1e2d3c4b5",
                    "timestamp": "2025-01-15T10:35:00.000000Z",
                    "eval_count": 45,
                    "prompt_eval_count": 120,
                },
                "tool_calls_executed": [
                    {
                        "id": "9f8e7d6c5b",
                        "tool_name": "getWeather",
                        "arguments": {"location": "Paris", "units": "metric"},
                        "result": "18°C, sunny",
                        "model_used": "llama3.2:latest",
                        "served_from_cache": False,
                        "error": False,
                        "warnings": [],
                    }
                ],
                "state": "done",
                "iterations": 1,
                "iteration_limit_reached": False,
                "cancelled": False,
                "degraded": False,
            }
        }
    )


class ThreadResponse(BaseModel):
    """The current thread id."""

    thread_id: str = Field(description="Thread identifier")


class SetThreadRequest(BaseModel):
    """Request body for switching the current thread."""

    thread_id: str = Field(..., min_length=1, description="Thread identifier to switch to")


# --- SSE event payloads ---


class StateEvent(BaseModel):
    """Controller state transition."""

    state: str = Field(description="New controller state")


class ToolCallEvent(BaseModel):
    """A tool call requested by the model, before execution."""

    id: str = Field(description="Tool call id")
    tool_name: str = Field(description="Requested tool name")
    arguments: dict[str, Any] = Field(default_factory=dict, description="Arguments as supplied by the model")


class WarningEvent(BaseModel):
    """A recovered problem worth surfacing to the client."""

    message: str = Field(description="Warning text")
    tool_name: str | None = Field(default=None, description="Tool the warning relates to")


class MessageCompleteEvent(BaseModel):
    """The turn finished; carries the same payload as the non-streaming response."""

    response: ChatResponse = Field(description="Final turn outcome")


class DoneEvent(BaseModel):
    """Stream is complete."""

    thread_id: str = Field(description="Thread identifier")


class ErrorEvent(BaseModel):
    """An error that ended the stream."""

    code: str = Field(description="Error code")
    message: str = Field(description="Error message")
    details: dict[str, Any] = Field(default_factory=dict, description="Additional details")
