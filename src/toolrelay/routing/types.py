"""Type definitions for model configuration and chat model capabilities."""

from dataclasses import dataclass, field
from typing import Any, Protocol, runtime_checkable

from toolrelay.conversation.types import Message
from toolrelay.tools.types import ToolCallRequest


@dataclass
class ModelParameters:
    """Sampling parameters applied to every call of a model."""

    temperature: float | None = 0.1
    max_tokens: int | None = None
    top_p: float | None = None


@dataclass
class ModelConfig:
    """A configured chat model backend.

    Attributes:
        id: Unique configuration id
        provider: Backend provider name (e.g. "ollama")
        model_name: Model name understood by the provider (e.g. "llama3.2:latest")
        connection: Connection parameters (e.g. {"host": "http://localhost:11434"})
        credentials: Credentials (e.g. {"api_key": "..."})
        parameters: Sampling parameters
        is_default: Whether this is the default configuration
        enabled: Disabled configurations can never become active
    """

    id: str
    provider: str
    model_name: str
    connection: dict[str, Any] = field(default_factory=dict)
    credentials: dict[str, Any] = field(default_factory=dict)
    parameters: ModelParameters = field(default_factory=ModelParameters)
    is_default: bool = False
    enabled: bool = True


@dataclass
class ModelResponse:
    """What a chat model returned for one invocation."""

    content: str = ""
    tool_calls: list[ToolCallRequest] = field(default_factory=list)
    model: str = ""
    eval_count: int | None = None
    prompt_eval_count: int | None = None


@runtime_checkable
class ChatModel(Protocol):
    """Capability: send a message history (plus optional tools) to a model."""

    async def invoke(
        self,
        messages: list[Message],
        tools: list[dict[str, Any]] | None = None,
    ) -> ModelResponse: ...


class ModelConfigStore(Protocol):
    """Read access to stored model configurations."""

    def get_default(self) -> ModelConfig | None: ...

    def get_by_id(self, model_id: str) -> ModelConfig | None: ...

    def list(self) -> list[ModelConfig]: ...


class ServerConfigStore(Protocol):
    """Read access to per-server settings relevant to tool execution."""

    def get_preferred_model_id(self, server_id: str) -> str | None: ...

    def get_context_params(self, server_id: str) -> dict[str, Any]: ...
