"""ChatModel implementation backed by Ollama's chat API."""

import json
import logging
import uuid
from typing import Any

from toolrelay.conversation.types import (
    AssistantMessage,
    Message,
    ToolMessage,
)
from toolrelay.errors import ModelError
from toolrelay.ollama.client import OllamaClient
from toolrelay.routing.types import ModelConfig, ModelResponse
from toolrelay.tools.types import ToolCallRequest

logger = logging.getLogger(__name__)


def convert_messages_to_ollama_format(messages: list[Message]) -> list[dict[str, Any]]:
    """Convert thread messages to Ollama API format.

    Args:
        messages: List of message objects (UserMessage, SystemMessage,
                  AssistantMessage, ToolMessage)

    Returns:
        List of message dicts in Ollama format
    """
    ollama_messages = []

    for msg in messages:
        ollama_msg: dict[str, Any] = {
            "role": msg.role,
            "content": msg.content,
        }

        if isinstance(msg, AssistantMessage) and msg.tool_calls:
            ollama_msg["tool_calls"] = [
                {"function": {"name": call.tool_name, "arguments": call.raw_arguments}}
                for call in msg.tool_calls
            ]
        elif isinstance(msg, ToolMessage):
            ollama_msg["tool_name"] = msg.tool_name

        ollama_messages.append(ollama_msg)

    return ollama_messages


def _parse_arguments(raw: Any) -> dict[str, Any]:
    if isinstance(raw, dict):
        return raw
    if isinstance(raw, str) and raw.strip():
        try:
            parsed = json.loads(raw)
        except json.JSONDecodeError:
            logger.warning(f"Model returned unparseable tool arguments: {raw!r}")
            return {}
        return parsed if isinstance(parsed, dict) else {}
    return {}


def parse_tool_calls(message: dict[str, Any]) -> list[ToolCallRequest]:
    """Extract tool call requests from an Ollama response message.

    Ollama does not assign ids to tool calls, so a fresh id is generated
    for each one.
    """
    requests = []
    for call in message.get("tool_calls") or []:
        function = call.get("function") or {}
        name = function.get("name")
        if not name:
            continue
        requests.append(
            ToolCallRequest(
                id=call.get("id") or uuid.uuid4().hex[:10],
                tool_name=name,
                raw_arguments=_parse_arguments(function.get("arguments")),
            )
        )
    return requests


def build_options(config: ModelConfig) -> dict[str, Any]:
    """Translate model parameters into Ollama options."""
    options: dict[str, Any] = {}
    if config.parameters.temperature is not None:
        options["temperature"] = config.parameters.temperature
    if config.parameters.max_tokens is not None:
        options["num_predict"] = config.parameters.max_tokens
    if config.parameters.top_p is not None:
        options["top_p"] = config.parameters.top_p
    return options


class OllamaChatModel:
    """ChatModel that collects Ollama's streaming chat into one response.

    Attributes:
        client: The Ollama client for this model's host
        model_name: Ollama model name
        options: Ollama sampling options
    """

    def __init__(
        self,
        client: OllamaClient,
        model_name: str,
        options: dict[str, Any] | None = None,
    ) -> None:
        self.client = client
        self.model_name = model_name
        self.options = options or None

    async def invoke(
        self,
        messages: list[Message],
        tools: list[dict[str, Any]] | None = None,
    ) -> ModelResponse:
        """Send the history to Ollama and collect the complete response.

        Raises:
            ModelError: If streaming fails or ends without a completion marker
        """
        content_parts: list[str] = []
        tool_calls: list[ToolCallRequest] = []
        final_chunk: dict[str, Any] | None = None

        try:
            async for chunk in self.client.chat_stream(
                model=self.model_name,
                messages=convert_messages_to_ollama_format(messages),
                tools=tools,
                options=self.options,
            ):
                message = chunk.get("message") or {}
                content = message.get("content") or ""
                if content:
                    content_parts.append(content)
                tool_calls.extend(parse_tool_calls(message))

                if chunk.get("done"):
                    final_chunk = chunk
        except Exception as e:
            raise ModelError(f"Failed to get response from Ollama: {e}") from e

        if final_chunk is None:
            raise ModelError("Stream ended without completion marker")

        return ModelResponse(
            content="".join(content_parts),
            tool_calls=tool_calls,
            model=final_chunk.get("model") or self.model_name,
            eval_count=final_chunk.get("eval_count"),
            prompt_eval_count=final_chunk.get("prompt_eval_count"),
        )
