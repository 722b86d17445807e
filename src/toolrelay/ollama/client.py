"""Async Ollama client wrapper.

This module provides an async wrapper around the ollama.AsyncClient for
communicating with the Ollama API. One client is created per model
configuration and reused for every call routed to that configuration.
"""

import logging
from typing import Any, AsyncIterator

import ollama

logger = logging.getLogger(__name__)


class OllamaClient:
    """Async client for interacting with the Ollama API.

    This client wraps ollama.AsyncClient. All chat operations use
    streaming; callers that need a complete response collect the chunks.

    Attributes:
        host: The Ollama server URL (e.g., "http://localhost:11434")
        _client: The underlying ollama.AsyncClient instance
    """

    def __init__(self, host: str, headers: dict[str, str] | None = None) -> None:
        """Initialize the Ollama client.

        Args:
            host: The Ollama server URL
            headers: Optional extra HTTP headers (e.g. Authorization)
        """
        self.host = host
        self._client = ollama.AsyncClient(host=host, headers=headers)
        logger.info(f"OllamaClient initialized with host: {host}")

    async def check_connection(self) -> bool:
        """Check if the Ollama server is reachable.

        Returns:
            bool: True if connection is successful, False otherwise
        """
        try:
            await self._client.list()
            logger.debug("Ollama connection check: successful")
            return True
        except Exception as e:
            logger.warning(f"Ollama connection check failed: {e}")
            return False

    async def chat_stream(
        self,
        model: str,
        messages: list[dict[str, Any]],
        tools: list[dict[str, Any]] | None = None,
        options: dict[str, Any] | None = None,
    ) -> AsyncIterator[dict[str, Any]]:
        """Stream chat responses from Ollama.

        Args:
            model: The model name to use for the chat
            messages: List of message dicts in Ollama format:
                      [{"role": "user", "content": "..."}, ...]
            tools: Optional tool definitions in function-calling format
            options: Optional model parameters (temperature, etc.)

        Yields:
            dict: Response chunks from Ollama. Each chunk contains:
                  - model: str - The model name
                  - message: dict - role, content and optional tool_calls
                  - done: bool - True on the final chunk
                  - (final chunk includes eval_count, prompt_eval_count, etc.)

        Raises:
            Exception: If the Ollama API request fails
        """
        try:
            logger.debug(
                f"Starting chat stream with model: {model} "
                f"({len(messages)} messages, {len(tools or [])} tools)"
            )

            async for chunk in await self._client.chat(
                model=model,
                messages=messages,
                tools=tools or None,
                stream=True,
                options=options,
            ):
                if hasattr(chunk, "model_dump"):
                    chunk_dict = chunk.model_dump()
                elif isinstance(chunk, dict):
                    chunk_dict = chunk
                else:
                    chunk_dict = vars(chunk)

                yield chunk_dict

            logger.debug("Chat stream completed")

        except Exception as e:
            logger.error(f"Chat stream failed: {e}")
            raise

    async def close(self) -> None:
        """Close the client and clean up resources.

        ollama.AsyncClient uses httpx internally which handles cleanup.
        """
        logger.debug("OllamaClient closed")
