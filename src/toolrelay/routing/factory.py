"""Construction of chat model handles from model configurations."""

import logging
from typing import Callable

from toolrelay.errors import RouterError
from toolrelay.ollama.chat_model import OllamaChatModel, build_options
from toolrelay.ollama.client import OllamaClient
from toolrelay.routing.types import ChatModel, ModelConfig

logger = logging.getLogger(__name__)

DEFAULT_OLLAMA_HOST = "http://localhost:11434"

ChatModelFactory = Callable[[ModelConfig], ChatModel]


def _create_ollama_model(config: ModelConfig) -> ChatModel:
    host = config.connection.get("host") or DEFAULT_OLLAMA_HOST
    headers = None
    api_key = config.credentials.get("api_key")
    if api_key:
        headers = {"Authorization": f"Bearer {api_key}"}

    return OllamaChatModel(
        client=OllamaClient(host=host, headers=headers),
        model_name=config.model_name,
        options=build_options(config),
    )


PROVIDERS: dict[str, ChatModelFactory] = {
    "ollama": _create_ollama_model,
}


def create_chat_model(config: ModelConfig) -> ChatModel:
    """Build a fresh chat model handle for a configuration.

    Raises:
        RouterError: If the configuration is disabled, names an unknown
            provider, or the provider rejects it
    """
    if not config.enabled:
        raise RouterError(config.id, f"Model config '{config.id}' is disabled")

    factory = PROVIDERS.get(config.provider)
    if factory is None:
        raise RouterError(
            config.id,
            f"Unsupported model provider '{config.provider}' for config '{config.id}'",
        )

    try:
        model = factory(config)
    except Exception as e:
        raise RouterError(config.id, f"Failed to create model '{config.id}': {e}") from e

    logger.debug(f"Created {config.provider} model handle for {config.id} ({config.model_name})")
    return model
