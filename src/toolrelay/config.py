"""Configuration module for toolrelay using pydantic-settings."""

from typing import Any

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from toolrelay.routing.types import ModelConfig, ModelParameters


class ToolRelaySettings(BaseSettings):
    """Main configuration settings for toolrelay.

    All settings can be overridden via environment variables with the TOOLRELAY_ prefix.
    For example, TOOLRELAY_OLLAMA_HOST will override the ollama_host setting.
    Dict and list settings are read from JSON, e.g.
    TOOLRELAY_PREFERRED_MODELS='{"git-server": "coder"}'.
    """

    # Server
    host: str = "127.0.0.1"
    port: int = 8000

    # Ollama
    ollama_host: str = "http://localhost:11434"

    # Default model (registered as the default model configuration)
    default_model: str | None = "llama3.2:latest"
    model_temperature: float = 0.1
    model_max_tokens: int | None = None

    # Additional model configurations, as dicts with ModelConfig fields
    models: list[dict[str, Any]] = Field(default_factory=list)

    # Tool servers: server id -> preferred model config id / context parameters
    preferred_models: dict[str, str] = Field(default_factory=dict)
    context_params: dict[str, dict[str, Any]] = Field(default_factory=dict)

    # Execution cache
    cache_ttl_seconds: float = 30.0
    cache_capacity: int = 50

    # Argument normalization
    fuzzy_match_threshold: float = 0.7

    # Conversation loop
    max_tool_iterations: int = 10

    # CORS
    cors_origins: list[str] = Field(default_factory=lambda: ["*"])

    # Logging
    log_level: str = "INFO"

    model_config = SettingsConfigDict(env_prefix="TOOLRELAY_")

    def model_configs(self) -> list[ModelConfig]:
        """Build the model configurations described by these settings.

        The default_model, if set, becomes the default configuration
        (its id is the model name). Entries in models need an "id" and
        default to the ollama provider on ollama_host.
        """
        configs: list[ModelConfig] = []

        if self.default_model:
            configs.append(
                ModelConfig(
                    id=self.default_model,
                    provider="ollama",
                    model_name=self.default_model,
                    connection={"host": self.ollama_host},
                    parameters=ModelParameters(
                        temperature=self.model_temperature,
                        max_tokens=self.model_max_tokens,
                    ),
                    is_default=True,
                )
            )

        for entry in self.models:
            configs.append(
                ModelConfig(
                    id=entry["id"],
                    provider=entry.get("provider", "ollama"),
                    model_name=entry.get("model_name") or entry["id"],
                    connection=entry.get("connection") or {"host": self.ollama_host},
                    credentials=entry.get("credentials") or {},
                    parameters=ModelParameters(**(entry.get("parameters") or {})),
                    is_default=entry.get("is_default", False),
                    enabled=entry.get("enabled", True),
                )
            )

        return configs
