"""Pydantic models for model configuration API responses.

This module contains response schemas for the /api/v1/models endpoints.
Credentials are never included in responses.
"""

from pydantic import BaseModel, Field

from toolrelay.routing.types import ModelConfig


class ModelConfigResponse(BaseModel):
    """A configured chat model.

    Attributes:
        id: Unique configuration id
        provider: Backend provider name (e.g., "ollama")
        model_name: Model name understood by the provider (e.g., "qwen3:14b")
        is_default: Whether this is the default configuration
        enabled: Whether the configuration can become active
        temperature: Sampling temperature
        max_tokens: Maximum tokens to generate, if limited
    """

    id: str = Field(..., description="Model configuration id")
    provider: str = Field(..., description="Backend provider name")
    model_name: str = Field(..., description="Provider model name")
    is_default: bool = Field(default=False, description="Whether this is the default model")
    enabled: bool = Field(default=True, description="Whether the model can be activated")
    temperature: float | None = Field(default=None, description="Sampling temperature")
    max_tokens: int | None = Field(default=None, description="Maximum tokens to generate")

    @classmethod
    def from_config(cls, config: ModelConfig) -> "ModelConfigResponse":
        return cls(
            id=config.id,
            provider=config.provider,
            model_name=config.model_name,
            is_default=config.is_default,
            enabled=config.enabled,
            temperature=config.parameters.temperature,
            max_tokens=config.parameters.max_tokens,
        )


class ModelConfigListResponse(BaseModel):
    """Response model for listing all model configurations."""

    models: list[ModelConfigResponse] = Field(..., description="Configured models")


class CurrentModelResponse(BaseModel):
    """Response model for the currently active model configuration."""

    model: ModelConfigResponse | None = Field(
        default=None,
        description="The active model configuration, or null if none is configured",
    )
