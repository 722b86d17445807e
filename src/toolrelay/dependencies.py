"""Dependency injection providers for FastAPI endpoints.

This module provides FastAPI dependency functions that are used across
multiple routers to inject common dependencies like settings and the
conversation controller.
"""

from functools import lru_cache

from fastapi import HTTPException, Request

from toolrelay.config import ToolRelaySettings
from toolrelay.conversation.controller import ConversationController
from toolrelay.ollama import OllamaClient
from toolrelay.routing.types import ModelConfigStore


@lru_cache
def get_settings() -> ToolRelaySettings:
    """Get the application settings instance.

    This function is cached so that the same settings instance is reused
    across all requests. Settings are loaded from environment variables
    with the TOOLRELAY_ prefix.

    Returns:
        ToolRelaySettings: The application configuration settings.
    """
    return ToolRelaySettings()


def _not_initialized(component: str) -> HTTPException:
    return HTTPException(
        status_code=503,
        detail={
            "error": {
                "code": "not_initialized",
                "message": f"{component} not initialized",
                "details": {},
            }
        },
    )


def get_ollama_client(request: Request) -> OllamaClient:
    """Get the Ollama client used for health checks from app state.

    Raises:
        HTTPException: If the Ollama client is not initialized (503 Service Unavailable).
    """
    if not hasattr(request.app.state, "ollama_client"):
        raise _not_initialized("Ollama client")
    return request.app.state.ollama_client


def get_controller(request: Request) -> ConversationController:
    """Get the conversation controller from app state.

    The controller is created once during application startup and shared
    by every request.

    Args:
        request: The FastAPI request object.

    Returns:
        ConversationController: The engine facade.

    Raises:
        HTTPException: If the engine is not initialized (503 Service Unavailable).
    """
    if not hasattr(request.app.state, "controller"):
        raise _not_initialized("Conversation engine")
    return request.app.state.controller


def get_model_store(request: Request) -> ModelConfigStore:
    """Get the model configuration store from app state.

    Raises:
        HTTPException: If the store is not initialized (503 Service Unavailable).
    """
    if not hasattr(request.app.state, "model_store"):
        raise _not_initialized("Model store")
    return request.app.state.model_store
