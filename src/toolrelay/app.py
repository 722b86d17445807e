"""FastAPI application factory and lifespan management.

This module contains the create_app() factory function that creates and configures
the FastAPI application instance, including lifespan management for startup/shutdown
and router registration.
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from toolrelay.config import ToolRelaySettings
from toolrelay.conversation.controller import ConversationController
from toolrelay.ollama import OllamaClient
from toolrelay.routers import chat, health, models, tools
from toolrelay.routing.factory import ChatModelFactory, create_chat_model
from toolrelay.routing.router import ModelRouter
from toolrelay.routing.stores import InMemoryModelConfigStore, InMemoryServerConfigStore
from toolrelay.tools.cache import ExecutionCache
from toolrelay.tools.normalizer import ParameterNormalizer
from toolrelay.tools.registry import ToolExecutor, ToolRegistryBuilder
from toolrelay.tools.translator import SchemaTranslator
from toolrelay.tools.types import ToolBackend

logger = logging.getLogger(__name__)


def build_controller(
    settings: ToolRelaySettings,
    model_store: InMemoryModelConfigStore,
    tool_backends: list[ToolBackend] | None = None,
    model_factory: ChatModelFactory = create_chat_model,
) -> ConversationController:
    """Wire the engine components together from settings.

    Args:
        settings: Application settings
        model_store: Store holding the model configurations
        tool_backends: Tool backends to build the registry from
        model_factory: Builds chat model handles for configurations

    Returns:
        ConversationController ready for refresh_tool_registry()
    """
    server_store = InMemoryServerConfigStore(
        preferred_models=settings.preferred_models,
        context_params=settings.context_params,
    )
    router = ModelRouter(model_store, server_store, model_factory=model_factory)
    cache = ExecutionCache(
        ttl_seconds=settings.cache_ttl_seconds,
        capacity=settings.cache_capacity,
    )
    executor = ToolExecutor(
        normalizer=ParameterNormalizer(threshold=settings.fuzzy_match_threshold),
        cache=cache,
        router=router,
        server_store=server_store,
    )
    builder = ToolRegistryBuilder(SchemaTranslator(), executor, backends=tool_backends)
    return ConversationController(
        router=router,
        builder=builder,
        cache=cache,
        max_iterations=settings.max_tool_iterations,
    )


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Lifespan context manager for FastAPI application.

    This function handles startup and shutdown logic for the application.
    The engine (model router, execution cache, registry builder and
    conversation controller) is created once at startup and stored in
    app.state for reuse across all requests.

    Args:
        app: The FastAPI application instance.

    Yields:
        None: Control is yielded while the app is running.
    """
    settings: ToolRelaySettings = app.state.settings

    # Startup: Initialize Ollama client for health checks
    app.state.ollama_client = OllamaClient(host=settings.ollama_host)
    logger.info(f"Initialized Ollama client with host: {settings.ollama_host}")

    connected = await app.state.ollama_client.check_connection()
    if connected:
        logger.info("Successfully connected to Ollama")
    else:
        logger.warning("Could not connect to Ollama - check if server is running")

    # Startup: Build the engine
    app.state.model_store = InMemoryModelConfigStore(settings.model_configs())
    app.state.controller = build_controller(
        settings,
        app.state.model_store,
        tool_backends=app.state.tool_backends,
        model_factory=app.state.model_factory,
    )
    registry = await app.state.controller.refresh_tool_registry()
    logger.info(f"Conversation engine ready with {len(registry)} tools")

    yield

    # Shutdown: Clean up resources
    if hasattr(app.state, "ollama_client"):
        await app.state.ollama_client.close()
        logger.info("Ollama client closed")


def create_app(
    settings: ToolRelaySettings | None = None,
    tool_backends: list[ToolBackend] | None = None,
    model_factory: ChatModelFactory = create_chat_model,
) -> FastAPI:
    """Create and configure the FastAPI application.

    This factory function creates a FastAPI instance with all routers,
    middleware, and configuration applied. It can accept an optional
    settings object for testing or explicit configuration.

    Args:
        settings: Optional ToolRelaySettings instance. If not provided,
                  settings will be loaded from environment variables.
        tool_backends: Tool backends whose tools are offered to the model.
        model_factory: Builds chat model handles for model configurations.

    Returns:
        FastAPI: Configured FastAPI application instance.
    """
    if settings is None:
        from toolrelay.dependencies import get_settings

        settings = get_settings()

    app = FastAPI(
        title="toolrelay",
        description="Tool-calling orchestration engine for chat models",
        version="0.1.0",
        lifespan=lifespan,
    )

    # Store settings and collaborators in app.state for lifespan access
    app.state.settings = settings
    app.state.tool_backends = list(tool_backends or [])
    app.state.model_factory = model_factory

    # Configure CORS
    # Note: FastAPI's type hints for add_middleware are overly strict
    app.add_middleware(
        CORSMiddleware,  # type: ignore[arg-type]
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Register routers
    app.include_router(health.router)
    app.include_router(models.router)
    app.include_router(chat.router)
    app.include_router(tools.router)

    return app
