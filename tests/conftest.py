"""Pytest configuration and shared fixtures for toolrelay tests.

This module provides common fixtures used across all test modules,
including test app creation and async client setup. Chat models are
replaced by scripted fakes so no test talks to a real Ollama server.
"""

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from tests.fakes import FakeChatModel, FakeModelFactory, weather_backend
from toolrelay import create_app
from toolrelay.config import ToolRelaySettings

DEFAULT_MODEL = "llama3.2:latest"


@pytest.fixture
def test_settings():
    """Create test settings.

    Returns:
        ToolRelaySettings: Settings instance configured for testing.
    """
    return ToolRelaySettings(
        host="127.0.0.1",
        port=8000,
        ollama_host="http://localhost:11434",
        default_model=DEFAULT_MODEL,
        log_level="DEBUG",
        cors_origins=["*"],
    )


@pytest.fixture
def model_factory():
    """Model factory handing out scripted chat models."""
    return FakeModelFactory()


@pytest.fixture
def chat_model(model_factory):
    """The scripted chat model used for the default model configuration."""
    model = FakeChatModel(name=DEFAULT_MODEL)
    model_factory.models[DEFAULT_MODEL] = model
    return model


@pytest.fixture
def tool_backend():
    """A tool backend providing getWeather."""
    return weather_backend()


@pytest.fixture
def test_app(test_settings, tool_backend, model_factory):
    """Create a FastAPI test application instance.

    Args:
        test_settings: Test settings fixture.
        tool_backend: Tool backend fixture.
        model_factory: Scripted model factory fixture.

    Returns:
        FastAPI: Configured test application.
    """
    return create_app(
        settings=test_settings,
        tool_backends=[tool_backend],
        model_factory=model_factory,
    )


@pytest_asyncio.fixture
async def async_client(test_app):
    """Create an async HTTP client for testing FastAPI endpoints.

    Args:
        test_app: Test application fixture.

    Yields:
        AsyncClient: Async HTTP client for making test requests.
    """
    # Trigger the lifespan startup manually for tests
    async with test_app.router.lifespan_context(test_app):
        transport = ASGITransport(app=test_app)
        async with AsyncClient(transport=transport, base_url="http://test") as client:
            yield client
