"""Pytest configuration for integration tests.

This module provides integration-test-specific fixtures that ensure
proper test isolation and mocking for API endpoint tests.
"""

from unittest.mock import AsyncMock, patch

import pytest


@pytest.fixture(autouse=True)
def mock_ollama_client():
    """Mock OllamaClient for all integration tests.

    This fixture patches the OllamaClient class before the app is created,
    ensuring the lifespan uses our mock instead of creating a real client.
    """
    with patch("toolrelay.app.OllamaClient") as mock_client_class:
        mock_instance = AsyncMock()
        mock_instance.host = "http://localhost:11434"
        mock_instance.check_connection.return_value = True

        # Return the mock instance when OllamaClient is instantiated
        mock_client_class.return_value = mock_instance

        yield mock_instance
