"""Unit tests for the FastAPI app factory and configuration."""

from fastapi import FastAPI

from toolrelay import __version__, create_app
from toolrelay.config import ToolRelaySettings


def test_create_app_returns_fastapi_instance():
    """Test that create_app returns a FastAPI instance."""
    app = create_app()
    assert isinstance(app, FastAPI)


def test_create_app_with_settings(test_settings):
    """Test that create_app accepts custom settings."""
    app = create_app(settings=test_settings)
    assert isinstance(app, FastAPI)
    assert app.state.settings is test_settings


def test_create_app_metadata():
    """Test that app has correct metadata."""
    app = create_app()
    assert app.title == "toolrelay"
    assert app.version == "0.1.0"
    assert "orchestration engine" in app.description


def test_create_app_includes_routers():
    """Test that every router is registered."""
    app = create_app()

    routes = [route.path for route in app.routes]  # type: ignore[attr-defined]
    for path in [
        "/api/v1/health",
        "/api/v1/models",
        "/api/v1/models/current",
        "/api/v1/chat",
        "/api/v1/chat/stream",
        "/api/v1/chat/new",
        "/api/v1/chat/thread",
        "/api/v1/tools",
        "/api/v1/tools/refresh",
        "/api/v1/tools/cache",
    ]:
        assert path in routes


def test_create_app_has_cors_middleware(test_settings):
    """Test that CORS middleware is configured."""
    app = create_app(settings=test_settings)

    middleware_classes = [m.cls.__name__ for m in app.user_middleware]  # type: ignore[attr-defined]
    assert "CORSMiddleware" in middleware_classes


def test_create_app_stores_tool_backends(test_settings, tool_backend):
    """Test that tool backends are kept for the lifespan to use."""
    app = create_app(settings=test_settings, tool_backends=[tool_backend])
    assert app.state.tool_backends == [tool_backend]


def test_version_constant():
    """Test that __version__ is defined and matches app version."""
    assert __version__ == "0.1.0"


def test_settings_default_values():
    """Test that settings have correct default values."""
    settings = ToolRelaySettings()

    assert settings.host == "127.0.0.1"
    assert settings.port == 8000
    assert settings.ollama_host == "http://localhost:11434"
    assert settings.default_model == "llama3.2:latest"
    assert settings.log_level == "INFO"
    assert settings.cache_ttl_seconds == 30.0
    assert settings.cache_capacity == 50
    assert settings.fuzzy_match_threshold == 0.7
    assert settings.max_tool_iterations == 10


def test_settings_env_prefix(monkeypatch):
    """Test that settings respect TOOLRELAY_ environment variable prefix."""
    monkeypatch.setenv("TOOLRELAY_PORT", "9000")
    monkeypatch.setenv("TOOLRELAY_OLLAMA_HOST", "http://custom:11434")
    monkeypatch.setenv("TOOLRELAY_PREFERRED_MODELS", '{"git-server": "coder"}')

    settings = ToolRelaySettings()

    assert settings.port == 9000
    assert settings.ollama_host == "http://custom:11434"
    assert settings.preferred_models == {"git-server": "coder"}
