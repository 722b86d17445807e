"""toolrelay: Tool-calling orchestration engine for chat models.

This package connects a chat model to tools exposed by one or more tool
backends. It translates tool schemas into model-friendly descriptions,
repairs the arguments models send back, caches tool results, routes
tool calls to preferred models, and runs the bounded conversation loop.
A headless FastAPI server exposes the engine over HTTP and SSE.
"""

from toolrelay.app import create_app

__version__ = "0.1.0"

__all__ = ["create_app", "__version__"]
