"""FastAPI routers for API endpoints.

This package contains all route handlers organized by resource type.
Each router module defines endpoints for a specific domain (health, chat, tools, models).
"""

from toolrelay.routers import chat, health, models, tools

__all__ = [
    "chat",
    "health",
    "models",
    "tools",
]
