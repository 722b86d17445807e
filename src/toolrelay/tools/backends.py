"""In-process tool backend.

LocalToolBackend exposes plain Python callables as tools. It is the
backend used when the host application provides tools directly instead
of through a remote tool server.
"""

import inspect
import logging
from typing import Any, Callable

from toolrelay.tools.types import ToolManifest

logger = logging.getLogger(__name__)


class LocalToolBackend:
    """A ToolBackend whose tools are Python callables.

    Handlers are called with the validated arguments as keyword
    arguments and may be sync or async.

    Attributes:
        server_id: Id reported as the owning server of every tool
    """

    def __init__(self, server_id: str, connected: bool = True) -> None:
        self.server_id = server_id
        self._connected = connected
        self._tools: dict[str, tuple[ToolManifest, Callable[..., Any]]] = {}

    @property
    def connected(self) -> bool:
        return self._connected

    def connect(self) -> None:
        self._connected = True

    def disconnect(self) -> None:
        self._connected = False

    def register(
        self,
        name: str,
        handler: Callable[..., Any],
        description: str = "",
        input_schema: dict[str, Any] | None = None,
        cacheable: bool = True,
    ) -> ToolManifest:
        """Register a callable as a tool.

        Args:
            name: Tool name
            handler: Callable invoked with keyword arguments
            description: Tool description; defaults to the handler's docstring
            input_schema: JSON Schema of the tool's arguments
            cacheable: False to opt the tool out of the execution cache

        Returns:
            The manifest that will be reported for this tool
        """
        manifest = ToolManifest(
            name=name,
            description=description or inspect.getdoc(handler) or "",
            input_schema=input_schema,
            server_id=self.server_id,
            cacheable=cacheable,
        )
        self._tools[name] = (manifest, handler)
        logger.debug(f"Registered local tool {name} on {self.server_id}")
        return manifest

    def unregister(self, name: str) -> None:
        self._tools.pop(name, None)

    async def list_manifests(self) -> list[ToolManifest]:
        return [manifest for manifest, _ in self._tools.values()]

    async def invoke(self, tool_name: str, arguments: dict[str, Any]) -> Any:
        """Call a registered tool.

        Raises:
            KeyError: If no tool with this name is registered
        """
        if tool_name not in self._tools:
            raise KeyError(f"Tool '{tool_name}' is not registered on {self.server_id}")

        _, handler = self._tools[tool_name]
        result = handler(**arguments)
        if inspect.isawaitable(result):
            result = await result
        return result
