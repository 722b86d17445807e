"""Model routing: which model configuration is active, and per-tool switches.

The router owns the single mutable "active model" slot. Every
switch-execute-restore sequence runs under one asyncio lock so no other
tool call can observe or mutate the slot halfway through.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Awaitable, Callable, TypeVar

from toolrelay.errors import ModelNotConfiguredError, RouterError
from toolrelay.routing.factory import ChatModelFactory, create_chat_model
from toolrelay.routing.types import (
    ChatModel,
    ModelConfig,
    ModelConfigStore,
    ServerConfigStore,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class ActiveModel:
    """A model configuration together with its live handle."""

    config: ModelConfig
    model: ChatModel


class ModelRouter:
    """Tracks the active chat model and routes tool calls to preferred models.

    Attributes:
        model_store: Source of model configurations
        server_store: Source of per-server preferred model ids (optional)
    """

    def __init__(
        self,
        model_store: ModelConfigStore,
        server_store: ServerConfigStore | None = None,
        model_factory: ChatModelFactory = create_chat_model,
    ) -> None:
        """Initialize the router.

        Args:
            model_store: Source of model configurations
            server_store: Source of per-server preferred model ids
            model_factory: Builds a fresh chat model handle for a configuration
        """
        self.model_store = model_store
        self.server_store = server_store
        self._model_factory = model_factory
        self._active: ActiveModel | None = None
        self._lock = asyncio.Lock()

    def get_current_model_config(self) -> ModelConfig | None:
        """The active configuration, or the store's default before first use."""
        if self._active is not None:
            return self._active.config
        return self.model_store.get_default()

    def _activate(self, model_id: str) -> ActiveModel:
        config = self.model_store.get_by_id(model_id)
        if config is None:
            raise RouterError(model_id, f"Model config '{model_id}' not found")
        return ActiveModel(config=config, model=self._model_factory(config))

    async def ensure_active(self) -> ActiveModel:
        """Return the active model, activating the default if needed.

        Raises:
            ModelNotConfiguredError: If there is no model configuration at all
            RouterError: If the default configuration cannot be instantiated
        """
        async with self._lock:
            if self._active is None:
                default = self.model_store.get_default()
                if default is None:
                    raise ModelNotConfiguredError("No model configuration available")
                self._active = ActiveModel(config=default, model=self._model_factory(default))
                logger.info(f"Activated default model {default.id} ({default.model_name})")
            return self._active

    async def select_model(self, model_id: str) -> bool:
        """Persistently switch the active model.

        A failed switch is logged and the current model stays active.

        Returns:
            True if the requested model is now active
        """
        async with self._lock:
            if self._active is not None and self._active.config.id == model_id:
                return True
            try:
                self._active = self._activate(model_id)
            except RouterError as e:
                logger.warning(f"Could not switch to model {model_id}, keeping current model: {e}")
                return False
            logger.info(f"Switched active model to {model_id}")
            return True

    async def run_for_tool(
        self,
        server_id: str,
        call: Callable[[], Awaitable[T]],
    ) -> tuple[T, ModelConfig | None]:
        """Execute a tool call under the owning server's preferred model.

        If the server declares a preferred model different from the active
        one, the router switches to it, runs the call, and switches back
        unconditionally, including when the call raises or is cancelled.
        A failed switch is logged and the call runs on the active model.

        Args:
            server_id: Id of the server that owns the tool
            call: Zero-argument coroutine function performing the invocation

        Returns:
            (call result, configuration that was active during the call)
        """
        async with self._lock:
            previous = self._active
            switched = False

            preferred = None
            if self.server_store is not None:
                preferred = self.server_store.get_preferred_model_id(server_id)

            current_id = previous.config.id if previous is not None else None
            if preferred and preferred != current_id:
                try:
                    self._active = self._activate(preferred)
                    switched = True
                    logger.info(f"Switched to preferred model {preferred} for server {server_id}")
                except RouterError as e:
                    logger.warning(
                        f"Preferred model {preferred} for server {server_id} unavailable, "
                        f"continuing on {current_id}: {e}"
                    )

            try:
                used = self._active.config if self._active is not None else None
                return await call(), used
            finally:
                if switched:
                    self._active = previous
                    logger.info(f"Restored model {current_id} after tool call on {server_id}")
