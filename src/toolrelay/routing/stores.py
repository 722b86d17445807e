"""In-memory configuration stores.

Persistent configuration storage belongs to the host application; these
stores hold whatever it (or the server settings) hands over at startup.
"""

import logging
from typing import Any

from toolrelay.routing.types import ModelConfig

logger = logging.getLogger(__name__)


class InMemoryModelConfigStore:
    """Model configurations kept in a dict, in insertion order."""

    def __init__(self, configs: list[ModelConfig] | None = None) -> None:
        self._configs: dict[str, ModelConfig] = {}
        for config in configs or []:
            self.save(config)

    def save(self, config: ModelConfig) -> None:
        """Add or replace a configuration.

        Marking a configuration as default clears the flag on all others.
        """
        if config.is_default:
            for other in self._configs.values():
                if other.id != config.id:
                    other.is_default = False
        self._configs[config.id] = config
        logger.debug(f"Saved model config {config.id} ({config.provider}/{config.model_name})")

    def delete(self, model_id: str) -> None:
        self._configs.pop(model_id, None)

    def get_default(self) -> ModelConfig | None:
        """The default configuration, else the first enabled one."""
        for config in self._configs.values():
            if config.is_default and config.enabled:
                return config
        for config in self._configs.values():
            if config.enabled:
                return config
        return None

    def get_by_id(self, model_id: str) -> ModelConfig | None:
        return self._configs.get(model_id)

    def list(self) -> list[ModelConfig]:
        return list(self._configs.values())


class InMemoryServerConfigStore:
    """Preferred models and context parameters per tool server."""

    def __init__(
        self,
        preferred_models: dict[str, str] | None = None,
        context_params: dict[str, dict[str, Any]] | None = None,
    ) -> None:
        self._preferred_models = dict(preferred_models or {})
        self._context_params = {k: dict(v) for k, v in (context_params or {}).items()}

    def set_preferred_model_id(self, server_id: str, model_id: str | None) -> None:
        if model_id is None:
            self._preferred_models.pop(server_id, None)
        else:
            self._preferred_models[server_id] = model_id

    def set_context_params(self, server_id: str, params: dict[str, Any]) -> None:
        self._context_params[server_id] = dict(params)

    def get_preferred_model_id(self, server_id: str) -> str | None:
        return self._preferred_models.get(server_id)

    def get_context_params(self, server_id: str) -> dict[str, Any]:
        return dict(self._context_params.get(server_id, {}))
