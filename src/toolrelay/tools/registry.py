"""Tool registry snapshots and the builder that produces them.

A ToolRegistry is an immutable snapshot of every tool available to the
model. Each OrchestrationTool in it is bound to its backend through an
invocation closure, so callers never need to know which transport a
tool lives on. The builder replaces the whole snapshot on rebuild;
calls already running against an older snapshot finish against it.
"""

import json
import logging
from dataclasses import dataclass, field, replace
from functools import partial
from typing import Any, Awaitable, Callable, Iterator

from toolrelay.conversation.types import utc_timestamp
from toolrelay.errors import BackendError, ValidationError
from toolrelay.routing.router import ModelRouter
from toolrelay.routing.types import ServerConfigStore
from toolrelay.tools.cache import ExecutionCache
from toolrelay.tools.normalizer import ParameterNormalizer
from toolrelay.tools.translator import SchemaTranslator, TranslatedSchema
from toolrelay.tools.types import (
    ToolBackend,
    ToolCallRequest,
    ToolCallResult,
    ToolManifest,
)

logger = logging.getLogger(__name__)

ToolInvoker = Callable[[ToolCallRequest], Awaitable[ToolCallResult]]


def format_result(raw: Any) -> str:
    """Render a backend result as the text fed back to the model.

    Strings pass through. MCP-style content lists (and results wrapping
    one under "content") are flattened to their text parts. Anything
    else is serialized as indented JSON.
    """
    if isinstance(raw, str):
        return raw

    content = raw.get("content") if isinstance(raw, dict) else raw
    if isinstance(content, list) and content and all(
        isinstance(item, dict) and item.get("type") == "text" for item in content
    ):
        return "\n".join(str(item.get("text", "")) for item in content)

    return json.dumps(raw, indent=2, default=str)


def _is_error_result(raw: Any) -> bool:
    return isinstance(raw, dict) and raw.get("isError") is True


@dataclass(frozen=True)
class OrchestrationTool:
    """A translated tool bound to the closure that executes it.

    Attributes:
        manifest: The manifest the backend declared
        schema: Translator output (validator, enriched description)
        invoke: Runs a ToolCallRequest through the full pipeline
    """

    manifest: ToolManifest
    schema: TranslatedSchema
    invoke: ToolInvoker

    @property
    def name(self) -> str:
        return self.manifest.name

    @property
    def server_id(self) -> str:
        return self.manifest.server_id

    @property
    def description(self) -> str:
        return self.schema.description

    def model_spec(self) -> dict[str, Any]:
        """Function-calling definition handed to the chat model."""
        return {
            "type": "function",
            "function": {
                "name": self.name,
                "description": self.description,
                "parameters": self.schema.json_schema,
            },
        }


@dataclass(frozen=True)
class ToolRegistry:
    """Immutable snapshot of the tools available for one or more turns."""

    tools: tuple[OrchestrationTool, ...] = ()
    built_at: str = field(default_factory=utc_timestamp)

    def __len__(self) -> int:
        return len(self.tools)

    def __iter__(self) -> Iterator[OrchestrationTool]:
        return iter(self.tools)

    @property
    def is_empty(self) -> bool:
        return not self.tools

    def names(self) -> list[str]:
        return [tool.name for tool in self.tools]

    def get(self, name: str) -> OrchestrationTool | None:
        for tool in self.tools:
            if tool.name == name:
                return tool
        return None

    def model_specs(self) -> list[dict[str, Any]]:
        return [tool.model_spec() for tool in self.tools]


class ToolExecutor:
    """The normalize, validate, cache, route and invoke pipeline.

    Shared by every tool of every snapshot the builder produces, so the
    execution cache and the model router are shared too.
    """

    def __init__(
        self,
        normalizer: ParameterNormalizer,
        cache: ExecutionCache,
        router: ModelRouter,
        server_store: ServerConfigStore | None = None,
    ) -> None:
        self.normalizer = normalizer
        self.cache = cache
        self.router = router
        self.server_store = server_store

    def prepare_arguments(
        self, schema: TranslatedSchema, request: ToolCallRequest
    ) -> tuple[dict[str, Any], tuple[str, ...]]:
        """Normalize and validate a request's arguments.

        Falls back to positional mapping once if validation fails after
        the repair pass.

        Returns:
            (validated arguments, normalization warnings)

        Raises:
            ValidationError: If the arguments cannot be made to fit the schema
        """
        parameters = list(schema.parameters)
        normalized = self.normalizer.normalize(request.raw_arguments, parameters)
        warnings = tuple(str(w) for w in normalized.warnings)

        try:
            return schema.validator.validate(normalized.arguments), warnings
        except ValidationError as first_error:
            positional = self.normalizer.positional_mapping(request.raw_arguments, parameters)
            if positional is None:
                raise
            logger.warning(
                f"Arguments for {request.tool_name} failed validation, retrying with positional mapping"
            )
            try:
                return schema.validator.validate(positional), warnings
            except ValidationError:
                raise first_error from None

    async def execute(
        self,
        manifest: ToolManifest,
        schema: TranslatedSchema,
        backend: ToolBackend,
        request: ToolCallRequest,
    ) -> ToolCallResult:
        """Run one tool call through the pipeline.

        Raises:
            ValidationError: If the arguments are invalid after repair
            BackendError: If the backend invocation fails
        """
        arguments, warnings = self.prepare_arguments(schema, request)

        if manifest.cacheable:
            cached = self.cache.get(manifest.name, arguments)
            if cached is not None:
                return replace(
                    cached,
                    request_id=request.id,
                    served_from_cache=True,
                    warnings=warnings,
                )

        async def call_backend() -> str:
            context = {}
            if self.server_store is not None:
                context = self.server_store.get_context_params(manifest.server_id)
            try:
                raw = await backend.invoke(manifest.name, {**arguments, **context})
            except Exception as e:
                raise BackendError(manifest.name, manifest.server_id, str(e)) from e
            if _is_error_result(raw):
                raise BackendError(manifest.name, manifest.server_id, format_result(raw))
            return format_result(raw)

        text, config = await self.router.run_for_tool(manifest.server_id, call_backend)
        logger.debug(f"Executed {manifest.name} on {manifest.server_id}")

        result = ToolCallResult(
            request_id=request.id,
            tool_name=manifest.name,
            result_text=text,
            model_used=config.id if config is not None else None,
            arguments=arguments,
            warnings=warnings,
        )
        if manifest.cacheable:
            self.cache.put(manifest.name, arguments, result)
        return result


class ToolRegistryBuilder:
    """Builds registry snapshots from the currently known tool backends.

    Attributes:
        translator: Translates each manifest
        executor: Pipeline every built tool is bound to
    """

    def __init__(
        self,
        translator: SchemaTranslator,
        executor: ToolExecutor,
        backends: list[ToolBackend] | None = None,
    ) -> None:
        self.translator = translator
        self.executor = executor
        self._backends: list[ToolBackend] = list(backends or [])

    @property
    def backends(self) -> list[ToolBackend]:
        return list(self._backends)

    def add_backend(self, backend: ToolBackend) -> None:
        self._backends.append(backend)

    def remove_backend(self, server_id: str) -> None:
        self._backends = [b for b in self._backends if b.server_id != server_id]

    async def build(self) -> ToolRegistry:
        """Query every connected backend and produce a fresh snapshot.

        Backends that are disconnected or fail to list their manifests
        are skipped. When two servers declare the same tool name, the
        first one wins.
        """
        tools: list[OrchestrationTool] = []
        seen: dict[str, str] = {}

        for backend in self._backends:
            if not backend.connected:
                logger.debug(f"Skipping disconnected tool backend {backend.server_id}")
                continue
            try:
                manifests = await backend.list_manifests()
            except Exception as e:
                logger.warning(f"Failed to list tools from {backend.server_id}: {e}")
                continue

            for manifest in manifests:
                if not manifest.server_id:
                    manifest = replace(manifest, server_id=backend.server_id)
                if manifest.name in seen:
                    logger.warning(
                        f"Tool {manifest.name} from {manifest.server_id} ignored, "
                        f"already provided by {seen[manifest.name]}"
                    )
                    continue
                seen[manifest.name] = manifest.server_id

                schema = self.translator.translate(manifest)
                tools.append(
                    OrchestrationTool(
                        manifest=manifest,
                        schema=schema,
                        invoke=partial(self.executor.execute, manifest, schema, backend),
                    )
                )

        registry = ToolRegistry(tools=tuple(tools))
        logger.info(f"Tool registry built with {len(registry)} tools")
        return registry
