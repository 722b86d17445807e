"""Tools router for inspecting and refreshing the tool registry."""

import logging

from fastapi import APIRouter, Depends

from toolrelay.conversation.controller import ConversationController
from toolrelay.dependencies import get_controller
from toolrelay.models.tools import CacheClearedResponse, ToolInfo, ToolListResponse
from toolrelay.tools.registry import ToolRegistry

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/tools", tags=["tools"])


def registry_to_response(registry: ToolRegistry | None) -> ToolListResponse:
    """Convert a registry snapshot to its API representation."""
    if registry is None:
        return ToolListResponse(tools=[], built_at=None)

    return ToolListResponse(
        tools=[
            ToolInfo(
                name=tool.name,
                server_id=tool.server_id,
                description=tool.description,
                parameters=tool.schema.json_schema,
                schema_valid=tool.schema.schema_valid,
                cacheable=tool.manifest.cacheable,
            )
            for tool in registry
        ],
        built_at=registry.built_at,
    )


@router.get("", response_model=ToolListResponse)
async def list_tools(
    controller: ConversationController = Depends(get_controller),
) -> ToolListResponse:
    """List the tools of the current registry snapshot.

    Args:
        controller: The conversation controller (injected).

    Returns:
        ToolListResponse: Tools with their enriched descriptions.
    """
    return registry_to_response(controller.registry)


@router.post("/refresh", response_model=ToolListResponse)
async def refresh_tools(
    controller: ConversationController = Depends(get_controller),
) -> ToolListResponse:
    """Rebuild the tool registry from the connected tool backends.

    Turns already in progress finish against the snapshot they started with.

    Args:
        controller: The conversation controller (injected).

    Returns:
        ToolListResponse: The new snapshot.
    """
    registry = await controller.refresh_tool_registry()
    return registry_to_response(registry)


@router.delete("/cache", response_model=CacheClearedResponse)
async def clear_cache(
    controller: ConversationController = Depends(get_controller),
) -> CacheClearedResponse:
    """Drop every entry of the execution cache.

    Args:
        controller: The conversation controller (injected).

    Returns:
        CacheClearedResponse: Confirmation.
    """
    controller.clear_execution_cache()
    return CacheClearedResponse(cleared=True)
