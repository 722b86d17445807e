"""Models router for listing model configurations and the active model."""

import logging

from fastapi import APIRouter, Depends

from toolrelay.conversation.controller import ConversationController
from toolrelay.dependencies import get_controller, get_model_store
from toolrelay.models.models import (
    CurrentModelResponse,
    ModelConfigListResponse,
    ModelConfigResponse,
)
from toolrelay.routing.types import ModelConfigStore

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1", tags=["models"])


@router.get("/models", response_model=ModelConfigListResponse)
async def list_models(
    model_store: ModelConfigStore = Depends(get_model_store),
) -> ModelConfigListResponse:
    """List all configured models.

    Args:
        model_store: The model configuration store (injected).

    Returns:
        ModelConfigListResponse: Every configured model, credentials omitted.
    """
    models = [ModelConfigResponse.from_config(config) for config in model_store.list()]
    logger.info(f"Listed {len(models)} model configurations")
    return ModelConfigListResponse(models=models)


@router.get("/models/current", response_model=CurrentModelResponse)
async def get_current_model(
    controller: ConversationController = Depends(get_controller),
) -> CurrentModelResponse:
    """Get the model configuration currently active for conversations.

    Args:
        controller: The conversation controller (injected).

    Returns:
        CurrentModelResponse: The active configuration, or null if none exists.
    """
    config = controller.get_current_model_config()
    if config is None:
        return CurrentModelResponse(model=None)
    return CurrentModelResponse(model=ModelConfigResponse.from_config(config))
