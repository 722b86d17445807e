"""Chat API endpoints.

This module provides endpoints for running conversation turns, including
non-streaming and streaming responses via SSE, and for managing the
current conversation thread.
"""

import asyncio
import logging

from fastapi import APIRouter, Depends, HTTPException, Request
from sse_starlette.sse import EventSourceResponse

from toolrelay.conversation.controller import ConversationController
from toolrelay.conversation.types import TurnEvent
from toolrelay.dependencies import get_controller
from toolrelay.errors import ModelNotConfiguredError
from toolrelay.models.chat import (
    ChatRequest,
    ChatResponse,
    DoneEvent,
    ErrorEvent,
    MessageCompleteEvent,
    SetThreadRequest,
    StateEvent,
    ThreadResponse,
    ToolCallEvent,
    ToolCallRecord,
    WarningEvent,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/chat", tags=["chat"])


def _model_not_configured(error: ModelNotConfiguredError) -> HTTPException:
    return HTTPException(
        status_code=409,
        detail={
            "error": {
                "code": "model_not_configured",
                "message": str(error),
                "details": {},
            }
        },
    )


def _event_payload(event: TurnEvent) -> str:
    """Serialize a turn event's data with the matching SSE model."""
    if event.type == "state":
        return StateEvent(**event.data).model_dump_json()
    if event.type == "tool_call":
        return ToolCallEvent(**event.data).model_dump_json()
    if event.type == "tool_result":
        return ToolCallRecord(**event.data).model_dump_json()
    if event.type == "warning":
        return WarningEvent(**event.data).model_dump_json()
    if event.type == "message_complete":
        response = ChatResponse.from_result(event.data["result"])
        return MessageCompleteEvent(response=response).model_dump_json()
    raise ValueError(f"Unknown turn event type: {event.type}")


@router.post("", response_model=ChatResponse)
async def chat_non_streaming(
    request_body: ChatRequest,
    controller: ConversationController = Depends(get_controller),
) -> ChatResponse:
    """Send a message and receive the final answer of the turn.

    The turn runs to completion, including every tool call the model
    requests, before the response is returned.

    Args:
        request_body: Chat request containing the message and optional model id
        controller: Injected conversation controller

    Returns:
        ChatResponse with the final assistant message and executed tool calls

    Raises:
        HTTPException: 409 if no model is configured
    """
    logger.info(f"Processing message on thread {controller.get_thread_id()}")

    try:
        result = await controller.process_message(
            request_body.message,
            model_id=request_body.model_id,
        )
    except ModelNotConfiguredError as e:
        logger.error(f"Cannot process message: {e}")
        raise _model_not_configured(e)

    return ChatResponse.from_result(result)


@router.post("/stream")
async def chat_streaming(
    request_body: ChatRequest,
    request: Request,
    controller: ConversationController = Depends(get_controller),
) -> EventSourceResponse:
    """Run a turn and stream its progress via Server-Sent Events (SSE).

    Args:
        request_body: Chat request containing the message and optional model id
        request: FastAPI request object
        controller: Injected conversation controller

    Returns:
        EventSourceResponse with SSE events

    SSE Events:
        - state: Controller state transitions
        - tool_call: A tool call requested by the model
        - tool_result: The result of an executed tool call
        - warning: Argument normalization warnings, iteration limit
        - message_complete: Final turn outcome
        - error: If the turn could not run
        - done: Stream is complete

    Raises:
        HTTPException: 409 if no model is configured
    """
    if controller.get_current_model_config() is None:
        raise _model_not_configured(ModelNotConfiguredError("No model configuration available"))

    cancel_event = asyncio.Event()

    async def event_generator():
        """Generate SSE events from the turn's progress events."""
        try:
            async for event in controller.iter_turn(
                request_body.message,
                model_id=request_body.model_id,
                cancel_event=cancel_event,
            ):
                if await request.is_disconnected():
                    logger.warning(
                        f"Client disconnected during turn on thread {controller.get_thread_id()}"
                    )
                    cancel_event.set()

                yield {
                    "event": event.type,
                    "data": _event_payload(event),
                }

            done_event = DoneEvent(thread_id=controller.get_thread_id())
            yield {
                "event": "done",
                "data": done_event.model_dump_json(),
            }

        except Exception as e:
            logger.error(f"Error during streaming turn: {e}")
            code = "model_not_configured" if isinstance(e, ModelNotConfiguredError) else "turn_error"
            error_event = ErrorEvent(
                code=code,
                message=f"Failed to run turn: {str(e)}",
                details={"thread_id": controller.get_thread_id()},
            )
            yield {
                "event": "error",
                "data": error_event.model_dump_json(),
            }

    return EventSourceResponse(event_generator())


@router.post("/new", response_model=ThreadResponse)
async def new_conversation(
    controller: ConversationController = Depends(get_controller),
) -> ThreadResponse:
    """Start a new conversation.

    Discards the current thread's history and clears the execution cache.
    The tool registry and the active model are kept.
    """
    thread_id = controller.start_new_conversation()
    return ThreadResponse(thread_id=thread_id)


@router.get("/thread", response_model=ThreadResponse)
async def get_thread(
    controller: ConversationController = Depends(get_controller),
) -> ThreadResponse:
    """Get the current thread id."""
    return ThreadResponse(thread_id=controller.get_thread_id())


@router.put("/thread", response_model=ThreadResponse)
async def set_thread(
    request_body: SetThreadRequest,
    controller: ConversationController = Depends(get_controller),
) -> ThreadResponse:
    """Switch the current thread, resuming its history if it is known."""
    controller.set_thread_id(request_body.thread_id)
    return ThreadResponse(thread_id=controller.get_thread_id())
