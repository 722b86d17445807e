"""Conversation controller: the turn loop tying the engine together.

One user turn runs as an explicit state machine:

    AWAITING_USER -> CALLING_MODEL -> DONE
                         |   ^
                         v   |
                    EXECUTING_TOOLS

The loop is bounded by max_iterations tool-execution passes. Model
failures end the turn with an error message; tool failures become tool
result messages and the loop continues so the model can react.
"""

import asyncio
import logging
from typing import Any, AsyncIterator

from toolrelay.conversation.prompts import NO_TOOLS_INSTRUCTION, tools_instruction
from toolrelay.conversation.thread import ConversationThread
from toolrelay.conversation.types import (
    AssistantMessage,
    ConversationState,
    Message,
    SystemMessage,
    ToolMessage,
    TurnEvent,
    TurnResult,
    UserMessage,
)
from toolrelay.errors import RouterError, ToolRelayError
from toolrelay.routing.router import ModelRouter
from toolrelay.routing.types import ModelConfig, ModelResponse
from toolrelay.tools.cache import ExecutionCache
from toolrelay.tools.registry import ToolRegistry, ToolRegistryBuilder
from toolrelay.tools.types import ToolCallRequest, ToolCallResult

logger = logging.getLogger(__name__)

DEFAULT_MAX_ITERATIONS = 10


def tool_error_text(tool_name: str, message: str) -> str:
    return f"Error executing {tool_name}: {message}"


class ConversationController:
    """Runs user turns against the active model and the current tool registry.

    Attributes:
        router: Model router owning the active model
        builder: Produces tool registry snapshots
        cache: Execution cache shared with the registry's tools
        max_iterations: Maximum tool-execution passes per turn
    """

    def __init__(
        self,
        router: ModelRouter,
        builder: ToolRegistryBuilder,
        cache: ExecutionCache,
        max_iterations: int = DEFAULT_MAX_ITERATIONS,
    ) -> None:
        self.router = router
        self.builder = builder
        self.cache = cache
        self.max_iterations = max_iterations

        self._registry: ToolRegistry | None = None
        self._thread = ConversationThread()
        self._threads: dict[str, ConversationThread] = {self._thread.thread_id: self._thread}
        self._state = ConversationState.AWAITING_USER
        self._turn_lock = asyncio.Lock()
        self._refresh_lock = asyncio.Lock()

    @property
    def state(self) -> ConversationState:
        return self._state

    @property
    def registry(self) -> ToolRegistry | None:
        return self._registry

    @property
    def thread(self) -> ConversationThread:
        return self._thread

    # --- Thread operations ---

    def start_new_conversation(self) -> str:
        """Discard the current thread and clear the execution cache.

        The tool registry and the active model are left untouched.

        Returns:
            The id of the new thread
        """
        self._threads.pop(self._thread.thread_id, None)
        self._thread = ConversationThread()
        self._threads[self._thread.thread_id] = self._thread
        self._state = ConversationState.AWAITING_USER
        self.cache.clear()
        logger.info(f"Started new conversation with thread ID: {self._thread.thread_id}")
        return self._thread.thread_id

    def set_thread_id(self, thread_id: str) -> None:
        """Make thread_id the current thread, resuming its history if known."""
        if thread_id == self._thread.thread_id:
            return
        thread = self._threads.get(thread_id)
        if thread is None:
            thread = ConversationThread(thread_id=thread_id)
            self._threads[thread_id] = thread
        self._thread = thread
        self._state = ConversationState.AWAITING_USER
        logger.info(f"Switched to thread {thread_id} ({len(thread)} messages)")

    def get_thread_id(self) -> str:
        return self._thread.thread_id

    def clear_execution_cache(self) -> None:
        self.cache.clear()

    def get_current_model_config(self) -> ModelConfig | None:
        return self.router.get_current_model_config()

    async def refresh_tool_registry(self) -> ToolRegistry:
        """Rebuild the tool registry and swap it in.

        Turns already running keep the snapshot they started with.
        """
        async with self._refresh_lock:
            registry = await self.builder.build()
            self._registry = registry
        logger.info(f"Tool registry refreshed: {', '.join(registry.names()) or 'no tools'}")
        return registry

    # --- Turns ---

    async def process_message(
        self,
        text: str,
        model_id: str | None = None,
        cancel_event: asyncio.Event | None = None,
    ) -> TurnResult:
        """Run one user turn to completion.

        Args:
            text: The user's message
            model_id: Optional model config id to switch to before the turn
            cancel_event: Set by the caller to stop the turn between steps

        Returns:
            TurnResult with the final assistant message and executed tool calls

        Raises:
            ModelNotConfiguredError: If no model configuration exists at all
        """
        result: TurnResult | None = None
        async for event in self.iter_turn(text, model_id=model_id, cancel_event=cancel_event):
            if event.type == "message_complete":
                result = event.data["result"]
        if result is None:
            raise ToolRelayError("Turn ended without a result")
        return result

    async def iter_turn(
        self,
        text: str,
        model_id: str | None = None,
        cancel_event: asyncio.Event | None = None,
    ) -> AsyncIterator[TurnEvent]:
        """Run one user turn, yielding progress events.

        The last event is always "message_complete" carrying the TurnResult
        under data["result"].

        Raises:
            ModelNotConfiguredError: If no model configuration exists at all
        """
        async with self._turn_lock:
            if model_id:
                current = self.router.get_current_model_config()
                if current is None or current.id != model_id:
                    await self.router.select_model(model_id)

            # Raises ModelNotConfiguredError before the thread is touched
            try:
                await self.router.ensure_active()
            except RouterError as e:
                logger.error(f"Default model could not be activated: {e}")
                self._thread.add_message(UserMessage(content=text))
                yield self._finish(self._error_message(e), [], 0)
                return

            registry = self._registry
            self._thread.add_message(UserMessage(content=text))

            if registry is None or registry.is_empty:
                async for event in self._degraded_turn(cancel_event):
                    yield event
                return

            async for event in self._tool_loop(registry, cancel_event):
                yield event

    async def _degraded_turn(self, cancel_event: asyncio.Event | None) -> AsyncIterator[TurnEvent]:
        logger.info("No tools available, answering from the model alone")
        yield self._transition(ConversationState.CALLING_MODEL)

        if _cancelled(cancel_event):
            yield self._finish(AssistantMessage(content=""), [], 0, cancelled=True, degraded=True)
            return

        try:
            response = await self._invoke_model(SystemMessage(content=NO_TOOLS_INSTRUCTION), None)
        except Exception as e:
            logger.error(f"Model call failed: {e}")
            yield self._finish(self._error_message(e), [], 0, degraded=True)
            return

        message = self._assistant_message(response)
        message.tool_calls = []
        self._thread.add_message(message)
        yield self._finish(message, [], 0, degraded=True)

    async def _tool_loop(
        self, registry: ToolRegistry, cancel_event: asyncio.Event | None
    ) -> AsyncIterator[TurnEvent]:
        instruction = SystemMessage(content=tools_instruction(registry.names()))
        tool_specs = registry.model_specs()
        executed: list[ToolCallResult] = []
        iterations = 0

        while True:
            if _cancelled(cancel_event):
                yield self._finish(AssistantMessage(content=""), executed, iterations, cancelled=True)
                return
            yield self._transition(ConversationState.CALLING_MODEL)

            try:
                response = await self._invoke_model(instruction, tool_specs)
            except Exception as e:
                logger.error(f"Model call failed: {e}")
                yield self._finish(self._error_message(e), executed, iterations)
                return

            if not response.tool_calls:
                message = self._assistant_message(response)
                self._thread.add_message(message)
                yield self._finish(message, executed, iterations)
                return

            if iterations >= self.max_iterations:
                warning = f"Stopped after {iterations} tool iterations without a final answer"
                logger.warning(warning)
                yield TurnEvent(type="warning", data={"message": warning})
                message = self._assistant_message(response)
                message.tool_calls = []
                if not message.content:
                    message.content = warning
                self._thread.add_message(message)
                yield self._finish(message, executed, iterations, iteration_limit_reached=True)
                return

            if _cancelled(cancel_event):
                message = self._assistant_message(response)
                message.tool_calls = []
                yield self._finish(message, executed, iterations, cancelled=True)
                return

            self._thread.add_message(self._assistant_message(response))
            yield self._transition(ConversationState.EXECUTING_TOOLS)
            iterations += 1

            for request in response.tool_calls:
                yield TurnEvent(
                    type="tool_call",
                    data={"id": request.id, "tool_name": request.tool_name, "arguments": request.raw_arguments},
                )
                result = await self._execute_tool(registry, request)
                executed.append(result)
                self._thread.add_message(ToolMessage.from_result(result, message_id=""))

                yield TurnEvent(type="tool_result", data=tool_result_data(result))
                for warning in result.warnings:
                    yield TurnEvent(type="warning", data={"tool_name": result.tool_name, "message": warning})

    async def _invoke_model(
        self, instruction: SystemMessage, tools: list[dict[str, Any]] | None
    ) -> ModelResponse:
        active = await self.router.ensure_active()
        self._thread.active_model_config = active.config.id
        messages: list[Message] = [instruction, *self._thread.messages]
        return await active.model.invoke(messages, tools)

    async def _execute_tool(self, registry: ToolRegistry, request: ToolCallRequest) -> ToolCallResult:
        tool = registry.get(request.tool_name)
        if tool is None:
            available = ", ".join(registry.names())
            logger.warning(f"Model requested unknown tool {request.tool_name}")
            return ToolCallResult(
                request_id=request.id,
                tool_name=request.tool_name,
                result_text=tool_error_text(
                    request.tool_name,
                    f"Tool '{request.tool_name}' is not available. Available tools: {available}",
                ),
                arguments=request.raw_arguments,
                error=True,
            )

        try:
            return await tool.invoke(request)
        except Exception as e:
            logger.error(f"Tool {request.tool_name} failed: {e}")
            return ToolCallResult(
                request_id=request.id,
                tool_name=request.tool_name,
                result_text=tool_error_text(request.tool_name, str(e)),
                arguments=request.raw_arguments,
                error=True,
            )

    # --- Helpers ---

    def _transition(self, state: ConversationState) -> TurnEvent:
        self._state = state
        return TurnEvent(type="state", data={"state": state.value})

    def _assistant_message(self, response: ModelResponse) -> AssistantMessage:
        return AssistantMessage(
            content=response.content,
            model=response.model,
            eval_count=response.eval_count,
            prompt_eval_count=response.prompt_eval_count,
            tool_calls=list(response.tool_calls),
        )

    def _error_message(self, error: Exception) -> AssistantMessage:
        message = AssistantMessage(content=f"Error: {error}")
        self._thread.add_message(message)
        return message

    def _finish(
        self,
        message: AssistantMessage,
        executed: list[ToolCallResult],
        iterations: int,
        **flags: bool,
    ) -> TurnEvent:
        self._state = ConversationState.DONE
        result = TurnResult(
            thread_id=self._thread.thread_id,
            message=message,
            tool_calls=list(executed),
            state=ConversationState.DONE,
            iterations=iterations,
            **flags,
        )
        logger.info(
            f"Turn finished on thread {result.thread_id}: "
            f"{len(executed)} tool calls, {iterations} iterations"
        )
        return TurnEvent(type="message_complete", data={"result": result})


def _cancelled(cancel_event: asyncio.Event | None) -> bool:
    return cancel_event is not None and cancel_event.is_set()


def tool_result_data(result: ToolCallResult) -> dict[str, Any]:
    """Serializable view of a tool call result."""
    return {
        "id": result.request_id,
        "tool_name": result.tool_name,
        "arguments": result.arguments,
        "result": result.result_text,
        "model_used": result.model_used,
        "served_from_cache": result.served_from_cache,
        "error": result.error,
        "warnings": list(result.warnings),
    }
