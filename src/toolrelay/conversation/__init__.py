"""Conversation threads and turn types.

This package provides the message types making up a thread's history,
the in-memory ConversationThread, and the system instructions used
during a turn. The ConversationController lives in
toolrelay.conversation.controller.
"""

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

__all__ = [
    "ConversationThread",
    # Message types
    "Message",
    "UserMessage",
    "SystemMessage",
    "AssistantMessage",
    "ToolMessage",
    # Turn types
    "ConversationState",
    "TurnEvent",
    "TurnResult",
]
