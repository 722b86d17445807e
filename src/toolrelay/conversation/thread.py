"""In-memory conversation thread.

A ConversationThread holds the ordered message history of one ongoing
conversation. Threads live only as long as the controller that owns
them.
"""

import logging
import uuid

from toolrelay.conversation.types import Message, utc_timestamp

logger = logging.getLogger(__name__)


class ConversationThread:
    """Message history and identity of one conversation."""

    def __init__(
        self,
        thread_id: str | None = None,
        messages: list[Message] | None = None,
    ) -> None:
        """Initialize a thread.

        Args:
            thread_id: Thread identifier (default: a fresh 10-char hex id)
            messages: Initial message history (default: empty)
        """
        self.thread_id = thread_id or self.generate_thread_id()
        self.messages: list[Message] = messages or []
        self.created_at = utc_timestamp()
        self.updated_at = self.created_at
        self.active_model_config: str | None = None

    def __len__(self) -> int:
        return len(self.messages)

    def add_message(self, message: Message) -> None:
        """Append a message, stamping it with an id and timestamp if missing."""
        if not message.message_id:
            message.message_id = uuid.uuid4().hex[:10]
        if not message.timestamp:
            message.timestamp = utc_timestamp()
        self.messages.append(message)
        self.updated_at = utc_timestamp()

    @staticmethod
    def generate_thread_id() -> str:
        """Generate a new unique thread ID.

        Returns:
            10-character hexadecimal string
        """
        return uuid.uuid4().hex[:10]
