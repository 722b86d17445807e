"""Short-lived memo of tool results to suppress duplicate calls."""

import json
import logging
import time
from dataclasses import dataclass
from typing import Any, Callable

logger = logging.getLogger(__name__)

DEFAULT_TTL_SECONDS = 30.0
DEFAULT_CAPACITY = 50


@dataclass(frozen=True)
class CacheEntry:
    """A cached tool result."""

    key: str
    result: Any
    created_at: float


def cache_key(tool_name: str, arguments: dict[str, Any]) -> str:
    """Canonical cache key for a tool call.

    Arguments are serialized with sorted keys so that equivalent argument
    maps produce the same key regardless of insertion order.
    """
    serialized = json.dumps(arguments, sort_keys=True, separators=(",", ":"), default=str)
    return f"{tool_name}:{serialized}"


class ExecutionCache:
    """Time-windowed cache keyed by tool name and normalized arguments.

    When the table grows past capacity, only the most recently created
    half of the entries is kept. Eviction is by creation time, not by
    last access.

    Attributes:
        ttl_seconds: Freshness window for entries
        capacity: Maximum number of entries before eviction
    """

    def __init__(
        self,
        ttl_seconds: float = DEFAULT_TTL_SECONDS,
        capacity: int = DEFAULT_CAPACITY,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """Initialize the cache.

        Args:
            ttl_seconds: Freshness window for entries
            capacity: Maximum number of entries before eviction
            clock: Monotonic time source, injectable for tests
        """
        self.ttl_seconds = ttl_seconds
        self.capacity = capacity
        self._clock = clock
        self._entries: dict[str, CacheEntry] = {}

    def __len__(self) -> int:
        return len(self._entries)

    def get(self, tool_name: str, arguments: dict[str, Any]) -> Any | None:
        """Return a fresh cached result, or None on a miss."""
        key = cache_key(tool_name, arguments)
        entry = self._entries.get(key)
        if entry is None:
            return None

        if self._clock() - entry.created_at >= self.ttl_seconds:
            logger.debug(f"Cache entry expired for {tool_name}")
            return None

        logger.debug(f"Cache hit for {tool_name}")
        return entry.result

    def put(self, tool_name: str, arguments: dict[str, Any], result: Any) -> None:
        """Insert or overwrite a result, evicting the older half if over capacity."""
        key = cache_key(tool_name, arguments)
        self._entries[key] = CacheEntry(key=key, result=result, created_at=self._clock())

        if len(self._entries) > self.capacity:
            keep = self.capacity // 2
            newest = sorted(self._entries.values(), key=lambda e: e.created_at, reverse=True)
            self._entries = {entry.key: entry for entry in newest[:keep]}
            logger.debug(f"Execution cache trimmed to {len(self._entries)} entries")

    def clear(self) -> None:
        """Drop every entry."""
        self._entries.clear()
        logger.info("Execution cache cleared")
