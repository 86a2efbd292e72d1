"""In-memory TTL cache for decoded API responses."""

import threading
import time
from dataclasses import dataclass
from typing import Any, Callable, Iterable, Mapping, Optional

from loguru import logger


@dataclass(frozen=True)
class CacheEntry:
    """Cached value and the absolute instant it stops being valid."""

    value: Any
    expires_at: float

    def is_expired(self, now: float) -> bool:
        return now >= self.expires_at


class ResponseCache:
    """Thread-safe TTL key-value store.

    Expired entries behave exactly like missing ones and are evicted on read.
    Concurrent misses for the same key are not coalesced.
    """

    def __init__(self, ttl: float = 300.0, clock: Callable[[], float] = time.monotonic):
        """
        Initialize cache.

        Args:
            ttl: Default time-to-live in seconds
            clock: Monotonic time source, injectable for tests
        """
        self.ttl = ttl
        self._clock = clock
        self._entries: dict[str, CacheEntry] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> tuple[bool, Any]:
        """Return ``(hit, value)``; ``(False, None)`` when absent or expired."""
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return False, None
            if entry.is_expired(self._clock()):
                del self._entries[key]
                return False, None
            return True, entry.value

    def set(self, key: str, value: Any, ttl: Optional[float] = None) -> None:
        lifetime = self.ttl if ttl is None else ttl
        if lifetime <= 0:
            return
        with self._lock:
            self._entries[key] = CacheEntry(value=value, expires_at=self._clock() + lifetime)

    def delete(self, key: str) -> None:
        with self._lock:
            self._entries.pop(key, None)

    def clear(self) -> None:
        with self._lock:
            count = len(self._entries)
            self._entries.clear()
        logger.debug(f"Cleared {count} cache entries")

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    @staticmethod
    def make_key(method: str, params: Optional[Mapping[str, Any]] = None) -> str:
        """
        Build a cache key from an API method name and its parameters.

        Parameters are sorted by name; ``None`` values are dropped and list
        values are joined with ``;`` the way the API expects them.
        """
        if not params:
            return method

        parts = []
        for name in sorted(params):
            value = params[name]
            if value is None:
                continue
            parts.append(f"{name}={_normalize_value(value)}")
        return f"{method}?{'&'.join(parts)}" if parts else method


def _normalize_value(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (list, tuple, set, frozenset)):
        items: Iterable[Any] = sorted(value) if isinstance(value, (set, frozenset)) else value
        return ";".join(str(item) for item in items)
    return str(value)
