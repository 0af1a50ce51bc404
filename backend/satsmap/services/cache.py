"""
Response Cache

Time-bounded cache for read API payloads. One instance is created per
process and handed to whoever needs it; the clock is injectable so expiry
can be tested without sleeping.
"""
import threading
import time
from typing import Any, Callable, Dict, Optional, Tuple

from fastapi import Request


class ResponseCache:
    def __init__(self, ttl_seconds: float, clock: Callable[[], float] = time.monotonic):
        self.ttl_seconds = ttl_seconds
        self.clock = clock
        self._entries: Dict[str, Tuple[float, Any]] = {}
        self._lock = threading.Lock()

    @property
    def enabled(self) -> bool:
        return self.ttl_seconds > 0

    def get(self, key: str) -> Optional[Any]:
        """Return the cached value, or None if missing or expired"""
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            stored_at, value = entry
            if self.clock() - stored_at >= self.ttl_seconds:
                del self._entries[key]
                return None
            return value

    def set(self, key: str, value: Any) -> None:
        if not self.enabled:
            return
        with self._lock:
            self._entries[key] = (self.clock(), value)

    def get_or_set(self, key: str, factory: Callable[[], Any]) -> Any:
        value = self.get(key)
        if value is None:
            value = factory()
            self.set(key, value)
        return value

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()


def get_response_cache(request: Request) -> ResponseCache:
    """Dependency for FastAPI to get the process-wide response cache"""
    return request.app.state.response_cache
