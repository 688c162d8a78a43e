"""
In-process TTL cache for expensive list reads.

Entries are keyed by (entity, scope). Writers call invalidate(entity) after
any change that affects that entity; readers go through get_or_compute.
"""

import logging
import threading
import time
from typing import Any, Callable, Hashable, TypeVar

from casework.core.config import settings


logger = logging.getLogger(__name__)

T = TypeVar("T")

CLIENTS_ENTITY = "clients"
ALL_SCOPE = "all"


class TTLCache:
    """Manages cached values per (entity, scope) with a shared TTL."""

    def __init__(self, ttl_seconds: int, clock: Callable[[], float] = time.monotonic):
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        # (entity, scope) -> (expires_at, value)
        self._entries: dict[tuple[str, Hashable], tuple[float, Any]] = {}
        self._lock = threading.Lock()

    @property
    def enabled(self) -> bool:
        return self.ttl_seconds > 0

    def get(self, entity: str, scope: Hashable = ALL_SCOPE) -> Any | None:
        """Return the cached value, or None when missing or expired."""
        if not self.enabled:
            return None
        key = (entity, scope)
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            expires_at, value = entry
            if self._clock() >= expires_at:
                del self._entries[key]
                return None
            return value

    def set(self, entity: str, scope: Hashable, value: Any) -> None:
        if not self.enabled:
            return
        with self._lock:
            self._entries[(entity, scope)] = (self._clock() + self.ttl_seconds, value)

    def get_or_compute(
        self,
        entity: str,
        scope: Hashable,
        compute: Callable[[], T],
    ) -> T:
        """Serve from cache, computing and storing the value on a miss."""
        cached = self.get(entity, scope)
        if cached is not None:
            return cached
        value = compute()
        self.set(entity, scope, value)
        return value

    def invalidate(self, entity: str, scope: Hashable | None = None) -> None:
        """Drop one scope of an entity, or every scope when scope is None."""
        with self._lock:
            if scope is not None:
                self._entries.pop((entity, scope), None)
                return
            for key in [k for k in self._entries if k[0] == entity]:
                del self._entries[key]
        logger.debug("Cache invalidated", extra={"entity": entity})

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()


client_list_cache = TTLCache(ttl_seconds=settings.CLIENT_LIST_CACHE_TTL_SECONDS)


def invalidate_clients() -> None:
    """Call after any write that changes client rows."""
    client_list_cache.invalidate(CLIENTS_ENTITY)
