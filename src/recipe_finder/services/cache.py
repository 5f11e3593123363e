"""Time-based cache with invalidation listeners."""

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta
from typing import Protocol

logger = logging.getLogger(__name__)

InvalidationListener = Callable[[], None]


class Cache(Protocol):
    """Cache interface for simple key-value data."""

    def get(self, key: str) -> object | None:
        """Return a cached value if present and not expired."""

    def set(self, key: str, value: object, ttl_seconds: int) -> None:
        """Store a cached value with a TTL in seconds."""

    def invalidate(self) -> None:
        """Drop every entry and notify listeners."""

    def subscribe(self, listener: InvalidationListener) -> Callable[[], None]:
        """Register an invalidation listener and return an unsubscribe callable."""


@dataclass
class _CacheEntry:
    value: object
    expires_at: datetime


def _utc_now() -> datetime:
    return datetime.now(tz=UTC)


@dataclass
class InMemoryCache(Cache):
    """Process-local cache shared by every reader in the process."""

    clock: Callable[[], datetime] = _utc_now
    _entries: dict[str, _CacheEntry] = field(default_factory=dict)
    _listeners: list[InvalidationListener] = field(default_factory=list)

    def get(self, key: str) -> object | None:
        """Return a cached value if it hasn't expired."""
        entry = self._entries.get(key)
        if entry is None:
            return None
        if self.clock() >= entry.expires_at:
            self._entries.pop(key, None)
            return None
        return entry.value

    def set(self, key: str, value: object, ttl_seconds: int) -> None:
        """Store a cached value with a TTL."""
        expires_at = self.clock() + timedelta(seconds=ttl_seconds)
        self._entries[key] = _CacheEntry(value=value, expires_at=expires_at)

    def invalidate(self) -> None:
        """Clear the cache, then notify listeners one by one."""
        self._entries.clear()
        for listener in list(self._listeners):
            try:
                listener()
            except Exception:
                logger.exception("Cache invalidation listener failed")

    def subscribe(self, listener: InvalidationListener) -> Callable[[], None]:
        """Register a listener called after every invalidation."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe
