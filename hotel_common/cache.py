"""TTL cache for catalogue listings (rooms, additional services)."""
from __future__ import annotations

from threading import Lock
from typing import Any, Generic, Optional, TypeVar

from cachetools import TTLCache

T = TypeVar("T")


class CatalogCache(Generic[T]):
    """Listings keyed by ``namespace`` plus the query parameters that produced them.

    Shared by the threadpool that runs sync handlers, so every access holds ``_lock``.
    """

    def __init__(self, ttl: int, maxsize: int = 128) -> None:
        self._cache: TTLCache[str, T] = TTLCache(maxsize=maxsize, ttl=ttl)
        self._lock = Lock()

    @staticmethod
    def key(namespace: str, **params: Any) -> str:
        parts = [f"{name}={params[name]}" for name in sorted(params) if params[name] is not None]
        return f"{namespace}:" + "&".join(parts)

    def get(self, key: str) -> Optional[T]:
        with self._lock:
            return self._cache.get(key)

    def set(self, key: str, value: T) -> None:
        with self._lock:
            self._cache[key] = value

    def invalidate(self, namespace: str) -> int:
        """Drop every entry of ``namespace``; returns how many were removed."""
        with self._lock:
            stale = [key for key in list(self._cache.keys()) if key.startswith(f"{namespace}:")]
            for key in stale:
                self._cache.pop(key, None)
        return len(stale)

    def clear(self) -> None:
        with self._lock:
            self._cache.clear()
