"""Read-through cache for tool payloads, with TTL support.

Keys are generated from tool name + hashed, normalized arguments. Values are
the serialized ``data`` payload of a successful result, never the envelope.

Every backend honours the same contract: ``get`` returns ``None`` on a miss
*or* on any backend failure, and ``set``/``clear_prefix`` never raise. A
missing or broken cache makes calls slower, never different.
"""

from __future__ import annotations

import hashlib
import threading
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

import orjson

if TYPE_CHECKING:
    from pydantic import BaseModel

    from fareway.foundation.config import CacheSettings

DEFAULT_TTL: float = 300.0  # 5 minutes


def make_key(tool_name: str, params: BaseModel | dict[str, Any]) -> str:
    """Generate cache key from tool name and parameters.

    Equivalent argument sets (different key order, defaults omitted vs given)
    hash identically once validated.
    """
    params_dict = params.model_dump(mode="json") if hasattr(params, "model_dump") else params
    params_json = orjson.dumps(params_dict, option=orjson.OPT_SORT_KEYS, default=str)
    params_hash = hashlib.md5(params_json, usedforsecurity=False).hexdigest()[:16]
    return f"{tool_name}:{params_hash}"


def dumps(value: Any) -> str:
    return orjson.dumps(value, default=str).decode()


def loads(value: str | bytes) -> Any:
    return orjson.loads(value)


class ToolCache(ABC):
    """Abstract base for async tool caches."""

    backend: str = "abstract"

    @abstractmethod
    async def get(self, key: str, *, timeout: float | None = None) -> str | None:
        """Get cached value if present and not expired."""
        ...

    @abstractmethod
    async def set(self, key: str, value: str, ttl: float | None = None, *, timeout: float | None = None) -> None:
        """Store value under key for ttl seconds (backend default when None)."""
        ...

    @abstractmethod
    async def clear_prefix(self, prefix: str) -> int:
        """Remove all entries whose key starts with prefix. Returns count removed."""
        ...

    async def ping(self) -> bool:
        return True

    async def aclose(self) -> None:
        return None


class NullCache(ToolCache):
    """Disabled cache: permanent miss, writes are no-ops."""

    backend = "none"

    async def get(self, key: str, *, timeout: float | None = None) -> str | None:
        return None

    async def set(self, key: str, value: str, ttl: float | None = None, *, timeout: float | None = None) -> None:
        return None

    async def clear_prefix(self, prefix: str) -> int:
        return 0

    async def ping(self) -> bool:
        return False


@dataclass(slots=True)
class CacheEntry:
    """A cached payload with expiration tracking."""
    value: str
    expires_at: float

    @property
    def expired(self) -> bool:
        return time.monotonic() > self.expires_at


class MemoryCache(ToolCache):
    """Thread-safe in-process cache with TTL-based expiration.

    Uses RLock for synchronization. Evicts expired entries first, then the
    soonest-to-expire quarter, once ``max_entries`` is reached.

    Example:
        >>> cache = MemoryCache(default_ttl=60)
        >>> await cache.set("search_courses:ab12", '[{"id": 1}]')
        >>> await cache.get("search_courses:ab12")
        '[{"id": 1}]'
    """

    __slots__ = ("_cache", "_default_ttl", "_max_entries", "_lock")

    backend = "memory"

    def __init__(self, default_ttl: float = DEFAULT_TTL, max_entries: int = 1000) -> None:
        self._cache: dict[str, CacheEntry] = {}
        self._default_ttl = default_ttl
        self._max_entries = max_entries
        self._lock = threading.RLock()

    async def get(self, key: str, *, timeout: float | None = None) -> str | None:
        with self._lock:
            entry = self._cache.get(key)
            if entry is None:
                return None
            if entry.expired:
                del self._cache[key]
                return None
            return entry.value

    async def set(self, key: str, value: str, ttl: float | None = None, *, timeout: float | None = None) -> None:
        with self._lock:
            if key not in self._cache and len(self._cache) >= self._max_entries:
                self._evict_unlocked()
            self._cache[key] = CacheEntry(value=value, expires_at=time.monotonic() + (ttl or self._default_ttl))

    async def clear_prefix(self, prefix: str) -> int:
        with self._lock:
            keys = [k for k in self._cache if k.startswith(prefix)]
            for key in keys:
                del self._cache[key]
            return len(keys)

    def _evict_unlocked(self) -> None:
        """Remove expired entries, then oldest if still over capacity. Caller must hold lock."""
        for key in [k for k, v in self._cache.items() if v.expired]:
            del self._cache[key]
        if len(self._cache) >= self._max_entries:
            by_expiry = sorted(self._cache, key=lambda k: self._cache[k].expires_at)
            for key in by_expiry[: max(1, self._max_entries // 4)]:
                del self._cache[key]

    @property
    def size(self) -> int:
        with self._lock:
            return len(self._cache)


def create_cache(settings: CacheSettings) -> ToolCache:
    """Build the cache backend selected by settings (none, memory or redis)."""
    match settings.backend:
        case "none":
            return NullCache()
        case "redis":
            from .redis import RedisCache

            assert settings.redis_url is not None
            return RedisCache.from_url(
                settings.redis_url.get_secret_value(),
                prefix=settings.prefix,
                default_ttl=settings.ttl,
                socket_timeout=settings.socket_timeout,
            )
        case _:
            return MemoryCache(default_ttl=settings.ttl, max_entries=settings.max_size)
