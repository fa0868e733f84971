"""Read-through cache for tool payloads.

Backends:
    - NullCache: disabled (permanent miss)
    - MemoryCache: thread-safe in-process TTL cache (default)
    - RedisCache: redis.asyncio backend for shared deployments
"""

from .cache import (
    DEFAULT_TTL,
    CacheEntry,
    MemoryCache,
    NullCache,
    ToolCache,
    create_cache,
    dumps,
    loads,
    make_key,
)

__all__ = [
    "DEFAULT_TTL",
    "CacheEntry",
    "MemoryCache",
    "NullCache",
    "ToolCache",
    "create_cache",
    "dumps",
    "loads",
    "make_key",
    "RedisCache",
]


def __getattr__(name: str) -> object:
    """Lazy import the Redis backend so the redis client loads only when used."""
    if name == "RedisCache":
        from .redis import RedisCache
        return RedisCache
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
