"""Redis cache backend for shared, multi-process deployments.

Uses redis.asyncio. TTL is handled natively by SETEX. Connection and
command failures are logged and reported as misses; they never reach the
dispatcher.
"""

from __future__ import annotations

import asyncio
from typing import Any, AsyncIterator, Protocol, runtime_checkable

import redis.asyncio as aioredis
from redis.exceptions import RedisError

from fareway.runtime.observability import get_logger

from .cache import DEFAULT_TTL, ToolCache

log = get_logger("cache.redis")

# Failures the cache absorbs; anything else is a programming error
_ABSORBED = (RedisError, OSError, asyncio.TimeoutError)


@runtime_checkable
class AsyncRedisClient(Protocol):
    """Protocol for async Redis client (duck typing)."""
    async def get(self, key: str) -> bytes | None: ...
    async def setex(self, name: str, time: int, value: str) -> bool: ...
    async def delete(self, *names: str) -> int: ...
    def scan_iter(self, match: str) -> AsyncIterator[Any]: ...
    async def ping(self) -> bool: ...


class RedisCache(ToolCache):
    """Redis-backed tool cache.

    Args:
        client: Existing async Redis client instance
        prefix: Key prefix for namespacing (default: "fareway:")
        default_ttl: Default TTL in seconds (default: 300)

    Example:
        >>> cache = RedisCache.from_url("redis://localhost:6379/0")
        >>> await cache.set("get_course_details:9f1c", '{"id": "..."}', ttl=600)
    """

    __slots__ = ("_client", "_prefix", "_default_ttl")

    backend = "redis"

    def __init__(
        self,
        client: AsyncRedisClient,
        prefix: str = "fareway:",
        default_ttl: float = DEFAULT_TTL,
    ) -> None:
        self._client = client
        self._prefix = prefix
        self._default_ttl = default_ttl

    @classmethod
    def from_url(
        cls,
        url: str,
        prefix: str = "fareway:",
        default_ttl: float = DEFAULT_TTL,
        *,
        socket_timeout: float = 2.0,
        **redis_kwargs: Any,
    ) -> RedisCache:
        """Create cache from Redis URL. The connection is opened lazily on first command."""
        client = aioredis.from_url(
            url,
            socket_timeout=socket_timeout,
            socket_connect_timeout=socket_timeout,
            **redis_kwargs,
        )
        return cls(client, prefix, default_ttl)

    def _key(self, key: str) -> str:
        return f"{self._prefix}{key}"

    async def get(self, key: str, *, timeout: float | None = None) -> str | None:
        try:
            async with asyncio.timeout(timeout):
                val = await self._client.get(self._key(key))
        except _ABSORBED as e:
            log.warning("cache get failed", key=key, error=str(e) or type(e).__name__)
            return None
        if val is None:
            return None
        if not isinstance(val, bytes):
            return str(val)
        try:
            return val.decode()
        except UnicodeDecodeError as e:
            log.warning("cache entry unreadable", key=key, error=str(e))
            return None

    async def set(self, key: str, value: str, ttl: float | None = None, *, timeout: float | None = None) -> None:
        seconds = max(1, int(ttl or self._default_ttl))
        try:
            async with asyncio.timeout(timeout):
                await self._client.setex(self._key(key), seconds, value)
        except _ABSORBED as e:
            log.warning("cache set failed", key=key, error=str(e) or type(e).__name__)

    async def clear_prefix(self, prefix: str) -> int:
        """Remove all entries under prefix using SCAN (production-safe)."""
        try:
            keys = [k async for k in self._client.scan_iter(match=f"{self._prefix}{prefix}*")]
            removed = await self._client.delete(*keys) if keys else 0
        except _ABSORBED as e:
            log.warning("cache clear failed", prefix=prefix, error=str(e) or type(e).__name__)
            return 0
        if removed:
            log.info("cache cleared", prefix=prefix, count=removed)
        return removed

    async def ping(self) -> bool:
        try:
            return bool(await self._client.ping())
        except _ABSORBED:
            return False

    async def aclose(self) -> None:
        close = getattr(self._client, "aclose", None)
        if close is not None:
            await close()
            log.info("redis connection closed")
