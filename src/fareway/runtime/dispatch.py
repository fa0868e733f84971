"""Validation & dispatch engine.

``Dispatcher.execute`` is the single entry point both transports use. It
guarantees that:

- invalid input is rejected before any cache or store access
- a handler fault never escapes as an exception; it becomes a failure envelope
- cache trouble never changes the outcome, only the latency
- every envelope carries ``metadata.duration_ms``
"""

from __future__ import annotations

import asyncio
import time
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

from pydantic import ValidationError

from fareway.foundation.errors import (
    ErrorCode,
    ToolException,
    ToolResult,
    classify_exception,
    format_validation_error,
)
from fareway.io.cache import NullCache, ToolCache, dumps, loads, make_key
from fareway.runtime.context import Deadline, ToolContext
from fareway.runtime.observability import get_logger

if TYPE_CHECKING:
    from pydantic import BaseModel

    from fareway.foundation.registry import ToolDefinition, ToolRegistry
    from fareway.io.store import RecordStore

log = get_logger("dispatch")


class Dispatcher:
    """Executes registered tools and normalizes every outcome to a ToolResult.

    Args:
        registry: Read-only tool catalogue
        store: Record store handed to handlers
        cache: Read-through cache (defaults to a disabled cache)
        default_timeout: Deadline applied when the caller passes none

    Example:
        >>> dispatcher = Dispatcher(registry, store, MemoryCache())
        >>> result = await dispatcher.execute("search_courses", {"region": "Kerry"})
        >>> result.success, result.metadata["duration_ms"]
        (True, 8.31)
    """

    __slots__ = ("_registry", "_store", "_cache", "_default_timeout")

    def __init__(
        self,
        registry: ToolRegistry,
        store: RecordStore,
        cache: ToolCache | None = None,
        *,
        default_timeout: float | None = None,
    ) -> None:
        self._registry = registry
        self._store = store
        self._cache = cache if cache is not None else NullCache()
        self._default_timeout = default_timeout

    @property
    def registry(self) -> ToolRegistry:
        return self._registry

    @property
    def cache(self) -> ToolCache:
        return self._cache

    async def execute(
        self,
        name: str,
        arguments: Mapping[str, Any] | None = None,
        *,
        timeout: float | None = None,
    ) -> ToolResult:
        """Validate, serve from cache or run the handler, and time the whole call."""
        start = time.perf_counter()
        deadline = Deadline.after(timeout if timeout is not None else self._default_timeout)

        tool = self._registry.get(name)
        if tool is None:
            result = ToolResult.fail(f"unknown tool: {name}", ErrorCode.UNKNOWN_TOOL)
        else:
            result = await self._run(tool, {} if arguments is None else arguments, deadline)

        duration_ms = round((time.perf_counter() - start) * 1000, 2)
        result = result.with_metadata(duration_ms=duration_ms)
        self._log_outcome(name, arguments, result, duration_ms)
        return result

    async def _run(self, tool: ToolDefinition, arguments: Any, deadline: Deadline) -> ToolResult:
        if not isinstance(arguments, Mapping):
            return ToolResult.fail("invalid arguments: expected an object", ErrorCode.INVALID_PARAMS)
        try:
            params = tool.validate(dict(arguments))
        except ValidationError as e:
            return ToolResult.fail(format_validation_error(e), ErrorCode.INVALID_PARAMS)

        extra = tool.result_metadata(params) if tool.result_metadata else {}
        key = self.cache_key(tool, params)
        if key is not None:
            cached = await self._cache.get(key, timeout=deadline.remaining())
            if cached is not None:
                try:
                    return ToolResult.ok(loads(cached), cached=True, **extra)
                except ValueError as e:
                    # Unreadable entry counts as a miss; the fresh result overwrites it
                    log.warning("cache entry unreadable", key=key, error=str(e) or type(e).__name__)

        try:
            async with asyncio.timeout(deadline.remaining()):
                data = await tool.handler(params, ToolContext(self._store, deadline))
        except TimeoutError:
            return ToolResult.fail(f"{tool.name} timed out before completing", ErrorCode.TIMEOUT)
        except ToolException as e:
            return ToolResult.fail(e.message, e.code)
        except Exception as e:
            log.exception("handler raised", tool=tool.name)
            return ToolResult.fail(str(e) or type(e).__name__, classify_exception(e))

        if key is not None:
            await self._populate(key, data, tool.cache_ttl)
        return ToolResult.ok(data, **extra)

    def cache_key(self, tool: ToolDefinition, params: BaseModel) -> str | None:
        """Cache key for validated params, or None when the tool opts out."""
        if not tool.cacheable or isinstance(self._cache, NullCache):
            return None
        return make_key(tool.name, params)

    async def _populate(self, key: str, data: Any, ttl: float | None) -> None:
        # Backends absorb their own I/O errors; this guards serialization and anything unexpected
        try:
            await self._cache.set(key, dumps(data), ttl)
        except Exception as e:
            log.warning("cache set failed", key=key, error=str(e) or type(e).__name__)

    def _log_outcome(self, name: str, arguments: Any, result: ToolResult, duration_ms: float) -> None:
        if result.success:
            log.info("tool execution", tool=name, duration_ms=duration_ms, success=True,
                     cached=result.cached, count=result.metadata.get("count"))
            return
        arg_keys = sorted(str(k) for k in arguments) if isinstance(arguments, Mapping) else []
        log.warning("tool execution failed", tool=name, duration_ms=duration_ms, success=False,
                    error=result.error, error_code=result.error_code, arg_keys=arg_keys)
