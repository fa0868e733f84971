"""Composition root: builds the gateway from settings and serves it over Starlette.

The store and cache are constructed here and injected into the dispatcher;
nothing else in the package creates them.
"""

from __future__ import annotations

import time
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any

from starlette.applications import Starlette
from starlette.middleware import Middleware
from starlette.requests import Request
from starlette.responses import JSONResponse

from fareway.ext.mcp import AuthMiddleware, HTTPToolServer, MCPServer, RateLimitMiddleware, not_found
from fareway.foundation.config import GatewaySettings
from fareway.foundation.registry import ToolRegistry
from fareway.io.cache import ToolCache, create_cache
from fareway.io.store import PostgrestStore, RecordStore
from fareway.runtime import Dispatcher, FixedWindowRateLimiter
from fareway.runtime.observability import get_logger
from fareway.tools import build_registry

log = get_logger("app")


@dataclass
class Gateway:
    """Everything one serving process shares: settings, store, cache, catalogue."""

    settings: GatewaySettings
    store: RecordStore
    cache: ToolCache
    registry: ToolRegistry = field(default_factory=build_registry)
    started_at: float = field(default_factory=time.monotonic)
    dispatcher: Dispatcher = field(init=False)

    def __post_init__(self) -> None:
        self.dispatcher = Dispatcher(
            self.registry, self.store, self.cache, default_timeout=self.settings.server.request_timeout,
        )

    @classmethod
    def from_settings(
        cls,
        settings: GatewaySettings,
        *,
        store: RecordStore | None = None,
        cache: ToolCache | None = None,
    ) -> Gateway:
        """Build real backends from settings unless already supplied."""
        return cls(
            settings=settings,
            store=store if store is not None else PostgrestStore.from_settings(settings.store),
            cache=cache if cache is not None else create_cache(settings.cache),
        )

    @property
    def uptime_seconds(self) -> float:
        return round(time.monotonic() - self.started_at, 3)

    async def startup(self) -> None:
        """Probe the store; an unreachable store is fatal before any traffic."""
        if not await self.store.ping(timeout=self.settings.store.timeout):
            raise RuntimeError("database connection failed")
        if not self.settings.auth.enabled:
            log.warning("authentication disabled: no api key configured")
        log.info(
            "gateway started", environment=self.settings.environment, tools=len(self.registry),
            cache=self.cache.backend, rate_limit=self.settings.rate_limit.enabled,
        )

    async def health(self) -> dict[str, Any]:
        connected = await self.store.ping(timeout=self.settings.store.timeout)
        return {
            "status": "healthy" if connected else "degraded",
            "database": "connected" if connected else "disconnected",
            "cache": self.cache.backend,
            "uptime_seconds": self.uptime_seconds,
            "version": self.settings.version,
            "timestamp": datetime.now(UTC).isoformat(),
        }

    async def aclose(self) -> None:
        log.info("shutting down")
        await self.store.aclose()
        await self.cache.aclose()


def create_app(gateway: Gateway, *, rate_limiter: FixedWindowRateLimiter | None = None) -> Starlette:
    """Starlette app serving REST, MCP over SSE, and health behind auth and rate limiting."""
    settings = gateway.settings
    name = settings.service_name
    http = HTTPToolServer(name, gateway.dispatcher, health_check=gateway.health)
    mcp = MCPServer(name, gateway.dispatcher, version=settings.version)

    middleware: list[Middleware] = []
    if settings.rate_limit.enabled:
        limiter = rate_limiter or FixedWindowRateLimiter(
            settings.rate_limit.max_calls, settings.rate_limit.window_seconds,
        )
        middleware.append(Middleware(RateLimitMiddleware, limiter=limiter))
    api_key = settings.auth.api_key.get_secret_value() if settings.auth.api_key else None
    middleware.append(Middleware(AuthMiddleware, api_key=api_key))

    async def server_error(request: Request, exc: Exception) -> JSONResponse:
        log.exception("unhandled adapter error", path=request.url.path, method=request.method)
        body = {"error": "Internal server error"}
        if not settings.is_production:
            body["message"] = str(exc)
        return JSONResponse(body, status_code=500)

    @asynccontextmanager
    async def lifespan(app: Starlette) -> AsyncIterator[None]:
        await gateway.startup()
        try:
            yield
        finally:
            await gateway.aclose()

    return Starlette(
        debug=False,
        routes=[*http.routes(), *mcp.routes()],
        middleware=middleware,
        exception_handlers={404: not_found, 500: server_error},
        lifespan=lifespan,
    )
