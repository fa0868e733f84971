"""HTTP/REST adapter.

Endpoints:
    GET  /tools                 → catalogue with count
    GET  /tools/{name}/schema   → one catalogue entry
    POST /tools/{name}          → invoke with JSON body, envelope verbatim
    GET  /health                → liveness and store probe

Status codes carry transport meaning only: 200 for every engine outcome
(including ``success: false`` and malformed bodies), 404 for unregistered
tool names, 500 for faults in the adapter itself.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING, Any

import orjson
from starlette.requests import Request
from starlette.responses import JSONResponse
from starlette.routing import BaseRoute, Route

from fareway.foundation.errors import ErrorCode

from .server import ToolServer

if TYPE_CHECKING:
    from fareway.runtime.dispatch import Dispatcher

HealthCheck = Callable[[], Awaitable[dict[str, Any]]]

ENDPOINTS = (
    "GET /health",
    "GET /sse",
    "POST /messages/",
    "GET /tools",
    "GET /tools/{name}/schema",
    "POST /tools/{name}",
)


async def _read_arguments(request: Request) -> Any:
    """Raw arguments from the body: empty → {}, unparseable → the raw text."""
    body = await request.body()
    if not body.strip():
        return {}
    try:
        return orjson.loads(body)
    except orjson.JSONDecodeError:
        return body.decode("utf-8", errors="replace")


class HTTPToolServer(ToolServer):
    """Stateless REST endpoints for web backend integration.

    Example:
        >>> server = HTTPToolServer("fareway", dispatcher, health_check=gateway.health)
        >>> app = Starlette(routes=server.routes())
    """

    __slots__ = ("_health_check",)

    transport = "http"

    def __init__(self, name: str, dispatcher: Dispatcher, *, health_check: HealthCheck | None = None) -> None:
        super().__init__(name, dispatcher)
        self._health_check = health_check

    async def _list_tools(self, request: Request) -> JSONResponse:
        tools = self.list_tools()
        return JSONResponse({"tools": tools, "count": len(tools)})

    async def _get_tool_schema(self, request: Request) -> JSONResponse:
        tool = self.registry.get(request.path_params["name"])
        if tool is None:
            return JSONResponse({"error": f"unknown tool: {request.path_params['name']}"}, status_code=404)
        return JSONResponse(tool.describe())

    async def _invoke_tool(self, request: Request) -> JSONResponse:
        result = await self.invoke(request.path_params["name"], await _read_arguments(request))
        status = 404 if result.error_code == ErrorCode.UNKNOWN_TOOL else 200
        return JSONResponse(result.to_dict(), status_code=status)

    async def _health(self, request: Request) -> JSONResponse:
        body = await self._health_check() if self._health_check else {"status": "healthy"}
        return JSONResponse(body)

    def routes(self) -> list[BaseRoute]:
        return [
            Route("/health", self._health, methods=["GET"]),
            Route("/tools", self._list_tools, methods=["GET"]),
            Route("/tools/{name}", self._invoke_tool, methods=["POST"]),
            Route("/tools/{name}/schema", self._get_tool_schema, methods=["GET"]),
        ]


async def not_found(request: Request, exc: Exception) -> JSONResponse:
    return JSONResponse({"error": "Not found", "available_endpoints": list(ENDPOINTS)}, status_code=404)
