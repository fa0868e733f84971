"""Transport adapters over the dispatch engine.

Two adapters share one ``Dispatcher``:

1. **MCP** - persistent protocol sessions (SSE or stdio) for MCP clients
2. **HTTP/REST** - stateless endpoints for web backends (see ``http.py``)

Neither adapter validates or executes anything itself; both translate the
same ``ToolResult`` envelope into their own wire shape.

Example - MCP over SSE, mounted in a Starlette app:
    >>> server = MCPServer("fareway", dispatcher)
    >>> app = Starlette(routes=server.routes())

Example - MCP over stdio:
    >>> await MCPServer("fareway", dispatcher).run_stdio()
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any

import orjson
from mcp import types
from mcp.server.lowlevel import Server
from mcp.server.sse import SseServerTransport
from mcp.server.stdio import stdio_server
from starlette.requests import Request
from starlette.responses import Response
from starlette.routing import BaseRoute, Mount, Route

from fareway.runtime.observability import get_logger, log_context

if TYPE_CHECKING:
    from fareway.foundation.errors import ToolResult
    from fareway.foundation.registry import ToolRegistry
    from fareway.runtime.dispatch import Dispatcher

log = get_logger("mcp")

SSE_PATH = "/sse"
MESSAGES_PATH = "/messages/"


# ═══════════════════════════════════════════════════════════════════════════════
# Abstract Server Protocol
# ═══════════════════════════════════════════════════════════════════════════════


class ToolServer(ABC):
    """Abstract base for transport adapters.

    Subclasses differ only in wire format; catalogue listing and invocation
    both go through the shared dispatcher.
    """

    __slots__ = ("_name", "_dispatcher")

    transport: str = "unknown"

    def __init__(self, name: str, dispatcher: Dispatcher) -> None:
        self._name = name
        self._dispatcher = dispatcher

    @property
    def name(self) -> str:
        return self._name

    @property
    def registry(self) -> ToolRegistry:
        return self._dispatcher.registry

    def list_tools(self) -> list[dict[str, Any]]:
        """Catalogue entries with advertised input schemas."""
        return self.registry.list_all()

    async def invoke(self, tool_name: str, arguments: Any) -> ToolResult:
        """Execute a tool. Never raises for engine-level failures.

        Every log line emitted during the call carries this adapter's transport.
        """
        with log_context(transport=self.transport, tool=tool_name):
            return await self._dispatcher.execute(tool_name, arguments)

    @abstractmethod
    def routes(self) -> list[BaseRoute]:
        """Starlette routes serving this adapter."""
        ...


# ═══════════════════════════════════════════════════════════════════════════════
# MCP Adapter (protocol sessions)
# ═══════════════════════════════════════════════════════════════════════════════


def render_envelope(result: ToolResult) -> str:
    return orjson.dumps(result.to_dict(), option=orjson.OPT_INDENT_2, default=str).decode()


class MCPServer(ToolServer):
    """Low-level MCP server exposing the catalogue.

    ``tools/list`` mirrors the registry; ``tools/call`` answers with one text
    block holding the envelope JSON and ``isError`` set on failure. Failures
    never end the session.
    """

    __slots__ = ("_server", "_sse")

    transport = "mcp"

    def __init__(self, name: str, dispatcher: Dispatcher, *, version: str | None = None) -> None:
        super().__init__(name, dispatcher)
        self._server: Server = Server(name, version=version)
        self._sse = SseServerTransport(MESSAGES_PATH)
        self._register_handlers()

    def _register_handlers(self) -> None:
        @self._server.list_tools()
        async def list_tools() -> list[types.Tool]:
            return self.mcp_tools()

        # Arguments are validated by the dispatcher so failures keep the envelope shape
        @self._server.call_tool(validate_input=False)
        async def call_tool(name: str, arguments: dict[str, Any] | None) -> types.CallToolResult:
            return await self.call_tool(name, arguments)

    def mcp_tools(self) -> list[types.Tool]:
        return [
            types.Tool(name=tool.name, description=tool.description, inputSchema=tool.input_schema)
            for tool in self.registry
        ]

    async def call_tool(self, name: str, arguments: Any) -> types.CallToolResult:
        result = await self.invoke(name, arguments)
        return types.CallToolResult(
            content=[types.TextContent(type="text", text=render_envelope(result))],
            isError=not result.success,
        )

    @property
    def server(self) -> Server:
        """Access the underlying MCP server."""
        return self._server

    async def _handle_sse(self, request: Request) -> Response:
        client = request.client.host if request.client else "unknown"
        log.info("sse session opened", client=client)
        try:
            async with self._sse.connect_sse(request.scope, request.receive, request._send) as (read, write):
                await self._server.run(read, write, self._server.create_initialization_options())
        finally:
            log.info("sse session closed", client=client)
        return Response()

    def routes(self) -> list[BaseRoute]:
        return [
            Route(SSE_PATH, self._handle_sse, methods=["GET"]),
            Mount(MESSAGES_PATH, app=self._sse.handle_post_message),
        ]

    async def run_stdio(self) -> None:
        """Serve one session over stdin/stdout until the client disconnects."""
        log.info("stdio session opened")
        async with stdio_server() as (read, write):
            await self._server.run(read, write, self._server.create_initialization_options())
        log.info("stdio session closed")
