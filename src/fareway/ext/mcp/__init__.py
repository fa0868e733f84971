"""Transport adapters: MCP sessions, REST endpoints, and their guards."""

from .http import ENDPOINTS, HTTPToolServer, not_found
from .security import AuthMiddleware, RateLimitMiddleware
from .server import MCPServer, ToolServer, render_envelope

__all__ = [
    "AuthMiddleware",
    "ENDPOINTS",
    "HTTPToolServer",
    "MCPServer",
    "RateLimitMiddleware",
    "ToolServer",
    "not_found",
    "render_envelope",
]
