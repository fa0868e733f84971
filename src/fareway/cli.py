"""Command-line entry point: ``fareway [--transport http|stdio] [--host H] [--port P]``."""

from __future__ import annotations

import argparse
import asyncio
import sys
from collections.abc import Sequence

import uvicorn
from pydantic import ValidationError

from fareway import __version__
from fareway.app import Gateway, create_app
from fareway.ext.mcp import MCPServer
from fareway.foundation.config import GatewaySettings, get_settings
from fareway.runtime.observability import configure_logging, get_logger

log = get_logger("cli")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="fareway", description="Fareway database tool gateway (MCP + REST)")
    parser.add_argument(
        "--transport",
        choices=["http", "stdio"],
        default="http",
        help="http serves REST, MCP over SSE and /health; stdio runs one MCP session on stdin/stdout",
    )
    parser.add_argument("--host", help="Bind address (default: FAREWAY_SERVER_HOST)")
    parser.add_argument("--port", type=int, help="Listen port (default: FAREWAY_SERVER_PORT)")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


async def run_stdio(settings: GatewaySettings) -> None:
    gateway = Gateway.from_settings(settings)
    try:
        await gateway.startup()
        await MCPServer(settings.service_name, gateway.dispatcher, version=settings.version).run_stdio()
    finally:
        await gateway.aclose()


def serve_http(settings: GatewaySettings, host: str, port: int) -> None:
    app = create_app(Gateway.from_settings(settings))
    log.info("serving", host=host, port=port, mcp_endpoint=f"http://{host}:{port}/sse")
    uvicorn.run(app, host=host, port=port, log_level=settings.logging.level.lower())


def main(argv: Sequence[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    try:
        settings = get_settings()
    except ValidationError as e:
        configure_logging("console", output=sys.stderr)
        log.error("invalid configuration", errors=e.error_count(), detail=str(e))
        return 1

    # stdout belongs to the protocol in stdio mode
    configure_logging(
        settings.log_format,
        settings.logging.level,
        service=settings.service_name,
        output=sys.stderr if args.transport == "stdio" else None,
    )
    log.info("starting", environment=settings.environment, transport=args.transport, version=__version__)

    if args.transport == "stdio":
        try:
            asyncio.run(run_stdio(settings))
        except RuntimeError as e:
            log.error("startup failed", error=str(e))
            return 1
        return 0

    serve_http(settings, args.host or settings.server.host, args.port or settings.server.port)
    return 0


if __name__ == "__main__":
    sys.exit(main())
