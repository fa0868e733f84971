"""Tests for structured logging."""

from __future__ import annotations

import io

import orjson

from fareway.runtime.observability import CaptureRenderer, configure_logging, get_logger, log_context


def test_json_lines_carry_service_and_context() -> None:
    out = io.StringIO()
    configure_logging("json", "INFO", service="fareway-database-mcp", output=out)
    log = get_logger("dispatch").bind(request_id="r1")
    with log_context(transport="http"):
        log.info("tool execution", tool="search_courses", duration_ms=3.2)
    log.debug("hidden")

    lines = out.getvalue().splitlines()
    assert len(lines) == 1
    entry = orjson.loads(lines[0])
    assert entry["event"] == "tool execution"
    assert entry["service"] == "fareway-database-mcp"
    assert entry["logger"] == "dispatch"
    assert entry["transport"] == "http"
    assert entry["request_id"] == "r1"
    assert entry["level"] == "info"


def test_console_renderer_formats_key_values() -> None:
    out = io.StringIO()
    configure_logging("console", "DEBUG", output=out, colors=False)
    get_logger("cache").warning("cache set failed", key="search_courses:ab", error="boom")
    line = out.getvalue()
    assert "[warning]" in line
    assert 'key="search_courses:ab"' in line


def test_capture_renderer_collects(captured_logs: CaptureRenderer) -> None:
    get_logger("x").error("failed", code=1)
    assert captured_logs.events("error") == ["failed"]
