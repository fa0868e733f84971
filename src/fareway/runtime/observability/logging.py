"""Structured logging with bound context.

Human-readable console output in development, JSON lines (orjson) in
production. Every logger carries a ``service`` field so lines from several
processes can be told apart downstream.

Quick Start:
    >>> from fareway.runtime.observability import get_logger, configure_logging
    >>> configure_logging(format="console")  # or "json" for production
    >>> log = get_logger("dispatch")
    >>> log.info("tool execution", tool="search_courses", duration_ms=12.5)

    >>> # Bind tool context
    >>> log = log.bind(tool="search_courses")
    >>> log.warning("cache set failed", key="fareway:search_courses:ab12")
"""

from __future__ import annotations

import logging
import sys
import time
import traceback
from contextvars import ContextVar
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any, Protocol, TextIO, runtime_checkable

import orjson

if TYPE_CHECKING:
    from types import TracebackType

JsonDict = dict[str, Any]

# Context var for scoped context (persists across awaits within one task)
_log_context: ContextVar[JsonDict] = ContextVar("log_context", default={})


@dataclass(slots=True)
class LogEntry:
    """Immutable log entry with all context."""

    timestamp: float
    level: str
    event: str
    context: JsonDict

    @property
    def ts_iso(self) -> str:
        return datetime.fromtimestamp(self.timestamp, tz=UTC).isoformat()

    @property
    def ts_human(self) -> str:
        """Human-readable timestamp (YYYY-MM-DD HH:MM:SS)."""
        return datetime.fromtimestamp(self.timestamp, tz=UTC).strftime("%Y-%m-%d %H:%M:%S")


@runtime_checkable
class LogRenderer(Protocol):
    """Protocol for log output renderers."""

    def render(self, entry: LogEntry) -> None: ...


@dataclass(slots=True)
class BoundLogger:
    """Structured logger with bound context. bind() returns a new logger with merged context.

    Example:
        >>> log = BoundLogger(context={"logger": "http"})
        >>> log.info("request", path="/tools")
        # => 2025-01-03 10:30:45 [info] request logger="http" path="/tools"
    """

    context: JsonDict = field(default_factory=dict)
    _renderer: LogRenderer | None = None
    _level: int = logging.DEBUG

    def bind(self, **kw: Any) -> BoundLogger:
        """Create new logger with additional bound context."""
        return BoundLogger(context={**self.context, **kw}, _renderer=self._renderer, _level=self._level)

    def _log(self, level: int, event: str, **kw: Any) -> None:
        if level < max(self._level, _min_level):
            return
        merged = {**_default_context, **_log_context.get(), **self.context, **kw}
        (self._renderer or _get_renderer()).render(LogEntry(time.time(), _level_name(level), event, merged))

    def debug(self, event: str, **kw: Any) -> None: self._log(logging.DEBUG, event, **kw)
    def info(self, event: str, **kw: Any) -> None: self._log(logging.INFO, event, **kw)
    def warning(self, event: str, **kw: Any) -> None: self._log(logging.WARNING, event, **kw)
    def error(self, event: str, **kw: Any) -> None: self._log(logging.ERROR, event, **kw)

    def exception(self, event: str, **kw: Any) -> None:
        """Log error with the active exception's traceback."""
        self._log(logging.ERROR, event, exc_info=traceback.format_exc(), **kw)


# ─────────────────────────────────────────────────────────────────────────────
# Renderers
# ─────────────────────────────────────────────────────────────────────────────


@dataclass(slots=True)
class ConsoleRenderer:
    """Human-readable console output. Format: timestamp [level] event key=value ..."""

    output: TextIO = field(default_factory=lambda: sys.stderr)
    colors: bool | None = None  # None = auto-detect

    def __post_init__(self) -> None:
        if self.colors is None:
            self.colors = getattr(self.output, "isatty", lambda: False)()

    def render(self, entry: LogEntry) -> None:
        c = _COLORS if self.colors else _NO_COLORS
        parts = [
            f"{c['dim']}{entry.ts_human}{c['reset']}",
            f"{_LEVEL_COLORS.get(entry.level, '') if self.colors else ''}[{entry.level}]{c['reset']}",
            f"{c['bold']}{entry.event}{c['reset']}",
        ]
        parts += [f"{c['cyan']}{k}{c['reset']}={_format_value(v)}"
                  for k, v in sorted(entry.context.items()) if k != "exc_info"]
        print(" ".join(parts), file=self.output)
        if "exc_info" in entry.context:
            print(f"{c['red']}{entry.context['exc_info']}{c['reset']}", file=self.output)


@dataclass(slots=True)
class JsonRenderer:
    """JSON Lines output for log aggregation."""

    output: TextIO = field(default_factory=lambda: sys.stdout)

    def render(self, entry: LogEntry) -> None:
        line = orjson.dumps(
            {"timestamp": entry.ts_iso, "level": entry.level, "event": entry.event, **entry.context},
            option=orjson.OPT_NON_STR_KEYS,
            default=str,
        )
        print(line.decode(), file=self.output)


@dataclass(slots=True)
class NoOpRenderer:
    """Silent renderer for testing."""

    def render(self, entry: LogEntry) -> None:
        pass


@dataclass(slots=True)
class CaptureRenderer:
    """Keeps entries in memory so tests can assert on what was logged."""

    entries: list[LogEntry] = field(default_factory=list)

    def render(self, entry: LogEntry) -> None:
        self.entries.append(entry)

    def events(self, level: str | None = None) -> list[str]:
        return [e.event for e in self.entries if level is None or e.level == level]


# ─────────────────────────────────────────────────────────────────────────────
# Global Configuration
# ─────────────────────────────────────────────────────────────────────────────

# Process-wide: configured once at start-up before any task is spawned
_renderer: LogRenderer | None = None
_min_level: int = logging.INFO
_default_context: JsonDict = {}


def configure_logging(
    format: str = "console",  # noqa: A002 - mirrors the settings field name
    level: str = "INFO",
    *,
    service: str | None = None,
    output: TextIO | None = None,
    colors: bool | None = None,
) -> LogRenderer:
    """Configure global structured logging. Format: "console" (human), "json" (machine), "none"."""
    global _renderer, _min_level, _default_context
    _min_level = getattr(logging, level.upper(), logging.INFO)
    match format:
        case "console": renderer: LogRenderer = ConsoleRenderer(output=output or sys.stderr, colors=colors)
        case "json": renderer = JsonRenderer(output=output or sys.stdout)
        case "none": renderer = NoOpRenderer()
        case _: raise ValueError(f"Unknown format: {format}. Use 'console', 'json', or 'none'")
    _renderer = renderer
    _default_context = {"service": service} if service else {}
    return renderer


def set_renderer(renderer: LogRenderer) -> None:
    """Swap the active renderer (tests install a CaptureRenderer)."""
    global _renderer
    _renderer = renderer


def get_logger(name: str | None = None, **initial_context: Any) -> BoundLogger:
    """Get a structured logger. Name is added to context as 'logger'."""
    ctx = {**({"logger": name} if name else {}), **initial_context}
    return BoundLogger(context=ctx)


def _get_renderer() -> LogRenderer:
    global _renderer
    if _renderer is None:
        _renderer = ConsoleRenderer()
    return _renderer


class log_context:
    """Context manager for scoped logging context. Adds key-value pairs to all entries within the scope."""

    __slots__ = ("_ctx", "_token")

    def __init__(self, **kw: Any) -> None:
        self._ctx: JsonDict = dict(kw)
        self._token: object | None = None

    def __enter__(self) -> log_context:
        self._token = _log_context.set({**_log_context.get(), **self._ctx})
        return self

    def __exit__(self, exc_type: type[BaseException] | None, exc_val: BaseException | None,
                 exc_tb: TracebackType | None) -> None:
        if self._token is not None:
            _log_context.reset(self._token)  # type: ignore[arg-type]


# ─────────────────────────────────────────────────────────────────────────────
# Helpers
# ─────────────────────────────────────────────────────────────────────────────


_COLORS = {"reset": "\033[0m", "bold": "\033[1m", "dim": "\033[2m", "red": "\033[31m",
           "green": "\033[32m", "yellow": "\033[33m", "cyan": "\033[36m"}
_NO_COLORS = {k: "" for k in _COLORS}
_LEVEL_COLORS = {"debug": _COLORS["dim"], "info": _COLORS["green"], "warning": _COLORS["yellow"],
                 "error": _COLORS["red"]}


def _level_name(level: int) -> str:
    return logging.getLevelName(level).lower()


def _format_value(v: object) -> str:
    match v:
        case str(): return f'"{v}"'
        case bool(): return str(v).lower()
        case int() | float(): return str(v)
        case dict(): return f"{{{len(v)} items}}"
        case list() | tuple(): return "[" + ",".join(str(i) for i in v) + "]"
        case _: return repr(v)
