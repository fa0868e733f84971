"""Error codes and exceptions for gateway tool execution.

Handlers raise; the dispatcher is the only place exceptions are turned into
failure envelopes. Codes travel in `metadata.error_code` so callers can branch
without parsing messages.
"""

from __future__ import annotations

from enum import StrEnum
from functools import lru_cache

from pydantic import ValidationError


class ErrorCode(StrEnum):
    """Machine-readable classification of a failed tool call."""
    UNKNOWN_TOOL = "UNKNOWN_TOOL"
    INVALID_PARAMS = "INVALID_PARAMS"
    NOT_FOUND = "NOT_FOUND"
    STORE_ERROR = "STORE_ERROR"
    NETWORK_ERROR = "NETWORK_ERROR"
    TIMEOUT = "TIMEOUT"
    INTERNAL_ERROR = "INTERNAL_ERROR"


# Ordered for priority: first matching pattern wins
_PATTERN_CODES: dict[str, ErrorCode] = {
    "timeout": ErrorCode.TIMEOUT,
    "timedout": ErrorCode.TIMEOUT,
    "connection": ErrorCode.NETWORK_ERROR,
    "network": ErrorCode.NETWORK_ERROR,
    "notfound": ErrorCode.NOT_FOUND,
    "not found": ErrorCode.NOT_FOUND,
    "validation": ErrorCode.INVALID_PARAMS,
    "database": ErrorCode.STORE_ERROR,
}
_PATTERN_KEYS = tuple(_PATTERN_CODES)


@lru_cache(maxsize=256)
def _classify_cached(exc_key: str) -> ErrorCode:
    haystack = exc_key.lower()
    for pattern in _PATTERN_KEYS:
        if pattern in haystack:
            return _PATTERN_CODES[pattern]
    return ErrorCode.INTERNAL_ERROR


def classify_exception(exc: BaseException) -> ErrorCode:
    """Map exception to error code via its declared code or name/message patterns."""
    if isinstance(exc, ToolException):
        return exc.code
    return _classify_cached(f"{type(exc).__name__} {exc}")


class ToolException(Exception):
    """Failure raised by a tool handler, carrying a caller-facing message."""

    default_code: ErrorCode = ErrorCode.INTERNAL_ERROR

    def __init__(self, message: str, code: ErrorCode | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.code = code or self.default_code


class StoreError(ToolException):
    """The record store rejected a query or could not be reached."""
    default_code = ErrorCode.STORE_ERROR


class RecordNotFound(StoreError):
    """A point lookup matched no row."""
    default_code = ErrorCode.NOT_FOUND


class ConfigurationError(Exception):
    """Invalid static configuration detected at start-up (fatal)."""


def format_validation_error(exc: ValidationError) -> str:
    """Render the first failing field of a pydantic error as one line."""
    errors = exc.errors(include_url=False)
    if not errors:
        return "invalid arguments"
    first = errors[0]
    loc = ".".join(str(part) for part in first.get("loc", ()))
    msg = first.get("msg", "invalid value")
    return f"invalid argument '{loc}': {msg}" if loc else f"invalid arguments: {msg}"
