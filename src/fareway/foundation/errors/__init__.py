"""Error handling for the gateway.

- ErrorCode: machine-readable failure classification
- ToolException/StoreError/RecordNotFound: raised by handlers and the store
- ToolResult: the uniform success/failure envelope
"""

from .errors import (
    ConfigurationError,
    ErrorCode,
    RecordNotFound,
    StoreError,
    ToolException,
    classify_exception,
    format_validation_error,
)
from .result import JsonDict, ToolResult

__all__ = [
    "ErrorCode", "ToolException", "StoreError", "RecordNotFound", "ConfigurationError",
    "classify_exception", "format_validation_error",
    "ToolResult", "JsonDict",
]
