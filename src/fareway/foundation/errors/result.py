"""The uniform result envelope returned for every tool call on every transport."""

from __future__ import annotations

from typing import Annotated, Any, Self

from pydantic import BaseModel, ConfigDict, Field, model_validator

from .errors import ErrorCode

JsonDict = dict[str, Any]


class ToolResult(BaseModel):
    """Outcome of one tool execution.

    Exactly one of ``data``/``error`` is meaningful, selected by ``success``.
    ``metadata`` always carries ``duration_ms`` once the dispatcher has
    finished with the result.

    Example:
        >>> ToolResult.ok([{"id": 1}]).to_dict()
        {'success': True, 'data': [{'id': 1}], 'metadata': {'count': 1}}
    """

    model_config = ConfigDict(
        frozen=True,
        json_schema_extra={
            "title": "Tool Result",
            "examples": [
                {"success": True, "data": [], "metadata": {"count": 0, "duration_ms": 12.4}},
                {"success": False, "error": "unknown tool: nope", "metadata": {"duration_ms": 0.1}},
            ],
        },
    )

    success: bool
    data: Any = None
    error: Annotated[str | None, Field(min_length=1)] = None
    metadata: JsonDict = Field(default_factory=dict)

    @model_validator(mode="after")
    def _error_iff_failure(self) -> Self:
        if self.success and self.error is not None:
            raise ValueError("successful result cannot carry an error")
        if not self.success and self.error is None:
            raise ValueError("failed result requires an error message")
        return self

    @classmethod
    def ok(cls, data: Any, **metadata: Any) -> Self:
        if isinstance(data, list):
            metadata.setdefault("count", len(data))
        return cls(success=True, data=data, metadata=metadata)

    @classmethod
    def fail(cls, message: str, code: ErrorCode = ErrorCode.INTERNAL_ERROR, **metadata: Any) -> Self:
        return cls(success=False, error=message or code.value, metadata={"error_code": code.value, **metadata})

    @property
    def cached(self) -> bool:
        return bool(self.metadata.get("cached", False))

    @property
    def error_code(self) -> str | None:
        return self.metadata.get("error_code")

    def with_metadata(self, **extra: Any) -> Self:
        """Return a copy with metadata merged in (result is frozen)."""
        return self.model_copy(update={"metadata": {**self.metadata, **extra}})

    def to_dict(self) -> JsonDict:
        """Wire form: ``data`` only on success, ``error`` only on failure."""
        out: JsonDict = {"success": self.success}
        if self.success:
            out["data"] = self.data
        else:
            out["error"] = self.error
        if self.metadata:
            out["metadata"] = dict(self.metadata)
        return out
