"""Tool definitions and the registry that serves them.

The registry is filled once at start-up and only read afterwards, so it is
safe to share between concurrent requests without locking.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable, Iterable, Iterator
from dataclasses import dataclass, field
from functools import cached_property
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel

from .schema import render_input_schema

if TYPE_CHECKING:
    from fareway.runtime.context import ToolContext

Handler = Callable[[Any, "ToolContext"], Awaitable[Any]]


@dataclass(frozen=True)
class ToolDefinition:
    """A named, schema-described, read-only operation.

    Attributes:
        name: Unique identifier used by both transports
        description: Human-readable description shown in the catalogue
        params_schema: Pydantic model used for validation and schema export
        handler: ``async (params, ctx) -> payload``; raises on failure
        cacheable: False for lookups where caching has no value (fuzzy search)
        cache_ttl: Per-tool TTL override in seconds (None = cache default)
        result_metadata: Optional ``(params) -> dict`` merged into a successful
            envelope's metadata, on cache hits as well as fresh runs
    """

    name: str
    description: str
    params_schema: type[BaseModel]
    handler: Handler = field(repr=False)
    cacheable: bool = True
    cache_ttl: float | None = None
    result_metadata: Callable[[Any], dict[str, Any]] | None = field(default=None, repr=False)

    def __post_init__(self) -> None:
        if not self.name:
            raise ValueError("Tool name must not be empty")
        if len(self.description) < 10:
            raise ValueError(f"Tool '{self.name}' description too short for LLM selection.")

    @cached_property
    def input_schema(self) -> dict[str, Any]:
        return render_input_schema(self.params_schema)

    def validate(self, arguments: Any) -> BaseModel:
        """Validate raw arguments; raises pydantic.ValidationError."""
        return self.params_schema.model_validate(arguments)

    def describe(self) -> dict[str, Any]:
        return {"name": self.name, "description": self.description, "inputSchema": self.input_schema}


class ToolRegistry:
    """Central registry for all available tools.

    Example:
        >>> registry = ToolRegistry()
        >>> registry.register([search_courses, get_course_details])
        >>> registry.get("search_courses").description
        'Search for golf courses ...'
        >>> [t["name"] for t in registry.list_all()]
        ['search_courses', 'get_course_details']
    """

    __slots__ = ("_tools",)

    def __init__(self, definitions: Iterable[ToolDefinition] = ()) -> None:
        self._tools: dict[str, ToolDefinition] = {}
        self.register(definitions)

    def register(self, definitions: Iterable[ToolDefinition]) -> None:
        """Append definitions. Duplicate names are a fatal configuration error."""
        for tool in definitions:
            if tool.name in self._tools:
                raise ValueError(f"Tool '{tool.name}' already registered.")
            self._tools[tool.name] = tool

    def get(self, name: str) -> ToolDefinition | None:
        """Get tool by name."""
        return self._tools.get(name)

    def list_all(self) -> list[dict[str, Any]]:
        """Catalogue entries in registration order."""
        return [tool.describe() for tool in self._tools.values()]

    @property
    def names(self) -> list[str]:
        return list(self._tools)

    def __getitem__(self, name: str) -> ToolDefinition:
        """Get tool by name, raises KeyError if not found."""
        return self._tools[name]

    def __contains__(self, name: object) -> bool:
        return name in self._tools

    def __len__(self) -> int:
        return len(self._tools)

    def __iter__(self) -> Iterator[ToolDefinition]:
        return iter(self._tools.values())
