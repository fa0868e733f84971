"""Tool definitions, registry, and schema export."""

from .registry import Handler, ToolDefinition, ToolRegistry
from .schema import get_required_params, get_tool_properties, render_input_schema

__all__ = [
    "Handler",
    "ToolDefinition",
    "ToolRegistry",
    "get_required_params",
    "get_tool_properties",
    "render_input_schema",
]
