"""Render a tool's params model as the externally advertised JSON schema.

The same pydantic model validates input, so the advertised schema and the
validator cannot drift apart. Pydantic-specific noise (titles, ``$defs``,
nullable ``anyOf`` wrappers) is stripped so MCP clients see plain JSON Schema.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel


def _clean(prop: dict[str, Any]) -> dict[str, Any]:
    prop = {k: v for k, v in prop.items() if k != "title"}
    # Optional[X] renders as anyOf [X, null]; advertise X (omission means null)
    variants = prop.get("anyOf")
    if isinstance(variants, list):
        non_null = [v for v in variants if v.get("type") != "null"]
        if len(non_null) == 1:
            merged = {**{k: v for k, v in prop.items() if k != "anyOf"}, **_clean(non_null[0])}
            if merged.get("default", ...) is None:
                merged.pop("default")
            return merged
    if isinstance(prop.get("items"), dict):
        prop["items"] = _clean(prop["items"])
    return prop


def get_tool_properties(schema: type[BaseModel]) -> dict[str, dict[str, Any]]:
    """Extract cleaned property definitions."""
    properties = schema.model_json_schema().get("properties", {})
    return {name: _clean(prop) for name, prop in properties.items()}


def get_required_params(schema: type[BaseModel]) -> list[str]:
    """Get list of required parameter names."""
    return list(schema.model_json_schema().get("required", []))


def render_input_schema(schema: type[BaseModel]) -> dict[str, Any]:
    """Full object schema as advertised in the catalogue and over MCP."""
    return {
        "type": "object",
        "properties": get_tool_properties(schema),
        "required": get_required_params(schema),
    }
