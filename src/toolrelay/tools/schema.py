"""Parsing of JSON Schema tool manifests into parameter specs.

Backends describe their tools with JSON Schema objects. Only the subset
the engine needs is understood: top-level properties with type, enum,
bounds, string constraints, array item types and nested objects.
"""

import logging
from typing import Any

from toolrelay.errors import ManifestError
from toolrelay.tools.types import ParameterSpec, ParamType

logger = logging.getLogger(__name__)

_TYPE_NAMES = {member.value: member for member in ParamType}


def _parse_type(raw: Any, where: str, tool_name: str | None) -> ParamType:
    if raw is None:
        return ParamType.ANY

    # ["string", "null"] style unions: take the first non-null type
    if isinstance(raw, list):
        candidates = [t for t in raw if t != "null"]
        raw = candidates[0] if candidates else None
        if raw is None:
            return ParamType.ANY

    if not isinstance(raw, str) or raw not in _TYPE_NAMES:
        raise ManifestError(f"Unsupported type {raw!r} for {where}", tool_name=tool_name)
    return _TYPE_NAMES[raw]


def _parse_number(value: Any, where: str, tool_name: str | None) -> float | None:
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ManifestError(f"Non-numeric bound {value!r} for {where}", tool_name=tool_name)
    return value


def _parse_property(
    name: str,
    prop: Any,
    required: bool,
    tool_name: str | None,
) -> ParameterSpec:
    if not isinstance(prop, dict):
        raise ManifestError(
            f"Property '{name}' must be an object, got {type(prop).__name__}",
            tool_name=tool_name,
        )

    param_type = _parse_type(prop.get("type"), f"property '{name}'", tool_name)

    enum = prop.get("enum")
    if enum is not None:
        if not isinstance(enum, list) or not enum:
            raise ManifestError(f"Invalid enum for property '{name}'", tool_name=tool_name)
        enum = tuple(enum)

    item_type = None
    properties: tuple[ParameterSpec, ...] = ()
    if param_type is ParamType.ARRAY:
        items = prop.get("items")
        if isinstance(items, dict) and "type" in items:
            item_type = _parse_type(items["type"], f"items of '{name}'", tool_name)
    elif param_type is ParamType.OBJECT and isinstance(prop.get("properties"), dict):
        properties = tuple(_parse_properties(prop, tool_name))

    return ParameterSpec(
        name=name,
        type=param_type,
        required=required,
        description=str(prop.get("description") or ""),
        enum=enum,
        minimum=_parse_number(prop.get("minimum"), f"minimum of '{name}'", tool_name),
        maximum=_parse_number(prop.get("maximum"), f"maximum of '{name}'", tool_name),
        item_type=item_type,
        format=prop.get("format"),
        default=prop.get("default"),
        has_default="default" in prop,
        min_length=prop.get("minLength"),
        max_length=prop.get("maxLength"),
        pattern=prop.get("pattern"),
        properties=properties,
    )


def _parse_properties(schema: dict[str, Any], tool_name: str | None) -> list[ParameterSpec]:
    properties = schema.get("properties") or {}
    if not isinstance(properties, dict):
        raise ManifestError("'properties' must be an object", tool_name=tool_name)

    required = schema.get("required") or []
    if not isinstance(required, list):
        raise ManifestError("'required' must be a list", tool_name=tool_name)

    return [
        _parse_property(name, prop, name in required, tool_name)
        for name, prop in properties.items()
    ]


def parse_parameters(
    schema: dict[str, Any] | None, tool_name: str | None = None
) -> list[ParameterSpec]:
    """Parse a tool's JSON Schema into a list of parameter specs.

    Args:
        schema: The tool's input schema as declared by its backend
        tool_name: Tool name, used in error messages

    Returns:
        One ParameterSpec per top-level property, in declaration order

    Raises:
        ManifestError: If the schema is absent or malformed
    """
    if schema is None:
        raise ManifestError("Tool declares no input schema", tool_name=tool_name)
    if not isinstance(schema, dict):
        raise ManifestError(
            f"Input schema must be an object, got {type(schema).__name__}",
            tool_name=tool_name,
        )

    schema_type = schema.get("type", "object")
    if schema_type != "object":
        raise ManifestError(
            f"Input schema must describe an object, got type {schema_type!r}",
            tool_name=tool_name,
        )

    return _parse_properties(schema, tool_name)


def to_json_schema(parameters: list[ParameterSpec]) -> dict[str, Any]:
    """Render parameter specs back into a JSON Schema object.

    Used when attaching tool manifests to a chat model request.
    """
    properties: dict[str, Any] = {}
    for param in parameters:
        prop: dict[str, Any] = {}
        if param.type is not ParamType.ANY:
            prop["type"] = param.type.value
        if param.description:
            prop["description"] = param.description
        if param.enum is not None:
            prop["enum"] = list(param.enum)
        if param.minimum is not None:
            prop["minimum"] = param.minimum
        if param.maximum is not None:
            prop["maximum"] = param.maximum
        if param.format:
            prop["format"] = param.format
        if param.item_type is not None:
            prop["items"] = {"type": param.item_type.value}
        if param.properties:
            prop.update(to_json_schema(list(param.properties)))
        properties[param.name] = prop

    return {
        "type": "object",
        "properties": properties,
        "required": [p.name for p in parameters if p.required],
    }
