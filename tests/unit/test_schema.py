"""Unit tests for parsing tool input schemas into parameter specs."""

import pytest

from toolrelay.errors import ManifestError
from toolrelay.tools.schema import parse_parameters, to_json_schema
from toolrelay.tools.types import ParamType, ToolManifest


def test_parse_basic_properties():
    """Test that properties are parsed in declaration order with required flags."""
    params = parse_parameters(
        {
            "type": "object",
            "properties": {
                "location": {"type": "string", "description": "City name"},
                "days": {"type": "integer", "minimum": 1, "maximum": 7},
            },
            "required": ["location"],
        }
    )

    assert [p.name for p in params] == ["location", "days"]
    assert params[0].type is ParamType.STRING
    assert params[0].required is True
    assert params[0].description == "City name"
    assert params[1].type is ParamType.INTEGER
    assert params[1].required is False
    assert params[1].minimum == 1
    assert params[1].maximum == 7


def test_parse_enum_default_and_string_constraints():
    """Test enum, default and string constraints."""
    params = parse_parameters(
        {
            "type": "object",
            "properties": {
                "units": {"type": "string", "enum": ["metric", "imperial"], "default": "metric"},
                "code": {"type": "string", "minLength": 2, "maxLength": 3, "pattern": "^[A-Z]+$"},
            },
        }
    )

    units, code = params
    assert units.enum == ("metric", "imperial")
    assert units.has_default is True
    assert units.default == "metric"
    assert code.min_length == 2
    assert code.max_length == 3
    assert code.pattern == "^[A-Z]+$"
    assert code.has_default is False


def test_parse_array_and_nested_object():
    """Test array item types and nested object properties."""
    params = parse_parameters(
        {
            "type": "object",
            "properties": {
                "tags": {"type": "array", "items": {"type": "string"}},
                "options": {
                    "type": "object",
                    "properties": {"limit": {"type": "integer"}},
                    "required": ["limit"],
                },
            },
        }
    )

    tags, options = params
    assert tags.type is ParamType.ARRAY
    assert tags.item_type is ParamType.STRING
    assert options.type is ParamType.OBJECT
    assert options.properties[0].name == "limit"
    assert options.properties[0].required is True


def test_parse_nullable_union_type():
    """Test that ["string", "null"] unions take the non-null type."""
    params = parse_parameters(
        {"type": "object", "properties": {"note": {"type": ["string", "null"]}}}
    )
    assert params[0].type is ParamType.STRING


def test_parse_untyped_property_is_any():
    """Test that a property without a type accepts anything."""
    params = parse_parameters({"type": "object", "properties": {"value": {}}})
    assert params[0].type is ParamType.ANY


def test_parse_empty_schema_has_no_parameters():
    """Test that an object schema without properties yields no parameters."""
    assert parse_parameters({"type": "object"}) == []


@pytest.mark.parametrize(
    "schema",
    [
        None,
        "not a schema",
        {"type": "string"},
        {"type": "object", "properties": ["x"]},
        {"type": "object", "properties": {"x": "string"}},
        {"type": "object", "properties": {"x": {"type": "datetime"}}},
        {"type": "object", "properties": {"x": {"type": "string"}}, "required": "x"},
        {"type": "object", "properties": {"x": {"type": "string", "enum": []}}},
        {"type": "object", "properties": {"x": {"type": "integer", "minimum": "one"}}},
    ],
)
def test_malformed_schema_raises_manifest_error(schema):
    """Test that missing or malformed schemas raise ManifestError."""
    with pytest.raises(ManifestError):
        parse_parameters(schema, tool_name="broken")


def test_manifest_error_carries_tool_name():
    """Test that ManifestError records which tool was malformed."""
    with pytest.raises(ManifestError) as exc_info:
        ToolManifest(name="broken", input_schema=None).parameters()
    assert exc_info.value.tool_name == "broken"


def test_to_json_schema_renders_constraints():
    """Test rendering parameter specs back into JSON Schema."""
    params = parse_parameters(
        {
            "type": "object",
            "properties": {
                "location": {"type": "string", "description": "City"},
                "units": {"type": "string", "enum": ["metric", "imperial"]},
                "days": {"type": "integer", "minimum": 1},
                "tags": {"type": "array", "items": {"type": "string"}},
            },
            "required": ["location"],
        }
    )

    schema = to_json_schema(params)

    assert schema["type"] == "object"
    assert schema["required"] == ["location"]
    assert schema["properties"]["location"] == {"type": "string", "description": "City"}
    assert schema["properties"]["units"]["enum"] == ["metric", "imperial"]
    assert schema["properties"]["days"]["minimum"] == 1
    assert schema["properties"]["tags"]["items"] == {"type": "string"}
