"""Unit tests for the schema translator and worked-example generation."""

import json

from tests.fakes import WEATHER_SCHEMA
from toolrelay.tools.examples import STRING_PLACEHOLDER, build_example, example_value, tool_category
from toolrelay.tools.schema import parse_parameters
from toolrelay.tools.translator import SchemaTranslator, naming_convention
from toolrelay.tools.types import ParameterSpec, ParamType, ToolManifest


def _translate(name, schema, description="A tool"):
    return SchemaTranslator().translate(
        ToolManifest(name=name, description=description, input_schema=schema, server_id="s1")
    )


def test_enriched_description_lists_parameters():
    """Test that every parameter appears with its requiredness and type."""
    translated = _translate("getWeather", WEATHER_SCHEMA, "Get the current weather")

    lines = translated.description.splitlines()
    assert lines[0] == "Get the current weather"
    assert "Parameters:" in lines
    assert "- location (required, string): City to get the weather for" in lines
    assert "- units (optional, string): metric or imperial" in lines


def test_enriched_description_includes_constraints():
    """Test that enum, bounds and defaults are spelled out."""
    translated = _translate(
        "listItems",
        {
            "type": "object",
            "properties": {
                "order": {"type": "string", "enum": ["asc", "desc"], "default": "asc"},
                "limit": {"type": "integer", "minimum": 1, "maximum": 100},
            },
        },
    )

    assert '- order (optional, string, one of: asc, desc, default: "asc")' in translated.description
    assert "- limit (optional, integer, min: 1, max: 100)" in translated.description


def test_enriched_description_names_the_convention():
    """Test that the naming instruction states the case convention."""
    translated = _translate(
        "git_log",
        {
            "type": "object",
            "properties": {"repoPath": {"type": "string"}, "maxCount": {"type": "integer"}},
        },
    )

    assert (
        "Use these exact parameter names (camelCase): repoPath, maxCount. "
        "Do not rename, re-case or abbreviate them."
    ) in translated.description


def test_enriched_description_ends_with_example():
    """Test that the description ends with the worked example as JSON."""
    translated = _translate("getWeather", WEATHER_SCHEMA)

    lines = translated.description.splitlines()
    assert lines[-2] == "Example arguments:"
    assert json.loads(lines[-1]) == translated.example
    assert translated.example == {"location": "Paris", "units": "metric"}


def test_tool_without_parameters():
    """Test the description of a tool that takes no parameters."""
    translated = _translate("get_current_time", {"type": "object", "properties": {}})

    assert translated.description == "A tool\n\nThis tool takes no parameters."
    assert translated.schema_valid is True
    assert translated.validator.validate({}) == {}


def test_malformed_schema_degrades_to_accept_anything():
    """Test that a malformed schema never fails translation."""
    translated = _translate("broken", {"type": "object", "properties": {"x": {"type": "datetime"}}}, "Does things")

    assert translated.schema_valid is False
    assert translated.description == "Does things"
    assert translated.parameters == ()
    assert translated.validator.accepts_anything is True
    assert translated.validator.validate({"anything": 1, "goes": "yes"}) == {"anything": 1, "goes": "yes"}


def test_uncompilable_constraint_degrades_to_accept_anything():
    """Test that a schema pydantic rejects still translates."""
    translated = _translate(
        "search",
        {"type": "object", "properties": {"q": {"type": "string", "pattern": "(unclosed"}}},
        "Search things",
    )

    assert translated.schema_valid is False
    assert translated.validator.accepts_anything is True
    assert translated.validator.validate({"q": "anything"}) == {"q": "anything"}


def test_missing_schema_degrades_to_accept_anything():
    """Test that a manifest without an input schema is still usable."""
    translated = _translate("legacy", None)

    assert translated.schema_valid is False
    assert translated.json_schema == {"type": "object", "properties": {}}


def test_naming_convention_detection():
    """Test naming convention detection across name sets."""
    assert naming_convention(["repo_path", "max_count"]) == "snake_case"
    assert naming_convention(["repoPath", "maxCount"]) == "camelCase"
    assert naming_convention(["RepoPath"]) == "PascalCase"
    assert naming_convention(["repo-path"]) == "kebab-case"
    assert naming_convention(["repo_path", "maxCount"]) == "exactly as written"
    assert naming_convention(["path", "repo_path"]) == "snake_case"


def test_example_values_follow_types_and_hints():
    """Test deterministic example generation for individual parameters."""
    assert example_value(ParameterSpec(name="units", type=ParamType.STRING, enum=("c", "f"))) == "c"
    assert example_value(ParameterSpec(name="verbose", type=ParamType.BOOLEAN)) is True
    assert example_value(ParameterSpec(name="count", type=ParamType.INTEGER)) == 10
    assert example_value(ParameterSpec(name="count", type=ParamType.INTEGER, minimum=3)) == 3
    assert example_value(ParameterSpec(name="email", type=ParamType.STRING)) == "user@example.com"
    assert example_value(ParameterSpec(name="when", type=ParamType.STRING, format="date")) == "2024-01-15"
    assert example_value(ParameterSpec(name="zzz", type=ParamType.STRING)) == STRING_PLACEHOLDER
    assert example_value(
        ParameterSpec(name="tags", type=ParamType.ARRAY, item_type=ParamType.INTEGER)
    ) == [10]


def test_curated_examples_respect_enums_and_types():
    """Test that curated values never override enums or mismatched types."""
    params = parse_parameters(
        {
            "type": "object",
            "properties": {
                "location": {"type": "string"},
                "units": {"type": "string", "enum": ["celsius", "fahrenheit"]},
            },
        }
    )
    assert build_example("getWeather", params) == {"location": "Paris", "units": "celsius"}

    params = parse_parameters(
        {
            "type": "object",
            "properties": {"repo_path": {"type": "string"}, "max_count": {"type": "integer"}},
        }
    )
    assert build_example("git_log", params) == {"repo_path": "/home/user/my-project", "max_count": 10}


def test_tool_category():
    """Test curated category lookup by tool name."""
    assert tool_category("getWeather") == "weather"
    assert tool_category("git_status") == "git"
    assert tool_category("calculate") is None
