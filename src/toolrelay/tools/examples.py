"""Worked-example generation for enriched tool descriptions.

Examples are derived deterministically from parameter names and
descriptions. Tools whose names fall into a known category get curated
values for the fields the category knows about.
"""

import math
from typing import Any

from toolrelay.tools.types import ParameterSpec, ParamType

STRING_PLACEHOLDER = "example_value"
NUMBER_PLACEHOLDER = 10

# (keywords matched against "name description", example value), first hit wins
_STRING_HINTS: list[tuple[tuple[str, ...], str]] = [
    (("email", "e-mail"), "user@example.com"),
    (("url", "uri", "endpoint", "link"), "https://api.example.com/resource"),
    (("directory", "folder"), "/home/user/projects"),
    (("path", "file"), "/home/user/documents/example.txt"),
    (("repo",), "/home/user/my-project"),
    (("branch",), "main"),
    (("commit message",), "Fix typo in README"),
    (("timezone", "time zone"), "Europe/Paris"),
    (("date",), "2024-01-15"),
    (("time",), "14:30:00"),
    (("city", "location", "place"), "Paris"),
    (("country",), "France"),
    (("query", "search", "keyword"), "latest project updates"),
    (("sql",), "SELECT * FROM users LIMIT 10"),
    (("name",), "example-name"),
    (("id", "identifier"), "abc123"),
    (("message", "text", "content", "body"), "Hello, world!"),
    (("method",), "GET"),
    (("language", "lang"), "en"),
]

_FORMAT_HINTS = {
    "email": "user@example.com",
    "uri": "https://api.example.com/resource",
    "url": "https://api.example.com/resource",
    "date": "2024-01-15",
    "date-time": "2024-01-15T14:30:00Z",
    "time": "14:30:00",
    "uuid": "123e4567-e89b-12d3-a456-426614174000",
}

# category -> (tool name keywords, curated example values)
CURATED_EXAMPLES: dict[str, tuple[tuple[str, ...], dict[str, Any]]] = {
    "thinking": (
        ("think", "reason", "reflect"),
        {
            "thought": "First, break the problem into smaller steps.",
            "thoughtNumber": 1,
            "totalThoughts": 3,
            "nextThoughtNeeded": True,
        },
    ),
    "file": (
        ("file", "directory", "read", "write"),
        {
            "path": "/home/user/documents/notes.txt",
            "content": "Meeting notes for Monday",
        },
    ),
    "git": (
        ("git",),
        {
            "repo_path": "/home/user/my-project",
            "message": "Update documentation",
            "branch_name": "main",
            "max_count": 10,
        },
    ),
    "weather": (
        ("weather", "forecast"),
        {"location": "Paris", "city": "Paris", "units": "metric"},
    ),
    "time": (
        ("time", "clock", "timezone"),
        {"timezone": "Europe/Paris", "time": "14:30", "source_timezone": "UTC"},
    ),
    "database": (
        ("database", "sql", "query", "db_"),
        {"query": "SELECT id, name FROM users LIMIT 10", "limit": 10},
    ),
    "http": (
        ("http", "fetch", "request", "api"),
        {"url": "https://api.example.com/items", "method": "GET"},
    ),
    "search": (
        ("search", "lookup", "find"),
        {"query": "python asyncio tutorial", "limit": 5},
    ),
}


def tool_category(tool_name: str) -> str | None:
    """Return the curated category a tool name belongs to, if any."""
    lowered = tool_name.lower()
    for category, (keywords, _) in CURATED_EXAMPLES.items():
        if any(keyword in lowered for keyword in keywords):
            return category
    return None


def example_value(param: ParameterSpec) -> Any:
    """Generate a deterministic example value for one parameter."""
    if param.enum:
        return param.enum[0]
    if param.has_default and param.default is not None:
        return param.default

    if param.type is ParamType.BOOLEAN:
        return True
    if param.type in (ParamType.INTEGER, ParamType.NUMBER):
        if param.minimum is not None:
            return math.ceil(param.minimum) if param.type is ParamType.INTEGER else param.minimum
        return NUMBER_PLACEHOLDER
    if param.type is ParamType.ARRAY:
        if param.item_type is None:
            return []
        item = ParameterSpec(name=param.name, type=param.item_type, description=param.description)
        return [example_value(item)]
    if param.type is ParamType.OBJECT:
        return {p.name: example_value(p) for p in param.properties}

    if param.format and param.format in _FORMAT_HINTS:
        return _FORMAT_HINTS[param.format]

    haystack = f"{param.name} {param.description}".lower()
    for keywords, value in _STRING_HINTS:
        if any(keyword in haystack for keyword in keywords):
            return value
    return STRING_PLACEHOLDER


_PYTHON_TYPES: dict[ParamType, tuple[type, ...]] = {
    ParamType.STRING: (str,),
    ParamType.INTEGER: (int,),
    ParamType.NUMBER: (int, float),
    ParamType.BOOLEAN: (bool,),
    ParamType.ARRAY: (list,),
    ParamType.OBJECT: (dict,),
}


def _fits(param: ParameterSpec, value: Any) -> bool:
    expected = _PYTHON_TYPES.get(param.type)
    if expected is None:
        return True
    if isinstance(value, bool) and param.type is not ParamType.BOOLEAN:
        return False
    return isinstance(value, expected)


def build_example(tool_name: str, parameters: list[ParameterSpec]) -> dict[str, Any]:
    """Build a worked example argument object for a tool.

    The generic example covers every declared parameter. When the tool
    name matches a curated category, the curated values replace the
    generic ones for the fields the category knows about.

    Args:
        tool_name: The tool's name
        parameters: The tool's declared parameters

    Returns:
        Example argument object keyed by canonical parameter name
    """
    example = {param.name: example_value(param) for param in parameters}

    category = tool_category(tool_name)
    if category is not None:
        _, curated = CURATED_EXAMPLES[category]
        by_name = {param.name: param for param in parameters}
        for key, value in curated.items():
            param = by_name.get(key)
            # Enum values are authoritative over curated ones
            if param is not None and not param.enum and _fits(param, value):
                example[key] = value

    return example
