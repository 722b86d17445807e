"""Schema translation: tool manifest -> validator + enriched description.

The enriched description is what the chat model sees. It lists every
parameter with its type and constraints, states the naming convention,
and ends with a worked example.
"""

import json
import logging
import re
from dataclasses import dataclass
from typing import Any

from toolrelay.errors import ManifestError
from toolrelay.tools.examples import build_example
from toolrelay.tools.schema import to_json_schema
from toolrelay.tools.types import ParameterSpec, ParamType, ToolManifest
from toolrelay.tools.validator import ArgumentValidator

logger = logging.getLogger(__name__)

_CAMEL = re.compile(r"^[a-z][a-z0-9]*(?:[A-Z][a-z0-9]*)+$")
_PASCAL = re.compile(r"^(?:[A-Z][a-z0-9]*)+$")
_SNAKE = re.compile(r"^[a-z][a-z0-9]*(?:_[a-z0-9]+)+$")
_KEBAB = re.compile(r"^[a-z][a-z0-9]*(?:-[a-z0-9]+)+$")


@dataclass(frozen=True)
class TranslatedSchema:
    """Output of the schema translator for one manifest.

    Attributes:
        validator: Compiled argument validator
        description: Enriched description shown to the model
        parameters: Parsed parameters (empty when the schema was unusable)
        json_schema: JSON Schema sent to the model alongside the description
        example: The worked example embedded in the description
        schema_valid: False when the manifest's schema was absent or malformed
    """

    validator: ArgumentValidator
    description: str
    parameters: tuple[ParameterSpec, ...]
    json_schema: dict[str, Any]
    example: dict[str, Any]
    schema_valid: bool = True


def naming_convention(names: list[str]) -> str:
    """Describe the case convention the canonical names follow."""
    styles = set()
    for name in names:
        if _SNAKE.match(name):
            styles.add("snake_case")
        elif _CAMEL.match(name):
            styles.add("camelCase")
        elif _PASCAL.match(name):
            styles.add("PascalCase")
        elif _KEBAB.match(name):
            styles.add("kebab-case")
        # single lowercase words fit any convention

    if len(styles) == 1:
        return styles.pop()
    return "exactly as written"


def _type_label(param: ParameterSpec) -> str:
    if param.type is ParamType.ARRAY and param.item_type is not None:
        return f"array of {param.item_type.value}"
    return param.type.value


def _describe_parameter(param: ParameterSpec) -> str:
    tags = ["required" if param.required else "optional", _type_label(param)]
    if param.enum is not None:
        tags.append("one of: " + ", ".join(str(option) for option in param.enum))
    if param.format:
        tags.append(f"format: {param.format}")
    if param.minimum is not None:
        tags.append(f"min: {param.minimum}")
    if param.maximum is not None:
        tags.append(f"max: {param.maximum}")
    if param.has_default:
        tags.append(f"default: {json.dumps(param.default)}")

    line = f"- {param.name} ({', '.join(tags)})"
    if param.description:
        line += f": {param.description}"
    return line


def enrich_description(
    manifest: ToolManifest,
    parameters: list[ParameterSpec],
    example: dict[str, Any],
) -> str:
    """Build the enriched description for a tool.

    Args:
        manifest: The tool manifest
        parameters: Parsed parameters of the tool
        example: Worked example to embed

    Returns:
        Description text with parameter list, naming instruction and example
    """
    description = manifest.description.strip() or "No description available"
    if not parameters:
        return f"{description}\n\nThis tool takes no parameters."

    names = [param.name for param in parameters]
    lines = [description, "", "Parameters:"]
    lines.extend(_describe_parameter(param) for param in parameters)
    lines.append("")
    lines.append(
        f"Use these exact parameter names ({naming_convention(names)}): "
        f"{', '.join(names)}. Do not rename, re-case or abbreviate them."
    )
    lines.append("")
    lines.append("Example arguments:")
    lines.append(json.dumps(example))
    return "\n".join(lines)


class SchemaTranslator:
    """Turns tool manifests into validators and model-facing descriptions."""

    def translate(self, manifest: ToolManifest) -> TranslatedSchema:
        """Translate one manifest. Never raises.

        A missing or malformed schema degrades to an accept-anything
        validator and a description without a parameter section.
        """
        try:
            parameters = manifest.parameters()
            validator = ArgumentValidator(manifest.name, parameters)
        except ManifestError as e:
            logger.warning(f"Tool {manifest.name} has an unusable schema, accepting any arguments: {e}")
            return TranslatedSchema(
                validator=ArgumentValidator.accept_anything(manifest.name),
                description=manifest.description.strip() or "No description available",
                parameters=(),
                json_schema={"type": "object", "properties": {}},
                example={},
                schema_valid=False,
            )

        example = build_example(manifest.name, parameters)
        return TranslatedSchema(
            validator=validator,
            description=enrich_description(manifest, parameters, example),
            parameters=tuple(parameters),
            json_schema=to_json_schema(parameters),
            example=example,
        )
