"""Argument validation and coercion for tool calls.

Each tool gets a pydantic model compiled from its parameter specs. The
model runs in lax mode so numeric strings, "true"/"false" and "1"/"0"
are coerced on the first pass. When validation still fails, one bounded
repair pass is attempted (type coercion, clamping to declared bounds,
email clean-up) and the model is run exactly once more.
"""

import json
import logging
import math
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, create_model
from pydantic import ValidationError as PydanticValidationError
from pydantic.errors import PydanticSchemaGenerationError
from pydantic_core import SchemaError

from toolrelay.errors import FieldViolation, ManifestError, ValidationError
from toolrelay.tools.types import ParameterSpec, ParamType

logger = logging.getLogger(__name__)

EMAIL_PATTERN = r"^[^@\s]+@[^@\s]+\.[^@\s]+$"

_TRUE_STRINGS = {"true", "1", "yes", "y", "on"}
_FALSE_STRINGS = {"false", "0", "no", "n", "off", ""}

_SCALAR_TYPES: dict[ParamType, Any] = {
    ParamType.STRING: str,
    ParamType.NUMBER: float,
    ParamType.INTEGER: int,
    ParamType.BOOLEAN: bool,
    ParamType.ARRAY: list[Any],
    ParamType.OBJECT: dict[str, Any],
    ParamType.ANY: Any,
}

# pydantic error types that mean "wrong type", repaired by coercion
_TYPE_ERRORS = {
    "string_type",
    "int_type",
    "int_parsing",
    "int_from_float",
    "float_type",
    "float_parsing",
    "bool_type",
    "bool_parsing",
    "list_type",
    "dict_type",
    "literal_error",
}
_LOWER_BOUND_ERRORS = {"greater_than_equal", "greater_than"}
_UPPER_BOUND_ERRORS = {"less_than_equal", "less_than"}


class _ToolArguments(BaseModel):
    model_config = ConfigDict(extra="allow", coerce_numbers_to_str=True)


def is_email_like(param: ParameterSpec) -> bool:
    """Whether a parameter holds an email address, by format or by name."""
    if param.format == "email":
        return True
    return param.type is ParamType.STRING and "email" in param.name.lower()


def _annotation(param: ParameterSpec) -> Any:
    if param.enum is not None:
        try:
            return Literal[param.enum]  # type: ignore[valid-type]
        except TypeError:
            # Unhashable enum members; fall back to the base type
            pass

    if param.type is ParamType.ARRAY and param.item_type is not None:
        return list[_SCALAR_TYPES[param.item_type]]  # type: ignore[misc]
    return _SCALAR_TYPES[param.type]


def _field(param: ParameterSpec) -> tuple[Any, Any]:
    constraints: dict[str, Any] = {}
    if param.type in (ParamType.NUMBER, ParamType.INTEGER):
        if param.minimum is not None:
            constraints["ge"] = _clamp(param, param.minimum, upper=False)
        if param.maximum is not None:
            constraints["le"] = _clamp(param, param.maximum, upper=True)
    if param.type is ParamType.STRING and param.enum is None:
        if param.min_length is not None:
            constraints["min_length"] = param.min_length
        if param.max_length is not None:
            constraints["max_length"] = param.max_length
        if param.pattern:
            constraints["pattern"] = param.pattern
        elif is_email_like(param):
            constraints["pattern"] = EMAIL_PATTERN

    annotation = _annotation(param)
    if param.required:
        return annotation, Field(..., alias=param.name, **constraints)
    return annotation | None, Field(None, alias=param.name, **constraints)


def compile_model(tool_name: str, parameters: list[ParameterSpec]) -> type[BaseModel]:
    """Compile parameter specs into a pydantic model.

    Fields are stored under positional attribute names and aliased to the
    canonical parameter names, so parameters called e.g. "schema" or
    "model_id" never collide with BaseModel attributes. Unknown keys are
    allowed through.

    Raises:
        ManifestError: If pydantic rejects a declared constraint, e.g. an
            invalid regex pattern
    """
    fields = {f"p{index}": _field(param) for index, param in enumerate(parameters)}
    model_name = "".join(part.capitalize() for part in tool_name.replace("-", "_").split("_"))
    try:
        return create_model(  # type: ignore[call-overload]
            f"{model_name or 'Tool'}Arguments",
            __base__=_ToolArguments,
            **fields,
        )
    except (SchemaError, PydanticSchemaGenerationError, ValueError, TypeError) as e:
        raise ManifestError(f"Cannot compile validator: {e}", tool_name=tool_name) from e


def coerce_value(value: Any, target: ParamType) -> Any:
    """Best-effort conversion of a value to a parameter type.

    Returns the value unchanged when no conversion rule applies.
    """
    try:
        if target is ParamType.STRING:
            if isinstance(value, bool):
                return "true" if value else "false"
            if isinstance(value, (int, float)):
                return str(value)
            if isinstance(value, (list, dict)):
                return json.dumps(value)
            return value

        if target in (ParamType.INTEGER, ParamType.NUMBER):
            if isinstance(value, bool):
                number: float = int(value)
            elif isinstance(value, str):
                number = float(value.strip())
            elif isinstance(value, (int, float)):
                number = value
            elif isinstance(value, list) and len(value) == 1:
                return coerce_value(value[0], target)
            else:
                return value
            if target is ParamType.NUMBER or not math.isfinite(number):
                return number
            return int(number) if float(number).is_integer() else round(number)

        if target is ParamType.BOOLEAN:
            if isinstance(value, str):
                lowered = value.strip().lower()
                if lowered in _TRUE_STRINGS:
                    return True
                if lowered in _FALSE_STRINGS:
                    return False
                return value
            if isinstance(value, (int, float)):
                return bool(value)
            return value

        if target is ParamType.ARRAY:
            if isinstance(value, (list, tuple, set)):
                return list(value)
            if isinstance(value, str):
                try:
                    parsed = json.loads(value)
                except json.JSONDecodeError:
                    if "," in value:
                        return [item.strip() for item in value.split(",")]
                    return [value]
                return parsed if isinstance(parsed, list) else [parsed]
            return [value]

        if target is ParamType.OBJECT:
            if isinstance(value, str):
                parsed = json.loads(value)
                return parsed if isinstance(parsed, dict) else value
            return value
    except (ValueError, TypeError, OverflowError):
        return value

    return value


def _coerce_to_enum(value: Any, param: ParameterSpec) -> Any:
    if isinstance(value, str) and param.enum:
        for option in param.enum:
            if isinstance(option, str) and option.lower() == value.strip().lower():
                return option
    if param.type is not ParamType.ANY:
        coerced = coerce_value(value, param.type)
        if coerced in param.enum:
            return coerced
    return value


def _clamp(param: ParameterSpec, bound: float | None, upper: bool) -> Any:
    if bound is None:
        return None
    if param.type is ParamType.INTEGER:
        return math.floor(bound) if upper else math.ceil(bound)
    return bound


def _expected(error: dict[str, Any]) -> str:
    message = str(error.get("msg", "valid value"))
    if error.get("type") == "missing":
        return "a value (field is required)"
    prefix = "Input should be "
    if message.startswith(prefix):
        message = message[len(prefix):]
    return message


def _violations(exc: PydanticValidationError) -> list[FieldViolation]:
    violations = []
    for error in exc.errors():
        missing = error.get("type") == "missing"
        violations.append(
            FieldViolation(
                path=".".join(str(part) for part in error.get("loc", ())) or "<root>",
                expected=_expected(error),
                received=None if missing else error.get("input"),
                missing=missing,
            )
        )
    return violations


class ArgumentValidator:
    """Compiled validator/coercer for one tool's arguments.

    Attributes:
        tool_name: Name of the tool this validator belongs to
        parameters: The parameter specs the validator was compiled from
        accepts_anything: True for the degraded validator used when the
            tool's schema was missing or malformed
    """

    def __init__(
        self,
        tool_name: str,
        parameters: list[ParameterSpec],
        accepts_anything: bool = False,
    ) -> None:
        self.tool_name = tool_name
        self.parameters = list(parameters)
        self.accepts_anything = accepts_anything
        self._by_name = {param.name: param for param in self.parameters}
        self._model = compile_model(tool_name, self.parameters)

    @classmethod
    def accept_anything(cls, tool_name: str) -> "ArgumentValidator":
        """Build a validator with no declared parameters."""
        return cls(tool_name, [], accepts_anything=True)

    def _run(self, arguments: dict[str, Any]) -> dict[str, Any]:
        instance = self._model.model_validate(arguments)
        dumped = instance.model_dump(by_alias=True)
        # Optional parameters the caller did not supply stay absent
        return {key: value for key, value in dumped.items() if key in arguments}

    def check(self, arguments: dict[str, Any]) -> dict[str, Any]:
        """Validate once, without repair.

        Raises:
            ValidationError: If the arguments do not satisfy the schema
        """
        try:
            return self._run(arguments)
        except PydanticValidationError as exc:
            raise ValidationError(self.tool_name, _violations(exc)) from exc

    def validate(self, arguments: dict[str, Any]) -> dict[str, Any]:
        """Validate and coerce arguments, repairing once on failure.

        Args:
            arguments: Normalized arguments keyed by canonical name

        Returns:
            The coerced argument map

        Raises:
            ValidationError: If the arguments still fail after the repair pass
        """
        try:
            return self._run(arguments)
        except PydanticValidationError as exc:
            errors = exc.errors()

        repaired = self.repair(arguments, errors)
        logger.debug(f"Repaired arguments for {self.tool_name}: {repaired}")

        try:
            return self._run(repaired)
        except PydanticValidationError as exc:
            violations = _violations(exc)
            logger.warning(
                f"Arguments for {self.tool_name} still invalid after repair: "
                f"{[v.describe() for v in violations]}"
            )
            raise ValidationError(self.tool_name, violations) from exc

    def repair(self, arguments: dict[str, Any], errors: list[Any]) -> dict[str, Any]:
        """Apply one fix per violation and return a new argument map.

        Fixes, by violation kind:
            type mismatch -> coerce to the expected type
            below minimum / above maximum -> clamp to the bound
            malformed email-like string -> trim and lowercase
        Violations without a fix (e.g. a missing required field) are left
        for the second validation pass to report.
        """
        repaired = dict(arguments)

        for error in errors:
            loc = error.get("loc", ())
            if not loc or loc[0] not in self._by_name or loc[0] not in repaired:
                continue

            param = self._by_name[loc[0]]
            kind = error.get("type", "")
            name = loc[0]

            # Element of a typed array, e.g. ("ids", 2)
            if len(loc) == 2 and isinstance(loc[1], int) and param.item_type is not None:
                items = repaired[name]
                if isinstance(items, list) and loc[1] < len(items):
                    items = list(items)
                    items[loc[1]] = coerce_value(items[loc[1]], param.item_type)
                    repaired[name] = items
                continue

            if kind in _TYPE_ERRORS:
                if param.enum:
                    repaired[name] = _coerce_to_enum(repaired[name], param)
                else:
                    repaired[name] = coerce_value(repaired[name], param.type)
            elif kind in _LOWER_BOUND_ERRORS:
                repaired[name] = _clamp(param, param.minimum, upper=False)
            elif kind in _UPPER_BOUND_ERRORS:
                repaired[name] = _clamp(param, param.maximum, upper=True)
            elif kind == "string_pattern_mismatch" and is_email_like(param):
                if isinstance(repaired[name], str):
                    repaired[name] = repaired[name].strip().lower()

        return repaired
