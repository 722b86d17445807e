"""Argument key normalization.

Models frequently get parameter names slightly wrong: wrong case, the
wrong separator convention, an "ID" suffix spelled differently, or a
typo. The normalizer maps each supplied key onto a canonical parameter
name using an escalating list of strategies, then falls back to fuzzy
matching on normalized edit distance.
"""

import logging
import math
import re
from dataclasses import dataclass, field
from typing import Any, Callable

from rapidfuzz.distance import Levenshtein

from toolrelay.errors import NormalizationWarning
from toolrelay.tools.types import ParameterSpec, ParamType
from toolrelay.tools.validator import is_email_like

logger = logging.getLogger(__name__)

DEFAULT_SIMILARITY_THRESHOLD = 0.7

_SEPARATORS = re.compile(r"[_\-\s.]+")
_CASE_BOUNDARY = re.compile(r"(?<=[a-z0-9])(?=[A-Z])|(?<=[A-Z])(?=[A-Z][a-z])")


def split_words(name: str) -> list[str]:
    """Split an identifier into lowercase words.

    Handles snake_case, kebab-case, camelCase, PascalCase, spaced names
    and acronyms ("userID" -> ["user", "id"]).
    """
    words: list[str] = []
    for part in _SEPARATORS.split(name.strip()):
        words.extend(word.lower() for word in _CASE_BOUNDARY.split(part) if word)
    return words


def to_snake(name: str) -> str:
    return "_".join(split_words(name))


def to_camel(name: str) -> str:
    words = split_words(name)
    if not words:
        return ""
    return words[0] + "".join(word.capitalize() for word in words[1:])


def to_pascal(name: str) -> str:
    return "".join(word.capitalize() for word in split_words(name))


def to_kebab(name: str) -> str:
    return "-".join(split_words(name))


def to_spaced(name: str) -> str:
    return " ".join(split_words(name))


def _id_stem(name: str) -> str | None:
    compact = "".join(split_words(name))
    if compact.endswith("id") and len(compact) > 2:
        return compact[:-2]
    return None


def _exact(raw: str, canonical: str) -> bool:
    return raw == canonical


def _case_insensitive(raw: str, canonical: str) -> bool:
    return raw.lower() == canonical.lower()


def _snake_camel(raw: str, canonical: str) -> bool:
    return to_snake(raw) == canonical or to_camel(raw) == canonical


def _kebab(raw: str, canonical: str) -> bool:
    return to_kebab(raw) == canonical or to_kebab(canonical) == raw.lower()


def _pascal(raw: str, canonical: str) -> bool:
    return to_pascal(raw) == canonical or to_pascal(canonical) == raw


def _spaced(raw: str, canonical: str) -> bool:
    return to_spaced(raw) == to_spaced(canonical)


def _id_suffix(raw: str, canonical: str) -> bool:
    # Both names must carry the suffix: "user" never maps to "user_id"
    stem = _id_stem(raw)
    return stem is not None and stem == _id_stem(canonical)


# Checked in order; the first strategy that matches wins
MATCH_STRATEGIES: list[tuple[str, Callable[[str, str], bool]]] = [
    ("exact", _exact),
    ("case_insensitive", _case_insensitive),
    ("snake_camel", _snake_camel),
    ("kebab", _kebab),
    ("pascal", _pascal),
    ("spaced", _spaced),
    ("id_suffix", _id_suffix),
]


def similarity(raw: str, canonical: str) -> float:
    """Normalized edit-distance similarity between two names (0.0 - 1.0)."""
    return Levenshtein.normalized_similarity(
        "".join(split_words(raw)), "".join(split_words(canonical))
    )


def derive_default(param: ParameterSpec) -> tuple[bool, Any]:
    """Type-appropriate default for a missing required parameter.

    Returns:
        (derivable, value). Not derivable for enumerations, untyped
        parameters, and strings whose constraints an empty string would
        violate.
    """
    if param.has_default:
        return True, param.default
    if param.enum is not None:
        return False, None

    if param.type is ParamType.STRING:
        constrained = (
            bool(param.min_length)
            or param.pattern is not None
            or param.format is not None
            or is_email_like(param)
        )
        return (False, None) if constrained else (True, "")
    if param.type is ParamType.INTEGER:
        return True, math.ceil(param.minimum) if param.minimum is not None else 0
    if param.type is ParamType.NUMBER:
        return True, param.minimum if param.minimum is not None else 0.0
    if param.type is ParamType.BOOLEAN:
        return True, False
    if param.type is ParamType.ARRAY:
        return True, []
    if param.type is ParamType.OBJECT:
        return True, {}
    return False, None


@dataclass
class NormalizationResult:
    """Outcome of normalizing one raw argument map.

    Attributes:
        arguments: Argument map keyed by canonical names where possible
        mapping: raw key -> (canonical key, strategy name) for mapped keys
        filled_defaults: Canonical names filled with a derived default
        warnings: Keys that could not be confidently mapped
    """

    arguments: dict[str, Any] = field(default_factory=dict)
    mapping: dict[str, tuple[str, str]] = field(default_factory=dict)
    filled_defaults: list[str] = field(default_factory=list)
    warnings: list[NormalizationWarning] = field(default_factory=list)


class ParameterNormalizer:
    """Maps model-supplied argument keys onto canonical parameter names."""

    def __init__(self, threshold: float = DEFAULT_SIMILARITY_THRESHOLD) -> None:
        """Initialize the normalizer.

        Args:
            threshold: Minimum similarity for a fuzzy match to be accepted
        """
        self.threshold = threshold

    def match_key(self, raw_key: str, canonical_names: list[str]) -> tuple[str, str] | None:
        """Match one raw key against canonical names using the ordered strategies.

        Returns:
            (canonical name, strategy name), or None if no strategy matched
        """
        for strategy, matches in MATCH_STRATEGIES:
            for canonical in canonical_names:
                if matches(raw_key, canonical):
                    return canonical, strategy
        return None

    def fuzzy_match(self, raw_key: str, canonical_names: list[str]) -> tuple[str, float] | None:
        """Best fuzzy match for a key, if it clears the threshold."""
        best: tuple[str, float] | None = None
        for canonical in canonical_names:
            score = similarity(raw_key, canonical)
            if score >= self.threshold and (best is None or score > best[1]):
                best = (canonical, score)
        return best

    def normalize(
        self, raw_arguments: dict[str, Any], parameters: list[ParameterSpec]
    ) -> NormalizationResult:
        """Normalize a raw argument map against a tool's parameters.

        Already-canonical arguments come back unchanged. Keys that cannot be
        mapped pass through as-is with a recorded warning. Required
        parameters still missing afterwards are filled with a derived
        default when one exists.

        Args:
            raw_arguments: Arguments exactly as the model supplied them
            parameters: The tool's declared parameters

        Returns:
            NormalizationResult with the normalized arguments
        """
        result = NormalizationResult()
        if not parameters:
            result.arguments = dict(raw_arguments)
            return result

        canonical_names = [param.name for param in parameters]

        # Deterministic strategies first; a better-ranked match claims the
        # canonical name when two raw keys collide
        ranked: list[tuple[int, str, str, str]] = []
        unmatched: list[str] = []
        strategy_rank = {name: rank for rank, (name, _) in enumerate(MATCH_STRATEGIES)}
        for raw_key in raw_arguments:
            match = self.match_key(str(raw_key), canonical_names)
            if match is None:
                unmatched.append(raw_key)
            else:
                canonical, strategy = match
                ranked.append((strategy_rank[strategy], raw_key, canonical, strategy))

        claimed: set[str] = set()
        passthrough: list[str] = []
        for _, raw_key, canonical, strategy in sorted(ranked, key=lambda item: item[0]):
            if canonical in claimed:
                passthrough.append(raw_key)
                self._warn(result, raw_key, f"duplicates '{canonical}', which is already supplied")
                continue
            claimed.add(canonical)
            result.mapping[raw_key] = (canonical, strategy)

        for raw_key in unmatched:
            remaining = [name for name in canonical_names if name not in claimed]
            fuzzy = self.fuzzy_match(str(raw_key), remaining)
            if fuzzy is None:
                passthrough.append(raw_key)
                self._warn(result, raw_key, "does not match any declared parameter")
                continue
            canonical, score = fuzzy
            claimed.add(canonical)
            result.mapping[raw_key] = (canonical, f"fuzzy:{score:.2f}")

        # Preserve the order the model supplied keys in
        for raw_key, value in raw_arguments.items():
            if raw_key in result.mapping:
                canonical, strategy = result.mapping[raw_key]
                if strategy != "exact":
                    logger.debug(f"Mapped argument '{raw_key}' -> '{canonical}' ({strategy})")
                result.arguments[canonical] = value
            elif raw_key in passthrough:
                result.arguments[raw_key] = value

        for param in parameters:
            if param.required and param.name not in result.arguments:
                derivable, value = derive_default(param)
                if derivable:
                    result.arguments[param.name] = value
                    result.filled_defaults.append(param.name)
                    logger.debug(f"Filled missing required argument '{param.name}' with {value!r}")

        return result

    def positional_mapping(
        self, raw_arguments: dict[str, Any], parameters: list[ParameterSpec]
    ) -> dict[str, Any] | None:
        """Map raw keys to canonical keys by position.

        Last-resort fallback, only applicable when the model supplied exactly
        as many keys as the tool declares.

        Returns:
            The positionally mapped arguments, or None if not applicable
        """
        if not parameters or len(raw_arguments) != len(parameters):
            return None
        return {param.name: value for param, value in zip(parameters, raw_arguments.values())}

    def _warn(self, result: NormalizationResult, raw_key: str, reason: str) -> None:
        warning = NormalizationWarning(str(raw_key), reason)
        result.warnings.append(warning)
        logger.warning(f"Argument normalization: {warning}")
