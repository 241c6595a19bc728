"""Recover a validated Plan from free-form model answer text.

The model is asked for bare JSON but routinely wraps it in markdown fences or
surrounds it with prose. Recovery tries an ordered chain of candidates and
stops at the first one that decodes to a JSON object:

1. the trimmed answer as-is,
2. the answer with code-fence markers removed,
3. the first balanced ``{...}`` span of the fence-stripped text.

The decoded object is then checked against ``plan.schema.json``. Recovery is
all-or-nothing: either a complete Plan is returned or a ``PlanRecoveryError``
is raised.
"""
from __future__ import annotations

import json
import re
from typing import Any, Dict, Iterator, List, Optional, Tuple

from jsonschema import ValidationError as SchemaValidationError

from ..core.utils.logger import get_logger
from ..schemas import load_validator
from .models import Plan

LOGGER = get_logger(__name__)

PLAN_SCHEMA = "plan.schema.json"
FENCE_PATTERN = re.compile(r"```(?:json|JSON)?")


class PlanRecoveryError(RuntimeError):
    """Base class for failures to turn model output into a Plan."""


class EmptyResponseError(PlanRecoveryError):
    """The model returned no answer text."""


class MalformedJsonError(PlanRecoveryError):
    """No candidate could be decoded as a JSON object."""

    def __init__(self, message: str, *, raw_text: str, cleaned_text: str) -> None:
        super().__init__(message)
        self.raw_text = raw_text
        self.cleaned_text = cleaned_text


class SchemaInvalidError(PlanRecoveryError):
    """The decoded object does not match the plan payload schema."""

    def __init__(self, field: str, message: str) -> None:
        super().__init__(f"Invalid response: {field}: {message}")
        self.field = field


def strip_code_fences(text: str) -> str:
    return FENCE_PATTERN.sub("", text).strip()


def find_balanced_object(text: str) -> Optional[str]:
    """Return the first ``{...}`` span whose braces balance, ignoring braces in strings."""
    start = text.find("{")
    while start != -1:
        end = _matching_brace(text, start)
        if end is not None:
            return text[start : end + 1]
        start = text.find("{", start + 1)
    return None


def _matching_brace(text: str, start: int) -> Optional[int]:
    depth = 0
    in_string = False
    escaped = False
    for index in range(start, len(text)):
        char = text[index]
        if in_string:
            if escaped:
                escaped = False
            elif char == "\\":
                escaped = True
            elif char == '"':
                in_string = False
            continue
        if char == '"':
            in_string = True
        elif char == "{":
            depth += 1
        elif char == "}":
            depth -= 1
            if depth == 0:
                return index
    return None


def _candidates(trimmed: str, cleaned: str) -> Iterator[Tuple[str, str]]:
    yield "direct", trimmed
    if cleaned != trimmed:
        yield "fence_stripped", cleaned
    span = find_balanced_object(cleaned)
    if span and span != cleaned:
        yield "brace_span", span


def decode_payload(answer_text: str) -> Dict[str, Any]:
    """Decode the first candidate that parses to a JSON object."""
    trimmed = answer_text.strip()
    if not trimmed:
        raise EmptyResponseError("Empty response from the model")

    cleaned = strip_code_fences(trimmed)
    for strategy, candidate in _candidates(trimmed, cleaned):
        try:
            decoded = json.loads(candidate)
        except json.JSONDecodeError:
            continue
        if isinstance(decoded, dict):
            LOGGER.debug("Decoded plan payload using %s strategy", strategy, extra={"strategy": strategy})
            return decoded

    raise MalformedJsonError(
        "Could not parse the model response as a JSON object",
        raw_text=answer_text,
        cleaned_text=cleaned,
    )


def validate_payload(payload: Dict[str, Any]) -> Plan:
    commands = payload.get("commands_to_run")
    if commands is not None and not (
        isinstance(commands, list) and all(isinstance(command, str) for command in commands)
    ):
        LOGGER.warning("Ignoring commands_to_run: expected a list of strings")
        payload = {key: value for key, value in payload.items() if key != "commands_to_run"}

    validator = load_validator(PLAN_SCHEMA)
    errors: List[SchemaValidationError] = sorted(
        validator.iter_errors(payload), key=lambda exc: [str(part) for part in exc.absolute_path]
    )
    if errors:
        first = errors[0]
        raise SchemaInvalidError(_offending_field(first, payload), first.message)
    return Plan.from_payload(payload)


def _offending_field(error: SchemaValidationError, payload: Dict[str, Any]) -> str:
    if error.absolute_path:
        return str(error.absolute_path[0])
    if error.validator == "required":
        missing = [name for name in error.validator_value if name not in payload]
        if missing:
            return str(missing[0])
    return "<root>"


def recover_plan(answer_text: str) -> Plan:
    """Turn raw answer text into a Plan or raise a ``PlanRecoveryError``."""
    return validate_payload(decode_payload(answer_text))


__all__ = [
    "EmptyResponseError",
    "MalformedJsonError",
    "PlanRecoveryError",
    "SchemaInvalidError",
    "decode_payload",
    "find_balanced_object",
    "recover_plan",
    "strip_code_fences",
    "validate_payload",
]
