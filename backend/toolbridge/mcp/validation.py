"""Cheap pre-flight validation of call arguments against a tool's input schema.

Backends validate authoritatively; this layer only rejects the common mistakes
(missing required field, value outside an enum, wrong scalar type) before any
network I/O happens. Arrays and objects are checked for their outer shape only.
"""

from __future__ import annotations

from typing import Any, Callable, Mapping

from .errors import ArgumentValidationError


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _is_integer(value: Any) -> bool:
    if isinstance(value, bool):
        return False
    if isinstance(value, int):
        return True
    return isinstance(value, float) and value.is_integer()


_TYPE_CHECKS: dict[str, Callable[[Any], bool]] = {
    "string": lambda value: isinstance(value, str),
    "boolean": lambda value: isinstance(value, bool),
    "number": _is_number,
    "integer": _is_integer,
    "array": lambda value: isinstance(value, (list, tuple)),
    "object": lambda value: isinstance(value, Mapping),
}


def _matches_type(expected: Any, value: Any) -> bool:
    if expected is None:
        return True
    candidates = expected if isinstance(expected, (list, tuple)) else [expected]
    for candidate in candidates:
        check = _TYPE_CHECKS.get(candidate)
        # unknown type keywords ("null", custom) are not enforced
        if check is None or check(value):
            return True
    return False


def validate_arguments(
    schema: Mapping[str, Any], arguments: Mapping[str, Any] | None
) -> dict[str, Any]:
    """Return a copy of ``arguments`` or raise on the first invalid field."""

    if arguments is None:
        arguments = {}
    if not isinstance(arguments, Mapping):
        raise ArgumentValidationError("arguments", "arguments must be an object")

    for field in schema.get("required") or ():
        if arguments.get(field) is None:
            raise ArgumentValidationError(field, f"Missing required argument: {field}")

    properties = schema.get("properties") or {}
    for field, declared in properties.items():
        value = arguments.get(field)
        if value is None or not isinstance(declared, Mapping):
            continue
        allowed = declared.get("enum")
        if allowed is not None and value not in allowed:
            choices = ", ".join(str(option) for option in allowed)
            raise ArgumentValidationError(
                field, f"Invalid value for {field}: {value!r} (expected one of: {choices})"
            )
        expected = declared.get("type")
        if not _matches_type(expected, value):
            raise ArgumentValidationError(
                field,
                f"Invalid type for {field}: expected {expected}, got {type(value).__name__}",
            )
    return dict(arguments)


__all__ = ["validate_arguments"]
