"""Typed accessors skills use to decode their ArgumentValue maps."""

from collections.abc import Mapping

from .exceptions import InvalidArgumentsError
from .models import ArgumentKind, ArgumentValue


def _lookup(arguments: Mapping[str, ArgumentValue], key: str) -> ArgumentValue | None:
    value = arguments.get(key)
    if value is None or value.is_null:
        return None
    return value


def require_string(arguments: Mapping[str, ArgumentValue], key: str) -> str:
    """
    Return a required, non-blank string argument.

    Raises:
        InvalidArgumentsError: If the argument is missing, blank or not a string
    """
    value = optional_string(arguments, key)
    if value is None or not value.strip():
        raise InvalidArgumentsError(f"Missing required argument '{key}'")
    return value


def optional_string(arguments: Mapping[str, ArgumentValue], key: str) -> str | None:
    value = _lookup(arguments, key)
    if value is None:
        return None
    if value.kind != ArgumentKind.STRING:
        raise InvalidArgumentsError(f"Argument '{key}' must be a string, got {value.kind.value}")
    return value.value


def optional_int(arguments: Mapping[str, ArgumentValue], key: str) -> int | None:
    """Integral number argument; strings of digits are accepted too."""
    value = _lookup(arguments, key)
    if value is None:
        return None
    if value.kind == ArgumentKind.NUMBER and float(value.value).is_integer():
        return int(value.value)
    if value.kind == ArgumentKind.STRING and value.value.strip().lstrip("-").isdigit():
        return int(value.value.strip())
    raise InvalidArgumentsError(f"Argument '{key}' must be an integer")


def optional_bool(arguments: Mapping[str, ArgumentValue], key: str) -> bool | None:
    value = _lookup(arguments, key)
    if value is None:
        return None
    if value.kind == ArgumentKind.BOOL:
        return value.value
    if value.kind == ArgumentKind.STRING and value.value.strip().lower() in ("true", "false"):
        return value.value.strip().lower() == "true"
    raise InvalidArgumentsError(f"Argument '{key}' must be a boolean")


def optional_string_list(arguments: Mapping[str, ArgumentValue], key: str) -> list[str] | None:
    value = _lookup(arguments, key)
    if value is None:
        return None
    if value.kind != ArgumentKind.ARRAY:
        raise InvalidArgumentsError(f"Argument '{key}' must be an array")
    items = [item.as_string() for item in value.value]
    if any(item is None for item in items):
        raise InvalidArgumentsError(f"Argument '{key}' must contain only strings")
    return items
