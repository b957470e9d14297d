"""Parse language model output into a validated action plan."""

import json
import logging
from typing import Any

from .exceptions import (
    InvalidFieldError,
    InvalidJSONError,
    MissingFieldError,
    MissingTypeError,
    UnknownTypeError,
)
from .models import ActionPlan, ArgumentValue, CallSkills, Respond, SkillCall

logger = logging.getLogger(__name__)

FENCE = "```"


def strip_code_fences(text: str) -> str:
    """Remove a leading ```/```json fence line and a trailing ``` fence."""
    result = text.strip()
    if result.startswith(FENCE):
        newline = result.find("\n")
        result = result[newline + 1 :] if newline != -1 else result[len(FENCE) :]
    result = result.strip()
    if result.endswith(FENCE):
        result = result[: -len(FENCE)]
    return result.strip()


def extract_first_json_object(text: str) -> str | None:
    """
    Return the first balanced ``{...}`` span, ignoring braces in string literals.

    Args:
        text: Free-form text that may contain a JSON object

    Returns:
        The object text, or None when no balanced object exists
    """
    start: int | None = None
    depth = 0
    in_string = False
    escape_next = False

    for index, char in enumerate(text):
        if in_string:
            if escape_next:
                escape_next = False
            elif char == "\\":
                escape_next = True
            elif char == '"':
                in_string = False
            continue

        if char == '"':
            in_string = True
        elif char == "{":
            if start is None:
                start = index
            depth += 1
        elif char == "}" and start is not None:
            depth -= 1
            if depth == 0:
                return text[start : index + 1]

    return None


def _load_object(text: str) -> dict[str, Any] | None:
    try:
        value = json.loads(text)
    except (json.JSONDecodeError, ValueError):
        return None
    return value if isinstance(value, dict) else None


def parse_action_plan(text: str) -> ActionPlan:
    """
    Parse model output into ``Respond`` or ``CallSkills``.

    Accepts bare JSON, JSON wrapped in a markdown fence, or prose around a
    single JSON object.

    Raises:
        InvalidJSONError: If no JSON object can be recovered
        MissingTypeError: If ``type`` is absent or not a string
        UnknownTypeError: If ``type`` is not respond or call_skills
        MissingFieldError: If a required field is absent or mistyped
        InvalidFieldError: If a call entry or its arguments are malformed
    """
    cleaned = strip_code_fences(text)
    payload = _load_object(cleaned)
    if payload is None:
        candidate = extract_first_json_object(cleaned)
        payload = _load_object(candidate) if candidate is not None else None
    if payload is None:
        raise InvalidJSONError()

    plan_type = payload.get("type")
    if not isinstance(plan_type, str):
        raise MissingTypeError()

    if plan_type == "respond":
        reply = payload.get("text")
        if not isinstance(reply, str):
            raise MissingFieldError("text")
        return Respond(text=reply)

    if plan_type == "call_skills":
        raw_calls = payload.get("calls")
        if not isinstance(raw_calls, list):
            raise MissingFieldError("calls")
        calls = tuple(_parse_call(index, raw) for index, raw in enumerate(raw_calls))
        logger.debug(f"Parsed call_skills plan: {[c.skill_id for c in calls]}")
        return CallSkills(calls=calls)

    raise UnknownTypeError(plan_type)


def _parse_call(index: int, raw: Any) -> SkillCall:
    if not isinstance(raw, dict):
        raise InvalidFieldError(f"calls[{index}]", "expected an object")

    skill_id = raw.get("skillId")
    if not isinstance(skill_id, str):
        raise MissingFieldError("skillId")

    arguments = raw.get("arguments")
    if arguments is None:
        arguments = {}
    if not isinstance(arguments, dict):
        raise InvalidFieldError("arguments", "expected an object")

    return SkillCall(
        skill_id=skill_id,
        arguments={str(k): ArgumentValue.from_json(v) for k, v in arguments.items()},
    )
