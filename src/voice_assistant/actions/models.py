"""Data models for action plans, skill calls and dispatch results."""

import json
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Union

from voice_assistant.audio.models import AudioSource
from voice_assistant.speaker.models import Speaker


class ArgumentKind(str, Enum):
    """JSON shape carried by an ArgumentValue."""

    STRING = "string"
    NUMBER = "number"
    BOOL = "bool"
    ARRAY = "array"
    OBJECT = "object"
    NULL = "null"


@dataclass(frozen=True)
class ArgumentValue:
    """
    One skill argument as a tagged JSON value.

    Arrays hold a tuple of ArgumentValue and objects a dict of them, so a
    skill can walk nested arguments without inspecting raw Python types.
    """

    kind: ArgumentKind
    value: Any = None

    @classmethod
    def from_json(cls, raw: Any) -> "ArgumentValue":
        """
        Wrap a decoded JSON value.

        Raises:
            TypeError: If ``raw`` is not a JSON-compatible value
        """
        if raw is None:
            return cls(ArgumentKind.NULL)
        # bool is a subclass of int
        if isinstance(raw, bool):
            return cls(ArgumentKind.BOOL, raw)
        if isinstance(raw, (int, float)):
            return cls(ArgumentKind.NUMBER, raw)
        if isinstance(raw, str):
            return cls(ArgumentKind.STRING, raw)
        if isinstance(raw, (list, tuple)):
            return cls(ArgumentKind.ARRAY, tuple(cls.from_json(item) for item in raw))
        if isinstance(raw, dict):
            return cls(ArgumentKind.OBJECT, {str(k): cls.from_json(v) for k, v in raw.items()})
        raise TypeError(f"Unsupported argument value type: {type(raw).__name__}")

    def to_json(self) -> Any:
        if self.kind == ArgumentKind.ARRAY:
            return [item.to_json() for item in self.value]
        if self.kind == ArgumentKind.OBJECT:
            return {k: v.to_json() for k, v in self.value.items()}
        return self.value

    @property
    def is_null(self) -> bool:
        return self.kind == ArgumentKind.NULL

    def as_string(self) -> str | None:
        return self.value if self.kind == ArgumentKind.STRING else None

    def as_number(self) -> float | None:
        return float(self.value) if self.kind == ArgumentKind.NUMBER else None

    def as_bool(self) -> bool | None:
        return self.value if self.kind == ArgumentKind.BOOL else None

    def as_array(self) -> tuple["ArgumentValue", ...] | None:
        return self.value if self.kind == ArgumentKind.ARRAY else None

    def as_object(self) -> dict[str, "ArgumentValue"] | None:
        return self.value if self.kind == ArgumentKind.OBJECT else None


def arguments_from_json(raw: dict[str, Any]) -> dict[str, ArgumentValue]:
    return {str(k): ArgumentValue.from_json(v) for k, v in raw.items()}


def arguments_to_json(arguments: dict[str, ArgumentValue]) -> dict[str, Any]:
    return {k: v.to_json() for k, v in arguments.items()}


@dataclass(frozen=True)
class SkillCall:
    """A skill invocation requested by the language model."""

    skill_id: str
    arguments: dict[str, ArgumentValue] = field(default_factory=dict)

    @classmethod
    def from_json(cls, skill_id: str, arguments: dict[str, Any] | None = None) -> "SkillCall":
        return cls(skill_id=skill_id, arguments=arguments_from_json(arguments or {}))

    def arguments_json(self) -> dict[str, Any]:
        return arguments_to_json(self.arguments)

    @property
    def dedupe_key(self) -> str:
        """Skill id plus canonical (key-sorted) argument JSON."""
        canonical = json.dumps(self.arguments_json(), sort_keys=True, separators=(",", ":"))
        return f"{self.skill_id}|{canonical}"


@dataclass(frozen=True)
class Respond:
    """Plan: reply with text directly."""

    text: str


@dataclass(frozen=True)
class CallSkills:
    """Plan: invoke one or more skills in order."""

    calls: tuple[SkillCall, ...]


ActionPlan = Union[Respond, CallSkills]


@dataclass(frozen=True)
class SkillContext:
    """Context passed to skills when they execute."""

    speaker: Speaker | None = None
    source: AudioSource = field(default_factory=AudioSource.local_mic)
    timestamp: datetime = field(default_factory=datetime.now)
    user_request: str | None = None
    confirmed: bool = False


class SummaryStatus(str, Enum):
    """Outcome recorded in a SkillSummary."""

    SUCCESS = "success"
    FAILED = "failed"


@dataclass(frozen=True)
class SkillSummary:
    """Compact description of a skill outcome for response composition."""

    skill_id: str
    status: SummaryStatus
    summary: str
    details: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "skillId": self.skill_id,
            "status": self.status.value,
            "summary": self.summary,
            "details": self.details,
        }


@dataclass(frozen=True)
class SkillResult:
    """Result returned by a skill after execution."""

    text: str
    data: dict[str, Any] | None = None
    summary: SkillSummary | None = None


@dataclass(frozen=True)
class NeedsConfirmation:
    """
    Returned by a skill that must ask the user before acting.

    ``arguments`` replaces the call's arguments for the deferred execution
    when given.
    """

    prompt: str
    arguments: dict[str, ArgumentValue] | None = None


@dataclass(frozen=True)
class PendingConfirmation:
    """A deferred skill call awaiting yes/no/cancel."""

    skill_id: str
    arguments: dict[str, ArgumentValue]
    prompt: str
    created_at: datetime
    expires_at: datetime
    origin_user_request: str | None = None

    def is_expired(self, now: datetime) -> bool:
        return now >= self.expires_at

    @property
    def call(self) -> SkillCall:
        return SkillCall(skill_id=self.skill_id, arguments=self.arguments)


class CallStatus(str, Enum):
    """Per-call dispatch outcome."""

    SUCCESS = "success"
    FAILED = "failed"
    NOT_FOUND = "not_found"
    DISABLED = "disabled"
    TIMEOUT = "timeout"
    NEEDS_CONFIRMATION = "needs_confirmation"


@dataclass
class SkillOutcome:
    """What happened to one call of a plan."""

    call: SkillCall
    status: CallStatus
    message: str
    result: SkillResult | None = None
    summary: SkillSummary | None = None

    @property
    def succeeded(self) -> bool:
        return self.status == CallStatus.SUCCESS


@dataclass
class DispatchResult:
    """Aggregate of every call outcome in a plan, in plan order."""

    outcomes: list[SkillOutcome] = field(default_factory=list)
    pending_confirmation: PendingConfirmation | None = None

    @property
    def needs_confirmation(self) -> bool:
        return self.pending_confirmation is not None

    @property
    def summaries(self) -> list[SkillSummary]:
        return [o.summary for o in self.outcomes if o.summary is not None]

    @property
    def messages(self) -> list[str]:
        return [o.message for o in self.outcomes if o.status != CallStatus.NEEDS_CONFIRMATION]

    def fallback_text(self) -> str:
        """Deterministic reply: the confirmation prompt, or every message joined."""
        if self.pending_confirmation is not None:
            return self.pending_confirmation.prompt
        return " ".join(self.messages)


class ConfirmationReply(str, Enum):
    """Classification of a reply to a pending confirmation."""

    CONFIRM = "confirm"
    DENY = "deny"
    CANCEL = "cancel"
    UNKNOWN = "unknown"


@dataclass
class ConfirmationResolution:
    """Result of answering a pending confirmation without the language model."""

    reply: ConfirmationReply
    pending: PendingConfirmation
    response: str
    dispatch: DispatchResult | None = None
