"""Tests for action plan data models."""

from datetime import datetime, timedelta

import pytest

from voice_assistant.actions.models import (
    ArgumentKind,
    ArgumentValue,
    CallStatus,
    DispatchResult,
    PendingConfirmation,
    SkillCall,
    SkillOutcome,
    SkillSummary,
    SummaryStatus,
)


@pytest.mark.unit
class TestArgumentValue:
    """Test cases for ArgumentValue."""

    @pytest.mark.parametrize(
        ("raw", "kind"),
        [
            ("text", ArgumentKind.STRING),
            (1, ArgumentKind.NUMBER),
            (1.5, ArgumentKind.NUMBER),
            (True, ArgumentKind.BOOL),
            (None, ArgumentKind.NULL),
            ([1, "a"], ArgumentKind.ARRAY),
            ({"a": 1}, ArgumentKind.OBJECT),
        ],
    )
    def test_kind_detection(self, raw: object, kind: ArgumentKind) -> None:
        """Test each JSON shape maps to its kind."""
        assert ArgumentValue.from_json(raw).kind == kind

    def test_nested_values_are_wrapped(self) -> None:
        """Test nested containers hold ArgumentValue items."""
        value = ArgumentValue.from_json({"items": [{"qty": 2}]})

        items = value.as_object()["items"].as_array()
        assert items[0].as_object()["qty"].as_number() == 2.0
        assert value.to_json() == {"items": [{"qty": 2}]}

    def test_typed_accessors_mismatch(self) -> None:
        """Test accessors return None for other kinds."""
        value = ArgumentValue.from_json("text")

        assert value.as_number() is None
        assert value.as_bool() is None
        assert value.as_array() is None
        assert value.is_null is False

    def test_unsupported_type(self) -> None:
        """Test non-JSON values are rejected."""
        with pytest.raises(TypeError):
            ArgumentValue.from_json(object())


@pytest.mark.unit
class TestSkillCall:
    """Test cases for SkillCall."""

    def test_dedupe_key_ignores_argument_order(self) -> None:
        """Test key order does not change the canonical key."""
        a = SkillCall.from_json("lights.set", {"room": "kitchen", "on": True})
        b = SkillCall.from_json("lights.set", {"on": True, "room": "kitchen"})

        assert a.dedupe_key == b.dedupe_key
        assert a.dedupe_key == 'lights.set|{"on":true,"room":"kitchen"}'

    def test_dedupe_key_distinguishes_arguments(self) -> None:
        """Test different values give different keys."""
        a = SkillCall.from_json("lights.set", {"room": "kitchen"})
        b = SkillCall.from_json("lights.set", {"room": "hall"})

        assert a.dedupe_key != b.dedupe_key


@pytest.mark.unit
class TestPendingConfirmation:
    """Test cases for PendingConfirmation."""

    def test_expiry_boundary(self) -> None:
        """Test a confirmation expires exactly at its deadline."""
        created = datetime(2026, 5, 1, 12, 0, 0)
        pending = PendingConfirmation(
            skill_id="lights.set",
            arguments={},
            prompt="Turn off all lights?",
            created_at=created,
            expires_at=created + timedelta(seconds=30),
        )

        assert pending.is_expired(created + timedelta(seconds=29)) is False
        assert pending.is_expired(created + timedelta(seconds=30)) is True
        assert pending.call == SkillCall("lights.set", {})


@pytest.mark.unit
class TestDispatchResult:
    """Test cases for DispatchResult."""

    def test_fallback_joins_messages(self) -> None:
        """Test the fallback reply joins every message in order."""
        result = DispatchResult(
            outcomes=[
                SkillOutcome(SkillCall("a"), CallStatus.SUCCESS, "Done A."),
                SkillOutcome(SkillCall("b"), CallStatus.NOT_FOUND, "I couldn't find the skill 'b'."),
            ]
        )

        assert result.fallback_text() == "Done A. I couldn't find the skill 'b'."
        assert result.needs_confirmation is False

    def test_fallback_prefers_confirmation_prompt(self) -> None:
        """Test a pending confirmation's prompt is the reply."""
        now = datetime.now()
        result = DispatchResult(
            outcomes=[SkillOutcome(SkillCall("a"), CallStatus.NEEDS_CONFIRMATION, "Are you sure?")],
            pending_confirmation=PendingConfirmation("a", {}, "Are you sure?", now, now),
        )

        assert result.needs_confirmation is True
        assert result.fallback_text() == "Are you sure?"
        assert result.messages == []

    def test_summaries_skip_missing(self) -> None:
        """Test only outcomes with summaries are listed."""
        summary = SkillSummary("a", SummaryStatus.SUCCESS, "ok")
        result = DispatchResult(
            outcomes=[
                SkillOutcome(SkillCall("a"), CallStatus.SUCCESS, "ok", summary=summary),
                SkillOutcome(SkillCall("b"), CallStatus.NOT_FOUND, "missing"),
            ]
        )

        assert result.summaries == [summary]
        assert summary.to_dict() == {
            "skillId": "a",
            "status": "success",
            "summary": "ok",
            "details": {},
        }
