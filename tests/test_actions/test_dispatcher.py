"""Tests for SkillDispatcher."""

import asyncio
from datetime import datetime, timedelta

import pytest

from voice_assistant.actions.confirmation import ConfirmationTracker
from voice_assistant.actions.config import (
    CANCELLED_RESPONSE,
    DENIED_RESPONSE,
    REPEATED_CONFIRMATION_MESSAGE,
)
from voice_assistant.actions.dispatcher import SkillDispatcher, dedupe_calls
from voice_assistant.actions.exceptions import InvalidArgumentsError
from voice_assistant.actions.models import (
    ArgumentValue,
    CallStatus,
    ConfirmationReply,
    NeedsConfirmation,
    SkillCall,
    SkillContext,
    SkillResult,
    SkillSummary,
    SummaryStatus,
)
from voice_assistant.actions.skills import Skill, SkillRegistry


class EchoSkill(Skill):
    id = "echo"
    name = "Echo"
    description = "Repeat the text argument"

    def __init__(self) -> None:
        self.calls: list[tuple[dict[str, ArgumentValue], SkillContext]] = []

    async def execute(self, arguments: dict[str, ArgumentValue], context: SkillContext) -> SkillResult:
        self.calls.append((arguments, context))
        text = arguments["text"].as_string() if "text" in arguments else "echo"
        return SkillResult(text=f"Echo: {text}")


class FailingSkill(Skill):
    id = "failing"
    name = "Failing"
    description = "Always rejects its arguments"

    async def execute(self, arguments: dict[str, ArgumentValue], context: SkillContext) -> SkillResult:
        raise InvalidArgumentsError("Missing required argument 'title'")


class CrashingSkill(Skill):
    id = "crashing"
    name = "Crashing"
    description = "Raises an unexpected error"

    async def execute(self, arguments: dict[str, ArgumentValue], context: SkillContext) -> SkillResult:
        raise RuntimeError("boom")


class SlowSkill(Skill):
    id = "slow"
    name = "Slow"
    description = "Never finishes in time"

    async def execute(self, arguments: dict[str, ArgumentValue], context: SkillContext) -> SkillResult:
        await asyncio.sleep(10)
        return SkillResult(text="finally")


class GuardedSkill(Skill):
    id = "lights.all_off"
    name = "All Lights Off"
    description = "Turn off every light after confirmation"

    def __init__(self, override: dict[str, ArgumentValue] | None = None) -> None:
        self.override = override
        self.executions: list[tuple[dict[str, ArgumentValue], SkillContext]] = []

    async def execute(
        self, arguments: dict[str, ArgumentValue], context: SkillContext
    ) -> SkillResult | NeedsConfirmation:
        if not context.confirmed:
            return NeedsConfirmation(prompt="Turn off all lights?", arguments=self.override)
        self.executions.append((arguments, context))
        return SkillResult(text="All lights are off.")


class NaggingSkill(Skill):
    id = "nagging"
    name = "Nagging"
    description = "Asks for confirmation every time"

    async def execute(self, arguments: dict[str, ArgumentValue], context: SkillContext) -> NeedsConfirmation:
        return NeedsConfirmation(prompt="Really?")


class SilentSkill(Skill):
    id = "silent"
    name = "Silent"
    description = "Result text is already a reply"
    includes_in_response = False

    async def execute(self, arguments: dict[str, ArgumentValue], context: SkillContext) -> SkillResult:
        return SkillResult(text="Done quietly.")


class SummarizingSkill(Skill):
    id = "summarizing"
    name = "Summarizing"
    description = "Provides its own summary"

    async def execute(self, arguments: dict[str, ArgumentValue], context: SkillContext) -> SkillResult:
        summary = SkillSummary(self.id, SummaryStatus.SUCCESS, "3 reminders due", {"count": 3})
        return SkillResult(text="You have 3 reminders.", summary=summary)


class WrongResultSkill(Skill):
    id = "wrong"
    name = "Wrong"
    description = "Returns an unsupported value"

    async def execute(self, arguments: dict[str, ArgumentValue], context: SkillContext) -> SkillResult:
        return "not a result"  # type: ignore[return-value]


class FakeClock:
    def __init__(self) -> None:
        self.now = datetime(2026, 6, 1, 8, 0, 0)

    def __call__(self) -> datetime:
        return self.now


def make_dispatcher(*skills: Skill, clock: FakeClock | None = None, **kwargs) -> SkillDispatcher:
    registry = SkillRegistry(skills)
    tracker = ConfirmationTracker(clock=clock or FakeClock())
    return SkillDispatcher(registry, confirmations=tracker, **kwargs)


def context(user_request: str | None = "do things") -> SkillContext:
    return SkillContext(user_request=user_request)


@pytest.mark.unit
class TestDedupeCalls:
    """Test cases for dedupe_calls."""

    def test_removes_repeats_keeping_first(self) -> None:
        """Test identical calls collapse and order is kept."""
        calls = [
            SkillCall.from_json("a", {"x": 1, "y": 2}),
            SkillCall.from_json("b"),
            SkillCall.from_json("a", {"y": 2, "x": 1}),
        ]

        assert [c.skill_id for c in dedupe_calls(calls)] == ["a", "b"]

    def test_keeps_different_arguments(self) -> None:
        """Test calls with different arguments are kept."""
        calls = [SkillCall.from_json("a", {"x": 1}), SkillCall.from_json("a", {"x": 2})]

        assert len(dedupe_calls(calls)) == 2


@pytest.mark.unit
class TestSkillDispatcherDispatch:
    """Test cases for dispatch."""

    @pytest.mark.asyncio
    async def test_success(self) -> None:
        """Test a successful call produces a message and summary."""
        echo = EchoSkill()
        dispatcher = make_dispatcher(echo)

        result = await dispatcher.dispatch([SkillCall.from_json("echo", {"text": "hi"})], context())

        outcome = result.outcomes[0]
        assert outcome.status == CallStatus.SUCCESS
        assert outcome.succeeded is True
        assert outcome.message == "Echo: hi"
        assert result.summaries == [SkillSummary("echo", SummaryStatus.SUCCESS, "Echo: hi")]
        assert echo.calls[0][1].user_request == "do things"

    @pytest.mark.asyncio
    async def test_unknown_skill(self) -> None:
        """Test an unknown id becomes a not-found outcome."""
        dispatcher = make_dispatcher()

        result = await dispatcher.dispatch([SkillCall.from_json("ghost")], context())

        assert result.outcomes[0].status == CallStatus.NOT_FOUND
        assert result.outcomes[0].message == "I couldn't find the skill 'ghost'."
        assert result.summaries == []

    @pytest.mark.asyncio
    async def test_disabled_skill(self) -> None:
        """Test a disabled skill is not executed."""
        echo = EchoSkill()
        dispatcher = make_dispatcher(echo)
        dispatcher.registry.disable("echo")

        result = await dispatcher.dispatch([SkillCall.from_json("echo")], context())

        assert result.outcomes[0].status == CallStatus.DISABLED
        assert result.outcomes[0].message == "The Echo skill is currently disabled."
        assert echo.calls == []

    @pytest.mark.asyncio
    async def test_skill_error_message(self) -> None:
        """Test a SkillError is reported with the skill name."""
        dispatcher = make_dispatcher(FailingSkill())

        result = await dispatcher.dispatch([SkillCall.from_json("failing")], context())

        outcome = result.outcomes[0]
        assert outcome.status == CallStatus.FAILED
        assert outcome.message == "Error with Failing: Missing required argument 'title'"
        assert result.summaries[0].status == SummaryStatus.FAILED

    @pytest.mark.asyncio
    async def test_unexpected_error_message(self) -> None:
        """Test unexpected exceptions do not leak details."""
        dispatcher = make_dispatcher(CrashingSkill())

        result = await dispatcher.dispatch([SkillCall.from_json("crashing")], context())

        assert result.outcomes[0].status == CallStatus.FAILED
        assert result.outcomes[0].message == "An error occurred while running Crashing."

    @pytest.mark.asyncio
    async def test_timeout(self) -> None:
        """Test a slow skill is abandoned after the timeout."""
        dispatcher = make_dispatcher(SlowSkill(), skill_timeout=0.01)

        result = await dispatcher.dispatch([SkillCall.from_json("slow")], context())

        assert result.outcomes[0].status == CallStatus.TIMEOUT
        assert result.outcomes[0].message == "The Slow skill took too long to respond."

    @pytest.mark.asyncio
    async def test_wrong_result_type(self) -> None:
        """Test a skill returning something else fails."""
        dispatcher = make_dispatcher(WrongResultSkill())

        result = await dispatcher.dispatch([SkillCall.from_json("wrong")], context())

        assert result.outcomes[0].status == CallStatus.FAILED

    @pytest.mark.asyncio
    async def test_failures_are_isolated(self) -> None:
        """Test one failing call does not stop the rest."""
        dispatcher = make_dispatcher(EchoSkill(), FailingSkill(), SlowSkill(), skill_timeout=0.01)

        result = await dispatcher.dispatch(
            [
                SkillCall.from_json("failing"),
                SkillCall.from_json("ghost"),
                SkillCall.from_json("slow"),
                SkillCall.from_json("echo", {"text": "still here"}),
            ],
            context(),
        )

        assert [o.status for o in result.outcomes] == [
            CallStatus.FAILED,
            CallStatus.NOT_FOUND,
            CallStatus.TIMEOUT,
            CallStatus.SUCCESS,
        ]
        assert result.outcomes[-1].message == "Echo: still here"

    @pytest.mark.asyncio
    async def test_duplicate_calls_run_once(self) -> None:
        """Test repeated identical calls execute once."""
        echo = EchoSkill()
        dispatcher = make_dispatcher(echo)
        call = SkillCall.from_json("echo", {"text": "once"})

        result = await dispatcher.dispatch([call, call], context())

        assert len(echo.calls) == 1
        assert len(result.outcomes) == 1

    @pytest.mark.asyncio
    async def test_summary_excluded_when_not_in_response(self) -> None:
        """Test skills opting out of composition contribute no summary."""
        dispatcher = make_dispatcher(SilentSkill())

        result = await dispatcher.dispatch([SkillCall.from_json("silent")], context())

        assert result.outcomes[0].message == "Done quietly."
        assert result.summaries == []

    @pytest.mark.asyncio
    async def test_skill_provided_summary(self) -> None:
        """Test a skill's own summary is used."""
        dispatcher = make_dispatcher(SummarizingSkill())

        result = await dispatcher.dispatch([SkillCall.from_json("summarizing")], context())

        assert result.summaries[0].details == {"count": 3}

    @pytest.mark.asyncio
    async def test_confirmation_stops_batch(self) -> None:
        """Test a confirmation request becomes pending and later calls are skipped."""
        echo = EchoSkill()
        dispatcher = make_dispatcher(GuardedSkill(), echo)

        result = await dispatcher.dispatch(
            [SkillCall.from_json("lights.all_off"), SkillCall.from_json("echo")],
            context("turn off all the lights"),
        )

        assert result.needs_confirmation is True
        assert result.fallback_text() == "Turn off all lights?"
        assert [o.status for o in result.outcomes] == [CallStatus.NEEDS_CONFIRMATION]
        assert echo.calls == []
        pending = dispatcher.confirmations.pending
        assert pending.skill_id == "lights.all_off"
        assert pending.origin_user_request == "turn off all the lights"


@pytest.mark.unit
class TestSkillDispatcherConfirmation:
    """Test cases for handle_confirmation_reply."""

    async def _pending(self, dispatcher: SkillDispatcher) -> None:
        await dispatcher.dispatch([SkillCall.from_json("lights.all_off", {"room": "all"})], context("lights off"))

    @pytest.mark.asyncio
    async def test_nothing_pending(self) -> None:
        """Test replies are ignored when nothing is pending."""
        dispatcher = make_dispatcher(GuardedSkill())

        assert await dispatcher.handle_confirmation_reply("yes", context()) is None

    @pytest.mark.asyncio
    async def test_confirm_executes_deferred_call(self) -> None:
        """Test yes runs the stored call with confirmed context."""
        guarded = GuardedSkill()
        dispatcher = make_dispatcher(guarded)
        await self._pending(dispatcher)

        resolution = await dispatcher.handle_confirmation_reply("Yes, please", context("yes please"))

        assert resolution.reply == ConfirmationReply.CONFIRM
        assert resolution.response == "All lights are off."
        assert resolution.dispatch.outcomes[0].status == CallStatus.SUCCESS
        arguments, confirmed_context = guarded.executions[0]
        assert arguments["room"].as_string() == "all"
        assert confirmed_context.confirmed is True
        assert confirmed_context.user_request == "lights off"
        assert dispatcher.confirmations.pending is None

    @pytest.mark.asyncio
    async def test_confirm_uses_overridden_arguments(self) -> None:
        """Test arguments supplied with the confirmation request are the ones executed."""
        override = {"room": ArgumentValue.from_json("everywhere")}
        guarded = GuardedSkill(override=override)
        dispatcher = make_dispatcher(guarded)
        await self._pending(dispatcher)

        await dispatcher.handle_confirmation_reply("yes", context())

        assert guarded.executions[0][0]["room"].as_string() == "everywhere"

    @pytest.mark.asyncio
    async def test_deny(self) -> None:
        """Test no clears the confirmation without executing."""
        guarded = GuardedSkill()
        dispatcher = make_dispatcher(guarded)
        await self._pending(dispatcher)

        resolution = await dispatcher.handle_confirmation_reply("no", context())

        assert resolution.reply == ConfirmationReply.DENY
        assert resolution.response == DENIED_RESPONSE
        assert resolution.dispatch is None
        assert guarded.executions == []
        assert dispatcher.confirmations.pending is None

    @pytest.mark.asyncio
    async def test_cancel(self) -> None:
        """Test cancel clears the confirmation."""
        dispatcher = make_dispatcher(GuardedSkill())
        await self._pending(dispatcher)

        resolution = await dispatcher.handle_confirmation_reply("never mind", context())

        assert resolution.reply == ConfirmationReply.CANCEL
        assert resolution.response == CANCELLED_RESPONSE

    @pytest.mark.asyncio
    async def test_unrelated_reply_keeps_pending(self) -> None:
        """Test an unrelated utterance leaves the confirmation live."""
        dispatcher = make_dispatcher(GuardedSkill())
        await self._pending(dispatcher)

        assert await dispatcher.handle_confirmation_reply("what time is it", context()) is None
        assert dispatcher.confirmations.pending is not None

    @pytest.mark.asyncio
    async def test_expired_confirmation_ignored(self) -> None:
        """Test yes after expiry does nothing."""
        clock = FakeClock()
        guarded = GuardedSkill()
        dispatcher = make_dispatcher(guarded, clock=clock)
        await self._pending(dispatcher)

        clock.now += timedelta(seconds=31)

        assert await dispatcher.handle_confirmation_reply("yes", context()) is None
        assert guarded.executions == []

    @pytest.mark.asyncio
    async def test_repeated_confirmation_fails(self) -> None:
        """Test a skill asking again after confirmation fails instead of looping."""
        dispatcher = make_dispatcher(NaggingSkill())
        await dispatcher.dispatch([SkillCall.from_json("nagging")], context())

        resolution = await dispatcher.handle_confirmation_reply("yes", context())

        assert resolution.dispatch.outcomes[0].status == CallStatus.FAILED
        assert resolution.response == REPEATED_CONFIRMATION_MESSAGE
        assert dispatcher.confirmations.pending is None
