"""Tests for ResponseAgent."""

from unittest.mock import AsyncMock

import pytest

from voice_assistant.actions.models import SkillSummary, SummaryStatus
from voice_assistant.assistant.interfaces import LanguageModel
from voice_assistant.assistant.response_agent import (
    ResponseAgent,
    build_response_prompt,
    extract_text_from_response,
)


def summaries() -> list[SkillSummary]:
    return [
        SkillSummary("weather.forecast", SummaryStatus.SUCCESS, "Sunny, 22C"),
        SkillSummary("reminders.add", SummaryStatus.FAILED, "Error with Reminders: no list"),
    ]


@pytest.mark.unit
class TestResponsePrompt:
    """Test cases for prompt and output handling."""

    def test_build_response_prompt(self) -> None:
        """Test the prompt lists every summary."""
        prompt = build_response_prompt("weather and remind me", summaries())

        assert prompt == (
            "User request: weather and remind me\n"
            "\n"
            "Skill results:\n"
            "- weather.forecast: Sunny, 22C\n"
            "- reminders.add: Error with Reminders: no list\n"
            "\n"
            "Generate a natural response based on these results."
        )

    def test_extract_plain_text(self) -> None:
        """Test plain replies are trimmed."""
        assert extract_text_from_response("  It's sunny.  ") == "It's sunny."

    def test_extract_text_from_json(self) -> None:
        """Test a JSON reply yields its text field."""
        assert extract_text_from_response('```json\n{"type":"respond","text":"Sunny."}\n```') == "Sunny."

    def test_extract_invalid_json_returns_raw(self) -> None:
        """Test broken JSON is returned as-is."""
        assert extract_text_from_response("{not json") == "{not json"


@pytest.mark.unit
class TestResponseAgent:
    """Test cases for ResponseAgent.generate."""

    @pytest.mark.asyncio
    async def test_generate_uses_speaker_name(self) -> None:
        """Test the system prompt names the speaker."""
        llm = AsyncMock(spec=LanguageModel)
        llm.complete.return_value = "It's sunny, but I couldn't add the reminder."
        agent = ResponseAgent(llm)

        reply = await agent.generate("weather and remind me", summaries(), speaker_name="Alice")

        assert reply == "It's sunny, but I couldn't add the reminder."
        kwargs = llm.complete.call_args.kwargs
        assert "The current user is Alice." in kwargs["system_prompt"]
        assert kwargs["prompt"].startswith("User request: weather and remind me")

    @pytest.mark.asyncio
    async def test_generate_guest(self) -> None:
        """Test an unknown speaker is called Guest."""
        llm = AsyncMock(spec=LanguageModel)
        llm.complete.return_value = "ok"

        await ResponseAgent(llm).generate("x", summaries())

        assert "The current user is Guest." in llm.complete.call_args.kwargs["system_prompt"]
