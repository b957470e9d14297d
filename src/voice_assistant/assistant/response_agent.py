"""Turns skill summaries into one conversational reply."""

import json
import logging
from collections.abc import Sequence

from voice_assistant.actions.models import SkillSummary
from voice_assistant.actions.parser import strip_code_fences

from .config import GUEST_SPEAKER_NAME, RESPONSE_AGENT_SYSTEM_PROMPT, SPEAKER_NAME_PLACEHOLDER
from .interfaces import LanguageModel

logger = logging.getLogger(__name__)


def build_response_prompt(user_request: str, summaries: Sequence[SkillSummary]) -> str:
    lines = [f"User request: {user_request}", "", "Skill results:"]
    lines.extend(f"- {summary.skill_id}: {summary.summary}" for summary in summaries)
    lines.extend(["", "Generate a natural response based on these results."])
    return "\n".join(lines)


def extract_text_from_response(response: str) -> str:
    """Use the ``text`` field if the model answered with JSON anyway."""
    cleaned = strip_code_fences(response)
    if cleaned.startswith("{"):
        try:
            payload = json.loads(cleaned)
        except json.JSONDecodeError:
            return response.strip()
        if isinstance(payload, dict) and isinstance(payload.get("text"), str):
            return payload["text"]
    return response.strip()


class ResponseAgent:
    """Asks the language model to phrase skill results for the user."""

    def __init__(self, llm: LanguageModel, system_prompt: str = RESPONSE_AGENT_SYSTEM_PROMPT) -> None:
        self.llm = llm
        self.system_prompt = system_prompt

    async def generate(
        self,
        user_request: str,
        summaries: Sequence[SkillSummary],
        speaker_name: str | None = None,
    ) -> str:
        """
        Compose a reply from skill summaries.

        Raises:
            LLMError: If the language model fails
        """
        prompt = build_response_prompt(user_request, summaries)
        system_prompt = self.system_prompt.replace(
            SPEAKER_NAME_PLACEHOLDER, speaker_name or GUEST_SPEAKER_NAME
        )
        logger.debug(f"Composing response from {len(summaries)} summaries")

        response = await self.llm.complete(prompt=prompt, system_prompt=system_prompt)
        return extract_text_from_response(response)
