"""Abstract interface for the language model."""

from abc import ABC, abstractmethod
from collections.abc import Sequence

from voice_assistant.assistant.models import ConversationTurn


class LanguageModel(ABC):
    """Text completion backend used for action plans and response composition."""

    @abstractmethod
    async def complete(
        self,
        prompt: str,
        system_prompt: str | None = None,
        conversation_history: Sequence[ConversationTurn] = (),
        tool_manifest: str | None = None,
    ) -> str:
        """
        Complete a prompt.

        Args:
            prompt: The user's request
            system_prompt: Instructions for the model
            conversation_history: Earlier turns, oldest first
            tool_manifest: Description of available skills, if any

        Returns:
            Raw model output

        Raises:
            LLMError: If the model is unreachable, times out or fails
        """
        pass
