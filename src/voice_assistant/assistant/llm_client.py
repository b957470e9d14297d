"""Language model client backed by a local Ollama service."""

import asyncio
import logging
import time
from collections.abc import Sequence

import ollama

from .config import (
    DEFAULT_OLLAMA_BASE_URL,
    DEFAULT_OLLAMA_MAX_RETRIES,
    DEFAULT_OLLAMA_MODEL,
    DEFAULT_OLLAMA_TEMPERATURE,
    DEFAULT_OLLAMA_TIMEOUT,
)
from .exceptions import (
    LLMConnectionError,
    LLMError,
    LLMNotConfiguredError,
    LLMResponseError,
    LLMTimeoutError,
)
from .interfaces import LanguageModel
from .models import ConversationTurn

logger = logging.getLogger(__name__)


class OllamaLanguageModel(LanguageModel):
    """Completes prompts with a chat model served by Ollama."""

    def __init__(
        self,
        model: str = DEFAULT_OLLAMA_MODEL,
        base_url: str = DEFAULT_OLLAMA_BASE_URL,
        timeout: float = DEFAULT_OLLAMA_TIMEOUT,
        max_retries: int = DEFAULT_OLLAMA_MAX_RETRIES,
        temperature: float = DEFAULT_OLLAMA_TEMPERATURE,
    ) -> None:
        """
        Initialize the Ollama client.

        Args:
            model: Ollama model name
            base_url: Ollama service URL
            timeout: Request timeout in seconds
            max_retries: Maximum attempts for timed-out requests
            temperature: Sampling temperature
        """
        self.model = model
        self.base_url = base_url
        self.timeout = timeout
        self.max_retries = max_retries
        self.temperature = temperature
        self._client = ollama.AsyncClient(host=base_url)

    @property
    def is_configured(self) -> bool:
        return bool(self.model and self.base_url)

    def build_messages(
        self,
        prompt: str,
        system_prompt: str | None = None,
        conversation_history: Sequence[ConversationTurn] = (),
        tool_manifest: str | None = None,
    ) -> list[dict[str, str]]:
        """
        Assemble the chat messages: system, history, then the prompt.

        The tool manifest is appended to the system message.
        """
        messages: list[dict[str, str]] = []

        system_parts = [part for part in (system_prompt, tool_manifest) if part]
        if system_parts:
            messages.append({"role": "system", "content": "\n\n".join(system_parts)})

        for turn in conversation_history:
            messages.append({"role": turn.role.value, "content": turn.content})

        messages.append({"role": "user", "content": prompt})
        return messages

    async def complete(
        self,
        prompt: str,
        system_prompt: str | None = None,
        conversation_history: Sequence[ConversationTurn] = (),
        tool_manifest: str | None = None,
    ) -> str:
        if not self.is_configured:
            raise LLMNotConfiguredError("No Ollama model or URL configured")

        messages = self.build_messages(prompt, system_prompt, conversation_history, tool_manifest)
        start_time = time.time()

        for attempt in range(self.max_retries):
            try:
                response = await asyncio.wait_for(
                    self._client.chat(
                        model=self.model,
                        messages=messages,
                        options={"temperature": self.temperature},
                    ),
                    timeout=self.timeout,
                )

                content = response["message"]["content"]
                if content is None:
                    raise LLMResponseError("Empty response from language model")

                logger.info(
                    f"Completion finished: {len(content)} chars, time={time.time() - start_time:.3f}s"
                )
                logger.debug(f"Raw completion: {content}")
                return content

            except TimeoutError as e:
                logger.error(f"Timeout on attempt {attempt + 1}/{self.max_retries}: {e}")
                if attempt < self.max_retries - 1:
                    # Exponential backoff
                    await asyncio.sleep(2**attempt)
                else:
                    raise LLMTimeoutError(
                        f"Max retries exceeded after {self.max_retries} attempts"
                    ) from e

            except ConnectionError as e:
                logger.error(f"Connection error: {e}")
                raise LLMConnectionError(f"Connection failed: {e}") from e

            except ollama.ResponseError as e:
                logger.error(f"Ollama returned an error: {e}")
                raise LLMResponseError(f"Model error: {e}") from e

            except LLMError:
                raise

            except Exception as e:
                logger.error(f"Completion error: {e}")
                raise LLMError(f"Completion failed: {e}") from e

        raise LLMTimeoutError(f"Max retries exceeded after {self.max_retries} attempts")
