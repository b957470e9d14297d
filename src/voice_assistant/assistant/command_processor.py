"""Wake phrase detection, command extraction and closing-phrase detection."""

import re
from collections.abc import Iterable

from .config import DEFAULT_CLOSING_PHRASES, DEFAULT_WAKE_PHRASE

_PUNCTUATION = re.compile(r"[^\w\s']")
_WHITESPACE = re.compile(r"\s+")


def normalize_phrase(text: str) -> str:
    """Lowercase, unify apostrophes, drop other punctuation and collapse whitespace."""
    lowered = text.lower().replace("’", "'")
    return _WHITESPACE.sub(" ", _PUNCTUATION.sub(" ", lowered)).strip()


class CommandProcessor:
    """Finds the command following the wake phrase in a transcription."""

    def __init__(
        self,
        wake_phrase: str = DEFAULT_WAKE_PHRASE,
        closing_phrases: Iterable[str] = DEFAULT_CLOSING_PHRASES,
    ) -> None:
        self.wake_phrase = wake_phrase.lower()
        self.closing_phrases = frozenset(normalize_phrase(p) for p in closing_phrases)

    def contains_wake_word(self, text: str) -> bool:
        return self.wake_phrase in text.lower()

    def extract_command(self, text: str) -> str | None:
        """
        Return the text after the wake phrase.

        Args:
            text: Transcribed utterance

        Returns:
            The command with surrounding whitespace and one leading comma or
            colon removed, or None if there is no wake phrase or no command
        """
        index = text.lower().find(self.wake_phrase)
        if index == -1:
            return None

        command = text[index + len(self.wake_phrase) :].strip()
        if command.startswith((",", ":")):
            command = command[1:].strip()

        return command or None

    def is_closing_phrase(self, text: str) -> bool:
        return normalize_phrase(text) in self.closing_phrases
