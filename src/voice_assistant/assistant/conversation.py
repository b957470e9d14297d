"""Conversation history with time-based windowing and a follow-up window."""

from collections.abc import Callable
from datetime import datetime, timedelta

from .config import (
    DEFAULT_CONVERSATION_TIMEOUT_MINUTES,
    DEFAULT_FOLLOW_UP_WINDOW_SECONDS,
    DEFAULT_MAX_CONVERSATION_TURNS,
)
from .models import ConversationRole, ConversationTurn


class ConversationManager:
    """
    Keeps the recent conversation and tracks whether a follow-up is expected.

    Turns older than the timeout are dropped, as are the oldest turns past
    ``max_turns``. While the follow-up window is open the user may speak
    again without the wake phrase.
    """

    def __init__(
        self,
        timeout_minutes: float = DEFAULT_CONVERSATION_TIMEOUT_MINUTES,
        max_turns: int = DEFAULT_MAX_CONVERSATION_TURNS,
        follow_up_window_seconds: float = DEFAULT_FOLLOW_UP_WINDOW_SECONDS,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        self.timeout_minutes = timeout_minutes
        self.max_turns = max_turns
        self.follow_up_window_seconds = follow_up_window_seconds
        self._clock = clock
        self._turns: list[ConversationTurn] = []
        self._follow_up_until: datetime | None = None

    def add_turn(self, role: ConversationRole, content: str) -> None:
        self.add_turn_directly(ConversationTurn(role=role, content=content, timestamp=self._clock()))

    def add_turn_directly(self, turn: ConversationTurn) -> None:
        self._turns.append(turn)
        self._prune()

    def recent_history(self) -> list[ConversationTurn]:
        self._prune()
        return list(self._turns)

    def has_recent_history(self) -> bool:
        self._prune()
        return bool(self._turns)

    def clear_history(self) -> None:
        self._turns.clear()

    def _prune(self) -> None:
        cutoff = self._clock() - timedelta(minutes=self.timeout_minutes)
        self._turns = [t for t in self._turns if t.timestamp > cutoff]
        if len(self._turns) > self.max_turns:
            self._turns = self._turns[-self.max_turns :]

    def extend_follow_up_window(self) -> None:
        """Open (or restart) the follow-up window from now."""
        self._follow_up_until = self._clock() + timedelta(seconds=self.follow_up_window_seconds)

    def end_follow_up_window(self) -> None:
        self._follow_up_until = None

    def is_follow_up_active(self) -> bool:
        if self._follow_up_until is None:
            return False
        if self._clock() >= self._follow_up_until:
            self._follow_up_until = None
            return False
        return True
