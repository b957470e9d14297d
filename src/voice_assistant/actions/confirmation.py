"""Pending confirmation tracking and yes/no/cancel reply classification."""

import logging
from collections.abc import Callable
from datetime import datetime, timedelta

from .config import (
    AFFIRMATIVE_PHRASES,
    CANCEL_PHRASES,
    CONFIRMATION_IGNORED_TOKENS,
    DEFAULT_CONFIRMATION_EXPIRY,
    NEGATIVE_PHRASES,
)
from .models import ArgumentValue, ConfirmationReply, PendingConfirmation

logger = logging.getLogger(__name__)


def normalize_confirmation_text(text: str) -> list[str]:
    """Lowercase, drop punctuation and filler words, and split into tokens."""
    filtered = "".join(c for c in text.lower() if c.isalnum() or c.isspace())
    return [token for token in filtered.split() if token not in CONFIRMATION_IGNORED_TOKENS]


def classify_confirmation_reply(text: str) -> ConfirmationReply:
    """
    Classify a reply to a pending confirmation.

    The whole utterance must be one of the known phrases; cancel phrases win
    over affirmative, which win over negative.
    """
    tokens = tuple(normalize_confirmation_text(text))
    if not tokens:
        return ConfirmationReply.UNKNOWN
    if tokens in CANCEL_PHRASES:
        return ConfirmationReply.CANCEL
    if tokens in AFFIRMATIVE_PHRASES:
        return ConfirmationReply.CONFIRM
    if tokens in NEGATIVE_PHRASES:
        return ConfirmationReply.DENY
    return ConfirmationReply.UNKNOWN


class ConfirmationTracker:
    """
    Holds at most one pending confirmation.

    Expiry is checked lazily whenever the pending confirmation is read.
    """

    def __init__(
        self,
        expiry_seconds: float = DEFAULT_CONFIRMATION_EXPIRY,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        self.expiry_seconds = expiry_seconds
        self._clock = clock
        self._pending: PendingConfirmation | None = None

    def create(
        self,
        skill_id: str,
        arguments: dict[str, ArgumentValue],
        prompt: str,
        origin_user_request: str | None = None,
    ) -> PendingConfirmation:
        now = self._clock()
        pending = PendingConfirmation(
            skill_id=skill_id,
            arguments=arguments,
            prompt=prompt,
            created_at=now,
            expires_at=now + timedelta(seconds=self.expiry_seconds),
            origin_user_request=origin_user_request,
        )
        self._pending = pending
        logger.info(f"Awaiting confirmation for '{skill_id}' until {pending.expires_at:%H:%M:%S}")
        return pending

    @property
    def pending(self) -> PendingConfirmation | None:
        """The live pending confirmation, discarding it first if expired."""
        pending = self._pending
        if pending is not None and pending.is_expired(self._clock()):
            logger.info(f"Pending confirmation for '{pending.skill_id}' expired")
            self._pending = None
            return None
        return pending

    def clear(self) -> None:
        self._pending = None
