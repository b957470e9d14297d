"""Data models for the assistant pipeline."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum

from voice_assistant.actions.models import DispatchResult
from voice_assistant.audio.models import AudioSource, TranscriptionResult
from voice_assistant.speaker.models import Speaker


class AssistantState(str, Enum):
    """Observable assistant state."""

    IDLE = "idle"
    LISTENING = "listening"
    CAPTURING = "capturing"
    PROCESSING = "processing"
    RESPONDING = "responding"
    ERROR = "error"


class ConversationRole(str, Enum):
    """Speaker of a conversation turn."""

    USER = "user"
    ASSISTANT = "assistant"


@dataclass(frozen=True)
class ConversationTurn:
    """One message of the conversation history."""

    role: ConversationRole
    content: str
    timestamp: datetime = field(default_factory=datetime.now)


@dataclass
class AssistantResponse:
    """Everything produced while handling one command."""

    text: str
    command: str
    speaker: Speaker | None = None
    source: AudioSource = field(default_factory=AudioSource.local_mic)
    transcription: TranscriptionResult | None = None
    dispatch: DispatchResult | None = None
