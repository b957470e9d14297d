"""Data models for audio segmentation."""

import time
from dataclasses import dataclass, field
from enum import Enum

import numpy as np

from .config import DEFAULT_SAMPLE_RATE


class SourceKind(str, Enum):
    """Where an audio stream originates."""

    LOCAL_MIC = "local"
    SATELLITE = "satellite"
    IOS_APP = "ios"


@dataclass(frozen=True)
class AudioSource:
    """Identifies the device that produced a window of audio."""

    kind: SourceKind = SourceKind.LOCAL_MIC
    device_id: str | None = None

    @classmethod
    def local_mic(cls) -> "AudioSource":
        return cls(SourceKind.LOCAL_MIC)

    @classmethod
    def satellite(cls, device_id: str) -> "AudioSource":
        return cls(SourceKind.SATELLITE, device_id)

    @classmethod
    def ios_app(cls, device_id: str) -> "AudioSource":
        return cls(SourceKind.IOS_APP, device_id)

    @property
    def identifier(self) -> str:
        """Stable string id, e.g. ``local`` or ``satellite-kitchen``."""
        if self.kind == SourceKind.LOCAL_MIC:
            return "local"
        return f"{self.kind.value}-{self.device_id}"


def _freeze(samples: object) -> np.ndarray:
    array = np.array(samples, dtype=np.float32).reshape(-1)
    array.setflags(write=False)
    return array


@dataclass(frozen=True, eq=False)
class AudioChunk:
    """An immutable window of mono float32 samples with metadata."""

    samples: np.ndarray
    sample_rate: int = DEFAULT_SAMPLE_RATE
    source: AudioSource = field(default_factory=AudioSource.local_mic)
    timestamp: float = field(default_factory=time.time)

    def __post_init__(self) -> None:
        object.__setattr__(self, "samples", _freeze(self.samples))

    @property
    def duration(self) -> float:
        """Duration in seconds."""
        if self.sample_rate <= 0:
            return 0.0
        return len(self.samples) / self.sample_rate

    def __len__(self) -> int:
        return len(self.samples)


class VADEvent(str, Enum):
    """Discrete event emitted by the voice activity gate for each window."""

    SILENCE = "silence"
    SPEECH_START = "speech_start"
    SPEECH_CONTINUE = "speech_continue"
    SPEECH_END = "speech_end"


@dataclass
class TranscriptionResult:
    """Represents the result of speech transcription."""

    text: str
    confidence: float
    language: str
    processing_time: float
