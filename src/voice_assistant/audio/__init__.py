"""Audio segmentation: rolling buffer, voice activity gate and model adapters."""

from .interfaces import Transcriber, VoiceActivityScorer
from .models import AudioChunk, AudioSource, SourceKind, TranscriptionResult, VADEvent
from .segment_buffer import SegmentBuffer
from .transcriber import WhisperTranscriber
from .vad import VoiceActivityGate, WebRTCVoiceActivityScorer

__all__ = [
    "AudioChunk",
    "AudioSource",
    "SourceKind",
    "TranscriptionResult",
    "VADEvent",
    "SegmentBuffer",
    "VoiceActivityGate",
    "VoiceActivityScorer",
    "WebRTCVoiceActivityScorer",
    "Transcriber",
    "WhisperTranscriber",
]
