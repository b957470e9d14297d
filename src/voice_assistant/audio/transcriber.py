"""Whisper transcription adapter."""

from __future__ import annotations

import asyncio
import time
from typing import Any

import numpy as np

from .config import (
    CONFIDENCE_LOGPROB_MAX,
    CONFIDENCE_LOGPROB_MIN,
    DEFAULT_SAMPLE_RATE,
    DEFAULT_TRANSCRIPTION_LANGUAGE,
    DEFAULT_WHISPER_COMPUTE_TYPE,
    DEFAULT_WHISPER_DEVICE,
    DEFAULT_WHISPER_MODEL,
)
from .exceptions import TranscriptionError
from .interfaces import Transcriber
from .logging_utils import get_logger
from .models import AudioChunk, TranscriptionResult

# Import faster_whisper at module level for proper mocking in tests
try:
    import faster_whisper  # type: ignore[import-untyped]
except ImportError:
    faster_whisper = None

logger = get_logger(__name__)


def logprob_to_confidence(avg_logprob: float) -> float:
    """Map Whisper's average log probability onto [0, 1]."""
    span = CONFIDENCE_LOGPROB_MAX - CONFIDENCE_LOGPROB_MIN
    normalized = (avg_logprob - CONFIDENCE_LOGPROB_MIN) / span
    return float(min(1.0, max(0.0, normalized)))


class WhisperTranscriber(Transcriber):
    """Uses faster-whisper for local speech-to-text conversion."""

    def __init__(
        self,
        model_size: str = DEFAULT_WHISPER_MODEL,
        device: str = DEFAULT_WHISPER_DEVICE,
        compute_type: str = DEFAULT_WHISPER_COMPUTE_TYPE,
        language: str = DEFAULT_TRANSCRIPTION_LANGUAGE,
    ) -> None:
        """
        Initialize Whisper transcriber.

        Args:
            model_size: Size of Whisper model to use
            device: Device to use for inference ("cpu" or "cuda")
            compute_type: Compute type for inference ("int8", "float16", etc.)
            language: Language hint passed to the model
        """
        self.model_size = model_size
        self.device = device
        self.compute_type = compute_type
        self.language = language
        self._model: Any | None = None

    @property
    def is_model_loaded(self) -> bool:
        return self._model is not None

    async def load_model(self) -> None:
        if self._model is not None:
            return

        if faster_whisper is None:
            raise TranscriptionError("faster-whisper library not available")

        logger.debug(f"Loading Whisper '{self.model_size}' on {self.device} ({self.compute_type})")
        try:
            self._model = await asyncio.to_thread(
                faster_whisper.WhisperModel,
                self.model_size,
                device=self.device,
                compute_type=self.compute_type,
            )
        except Exception as e:
            raise TranscriptionError(f"Failed to load Whisper model: {e}") from e

        logger.info(f"Whisper model '{self.model_size}' loaded")

    def _transcribe_sync(self, samples: np.ndarray) -> tuple[str, float, str]:
        segments, info = self._model.transcribe(samples, language=self.language, beam_size=5)
        texts = []
        logprobs = []
        for segment in segments:
            texts.append(segment.text.strip())
            logprobs.append(segment.avg_logprob)

        text = " ".join(t for t in texts if t)
        confidence = logprob_to_confidence(sum(logprobs) / len(logprobs)) if logprobs else 0.0
        return text, confidence, getattr(info, "language", self.language)

    async def transcribe(self, audio: AudioChunk) -> TranscriptionResult:
        if self._model is None:
            raise TranscriptionError("Whisper model not loaded")

        if audio.sample_rate != DEFAULT_SAMPLE_RATE:
            raise TranscriptionError(
                f"Unsupported sample rate {audio.sample_rate}Hz, expected {DEFAULT_SAMPLE_RATE}Hz"
            )

        if len(audio) == 0:
            return TranscriptionResult(text="", confidence=0.0, language=self.language, processing_time=0.0)

        start_time = time.time()
        try:
            text, confidence, language = await asyncio.to_thread(self._transcribe_sync, audio.samples)
        except Exception as e:
            raise TranscriptionError(f"Transcription failed: {e}") from e

        processing_time = time.time() - start_time
        logger.debug(f"Transcribed {audio.duration:.2f}s in {processing_time:.3f}s: '{text}'")
        return TranscriptionResult(
            text=text,
            confidence=confidence,
            language=language,
            processing_time=processing_time,
        )
