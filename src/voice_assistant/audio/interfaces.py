"""Abstract interfaces for the audio models the pipeline consumes."""

from abc import ABC, abstractmethod

import numpy as np

from .models import AudioChunk, TranscriptionResult


class VoiceActivityScorer(ABC):
    """Scores a fixed-size chunk of samples for the presence of speech."""

    @abstractmethod
    async def score(self, samples: np.ndarray) -> float:
        """
        Return the probability that the chunk contains speech.

        Args:
            samples: float32 mono samples, exactly one gate chunk long

        Returns:
            Probability in [0, 1]

        Raises:
            ScorerUnavailableError: If the backing model cannot be used
        """
        pass


class Transcriber(ABC):
    """Converts an utterance into text."""

    @property
    @abstractmethod
    def is_model_loaded(self) -> bool:
        """Return True once the backing model is ready."""
        pass

    @abstractmethod
    async def load_model(self) -> None:
        """
        Load the backing model.

        Raises:
            TranscriptionError: If the model cannot be loaded
        """
        pass

    @abstractmethod
    async def transcribe(self, audio: AudioChunk) -> TranscriptionResult:
        """
        Transcribe an utterance.

        Args:
            audio: Utterance extracted from the segment buffer

        Returns:
            TranscriptionResult with text and confidence

        Raises:
            TranscriptionError: If transcription fails
        """
        pass
