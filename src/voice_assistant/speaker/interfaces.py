"""Abstract interface for the speaker embedding model."""

from abc import ABC, abstractmethod

from voice_assistant.audio.models import AudioChunk
from voice_assistant.speaker.models import SegmentEmbedding


class EmbeddingExtractor(ABC):
    """Extracts per-segment speaker embeddings from an utterance."""

    @property
    @abstractmethod
    def model_version(self) -> str:
        """Return the version tag stored alongside extracted embeddings."""
        pass

    @property
    @abstractmethod
    def is_loaded(self) -> bool:
        """Return True once the backing model is ready."""
        pass

    @abstractmethod
    async def load(self) -> None:
        """
        Load the backing model.

        Raises:
            ModelNotLoadedError: If the model cannot be loaded
        """
        pass

    @abstractmethod
    async def embed(self, audio: AudioChunk) -> list[SegmentEmbedding]:
        """
        Extract embeddings for every speech segment in the audio.

        Args:
            audio: Utterance or enrollment recording

        Returns:
            Zero or more segment embeddings; empty when no speech was found
        """
        pass
