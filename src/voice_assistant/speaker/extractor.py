"""
Speaker embedding extractor backed by Resemblyzer.

Resemblyzer produces 256-dimensional utterance embeddings. It does not
diarize, so every utterance yields at most one segment.
"""

import asyncio
import logging
from typing import Any

import numpy as np

from voice_assistant.audio.models import AudioChunk

from .config import DEFAULT_MODEL_VERSION, MIN_EMBEDDING_SAMPLES
from .exceptions import EmbeddingExtractionError, ModelNotLoadedError
from .interfaces import EmbeddingExtractor
from .models import SegmentEmbedding

logger = logging.getLogger(__name__)

SINGLE_SEGMENT_TOKEN = "speaker_0"


class ResemblyzerEmbeddingExtractor(EmbeddingExtractor):
    """Lazily loads a Resemblyzer ``VoiceEncoder`` and embeds utterances off the event loop."""

    def __init__(
        self,
        model_version: str = DEFAULT_MODEL_VERSION,
        min_samples: int = MIN_EMBEDDING_SAMPLES,
        device: str | None = None,
    ) -> None:
        self._model_version = model_version
        self.min_samples = min_samples
        self.device = device
        self._encoder: Any | None = None
        self._preprocess: Any | None = None

    @property
    def model_version(self) -> str:
        return self._model_version

    @property
    def is_loaded(self) -> bool:
        return self._encoder is not None

    async def load(self) -> None:
        if self._encoder is not None:
            return

        logger.info("Loading Resemblyzer voice encoder...")
        try:
            self._encoder, self._preprocess = await asyncio.to_thread(self._load_sync)
        except ImportError as e:
            raise ModelNotLoadedError(
                "resemblyzer is not installed; install the 'speaker' extra"
            ) from e
        except Exception as e:
            raise ModelNotLoadedError(f"Failed to load voice encoder: {e}") from e
        logger.info("Resemblyzer encoder loaded")

    def _load_sync(self) -> tuple[Any, Any]:
        from resemblyzer import VoiceEncoder, preprocess_wav

        encoder = VoiceEncoder(device=self.device) if self.device else VoiceEncoder()
        return encoder, preprocess_wav

    async def embed(self, audio: AudioChunk) -> list[SegmentEmbedding]:
        if self._encoder is None:
            raise ModelNotLoadedError()
        if len(audio) == 0:
            return []

        try:
            vector = await asyncio.to_thread(self._embed_sync, audio.samples, audio.sample_rate)
        except Exception as e:
            raise EmbeddingExtractionError(f"Failed to extract embedding: {e}") from e

        if vector is None:
            return []
        return [SegmentEmbedding(SINGLE_SEGMENT_TOKEN, tuple(float(v) for v in vector))]

    def _embed_sync(self, samples: np.ndarray, sample_rate: int) -> np.ndarray | None:
        wav = self._preprocess(np.asarray(samples, dtype=np.float32), source_sr=sample_rate)
        if len(wav) < self.min_samples:
            logger.debug(f"Audio too short after trimming: {len(wav)} samples (need {self.min_samples})")
            return None
        return self._encoder.embed_utterance(wav)
