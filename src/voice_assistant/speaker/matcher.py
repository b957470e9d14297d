"""Speaker identification and enrollment by embedding distance."""

import asyncio
import dataclasses
import logging
from collections.abc import Sequence
from datetime import datetime
from uuid import UUID

from voice_assistant.audio.models import AudioChunk

from .config import DEFAULT_IDENTIFICATION_THRESHOLD, REQUIRED_ENROLLMENT_SAMPLES
from .embedding import compute_adaptive_threshold
from .exceptions import (
    EmbeddingExtractionError,
    InsufficientSamplesError,
    ModelNotLoadedError,
    SpeakerError,
    SpeakerNotFoundError,
)
from .interfaces import EmbeddingExtractor
from .models import Speaker, SpeakerEmbedding, SpeakerMatch, SpeakerMetadata
from .store import SpeakerStore

logger = logging.getLogger(__name__)


class SpeakerMatcher:
    """
    Identifies who is speaking by comparing an utterance's embedding against
    enrolled speakers.

    Identification never raises; enrollment and removal raise typed
    ``SpeakerError`` subclasses. All operations are serialized by one lock.
    """

    def __init__(
        self,
        extractor: EmbeddingExtractor,
        store: SpeakerStore | None = None,
        default_threshold: float = DEFAULT_IDENTIFICATION_THRESHOLD,
        required_samples: int = REQUIRED_ENROLLMENT_SAMPLES,
    ) -> None:
        """
        Initialize the matcher.

        Args:
            extractor: Embedding model adapter
            store: Persistent speaker storage; None keeps speakers in memory only
            default_threshold: Acceptance distance for speakers without a personal threshold
            required_samples: Recordings needed to enroll a speaker
        """
        self.extractor = extractor
        self.store = store
        self.default_threshold = default_threshold
        self.required_samples = required_samples
        self._speakers: list[Speaker] = []
        self._lock = asyncio.Lock()

    @property
    def is_model_loaded(self) -> bool:
        return self.extractor.is_loaded

    @property
    def enrolled_speakers(self) -> list[Speaker]:
        return list(self._speakers)

    async def load(self) -> None:
        """
        Load the embedding model and the persisted speakers.

        Raises:
            ModelNotLoadedError: If the embedding model fails to load
            SpeakerStoreError: If stored speakers cannot be read
        """
        async with self._lock:
            await self.extractor.load()
            if self.store is not None:
                self._speakers = await self.store.load_speakers()
            logger.info(f"Speaker matcher ready with {len(self._speakers)} enrolled speaker(s)")

    async def identify(
        self, utterance: AudioChunk, threshold_override: float | None = None
    ) -> SpeakerMatch:
        """
        Find the enrolled speaker closest to the utterance.

        Args:
            utterance: Captured speech
            threshold_override: Looser boundary applied when larger than the speaker's own

        Returns:
            Matched speaker, or an unidentified result
        """
        async with self._lock:
            if not self.extractor.is_loaded:
                logger.debug("Identification skipped: model not loaded")
                return SpeakerMatch.unidentified()
            if not self._speakers:
                return SpeakerMatch.unidentified()

            try:
                embedding = await self._embed_utterance(utterance)
            except Exception as e:
                logger.error(f"Speaker embedding failed: {e}")
                return SpeakerMatch.unidentified()
            if embedding is None:
                return SpeakerMatch.unidentified()

            best_index = -1
            best_distance = float("inf")
            for index, speaker in enumerate(self._speakers):
                distance = embedding.distance(speaker.embedding)
                if distance < best_distance:
                    best_index = index
                    best_distance = distance

            best = self._speakers[best_index]
            threshold = self._effective_threshold(best, threshold_override)
            if not best_distance < threshold:
                logger.debug(
                    f"No speaker match: nearest '{best.name}' at {best_distance:.3f} (threshold {threshold:.3f})"
                )
                return SpeakerMatch.unidentified(best_distance, threshold)

            logger.debug(f"Identified '{best.name}' at distance {best_distance:.3f}")
            return SpeakerMatch(
                speaker=await self._record_identification(best_index),
                distance=best_distance,
                threshold=threshold,
            )

    def _effective_threshold(self, speaker: Speaker, override: float | None) -> float:
        threshold = speaker.identification_threshold
        if threshold is None:
            threshold = self.default_threshold
        if override is not None:
            threshold = max(threshold, override)
        return threshold

    async def _record_identification(self, index: int) -> Speaker:
        speaker = self._speakers[index]
        updated = dataclasses.replace(
            speaker,
            metadata=SpeakerMetadata(
                command_count=speaker.metadata.command_count + 1,
                last_seen_at=datetime.now(),
            ),
        )
        candidate = list(self._speakers)
        candidate[index] = updated
        try:
            await self._persist(candidate)
        except SpeakerError as e:
            logger.error(f"Failed to persist metadata for '{speaker.name}': {e}")
            return speaker
        self._speakers = candidate
        return updated

    async def enroll(self, name: str, samples: Sequence[AudioChunk]) -> Speaker:
        """
        Enroll a new speaker from several recordings.

        Args:
            name: Display name
            samples: Recordings of the speaker, at least ``required_samples``

        Returns:
            The enrolled speaker

        Raises:
            InsufficientSamplesError: If too few recordings are provided
            ModelNotLoadedError: If the embedding model is not loaded
            EmbeddingExtractionError: If no recording yields an embedding
            EmbeddingMismatchError: If recordings yield embeddings of different lengths
            SpeakerStoreError: If the speaker cannot be persisted
        """
        if len(samples) < self.required_samples:
            raise InsufficientSamplesError(self.required_samples, len(samples))

        async with self._lock:
            if not self.extractor.is_loaded:
                raise ModelNotLoadedError()

            embeddings: list[SpeakerEmbedding] = []
            for index, sample in enumerate(samples):
                try:
                    embedding = await self._embed_utterance(sample)
                except EmbeddingExtractionError as e:
                    logger.warning(f"Enrollment sample {index} discarded: {e}")
                    continue
                if embedding is None:
                    logger.warning(f"Enrollment sample {index} discarded: no speech segment")
                    continue
                embeddings.append(embedding)

            if not embeddings:
                raise EmbeddingExtractionError(f"No usable voice embedding in {len(samples)} sample(s)")

            averaged = SpeakerEmbedding.average(embeddings, self.extractor.model_version)
            distances = [e.distance(averaged) for e in embeddings]
            threshold = compute_adaptive_threshold(distances, default=self.default_threshold)

            speaker = Speaker(name=name, embedding=averaged, identification_threshold=threshold)
            candidate = [*self._speakers, speaker]
            await self._persist(candidate)
            self._speakers = candidate

        logger.info(
            f"Enrolled '{name}' from {len(embeddings)}/{len(samples)} samples (threshold {threshold:.3f})"
        )
        return speaker

    async def remove(self, speaker_id: UUID) -> None:
        """
        Remove an enrolled speaker.

        Raises:
            SpeakerNotFoundError: If no speaker has this id
            SpeakerStoreError: If the removal cannot be persisted
        """
        async with self._lock:
            candidate = [s for s in self._speakers if s.id != speaker_id]
            if len(candidate) == len(self._speakers):
                raise SpeakerNotFoundError(f"Speaker with ID {speaker_id} not found")
            await self._persist(candidate)
            self._speakers = candidate
        logger.info(f"Removed speaker {speaker_id}")

    async def update_speaker(self, speaker: Speaker) -> None:
        """
        Replace the stored record with the same id.

        Raises:
            SpeakerNotFoundError: If no speaker has this id
            SpeakerStoreError: If the update cannot be persisted
        """
        async with self._lock:
            candidate = list(self._speakers)
            for index, existing in enumerate(candidate):
                if existing.id == speaker.id:
                    candidate[index] = speaker
                    break
            else:
                raise SpeakerNotFoundError(f"Speaker with ID {speaker.id} not found")
            await self._persist(candidate)
            self._speakers = candidate

    async def _embed_utterance(self, audio: AudioChunk) -> SpeakerEmbedding | None:
        segments = await self.extractor.embed(audio)
        if not segments:
            return None
        per_segment = [
            SpeakerEmbedding(vector=segment.vector, model_version=self.extractor.model_version)
            for segment in segments
        ]
        return SpeakerEmbedding.average(per_segment, self.extractor.model_version)

    async def _persist(self, speakers: list[Speaker]) -> None:
        if self.store is not None:
            await self.store.save_speakers(speakers)
