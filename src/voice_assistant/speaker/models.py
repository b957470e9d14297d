"""Data models for speaker identification."""

from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import datetime
from uuid import UUID, uuid4

from .embedding import MAX_DISTANCE, average_embeddings, cosine_distance


@dataclass(frozen=True)
class SpeakerEmbedding:
    """Fixed-length voice embedding tagged with the model that produced it."""

    vector: tuple[float, ...]
    model_version: str

    def __post_init__(self) -> None:
        object.__setattr__(self, "vector", tuple(float(v) for v in self.vector))

    def __len__(self) -> int:
        return len(self.vector)

    def distance(self, other: "SpeakerEmbedding") -> float:
        """Cosine distance to another embedding; embeddings from different models never match."""
        if self.model_version != other.model_version:
            return MAX_DISTANCE
        return cosine_distance(self.vector, other.vector)

    @classmethod
    def average(cls, embeddings: Sequence["SpeakerEmbedding"], model_version: str) -> "SpeakerEmbedding":
        """
        Element-wise mean of several embeddings.

        Raises:
            EmbeddingMismatchError: If the list is empty or lengths differ
        """
        mean = average_embeddings([e.vector for e in embeddings])
        return cls(vector=tuple(mean.tolist()), model_version=model_version)


@dataclass(frozen=True)
class SegmentEmbedding:
    """One diarized segment: the extractor's speaker token and its vector."""

    speaker_token: str
    vector: tuple[float, ...]


@dataclass(frozen=True)
class SpeakerMetadata:
    """Usage statistics updated on every successful identification."""

    command_count: int = 0
    last_seen_at: datetime | None = None


@dataclass(frozen=True)
class Speaker:
    """An enrolled speaker."""

    name: str
    embedding: SpeakerEmbedding
    id: UUID = field(default_factory=uuid4)
    enrolled_at: datetime = field(default_factory=datetime.now)
    identification_threshold: float | None = None
    metadata: SpeakerMetadata = field(default_factory=SpeakerMetadata)


@dataclass(frozen=True)
class SpeakerMatch:
    """Result of speaker identification."""

    speaker: Speaker | None = None
    distance: float = 1.0
    threshold: float | None = None

    @property
    def matched(self) -> bool:
        return self.speaker is not None

    @classmethod
    def unidentified(cls, distance: float = 1.0, threshold: float | None = None) -> "SpeakerMatch":
        return cls(speaker=None, distance=distance, threshold=threshold)
