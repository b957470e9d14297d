"""Speaker identification: embeddings, enrollment and persistence."""

from .embedding import average_embeddings, compute_adaptive_threshold, cosine_distance
from .extractor import ResemblyzerEmbeddingExtractor
from .interfaces import EmbeddingExtractor
from .matcher import SpeakerMatcher
from .models import SegmentEmbedding, Speaker, SpeakerEmbedding, SpeakerMatch, SpeakerMetadata
from .store import SpeakerStore

__all__ = [
    "average_embeddings",
    "compute_adaptive_threshold",
    "cosine_distance",
    "EmbeddingExtractor",
    "ResemblyzerEmbeddingExtractor",
    "SegmentEmbedding",
    "Speaker",
    "SpeakerEmbedding",
    "SpeakerMatch",
    "SpeakerMatcher",
    "SpeakerMetadata",
    "SpeakerStore",
]
