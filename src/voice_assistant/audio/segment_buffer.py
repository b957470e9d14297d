"""Rolling sample buffer that carves utterances out of a live stream."""

import threading

import numpy as np

from .config import DEFAULT_BUFFER_SECONDS, DEFAULT_SAMPLE_RATE, SPEECH_LOOKBACK_SECONDS
from .logging_utils import get_logger
from .models import AudioChunk, AudioSource

logger = get_logger(__name__)


class SegmentBuffer:
    """
    Fixed-capacity rolling buffer with a movable speech-start marker.

    The capture callback appends windows while the consumer marks speech
    starts and extracts utterances; a single lock serializes both sides.
    """

    def __init__(
        self,
        max_seconds: float = DEFAULT_BUFFER_SECONDS,
        sample_rate: int = DEFAULT_SAMPLE_RATE,
        lookback_seconds: float = SPEECH_LOOKBACK_SECONDS,
    ) -> None:
        """
        Initialize the segment buffer.

        Args:
            max_seconds: Capacity of the rolling buffer in seconds
            sample_rate: Sample rate of the appended windows in Hz
            lookback_seconds: Pre-roll kept before a marked speech start
        """
        self.sample_rate = sample_rate
        self.max_samples = int(round(max_seconds * sample_rate))
        self.lookback_samples = int(round(lookback_seconds * sample_rate))

        self._buffer = np.zeros(0, dtype=np.float32)
        self._speech_start_index: int | None = None
        self._last_source = AudioSource.local_mic()
        self._lock = threading.Lock()

    @property
    def sample_count(self) -> int:
        with self._lock:
            return len(self._buffer)

    @property
    def has_speech_start(self) -> bool:
        with self._lock:
            return self._speech_start_index is not None

    @property
    def speech_start_index(self) -> int | None:
        with self._lock:
            return self._speech_start_index

    def append(self, chunk: AudioChunk) -> None:
        """
        Append a window to the tail, evicting from the head past capacity.

        Eviction shifts the speech-start index down by the evicted amount
        (floored at zero) so its distance from the live edge is preserved.
        """
        with self._lock:
            self._buffer = np.concatenate((self._buffer, chunk.samples))
            self._last_source = chunk.source

            excess = len(self._buffer) - self.max_samples
            if excess > 0:
                self._buffer = self._buffer[excess:]
                if self._speech_start_index is not None:
                    self._speech_start_index = max(0, self._speech_start_index - excess)
                logger.trace(f"SegmentBuffer evicted {excess} samples")

    def mark_speech_start(self) -> None:
        """Record the start of speech, including the lookback pre-roll."""
        with self._lock:
            self._speech_start_index = max(0, len(self._buffer) - self.lookback_samples)
            logger.debug(f"Speech start marked at sample {self._speech_start_index}")

    def extract_utterance_since_start(self) -> AudioChunk:
        """
        Return every sample from the speech-start index to the tail.

        Without a marker the whole buffer is returned. The marker is cleared,
        so an utterance is handed out at most once.
        """
        with self._lock:
            start = self._speech_start_index or 0
            samples = self._buffer[start:].copy()
            self._speech_start_index = None
            source = self._last_source

        utterance = AudioChunk(samples=samples, sample_rate=self.sample_rate, source=source)
        logger.debug(f"Extracted utterance of {utterance.duration:.2f}s from sample {start}")
        return utterance

    def clear(self) -> None:
        """Drop all samples and the speech-start marker."""
        with self._lock:
            self._buffer = np.zeros(0, dtype=np.float32)
            self._speech_start_index = None
