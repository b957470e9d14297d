"""Voice Activity Detection for utterance segmentation."""

import threading
import time

import numpy as np
import webrtcvad

from .config import (
    DEFAULT_SAMPLE_RATE,
    VAD_PROBABILITY_THRESHOLD,
    VAD_SILENCE_THRESHOLD,
    VAD_TARGET_CHUNK_SIZE,
    WEBRTC_AGGRESSIVENESS,
    WEBRTC_FRAME_DURATION,
    WEBRTC_SUPPORTED_FRAME_DURATIONS,
    WEBRTC_SUPPORTED_SAMPLE_RATES,
)
from .exceptions import ScorerUnavailableError
from .interfaces import VoiceActivityScorer
from .logging_utils import get_logger
from .models import AudioChunk, VADEvent

logger = get_logger(__name__)


class WebRTCVoiceActivityScorer(VoiceActivityScorer):
    """Scores chunks with WebRTC VAD; probability is the voiced-frame ratio."""

    def __init__(
        self,
        sample_rate: int = DEFAULT_SAMPLE_RATE,
        frame_duration: int = WEBRTC_FRAME_DURATION,
        aggressiveness: int = WEBRTC_AGGRESSIVENESS,
    ) -> None:
        """
        Initialize the WebRTC scorer.

        Args:
            sample_rate: Audio sample rate in Hz
            frame_duration: Frame duration in milliseconds
            aggressiveness: WebRTC aggressiveness mode (0-3)

        Raises:
            ValueError: If sample_rate or frame_duration is not supported by webrtcvad
        """
        if sample_rate not in WEBRTC_SUPPORTED_SAMPLE_RATES:
            raise ValueError(f"Unsupported sample rate: {sample_rate}. "
                             f"WebRTC VAD supports {WEBRTC_SUPPORTED_SAMPLE_RATES} Hz")

        if frame_duration not in WEBRTC_SUPPORTED_FRAME_DURATIONS:
            raise ValueError(f"Unsupported frame duration: {frame_duration}. "
                             f"WebRTC VAD supports {WEBRTC_SUPPORTED_FRAME_DURATIONS} ms")

        self.sample_rate = sample_rate
        self.frame_duration = frame_duration
        self.frame_size = int(sample_rate * frame_duration / 1000)

        self.vad = webrtcvad.Vad()
        self.vad.set_mode(aggressiveness)

        logger.debug(f"🔊 WebRTC scorer initialized: sample_rate={sample_rate}Hz, "
                     f"frame_duration={frame_duration}ms, "
                     f"aggressiveness={aggressiveness}, "
                     f"frame_size={self.frame_size} samples")

    def _to_pcm16(self, samples: np.ndarray) -> bytes:
        clipped = np.clip(samples, -1.0, 1.0)
        return (clipped * 32767).astype("<i2").tobytes()

    async def score(self, samples: np.ndarray) -> float:
        frame_count = len(samples) // self.frame_size
        if frame_count == 0:
            return 0.0

        pcm = self._to_pcm16(np.asarray(samples[: frame_count * self.frame_size], dtype=np.float32))
        frame_bytes = self.frame_size * 2

        voiced = 0
        try:
            for i in range(frame_count):
                frame = pcm[i * frame_bytes:(i + 1) * frame_bytes]
                if self.vad.is_speech(frame, self.sample_rate):
                    voiced += 1
        except Exception as e:
            raise ScorerUnavailableError(f"WebRTC VAD failed: {e}") from e

        return voiced / frame_count


class VoiceActivityGate:
    """
    Hysteresis state machine turning speech probabilities into VAD events.

    Samples accumulate until a full scorer chunk is queued; every call emits
    exactly one event derived from the most recent probability.
    """

    def __init__(
        self,
        scorer: VoiceActivityScorer | None = None,
        target_chunk_size: int = VAD_TARGET_CHUNK_SIZE,
        silence_threshold: int = VAD_SILENCE_THRESHOLD,
        probability_threshold: float = VAD_PROBABILITY_THRESHOLD,
    ) -> None:
        """
        Initialize the gate.

        Args:
            scorer: Voice-activity scorer; None behaves as permanent silence
            target_chunk_size: Samples needed before the scorer is called
            silence_threshold: Consecutive silent windows that end speech
            probability_threshold: Probability above which a window is speech
        """
        self._scorer = scorer
        self.target_chunk_size = target_chunk_size
        self.silence_threshold = silence_threshold
        self.probability_threshold = probability_threshold

        self._speech_active = False
        self._silence_frames = 0
        self._pending = np.zeros(0, dtype=np.float32)
        self._last_probability = 0.0
        self._lock = threading.Lock()

        # Debug tracking
        self._speech_detections = 0
        self._total_chunks_processed = 0
        self._last_debug_log = time.time()
        self._debug_log_interval = 10.0

    @property
    def is_speech_active(self) -> bool:
        with self._lock:
            return self._speech_active

    @property
    def last_probability(self) -> float:
        with self._lock:
            return self._last_probability

    async def process(self, chunk: AudioChunk) -> VADEvent:
        """
        Queue a capture window and emit the resulting event.

        Args:
            chunk: Capture window of any size

        Returns:
            The VAD event for this window
        """
        with self._lock:
            self._pending = np.concatenate((self._pending, chunk.samples))
            to_score = None
            if len(self._pending) >= self.target_chunk_size:
                to_score = self._pending[: self.target_chunk_size]
                self._pending = self._pending[self.target_chunk_size:]

        if to_score is not None:
            probability = await self._score(to_score)
            with self._lock:
                self._last_probability = probability

        with self._lock:
            return self._evaluate(self._last_probability)

    def evaluate_probability(self, probability: float) -> VADEvent:
        """Apply one transition of the state machine for a probability."""
        with self._lock:
            self._last_probability = probability
            return self._evaluate(probability)

    async def _score(self, samples: np.ndarray) -> float:
        if self._scorer is None:
            return 0.0

        try:
            probability = float(await self._scorer.score(samples))
        except Exception as e:
            logger.error(f"❌ VAD scorer error, treating window as silence: {e}")
            return 0.0

        if not np.isfinite(probability):
            return 0.0
        return probability

    def _evaluate(self, probability: float) -> VADEvent:
        self._total_chunks_processed += 1
        is_speech = probability > self.probability_threshold

        if is_speech:
            self._speech_detections += 1
            self._silence_frames = 0
            if not self._speech_active:
                self._speech_active = True
                logger.debug(f"🗣️ Speech start (p={probability:.2f})")
                event = VADEvent.SPEECH_START
            else:
                event = VADEvent.SPEECH_CONTINUE
        elif self._speech_active:
            self._silence_frames += 1
            if self._silence_frames >= self.silence_threshold:
                self._speech_active = False
                self._silence_frames = 0
                logger.debug("🔇 Speech end")
                event = VADEvent.SPEECH_END
            else:
                event = VADEvent.SPEECH_CONTINUE
        else:
            event = VADEvent.SILENCE

        current_time = time.time()
        if current_time - self._last_debug_log >= self._debug_log_interval:
            speech_ratio = self._speech_detections / self._total_chunks_processed * 100
            logger.trace(f"🔊 VAD Stats: {self._speech_detections} speech windows in "
                         f"{self._total_chunks_processed} ({speech_ratio:.1f}% speech)")
            self._last_debug_log = current_time

        return event

    def reset(self) -> None:
        """Clear all state, including queued samples and the last probability."""
        with self._lock:
            self._speech_active = False
            self._silence_frames = 0
            self._pending = np.zeros(0, dtype=np.float32)
            self._last_probability = 0.0
