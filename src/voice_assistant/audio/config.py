"""Configuration constants for audio segmentation."""

# Audio Configuration
DEFAULT_SAMPLE_RATE = 16000  # Hz, all collaborators consume 16 kHz mono float32
DEFAULT_BUFFER_SECONDS = 15  # seconds of rolling audio kept by SegmentBuffer
SPEECH_LOOKBACK_SECONDS = 0.3  # pre-roll included before the detector fired

# Voice Activity Gate
VAD_TARGET_CHUNK_SIZE = 4096  # samples scored at once (~256 ms at 16 kHz)
VAD_PROBABILITY_THRESHOLD = 0.5  # probability strictly above this is speech
VAD_SILENCE_THRESHOLD = 10  # consecutive silent windows (~300 ms at 30 ms) before speech end

# WebRTC scorer
WEBRTC_AGGRESSIVENESS = 2  # 0-3, higher = more aggressive filtering
WEBRTC_FRAME_DURATION = 30  # milliseconds
WEBRTC_SUPPORTED_SAMPLE_RATES = [8000, 16000, 32000, 48000]  # Hz
WEBRTC_SUPPORTED_FRAME_DURATIONS = [10, 20, 30]  # milliseconds

# Transcription
DEFAULT_WHISPER_MODEL = "small"
DEFAULT_WHISPER_DEVICE = "cpu"
DEFAULT_WHISPER_COMPUTE_TYPE = "int8"
DEFAULT_TRANSCRIPTION_LANGUAGE = "en"
CONFIDENCE_LOGPROB_MIN = -2.0  # Minimum expected avg_logprob value
CONFIDENCE_LOGPROB_MAX = -0.1  # Maximum expected avg_logprob value
