"""Custom exceptions for audio segmentation and transcription."""


class AudioError(Exception):
    """Base exception for audio pipeline errors."""

    pass


class ScorerUnavailableError(AudioError):
    """Exception raised when the voice-activity scorer cannot be used."""

    pass


class TranscriptionError(AudioError):
    """Exception raised for transcription related errors."""

    pass
