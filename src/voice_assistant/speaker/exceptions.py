"""Custom exceptions for speaker identification and enrollment."""


class SpeakerError(Exception):
    """Base exception for speaker identification errors."""

    pass


class ModelNotLoadedError(SpeakerError):
    """Exception raised when the embedding model has not been loaded."""

    def __init__(self, message: str = "Speaker identification model is not loaded") -> None:
        super().__init__(message)


class InsufficientSamplesError(SpeakerError):
    """Exception raised when enrollment gets fewer recordings than required."""

    def __init__(self, required: int, provided: int) -> None:
        self.required = required
        self.provided = provided
        super().__init__(f"Insufficient audio samples: need {required}, got {provided}")


class EmbeddingExtractionError(SpeakerError):
    """Exception raised when no usable voice embedding could be extracted."""

    pass


class EmbeddingMismatchError(SpeakerError):
    """Exception raised when embeddings of different lengths are combined."""

    pass


class SpeakerNotFoundError(SpeakerError):
    """Exception raised when a speaker is not enrolled."""

    pass


class SpeakerStoreError(SpeakerError):
    """Exception raised for speaker persistence errors."""

    pass
