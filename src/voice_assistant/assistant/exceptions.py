"""Custom exceptions for the assistant pipeline."""


class AssistantError(Exception):
    """Base exception for assistant errors."""

    pass


class LLMError(AssistantError):
    """Exception raised for language model errors."""

    pass


class LLMNotConfiguredError(LLMError):
    """Exception raised when no language model is configured."""

    pass


class LLMConnectionError(LLMError):
    """Exception raised when the language model service cannot be reached."""

    pass


class LLMTimeoutError(LLMError):
    """Exception raised when the language model does not answer in time."""

    pass


class LLMResponseError(LLMError):
    """Exception raised when the language model returns an error or unusable response."""

    pass
