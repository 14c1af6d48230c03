"""Domain errors used by trainforge services."""

from typing import Optional


class TrainforgeError(Exception):
    """Base exception for user-facing trainforge errors."""

    exit_code = 1


class ConfigError(TrainforgeError):
    """Raised when configuration cannot be located or parsed."""

    exit_code = 2


class ValidationError(TrainforgeError):
    """Raised when caller-supplied input violates a stated constraint."""


class InvalidTransitionError(ValidationError):
    """Raised when a training session is moved backwards in its lifecycle."""


class NoCredentialError(TrainforgeError):
    """Raised when a provider has no active API key for the current owner."""

    def __init__(self, provider: str):
        self.provider = provider
        super().__init__(
            f"No active API key found for {provider}. Please add your key in Settings."
        )


class GenerationError(TrainforgeError):
    """Raised when an upstream provider call fails."""

    def __init__(self, message: str, provider: Optional[str] = None):
        self.provider = provider
        super().__init__(message)


class NotFoundError(TrainforgeError):
    """Raised when a referenced session, pair or file does not exist."""


class ExtractionError(TrainforgeError):
    """Raised when text cannot be extracted from an uploaded document."""
