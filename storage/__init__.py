"""Storage layer for trainforge credentials, sessions and training pairs."""

from .database import Database
from .encryption import SecretCipher
from .models import (
    Credential,
    CredentialStatus,
    ProcessingStatus,
    SessionStatus,
    TrainingPair,
    TrainingSession,
    UploadedFile,
)
from .repository import Repository

__all__ = [
    "Database",
    "SecretCipher",
    "Credential",
    "CredentialStatus",
    "ProcessingStatus",
    "SessionStatus",
    "TrainingPair",
    "TrainingSession",
    "UploadedFile",
    "Repository",
]
