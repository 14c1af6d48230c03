"""Core shared utilities for trainforge."""

from core.config import DEFAULT_CONFIG, DEFAULT_CONFIG_NAME, find_project_root, load_config, resolve_config_path
from core.errors import (
    ConfigError,
    ExtractionError,
    GenerationError,
    InvalidTransitionError,
    NoCredentialError,
    NotFoundError,
    TrainforgeError,
    ValidationError,
)

__all__ = [
    "DEFAULT_CONFIG",
    "DEFAULT_CONFIG_NAME",
    "find_project_root",
    "load_config",
    "resolve_config_path",
    "TrainforgeError",
    "ConfigError",
    "ValidationError",
    "InvalidTransitionError",
    "NoCredentialError",
    "GenerationError",
    "NotFoundError",
    "ExtractionError",
]
