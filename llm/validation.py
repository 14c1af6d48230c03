"""Pre-flight checks for generation requests."""

from core.errors import ValidationError
from .base import GenerationRequest

MAX_PROMPT_CHARS = 100_000
MIN_TEMPERATURE = 0.0
MAX_TEMPERATURE = 2.0
MIN_MAX_TOKENS = 1
MAX_MAX_TOKENS = 4096


def validate_generation_request(request: GenerationRequest) -> None:
    """Raise ValidationError if the request cannot be dispatched."""
    if not request.prompt or not request.prompt.strip():
        raise ValidationError("Prompt cannot be empty")

    if len(request.prompt) > MAX_PROMPT_CHARS:
        raise ValidationError(f"Prompt is too long (max {MAX_PROMPT_CHARS:,} characters)")

    if not MIN_TEMPERATURE <= request.temperature <= MAX_TEMPERATURE:
        raise ValidationError(f"Temperature must be between {MIN_TEMPERATURE:g} and {MAX_TEMPERATURE:g}")

    if not MIN_MAX_TOKENS <= request.max_tokens <= MAX_MAX_TOKENS:
        raise ValidationError(f"Max tokens must be between {MIN_MAX_TOKENS} and {MAX_MAX_TOKENS}")
