"""LLM provider adapters and request routing."""

from .base import GenerationRequest, GenerationResult, LLMProvider, LLMResponse, StreamChunk
from .credentials import CredentialStore, validate_key_format
from .factory import LLMFactory
from .azure import AzureProvider
from .claude import ClaudeProvider
from .deepseek import DeepSeekProvider
from .gemini import GeminiProvider
from .openai import OpenAIProvider
from .pricing import estimate_cost
from .providers import ProviderTag, get_model_info, provider_models, recommended_minimum_pairs
from .router import ProviderRouter, build_full_prompt, resolve_provider
from .validation import validate_generation_request

__all__ = [
    "GenerationRequest",
    "GenerationResult",
    "LLMProvider",
    "LLMResponse",
    "StreamChunk",
    "CredentialStore",
    "validate_key_format",
    "LLMFactory",
    "AzureProvider",
    "ClaudeProvider",
    "DeepSeekProvider",
    "GeminiProvider",
    "OpenAIProvider",
    "estimate_cost",
    "ProviderTag",
    "get_model_info",
    "provider_models",
    "recommended_minimum_pairs",
    "ProviderRouter",
    "build_full_prompt",
    "resolve_provider",
    "validate_generation_request",
]
