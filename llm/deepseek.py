"""DeepSeek LLM provider (OpenAI-compatible API)."""

from .openai import OpenAIProvider
from .providers import ProviderTag


class DeepSeekProvider(OpenAIProvider):
    """DeepSeek provider using the OpenAI-compatible chat completions API."""

    tag = ProviderTag.DEEPSEEK
    default_base_url = "https://api.deepseek.com/v1"
