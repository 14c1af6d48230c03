"""Factory for creating LLM provider instances."""

from typing import Any, Dict, Optional, Type
import logging

from .base import LLMProvider
from .azure import AzureProvider
from .claude import ClaudeProvider
from .deepseek import DeepSeekProvider
from .gemini import GeminiProvider
from .openai import OpenAIProvider
from .providers import ProviderTag

logger = logging.getLogger(__name__)


class LLMFactory:
    """Builds provider adapters from the ``providers`` section of the config.

        factory = LLMFactory(load_config())
        provider = factory.create_provider("anthropic", api_key="sk-ant-...")
    """

    PROVIDERS: Dict[ProviderTag, Type[LLMProvider]] = {
        ProviderTag.OPENAI: OpenAIProvider,
        ProviderTag.ANTHROPIC: ClaudeProvider,
        ProviderTag.GOOGLE: GeminiProvider,
        ProviderTag.DEEPSEEK: DeepSeekProvider,
        ProviderTag.AZURE: AzureProvider,
    }

    def __init__(self, config: Optional[Dict[str, Any]] = None):
        self.config = config or {}

    def provider_config(self, provider: ProviderTag) -> Dict[str, Any]:
        """Global ``llm`` settings overlaid with the provider's own section."""
        global_config = self.config.get("llm", {})
        provider_config = self.config.get("providers", {}).get(provider.value, {}) or {}
        return {**global_config, **provider_config}

    def create_provider(self, provider: "str | ProviderTag", api_key: str) -> LLMProvider:
        try:
            tag = ProviderTag.parse(provider)
        except ValueError:
            available = ", ".join(p.value for p in self.PROVIDERS)
            raise ValueError(f"Unknown provider: {provider}. Available: {available}") from None

        provider_class = self.PROVIDERS[tag]
        logger.debug(f"Creating {provider_class.__name__} for {tag.value}")
        return provider_class(api_key, self.provider_config(tag))
