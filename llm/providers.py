"""Provider catalogue.

Each provider is a member of ``ProviderTag``; everything that differs per
provider lives in one of the lookup tables below (plus the adapter class
registered in ``LLMFactory.PROVIDERS``). Adding a provider means adding
one entry to each table.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, List, Tuple


class ProviderTag(str, Enum):
    """Supported LLM vendors."""
    OPENAI = "openai"
    ANTHROPIC = "anthropic"
    GOOGLE = "google"
    DEEPSEEK = "deepseek"
    AZURE = "azure"

    @classmethod
    def parse(cls, value: "str | ProviderTag") -> "ProviderTag":
        """Coerce a provider name, raising ValueError for unknown ones."""
        try:
            return cls(value)
        except ValueError:
            raise ValueError(f"Unknown provider: {value}") from None


DEFAULT_PROVIDER = ProviderTag.OPENAI

# Checked in order; the first matching prefix wins.
MODEL_PREFIXES: Tuple[Tuple[str, ProviderTag], ...] = (
    ("gpt-", ProviderTag.OPENAI),
    ("claude-", ProviderTag.ANTHROPIC),
    ("gemini-", ProviderTag.GOOGLE),
    ("palm-", ProviderTag.GOOGLE),
    ("deepseek-", ProviderTag.DEEPSEEK),
)

# Azure deployments carry custom names, so they are matched by substring.
MODEL_SUBSTRINGS: Tuple[Tuple[str, ProviderTag], ...] = (
    ("azure", ProviderTag.AZURE),
)


@dataclass(frozen=True)
class KeyRule:
    """API key format check: a predicate plus the message shown on failure."""
    check: Callable[[str], bool]
    message: str


KEY_RULES: Dict[ProviderTag, KeyRule] = {
    ProviderTag.OPENAI: KeyRule(lambda k: k.startswith("sk-"), 'OpenAI API keys must start with "sk-"'),
    ProviderTag.ANTHROPIC: KeyRule(lambda k: k.startswith("sk-ant-"), 'Anthropic API keys must start with "sk-ant-"'),
    ProviderTag.GOOGLE: KeyRule(lambda k: k.startswith("AIza"), 'Google API keys must start with "AIza"'),
    ProviderTag.DEEPSEEK: KeyRule(lambda k: k.startswith("ds-"), 'DeepSeek API keys must start with "ds-"'),
    ProviderTag.AZURE: KeyRule(lambda k: len(k) >= 10, "Azure API key appears to be too short"),
}

# USD per 1K tokens
COST_PER_1K_TOKENS: Dict[ProviderTag, float] = {
    ProviderTag.OPENAI: 0.03,
    ProviderTag.ANTHROPIC: 0.015,
    ProviderTag.GOOGLE: 0.01,
    ProviderTag.DEEPSEEK: 0.001,
    ProviderTag.AZURE: 0.03,
}
DEFAULT_COST_PER_1K_TOKENS = 0.01

RECOMMENDED_MIN_PAIRS: Dict[ProviderTag, int] = {
    ProviderTag.OPENAI: 10,
    ProviderTag.ANTHROPIC: 20,
    ProviderTag.GOOGLE: 15,
    ProviderTag.DEEPSEEK: 10,
    ProviderTag.AZURE: 10,
}
DEFAULT_RECOMMENDED_MIN_PAIRS = 10

PROVIDER_MODELS: Dict[ProviderTag, List[str]] = {
    ProviderTag.OPENAI: ["gpt-4-turbo", "gpt-4", "gpt-3.5-turbo"],
    ProviderTag.ANTHROPIC: ["claude-3-opus", "claude-3-sonnet", "claude-3-haiku"],
    ProviderTag.GOOGLE: ["gemini-pro", "gemini-ultra", "palm-2"],
    ProviderTag.DEEPSEEK: ["deepseek-coder", "deepseek-chat"],
    ProviderTag.AZURE: ["azure-gpt-4", "azure-gpt-35-turbo"],
}

PROVIDER_INFO: Dict[ProviderTag, Dict[str, str]] = {
    ProviderTag.OPENAI: {"name": "OpenAI", "docs_url": "https://platform.openai.com/api-keys"},
    ProviderTag.ANTHROPIC: {"name": "Anthropic", "docs_url": "https://console.anthropic.com"},
    ProviderTag.GOOGLE: {"name": "Google Cloud", "docs_url": "https://console.cloud.google.com"},
    ProviderTag.DEEPSEEK: {"name": "DeepSeek", "docs_url": "https://platform.deepseek.com"},
    ProviderTag.AZURE: {"name": "Microsoft Azure", "docs_url": "https://portal.azure.com"},
}


@dataclass(frozen=True)
class ModelInfo:
    name: str
    context_window: int
    max_output_tokens: int
    supports_vision: bool = False
    supports_json: bool = False


MODEL_INFO: Dict[str, ModelInfo] = {
    "gpt-4-turbo": ModelInfo("GPT-4 Turbo", 128000, 4096, supports_vision=True, supports_json=True),
    "claude-3-opus": ModelInfo("Claude 3 Opus", 200000, 4096, supports_vision=True, supports_json=True),
    "deepseek-coder": ModelInfo("DeepSeek Coder", 16000, 4096, supports_json=True),
}


def provider_models(provider: ProviderTag) -> List[str]:
    return list(PROVIDER_MODELS.get(provider, []))


def get_model_info(model_id: str) -> ModelInfo:
    """Capabilities of a known model, or conservative defaults."""
    return MODEL_INFO.get(model_id, ModelInfo(name=model_id, context_window=8000, max_output_tokens=2048))


def recommended_minimum_pairs(provider: "str | ProviderTag") -> int:
    """Advisory number of training pairs a provider's fine-tuning expects."""
    try:
        return RECOMMENDED_MIN_PAIRS[ProviderTag(provider)]
    except ValueError:
        return DEFAULT_RECOMMENDED_MIN_PAIRS
