"""OpenAI chat completions provider implementation."""

from typing import Any, Dict, Optional, Tuple

from .base import LLMProvider
from .providers import ProviderTag


class OpenAIProvider(LLMProvider):
    """OpenAI provider. Also the base for OpenAI-compatible APIs."""

    tag = ProviderTag.OPENAI
    default_base_url = "https://api.openai.com/v1"

    def build_headers(self) -> Dict[str, str]:
        return {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }

    def endpoint(self, model: str) -> str:
        return "/chat/completions"

    def build_payload(self, model: str, prompt: str, temperature: float, max_tokens: int) -> Dict[str, Any]:
        return {
            "model": model,
            "messages": [{"role": "user", "content": prompt}],
            "temperature": temperature,
            "max_tokens": max_tokens,
        }

    def parse_response(self, data: Dict[str, Any]) -> Tuple[str, Dict[str, int], Optional[str]]:
        choice = data["choices"][0]
        content = (choice.get("message") or {}).get("content") or ""
        usage = data.get("usage") or {}
        prompt_tokens = usage.get("prompt_tokens", 0)
        completion_tokens = usage.get("completion_tokens", 0)
        return content, {
            "prompt_tokens": prompt_tokens,
            "completion_tokens": completion_tokens,
            "total_tokens": usage.get("total_tokens", prompt_tokens + completion_tokens),
        }, choice.get("finish_reason")
