"""Anthropic Claude LLM provider implementation."""

from typing import Any, Dict, Optional, Tuple

from .base import LLMProvider
from .providers import ProviderTag


class ClaudeProvider(LLMProvider):
    """Anthropic Claude LLM provider."""

    tag = ProviderTag.ANTHROPIC
    default_base_url = "https://api.anthropic.com"

    def build_headers(self) -> Dict[str, str]:
        return {
            "x-api-key": self.api_key,
            "Content-Type": "application/json",
            "anthropic-version": self.config.get("api_version", "2023-06-01"),
        }

    def endpoint(self, model: str) -> str:
        return "/v1/messages"

    def build_payload(self, model: str, prompt: str, temperature: float, max_tokens: int) -> Dict[str, Any]:
        return {
            "model": model,
            "messages": [{"role": "user", "content": prompt}],
            "max_tokens": max_tokens,
            "temperature": temperature,
        }

    def parse_response(self, data: Dict[str, Any]) -> Tuple[str, Dict[str, int], Optional[str]]:
        blocks = data.get("content") or []
        content = "".join(block.get("text", "") for block in blocks if block.get("type", "text") == "text")
        usage = data.get("usage") or {}
        input_tokens = usage.get("input_tokens", 0)
        output_tokens = usage.get("output_tokens", 0)
        return content, {
            "prompt_tokens": input_tokens,
            "completion_tokens": output_tokens,
            "total_tokens": input_tokens + output_tokens,
        }, data.get("stop_reason")
