"""Google Gemini LLM provider implementation."""

import google.genai as genai
from google.genai import errors as genai_errors
from typing import Any, Dict, Optional, Tuple
import httpx
import logging

from core.errors import GenerationError
from .base import LLMProvider, LLMResponse
from .providers import ProviderTag

logger = logging.getLogger(__name__)


class GeminiProvider(LLMProvider):
    """Google Gemini LLM provider, driven through the google-genai SDK."""

    tag = ProviderTag.GOOGLE

    def __init__(self, api_key: str, config: Dict[str, Any]):
        super().__init__(api_key, config)
        self._genai_client: Optional[genai.Client] = None

    @property
    def genai_client(self) -> genai.Client:
        if self._genai_client is None:
            self._genai_client = genai.Client(
                api_key=self.api_key,
                http_options=genai.types.HttpOptions(timeout=int(self.timeout * 1000)),
            )
        return self._genai_client

    def build_payload(self, model: str, prompt: str, temperature: float, max_tokens: int) -> Dict[str, Any]:
        return {
            "model": model,
            "contents": prompt,
            "config": genai.types.GenerateContentConfig(
                temperature=temperature,
                max_output_tokens=max_tokens,
            ),
        }

    def parse_response(self, data: Any) -> Tuple[str, Dict[str, int], Optional[str]]:
        content = data.text or ""

        usage: Dict[str, int] = {}
        if data.usage_metadata:
            prompt_tokens = data.usage_metadata.prompt_token_count or 0
            completion_tokens = data.usage_metadata.candidates_token_count or 0
            usage = {
                "prompt_tokens": prompt_tokens,
                "completion_tokens": completion_tokens,
                "total_tokens": data.usage_metadata.total_token_count or prompt_tokens + completion_tokens,
            }

        finish_reason = None
        if data.candidates:
            reason = data.candidates[0].finish_reason
            finish_reason = getattr(reason, "value", reason)

        return content, usage, finish_reason

    async def aclose(self) -> None:
        if self._genai_client is not None:
            await self._genai_client.aio.aclose()
            self._genai_client = None
        await super().aclose()

    async def generate(self, model: str, prompt: str, temperature: float, max_tokens: int) -> LLMResponse:
        """Generate response using the Gemini API."""
        payload = self.build_payload(model, prompt, temperature, max_tokens)

        try:
            response = await self.genai_client.aio.models.generate_content(**payload)
        except genai_errors.APIError as e:
            error_msg = e.message or str(e)
            logger.error(f"Gemini API error: {error_msg}")
            raise GenerationError(error_msg, self.provider_name) from e
        except httpx.TimeoutException as e:
            logger.error(f"Gemini request timed out: {e}")
            raise GenerationError(
                f"{self.provider_name} request timed out after {self.timeout}s", self.provider_name
            ) from e
        except httpx.HTTPError as e:
            logger.error(f"Gemini request failed: {e}")
            raise GenerationError(f"{self.provider_name} request failed: {e}", self.provider_name) from e

        content, usage, finish_reason = self.parse_response(response)
        return LLMResponse(
            content=content,
            provider=self.provider_name,
            model=model,
            usage=usage,
            finish_reason=finish_reason,
        )
