"""Request/response models and the abstract base class for LLM providers."""

from abc import ABC, abstractmethod
from typing import Any, Dict, Optional, Tuple

import httpx
from pydantic import BaseModel, ConfigDict, Field
import logging

from core.errors import GenerationError
from .providers import ProviderTag

logger = logging.getLogger(__name__)


class GenerationRequest(BaseModel):
    """Parameters of one generation call."""
    model_config = ConfigDict(protected_namespaces=())

    model_id: str
    prompt: str
    temperature: float = 0.7
    max_tokens: int = 1000
    context: Optional[str] = None
    system_prompt: Optional[str] = None


class GenerationResult(BaseModel):
    """Provider-independent result of a generation call."""
    content: str
    tokens_used: int = Field(default=0, ge=0)
    provider: ProviderTag
    model: str
    cost: float = Field(default=0.0, ge=0.0)
    finish_reason: Optional[str] = None


class StreamChunk(BaseModel):
    """Cumulative text delivered to a streaming callback."""
    content: str
    is_complete: bool = False


class LLMResponse(BaseModel):
    """Normalized reply of a single provider adapter."""
    content: str
    provider: str
    model: str
    usage: Dict[str, int] = {}
    finish_reason: Optional[str] = None
    metadata: Dict[str, Any] = {}

    @property
    def total_tokens(self) -> int:
        return self.usage.get("total_tokens", 0)


def upstream_error_message(data: Any) -> Optional[str]:
    """Pull the human-readable message out of a provider error payload."""
    if isinstance(data, list) and data:
        data = data[0]
    if not isinstance(data, dict):
        return None
    error = data.get("error")
    if isinstance(error, dict):
        return error.get("message")
    if isinstance(error, str):
        return error
    return data.get("message")


class LLMProvider(ABC):
    """Abstract base class for all LLM providers.

    Subclasses describe the wire format through ``endpoint``,
    ``build_headers``, ``build_payload`` and ``parse_response``; the HTTP
    exchange and error mapping live here.
    """

    tag: ProviderTag
    default_base_url: str = ""

    def __init__(self, api_key: str, config: Dict[str, Any]):
        self.config = config
        self.api_key = api_key
        self.provider_name = self.tag.value
        self.base_url = config.get("base_url") or self.default_base_url
        self.timeout = config.get("timeout", 60)
        self._client: Optional[httpx.AsyncClient] = None

    @property
    def client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                headers=self.build_headers(),
                timeout=self.timeout,
            )
        return self._client

    def build_headers(self) -> Dict[str, str]:
        return {"Content-Type": "application/json"}

    def query_params(self) -> Dict[str, str]:
        return {}

    def endpoint(self, model: str) -> str:
        """Path of the generation endpoint, relative to ``base_url``.

        Only used by the HTTP exchange in ``generate``; SDK-driven adapters
        that override ``generate`` leave it unimplemented.
        """
        raise NotImplementedError(f"{type(self).__name__} does not use an HTTP endpoint")

    @abstractmethod
    def build_payload(self, model: str, prompt: str, temperature: float, max_tokens: int) -> Dict[str, Any]:
        """Provider-specific JSON body."""

    @abstractmethod
    def parse_response(self, data: Dict[str, Any]) -> Tuple[str, Dict[str, int], Optional[str]]:
        """Extract (text, usage, finish_reason) from a provider JSON body."""

    async def generate(self, model: str, prompt: str, temperature: float, max_tokens: int) -> LLMResponse:
        """Send one prompt to the provider and normalize the reply."""
        payload = self.build_payload(model, prompt, temperature, max_tokens)

        try:
            response = await self.client.post(
                self.endpoint(model), json=payload, params=self.query_params() or None
            )
        except httpx.TimeoutException as e:
            logger.error(f"{self.provider_name} request timed out: {e}")
            raise GenerationError(
                f"{self.provider_name} request timed out after {self.timeout}s", self.provider_name
            ) from e
        except httpx.HTTPError as e:
            logger.error(f"{self.provider_name} request failed: {e}")
            raise GenerationError(f"{self.provider_name} request failed: {e}", self.provider_name) from e

        try:
            data = response.json()
        except ValueError:
            data = None

        if response.is_error:
            error_msg = upstream_error_message(data) or f"HTTP {response.status_code}: {response.text}"
            logger.error(f"{self.provider_name} API error: {error_msg}")
            raise GenerationError(error_msg, self.provider_name)

        try:
            content, usage, finish_reason = self.parse_response(data)
        except (KeyError, IndexError, TypeError) as e:
            logger.error(f"Unexpected {self.provider_name} response shape: {e}")
            raise GenerationError(
                f"Malformed response from {self.provider_name}: {e}", self.provider_name
            ) from e

        return LLMResponse(
            content=content,
            provider=self.provider_name,
            model=model,
            usage=usage,
            finish_reason=finish_reason,
            metadata={"request_id": response.headers.get("x-request-id") or response.headers.get("request-id")},
        )

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.aclose()
