"""Routes generation requests to the provider that serves the model."""

import asyncio
import inspect
import logging
from typing import Any, Awaitable, Callable, Optional, Union

from core.errors import GenerationError, NoCredentialError
from .base import GenerationRequest, GenerationResult, StreamChunk
from .credentials import CredentialStore
from .factory import LLMFactory
from .pricing import estimate_cost
from .providers import DEFAULT_PROVIDER, MODEL_PREFIXES, MODEL_SUBSTRINGS, ProviderTag
from .validation import validate_generation_request

logger = logging.getLogger(__name__)

ChunkCallback = Callable[[StreamChunk], Union[None, Awaitable[None]]]


def resolve_provider(model_id: str) -> ProviderTag:
    """Provider serving ``model_id``, judged from its name.

    Unrecognized models fall back to the default provider with a warning.
    """
    for prefix, provider in MODEL_PREFIXES:
        if model_id.startswith(prefix):
            return provider
    for fragment, provider in MODEL_SUBSTRINGS:
        if fragment in model_id:
            return provider

    logger.warning(f"Unknown model prefix for {model_id}, defaulting to {DEFAULT_PROVIDER.value}")
    return DEFAULT_PROVIDER


def build_full_prompt(request: GenerationRequest) -> str:
    """System instruction, then context, then the prompt itself."""
    full_prompt = ""
    if request.system_prompt:
        full_prompt += f"System: {request.system_prompt}\n\n"
    if request.context:
        full_prompt += f"Context:\n{request.context}\n\n"
    return full_prompt + request.prompt


class ProviderRouter:
    """Resolves provider and credential for a request and dispatches it."""

    def __init__(
        self,
        credentials: CredentialStore,
        factory: LLMFactory,
        timeout: float = 60.0,
        stream_delay: float = 0.05,
    ):
        self.credentials = credentials
        self.factory = factory
        self.timeout = timeout
        self.stream_delay = stream_delay

    resolve_provider = staticmethod(resolve_provider)

    async def generate(self, request: GenerationRequest) -> GenerationResult:
        """Run one generation call. No retries: the caller decides."""
        validate_generation_request(request)

        provider = resolve_provider(request.model_id)
        credential = self.credentials.get(provider)
        if credential is None:
            raise NoCredentialError(provider.value)

        prompt = build_full_prompt(request)
        adapter = self.factory.create_provider(provider, credential.api_key)

        async with adapter:
            try:
                response = await asyncio.wait_for(
                    adapter.generate(request.model_id, prompt, request.temperature, request.max_tokens),
                    timeout=self.timeout,
                )
            except asyncio.TimeoutError as e:
                logger.error(f"{provider.value} generation timed out after {self.timeout}s")
                raise GenerationError(
                    f"Generation timed out after {self.timeout}s", provider.value
                ) from e

        tokens = max(response.total_tokens, 0)
        logger.info(f"Generated {tokens} tokens with {provider.value}/{request.model_id}")
        return GenerationResult(
            content=response.content,
            tokens_used=tokens,
            provider=provider,
            model=request.model_id,
            cost=estimate_cost(provider, tokens),
            finish_reason=response.finish_reason,
        )

    async def stream_generate(
        self,
        request: GenerationRequest,
        on_chunk: ChunkCallback,
    ) -> GenerationResult:
        """Generate, then replay the text word by word to ``on_chunk``.

        Each chunk holds the cumulative text so far; only the last one is
        marked complete.
        """
        result = await self.generate(request)

        words = result.content.split(" ")
        for i in range(len(words)):
            chunk = StreamChunk(content=" ".join(words[: i + 1]), is_complete=i == len(words) - 1)
            outcome: Optional[Any] = on_chunk(chunk)
            if inspect.isawaitable(outcome):
                await outcome
            if not chunk.is_complete and self.stream_delay:
                await asyncio.sleep(self.stream_delay)

        return result
