"""Azure OpenAI provider implementation."""

import os
from typing import Any, Dict

from core.errors import ConfigError
from .openai import OpenAIProvider
from .providers import ProviderTag


class AzureProvider(OpenAIProvider):
    """Azure OpenAI provider.

    Azure hosts models behind a per-resource endpoint; the model id is used
    as the deployment name and the key travels in the ``api-key`` header.
    """

    tag = ProviderTag.AZURE

    def __init__(self, api_key: str, config: Dict[str, Any]):
        super().__init__(api_key, config)
        endpoint = config.get("endpoint") or os.getenv(config.get("endpoint_env", "AZURE_OPENAI_ENDPOINT"), "")
        if not endpoint:
            raise ConfigError(
                "Azure endpoint is not configured. Set providers.azure.endpoint "
                "or the AZURE_OPENAI_ENDPOINT environment variable."
            )
        self.base_url = endpoint.rstrip("/")
        self.api_version = config.get("api_version", "2024-02-01")

    def build_headers(self) -> Dict[str, str]:
        return {
            "api-key": self.api_key,
            "Content-Type": "application/json",
        }

    def query_params(self) -> Dict[str, str]:
        return {"api-version": self.api_version}

    def endpoint(self, model: str) -> str:
        return f"/openai/deployments/{model}/chat/completions"
