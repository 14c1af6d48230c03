"""Application-facing facade over credentials, generation and training data."""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from core.config import load_config
from llm.base import GenerationRequest, GenerationResult
from llm.credentials import CredentialStore
from llm.factory import LLMFactory
from llm.providers import ProviderTag
from llm.router import ChunkCallback, ProviderRouter
from storage.database import Database
from storage.encryption import SecretCipher
from storage.models import Credential, CredentialStatus, TrainingPair, TrainingSession
from storage.repository import Repository
from .exporter import DatasetExporter, ExportOptions
from .refinery import DataRefinery
from .schemas import PairInput, SessionStats
from .store import TrainingStore
from .validator import PairValidationReport, validate_training_pair

logger = logging.getLogger(__name__)


class TrainerService:
    """Wires the components together for one owner.

    Built once at startup and shared by the CLI and HTTP layers.
    """

    def __init__(self, config: Dict[str, Any], db: Optional[Database] = None):
        self.config = config
        self.db = db or Database(config["database"]["path"])
        self.repo = Repository(self.db, config["owner_id"])

        cipher = SecretCipher.from_env(config.get("security", {}).get("encryption_key_env", ""))
        self.credentials = CredentialStore(self.repo, cipher)
        self.factory = LLMFactory(config)
        self.router = ProviderRouter(
            self.credentials,
            self.factory,
            timeout=float(config.get("llm", {}).get("timeout", 60)),
        )
        self.training = TrainingStore(self.repo)
        self.exporter = DatasetExporter(self.training)
        self.refinery = DataRefinery(self.repo)

    @classmethod
    def from_config(cls, config_path: Optional[str] = None) -> "TrainerService":
        return cls(load_config(config_path))

    def close(self) -> None:
        self.db.close()

    # ── Generation ────────────────────────────────────────────────────

    def build_request(self, model_id: str, prompt: str, **overrides: Any) -> GenerationRequest:
        """A request carrying the configured default temperature and max tokens."""
        llm_config = self.config.get("llm", {})
        params = {
            "temperature": llm_config.get("temperature", 0.7),
            "max_tokens": llm_config.get("max_tokens", 1000),
        }
        params.update({k: v for k, v in overrides.items() if v is not None})
        return GenerationRequest(model_id=model_id, prompt=prompt, **params)

    async def generate_content(self, request: GenerationRequest) -> GenerationResult:
        return await self.router.generate(request)

    async def stream_content(self, request: GenerationRequest, on_chunk: ChunkCallback) -> GenerationResult:
        return await self.router.stream_generate(request, on_chunk)

    # ── API keys ──────────────────────────────────────────────────────

    def save_api_key(self, provider: str, api_key: str) -> Credential:
        return self.credentials.save(provider, api_key)

    def get_api_key(self, provider: str) -> Optional[str]:
        credential = self.credentials.get(provider)
        return credential.api_key if credential else None

    def delete_api_key(self, provider: str) -> None:
        self.credentials.delete(provider)

    def list_keys(self) -> List[CredentialStatus]:
        return self.credentials.list_all()

    def has_active_key(self, provider: str) -> bool:
        return self.credentials.has_active(provider)

    def active_providers(self) -> List[ProviderTag]:
        return self.credentials.active_providers()

    # ── Training data ─────────────────────────────────────────────────

    def create_session(self, project_id: str, model_id: Optional[str] = None) -> TrainingSession:
        return self.training.create_session(project_id, model_id)

    def add_training_pair(self, session_id: str, pair: PairInput) -> TrainingPair:
        return self.training.add_pair(session_id, pair)

    def add_generation(
        self,
        session_id: str,
        request: GenerationRequest,
        result: GenerationResult,
        quality_score: Optional[int] = None,
    ) -> TrainingPair:
        """Keep a generated response as a training pair."""
        return self.training.add_pair(session_id, PairInput(
            prompt=request.prompt,
            response=result.content,
            quality_score=quality_score,
            tokens_used=result.tokens_used,
        ))

    def rate(self, pair_id: str, score: int) -> TrainingPair:
        return self.training.update_quality_score(pair_id, score)

    def get_stats(self, session_id: str) -> SessionStats:
        return self.training.get_stats(session_id)

    def export_training_data(self, session_id: str, options: Optional[ExportOptions] = None) -> str:
        return self.exporter.export(session_id, options)

    def validate_training_pair(self, pair: PairInput) -> PairValidationReport:
        return validate_training_pair(pair)
