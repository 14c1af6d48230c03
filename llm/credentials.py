"""Per-owner storage of provider API keys."""

import logging
from datetime import datetime
from typing import List, Optional

from core.errors import ValidationError
from storage.encryption import SecretCipher
from storage.models import Credential, CredentialStatus
from storage.repository import Repository
from .providers import KEY_RULES, ProviderTag

logger = logging.getLogger(__name__)


def _parse_provider(provider: "str | ProviderTag") -> ProviderTag:
    try:
        return ProviderTag.parse(provider)
    except ValueError as e:
        raise ValidationError(str(e)) from e


def validate_key_format(provider: "str | ProviderTag", api_key: str) -> None:
    """Raise ValidationError when ``api_key`` cannot belong to ``provider``."""
    tag = _parse_provider(provider)
    if not api_key or not api_key.strip():
        raise ValidationError("API key cannot be empty")
    rule = KEY_RULES[tag]
    if not rule.check(api_key):
        raise ValidationError(rule.message)


class CredentialStore:
    """Saves, fetches and removes the current owner's API keys.

    At most one key is kept per provider; saving again replaces it.
    """

    TABLE = "api_keys"

    def __init__(self, repo: Repository, cipher: Optional[SecretCipher] = None):
        self.repo = repo
        self.cipher = cipher

    def _to_credential(self, row) -> Credential:
        credential = Credential.from_row(row)
        if self.cipher is not None:
            credential.api_key = self.cipher.decrypt(credential.api_key)
        return credential

    def save(self, provider: "str | ProviderTag", api_key: str) -> Credential:
        """Validate and store a key, activating it."""
        tag = _parse_provider(provider)
        api_key = (api_key or "").strip()
        validate_key_format(tag, api_key)

        stored_key = self.cipher.encrypt(api_key) if self.cipher is not None else api_key
        row = self.repo.upsert(
            self.TABLE,
            {"provider": tag.value},
            {"api_key": stored_key, "is_active": True, "updated_at": datetime.utcnow()},
        )
        logger.info(f"Saved API key for {tag.value}")
        return self._to_credential(row)

    def get(self, provider: "str | ProviderTag") -> Optional[Credential]:
        """Return the active key for a provider, or None."""
        tag = _parse_provider(provider)
        row = self.repo.get(self.TABLE, {"provider": tag.value})
        if not row or not row["is_active"]:
            return None
        return self._to_credential(row)

    def delete(self, provider: "str | ProviderTag") -> None:
        tag = _parse_provider(provider)
        if self.repo.delete_where(self.TABLE, {"provider": tag.value}):
            logger.info(f"Deleted API key for {tag.value}")

    def list_all(self) -> List[CredentialStatus]:
        """Status of every stored key. Secrets are not included."""
        return [
            CredentialStatus(
                provider=row["provider"],
                has_key=True,
                is_active=bool(row["is_active"]),
                last_updated=row["updated_at"],
            )
            for row in self.repo.list(self.TABLE, order_by="provider")
        ]

    def has_active(self, provider: "str | ProviderTag") -> bool:
        return self.get(provider) is not None

    def active_providers(self) -> List[ProviderTag]:
        return [ProviderTag(status.provider) for status in self.list_all() if status.is_active]

    def test_key(self, provider: "str | ProviderTag") -> bool:
        """Re-check the stored key's format. False when there is no usable key."""
        credential = self.get(provider)
        if credential is None:
            return False
        try:
            validate_key_format(credential.provider, credential.api_key)
        except ValidationError as e:
            logger.warning(f"Stored API key for {credential.provider} failed validation: {e}")
            return False
        return True
