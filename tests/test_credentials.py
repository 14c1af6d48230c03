"""Tests for the credential store."""

import pytest
from cryptography.fernet import Fernet

from core.errors import ValidationError
from llm.credentials import CredentialStore, validate_key_format
from llm.providers import ProviderTag
from storage.database import Database
from storage.encryption import SecretCipher
from storage.repository import Repository


@pytest.fixture
def db(tmp_path):
    database = Database(str(tmp_path / "keys.duckdb"))
    yield database
    database.close()


@pytest.fixture
def store(db):
    return CredentialStore(Repository(db, "user-1"))


class TestValidateKeyFormat:
    def test_accepts_valid_keys(self):
        validate_key_format("openai", "sk-abc123")
        validate_key_format("anthropic", "sk-ant-abc")
        validate_key_format("google", "AIzaXYZ")
        validate_key_format("deepseek", "ds-abc")
        validate_key_format("azure", "a" * 32)

    def test_rejects_wrong_prefix(self):
        with pytest.raises(ValidationError, match='must start with "sk-ant-"'):
            validate_key_format("anthropic", "sk-abc")

    def test_rejects_short_azure_key(self):
        with pytest.raises(ValidationError, match="too short"):
            validate_key_format("azure", "short")

    def test_rejects_empty_key(self):
        with pytest.raises(ValidationError, match="cannot be empty"):
            validate_key_format("openai", "   ")

    def test_rejects_unknown_provider(self):
        with pytest.raises(ValidationError, match="Unknown provider"):
            validate_key_format("mistral", "sk-abc")


class TestCredentialStore:
    def test_save_then_delete(self, store):
        store.save("openai", "sk-abc123")
        assert store.has_active("openai")
        assert store.get("openai").api_key == "sk-abc123"

        store.delete("openai")
        assert not store.has_active("openai")
        assert store.get("openai") is None

    def test_save_trims_whitespace(self, store):
        store.save("openai", "  sk-abc123\n")
        assert store.get("openai").api_key == "sk-abc123"

    def test_resave_replaces_existing_key(self, store):
        store.save("openai", "sk-first")
        store.save("openai", "sk-second")
        assert store.get("openai").api_key == "sk-second"
        assert len(store.list_all()) == 1

    def test_rejected_save_leaves_state_unchanged(self, store):
        store.save("anthropic", "sk-ant-good")
        with pytest.raises(ValidationError):
            store.save("anthropic", "sk-bad")
        assert store.get("anthropic").api_key == "sk-ant-good"

        with pytest.raises(ValidationError):
            store.save("google", "wrong")
        assert store.get("google") is None

    def test_delete_is_idempotent(self, store):
        store.delete("deepseek")
        store.delete("deepseek")
        assert not store.has_active("deepseek")

    def test_keys_are_per_owner(self, db, store):
        store.save("openai", "sk-abc123")
        other = CredentialStore(Repository(db, "user-2"))
        assert other.get("openai") is None
        assert other.list_all() == []

    def test_list_all_hides_secrets(self, store):
        store.save("openai", "sk-abc123")
        store.save("anthropic", "sk-ant-abc")

        statuses = store.list_all()
        assert [s.provider for s in statuses] == ["anthropic", "openai"]
        for status in statuses:
            assert status.has_key and status.is_active
            assert status.last_updated is not None
            assert "sk-" not in str(status.to_dict())

    def test_active_providers(self, store):
        store.save("google", "AIzaABC")
        store.save("openai", "sk-abc")
        assert store.active_providers() == [ProviderTag.GOOGLE, ProviderTag.OPENAI]

    def test_test_key(self, store):
        assert store.test_key("openai") is False
        store.save("openai", "sk-abc123")
        assert store.test_key("openai") is True


class TestEncryptedCredentialStore:
    def test_secret_is_encrypted_at_rest(self, db):
        repo = Repository(db, "user-1")
        store = CredentialStore(repo, SecretCipher(Fernet.generate_key().decode()))

        store.save("openai", "sk-abc123")

        raw = repo.get("api_keys", {"provider": "openai"})
        assert raw["api_key"] != "sk-abc123"
        assert store.get("openai").api_key == "sk-abc123"
        assert store.test_key("openai") is True
