"""Tests for the storage layer."""

import pytest
from cryptography.fernet import Fernet

from core.errors import ConfigError
from storage.database import Database
from storage.encryption import SecretCipher
from storage.repository import Repository


@pytest.fixture
def db(tmp_path):
    """Create a temporary database for testing."""
    db_path = str(tmp_path / "test.duckdb")
    database = Database(db_path)
    yield database
    database.close()


@pytest.fixture
def repo(db):
    return Repository(db, "user-1")


class TestDatabase:
    def test_schema_creation(self, db):
        tables = db.fetchall("SHOW TABLES")
        table_names = {t["name"] for t in tables}
        assert "api_keys" in table_names
        assert "training_sessions" in table_names
        assert "training_results" in table_names
        assert "uploaded_files" in table_names


class TestRepository:
    def test_insert_and_get(self, repo):
        row = repo.insert("training_sessions", {"project_id": "proj-1", "status": "pending"})
        assert row["id"]
        assert row["owner_id"] == "user-1"

        fetched = repo.get_by_id("training_sessions", row["id"])
        assert fetched["project_id"] == "proj-1"
        assert fetched["created_at"] is not None

    def test_reads_are_owner_scoped(self, db, repo):
        row = repo.insert("training_sessions", {"project_id": "proj-1", "status": "pending"})
        other = Repository(db, "user-2")

        assert other.get_by_id("training_sessions", row["id"]) is None
        assert other.list("training_sessions") == []
        assert other.delete("training_sessions", row["id"]) is False
        assert other.update("training_sessions", row["id"], {"status": "ready"}) is None
        assert repo.get_by_id("training_sessions", row["id"])["status"] == "pending"

    def test_owner_id_cannot_be_spoofed(self, repo):
        row = repo.insert("training_sessions", {"project_id": "p", "status": "pending", "owner_id": "user-9"})
        assert row["owner_id"] == "user-1"

    def test_update(self, repo):
        row = repo.insert("training_sessions", {"project_id": "p", "status": "pending"})
        updated = repo.update("training_sessions", row["id"], {"status": "running", "progress": 50.0})
        assert updated["status"] == "running"
        assert updated["progress"] == 50.0

    def test_upsert_replaces_matching_record(self, repo):
        first = repo.upsert("api_keys", {"provider": "openai"}, {"api_key": "sk-one", "is_active": True})
        second = repo.upsert("api_keys", {"provider": "openai"}, {"api_key": "sk-two", "is_active": True})

        assert first["id"] == second["id"]
        assert repo.count("api_keys") == 1
        assert repo.get("api_keys", {"provider": "openai"})["api_key"] == "sk-two"

    def test_list_orders_results_by_insertion(self, repo):
        for i in range(5):
            repo.insert("training_results", {
                "session_id": "s1",
                "input_text": f"prompt {i}",
                "output_text": f"response {i}",
            })
        rows = repo.list("training_results", {"session_id": "s1"})
        assert [r["input_text"] for r in rows] == [f"prompt {i}" for i in range(5)]

    def test_delete_where_returns_count(self, repo):
        for session in ("s1", "s1", "s2"):
            repo.insert("training_results", {"session_id": session, "input_text": "p", "output_text": "r"})

        assert repo.delete_where("training_results", {"session_id": "s1"}) == 2
        assert repo.delete_where("training_results", {"session_id": "s1"}) == 0
        assert repo.count("training_results") == 1

    def test_unknown_table_or_column(self, repo):
        with pytest.raises(ValueError, match="Unknown table"):
            repo.list("projects")
        with pytest.raises(ValueError, match="Unknown columns"):
            repo.get("api_keys", {"secret": "x"})


class TestSecretCipher:
    def test_round_trip(self):
        cipher = SecretCipher(Fernet.generate_key().decode())
        token = cipher.encrypt("sk-abc123")
        assert token != "sk-abc123"
        assert cipher.decrypt(token) == "sk-abc123"

    def test_wrong_key(self):
        token = SecretCipher(Fernet.generate_key().decode()).encrypt("sk-abc123")
        with pytest.raises(ConfigError):
            SecretCipher(Fernet.generate_key().decode()).decrypt(token)

    def test_invalid_key(self):
        with pytest.raises(ConfigError, match="Invalid encryption key"):
            SecretCipher("not-a-fernet-key")

    def test_from_env(self, monkeypatch):
        monkeypatch.delenv("TF_TEST_KEY", raising=False)
        assert SecretCipher.from_env("TF_TEST_KEY") is None

        monkeypatch.setenv("TF_TEST_KEY", Fernet.generate_key().decode())
        assert isinstance(SecretCipher.from_env("TF_TEST_KEY"), SecretCipher)
