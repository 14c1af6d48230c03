"""Tests for API v1 surface."""

import copy
from unittest.mock import AsyncMock, patch

import httpx
import pytest
from fastapi.testclient import TestClient

from core.config import DEFAULT_CONFIG
from dashboard.api import get_service
from dashboard.app import app
from training.service import TrainerService


@pytest.fixture
def service(tmp_path, monkeypatch):
    monkeypatch.delenv("TRAINFORGE_ENCRYPTION_KEY", raising=False)
    config = copy.deepcopy(DEFAULT_CONFIG)
    config["database"]["path"] = str(tmp_path / "api.duckdb")
    svc = TrainerService(config)
    svc.router.stream_delay = 0
    yield svc
    svc.close()


@pytest.fixture
def client(service):
    app.dependency_overrides[get_service] = lambda: service
    yield TestClient(app)
    app.dependency_overrides.clear()


def _openai_response(content, total_tokens):
    return httpx.Response(
        200,
        json={
            "choices": [{"message": {"content": content}, "finish_reason": "stop"}],
            "usage": {"total_tokens": total_tokens},
        },
        request=httpx.Request("POST", "https://api.openai.com/v1/chat/completions"),
    )


def test_health(client):
    assert client.get("/health").json() == {"status": "ok"}


class TestKeys:
    def test_key_lifecycle(self, client):
        response = client.put("/api/v1/keys/openai", json={"apiKey": "sk-abc123"})
        assert response.status_code == 200
        assert response.json() == {"provider": "openai", "isActive": True}

        keys = client.get("/api/v1/keys").json()["keys"]
        assert [k["provider"] for k in keys] == ["openai"]
        assert "apiKey" not in keys[0]
        assert client.get("/api/v1/keys/openai/active").json()["active"] is True

        assert client.delete("/api/v1/keys/openai").status_code == 200
        assert client.get("/api/v1/keys/openai/active").json()["active"] is False

    def test_invalid_key_format(self, client):
        response = client.put("/api/v1/keys/anthropic", json={"apiKey": "sk-nope"})
        assert response.status_code == 422
        assert 'must start with "sk-ant-"' in response.json()["detail"]

    def test_unknown_provider(self, client):
        response = client.put("/api/v1/keys/mistral", json={"apiKey": "whatever-key"})
        assert response.status_code == 422


class TestGenerate:
    def test_missing_key_returns_412(self, client):
        response = client.post("/api/v1/generate", json={"modelId": "claude-3-opus", "prompt": "Hello"})
        assert response.status_code == 412
        assert "No active API key found for anthropic" in response.json()["detail"]

    def test_invalid_request_returns_422(self, client):
        client.put("/api/v1/keys/openai", json={"apiKey": "sk-abc123"})
        response = client.post("/api/v1/generate", json={"modelId": "gpt-4", "prompt": "Hi", "maxTokens": 5000})
        assert response.status_code == 422
        assert "Max tokens" in response.json()["detail"]

    @patch("httpx.AsyncClient.post", new_callable=AsyncMock)
    def test_generate_and_save_pair(self, mock_post, client):
        mock_post.return_value = _openai_response("Paris is the capital.", 2000)
        client.put("/api/v1/keys/openai", json={"apiKey": "sk-abc123"})
        session = client.post("/api/v1/sessions", json={"projectId": "geo", "modelId": "gpt-4"}).json()

        response = client.post("/api/v1/generate", json={
            "modelId": "gpt-4",
            "prompt": "What is the capital of France?",
            "sessionId": session["id"],
            "qualityScore": 5,
        })

        assert response.status_code == 200
        data = response.json()
        assert data["content"] == "Paris is the capital."
        assert data["provider"] == "openai"
        assert data["tokensUsed"] == 2000
        assert data["cost"] == pytest.approx(0.06)
        assert data["pairId"]

        stats = client.get(f"/api/v1/sessions/{session['id']}/stats").json()
        assert stats["totalPairs"] == 1
        assert stats["totalTokens"] == 2000

    @patch("httpx.AsyncClient.post", new_callable=AsyncMock)
    def test_upstream_failure_returns_502(self, mock_post, client):
        mock_post.return_value = httpx.Response(
            429,
            json={"error": {"message": "Rate limit reached"}},
            request=httpx.Request("POST", "https://api.openai.com/v1/chat/completions"),
        )
        client.put("/api/v1/keys/openai", json={"apiKey": "sk-abc123"})

        response = client.post("/api/v1/generate", json={"modelId": "gpt-4", "prompt": "Hi"})
        assert response.status_code == 502
        assert response.json()["detail"] == "Rate limit reached"


class TestSessions:
    @pytest.fixture
    def session_id(self, client):
        return client.post("/api/v1/sessions", json={"projectId": "proj-1", "modelId": "claude-3-opus"}).json()["id"]

    def test_create_and_list(self, client, session_id):
        data = client.get("/api/v1/sessions", params={"projectId": "proj-1"}).json()
        assert data["total"] == 1
        assert data["sessions"][0]["id"] == session_id
        assert data["sessions"][0]["status"] == "pending"

    def test_pairs_and_stats(self, client, session_id):
        for score in (5, 4, None):
            response = client.post(f"/api/v1/sessions/{session_id}/pairs", json={
                "prompt": "Explain recursion",
                "response": "A function calling itself.",
                "qualityScore": score,
                "tokensUsed": 100,
            })
            assert response.status_code == 200

        stats = client.get(f"/api/v1/sessions/{session_id}/stats").json()
        assert stats["totalPairs"] == 3
        assert stats["ratedPairs"] == 2
        assert stats["averageQuality"] == 4.5
        assert stats["recommendedMinimum"] == 20
        assert stats["readyForTraining"] is False

        detail = client.get(f"/api/v1/sessions/{session_id}").json()
        assert len(detail["pairs"]) == 3

    def test_invalid_score_rejected(self, client, session_id):
        response = client.post(f"/api/v1/sessions/{session_id}/pairs", json={
            "prompt": "Explain recursion", "response": "A function calling itself.", "qualityScore": 6,
        })
        assert response.status_code == 422

    def test_rate_and_delete_pair(self, client, session_id):
        pair = client.post(f"/api/v1/sessions/{session_id}/pairs", json={
            "prompt": "Explain recursion", "response": "A function calling itself.",
        }).json()

        rated = client.patch(f"/api/v1/pairs/{pair['id']}", json={"qualityScore": 3})
        assert rated.json()["qualityScore"] == 3
        assert client.patch(f"/api/v1/pairs/{pair['id']}", json={"qualityScore": 7}).status_code == 422

        assert client.delete(f"/api/v1/pairs/{pair['id']}").status_code == 200
        assert client.delete(f"/api/v1/pairs/{pair['id']}").status_code == 404
        assert client.patch(f"/api/v1/pairs/{pair['id']}", json={"qualityScore": 3}).status_code == 404

    def test_blank_project_rejected(self, client):
        response = client.post("/api/v1/sessions", json={"projectId": "  "})
        assert response.status_code == 422
        assert "Project id cannot be empty" in response.json()["detail"]

    def test_missing_session_returns_404(self, client):
        assert client.get("/api/v1/sessions/nope/stats").status_code == 404
        assert client.get("/api/v1/sessions/nope/export").status_code == 404
        assert client.post("/api/v1/sessions/nope/progress", json={"progress": 10}).status_code == 404

    def test_progress_update(self, client, session_id):
        response = client.post(f"/api/v1/sessions/{session_id}/progress", json={"progress": 42.5})
        assert response.status_code == 200
        assert response.json()["progress"] == 42.5
        assert client.get(f"/api/v1/sessions/{session_id}").json()["session"]["progress"] == 42.5
        assert client.post(f"/api/v1/sessions/{session_id}/progress", json={"progress": 150}).status_code == 422

    def test_ready_transition(self, client, session_id):
        response = client.post(f"/api/v1/sessions/{session_id}/ready")
        assert response.json()["status"] == "ready"
        assert client.post(f"/api/v1/sessions/{session_id}/ready").status_code == 422

    def test_clear_and_delete(self, client, session_id):
        client.post(f"/api/v1/sessions/{session_id}/pairs", json={"prompt": "p" * 12, "response": "r" * 12})
        assert client.delete(f"/api/v1/sessions/{session_id}/pairs").json()["deleted"] == 1
        assert client.delete(f"/api/v1/sessions/{session_id}").status_code == 200
        assert client.get(f"/api/v1/sessions/{session_id}").status_code == 404

    def test_export_csv(self, client, session_id):
        client.post(f"/api/v1/sessions/{session_id}/pairs", json={
            "prompt": "Explain recursion", "response": "A function calling itself.", "qualityScore": 5,
        })
        client.post(f"/api/v1/sessions/{session_id}/pairs", json={
            "prompt": "Explain loops", "response": "Repetition.", "qualityScore": 1,
        })

        response = client.get(
            f"/api/v1/sessions/{session_id}/export", params={"format": "csv", "minQuality": 3}
        )
        assert response.status_code == 200
        assert f"training-{session_id}.csv" in response.headers["content-disposition"]
        lines = response.text.strip().split("\n")
        assert lines[0] == "prompt,response,quality_score,tokens_used"
        assert len(lines) == 2
        assert "Explain recursion" in lines[1]


def test_validate_pair(client):
    response = client.post("/api/v1/pairs/validate", json={"prompt": "Hi", "response": "Hello there friend", "qualityScore": 2})
    data = response.json()
    assert data["isValid"] is False
    assert data["issues"] == ["Prompt is too short"]
    assert "Consider only including pairs with quality score >= 3" in data["suggestions"]


def test_providers(client):
    client.put("/api/v1/keys/google", json={"apiKey": "AIzaABC"})
    providers = {p["id"]: p for p in client.get("/api/v1/providers").json()["providers"]}
    assert set(providers) == {"openai", "anthropic", "google", "deepseek", "azure"}
    assert providers["google"]["hasKey"] is True
    assert providers["openai"]["hasKey"] is False
    assert "gemini-pro" in providers["google"]["models"]
    details = {m["id"]: m for m in providers["anthropic"]["modelDetails"]}
    assert details["claude-3-opus"]["contextWindow"] == 200000
    assert details["claude-3-opus"]["supportsVision"] is True
    assert details["claude-3-haiku"]["maxOutputTokens"] == 2048
