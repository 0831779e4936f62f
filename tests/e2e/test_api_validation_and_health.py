from __future__ import annotations

from fastapi.testclient import TestClient

from api_server import create_app
from fakes import ScriptedGateway
from llm_gateway import ProviderUnavailableError


def _client(app_settings, gateway, store) -> TestClient:
    app = create_app(app_settings, gateway=gateway, store=store, check_provider=False, run_cleanup=False)
    return TestClient(app)


def test_start_validation_details(app_settings, gateway, store):
    with _client(app_settings, gateway, store) as client:
        resp = client.post("/api/interviews/start", json={"role": "X", "level": "Intern", "topics": []})
    assert resp.status_code == 400
    body = resp.json()
    assert body["success"] is False
    assert body["error"] == "Validation failed"
    fields = {item["field"] for item in body["details"]}
    assert {"role", "level", "topics"} <= fields
    assert gateway.prompts == []


def test_too_many_topics_rejected(app_settings, gateway, store):
    payload = {"role": "Designer", "level": "Junior", "topics": ["a", "b", "c", "d", "e", "f"]}
    with _client(app_settings, gateway, store) as client:
        resp = client.post("/api/interviews/start", json=payload)
    assert resp.status_code == 400


def test_short_answer_rejected_before_engine(app_settings, gateway, store):
    with _client(app_settings, gateway, store) as client:
        session_id = client.post(
            "/api/interviews/start",
            json={"role": "Designer", "level": "Lead", "topics": ["Figma"]},
        ).json()["data"]["sessionId"]
        resp = client.post(f"/api/interviews/{session_id}/answer", json={"answer": "too short"})
    assert resp.status_code == 400
    assert resp.json()["details"][0]["field"] == "answer"
    assert len(gateway.prompts) == 1


def test_audio_metadata_is_kept(app_settings, gateway, store):
    with _client(app_settings, gateway, store) as client:
        session_id = client.post(
            "/api/interviews/start",
            json={"role": "Designer", "level": "Lead", "topics": ["Figma"]},
        ).json()["data"]["sessionId"]
        resp = client.post(
            f"/api/interviews/{session_id}/answer",
            json={
                "answer": "I start from user research and a mobile wireframe.",
                "audioMetadata": {"duration": 42.5, "pauseCount": 3, "averageConfidence": 0.91},
            },
        )
    assert resp.status_code == 200
    audio = store.load_from_cache(session_id).answers[0].audio_metadata
    assert audio.pause_count == 3
    assert audio.average_confidence == 0.91


def test_provider_failure_is_503(app_settings, store):
    def down(_prompt):
        raise ProviderUnavailableError("Cannot connect to ollama. Make sure the provider is running.")

    with _client(app_settings, ScriptedGateway(down), store) as client:
        resp = client.post(
            "/api/interviews/start",
            json={"role": "Backend Developer", "level": "Junior", "topics": ["REST"]},
        )
        stats = client.get("/api/stats").json()["data"]
    assert resp.status_code == 503
    assert "Cannot connect" in resp.json()["error"]
    assert stats == {"activeSessions": 0, "reportsStored": 0}


def test_health_endpoints(app_settings, gateway, store):
    with _client(app_settings, gateway, store) as client:
        health = client.get("/health").json()
        provider = client.get("/api/health/ollama").json()
    assert health["success"] is True
    assert health["timestamp"]
    assert provider["data"] == {"connected": True, "model": "fake:1b", "available": True, "error": None}


def test_unknown_route_envelope(app_settings, gateway, store):
    with _client(app_settings, gateway, store) as client:
        resp = client.get("/api/nowhere")
    assert resp.status_code == 404
    assert resp.json() == {"success": False, "error": "Route not found"}
