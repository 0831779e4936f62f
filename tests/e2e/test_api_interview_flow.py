from __future__ import annotations

from fastapi.testclient import TestClient

from api_server import create_app
from fakes import ScriptedGateway, evaluation_json, default_responder
from interview_session import store as store_module

START = {"role": "Backend Developer", "level": "Senior", "topics": ["REST API Design"]}
ANSWER = {"answer": "Stateless resources addressed by URLs and HTTP verbs."}


def _client(app_settings, gateway, store) -> TestClient:
    app = create_app(app_settings, gateway=gateway, store=store, check_provider=False, run_cleanup=False)
    return TestClient(app)


def _start(client: TestClient) -> dict:
    resp = client.post("/api/interviews/start", json=START)
    assert resp.status_code == 201, resp.text
    body = resp.json()
    assert body["success"] is True
    return body["data"]


def test_start_returns_session_and_question(app_settings, gateway, store):
    with _client(app_settings, gateway, store) as client:
        data = _start(client)
    assert data["sessionId"]
    question = data["question"]
    assert question["question"].strip()
    assert 1 <= question["difficulty"] <= 5
    assert question["questionId"]
    assert isinstance(question["askedAt"], int)
    assert "Senior level interview for a Backend Developer position" in gateway.prompts[0][0]


def test_non_responsive_answer_scores_low(app_settings, gateway, store):
    with _client(app_settings, gateway, store) as client:
        session_id = _start(client)["sessionId"]
        before = client.get(f"/api/interviews/{session_id}/status").json()["data"]
        resp = client.post(f"/api/interviews/{session_id}/answer", json={"answer": "I don't know"})
        after = client.get(f"/api/interviews/{session_id}/status").json()["data"]
    assert resp.status_code == 200, resp.text
    data = resp.json()["data"]
    assert data["evaluation"]["score"] <= 25
    assert data["shouldContinue"] is True
    assert data["nextQuestion"]["questionId"]
    assert after["currentQuestionIndex"] == before["currentQuestionIndex"] + 1
    assert after["totalAnswers"] == 1
    assert after["totalQuestions"] == 2


def test_ten_answers_then_report(app_settings, gateway, store):
    with _client(app_settings, gateway, store) as client:
        session_id = _start(client)["sessionId"]
        last = None
        for _ in range(10):
            resp = client.post(f"/api/interviews/{session_id}/answer", json=ANSWER)
            assert resp.status_code == 200, resp.text
            last = resp.json()["data"]
        assert last["shouldContinue"] is False
        assert last["nextQuestion"] is None

        extra = client.post(f"/api/interviews/{session_id}/answer", json=ANSWER)
        assert extra.status_code == 409

        ended = client.post(f"/api/interviews/{session_id}/end")
        assert ended.status_code == 200, ended.text
        data = ended.json()["data"]
        assert len(data["report"]["qaPairs"]) == 10
        assert data["report"]["categoryScores"]["problemSolving"] == 71

        fetched = client.get(f"/api/reports/{data['reportId']}")
        assert fetched.status_code == 200
        report = fetched.json()["data"]
        assert report["reportId"] == data["reportId"]
        assert report["session"]["role"] == "Backend Developer"
        assert report["session"]["endTime"] >= report["session"]["startTime"]

        again = client.post(f"/api/interviews/{session_id}/end")
        assert again.status_code == 409

        status = client.get(f"/api/interviews/{session_id}/status").json()["data"]
        assert status["status"] == "completed"


def test_unknown_report_is_404(app_settings, gateway, store):
    with _client(app_settings, gateway, store) as client:
        resp = client.get("/api/reports/never-created")
    assert resp.status_code == 404
    body = resp.json()
    assert body["success"] is False
    assert "not found" in body["error"].lower()


def test_persistence_failure_on_end_is_5xx(app_settings, gateway, store, sessions_dir, monkeypatch):
    with _client(app_settings, gateway, store) as client:
        session_id = _start(client)["sessionId"]
        client.post(f"/api/interviews/{session_id}/answer", json=ANSWER)

        def broken_write(path, payload):
            raise OSError("disk full")

        monkeypatch.setattr(store_module, "_write_json", broken_write)
        resp = client.post(f"/api/interviews/{session_id}/end")
        assert 500 <= resp.status_code < 600
        assert resp.json()["success"] is False

        stats = client.get("/api/stats").json()["data"]
        status = client.get(f"/api/interviews/{session_id}/status").json()["data"]
    assert stats["reportsStored"] == 0
    assert status["status"] == "active"
    assert not list(sessions_dir.glob("report-*.json"))


def test_persistence_failure_on_answer_keeps_turn_unrecorded(app_settings, gateway, store, monkeypatch):
    with _client(app_settings, gateway, store) as client:
        session_id = _start(client)["sessionId"]

        def broken_write(path, payload):
            raise OSError("disk full")

        monkeypatch.setattr(store_module, "_write_json", broken_write)
        resp = client.post(f"/api/interviews/{session_id}/answer", json=ANSWER)
        status = client.get(f"/api/interviews/{session_id}/status").json()["data"]
    assert resp.status_code == 500
    assert status["totalAnswers"] == 0
    assert status["totalQuestions"] == 1
    assert status["currentQuestionIndex"] == 0


def test_unknown_session_is_404(app_settings, gateway, store):
    with _client(app_settings, gateway, store) as client:
        resp = client.post("/api/interviews/missing/answer", json=ANSWER)
    assert resp.status_code == 404
    assert resp.json()["error"] == "Session not found: missing"


def test_clamped_score_is_stored(app_settings, store):
    def responder(prompt):
        if prompt.startswith("You are evaluating an answer"):
            return evaluation_json(180)
        return default_responder(prompt)

    with _client(app_settings, ScriptedGateway(responder), store) as client:
        session_id = _start(client)["sessionId"]
        resp = client.post(f"/api/interviews/{session_id}/answer", json=ANSWER)
    assert resp.json()["data"]["evaluation"]["score"] == 100
    assert store.load_from_cache(session_id).answers[0].evaluation.score == 100
