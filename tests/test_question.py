from conftest import FakeGenerator


def test_generate_question_uses_plan(client, session_id):
    r = client.post(f"/api/quiz/session/{session_id}/question")
    assert r.status_code == 200
    q = r.json()
    assert q["sessionId"] == session_id
    assert q["questionNumber"] == 1
    assert q["category"] == "Prompt Engineering"
    assert q["type"] == "conceptual"
    assert 7 <= q["difficulty"] <= 9
    assert q["title"] == "Handoffs"
    assert len(q["options"]) == 4
    assert q["timeAllotted"] == 150
    assert q["userAnswerIndex"] is None and q["isCorrect"] is None

    api_key, meta, number = FakeGenerator.calls[0]
    assert api_key == "test-key"
    assert number == 1


def test_generate_question_returns_pending_one(client, session_id):
    first = client.post(f"/api/quiz/session/{session_id}/question").json()
    again = client.post(f"/api/quiz/session/{session_id}/question").json()
    assert again["id"] == first["id"]
    assert len(FakeGenerator.calls) == 1


def test_generate_question_404(client):
    r = client.post("/api/quiz/session/77/question")
    assert r.status_code == 404


def test_fallback_when_generation_fails(failing_client):
    sid = failing_client.post("/api/quiz/session", json={"apiKey": "bad"}).json()["id"]
    r = failing_client.post(f"/api/quiz/session/{sid}/question")
    assert r.status_code == 200
    q = r.json()
    assert q["questionNumber"] == 1
    assert q["category"] == "Prompt Engineering"
    assert len(q["options"]) == 4
    assert 0 <= q["correctAnswerIndex"] <= 3
    assert q["explanation"]


def test_fallback_for_agents_sdk_range(failing_client, store):
    sid = failing_client.post("/api/quiz/session", json={"apiKey": "bad"}).json()["id"]
    store.update_session(sid, current_question=12)
    q = failing_client.post(f"/api/quiz/session/{sid}/question").json()
    assert q["questionNumber"] == 12
    assert q["category"] == "OpenAI Agents SDK"
