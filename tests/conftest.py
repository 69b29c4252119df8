import pytest
from fastapi.testclient import TestClient

from main import app
from schemas.quiz import GeneratedQuestion
from services.gemini import GenerationError, get_generator_factory
from storage import MemStorage, get_storage

SAMPLE = {
    "title": "Handoffs",
    "content": "Which primitive passes control from one agent to another?",
    "codeExample": None,
    "options": ["Guardrail", "Handoff", "Tracing span", "Session"],
    "correctAnswerIndex": 1,
    "explanation": "A handoff delegates the conversation to another agent.",
    "timeAllotted": 150,
}


class FakeGenerator:
    calls = []

    def __init__(self, api_key):
        self.api_key = api_key

    def generate(self, meta, question_number, total_questions=50):
        FakeGenerator.calls.append((self.api_key, meta, question_number))
        return GeneratedQuestion.model_validate(SAMPLE)


class FailingGenerator:
    def __init__(self, api_key):
        pass

    def generate(self, meta, question_number, total_questions=50):
        raise GenerationError("quota exceeded")


@pytest.fixture
def store():
    return MemStorage()


@pytest.fixture
def client(store):
    FakeGenerator.calls = []
    app.dependency_overrides[get_storage] = lambda: store
    app.dependency_overrides[get_generator_factory] = lambda: FakeGenerator
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def failing_client(store):
    app.dependency_overrides[get_storage] = lambda: store
    app.dependency_overrides[get_generator_factory] = lambda: FailingGenerator
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def session_id(client):
    r = client.post("/api/quiz/session", json={"apiKey": "test-key"})
    assert r.status_code == 200
    return r.json()["id"]
