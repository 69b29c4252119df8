import threading

from conftest import FakeGenerator
from services.quiz import AlreadyAnswered, next_question, submit_answer
from storage import MemStorage


def _question(client, session_id):
    return client.post(f"/api/quiz/session/{session_id}/question").json()


def _answer(client, qid, idx, spent=12):
    return client.post(
        "/api/quiz/answer", json={"questionId": qid, "answerIndex": idx, "timeSpent": spent}
    )


def test_correct_answer(client, session_id):
    q = _question(client, session_id)
    r = _answer(client, q["id"], q["correctAnswerIndex"])
    assert r.status_code == 200
    body = r.json()
    assert body["isCorrect"] is True
    assert body["correctAnswerIndex"] == 1
    assert body["explanation"]
    assert body["question"]["userAnswerIndex"] == 1
    assert body["question"]["timeSpent"] == 12
    assert body["question"]["answeredAt"] is not None

    s = client.get(f"/api/quiz/session/{session_id}").json()
    assert s["correctAnswers"] == 1
    assert s["currentQuestion"] == 2


def test_incorrect_answer(client, session_id):
    q = _question(client, session_id)
    body = _answer(client, q["id"], 3).json()
    assert body["isCorrect"] is False
    s = client.get(f"/api/quiz/session/{session_id}").json()
    assert s["correctAnswers"] == 0
    assert s["currentQuestion"] == 2


def test_timeout_answer(client, session_id):
    q = _question(client, session_id)
    body = _answer(client, q["id"], -1, spent=150).json()
    assert body["isCorrect"] is False
    assert body["question"]["userAnswerIndex"] == -1


def test_answer_out_of_range(client, session_id):
    q = _question(client, session_id)
    assert _answer(client, q["id"], 4).status_code == 400
    assert _answer(client, q["id"], -2).status_code == 400


def test_answer_twice_conflicts(client, session_id):
    q = _question(client, session_id)
    assert _answer(client, q["id"], 0).status_code == 200
    assert _answer(client, q["id"], 1).status_code == 409
    s = client.get(f"/api/quiz/session/{session_id}").json()
    assert s["currentQuestion"] == 2


def test_answer_unknown_question(client):
    assert _answer(client, 999, 0).status_code == 404


def test_answer_missing_fields(client):
    r = client.post("/api/quiz/answer", json={"questionId": 1})
    assert r.status_code == 400


def test_session_completes_after_last_question(client, store, session_id):
    store.update_session(session_id, total_questions=2)

    q1 = _question(client, session_id)
    _answer(client, q1["id"], 1)
    q2 = _question(client, session_id)
    assert q2["questionNumber"] == 2
    _answer(client, q2["id"], 0)

    s = client.get(f"/api/quiz/session/{session_id}").json()
    assert s["isCompleted"] is True
    assert s["completedAt"] is not None
    assert s["currentQuestion"] == 2
    assert s["correctAnswers"] == 1

    assert client.post(f"/api/quiz/session/{session_id}/question").status_code == 400


class _RacingStorage(MemStorage):
    """Holds both submitters after their reads so they race on the write."""

    def __init__(self):
        super().__init__()
        self.barrier = threading.Barrier(2, timeout=5)

    def get_question(self, question_id):
        question = super().get_question(question_id)
        self.barrier.wait()
        return question


def test_concurrent_answers_count_once():
    store = _RacingStorage()
    session = store.create_session("key")
    q = next_question(store, session.id, FakeGenerator)

    outcomes = []

    def submit(idx):
        try:
            submit_answer(store, q.id, idx, 5)
            outcomes.append("ok")
        except AlreadyAnswered:
            outcomes.append("conflict")

    threads = [threading.Thread(target=submit, args=(1,)) for _ in range(2)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert sorted(outcomes) == ["conflict", "ok"]
    s = store.get_session(session.id)
    assert s.correct_answers == 1
    assert s.current_question == 2


class _SlowGenerator(FakeGenerator):
    barrier = None

    def generate(self, meta, question_number, total_questions=50):
        self.barrier.wait()
        return super().generate(meta, question_number, total_questions)


def test_concurrent_question_requests_share_one_question():
    store = MemStorage()
    session = store.create_session("key")
    _SlowGenerator.barrier = threading.Barrier(2, timeout=5)

    ids = []

    def request():
        ids.append(next_question(store, session.id, _SlowGenerator).id)

    threads = [threading.Thread(target=request) for _ in range(2)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert len(ids) == 2 and ids[0] == ids[1]
    assert len(store.get_questions_by_session(session.id)) == 1
