from datetime import UTC, datetime

from schemas.quiz import Question, QuizSession
from services.quiz import build_results


def _q(qid, category, difficulty, answer, correct, spent):
    return Question(
        id=qid,
        session_id=1,
        question_number=qid,
        category=category,
        difficulty=difficulty,
        type="conceptual",
        title="t",
        content="c",
        options=["a", "b", "c", "d"],
        correct_answer_index=0,
        explanation="e",
        time_allotted=90,
        user_answer_index=answer,
        is_correct=correct,
        time_spent=spent,
    )


def test_build_results_stats():
    session = QuizSession(
        id=1, total_questions=4, correct_answers=2, started_at=datetime.now(UTC)
    )
    questions = [
        _q(1, "Prompt Engineering", 7, 0, True, 30),
        _q(2, "Prompt Engineering", 8, 2, False, 45),
        _q(3, "Markdown", 6, -1, False, 90),
        _q(4, "Pydantic", 9, None, None, None),
    ]
    res = build_results(session, questions)

    assert res.category_breakdown["Prompt Engineering"].correct == 1
    assert res.category_breakdown["Prompt Engineering"].total == 2
    assert res.category_breakdown["Markdown"].correct == 0
    assert res.category_breakdown["Pydantic"].total == 1

    stats = res.performance_stats
    assert stats.total_time_spent == 165
    assert stats.average_time_per_question == 41  # 165 / 4 = 41.25
    assert stats.questions_skipped == 2
    assert stats.average_difficulty == 7.5
    assert res.final_score == 50


def test_build_results_empty():
    session = QuizSession(id=1, started_at=datetime.now(UTC))
    res = build_results(session, [])
    assert res.category_breakdown == {}
    assert res.performance_stats.average_time_per_question == 0
    assert res.performance_stats.average_difficulty == 0
    assert res.final_score == 0


def test_results_endpoint(client, session_id):
    q = client.post(f"/api/quiz/session/{session_id}/question").json()
    client.post(
        "/api/quiz/answer", json={"questionId": q["id"], "answerIndex": 1, "timeSpent": 20}
    )
    r = client.get(f"/api/quiz/session/{session_id}/results")
    assert r.status_code == 200
    body = r.json()
    assert body["session"]["correctAnswers"] == 1
    assert body["categoryBreakdown"] == {"Prompt Engineering": {"correct": 1, "total": 1}}
    assert body["performanceStats"]["totalTimeSpent"] == 20
    assert body["performanceStats"]["questionsSkipped"] == 0
    assert body["finalScore"] == 2  # 1 / 50
    assert len(body["questions"]) == 1


def test_results_404(client):
    assert client.get("/api/quiz/session/5/results").status_code == 404


def test_build_results_rounds_halves_up():
    session = QuizSession(
        id=1, total_questions=8, correct_answers=1, started_at=datetime.now(UTC)
    )
    questions = [
        _q(1, "Prompt Engineering", 7, 0, True, 12),
        _q(2, "Prompt Engineering", 7, 1, False, 13),
        _q(3, "Markdown", 7, None, None, None),
        _q(4, "Markdown", 8, None, None, None),
    ]
    res = build_results(session, questions)

    assert res.final_score == 13  # 12.5%
    assert res.performance_stats.average_time_per_question == 6  # 25 / 4 = 6.25
    assert res.performance_stats.average_difficulty == 7.3  # 29 / 4 = 7.25


def test_average_time_rounds_half_up():
    session = QuizSession(id=1, started_at=datetime.now(UTC))
    questions = [
        _q(1, "Pydantic", 8, 0, True, 12),
        _q(2, "Pydantic", 8, 0, True, 13),
    ]
    res = build_results(session, questions)
    assert res.performance_stats.average_time_per_question == 13  # 12.5
