# services/quiz.py
from __future__ import annotations

import logging
import math
import random
from collections import defaultdict
from datetime import UTC, datetime
from typing import Any, Dict, List, Optional

from bank import pick_fallback
from schemas.quiz import (
    AnswerResult,
    CategoryScore,
    GeneratedQuestion,
    PerformanceStats,
    Question,
    QuizResults,
    QuizSession,
)
from services.gemini import GeneratorFactory
from services.plan import QuestionMeta, question_metadata
from storage import QuizStorage

logger = logging.getLogger(__name__)

SKIPPED_ANSWER = -1


# --- Errors -----------------------------------------------------------------------


class QuizError(Exception):
    status_code = 400


class NotFound(QuizError):
    status_code = 404


class SessionCompleted(QuizError):
    status_code = 400


class InvalidAnswer(QuizError):
    status_code = 400


class AlreadyAnswered(QuizError):
    status_code = 409


# --- Helpers ----------------------------------------------------------------------


def _require_session(storage: QuizStorage, session_id: int) -> QuizSession:
    session = storage.get_session(session_id)
    if session is None:
        raise NotFound("Quiz session not found")
    return session


def _pending_question(storage: QuizStorage, session: QuizSession) -> Optional[Question]:
    for q in storage.get_questions_by_session(session.id):
        if q.question_number == session.current_question and q.user_answer_index is None:
            return q
    return None


def _round_half_up(value: float, digits: int = 0) -> float:
    """Round .5 away from zero for the non-negative stats here (round() goes to even)."""
    scale = 10**digits
    return math.floor(value * scale + 0.5) / scale


def _question_fields(
    session: QuizSession, meta: QuestionMeta, content: GeneratedQuestion
) -> Dict[str, Any]:
    return {
        "session_id": session.id,
        "question_number": session.current_question,
        "category": meta.category,
        "difficulty": meta.difficulty,
        "type": meta.type,
        "title": content.title,
        "content": content.content,
        "code_example": content.code_example,
        "options": list(content.options),
        "correct_answer_index": content.correct_answer_index,
        "explanation": content.explanation,
        "time_allotted": content.time_allotted,
    }


# --- Operations -------------------------------------------------------------------


def next_question(
    storage: QuizStorage,
    session_id: int,
    generator_factory: GeneratorFactory,
    rng: Optional[random.Random] = None,
) -> Question:
    session = _require_session(storage, session_id)
    if session.is_completed:
        raise SessionCompleted("Quiz session is already completed")

    # Re-requesting before answering hands back the same question.
    pending = _pending_question(storage, session)
    if pending is not None:
        return pending

    number = session.current_question
    meta = question_metadata(number, rng)
    logger.info(
        "Generating question %d: %s (%s, difficulty %d)",
        number,
        meta.category,
        meta.type,
        meta.difficulty,
    )

    try:
        generator = generator_factory(session.api_key)
        content = generator.generate(meta, number, session.total_questions)
    except Exception as e:
        # any generator failure (client setup included) falls back to the bank
        logger.warning("Question generation failed, using fallback: %s", e)
        fallback = pick_fallback(number, meta.category, meta.difficulty, meta.type)
        # fallback keeps its own labels
        meta = QuestionMeta(fallback.category, fallback.difficulty, fallback.type)
        content = fallback

    # a concurrent request that stored this number first wins; its question is returned
    question = storage.create_question(_question_fields(session, meta, content))
    logger.info("Question %d created (id=%d)", number, question.id)
    return question


def submit_answer(
    storage: QuizStorage, question_id: int, answer_index: int, time_spent: int
) -> AnswerResult:
    question = storage.get_question(question_id)
    if question is None:
        raise NotFound("Question not found")
    if question.user_answer_index is not None:
        raise AlreadyAnswered("Question already answered")
    if answer_index != SKIPPED_ANSWER and not 0 <= answer_index < len(question.options):
        raise InvalidAnswer(f"answerIndex must be -1 or 0..{len(question.options) - 1}")

    session = storage.get_session(question.session_id)
    if session is not None and session.is_completed:
        raise SessionCompleted("Quiz session is already completed")

    is_correct = answer_index == question.correct_answer_index
    now = datetime.now(UTC)
    # only one concurrent submission gets past this
    updated = storage.answer_question(
        question_id,
        user_answer_index=answer_index,
        is_correct=is_correct,
        time_spent=time_spent,
        answered_at=now,
    )
    if updated is None:
        raise AlreadyAnswered("Question already answered")

    if session is not None:
        progressed = storage.record_answer(session.id, is_correct, answered_at=now)
        if progressed is not None and progressed.is_completed:
            logger.info("Session %d completed", session.id)

    return AnswerResult(
        is_correct=is_correct,
        correct_answer_index=question.correct_answer_index,
        explanation=question.explanation,
        question=updated,
    )


def complete_session(storage: QuizStorage, session_id: int) -> QuizSession:
    session = _require_session(storage, session_id)
    if session.is_completed:
        return session
    logger.info("Session %d completed early", session_id)
    return storage.update_session(
        session_id, is_completed=True, completed_at=datetime.now(UTC), time_remaining=0
    )


def update_time(storage: QuizStorage, session_id: int, time_remaining: int) -> QuizSession:
    session = storage.update_session(session_id, time_remaining=time_remaining)
    if session is None:
        raise NotFound("Quiz session not found")
    return session


def build_results(session: QuizSession, questions: List[Question]) -> QuizResults:
    breakdown: Dict[str, CategoryScore] = defaultdict(CategoryScore)
    for q in questions:
        score = breakdown[q.category]
        score.total += 1
        if q.is_correct:
            score.correct += 1

    total_time = sum(q.time_spent or 0 for q in questions)
    count = len(questions)
    skipped = sum(
        1 for q in questions if q.user_answer_index is None or q.user_answer_index == SKIPPED_ANSWER
    )
    avg_difficulty = sum(q.difficulty for q in questions) / count if count else 0.0

    final_score = 0
    if session.total_questions > 0:
        final_score = int(_round_half_up(session.correct_answers / session.total_questions * 100))

    return QuizResults(
        session=session,
        category_breakdown=dict(breakdown),
        performance_stats=PerformanceStats(
            total_time_spent=total_time,
            average_time_per_question=int(_round_half_up(total_time / count)) if count else 0,
            questions_skipped=skipped,
            average_difficulty=_round_half_up(avg_difficulty, 1),
        ),
        final_score=final_score,
        questions=questions,
    )


def session_results(storage: QuizStorage, session_id: int) -> QuizResults:
    session = _require_session(storage, session_id)
    return build_results(session, storage.get_questions_by_session(session_id))
