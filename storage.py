from __future__ import annotations

import logging
import threading
from datetime import UTC, datetime
from typing import Any, Dict, List, Optional

from sqlalchemy import DateTime, case, literal, null, update
from sqlalchemy.exc import IntegrityError

from config import QUIZ_STORAGE, TIME_LIMIT_S, TOTAL_QUESTIONS
from schemas.quiz import Question, QuizSession

logger = logging.getLogger(__name__)


class QuizStorage:
    """
    Session/question store keyed by auto-incrementing integer ids.

    Records go in and come out as the pydantic wire models; backends
    decide how they are kept.
    """

    def create_session(self, api_key: str) -> QuizSession:
        raise NotImplementedError

    def get_session(self, session_id: int) -> Optional[QuizSession]:
        raise NotImplementedError

    def update_session(self, session_id: int, **changes: Any) -> Optional[QuizSession]:
        raise NotImplementedError

    def record_answer(
        self, session_id: int, correct: bool, answered_at: Optional[datetime] = None
    ) -> Optional[QuizSession]:
        """
        Move an open session on by one question in a single step: bump
        correct_answers when ``correct``, advance current_question and
        complete the session once it runs past total_questions.

        Returns None when the session is missing or already completed.
        """
        raise NotImplementedError

    def create_question(self, fields: Dict[str, Any]) -> Question:
        """
        One question per (session_id, question_number); if that slot is
        already taken the stored question is returned instead.
        """
        raise NotImplementedError

    def get_question(self, question_id: int) -> Optional[Question]:
        raise NotImplementedError

    def get_questions_by_session(self, session_id: int) -> List[Question]:
        raise NotImplementedError

    def update_question(self, question_id: int, **changes: Any) -> Optional[Question]:
        raise NotImplementedError

    def answer_question(self, question_id: int, **changes: Any) -> Optional[Question]:
        """Apply ``changes`` only if the question is still unanswered, else None."""
        raise NotImplementedError


def _advance(session: QuizSession, correct: bool, answered_at: datetime) -> Dict[str, Any]:
    next_number = session.current_question + 1
    completed = next_number > session.total_questions
    return {
        "correct_answers": session.correct_answers + (1 if correct else 0),
        "current_question": session.total_questions if completed else next_number,
        "is_completed": completed,
        "completed_at": answered_at if completed else None,
    }


class MemStorage(QuizStorage):
    def __init__(self) -> None:
        self._sessions: Dict[int, QuizSession] = {}
        self._questions: Dict[int, Question] = {}
        self._next_session_id = 1
        self._next_question_id = 1
        self._lock = threading.Lock()

    def create_session(self, api_key: str) -> QuizSession:
        with self._lock:
            sid = self._next_session_id
            self._next_session_id += 1
            session = QuizSession(
                id=sid,
                api_key=api_key,
                current_question=1,
                total_questions=TOTAL_QUESTIONS,
                correct_answers=0,
                time_remaining=TIME_LIMIT_S,
                started_at=datetime.now(UTC),
            )
            self._sessions[sid] = session
        return session

    def get_session(self, session_id: int) -> Optional[QuizSession]:
        return self._sessions.get(session_id)

    def update_session(self, session_id: int, **changes: Any) -> Optional[QuizSession]:
        with self._lock:
            session = self._sessions.get(session_id)
            if session is None:
                return None
            updated = session.model_copy(update=changes)
            self._sessions[session_id] = updated
        return updated

    def record_answer(
        self, session_id: int, correct: bool, answered_at: Optional[datetime] = None
    ) -> Optional[QuizSession]:
        with self._lock:
            session = self._sessions.get(session_id)
            if session is None or session.is_completed:
                return None
            changes = _advance(session, correct, answered_at or datetime.now(UTC))
            updated = session.model_copy(update=changes)
            self._sessions[session_id] = updated
        return updated

    def create_question(self, fields: Dict[str, Any]) -> Question:
        with self._lock:
            for existing in self._questions.values():
                if (
                    existing.session_id == fields["session_id"]
                    and existing.question_number == fields["question_number"]
                ):
                    return existing
            qid = self._next_question_id
            self._next_question_id += 1
            question = Question(
                **{
                    **fields,
                    "id": qid,
                    "user_answer_index": None,
                    "is_correct": None,
                    "time_spent": None,
                    "answered_at": None,
                }
            )
            self._questions[qid] = question
        return question

    def get_question(self, question_id: int) -> Optional[Question]:
        return self._questions.get(question_id)

    def get_questions_by_session(self, session_id: int) -> List[Question]:
        return [q for q in self._questions.values() if q.session_id == session_id]

    def update_question(self, question_id: int, **changes: Any) -> Optional[Question]:
        with self._lock:
            question = self._questions.get(question_id)
            if question is None:
                return None
            updated = question.model_copy(update=changes)
            self._questions[question_id] = updated
        return updated

    def answer_question(self, question_id: int, **changes: Any) -> Optional[Question]:
        with self._lock:
            question = self._questions.get(question_id)
            if question is None or question.user_answer_index is not None:
                return None
            updated = question.model_copy(update=changes)
            self._questions[question_id] = updated
        return updated


class DatabaseStorage(QuizStorage):
    """Same operations over the quiz_sessions / questions tables."""

    def __init__(self, session_factory=None) -> None:
        if session_factory is None:
            from db import SessionLocal

            session_factory = SessionLocal
        self._session_factory = session_factory

    def create_session(self, api_key: str) -> QuizSession:
        from models import QuizSessionRow

        with self._session_factory() as db:
            row = QuizSessionRow(
                api_key=api_key,
                current_question=1,
                total_questions=TOTAL_QUESTIONS,
                correct_answers=0,
                time_remaining=TIME_LIMIT_S,
                started_at=datetime.now(UTC),
                is_completed=False,
            )
            db.add(row)
            db.commit()
            db.refresh(row)
            return QuizSession.model_validate(row)

    def get_session(self, session_id: int) -> Optional[QuizSession]:
        from models import QuizSessionRow

        with self._session_factory() as db:
            row = db.get(QuizSessionRow, session_id)
            return QuizSession.model_validate(row) if row else None

    def update_session(self, session_id: int, **changes: Any) -> Optional[QuizSession]:
        from models import QuizSessionRow

        with self._session_factory() as db:
            row = db.get(QuizSessionRow, session_id)
            if row is None:
                return None
            for key, value in changes.items():
                setattr(row, key, value)
            db.commit()
            db.refresh(row)
            return QuizSession.model_validate(row)

    def record_answer(
        self, session_id: int, correct: bool, answered_at: Optional[datetime] = None
    ) -> Optional[QuizSession]:
        from models import QuizSessionRow

        at = answered_at or datetime.now(UTC)
        next_number = QuizSessionRow.current_question + 1
        completed = next_number > QuizSessionRow.total_questions
        # computed from the row's current values inside one UPDATE
        stmt = (
            update(QuizSessionRow)
            .where(QuizSessionRow.id == session_id, QuizSessionRow.is_completed.is_(False))
            .values(
                correct_answers=QuizSessionRow.correct_answers + (1 if correct else 0),
                current_question=case(
                    (completed, QuizSessionRow.total_questions), else_=next_number
                ),
                is_completed=completed,
                completed_at=case(
                    (completed, literal(at, DateTime(timezone=True))), else_=null()
                ),
            )
            .execution_options(synchronize_session=False)
        )
        with self._session_factory() as db:
            if db.execute(stmt).rowcount == 0:
                db.rollback()
                return None
            db.commit()
            return QuizSession.model_validate(db.get(QuizSessionRow, session_id))

    def create_question(self, fields: Dict[str, Any]) -> Question:
        from models import QuestionRow

        with self._session_factory() as db:
            row = QuestionRow(**fields)
            db.add(row)
            try:
                db.commit()
            except IntegrityError:
                db.rollback()
                existing = (
                    db.query(QuestionRow)
                    .filter(
                        QuestionRow.session_id == fields["session_id"],
                        QuestionRow.question_number == fields["question_number"],
                    )
                    .one_or_none()
                )
                if existing is None:
                    raise
                return Question.model_validate(existing)
            db.refresh(row)
            return Question.model_validate(row)

    def get_question(self, question_id: int) -> Optional[Question]:
        from models import QuestionRow

        with self._session_factory() as db:
            row = db.get(QuestionRow, question_id)
            return Question.model_validate(row) if row else None

    def get_questions_by_session(self, session_id: int) -> List[Question]:
        from models import QuestionRow

        with self._session_factory() as db:
            rows = (
                db.query(QuestionRow)
                .filter(QuestionRow.session_id == session_id)
                .order_by(QuestionRow.id)
                .all()
            )
            return [Question.model_validate(r) for r in rows]

    def update_question(self, question_id: int, **changes: Any) -> Optional[Question]:
        from models import QuestionRow

        with self._session_factory() as db:
            row = db.get(QuestionRow, question_id)
            if row is None:
                return None
            for key, value in changes.items():
                setattr(row, key, value)
            db.commit()
            db.refresh(row)
            return Question.model_validate(row)

    def answer_question(self, question_id: int, **changes: Any) -> Optional[Question]:
        from models import QuestionRow

        stmt = (
            update(QuestionRow)
            .where(QuestionRow.id == question_id, QuestionRow.user_answer_index.is_(None))
            .values(**changes)
            .execution_options(synchronize_session=False)
        )
        with self._session_factory() as db:
            if db.execute(stmt).rowcount == 0:
                db.rollback()
                return None
            db.commit()
            return Question.model_validate(db.get(QuestionRow, question_id))


def _build_storage() -> QuizStorage:
    if QUIZ_STORAGE == "database":
        logger.info("Using database storage")
        return DatabaseStorage()
    if QUIZ_STORAGE != "memory":
        logger.warning("Unknown QUIZ_STORAGE=%r; using in-memory storage", QUIZ_STORAGE)
    return MemStorage()


storage: QuizStorage = _build_storage()


def get_storage() -> QuizStorage:
    return storage
