from __future__ import annotations

from datetime import UTC, datetime
from typing import Optional

from sqlalchemy import JSON, Boolean, DateTime, ForeignKey, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from db import Base


def _now() -> datetime:
    return datetime.now(UTC)


class QuizSessionRow(Base):
    __tablename__ = "quiz_sessions"
    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    api_key: Mapped[str] = mapped_column(Text)
    current_question: Mapped[int] = mapped_column(Integer, default=1)
    total_questions: Mapped[int] = mapped_column(Integer, default=50)
    correct_answers: Mapped[int] = mapped_column(Integer, default=0)
    time_remaining: Mapped[int] = mapped_column(Integer, default=7200)  # seconds
    started_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_now)
    completed_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    is_completed: Mapped[bool] = mapped_column(Boolean, default=False)


class QuestionRow(Base):
    __tablename__ = "questions"
    __table_args__ = (UniqueConstraint("session_id", "question_number"),)
    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    session_id: Mapped[int] = mapped_column(ForeignKey("quiz_sessions.id"), index=True)
    question_number: Mapped[int] = mapped_column(Integer)
    category: Mapped[str] = mapped_column(String(64))
    difficulty: Mapped[int] = mapped_column(Integer)  # 1-10
    type: Mapped[str] = mapped_column(String(32))  # conceptual | code-based
    title: Mapped[str] = mapped_column(Text)
    content: Mapped[str] = mapped_column(Text)
    code_example: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    options: Mapped[list] = mapped_column(JSON)
    correct_answer_index: Mapped[int] = mapped_column(Integer)
    explanation: Mapped[str] = mapped_column(Text)
    time_allotted: Mapped[int] = mapped_column(Integer)  # seconds
    user_answer_index: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    is_correct: Mapped[Optional[bool]] = mapped_column(Boolean, nullable=True)
    time_spent: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    answered_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
