# schemas/quiz.py
from __future__ import annotations

from datetime import datetime
from typing import Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

QuestionType = Literal["conceptual", "code-based"]


class WireModel(BaseModel):
    # camelCase on the wire, snake_case in Python
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


# ---------- Records ----------


class QuizSession(WireModel):
    id: int
    api_key: str = Field(default="", exclude=True)
    current_question: int = 1
    total_questions: int = 50
    correct_answers: int = 0
    time_remaining: int = 7200
    started_at: datetime
    completed_at: Optional[datetime] = None
    is_completed: bool = False


class Question(WireModel):
    id: int
    session_id: int
    question_number: int
    category: str
    difficulty: int
    type: QuestionType
    title: str
    content: str
    code_example: Optional[str] = None
    options: List[str]
    correct_answer_index: int
    explanation: str
    time_allotted: int
    user_answer_index: Optional[int] = None
    is_correct: Optional[bool] = None
    time_spent: Optional[int] = None
    answered_at: Optional[datetime] = None


# ---------- Generated / fallback content ----------


class GeneratedQuestion(WireModel):
    title: str = Field(min_length=1)
    content: str = Field(min_length=1)
    code_example: Optional[str] = None
    options: List[str] = Field(min_length=4, max_length=4)
    correct_answer_index: int = Field(ge=0, le=3)
    explanation: str
    time_allotted: int = Field(gt=0)

    @field_validator("code_example")
    @classmethod
    def _blank_code_is_none(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and not v.strip():
            return None
        return v


class FallbackQuestion(GeneratedQuestion):
    category: str
    difficulty: int = Field(ge=1, le=10)
    type: QuestionType


# ---------- Requests ----------


class CreateSessionRequest(WireModel):
    api_key: str

    @field_validator("api_key")
    @classmethod
    def _key_required(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("apiKey required")
        return v


class AnswerRequest(WireModel):
    question_id: int
    # -1 means the question timed out or was skipped
    answer_index: int = Field(ge=-1)
    time_spent: int = Field(ge=0)


class TimeUpdateRequest(WireModel):
    time_remaining: int = Field(ge=0)


# ---------- Responses ----------


class AnswerResult(WireModel):
    is_correct: bool
    correct_answer_index: int
    explanation: str
    question: Question


class CategoryScore(WireModel):
    correct: int = 0
    total: int = 0


class PerformanceStats(WireModel):
    total_time_spent: int
    average_time_per_question: int
    questions_skipped: int
    average_difficulty: float


class QuizResults(WireModel):
    session: QuizSession
    category_breakdown: Dict[str, CategoryScore]
    performance_stats: PerformanceStats
    final_score: int
    questions: List[Question]

