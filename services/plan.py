# services/plan.py
from __future__ import annotations

import random
from typing import NamedTuple, Optional

PROMPT_ENGINEERING = "Prompt Engineering"
MARKDOWN = "Markdown"
PYDANTIC = "Pydantic"
AGENTS_SDK = "OpenAI Agents SDK"

CATEGORIES = (AGENTS_SDK, PROMPT_ENGINEERING, MARKDOWN, PYDANTIC)


class QuestionMeta(NamedTuple):
    category: str
    difficulty: int
    type: str


def question_metadata(question_number: int, rng: Optional[random.Random] = None) -> QuestionMeta:
    """
    Topic layout of a 50-question paper: 5 prompt engineering, 2 markdown,
    3 pydantic, then agents SDK for the rest.
    """
    rng = rng or random
    n = question_number
    if n <= 5:
        return QuestionMeta(
            PROMPT_ENGINEERING, rng.randint(7, 9), "code-based" if n % 2 == 0 else "conceptual"
        )
    if n <= 7:
        return QuestionMeta(MARKDOWN, rng.randint(6, 7), "conceptual")
    if n <= 10:
        return QuestionMeta(PYDANTIC, rng.randint(7, 9), "code-based" if n % 2 == 0 else "conceptual")
    return QuestionMeta(AGENTS_SDK, rng.randint(7, 10), "code-based" if n % 3 == 0 else "conceptual")
