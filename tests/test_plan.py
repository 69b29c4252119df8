import random

import pytest

from services.plan import question_metadata


@pytest.mark.parametrize(
    "n, category, types, lo, hi",
    [
        (1, "Prompt Engineering", {"conceptual"}, 7, 9),
        (4, "Prompt Engineering", {"code-based"}, 7, 9),
        (6, "Markdown", {"conceptual"}, 6, 7),
        (8, "Pydantic", {"code-based"}, 7, 9),
        (9, "Pydantic", {"conceptual"}, 7, 9),
        (11, "OpenAI Agents SDK", {"conceptual"}, 7, 10),
        (12, "OpenAI Agents SDK", {"code-based"}, 7, 10),
        (50, "OpenAI Agents SDK", {"conceptual"}, 7, 10),
    ],
)
def test_question_metadata(n, category, types, lo, hi):
    rng = random.Random(n)
    for _ in range(30):
        meta = question_metadata(n, rng)
        assert meta.category == category
        assert meta.type in types
        assert lo <= meta.difficulty <= hi


def test_distribution_over_fifty():
    cats = [question_metadata(n, random.Random(0)).category for n in range(1, 51)]
    assert cats.count("Prompt Engineering") == 5
    assert cats.count("Markdown") == 2
    assert cats.count("Pydantic") == 3
    assert cats.count("OpenAI Agents SDK") == 40
