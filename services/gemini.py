# services/gemini.py
"""
Question generation through Google Gemini.

One request per model name in ``GEMINI_MODELS`` (primary, then a single
retry on the next name). Any failure surfaces as ``GenerationError``; the
caller is expected to fall back to the static bank.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Callable, List, Optional

from google import genai
from google.genai import types
from pydantic import ValidationError

from config import GEMINI_MODELS, GEMINI_TIMEOUT_S, TOTAL_QUESTIONS
from schemas.quiz import GeneratedQuestion
from services.plan import AGENTS_SDK, MARKDOWN, PROMPT_ENGINEERING, PYDANTIC, QuestionMeta

logger = logging.getLogger(__name__)

# Bounded: primary model plus one retry.
MAX_ATTEMPTS = 2

_CATEGORY_FOCUS = {
    AGENTS_SDK: """Advanced OpenAI Agents SDK concepts including:
- Multi-agent architecture and collaboration patterns
- Context management and state handling
- Error handling and debugging strategies
- Advanced primitives and their implementation
- Production deployment considerations
- Performance optimization and scaling""",
    PROMPT_ENGINEERING: """Advanced prompt engineering techniques including:
- Complex prompt design patterns
- Chain-of-thought and reasoning strategies
- Few-shot and zero-shot learning optimization
- Prompt injection prevention and security
- Context window management
- Advanced prompt debugging techniques""",
    PYDANTIC: """Pydantic library advanced usage including:
- Complex data validation scenarios
- Custom validators and field types
- Model inheritance and composition
- Configuration and settings management
- Integration with FastAPI and other frameworks
- Performance optimization techniques""",
    MARKDOWN: """Advanced Markdown usage including:
- Extended syntax and advanced formatting
- Documentation best practices
- Integration with development workflows
- Advanced table and list structures
- Mathematical notation and code highlighting
- Cross-platform compatibility considerations""",
}

RESPONSE_SCHEMA = types.Schema(
    type=types.Type.OBJECT,
    properties={
        "title": types.Schema(type=types.Type.STRING),
        "content": types.Schema(type=types.Type.STRING),
        "codeExample": types.Schema(type=types.Type.STRING),
        "options": types.Schema(
            type=types.Type.ARRAY,
            items=types.Schema(type=types.Type.STRING),
            min_items=4,
            max_items=4,
        ),
        "correctAnswerIndex": types.Schema(type=types.Type.INTEGER),
        "explanation": types.Schema(type=types.Type.STRING),
        "timeAllotted": types.Schema(type=types.Type.INTEGER),
    },
    required=["title", "content", "options", "correctAnswerIndex", "explanation", "timeAllotted"],
)


class GenerationError(Exception):
    pass


def category_focus(category: str) -> str:
    return _CATEGORY_FOCUS.get(category, "General Agentic AI concepts and best practices")


def build_system_prompt(meta: QuestionMeta) -> str:
    return f"""You are an expert AI assessment generator for an Agentic AI course focusing on OpenAI Agents SDK, Prompt Engineering, Markdown, and Pydantic.

Generate questions with difficulty level 70/100 (advanced level) that test deep understanding and practical application.

Question Requirements:
- Difficulty: {meta.difficulty}/10 (corresponding to 70/100 overall difficulty)
- Type: {meta.type}
- Category: {meta.category}
- Professional and technically accurate
- Test real-world application scenarios
- Include nuanced understanding requirements

Time Allocation Guidelines:
- OpenAI Agents SDK: 120-180 seconds (complex topics)
- Prompt Engineering: 90-150 seconds
- Pydantic: 90-120 seconds
- Markdown: 60-90 seconds

For code-based questions, include realistic code examples that demonstrate practical usage patterns.
For conceptual questions, focus on architectural decisions, best practices, and advanced concepts.

Always provide 4 options with exactly one correct answer and detailed explanations."""


def build_user_prompt(
    meta: QuestionMeta, question_number: int, total_questions: int = TOTAL_QUESTIONS
) -> str:
    return f"""Generate a {meta.type} question for {meta.category} (Question {question_number}/{total_questions}).

Category Focus: {category_focus(meta.category)}

The question should:
1. Test advanced understanding suitable for difficulty level {meta.difficulty}/10
2. Be relevant to real-world Agentic AI development
3. Require critical thinking and detailed knowledge
4. Include practical scenarios or code examples if applicable

Provide exactly 4 answer options and ensure the explanation demonstrates why the correct answer is optimal and why other options are incorrect."""


def parse_generated(raw: Optional[str]) -> GeneratedQuestion:
    if not raw or not raw.strip():
        raise GenerationError("Empty response from Gemini API")
    try:
        data = json.loads(raw)
    except json.JSONDecodeError as e:
        raise GenerationError(f"Response is not JSON: {e}") from e
    try:
        return GeneratedQuestion.model_validate(data)
    except ValidationError as e:
        raise GenerationError(f"Response failed validation: {e.error_count()} error(s)") from e


class QuestionGenerator:
    def __init__(
        self,
        api_key: str,
        models: Optional[List[str]] = None,
        timeout_s: float = GEMINI_TIMEOUT_S,
        client: Any = None,
    ):
        if not api_key and client is None:
            raise GenerationError("A Gemini API key is required.")
        self.models = list(models or GEMINI_MODELS)[:MAX_ATTEMPTS]
        if not self.models:
            raise GenerationError("No Gemini model configured.")
        self._client = client or genai.Client(
            api_key=api_key,
            http_options=types.HttpOptions(timeout=int(timeout_s * 1000)),
        )

    def generate(
        self, meta: QuestionMeta, question_number: int, total_questions: int = TOTAL_QUESTIONS
    ) -> GeneratedQuestion:
        config = types.GenerateContentConfig(
            system_instruction=build_system_prompt(meta),
            response_mime_type="application/json",
            response_schema=RESPONSE_SCHEMA,
        )
        prompt = build_user_prompt(meta, question_number, total_questions)

        last_error: Optional[Exception] = None
        for model in self.models:
            try:
                response = self._client.models.generate_content(
                    model=model, contents=prompt, config=config
                )
                question = parse_generated(response.text)
                logger.info("Generated question %d with %s", question_number, model)
                return question
            except Exception as e:
                logger.warning("Generation with %s failed: %s", model, e)
                last_error = e

        raise GenerationError(f"Failed to generate question: {last_error}") from last_error


GeneratorFactory = Callable[[str], QuestionGenerator]


def get_generator_factory() -> GeneratorFactory:
    return QuestionGenerator
