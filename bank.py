# bank.py - static fallback questions used when generation fails

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, Iterable, List

from pydantic import ValidationError

from config import FALLBACK_BANK_PATH
from schemas.quiz import FallbackQuestion

logger = logging.getLogger(__name__)

_BASE = Path(__file__).resolve().parent
_DEFAULT_PATH = _BASE / "data" / "fallback_questions.json"


def _bank_path() -> Path:
    return Path(FALLBACK_BANK_PATH) if FALLBACK_BANK_PATH else _DEFAULT_PATH


def _iter_jsonl(p: Path) -> Iterable[Dict[str, Any]]:
    with p.open("r", encoding="utf-8") as f:
        for line in f:
            s = line.strip()
            if not s or s.startswith("#") or s.startswith("//"):
                continue
            try:
                yield json.loads(s)
            except json.JSONDecodeError:
                logger.warning("Skipping malformed line in %s", p)
                continue


def _iter_json(p: Path) -> Iterable[Dict[str, Any]]:
    with p.open("r", encoding="utf-8") as f:
        try:
            data = json.load(f)
        except json.JSONDecodeError:
            logger.warning("Fallback bank file %s is not valid JSON", p)
            data = []
    if isinstance(data, list):
        yield from data


def _iter_file(p: Path) -> Iterable[Dict[str, Any]]:
    suf = p.suffix.lower()
    if suf == ".jsonl":
        return _iter_jsonl(p)
    if suf == ".json":
        return _iter_json(p)
    return iter(())


class QuestionBank:
    _questions: List[FallbackQuestion] = []
    _loaded = False

    @classmethod
    def load(cls) -> List[FallbackQuestion]:
        if not cls._loaded:
            cls.reload()
        return cls._questions

    @classmethod
    def reload(cls, path: Path | None = None) -> int:
        path = path or _bank_path()
        if path.is_dir():
            files = [p for p in sorted(path.rglob("*")) if p.is_file()]
        elif path.exists():
            files = [path]
        else:
            logger.error("Fallback bank not found at %s", path)
            files = []

        questions: List[FallbackQuestion] = []
        for p in files:
            for raw in _iter_file(p):
                try:
                    questions.append(FallbackQuestion.model_validate(raw))
                except ValidationError:
                    # Skip invalid records
                    continue

        cls._questions = questions
        cls._loaded = True
        logger.info("Loaded %d fallback questions", len(questions))
        return len(questions)


def pick_fallback(
    question_number: int, category: str, difficulty: int, qtype: str
) -> FallbackQuestion:
    """
    Deterministic pick: closest match first, widening to the category and
    then the whole bank. Index is question_number modulo the candidate count.
    """
    bank = QuestionBank.load()
    if not bank:
        raise RuntimeError("Fallback question bank is empty.")

    candidates = [
        q
        for q in bank
        if q.category == category and q.type == qtype and abs(q.difficulty - difficulty) <= 3
    ]
    if not candidates:
        candidates = [q for q in bank if q.category == category]
    if not candidates:
        candidates = bank
    return candidates[question_number % len(candidates)]


# Public API
def get_fallback_questions() -> List[FallbackQuestion]:
    return QuestionBank.load()


def reload_bank() -> int:
    return QuestionBank.reload()
