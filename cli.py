#!/usr/bin/env python
"""
Terminal front-end for the quiz API.

    python cli.py --base-url http://127.0.0.1:8000
"""

from __future__ import annotations

import argparse
import logging
import math
import os
import sys
import time
from typing import Any, Callable, Dict, Optional

import httpx

from timer import QuizTimer, format_clock

logger = logging.getLogger(__name__)

SYNC_INTERVAL_S = 30
SKIP = -1


class QuizClient:
    """Thin wrapper over the /api/quiz endpoints."""

    def __init__(self, http: httpx.Client):
        self.http = http

    def _json(self, resp: httpx.Response) -> Dict[str, Any]:
        resp.raise_for_status()
        return resp.json()

    def create_session(self, api_key: str) -> Dict[str, Any]:
        return self._json(self.http.post("/api/quiz/session", json={"apiKey": api_key}))

    def get_session(self, session_id: int) -> Dict[str, Any]:
        return self._json(self.http.get(f"/api/quiz/session/{session_id}"))

    def next_question(self, session_id: int) -> Dict[str, Any]:
        return self._json(self.http.post(f"/api/quiz/session/{session_id}/question"))

    def answer(self, question_id: int, answer_index: int, time_spent: int) -> Dict[str, Any]:
        body = {"questionId": question_id, "answerIndex": answer_index, "timeSpent": time_spent}
        return self._json(self.http.post("/api/quiz/answer", json=body))

    def sync_time(self, session_id: int, time_remaining: int) -> Dict[str, Any]:
        return self._json(
            self.http.patch(
                f"/api/quiz/session/{session_id}/time", json={"timeRemaining": time_remaining}
            )
        )

    def complete(self, session_id: int) -> Dict[str, Any]:
        return self._json(self.http.post(f"/api/quiz/session/{session_id}/complete"))

    def results(self, session_id: int) -> Dict[str, Any]:
        return self._json(self.http.get(f"/api/quiz/session/{session_id}/results"))


def parse_choice(raw: str, n_options: int) -> Optional[int]:
    """'' -> skip, 'a'..'d' or '1'..'4' -> index, anything else -> None."""
    s = raw.strip().lower()
    if not s:
        return SKIP
    if len(s) == 1 and "a" <= s <= chr(ord("a") + n_options - 1):
        return ord(s) - ord("a")
    if s.isdigit() and 1 <= int(s) <= n_options:
        return int(s) - 1
    return None


def running_score(session: Dict[str, Any]) -> str:
    """'correct/answered (pct%)' for the questions answered so far."""
    answered = max(session["currentQuestion"] - 1, 0)
    correct = session["correctAnswers"]
    pct = math.floor(correct / max(answered, 1) * 100 + 0.5)
    return f"{correct}/{answered} ({pct}%)"


def render_question(q: Dict[str, Any], session: Dict[str, Any], timer: QuizTimer) -> str:
    lines = [
        "",
        f"Question {q['questionNumber']} of {session['totalQuestions']}"
        f"  [{q['category']} | {q['type']} | difficulty {q['difficulty']}]"
        f"  question {format_clock(timer.question_time_left)}"
        f"  total {format_clock(timer.total_time_left)}"
        f"  score {running_score(session)}",
        f"{q['title']}",
        q["content"],
    ]
    if q.get("codeExample"):
        lines += ["", q["codeExample"], ""]
    for i, opt in enumerate(q["options"]):
        lines.append(f"  {chr(ord('a') + i)}) {opt}")
    return "\n".join(lines)


def render_results(res: Dict[str, Any]) -> str:
    s = res["session"]
    stats = res["performanceStats"]
    lines = [
        "",
        f"Final score: {res['finalScore']}%  ({s['correctAnswers']}/{s['totalQuestions']})",
        f"Total time: {format_clock(stats['totalTimeSpent'])}"
        f"  avg/question: {format_clock(stats['averageTimePerQuestion'])}",
        f"Skipped: {stats['questionsSkipped']}  avg difficulty: {stats['averageDifficulty']}",
    ]
    for cat, score in sorted(res["categoryBreakdown"].items()):
        lines.append(f"  {cat}: {score['correct']}/{score['total']}")
    return "\n".join(lines)


def run_quiz(
    client: QuizClient,
    api_key: str,
    input_fn: Callable[[str], str] = input,
    output_fn: Callable[[str], None] = print,
    clock: Callable[[], float] = time.monotonic,
    max_questions: Optional[int] = None,
) -> Dict[str, Any]:
    session = client.create_session(api_key)
    sid = session["id"]
    out_of_time = False

    def _time_up() -> None:
        nonlocal out_of_time
        out_of_time = True

    timer = QuizTimer(session["timeRemaining"], on_total_time_up=_time_up)
    if timer.total_expired:
        out_of_time = True
    last_sync = clock()
    asked = 0

    while not session["isCompleted"] and not out_of_time:
        if max_questions is not None and asked >= max_questions:
            break
        q = client.next_question(sid)
        timer.start_question(q["timeAllotted"])
        output_fn(render_question(q, session, timer))

        started = clock()
        choice = None
        while choice is None:
            choice = parse_choice(input_fn("Answer (a-d, blank to skip): "), len(q["options"]))
            if choice is None:
                output_fn("Please enter one of the listed letters.")
        spent = int(clock() - started)
        timer.tick(spent)
        if out_of_time:
            # answers after the paper closed are not submitted
            break
        if timer.question_expired and choice != SKIP:
            output_fn("Time ran out for this question.")
            choice = SKIP

        feedback = client.answer(q["id"], choice, spent)
        asked += 1
        verdict = "Correct!" if feedback["isCorrect"] else "Incorrect."
        right = q["options"][feedback["correctAnswerIndex"]]
        output_fn(f"{verdict} Answer: {right}\n{feedback['explanation']}")

        if clock() - last_sync >= SYNC_INTERVAL_S and timer.total_time_left > 0:
            client.sync_time(sid, timer.total_time_left)
            last_sync = clock()
        session = client.get_session(sid)

    if out_of_time and not session["isCompleted"]:
        output_fn("Total time is up.")
        client.complete(sid)

    results = client.results(sid)
    output_fn(render_results(results))
    return results


def main(argv: Optional[list] = None) -> int:
    parser = argparse.ArgumentParser(description="Take the timed quiz in a terminal.")
    parser.add_argument("--base-url", default=os.getenv("QUIZ_API_URL", "http://127.0.0.1:8000"))
    parser.add_argument("--api-key", default=os.getenv("GEMINI_API_KEY", ""))
    parser.add_argument("--max-questions", type=int, default=None)
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.WARNING)

    api_key = args.api_key or input("Gemini API key: ").strip()
    if not api_key:
        print("An API key is required to start a session.")
        return 1

    with httpx.Client(base_url=args.base_url, timeout=90) as http:
        try:
            run_quiz(QuizClient(http), api_key, max_questions=args.max_questions)
        except httpx.HTTPError as e:
            logger.error("Quiz API request failed: %s", e)
            print(f"Quiz API request failed: {e}")
            return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
