"""
Quiz countdowns: one for the whole paper, one for the current question.
"""

from __future__ import annotations

from typing import Callable, Optional


def format_clock(seconds: int) -> str:
    """Render seconds as M:SS."""
    seconds = max(0, int(seconds))
    return f"{seconds // 60}:{seconds % 60:02d}"


class QuizTimer:
    """
    Whole-second countdowns driven by ``tick``.

    Each callback fires once when its clock reaches zero; the clock then
    stays at zero until reset.
    """

    def __init__(
        self,
        total_time_limit: int,
        question_time_limit: int = 120,
        on_total_time_up: Optional[Callable[[], None]] = None,
        on_question_time_up: Optional[Callable[[], None]] = None,
    ) -> None:
        self.total_time_left = max(0, int(total_time_limit))
        self.question_time_left = max(0, int(question_time_limit))
        self.on_total_time_up = on_total_time_up
        self.on_question_time_up = on_question_time_up
        self.is_running = False
        self._question_limit = self.question_time_left
        self._total_fired = False
        self._question_fired = False

    # --- controls -----------------------------------------------------------------

    def start_question(self, time_limit: int) -> None:
        self.reset_question(time_limit)
        self.is_running = True

    def stop(self) -> None:
        self.is_running = False

    def resume(self) -> None:
        self.is_running = True

    def reset_question(self, time_limit: int) -> None:
        self._question_limit = max(0, int(time_limit))
        self.question_time_left = self._question_limit
        self._question_fired = False

    # --- clock --------------------------------------------------------------------

    def tick(self, seconds: int = 1) -> None:
        if not self.is_running or seconds <= 0:
            return

        self.total_time_left = max(0, self.total_time_left - seconds)
        self.question_time_left = max(0, self.question_time_left - seconds)

        if self.question_time_left == 0 and not self._question_fired:
            self._question_fired = True
            if self.on_question_time_up:
                self.on_question_time_up()
        if self.total_time_left == 0 and not self._total_fired:
            self._total_fired = True
            self.is_running = False
            if self.on_total_time_up:
                self.on_total_time_up()

    @property
    def question_elapsed(self) -> int:
        return self._question_limit - self.question_time_left

    @property
    def question_expired(self) -> bool:
        return self.question_time_left == 0

    @property
    def total_expired(self) -> bool:
        return self.total_time_left == 0
