"""
Quiz engine core logic for the MCQ Quiz App.
Handles question selection, session progression, elapsed-time tracking and scoring.
"""
import asyncio
import inspect
import logging
import time
import uuid
from enum import Enum
from typing import Any, Callable, List, Optional, Sequence

from .models import (
    OptionLabel,
    Question,
    QuizProgress,
    QuizSession,
    QuizSettings,
    ScoreSummary,
)
from .utils import calculate_percentage, shuffle_array

# Set up logger for session and timer operations
logger = logging.getLogger(__name__)

TickCallback = Callable[[int], Any]


class SessionState(Enum):
    """States of a quiz session."""
    EMPTY = "empty"
    ACTIVE = "active"


class TimerLifecycleLogger:
    """Structured logging for timer lifecycle events."""

    @staticmethod
    def log_timer_start(session_id: str, interval: float) -> None:
        logger.info(
            f"Timer lifecycle: STARTED - Session {session_id}, Interval {interval}s",
            extra={
                'event_type': 'timer_started',
                'session_id': session_id,
                'interval': interval,
                'timestamp': time.time()
            }
        )

    @staticmethod
    def log_timer_tick(session_id: str, elapsed: int) -> None:
        """Log tick events (throttled to avoid spam)."""
        if elapsed % 60 == 0:
            logger.debug(
                f"Timer lifecycle: TICK - Session {session_id}, Elapsed {elapsed}s",
                extra={
                    'event_type': 'timer_tick',
                    'session_id': session_id,
                    'elapsed': elapsed,
                    'timestamp': time.time()
                }
            )

    @staticmethod
    def log_timer_stopped(session_id: str, ticks: int, reason: str) -> None:
        logger.info(
            f"Timer lifecycle: STOPPED - Session {session_id}, Ticks {ticks}, Reason {reason}",
            extra={
                'event_type': 'timer_stopped',
                'session_id': session_id,
                'ticks': ticks,
                'reason': reason,
                'timestamp': time.time()
            }
        )

    @staticmethod
    def log_timer_replaced(session_id: str) -> None:
        logger.warning(
            f"Timer lifecycle: REPLACED - Session {session_id}, cancelling previous timer",
            extra={
                'event_type': 'timer_replaced',
                'session_id': session_id,
                'timestamp': time.time()
            }
        )

    @staticmethod
    def log_timer_error(session_id: str, error_type: str, error_message: str, operation: str) -> None:
        """Log timer-related errors with context."""
        logger.error(
            f"Timer lifecycle: ERROR - Session {session_id}, Operation {operation}, Type {error_type}: {error_message}",
            extra={
                'event_type': 'timer_error',
                'session_id': session_id,
                'error_type': error_type,
                'error_message': error_message,
                'operation': operation,
                'timestamp': time.time()
            }
        )


class QuizTimer:
    """Periodic elapsed-time ticker backed by a single asyncio task."""

    def __init__(self, elapsed_source: Callable[[], int], interval: float = 1.0, session_id: str = None):
        """
        Initialize the timer.

        Args:
            elapsed_source: Returns the current elapsed seconds for each tick
            interval: Seconds between ticks
            session_id: Identifier used in log records
        """
        self._task: Optional[asyncio.Task] = None
        self._elapsed_source = elapsed_source
        self._interval = interval
        self._session_id = session_id
        self._is_cancelled = False
        self._tick_count = 0

    def start(self, on_tick: Optional[TickCallback] = None) -> None:
        """
        Schedule the ticking task on the running event loop.

        Args:
            on_tick: Called with the elapsed seconds on every tick; may be a
                plain function or a coroutine function

        Raises:
            RuntimeError: If the timer was already started or no event loop is running
        """
        if self._task is not None:
            raise RuntimeError("Timer has already been started")
        self._task = asyncio.get_running_loop().create_task(self._run(on_tick))
        TimerLifecycleLogger.log_timer_start(self._session_id, self._interval)

    async def _run(self, on_tick: Optional[TickCallback]) -> None:
        while not self._is_cancelled:
            await asyncio.sleep(self._interval)
            if self._is_cancelled:
                break

            elapsed = self._elapsed_source()
            self._tick_count += 1
            TimerLifecycleLogger.log_timer_tick(self._session_id, elapsed)

            if on_tick is not None:
                try:
                    result = on_tick(elapsed)
                    if inspect.isawaitable(result):
                        await result
                except Exception as e:
                    # A failing callback is reported and the next tick still fires
                    self._report_tick_error(e)

    def _report_tick_error(self, error: Exception) -> None:
        TimerLifecycleLogger.log_timer_error(
            self._session_id,
            type(error).__name__,
            str(error),
            "on_tick"
        )
        asyncio.get_running_loop().call_exception_handler({
            'message': f"Exception in quiz timer callback (session {self._session_id})",
            'exception': error,
            'task': self._task
        })

    def cancel(self, reason: str = "cancelled") -> None:
        """
        Cancel the timer.

        Once this returns no further tick is delivered: the flag is checked
        before every callback and the task is cancelled at its next await.
        Cancelling an already cancelled timer does nothing.
        """
        if self._is_cancelled:
            return
        self._is_cancelled = True
        if self._task and not self._task.done():
            self._task.cancel()
        TimerLifecycleLogger.log_timer_stopped(self._session_id, self._tick_count, reason)

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done() and not self._is_cancelled

    @property
    def is_cancelled(self) -> bool:
        return self._is_cancelled

    @property
    def tick_count(self) -> int:
        return self._tick_count

    @property
    def task(self) -> Optional[asyncio.Task]:
        return self._task


class QuizEngine:
    """
    Owns one quiz session: its questions, position, answers, timing and score.

    Each engine instance is independent; create one per attempt (or reuse it
    with ``reset_quiz``).
    """

    def __init__(
        self,
        clock: Callable[[], float] = time.monotonic,
        tick_interval: float = 1.0,
        session_id: Optional[str] = None
    ):
        """
        Initialize the quiz engine.

        Args:
            clock: Monotonic time source in seconds
            tick_interval: Seconds between timer ticks
            session_id: Identifier used in log records, generated if omitted
        """
        self._clock = clock
        self._tick_interval = tick_interval
        self.session_id = session_id or uuid.uuid4().hex[:8]
        self._session = QuizSession()

    @property
    def session(self) -> QuizSession:
        return self._session

    @property
    def state(self) -> SessionState:
        return SessionState.ACTIVE if self._session.questions else SessionState.EMPTY

    # ---- question selection -------------------------------------------------

    def select_questions(self, questions: List[Question], settings: QuizSettings) -> List[Question]:
        """
        Select and order questions based on quiz settings.

        Args:
            questions: List of available questions
            settings: Quiz configuration settings

        Returns:
            List of selected and ordered questions

        Raises:
            ValueError: If questions list is empty
        """
        if not questions:
            raise ValueError("Cannot select questions from empty list")

        selected_questions = list(questions)

        if settings.random_order:
            selected_questions = self.shuffle_questions(selected_questions)

        if settings.question_count is not None:
            selected_questions = self.limit_question_count(selected_questions, settings.question_count)

        return selected_questions

    def shuffle_questions(self, questions: List[Question]) -> List[Question]:
        """Return a new list with the questions in random order."""
        return shuffle_array(questions)

    def limit_question_count(self, questions: List[Question], count: int) -> List[Question]:
        """
        Limit the number of questions to the specified count.

        Note:
            If count is greater than available questions, returns all questions.
            If count is less than 1, returns empty list.
        """
        if count < 1:
            return []
        return questions[:count]

    # ---- session lifecycle --------------------------------------------------

    def initialize_quiz(self, questions: Sequence[Question]) -> QuizSession:
        """
        Start a new attempt with the given questions.

        Args:
            questions: Ordered questions for this attempt; may be empty

        Returns:
            The session state after initialization
        """
        self._session.questions = list(questions)
        self._session.current_index = 0
        self._session.user_answers = [None] * len(self._session.questions)
        self._session.start_time = self._clock()

        logger.info(f"Quiz initialized with {len(self._session.questions)} questions (session {self.session_id})")
        return self._session

    def reset_quiz(self) -> None:
        """Stop any running timer and return the session to the empty state."""
        self.stop_timer()
        self._session = QuizSession()
        logger.info(f"Quiz reset (session {self.session_id})")

    def is_complete(self) -> bool:
        return self._session.current_index >= len(self._session.questions)

    # ---- navigation and answers ---------------------------------------------

    def get_current_question(self) -> Optional[Question]:
        """Return the current question, or None when the session is exhausted or empty."""
        if self._session.current_index >= len(self._session.questions):
            return None
        return self._session.questions[self._session.current_index]

    def select_answer(self, label: str) -> bool:
        """
        Record an answer for the current question, overwriting any earlier one.

        Args:
            label: Option label; case and surrounding whitespace are ignored

        Returns:
            True if the answer was recorded, False for an unknown label or
            when there is no current question
        """
        option = OptionLabel.parse(label)
        if option is None:
            logger.warning(f"Ignoring invalid answer label {label!r} (session {self.session_id})")
            return False

        if self._session.current_index < len(self._session.user_answers):
            self._session.user_answers[self._session.current_index] = option.value
            logger.debug(f"Answer selected: {option.value}")
            return True
        return False

    def next_question(self) -> bool:
        """Move forward one question; False when already on the last one."""
        if self._session.current_index < len(self._session.questions) - 1:
            self._session.current_index += 1
            return True
        return False

    def previous_question(self) -> bool:
        """Move back one question; False when already on the first one."""
        if self._session.current_index > 0:
            self._session.current_index -= 1
            return True
        return False

    def get_progress(self) -> QuizProgress:
        total = len(self._session.questions)
        current = self._session.current_index + 1
        return QuizProgress(
            current=current,
            total=total,
            percentage=calculate_percentage(current, total),
            answered=sum(1 for answer in self._session.user_answers if answer is not None)
        )

    # ---- timing -------------------------------------------------------------

    def get_elapsed_time(self) -> int:
        """Whole seconds since the session started, 0 when no session is active."""
        if self._session.start_time is None:
            return 0
        return max(0, int(self._clock() - self._session.start_time))

    def start_timer(self, on_tick: Optional[TickCallback] = None) -> QuizTimer:
        """
        Start ticking once per interval with the elapsed seconds.

        A timer that is already running is cancelled first, so at most one
        tick stream exists per session.

        Raises:
            RuntimeError: If called without a running event loop
        """
        if self._session.timer is not None:
            TimerLifecycleLogger.log_timer_replaced(self.session_id)
            self.stop_timer()

        timer = QuizTimer(self.get_elapsed_time, self._tick_interval, self.session_id)
        timer.start(on_tick)
        self._session.timer = timer
        return timer

    def stop_timer(self) -> bool:
        """
        Cancel the running timer, if any.

        Returns:
            True if a timer was stopped, False if none was running
        """
        timer = self._session.timer
        if timer is None:
            return False

        timer.cancel("stop requested")
        self._session.timer = None
        return True

    def is_timer_running(self) -> bool:
        return self._session.timer is not None and self._session.timer.is_running

    def get_timer_status(self) -> Optional[dict]:
        """Status of the running timer, or None if there is none."""
        timer = self._session.timer
        if timer is None:
            return None
        return {
            'is_running': timer.is_running,
            'is_cancelled': timer.is_cancelled,
            'tick_count': timer.tick_count,
            'elapsed': self.get_elapsed_time()
        }

    # ---- scoring ------------------------------------------------------------

    def calculate_score(self) -> ScoreSummary:
        """
        Score the session. Unanswered questions count as wrong.

        Returns:
            ScoreSummary with correct, wrong, total and percentage
        """
        correct_count = 0
        for question, answer in zip(self._session.questions, self._session.user_answers):
            if answer is not None and answer == question.correct_option:
                correct_count += 1

        total = len(self._session.questions)
        return ScoreSummary(
            correct=correct_count,
            wrong=total - correct_count,
            total=total,
            percentage=calculate_percentage(correct_count, total)
        )
