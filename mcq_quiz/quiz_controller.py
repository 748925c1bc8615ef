"""
Quiz attempt controller for the MCQ Quiz App.
Runs one attempt from loading questions to saving the result.
"""
import logging
from typing import Any, Dict, Optional

from .config_manager import ConfigManager
from .data_manager import DataManager
from .grading import format_result_data
from .models import Question, QuizProgress
from .quiz_engine import QuizEngine, SessionState, TickCallback
from .results_manager import ResultsManager


class QuizControllerError(Exception):
    """Base exception for quiz controller errors."""
    pass


class QuizNotStartedError(QuizControllerError):
    """Raised when an operation needs a started quiz and there is none."""
    pass


class QuizController:
    """
    Orchestrates a quiz attempt.

    Questions come from the DataManager (falling back to the demo set),
    the attempt itself lives in a QuizEngine, and finished attempts are
    handed to the ResultsManager when a user is signed in.
    """

    def __init__(
        self,
        data_manager: DataManager,
        config_manager: ConfigManager,
        results_manager: Optional[ResultsManager] = None,
        engine: Optional[QuizEngine] = None
    ):
        """
        Initialize the quiz controller.

        Args:
            data_manager: Instance for loading questions
            config_manager: Instance for quiz settings
            results_manager: Instance for saving results; without it results are not persisted
            engine: Session engine, a new one is created if omitted
        """
        self.logger = logging.getLogger(__name__)
        self.data_manager = data_manager
        self.config_manager = config_manager
        self.results_manager = results_manager
        self.engine = engine or QuizEngine()

    async def start_quiz(self, on_tick: Optional[TickCallback] = None) -> Dict[str, Any]:
        """
        Load questions, apply the quiz settings and start the attempt timer.

        Args:
            on_tick: Called with the elapsed seconds once per timer tick

        Returns:
            Dictionary with success status, question count, whether the demo
            set is in use, and the load error if there was one
        """
        load_error = None
        if self.config_manager.demo_mode:
            questions = self.data_manager.get_demo_questions()
            fallback = True
        else:
            load_result = await self.data_manager.load_questions(self.config_manager.question_limit)
            questions = load_result['data']
            load_error = load_result['error']
            fallback = self.data_manager.is_fallback_active()

        try:
            selected = self.engine.select_questions(questions, self.config_manager.get_quiz_settings())
        except ValueError as e:
            self.logger.error(f"Failed to start quiz: {e}")
            return {
                'success': False,
                'question_count': 0,
                'fallback': fallback,
                'error': str(e)
            }

        self.engine.initialize_quiz(selected)
        self.engine.start_timer(on_tick)

        self.logger.info(f"Quiz started with {len(selected)} questions (fallback={fallback})")
        return {
            'success': True,
            'question_count': len(selected),
            'fallback': fallback,
            'error': load_error
        }

    def _require_started(self) -> None:
        if self.engine.state is SessionState.EMPTY:
            raise QuizNotStartedError("No quiz in progress")

    def get_current_question(self) -> Optional[Question]:
        self._require_started()
        return self.engine.get_current_question()

    def answer(self, label: str) -> bool:
        self._require_started()
        return self.engine.select_answer(label)

    def next_question(self) -> bool:
        self._require_started()
        return self.engine.next_question()

    def previous_question(self) -> bool:
        self._require_started()
        return self.engine.previous_question()

    def get_progress(self) -> QuizProgress:
        self._require_started()
        return self.engine.get_progress()

    def is_time_up(self) -> bool:
        """True once the elapsed time reaches the configured time limit."""
        if self.engine.state is SessionState.EMPTY:
            return False
        return self.engine.get_elapsed_time() >= self.config_manager.get_quiz_settings().time_limit

    async def finish_quiz(self, user_id: Optional[str] = None) -> Dict[str, Any]:
        """
        Stop the timer, score the attempt and save it for ``user_id``.

        The computed score and formatted result are always returned, also
        when saving fails.

        Returns:
            Dictionary with success status, ScoreSummary, FormattedResult,
            duration, whether the result was saved, and error message

        Raises:
            QuizNotStartedError: If no quiz is in progress
        """
        self._require_started()
        self.engine.stop_timer()

        duration = self.engine.get_elapsed_time()
        score = self.engine.calculate_score()
        result = format_result_data(score.correct, score.total, duration)
        self.logger.info(
            f"Quiz finished: {score.correct}/{score.total} ({score.percentage}%) in {result.time_formatted}"
        )

        saved = False
        error = None
        if user_id and self.results_manager is not None:
            save_result = await self.results_manager.save_quiz_result(
                user_id, score.correct, score.total, duration
            )
            saved = save_result['success']
            error = save_result['error']
            if not saved:
                self.logger.warning(f"Quiz result not saved: {error}")

        return {
            'success': error is None,
            'score': score,
            'result': result,
            'duration': duration,
            'saved': saved,
            'error': error
        }

    def reset(self) -> None:
        self.engine.reset_quiz()
