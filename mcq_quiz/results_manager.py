"""
Persistence of finished attempts, quiz history and user statistics.
"""
import logging
from datetime import datetime, timezone
from typing import Any, Dict

from .backend_client import BackendClient, BackendError
from .models import UserStatistics
from .utils import AppError, round_half_up

RESULTS_TABLE = "quiz_results"
PROFILES_TABLE = "profiles"


class ResultsManager:
    """Saves quiz results and reads them back for history and statistics."""

    def __init__(self, client: BackendClient):
        self.client = client
        self.logger = logging.getLogger(__name__)

    async def save_quiz_result(
        self,
        user_id: str,
        score: int,
        total_questions: int,
        duration_seconds: int
    ) -> Dict[str, Any]:
        """
        Persist a completed attempt and update the user's profile counters.

        Args:
            user_id: Identifier of the signed-in user
            score: Number of correct answers
            total_questions: Number of questions in the attempt
            duration_seconds: Time taken in whole seconds

        Returns:
            Dictionary with success status, the stored rows and error message
        """
        try:
            if not user_id:
                raise AppError("User ID is required", "VALIDATION_ERROR")

            now = datetime.now(timezone.utc).isoformat()
            data = await self.client.insert(RESULTS_TABLE, [
                {
                    'userid': user_id,
                    'score': score,
                    'total_questions': total_questions,
                    'correct_answers': score,
                    'wrong_answers': total_questions - score,
                    'duration_seconds': duration_seconds,
                    'attempted_at': now,
                    'created_at': now
                }
            ])
            self.logger.info(
                f"Quiz result saved: score={score}, total={total_questions}, duration={duration_seconds}s"
            )

            await self._increment_user_attempts(user_id)
            await self._update_best_score(user_id, score)

            return {
                'success': True,
                'data': data,
                'error': None
            }
        except (AppError, BackendError) as e:
            self.logger.error(f"Save result error: {e}")
            return {
                'success': False,
                'data': None,
                'error': str(e)
            }

    async def get_user_results(self, user_id: str, limit: int = 10) -> Dict[str, Any]:
        """Most recent results for a user, newest first."""
        try:
            if not user_id:
                raise AppError("User ID is required", "VALIDATION_ERROR")

            data = await self.client.select(
                RESULTS_TABLE,
                filters=[("userid", "eq", user_id)],
                order=("created_at", False),
                limit=limit
            )
            self.logger.info(f"Retrieved {len(data)} quiz results")
            return {
                'success': True,
                'data': data,
                'error': None
            }
        except (AppError, BackendError) as e:
            self.logger.error(f"Get results error: {e}")
            return {
                'success': False,
                'data': [],
                'error': str(e)
            }

    async def get_statistics(self, user_id: str) -> Dict[str, Any]:
        """
        Aggregate a user's attempts.

        Returns:
            Dictionary with success status, UserStatistics in 'stats' (None on
            failure) and error message
        """
        try:
            if not user_id:
                raise AppError("User ID is required", "VALIDATION_ERROR")

            rows = await self.client.select(
                RESULTS_TABLE,
                columns="score,total_questions,duration_seconds",
                filters=[("userid", "eq", user_id)]
            )

            if not rows:
                return {
                    'success': True,
                    'stats': UserStatistics(),
                    'error': None
                }

            total_attempts = len(rows)
            total_score = sum(row.get('score') or 0 for row in rows)
            total_time_spent = sum(row.get('duration_seconds') or 0 for row in rows)
            stats = UserStatistics(
                total_attempts=total_attempts,
                average_score=round_half_up(total_score / total_attempts),
                best_score=max(row.get('score') or 0 for row in rows),
                total_time_spent=total_time_spent,
                average_time=round_half_up(total_time_spent / total_attempts)
            )
            self.logger.info(
                f"Statistics calculated: attempts={stats.total_attempts}, "
                f"average={stats.average_score}, best={stats.best_score}"
            )
            return {
                'success': True,
                'stats': stats,
                'error': None
            }
        except (AppError, BackendError) as e:
            self.logger.error(f"Get statistics error: {e}")
            return {
                'success': False,
                'stats': None,
                'error': str(e)
            }

    async def get_leaderboard_position(self, score: int) -> Dict[str, Any]:
        """Rank of ``score`` among all results: 1 + the number of higher scores."""
        try:
            higher = await self.client.select(
                RESULTS_TABLE,
                columns="score",
                filters=[("score", "gt", score)]
            )
            return {
                'success': True,
                'position': len(higher or []) + 1,
                'error': None
            }
        except BackendError as e:
            self.logger.error(f"Get leaderboard position error: {e}")
            return {
                'success': False,
                'position': None,
                'error': str(e)
            }

    async def _increment_user_attempts(self, user_id: str) -> None:
        try:
            profile = await self.client.select(
                PROFILES_TABLE,
                columns="attempts",
                filters=[("id", "eq", user_id)],
                single=True
            )
            new_attempts = (profile.get('attempts') or 0) + 1
            await self.client.update(PROFILES_TABLE, {'attempts': new_attempts}, [("id", "eq", user_id)])
            self.logger.info(f"Attempts updated to {new_attempts}")
        except BackendError as e:
            self.logger.warning(f"Error updating attempts: {e}")

    async def _update_best_score(self, user_id: str, score: int) -> None:
        try:
            profile = await self.client.select(
                PROFILES_TABLE,
                columns="best_score",
                filters=[("id", "eq", user_id)],
                single=True
            )
            current_best = profile.get('best_score') or 0
            if score > current_best:
                await self.client.update(PROFILES_TABLE, {'best_score': score}, [("id", "eq", user_id)])
                self.logger.info(f"New best score: {score}")
        except BackendError as e:
            self.logger.warning(f"Error updating best score: {e}")
