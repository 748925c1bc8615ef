"""
Configuration manager for MCQ Quiz App settings and parameters.
"""
import logging
import os
from typing import Any, Dict, List, Mapping, Optional

from .models import QuizSettings


class ConfigManager:
    """Manages backend connection settings, feature flags and quiz parameters."""

    # Default configuration values
    DEFAULT_APP_NAME = "MCQ Quiz App"
    DEFAULT_APP_VERSION = "1.0.0"
    DEFAULT_API_TIMEOUT = 5000  # milliseconds
    DEFAULT_QUESTION_COUNT = None  # Use all questions by default
    DEFAULT_RANDOM_ORDER = False
    DEFAULT_TIME_LIMIT = 3600  # seconds
    DEFAULT_QUESTION_LIMIT = 100

    # Validation limits
    MIN_API_TIMEOUT = 100
    MAX_API_TIMEOUT = 60000
    MIN_TIME_LIMIT = 10
    MAX_TIME_LIMIT = 24 * 3600
    MIN_QUESTION_COUNT = 1
    MAX_QUESTION_COUNT = 100

    def __init__(self):
        """Initialize ConfigManager with default settings."""
        self.logger = logging.getLogger(__name__)
        self.reset_to_defaults()

    def reset_to_defaults(self) -> None:
        """Reset all settings to their default values."""
        self.backend_url: Optional[str] = None
        self.backend_key: Optional[str] = None
        self.app_name = self.DEFAULT_APP_NAME
        self.app_version = self.DEFAULT_APP_VERSION
        self.api_timeout = self.DEFAULT_API_TIMEOUT
        self.demo_mode = False
        self.analytics = False
        self.question_limit = self.DEFAULT_QUESTION_LIMIT
        self._quiz_settings = QuizSettings(
            question_count=self.DEFAULT_QUESTION_COUNT,
            random_order=self.DEFAULT_RANDOM_ORDER,
            time_limit=self.DEFAULT_TIME_LIMIT
        )
        self.logger.debug("All settings reset to default values")

    # ---- loading ------------------------------------------------------------

    def load_from_env(self, environ: Optional[Mapping[str, str]] = None) -> List[str]:
        """
        Apply settings from environment variables.

        Recognised variables: SUPABASE_URL, SUPABASE_ANON_KEY, APP_NAME,
        APP_VERSION, API_TIMEOUT, ENABLE_DEMO_MODE, ENABLE_ANALYTICS,
        QUIZ_TIME_LIMIT.

        Returns:
            List of error messages for values that were rejected
        """
        env = os.environ if environ is None else environ
        errors: List[str] = []

        if env.get("SUPABASE_URL"):
            self.backend_url = env["SUPABASE_URL"]
        if env.get("SUPABASE_ANON_KEY"):
            self.backend_key = env["SUPABASE_ANON_KEY"]
        if env.get("APP_NAME"):
            self.app_name = env["APP_NAME"]
        if env.get("APP_VERSION"):
            self.app_version = env["APP_VERSION"]
        if "ENABLE_DEMO_MODE" in env:
            self.demo_mode = env["ENABLE_DEMO_MODE"] == "true"
        if "ENABLE_ANALYTICS" in env:
            self.analytics = env["ENABLE_ANALYTICS"] == "true"

        for name, setter in (("API_TIMEOUT", self.set_api_timeout), ("QUIZ_TIME_LIMIT", self.set_time_limit)):
            if name not in env:
                continue
            try:
                value = int(env[name])
            except ValueError:
                errors.append(f"{name} must be an integer, got {env[name]!r}")
                self.logger.error(errors[-1])
                continue
            result = setter(value)
            if not result['success']:
                errors.append(result['error'])

        return errors

    def load_from_dict(self, config: Mapping[str, Any]) -> List[str]:
        """
        Apply settings from a ``config.json`` style mapping.

        Expected sections: ``backend`` (url, anon_key, api_timeout), ``app``
        (name, version), ``features`` (demo_mode, analytics) and ``quiz``
        (question_count, random_order, time_limit, question_limit).

        Returns:
            List of error messages for values that were rejected
        """
        errors: List[str] = []
        backend = config.get('backend', {})
        app = config.get('app', {})
        features = config.get('features', {})
        quiz = config.get('quiz', {})

        if backend.get('url'):
            self.backend_url = backend['url']
        if backend.get('anon_key'):
            self.backend_key = backend['anon_key']
        if 'name' in app:
            self.app_name = str(app['name'])
        if 'version' in app:
            self.app_version = str(app['version'])
        if 'demo_mode' in features:
            self.demo_mode = bool(features['demo_mode'])
        if 'analytics' in features:
            self.analytics = bool(features['analytics'])
        if isinstance(quiz.get('question_limit'), int) and quiz['question_limit'] > 0:
            self.question_limit = quiz['question_limit']

        results = []
        if 'api_timeout' in backend:
            results.append(self.set_api_timeout(backend['api_timeout']))
        if 'question_count' in quiz:
            results.append(self.set_question_count(quiz['question_count']))
        if 'random_order' in quiz:
            results.append(self.set_random_order(quiz['random_order']))
        if 'time_limit' in quiz:
            results.append(self.set_time_limit(quiz['time_limit']))

        errors.extend(result['error'] for result in results if not result['success'])
        return errors

    # ---- quiz settings ------------------------------------------------------

    def get_quiz_settings(self) -> QuizSettings:
        """
        Get current quiz settings.

        Returns:
            Copy of the current QuizSettings
        """
        return QuizSettings(
            question_count=self._quiz_settings.question_count,
            random_order=self._quiz_settings.random_order,
            time_limit=self._quiz_settings.time_limit
        )

    def _reject(self, error_msg: str, user_message: str) -> Dict[str, Any]:
        self.logger.error(error_msg)
        return {
            'success': False,
            'error': error_msg,
            'user_message': user_message
        }

    def _accept(self, message: str, user_message: str) -> Dict[str, Any]:
        self.logger.info(message)
        return {
            'success': True,
            'message': message,
            'user_message': user_message
        }

    def set_question_count(self, count: Optional[int]) -> Dict[str, Any]:
        """
        Set the number of questions per attempt.

        Args:
            count: Number of questions, or None to use all questions

        Returns:
            Dictionary with success status, error message, and user-friendly message
        """
        if count is None:
            self._quiz_settings.question_count = None
            return self._accept(
                "Question count set to use all available questions",
                "✅ Will use all available questions"
            )

        if isinstance(count, bool) or not isinstance(count, int):
            return self._reject(
                f"Question count must be an integer, got {type(count).__name__}",
                f"❌ Invalid input: Expected a number, got {type(count).__name__}"
            )

        if count < self.MIN_QUESTION_COUNT:
            return self._reject(
                f"Question count must be at least {self.MIN_QUESTION_COUNT}",
                f"❌ Too few questions: Minimum is {self.MIN_QUESTION_COUNT}"
            )

        if count > self.MAX_QUESTION_COUNT:
            return self._reject(
                f"Question count cannot exceed {self.MAX_QUESTION_COUNT}",
                f"❌ Too many questions: Maximum is {self.MAX_QUESTION_COUNT}"
            )

        self._quiz_settings.question_count = count
        return self._accept(f"Question count set to {count}", f"✅ Question count set to {count}")

    def set_random_order(self, random_order: bool) -> Dict[str, Any]:
        """
        Set whether questions should be presented in random order.

        Returns:
            Dictionary with success status, error message, and user-friendly message
        """
        if not isinstance(random_order, bool):
            return self._reject(
                f"Random order must be a boolean, got {type(random_order).__name__}",
                f"❌ Invalid input: Expected true/false, got {type(random_order).__name__}"
            )

        self._quiz_settings.random_order = random_order
        order_type = "random" if random_order else "sequential"
        return self._accept(
            f"Question order set to {order_type}",
            f"✅ Questions will be presented in {order_type} order"
        )

    def toggle_random_order(self) -> Dict[str, Any]:
        new_value = not self._quiz_settings.random_order
        result = self.set_random_order(new_value)
        result['new_value'] = new_value
        return result

    def set_time_limit(self, seconds: int) -> Dict[str, Any]:
        """
        Set the time limit for a whole attempt.

        Args:
            seconds: Time limit in seconds

        Returns:
            Dictionary with success status, error message, and user-friendly message
        """
        if isinstance(seconds, bool) or not isinstance(seconds, int):
            return self._reject(
                f"Time limit must be an integer, got {type(seconds).__name__}",
                f"❌ Invalid input: Expected a number, got {type(seconds).__name__}"
            )

        if seconds < self.MIN_TIME_LIMIT:
            return self._reject(
                f"Time limit must be at least {self.MIN_TIME_LIMIT} seconds",
                f"❌ Time limit too short: Minimum is {self.MIN_TIME_LIMIT} seconds"
            )

        if seconds > self.MAX_TIME_LIMIT:
            return self._reject(
                f"Time limit cannot exceed {self.MAX_TIME_LIMIT} seconds",
                f"❌ Time limit too long: Maximum is {self.MAX_TIME_LIMIT // 3600} hours"
            )

        self._quiz_settings.time_limit = seconds
        return self._accept(f"Time limit set to {seconds} seconds", f"✅ Time limit set to {seconds} seconds")

    def set_api_timeout(self, milliseconds: int) -> Dict[str, Any]:
        """Set the backend request timeout in milliseconds."""
        if isinstance(milliseconds, bool) or not isinstance(milliseconds, int):
            return self._reject(
                f"API timeout must be an integer, got {type(milliseconds).__name__}",
                f"❌ Invalid input: Expected a number, got {type(milliseconds).__name__}"
            )

        if not self.MIN_API_TIMEOUT <= milliseconds <= self.MAX_API_TIMEOUT:
            return self._reject(
                f"API timeout must be between {self.MIN_API_TIMEOUT} and {self.MAX_API_TIMEOUT} ms",
                f"❌ API timeout out of range: {self.MIN_API_TIMEOUT}-{self.MAX_API_TIMEOUT} ms"
            )

        self.api_timeout = milliseconds
        return self._accept(f"API timeout set to {milliseconds} ms", f"✅ API timeout set to {milliseconds} ms")

    # ---- inspection ---------------------------------------------------------

    def is_backend_configured(self) -> bool:
        return bool(self.backend_url and self.backend_key)

    def get_backend_settings(self) -> Dict[str, Any]:
        """Connection arguments for BackendClient (timeout in seconds)."""
        return {
            'url': self.backend_url,
            'anon_key': self.backend_key,
            'timeout': self.api_timeout / 1000
        }

    def validate_settings(self) -> Dict[str, Any]:
        """
        Validate current settings and return validation results.

        Returns:
            Dictionary with validation results and any issues found
        """
        validation_result = {
            "valid": True,
            "issues": []
        }

        count = self._quiz_settings.question_count
        if count is not None and not self.MIN_QUESTION_COUNT <= count <= self.MAX_QUESTION_COUNT:
            validation_result["issues"].append(f"Invalid question count: {count}")

        time_limit = self._quiz_settings.time_limit
        if not self.MIN_TIME_LIMIT <= time_limit <= self.MAX_TIME_LIMIT:
            validation_result["issues"].append(f"Invalid time limit: {time_limit}")

        if not self.MIN_API_TIMEOUT <= self.api_timeout <= self.MAX_API_TIMEOUT:
            validation_result["issues"].append(f"Invalid API timeout: {self.api_timeout}")

        if not self.demo_mode and not self.is_backend_configured():
            validation_result["issues"].append(
                "Backend URL and key are not configured and demo mode is off"
            )

        validation_result["valid"] = not validation_result["issues"]
        return validation_result

    def get_settings_summary(self) -> str:
        """
        Get a formatted summary of current settings. The API key is never included.

        Returns:
            Human-readable string describing current settings
        """
        question_count_str = (
            str(self._quiz_settings.question_count)
            if self._quiz_settings.question_count is not None
            else "all available"
        )
        order_str = "random" if self._quiz_settings.random_order else "sequential"

        return (
            f"{self.app_name} v{self.app_version}\n"
            f"• Backend: {self.backend_url or 'not configured'}\n"
            f"• API Timeout: {self.api_timeout}ms\n"
            f"• Demo Mode: {self.demo_mode}\n"
            f"• Questions: {question_count_str}\n"
            f"• Order: {order_str}\n"
            f"• Time Limit: {self._quiz_settings.time_limit} seconds"
        )
