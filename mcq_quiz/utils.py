"""
Utility helpers shared across the MCQ Quiz App.
"""
import logging
import math
import random
import re
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Sequence, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
MIN_PASSWORD_LENGTH = 6


class AppError(Exception):
    """Application-level error carrying a code and the time it was raised."""

    def __init__(self, message: str, code: str = "UNKNOWN_ERROR"):
        super().__init__(message)
        self.message = message
        self.code = code
        self.timestamp = datetime.now(timezone.utc).isoformat()

    def __str__(self) -> str:
        return self.message


def handle_error(error: Any) -> None:
    """Log an error of any kind with as much context as it carries."""
    if isinstance(error, AppError):
        logger.error(f"[{error.code}] {error.message}")
    elif isinstance(error, Exception):
        logger.error(str(error), exc_info=error)
    else:
        logger.error(f"An unknown error occurred: {error!r}")


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves going up (0.5 -> 1, 12.5 -> 13)."""
    return int(math.floor(value + 0.5))


def calculate_percentage(correct: int, total: int) -> int:
    """
    Percentage of ``correct`` out of ``total`` as a whole number.

    Returns 0 when ``total`` is 0.
    """
    if total == 0:
        return 0
    return round_half_up(correct / total * 100)


def format_time(seconds: int) -> str:
    """Format a duration in seconds as zero-padded ``MM:SS``."""
    seconds = int(seconds)
    minutes, secs = divmod(seconds, 60)
    return f"{minutes:02d}:{secs:02d}"


def format_date(date_string: str) -> str:
    """
    Format an ISO-8601 timestamp for display, e.g. ``Oct 7, 2026, 03:05 PM``.

    Aware timestamps are converted to local time.
    """
    if date_string.endswith("Z"):
        date_string = date_string[:-1] + "+00:00"
    date = datetime.fromisoformat(date_string)
    if date.tzinfo is not None:
        date = date.astimezone()
    return f"{date:%b} {date.day}, {date.year}, {date:%I:%M %p}"


def validate_email(email: Optional[str]) -> bool:
    if not isinstance(email, str):
        return False
    return EMAIL_PATTERN.match(email) is not None


def validate_password(password: Optional[str]) -> bool:
    return bool(password) and len(password) >= MIN_PASSWORD_LENGTH


def validate_quiz_data(questions: Any, answers: Any, total_questions: int) -> bool:
    """Check that questions and answers are lists of the expected length."""
    return (
        isinstance(questions, list)
        and isinstance(answers, list)
        and len(questions) == total_questions
        and len(answers) == total_questions
    )


def shuffle_array(items: Sequence[T], rng: Optional[random.Random] = None) -> List[T]:
    """
    Return a shuffled copy of ``items`` (Fisher-Yates).

    Args:
        items: Sequence to shuffle; it is not modified
        rng: Optional random source, defaults to the module-level generator

    Returns:
        New list with the same items in random order
    """
    rng = rng or random
    shuffled = list(items)
    for i in range(len(shuffled) - 1, 0, -1):
        j = rng.randint(0, i)
        shuffled[i], shuffled[j] = shuffled[j], shuffled[i]
    return shuffled


def get_random_items(items: Sequence[T], count: int, rng: Optional[random.Random] = None) -> List[T]:
    """Pick up to ``count`` distinct items in random order."""
    if count < 1:
        return []
    return shuffle_array(items, rng)[:min(count, len(items))]


def group_by_key(items: List[Dict[str, Any]], key: str) -> Dict[Any, List[Dict[str, Any]]]:
    groups: Dict[Any, List[Dict[str, Any]]] = {}
    for item in items:
        groups.setdefault(item.get(key), []).append(item)
    return groups
