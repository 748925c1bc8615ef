"""
Grading and result formatting for finished quiz attempts.

All functions here are pure: they map already-known numbers to display
values and never touch session state, so they work equally for a live
attempt and for historical records fetched from the backend.
"""
from typing import List, Tuple

from .models import FormattedResult
from .utils import calculate_percentage, format_time

# (minimum percentage, grade, message, performance level), highest first
GRADE_THRESHOLDS: List[Tuple[int, str, str, str]] = [
    (90, "A", "🎉 Excellent! Outstanding performance!", "expert"),
    (80, "B", "👏 Great! Very good effort!", "advanced"),
    (70, "C", "👍 Good! Keep practicing!", "intermediate"),
    (60, "D", "💪 Pass! You can do better!", "beginner"),
]
FAILING_GRADE = ("F", "📚 Need more practice. Try again!", "novice")


def _lookup(percentage: float) -> Tuple[str, str, str]:
    for minimum, grade, message, level in GRADE_THRESHOLDS:
        if percentage >= minimum:
            return grade, message, level
    return FAILING_GRADE


def get_grade(percentage: float) -> str:
    """Letter grade: A >= 90, B >= 80, C >= 70, D >= 60, otherwise F."""
    return _lookup(percentage)[0]


def get_result_message(percentage: float) -> str:
    """Encouragement message at the same thresholds as the grade."""
    return _lookup(percentage)[1]


def get_performance_level(percentage: float) -> str:
    """Performance tier: expert, advanced, intermediate, beginner or novice."""
    return _lookup(percentage)[2]


def format_result_data(correct_count: int, total_questions: int, duration_seconds: int) -> FormattedResult:
    """
    Compose the display summary of an attempt.

    Args:
        correct_count: Number of correct answers
        total_questions: Number of questions in the attempt
        duration_seconds: Time taken in whole seconds

    Returns:
        FormattedResult with counts, percentage, MM:SS time, grade and message
    """
    percentage = calculate_percentage(correct_count, total_questions)
    return FormattedResult(
        correct=correct_count,
        incorrect=total_questions - correct_count,
        total=total_questions,
        percentage=percentage,
        time_formatted=format_time(duration_seconds),
        grade=get_grade(percentage),
        message=get_result_message(percentage),
    )
