"""
Test fixtures and sample data for MCQ Quiz App tests.
"""
import json
from pathlib import Path
from typing import Any, Dict, List
from unittest.mock import AsyncMock, Mock

from mcq_quiz.backend_client import BackendClient
from mcq_quiz.models import Question


class TestFixtures:
    """Centralized test fixtures for all test modules."""

    __test__ = False

    @staticmethod
    def create_sample_records() -> List[Dict[str, Any]]:
        """Question rows as the backend returns them."""
        return [
            {
                "id": 10,
                "questiontext": "What is 5 * 5?",
                "optiona": "10",
                "optionb": "20",
                "optionc": "25",
                "optiond": "30",
                "correctoption": "c"
            },
            {
                "id": 11,
                "questiontext": "Which gas do plants absorb?",
                "optiona": "Carbon dioxide",
                "optionb": "Oxygen",
                "optionc": "Nitrogen",
                "optiond": "Helium",
                "correctoption": "a"
            },
            {
                "id": 12,
                "questiontext": "What is the boiling point of water at sea level?",
                "optiona": "90°C",
                "optionb": "100°C",
                "optionc": "110°C",
                "optiond": "120°C",
                "correctoption": "b"
            },
            {
                "id": 13,
                "questiontext": "How many continents are there?",
                "optiona": "5",
                "optionb": "6",
                "optionc": "8",
                "optiond": "7",
                "correctoption": "d"
            },
            {
                "id": 14,
                "questiontext": "Which language is this app written in?",
                "optiona": "Python",
                "optionb": "Ruby",
                "optionc": "Go",
                "optiond": "Java",
                "correctoption": "a"
            }
        ]

    @staticmethod
    def create_sample_questions() -> List[Question]:
        return [Question.from_record(record) for record in TestFixtures.create_sample_records()]

    @staticmethod
    def correct_answers(questions: List[Question]) -> List[str]:
        return [question.correct_option for question in questions]

    @staticmethod
    def wrong_answer(question: Question) -> str:
        return next(label for label in "abcd" if label != question.correct_option)

    @staticmethod
    def create_mock_client() -> Mock:
        """BackendClient mock whose coroutine methods are AsyncMocks."""
        client = Mock(spec=BackendClient)
        for name in ("select", "insert", "update", "sign_in_with_password", "sign_up",
                     "sign_out", "get_user", "get_session", "validate_connection", "close"):
            setattr(client, name, AsyncMock())
        return client

    @staticmethod
    def create_question_file(temp_dir: str, records: List[Any], name: str = "questions.json") -> Path:
        path = Path(temp_dir) / name
        with open(path, 'w', encoding='utf-8') as f:
            json.dump({"questions": records}, f, ensure_ascii=False)
        return path


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds
