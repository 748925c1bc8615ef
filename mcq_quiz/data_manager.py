"""
Data manager for loading quiz questions and validating question records.
"""
import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

from .backend_client import BackendClient, BackendError
from .demo_data import DEMO_QUESTIONS
from .models import OptionLabel, Question

QUESTIONS_TABLE = "questions"
REQUIRED_TEXT_FIELDS = ("questiontext", "optiona", "optionb", "optionc", "optiond", "correctoption")
MAX_FILE_SIZE = 10 * 1024 * 1024  # 10MB


class DataManager:
    """Loads questions from the backend, a JSON file, or the demo set."""

    def __init__(self, client: Optional[BackendClient] = None):
        """
        Initialize DataManager.

        Args:
            client: Backend client; without one only file and demo questions are available
        """
        self.client = client
        self.logger = logging.getLogger(__name__)
        self.load_errors: List[str] = []  # Track loading errors for user feedback
        self.fallback_active = False  # Track if the demo set is in use

    async def load_questions(self, limit: int = 100) -> Dict[str, Any]:
        """
        Load questions from the backend ordered by id.

        Args:
            limit: Maximum number of questions to fetch

        Returns:
            Dictionary with success status, list of Question objects in 'data'
            (the demo set when nothing usable was loaded), and error message
        """
        self.load_errors.clear()
        self.fallback_active = False

        try:
            if self.client is None:
                raise BackendError("No backend configured")

            rows = await self.client.select(
                QUESTIONS_TABLE,
                order=("id", True),
                limit=limit
            )
            self.logger.info(f"Loaded {len(rows)} questions from database")

            questions = self._parse_questions(rows)
            if not questions:
                if rows:
                    self.load_errors.append("No valid questions found in database")
                return {
                    'success': True,
                    'data': self._use_demo_questions(),
                    'error': None
                }

            return {
                'success': True,
                'data': questions,
                'error': None
            }

        except BackendError as e:
            self.logger.error(f"Load questions error: {e}")
            self.logger.info("Using demo questions as fallback")
            self.load_errors.append(str(e))
            return {
                'success': False,
                'data': self._use_demo_questions(),
                'error': str(e)
            }

    def load_questions_from_file(self, file_path: str) -> Dict[str, Any]:
        """
        Load questions from a JSON file of the form ``{"questions": [...]}``.

        Args:
            file_path: Path to the JSON file

        Returns:
            Dictionary with success status, questions in 'data' and error message
        """
        self.load_errors.clear()
        self.fallback_active = False
        path = Path(file_path)

        try:
            if path.stat().st_size > MAX_FILE_SIZE:
                raise ValueError(f"File too large. Maximum size is {MAX_FILE_SIZE / 1024 / 1024}MB")

            with open(path, 'r', encoding='utf-8') as f:
                data = json.load(f)

            if not isinstance(data, dict) or not isinstance(data.get("questions"), list):
                raise ValueError("Question file must contain a 'questions' array")

            questions = self._parse_questions(data["questions"])
            if not questions:
                raise ValueError("No valid questions found in file")

            self.logger.info(f"Loaded {len(questions)} questions from {path}")
            return {
                'success': True,
                'data': questions,
                'error': None
            }

        except json.JSONDecodeError as e:
            error_msg = f"Invalid JSON in {path}: {e}"
        except FileNotFoundError:
            error_msg = f"Question file not found: {path}"
        except OSError as e:
            error_msg = f"Failed to read question file {path}: {e}"
        except ValueError as e:
            error_msg = f"{path.name}: {e}"

        self.logger.error(error_msg)
        self.load_errors.append(error_msg)
        return {
            'success': False,
            'data': self._use_demo_questions(),
            'error': error_msg
        }

    def validate_question_record(self, record: Any, position: int = 0) -> bool:
        """
        Validate that a record has the question row structure.

        Expected structure:
        {
            "id": int,
            "questiontext": str,
            "optiona": str, "optionb": str, "optionc": str, "optiond": str,
            "correctoption": "a" | "b" | "c" | "d"
        }

        Args:
            record: Parsed row to validate
            position: Index of the row, used in error messages

        Returns:
            True if structure is valid, False otherwise
        """
        if not isinstance(record, dict):
            self.load_errors.append(f"Question {position} must be an object")
            return False

        if "id" not in record or isinstance(record["id"], bool) or not isinstance(record["id"], int):
            self.load_errors.append(f"Question {position} must have an integer 'id' field")
            return False

        for field_name in REQUIRED_TEXT_FIELDS:
            if field_name not in record:
                self.load_errors.append(f"Question {position} missing '{field_name}' field")
                return False
            if not isinstance(record[field_name], str):
                self.load_errors.append(f"Question {position} '{field_name}' field must be a string")
                return False

        if OptionLabel.parse(record["correctoption"]) is None:
            self.load_errors.append(
                f"Question {position} 'correctoption' must be one of a, b, c, d"
            )
            return False

        return True

    def _parse_questions(self, records: List[Any]) -> List[Question]:
        """Parse valid records into Question objects, skipping invalid ones."""
        questions = []
        for position, record in enumerate(records):
            if self.validate_question_record(record, position):
                questions.append(Question.from_record(record))
            else:
                self.logger.warning(self.load_errors[-1])
        return questions

    def get_demo_questions(self) -> List[Question]:
        return [Question.from_record(record) for record in DEMO_QUESTIONS]

    def _use_demo_questions(self) -> List[Question]:
        self.fallback_active = True
        return self.get_demo_questions()

    def get_load_errors(self) -> List[str]:
        return self.load_errors.copy()

    def has_load_errors(self) -> bool:
        return len(self.load_errors) > 0

    def is_fallback_active(self) -> bool:
        """Check if the demo set replaced the requested questions."""
        return self.fallback_active

    def get_loading_summary(self) -> Dict[str, Any]:
        """
        Get a summary of the last loading operation.

        Returns:
            Dictionary with loading status and errors
        """
        return {
            'has_errors': self.has_load_errors(),
            'error_count': len(self.load_errors),
            'errors': self.get_load_errors(),
            'fallback_active': self.is_fallback_active(),
            'backend_configured': self.client is not None
        }
