"""
Core data models for the MCQ Quiz App.
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional


class OptionLabel(str, Enum):
    """The four answer option tags."""
    A = "a"
    B = "b"
    C = "c"
    D = "d"

    @classmethod
    def parse(cls, value: Any) -> Optional["OptionLabel"]:
        """Return the label for a raw value, or None if it is not one of a-d."""
        if isinstance(value, OptionLabel):
            return value
        if not isinstance(value, str):
            return None
        try:
            return cls(value.strip().lower())
        except ValueError:
            return None


@dataclass(frozen=True)
class Question:
    """Represents a single multiple-choice question."""
    id: int
    question_text: str
    option_a: str
    option_b: str
    option_c: str
    option_d: str
    correct_option: str

    @property
    def options(self) -> Dict[str, str]:
        """Option texts keyed by label."""
        return {
            OptionLabel.A.value: self.option_a,
            OptionLabel.B.value: self.option_b,
            OptionLabel.C.value: self.option_c,
            OptionLabel.D.value: self.option_d,
        }

    def get_option_text(self, label: str) -> Optional[str]:
        parsed = OptionLabel.parse(label)
        if parsed is None:
            return None
        return self.options[parsed.value]

    @classmethod
    def from_record(cls, record: Dict[str, Any]) -> "Question":
        """Build a Question from a backend row (``questiontext``, ``optiona`` ...)."""
        return cls(
            id=record["id"],
            question_text=record["questiontext"],
            option_a=record["optiona"],
            option_b=record["optionb"],
            option_c=record["optionc"],
            option_d=record["optiond"],
            correct_option=record["correctoption"].strip().lower(),
        )

    def to_record(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "questiontext": self.question_text,
            "optiona": self.option_a,
            "optionb": self.option_b,
            "optionc": self.option_c,
            "optiond": self.option_d,
            "correctoption": self.correct_option,
        }


@dataclass
class QuizSettings:
    """Selection settings for a quiz attempt."""
    question_count: Optional[int] = None
    random_order: bool = False
    time_limit: int = 3600


@dataclass
class QuizSession:
    """One quiz attempt's mutable state."""
    questions: List[Question] = field(default_factory=list)
    current_index: int = 0
    user_answers: List[Optional[str]] = field(default_factory=list)
    start_time: Optional[float] = None
    timer: Optional[Any] = None  # QuizTimer while a timer is running


@dataclass(frozen=True)
class QuizProgress:
    """Progress snapshot as of the current question."""
    current: int
    total: int
    percentage: int
    answered: int


@dataclass(frozen=True)
class ScoreSummary:
    """Outcome of scoring a session."""
    correct: int
    wrong: int
    total: int
    percentage: int


@dataclass(frozen=True)
class FormattedResult:
    """Display summary for a finished (or historical) attempt."""
    correct: int
    incorrect: int
    total: int
    percentage: int
    time_formatted: str
    grade: str
    message: str


@dataclass(frozen=True)
class UserStatistics:
    """Aggregated history of a user's attempts."""
    total_attempts: int = 0
    average_score: int = 0
    best_score: int = 0
    total_time_spent: int = 0
    average_time: int = 0
