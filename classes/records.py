"""Plain records passed between the attempt engine and its storage adapters."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime

IN_PROGRESS = "in_progress"
COMPLETED = "completed"
EXPIRED = "expired"
TERMINAL_STATES = (COMPLETED, EXPIRED)

SINGLE_CHOICE = "single_choice"


@dataclass(frozen=True, slots=True)
class QuizConfig:
    """Attempt-relevant settings of a quiz, as owned by the quiz authoring side."""

    quiz_id: int
    title: str
    passing_score: int
    is_active: bool = True
    time_limit_seconds: int | None = None
    max_attempts: int | None = None
    randomize_questions: bool = False
    reveal_correct_answers: bool = False


@dataclass(frozen=True, slots=True)
class QuestionData:
    """Normalized single-best-answer question. `correct_option` indexes `options`."""

    question_id: int
    text: str
    options: tuple[str, ...]
    correct_option: int | None
    points: int = 1
    explanation: str | None = None
    question_type: str = SINGLE_CHOICE

    def to_dict(self) -> dict:
        return {
            "question_id": self.question_id,
            "text": self.text,
            "options": list(self.options),
            "correct_option": self.correct_option,
            "points": self.points,
            "explanation": self.explanation,
            "question_type": self.question_type,
        }

    @classmethod
    def from_dict(cls, data: dict) -> QuestionData:
        return cls(
            question_id=data["question_id"],
            text=data["text"],
            options=tuple(data.get("options") or ()),
            correct_option=data.get("correct_option"),
            points=data.get("points", 1),
            explanation=data.get("explanation"),
            question_type=data.get("question_type", SINGLE_CHOICE),
        )


@dataclass(frozen=True, slots=True)
class ResponseRecord:
    question_id: int
    selected_option: int | None
    is_correct: bool
    points_earned: int = 0


@dataclass(frozen=True, slots=True)
class AttemptOutcome:
    """Everything written to an attempt when it becomes terminal."""

    state: str
    completed_at: datetime
    score: int
    is_passed: bool
    time_spent_seconds: int
    correct_count: int
    raw_points: int
    total_points: int


@dataclass(slots=True)
class AttemptRecord:
    id: int
    user_id: int
    quiz_id: int
    attempt_number: int
    state: str
    started_at: datetime
    passing_score: int
    time_limit_seconds: int | None = None
    questions: list[QuestionData] = field(default_factory=list)
    completed_at: datetime | None = None
    score: int | None = None
    is_passed: bool | None = None
    time_spent_seconds: int | None = None
    correct_count: int | None = None
    raw_points: int | None = None
    total_points: int | None = None

    @property
    def is_terminal(self) -> bool:
        return self.state in TERMINAL_STATES

    @property
    def question_ids(self) -> set[int]:
        return {question.question_id for question in self.questions}
