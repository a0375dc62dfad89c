"""Read-only access to quiz settings and questions owned by the authoring side.

Question options reach us in several encodings. Everything is normalized here
into an ordered option list whose index is the correct-answer reference, so the
rest of the engine only ever sees `QuestionData`.
"""

from __future__ import annotations

import json
import logging

from classes.records import QuestionData, QuizConfig, SINGLE_CHOICE
from models.quizzes import Quiz
from models.quiz_questions import QuizQuestion

logger = logging.getLogger(__name__)


def _label_key(label):
    text = str(label).strip()
    return (0, int(text), text) if text.isdigit() else (1, 0, text)


def _points(raw_points):
    try:
        return max(1, int(raw_points or 1))
    except (TypeError, ValueError, OverflowError):
        return 1


def normalize_options(raw_options):
    """Return (option_texts, flagged_correct_index, labels)."""
    if raw_options is None:
        return [], None, []

    if isinstance(raw_options, str):
        try:
            raw_options = json.loads(raw_options)
        except ValueError:
            logger.warning("Unparseable options payload, treating question as having no options")
            return [], None, []

    if not isinstance(raw_options, (list, tuple, dict)):
        logger.warning("Options payload of type %s ignored", type(raw_options).__name__)
        return [], None, []

    if isinstance(raw_options, dict):
        labels = sorted(raw_options.keys(), key=_label_key)
        return [str(raw_options[label]) for label in labels], None, [str(label) for label in labels]

    texts = []
    flagged = None
    for index, option in enumerate(raw_options):
        if isinstance(option, dict):
            texts.append(str(option.get("text") or option.get("option_text") or ""))
            if flagged is None and (option.get("isCorrect") or option.get("is_correct")):
                flagged = index
        else:
            texts.append(str(option))
    return texts, flagged, []


def normalize_correct_answer(raw_correct, options, labels=(), flagged=None):
    """Resolve the stored correct answer to an option index, or None if it can't be resolved."""
    if raw_correct is None or raw_correct == "":
        return flagged

    if isinstance(raw_correct, bool):
        return None

    if isinstance(raw_correct, int):
        return raw_correct if 0 <= raw_correct < len(options) else None

    text = str(raw_correct).strip()
    if labels:
        for index, label in enumerate(labels):
            if label.strip().lower() == text.lower():
                return index
    if text.isdigit():
        index = int(text)
        return index if index < len(options) else None
    for index, option in enumerate(options):
        if option.strip().lower() == text.lower():
            return index
    return flagged


def normalize_question(raw):
    """Build a QuestionData from a raw question dict as stored by the authoring side."""
    options, flagged, labels = normalize_options(raw.get("options"))
    correct = normalize_correct_answer(raw.get("correct_answer"), options, labels, flagged)
    if correct is None:
        logger.warning("Question %s has no resolvable correct answer", raw.get("id"))

    return QuestionData(
        question_id=raw["id"],
        text=raw.get("question_text") or "",
        options=tuple(options),
        correct_option=correct,
        points=_points(raw.get("points")),
        explanation=raw.get("explanation"),
        question_type=SINGLE_CHOICE,
    )


def sanitize_question(question: QuestionData) -> dict:
    """Client-safe question payload: never carries the answer or explanation."""
    return {
        "question_id": question.question_id,
        "text": question.text,
        "type": question.question_type,
        "options": list(question.options),
    }


class QuestionBank:
    """Interface consumed by the attempt engine."""

    def get_quiz_config(self, quiz_id) -> QuizConfig | None:
        raise NotImplementedError

    def get_questions(self, quiz_id) -> list[QuestionData]:
        """Ordered questions including correct answers. Must never be forwarded to a client."""
        raise NotImplementedError


class InMemoryQuestionBank(QuestionBank):
    def __init__(self):
        self._configs = {}
        self._questions = {}

    def add_quiz(self, config: QuizConfig, raw_questions=()):
        self._configs[config.quiz_id] = config
        self._questions[config.quiz_id] = [normalize_question(raw) for raw in raw_questions]

    def replace_questions(self, quiz_id, raw_questions):
        self._questions[quiz_id] = [normalize_question(raw) for raw in raw_questions]

    def get_quiz_config(self, quiz_id):
        return self._configs.get(quiz_id)

    def get_questions(self, quiz_id):
        return list(self._questions.get(quiz_id, []))


class SQLAlchemyQuestionBank(QuestionBank):
    def __init__(self, db):
        self.db = db

    def get_quiz_config(self, quiz_id):
        quiz = self.db.session.get(Quiz, quiz_id)
        return quiz.to_config() if quiz else None

    def get_questions(self, quiz_id):
        rows = (
            QuizQuestion.query
            .filter_by(quiz_id=quiz_id)
            .order_by(QuizQuestion.order_index, QuizQuestion.id)
            .all()
        )
        return [normalize_question(row.to_raw()) for row in rows]
