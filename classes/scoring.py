from __future__ import annotations

from dataclasses import dataclass
from typing import Mapping, Sequence

from classes.records import QuestionData, ResponseRecord


@dataclass(frozen=True, slots=True)
class ScoreResult:
    raw_points: int
    total_points: int
    percent: int
    correct_count: int
    per_question: tuple[ResponseRecord, ...]


class ScoringEngine:
    @staticmethod
    def is_correct(question: QuestionData, selected_option) -> bool:
        """Exact match on the option index. Unanswered, out-of-range or odd values never match."""
        if selected_option is None or isinstance(selected_option, bool):
            return False
        if not isinstance(selected_option, int):
            return False
        if question.correct_option is None:
            return False
        if not 0 <= selected_option < len(question.options):
            return False
        return selected_option == question.correct_option

    @staticmethod
    def percent(raw_points: int, total_points: int) -> int:
        """Half-up rounded percentage; a quiz worth zero points scores 0."""
        if total_points <= 0:
            return 0
        return (200 * raw_points + total_points) // (2 * total_points)

    @staticmethod
    def is_passed(percent: int, passing_score: int) -> bool:
        return percent >= passing_score

    @staticmethod
    def score(questions: Sequence[QuestionData], answers: Mapping[int, int | None]) -> ScoreResult:
        """Score a snapshot against a {question_id: selected option} map.

        Questions missing from `answers` count as unanswered. Answers for
        question ids outside the snapshot are ignored. No side effects.
        """
        per_question = []
        raw_points = 0
        total_points = 0
        correct_count = 0

        for question in questions:
            selected = answers.get(question.question_id)
            correct = ScoringEngine.is_correct(question, selected)
            earned = question.points if correct else 0

            total_points += question.points
            raw_points += earned
            if correct:
                correct_count += 1

            per_question.append(ResponseRecord(
                question_id=question.question_id,
                selected_option=selected,
                is_correct=correct,
                points_earned=earned,
            ))

        return ScoreResult(
            raw_points=raw_points,
            total_points=total_points,
            percent=ScoringEngine.percent(raw_points, total_points),
            correct_count=correct_count,
            per_question=tuple(per_question),
        )
