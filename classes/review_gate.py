"""Access rule for correct answers and explanations.

Every payload that describes an attempt is built here. Correct answers appear
only for terminal attempts of quizzes that currently allow it; in-progress
payloads never carry them.
"""

from __future__ import annotations

from classes.clock import deadline_for, remaining_seconds
from classes.question_bank import sanitize_question
from classes.records import AttemptRecord, QuizConfig


def _isoformat(value):
    return value.isoformat() if value else None


class ReviewGate:
    @staticmethod
    def may_reveal(attempt: AttemptRecord, quiz: QuizConfig | None) -> bool:
        if not attempt.is_terminal or quiz is None:
            return False
        return bool(quiz.reveal_correct_answers)

    @staticmethod
    def in_progress_payload(attempt: AttemptRecord, now) -> dict:
        return {
            "attempt_id": attempt.id,
            "quiz_id": attempt.quiz_id,
            "attempt_number": attempt.attempt_number,
            "state": attempt.state,
            "started_at": _isoformat(attempt.started_at),
            "deadline": _isoformat(deadline_for(attempt.started_at, attempt.time_limit_seconds)),
            "time_limit_seconds": attempt.time_limit_seconds,
            "remaining_seconds": remaining_seconds(attempt.started_at, attempt.time_limit_seconds, now),
            "questions": [sanitize_question(question) for question in attempt.questions],
        }

    @staticmethod
    def result_payload(attempt: AttemptRecord, responses, quiz: QuizConfig | None) -> dict:
        reveal = ReviewGate.may_reveal(attempt, quiz)
        by_question = {response.question_id: response for response in responses}

        per_question = []
        for question in attempt.questions:
            response = by_question.get(question.question_id)
            entry = {
                "question_id": question.question_id,
                "text": question.text,
                "options": list(question.options),
                "user_answer": response.selected_option if response else None,
                "is_correct": response.is_correct if response else False,
            }
            if reveal:
                entry["correct_answer"] = question.correct_option
                entry["explanation"] = question.explanation
            per_question.append(entry)

        return {
            "attempt_id": attempt.id,
            "quiz_id": attempt.quiz_id,
            "attempt_number": attempt.attempt_number,
            "state": attempt.state,
            "score": attempt.score,
            "is_passed": attempt.is_passed,
            "correct_count": attempt.correct_count,
            "total_questions": len(attempt.questions),
            "raw_points": attempt.raw_points,
            "total_points": attempt.total_points,
            "time_spent_seconds": attempt.time_spent_seconds,
            "started_at": _isoformat(attempt.started_at),
            "completed_at": _isoformat(attempt.completed_at),
            "reveal_answers": reveal,
            "per_question": per_question,
        }

    @staticmethod
    def summary_payload(attempt: AttemptRecord) -> dict:
        return {
            "attempt_id": attempt.id,
            "attempt_number": attempt.attempt_number,
            "state": attempt.state,
            "score": attempt.score,
            "is_passed": attempt.is_passed,
            "started_at": _isoformat(attempt.started_at),
            "completed_at": _isoformat(attempt.completed_at),
            "time_spent_seconds": attempt.time_spent_seconds,
        }
