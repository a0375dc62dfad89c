"""Persistence for attempts and their responses.

Two guarantees live here rather than in the manager, because only the storage
layer can make them hold under concurrent requests:

* at most one in-progress attempt per (user, quiz), with gap-free attempt numbers
* an attempt leaves the in-progress state exactly once
"""

from __future__ import annotations

import logging
import threading
from dataclasses import replace

from sqlalchemy import func, update
from sqlalchemy.exc import IntegrityError

from classes.errors import AttemptAlreadyCompleted, AttemptConflict, AttemptLimitExceeded
from classes.records import AttemptOutcome, AttemptRecord, IN_PROGRESS, ResponseRecord
from models.quiz_attempts import QuizAttempt
from models.quiz_responses import QuizResponse

logger = logging.getLogger(__name__)


# Constraint names as MySQL and PostgreSQL report them, column lists as SQLite does
START_RACE_MARKERS = (
    "uq_quiz_attempts_active",
    "uq_quiz_attempts_number",
    "quiz_attempts.active_key",
    "quiz_attempts.attempt_number",
)


def _is_start_race(exc):
    message = str(exc.orig)
    return any(marker in message for marker in START_RACE_MARKERS)


class AttemptStore:
    """Interface the attempt manager is written against."""

    def get_attempt(self, attempt_id) -> AttemptRecord | None:
        raise NotImplementedError

    def find_active_attempt(self, user_id, quiz_id) -> AttemptRecord | None:
        raise NotImplementedError

    def count_attempts(self, user_id, quiz_id) -> int:
        raise NotImplementedError

    def list_attempts(self, user_id, quiz_id) -> list[AttemptRecord]:
        """Newest first."""
        raise NotImplementedError

    def create_attempt(self, user_id, quiz_id, questions, started_at,
                       passing_score, time_limit_seconds=None, max_attempts=None) -> AttemptRecord:
        """Atomically create an in-progress attempt if none is active.

        Raises AttemptConflict when one is already in progress and
        AttemptLimitExceeded when `max_attempts` attempts already exist.
        """
        raise NotImplementedError

    def complete_attempt(self, attempt_id, outcome: AttemptOutcome,
                         responses: list[ResponseRecord]) -> AttemptRecord:
        """Compare-and-set from in progress to `outcome.state`, writing responses with it.

        Raises AttemptAlreadyCompleted if the attempt is no longer in progress.
        """
        raise NotImplementedError

    def get_responses(self, attempt_id) -> list[ResponseRecord]:
        raise NotImplementedError


class InMemoryAttemptStore(AttemptStore):
    def __init__(self):
        self._lock = threading.Lock()
        self._attempts = {}
        self._responses = {}
        self._next_id = 1

    def get_attempt(self, attempt_id):
        with self._lock:
            attempt = self._attempts.get(attempt_id)
            return replace(attempt) if attempt else None

    def find_active_attempt(self, user_id, quiz_id):
        with self._lock:
            attempt = self._find_active(user_id, quiz_id)
            return replace(attempt) if attempt else None

    def count_attempts(self, user_id, quiz_id):
        with self._lock:
            return len(self._for_pair(user_id, quiz_id))

    def list_attempts(self, user_id, quiz_id):
        with self._lock:
            attempts = sorted(self._for_pair(user_id, quiz_id), key=lambda a: a.attempt_number, reverse=True)
            return [replace(attempt) for attempt in attempts]

    def create_attempt(self, user_id, quiz_id, questions, started_at,
                       passing_score, time_limit_seconds=None, max_attempts=None):
        with self._lock:
            active = self._find_active(user_id, quiz_id)
            if active:
                raise AttemptConflict(attempt_id=active.id)

            existing = len(self._for_pair(user_id, quiz_id))
            if max_attempts is not None and existing >= max_attempts:
                raise AttemptLimitExceeded()

            attempt = AttemptRecord(
                id=self._next_id,
                user_id=user_id,
                quiz_id=quiz_id,
                attempt_number=existing + 1,
                state=IN_PROGRESS,
                started_at=started_at,
                passing_score=passing_score,
                time_limit_seconds=time_limit_seconds,
                questions=list(questions),
            )
            self._attempts[attempt.id] = attempt
            self._next_id += 1
            return replace(attempt)

    def complete_attempt(self, attempt_id, outcome, responses):
        with self._lock:
            attempt = self._attempts.get(attempt_id)
            if attempt is None or attempt.state != IN_PROGRESS:
                raise AttemptAlreadyCompleted(attempt_id=attempt_id)

            attempt.state = outcome.state
            attempt.completed_at = outcome.completed_at
            attempt.score = outcome.score
            attempt.is_passed = outcome.is_passed
            attempt.time_spent_seconds = outcome.time_spent_seconds
            attempt.correct_count = outcome.correct_count
            attempt.raw_points = outcome.raw_points
            attempt.total_points = outcome.total_points
            self._responses[attempt_id] = list(responses)
            return replace(attempt)

    def get_responses(self, attempt_id):
        with self._lock:
            return list(self._responses.get(attempt_id, []))

    def _for_pair(self, user_id, quiz_id):
        return [a for a in self._attempts.values() if a.user_id == user_id and a.quiz_id == quiz_id]

    def _find_active(self, user_id, quiz_id):
        for attempt in self._for_pair(user_id, quiz_id):
            if attempt.state == IN_PROGRESS:
                return attempt
        return None


class SQLAlchemyAttemptStore(AttemptStore):
    def __init__(self, db):
        self.db = db

    def get_attempt(self, attempt_id):
        attempt = self.db.session.get(QuizAttempt, attempt_id)
        return attempt.to_record() if attempt else None

    def find_active_attempt(self, user_id, quiz_id):
        attempt = self._active_row(QuizAttempt.make_active_key(user_id, quiz_id))
        return attempt.to_record() if attempt else None

    def count_attempts(self, user_id, quiz_id):
        return QuizAttempt.query.filter_by(user_id=user_id, quiz_id=quiz_id).count()

    def list_attempts(self, user_id, quiz_id):
        attempts = (
            QuizAttempt.query
            .filter_by(user_id=user_id, quiz_id=quiz_id)
            .order_by(QuizAttempt.attempt_number.desc())
            .all()
        )
        return [attempt.to_record() for attempt in attempts]

    def create_attempt(self, user_id, quiz_id, questions, started_at,
                       passing_score, time_limit_seconds=None, max_attempts=None):
        session = self.db.session
        active_key = QuizAttempt.make_active_key(user_id, quiz_id)

        active = self._active_row(active_key)
        if active:
            raise AttemptConflict(attempt_id=active.id)

        existing = session.scalar(
            self.db.select(func.count(QuizAttempt.id)).where(
                QuizAttempt.user_id == user_id, QuizAttempt.quiz_id == quiz_id
            )
        )
        if max_attempts is not None and existing >= max_attempts:
            raise AttemptLimitExceeded()

        attempt = QuizAttempt(
            user_id=user_id,
            quiz_id=quiz_id,
            attempt_number=existing + 1,
            state=IN_PROGRESS,
            active_key=active_key,
            started_at=started_at,
            passing_score=passing_score,
            time_limit_seconds=time_limit_seconds,
            question_snapshot=[question.to_dict() for question in questions],
        )
        session.add(attempt)
        try:
            session.commit()
        except IntegrityError as exc:
            session.rollback()
            if not _is_start_race(exc):
                raise
            logger.info("Concurrent start for user %s on quiz %s rejected", user_id, quiz_id)
            raise AttemptConflict()
        return attempt.to_record()

    def complete_attempt(self, attempt_id, outcome, responses):
        session = self.db.session
        result = session.execute(
            update(QuizAttempt)
            .where(QuizAttempt.id == attempt_id, QuizAttempt.state == IN_PROGRESS)
            .values(
                state=outcome.state,
                active_key=None,
                completed_at=outcome.completed_at,
                score=outcome.score,
                is_passed=outcome.is_passed,
                time_spent_seconds=outcome.time_spent_seconds,
                correct_count=outcome.correct_count,
                raw_points=outcome.raw_points,
                total_points=outcome.total_points,
            )
            .execution_options(synchronize_session=False)
        )
        if result.rowcount != 1:
            session.rollback()
            raise AttemptAlreadyCompleted(attempt_id=attempt_id)

        session.add_all([
            QuizResponse(
                attempt_id=attempt_id,
                question_id=response.question_id,
                selected_option=response.selected_option,
                is_correct=response.is_correct,
                points_earned=response.points_earned,
            )
            for response in responses
        ])
        session.commit()

        attempt = session.get(QuizAttempt, attempt_id, populate_existing=True)
        return attempt.to_record()

    def _active_row(self, active_key):
        return QuizAttempt.query.filter_by(active_key=active_key).first()

    def get_responses(self, attempt_id):
        responses = QuizResponse.query.filter_by(attempt_id=attempt_id).order_by(QuizResponse.id).all()
        return [response.to_record() for response in responses]
