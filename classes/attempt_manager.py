"""Lifecycle of a quiz attempt: start, submit, read back.

An attempt moves in_progress -> completed (submitted in time) or
in_progress -> expired (submitted late, or found past its deadline on a later
read). Both terminal paths share the same scoring code.
"""

from __future__ import annotations

import logging
import random

from classes.clock import SystemClock, deadline_for, is_past_deadline, time_spent_seconds
from classes.errors import AttemptAlreadyCompleted, AttemptConflict, AttemptNotFound, QuizNotFound
from classes.question_bank import sanitize_question
from classes.records import AttemptOutcome, COMPLETED, EXPIRED
from classes.review_gate import ReviewGate
from classes.scoring import ScoringEngine
from classes.validators import validate_responses

logger = logging.getLogger(__name__)


class AttemptManager:
    def __init__(self, store, question_bank, clock=None, rng=None, on_terminal=None):
        self.store = store
        self.question_bank = question_bank
        self.clock = clock or SystemClock()
        self.rng = rng or random.Random()
        # Called with (attempt_record) after an attempt becomes terminal
        self.on_terminal = on_terminal

    def start(self, quiz_id, user_id):
        """Open a new attempt and return its sanitized question list.

        Errors: QuizNotFound, AttemptConflict, AttemptLimitExceeded.
        """
        quiz = self.question_bank.get_quiz_config(quiz_id)
        if quiz is None or not quiz.is_active:
            raise QuizNotFound()

        active = self.store.find_active_attempt(user_id, quiz_id)
        if active is not None:
            if not is_past_deadline(active.started_at, active.time_limit_seconds, self.clock.now()):
                raise AttemptConflict(attempt_id=active.id)
            self._expire(active)

        questions = self.question_bank.get_questions(quiz_id)
        if quiz.randomize_questions:
            questions = list(questions)
            self.rng.shuffle(questions)

        attempt = self.store.create_attempt(
            user_id,
            quiz_id,
            questions,
            started_at=self.clock.now(),
            passing_score=quiz.passing_score,
            time_limit_seconds=quiz.time_limit_seconds,
            max_attempts=quiz.max_attempts,
        )
        logger.info("User %s started attempt %s (#%s) on quiz %s",
                    user_id, attempt.id, attempt.attempt_number, quiz_id)

        deadline = deadline_for(attempt.started_at, attempt.time_limit_seconds)
        return {
            "attempt_id": attempt.id,
            "quiz_id": quiz_id,
            "attempt_number": attempt.attempt_number,
            "state": attempt.state,
            "started_at": attempt.started_at.isoformat(),
            "deadline": deadline.isoformat() if deadline else None,
            "time_limit_seconds": attempt.time_limit_seconds,
            "questions": [sanitize_question(question) for question in attempt.questions],
        }

    def submit(self, attempt_id, responses, client_reported_elapsed=None, user_id=None):
        """Score and close an attempt.

        Late submissions are still scored but end up expired. The elapsed time
        reported by the client is never used for the deadline.

        Errors: AttemptNotFound, AttemptAlreadyCompleted, ResponseValidationError.
        """
        attempt = self._load(attempt_id, user_id)
        if attempt.is_terminal:
            raise AttemptAlreadyCompleted(attempt_id=attempt.id)

        answers = validate_responses(responses, attempt.question_ids)

        now = self.clock.now()
        if client_reported_elapsed is not None:
            logger.debug("Attempt %s: client reported %s s, server measured %s s",
                         attempt.id, client_reported_elapsed, (now - attempt.started_at).total_seconds())

        expired = is_past_deadline(attempt.started_at, attempt.time_limit_seconds, now)
        finished = self._finalize(attempt, answers, EXPIRED if expired else COMPLETED, now)
        return self._result(finished)

    def get_attempt(self, attempt_id, user_id=None):
        """Terminal attempts come back as results; running ones as their question list.

        An in-progress attempt past its deadline is expired here, scored with
        every question unanswered.

        Errors: AttemptNotFound.
        """
        attempt = self._load(attempt_id, user_id)
        if not attempt.is_terminal:
            if not is_past_deadline(attempt.started_at, attempt.time_limit_seconds, self.clock.now()):
                return ReviewGate.in_progress_payload(attempt, self.clock.now())
            attempt = self._expire(attempt)
        return self._result(attempt)

    def list_attempts(self, quiz_id, user_id):
        """Attempt history for one user on one quiz, newest first. Never includes answers.

        Errors: QuizNotFound.
        """
        quiz = self.question_bank.get_quiz_config(quiz_id)
        if quiz is None:
            raise QuizNotFound()

        attempts = self.store.list_attempts(user_id, quiz_id)
        if quiz.max_attempts is None:
            attempts_left = None
        else:
            attempts_left = max(0, quiz.max_attempts - len(attempts))

        return {
            "quiz_id": quiz_id,
            "title": quiz.title,
            "max_attempts": quiz.max_attempts,
            "attempts_used": len(attempts),
            "attempts_left": attempts_left,
            "attempts": [ReviewGate.summary_payload(attempt) for attempt in attempts],
        }

    def _load(self, attempt_id, user_id):
        attempt = self.store.get_attempt(attempt_id)
        # Someone else's attempt is reported as missing
        if attempt is None or (user_id is not None and attempt.user_id != user_id):
            raise AttemptNotFound()
        return attempt

    def _expire(self, attempt):
        try:
            return self._finalize(attempt, {}, EXPIRED, self.clock.now())
        except AttemptAlreadyCompleted:
            # A concurrent submit got there first; its result stands
            return self.store.get_attempt(attempt.id)

    def _finalize(self, attempt, answers, state, now):
        scored = ScoringEngine.score(attempt.questions, answers)
        outcome = AttemptOutcome(
            state=state,
            completed_at=now,
            score=scored.percent,
            is_passed=ScoringEngine.is_passed(scored.percent, attempt.passing_score),
            time_spent_seconds=time_spent_seconds(
                attempt.started_at, attempt.time_limit_seconds, now, expired=(state == EXPIRED)
            ),
            correct_count=scored.correct_count,
            raw_points=scored.raw_points,
            total_points=scored.total_points,
        )
        finished = self.store.complete_attempt(attempt.id, outcome, list(scored.per_question))
        logger.info("Attempt %s %s with score %s (passed=%s)",
                    finished.id, finished.state, finished.score, finished.is_passed)

        if self.on_terminal is not None:
            self.on_terminal(finished)
        return finished

    def _result(self, attempt):
        quiz = self.question_bank.get_quiz_config(attempt.quiz_id)
        responses = self.store.get_responses(attempt.id)
        return ReviewGate.result_payload(attempt, responses, quiz)
