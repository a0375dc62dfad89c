"""Declared failure kinds of the attempt engine.

Each error carries a stable `kind` string and the HTTP status the quiz blueprint
answers with. Messages never include answer data.
"""


class QuizAttemptError(Exception):
    kind = "quiz_attempt_error"
    status_code = 400
    default_message = "Quiz attempt error"

    def __init__(self, message=None):
        super().__init__(message or self.default_message)
        self.message = message or self.default_message

    def to_dict(self):
        return {"error": self.message, "kind": self.kind}


class ResponseValidationError(QuizAttemptError):
    """Malformed responses. Raised before any state change; safe to retry once fixed."""
    kind = "validation_error"
    status_code = 400
    default_message = "Invalid responses"


class AttemptConflict(QuizAttemptError):
    """An attempt is already in progress for this user and quiz."""
    kind = "conflict"
    status_code = 409
    default_message = "An attempt is already in progress for this quiz"

    def __init__(self, message=None, attempt_id=None):
        super().__init__(message)
        self.attempt_id = attempt_id

    def to_dict(self):
        payload = super().to_dict()
        if self.attempt_id is not None:
            payload["attempt_id"] = self.attempt_id
        return payload


class AttemptLimitExceeded(QuizAttemptError):
    kind = "attempt_limit_exceeded"
    status_code = 403
    default_message = "Maximum number of attempts reached"


class QuizNotFound(QuizAttemptError):
    kind = "not_found"
    status_code = 404
    default_message = "Quiz not found"


class AttemptNotFound(QuizAttemptError):
    kind = "not_found"
    status_code = 404
    default_message = "Quiz attempt not found"


class AttemptAlreadyCompleted(QuizAttemptError):
    """The attempt already reached a terminal state; fetch the stored result instead."""
    kind = "already_completed"
    status_code = 409
    default_message = "Quiz attempt already completed"

    def __init__(self, message=None, attempt_id=None):
        super().__init__(message)
        self.attempt_id = attempt_id

    def to_dict(self):
        payload = super().to_dict()
        if self.attempt_id is not None:
            payload["attempt_id"] = self.attempt_id
        return payload
