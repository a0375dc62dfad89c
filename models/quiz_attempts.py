from models import db
from classes.records import AttemptRecord, QuestionData, IN_PROGRESS

class QuizAttempt(db.Model):
    __tablename__ = "quiz_attempts"
    __table_args__ = (
        db.UniqueConstraint("user_id", "quiz_id", "attempt_number", name="uq_quiz_attempts_number"),
        # NULL once terminal, so only the in-progress attempt of a (user, quiz) occupies the key
        db.UniqueConstraint("active_key", name="uq_quiz_attempts_active"),
    )

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, nullable=False, index=True)
    quiz_id = db.Column(db.Integer, db.ForeignKey("quizzes.id"), nullable=False)
    attempt_number = db.Column(db.Integer, nullable=False)
    state = db.Column(db.String(20), nullable=False, default=IN_PROGRESS)
    active_key = db.Column(db.String(64), nullable=True)
    started_at = db.Column(db.DateTime, nullable=False)
    completed_at = db.Column(db.DateTime, nullable=True)
    score = db.Column(db.Integer, nullable=True)
    is_passed = db.Column(db.Boolean, nullable=True)
    time_spent_seconds = db.Column(db.Integer, nullable=True)
    correct_count = db.Column(db.Integer, nullable=True)
    raw_points = db.Column(db.Integer, nullable=True)
    total_points = db.Column(db.Integer, nullable=True)
    time_limit_seconds = db.Column(db.Integer, nullable=True)
    passing_score = db.Column(db.Integer, nullable=False)
    question_snapshot = db.Column(db.JSON, nullable=False)

    quiz = db.relationship("Quiz", backref=db.backref("attempts", lazy=True))
    responses = db.relationship("QuizResponse", back_populates="attempt", lazy=True, cascade="all, delete-orphan")

    @staticmethod
    def make_active_key(user_id, quiz_id):
        return f"{user_id}:{quiz_id}"

    def __repr__(self):
        return f"<QuizAttempt {self.id} #{self.attempt_number} ({self.state})>"

    def to_record(self):
        return AttemptRecord(
            id=self.id,
            user_id=self.user_id,
            quiz_id=self.quiz_id,
            attempt_number=self.attempt_number,
            state=self.state,
            started_at=self.started_at,
            passing_score=self.passing_score,
            time_limit_seconds=self.time_limit_seconds,
            questions=[QuestionData.from_dict(item) for item in self.question_snapshot or []],
            completed_at=self.completed_at,
            score=self.score,
            is_passed=self.is_passed,
            time_spent_seconds=self.time_spent_seconds,
            correct_count=self.correct_count,
            raw_points=self.raw_points,
            total_points=self.total_points,
        )
