from models import db
from classes.records import ResponseRecord

class QuizResponse(db.Model):
    __tablename__ = "quiz_responses"
    __table_args__ = (
        db.UniqueConstraint("attempt_id", "question_id", name="uq_quiz_responses_question"),
    )

    id = db.Column(db.Integer, primary_key=True)
    attempt_id = db.Column(db.Integer, db.ForeignKey("quiz_attempts.id"), nullable=False)
    question_id = db.Column(db.Integer, nullable=False)
    selected_option = db.Column(db.Integer, nullable=True)  # NULL means unanswered
    is_correct = db.Column(db.Boolean, nullable=False, default=False)
    points_earned = db.Column(db.Integer, nullable=False, default=0)

    attempt = db.relationship("QuizAttempt", back_populates="responses")

    def to_record(self):
        return ResponseRecord(
            question_id=self.question_id,
            selected_option=self.selected_option,
            is_correct=self.is_correct,
            points_earned=self.points_earned,
        )
