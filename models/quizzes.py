from models import db
from datetime import datetime
from classes.records import QuizConfig

class Quiz(db.Model):
    __tablename__ = "quizzes"

    id = db.Column(db.Integer, primary_key=True)
    title = db.Column(db.String(255), nullable=False)
    description = db.Column(db.Text, nullable=True)
    category = db.Column(db.String(100), nullable=True)
    difficulty = db.Column(db.String(20), nullable=True)  # 'beginner', 'intermediate', 'advanced'
    time_limit_seconds = db.Column(db.Integer, nullable=True)
    passing_score = db.Column(db.Integer, nullable=False, default=70)
    max_attempts = db.Column(db.Integer, nullable=True)
    randomize_questions = db.Column(db.Boolean, nullable=False, default=False)
    reveal_correct_answers = db.Column(db.Boolean, nullable=False, default=False)
    is_active = db.Column(db.Boolean, nullable=False, default=True)
    created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)

    questions = db.relationship(
        "QuizQuestion",
        back_populates="quiz",
        order_by="QuizQuestion.order_index",
        cascade="all, delete-orphan",
    )

    def __repr__(self):
        return f"<Quiz {self.title}>"

    def to_config(self):
        return QuizConfig(
            quiz_id=self.id,
            title=self.title,
            passing_score=self.passing_score,
            is_active=self.is_active,
            time_limit_seconds=self.time_limit_seconds,
            max_attempts=self.max_attempts,
            randomize_questions=self.randomize_questions,
            reveal_correct_answers=self.reveal_correct_answers,
        )
