from models import db

class QuizQuestion(db.Model):
    __tablename__ = "quiz_questions"

    id = db.Column(db.Integer, primary_key=True)
    quiz_id = db.Column(db.Integer, db.ForeignKey("quizzes.id"), nullable=False)
    order_index = db.Column(db.Integer, nullable=False, default=0)
    question_text = db.Column(db.Text, nullable=False)
    question_type = db.Column(db.String(20), nullable=False, default="single_choice")
    # Stored as the authoring side sent it: a list, a JSON string, or a label map
    options = db.Column(db.JSON, nullable=True)
    correct_answer = db.Column(db.Text, nullable=True)
    explanation = db.Column(db.Text, nullable=True)
    points = db.Column(db.Integer, nullable=False, default=1)

    quiz = db.relationship("Quiz", back_populates="questions")

    def __repr__(self):
        return f"<QuizQuestion {self.id} of quiz {self.quiz_id}>"

    def to_raw(self):
        """Raw collaborator shape, correct answer included. Core use only."""
        return {
            "id": self.id,
            "question_text": self.question_text,
            "question_type": self.question_type,
            "options": self.options,
            "correct_answer": self.correct_answer,
            "explanation": self.explanation,
            "points": self.points,
        }
