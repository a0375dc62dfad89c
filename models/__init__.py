from flask_sqlalchemy import SQLAlchemy

# Initialize SQLAlchemy
db = SQLAlchemy()

# Import models
from models.quizzes import Quiz
from models.quiz_questions import QuizQuestion
from models.quiz_attempts import QuizAttempt
from models.quiz_responses import QuizResponse
from models.user_progress import UserProgress
