import random
from datetime import datetime, timedelta, timezone

import jwt
import pytest

from app import create_app
from classes.attempt_manager import AttemptManager
from classes.attempt_store import InMemoryAttemptStore
from classes.clock import ManualClock
from classes.question_bank import InMemoryQuestionBank
from classes.records import QuizConfig
from models import db, Quiz, QuizQuestion
from sample_data import TWO_QUESTIONS


START = datetime(2025, 6, 10, 9, 0, 0)


def issue_token(app, user_id, hours=1):
    """Token as the portal's auth service would sign it."""
    payload = {
        "user_id": user_id,
        "role": "student",
        "exp": datetime.now(timezone.utc) + timedelta(hours=hours),
    }
    return jwt.encode(payload, app.config["SECRET_KEY"], algorithm="HS256")


@pytest.fixture
def clock():
    return ManualClock(START)


@pytest.fixture
def question_bank():
    return InMemoryQuestionBank()


@pytest.fixture
def store():
    return InMemoryAttemptStore()


@pytest.fixture
def manager(store, question_bank, clock):
    return AttemptManager(store, question_bank, clock=clock, rng=random.Random(7))


@pytest.fixture
def add_quiz(question_bank):
    def _add(quiz_id=1, questions=TWO_QUESTIONS, **settings):
        settings.setdefault("passing_score", 50)
        config = QuizConfig(quiz_id=quiz_id, title=f"Quiz {quiz_id}", **settings)
        question_bank.add_quiz(config, questions)
        return config
    return _add


@pytest.fixture
def app(clock):
    app = create_app("testing", clock=clock, rng=random.Random(7))
    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def auth_headers(app):
    def _headers(user_id=1, hours=1):
        token = issue_token(app, user_id, hours)
        return {"Authorization": f"Bearer {token}"}
    return _headers


@pytest.fixture
def make_quiz(app):
    def _make(questions=TWO_QUESTIONS, **fields):
        fields.setdefault("title", "CEH Domain 1")
        fields.setdefault("passing_score", 50)
        quiz = Quiz(**fields)
        db.session.add(quiz)
        db.session.flush()
        for index, raw in enumerate(questions):
            db.session.add(QuizQuestion(
                quiz_id=quiz.id,
                order_index=index,
                question_text=raw["question_text"],
                options=raw["options"],
                correct_answer=raw.get("correct_answer"),
                explanation=raw.get("explanation"),
                points=raw.get("points", 1),
            ))
        db.session.commit()
        return quiz.id
    return _make
