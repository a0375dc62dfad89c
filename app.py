import os
from dotenv import load_dotenv
load_dotenv()
from flask import Flask
from flask_cors import CORS
from flask_migrate import Migrate
from config import config_dict, ProdConfig
from models import db
from classes.attempt_manager import AttemptManager
from classes.attempt_store import SQLAlchemyAttemptStore
from classes.question_bank import SQLAlchemyQuestionBank
from routes.quizzes import quiz_bp
from utils.logging_config import configure_logging
from utils.progress_service import update_user_quiz_progress

migrate = Migrate()


def create_app(env=None, clock=None, rng=None):
    app = Flask(__name__)

    env = (env or os.environ.get("FLASK_ENV", "production")).lower()
    app.config.from_object(config_dict.get(env, ProdConfig))

    logger = configure_logging(app)
    logger.info("Environment: %s", env)

    CORS(app, resources={r"/api/*": {"origins": app.config["CORS_ORIGINS"], "supports_credentials": True}})

    db.init_app(app)
    migrate.init_app(app, db)

    # One manager per process; storage is injected, never imported as a global by the engine
    app.extensions["attempt_manager"] = AttemptManager(
        SQLAlchemyAttemptStore(db),
        SQLAlchemyQuestionBank(db),
        clock=clock,
        rng=rng,
        on_terminal=update_user_quiz_progress,
    )

    @app.route('/')
    def home():
        return "Welcome to the Study Group Portal API!"

    app.register_blueprint(quiz_bp, url_prefix='/api/quizzes')

    return app


if __name__ == '__main__':
    app = create_app()
    app.run(debug=app.config.get('DEBUG', False))
